# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

"""Timeout guard for calls to remote collaborators."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

from vidhub.shared.logging import logger

T = TypeVar("T")


async def bounded_call(  # noqa: UP047
    func: Callable[..., Awaitable[T]],
    *args: Any,
    timeout: float,
    on_timeout: Callable[[], Exception],
    **kwargs: Any,
) -> T:
    """Await ``func`` for at most ``timeout`` seconds.

    A timeout is re-raised as the error built by ``on_timeout``; there is no
    retry.
    """

    try:
        return await asyncio.wait_for(func(*args, **kwargs), timeout=timeout)
    except TimeoutError as exc:
        name = getattr(func, "__name__", repr(func))
        logger.warning(f"resilience: {name} timed out after {timeout:.1f}s")
        raise on_timeout() from exc


__all__ = ["bounded_call"]
