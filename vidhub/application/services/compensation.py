# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

"""Undo log for multi-step operations without a shared transaction."""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from vidhub.shared.logging import logger


@dataclass(slots=True, frozen=True)
class _UndoStep:
    label: str
    undo: Callable[[], Awaitable[None]]


class CompensationLog:
    """Undo actions recorded as steps succeed, replayed newest-first on failure.

    Unwinding is best-effort: a failing undo is logged and the remaining steps
    still run. Nothing is retried.
    """

    def __init__(self, operation: str) -> None:
        self._operation = operation
        self._steps: list[_UndoStep] = []

    def __len__(self) -> int:
        return len(self._steps)

    @property
    def pending(self) -> list[str]:
        return [step.label for step in self._steps]

    def record(self, label: str, undo: Callable[[], Awaitable[None]]) -> None:
        self._steps.append(_UndoStep(label=label, undo=undo))
        logger.debug(f"{self._operation}: recorded undo for {label}")

    def commit(self) -> None:
        self._steps.clear()

    async def unwind(self) -> list[str]:
        """Run every recorded undo in reverse order; return labels that failed."""
        failed: list[str] = []
        while self._steps:
            step = self._steps.pop()
            try:
                await step.undo()
            except Exception as exc:  # noqa: BLE001
                failed.append(step.label)
                logger.error(
                    f"{self._operation}: compensation failed for {step.label}: "
                    f"{type(exc).__name__}: {exc}"
                )
            else:
                logger.info(f"{self._operation}: compensated {step.label}")
        if failed:
            logger.error(f"{self._operation}: possibly orphaned after rollback: {failed}")
        return failed


__all__ = ["CompensationLog"]
