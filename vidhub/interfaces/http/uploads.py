# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from collections.abc import Iterable

from flask import request
from werkzeug.datastructures import FileStorage

from vidhub.domain.assets.repositories import LocalStage
from vidhub.shared.logging import logger


def client_ip() -> str | None:
    ip_address = request.headers.get("X-Forwarded-For", request.remote_addr)
    if ip_address and "," in ip_address:
        ip_address = ip_address.split(",")[0].strip()
    return ip_address


def stage_files(stage: LocalStage, fields: Iterable[str]) -> dict[str, str | None]:
    """Stage the named multipart files; absent or empty parts map to ``None``.

    If any file fails to stage, the ones already written are discarded before
    the error propagates.
    """
    staged: dict[str, str | None] = {}
    try:
        for field in fields:
            storage: FileStorage | None = request.files.get(field)
            if storage is None or not storage.filename:
                staged[field] = None
                continue
            staged[field] = stage.stage(storage.filename, storage.stream)
    except Exception:
        for path in staged.values():
            if path:
                try:
                    stage.discard(path)
                except OSError as exc:
                    logger.error(f"upload: could not discard {path}: {exc}")
        raise
    return staged


__all__ = ["client_ip", "stage_files"]
