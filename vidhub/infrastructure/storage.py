# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

"""Local staging area for multipart uploads."""

from __future__ import annotations

import shutil
import uuid
from pathlib import Path
from typing import BinaryIO

from werkzeug.utils import secure_filename

from vidhub.domain.assets.repositories import LocalStage
from vidhub.shared.errors.base import ValidationError
from vidhub.shared.logging import logger


class LocalStageDirectory(LocalStage):
    """Stages files within configured root."""

    def __init__(self, root: Path, *, max_bytes: int | None = None) -> None:
        self._root = root
        self._root.mkdir(parents=True, exist_ok=True)
        self._max_bytes = max_bytes

    def _resolve(self, path: str) -> Path:
        resolved = Path(path)
        if not resolved.is_absolute():
            resolved = self._root / resolved
        resolved = resolved.resolve()
        if not resolved.is_relative_to(self._root.resolve()):
            msg = "Attempted directory traversal outside stage root"
            raise ValueError(msg)
        return resolved

    def stage(self, filename: str, stream: BinaryIO) -> str:
        name = secure_filename(filename or "") or "upload"
        target = self._root / f"{uuid.uuid4().hex}-{name}"
        with open(target, "wb") as fh:
            shutil.copyfileobj(stream, fh)
        size = target.stat().st_size
        if self._max_bytes is not None and size > self._max_bytes:
            target.unlink(missing_ok=True)
            raise ValidationError(
                "file_too_large", context={"filename": name, "max_bytes": self._max_bytes}
            )
        logger.debug(f"stage: wrote {target.name} size={size}")
        return str(target)

    def exists(self, path: str) -> bool:
        try:
            return self._resolve(path).is_file()
        except ValueError:
            return False

    def discard(self, path: str) -> None:
        try:
            resolved = self._resolve(path)
        except ValueError:
            logger.warning(f"stage: refusing to discard {path}, outside stage root")
            return
        resolved.unlink(missing_ok=True)
        logger.debug(f"stage: discarded {Path(path).name}")


__all__ = ["LocalStageDirectory"]
