# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from typing import BinaryIO, Protocol

from .entities import AssetKind, RemoteAsset


class AssetStore(Protocol):
    """Remote object store.

    ``upload`` raises ``UploadError`` and ``delete`` raises ``DeleteError``;
    callers running compensation must catch the latter.
    """

    async def upload(self, local_path: str, *, kind: AssetKind) -> RemoteAsset: ...

    async def delete(self, remote_id: str) -> None: ...


class LocalStage(Protocol):
    """Temporary files produced by an inbound multipart request."""

    def stage(self, filename: str, stream: BinaryIO) -> str: ...

    def exists(self, path: str) -> bool: ...

    def discard(self, path: str) -> None: ...
