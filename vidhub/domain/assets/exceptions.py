# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from http import HTTPStatus

from vidhub.shared.errors.base import InfrastructureError


class UploadError(InfrastructureError):
    def __init__(self, local_path: str | None = None, *, reason: str = "upload_failed") -> None:
        super().__init__(
            "asset_upload_failed",
            status=HTTPStatus.BAD_GATEWAY,
            context={"local_path": local_path, "reason": reason},
        )


class DeleteError(InfrastructureError):
    def __init__(self, remote_id: str, *, reason: str = "delete_failed") -> None:
        super().__init__(
            "asset_delete_failed",
            status=HTTPStatus.BAD_GATEWAY,
            context={"remote_id": remote_id, "reason": reason},
        )
