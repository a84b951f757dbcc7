# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

"""Swap a user's avatar or cover for a freshly staged file."""

from __future__ import annotations

from vidhub.application.services.compensation import CompensationLog
from vidhub.domain.assets.entities import AssetKind, RemoteAsset
from vidhub.domain.assets.exceptions import DeleteError, UploadError
from vidhub.domain.assets.repositories import AssetStore, LocalStage
from vidhub.domain.users.entities import UserProfile
from vidhub.domain.users.exceptions import (
    AssetUploadError,
    MissingAssetError,
    UserNotFoundError,
)
from vidhub.domain.users.repositories import CredentialStore
from vidhub.infrastructure.resilience import bounded_call
from vidhub.shared.logging import logger


class ReplaceUserAssetUseCase:
    def __init__(
        self,
        *,
        users: CredentialStore,
        assets: AssetStore,
        stage: LocalStage,
        asset_timeout: float = 30.0,
    ) -> None:
        self._users = users
        self._assets = assets
        self._stage = stage
        self._asset_timeout = asset_timeout

    async def execute(self, user_id: int, kind: AssetKind, local_path: str | None) -> UserProfile:
        compensation = CompensationLog(f"replace_{kind.value}")
        try:
            if not local_path or not self._stage.exists(local_path):
                raise MissingAssetError(context={"asset": kind.value})
            user = self._users.find_by_id(user_id)
            if user is None:
                raise UserNotFoundError(context={"user_id": user_id})
            previous = user.avatar if kind is AssetKind.AVATAR else user.cover

            try:
                asset = await bounded_call(
                    self._assets.upload,
                    local_path,
                    kind=kind,
                    timeout=self._asset_timeout,
                    on_timeout=lambda: UploadError(local_path, reason="timeout"),
                )
            except UploadError as exc:
                raise AssetUploadError(context={"reason": exc.context.get("reason")}) from exc
            compensation.record(f"{kind.value}:{asset.remote_id}", self._delete_later(asset))
        finally:
            if local_path:
                self._discard(local_path)

        try:
            updated = self._users.update(user_id, {kind.value: asset})
            if updated is None:
                raise UserNotFoundError(context={"user_id": user_id})
        except Exception:
            await compensation.unwind()
            raise
        compensation.commit()

        if previous is not None and previous.remote_id != asset.remote_id:
            # superseded object, best-effort
            cleanup = CompensationLog(f"replace_{kind.value}_cleanup")
            cleanup.record(f"{kind.value}:{previous.remote_id}", self._delete_later(previous))
            await cleanup.unwind()

        logger.info(f"account.{kind.value}: replaced for user={user_id}")
        return updated.profile()

    def _delete_later(self, asset: RemoteAsset):
        async def undo() -> None:
            await bounded_call(
                self._assets.delete,
                asset.remote_id,
                timeout=self._asset_timeout,
                on_timeout=lambda: DeleteError(asset.remote_id, reason="timeout"),
            )

        return undo

    def _discard(self, path: str) -> None:
        try:
            self._stage.discard(path)
        except OSError as exc:
            logger.error(f"account: could not discard staged file {path}: {exc}")


__all__ = ["ReplaceUserAssetUseCase"]
