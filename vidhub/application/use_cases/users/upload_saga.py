# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

"""Account creation across the local stage, the object store and the database.

Nothing spans these three in a single transaction. Each step commits on its
own and earlier steps are undone through a :class:`CompensationLog` when a
later one fails. Staged files are released in a ``finally`` block around the
upload phase, so they are gone before the database commit on every path.
"""

from __future__ import annotations

from collections.abc import Iterable

from vidhub.application.services.compensation import CompensationLog
from vidhub.domain.assets.entities import AssetKind, RemoteAsset
from vidhub.domain.assets.exceptions import DeleteError, UploadError
from vidhub.domain.assets.repositories import AssetStore, LocalStage
from vidhub.domain.users.entities import AccountFields, NewUser, UserProfile
from vidhub.domain.users.exceptions import (
    AccountCreationError,
    AssetUploadError,
    DuplicateIdentityError,
    MissingAssetError,
)
from vidhub.domain.users.repositories import CredentialStore, PasswordHasher
from vidhub.infrastructure.resilience import bounded_call
from vidhub.shared.errors.base import ValidationError
from vidhub.shared.logging import logger

_REQUIRED_FIELDS = ("fullname", "email", "username", "password")


class UploadSaga:
    def __init__(
        self,
        *,
        users: CredentialStore,
        assets: AssetStore,
        stage: LocalStage,
        password_hasher: PasswordHasher,
        asset_timeout: float = 30.0,
    ) -> None:
        self._users = users
        self._assets = assets
        self._stage = stage
        self._password_hasher = password_hasher
        self._asset_timeout = asset_timeout

    async def create_account(
        self,
        fields: AccountFields,
        avatar_path: str | None,
        cover_path: str | None = None,
    ) -> UserProfile:
        compensation = CompensationLog("register")
        staged = [path for path in (avatar_path, cover_path) if path]

        try:
            account = self._normalised(fields)
            existing = self._users.find_by_identity(
                email=account.email, username=account.username
            )
            if existing is not None:
                raise DuplicateIdentityError(context={"fields": ["email", "username"]})
            if not avatar_path or not self._stage.exists(avatar_path):
                raise MissingAssetError(context={"asset": AssetKind.AVATAR.value})
            password_hash = self._password_hasher.hash(account.password)

            try:
                avatar = await self._upload(avatar_path, AssetKind.AVATAR, compensation)
                cover = None
                if cover_path and self._stage.exists(cover_path):
                    cover = await self._upload(cover_path, AssetKind.COVER, compensation)
                elif cover_path:
                    logger.warning(f"register: cover {cover_path} is not staged, skipping")
            except Exception as exc:
                logger.error(
                    f"register: upload failed for username={account.username}: "
                    f"{type(exc).__name__}, compensating {compensation.pending}"
                )
                orphaned = await compensation.unwind()
                reason = (getattr(exc, "context", None) or {}).get("reason", type(exc).__name__)
                raise AssetUploadError(
                    context={"reason": reason, "orphaned": orphaned}
                ) from exc
        finally:
            self._discard_all(staged)

        new_user = NewUser(
            fullname=account.fullname,
            email=account.email,
            username=account.username,
            password_hash=password_hash,
            avatar=avatar,
            cover=cover,
        )
        try:
            user = self._users.create(new_user)
            compensation.record(f"user:{user.id}", self._user_undo(user.id))
            persisted = self._users.find_by_id(user.id)
            if persisted is None:
                raise LookupError(f"user {user.id} missing right after insert")
        except Exception as exc:
            logger.error(
                f"register: commit failed for username={account.username}: "
                f"{type(exc).__name__}, compensating {compensation.pending}"
            )
            orphaned = await compensation.unwind()
            raise AccountCreationError(
                context={"reason": type(exc).__name__, "orphaned": orphaned}
            ) from exc

        compensation.commit()
        logger.info(
            f"register: created user={persisted.id} username={persisted.username} "
            f"cover={'yes' if persisted.cover else 'no'}"
        )
        return persisted.profile()

    @staticmethod
    def _normalised(fields: AccountFields) -> AccountFields:
        missing = [
            name
            for name in _REQUIRED_FIELDS
            if not isinstance(getattr(fields, name), str) or not getattr(fields, name).strip()
        ]
        if missing:
            raise ValidationError(context={"fields": missing, "reason": "all fields are required"})
        return AccountFields(
            fullname=fields.fullname.strip(),
            email=fields.email.strip(),
            username=fields.username.strip().lower(),
            password=fields.password,
        )

    async def _upload(
        self, local_path: str, kind: AssetKind, compensation: CompensationLog
    ) -> RemoteAsset:
        asset = await bounded_call(
            self._assets.upload,
            local_path,
            kind=kind,
            timeout=self._asset_timeout,
            on_timeout=lambda: UploadError(local_path, reason="timeout"),
        )
        compensation.record(f"{kind.value}:{asset.remote_id}", self._asset_undo(asset))
        return asset

    def _asset_undo(self, asset: RemoteAsset):
        async def undo() -> None:
            await bounded_call(
                self._assets.delete,
                asset.remote_id,
                timeout=self._asset_timeout,
                on_timeout=lambda: DeleteError(asset.remote_id, reason="timeout"),
            )

        return undo

    def _user_undo(self, user_id: int):
        async def undo() -> None:
            self._users.delete(user_id)

        return undo

    def _discard_all(self, paths: Iterable[str]) -> None:
        for path in paths:
            try:
                self._stage.discard(path)
            except OSError as exc:
                logger.error(f"register: could not discard staged file {path}: {exc}")


__all__ = ["UploadSaga"]
