# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from sqlalchemy import or_, select
from sqlalchemy.exc import IntegrityError

from vidhub.domain.assets.entities import AssetKind, RemoteAsset
from vidhub.domain.users.entities import NewUser
from vidhub.domain.users.entities import User as DomainUser
from vidhub.domain.users.exceptions import DuplicateIdentityError
from vidhub.domain.users.repositories import CredentialStore
from vidhub.infrastructure.db.models import User
from vidhub.infrastructure.db.session import session_scope
from vidhub.shared.logging import logger

_SCALAR_FIELDS = frozenset({"fullname", "email", "password_hash", "refresh_token"})
_ASSET_FIELDS = frozenset({"avatar", "cover"})


def _to_domain(row: User) -> DomainUser:
    cover = None
    if row.cover_remote_id and row.cover_url:
        cover = RemoteAsset(kind=AssetKind.COVER, remote_id=row.cover_remote_id, url=row.cover_url)
    return DomainUser(
        id=row.id,
        fullname=row.fullname,
        email=row.email,
        username=row.username,
        password_hash=row.password_hash,
        avatar=RemoteAsset(
            kind=AssetKind.AVATAR, remote_id=row.avatar_remote_id, url=row.avatar_url
        ),
        cover=cover,
        refresh_token=row.refresh_token,
        created_at=row.created_at,
    )


def _apply_asset(row: User, field: str, asset: RemoteAsset | None) -> None:
    if field == "avatar":
        if asset is None:
            raise ValueError("avatar cannot be cleared")
        row.avatar_remote_id, row.avatar_url = asset.remote_id, asset.url
    else:
        row.cover_remote_id = asset.remote_id if asset else None
        row.cover_url = asset.url if asset else None


class SqlAlchemyCredentialStore(CredentialStore):
    def find_by_id(self, user_id: int) -> DomainUser | None:
        with session_scope() as session:
            row = session.get(User, user_id)
            return _to_domain(row) if row else None

    def find_by_identity(
        self, *, email: str | None = None, username: str | None = None
    ) -> DomainUser | None:
        clauses = []
        if email:
            clauses.append(User.email == email)
        if username:
            clauses.append(User.username == username)
        if not clauses:
            return None
        with session_scope() as session:
            row = session.scalars(select(User).where(or_(*clauses)).limit(1)).first()
            return _to_domain(row) if row else None

    def create(self, fields: NewUser) -> DomainUser:
        try:
            with session_scope() as session:
                row = User(
                    fullname=fields.fullname,
                    email=fields.email,
                    username=fields.username,
                    password_hash=fields.password_hash,
                )
                _apply_asset(row, "avatar", fields.avatar)
                _apply_asset(row, "cover", fields.cover)
                session.add(row)
                session.flush()
                session.refresh(row)
                return _to_domain(row)
        except IntegrityError as exc:
            logger.warning(f"users.create: unique constraint hit for username={fields.username}")
            raise DuplicateIdentityError(context={"fields": ["email", "username"]}) from exc

    def update(self, user_id: int, patch: Mapping[str, Any]) -> DomainUser | None:
        unknown = set(patch) - _SCALAR_FIELDS - _ASSET_FIELDS
        if unknown:
            raise ValueError(f"unsupported user fields: {sorted(unknown)}")
        try:
            with session_scope() as session:
                row = session.get(User, user_id)
                if row is None:
                    return None
                for field, value in patch.items():
                    if field in _ASSET_FIELDS:
                        _apply_asset(row, field, value)
                    else:
                        setattr(row, field, value)
                session.flush()
                return _to_domain(row)
        except IntegrityError as exc:
            raise DuplicateIdentityError(context={"fields": sorted(patch)}) from exc

    def delete(self, user_id: int) -> None:
        with session_scope() as session:
            session.query(User).filter(User.id == user_id).delete()
        logger.info(f"users.delete: removed user={user_id}")


__all__ = ["SqlAlchemyCredentialStore"]
