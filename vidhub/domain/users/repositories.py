# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Protocol

from .entities import NewUser, User


class CredentialStore(Protocol):
    """Persistence for user records.

    Reads return ``None`` when nothing matches. ``create`` and ``update`` raise
    ``DuplicateIdentityError`` on a unique-constraint violation.
    ``update`` accepts the keys ``fullname``, ``email``, ``password_hash``,
    ``avatar``, ``cover`` and ``refresh_token``.
    """

    def find_by_id(self, user_id: int) -> User | None: ...
    def find_by_identity(
        self, *, email: str | None = None, username: str | None = None
    ) -> User | None: ...
    def create(self, fields: NewUser) -> User: ...
    def update(self, user_id: int, patch: Mapping[str, Any]) -> User | None: ...
    def delete(self, user_id: int) -> None: ...


class PasswordHasher(Protocol):
    def hash(self, password: str) -> str: ...
    def verify(self, password: str, hashed: str) -> bool: ...
