# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from vidhub.domain.users.exceptions import InvalidCredentialsError, UserNotFoundError
from vidhub.domain.users.repositories import CredentialStore, PasswordHasher
from vidhub.shared.logging import logger


class ChangePasswordUseCase:
    def __init__(self, *, users: CredentialStore, password_hasher: PasswordHasher) -> None:
        self._users = users
        self._password_hasher = password_hasher

    def execute(self, user_id: int, old_password: str, new_password: str) -> None:
        user = self._users.find_by_id(user_id)
        if user is None:
            raise UserNotFoundError(context={"user_id": user_id})
        if not self._password_hasher.verify(old_password, user.password_hash):
            raise InvalidCredentialsError(context={"field": "old_password"})

        self._users.update(user_id, {"password_hash": self._password_hasher.hash(new_password)})
        logger.info(f"account.password: changed for user={user_id}")
