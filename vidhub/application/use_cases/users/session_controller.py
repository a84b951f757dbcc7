# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from vidhub.application.services.tokens import TokenService
from vidhub.domain.users.entities import TokenPair
from vidhub.domain.users.exceptions import (
    InvalidCredentialsError,
    InvalidRefreshTokenError,
    InvalidTokenError,
    UserNotFoundError,
)
from vidhub.domain.users.repositories import CredentialStore, PasswordHasher
from vidhub.shared.logging import logger


class SessionController:
    """Login, logout and refresh over a single refresh slot per user.

    Slot states: NONE -> ACTIVE (login) -> ACTIVE (each refresh, new value)
    -> NONE (logout).
    """

    def __init__(
        self,
        *,
        users: CredentialStore,
        tokens: TokenService,
        password_hasher: PasswordHasher,
    ) -> None:
        self._users = users
        self._tokens = tokens
        self._password_hasher = password_hasher

    def login(self, identity: str, secret: str) -> TokenPair:
        identity = (identity or "").strip()
        if not identity or not secret:
            raise InvalidCredentialsError()

        user = self._users.find_by_identity(email=identity, username=identity.lower())
        if user is None or not self._password_hasher.verify(secret, user.password_hash):
            logger.warning("auth.login: rejected credentials")
            raise InvalidCredentialsError()

        return self._tokens.mint(user.id)

    def logout(self, user_id: int) -> None:
        self._tokens.revoke(user_id)

    def refresh(self, presented_token: str | None) -> TokenPair:
        if not presented_token:
            raise InvalidRefreshTokenError()
        try:
            return self._tokens.verify_refresh_and_rotate(presented_token)
        except (InvalidTokenError, UserNotFoundError) as exc:
            logger.warning(f"auth.refresh: rejected ({exc.code})")
            raise InvalidRefreshTokenError() from exc


__all__ = ["SessionController"]
