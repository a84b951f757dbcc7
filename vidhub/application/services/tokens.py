# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

"""Access/refresh token issuance, verification and rotation.

Access tokens are stateless: a valid signature and an unexpired ``exp`` are
all that is checked. Refresh tokens must additionally equal the single value
persisted on the user record. Every mint overwrites that value, so a user
holds at most one usable refresh token.

Known limitation: rotation is last-writer-wins. Two concurrent refreshes
presenting the same token can both pass the equality check; whichever
persists last owns the only valid refresh token and the other caller's new
pair stops working on its next refresh.
"""

from __future__ import annotations

import secrets
import uuid
from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from typing import Any

import jwt

from vidhub.domain.users.entities import TokenPair, User
from vidhub.domain.users.exceptions import (
    ExpiredTokenError,
    InvalidSignatureError,
    RevokedTokenError,
    UserNotFoundError,
)
from vidhub.domain.users.repositories import CredentialStore
from vidhub.shared.logging import logger

ACCESS = "access"
REFRESH = "refresh"


def _utcnow() -> datetime:
    return datetime.now(UTC)


class TokenService:
    def __init__(
        self,
        *,
        users: CredentialStore,
        access_secret: str,
        refresh_secret: str,
        access_ttl: timedelta,
        refresh_ttl: timedelta,
        algorithm: str = "HS256",
        issuer: str = "vidhub",
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._users = users
        self._secrets = {ACCESS: access_secret, REFRESH: refresh_secret}
        self._ttls = {ACCESS: access_ttl, REFRESH: refresh_ttl}
        self._algorithm = algorithm
        self._issuer = issuer
        self._clock = clock

    def mint(self, user_id: int) -> TokenPair:
        user = self._users.find_by_id(user_id)
        if user is None:
            raise UserNotFoundError(context={"user_id": user_id})

        access_token, access_exp = self._encode(
            user.id,
            ACCESS,
            email=user.email,
            username=user.username,
            fullname=user.fullname,
        )
        refresh_token, refresh_exp = self._encode(user.id, REFRESH)

        # Unconditional overwrite: any earlier refresh token stops matching.
        if self._users.update(user.id, {"refresh_token": refresh_token}) is None:
            raise UserNotFoundError(context={"user_id": user.id})
        logger.info(
            f"tokens.mint: user={user.id} access_exp={access_exp.isoformat()} "
            f"refresh_exp={refresh_exp.isoformat()}"
        )
        return TokenPair(
            user_id=user.id,
            access_token=access_token,
            refresh_token=refresh_token,
            access_expires_at=access_exp,
            refresh_expires_at=refresh_exp,
        )

    def verify_access(self, token: str) -> int:
        claims = self._decode(token, ACCESS)
        return self._subject(claims)

    def verify_refresh_and_rotate(self, token: str) -> TokenPair:
        claims = self._decode(token, REFRESH)
        user_id = self._subject(claims)
        user = self._users.find_by_id(user_id)
        if user is None:
            raise UserNotFoundError(context={"user_id": user_id})
        if not self._matches_persisted(user, token):
            logger.warning(f"tokens.refresh: revoked or superseded token for user={user_id}")
            raise RevokedTokenError(context={"user_id": user_id})
        return self.mint(user.id)

    def revoke(self, user_id: int) -> None:
        self._users.update(user_id, {"refresh_token": None})
        logger.info(f"tokens.revoke: user={user_id}")

    @staticmethod
    def _matches_persisted(user: User, token: str) -> bool:
        if not user.refresh_token:
            return False
        return secrets.compare_digest(user.refresh_token.encode(), token.encode())

    def _encode(self, user_id: int, kind: str, **extra: Any) -> tuple[str, datetime]:
        issued_at = self._clock()
        expires_at = issued_at + self._ttls[kind]
        payload = {
            "sub": str(user_id),
            "type": kind,
            "iss": self._issuer,
            "iat": int(issued_at.timestamp()),
            "exp": int(expires_at.timestamp()),
            "jti": uuid.uuid4().hex,
            **extra,
        }
        token = jwt.encode(payload, self._secrets[kind], algorithm=self._algorithm)
        return token, expires_at

    def _decode(self, token: str, kind: str) -> dict[str, Any]:
        if not token:
            raise InvalidSignatureError(context={"reason": "missing"})
        try:
            claims = jwt.decode(
                token,
                self._secrets[kind],
                algorithms=[self._algorithm],
                issuer=self._issuer,
                options={"require": ["sub", "exp", "type"]},
            )
        except jwt.ExpiredSignatureError as exc:
            raise ExpiredTokenError(context={"type": kind}) from exc
        except jwt.InvalidTokenError as exc:
            raise InvalidSignatureError(
                context={"type": kind, "reason": type(exc).__name__}
            ) from exc

        if claims.get("type") != kind:
            raise InvalidSignatureError(context={"type": kind, "reason": "wrong_type"})
        return claims

    @staticmethod
    def _subject(claims: dict[str, Any]) -> int:
        try:
            return int(claims["sub"])
        except (KeyError, TypeError, ValueError) as exc:
            raise InvalidSignatureError(context={"reason": "bad_subject"}) from exc


__all__ = ["ACCESS", "REFRESH", "TokenService"]
