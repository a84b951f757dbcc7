# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from collections.abc import Callable
from functools import wraps

from flask import g, request

from vidhub.application.services.tokens import TokenService
from vidhub.domain.users.exceptions import InvalidSignatureError
from vidhub.domain.users.repositories import CredentialStore
from vidhub.shared.logging import logger

ACCESS_COOKIE = "access_token"
REFRESH_COOKIE = "refresh_token"


def presented_access_token() -> str:
    token = request.cookies.get(ACCESS_COOKIE, "")
    if not token:
        auth = request.headers.get("Authorization", "")
        if auth.startswith("Bearer "):
            token = auth[7:].strip()
    return token


def access_token_required(tokens: TokenService, users: CredentialStore):
    """Guard a view with a valid access token and an existing user.

    Sets ``g.user_id`` for the wrapped view. Token failures surface as the
    ``InvalidTokenError`` family so the error handler answers 401.
    """

    def decorator(f: Callable):
        @wraps(f)
        def inner(*args, **kwargs):
            token = presented_access_token()
            if not token:
                logger.warning(
                    f"No access token cookie/header on {request.method} {request.path} "
                    f"from {request.headers.get('X-Forwarded-For', request.remote_addr)}"
                )
                raise InvalidSignatureError(context={"reason": "missing"})

            user_id = tokens.verify_access(token)
            if users.find_by_id(user_id) is None:
                logger.warning(f"Auth failed (user gone) on {request.method} {request.path}")
                raise InvalidSignatureError(context={"reason": "unknown_subject"})

            g.user_id = user_id
            logger.debug(f"Auth OK: user={user_id} {request.method} {request.path}")
            return f(*args, **kwargs)

        return inner

    return decorator


__all__ = [
    "ACCESS_COOKIE",
    "REFRESH_COOKIE",
    "access_token_required",
    "presented_access_token",
]
