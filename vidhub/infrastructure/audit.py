# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

import json
from datetime import UTC, datetime
from enum import Enum
from typing import Any

from sqlalchemy.exc import SQLAlchemyError

from vidhub.shared.logging import logger

_SENSITIVE_KEYS = ("password", "token", "secret", "signature", "key")


class AuditAction(str, Enum):
    REGISTER = "register"
    REGISTER_FAILED = "register_failed"
    LOGIN_SUCCESS = "login_success"
    LOGIN_FAILED = "login_failed"
    LOGOUT = "logout"
    TOKEN_REFRESHED = "token_refreshed"
    TOKEN_REFRESH_FAILED = "token_refresh_failed"
    PASSWORD_CHANGED = "password_changed"
    ACCOUNT_UPDATED = "account_updated"
    AVATAR_REPLACED = "avatar_replaced"
    COVER_REPLACED = "cover_replaced"


def _sanitize_details(details: dict[str, Any]) -> dict[str, Any]:
    return {
        key: "***REDACTED***" if any(s in key.lower() for s in _SENSITIVE_KEYS) else value
        for key, value in details.items()
    }


def audit_log(
    action: AuditAction,
    user_id: int | None = None,
    ip_address: str | None = None,
    details: dict[str, Any] | None = None,
    success: bool = True,
) -> None:
    safe_details = _sanitize_details(details) if details else {}
    message = f"AUDIT: {action.value} | user_id={user_id} | ip={ip_address} | success={success}"
    if safe_details:
        message += f" | details={safe_details}"

    if success:
        logger.info(message)
    else:
        logger.warning(message)

    _store_audit_log(
        timestamp=datetime.now(UTC),
        action=action.value,
        user_id=user_id,
        ip_address=ip_address,
        success=success,
        details=safe_details,
    )


def _store_audit_log(
    timestamp: datetime,
    action: str,
    user_id: int | None,
    ip_address: str | None,
    success: bool,
    details: dict[str, Any],
) -> None:
    from vidhub.infrastructure.db.models import AuditLog
    from vidhub.infrastructure.db.session import session_scope

    try:
        with session_scope() as session:
            session.add(
                AuditLog(
                    timestamp=timestamp,
                    action=action,
                    user_id=user_id,
                    ip_address=ip_address,
                    success=success,
                    details_json=json.dumps(details, default=str) if details else None,
                )
            )
    except SQLAlchemyError as exc:
        logger.warning(f"Failed to store audit log in database: {exc}")


__all__ = ["AuditAction", "audit_log"]
