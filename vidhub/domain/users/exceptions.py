# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from http import HTTPStatus

from vidhub.shared.errors.base import DomainError, InfrastructureError


class DuplicateIdentityError(DomainError):
    code = "user_already_exists"
    status = HTTPStatus.CONFLICT


class MissingAssetError(DomainError):
    code = "asset_required"
    status = HTTPStatus.BAD_REQUEST


class UserNotFoundError(DomainError):
    code = "user_not_found"
    status = HTTPStatus.NOT_FOUND


class InvalidCredentialsError(DomainError):
    code = "invalid_credentials"
    status = HTTPStatus.UNAUTHORIZED


class InvalidRefreshTokenError(DomainError):
    code = "invalid_refresh_token"
    status = HTTPStatus.UNAUTHORIZED


class InvalidTokenError(DomainError):
    code = "token_invalid"
    status = HTTPStatus.UNAUTHORIZED


class ExpiredTokenError(InvalidTokenError):
    code = "token_expired"


class InvalidSignatureError(InvalidTokenError):
    code = "token_invalid"


class RevokedTokenError(InvalidTokenError):
    code = "token_revoked"


class AssetUploadError(InfrastructureError):
    def __init__(self, *, context=None) -> None:
        super().__init__("asset_upload_error", context=context)


class AccountCreationError(InfrastructureError):
    def __init__(self, *, context=None) -> None:
        super().__init__("account_creation_failed", context=context)
