# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from .assets.entities import AssetKind, RemoteAsset
from .assets.exceptions import DeleteError, UploadError
from .users.entities import AccountFields, NewUser, TokenPair, User, UserProfile
from .users.exceptions import (
    AccountCreationError,
    AssetUploadError,
    DuplicateIdentityError,
    ExpiredTokenError,
    InvalidCredentialsError,
    InvalidRefreshTokenError,
    InvalidSignatureError,
    InvalidTokenError,
    MissingAssetError,
    RevokedTokenError,
    UserNotFoundError,
)

__all__ = [
    "AccountCreationError",
    "AccountFields",
    "AssetKind",
    "AssetUploadError",
    "DeleteError",
    "DuplicateIdentityError",
    "ExpiredTokenError",
    "InvalidCredentialsError",
    "InvalidRefreshTokenError",
    "InvalidSignatureError",
    "InvalidTokenError",
    "MissingAssetError",
    "NewUser",
    "RemoteAsset",
    "RevokedTokenError",
    "TokenPair",
    "UploadError",
    "User",
    "UserNotFoundError",
    "UserProfile",
]
