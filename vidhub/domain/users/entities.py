# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from vidhub.domain.assets.entities import RemoteAsset


@dataclass(slots=True, frozen=True)
class AccountFields:
    fullname: str
    email: str
    username: str
    password: str


@dataclass(slots=True, frozen=True)
class NewUser:
    fullname: str
    email: str
    username: str
    password_hash: str
    avatar: RemoteAsset
    cover: RemoteAsset | None = None


@dataclass(slots=True, frozen=True)
class UserProfile:
    id: int
    fullname: str
    email: str
    username: str
    avatar_url: str
    cover_url: str | None
    created_at: datetime


@dataclass(slots=True, frozen=True)
class User:

    id: int
    fullname: str
    email: str
    username: str
    password_hash: str
    avatar: RemoteAsset
    cover: RemoteAsset | None
    # Holds only the latest issued refresh token; last writer wins.
    refresh_token: str | None
    created_at: datetime

    def profile(self) -> UserProfile:
        return UserProfile(
            id=self.id,
            fullname=self.fullname,
            email=self.email,
            username=self.username,
            avatar_url=self.avatar.url,
            cover_url=self.cover.url if self.cover else None,
            created_at=self.created_at,
        )


@dataclass(slots=True, frozen=True)
class TokenPair:

    user_id: int
    access_token: str
    refresh_token: str
    access_expires_at: datetime
    refresh_expires_at: datetime
