# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

"""Use-case for reading the authenticated user's profile."""

from __future__ import annotations

from vidhub.domain.users.entities import UserProfile
from vidhub.domain.users.exceptions import UserNotFoundError
from vidhub.domain.users.repositories import CredentialStore


class GetCurrentUserUseCase:
    def __init__(self, *, users: CredentialStore) -> None:
        self._users = users

    def execute(self, user_id: int) -> UserProfile:
        user = self._users.find_by_id(user_id)
        if user is None:
            raise UserNotFoundError(context={"user_id": user_id})
        return user.profile()
