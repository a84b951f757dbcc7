# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from vidhub.domain.users.entities import UserProfile
from vidhub.domain.users.exceptions import UserNotFoundError
from vidhub.domain.users.repositories import CredentialStore
from vidhub.shared.errors.base import ValidationError


class UpdateAccountDetailsUseCase:
    def __init__(self, *, users: CredentialStore) -> None:
        self._users = users

    def execute(self, user_id: int, fullname: str, email: str) -> UserProfile:
        fullname, email = (fullname or "").strip(), (email or "").strip()
        if not fullname or not email:
            raise ValidationError(context={"fields": ["fullname", "email"]})

        updated = self._users.update(user_id, {"fullname": fullname, "email": email})
        if updated is None:
            raise UserNotFoundError(context={"user_id": user_id})
        return updated.profile()
