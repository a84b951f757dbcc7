from __future__ import annotations

import asyncio
import os

import pytest

from vidhub.application.use_cases.users.change_password import ChangePasswordUseCase
from vidhub.application.use_cases.users.current_user import GetCurrentUserUseCase
from vidhub.application.use_cases.users.replace_asset import ReplaceUserAssetUseCase
from vidhub.application.use_cases.users.update_account import UpdateAccountDetailsUseCase
from vidhub.domain.assets.entities import AssetKind, RemoteAsset
from vidhub.domain.users.exceptions import (
    AssetUploadError,
    InvalidCredentialsError,
    MissingAssetError,
    UserNotFoundError,
)
from vidhub.shared.errors.base import ValidationError


def test_current_user_returns_profile_without_credentials(users) -> None:
    user = users.seed()

    profile = GetCurrentUserUseCase(users=users).execute(user.id)

    assert profile.username == "alice"
    assert not hasattr(profile, "password_hash")
    assert not hasattr(profile, "refresh_token")


def test_current_user_missing(users) -> None:
    with pytest.raises(UserNotFoundError):
        GetCurrentUserUseCase(users=users).execute(7)


def test_change_password(users, hasher) -> None:
    user = users.seed()
    use_case = ChangePasswordUseCase(users=users, password_hasher=hasher)

    use_case.execute(user.id, "Secret123!", "N3wSecret!")

    assert users.find_by_id(user.id).password_hash == "hashed:N3wSecret!"


def test_change_password_wrong_old(users, hasher) -> None:
    user = users.seed()

    with pytest.raises(InvalidCredentialsError):
        ChangePasswordUseCase(users=users, password_hasher=hasher).execute(
            user.id, "nope", "N3wSecret!"
        )
    assert users.find_by_id(user.id).password_hash == "hashed:Secret123!"


def test_update_details(users) -> None:
    user = users.seed()

    profile = UpdateAccountDetailsUseCase(users=users).execute(
        user.id, " Alice L. ", "alice@new.example.com"
    )

    assert profile.fullname == "Alice L."
    assert profile.email == "alice@new.example.com"


def test_update_details_requires_both_fields(users) -> None:
    user = users.seed()

    with pytest.raises(ValidationError):
        UpdateAccountDetailsUseCase(users=users).execute(user.id, "", "a@b.c")


@pytest.fixture()
def replace(users, assets, stage) -> ReplaceUserAssetUseCase:
    return ReplaceUserAssetUseCase(users=users, assets=assets, stage=stage)


def test_replace_avatar_deletes_previous(replace, users, assets, staged_file) -> None:
    user = users.seed()
    path = staged_file("new.png")

    profile = asyncio.run(replace.execute(user.id, AssetKind.AVATAR, path))

    assert profile.avatar_url == assets.uploaded[0].url
    assert assets.deleted == ["avatars/seed"]
    assert not os.path.exists(path)


def test_set_cover_for_first_time(replace, users, assets, staged_file) -> None:
    user = users.seed()

    profile = asyncio.run(replace.execute(user.id, AssetKind.COVER, staged_file("b.jpg")))

    assert profile.cover_url == assets.uploaded[0].url
    assert assets.deleted == []


def test_replace_survives_failed_cleanup_of_previous(replace, users, assets, staged_file) -> None:
    user = users.seed()
    assets.fail_delete = True

    profile = asyncio.run(replace.execute(user.id, AssetKind.AVATAR, staged_file()))

    assert users.find_by_id(user.id).avatar == RemoteAsset(
        kind=AssetKind.AVATAR, remote_id=assets.uploaded[0].remote_id, url=profile.avatar_url
    )


def test_replace_without_file(replace, users) -> None:
    user = users.seed()

    with pytest.raises(MissingAssetError):
        asyncio.run(replace.execute(user.id, AssetKind.AVATAR, None))


def test_replace_upload_failure_keeps_old_asset(replace, users, assets, staged_file) -> None:
    user = users.seed()
    assets.fail_upload.add(AssetKind.AVATAR)
    path = staged_file()

    with pytest.raises(AssetUploadError):
        asyncio.run(replace.execute(user.id, AssetKind.AVATAR, path))

    assert users.find_by_id(user.id).avatar.remote_id == "avatars/seed"
    assert not os.path.exists(path)


def test_replace_for_vanished_user_compensates_new_asset(replace, users, assets, staged_file) -> None:
    user = users.seed()
    path = staged_file()
    original_update = users.update

    def _vanish(user_id, patch):
        users.delete(user_id)
        return original_update(user_id, patch)

    users.update = _vanish

    with pytest.raises(UserNotFoundError):
        asyncio.run(replace.execute(user.id, AssetKind.AVATAR, path))

    assert assets.deleted == [assets.uploaded[0].remote_id]
