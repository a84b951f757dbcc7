from __future__ import annotations

import asyncio
import os

import pytest

from vidhub.application.use_cases.users.upload_saga import UploadSaga
from vidhub.domain.assets.entities import AssetKind
from vidhub.domain.users.entities import AccountFields
from vidhub.domain.users.exceptions import (
    AccountCreationError,
    AssetUploadError,
    DuplicateIdentityError,
    MissingAssetError,
)
from vidhub.shared.errors.base import ValidationError


def _fields(**overrides) -> AccountFields:
    data = {
        "fullname": "Alice Liddell",
        "email": "alice@example.com",
        "username": "Alice",
        "password": "Secret123!",
    }
    data.update(overrides)
    return AccountFields(**data)


@pytest.fixture()
def saga(users, assets, stage, hasher) -> UploadSaga:
    return UploadSaga(users=users, assets=assets, stage=stage, password_hasher=hasher)


def test_creates_account_with_avatar_and_cover(saga, users, assets, staged_file) -> None:
    avatar, cover = staged_file("me.png"), staged_file("banner.jpg")

    profile = asyncio.run(saga.create_account(_fields(), avatar, cover))

    assert profile.username == "alice"
    assert profile.avatar_url == assets.uploaded[0].url
    assert profile.cover_url == assets.uploaded[1].url
    stored = users.find_by_id(profile.id)
    assert stored.password_hash == "hashed:Secret123!"
    assert stored.refresh_token is None
    assert assets.deleted == []
    assert not os.path.exists(avatar)
    assert not os.path.exists(cover)


def test_cover_is_optional(saga, assets, staged_file) -> None:
    profile = asyncio.run(saga.create_account(_fields(), staged_file()))

    assert profile.cover_url is None
    assert [a.kind for a in assets.uploaded] == [AssetKind.AVATAR]


def test_missing_avatar_is_rejected_before_any_upload(saga, assets, staged_file) -> None:
    cover = staged_file("banner.jpg")

    with pytest.raises(MissingAssetError):
        asyncio.run(saga.create_account(_fields(), None, cover))

    assert assets.uploaded == []
    assert not os.path.exists(cover)


def test_blank_fields_fail_validation_and_discard_files(saga, assets, staged_file) -> None:
    avatar = staged_file()

    with pytest.raises(ValidationError) as excinfo:
        asyncio.run(saga.create_account(_fields(fullname="   "), avatar))

    assert excinfo.value.context["fields"] == ["fullname"]
    assert assets.uploaded == []
    assert not os.path.exists(avatar)


def test_duplicate_identity_uploads_nothing(saga, users, assets, staged_file) -> None:
    users.seed(username="alice", email="other@example.com")
    avatar = staged_file()

    with pytest.raises(DuplicateIdentityError):
        asyncio.run(saga.create_account(_fields(), avatar))

    assert assets.uploaded == []
    assert not os.path.exists(avatar)


def test_cover_failure_compensates_avatar(saga, users, assets, staged_file) -> None:
    assets.fail_upload.add(AssetKind.COVER)
    avatar, cover = staged_file(), staged_file("banner.jpg")

    with pytest.raises(AssetUploadError) as excinfo:
        asyncio.run(saga.create_account(_fields(), avatar, cover))

    assert assets.deleted == [assets.uploaded[0].remote_id]
    assert excinfo.value.context == {"reason": "http_500", "orphaned": []}
    assert users.users == {}
    assert not os.path.exists(avatar)
    assert not os.path.exists(cover)


def test_failed_compensation_is_reported_not_raised(saga, assets, staged_file) -> None:
    assets.fail_upload.add(AssetKind.COVER)
    assets.fail_delete = True

    with pytest.raises(AssetUploadError) as excinfo:
        asyncio.run(saga.create_account(_fields(), staged_file(), staged_file("b.jpg")))

    assert excinfo.value.context["orphaned"] == [f"avatar:{assets.uploaded[0].remote_id}"]


def test_commit_failure_deletes_every_uploaded_asset(saga, users, assets, staged_file) -> None:
    users.fail_create = True
    avatar, cover = staged_file(), staged_file("banner.jpg")

    with pytest.raises(AccountCreationError):
        asyncio.run(saga.create_account(_fields(), avatar, cover))

    # newest first
    assert assets.deleted == [assets.uploaded[1].remote_id, assets.uploaded[0].remote_id]
    assert not os.path.exists(avatar)
    assert not os.path.exists(cover)


def test_unreadable_record_after_insert_is_compensated(saga, users, assets, staged_file) -> None:
    users.lose_after_create = True

    with pytest.raises(AccountCreationError) as excinfo:
        asyncio.run(saga.create_account(_fields(), staged_file()))

    assert excinfo.value.context["reason"] == "LookupError"
    assert assets.deleted == [assets.uploaded[0].remote_id]


def test_upload_timeout_becomes_upload_error(users, assets, stage, hasher, staged_file) -> None:
    assets.upload_delay = 0.5
    saga = UploadSaga(
        users=users, assets=assets, stage=stage, password_hasher=hasher, asset_timeout=0.05
    )
    avatar = staged_file()

    with pytest.raises(AssetUploadError) as excinfo:
        asyncio.run(saga.create_account(_fields(), avatar))

    assert excinfo.value.context["reason"] == "timeout"
    assert not os.path.exists(avatar)


def test_unstaged_cover_is_skipped(saga, assets, staged_file, tmp_path) -> None:
    profile = asyncio.run(
        saga.create_account(_fields(), staged_file(), str(tmp_path / "stage" / "ghost.png"))
    )

    assert profile.cover_url is None
    assert len(assets.uploaded) == 1


def test_hashing_failure_happens_before_any_upload(users, assets, stage, staged_file) -> None:
    from vidhub.application.services.password_hashing import WerkzeugPasswordHasher

    saga = UploadSaga(
        users=users, assets=assets, stage=stage, password_hasher=WerkzeugPasswordHasher()
    )
    avatar = staged_file()

    with pytest.raises(UnicodeEncodeError):
        asyncio.run(saga.create_account(_fields(password="pw\ud800"), avatar))

    assert assets.uploaded == []
    assert users.users == {}
    assert not os.path.exists(avatar)


def test_avatar_outside_stage_is_missing_asset(saga, assets, tmp_path) -> None:
    foreign = tmp_path / "av1"
    foreign.write_bytes(b"\x89PNG")

    with pytest.raises(MissingAssetError):
        asyncio.run(saga.create_account(_fields(), str(foreign)))

    assert assets.uploaded == []
    assert foreign.exists()
