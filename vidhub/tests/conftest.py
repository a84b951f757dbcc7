from __future__ import annotations

import asyncio
import io
import os
import tempfile
from collections.abc import Mapping
from dataclasses import replace
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

_TMP = Path(tempfile.mkdtemp(prefix="vidhub-tests-"))
os.environ.setdefault("DATABASE_URL", f"sqlite:///{_TMP / 'test.db'}")
os.environ.setdefault("STAGE_DIR", str(_TMP / "stage"))
os.environ.setdefault("LOG_FILE", str(_TMP / "app.log"))
os.environ["APP_ENV"] = "test"
os.environ["ENABLE_RATE_LIMIT"] = "false"

import pytest  # noqa: E402

from vidhub.domain.assets.entities import AssetKind, RemoteAsset  # noqa: E402
from vidhub.domain.assets.exceptions import DeleteError, UploadError  # noqa: E402
from vidhub.domain.users.entities import NewUser, User  # noqa: E402
from vidhub.domain.users.exceptions import DuplicateIdentityError  # noqa: E402
from vidhub.domain.users.repositories import CredentialStore, PasswordHasher  # noqa: E402
from vidhub.infrastructure.db import init_db  # noqa: E402
from vidhub.infrastructure.storage import LocalStageDirectory  # noqa: E402


@pytest.fixture(scope="session", autouse=True)
def _schema() -> None:
    init_db()


class InMemoryCredentialStore(CredentialStore):
    def __init__(self) -> None:
        self.users: dict[int, User] = {}
        self._seq = 1
        self.fail_create = False
        self.lose_after_create = False

    def find_by_id(self, user_id: int) -> User | None:
        return self.users.get(user_id)

    def find_by_identity(
        self, *, email: str | None = None, username: str | None = None
    ) -> User | None:
        for user in self.users.values():
            if (email and user.email == email) or (username and user.username == username):
                return user
        return None

    def create(self, fields: NewUser) -> User:
        if self.fail_create:
            raise RuntimeError("database unavailable")
        if self.find_by_identity(email=fields.email, username=fields.username):
            raise DuplicateIdentityError()
        user = User(
            id=self._seq,
            fullname=fields.fullname,
            email=fields.email,
            username=fields.username,
            password_hash=fields.password_hash,
            avatar=fields.avatar,
            cover=fields.cover,
            refresh_token=None,
            created_at=datetime.now(UTC),
        )
        self._seq += 1
        if not self.lose_after_create:
            self.users[user.id] = user
        return user

    def update(self, user_id: int, patch: Mapping[str, Any]) -> User | None:
        user = self.users.get(user_id)
        if user is None:
            return None
        updated = replace(user, **patch)
        self.users[user_id] = updated
        return updated

    def delete(self, user_id: int) -> None:
        self.users.pop(user_id, None)

    def seed(self, username: str = "alice", email: str = "alice@example.com", **extra) -> User:
        fields = NewUser(
            fullname=extra.pop("fullname", "Alice Liddell"),
            email=email,
            username=username,
            password_hash=extra.pop("password_hash", "hashed:Secret123!"),
            avatar=extra.pop(
                "avatar",
                RemoteAsset(kind=AssetKind.AVATAR, remote_id="avatars/seed", url="https://cdn/seed"),
            ),
            cover=extra.pop("cover", None),
        )
        return self.create(fields)


class FakeAssetStore:
    def __init__(self) -> None:
        self.uploaded: list[RemoteAsset] = []
        self.deleted: list[str] = []
        self.fail_upload: set[AssetKind] = set()
        self.fail_delete = False
        self.upload_delay = 0.0
        self._seq = 0

    async def upload(self, local_path: str, *, kind: AssetKind) -> RemoteAsset:
        if self.upload_delay:
            await asyncio.sleep(self.upload_delay)
        if kind in self.fail_upload:
            raise UploadError(local_path, reason="http_500")
        self._seq += 1
        asset = RemoteAsset(
            kind=kind,
            remote_id=f"{kind.value}s/{self._seq}",
            url=f"https://cdn.example.com/{kind.value}s/{self._seq}.png",
        )
        self.uploaded.append(asset)
        return asset

    async def delete(self, remote_id: str) -> None:
        if self.fail_delete:
            raise DeleteError(remote_id, reason="http_503")
        self.deleted.append(remote_id)


class DeterministicHasher(PasswordHasher):
    def hash(self, password: str) -> str:
        return f"hashed:{password}"

    def verify(self, password: str, hashed: str) -> bool:
        return hashed == f"hashed:{password}"


@pytest.fixture()
def users() -> InMemoryCredentialStore:
    return InMemoryCredentialStore()


@pytest.fixture()
def assets() -> FakeAssetStore:
    return FakeAssetStore()


@pytest.fixture()
def hasher() -> DeterministicHasher:
    return DeterministicHasher()


@pytest.fixture()
def stage(tmp_path: Path) -> LocalStageDirectory:
    return LocalStageDirectory(tmp_path / "stage")


@pytest.fixture()
def staged_file(stage: LocalStageDirectory):
    def _make(name: str = "avatar.png", content: bytes = b"\x89PNG fake") -> str:
        return stage.stage(name, io.BytesIO(content))

    return _make
