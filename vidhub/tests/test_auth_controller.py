from __future__ import annotations

import io
import os
from datetime import UTC, datetime, timedelta
from unittest.mock import MagicMock

import pytest
from flask import Flask

from vidhub.domain.users.entities import TokenPair, UserProfile
from vidhub.domain.users.exceptions import (
    DuplicateIdentityError,
    ExpiredTokenError,
    InvalidRefreshTokenError,
)
from vidhub.interfaces.http.controllers.auth_controller import AuthController
from vidhub.shared.middleware.error_handler import configure_error_handling

NOW = datetime.now(UTC)
PROFILE = UserProfile(
    id=1,
    fullname="Alice Liddell",
    email="alice@example.com",
    username="alice",
    avatar_url="https://cdn/a.png",
    cover_url=None,
    created_at=NOW,
)
PAIR = TokenPair(
    user_id=1,
    access_token="access-123",
    refresh_token="refresh-456",
    access_expires_at=NOW + timedelta(minutes=15),
    refresh_expires_at=NOW + timedelta(days=10),
)


class StubSaga:
    def __init__(self, error: Exception | None = None) -> None:
        self.calls: list[tuple] = []
        self.error = error

    async def create_account(self, fields, avatar_path, cover_path=None):
        self.calls.append((fields, avatar_path, cover_path, avatar_path and os.path.exists(avatar_path)))
        if self.error:
            raise self.error
        return PROFILE


@pytest.fixture()
def flask_app() -> Flask:
    app = Flask(__name__)
    configure_error_handling(app)
    return app


def _controller(stage, *, saga=None, sessions=None, tokens=None, users=None) -> AuthController:
    current_user = MagicMock()
    current_user.execute.return_value = PROFILE
    return AuthController(
        upload_saga=saga or StubSaga(),
        sessions=sessions or MagicMock(),
        current_user=current_user,
        stage=stage,
        tokens=tokens or MagicMock(),
        users=users or MagicMock(),
    )


def _register_form(**files):
    data = {
        "fullname": "Alice Liddell",
        "email": "alice@example.com",
        "username": "alice",
        "password": "Secret123!",
    }
    data.update(files)
    return data


def test_register_stages_files_and_returns_201(flask_app: Flask, stage) -> None:
    saga = StubSaga()
    flask_app.register_blueprint(_controller(stage, saga=saga).as_blueprint())

    with flask_app.test_client() as client:
        response = client.post(
            "/api/v1/users/register",
            data=_register_form(
                avatar=(io.BytesIO(b"img"), "me.png"),
                cover_image=(io.BytesIO(b"img"), "banner.png"),
            ),
            content_type="multipart/form-data",
        )

    assert response.status_code == 201
    assert response.get_json()["user"]["username"] == "alice"
    fields, avatar_path, cover_path, avatar_present = saga.calls[0]
    assert fields.email == "alice@example.com"
    assert avatar_path.endswith("me.png") and cover_path.endswith("banner.png")
    assert avatar_present


def test_register_invalid_form_is_422_before_staging(flask_app: Flask, stage) -> None:
    saga = StubSaga()
    flask_app.register_blueprint(_controller(stage, saga=saga).as_blueprint())

    with flask_app.test_client() as client:
        response = client.post(
            "/api/v1/users/register",
            data={"username": "a", "avatar": (io.BytesIO(b"img"), "me.png")},
            content_type="multipart/form-data",
        )

    assert response.status_code == 422
    assert response.get_json()["error"] == "validation_error"
    assert saga.calls == []


def test_register_conflict_maps_to_409(flask_app: Flask, stage) -> None:
    saga = StubSaga(error=DuplicateIdentityError())
    flask_app.register_blueprint(_controller(stage, saga=saga).as_blueprint())

    with flask_app.test_client() as client:
        response = client.post(
            "/api/v1/users/register",
            data=_register_form(avatar=(io.BytesIO(b"img"), "me.png")),
            content_type="multipart/form-data",
        )

    assert response.status_code == 409
    assert response.get_json()["error"] == "user_already_exists"


def test_login_sets_http_only_cookies(flask_app: Flask, stage) -> None:
    sessions = MagicMock()
    sessions.login.return_value = PAIR
    flask_app.register_blueprint(_controller(stage, sessions=sessions).as_blueprint())

    with flask_app.test_client() as client:
        response = client.post(
            "/api/v1/users/login", json={"username": "alice", "password": "Secret123!"}
        )

    assert response.status_code == 200
    sessions.login.assert_called_once_with("alice", "Secret123!")
    cookies = response.headers.getlist("Set-Cookie")
    assert any(c.startswith("access_token=access-123") and "HttpOnly" in c for c in cookies)
    assert any(c.startswith("refresh_token=refresh-456") and "HttpOnly" in c for c in cookies)
    body = response.get_json()
    assert body["user"]["id"] == 1
    assert body["refresh_token"] == "refresh-456"


def test_login_requires_an_identity(flask_app: Flask, stage) -> None:
    flask_app.register_blueprint(_controller(stage).as_blueprint())

    with flask_app.test_client() as client:
        response = client.post("/api/v1/users/login", json={"password": "x"})

    assert response.status_code == 422


def test_logout_without_token_is_401(flask_app: Flask, stage) -> None:
    flask_app.register_blueprint(_controller(stage).as_blueprint())

    with flask_app.test_client() as client:
        response = client.post("/api/v1/users/logout")

    assert response.status_code == 401
    assert response.get_json()["error"] == "token_invalid"


def test_logout_with_expired_token_is_401(flask_app: Flask, stage) -> None:
    tokens = MagicMock()
    tokens.verify_access.side_effect = ExpiredTokenError()
    flask_app.register_blueprint(_controller(stage, tokens=tokens).as_blueprint())

    with flask_app.test_client() as client:
        response = client.post(
            "/api/v1/users/logout", headers={"Authorization": "Bearer stale"}
        )

    assert response.status_code == 401
    assert response.get_json()["error"] == "token_expired"


def test_logout_revokes_and_clears_cookies(flask_app: Flask, stage) -> None:
    sessions, tokens = MagicMock(), MagicMock()
    tokens.verify_access.return_value = 1
    flask_app.register_blueprint(
        _controller(stage, sessions=sessions, tokens=tokens).as_blueprint()
    )

    with flask_app.test_client() as client:
        response = client.post(
            "/api/v1/users/logout", headers={"Authorization": "Bearer access-123"}
        )

    assert response.status_code == 200
    sessions.logout.assert_called_once_with(1)
    cookies = response.headers.getlist("Set-Cookie")
    assert any(c.startswith("access_token=;") for c in cookies)
    assert any(c.startswith("refresh_token=;") for c in cookies)


def test_refresh_reads_token_from_body(flask_app: Flask, stage) -> None:
    sessions = MagicMock()
    sessions.refresh.return_value = PAIR
    flask_app.register_blueprint(_controller(stage, sessions=sessions).as_blueprint())

    with flask_app.test_client() as client:
        response = client.post(
            "/api/v1/users/refresh-token", json={"refresh_token": "old-refresh"}
        )

    assert response.status_code == 200
    sessions.refresh.assert_called_once_with("old-refresh")
    assert response.get_json()["access_token"] == "access-123"


def test_refresh_rejection_is_401(flask_app: Flask, stage) -> None:
    sessions = MagicMock()
    sessions.refresh.side_effect = InvalidRefreshTokenError()
    flask_app.register_blueprint(_controller(stage, sessions=sessions).as_blueprint())

    with flask_app.test_client() as client:
        response = client.post("/api/v1/users/refresh-token", json={})

    assert response.status_code == 401
    assert response.get_json()["error"] == "invalid_refresh_token"
