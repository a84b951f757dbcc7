# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from flask import Blueprint, Response, g, jsonify, request
from pydantic import ValidationError

from vidhub.application.services.tokens import TokenService
from vidhub.application.use_cases.users.current_user import GetCurrentUserUseCase
from vidhub.application.use_cases.users.session_controller import SessionController
from vidhub.application.use_cases.users.upload_saga import UploadSaga
from vidhub.domain.assets.repositories import LocalStage
from vidhub.domain.users.entities import AccountFields, TokenPair
from vidhub.domain.users.repositories import CredentialStore
from vidhub.infrastructure.audit import AuditAction, audit_log
from vidhub.infrastructure.auth import ACCESS_COOKIE, REFRESH_COOKIE, access_token_required
from vidhub.interfaces.http.dto.account import UserProfileDTO
from vidhub.interfaces.http.dto.auth import (
    AuthSuccessDTO,
    LoginRequestDTO,
    RefreshRequestDTO,
    RegisterFormDTO,
)
from vidhub.interfaces.http.uploads import client_ip, stage_files
from vidhub.shared.config import load_config
from vidhub.shared.errors.base import AppError
from vidhub.shared.errors.validation import raise_validation_error
from vidhub.shared.logging import logger
from vidhub.shared.middleware.rate_limit import rate_limit
from vidhub.shared.utils.asyncio_utils import run_async


def _set_session_cookies(response: Response, pair: TokenPair) -> None:
    config = load_config()
    for name, token, ttl in (
        (ACCESS_COOKIE, pair.access_token, config.tokens.access_ttl),
        (REFRESH_COOKIE, pair.refresh_token, config.tokens.refresh_ttl),
    ):
        response.set_cookie(
            name,
            token,
            httponly=True,
            samesite=config.security.cookie_samesite,
            secure=config.cookie_secure(),
            max_age=int(ttl.total_seconds()),
        )


def _clear_session_cookies(response: Response) -> None:
    config = load_config()
    for name in (ACCESS_COOKIE, REFRESH_COOKIE):
        response.delete_cookie(
            name,
            httponly=True,
            samesite=config.security.cookie_samesite,
            secure=config.cookie_secure(),
        )


class AuthController:
    def __init__(
        self,
        *,
        upload_saga: UploadSaga,
        sessions: SessionController,
        current_user: GetCurrentUserUseCase,
        stage: LocalStage,
        tokens: TokenService,
        users: CredentialStore,
    ) -> None:
        self._upload_saga = upload_saga
        self._sessions = sessions
        self._current_user = current_user
        self._stage = stage
        self._tokens = tokens
        self._users = users

    @rate_limit(limit=5, window_seconds=60.0)
    def register(self) -> tuple[Response, int]:
        try:
            dto = RegisterFormDTO.model_validate(request.form.to_dict())
        except ValidationError as exc:
            raise_validation_error(exc)

        staged = stage_files(self._stage, ("avatar", "cover_image"))
        fields = AccountFields(
            fullname=dto.fullname,
            email=dto.email,
            username=dto.username,
            password=dto.password,
        )
        try:
            profile = run_async(
                self._upload_saga.create_account(
                    fields, staged["avatar"], staged["cover_image"]
                )
            )
        except AppError as exc:
            audit_log(
                AuditAction.REGISTER_FAILED,
                ip_address=client_ip(),
                details={"username": dto.username, "error": exc.code},
                success=False,
            )
            raise

        audit_log(
            AuditAction.REGISTER,
            user_id=profile.id,
            ip_address=client_ip(),
            details={"username": profile.username},
        )
        logger.info(f"auth.register: ok user_id={profile.id}")
        payload = {
            **AuthSuccessDTO().model_dump(),
            "user": UserProfileDTO.from_profile(profile).model_dump(mode="json"),
        }
        return jsonify(payload), 201

    @rate_limit(limit=10, window_seconds=60.0)
    def login(self) -> tuple[Response, int]:
        try:
            dto = LoginRequestDTO.model_validate(request.get_json(silent=True) or {})
        except ValidationError as exc:
            raise_validation_error(exc)

        ip_address = client_ip()
        try:
            pair = self._sessions.login(dto.identity, dto.password)
        except AppError as exc:
            audit_log(
                AuditAction.LOGIN_FAILED,
                ip_address=ip_address,
                details={"identity": dto.identity, "error": exc.code},
                success=False,
            )
            raise

        profile = self._current_user.execute(pair.user_id)
        audit_log(AuditAction.LOGIN_SUCCESS, user_id=pair.user_id, ip_address=ip_address)

        response = jsonify(
            {
                **AuthSuccessDTO().model_dump(),
                "user": UserProfileDTO.from_profile(profile).model_dump(mode="json"),
                "access_token": pair.access_token,
                "refresh_token": pair.refresh_token,
            }
        )
        _set_session_cookies(response, pair)
        logger.info(f"auth.login: ok user_id={pair.user_id}")
        return response, 200

    def logout(self) -> tuple[Response, int]:
        user_id = g.user_id
        self._sessions.logout(user_id)
        audit_log(AuditAction.LOGOUT, user_id=user_id, ip_address=client_ip())

        response = jsonify(AuthSuccessDTO().model_dump())
        _clear_session_cookies(response)
        logger.info(f"auth.logout: ok user_id={user_id}")
        return response, 200

    @rate_limit(limit=20, window_seconds=60.0)
    def refresh(self) -> tuple[Response, int]:
        presented = request.cookies.get(REFRESH_COOKIE)
        if not presented:
            try:
                body = RefreshRequestDTO.model_validate(request.get_json(silent=True) or {})
            except ValidationError as exc:
                raise_validation_error(exc)
            presented = body.refresh_token

        try:
            pair = self._sessions.refresh(presented)
        except AppError as exc:
            audit_log(
                AuditAction.TOKEN_REFRESH_FAILED,
                ip_address=client_ip(),
                details={"error": exc.code},
                success=False,
            )
            raise

        audit_log(AuditAction.TOKEN_REFRESHED, user_id=pair.user_id, ip_address=client_ip())
        response = jsonify(
            {
                **AuthSuccessDTO().model_dump(),
                "access_token": pair.access_token,
                "refresh_token": pair.refresh_token,
            }
        )
        _set_session_cookies(response, pair)
        return response, 200

    def as_blueprint(self) -> Blueprint:
        guard = access_token_required(self._tokens, self._users)
        bp = Blueprint("users", __name__, url_prefix="/api/v1/users")
        bp.add_url_rule("/register", view_func=self.register, methods=["POST"])
        bp.add_url_rule("/login", view_func=self.login, methods=["POST"])
        bp.add_url_rule("/logout", view_func=guard(self.logout), methods=["POST"])
        bp.add_url_rule("/refresh-token", view_func=self.refresh, methods=["POST"])
        return bp
