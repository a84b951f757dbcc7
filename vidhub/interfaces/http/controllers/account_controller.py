# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from flask import Blueprint, Response, g, jsonify, request
from pydantic import ValidationError

from vidhub.application.services.tokens import TokenService
from vidhub.application.use_cases.users.change_password import ChangePasswordUseCase
from vidhub.application.use_cases.users.current_user import GetCurrentUserUseCase
from vidhub.application.use_cases.users.replace_asset import ReplaceUserAssetUseCase
from vidhub.application.use_cases.users.update_account import UpdateAccountDetailsUseCase
from vidhub.domain.assets.entities import AssetKind
from vidhub.domain.assets.repositories import LocalStage
from vidhub.domain.users.repositories import CredentialStore
from vidhub.infrastructure.audit import AuditAction, audit_log
from vidhub.infrastructure.auth import access_token_required
from vidhub.interfaces.http.dto.account import (
    ChangePasswordDTO,
    UpdateDetailsDTO,
    UserProfileDTO,
)
from vidhub.interfaces.http.uploads import client_ip, stage_files
from vidhub.shared.errors.validation import raise_validation_error
from vidhub.shared.logging import logger
from vidhub.shared.utils.asyncio_utils import run_async

_ASSET_AUDIT = {
    AssetKind.AVATAR: AuditAction.AVATAR_REPLACED,
    AssetKind.COVER: AuditAction.COVER_REPLACED,
}


def _profile_response(profile) -> tuple[Response, int]:
    return jsonify({"user": UserProfileDTO.from_profile(profile).model_dump(mode="json")}), 200


class AccountController:
    def __init__(
        self,
        *,
        current_user: GetCurrentUserUseCase,
        change_password: ChangePasswordUseCase,
        update_details: UpdateAccountDetailsUseCase,
        replace_asset: ReplaceUserAssetUseCase,
        stage: LocalStage,
        tokens: TokenService,
        users: CredentialStore,
    ) -> None:
        self._current_user = current_user
        self._change_password = change_password
        self._update_details = update_details
        self._replace_asset = replace_asset
        self._stage = stage
        self._tokens = tokens
        self._users = users

    def me(self) -> tuple[Response, int]:
        return _profile_response(self._current_user.execute(g.user_id))

    def change_password(self) -> tuple[Response, int]:
        try:
            dto = ChangePasswordDTO.model_validate(request.get_json(silent=True) or {})
        except ValidationError as exc:
            raise_validation_error(exc)

        self._change_password.execute(g.user_id, dto.old_password, dto.new_password)
        audit_log(AuditAction.PASSWORD_CHANGED, user_id=g.user_id, ip_address=client_ip())
        return jsonify({"ok": True}), 200

    def update_details(self) -> tuple[Response, int]:
        try:
            dto = UpdateDetailsDTO.model_validate(request.get_json(silent=True) or {})
        except ValidationError as exc:
            raise_validation_error(exc)

        profile = self._update_details.execute(g.user_id, dto.fullname, dto.email)
        audit_log(AuditAction.ACCOUNT_UPDATED, user_id=g.user_id, ip_address=client_ip())
        return _profile_response(profile)

    def _replace(self, kind: AssetKind) -> tuple[Response, int]:
        staged = stage_files(self._stage, ("file",))
        profile = run_async(self._replace_asset.execute(g.user_id, kind, staged["file"]))
        audit_log(_ASSET_AUDIT[kind], user_id=g.user_id, ip_address=client_ip())
        logger.info(f"account.{kind.value}: ok user_id={g.user_id}")
        return _profile_response(profile)

    def update_avatar(self) -> tuple[Response, int]:
        return self._replace(AssetKind.AVATAR)

    def update_cover(self) -> tuple[Response, int]:
        return self._replace(AssetKind.COVER)

    def as_blueprint(self) -> Blueprint:
        guard = access_token_required(self._tokens, self._users)
        bp = Blueprint("account", __name__, url_prefix="/api/v1/account")
        bp.add_url_rule("/me", view_func=guard(self.me), methods=["GET"])
        bp.add_url_rule(
            "/change-password", view_func=guard(self.change_password), methods=["POST"]
        )
        bp.add_url_rule("/details", view_func=guard(self.update_details), methods=["PATCH"])
        bp.add_url_rule("/avatar", view_func=guard(self.update_avatar), methods=["PATCH"])
        bp.add_url_rule("/cover-image", view_func=guard(self.update_cover), methods=["PATCH"])
        return bp
