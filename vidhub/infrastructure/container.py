# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from functools import cached_property

from vidhub.application.services.password_hashing import WerkzeugPasswordHasher
from vidhub.application.services.tokens import TokenService
from vidhub.application.use_cases.users.change_password import ChangePasswordUseCase
from vidhub.application.use_cases.users.current_user import GetCurrentUserUseCase
from vidhub.application.use_cases.users.replace_asset import ReplaceUserAssetUseCase
from vidhub.application.use_cases.users.session_controller import SessionController
from vidhub.application.use_cases.users.update_account import UpdateAccountDetailsUseCase
from vidhub.application.use_cases.users.upload_saga import UploadSaga
from vidhub.domain.assets.repositories import AssetStore, LocalStage
from vidhub.domain.users.repositories import CredentialStore
from vidhub.infrastructure.assets.cloudinary_store import CloudinaryAssetStore
from vidhub.infrastructure.repositories.users.sqlalchemy_user_repository import (
    SqlAlchemyCredentialStore,
)
from vidhub.infrastructure.storage import LocalStageDirectory
from vidhub.interfaces.http.controllers.account_controller import AccountController
from vidhub.interfaces.http.controllers.auth_controller import AuthController
from vidhub.shared.config import AppConfig, load_config


class Container:
    def __init__(self, config: AppConfig | None = None) -> None:
        self.config = config or load_config()

    @cached_property
    def password_hasher(self) -> WerkzeugPasswordHasher:
        return WerkzeugPasswordHasher()

    @cached_property
    def credential_store(self) -> CredentialStore:
        return SqlAlchemyCredentialStore()

    @cached_property
    def asset_store(self) -> AssetStore:
        assets = self.config.assets
        return CloudinaryAssetStore(
            cloud_name=assets.cloud_name,
            api_key=assets.api_key,
            api_secret=assets.api_secret,
            base_url=assets.base_url,
            folder=assets.folder,
            timeout=assets.timeout,
        )

    @cached_property
    def stage(self) -> LocalStage:
        return LocalStageDirectory(
            self.config.stage.directory, max_bytes=self.config.stage.max_upload_bytes
        )

    @cached_property
    def token_service(self) -> TokenService:
        tokens = self.config.tokens
        return TokenService(
            users=self.credential_store,
            access_secret=tokens.access_secret,
            refresh_secret=tokens.refresh_secret,
            access_ttl=tokens.access_ttl,
            refresh_ttl=tokens.refresh_ttl,
            algorithm=tokens.algorithm,
            issuer=tokens.issuer,
        )

    @cached_property
    def upload_saga(self) -> UploadSaga:
        return UploadSaga(
            users=self.credential_store,
            assets=self.asset_store,
            stage=self.stage,
            password_hasher=self.password_hasher,
            asset_timeout=self.config.assets.timeout,
        )

    @cached_property
    def session_controller(self) -> SessionController:
        return SessionController(
            users=self.credential_store,
            tokens=self.token_service,
            password_hasher=self.password_hasher,
        )

    # Account use cases

    @cached_property
    def current_user_use_case(self) -> GetCurrentUserUseCase:
        return GetCurrentUserUseCase(users=self.credential_store)

    @cached_property
    def change_password_use_case(self) -> ChangePasswordUseCase:
        return ChangePasswordUseCase(
            users=self.credential_store, password_hasher=self.password_hasher
        )

    @cached_property
    def update_account_use_case(self) -> UpdateAccountDetailsUseCase:
        return UpdateAccountDetailsUseCase(users=self.credential_store)

    @cached_property
    def replace_asset_use_case(self) -> ReplaceUserAssetUseCase:
        return ReplaceUserAssetUseCase(
            users=self.credential_store,
            assets=self.asset_store,
            stage=self.stage,
            asset_timeout=self.config.assets.timeout,
        )

    # Controllers

    @cached_property
    def auth_controller(self) -> AuthController:
        return AuthController(
            upload_saga=self.upload_saga,
            sessions=self.session_controller,
            current_user=self.current_user_use_case,
            stage=self.stage,
            tokens=self.token_service,
            users=self.credential_store,
        )

    @cached_property
    def account_controller(self) -> AccountController:
        return AccountController(
            current_user=self.current_user_use_case,
            change_password=self.change_password_use_case,
            update_details=self.update_account_use_case,
            replace_asset=self.replace_asset_use_case,
            stage=self.stage,
            tokens=self.token_service,
            users=self.credential_store,
        )


container = Container()
