# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from .services.compensation import CompensationLog
from .services.tokens import TokenService
from .use_cases.users.session_controller import SessionController
from .use_cases.users.upload_saga import UploadSaga

__all__ = [
    "CompensationLog",
    "SessionController",
    "TokenService",
    "UploadSaga",
]
