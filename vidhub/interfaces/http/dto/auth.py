from __future__ import annotations

import re

from pydantic import BaseModel, Field, field_validator, model_validator
from pydantic_core import PydanticCustomError

_USERNAME_PATTERN = r"^[a-zA-Z0-9_.]+$"
_EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"


class RegisterFormDTO(BaseModel):
    fullname: str = Field(min_length=1, max_length=128)
    email: str = Field(min_length=3, max_length=254)
    username: str = Field(min_length=3, max_length=64)
    password: str = Field(min_length=8, max_length=128)

    @field_validator("fullname", "email", "username", mode="before")
    @classmethod
    def strip_text(cls, value: object) -> object:
        return value.strip() if isinstance(value, str) else value

    @field_validator("username")
    @classmethod
    def validate_username(cls, value: str) -> str:
        if not re.match(_USERNAME_PATTERN, value):
            raise PydanticCustomError(
                "username_invalid_chars",
                "Username may contain only ASCII letters, digits, '_' and '.'",
                {"pattern": _USERNAME_PATTERN},
            )
        return value

    @field_validator("email")
    @classmethod
    def validate_email(cls, value: str) -> str:
        if not re.match(_EMAIL_PATTERN, value):
            raise PydanticCustomError("email_invalid", "Email address is malformed", {})
        return value


class LoginRequestDTO(BaseModel):
    email: str | None = Field(default=None, max_length=254)
    username: str | None = Field(default=None, max_length=64)
    password: str = Field(min_length=1, max_length=128)

    @model_validator(mode="after")
    def require_identity(self) -> LoginRequestDTO:
        if not (self.email or self.username):
            raise PydanticCustomError(
                "identity_missing", "Either email or username is required", {}
            )
        return self

    @property
    def identity(self) -> str:
        return (self.email or self.username or "").strip()


class RefreshRequestDTO(BaseModel):
    refresh_token: str | None = None


class AuthSuccessDTO(BaseModel):
    ok: bool = True
