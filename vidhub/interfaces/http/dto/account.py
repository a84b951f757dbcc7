from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from vidhub.domain.users.entities import UserProfile


class ChangePasswordDTO(BaseModel):
    old_password: str = Field(min_length=1, max_length=128)
    new_password: str = Field(min_length=8, max_length=128)


class UpdateDetailsDTO(BaseModel):
    fullname: str = Field(min_length=1, max_length=128)
    email: str = Field(min_length=3, max_length=254)

    @field_validator("fullname", "email", mode="before")
    @classmethod
    def strip_text(cls, value: object) -> object:
        return value.strip() if isinstance(value, str) else value


class UserProfileDTO(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    fullname: str
    email: str
    username: str
    avatar_url: str
    cover_url: str | None = None
    created_at: datetime

    @classmethod
    def from_profile(cls, profile: UserProfile) -> UserProfileDTO:
        return cls.model_validate(profile)
