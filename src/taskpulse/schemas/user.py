"""Pydantic schemas for registration, login and user profiles.

Learn: JSON uses camelCase (workspaceName, jobTitle) while Python uses
snake_case. The alias generator maps between the two; populate_by_name
lets tests and services build models with either spelling.
"""

import uuid
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

Role = Literal["Admin", "Member"]


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


# ─── Requests ────────────────────────────────────────────

class RegisterRequest(CamelModel):
    email: str = Field(..., min_length=3, max_length=255)
    password: str = Field(..., min_length=8)
    name: str = Field(..., min_length=1, max_length=100)
    workspace_name: str = Field(..., max_length=100)
    job_title: Optional[str] = Field(None, max_length=100)
    role: Optional[Role] = None

    @field_validator("email")
    @classmethod
    def email_not_blank(cls, v: str) -> str:
        v = v.strip()
        if len(v) < 3:
            raise ValueError("email must be at least 3 characters")
        return v

    @field_validator("workspace_name")
    @classmethod
    def workspace_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("workspaceName must not be blank")
        return v


class LoginRequest(CamelModel):
    email: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class ProfileUpdate(CamelModel):
    """Only these two fields are editable after registration."""
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    job_title: Optional[str] = Field(None, min_length=1, max_length=100)


# ─── Responses ───────────────────────────────────────────

class UserRead(CamelModel):
    """Public profile — never includes the password hash."""
    id: uuid.UUID
    name: str
    email: str
    role: str
    workspace_name: str
    job_title: str


class UserSummary(CamelModel):
    """Workspace directory entry."""
    id: uuid.UUID
    name: str
    email: str
    role: str
    job_title: str


class AuthResponse(BaseModel):
    token: str
    user: UserRead
