from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from models.user import ALL_PERMISSIONS, PERMISSION_CATALOGUE, ROLES
from schemas.base import CamelModel


def _check_role(v: Optional[str]) -> Optional[str]:
    if v is None:
        return v
    normalized = v.strip().lower()
    if normalized not in ROLES:
        raise ValueError(f"Invalid role. Use one of: {sorted(ROLES)}")
    return normalized


def _check_permissions(v: Optional[List[str]]) -> Optional[List[str]]:
    if v is None:
        return v
    allowed = set(PERMISSION_CATALOGUE) | {ALL_PERMISSIONS}
    unknown = [p for p in v if p not in allowed]
    if unknown:
        raise ValueError(f"Unknown permissions: {unknown}")
    # keep order, drop repeats
    return list(dict.fromkeys(v))


class UserCreate(CamelModel):
    username: str = Field(..., min_length=3)
    email: EmailStr
    password: str = Field(..., min_length=6)
    role: str = "user"
    permissions: List[str] = Field(default_factory=list)

    @field_validator("role")
    @classmethod
    def validate_role(cls, v: str) -> str:
        return _check_role(v)

    @field_validator("permissions")
    @classmethod
    def validate_permissions(cls, v: List[str]) -> List[str]:
        return _check_permissions(v)


class UserUpdate(CamelModel):
    username: Optional[str] = Field(None, min_length=3)
    email: Optional[EmailStr] = None
    password: Optional[str] = Field(None, min_length=6)
    role: Optional[str] = None
    permissions: Optional[List[str]] = None
    is_active: Optional[bool] = None

    @field_validator("role")
    @classmethod
    def validate_role(cls, v: Optional[str]) -> Optional[str]:
        return _check_role(v)

    @field_validator("permissions")
    @classmethod
    def validate_permissions(cls, v: Optional[List[str]]) -> Optional[List[str]]:
        return _check_permissions(v)


class UserResponse(CamelModel):
    id: str
    username: str
    email: EmailStr
    role: str
    permissions: List[str]
    is_active: bool
    created_at: datetime


class TokenResponse(BaseModel):
    """OAuth2 token payload; keeps the snake_case keys OAuth2 clients expect."""
    model_config = ConfigDict(from_attributes=True)

    access_token: str
    token_type: str = "bearer"
    user: UserResponse
