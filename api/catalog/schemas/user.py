"""User schemas."""
from datetime import datetime
from typing import Literal, Optional
from pydantic import BaseModel, EmailStr, field_validator
from catalog.schemas.base import CatalogModel

UserRoleLiteral = Literal["user", "admin"]


class User(CatalogModel):
    """Signed-in user as held by clients."""
    id: int
    name: str
    email: str
    role: UserRoleLiteral = "user"
    created_at: Optional[datetime] = None
    last_login: Optional[datetime] = None


class UserCreate(BaseModel):
    email: EmailStr
    password: str
    name: str
    role: UserRoleLiteral = "user"

    @field_validator("name")
    @classmethod
    def require_name(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("name must not be empty")
        return value

    @field_validator("password")
    @classmethod
    def require_password(cls, value: str) -> str:
        if len(value) < 6:
            raise ValueError("password must be at least 6 characters")
        return value


class ProfileUpdate(BaseModel):
    name: str

    @field_validator("name")
    @classmethod
    def require_name(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("name must not be empty")
        return value


class UserRoleUpdate(BaseModel):
    role: UserRoleLiteral


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class Token(BaseModel):
    access_token: str
    token_type: str
    user: User
