"""Stakeholder directory schemas."""
from datetime import datetime
from typing import List, Optional
from pydantic import Field, field_validator
from catalog.core.constants import DEFAULT_DEPARTMENT
from catalog.schemas.base import CatalogModel


class StakeholderRole(CatalogModel):
    """Link between a directory stakeholder and an application."""
    id: int
    stakeholder_id: int
    application_id: int
    application_code: Optional[str] = None
    role: str
    created_at: datetime


class Stakeholder(CatalogModel):
    id: int
    name: str
    email: str
    department: str = DEFAULT_DEPARTMENT
    position: str = ""
    roles: List[StakeholderRole] = Field(default_factory=list)
    created_at: datetime


class StakeholderCreate(CatalogModel):
    name: str
    email: str
    department: str = DEFAULT_DEPARTMENT
    position: str = ""

    @field_validator("name", "email")
    @classmethod
    def require_text(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be empty")
        return value

    @field_validator("department", mode="before")
    @classmethod
    def default_department(cls, value):
        if value is None or (isinstance(value, str) and not value.strip()):
            return DEFAULT_DEPARTMENT
        return value

    @field_validator("position", mode="before")
    @classmethod
    def default_position(cls, value):
        return "" if value is None else value


class StakeholderUpdate(StakeholderCreate):
    pass


class StakeholderRoleCreate(CatalogModel):
    application_id: int
    role: str

    @field_validator("role")
    @classmethod
    def require_role(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("role must not be empty")
        return value


class DepartmentGroup(CatalogModel):
    department: str
    stakeholders: List[Stakeholder]


