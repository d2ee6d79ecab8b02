"""Application schemas."""
import re
from datetime import datetime
from typing import Dict, List, Optional
from pydantic import ConfigDict, Field, field_validator, model_validator
from catalog.core.constants import ApplicationStatus, StakeholderRoleKey, DEFAULT_STATUS
from catalog.schemas.base import CatalogModel

APP_CODE_PATTERN = re.compile(r"^[A-Z]{2}[0-9]$")
# Width of application_relationships.target_app_code
RELATED_CODE_MAX_LENGTH = 10


def normalize_app_code(value: str) -> str:
    """Upper-case and validate an app code (two letters + one digit)."""
    if not isinstance(value, str):
        raise ValueError("appCode must be a string")
    code = value.strip().upper()
    if not APP_CODE_PATTERN.match(code):
        raise ValueError("appCode must be two letters followed by one digit (e.g. HR1)")
    return code


class RelatedApps(CatalogModel):
    """App codes of related applications. Soft references only."""
    model_config = ConfigDict(frozen=True)

    functional: List[str] = Field(default_factory=list)
    technical: List[str] = Field(default_factory=list)

    @field_validator("functional", "technical", mode="before")
    @classmethod
    def normalize_codes(cls, value):
        if value is None:
            return []
        if not isinstance(value, list):
            raise ValueError("related app codes must be a list")
        codes = []
        for code in value:
            if not isinstance(code, str):
                raise ValueError("related app codes must be strings")
            code = code.strip().upper()
            if not code:
                continue
            if len(code) > RELATED_CODE_MAX_LENGTH:
                raise ValueError(
                    f"related app code {code!r} exceeds {RELATED_CODE_MAX_LENGTH} characters"
                )
            codes.append(code)
        return codes


class ApplicationStakeholders(CatalogModel):
    """Display names for the six fixed stakeholder roles. Empty means unassigned."""
    model_config = ConfigDict(frozen=True, extra="forbid")

    application_architect: str = ""
    product_owner: str = ""
    lead_developer: str = ""
    dev_ops_engineer: str = ""
    security_officer: str = ""
    governance_manager: str = ""

    @model_validator(mode="before")
    @classmethod
    def accept_role_list(cls, data):
        # Export files carry the map flattened to [{"role": ..., "name": ...}]
        if isinstance(data, list):
            mapped = {}
            for entry in data:
                if not isinstance(entry, dict) or "role" not in entry:
                    raise ValueError("stakeholder entries need a role")
                mapped[entry["role"]] = entry.get("name") or ""
            return mapped
        return data

    @field_validator("*", mode="before")
    @classmethod
    def none_to_empty(cls, value):
        return "" if value is None else value

    def by_role(self) -> Dict[str, str]:
        """Role key -> name, in the fixed role order."""
        return self.model_dump(by_alias=True)

    def get(self, role: StakeholderRoleKey) -> str:
        return self.by_role()[StakeholderRoleKey(role).value]

    def names(self) -> List[str]:
        return list(self.by_role().values())

    @classmethod
    def from_roles(cls, roles: Dict[str, str]) -> "ApplicationStakeholders":
        return cls.model_validate(roles)


class Application(CatalogModel):
    """A cataloged application as seen by clients."""
    model_config = ConfigDict(frozen=True)

    id: int
    app_code: str
    name: str
    description: str = ""
    functional_domains: List[str] = Field(default_factory=list)
    technical_stack: List[str] = Field(default_factory=list)
    status: ApplicationStatus = DEFAULT_STATUS
    related_apps: RelatedApps = Field(default_factory=RelatedApps)
    stakeholders: ApplicationStakeholders = Field(default_factory=ApplicationStakeholders)
    created_at: datetime
    updated_at: datetime

    @model_validator(mode="after")
    def check_timestamps(self):
        if self.updated_at < self.created_at:
            raise ValueError("updatedAt must not precede createdAt")
        return self


class ApplicationCreate(CatalogModel):
    """Payload for creating or replacing an application.

    ``related_apps`` and ``stakeholders`` left as None keep the stored
    rows on update; when given they replace them wholesale.
    """
    app_code: str
    name: str
    description: str = ""
    functional_domains: List[str] = Field(default_factory=list)
    technical_stack: List[str] = Field(default_factory=list)
    status: ApplicationStatus = DEFAULT_STATUS
    related_apps: Optional[RelatedApps] = None
    stakeholders: Optional[ApplicationStakeholders] = None

    @field_validator("app_code", mode="before")
    @classmethod
    def validate_app_code(cls, value):
        if value is None:
            raise ValueError("appCode is required")
        return normalize_app_code(value)

    @field_validator("name")
    @classmethod
    def validate_name(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("name must not be empty")
        return value

    @field_validator("description", mode="before")
    @classmethod
    def default_description(cls, value):
        return "" if value is None else value

    @field_validator("description")
    @classmethod
    def strip_description(cls, value: str) -> str:
        return value.strip()

    @field_validator("functional_domains", "technical_stack", mode="before")
    @classmethod
    def default_tags(cls, value):
        return [] if value is None else value

    @field_validator("status", mode="before")
    @classmethod
    def default_status(cls, value):
        return DEFAULT_STATUS if value in (None, "") else value


class ApplicationUpdate(ApplicationCreate):
    pass


class CatalogStats(CatalogModel):
    """Dashboard counts derived from the loaded catalog."""
    total_apps: int
    active_apps: int
    in_development: int
    deprecated: int
    total_domains: int
    total_tech_stack: int
    by_domain: Dict[str, int] = Field(default_factory=dict)
    by_status: Dict[str, int] = Field(default_factory=dict)


class NextAppCode(CatalogModel):
    app_code: str


class RelatedApplication(CatalogModel):
    """One related code, resolved against the catalog when possible."""
    app_code: str
    relationship_type: str
    application: Optional[Application] = None


class ReferenceData(CatalogModel):
    functional_domains: List[str]
    technical_stacks: List[str]
    statuses: List[str]
    stakeholder_roles: List[str]
    departments: List[str]
