"""Stakeholder directory service."""
import logging
from typing import Dict, List, NoReturn, Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from catalog.core.constants import DEFAULT_DEPARTMENT
from catalog.models.application import Application as ApplicationRow, ApplicationStakeholder
from catalog.models.stakeholder import (
    Stakeholder as StakeholderRow,
    StakeholderRoleAssignment,
)
from catalog.schemas.application import Application
from catalog.schemas.stakeholder import (
    Stakeholder,
    StakeholderCreate,
    StakeholderRole,
    StakeholderUpdate,
)
from catalog.services.application_gateway import GatewayError, to_domain

logger = logging.getLogger(__name__)


def role_to_domain(row: StakeholderRoleAssignment) -> StakeholderRole:
    return StakeholderRole(
        id=row.role_id,
        stakeholder_id=row.stakeholder_id,
        application_id=row.application_id,
        application_code=row.application_code,
        role=row.role,
        created_at=row.created_at,
    )


def stakeholder_to_domain(row: StakeholderRow) -> Stakeholder:
    return Stakeholder(
        id=row.stakeholder_id,
        name=row.name,
        email=row.email,
        department=row.department or DEFAULT_DEPARTMENT,
        position=row.position or "",
        roles=[role_to_domain(r) for r in row.roles],
        created_at=row.created_at,
    )


class StakeholderService:
    """CRUD over the stakeholder directory and its application role links."""

    def __init__(self, db: Session):
        self.db = db

    def _fail(self, action: str, exc: Exception) -> NoReturn:
        self.db.rollback()
        logger.error("Error %s: %s", action, exc)
        raise GatewayError(f"Error {action}") from exc

    def _get_row(self, stakeholder_id: int) -> Optional[StakeholderRow]:
        return self.db.query(StakeholderRow).options(
            selectinload(StakeholderRow.roles).selectinload(StakeholderRoleAssignment.application)
        ).filter(StakeholderRow.stakeholder_id == stakeholder_id).first()

    def list_stakeholders(self) -> List[Stakeholder]:
        """All stakeholders ordered by name, each with its role assignments."""
        try:
            rows = self.db.query(StakeholderRow).options(
                selectinload(StakeholderRow.roles).selectinload(StakeholderRoleAssignment.application)
            ).order_by(StakeholderRow.name.asc(), StakeholderRow.stakeholder_id.asc()).all()
        except SQLAlchemyError as exc:
            self._fail("fetching stakeholders", exc)
        return [stakeholder_to_domain(row) for row in rows]

    def get_stakeholder(self, stakeholder_id: int) -> Optional[Stakeholder]:
        try:
            row = self._get_row(stakeholder_id)
        except SQLAlchemyError as exc:
            self._fail("fetching stakeholder", exc)
        return stakeholder_to_domain(row) if row else None

    def create_stakeholder(self, data: StakeholderCreate) -> Stakeholder:
        try:
            row = StakeholderRow(
                name=data.name,
                email=data.email,
                department=data.department,
                position=data.position,
            )
            self.db.add(row)
            self.db.commit()
            self.db.refresh(row)
        except SQLAlchemyError as exc:
            self._fail("creating stakeholder", exc)
        return stakeholder_to_domain(row)

    def update_stakeholder(self, stakeholder_id: int, data: StakeholderUpdate) -> Optional[Stakeholder]:
        """Replace the stakeholder's fields; returns it with refreshed roles."""
        try:
            row = self._get_row(stakeholder_id)
            if row is None:
                return None
            row.name = data.name
            row.email = data.email
            row.department = data.department
            row.position = data.position
            self.db.commit()
        except SQLAlchemyError as exc:
            self._fail("updating stakeholder", exc)
        return self.get_stakeholder(stakeholder_id)

    def delete_stakeholder(self, stakeholder_id: int) -> bool:
        try:
            row = self.db.query(StakeholderRow).filter(
                StakeholderRow.stakeholder_id == stakeholder_id
            ).first()
            if row is None:
                return False
            self.db.delete(row)
            self.db.commit()
        except SQLAlchemyError as exc:
            self._fail("deleting stakeholder", exc)
        return True

    def add_role(self, stakeholder_id: int, application_id: int, role: str) -> Optional[StakeholderRole]:
        """Link a stakeholder to an application. None if either does not exist."""
        try:
            stakeholder = self.db.get(StakeholderRow, stakeholder_id)
            application = self.db.get(ApplicationRow, application_id)
            if stakeholder is None or application is None:
                return None
            assignment = StakeholderRoleAssignment(
                stakeholder_id=stakeholder_id,
                application_id=application_id,
                role=role,
            )
            self.db.add(assignment)
            self.db.commit()
            self.db.refresh(assignment)
        except SQLAlchemyError as exc:
            self._fail("adding stakeholder role", exc)
        return role_to_domain(assignment)

    def remove_role(self, role_id: int) -> bool:
        try:
            assignment = self.db.get(StakeholderRoleAssignment, role_id)
            if assignment is None:
                return False
            self.db.delete(assignment)
            self.db.commit()
        except SQLAlchemyError as exc:
            self._fail("removing stakeholder role", exc)
        return True

    def group_by_department(self) -> Dict[str, List[Stakeholder]]:
        """Stakeholders keyed by department, in name order within each group."""
        departments: Dict[str, List[Stakeholder]] = {}
        for stakeholder in self.list_stakeholders():
            departments.setdefault(stakeholder.department or DEFAULT_DEPARTMENT, []).append(stakeholder)
        return departments

    def applications_for_stakeholder(self, name: str) -> List[Application]:
        """Applications whose stakeholder map names this person (exact match)."""
        try:
            rows = self.db.query(ApplicationRow).options(
                selectinload(ApplicationRow.stakeholders),
                selectinload(ApplicationRow.relationships),
            ).filter(
                ApplicationRow.application_id.in_(
                    select(ApplicationStakeholder.application_id).where(
                        ApplicationStakeholder.name == name
                    )
                )
            ).order_by(ApplicationRow.app_code).all()
        except SQLAlchemyError as exc:
            self._fail("fetching stakeholder applications", exc)
        return [to_domain(row) for row in rows]
