"""Application data gateway.

Translates between catalog rows (application, per-role stakeholder rows
and relationship rows) and the ``Application`` schema clients work with.
Writes replace child rows wholesale inside one transaction. Any store
failure rolls the session back, is logged, and surfaces as
``GatewayError``; nothing is committed partially.
"""
import logging
from typing import Dict, Iterable, List, NoReturn, Optional, Set

from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from catalog.core.constants import RelationshipType, StakeholderRoleKey
from catalog.core.time import utc_now
from catalog.models.application import (
    Application as ApplicationRow,
    ApplicationRelationship,
    ApplicationStakeholder,
)
from catalog.schemas.application import (
    Application,
    ApplicationCreate,
    ApplicationStakeholders,
    ApplicationUpdate,
    RelatedApps,
)

logger = logging.getLogger(__name__)


class GatewayError(Exception):
    """The backing store rejected or failed an operation."""


class DuplicateAppCodeError(GatewayError):
    """Another application already uses the app code."""

    def __init__(self, app_code: str):
        super().__init__(f"Application code {app_code} is already in use")
        self.app_code = app_code


def stakeholders_from_rows(rows: Iterable[ApplicationStakeholder]) -> ApplicationStakeholders:
    """Group stakeholder rows by role into the fixed six-role map."""
    names: Dict[str, str] = {}
    for row in rows:
        try:
            role = StakeholderRoleKey(row.role)
        except ValueError:
            logger.warning(
                "Ignoring stakeholder row %s with unknown role %r",
                row.stakeholder_row_id, row.role
            )
            continue
        names[role.value] = row.name
    return ApplicationStakeholders.from_roles(names)


def related_apps_from_rows(rows: Iterable[ApplicationRelationship]) -> RelatedApps:
    functional: List[str] = []
    technical: List[str] = []
    for row in rows:
        if row.relationship_type == RelationshipType.FUNCTIONAL.value:
            functional.append(row.target_app_code)
        elif row.relationship_type == RelationshipType.TECHNICAL.value:
            technical.append(row.target_app_code)
    return RelatedApps(functional=functional, technical=technical)


def to_domain(row: ApplicationRow) -> Application:
    return Application(
        id=row.application_id,
        app_code=row.app_code,
        name=row.name,
        description=row.description or "",
        functional_domains=list(row.functional_domains or []),
        technical_stack=list(row.technical_stack or []),
        status=row.status or "Under Development",
        related_apps=related_apps_from_rows(row.relationships),
        stakeholders=stakeholders_from_rows(row.stakeholders),
        created_at=row.created_at,
        updated_at=max(row.updated_at, row.created_at),
    )


def stakeholder_rows(stakeholders: ApplicationStakeholders) -> List[ApplicationStakeholder]:
    """One row per role with a non-blank name."""
    return [
        ApplicationStakeholder(role=role, name=name.strip(), email="")
        for role, name in stakeholders.by_role().items()
        if name and name.strip()
    ]


def relationship_rows(related_apps: RelatedApps) -> List[ApplicationRelationship]:
    rows = [
        ApplicationRelationship(
            target_app_code=code,
            relationship_type=RelationshipType.FUNCTIONAL.value
        )
        for code in related_apps.functional
    ]
    rows.extend(
        ApplicationRelationship(
            target_app_code=code,
            relationship_type=RelationshipType.TECHNICAL.value
        )
        for code in related_apps.technical
    )
    return rows


class ApplicationGateway:
    """CRUD and search over the application tables for one database session."""

    def __init__(self, db: Session):
        self.db = db

    def _query(self):
        return self.db.query(ApplicationRow).options(
            selectinload(ApplicationRow.stakeholders),
            selectinload(ApplicationRow.relationships),
        )

    def _fail(self, action: str, exc: Exception) -> NoReturn:
        self.db.rollback()
        logger.error("Error %s: %s", action, exc)
        raise GatewayError(f"Error {action}") from exc

    def list_applications(self) -> List[Application]:
        """All applications, most recently updated first."""
        try:
            rows = self._query().order_by(
                ApplicationRow.updated_at.desc(),
                ApplicationRow.application_id.desc()
            ).all()
        except SQLAlchemyError as exc:
            self._fail("fetching applications", exc)
        return [to_domain(row) for row in rows]

    def get_application(self, application_id: int) -> Optional[Application]:
        try:
            row = self._query().filter(
                ApplicationRow.application_id == application_id
            ).first()
        except SQLAlchemyError as exc:
            self._fail("fetching application", exc)
        return to_domain(row) if row else None

    def get_by_codes(self, app_codes: Iterable[str]) -> Dict[str, Application]:
        """Applications keyed by app code; unknown codes are simply absent."""
        codes = {code.upper() for code in app_codes}
        if not codes:
            return {}
        try:
            rows = self._query().filter(ApplicationRow.app_code.in_(codes)).all()
        except SQLAlchemyError as exc:
            self._fail("fetching applications by code", exc)
        return {row.app_code: to_domain(row) for row in rows}

    def existing_app_codes(self) -> Set[str]:
        try:
            return {code for (code,) in self.db.query(ApplicationRow.app_code).all()}
        except SQLAlchemyError as exc:
            self._fail("fetching application codes", exc)

    def search_applications(self, query: str) -> List[Application]:
        """Case-insensitive substring match on name, description or app code.

        A blank query behaves exactly like ``list_applications``.
        """
        if not query.strip():
            return self.list_applications()

        try:
            rows = self._query().filter(
                or_(
                    ApplicationRow.name.icontains(query, autoescape=True),
                    ApplicationRow.description.icontains(query, autoescape=True),
                    ApplicationRow.app_code.icontains(query, autoescape=True),
                )
            ).order_by(
                ApplicationRow.updated_at.desc(),
                ApplicationRow.application_id.desc()
            ).all()
        except SQLAlchemyError as exc:
            self._fail("searching applications", exc)
        return [to_domain(row) for row in rows]

    def _check_code_available(self, app_code: str, exclude_id: Optional[int] = None) -> None:
        query = self.db.query(ApplicationRow.application_id).filter(
            ApplicationRow.app_code == app_code
        )
        if exclude_id is not None:
            query = query.filter(ApplicationRow.application_id != exclude_id)
        if query.first() is not None:
            logger.error("Error saving application: app code %s already in use", app_code)
            raise DuplicateAppCodeError(app_code)

    def create_application(self, data: ApplicationCreate) -> Application:
        """Insert the application row, then its stakeholder and relationship rows."""
        try:
            self._check_code_available(data.app_code)
            now = utc_now()
            row = ApplicationRow(
                app_code=data.app_code,
                name=data.name,
                description=data.description,
                functional_domains=list(data.functional_domains),
                technical_stack=list(data.technical_stack),
                status=data.status,
                created_at=now,
                updated_at=now,
            )
            row.stakeholders = stakeholder_rows(data.stakeholders or ApplicationStakeholders())
            row.relationships = relationship_rows(data.related_apps or RelatedApps())
            self.db.add(row)
            self.db.commit()
        except DuplicateAppCodeError:
            self.db.rollback()
            raise
        except IntegrityError as exc:
            self.db.rollback()
            logger.error("Error creating application %s: %s", data.app_code, exc)
            raise DuplicateAppCodeError(data.app_code) from exc
        except SQLAlchemyError as exc:
            self._fail("creating application", exc)

        return self.get_application(row.application_id)

    def update_application(self, application_id: int, data: ApplicationUpdate) -> Optional[Application]:
        """Rewrite the row; replace child rows that were supplied. None if not found."""
        try:
            row = self.db.query(ApplicationRow).filter(
                ApplicationRow.application_id == application_id
            ).first()
            if row is None:
                return None

            self._check_code_available(data.app_code, exclude_id=application_id)
            row.app_code = data.app_code
            row.name = data.name
            row.description = data.description
            row.functional_domains = list(data.functional_domains)
            row.technical_stack = list(data.technical_stack)
            row.status = data.status
            row.updated_at = max(utc_now(), row.created_at)

            if data.stakeholders is not None:
                row.stakeholders = stakeholder_rows(data.stakeholders)
            if data.related_apps is not None:
                row.relationships = relationship_rows(data.related_apps)

            self.db.commit()
        except DuplicateAppCodeError:
            self.db.rollback()
            raise
        except IntegrityError as exc:
            self.db.rollback()
            logger.error("Error updating application %s: %s", application_id, exc)
            raise DuplicateAppCodeError(data.app_code) from exc
        except SQLAlchemyError as exc:
            self._fail("updating application", exc)

        return self.get_application(application_id)

    def delete_application(self, application_id: int) -> bool:
        """Remove the application; child rows go with it. False if not found."""
        try:
            row = self.db.query(ApplicationRow).filter(
                ApplicationRow.application_id == application_id
            ).first()
            if row is None:
                return False
            self.db.delete(row)
            self.db.commit()
        except SQLAlchemyError as exc:
            self._fail("deleting application", exc)
        return True
