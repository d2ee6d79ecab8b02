"""Stakeholder directory routes."""
from typing import List
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from catalog.core.database import get_db
from catalog.core.deps import get_current_user, require_admin
from catalog.models.user import User
from catalog.schemas.application import Application
from catalog.schemas.stakeholder import (
    DepartmentGroup,
    Stakeholder,
    StakeholderCreate,
    StakeholderRole,
    StakeholderRoleCreate,
    StakeholderUpdate,
)
from catalog.services.application_gateway import GatewayError
from catalog.services.stakeholder_service import StakeholderService

router = APIRouter()


def get_service(db: Session = Depends(get_db)) -> StakeholderService:
    return StakeholderService(db)


def service_unavailable(exc: GatewayError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc))


@router.get("/", response_model=List[Stakeholder])
def list_stakeholders(
    service: StakeholderService = Depends(get_service),
    current_user: User = Depends(get_current_user)
):
    """Get all stakeholders with their application roles."""
    try:
        return service.list_stakeholders()
    except GatewayError as exc:
        raise service_unavailable(exc)


@router.get("/by-department", response_model=List[DepartmentGroup])
def stakeholders_by_department(
    service: StakeholderService = Depends(get_service),
    current_user: User = Depends(get_current_user)
):
    """Stakeholders grouped by department, departments in name order."""
    try:
        groups = service.group_by_department()
    except GatewayError as exc:
        raise service_unavailable(exc)
    return [
        DepartmentGroup(department=department, stakeholders=groups[department])
        for department in sorted(groups)
    ]


@router.get("/{stakeholder_id}/applications", response_model=List[Application])
def stakeholder_applications(
    stakeholder_id: int,
    service: StakeholderService = Depends(get_service),
    current_user: User = Depends(get_current_user)
):
    """Applications that list this stakeholder by name in any role."""
    try:
        stakeholder = service.get_stakeholder(stakeholder_id)
        if stakeholder is None:
            raise HTTPException(status_code=404, detail="Stakeholder not found")
        return service.applications_for_stakeholder(stakeholder.name)
    except GatewayError as exc:
        raise service_unavailable(exc)


@router.post("/", response_model=Stakeholder, status_code=201)
def create_stakeholder(
    stakeholder_data: StakeholderCreate,
    service: StakeholderService = Depends(get_service),
    current_user: User = Depends(require_admin)
):
    """Create a new stakeholder (Admin only)."""
    try:
        return service.create_stakeholder(stakeholder_data)
    except GatewayError as exc:
        raise service_unavailable(exc)


@router.put("/{stakeholder_id}", response_model=Stakeholder)
def update_stakeholder(
    stakeholder_id: int,
    stakeholder_data: StakeholderUpdate,
    service: StakeholderService = Depends(get_service),
    current_user: User = Depends(require_admin)
):
    """Update a stakeholder (Admin only)."""
    try:
        stakeholder = service.update_stakeholder(stakeholder_id, stakeholder_data)
    except GatewayError as exc:
        raise service_unavailable(exc)
    if stakeholder is None:
        raise HTTPException(status_code=404, detail="Stakeholder not found")
    return stakeholder


@router.delete("/roles/{role_id}", status_code=204)
def remove_stakeholder_role(
    role_id: int,
    service: StakeholderService = Depends(get_service),
    current_user: User = Depends(require_admin)
):
    """Remove a stakeholder's role on an application (Admin only)."""
    try:
        removed = service.remove_role(role_id)
    except GatewayError as exc:
        raise service_unavailable(exc)
    if not removed:
        raise HTTPException(status_code=404, detail="Stakeholder role not found")
    return None


@router.delete("/{stakeholder_id}", status_code=204)
def delete_stakeholder(
    stakeholder_id: int,
    service: StakeholderService = Depends(get_service),
    current_user: User = Depends(require_admin)
):
    """Delete a stakeholder and their role assignments (Admin only)."""
    try:
        deleted = service.delete_stakeholder(stakeholder_id)
    except GatewayError as exc:
        raise service_unavailable(exc)
    if not deleted:
        raise HTTPException(status_code=404, detail="Stakeholder not found")
    return None


@router.post("/{stakeholder_id}/roles", response_model=StakeholderRole, status_code=201)
def add_stakeholder_role(
    stakeholder_id: int,
    role_data: StakeholderRoleCreate,
    service: StakeholderService = Depends(get_service),
    current_user: User = Depends(require_admin)
):
    """Assign a stakeholder to an application in a role (Admin only)."""
    try:
        assignment = service.add_role(stakeholder_id, role_data.application_id, role_data.role)
    except GatewayError as exc:
        raise service_unavailable(exc)
    if assignment is None:
        raise HTTPException(status_code=404, detail="Stakeholder or application not found")
    return assignment
