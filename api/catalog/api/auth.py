"""Authentication and user administration routes."""
import logging
from typing import List
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from catalog.core.database import get_db
from catalog.core.deps import get_current_user, require_admin
from catalog.models.user import User
from catalog.schemas.user import (
    LoginRequest,
    ProfileUpdate,
    Token,
    User as UserResponse,
    UserCreate,
    UserRoleUpdate,
)
from catalog.services.application_gateway import GatewayError
from catalog.services.auth_service import (
    AuthenticationError,
    AuthService,
    EmailAlreadyRegisteredError,
    user_to_domain,
)

logger = logging.getLogger(__name__)

router = APIRouter()


def get_auth_service(db: Session = Depends(get_db)) -> AuthService:
    return AuthService(db)


def service_unavailable(exc: GatewayError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc))


@router.post("/register", response_model=UserResponse, status_code=201)
def register(
    user_data: UserCreate,
    service: AuthService = Depends(get_auth_service)
):
    """Sign up. Self-registered accounts always get the user role."""
    try:
        return service.sign_up(user_data.model_copy(update={"role": "user"}))
    except EmailAlreadyRegisteredError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
    except GatewayError as exc:
        raise service_unavailable(exc)


@router.post("/login", response_model=Token)
def login(login_data: LoginRequest, service: AuthService = Depends(get_auth_service)):
    """Login endpoint."""
    try:
        user, access_token = service.sign_in(login_data.email, login_data.password)
    except AuthenticationError as exc:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=str(exc)
        )
    except GatewayError as exc:
        raise service_unavailable(exc)
    logger.info("User %s signed in", user.email)
    return Token(access_token=access_token, token_type="bearer", user=user)


@router.post("/logout", status_code=204)
def logout(
    service: AuthService = Depends(get_auth_service),
    current_user: User = Depends(get_current_user)
):
    """Tokens are stateless; the client discards its copy."""
    service.sign_out()
    return None


@router.get("/me", response_model=UserResponse)
def get_me(current_user: User = Depends(get_current_user)):
    """Get current user."""
    return user_to_domain(current_user)


@router.patch("/me", response_model=UserResponse)
def update_me(
    profile: ProfileUpdate,
    service: AuthService = Depends(get_auth_service),
    current_user: User = Depends(get_current_user)
):
    try:
        user = service.update_profile(current_user.user_id, profile.name)
    except GatewayError as exc:
        raise service_unavailable(exc)
    if user is None:
        raise HTTPException(status_code=404, detail="User not found")
    return user


@router.get("/users", response_model=List[UserResponse])
def list_users(
    service: AuthService = Depends(get_auth_service),
    current_user: User = Depends(require_admin)
):
    """List all users, newest first (Admin only)."""
    try:
        return service.list_users()
    except GatewayError as exc:
        raise service_unavailable(exc)


@router.patch("/users/{user_id}/role", response_model=UserResponse)
def update_user_role(
    user_id: int,
    role_data: UserRoleUpdate,
    service: AuthService = Depends(get_auth_service),
    current_user: User = Depends(require_admin)
):
    """Change a user's role (Admin only)."""
    try:
        user = service.update_role(user_id, role_data.role)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
    except GatewayError as exc:
        raise service_unavailable(exc)
    if user is None:
        raise HTTPException(status_code=404, detail="User not found")
    return user


@router.delete("/users/{user_id}", status_code=204)
def delete_user(
    user_id: int,
    service: AuthService = Depends(get_auth_service),
    current_user: User = Depends(require_admin)
):
    """Delete a user (Admin only). Admins cannot delete themselves."""
    if user_id == current_user.user_id:
        raise HTTPException(status_code=400, detail="Cannot delete your own account")
    try:
        deleted = service.delete_user(user_id)
    except GatewayError as exc:
        raise service_unavailable(exc)
    if not deleted:
        raise HTTPException(status_code=404, detail="User not found")
    return None
