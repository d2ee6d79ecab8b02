"""Sign-up, sign-in and user administration."""
import logging
from typing import Callable, Dict, List, NoReturn, Optional, Tuple

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from catalog.core.roles import RoleCode, normalize_role_code
from catalog.core.security import (
    create_access_token,
    decode_token,
    get_password_hash,
    verify_password,
)
from catalog.core.time import utc_now
from catalog.models.user import User as UserRow
from catalog.schemas.user import User, UserCreate
from catalog.services.application_gateway import GatewayError

logger = logging.getLogger(__name__)

AuthListener = Callable[[Optional[User]], None]


class AuthenticationError(Exception):
    """Wrong email or password."""


class EmailAlreadyRegisteredError(ValueError):
    pass


class AuthEvents:
    """Observers of sign-in / sign-out. Listeners receive the user or None."""

    def __init__(self):
        self._listeners: Dict[int, AuthListener] = {}
        self._next_id = 0

    def subscribe(self, listener: AuthListener) -> Callable[[], None]:
        listener_id = self._next_id
        self._next_id += 1
        self._listeners[listener_id] = listener

        def unsubscribe() -> None:
            self._listeners.pop(listener_id, None)

        return unsubscribe

    def emit(self, user: Optional[User]) -> None:
        for listener in list(self._listeners.values()):
            listener(user)


def user_to_domain(row: UserRow) -> User:
    return User(
        id=row.user_id,
        name=row.name,
        email=row.email,
        role=normalize_role_code(row.role) or RoleCode.USER.value,
        created_at=row.created_at,
        last_login=row.last_login,
    )


class AuthService:

    def __init__(self, db: Session, events: Optional[AuthEvents] = None):
        self.db = db
        self.events = events or AuthEvents()

    def _fail(self, action: str, exc: Exception) -> NoReturn:
        self.db.rollback()
        logger.error("Error %s: %s", action, exc)
        raise GatewayError(f"Error {action}") from exc

    def sign_up(self, data: UserCreate) -> User:
        try:
            existing = self.db.query(UserRow).filter(UserRow.email == data.email).first()
            if existing:
                raise EmailAlreadyRegisteredError("Email already registered")
            row = UserRow(
                email=data.email,
                name=data.name,
                password_hash=get_password_hash(data.password),
                role=data.role,
            )
            self.db.add(row)
            self.db.commit()
            self.db.refresh(row)
        except SQLAlchemyError as exc:
            self._fail("signing up", exc)
        return user_to_domain(row)

    def sign_in(self, email: str, password: str) -> Tuple[User, str]:
        """Verify credentials; returns the user and a bearer token."""
        row = self.db.query(UserRow).filter(UserRow.email == email).first()
        if not row or not verify_password(password, row.password_hash):
            raise AuthenticationError("Incorrect email or password")

        try:
            row.last_login = utc_now()
            self.db.commit()
            self.db.refresh(row)
        except SQLAlchemyError as exc:
            self._fail("signing in", exc)

        user = user_to_domain(row)
        self.events.emit(user)
        return user, create_access_token(data={"sub": row.email})

    def sign_out(self) -> None:
        # Tokens are stateless; signing out only tells observers
        self.events.emit(None)

    def get_current_user(self, token: str) -> Optional[User]:
        payload = decode_token(token)
        if not payload or not payload.get("sub"):
            return None
        row = self.db.query(UserRow).filter(UserRow.email == payload["sub"]).first()
        return user_to_domain(row) if row else None

    def update_profile(self, user_id: int, name: str) -> Optional[User]:
        try:
            row = self.db.get(UserRow, user_id)
            if row is None:
                return None
            row.name = name
            self.db.commit()
            self.db.refresh(row)
        except SQLAlchemyError as exc:
            self._fail("updating user profile", exc)
        return user_to_domain(row)

    def list_users(self) -> List[User]:
        """All users, newest first."""
        try:
            rows = self.db.query(UserRow).order_by(
                UserRow.created_at.desc(), UserRow.user_id.desc()
            ).all()
        except SQLAlchemyError as exc:
            self._fail("fetching users", exc)
        return [user_to_domain(row) for row in rows]

    def update_role(self, user_id: int, role: str) -> Optional[User]:
        role_code = normalize_role_code(role)
        if role_code is None:
            raise ValueError(f"Invalid role: {role}")
        try:
            row = self.db.get(UserRow, user_id)
            if row is None:
                return None
            row.role = role_code
            self.db.commit()
            self.db.refresh(row)
        except SQLAlchemyError as exc:
            self._fail("updating user role", exc)
        return user_to_domain(row)

    def delete_user(self, user_id: int) -> bool:
        try:
            row = self.db.get(UserRow, user_id)
            if row is None:
                return False
            self.db.delete(row)
            self.db.commit()
        except SQLAlchemyError as exc:
            self._fail("deleting user", exc)
        return True
