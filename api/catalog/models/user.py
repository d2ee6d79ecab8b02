"""User model."""
from datetime import datetime
from typing import Optional
from sqlalchemy import String, Integer, DateTime
from sqlalchemy.orm import Mapped, mapped_column
from catalog.core.roles import RoleCode
from catalog.core.time import utc_now
from catalog.models.base import Base


class User(Base):
    """Catalog user. Role "admin" gates every mutating operation."""
    __tablename__ = "users"

    user_id: Mapped[int] = mapped_column(Integer, primary_key=True)
    email: Mapped[str] = mapped_column(
        String(255), unique=True, nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    role: Mapped[str] = mapped_column(
        String(20), nullable=False, default=RoleCode.USER.value)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, default=utc_now, nullable=False)
    last_login: Mapped[Optional[datetime]] = mapped_column(
        DateTime, nullable=True)
