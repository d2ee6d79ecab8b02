"""Stakeholder directory models."""
from datetime import datetime
from typing import List, Optional
from sqlalchemy import String, Integer, DateTime, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column, relationship
from catalog.core.time import utc_now
from catalog.models.base import Base


class Stakeholder(Base):
    """Person in the stakeholder directory."""
    __tablename__ = "stakeholders"

    stakeholder_id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    department: Mapped[Optional[str]] = mapped_column(
        String(100), nullable=True, default="General"
    )
    position: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, default=utc_now, nullable=False
    )

    roles: Mapped[List["StakeholderRoleAssignment"]] = relationship(
        "StakeholderRoleAssignment",
        back_populates="stakeholder",
        cascade="all, delete-orphan",
        order_by="StakeholderRoleAssignment.role_id"
    )


class StakeholderRoleAssignment(Base):
    """Free-text role a directory stakeholder plays on an application."""
    __tablename__ = "stakeholder_roles"

    role_id: Mapped[int] = mapped_column(Integer, primary_key=True)
    stakeholder_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("stakeholders.stakeholder_id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    application_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("applications.application_id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    role: Mapped[str] = mapped_column(String(100), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, default=utc_now, nullable=False
    )

    stakeholder: Mapped["Stakeholder"] = relationship(
        "Stakeholder", back_populates="roles"
    )
    application: Mapped["Application"] = relationship("Application")

    @property
    def application_code(self) -> Optional[str]:
        return self.application.app_code if self.application else None
