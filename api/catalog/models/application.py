"""Application catalog models."""
from datetime import datetime
from typing import List, Optional
from sqlalchemy import String, Integer, Text, DateTime, ForeignKey, JSON
from sqlalchemy.orm import Mapped, mapped_column, relationship
from catalog.core.time import utc_now
from catalog.models.base import Base


class Application(Base):
    """Cataloged software system."""
    __tablename__ = "applications"

    application_id: Mapped[int] = mapped_column(Integer, primary_key=True)
    app_code: Mapped[str] = mapped_column(
        String(10), unique=True, nullable=False,
        comment="Two letters and one digit (e.g., HR1)"
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    functional_domains: Mapped[Optional[list]] = mapped_column(
        JSON, nullable=True,
        comment="Business capability tags"
    )
    technical_stack: Mapped[Optional[list]] = mapped_column(
        JSON, nullable=True,
        comment="Technology / platform tags"
    )
    status: Mapped[Optional[str]] = mapped_column(
        String(50), nullable=True, default="Under Development",
        comment="Active, Inactive, Deprecated, Under Development"
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime, default=utc_now, nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=utc_now, nullable=False
    )

    stakeholders: Mapped[List["ApplicationStakeholder"]] = relationship(
        "ApplicationStakeholder",
        back_populates="application",
        cascade="all, delete-orphan",
        order_by="ApplicationStakeholder.stakeholder_row_id"
    )
    relationships: Mapped[List["ApplicationRelationship"]] = relationship(
        "ApplicationRelationship",
        back_populates="source_application",
        cascade="all, delete-orphan",
        order_by="ApplicationRelationship.relationship_id"
    )


class ApplicationStakeholder(Base):
    """Named person filling one of the six fixed roles on an application."""
    __tablename__ = "application_stakeholders"

    stakeholder_row_id: Mapped[int] = mapped_column(Integer, primary_key=True)
    application_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("applications.application_id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    role: Mapped[str] = mapped_column(
        String(50), nullable=False,
        comment="Stakeholder map key (e.g., productOwner)"
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, default=utc_now, nullable=False
    )

    application: Mapped["Application"] = relationship(
        "Application", back_populates="stakeholders"
    )


class ApplicationRelationship(Base):
    """Soft reference from an application to another app code."""
    __tablename__ = "application_relationships"

    relationship_id: Mapped[int] = mapped_column(Integer, primary_key=True)
    source_app_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("applications.application_id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    target_app_code: Mapped[str] = mapped_column(
        String(10), nullable=False,
        comment="Not a foreign key; may name a code that does not exist"
    )
    relationship_type: Mapped[str] = mapped_column(
        String(20), nullable=False,
        comment="functional or technical"
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime, default=utc_now, nullable=False
    )

    source_application: Mapped["Application"] = relationship(
        "Application", back_populates="relationships"
    )
