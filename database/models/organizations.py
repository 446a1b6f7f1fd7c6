"""
Organization Module

Tenants and their org units: divisions, departments and positions, plus the
reports-to relation between positions.
"""

from datetime import datetime

from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy import (
    String,
    ForeignKey,
    DateTime,
    Uuid,
    func,
    PrimaryKeyConstraint,
    UniqueConstraint,
    CheckConstraint,
    Index,
)
from database.engine import Base


class Tenant(Base):
    """An organization using the platform. All other data hangs off a tenant."""

    __tablename__: str = "tenant"
    id: Mapped[str] = mapped_column(Uuid(as_uuid=False), nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )

    __table_args__ = (
        PrimaryKeyConstraint("id", name="pk_tenant"),
        UniqueConstraint("name", name="uq_tenant_name"),
    )


class Division(Base):
    __tablename__: str = "division"
    id: Mapped[str] = mapped_column(Uuid(as_uuid=False), nullable=False)
    tenant_id: Mapped[str] = mapped_column(
        Uuid(as_uuid=False), ForeignKey("tenant.id", name="fk_division_tenant"), nullable=False
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )

    __table_args__ = (
        PrimaryKeyConstraint("id", name="pk_division"),
        UniqueConstraint("tenant_id", "name", name="uq_division_tenant_name"),
    )


class Department(Base):
    __tablename__: str = "department"
    id: Mapped[str] = mapped_column(Uuid(as_uuid=False), nullable=False)
    tenant_id: Mapped[str] = mapped_column(
        Uuid(as_uuid=False), ForeignKey("tenant.id", name="fk_department_tenant"), nullable=False
    )
    division_id: Mapped[str] = mapped_column(
        Uuid(as_uuid=False), ForeignKey("division.id", name="fk_department_division"), nullable=False
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )

    __table_args__ = (
        PrimaryKeyConstraint("id", name="pk_department"),
        UniqueConstraint("division_id", "name", name="uq_department_division_name"),
    )


class Position(Base):
    __tablename__: str = "position"
    id: Mapped[str] = mapped_column(Uuid(as_uuid=False), nullable=False)
    tenant_id: Mapped[str] = mapped_column(
        Uuid(as_uuid=False), ForeignKey("tenant.id", name="fk_position_tenant"), nullable=False
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    department_id: Mapped[str] = mapped_column(
        Uuid(as_uuid=False), ForeignKey("department.id", name="fk_position_department"), nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )

    __table_args__ = (
        PrimaryKeyConstraint("id", name="pk_position"),
        UniqueConstraint("title", "department_id", name="uq_position_title_department"),
        Index("idx_position_tenant", "tenant_id"),
    )


class SubordinateSupervisorRelationship(Base):
    """Directed reports-to edge between two positions."""

    __tablename__: str = "subordinate_supervisor_relationship"
    tenant_id: Mapped[str] = mapped_column(
        Uuid(as_uuid=False),
        ForeignKey("tenant.id", name="fk_subordinate_supervisor_relationship_tenant"),
        nullable=False,
    )
    subordinate_position_id: Mapped[str] = mapped_column(
        Uuid(as_uuid=False),
        ForeignKey("position.id", name="fk_subordinate_supervisor_relationship_subordinate"),
        nullable=False,
    )
    supervisor_position_id: Mapped[str] = mapped_column(
        Uuid(as_uuid=False),
        ForeignKey("position.id", name="fk_subordinate_supervisor_relationship_supervisor"),
        nullable=False,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )

    __table_args__ = (
        PrimaryKeyConstraint(
            "subordinate_position_id",
            "supervisor_position_id",
            name="pk_subordinate_supervisor_relationship",
        ),
        CheckConstraint(
            "subordinate_position_id <> supervisor_position_id",
            name="ck_subordinate_supervisor_not_equal",
        ),
    )
