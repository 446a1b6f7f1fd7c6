"""
Users Module

Tenant-scoped user accounts and their assignments to positions.
"""

from datetime import date, datetime

from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy import (
    String,
    ForeignKey,
    Date,
    DateTime,
    Uuid,
    func,
    PrimaryKeyConstraint,
    UniqueConstraint,
    Index,
)
from database.engine import Base


class UserAccount(Base):
    """
    A user within a tenant. Email is unique per tenant, not globally.
    ``password`` holds the bcrypt hash, never the plaintext.
    """

    __tablename__: str = "user_account"
    id: Mapped[str] = mapped_column(Uuid(as_uuid=False), nullable=False)
    tenant_id: Mapped[str] = mapped_column(
        Uuid(as_uuid=False), ForeignKey("tenant.id", name="fk_user_account_tenant"), nullable=False
    )
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    password: Mapped[str] = mapped_column(String(255), nullable=False)
    totp_secret_key: Mapped[str] = mapped_column(String(64), nullable=False)
    last_login: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )

    __table_args__ = (
        PrimaryKeyConstraint("id", name="pk_user_account"),
        UniqueConstraint("tenant_id", "email", name="uq_user_account_tenant_email"),
    )


class PositionAssignment(Base):
    """Binds a user to a position over ``[start_date, end_date)``."""

    __tablename__: str = "position_assignment"
    tenant_id: Mapped[str] = mapped_column(
        Uuid(as_uuid=False), ForeignKey("tenant.id", name="fk_position_assignment_tenant"), nullable=False
    )
    position_id: Mapped[str] = mapped_column(
        Uuid(as_uuid=False), ForeignKey("position.id", name="fk_position_assignment_position"), nullable=False
    )
    user_account_id: Mapped[str] = mapped_column(
        Uuid(as_uuid=False),
        ForeignKey("user_account.id", name="fk_position_assignment_user_account"),
        nullable=False,
    )
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[date | None] = mapped_column(Date)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )

    __table_args__ = (
        PrimaryKeyConstraint(
            "tenant_id", "position_id", "user_account_id", "start_date",
            name="pk_position_assignment",
        ),
        Index("idx_position_assignment_user", "user_account_id"),
    )
