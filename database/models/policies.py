"""
Authorization rules in the casbin_rule layout.

``ptype = 'p'``: (role, tenant id, resource path pattern, method)
``ptype = 'g'``: (user id, role, tenant id)
"""

from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy import String, BigInteger, PrimaryKeyConstraint, UniqueConstraint
from database.engine import Base


class AuthorizationRule(Base):
    __tablename__: str = "casbin_rule"
    id: Mapped[int] = mapped_column(BigInteger, autoincrement=True, nullable=False)
    ptype: Mapped[str] = mapped_column(String(10), nullable=False)
    v0: Mapped[str] = mapped_column(String(255), nullable=False, server_default="")
    v1: Mapped[str] = mapped_column(String(255), nullable=False, server_default="")
    v2: Mapped[str] = mapped_column(String(255), nullable=False, server_default="")
    v3: Mapped[str] = mapped_column(String(255), nullable=False, server_default="")
    v4: Mapped[str] = mapped_column(String(255), nullable=False, server_default="")
    v5: Mapped[str] = mapped_column(String(255), nullable=False, server_default="")

    __table_args__ = (
        PrimaryKeyConstraint("id", name="pk_casbin_rule"),
        UniqueConstraint(
            "ptype", "v0", "v1", "v2", "v3", "v4", "v5",
            name="uq_casbin_rule",
            info={"attributes": ("rule",)},
        ),
    )
