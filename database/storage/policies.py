"""Authorization policies and role assignments (casbin_rule rows)."""

import logging
from typing import Sequence

from sqlalchemy import insert, select

from database.engine import db_engine
from database.errors import translate_errors
from database.models import AuthorizationRule

logger = logging.getLogger(__name__)

POLICY = "p"
ROLE_ASSIGNMENT = "g"


async def create_policies(
    role: str, tenant_id: str, resources: Sequence[tuple[str, str]]
) -> None:
    """Insert one ``p`` rule per ``(path, method)`` in a single statement."""
    rows = [
        {"ptype": POLICY, "v0": role, "v1": tenant_id, "v2": path, "v3": method}
        for path, method in resources
    ]
    with translate_errors("policy"):
        async with db_engine.begin() as conn:
            await conn.execute(insert(AuthorizationRule).values(rows))


async def create_role_assignment(user_id: str, role: str, tenant_id: str) -> None:
    with translate_errors("role assignment"):
        async with db_engine.begin() as conn:
            await conn.execute(
                insert(AuthorizationRule).values(
                    ptype=ROLE_ASSIGNMENT, v0=user_id, v1=role, v2=tenant_id
                )
            )


async def load_authorization_rules() -> list[tuple[str, str, str, str, str]]:
    """Every rule as ``(ptype, v0, v1, v2, v3)``, for the policy cache."""
    with translate_errors("policy"):
        async with db_engine.connect() as conn:
            result = await conn.execute(
                select(
                    AuthorizationRule.ptype,
                    AuthorizationRule.v0,
                    AuthorizationRule.v1,
                    AuthorizationRule.v2,
                    AuthorizationRule.v3,
                ).order_by(AuthorizationRule.id)
            )
            return [tuple(row) for row in result.all()]
