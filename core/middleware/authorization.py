"""
Authorization for tenant-scoped routes.

Rules live in the ``casbin_rule`` table:
- ``p`` rows grant a role, within a tenant, a ``(path pattern, method)``
- ``g`` rows assign a role to a user within a tenant

The ``PolicyCache`` keeps an immutable snapshot of those rules in memory.
Every write to the rules awaits ``PolicyCache.reload()``, which builds a
fresh snapshot and swaps a single reference, so an enforcement never sees a
half-loaded rule set.
"""

import asyncio
import logging
import re
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Awaitable, Callable, Iterable, Optional, Sequence

from fastapi import Depends, Request

from core.errors import UnauthorizedError
from core.middleware.authentication import require_authenticated_user
from core.sessions import SessionData

logger = logging.getLogger(__name__)

RuleRow = Sequence[str]
RuleLoader = Callable[[], Awaitable[list[RuleRow]]]


@lru_cache(maxsize=1024)
def _compile_key_pattern(pattern: str) -> re.Pattern:
    expression = re.escape(pattern)
    expression = expression.replace(r"\*", ".*")
    expression = re.sub(r"\\\{[^/]+?\\\}", "[^/]+", expression)
    return re.compile(f"^{expression}$")


def key_match2(key: str, pattern: str) -> bool:
    """
    Match a request path against a pattern where ``{name}`` matches exactly
    one path segment and ``*`` matches anything.

    ``/api/tenants/t1/users/u1`` matches ``/api/tenants/{tenantId}/users/*``.
    """
    return bool(_compile_key_pattern(pattern).match(key))


@dataclass(frozen=True)
class Policy:
    role: str
    tenant: str
    path: str
    method: str


@dataclass(frozen=True)
class RoleAssignment:
    user_id: str
    role: str
    tenant: str


@dataclass(frozen=True)
class PolicySnapshot:
    policies: tuple[Policy, ...] = ()
    assignments: tuple[RoleAssignment, ...] = ()

    @classmethod
    def from_rows(cls, rows: Iterable[RuleRow]) -> "PolicySnapshot":
        policies: list[Policy] = []
        assignments: list[RoleAssignment] = []
        for ptype, v0, v1, v2, v3 in rows:
            if ptype == "p":
                policies.append(Policy(role=v0, tenant=v1, path=v2, method=v3))
            elif ptype == "g":
                assignments.append(RoleAssignment(user_id=v0, role=v1, tenant=v2))
            else:
                logger.warning(f"Ignoring authorization rule with unknown ptype {ptype!r}")
        return cls(policies=tuple(policies), assignments=tuple(assignments))

    def roles_for(self, user_id: str, tenant_id: str) -> set[str]:
        return {
            assignment.role
            for assignment in self.assignments
            if assignment.user_id == user_id and key_match2(tenant_id, assignment.tenant)
        }

    def enforce(self, user_id: str, tenant_id: str, path: str, method: str) -> bool:
        roles = self.roles_for(user_id, tenant_id)
        if not roles:
            return False
        method = method.upper()
        return any(
            policy.role in roles
            and key_match2(tenant_id, policy.tenant)
            and key_match2(path, policy.path)
            and (policy.method == "*" or policy.method.upper() == method)
            for policy in self.policies
        )


@dataclass
class PolicyCache:
    """
    In-process authorization oracle.

    Usage:
        cache = PolicyCache(load_authorization_rules)
        await cache.reload()
        cache.enforce(user_id, tenant_id, path, method)
    """

    loader: RuleLoader
    _snapshot: PolicySnapshot = field(default_factory=PolicySnapshot)
    _lock: asyncio.Lock = field(default_factory=asyncio.Lock)

    @property
    def snapshot(self) -> PolicySnapshot:
        return self._snapshot

    async def reload(self) -> PolicySnapshot:
        async with self._lock:
            rows = await self.loader()
            snapshot = PolicySnapshot.from_rows(rows)
            self._snapshot = snapshot
        logger.info(
            "AUTHORIZATION-ENFORCER-RELOADED",
            extra={
                "policies": len(snapshot.policies),
                "role_assignments": len(snapshot.assignments),
            },
        )
        return snapshot

    def enforce(self, user_id: str, tenant_id: str, path: str, method: str) -> bool:
        return self._snapshot.enforce(user_id, tenant_id, path, method)


def get_policy_cache(request: Request) -> PolicyCache:
    return request.app.state.policy_cache


async def require_authorization(
    request: Request,
    session: SessionData = Depends(require_authenticated_user),
    policy_cache: PolicyCache = Depends(get_policy_cache),
) -> SessionData:
    """
    Dependency granting access when the session's user holds a role, in the
    path's tenant, whose policy covers the request path and method.
    """
    tenant_id: Optional[str] = request.path_params.get("tenantId")
    path = request.url.path
    method = request.method

    if not tenant_id or not policy_cache.enforce(session.user_id, tenant_id, path, method):
        logger.warning(
            "USER-UNAUTHORISED",
            extra={"user_id": session.user_id, "tenant_id": tenant_id, "path": path, "method": method},
        )
        raise UnauthorizedError()

    logger.info("USER-AUTHORISED", extra={"user_id": session.user_id, "tenant_id": tenant_id})
    return session


async def require_acting_user(
    request: Request,
    session: SessionData = Depends(require_authorization),
) -> SessionData:
    """
    Dependency for routes whose ``userId`` is the actor, such as a
    supervisor deciding on a requisition. Users only ever act as themselves.
    """
    user_id: Optional[str] = request.path_params.get("userId")
    if user_id != session.user_id:
        logger.warning(
            "USER-UNAUTHORISED",
            extra={"user_id": session.user_id, "path_user_id": user_id, "path": request.url.path},
        )
        raise UnauthorizedError()
    return session
