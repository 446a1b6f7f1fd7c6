"""Policy and role assignment service functions."""

import logging
from typing import Any, Dict, Optional, Sequence

from core.middleware.authorization import PolicyCache
from core.validation import raise_for_failures, validate_policies, validate_role_assignment
from database.storage import policies as policy_storage

logger = logging.getLogger(__name__)


async def create_policies(
    tenant_id: str,
    role: Optional[str],
    resources: Optional[Sequence[Dict[str, Any]]],
    policy_cache: PolicyCache,
) -> None:
    """
    Grant ``role`` every ``(path, method)`` in ``resources`` within the
    tenant. All rules are inserted together; the cache is reloaded before
    returning so the new grants apply to the next request.
    """
    raise_for_failures(validate_policies(tenant_id, role, resources))
    await policy_storage.create_policies(
        role, tenant_id, [(resource["path"], resource["method"]) for resource in resources]
    )
    logger.info("POLICIES-CREATED", extra={"role": role, "tenant_id": tenant_id})
    await policy_cache.reload()


async def create_role_assignment(
    tenant_id: str, user_id: str, role: str, policy_cache: PolicyCache
) -> None:
    raise_for_failures(validate_role_assignment(user_id, role, tenant_id))
    await policy_storage.create_role_assignment(user_id, role, tenant_id)
    logger.info(
        "ROLE-ASSIGNMENT-CREATED",
        extra={"user_id": user_id, "role": role, "tenant_id": tenant_id},
    )
    await policy_cache.reload()
