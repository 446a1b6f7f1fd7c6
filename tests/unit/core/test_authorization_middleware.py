"""
Tests for tenant-scoped authorization.

Tests:
- key_match2 path patterns
- Role lookup within a tenant
- Policy enforcement
- Cache reload and snapshot swap
- The require_authorization dependency
- Users acting only as themselves
"""

from unittest.mock import AsyncMock

import pytest
from fastapi import Depends, FastAPI
from fastapi.testclient import TestClient

from core.errors import UnauthorizedError
from core.middleware.authentication import AuthenticationMiddleware
from core.middleware.authorization import (
    PolicyCache,
    PolicySnapshot,
    key_match2,
    require_acting_user,
    require_authorization,
)
from core.middleware.error_handling import setup_error_handlers
from core.sessions import SessionData
from tests.constants import OTHER_USER_ID, TENANT_ID, USER_ID

OTHER_TENANT_ID = "7b3c5d7e-8f90-4a12-8b34-d5e6f708192a"

RULES = [
    ("p", "recruiter", TENANT_ID, "/api/tenants/{tenantId}/job-applications", "GET"),
    ("p", "recruiter", TENANT_ID, "/api/tenants/{tenantId}/users/*", "PUT"),
    ("p", "admin", "*", "*", "*"),
    ("g", USER_ID, "recruiter", TENANT_ID, ""),
]


class TestKeyMatch2:
    """Test path pattern matching."""

    @pytest.mark.parametrize("key,pattern,expected", [
        ("/api/tenants/t1/users", "/api/tenants/{tenantId}/users", True),
        ("/api/tenants/t1/users/u1", "/api/tenants/{tenantId}/users", False),
        ("/api/tenants/t1/users/u1/roles/r1", "/api/tenants/{tenantId}/users/*", True),
        ("/api/tenants/t1/x/users", "/api/tenants/{tenantId}/users", False),
        ("/anything/at/all", "*", True),
        ("t1", "t1", True),
        ("t1", "t2", False),
        ("/api/tenants/t1.users", "/api/tenants/t1.users", True),
        ("/api/tenants/t1xusers", "/api/tenants/t1.users", False),
    ])
    def test_match(self, key, pattern, expected):
        assert key_match2(key, pattern) is expected


class TestPolicySnapshot:
    """Test role lookup and enforcement."""

    @pytest.fixture
    def snapshot(self):
        return PolicySnapshot.from_rows(RULES)

    def test_from_rows(self, snapshot):
        assert len(snapshot.policies) == 3
        assert len(snapshot.assignments) == 1

    def test_unknown_ptype_ignored(self):
        snapshot = PolicySnapshot.from_rows([("x", "a", "b", "c", "d")])
        assert snapshot.policies == () and snapshot.assignments == ()

    def test_roles_are_tenant_scoped(self, snapshot):
        assert snapshot.roles_for(USER_ID, TENANT_ID) == {"recruiter"}
        assert snapshot.roles_for(USER_ID, OTHER_TENANT_ID) == set()

    def test_allowed(self, snapshot):
        assert snapshot.enforce(
            USER_ID, TENANT_ID, f"/api/tenants/{TENANT_ID}/job-applications", "GET"
        )

    def test_method_must_match(self, snapshot):
        assert not snapshot.enforce(
            USER_ID, TENANT_ID, f"/api/tenants/{TENANT_ID}/job-applications", "POST"
        )

    def test_other_tenant_denied(self, snapshot):
        assert not snapshot.enforce(
            USER_ID, OTHER_TENANT_ID, f"/api/tenants/{OTHER_TENANT_ID}/job-applications", "GET"
        )

    def test_user_without_roles_denied(self, snapshot):
        assert not snapshot.enforce(OTHER_USER_ID, TENANT_ID, "/anything", "GET")

    def test_wildcard_policy(self):
        snapshot = PolicySnapshot.from_rows(
            [("p", "admin", "*", "*", "*"), ("g", OTHER_USER_ID, "admin", "*", "")]
        )
        assert snapshot.enforce(OTHER_USER_ID, OTHER_TENANT_ID, "/api/tenants/x/policies", "POST")


class TestPolicyCache:
    """Test reloading the cache."""

    @pytest.mark.asyncio
    async def test_empty_until_loaded(self):
        cache = PolicyCache(AsyncMock(return_value=RULES))
        assert not cache.enforce(USER_ID, TENANT_ID, f"/api/tenants/{TENANT_ID}/job-applications", "GET")

        await cache.reload()

        assert cache.enforce(USER_ID, TENANT_ID, f"/api/tenants/{TENANT_ID}/job-applications", "GET")

    @pytest.mark.asyncio
    async def test_reload_swaps_snapshot(self):
        loader = AsyncMock(side_effect=[RULES, []])
        cache = PolicyCache(loader)

        first = await cache.reload()
        second = await cache.reload()

        assert first is not second
        assert cache.snapshot is second
        assert len(first.policies) == 3
        assert not cache.enforce(USER_ID, TENANT_ID, f"/api/tenants/{TENANT_ID}/job-applications", "GET")

    @pytest.mark.asyncio
    async def test_failed_reload_keeps_previous_snapshot(self):
        loader = AsyncMock(side_effect=[RULES, RuntimeError("database unavailable")])
        cache = PolicyCache(loader)
        snapshot = await cache.reload()

        with pytest.raises(RuntimeError):
            await cache.reload()

        assert cache.snapshot is snapshot


class TestRequireAuthorization:
    """Test the FastAPI dependency end to end."""

    @pytest.fixture
    def client(self, session_store, session_cookie):
        app = FastAPI()
        setup_error_handlers(app)
        app.add_middleware(AuthenticationMiddleware)
        app.state.session_store = session_store
        app.state.policy_cache = PolicyCache(AsyncMock())
        app.state.policy_cache._snapshot = PolicySnapshot.from_rows(RULES)

        @app.get("/api/tenants/{tenantId}/job-applications")
        async def list_applications(session: SessionData = Depends(require_authorization)):
            return {"user": session.user_id}

        client = TestClient(app)
        client.cookies.set("authenticated", session_cookie)
        return client

    def test_authorized(self, client):
        response = client.get(f"/api/tenants/{TENANT_ID}/job-applications")

        assert response.status_code == 200
        assert response.json() == {"user": USER_ID}

    def test_other_tenant_forbidden(self, client):
        response = client.get(f"/api/tenants/{OTHER_TENANT_ID}/job-applications")

        assert response.status_code == 403
        assert response.json() == {
            "code": UnauthorizedError.code,
            "message": "You are not authorised to perform this action",
        }

    def test_unauthenticated(self, client):
        client.cookies.clear()
        response = client.get(f"/api/tenants/{TENANT_ID}/job-applications")

        assert response.status_code == 401
        assert response.json()["code"] == "USER-UNAUTHENTICATED"


class TestRequireActingUser:
    """A grant on ``users/*`` does not let a user act as someone else."""

    @pytest.fixture
    def client(self, session_store, session_cookie):
        app = FastAPI()
        setup_error_handlers(app)
        app.add_middleware(AuthenticationMiddleware)
        app.state.session_store = session_store
        app.state.policy_cache = PolicyCache(AsyncMock())
        app.state.policy_cache._snapshot = PolicySnapshot.from_rows(RULES)

        @app.put("/api/tenants/{tenantId}/users/{userId}/decision")
        async def decide(session: SessionData = Depends(require_acting_user)):
            return {"user": session.user_id}

        client = TestClient(app)
        client.cookies.set("authenticated", session_cookie)
        return client

    def test_acting_as_self(self, client):
        response = client.put(f"/api/tenants/{TENANT_ID}/users/{USER_ID}/decision")

        assert response.status_code == 200
        assert response.json() == {"user": USER_ID}

    def test_acting_as_other_user_forbidden(self, client):
        response = client.put(f"/api/tenants/{TENANT_ID}/users/{OTHER_USER_ID}/decision")

        assert response.status_code == 403
        assert response.json()["code"] == UnauthorizedError.code

    def test_policy_still_required(self, client):
        response = client.put(f"/api/tenants/{OTHER_TENANT_ID}/users/{USER_ID}/decision")

        assert response.status_code == 403
