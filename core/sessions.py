"""
Redis-backed server-side sessions.

The cookie only carries a signed session id; the session data lives in
Redis so that logging out really invalidates it.

Usage:
    store = SessionStore()
    await store.init()
    session_id = await store.create(SessionData(user_id=..., tenant_id=..., email=...))
"""

import json
import logging
import secrets
from dataclasses import asdict, dataclass
from typing import Optional

from redis.asyncio import Redis, from_url

from core.config import settings

logger = logging.getLogger(__name__)

KEY_PREFIX = "session:"


@dataclass(frozen=True)
class SessionData:
    user_id: str
    tenant_id: str
    email: str


class SessionStore:
    def __init__(self, redis: Optional[Redis] = None, ttl: Optional[int] = None):
        self._redis = redis
        self.ttl = ttl or settings.session_max_age_seconds

    async def init(self):
        """Initialize Redis connection."""
        if not self._redis:
            self._redis = from_url(
                str(settings.redis_url),
                encoding="utf-8",
                decode_responses=True,
            )
            logger.info("Session store initialized")

    async def close(self):
        """Close Redis connection."""
        if self._redis:
            await self._redis.aclose()
            self._redis = None
            logger.info("Session store closed")

    @property
    def redis(self) -> Redis:
        if not self._redis:
            raise RuntimeError("Session store not initialized. Call init() first.")
        return self._redis

    @staticmethod
    def _key(session_id: str) -> str:
        return f"{KEY_PREFIX}{session_id}"

    async def create(self, data: SessionData) -> str:
        session_id = secrets.token_urlsafe(32)
        await self.redis.set(self._key(session_id), json.dumps(asdict(data)), ex=self.ttl)
        return session_id

    async def get(self, session_id: str) -> Optional[SessionData]:
        raw = await self.redis.get(self._key(session_id))
        if not raw:
            return None
        return SessionData(**json.loads(raw))

    async def delete(self, session_id: str) -> bool:
        """Returns False when the session had already expired or been deleted."""
        return bool(await self.redis.delete(self._key(session_id)))
