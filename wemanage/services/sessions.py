"""Server-side cookie sessions stored in Redis.

Only used during the Google login handshake. A session holds nothing but the
user id; the user row is looked up again on every request.
"""

import logging
import secrets

import redis

from wemanage.config import get_settings

logger = logging.getLogger(__name__)

SESSION_KEY_PREFIX = "session:"


class RedisSessionStore:
    """Opaque session id -> user id, with a TTL."""

    def __init__(self, client: redis.Redis, ttl_seconds: int) -> None:
        self.client = client
        self.ttl_seconds = ttl_seconds

    @staticmethod
    def _key(session_id: str) -> str:
        return f"{SESSION_KEY_PREFIX}{session_id}"

    def create(self, user_id: int) -> str:
        """Store a new session for ``user_id`` and return its id."""
        session_id = secrets.token_urlsafe(32)
        self.client.set(self._key(session_id), str(user_id), ex=self.ttl_seconds)
        return session_id

    def get_user_id(self, session_id: str) -> int | None:
        """Return the user id for a live session, or None."""
        raw = self.client.get(self._key(session_id))
        if raw is None:
            return None
        if isinstance(raw, bytes):
            raw = raw.decode()
        try:
            return int(raw)
        except ValueError:
            logger.warning("Discarding session with a corrupt payload")
            self.delete(session_id)
            return None

    def delete(self, session_id: str) -> None:
        self.client.delete(self._key(session_id))


# Shared Redis client, created on first use
_redis_client: redis.Redis | None = None


def get_redis() -> redis.Redis:
    """Get the Redis client used for sessions."""
    global _redis_client
    if _redis_client is None:
        _redis_client = redis.from_url(get_settings().redis_url)
    return _redis_client


def get_session_store() -> RedisSessionStore:
    """Get session store instance."""
    return RedisSessionStore(get_redis(), get_settings().session_ttl_seconds)
