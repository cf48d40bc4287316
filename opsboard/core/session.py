"""
Opsboard: Session object

A Session is created once at startup and handed to every component that needs
the signed-in identity. Only initialize/sign_in/sign_out/set_user change it;
everything else reads.
"""
import logging
from typing import Protocol

import redis.asyncio as aioredis

from opsboard.core.config import Settings, get_settings
from opsboard.core.security import token_expired
from opsboard.models.user import Role
from opsboard.schemas.auth import SessionData, SessionUser

logger = logging.getLogger(__name__)

TOKEN_KEY = "analytics_token"
USER_KEY = "analytics_user"

_redis: aioredis.Redis | None = None


def get_redis(settings: Settings | None = None) -> aioredis.Redis:
    """Shared connection for RedisSessionStore, built on first use."""
    global _redis
    if _redis is None:
        settings = settings or get_settings()
        _redis = aioredis.from_url(
            settings.redis_url,
            decode_responses=True,
            socket_connect_timeout=settings.REDIS_CONNECT_TIMEOUT,
        )
    return _redis


async def close_redis() -> None:
    global _redis
    if _redis is not None:
        await _redis.aclose()
        _redis = None


class SessionStore(Protocol):
    async def load(self) -> tuple[str | None, SessionUser | None]: ...
    async def save(self, token: str, user: SessionUser) -> None: ...
    async def save_user(self, user: SessionUser) -> None: ...
    async def clear(self) -> None: ...


class MemorySessionStore:
    def __init__(self):
        self._token: str | None = None
        self._user: SessionUser | None = None

    async def load(self):
        return self._token, self._user

    async def save(self, token: str, user: SessionUser) -> None:
        self._token, self._user = token, user

    async def save_user(self, user: SessionUser) -> None:
        self._user = user

    async def clear(self) -> None:
        self._token, self._user = None, None


class RedisSessionStore:
    """Token as a plain string, user as JSON, under two fixed keys."""

    def __init__(self, redis: aioredis.Redis, token_key: str = TOKEN_KEY, user_key: str = USER_KEY):
        self._redis = redis
        self.token_key = token_key
        self.user_key = user_key

    async def load(self):
        token = await self._redis.get(self.token_key)
        raw = await self._redis.get(self.user_key)
        user = SessionUser.model_validate_json(raw) if raw else None
        return token, user

    async def save(self, token: str, user: SessionUser) -> None:
        await self._redis.set(self.token_key, token)
        await self.save_user(user)

    async def save_user(self, user: SessionUser) -> None:
        await self._redis.set(self.user_key, user.model_dump_json(by_alias=True))

    async def clear(self) -> None:
        await self._redis.delete(self.token_key, self.user_key)


class Session:
    def __init__(self, store: SessionStore | None = None):
        self._store = store or MemorySessionStore()
        self.loading = True
        self.token: str | None = None
        self.user: SessionUser | None = None

    async def initialize(self) -> None:
        self.loading = True
        self.token, self.user = await self._store.load()
        self.loading = False

    async def sign_in(self, data: SessionData) -> None:
        await self._store.save(data.token, data.user)
        self.token, self.user = data.token, data.user
        self.loading = False
        logger.info("Signed in as %s (%s)", data.user.email, data.user.role.value)

    async def sign_out(self) -> None:
        await self._store.clear()
        if self.user:
            logger.info("Signed out %s", self.user.email)
        self.token, self.user = None, None
        self.loading = False

    async def set_user(self, user: SessionUser) -> None:
        await self._store.save_user(user)
        self.user = user

    @property
    def role(self) -> Role | None:
        return self.user.role if self.user else None

    @property
    def is_authed(self) -> bool:
        return bool(self.token) and self.user is not None and not token_expired(self.token)
