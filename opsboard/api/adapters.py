"""
Opsboard: Auth / profile / overview adapters

HttpAdapter talks to the REST collaborator, MockAdapter answers locally.
Both expose the same coroutine methods; main.py picks one from settings.
"""
import asyncio
import logging
from typing import Any
from urllib.parse import quote

from pydantic import BaseModel, ValidationError

from opsboard.api.client import RestClient
from opsboard.api.fixtures import sample_overview
from opsboard.core.exceptions import ApiError
from opsboard.core.session import Session
from opsboard.models.user import Role
from opsboard.schemas.auth import (
    ChangePasswordRequest,
    LoginRequest,
    LoginResponse,
    ProfileUpdateRequest,
    SessionData,
    SessionUser,
)
from opsboard.schemas.overview import OverviewRange, OverviewResponse

logger = logging.getLogger(__name__)

MOCK_TOKEN = "mock.jwt.token"


def _parse(model: type[BaseModel], raw: Any, path: str):
    try:
        return model.model_validate(raw)
    except ValidationError as exc:
        logger.warning("Unexpected %s body: %s", path, exc)
        raise ApiError(f"Unexpected response from {path}: {exc.error_count()} invalid field(s)")


def _user_from(body, path: str = "/auth/me") -> SessionUser:
    # /auth/me answers {user}; some deployments answer the bare user
    raw = body.get("user", body) if isinstance(body, dict) else body
    return _parse(SessionUser, raw, path)


class HttpAdapter:
    def __init__(self, client: RestClient):
        self.client = client

    async def login(self, email: str, password: str) -> SessionData:
        # ── Step 1: exchange credentials for tokens ───────────────────────────
        payload = LoginRequest(email=email.strip(), password=password)
        body = await self.client.post("/auth/login", payload.to_wire())
        tokens = _parse(LoginResponse, body, "/auth/login")

        # ── Step 2: confirm identity and role with the fresh token ────────────
        me = await self.client.get("/auth/me", token_override=tokens.access_token)
        return SessionData(token=tokens.access_token, user=_user_from(me))

    async def me(self) -> SessionUser:
        return _user_from(await self.client.get("/auth/me"))

    async def update_me(self, name: str, email: str) -> SessionUser:
        payload = ProfileUpdateRequest(name=name, email=email)
        return _user_from(await self.client.put("/auth/me", payload.to_wire()))

    async def change_password(self, current_password: str, new_password: str) -> None:
        payload = ChangePasswordRequest(current_password=current_password, new_password=new_password)
        await self.client.put("/auth/password", payload.to_wire())

    async def get_overview(self, range_: OverviewRange) -> OverviewResponse:
        body = await self.client.get(f"/overview?range={quote(range_)}")
        return _parse(OverviewResponse, body, "/overview")


class MockAdapter:
    def __init__(self, session: Session, latency_ms: int = 0):
        self.session = session
        self.latency_ms = latency_ms

    async def _wait(self):
        if self.latency_ms:
            await asyncio.sleep(self.latency_ms / 1000.0)

    async def login(self, email: str, password: str) -> SessionData:
        await self._wait()
        lowered = email.strip().lower()
        role = Role.ADMIN if "admin" in lowered else Role.MANAGER
        return SessionData(
            token=MOCK_TOKEN,
            user=SessionUser(
                id="u_1",
                email=lowered,
                name="Admin User" if role == Role.ADMIN else "Manager User",
                role=role,
            ),
        )

    async def me(self) -> SessionUser:
        await self._wait()
        if self.session.user is None:
            raise ApiError("Not signed in.", status_code=401)
        return self.session.user.model_copy()

    async def update_me(self, name: str, email: str) -> SessionUser:
        current = await self.me()
        return current.model_copy(update={"name": name, "email": email})

    async def change_password(self, current_password: str, new_password: str) -> None:
        await self._wait()
        if self.session.user is None:
            raise ApiError("Not signed in.", status_code=401)

    async def get_overview(self, range_: OverviewRange) -> OverviewResponse:
        await self._wait()
        return sample_overview(range_)
