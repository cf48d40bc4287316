import itertools
from collections.abc import Callable
from datetime import datetime, timedelta, timezone

import pytest
import pytest_asyncio

from opsboard.api.sources import MemorySource
from opsboard.core.exceptions import ApiError
from opsboard.core.session import MemorySessionStore, Session
from opsboard.models.item import CatalogItem
from opsboard.models.ticket import Ticket
from opsboard.models.user import Role, UserAccount
from opsboard.schemas.auth import SessionData, SessionUser

BASE_TIME = datetime(2025, 1, 6, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def ticket_factory() -> Callable[..., Ticket]:
    seq = itertools.count(1)

    def _make(**overrides) -> Ticket:
        idx = next(seq)
        payload = {
            "id": f"T-{idx:04d}",
            "customer": f"Customer {idx}",
            "created_at": BASE_TIME + timedelta(minutes=idx),
            "promised_mins": 15,
            "duration_mins": 12,
            "status": "COMPLETED",
            "items": 2,
            "revenue": 20.0,
        }
        payload.update(overrides)
        return Ticket(**payload)

    return _make


@pytest.fixture
def item_factory() -> Callable[..., CatalogItem]:
    seq = itertools.count(1)

    def _make(**overrides) -> CatalogItem:
        idx = next(seq)
        payload = {
            "id": f"itm_{idx:03d}",
            "name": f"Item {idx}",
            "category": "Entree",
            "price": 10.0,
            "cost": 4.0,
            "qty": 10,
            "active": True,
        }
        payload.update(overrides)
        return CatalogItem(**payload)

    return _make


@pytest.fixture
def user_factory() -> Callable[..., UserAccount]:
    seq = itertools.count(1)

    def _make(**overrides) -> UserAccount:
        idx = next(seq)
        payload = {
            "id": f"u_{idx}",
            "name": f"User {idx}",
            "email": f"user_{idx}@example.com",
            "role": "STAFF",
            "active": True,
            "created_at": BASE_TIME + timedelta(days=idx),
        }
        payload.update(overrides)
        return UserAccount(**payload)

    return _make


@pytest.fixture
def session_factory() -> Callable:
    async def _make(role: Role | None = Role.ADMIN, token: str = "test.token") -> Session:
        session = Session(MemorySessionStore())
        await session.initialize()
        if role is not None:
            await session.sign_in(SessionData(
                token=token,
                user=SessionUser(id="u_actor", email="actor@example.com", name="Actor", role=role),
            ))
        return session

    return _make


@pytest_asyncio.fixture
async def admin_session(session_factory) -> Session:
    return await session_factory(Role.ADMIN)


@pytest_asyncio.fixture
async def manager_session(session_factory) -> Session:
    return await session_factory(Role.MANAGER)


class RecordingSource(MemorySource):
    """MemorySource that counts calls and can be told to fail writes or reads."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.calls: list[str] = []
        self.fail_writes: ApiError | None = None
        self.fail_reads: ApiError | None = None

    async def list(self):
        self.calls.append("list")
        if self.fail_reads:
            raise self.fail_reads
        return await super().list()

    async def create(self, payload):
        self.calls.append("create")
        if self.fail_writes:
            raise self.fail_writes
        return await super().create(payload)

    async def update(self, entity_id, payload):
        self.calls.append("update")
        if self.fail_writes:
            raise self.fail_writes
        return await super().update(entity_id, payload)

    async def delete(self, entity_id):
        self.calls.append("delete")
        if self.fail_writes:
            raise self.fail_writes
        return await super().delete(entity_id)


@pytest.fixture
def recording_source() -> Callable[..., RecordingSource]:
    def _make(model, rows) -> RecordingSource:
        return RecordingSource(model, rows)

    return _make
