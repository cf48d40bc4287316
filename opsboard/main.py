"""
Opsboard: Composition root

Builds one Dashboard from settings. DATA_SOURCE picks the mock fixtures or the
REST collaborator once, at startup; every screen controller receives the same
injected Session.
"""
import logging
from contextlib import asynccontextmanager

import httpx

from opsboard.api.adapters import HttpAdapter, MockAdapter
from opsboard.api.client import RestClient
from opsboard.api.fixtures import sample_items, sample_tickets, sample_users
from opsboard.api.sources import HttpSource, MemorySource
from opsboard.core.config import Settings, get_settings
from opsboard.core.exceptions import DomainValidationError
from opsboard.core.permissions import Action, authorize
from opsboard.core.session import MemorySessionStore, RedisSessionStore, Session, close_redis, get_redis
from opsboard.models.item import CatalogItem
from opsboard.models.ticket import Ticket
from opsboard.models.user import UserAccount
from opsboard.schemas.overview import OverviewRange, OverviewResponse
from opsboard.services.items import ItemCatalog
from opsboard.services.notes import ShiftNoteBook
from opsboard.services.profile import ProfileService
from opsboard.services.tickets import TicketBoard
from opsboard.services.users import UserDirectory

logger = logging.getLogger(__name__)


def configure_logging(settings: Settings) -> None:
    logging.basicConfig(
        level=logging.DEBUG if settings.DEBUG else settings.LOG_LEVEL.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


class Dashboard:
    def __init__(self, settings: Settings, session: Session, adapter, client: RestClient | None,
                 items: ItemCatalog, users: UserDirectory, tickets: TicketBoard):
        self.settings = settings
        self.session = session
        self.adapter = adapter
        self.client = client
        self.items = items
        self.users = users
        self.tickets = tickets
        self.notes = ShiftNoteBook()
        self.profile = ProfileService(adapter, session)

    async def start(self) -> None:
        await self.session.initialize()

    async def sign_in(self, email: str, password: str):
        if not (email or "").strip() or not password:
            raise DomainValidationError("Enter your email and password.")
        data = await self.adapter.login(email.strip(), password)
        await self.session.sign_in(data)
        return data.user

    async def sign_out(self) -> None:
        await self.session.sign_out()

    async def overview(self, range_: OverviewRange = "7d") -> OverviewResponse:
        return await self.adapter.get_overview(range_)

    def can(self, action: Action, target_role=None) -> bool:
        return authorize(self.session.role, action, target_role)

    async def aclose(self) -> None:
        if self.client is not None:
            await self.client.aclose()
        if self.settings.SESSION_BACKEND == "redis":
            await close_redis()


def create_dashboard(
    settings: Settings | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> Dashboard:
    settings = settings or get_settings()

    if settings.SESSION_BACKEND == "redis":
        store = RedisSessionStore(get_redis(settings), settings.SESSION_TOKEN_KEY, settings.SESSION_USER_KEY)
    else:
        store = MemorySessionStore()
    session = Session(store)

    if settings.DATA_SOURCE == "http":
        client = RestClient(
            session,
            base_url=settings.API_BASE,
            timeout=settings.HTTP_TIMEOUT_SECONDS,
            transport=transport,
        )
        adapter = HttpAdapter(client)
        item_source = HttpSource(client, "/items", CatalogItem)
        user_source = HttpSource(client, "/users", UserAccount)
        ticket_source = HttpSource(client, "/tickets", Ticket)
    else:
        client = None
        latency = settings.MOCK_LATENCY_MS
        adapter = MockAdapter(session, latency_ms=latency)
        item_source = MemorySource(CatalogItem, sample_items(), latency_ms=latency, id_prefix="itm")
        user_source = MemorySource(UserAccount, sample_users(), latency_ms=latency, id_prefix="u")
        ticket_source = MemorySource(Ticket, sample_tickets(), latency_ms=latency, id_prefix="T")

    logger.info("Dashboard using %s data source", settings.DATA_SOURCE)
    return Dashboard(
        settings=settings,
        session=session,
        adapter=adapter,
        client=client,
        items=ItemCatalog(item_source, session),
        users=UserDirectory(user_source, session),
        tickets=TicketBoard(ticket_source),
    )


@asynccontextmanager
async def dashboard_lifespan(settings: Settings | None = None, transport=None):
    settings = settings or get_settings()
    configure_logging(settings)
    dashboard = create_dashboard(settings, transport=transport)
    await dashboard.start()
    try:
        yield dashboard
    finally:
        await dashboard.aclose()
