"""
Opsboard: Optimistic mutation / reconciliation

Per mutation:
  1. Refuse if the row already has a mutation in flight
  2. Apply the change to the local list immediately
  3. Await the remote call
  4. Success → swap in the authoritative value at the row's current position
     Failure → re-fetch the whole list from the source, then re-raise

Rows are independent: two different ids may be in flight at once and settle
in either order.
"""
import logging
from typing import Awaitable, Callable, Generic, TypeVar

from pydantic import BaseModel

from opsboard.api.sources import DataSource
from opsboard.core.exceptions import ApiError, MutationInProgress

ModelT = TypeVar("ModelT", bound=BaseModel)
logger = logging.getLogger(__name__)

Remote = Callable[[], Awaitable[ModelT]]


class OptimisticCollection(Generic[ModelT]):
    def __init__(self, source: DataSource[ModelT]):
        self.source = source
        self.items: list[ModelT] = []
        self.load_error: str | None = None
        self.stale = False
        self._busy: set[str] = set()

    # ── Reads ─────────────────────────────────────────────────────────────────

    async def load(self) -> list[ModelT]:
        """Fetch the authoritative list. On failure no partial list is kept."""
        try:
            items = await self.source.list()
        except ApiError as exc:
            self.items = []
            self.load_error = exc.message
            raise
        self.items = items
        self.load_error = None
        self.stale = False
        return self.items

    def get(self, entity_id: str) -> ModelT | None:
        return next((item for item in self.items if item.id == entity_id), None)

    def index_of(self, entity_id: str) -> int:
        for index, item in enumerate(self.items):
            if item.id == entity_id:
                return index
        return -1

    def is_busy(self, entity_id: str) -> bool:
        return entity_id in self._busy

    @property
    def busy_ids(self) -> frozenset[str]:
        return frozenset(self._busy)

    # ── Mutations ─────────────────────────────────────────────────────────────

    async def _mutate(self, entity_id: str, apply: Callable[[], None], remote, reconcile):
        if entity_id in self._busy:
            raise MutationInProgress(entity_id)
        self._busy.add(entity_id)
        try:
            apply()
            try:
                result = await remote()
            except ApiError as exc:
                logger.warning("Mutation of %s failed (%s); rolling back by refetch", entity_id, exc.message)
                await self._rollback()
                raise
            reconcile(result)
            return result
        finally:
            self._busy.discard(entity_id)

    async def _rollback(self) -> None:
        try:
            self.items = await self.source.list()
            self.stale = False
        except ApiError:
            logger.exception("Rollback refetch failed; local list is stale")
            self.stale = True

    def _swap(self, entity_id: str, value: ModelT) -> None:
        index = self.index_of(entity_id)
        if index >= 0:
            self.items[index] = value
        else:
            self.items.append(value)

    async def insert(self, optimistic: ModelT, remote: Remote, at_start: bool = False) -> ModelT:
        """Show `optimistic` now; replace it with what `remote` returns."""

        def apply():
            if at_start:
                self.items.insert(0, optimistic)
            else:
                self.items.append(optimistic)

        return await self._mutate(
            optimistic.id, apply, remote, lambda result: self._swap(optimistic.id, result)
        )

    async def replace(self, entity_id: str, optimistic: ModelT, remote: Remote) -> ModelT:
        def apply():
            self._swap(entity_id, optimistic)

        return await self._mutate(
            entity_id, apply, remote, lambda result: self._swap(entity_id, result)
        )

    async def remove(self, entity_id: str, remote: Callable[[], Awaitable[None]]) -> None:
        def apply():
            self.items = [item for item in self.items if item.id != entity_id]

        await self._mutate(entity_id, apply, remote, lambda _result: None)

    def adopt(self, value: ModelT, at_start: bool = True) -> None:
        """Add a row the server has already confirmed."""
        if at_start:
            self.items.insert(0, value)
        else:
            self.items.append(value)
