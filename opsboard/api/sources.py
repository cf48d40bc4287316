"""
Opsboard: Collection data sources

One capability, two implementations selected at startup:
  HttpSource    the REST collaborator (GET/POST/PUT/DELETE on a collection path)
  MemorySource  in-process fixtures for the mock variant
"""
import asyncio
import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Generic, Protocol, TypeVar

from pydantic import BaseModel, ValidationError

from opsboard.api.client import RestClient
from opsboard.core.exceptions import ApiError
from opsboard.schemas.envelope import Created

ModelT = TypeVar("ModelT", bound=BaseModel)
logger = logging.getLogger(__name__)


class DataSource(Protocol[ModelT]):
    async def list(self) -> list[ModelT]: ...
    async def create(self, payload: dict[str, Any]) -> Created[ModelT]: ...
    async def update(self, entity_id: str, payload: dict[str, Any]) -> ModelT: ...
    async def delete(self, entity_id: str) -> None: ...


def _unwrap(body: Any) -> Any:
    if isinstance(body, dict) and "data" in body:
        return body["data"]
    return body


class HttpSource(Generic[ModelT]):
    def __init__(self, client: RestClient, path: str, model: type[ModelT]):
        self.client = client
        self.path = path.rstrip("/")
        self.model = model

    def _parse(self, raw: Any) -> ModelT:
        try:
            return self.model.model_validate(raw)
        except ValidationError as exc:
            raise ApiError(f"Unexpected response from {self.path}: {exc.error_count()} invalid field(s)")

    async def list(self) -> list[ModelT]:
        rows = _unwrap(await self.client.get(self.path)) or []
        return [self._parse(row) for row in rows]

    async def create(self, payload: dict[str, Any]) -> Created[ModelT]:
        body = await self.client.post(self.path, payload)
        envelope = body if isinstance(body, dict) and "data" in body else {"data": body}
        return Created[self.model](
            data=self._parse(envelope["data"]),
            temp_password=envelope.get("tempPassword"),
        )

    async def update(self, entity_id: str, payload: dict[str, Any]) -> ModelT:
        body = await self.client.put(f"{self.path}/{entity_id}", payload)
        return self._parse(_unwrap(body))

    async def delete(self, entity_id: str) -> None:
        await self.client.delete(f"{self.path}/{entity_id}")


class MemorySource(Generic[ModelT]):
    """Keeps copies of the seed rows; callers never share instances with it."""

    def __init__(
        self,
        model: type[ModelT],
        rows: list[ModelT] | None = None,
        latency_ms: int = 0,
        id_prefix: str = "id",
    ):
        self.model = model
        self.latency_ms = latency_ms
        self.id_prefix = id_prefix
        self._rows: dict[str, ModelT] = {row.id: row.model_copy(deep=True) for row in rows or []}

    async def _wait(self):
        if self.latency_ms:
            await asyncio.sleep(self.latency_ms / 1000.0)

    def _validate(self, data: dict[str, Any]) -> ModelT:
        try:
            return self.model.model_validate(data)
        except ValidationError as exc:
            raise ApiError(f"Invalid {self.model.__name__}: {exc.error_count()} invalid field(s)", status_code=422)

    def _touch(self, data: dict[str, Any]) -> None:
        if "updated_at" in self.model.model_fields:
            data["updatedAt"] = datetime.now(tz=timezone.utc).isoformat()

    async def list(self) -> list[ModelT]:
        await self._wait()
        return [row.model_copy(deep=True) for row in self._rows.values()]

    async def create(self, payload: dict[str, Any]) -> Created[ModelT]:
        await self._wait()
        data = dict(payload)
        if not data.get("id"):
            data["id"] = f"{self.id_prefix}_{uuid.uuid4().hex[:8]}"
        self._touch(data)
        entity = self._validate(data)
        if entity.id in self._rows:
            raise ApiError(f"'{entity.id}' already exists.", status_code=409)
        self._rows[entity.id] = entity
        return Created[self.model](data=entity.model_copy(deep=True))

    async def update(self, entity_id: str, payload: dict[str, Any]) -> ModelT:
        await self._wait()
        current = self._rows.get(entity_id)
        if current is None:
            raise ApiError("Not found.", status_code=404)
        data = {**current.model_dump(by_alias=True, mode="json"), **payload, "id": entity_id}
        self._touch(data)
        entity = self._validate(data)
        self._rows[entity_id] = entity
        return entity.model_copy(deep=True)

    async def delete(self, entity_id: str) -> None:
        await self._wait()
        if self._rows.pop(entity_id, None) is None:
            raise ApiError("Not found.", status_code=404)
