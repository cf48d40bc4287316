"""
Opsboard: Authenticated REST client

Every call attaches the session's bearer token unless a token override is
supplied (used once during sign-in, before a session exists). Non-2xx
answers raise ApiError with the body's `error` or `message` field.
"""
import json
import logging
from typing import Any

import httpx

from opsboard.core.config import get_settings
from opsboard.core.exceptions import ApiError
from opsboard.core.session import Session

settings = get_settings()
logger = logging.getLogger(__name__)


def _parse_body(text: str) -> Any:
    if not text:
        return None
    try:
        return json.loads(text)
    except ValueError:
        return text


def _error_message(data: Any, status_code: int) -> str:
    if isinstance(data, dict):
        message = data.get("error") or data.get("message")
        if message:
            return str(message)
    return f"Request failed ({status_code})"


class RestClient:
    def __init__(
        self,
        session: Session,
        base_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.session = session
        self._client = httpx.AsyncClient(
            base_url=base_url or settings.API_BASE,
            timeout=timeout if timeout is not None else settings.HTTP_TIMEOUT_SECONDS,
            transport=transport,
        )

    async def request(
        self,
        method: str,
        path: str,
        body: Any = None,
        headers: dict[str, str] | None = None,
        token_override: str | None = None,
    ) -> Any:
        token = token_override if token_override is not None else self.session.token

        request_headers = {"Content-Type": "application/json"}
        if token:
            request_headers["Authorization"] = f"Bearer {token}"
        request_headers.update(headers or {})

        try:
            response = await self._client.request(
                method,
                path,
                headers=request_headers,
                content=json.dumps(body) if body is not None else None,
            )
        except httpx.TimeoutException:
            logger.warning("%s %s timed out", method, path)
            raise ApiError("Request timed out.")
        except httpx.RequestError as exc:
            logger.warning("%s %s unreachable: %s", method, path, exc)
            raise ApiError(f"Network error: {exc}")

        data = _parse_body(response.text)
        if not response.is_success:
            message = _error_message(data, response.status_code)
            logger.warning("%s %s failed (%d): %s", method, path, response.status_code, message)
            raise ApiError(message, status_code=response.status_code, payload=data)
        return data

    async def get(self, path: str, **kwargs) -> Any:
        return await self.request("GET", path, **kwargs)

    async def post(self, path: str, body: Any = None, **kwargs) -> Any:
        return await self.request("POST", path, body=body, **kwargs)

    async def put(self, path: str, body: Any = None, **kwargs) -> Any:
        return await self.request("PUT", path, body=body, **kwargs)

    async def delete(self, path: str, **kwargs) -> Any:
        return await self.request("DELETE", path, **kwargs)

    async def aclose(self) -> None:
        await self._client.aclose()
