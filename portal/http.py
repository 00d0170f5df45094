"""Async HTTP client for the take-offs API, with optional bearer auth."""

import logging
from dataclasses import dataclass
from typing import Any, Generic, TypeVar, Union

import httpx

import config

logger = logging.getLogger(__name__)


class ApiError(Exception):
    """
    Non-2xx API response, a transport failure (status 0), or a secure call
    made without a token.
    """

    def __init__(self, status_code: int, message: str):
        super().__init__(f"{status_code}: {message}")
        self.status_code = status_code
        self.message = message


T = TypeVar("T")


@dataclass(frozen=True)
class Loading:
    """A fetch that has not finished yet."""


@dataclass(frozen=True)
class Success(Generic[T]):
    data: T


@dataclass(frozen=True)
class Failure:
    error: ApiError

    @property
    def message(self) -> str:
        return self.error.message


# State of a view-model fetch
FetchState = Union[Loading, Success, Failure]


def error_message(response: httpx.Response) -> str:
    """Pull ``detail`` or ``message`` out of an error body, else the reason phrase."""
    try:
        body = response.json()
    except ValueError:
        return response.text or response.reason_phrase
    if isinstance(body, dict):
        detail = body.get("detail") or body.get("message")
        if detail:
            return detail if isinstance(detail, str) else str(detail)
    return response.reason_phrase


class ApiClient:
    """
    Thin wrapper over ``httpx.AsyncClient``.

    ``secure`` requests carry ``Authorization: Bearer <token>`` taken from the
    session; without a token they fail locally with ``ApiError(401)``.
    """

    def __init__(
        self,
        base_url: str | None = None,
        session=None,
        transport: httpx.AsyncBaseTransport | None = None,
        timeout: float = 30.0,
    ):
        self.base_url = (base_url or config.settings.PORTAL_API_URL).rstrip("/")
        self.session = session
        self._client = httpx.AsyncClient(base_url=self.base_url, transport=transport, timeout=timeout)

    async def request(
        self,
        method: str,
        path: str,
        *,
        secure: bool = True,
        timeout: float | None = None,
        **kwargs: Any,
    ) -> httpx.Response:
        headers = dict(kwargs.pop("headers", None) or {})
        if secure:
            token = self.session.token if self.session else None
            if not token:
                raise ApiError(401, "Not authenticated")
            headers["Authorization"] = f"Bearer {token}"

        if timeout is not None:
            kwargs["timeout"] = timeout
        try:
            response = await self._client.request(method, path, headers=headers, **kwargs)
        except httpx.HTTPError as e:
            # Connection and timeout failures carry status 0
            logger.debug("%s %s failed: %s", method, path, e)
            raise ApiError(0, str(e) or type(e).__name__) from e
        if response.is_error:
            message = error_message(response)
            logger.debug("%s %s failed: %s %s", method, path, response.status_code, message)
            raise ApiError(response.status_code, message)
        return response

    async def _json(self, method: str, path: str, **kwargs: Any) -> Any:
        response = await self.request(method, path, **kwargs)
        if response.status_code == 204 or not response.content:
            return None
        return response.json()

    async def get(self, path: str, **kwargs: Any) -> Any:
        return await self._json("GET", path, **kwargs)

    async def post(self, path: str, **kwargs: Any) -> Any:
        return await self._json("POST", path, **kwargs)

    async def patch(self, path: str, **kwargs: Any) -> Any:
        return await self._json("PATCH", path, **kwargs)

    async def put(self, path: str, **kwargs: Any) -> Any:
        return await self._json("PUT", path, **kwargs)

    async def delete(self, path: str, **kwargs: Any) -> Any:
        return await self._json("DELETE", path, **kwargs)

    async def aclose(self) -> None:
        await self._client.aclose()
