"""Authenticated transport for the TheCloud control-plane API."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING, Any, overload

import httpx

from thecloud.adapters.http_resilience import ResilientClient

from .envelope import decode_envelope, decode_error
from .errors import TheCloudError, TransportError
from .schema import CloudRequest

if TYPE_CHECKING:
    from collections.abc import Callable
    from types import TracebackType

    from thecloud.config.http_resilience import ResilienceConfig
    from thecloud.config.provider import ProviderConfig

log = getLogger(__name__)

type ClientFactory = Callable[[ResilienceConfig], ResilientClient]


class TheCloudClient:
    """Low-level client issuing one enveloped HTTP exchange per call.

    Use as an async context manager; the underlying connection pool lives for the
    duration of the ``async with`` block.
    """

    def __init__(
        self,
        config: ProviderConfig,
        *,
        client_factory: ClientFactory | None = None,
    ) -> None:
        self._config = config
        self._resilience = config.resilience
        self._client_factory = client_factory or ResilientClient
        self._http: ResilientClient | None = None

    @property
    def endpoint(self) -> str:
        return self._config.endpoint

    async def __aenter__(self) -> TheCloudClient:
        self._http = self._client_factory(self._resilience)
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        if self._http is not None:
            await self._http.aclose()
            self._http = None

    @overload
    async def send(
        self,
        method: str,
        path: str,
        *,
        body: CloudRequest | dict[str, Any] | None = None,
        into: None = None,
    ) -> tuple[int, None]: ...

    @overload
    async def send[T](
        self,
        method: str,
        path: str,
        *,
        body: CloudRequest | dict[str, Any] | None = None,
        into: type[T],
    ) -> tuple[int, T | None]: ...

    @overload
    async def send(
        self,
        method: str,
        path: str,
        *,
        body: CloudRequest | dict[str, Any] | None = None,
        into: object,
    ) -> tuple[int, Any]: ...

    async def send(
        self,
        method: str,
        path: str,
        *,
        body: CloudRequest | dict[str, Any] | None = None,
        into: object = None,
    ) -> tuple[int, Any]:
        """Perform ``method path`` and decode the envelope into ``into``.

        Returns ``(404, None)`` when the server reports the target absent. Any other
        status of 400 or above raises :class:`APIError`.
        """

        if self._http is None:
            raise TheCloudError("TheCloudClient must be used inside 'async with'")

        payload = body.to_payload() if isinstance(body, CloudRequest) else body
        try:
            if payload is None:
                response = await self._http.request(method, path)
            else:
                response = await self._http.request(method, path, json=payload)
        except httpx.HTTPError as exc:
            log.warning("%s %s failed after retries: %s", method, path, exc)
            raise TransportError(f"{method} {path} failed: {exc}") from exc

        status = response.status_code
        if status == httpx.codes.NOT_FOUND:
            log.debug("%s %s: not found", method, path)
            return status, None

        if status >= httpx.codes.BAD_REQUEST:
            error = decode_error(status, response.content)
            log.error("TheCloud API error on %s %s: %s", method, path, error)
            raise error

        return status, decode_envelope(status, response.content, into)
