from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from logging import getLogger
from typing import (
    TYPE_CHECKING,
    TypedDict,
    Unpack,
)

import httpx
from aiolimiter import AsyncLimiter
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception_type,
    retry_if_result,
    stop_after_attempt,
    wait_exponential,
)

from thecloud.config.http_resilience import RateLimit, ResilienceConfig, RetryPolicy

if TYPE_CHECKING:
    from types import TracebackType

    from httpx._client import UseClientDefault
    from httpx._types import (
        HeaderTypes,
        QueryParamTypes,
        RequestContent,
        RequestExtensions,
        TimeoutTypes,
        URLTypes,
    )

__all__ = [
    "RateLimit",
    "ResilienceConfig",
    "ResilientClient",
    "RetryPolicy",
]

log = getLogger(__name__)

type SleepFunc = Callable[[float], Awaitable[None]]


class RequestOptions(TypedDict, total=False):
    content: RequestContent | None
    json: object
    params: QueryParamTypes | None
    headers: HeaderTypes | None
    timeout: TimeoutTypes | UseClientDefault
    extensions: RequestExtensions | None


class AsyncClientOptions(TypedDict, total=False):
    base_url: str
    timeout: TimeoutTypes
    headers: HeaderTypes
    transport: httpx.AsyncBaseTransport


class ResilientClient:
    """``httpx.AsyncClient`` wrapper adding retries with backoff and optional rate limiting."""

    def __init__(
        self,
        config: ResilienceConfig,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
        sleep: SleepFunc = asyncio.sleep,
    ) -> None:
        self.config = config
        self._sleep = sleep
        self._limiter: AsyncLimiter | None = (
            AsyncLimiter(config.ratelimit.max_calls, config.ratelimit.per_seconds)
            if config.ratelimit
            else None
        )

        client_kwargs: AsyncClientOptions = {"timeout": config.timeout_seconds}
        if config.base_url is not None:
            client_kwargs["base_url"] = config.base_url
        if config.default_headers:
            client_kwargs["headers"] = dict(config.default_headers)
        if transport is not None:
            client_kwargs["transport"] = transport

        self._client = httpx.AsyncClient(**client_kwargs)

    async def __aenter__(self) -> ResilientClient:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def request(
        self,
        method: str,
        url: URLTypes,
        **kwargs: Unpack[RequestOptions],
    ) -> httpx.Response:
        async def do_request() -> httpx.Response:
            return await self._client.request(method, url, **kwargs)

        if method.upper() not in self.config.retry.allowed_methods:
            return await self._send(do_request)
        return await self._retrying(self.config.retry)(self._send, do_request)

    async def _send(self, func: Callable[[], Awaitable[httpx.Response]]) -> httpx.Response:
        if self._limiter is None:
            return await func()
        async with self._limiter:
            return await func()

    def _retrying(self, policy: RetryPolicy) -> AsyncRetrying:
        def should_retry_response(response: httpx.Response) -> bool:
            return response.status_code in policy.status_forcelist

        return AsyncRetrying(
            sleep=self._sleep,
            stop=stop_after_attempt(policy.total + 1),
            wait=wait_exponential(
                multiplier=policy.backoff_factor,
                min=policy.min_backoff_wait,
                max=policy.max_backoff_wait,
            ),
            retry=(
                retry_if_exception_type(policy.retry_on_exceptions)
                | retry_if_result(should_retry_response)
            ),
            before_sleep=self._log_retry,
            retry_error_callback=_last_outcome,
        )

    def _log_retry(self, retry_state: RetryCallState) -> None:
        outcome = retry_state.outcome
        if outcome is None:
            return
        if outcome.failed:
            reason = repr(outcome.exception())
        else:
            reason = f"status {outcome.result().status_code}"
        wait = retry_state.next_action.sleep if retry_state.next_action else 0.0
        log.warning(
            "%s: attempt %d failed (%s); retrying in %.1fs",
            self.config.name,
            retry_state.attempt_number,
            reason,
            wait,
        )


def _last_outcome(retry_state: RetryCallState) -> httpx.Response:
    # Exhausted on a status: hand back the last response. Exhausted on an
    # exception: ``result()`` re-raises it.
    outcome = retry_state.outcome
    if outcome is None:
        raise RuntimeError("retry finished without an outcome")
    return outcome.result()

