"""Polling for operations whose effect is not immediately visible."""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

log = getLogger(__name__)

DEFAULT_INTERVAL_SECONDS = 5.0
DEFAULT_TIMEOUT_SECONDS = 600.0


@dataclass(frozen=True, slots=True)
class PollPolicy:
    interval_seconds: float = DEFAULT_INTERVAL_SECONDS
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS


@dataclass(frozen=True, slots=True)
class PollCompleted:
    attempts: int
    elapsed_seconds: float


class PollError(RuntimeError):
    """Base class for poller terminations other than completion or read errors."""


class PollTimeoutError(PollError):
    """Raised when the deadline passes before the resource disappears."""


class PollCancelledError(PollError):
    """Raised when the caller's cancellation event fires during the wait."""


async def wait_until_absent(
    read: Callable[[], Awaitable[object | None]],
    *,
    policy: PollPolicy | None = None,
    cancel: asyncio.Event | None = None,
    clock: Callable[[], float] = time.monotonic,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    description: str = "resource",
) -> PollCompleted:
    """Call ``read`` until it returns ``None``.

    The first read happens immediately, then once per ``policy.interval_seconds``.
    Errors raised by ``read`` propagate unchanged; transient failures are already
    retried by the transport. Raises :class:`PollTimeoutError` once
    ``policy.timeout_seconds`` elapse and :class:`PollCancelledError` as soon as
    ``cancel`` is set.
    """

    policy = policy or PollPolicy()
    started = clock()
    deadline = started + policy.timeout_seconds
    attempts = 0

    while True:
        if cancel is not None and cancel.is_set():
            raise PollCancelledError(f"Cancelled while waiting for {description} to disappear")

        attempts += 1
        if await read() is None:
            elapsed = clock() - started
            log.debug("%s gone after %d reads (%.1fs)", description, attempts, elapsed)
            return PollCompleted(attempts=attempts, elapsed_seconds=elapsed)

        remaining = deadline - clock()
        if remaining <= 0:
            raise PollTimeoutError(
                f"Timed out after {policy.timeout_seconds:.0f}s waiting for {description}"
                " to disappear"
            )

        delay = min(policy.interval_seconds, remaining)
        log.debug(
            "%s still present after read %d; next check in %.1fs", description, attempts, delay
        )
        await _pause(delay, cancel=cancel, sleep=sleep)


async def _pause(
    delay: float,
    *,
    cancel: asyncio.Event | None,
    sleep: Callable[[float], Awaitable[None]],
) -> None:
    if cancel is None:
        await sleep(delay)
        return

    sleeper = asyncio.ensure_future(sleep(delay))
    waiter = asyncio.ensure_future(cancel.wait())
    try:
        done, _ = await asyncio.wait({sleeper, waiter}, return_when=asyncio.FIRST_COMPLETED)
    finally:
        for task in (sleeper, waiter):
            if not task.done():
                task.cancel()
    if waiter in done:
        raise PollCancelledError("Cancelled while waiting between reads")
