"""Error taxonomy for the TheCloud control-plane adapter."""

from __future__ import annotations

from typing import Literal


class TheCloudError(RuntimeError):
    """Base class for failures raised while talking to the control plane."""


class TransportError(TheCloudError):
    """Raised when the HTTP request could not be completed after retries."""


class DecodeError(TheCloudError):
    """Raised when a response body cannot be decoded.

    ``stage`` tells the outer envelope apart from the ``data`` payload.
    """

    def __init__(self, message: str, *, stage: Literal["envelope", "data"]) -> None:
        super().__init__(message)
        self.stage = stage


class APIError(TheCloudError):
    """Raised when the control plane reports an application-level error."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int,
        type: str | None = None,  # noqa: A002
        code: str | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.type = type
        self.message = message
        self.code = code

    def __str__(self) -> str:
        return f"[{self.status_code}] {self.message}"


class UnsupportedOperationError(TheCloudError):
    """Raised when an entity does not expose the requested verb."""
