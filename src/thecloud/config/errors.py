"""Errors raised while resolving provider configuration."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Sequence


class ConfigurationError(RuntimeError):
    """Raised when provider settings cannot be resolved."""


class MissingConfigurationError(ConfigurationError):
    """Raised when a required setting is in neither the provider block nor the environment.

    ``names`` lists the environment variables that were looked up and found blank.
    """

    def __init__(self, message: str, *, names: Sequence[str] = ()) -> None:
        super().__init__(message)
        self.names = tuple(names)
