"""Composite identifiers for association resources."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Sequence

SEPARATOR = ":"


class InvalidCompositeIdError(ValueError):
    """Raised when an identifier does not match ``part_a:part_b`` form."""

    def __init__(self, value: str, parts: Sequence[str]) -> None:
        self.value = value
        self.expected_format = SEPARATOR.join(parts)
        super().__init__(
            f"Expected import identifier with format: {self.expected_format}. Got: {value!r}"
        )


def join_composite_id(*parts: str) -> str:
    return SEPARATOR.join(parts)


def split_composite_id(value: str, parts: Sequence[str]) -> dict[str, str]:
    """Split ``value`` into the named ``parts``; every part must be non-empty."""

    pieces = value.split(SEPARATOR)
    if len(pieces) != len(parts) or not all(pieces):
        raise InvalidCompositeIdError(value, parts)
    return dict(zip(parts, pieces, strict=True))
