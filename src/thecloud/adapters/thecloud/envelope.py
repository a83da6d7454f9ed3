"""Codec for the ``{data, error}`` envelope wrapping every control-plane response."""

from __future__ import annotations

import json
from functools import cache
from logging import getLogger
from typing import Any, overload

from pydantic import BaseModel, TypeAdapter, ValidationError

from .errors import APIError, DecodeError
from .schema import Envelope, ErrorBody

log = getLogger(__name__)


@cache
def _adapter(into: Any) -> TypeAdapter[Any]:
    return TypeAdapter(into)


def encode_envelope(value: object) -> bytes:
    """Serialise ``value`` as the ``data`` member of a success envelope."""

    return json.dumps({"data": _to_jsonable(value)}).encode("utf-8")


def _to_jsonable(value: object) -> object:
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json")
    if isinstance(value, list | tuple):
        return [_to_jsonable(item) for item in value]  # pyright: ignore[reportUnknownVariableType]
    return value


def _api_error(status_code: int, error: ErrorBody | str) -> APIError:
    fallback = f"unexpected status code: {status_code}"
    if isinstance(error, str):
        return APIError(error or fallback, status_code=status_code)
    return APIError(
        error.message or fallback,
        status_code=status_code,
        type=error.type or None,
        code=error.code or None,
    )


def decode_error(status_code: int, content: bytes) -> APIError:
    """Build an :class:`APIError` from a non-2xx body, whatever shape it has."""

    try:
        envelope = Envelope.model_validate_json(content)
    except ValidationError:
        envelope = None
    if envelope is None or envelope.error is None:
        return APIError(f"unexpected status code: {status_code}", status_code=status_code)
    return _api_error(status_code, envelope.error)


@overload
def decode_envelope(status_code: int, content: bytes, into: None = None) -> None: ...


@overload
def decode_envelope[T](status_code: int, content: bytes, into: type[T]) -> T: ...


@overload
def decode_envelope(status_code: int, content: bytes, into: object) -> Any: ...


def decode_envelope(status_code: int, content: bytes, into: object = None) -> Any:
    """Validate the envelope and decode ``data`` into ``into``.

    An empty body is accepted only when no destination is requested (deletes and
    actions). A populated ``error`` member raises :class:`APIError` whatever the
    status; it may be a structured body or a bare string.
    """

    if not content.strip():
        if into is None:
            return None
        raise DecodeError("failed to decode response: empty body", stage="envelope")

    try:
        envelope = Envelope.model_validate_json(content)
    except ValidationError as exc:
        log.debug("Envelope rejected: %s", exc)
        raise DecodeError(f"failed to decode response: {exc}", stage="envelope") from exc

    if envelope.error is not None:
        raise _api_error(status_code, envelope.error)

    if into is None:
        return None

    try:
        return _adapter(into).validate_python(envelope.data)
    except ValidationError as exc:
        log.debug("Envelope data rejected for %s: %s", into, exc)
        raise DecodeError(f"failed to unmarshal data: {exc}", stage="data") from exc
