from __future__ import annotations

from . import catalog
from .client import ClientFactory, TheCloudClient
from .descriptors import EntityDescriptor, Verb
from .envelope import decode_envelope, decode_error, encode_envelope
from .errors import (
    APIError,
    DecodeError,
    TheCloudError,
    TransportError,
    UnsupportedOperationError,
)
from .operations import CloudOperations, ResourceOperations

__all__ = [
    "APIError",
    "ClientFactory",
    "CloudOperations",
    "DecodeError",
    "EntityDescriptor",
    "ResourceOperations",
    "TheCloudClient",
    "TheCloudError",
    "TransportError",
    "UnsupportedOperationError",
    "Verb",
    "catalog",
    "decode_envelope",
    "decode_error",
    "encode_envelope",
]
