"""Provider core for the TheCloud control plane."""

from __future__ import annotations

from importlib import metadata

from thecloud.provider import TheCloudProvider

try:
    __version__ = metadata.version("thecloud-provider")
except metadata.PackageNotFoundError:
    __version__ = "0.0.0+local"

__all__ = ["TheCloudProvider", "__version__"]
