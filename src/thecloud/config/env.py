"""Environment variable loaders for configuration."""

from __future__ import annotations

import os
from typing import TYPE_CHECKING

from dotenv import load_dotenv

if TYPE_CHECKING:
    from pathlib import Path


def load_env_file(path: str | Path | None = None) -> bool:
    """Populate ``os.environ`` from a dotenv file without overriding set values."""

    return load_dotenv(dotenv_path=path, override=False)


def optional_env_var(name: str) -> str | None:
    value = os.getenv(name)
    if value is None or not value.strip():
        return None
    return value.strip()
