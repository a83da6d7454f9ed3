"""Domain ports."""

from __future__ import annotations

from .lifecycle import DataSource, ReconcileResult, ResourceLifecycle

__all__ = ["DataSource", "ReconcileResult", "ResourceLifecycle"]
