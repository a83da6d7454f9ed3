"""Resource lifecycles and data sources for TheCloud."""

from __future__ import annotations

from .base import EntityReconciler
from .datasources import ListDataSource, LookupDataSource
from .registry import TheCloudProvider

__all__ = ["EntityReconciler", "ListDataSource", "LookupDataSource", "TheCloudProvider"]
