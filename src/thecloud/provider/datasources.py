"""Read-only data sources: single lookups by id or name, and collection listings."""

from __future__ import annotations

import asyncio
from logging import getLogger
from typing import TYPE_CHECKING, Any

from thecloud.adapters.thecloud.errors import TheCloudError
from thecloud.adapters.thecloud.operations import CloudOperations
from thecloud.domain.ports.lifecycle import ReconcileResult
from thecloud.domain.state import merge_observed, without

from .base import CLIENT_ERROR, observed

if TYPE_CHECKING:
    from collections.abc import Mapping

    from thecloud.adapters.thecloud.descriptors import EntityDescriptor
    from thecloud.adapters.thecloud.schema import CloudModel

    from .base import SessionFactory

log = getLogger(__name__)

MISSING_ATTRIBUTE = "Missing Required Attribute"


def _parents(descriptor: EntityDescriptor[Any], config: Mapping[str, Any]) -> dict[str, str]:
    return {
        name: str(config[name])
        for name in descriptor.parent_attributes
        if config.get(name) not in (None, "")
    }


def _title(label: str) -> str:
    return " ".join(word[:1].upper() + word[1:] for word in label.split())


class LookupDataSource[M: CloudModel]:
    """Finds one entity by its key (GET) or by ``name`` (list and scan).

    With ``refetch`` the name match is fetched again by id, for listings that
    return abbreviated entries.
    """

    def __init__(
        self,
        descriptor: EntityDescriptor[M],
        *,
        session_factory: SessionFactory,
        label: str | None = None,
        refetch: bool = False,
    ) -> None:
        self.descriptor = descriptor
        self.type_name = descriptor.type_name
        self.label = label or descriptor.label
        self._session_factory = session_factory
        self._refetch = refetch

    def read(self, config: Mapping[str, Any]) -> ReconcileResult:
        return asyncio.run(self.aread(config))

    async def aread(self, config: Mapping[str, Any]) -> ReconcileResult:
        result = ReconcileResult(state=None)
        key_attribute = self.descriptor.key_attribute
        if not config.get(key_attribute) and not config.get("name"):
            selectors = "name" if key_attribute == "name" else f"Either {key_attribute} or name"
            result.diagnostics.add_error(MISSING_ATTRIBUTE, f"{selectors} must be specified.")
            return result
        if not config.get(key_attribute):
            for parent in self.descriptor.collection_parents:
                if not config.get(parent):
                    result.diagnostics.add_error(
                        MISSING_ATTRIBUTE,
                        f"{parent} is required when looking up {self.label} by name.",
                    )
                    return result

        try:
            async with self._session_factory() as client:
                found = await self._lookup(CloudOperations(client), config)
        except (TheCloudError, ValueError) as exc:
            result.diagnostics.add_error(
                CLIENT_ERROR, f"Unable to read {self.label}, got error: {exc}"
            )
            return result

        if found is None:
            result.diagnostics.add_error(
                f"{_title(self.label)} Not Found",
                f"No {self.label} matching the criteria was found.",
            )
            return result

        state = merge_observed(config, observed(found), excluded=self.descriptor.state_excludes)
        result.state = without(state, self.descriptor.state_excludes)
        return result

    async def _lookup(self, ops: CloudOperations, config: Mapping[str, Any]) -> M | None:
        resource = ops.resource(self.descriptor)
        parents = _parents(self.descriptor, config)
        key = config.get(self.descriptor.key_attribute)
        if key:
            return await resource.get(str(key), **parents)

        found = await resource.find_by_name(str(config["name"]), **parents)
        if found is not None and self._refetch:
            log.debug("refetching %s %s by id", self.descriptor.label, getattr(found, "id", None))
            return await resource.get(str(getattr(found, self.descriptor.key_attribute)), **parents)
        return found


class ListDataSource[M: CloudModel]:
    """Lists every entity of a family into ``collection_attribute``."""

    def __init__(
        self,
        descriptor: EntityDescriptor[M],
        *,
        session_factory: SessionFactory,
        type_name: str,
        collection_attribute: str,
    ) -> None:
        self.descriptor = descriptor
        self.type_name = type_name
        self.collection_attribute = collection_attribute
        self._session_factory = session_factory

    def read(self, config: Mapping[str, Any]) -> ReconcileResult:
        return asyncio.run(self.aread(config))

    async def aread(self, config: Mapping[str, Any]) -> ReconcileResult:
        result = ReconcileResult(state=None)
        try:
            async with self._session_factory() as client:
                items = await CloudOperations(client).resource(self.descriptor).list(
                    **_parents(self.descriptor, config)
                )
        except (TheCloudError, ValueError) as exc:
            plural = self.collection_attribute.replace("_", " ")
            result.diagnostics.add_error(CLIENT_ERROR, f"Unable to list {plural}, got error: {exc}")
            return result

        result.state = {
            **config,
            self.collection_attribute: [
                without(observed(item), self.descriptor.state_excludes) for item in items
            ],
        }
        return result
