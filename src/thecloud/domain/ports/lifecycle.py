"""Ports describing the resource lifecycle the host orchestrator drives."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

from thecloud.domain.diagnostics import Diagnostics

if TYPE_CHECKING:
    from collections.abc import Mapping

    from thecloud.domain.state import State


@dataclass(slots=True)
class ReconcileResult:
    """Outcome of one lifecycle call.

    ``state`` is ``None`` when there is nothing to track: the resource vanished
    remotely (read) or was never created (failed create).
    """

    state: State | None
    diagnostics: Diagnostics = field(default_factory=Diagnostics)

    @property
    def removed(self) -> bool:
        return self.state is None and not self.diagnostics.has_error()


@runtime_checkable
class ResourceLifecycle(Protocol):
    """Create/Read/Update/Delete/Import contract every managed entity satisfies."""

    type_name: str

    def create(self, desired: Mapping[str, Any]) -> ReconcileResult: ...

    def read(self, prior: Mapping[str, Any]) -> ReconcileResult: ...

    def update(
        self, desired: Mapping[str, Any], prior: Mapping[str, Any]
    ) -> ReconcileResult: ...

    def delete(self, prior: Mapping[str, Any]) -> Diagnostics: ...

    def import_state(self, external_id: str) -> ReconcileResult: ...


@runtime_checkable
class DataSource(Protocol):
    """Read-only lookup evaluated from configuration alone."""

    type_name: str

    def read(self, config: Mapping[str, Any]) -> ReconcileResult: ...


__all__ = ["DataSource", "ReconcileResult", "ResourceLifecycle"]
