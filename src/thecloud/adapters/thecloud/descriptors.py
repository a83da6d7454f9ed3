"""Entity descriptors: one declarative record per control-plane entity family."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from string import Formatter
from typing import TYPE_CHECKING
from urllib.parse import quote

if TYPE_CHECKING:
    from .schema import CloudModel, CloudRequest


class Verb(StrEnum):
    CREATE = "create"
    READ = "read"
    LIST = "list"
    UPDATE = "update"
    DELETE = "delete"


CRUD = frozenset({Verb.CREATE, Verb.READ, Verb.LIST, Verb.DELETE})
CRD = frozenset({Verb.CREATE, Verb.READ, Verb.DELETE})


@dataclass(frozen=True, slots=True, kw_only=True)
class EntityDescriptor[M: CloudModel]:
    """Describes how an entity is addressed on the wire and tracked in state.

    Path templates use ``{key}`` for the entity's own key and named placeholders
    (``{vpc_id}``) for parent identifiers taken from desired state.

    ``secret_attributes`` are never blanked by a read, ``local_attributes`` are
    kept as configured whatever the server echoes, and ``state_excludes`` are
    response members that never enter state.
    """

    label: str
    type_name: str
    model: type[M]
    create_request: type[CloudRequest] | None
    collection_path: str
    singleton_path: str | None = None
    delete_path: str | None = None
    key_attribute: str = "id"
    verbs: frozenset[Verb] = CRUD
    secret_attributes: frozenset[str] = frozenset()
    local_attributes: frozenset[str] = frozenset()
    state_excludes: frozenset[str] = frozenset()
    await_deletion: bool = False

    def supports(self, verb: Verb) -> bool:
        return verb in self.verbs

    @property
    def parent_attributes(self) -> tuple[str, ...]:
        return tuple(
            name
            for template in (self.collection_path, self.singleton_path, self.delete_path)
            if template
            for name in _placeholders(template)
            if name != "key"
        )

    @property
    def collection_parents(self) -> tuple[str, ...]:
        """Parent identifiers needed to list the family."""
        return tuple(_placeholders(self.collection_path))

    @property
    def article(self) -> str:
        return "an" if self.label[:1].lower() in "aeiou" else "a"

    def collection_url(self, **parents: str) -> str:
        return _render(self.collection_path, self.label, parents)

    def singleton_url(self, key: str, **parents: str) -> str:
        if self.singleton_path is None:
            raise ValueError(f"{self.label} has no singleton path")
        return _render(self.singleton_path, self.label, {**parents, "key": key})

    def delete_url(self, key: str, **parents: str) -> str:
        template = self.delete_path or self.singleton_path
        if template is None:
            raise ValueError(f"{self.label} has no delete path")
        return _render(template, self.label, {**parents, "key": key})


def _placeholders(template: str) -> list[str]:
    return [field for _, field, _, _ in Formatter().parse(template) if field]


def _render(template: str, label: str, values: dict[str, str]) -> str:
    missing = [name for name in _placeholders(template) if not values.get(name)]
    if missing:
        raise ValueError(f"{label} path {template!r} needs {', '.join(missing)}")
    return template.format(**{name: quote(str(value), safe="") for name, value in values.items()})
