"""Merging observed attributes into caller-held state."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Collection, Mapping

type State = dict[str, Any]


def merge_observed(
    prior: Mapping[str, Any],
    observed: Mapping[str, Any],
    *,
    secrets: Collection[str] = (),
    excluded: Collection[str] = (),
) -> State:
    """Overlay ``observed`` onto ``prior``.

    ``observed`` holds only the attributes present in the server response, so
    omitted attributes keep their prior value. Secret attributes are written only
    when the response carries a non-empty value.
    """

    merged: State = dict(prior)
    for name, value in observed.items():
        if name in excluded:
            continue
        if name in secrets and value in (None, ""):
            continue
        merged[name] = value
    return merged


def without(state: Mapping[str, Any], names: Collection[str]) -> State:
    return {name: value for name, value in state.items() if name not in names}
