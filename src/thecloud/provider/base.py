"""Generic lifecycle implementation driven by entity descriptors."""

from __future__ import annotations

import asyncio
from logging import getLogger
from typing import TYPE_CHECKING, Any

from thecloud.adapters.thecloud.descriptors import Verb
from thecloud.adapters.thecloud.errors import TheCloudError, UnsupportedOperationError
from thecloud.adapters.thecloud.operations import CloudOperations
from thecloud.domain.diagnostics import Diagnostics
from thecloud.domain.identifiers import InvalidCompositeIdError
from thecloud.domain.polling import (
    PollCancelledError,
    PollPolicy,
    PollTimeoutError,
    wait_until_absent,
)
from thecloud.domain.ports.lifecycle import ReconcileResult
from thecloud.domain.state import merge_observed, without

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping

    from thecloud.adapters.thecloud.client import TheCloudClient
    from thecloud.adapters.thecloud.descriptors import EntityDescriptor
    from thecloud.adapters.thecloud.schema import CloudModel
    from thecloud.domain.state import State

log = getLogger(__name__)

CLIENT_ERROR = "Client Error"
UPDATE_NOT_SUPPORTED = "Update Not Supported"
DELETE_NOT_SUPPORTED = "Delete Not Supported"
UNEXPECTED_IMPORT_ID = "Unexpected Import Identifier"

type SessionFactory = Callable[[], TheCloudClient]


def observed(model: CloudModel) -> dict[str, Any]:
    """Attributes actually present in the server response."""
    return model.model_dump(exclude_unset=True)


class EntityReconciler[M: CloudModel]:
    """Reconciles desired state against one entity family.

    The public methods are synchronous and run the ``a``-prefixed coroutine with
    ``asyncio.run``; async hosts call the coroutines directly. Subclasses override
    the underscore hooks, which receive an open :class:`CloudOperations` and let
    :class:`TheCloudError` propagate. Only this class turns errors into diagnostics.
    """

    def __init__(
        self,
        descriptor: EntityDescriptor[M],
        *,
        session_factory: SessionFactory,
        poll_policy: PollPolicy | None = None,
    ) -> None:
        self.descriptor = descriptor
        self.type_name = descriptor.type_name
        self._session_factory = session_factory
        self._poll_policy = poll_policy or PollPolicy()

    # Synchronous facade ------------------------------------------------------

    def create(self, desired: Mapping[str, Any]) -> ReconcileResult:
        return asyncio.run(self.acreate(desired))

    def read(self, prior: Mapping[str, Any]) -> ReconcileResult:
        return asyncio.run(self.aread(prior))

    def update(self, desired: Mapping[str, Any], prior: Mapping[str, Any]) -> ReconcileResult:
        return asyncio.run(self.aupdate(desired, prior))

    def delete(self, prior: Mapping[str, Any]) -> Diagnostics:
        return asyncio.run(self.adelete(prior))

    def import_state(self, external_id: str) -> ReconcileResult:
        return asyncio.run(self.aimport_state(external_id))

    # Async lifecycle -----------------------------------------------------------

    async def acreate(self, desired: Mapping[str, Any]) -> ReconcileResult:
        result = ReconcileResult(state=None)
        try:
            async with self._session_factory() as client:
                ops = CloudOperations(client)
                result.state = await self._create(ops, desired, result.diagnostics)
        except (TheCloudError, ValueError) as exc:
            self._client_error(result.diagnostics, "create", exc)
            return result
        if result.state is not None:
            log.debug("created %s %s resource", self.descriptor.article, self.descriptor.label)
        return result

    async def aread(self, prior: Mapping[str, Any]) -> ReconcileResult:
        result = ReconcileResult(state=dict(prior))
        try:
            async with self._session_factory() as client:
                result.state = await self._read(CloudOperations(client), prior)
        except (TheCloudError, ValueError) as exc:
            self._client_error(result.diagnostics, "read", exc)
            return result
        if result.state is None:
            log.info(
                "%s %s no longer exists remotely; removing from state",
                self.descriptor.label,
                prior.get(self.descriptor.key_attribute),
            )
        return result

    async def aupdate(
        self, desired: Mapping[str, Any], prior: Mapping[str, Any]
    ) -> ReconcileResult:
        result = ReconcileResult(state=dict(prior))
        if not self.descriptor.supports(Verb.UPDATE):
            result.diagnostics.add_warning(
                UPDATE_NOT_SUPPORTED,
                f"Updating {self.descriptor.article} {self.descriptor.label} is not currently "
                "supported by the API. It will be recreated if changed.",
            )
            return result
        try:
            async with self._session_factory() as client:
                result.state = await self._update(
                    CloudOperations(client), desired, prior, result.diagnostics
                )
        except (TheCloudError, ValueError) as exc:
            self._client_error(result.diagnostics, "update", exc)
        return result

    async def adelete(
        self, prior: Mapping[str, Any], *, cancel: asyncio.Event | None = None
    ) -> Diagnostics:
        diagnostics = Diagnostics()
        try:
            async with self._session_factory() as client:
                await self._delete(CloudOperations(client), prior, diagnostics, cancel)
        except (TheCloudError, ValueError) as exc:
            self._client_error(diagnostics, "delete", exc)
        return diagnostics

    async def aimport_state(self, external_id: str) -> ReconcileResult:
        result = ReconcileResult(state=None)
        try:
            result.state = self._import(external_id)
        except InvalidCompositeIdError as exc:
            result.diagnostics.add_error(UNEXPECTED_IMPORT_ID, str(exc))
        return result

    # Hooks ----------------------------------------------------------------------

    async def _create(
        self,
        ops: CloudOperations,
        desired: Mapping[str, Any],
        diagnostics: Diagnostics,  # noqa: ARG002
    ) -> State | None:
        request_type = self.descriptor.create_request
        if request_type is None:
            raise ValueError(f"{self.descriptor.label} has no create request type")
        created = await ops.resource(self.descriptor).create(
            request_type.model_validate(dict(desired)), **self._parents(desired)
        )
        return self._merge(desired, created)

    async def _read(self, ops: CloudOperations, prior: Mapping[str, Any]) -> State | None:
        found = await ops.resource(self.descriptor).get(self._key(prior), **self._parents(prior))
        if found is None:
            return None
        return self._merge(prior, found)

    async def _update(
        self,
        ops: CloudOperations,  # noqa: ARG002
        desired: Mapping[str, Any],  # noqa: ARG002
        prior: Mapping[str, Any],  # noqa: ARG002
        diagnostics: Diagnostics,  # noqa: ARG002
    ) -> State:
        raise UnsupportedOperationError(f"{self.descriptor.label} has no update handler")

    async def _delete(
        self,
        ops: CloudOperations,
        prior: Mapping[str, Any],
        diagnostics: Diagnostics,
        cancel: asyncio.Event | None,
    ) -> None:
        key = self._key(prior)
        resource = ops.resource(self.descriptor)
        await resource.delete(key, **self._parents(prior))
        if not self.descriptor.await_deletion:
            return

        label = self.descriptor.label
        try:
            await wait_until_absent(
                lambda: resource.get(key),
                policy=self._poll_policy,
                cancel=cancel,
                description=f"{label} {key}",
            )
        except PollTimeoutError:
            diagnostics.add_error("Delete Timeout", f"Timed out waiting for {label} to be deleted.")
        except PollCancelledError:
            diagnostics.add_error(
                "Delete Cancelled", f"Cancelled while waiting for {label} to be deleted."
            )
        except TheCloudError as exc:
            diagnostics.add_error(CLIENT_ERROR, f"Error checking {label} status: {exc}")

    def _import(self, external_id: str) -> State:
        return {self.descriptor.key_attribute: external_id}

    # Helpers ----------------------------------------------------------------------

    def _merge(self, base: Mapping[str, Any], model: CloudModel) -> State:
        merged = merge_observed(
            base,
            observed(model),
            secrets=self.descriptor.secret_attributes,
            excluded=self.descriptor.state_excludes | self.descriptor.local_attributes,
        )
        return without(merged, self.descriptor.state_excludes)

    def _key(self, state: Mapping[str, Any]) -> str:
        value = state.get(self.descriptor.key_attribute)
        if value in (None, ""):
            raise ValueError(
                f"{self.descriptor.label} state has no {self.descriptor.key_attribute!r}"
            )
        return str(value)

    def _parents(self, state: Mapping[str, Any]) -> dict[str, str]:
        return {
            name: str(state[name])
            for name in self.descriptor.parent_attributes
            if state.get(name) not in (None, "")
        }

    def _client_error(self, diagnostics: Diagnostics, verb: str, exc: Exception) -> None:
        log.debug("%s %s failed: %s", verb, self.descriptor.label, exc)
        diagnostics.add_error(
            CLIENT_ERROR, f"Unable to {verb} {self.descriptor.label}, got error: {exc}"
        )

