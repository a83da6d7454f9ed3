"""Reconcilers for entities whose lifecycle departs from plain create/read/delete."""

from __future__ import annotations

import base64
from logging import getLogger
from pathlib import Path
from typing import TYPE_CHECKING, Any

from thecloud.adapters.thecloud.errors import TheCloudError
from thecloud.adapters.thecloud.schema import (
    APIKeyRecord,
    Bucket,
    Cluster,
    Deployment,
    DNSRecord,
    DNSRecordCreate,
    Function,
    FunctionCreate,
    Image,
    ImageRegister,
    LoadBalancer,
    Tenant,
)

from .base import CLIENT_ERROR, DELETE_NOT_SUPPORTED, EntityReconciler

if TYPE_CHECKING:
    import asyncio
    from collections.abc import Mapping

    from thecloud.adapters.thecloud.operations import CloudOperations
    from thecloud.domain.diagnostics import Diagnostics
    from thecloud.domain.state import State

log = getLogger(__name__)

FILE_ERROR = "File Error"


def _changed(desired: Mapping[str, Any], prior: Mapping[str, Any], name: str) -> bool:
    return desired.get(name) is not None and desired.get(name) != prior.get(name)


class LoadBalancerReconciler(EntityReconciler[LoadBalancer]):
    async def _read(self, ops: CloudOperations, prior: Mapping[str, Any]) -> State | None:
        lb = await ops.get_load_balancer(self._key(prior))
        if lb is None:
            return None
        log.debug("load balancer %s has %d targets", lb.id, len(lb.targets))
        return self._merge(prior, lb)


class ClusterReconciler(EntityReconciler[Cluster]):
    """Worker count changes scale the cluster; version changes upgrade it."""

    async def _update(
        self,
        ops: CloudOperations,
        desired: Mapping[str, Any],
        prior: Mapping[str, Any],
        diagnostics: Diagnostics,  # noqa: ARG002
    ) -> State:
        cluster_id = self._key(prior)
        if _changed(desired, prior, "worker_count"):
            await ops.scale_cluster(cluster_id, int(desired["worker_count"]))
        if _changed(desired, prior, "version"):
            await ops.upgrade_cluster(cluster_id, str(desired["version"]))
        return {**prior, **desired, "id": cluster_id}


class DNSRecordReconciler(EntityReconciler[DNSRecord]):
    async def _update(
        self,
        ops: CloudOperations,
        desired: Mapping[str, Any],
        prior: Mapping[str, Any],
        diagnostics: Diagnostics,  # noqa: ARG002
    ) -> State:
        record_id = self._key(prior)
        request = DNSRecordCreate.model_validate(dict(desired))
        updated = await ops.update_dns_record(record_id, request)
        return self._merge({**prior, **desired, "id": record_id}, updated)


class BucketReconciler(EntityReconciler[Bucket]):
    """Buckets are keyed by name; versioning is a separate toggle on the API."""

    async def _create(
        self,
        ops: CloudOperations,
        desired: Mapping[str, Any],
        diagnostics: Diagnostics,
    ) -> State | None:
        state = await super()._create(ops, desired, diagnostics)
        if state is not None and desired.get("versioning_enabled"):
            await ops.set_bucket_versioning(str(state["name"]), enabled=True)
            state["versioning_enabled"] = True
        return state

    async def _update(
        self,
        ops: CloudOperations,
        desired: Mapping[str, Any],
        prior: Mapping[str, Any],
        diagnostics: Diagnostics,  # noqa: ARG002
    ) -> State:
        name = self._key(prior)
        enabled = bool(desired.get("versioning_enabled"))
        if enabled != bool(prior.get("versioning_enabled")):
            await ops.set_bucket_versioning(name, enabled=enabled)
        return {**prior, **desired, "name": name, "versioning_enabled": enabled}


class DeploymentReconciler(EntityReconciler[Deployment]):
    async def _update(
        self,
        ops: CloudOperations,
        desired: Mapping[str, Any],
        prior: Mapping[str, Any],
        diagnostics: Diagnostics,  # noqa: ARG002
    ) -> State:
        deployment_id = self._key(prior)
        if _changed(desired, prior, "replicas"):
            await ops.scale_deployment(deployment_id, int(desired["replicas"]))
        return {**prior, **desired, "id": deployment_id}


class FunctionReconciler(EntityReconciler[Function]):
    """Functions upload their code archive inline with the create request."""

    async def _create(
        self,
        ops: CloudOperations,
        desired: Mapping[str, Any],
        diagnostics: Diagnostics,
    ) -> State | None:
        filename = str(desired.get("filename") or "")
        try:
            code = Path(filename).read_bytes()
        except OSError as exc:
            diagnostics.add_error(
                FILE_ERROR, f"Unable to read code file {filename}, got error: {exc}"
            )
            return None

        request = FunctionCreate.model_validate(
            {**desired, "code": base64.b64encode(code).decode("ascii")}
        )
        created = await ops.resource(self.descriptor).create(request)
        return self._merge(desired, created)


class ImageReconciler(EntityReconciler[Image]):
    """Images are registered first and their file uploaded afterwards."""

    async def _create(
        self,
        ops: CloudOperations,
        desired: Mapping[str, Any],
        diagnostics: Diagnostics,
    ) -> State | None:
        filename = str(desired.get("filename") or "")
        try:
            content = Path(filename).read_bytes()
        except OSError as exc:
            diagnostics.add_error(
                FILE_ERROR, f"Unable to read image file {filename}, got error: {exc}"
            )
            return None

        image = await ops.resource(self.descriptor).create(
            ImageRegister.model_validate(dict(desired))
        )
        state = self._merge(desired, image)
        try:
            await ops.upload_image(image.id, filename=Path(filename).name, content=content)
        except TheCloudError as exc:
            # The image exists remotely; keep it in state so it can be destroyed.
            diagnostics.add_error(CLIENT_ERROR, f"Unable to upload Image, got error: {exc}")
        return state


class APIKeyReconciler(EntityReconciler[APIKeyRecord]):
    """API keys have no singleton GET; they are found by listing."""

    async def _read(self, ops: CloudOperations, prior: Mapping[str, Any]) -> State | None:
        key = await ops.find_api_key(self._key(prior))
        if key is None:
            return None
        return self._merge(prior, key)


class TenantReconciler(EntityReconciler[Tenant]):
    """Tenants are keyed by slug and cannot be deleted through the API."""

    async def _read(self, ops: CloudOperations, prior: Mapping[str, Any]) -> State | None:
        tenant = await ops.find_tenant_by_slug(self._key(prior))
        if tenant is None:
            return None
        return self._merge(prior, tenant)

    async def _delete(
        self,
        ops: CloudOperations,  # noqa: ARG002
        prior: Mapping[str, Any],  # noqa: ARG002
        diagnostics: Diagnostics,
        cancel: asyncio.Event | None,  # noqa: ARG002
    ) -> None:
        diagnostics.add_warning(
            DELETE_NOT_SUPPORTED, "The backend does not support deleting tenants via API yet."
        )
