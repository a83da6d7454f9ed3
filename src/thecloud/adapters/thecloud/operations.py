"""Resource operations composing transport and envelope decoding per entity."""

from __future__ import annotations

import base64
from logging import getLogger
from typing import TYPE_CHECKING

from . import catalog
from .descriptors import EntityDescriptor, Verb
from .errors import APIError, UnsupportedOperationError
from .schema import (
    BucketVersioning,
    CloudModel,
    ClusterScale,
    ClusterUpgrade,
    DeploymentScale,
    DNSRecord,
    ElasticIP,
    ElasticIPAssociate,
    ImageUpload,
)

if TYPE_CHECKING:
    from collections.abc import Callable

    from .client import TheCloudClient
    from .schema import (
        APIKeyRecord,
        CloudRequest,
        DNSRecordCreate,
        GlobalEndpoint,
        GlobalEndpointCreate,
        LBTarget,
        LBTargetCreate,
        LoadBalancer,
        SecurityGroup,
        SecurityRule,
        Tenant,
    )

log = getLogger(__name__)


def _not_found(label: str, key: str) -> APIError:
    return APIError(f"{label} {key} not found", status_code=404, type="not_found")


class ResourceOperations[M: CloudModel]:
    """Create/read/list/delete for one entity family, driven by its descriptor."""

    def __init__(self, client: TheCloudClient, descriptor: EntityDescriptor[M]) -> None:
        self._client = client
        self.descriptor = descriptor

    def _require(self, verb: Verb) -> None:
        if not self.descriptor.supports(verb):
            raise UnsupportedOperationError(f"{self.descriptor.label} does not support {verb}")

    async def create(self, request: CloudRequest, **parents: str) -> M:
        """POST ``request`` to the collection path. Not idempotent."""
        self._require(Verb.CREATE)
        url = self.descriptor.collection_url(**parents)
        _, created = await self._client.send(
            "POST", url, body=request, into=self.descriptor.model
        )
        if created is None:
            raise _not_found(self.descriptor.label, url)
        return created

    async def get(self, key: str, **parents: str) -> M | None:
        """GET the singleton path; ``None`` when the server no longer knows ``key``."""
        self._require(Verb.READ)
        _, found = await self._client.send(
            "GET", self.descriptor.singleton_url(key, **parents), into=self.descriptor.model
        )
        return found

    async def list(self, **parents: str) -> list[M]:
        """GET the collection path. Server order carries no meaning."""
        self._require(Verb.LIST)
        _, items = await self._client.send(
            "GET",
            self.descriptor.collection_url(**parents),
            into=list[self.descriptor.model] | None,
        )
        return list(items or [])

    async def delete(self, key: str, **parents: str) -> None:
        """DELETE the entity. 200, 204 and 404 all count as success."""
        self._require(Verb.DELETE)
        await self._client.send("DELETE", self.descriptor.delete_url(key, **parents))

    async def find(self, predicate: Callable[[M], bool], **parents: str) -> M | None:
        for item in await self.list(**parents):
            if predicate(item):
                return item
        return None

    async def find_by_name(self, name: str, **parents: str) -> M | None:
        return await self.find(lambda item: getattr(item, "name", None) == name, **parents)


class CloudOperations:
    """Entry point for every control-plane verb, uniform or not."""

    def __init__(self, client: TheCloudClient) -> None:
        self._client = client

    def resource[M: CloudModel](self, descriptor: EntityDescriptor[M]) -> ResourceOperations[M]:
        return ResourceOperations(self._client, descriptor)

    async def _post(self, url: str, body: CloudRequest, *, label: str) -> None:
        status, _ = await self._client.send("POST", url, body=body)
        if status == 404:
            raise _not_found(label, url)

    # Load balancers ----------------------------------------------------------

    async def get_load_balancer(self, lb_id: str) -> LoadBalancer | None:
        lb = await self.resource(catalog.LOAD_BALANCER).get(lb_id)
        if lb is None:
            return None
        targets = await self.list_lb_targets(lb_id)
        return lb.model_copy(update={"targets": targets})

    async def list_lb_targets(self, lb_id: str) -> list[LBTarget]:
        return await self.resource(catalog.LB_TARGET).list(load_balancer_id=lb_id)

    async def add_lb_target(self, lb_id: str, target: LBTargetCreate) -> None:
        url = catalog.LB_TARGET.collection_url(load_balancer_id=lb_id)
        await self._post(url, target, label=catalog.LOAD_BALANCER.label)

    async def remove_lb_target(self, lb_id: str, instance_id: str) -> None:
        await self.resource(catalog.LB_TARGET).delete(instance_id, load_balancer_id=lb_id)

    async def find_lb_target(self, lb_id: str, instance_id: str) -> LBTarget | None:
        return await self.resource(catalog.LB_TARGET).find(
            lambda target: target.instance_id == instance_id, load_balancer_id=lb_id
        )

    # Security groups -----------------------------------------------------------

    async def get_security_group(self, group_id: str) -> SecurityGroup | None:
        return await self.resource(catalog.SECURITY_GROUP).get(group_id)

    async def find_security_rule(self, group_id: str, rule_id: str) -> SecurityRule | None:
        group = await self.get_security_group(group_id)
        if group is None:
            return None
        for rule in group.rules:
            if rule.id == rule_id:
                return rule.model_copy(update={"group_id": rule.group_id or group_id})
        return None

    # Elastic IPs -----------------------------------------------------------------

    async def associate_elastic_ip(self, eip_id: str, instance_id: str) -> ElasticIP:
        return await self.resource(catalog.ELASTIC_IP_ASSOCIATION).create(
            ElasticIPAssociate(instance_id=instance_id), eip_id=eip_id
        )

    async def disassociate_elastic_ip(self, eip_id: str) -> None:
        """Release the address; any body the server sends back is ignored."""
        await self._client.send("POST", catalog.ELASTIC_IP_ASSOCIATION.delete_url(eip_id))

    # Clusters and deployments ----------------------------------------------------

    async def scale_cluster(self, cluster_id: str, workers: int) -> None:
        url = catalog.CLUSTER.singleton_url(cluster_id) + "/scale"
        await self._post(url, ClusterScale(workers=workers), label=catalog.CLUSTER.label)

    async def upgrade_cluster(self, cluster_id: str, version: str) -> None:
        url = catalog.CLUSTER.singleton_url(cluster_id) + "/upgrade"
        await self._post(url, ClusterUpgrade(version=version), label=catalog.CLUSTER.label)

    async def scale_deployment(self, deployment_id: str, replicas: int) -> None:
        url = catalog.DEPLOYMENT.singleton_url(deployment_id) + "/scale"
        await self._post(url, DeploymentScale(replicas=replicas), label=catalog.DEPLOYMENT.label)

    # Global load balancers -------------------------------------------------------

    async def add_global_endpoint(
        self, glb_id: str, endpoint: GlobalEndpointCreate
    ) -> GlobalEndpoint:
        return await self.resource(catalog.GLOBAL_ENDPOINT).create(endpoint, global_lb_id=glb_id)

    async def remove_global_endpoint(self, glb_id: str, endpoint_id: str) -> None:
        await self.resource(catalog.GLOBAL_ENDPOINT).delete(endpoint_id, global_lb_id=glb_id)

    async def find_global_endpoint(self, glb_id: str, endpoint_id: str) -> GlobalEndpoint | None:
        glb = await self.resource(catalog.GLOBAL_LB).get(glb_id)
        if glb is None:
            return None
        return next((ep for ep in glb.endpoints if ep.id == endpoint_id), None)

    # Storage, DNS and images -----------------------------------------------------

    async def set_bucket_versioning(self, name: str, *, enabled: bool) -> None:
        url = catalog.BUCKET.singleton_url(name) + "/versioning"
        status, _ = await self._client.send("PATCH", url, body=BucketVersioning(enabled=enabled))
        if status == 404:
            raise _not_found(catalog.BUCKET.label, name)

    async def update_dns_record(self, record_id: str, record: DNSRecordCreate) -> DNSRecord:
        _, updated = await self._client.send(
            "PUT", catalog.DNS_RECORD.singleton_url(record_id), body=record, into=DNSRecord
        )
        if updated is None:
            raise _not_found(catalog.DNS_RECORD.label, record_id)
        return updated

    async def upload_image(self, image_id: str, *, filename: str, content: bytes) -> None:
        url = catalog.IMAGE.singleton_url(image_id) + "/upload"
        body = ImageUpload(filename=filename, content=base64.b64encode(content).decode("ascii"))
        log.debug("Uploading %d bytes for image %s", len(content), image_id)
        await self._post(url, body, label=catalog.IMAGE.label)

    # Keys and tenants --------------------------------------------------------------

    async def list_api_keys(self) -> list[APIKeyRecord]:
        return await self.resource(catalog.API_KEY).list()

    async def find_api_key(self, key_id: str) -> APIKeyRecord | None:
        return next((key for key in await self.list_api_keys() if key.id == key_id), None)

    async def list_tenants(self) -> list[Tenant]:
        return await self.resource(catalog.TENANT).list()

    async def find_tenant_by_slug(self, slug: str) -> Tenant | None:
        return next((tenant for tenant in await self.list_tenants() if tenant.slug == slug), None)
