"""Provider entry point wiring every entity family to its lifecycle implementation."""

from __future__ import annotations

from logging import getLogger
from types import MappingProxyType
from typing import TYPE_CHECKING, Any

from thecloud.adapters.thecloud import catalog
from thecloud.adapters.thecloud.client import TheCloudClient
from thecloud.config.provider import get_provider_config

from .associations import (
    ElasticIPAssociationReconciler,
    GlobalEndpointReconciler,
    LBTargetReconciler,
    SecurityRuleReconciler,
)
from .base import EntityReconciler
from .datasources import ListDataSource, LookupDataSource
from .resources import (
    APIKeyReconciler,
    BucketReconciler,
    ClusterReconciler,
    DeploymentReconciler,
    DNSRecordReconciler,
    FunctionReconciler,
    ImageReconciler,
    LoadBalancerReconciler,
    TenantReconciler,
)

if TYPE_CHECKING:
    from collections.abc import Mapping
    from pathlib import Path

    from thecloud.adapters.thecloud.client import ClientFactory
    from thecloud.adapters.thecloud.descriptors import EntityDescriptor
    from thecloud.config.provider import ProviderConfig
    from thecloud.domain.polling import PollPolicy
    from thecloud.domain.ports import DataSource, ResourceLifecycle

log = getLogger(__name__)

PROVIDER_TYPE_NAME = "thecloud"

RECONCILERS: Mapping[str, type[EntityReconciler[Any]]] = MappingProxyType(
    {
        catalog.LOAD_BALANCER.type_name: LoadBalancerReconciler,
        catalog.LB_TARGET.type_name: LBTargetReconciler,
        catalog.SECURITY_RULE.type_name: SecurityRuleReconciler,
        catalog.API_KEY.type_name: APIKeyReconciler,
        catalog.ELASTIC_IP_ASSOCIATION.type_name: ElasticIPAssociationReconciler,
        catalog.DNS_RECORD.type_name: DNSRecordReconciler,
        catalog.CLUSTER.type_name: ClusterReconciler,
        catalog.GLOBAL_ENDPOINT.type_name: GlobalEndpointReconciler,
        catalog.BUCKET.type_name: BucketReconciler,
        catalog.FUNCTION.type_name: FunctionReconciler,
        catalog.DEPLOYMENT.type_name: DeploymentReconciler,
        catalog.TENANT.type_name: TenantReconciler,
        catalog.IMAGE.type_name: ImageReconciler,
    }
)

# (descriptor, label, refetch after a name match)
LOOKUPS: tuple[tuple[EntityDescriptor[Any], str, bool], ...] = (
    (catalog.VPC, "VPC", False),
    (catalog.SUBNET, "subnet", False),
    (catalog.INSTANCE, "instance", False),
    (catalog.CLUSTER, "cluster", False),
    (catalog.DATABASE, "database", True),
    (catalog.FUNCTION, "function", False),
    (catalog.GATEWAY_ROUTE, "gateway route", False),
    (catalog.BUCKET, "bucket", False),
)

# (descriptor, collection attribute)
LISTINGS: tuple[tuple[EntityDescriptor[Any], str], ...] = (
    (catalog.VPC, "vpcs"),
    (catalog.SUBNET, "subnets"),
    (catalog.INSTANCE, "instances"),
    (catalog.CLUSTER, "clusters"),
    (catalog.DATABASE, "databases"),
    (catalog.FUNCTION, "functions"),
    (catalog.GATEWAY_ROUTE, "gateway_routes"),
    (catalog.BUCKET, "buckets"),
)


class TheCloudProvider:
    """Holds the resolved provider configuration and hands out lifecycles.

    Every lifecycle call opens its own :class:`TheCloudClient` session through
    :meth:`session`, so resources and data sources may be used concurrently.
    """

    def __init__(
        self,
        config: ProviderConfig,
        *,
        client_factory: ClientFactory | None = None,
        poll_policy: PollPolicy | None = None,
    ) -> None:
        self.config = config
        self._client_factory = client_factory
        self._poll_policy = poll_policy
        self._resources = self._build_resources()
        self._data_sources = self._build_data_sources()
        log.debug(
            "Configured provider for %s with %d resources and %d data sources",
            config.endpoint,
            len(self._resources),
            len(self._data_sources),
        )

    @classmethod
    def configure(
        cls,
        *,
        endpoint: str | None = None,
        api_key: str | None = None,
        dotenv_path: str | Path | None = None,
        client_factory: ClientFactory | None = None,
        poll_policy: PollPolicy | None = None,
    ) -> TheCloudProvider:
        """Resolve configuration from arguments and the environment, then build."""
        config = get_provider_config(endpoint=endpoint, api_key=api_key, dotenv_path=dotenv_path)
        return cls(config, client_factory=client_factory, poll_policy=poll_policy)

    def session(self) -> TheCloudClient:
        return TheCloudClient(self.config, client_factory=self._client_factory)

    def resources(self) -> Mapping[str, ResourceLifecycle]:
        return MappingProxyType(self._resources)

    def data_sources(self) -> Mapping[str, DataSource]:
        return MappingProxyType(self._data_sources)

    def resource(self, type_name: str) -> ResourceLifecycle:
        try:
            return self._resources[type_name]
        except KeyError:
            raise KeyError(f"Unknown resource type {type_name!r}") from None

    def data_source(self, type_name: str) -> DataSource:
        try:
            return self._data_sources[type_name]
        except KeyError:
            raise KeyError(f"Unknown data source type {type_name!r}") from None

    def _build_resources(self) -> dict[str, ResourceLifecycle]:
        built: dict[str, ResourceLifecycle] = {}
        for descriptor in catalog.ALL:
            reconciler = RECONCILERS.get(descriptor.type_name, EntityReconciler)
            built[descriptor.type_name] = reconciler(
                descriptor, session_factory=self.session, poll_policy=self._poll_policy
            )
        return built

    def _build_data_sources(self) -> dict[str, DataSource]:
        built: dict[str, DataSource] = {}
        for descriptor, label, refetch in LOOKUPS:
            built[descriptor.type_name] = LookupDataSource(
                descriptor, session_factory=self.session, label=label, refetch=refetch
            )
        for descriptor, attribute in LISTINGS:
            type_name = f"{PROVIDER_TYPE_NAME}_{attribute}"
            built[type_name] = ListDataSource(
                descriptor,
                session_factory=self.session,
                type_name=type_name,
                collection_attribute=attribute,
            )
        return built
