"""TheCloud control-plane payload schemas."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

type ResourceId = str
type PortMap = str  # "host:container" pairs separated by commas, e.g. "80:80,443:8443"


class CloudModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class CloudRequest(BaseModel):
    """Base for request bodies; unknown desired-state keys are dropped on validation."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


# Envelope ------------------------------------------------------------------


class ErrorBody(CloudModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True, coerce_numbers_to_str=True)

    type: str | None = None
    message: str = ""
    code: str | None = None


class Envelope(CloudModel):
    """Outer response object; older endpoints report ``error`` as a bare string."""

    data: Any = None
    error: ErrorBody | str | None = None


# Networking ----------------------------------------------------------------


class VPC(CloudModel):
    id: ResourceId
    name: str | None = None
    cidr_block: str | None = None
    status: str | None = None


class VPCCreate(CloudRequest):
    name: str
    cidr_block: str


class Subnet(CloudModel):
    id: ResourceId
    vpc_id: ResourceId | None = None
    name: str | None = None
    cidr_block: str | None = None
    availability_zone: str | None = None


class SubnetCreate(CloudRequest):
    name: str
    cidr_block: str
    availability_zone: str | None = None


class SecurityRule(CloudModel):
    id: ResourceId | None = None
    group_id: ResourceId | None = None
    direction: str | None = None
    protocol: str | None = None
    port_min: int | None = None
    port_max: int | None = None
    cidr: str | None = None
    priority: int | None = None


class SecurityRuleCreate(CloudRequest):
    group_id: ResourceId | None = Field(default=None, validation_alias="security_group_id")
    direction: str
    protocol: str
    port_min: int | None = None
    port_max: int | None = None
    cidr: str
    priority: int | None = None


class SecurityGroup(CloudModel):
    id: ResourceId
    vpc_id: ResourceId | None = None
    name: str | None = None
    description: str | None = None
    rules: list[SecurityRule] = Field(default_factory=list)


class SecurityGroupCreate(CloudRequest):
    vpc_id: ResourceId
    name: str
    description: str | None = None


class ElasticIP(CloudModel):
    id: ResourceId
    public_ip: str | None = None
    instance_id: ResourceId | None = None
    status: str | None = None


class ElasticIPAllocate(CloudRequest):
    pass


class ElasticIPAssociate(CloudRequest):
    instance_id: ResourceId


class DNSZone(CloudModel):
    id: ResourceId
    name: str | None = None
    description: str | None = None
    vpc_id: ResourceId | None = None
    status: str | None = None


class DNSZoneCreate(CloudRequest):
    name: str
    description: str | None = None
    vpc_id: ResourceId | None = None


class DNSRecord(CloudModel):
    id: ResourceId
    zone_id: ResourceId | None = None
    name: str | None = None
    type: str | None = None
    content: str | None = None
    ttl: int | None = None
    priority: int | None = None


class DNSRecordCreate(CloudRequest):
    name: str
    type: str
    content: str
    ttl: int | None = None
    priority: int | None = None


# Compute -------------------------------------------------------------------


class Instance(CloudModel):
    id: ResourceId
    name: str | None = None
    image: str | None = None
    ports: PortMap | None = None
    vpc_id: ResourceId | None = None
    status: str | None = None
    ip_address: str | None = None


class InstanceCreate(CloudRequest):
    name: str
    image: str
    ports: PortMap | None = None
    vpc_id: ResourceId | None = None
    subnet_id: ResourceId | None = None


class Volume(CloudModel):
    id: ResourceId
    name: str | None = None
    size_gb: int | None = None
    status: str | None = None


class VolumeCreate(CloudRequest):
    name: str
    size_gb: int


class Snapshot(CloudModel):
    id: ResourceId
    volume_id: ResourceId | None = None
    description: str | None = None
    status: str | None = None


class SnapshotCreate(CloudRequest):
    volume_id: ResourceId
    description: str | None = None


class ScalingGroup(CloudModel):
    id: ResourceId
    name: str | None = None
    vpc_id: ResourceId | None = None
    load_balancer_id: ResourceId | None = None
    image: str | None = None
    ports: PortMap | None = None
    min_instances: int | None = None
    max_instances: int | None = None
    desired_count: int | None = None
    status: str | None = None


class ScalingGroupCreate(CloudRequest):
    name: str
    vpc_id: ResourceId
    load_balancer_id: ResourceId | None = None
    image: str
    ports: PortMap | None = None
    min_instances: int = 0
    max_instances: int
    desired_count: int


class Image(CloudModel):
    id: ResourceId
    name: str | None = None
    description: str | None = None
    os: str | None = None
    version: str | None = None
    is_public: bool | None = None
    status: str | None = None


class ImageRegister(CloudRequest):
    name: str
    description: str | None = None
    os: str
    version: str | None = None
    is_public: bool = False


class ImageUpload(CloudRequest):
    filename: str
    content: str  # base64


# Load balancing -------------------------------------------------------------


class LBTarget(CloudModel):
    instance_id: ResourceId
    port: int | None = None
    weight: int | None = None


class LBTargetCreate(CloudRequest):
    instance_id: ResourceId
    port: int
    weight: int | None = None


class LoadBalancer(CloudModel):
    id: ResourceId
    name: str | None = None
    vpc_id: ResourceId | None = None
    port: int | None = None
    algorithm: str | None = None
    status: str | None = None
    targets: list[LBTarget] = Field(default_factory=list)


class LoadBalancerCreate(CloudRequest):
    name: str
    vpc_id: ResourceId
    port: int
    algorithm: str | None = None


class GlobalHealthCheck(CloudModel):
    protocol: str | None = None
    port: int | None = None
    path: str | None = None
    interval_sec: int | None = None
    timeout_sec: int | None = None
    healthy_count: int | None = None
    unhealthy_count: int | None = None


class GlobalEndpoint(CloudModel):
    id: ResourceId
    region: str | None = None
    target_type: str | None = None
    target_id: ResourceId | None = None
    target_ip: str | None = None
    weight: int | None = None
    priority: int | None = None
    healthy: bool | None = None


class GlobalEndpointCreate(CloudRequest):
    region: str
    target_type: str
    target_id: ResourceId | None = None
    target_ip: str | None = None
    weight: int | None = None
    priority: int | None = None


class GlobalLB(CloudModel):
    id: ResourceId
    name: str | None = None
    hostname: str | None = None
    policy: str | None = None
    status: str | None = None
    health_check: GlobalHealthCheck | None = None
    endpoints: list[GlobalEndpoint] = Field(default_factory=list)


class GlobalLBCreate(CloudRequest):
    name: str
    hostname: str
    policy: str | None = None
    health_check: GlobalHealthCheck


class GatewayRoute(CloudModel):
    id: ResourceId
    name: str | None = None
    path_prefix: str | None = None
    target_url: str | None = None
    methods: list[str] | None = None
    strip_prefix: bool | None = None
    rate_limit: int | None = None
    priority: int | None = None


class GatewayRouteCreate(CloudRequest):
    name: str
    path_prefix: str
    target_url: str
    methods: list[str] = Field(default_factory=list)
    strip_prefix: bool = False
    rate_limit: int | None = None
    priority: int | None = None


# Managed services ------------------------------------------------------------


class Secret(CloudModel):
    id: ResourceId
    name: str | None = None
    value: str | None = None
    description: str | None = None


class SecretCreate(CloudRequest):
    name: str
    value: str
    description: str | None = None


class APIKeyRecord(CloudModel):
    id: ResourceId
    name: str | None = None
    key: str | None = None
    created_at: str | None = None


class APIKeyCreate(CloudRequest):
    name: str


class Database(CloudModel):
    id: ResourceId
    name: str | None = None
    engine: str | None = None
    version: str | None = None
    vpc_id: ResourceId | None = None
    status: str | None = None
    port: int | None = None
    username: str | None = None
    connection_string: str | None = None


class DatabaseCreate(CloudRequest):
    name: str
    engine: str
    version: str | None = None
    vpc_id: ResourceId | None = None


class Cache(CloudModel):
    id: ResourceId
    name: str | None = None
    engine: str | None = None
    version: str | None = None
    vpc_id: ResourceId | None = None
    memory_mb: int | None = None
    status: str | None = None
    port: int | None = None
    connection_string: str | None = None


class CacheCreate(CloudRequest):
    name: str
    version: str | None = None
    memory_mb: int
    vpc_id: ResourceId | None = None


class Cluster(CloudModel):
    id: ResourceId
    name: str | None = None
    vpc_id: ResourceId | None = None
    version: str | None = None
    worker_count: int | None = None
    status: str | None = None
    pod_cidr: str | None = None
    service_cidr: str | None = None
    network_isolation: bool | None = None
    ha_enabled: bool | None = None
    api_server_lb_address: str | None = None


class ClusterCreate(CloudRequest):
    name: str
    vpc_id: ResourceId
    version: str | None = None
    worker_count: int | None = Field(default=None, serialization_alias="workers")
    network_isolation: bool = False
    ha_enabled: bool = Field(default=False, serialization_alias="ha")


class ClusterScale(CloudRequest):
    workers: int


class ClusterUpgrade(CloudRequest):
    version: str


class Bucket(CloudModel):
    id: ResourceId | None = None
    name: str
    is_public: bool | None = None
    versioning_enabled: bool | None = None
    encryption_enabled: bool | None = None
    created_at: str | None = None


class BucketCreate(CloudRequest):
    name: str
    is_public: bool = False


class BucketVersioning(CloudRequest):
    enabled: bool


class Queue(CloudModel):
    id: ResourceId
    name: str | None = None
    arn: str | None = None
    visibility_timeout: int | None = None
    retention_days: int | None = None
    max_message_size: int | None = None
    status: str | None = None


class QueueCreate(CloudRequest):
    name: str
    visibility_timeout: int | None = None
    retention_days: int | None = None
    max_message_size: int | None = None


class Function(CloudModel):
    id: ResourceId
    name: str | None = None
    runtime: str | None = None
    handler: str | None = None
    status: str | None = None
    created_at: str | None = None


class FunctionCreate(CloudRequest):
    name: str
    runtime: str
    handler: str
    code: str  # base64


class Deployment(CloudModel):
    id: ResourceId
    name: str | None = None
    image: str | None = None
    replicas: int | None = None
    current_count: int | None = None
    ports: PortMap | None = None
    status: str | None = None


class DeploymentCreate(CloudRequest):
    name: str
    image: str
    replicas: int = 1
    ports: PortMap | None = None


class DeploymentScale(CloudRequest):
    replicas: int


class Tenant(CloudModel):
    id: ResourceId
    name: str | None = None
    slug: str | None = None
    owner_id: ResourceId | None = None
    plan: str | None = None
    status: str | None = None
    created_at: str | None = None


class TenantCreate(CloudRequest):
    name: str
    slug: str
