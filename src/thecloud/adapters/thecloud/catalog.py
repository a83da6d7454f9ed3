"""Descriptors for every entity family exposed by the control plane."""

from __future__ import annotations

from typing import Any

from . import schema
from .descriptors import CRD, CRUD, EntityDescriptor, Verb

CREATE_DELETE = frozenset({Verb.CREATE, Verb.DELETE})

VPC = EntityDescriptor(
    label="VPC",
    type_name="thecloud_vpc",
    model=schema.VPC,
    create_request=schema.VPCCreate,
    collection_path="/vpcs",
    singleton_path="/vpcs/{key}",
)

SUBNET = EntityDescriptor(
    label="subnet",
    type_name="thecloud_subnet",
    model=schema.Subnet,
    create_request=schema.SubnetCreate,
    collection_path="/vpcs/{vpc_id}/subnets",
    singleton_path="/subnets/{key}",
)

INSTANCE = EntityDescriptor(
    label="instance",
    type_name="thecloud_instance",
    model=schema.Instance,
    create_request=schema.InstanceCreate,
    collection_path="/instances",
    singleton_path="/instances/{key}",
    local_attributes=frozenset({"subnet_id"}),
)

VOLUME = EntityDescriptor(
    label="volume",
    type_name="thecloud_volume",
    model=schema.Volume,
    create_request=schema.VolumeCreate,
    collection_path="/volumes",
    singleton_path="/volumes/{key}",
)

SNAPSHOT = EntityDescriptor(
    label="snapshot",
    type_name="thecloud_snapshot",
    model=schema.Snapshot,
    create_request=schema.SnapshotCreate,
    collection_path="/snapshots",
    singleton_path="/snapshots/{key}",
)

SECURITY_GROUP = EntityDescriptor(
    label="security group",
    type_name="thecloud_security_group",
    model=schema.SecurityGroup,
    create_request=schema.SecurityGroupCreate,
    collection_path="/security-groups",
    singleton_path="/security-groups/{key}",
    verbs=CRD,
    state_excludes=frozenset({"rules"}),
)

SECURITY_RULE = EntityDescriptor(
    label="security group rule",
    type_name="thecloud_security_group_rule",
    model=schema.SecurityRule,
    create_request=schema.SecurityRuleCreate,
    collection_path="/security-groups/{security_group_id}/rules",
    delete_path="/security-groups/rules/{key}",
    verbs=CREATE_DELETE,
)

LOAD_BALANCER = EntityDescriptor(
    label="load balancer",
    type_name="thecloud_load_balancer",
    model=schema.LoadBalancer,
    create_request=schema.LoadBalancerCreate,
    collection_path="/lb",
    singleton_path="/lb/{key}",
    verbs=CRD,
    state_excludes=frozenset({"targets"}),
)

LB_TARGET = EntityDescriptor(
    label="load balancer target",
    type_name="thecloud_load_balancer_target",
    model=schema.LBTarget,
    create_request=schema.LBTargetCreate,
    collection_path="/lb/{load_balancer_id}/targets",
    delete_path="/lb/{load_balancer_id}/targets/{key}",
    key_attribute="instance_id",
    verbs=frozenset({Verb.CREATE, Verb.LIST, Verb.DELETE}),
)

SCALING_GROUP = EntityDescriptor(
    label="scaling group",
    type_name="thecloud_scaling_group",
    model=schema.ScalingGroup,
    create_request=schema.ScalingGroupCreate,
    collection_path="/autoscaling/groups",
    singleton_path="/autoscaling/groups/{key}",
    verbs=CRD,
    await_deletion=True,
)

SECRET = EntityDescriptor(
    label="secret",
    type_name="thecloud_secret",
    model=schema.Secret,
    create_request=schema.SecretCreate,
    collection_path="/secrets",
    singleton_path="/secrets/{key}",
    verbs=CRD,
    secret_attributes=frozenset({"value"}),
)

API_KEY = EntityDescriptor(
    label="API key",
    type_name="thecloud_api_key",
    model=schema.APIKeyRecord,
    create_request=schema.APIKeyCreate,
    collection_path="/auth/keys",
    delete_path="/auth/keys/{key}",
    verbs=frozenset({Verb.CREATE, Verb.LIST, Verb.DELETE}),
    secret_attributes=frozenset({"key"}),
)

DATABASE = EntityDescriptor(
    label="Database",
    type_name="thecloud_database",
    model=schema.Database,
    create_request=schema.DatabaseCreate,
    collection_path="/databases",
    singleton_path="/databases/{key}",
    secret_attributes=frozenset({"connection_string"}),
)

CACHE = EntityDescriptor(
    label="Cache",
    type_name="thecloud_cache",
    model=schema.Cache,
    create_request=schema.CacheCreate,
    collection_path="/caches",
    singleton_path="/caches/{key}",
    secret_attributes=frozenset({"connection_string"}),
)

ELASTIC_IP = EntityDescriptor(
    label="Elastic IP",
    type_name="thecloud_elastic_ip",
    model=schema.ElasticIP,
    create_request=schema.ElasticIPAllocate,
    collection_path="/elastic-ips",
    singleton_path="/elastic-ips/{key}",
)

ELASTIC_IP_ASSOCIATION = EntityDescriptor(
    label="Elastic IP association",
    type_name="thecloud_elastic_ip_association",
    model=schema.ElasticIP,
    create_request=schema.ElasticIPAssociate,
    collection_path="/elastic-ips/{eip_id}/associate",
    delete_path="/elastic-ips/{key}/disassociate",
    key_attribute="eip_id",
    verbs=frozenset({Verb.CREATE}),
)

DNS_ZONE = EntityDescriptor(
    label="DNS Zone",
    type_name="thecloud_dns_zone",
    model=schema.DNSZone,
    create_request=schema.DNSZoneCreate,
    collection_path="/dns/zones",
    singleton_path="/dns/zones/{key}",
)

DNS_RECORD = EntityDescriptor(
    label="DNS Record",
    type_name="thecloud_dns_record",
    model=schema.DNSRecord,
    create_request=schema.DNSRecordCreate,
    collection_path="/dns/zones/{zone_id}/records",
    singleton_path="/dns/records/{key}",
    verbs=CRD | {Verb.UPDATE},
)

CLUSTER = EntityDescriptor(
    label="Cluster",
    type_name="thecloud_cluster",
    model=schema.Cluster,
    create_request=schema.ClusterCreate,
    collection_path="/clusters",
    singleton_path="/clusters/{key}",
    verbs=CRUD | {Verb.UPDATE},
)

GLOBAL_LB = EntityDescriptor(
    label="Global LB",
    type_name="thecloud_global_lb",
    model=schema.GlobalLB,
    create_request=schema.GlobalLBCreate,
    collection_path="/global-lb",
    singleton_path="/global-lb/{key}",
    state_excludes=frozenset({"endpoints"}),
)

GLOBAL_ENDPOINT = EntityDescriptor(
    label="GLB Endpoint",
    type_name="thecloud_global_lb_endpoint",
    model=schema.GlobalEndpoint,
    create_request=schema.GlobalEndpointCreate,
    collection_path="/global-lb/{global_lb_id}/endpoints",
    delete_path="/global-lb/{global_lb_id}/endpoints/{key}",
    verbs=CREATE_DELETE,
)

BUCKET = EntityDescriptor(
    label="Bucket",
    type_name="thecloud_bucket",
    model=schema.Bucket,
    create_request=schema.BucketCreate,
    collection_path="/storage/buckets",
    singleton_path="/storage/buckets/{key}",
    key_attribute="name",
    verbs=CRUD | {Verb.UPDATE},
)

QUEUE = EntityDescriptor(
    label="Queue",
    type_name="thecloud_queue",
    model=schema.Queue,
    create_request=schema.QueueCreate,
    collection_path="/queues",
    singleton_path="/queues/{key}",
)

FUNCTION = EntityDescriptor(
    label="Function",
    type_name="thecloud_function",
    model=schema.Function,
    create_request=schema.FunctionCreate,
    collection_path="/functions",
    singleton_path="/functions/{key}",
    local_attributes=frozenset({"filename"}),
)

DEPLOYMENT = EntityDescriptor(
    label="Deployment",
    type_name="thecloud_deployment",
    model=schema.Deployment,
    create_request=schema.DeploymentCreate,
    collection_path="/containers/deployments",
    singleton_path="/containers/deployments/{key}",
    verbs=CRUD | {Verb.UPDATE},
)

GATEWAY_ROUTE = EntityDescriptor(
    label="Gateway Route",
    type_name="thecloud_gateway_route",
    model=schema.GatewayRoute,
    create_request=schema.GatewayRouteCreate,
    collection_path="/gateway/routes",
    singleton_path="/gateway/routes/{key}",
)

TENANT = EntityDescriptor(
    label="Tenant",
    type_name="thecloud_tenant",
    model=schema.Tenant,
    create_request=schema.TenantCreate,
    collection_path="/tenants",
    key_attribute="slug",
    verbs=frozenset({Verb.CREATE, Verb.LIST}),
)

IMAGE = EntityDescriptor(
    label="Image",
    type_name="thecloud_image",
    model=schema.Image,
    create_request=schema.ImageRegister,
    collection_path="/images",
    singleton_path="/images/{key}",
    local_attributes=frozenset({"filename"}),
)

ALL: tuple[EntityDescriptor[Any], ...] = (
    VPC,
    SUBNET,
    INSTANCE,
    VOLUME,
    SNAPSHOT,
    SECURITY_GROUP,
    SECURITY_RULE,
    LOAD_BALANCER,
    LB_TARGET,
    SCALING_GROUP,
    SECRET,
    API_KEY,
    DATABASE,
    CACHE,
    ELASTIC_IP,
    ELASTIC_IP_ASSOCIATION,
    DNS_ZONE,
    DNS_RECORD,
    CLUSTER,
    GLOBAL_LB,
    GLOBAL_ENDPOINT,
    BUCKET,
    QUEUE,
    FUNCTION,
    DEPLOYMENT,
    GATEWAY_ROUTE,
    TENANT,
    IMAGE,
)
