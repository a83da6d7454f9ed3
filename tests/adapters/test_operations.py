from __future__ import annotations

import asyncio
import base64
from typing import TYPE_CHECKING

import pytest

from tests.support.fake_api import ok, raw
from thecloud.adapters.thecloud import catalog
from thecloud.adapters.thecloud.errors import APIError, UnsupportedOperationError
from thecloud.adapters.thecloud.operations import CloudOperations
from thecloud.adapters.thecloud.schema import LBTarget, LBTargetCreate, SubnetCreate

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from tests.support.fake_api import FakeCloudAPI
    from thecloud.adapters.thecloud.client import TheCloudClient


def _run[T](client: TheCloudClient, call: Callable[[CloudOperations], Awaitable[T]]) -> T:
    async def run() -> T:
        async with client:
            return await call(CloudOperations(client))

    return asyncio.run(run())


@pytest.fixture
def lb_with_one_target(fake_api: FakeCloudAPI) -> FakeCloudAPI:
    fake_api.on("GET", "/lb/lb-1", ok({"id": "lb-1", "name": "web", "port": 80}))
    fake_api.on("GET", "/lb/lb-1/targets", ok([{"instance_id": "i-1", "port": 80, "weight": 50}]))
    return fake_api


def test_find_lb_target_scans_target_list(
    lb_with_one_target: FakeCloudAPI, cloud_client: TheCloudClient
) -> None:
    async def lookups(ops: CloudOperations) -> tuple[LBTarget | None, LBTarget | None]:
        return await ops.find_lb_target("lb-1", "i-1"), await ops.find_lb_target("lb-1", "i-2")

    present, missing = _run(cloud_client, lookups)

    assert present == LBTarget(instance_id="i-1", port=80, weight=50)
    assert missing is None


def test_get_load_balancer_joins_targets(
    lb_with_one_target: FakeCloudAPI, cloud_client: TheCloudClient
) -> None:
    lb = _run(cloud_client, lambda ops: ops.get_load_balancer("lb-1"))

    assert lb is not None
    assert [target.instance_id for target in lb.targets] == ["i-1"]


def test_add_lb_target_posts_to_parent_path(
    fake_api: FakeCloudAPI, cloud_client: TheCloudClient
) -> None:
    fake_api.on("POST", "/lb/lb-1/targets", raw(201))

    _run(
        cloud_client,
        lambda ops: ops.add_lb_target("lb-1", LBTargetCreate(instance_id="i-1", port=8080)),
    )

    (sent,) = fake_api.calls("POST", "/lb/lb-1/targets")
    assert sent.body == {"instance_id": "i-1", "port": 8080}


def test_add_lb_target_to_missing_balancer_is_not_found(cloud_client: TheCloudClient) -> None:
    with pytest.raises(APIError) as exc:
        _run(
            cloud_client,
            lambda ops: ops.add_lb_target("lb-x", LBTargetCreate(instance_id="i-1", port=80)),
        )

    assert exc.value.status_code == 404
    assert exc.value.type == "not_found"


def test_create_under_missing_parent_is_not_found(cloud_client: TheCloudClient) -> None:
    request = SubnetCreate(name="a", cidr_block="10.0.1.0/24")

    with pytest.raises(APIError, match="not found"):
        _run(
            cloud_client,
            lambda ops: ops.resource(catalog.SUBNET).create(request, vpc_id="vpc-missing"),
        )


def test_subnet_listing_requires_parent_id(cloud_client: TheCloudClient) -> None:
    with pytest.raises(ValueError, match="vpc_id"):
        _run(cloud_client, lambda ops: ops.resource(catalog.SUBNET).list())


def test_unsupported_verb_is_rejected_before_any_request(
    fake_api: FakeCloudAPI, cloud_client: TheCloudClient
) -> None:
    with pytest.raises(UnsupportedOperationError):
        _run(cloud_client, lambda ops: ops.resource(catalog.SECURITY_GROUP).list())

    assert fake_api.requests == []


def test_find_security_rule_reads_group_rules(
    fake_api: FakeCloudAPI, cloud_client: TheCloudClient
) -> None:
    fake_api.on(
        "GET",
        "/security-groups/sg-1",
        ok(
            {
                "id": "sg-1",
                "name": "web",
                "rules": [
                    {"id": "r-1", "direction": "ingress", "protocol": "tcp", "cidr": "0.0.0.0/0"}
                ],
            }
        ),
    )

    rule = _run(cloud_client, lambda ops: ops.find_security_rule("sg-1", "r-1"))

    assert rule is not None
    assert rule.group_id == "sg-1"
    assert rule.protocol == "tcp"


def test_elastic_ip_association_round_trip(
    fake_api: FakeCloudAPI, cloud_client: TheCloudClient
) -> None:
    fake_api.on(
        "POST",
        "/elastic-ips/eip-1/associate",
        ok({"id": "eip-1", "public_ip": "203.0.113.7", "instance_id": "i-1"}),
    )
    fake_api.on("POST", "/elastic-ips/eip-1/disassociate", ok({"id": "eip-1"}))

    async def associate_then_release(ops: CloudOperations) -> str | None:
        eip = await ops.associate_elastic_ip("eip-1", "i-1")
        await ops.disassociate_elastic_ip("eip-1")
        return eip.instance_id

    assert _run(cloud_client, associate_then_release) == "i-1"
    (sent,) = fake_api.calls("POST", "/elastic-ips/eip-1/associate")
    assert sent.body == {"instance_id": "i-1"}


def test_cluster_scale_and_upgrade_paths(
    fake_api: FakeCloudAPI, cloud_client: TheCloudClient
) -> None:
    fake_api.on("POST", "/clusters/c-1/scale", raw(202))
    fake_api.on("POST", "/clusters/c-1/upgrade", raw(202))

    async def scale_then_upgrade(ops: CloudOperations) -> None:
        await ops.scale_cluster("c-1", 5)
        await ops.upgrade_cluster("c-1", "v1.30.0")

    _run(cloud_client, scale_then_upgrade)

    assert fake_api.calls("POST", "/clusters/c-1/scale")[0].body == {"workers": 5}
    assert fake_api.calls("POST", "/clusters/c-1/upgrade")[0].body == {"version": "v1.30.0"}


def test_bucket_versioning_uses_patch(fake_api: FakeCloudAPI, cloud_client: TheCloudClient) -> None:
    fake_api.on("PATCH", "/storage/buckets/logs/versioning", raw(200))

    _run(cloud_client, lambda ops: ops.set_bucket_versioning("logs", enabled=True))

    assert fake_api.calls("PATCH", "/storage/buckets/logs/versioning")[0].body == {"enabled": True}


def test_upload_image_sends_base64_content(
    fake_api: FakeCloudAPI, cloud_client: TheCloudClient
) -> None:
    fake_api.on("POST", "/images/img-1/upload", raw(200))

    _run(
        cloud_client,
        lambda ops: ops.upload_image("img-1", filename="disk.qcow2", content=b"\x00\x01image"),
    )

    (sent,) = fake_api.calls("POST", "/images/img-1/upload")
    assert sent.body["filename"] == "disk.qcow2"
    assert base64.b64decode(sent.body["content"]) == b"\x00\x01image"


def test_find_tenant_by_slug(fake_api: FakeCloudAPI, cloud_client: TheCloudClient) -> None:
    fake_api.on(
        "GET",
        "/tenants",
        ok([{"id": "t-1", "slug": "acme", "name": "Acme"}, {"id": "t-2", "slug": "globex"}]),
    )

    tenant = _run(cloud_client, lambda ops: ops.find_tenant_by_slug("globex"))

    assert tenant is not None
    assert tenant.id == "t-2"
