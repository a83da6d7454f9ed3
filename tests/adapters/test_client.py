from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Any

import pytest

from tests.support.fake_api import API_KEY, FAST_RETRY, failure, network_down, ok, raw
from thecloud.adapters.thecloud import catalog
from thecloud.adapters.thecloud.client import TheCloudClient
from thecloud.adapters.thecloud.descriptors import Verb
from thecloud.adapters.thecloud.errors import APIError, DecodeError, TheCloudError, TransportError
from thecloud.adapters.thecloud.operations import CloudOperations
from thecloud.adapters.thecloud.schema import VPC, VPCCreate

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from tests.support.fake_api import FakeCloudAPI
    from thecloud.adapters.thecloud.descriptors import EntityDescriptor


def _run[T](client: TheCloudClient, call: Callable[[CloudOperations], Awaitable[T]]) -> T:
    async def run() -> T:
        async with client:
            return await call(CloudOperations(client))

    return asyncio.run(run())


def test_create_vpc_returns_server_entity(
    fake_api: FakeCloudAPI, cloud_client: TheCloudClient
) -> None:
    fake_api.on(
        "POST",
        "/vpcs",
        ok(
            {
                "id": "vpc-123",
                "name": "test-vpc",
                "cidr_block": "10.0.0.0/16",
                "status": "available",
            },
            status=201,
        ),
    )
    request = VPCCreate(name="test-vpc", cidr_block="10.0.0.0/16")

    vpc = _run(cloud_client, lambda ops: ops.resource(catalog.VPC).create(request))

    assert vpc == VPC(id="vpc-123", name="test-vpc", cidr_block="10.0.0.0/16", status="available")
    (sent,) = fake_api.calls("POST", "/vpcs")
    assert sent.body == {"name": "test-vpc", "cidr_block": "10.0.0.0/16"}


def test_every_request_carries_api_key_and_json_content_type(
    fake_api: FakeCloudAPI, cloud_client: TheCloudClient
) -> None:
    fake_api.on("GET", "/vpcs/vpc-1", ok({"id": "vpc-1"}))
    fake_api.on("DELETE", "/vpcs/vpc-1", raw(204))

    async def calls(ops: CloudOperations) -> None:
        await ops.resource(catalog.VPC).get("vpc-1")
        await ops.resource(catalog.VPC).delete("vpc-1")

    _run(cloud_client, calls)

    assert len(fake_api.requests) == 2
    for request in fake_api.requests:
        assert request.headers["x-api-key"] == API_KEY
        assert request.headers["content-type"] == "application/json"


def test_get_maps_404_to_none(fake_api: FakeCloudAPI, cloud_client: TheCloudClient) -> None:
    fake_api.on("GET", "/instances/i-gone", failure(404, "instance not found"))

    found = _run(cloud_client, lambda ops: ops.resource(catalog.INSTANCE).get("i-gone"))

    assert found is None


def test_list_handles_null_data(fake_api: FakeCloudAPI, cloud_client: TheCloudClient) -> None:
    fake_api.on("GET", "/vpcs", ok(None))

    assert _run(cloud_client, lambda ops: ops.resource(catalog.VPC).list()) == []


@pytest.mark.parametrize("status", [200, 204, 404])
def test_delete_succeeds_for_absent_or_removed_entities(
    fake_api: FakeCloudAPI, cloud_client: TheCloudClient, status: int
) -> None:
    fake_api.on("DELETE", "/volumes/vol-1", raw(status))

    _run(cloud_client, lambda ops: ops.resource(catalog.VOLUME).delete("vol-1"))

    assert len(fake_api.calls("DELETE", "/volumes/vol-1")) == 1


def test_error_envelope_becomes_api_error(
    fake_api: FakeCloudAPI, cloud_client: TheCloudClient
) -> None:
    fake_api.on(
        "POST", "/vpcs", failure(409, "vpc name already in use", type="conflict", code="VPC_EXISTS")
    )
    request = VPCCreate(name="dup", cidr_block="10.0.0.0/16")

    with pytest.raises(APIError) as exc:
        _run(cloud_client, lambda ops: ops.resource(catalog.VPC).create(request))

    assert exc.value.status_code == 409
    assert exc.value.type == "conflict"
    assert exc.value.code == "VPC_EXISTS"
    assert "vpc name already in use" in str(exc.value)


def test_unstructured_error_body_reports_status(
    fake_api: FakeCloudAPI, cloud_client: TheCloudClient
) -> None:
    fake_api.on("GET", "/vpcs/vpc-1", raw(400, b"bad things"))

    with pytest.raises(APIError, match="unexpected status code: 400"):
        _run(cloud_client, lambda ops: ops.resource(catalog.VPC).get("vpc-1"))


def test_server_errors_are_retried_then_reported(
    fake_api: FakeCloudAPI, cloud_client: TheCloudClient
) -> None:
    fake_api.on("GET", "/vpcs/vpc-1", raw(503))

    with pytest.raises(APIError) as exc:
        _run(cloud_client, lambda ops: ops.resource(catalog.VPC).get("vpc-1"))

    assert exc.value.status_code == 503
    assert len(fake_api.calls("GET", "/vpcs/vpc-1")) == FAST_RETRY.total + 1


def test_transport_failure_becomes_transport_error(
    fake_api: FakeCloudAPI, cloud_client: TheCloudClient
) -> None:
    fake_api.on("GET", "/vpcs/vpc-1", network_down())

    with pytest.raises(TransportError):
        _run(cloud_client, lambda ops: ops.resource(catalog.VPC).get("vpc-1"))


def test_malformed_success_body_becomes_decode_error(
    fake_api: FakeCloudAPI, cloud_client: TheCloudClient
) -> None:
    fake_api.on("GET", "/vpcs/vpc-1", raw(200, b"not json"))

    with pytest.raises(DecodeError):
        _run(cloud_client, lambda ops: ops.resource(catalog.VPC).get("vpc-1"))


def test_send_outside_context_manager_fails(cloud_client: TheCloudClient) -> None:
    with pytest.raises(TheCloudError, match="async with"):
        asyncio.run(cloud_client.send("GET", "/vpcs"))


READABLE = [
    descriptor
    for descriptor in catalog.ALL
    if descriptor.singleton_path is not None and descriptor.supports(Verb.READ)
]


@pytest.mark.parametrize("descriptor", READABLE, ids=lambda descriptor: descriptor.type_name)
def test_get_of_missing_entity_is_none(
    descriptor: EntityDescriptor[Any], fake_api: FakeCloudAPI, cloud_client: TheCloudClient
) -> None:
    path = descriptor.singleton_url("gone-1")
    fake_api.on("GET", path, failure(404, "not found", type="not_found"))

    found = _run(cloud_client, lambda ops: ops.resource(descriptor).get("gone-1"))

    assert found is None
    assert len(fake_api.calls("GET", path)) == 1
