"""Reconcilers for association resources discovered through their parent."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from thecloud.adapters.thecloud import catalog
from thecloud.adapters.thecloud.schema import (
    ElasticIP,
    GlobalEndpoint,
    GlobalEndpointCreate,
    LBTarget,
    LBTargetCreate,
    SecurityRule,
    SecurityRuleCreate,
)
from thecloud.domain.identifiers import join_composite_id, split_composite_id

from .base import EntityReconciler, observed

if TYPE_CHECKING:
    import asyncio
    from collections.abc import Mapping

    from thecloud.adapters.thecloud.operations import CloudOperations
    from thecloud.domain.diagnostics import Diagnostics
    from thecloud.domain.state import State

LB_TARGET_ID_PARTS = ("load_balancer_id", "instance_id")
GLOBAL_ENDPOINT_ID_PARTS = ("global_lb_id", "endpoint_id")
SECURITY_RULE_ID_PARTS = ("security_group_id", "rule_id")


def _require(state: Mapping[str, Any], name: str, label: str) -> str:
    value = state.get(name)
    if value in (None, ""):
        raise ValueError(f"{label} state has no {name!r}")
    return str(value)


class LBTargetReconciler(EntityReconciler[LBTarget]):
    """Registration of an instance behind a load balancer, id ``lb_id:instance_id``."""

    async def _create(
        self,
        ops: CloudOperations,
        desired: Mapping[str, Any],
        diagnostics: Diagnostics,  # noqa: ARG002
    ) -> State | None:
        lb_id = _require(desired, "load_balancer_id", self.descriptor.label)
        target = LBTargetCreate.model_validate(dict(desired))
        await ops.add_lb_target(lb_id, target)
        return {**desired, "id": join_composite_id(lb_id, target.instance_id)}

    async def _read(self, ops: CloudOperations, prior: Mapping[str, Any]) -> State | None:
        lb_id = _require(prior, "load_balancer_id", self.descriptor.label)
        instance_id = _require(prior, "instance_id", self.descriptor.label)
        target = await ops.find_lb_target(lb_id, instance_id)
        if target is None:
            return None
        state = self._merge(prior, target)
        state["id"] = join_composite_id(lb_id, instance_id)
        return state

    async def _delete(
        self,
        ops: CloudOperations,
        prior: Mapping[str, Any],
        diagnostics: Diagnostics,  # noqa: ARG002
        cancel: asyncio.Event | None,  # noqa: ARG002
    ) -> None:
        await ops.remove_lb_target(
            _require(prior, "load_balancer_id", self.descriptor.label),
            _require(prior, "instance_id", self.descriptor.label),
        )

    def _import(self, external_id: str) -> State:
        parts = split_composite_id(external_id, LB_TARGET_ID_PARTS)
        return {**parts, "id": external_id}


class GlobalEndpointReconciler(EntityReconciler[GlobalEndpoint]):
    """Membership of an endpoint in a global load balancer."""

    async def _create(
        self,
        ops: CloudOperations,
        desired: Mapping[str, Any],
        diagnostics: Diagnostics,  # noqa: ARG002
    ) -> State | None:
        glb_id = _require(desired, "global_lb_id", self.descriptor.label)
        endpoint = await ops.add_global_endpoint(
            glb_id, GlobalEndpointCreate.model_validate(dict(desired))
        )
        return self._merge(desired, endpoint)

    async def _read(self, ops: CloudOperations, prior: Mapping[str, Any]) -> State | None:
        endpoint = await ops.find_global_endpoint(
            _require(prior, "global_lb_id", self.descriptor.label), self._key(prior)
        )
        if endpoint is None:
            return None
        return self._merge(prior, endpoint)

    async def _delete(
        self,
        ops: CloudOperations,
        prior: Mapping[str, Any],
        diagnostics: Diagnostics,  # noqa: ARG002
        cancel: asyncio.Event | None,  # noqa: ARG002
    ) -> None:
        await ops.remove_global_endpoint(
            _require(prior, "global_lb_id", self.descriptor.label), self._key(prior)
        )

    def _import(self, external_id: str) -> State:
        parts = split_composite_id(external_id, GLOBAL_ENDPOINT_ID_PARTS)
        return {"global_lb_id": parts["global_lb_id"], "id": parts["endpoint_id"]}


class ElasticIPAssociationReconciler(EntityReconciler[ElasticIP]):
    """Binding of an Elastic IP to an instance; the id is the Elastic IP id."""

    async def _create(
        self,
        ops: CloudOperations,
        desired: Mapping[str, Any],
        diagnostics: Diagnostics,  # noqa: ARG002
    ) -> State | None:
        eip = await ops.associate_elastic_ip(
            _require(desired, "eip_id", self.descriptor.label),
            _require(desired, "instance_id", self.descriptor.label),
        )
        return {**desired, "id": eip.id}

    async def _read(self, ops: CloudOperations, prior: Mapping[str, Any]) -> State | None:
        eip = await ops.resource(catalog.ELASTIC_IP).get(self._key(prior))
        if eip is None or not eip.instance_id:
            return None
        return {**prior, "id": eip.id, "eip_id": eip.id, "instance_id": eip.instance_id}

    async def _delete(
        self,
        ops: CloudOperations,
        prior: Mapping[str, Any],
        diagnostics: Diagnostics,  # noqa: ARG002
        cancel: asyncio.Event | None,  # noqa: ARG002
    ) -> None:
        await ops.disassociate_elastic_ip(self._key(prior))

    def _import(self, external_id: str) -> State:
        return {"id": external_id, "eip_id": external_id}


class SecurityRuleReconciler(EntityReconciler[SecurityRule]):
    """A rule inside a security group, read back by scanning the group's rules."""

    async def _create(
        self,
        ops: CloudOperations,
        desired: Mapping[str, Any],
        diagnostics: Diagnostics,  # noqa: ARG002
    ) -> State | None:
        group_id = _require(desired, "security_group_id", self.descriptor.label)
        request = SecurityRuleCreate.model_validate({**desired, "security_group_id": group_id})
        rule = await ops.resource(self.descriptor).create(request, security_group_id=group_id)
        return self._rule_state(desired, rule, group_id)

    async def _read(self, ops: CloudOperations, prior: Mapping[str, Any]) -> State | None:
        group_id = _require(prior, "security_group_id", self.descriptor.label)
        rule = await ops.find_security_rule(group_id, self._key(prior))
        if rule is None:
            return None
        return self._rule_state(prior, rule, group_id)

    def _rule_state(self, base: Mapping[str, Any], rule: SecurityRule, group_id: str) -> State:
        values = observed(rule)
        values.pop("group_id", None)
        state = {**base, **{k: v for k, v in values.items() if v is not None}}
        state["security_group_id"] = group_id
        return state

    def _import(self, external_id: str) -> State:
        parts = split_composite_id(external_id, SECURITY_RULE_ID_PARTS)
        return {"security_group_id": parts["security_group_id"], "id": parts["rule_id"]}

