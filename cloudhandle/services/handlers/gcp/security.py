"""
GCP Security Handler - VPC firewall rules as security groups.

Firewalls are global resources: calls are scoped by project only.
"""
from typing import Any, Iterable

import structlog
from google.cloud import compute_v1

from cloudhandle.schemas.resources import IID, SecurityInfo, SecurityReqInfo, SecurityRuleInfo
from cloudhandle.services.handlers.base import (
    IIDOrName,
    ResourceList,
    SecurityHandler,
    resolve_name,
)
from cloudhandle.services.handlers.gcp.base import BaseGCPHandler, last_path_segment, raw_name
from cloudhandle.shared.adapters.normalizer import opaque_key_values, to_generic_tree
from cloudhandle.shared.core.exceptions import MappingFailureError, ResourceNotFoundError
from cloudhandle.shared.core.retry import wait_until_visible

logger = structlog.get_logger()

PROMOTED_FIELDS = frozenset({
    "name",
    "id",
    "network",
    "direction",
    "allowed",
    "source_ranges",
    "destination_ranges",
})

DEFAULT_NETWORK = "default"
ALL_PORTS = "-1"
ANY_CIDR = "0.0.0.0/0"

_TO_GCP_DIRECTION = {"inbound": "INGRESS", "outbound": "EGRESS"}
_FROM_GCP_DIRECTION = {v: k for k, v in _TO_GCP_DIRECTION.items()}

# Ingress filters other than source_ranges; a rule scoped by these has no CIDR
SOURCE_FILTERS = ("source_tags", "source_service_accounts")


def _port_spec(rule: SecurityRuleInfo) -> list[str]:
    if rule.from_port in ("", ALL_PORTS) and rule.to_port in ("", ALL_PORTS):
        return []
    if not rule.to_port or rule.from_port == rule.to_port:
        return [rule.from_port]
    return [f"{rule.from_port}-{rule.to_port}"]


def _split_port_spec(spec: str) -> tuple[str, str]:
    if "-" in spec:
        low, high = spec.split("-", 1)
        return low, high
    return spec, spec


def _dedupe(values: Iterable[str]) -> list[str]:
    return list(dict.fromkeys(values))


def build_firewall_resource(req_info: SecurityReqInfo, project_id: str) -> compute_v1.Firewall:
    """Translate a SecurityReqInfo into a Compute ``Firewall``."""
    direction = _TO_GCP_DIRECTION.get(req_info.direction)
    if direction is None:
        raise ValueError(f"Unsupported direction: {req_info.direction!r}")

    network = req_info.vpc_iid.name_id if req_info.vpc_iid else DEFAULT_NETWORK
    allowed = [
        compute_v1.Allowed(I_p_protocol=rule.ip_protocol, ports=_port_spec(rule))
        for rule in req_info.security_rules
    ]
    ranges = _dedupe(rule.cidr or ANY_CIDR for rule in req_info.security_rules) or [ANY_CIDR]

    firewall = compute_v1.Firewall(
        name=req_info.iid.name_id,
        network=f"projects/{project_id}/global/networks/{network}",
        direction=direction,
        allowed=allowed,
    )
    if direction == "INGRESS":
        firewall.source_ranges = ranges
    else:
        firewall.destination_ranges = ranges
    return firewall


def map_firewall(raw: Any) -> SecurityInfo:
    """Map a Compute ``Firewall`` (or its field mapping) into SecurityInfo."""
    tree = to_generic_tree(raw)
    name = tree.get("name")
    if not name:
        raise MappingFailureError("Firewall has no name", details={"fields": list(tree)})

    gcp_direction = tree.get("direction") or "INGRESS"
    direction = _FROM_GCP_DIRECTION.get(gcp_direction)
    if direction is None:
        raise MappingFailureError(
            f"Firewall {name} has an unrecognized direction: {gcp_direction}",
            details={"name": name},
        )

    if tree.get("denied"):
        raise MappingFailureError(
            f"Firewall {name} denies traffic; only allow rules map to security rules",
            details={"name": name},
        )

    range_key = "source_ranges" if direction == "inbound" else "destination_ranges"
    ranges = tree.get(range_key) or []
    if not ranges:
        scoped_by = [key for key in SOURCE_FILTERS if tree.get(key)] if direction == "inbound" else []
        if scoped_by:
            raise MappingFailureError(
                f"Firewall {name} is scoped by {', '.join(scoped_by)}, not by CIDR",
                details={"name": name, "scoped_by": scoped_by},
            )
        # No filter at all: the provider applies the rule to every address
        ranges = [ANY_CIDR]

    rules: list[SecurityRuleInfo] = []
    try:
        for entry in tree.get("allowed") or []:
            protocol = entry.get("I_p_protocol") or entry.get("IPProtocol") or "all"
            port_specs = entry.get("ports") or [ALL_PORTS]
            for spec in port_specs:
                from_port, to_port = (ALL_PORTS, ALL_PORTS) if spec == ALL_PORTS else _split_port_spec(spec)
                for cidr in ranges:
                    rules.append(
                        SecurityRuleInfo(
                            from_port=from_port,
                            to_port=to_port,
                            ip_protocol=protocol,
                            direction=direction,
                            cidr=cidr,
                        )
                    )
    except (AttributeError, TypeError) as e:
        raise MappingFailureError(
            f"Firewall {name} has malformed allowed entries: {e}", details={"name": name}
        ) from e

    network = tree.get("network")
    vpc_iid = None
    if network:
        vpc_name = last_path_segment(network)
        vpc_iid = IID(name_id=vpc_name, system_id=vpc_name)

    return SecurityInfo(
        iid=IID(name_id=name, system_id=str(tree.get("id") or name)),
        vpc_iid=vpc_iid,
        direction=direction,
        security_rules=rules,
        key_value_list=opaque_key_values(tree, PROMOTED_FIELDS),
    )


class GCPSecurityHandler(BaseGCPHandler, SecurityHandler):
    """Compute Engine firewall rules, one firewall per security group."""

    def _build_client(self, google_credentials: Any) -> compute_v1.FirewallsClient:
        return compute_v1.FirewallsClient(credentials=google_credentials)

    async def create_security(self, req_info: SecurityReqInfo) -> SecurityInfo:
        name = req_info.iid.name_id
        logger.info("gcp_security_create", project_id=self.project_id, name=name)

        try:
            firewall = build_firewall_resource(req_info, self.project_id)
        except ValueError as e:
            raise MappingFailureError(str(e), details={"name": name}) from e

        operation = await self._call(
            "gcp_security_insert",
            self.client.insert,
            project=self.project_id,
            firewall_resource=firewall,
        )
        await self._wait_for_operation("gcp_security_insert_wait", operation)
        return await wait_until_visible(
            f"security {name}",
            lambda: self.get_security(name),
        )

    async def list_security(self) -> ResourceList[SecurityInfo]:
        logger.info("gcp_security_list", project_id=self.project_id)
        items = await self._call(
            "gcp_security_list",
            lambda: list(self.client.list(project=self.project_id)),
        )

        result: ResourceList[SecurityInfo] = ResourceList()
        for item in items:
            try:
                result.append(map_firewall(item))
            except MappingFailureError as e:
                item_name = raw_name(item)
                logger.warning("gcp_security_mapping_failed", name=item_name, error=e.message)
                result.omit(item_name, e)
        return result

    async def get_security(self, iid: IIDOrName) -> SecurityInfo:
        name = resolve_name(iid)
        logger.info("gcp_security_get", project_id=self.project_id, name=name)
        raw = await self._call(
            "gcp_security_get",
            self.client.get,
            project=self.project_id,
            firewall=name,
        )
        return map_firewall(raw)

    async def delete_security(self, iid: IIDOrName) -> bool:
        name = resolve_name(iid)
        logger.info("gcp_security_delete", project_id=self.project_id, name=name)
        try:
            operation = await self._call(
                "gcp_security_delete",
                self.client.delete,
                project=self.project_id,
                firewall=name,
            )
        except ResourceNotFoundError:
            return False
        await self._wait_for_operation("gcp_security_delete_wait", operation)
        return True
