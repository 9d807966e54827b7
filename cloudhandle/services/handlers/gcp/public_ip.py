"""
GCP Public IP Handler - static addresses via the Compute Addresses API.

Addresses are regional: every call is scoped by the handler's project and region.
"""
from typing import Any

import structlog
from google.cloud import compute_v1

from cloudhandle.schemas.resources import (
    IID,
    AddressType,
    NetworkTier,
    PublicIPInfo,
    PublicIPReqInfo,
    PublicIPStatus,
)
from cloudhandle.services.handlers.base import (
    IIDOrName,
    PublicIPHandler,
    ResourceList,
    resolve_name,
)
from cloudhandle.services.handlers.gcp.base import BaseGCPHandler, last_path_segment, raw_name
from cloudhandle.shared.adapters.normalizer import opaque_key_values, to_generic_tree
from cloudhandle.shared.core.exceptions import MappingFailureError, ResourceNotFoundError
from cloudhandle.shared.core.retry import wait_until_visible

logger = structlog.get_logger()

# Fields surfaced as typed PublicIPInfo attributes, never repeated as opaque ones.
PROMOTED_FIELDS = frozenset({
    "name",
    "id",
    "address",
    "status",
    "network_tier",
    "address_type",
    "region",
    "creation_timestamp",
})

_ADDRESS_TYPES = {
    "EXTERNAL": AddressType.EXTERNAL,
    "INTERNAL": AddressType.INTERNAL,
    "UNSPECIFIED_TYPE": AddressType.UNSPECIFIED,
}


def map_address(raw: Any) -> PublicIPInfo:
    """Map a Compute ``Address`` (or its field mapping) into PublicIPInfo."""
    tree = to_generic_tree(raw)
    name = tree.get("name")
    if not name:
        raise MappingFailureError("Address has no name", details={"fields": list(tree)})

    try:
        status = PublicIPStatus(tree.get("status"))
        tier = tree.get("network_tier")
        network_tier = NetworkTier(tier) if tier else None
        address_type = _ADDRESS_TYPES[tree.get("address_type") or "UNSPECIFIED_TYPE"]
    except (ValueError, KeyError) as e:
        raise MappingFailureError(
            f"Address {name} has an unrecognized value: {e}", details={"name": name}
        ) from e

    owned_vm_iid = None
    users = tree.get("users") or []
    if users:
        vm_name = last_path_segment(str(users[0]))
        owned_vm_iid = IID(name_id=vm_name, system_id=vm_name)

    return PublicIPInfo(
        iid=IID(name_id=name, system_id=str(tree.get("id") or name)),
        region=last_path_segment(tree.get("region") or ""),
        creation_timestamp=tree.get("creation_timestamp") or "",
        public_ip=tree.get("address") or "",
        network_tier=network_tier,
        address_type=address_type,
        status=status,
        owned_vm_iid=owned_vm_iid,
        key_value_list=opaque_key_values(tree, PROMOTED_FIELDS),
    )


# Request key/values honoured on insert; anything else is ignored.
INSERT_OPTIONS = frozenset({"description", "network_tier", "address_type"})


def build_address_resource(req_info: PublicIPReqInfo) -> compute_v1.Address:
    options = {kv.key: kv.value for kv in req_info.key_value_list if kv.key in INSERT_OPTIONS}
    return compute_v1.Address(name=req_info.iid.name_id, **options)


class GCPPublicIPHandler(BaseGCPHandler, PublicIPHandler):
    """
    Compute Engine static addresses.

    Create waits for the insert operation to finish, then polls Get until the
    address is queryable or CREATE_SETTLE_TIMEOUT_SECONDS elapses.
    """

    def _build_client(self, google_credentials: Any) -> compute_v1.AddressesClient:
        return compute_v1.AddressesClient(credentials=google_credentials)

    async def create_public_ip(self, req_info: PublicIPReqInfo) -> PublicIPInfo:
        name = req_info.iid.name_id
        logger.info("gcp_public_ip_create", project_id=self.project_id, region=self.region, name=name)

        address = build_address_resource(req_info)
        operation = await self._call(
            "gcp_public_ip_insert",
            self.client.insert,
            project=self.project_id,
            region=self.region,
            address_resource=address,
        )
        await self._wait_for_operation("gcp_public_ip_insert_wait", operation)
        return await wait_until_visible(
            f"public_ip {name}",
            lambda: self.get_public_ip(name),
        )

    async def list_public_ip(self) -> ResourceList[PublicIPInfo]:
        logger.info("gcp_public_ip_list", project_id=self.project_id, region=self.region)
        items = await self._call(
            "gcp_public_ip_list",
            lambda: list(self.client.list(project=self.project_id, region=self.region)),
        )

        result: ResourceList[PublicIPInfo] = ResourceList()
        for item in items:
            try:
                result.append(map_address(item))
            except MappingFailureError as e:
                item_name = raw_name(item)
                logger.warning("gcp_public_ip_mapping_failed", name=item_name, error=e.message)
                result.omit(item_name, e)
        return result

    async def get_public_ip(self, iid: IIDOrName) -> PublicIPInfo:
        name = resolve_name(iid)
        logger.info("gcp_public_ip_get", project_id=self.project_id, region=self.region, name=name)
        raw = await self._call(
            "gcp_public_ip_get",
            self.client.get,
            project=self.project_id,
            region=self.region,
            address=name,
        )
        return map_address(raw)

    async def delete_public_ip(self, iid: IIDOrName) -> bool:
        name = resolve_name(iid)
        logger.info("gcp_public_ip_delete", project_id=self.project_id, region=self.region, name=name)
        try:
            operation = await self._call(
                "gcp_public_ip_delete",
                self.client.delete,
                project=self.project_id,
                region=self.region,
                address=name,
            )
        except ResourceNotFoundError:
            return False
        await self._wait_for_operation("gcp_public_ip_delete_wait", operation)
        return True
