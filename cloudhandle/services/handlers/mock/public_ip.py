from datetime import datetime, timezone
from typing import cast

import structlog

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
from cloudhandle.services.handlers.mock.store import MockResourceStore, default_store
from cloudhandle.shared.core.config import get_settings
from cloudhandle.shared.core.exceptions import ResourceConflictError

logger = structlog.get_logger()

KIND = "public_ip"

# RFC 5737 documentation blocks, never routable; allocated in this order
MOCK_ADDRESS_BLOCKS = ("203.0.113.", "198.51.100.", "192.0.2.")
HOSTS_PER_BLOCK = 254


def _mock_address(seq: int) -> str:
    block, host = divmod(seq - 1, HOSTS_PER_BLOCK)
    if block >= len(MOCK_ADDRESS_BLOCKS):
        raise ResourceConflictError(
            "Mock address pool exhausted",
            details={"allocated": seq - 1, "capacity": len(MOCK_ADDRESS_BLOCKS) * HOSTS_PER_BLOCK},
        )
    return f"{MOCK_ADDRESS_BLOCKS[block]}{host + 1}"


class MockPublicIPHandler(PublicIPHandler):
    """Public IPs kept in a MockResourceStore partition named by ``mock_name``."""

    def __init__(self, mock_name: str, store: MockResourceStore | None = None):
        self.mock_name = mock_name
        self.store = store or default_store

    async def create_public_ip(self, req_info: PublicIPReqInfo) -> PublicIPInfo:
        logger.info("mock_public_ip_create", mock_name=self.mock_name, name=req_info.iid.name_id)
        name = req_info.iid.name_id
        region = get_settings().MOCK_REGION

        def build(seq: int) -> PublicIPInfo:
            return PublicIPInfo(
                iid=IID(name_id=name, system_id=name),
                region=region,
                creation_timestamp=datetime.now(timezone.utc).isoformat(),
                public_ip=_mock_address(seq),
                network_tier=NetworkTier.PREMIUM,
                address_type=AddressType.EXTERNAL,
                status=PublicIPStatus.RESERVED,
                key_value_list=[kv.model_copy() for kv in req_info.key_value_list],
            )

        return self.store.insert(KIND, self.mock_name, name, build)

    async def list_public_ip(self) -> ResourceList[PublicIPInfo]:
        logger.info("mock_public_ip_list", mock_name=self.mock_name)
        return ResourceList(cast(list[PublicIPInfo], self.store.list(KIND, self.mock_name)))

    async def get_public_ip(self, iid: IIDOrName) -> PublicIPInfo:
        name = resolve_name(iid)
        logger.info("mock_public_ip_get", mock_name=self.mock_name, name=name)
        return cast(PublicIPInfo, self.store.get(KIND, self.mock_name, name))

    async def delete_public_ip(self, iid: IIDOrName) -> bool:
        name = resolve_name(iid)
        logger.info("mock_public_ip_delete", mock_name=self.mock_name, name=name)
        return self.store.delete(KIND, self.mock_name, name)
