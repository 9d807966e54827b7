from typing import cast

import structlog

from cloudhandle.schemas.resources import IID, SecurityInfo, SecurityReqInfo
from cloudhandle.services.handlers.base import (
    IIDOrName,
    ResourceList,
    SecurityHandler,
    resolve_name,
)
from cloudhandle.services.handlers.mock.store import MockResourceStore, default_store

logger = structlog.get_logger()

KIND = "security"


class MockSecurityHandler(SecurityHandler):
    """Security groups kept in a MockResourceStore partition named by ``mock_name``."""

    def __init__(self, mock_name: str, store: MockResourceStore | None = None):
        self.mock_name = mock_name
        self.store = store or default_store

    async def create_security(self, req_info: SecurityReqInfo) -> SecurityInfo:
        logger.info("mock_security_create", mock_name=self.mock_name, name=req_info.iid.name_id)
        name = req_info.iid.name_id

        def build(_seq: int) -> SecurityInfo:
            return SecurityInfo(
                iid=IID(name_id=name, system_id=name),
                vpc_iid=req_info.vpc_iid.model_copy() if req_info.vpc_iid else None,
                direction=req_info.direction,
                security_rules=[rule.model_copy() for rule in req_info.security_rules],
                key_value_list=[],
            )

        return self.store.insert(KIND, self.mock_name, name, build)

    async def list_security(self) -> ResourceList[SecurityInfo]:
        logger.info("mock_security_list", mock_name=self.mock_name)
        return ResourceList(cast(list[SecurityInfo], self.store.list(KIND, self.mock_name)))

    async def get_security(self, iid: IIDOrName) -> SecurityInfo:
        name = resolve_name(iid)
        logger.info("mock_security_get", mock_name=self.mock_name, name=name)
        return cast(SecurityInfo, self.store.get(KIND, self.mock_name, name))

    async def delete_security(self, iid: IIDOrName) -> bool:
        name = resolve_name(iid)
        logger.info("mock_security_delete", mock_name=self.mock_name, name=name)
        return self.store.delete(KIND, self.mock_name, name)
