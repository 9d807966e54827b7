from abc import ABC, abstractmethod
from typing import Iterable, List, TypeVar, Union

from pydantic import BaseModel

from cloudhandle.schemas.resources import (
    IID,
    PublicIPInfo,
    PublicIPReqInfo,
    SecurityInfo,
    SecurityReqInfo,
)
from cloudhandle.shared.core.exceptions import MappingFailureError

InfoT = TypeVar("InfoT")

IIDOrName = Union[IID, str]


def resolve_name(iid_or_name: IIDOrName) -> str:
    """Return the caller-chosen name from an IID or a bare name."""
    if isinstance(iid_or_name, IID):
        return iid_or_name.name_id
    return iid_or_name


class ListOmission(BaseModel):
    """An item a List call could not map into the common model."""
    name: str
    error: str


class ResourceList(List[InfoT]):
    """
    Result of a List operation.

    Behaves as a plain list of mapped records. ``omissions`` describes provider
    items that failed to map and were left out.
    """

    def __init__(self, items: Iterable[InfoT] = (), omissions: Iterable[ListOmission] = ()):
        super().__init__(items)
        self.omissions: list[ListOmission] = list(omissions)

    def omit(self, name: str, error: MappingFailureError) -> None:
        self.omissions.append(ListOmission(name=name, error=error.message))


class PublicIPHandler(ABC):
    """
    Public IP contract every driver implements.

    Create fails with ResourceConflictError on a name collision, Get fails with
    ResourceNotFoundError, Delete returns False when nothing matched.
    """

    @abstractmethod
    async def create_public_ip(self, req_info: PublicIPReqInfo) -> PublicIPInfo:
        raise NotImplementedError()

    @abstractmethod
    async def list_public_ip(self) -> ResourceList[PublicIPInfo]:
        raise NotImplementedError()

    @abstractmethod
    async def get_public_ip(self, iid: IIDOrName) -> PublicIPInfo:
        raise NotImplementedError()

    @abstractmethod
    async def delete_public_ip(self, iid: IIDOrName) -> bool:
        raise NotImplementedError()


class SecurityHandler(ABC):
    """Security group contract every driver implements. Same semantics as PublicIPHandler."""

    @abstractmethod
    async def create_security(self, req_info: SecurityReqInfo) -> SecurityInfo:
        raise NotImplementedError()

    @abstractmethod
    async def list_security(self) -> ResourceList[SecurityInfo]:
        raise NotImplementedError()

    @abstractmethod
    async def get_security(self, iid: IIDOrName) -> SecurityInfo:
        raise NotImplementedError()

    @abstractmethod
    async def delete_security(self, iid: IIDOrName) -> bool:
        raise NotImplementedError()


class CloudConnection(ABC):
    """A configured driver scope that hands out resource handlers."""

    @property
    @abstractmethod
    def driver_name(self) -> str:
        """Driver identifier (e.g. 'mock', 'gcp')."""
        raise NotImplementedError()

    @abstractmethod
    def create_public_ip_handler(self) -> PublicIPHandler:
        raise NotImplementedError()

    @abstractmethod
    def create_security_handler(self) -> SecurityHandler:
        raise NotImplementedError()
