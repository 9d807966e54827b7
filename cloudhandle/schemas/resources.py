"""
Common Resource Schemas

Provider-neutral data model returned by every resource handler. Fields the
model does not promote to typed attributes travel in ``key_value_list``.
"""

from enum import Enum
from typing import List, Optional
from pydantic import BaseModel, Field, field_validator


class IID(BaseModel):
    """Resource identity: caller-chosen name plus backend-assigned system id."""
    name_id: str
    system_id: str = ""

    @field_validator("name_id")
    @classmethod
    def _name_not_empty(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("name_id must not be empty")
        return value


class KeyValue(BaseModel):
    """Opaque provider attribute."""
    key: str
    value: str


class NetworkTier(str, Enum):
    PREMIUM = "PREMIUM"
    STANDARD = "STANDARD"


class AddressType(str, Enum):
    EXTERNAL = "EXTERNAL"
    INTERNAL = "INTERNAL"
    UNSPECIFIED = "UNSPECIFIED"


class PublicIPStatus(str, Enum):
    IN_USE = "IN_USE"
    RESERVED = "RESERVED"
    RESERVING = "RESERVING"


class PublicIPReqInfo(BaseModel):
    iid: IID
    key_value_list: List[KeyValue] = Field(default_factory=list)


class PublicIPInfo(BaseModel):
    iid: IID
    region: str = ""
    creation_timestamp: str = ""
    public_ip: str = ""
    network_tier: Optional[NetworkTier] = None
    address_type: AddressType = AddressType.UNSPECIFIED
    status: PublicIPStatus
    owned_vm_iid: Optional[IID] = None  # set only while attached
    key_value_list: List[KeyValue] = Field(default_factory=list)


class SecurityRuleInfo(BaseModel):
    """Single ingress/egress rule. ``-1`` ports mean all ports."""
    from_port: str = ""
    to_port: str = ""
    ip_protocol: str = "tcp"
    direction: str = ""
    cidr: str = "0.0.0.0/0"


class SecurityReqInfo(BaseModel):
    iid: IID
    vpc_iid: Optional[IID] = None
    direction: str = "inbound"
    security_rules: List[SecurityRuleInfo] = Field(default_factory=list)


class SecurityInfo(BaseModel):
    iid: IID
    vpc_iid: Optional[IID] = None
    direction: str = "inbound"
    security_rules: List[SecurityRuleInfo] = Field(default_factory=list)
    key_value_list: List[KeyValue] = Field(default_factory=list)
