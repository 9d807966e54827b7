from cloudhandle.services.handlers.gcp.base import BaseGCPHandler, validate_project_id
from cloudhandle.services.handlers.gcp.public_ip import GCPPublicIPHandler, map_address
from cloudhandle.services.handlers.gcp.security import GCPSecurityHandler, map_firewall
from cloudhandle.services.handlers.gcp.connection import GCPConnection

__all__ = [
    "BaseGCPHandler",
    "validate_project_id",
    "GCPPublicIPHandler",
    "map_address",
    "GCPSecurityHandler",
    "map_firewall",
    "GCPConnection",
]
