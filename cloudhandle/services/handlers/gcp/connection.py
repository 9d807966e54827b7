from typing import Any

from cloudhandle.services.handlers.base import CloudConnection
from cloudhandle.services.handlers.gcp.public_ip import GCPPublicIPHandler
from cloudhandle.services.handlers.gcp.security import GCPSecurityHandler
from cloudhandle.shared.core.credentials import GCPCredentials


class GCPConnection(CloudConnection):
    """
    GCP driver scope (project + region).

    ``addresses_client`` / ``firewalls_client`` are opaque Compute clients; when
    omitted each handler builds its own from the credentials.
    """

    def __init__(
        self,
        credentials: GCPCredentials,
        addresses_client: Any = None,
        firewalls_client: Any = None,
    ):
        self.credentials = credentials
        self.addresses_client = addresses_client
        self.firewalls_client = firewalls_client

    @property
    def driver_name(self) -> str:
        return "gcp"

    def create_public_ip_handler(self) -> GCPPublicIPHandler:
        return GCPPublicIPHandler(self.credentials, client=self.addresses_client)

    def create_security_handler(self) -> GCPSecurityHandler:
        return GCPSecurityHandler(self.credentials, client=self.firewalls_client)
