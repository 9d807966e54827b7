from cloudhandle.services.handlers.base import CloudConnection
from cloudhandle.services.handlers.mock.public_ip import MockPublicIPHandler
from cloudhandle.services.handlers.mock.security import MockSecurityHandler
from cloudhandle.services.handlers.mock.store import MockResourceStore, default_store


class MockConnection(CloudConnection):
    """Mock driver scope. Handlers sharing ``mock_name`` and store share state."""

    def __init__(self, mock_name: str, store: MockResourceStore | None = None):
        self.mock_name = mock_name
        self.store = store or default_store

    @property
    def driver_name(self) -> str:
        return "mock"

    def create_public_ip_handler(self) -> MockPublicIPHandler:
        return MockPublicIPHandler(self.mock_name, store=self.store)

    def create_security_handler(self) -> MockSecurityHandler:
        return MockSecurityHandler(self.mock_name, store=self.store)
