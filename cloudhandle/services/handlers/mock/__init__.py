from cloudhandle.services.handlers.mock.store import MockResourceStore, default_store
from cloudhandle.services.handlers.mock.security import MockSecurityHandler
from cloudhandle.services.handlers.mock.public_ip import MockPublicIPHandler
from cloudhandle.services.handlers.mock.connection import MockConnection

__all__ = [
    "MockResourceStore",
    "default_store",
    "MockSecurityHandler",
    "MockPublicIPHandler",
    "MockConnection",
]
