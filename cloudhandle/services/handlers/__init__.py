"""Resource handlers: one provider-agnostic contract, one implementation per driver."""
from cloudhandle.services.handlers.base import (
    CloudConnection,
    ListOmission,
    PublicIPHandler,
    ResourceList,
    SecurityHandler,
)

__all__ = [
    "CloudConnection",
    "ListOmission",
    "PublicIPHandler",
    "ResourceList",
    "SecurityHandler",
]
