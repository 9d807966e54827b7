"""Provider-agnostic cloud resource handlers with a mock and a GCP driver."""

__version__ = "0.1.0"
