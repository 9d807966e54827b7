"""
Typed Credential Classes
Provider scope and credentials as Pydantic models, decoupled from how they were loaded.
"""
from pydantic import BaseModel, SecretStr
from typing import Optional


class CloudCredentials(BaseModel):
    """Base class for all cloud credentials."""
    pass


class GCPCredentials(CloudCredentials):
    """GCP project/region scope with an optional service account key."""
    project_id: str
    region: str = "us-central1"
    # Falls back to Application Default Credentials when unset
    service_account_json: Optional[SecretStr] = None
