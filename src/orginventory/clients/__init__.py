"""Connection provider: the SOQL handle used by the inventory core."""

from .base import RemoteHandle
from .connection import OrgCredentials, fetch_sf_cli_credentials, resolve_connection
from .rate_limit import TokenBucketLimiter
from .salesforce import SalesforceClient

__all__ = [
    "OrgCredentials",
    "RemoteHandle",
    "SalesforceClient",
    "TokenBucketLimiter",
    "fetch_sf_cli_credentials",
    "resolve_connection",
]
