"""Reality Data client - typed access to the Reality Data Service and its blob storage."""

from .version import CLIENT_VERSION
from .types import (
    AccessMode,
    Point,
    Extent,
    Acquisition,
)
from .errors import (
    RealityDataClientError,
    InvalidStateError,
    ApiRequestError,
    ContainerResolutionError,
)
from .auth import AccessToken, authorization_header
from .config import ApiVersion, RealityDataClientOptions
from .ports import ContainerFetcher
from .container import (
    FRESHNESS_WINDOW,
    CachedCredential,
    ContainerCache,
    ContainerUrlResolver,
    is_fresh,
)
from .blob_url import compose_blob_url
from .reality_data import RealityData
from .client import (
    RealityDataAccessClient,
    RealityDataQueryCriteria,
    RealityDataResponse,
    Project,
)

__version__ = CLIENT_VERSION

__all__ = [
    # Version
    "CLIENT_VERSION",
    # Value types
    "AccessMode",
    "Point",
    "Extent",
    "Acquisition",
    # Errors
    "RealityDataClientError",
    "InvalidStateError",
    "ApiRequestError",
    "ContainerResolutionError",
    # Authentication
    "AccessToken",
    "authorization_header",
    # Configuration
    "ApiVersion",
    "RealityDataClientOptions",
    # Ports
    "ContainerFetcher",
    # Container URL cache
    "FRESHNESS_WINDOW",
    "CachedCredential",
    "ContainerCache",
    "ContainerUrlResolver",
    "is_fresh",
    "compose_blob_url",
    # Entity and client
    "RealityData",
    "RealityDataAccessClient",
    "RealityDataQueryCriteria",
    "RealityDataResponse",
    "Project",
]
