"""Distance resolution services."""

from .client import DistanceMatrixClient, DistanceMatrixResponse, check_health
from .models import DistanceResult
from .resolver import DistanceResolver, address_components, parse_miles

__all__ = [
    "DistanceMatrixClient",
    "DistanceMatrixResponse",
    "DistanceResolver",
    "DistanceResult",
    "address_components",
    "check_health",
    "parse_miles",
]
