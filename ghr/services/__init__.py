"""Application services."""

from .assets import DiscoveryError, discover_assets, validate_pattern
from .publish import PublishPlan, PublishReport, PublishService

__all__ = [
    "DiscoveryError",
    "PublishPlan",
    "PublishReport",
    "PublishService",
    "discover_assets",
    "validate_pattern",
]
