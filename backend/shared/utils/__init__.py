"""
Utilities module: exceptions, validators, geo and OTP helpers.
"""

from shared.utils.exceptions import (
    NotFoundError,
    ForbiddenError,
    ValidationError,
)
from shared.utils.geo import haversine_km
from shared.utils.validators import escape_like_pattern, validate_image_url

__all__ = [
    # exceptions
    "NotFoundError",
    "ForbiddenError",
    "ValidationError",
    # geo
    "haversine_km",
    # validators
    "escape_like_pattern",
    "validate_image_url",
]
