"""Utilities module for neo-tenancy."""

from .uuid import generate_uuid_v7, is_valid_uuid
from .timezone import utc_now, ensure_utc, hours_from_now

__all__ = [
    # UUID Generation
    "generate_uuid_v7",
    "is_valid_uuid",
    # Timezone Utilities
    "utc_now",
    "ensure_utc",
    "hours_from_now",
]
