from .base import DirectoryServiceBase, check_limit, entity_validation
from .slug_allocator import SlugAllocator, slugify
from .cascade_coordinator import CascadeCoordinator, CascadeResult

__all__ = [
    "DirectoryServiceBase",
    "check_limit",
    "entity_validation",
    "SlugAllocator",
    "slugify",
    "CascadeCoordinator",
    "CascadeResult",
]
