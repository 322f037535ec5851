"""Collision-free slug allocation.

Probing happens inside the caller's transaction, so the enclosing
serializable unit of work (and the unique index behind it) guarantees that
two concurrent allocations never both commit the same slug.
"""

import logging
import re
from typing import Optional

from ....config.constants import ORGANIZATION_SLUG_FALLBACK
from ..entities.protocols import DirectoryTransaction

logger = logging.getLogger(__name__)

_NON_SLUG_CHARS = re.compile(r'[^a-z0-9]+')


def slugify(value: str, fallback: str = ORGANIZATION_SLUG_FALLBACK) -> str:
    """Derive a URL-safe slug candidate from free text."""
    slug = _NON_SLUG_CHARS.sub("-", (value or "").lower()).strip("-")
    return slug or fallback


class SlugAllocator:
    """Allocates organization slugs globally and team slugs per organization."""
    
    def __init__(self, max_attempts: int = 10_000):
        self._max_attempts = max_attempts
    
    async def _is_taken(self, tx: DirectoryTransaction, slug: str, organization_id: Optional[str]) -> bool:
        if organization_id is None:
            return await tx.get_organization_by_slug(slug) is not None
        return await tx.get_team_by_slug(organization_id, slug) is not None
    
    async def allocate(
        self,
        tx: DirectoryTransaction,
        candidate: str,
        organization_id: Optional[str] = None,
    ) -> str:
        """Return ``candidate`` or the first free ``candidate-N``.
        
        Args:
            tx: Open directory transaction
            candidate: Desired slug (already slug-shaped)
            organization_id: Team scope; None allocates an organization slug
        """
        if not await self._is_taken(tx, candidate, organization_id):
            return candidate
        
        for counter in range(1, self._max_attempts + 1):
            slug = f"{candidate}-{counter}"
            if not await self._is_taken(tx, slug, organization_id):
                logger.debug(f"Slug '{candidate}' taken, allocated '{slug}'")
                return slug
        
        raise RuntimeError(f"Could not allocate a unique slug for '{candidate}'")
