"""Team hierarchy guard.

Validates a team's parent inside the mutating transaction so two
concurrent re-parents cannot jointly introduce a cycle.
"""

import logging
from typing import Optional

from ....core.exceptions import ForbiddenError, InvalidArgumentError, NotFoundError
from ...directory.entities.protocols import DirectoryTransaction

logger = logging.getLogger(__name__)


class TeamHierarchyGuard:
    """Rejects parent assignments that cross organizations or form cycles."""

    async def validate_parent(
        self,
        tx: DirectoryTransaction,
        organization_id: str,
        team_id: Optional[str],
        parent_team_id: Optional[str],
    ) -> None:
        """Validate ``parent_team_id`` as the parent of ``team_id``.

        Args:
            tx: Open directory transaction
            organization_id: Organization owning the team
            team_id: Team being edited, None on creation
            parent_team_id: Proposed parent, None for a root team

        Raises:
            NotFoundError: Parent team does not exist
            ForbiddenError: Parent belongs to another organization
            InvalidArgumentError: Self-parenting or cycle
        """
        if parent_team_id is None:
            return

        if team_id is not None and parent_team_id == team_id:
            raise InvalidArgumentError("Team cannot be its own parent")

        parent = await tx.get_team(parent_team_id)
        if parent is None:
            raise NotFoundError("Team", parent_team_id, message="Parent team not found")
        if parent.organization_id != organization_id:
            raise ForbiddenError("Parent team must belong to the same organization")

        if team_id is None:
            return

        # Ancestor walk from the parent, bounded by the organization's team count
        max_depth = await tx.count_teams(organization_id)
        current = parent
        for _ in range(max_depth + 1):
            if current.parent_team_id is None:
                return
            if current.parent_team_id == team_id:
                logger.debug(f"Rejected parent {parent_team_id} for team {team_id}: cycle")
                raise InvalidArgumentError("Setting this parent would create a cycle in the team hierarchy")
            current = await tx.get_team(current.parent_team_id)
            if current is None:
                return

        raise InvalidArgumentError("Team hierarchy is corrupt: ancestor chain does not terminate")
