from .hierarchy_guard import TeamHierarchyGuard
from .team_service import TeamService, UNSET

__all__ = ["TeamHierarchyGuard", "TeamService", "UNSET"]
