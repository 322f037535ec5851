from .team import Team, TeamMember, TeamTreeNode

__all__ = ["Team", "TeamMember", "TeamTreeNode"]
