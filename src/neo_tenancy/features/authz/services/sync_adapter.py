"""Authorization sync adapter.

Translates committed directory mutations into ordered authorization
commands. Ordering rules:

- role change: revoke the old role before assigning the new one
- membership removal: clear team relations before revoking the org role
- organization deletion: clear every team relation, then every role

Commands run strictly after the directory transaction commits. A
failing command raises AuthorizationSyncError carrying the full command
list; the directory is never rolled back and ``retry`` replays the list,
which is safe because every command is idempotent.
"""

import logging
from typing import Iterable, List, Optional, Sequence, Tuple

from ....config.constants import OrgRole
from ....core.exceptions import AuthorizationSyncError
from ..entities.commands import SyncAction, SyncCommand
from ..entities.protocols import AuthorizationClient
from ..entities.scope import Relation, Scope

logger = logging.getLogger(__name__)


class AuthorizationSyncAdapter:
    """Issues directory-derived commands to an AuthorizationClient."""

    def __init__(self, client: AuthorizationClient):
        self._client = client

    @property
    def client(self) -> AuthorizationClient:
        return self._client

    # Command builders

    @staticmethod
    def organization_created_commands(organization_id: str, owner_id: str) -> List[SyncCommand]:
        return [SyncCommand.assign_role(owner_id, OrgRole.OWNER.value, Scope.organization(organization_id), owner_id)]

    @staticmethod
    def member_added_commands(
        organization_id: str, user_id: str, role: str, added_by: Optional[str] = None
    ) -> List[SyncCommand]:
        return [SyncCommand.assign_role(user_id, role, Scope.organization(organization_id), added_by)]

    @staticmethod
    def role_changed_commands(
        organization_id: str,
        user_id: str,
        old_role: str,
        new_role: str,
        changed_by: Optional[str] = None,
    ) -> List[SyncCommand]:
        scope = Scope.organization(organization_id)
        return [
            SyncCommand.revoke_role(user_id, old_role, scope),
            SyncCommand.assign_role(user_id, new_role, scope, changed_by),
        ]

    @classmethod
    def ownership_transferred_commands(
        cls,
        organization_id: str,
        previous_owner_id: str,
        previous_owner_new_role: str,
        new_owner_id: str,
        new_owner_old_role: str,
        changed_by: Optional[str] = None,
    ) -> List[SyncCommand]:
        return cls.role_changed_commands(
            organization_id, previous_owner_id, OrgRole.OWNER.value, previous_owner_new_role, changed_by
        ) + cls.role_changed_commands(
            organization_id, new_owner_id, new_owner_old_role, OrgRole.OWNER.value, changed_by
        )

    @staticmethod
    def membership_removed_commands(
        organization_id: str, user_id: str, role: str, team_ids: Iterable[str]
    ) -> List[SyncCommand]:
        commands = [SyncCommand.remove_relation(Relation.team_member(user_id, team_id)) for team_id in team_ids]
        commands.append(SyncCommand.revoke_role(user_id, role, Scope.organization(organization_id)))
        return commands

    @staticmethod
    def team_member_added_commands(team_id: str, user_id: str) -> List[SyncCommand]:
        return [SyncCommand.add_relation(Relation.team_member(user_id, team_id))]

    @staticmethod
    def team_member_removed_commands(team_id: str, user_id: str) -> List[SyncCommand]:
        return [SyncCommand.remove_relation(Relation.team_member(user_id, team_id))]

    @staticmethod
    def team_deleted_commands(team_id: str, user_ids: Iterable[str]) -> List[SyncCommand]:
        return [SyncCommand.remove_relation(Relation.team_member(user_id, team_id)) for user_id in user_ids]

    @staticmethod
    def organization_deleted_commands(
        organization_id: str,
        member_roles: Sequence[Tuple[str, str]],
        team_relations: Sequence[Tuple[str, str]],
    ) -> List[SyncCommand]:
        """Relations first, then roles.

        Args:
            member_roles: ``(user_id, role)`` for every member
            team_relations: ``(team_id, user_id)`` for every team membership
        """
        scope = Scope.organization(organization_id)
        commands = [
            SyncCommand.remove_relation(Relation.team_member(user_id, team_id))
            for team_id, user_id in team_relations
        ]
        commands.extend(SyncCommand.revoke_role(user_id, role, scope) for user_id, role in member_roles)
        return commands

    # Execution

    async def _execute(self, command: SyncCommand) -> None:
        if command.action == SyncAction.ASSIGN_ROLE:
            await self._client.assign_role(
                command.user_id, command.role, command.scope, assigned_by=command.assigned_by
            )
        elif command.action == SyncAction.REVOKE_ROLE:
            await self._client.revoke_role(command.user_id, command.role, command.scope)
        elif command.action == SyncAction.ADD_RELATION:
            rel = command.relation
            await self._client.add_relation(
                rel.subject_type, rel.subject_id, rel.relation, rel.object_type, rel.object_id
            )
        elif command.action == SyncAction.REMOVE_RELATION:
            rel = command.relation
            await self._client.remove_relation(
                rel.subject_type, rel.subject_id, rel.relation, rel.object_type, rel.object_id
            )
        else:
            raise ValueError(f"Unsupported sync action: {command.action}")

    async def apply(self, operation: str, commands: Sequence[SyncCommand]) -> None:
        """Run ``commands`` in order, stopping at the first failure."""
        for command in commands:
            try:
                await self._execute(command)
            except Exception as e:
                logger.error(f"Authorization sync failed for {operation} at {command}: {e}")
                raise AuthorizationSyncError(operation, commands, command, cause=e) from e
        if commands:
            logger.debug(f"Authorization sync for {operation} applied {len(commands)} command(s)")

    async def retry(self, error: AuthorizationSyncError) -> None:
        """Replay every command of a failed sync."""
        logger.info(f"Retrying authorization sync for {error.operation} ({len(error.commands)} command(s))")
        await self.apply(error.operation, error.commands)
