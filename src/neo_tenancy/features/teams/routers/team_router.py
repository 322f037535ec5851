"""Team router.

Teams and team memberships under ``/organizations/{organization_id}/teams``.
Team ids are global; a team outside the path's organization is reported as
not found.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Path, Query, Response, status

from ....api.dependencies import get_current_user_id, get_team_service, require_operation_permission
from ....config.constants import SortOrder, TeamMemberSortField, TeamSortField
from ....core.exceptions import NotFoundError
from ..models.requests import AddTeamMemberRequest, CreateTeamRequest, UpdateTeamMemberRoleRequest, UpdateTeamRequest
from ..models.responses import (
    TeamCountResponse,
    TeamDeletionResponse,
    TeamMemberResponse,
    TeamMembershipResponse,
    TeamResponse,
    TeamTreeNodeResponse,
)
from ..services.team_service import UNSET, TeamService


router = APIRouter(
    prefix="/organizations/{organization_id}/teams",
    tags=["Teams"],
    responses={
        403: {"description": "Insufficient role or organization not active"},
        404: {"description": "Organization or team not found"},
        409: {"description": "Conflict"},
    }
)


async def _ensure_team_in_organization(
    service: TeamService, user_id: str, organization_id: str, team_id: str
) -> None:
    team = await service.get_team(user_id, team_id)
    if team.organization_id != organization_id:
        raise NotFoundError("Team", team_id, message="Team not found")


@router.get("", response_model=List[TeamResponse], summary="List teams")
async def list_teams(
    organization_id: str = Path(..., description="Organization ID"),
    parent_team_id: Optional[str] = Query(None, description="Only children of this team"),
    root_only: bool = Query(False, description="Only teams without a parent"),
    sort_by: TeamSortField = Query(TeamSortField.NAME),
    sort_order: SortOrder = Query(SortOrder.ASC),
    user_id: str = Depends(get_current_user_id),
    service: TeamService = Depends(get_team_service)
) -> List[TeamResponse]:
    if root_only:
        parent = None
    elif parent_team_id is not None:
        parent = parent_team_id
    else:
        parent = UNSET
    teams = await service.list_teams(user_id, organization_id, parent, sort_by, sort_order)
    return [TeamResponse.from_entity(t) for t in teams]


@router.get("/tree", response_model=List[TeamTreeNodeResponse], summary="Team hierarchy")
async def list_teams_as_tree(
    organization_id: str = Path(..., description="Organization ID"),
    user_id: str = Depends(get_current_user_id),
    service: TeamService = Depends(get_team_service)
) -> List[TeamTreeNodeResponse]:
    nodes = await service.list_teams_as_tree(user_id, organization_id)
    return [TeamTreeNodeResponse.from_entity(node) for node in nodes]


@router.get("/count", response_model=TeamCountResponse, summary="Count teams")
async def count_teams(
    organization_id: str = Path(..., description="Organization ID"),
    user_id: str = Depends(get_current_user_id),
    service: TeamService = Depends(get_team_service)
) -> TeamCountResponse:
    return TeamCountResponse(count=await service.count_teams(user_id, organization_id))


@router.post(
    "",
    response_model=TeamResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create team",
    dependencies=[Depends(require_operation_permission("create_team"))],
)
async def create_team(
    request: CreateTeamRequest,
    organization_id: str = Path(..., description="Organization ID"),
    user_id: str = Depends(get_current_user_id),
    service: TeamService = Depends(get_team_service)
) -> TeamResponse:
    team = await service.create_team(
        user_id,
        organization_id,
        name=request.name,
        slug=request.slug,
        description=request.description,
        parent_team_id=request.parent_team_id,
        metadata=request.metadata,
    )
    return TeamResponse.from_entity(team)


@router.get("/{team_id}", response_model=TeamResponse, summary="Get team")
async def get_team(
    organization_id: str = Path(..., description="Organization ID"),
    team_id: str = Path(..., description="Team ID"),
    user_id: str = Depends(get_current_user_id),
    service: TeamService = Depends(get_team_service)
) -> TeamResponse:
    team = await service.get_team(user_id, team_id)
    if team.organization_id != organization_id:
        raise NotFoundError("Team", team_id, message="Team not found")
    return TeamResponse.from_entity(team)


@router.patch(
    "/{team_id}",
    response_model=TeamResponse,
    summary="Update team",
    dependencies=[Depends(require_operation_permission("update_team"))],
)
async def update_team(
    request: UpdateTeamRequest,
    organization_id: str = Path(..., description="Organization ID"),
    team_id: str = Path(..., description="Team ID"),
    user_id: str = Depends(get_current_user_id),
    service: TeamService = Depends(get_team_service)
) -> TeamResponse:
    await _ensure_team_in_organization(service, user_id, organization_id, team_id)
    team = await service.update_team(
        user_id,
        team_id,
        name=request.name,
        slug=request.slug,
        description=request.description,
        metadata=request.metadata,
        parent_team_id=request.parent_team_id if request.changes_parent else UNSET,
    )
    return TeamResponse.from_entity(team)


@router.delete(
    "/{team_id}",
    response_model=TeamDeletionResponse,
    summary="Delete team",
    dependencies=[Depends(require_operation_permission("delete_team"))],
)
async def delete_team(
    organization_id: str = Path(..., description="Organization ID"),
    team_id: str = Path(..., description="Team ID"),
    user_id: str = Depends(get_current_user_id),
    service: TeamService = Depends(get_team_service)
) -> TeamDeletionResponse:
    await _ensure_team_in_organization(service, user_id, organization_id, team_id)
    result = await service.delete_team(user_id, team_id)
    return TeamDeletionResponse(
        team_id=team_id,
        reparented_team_ids=result.reparented_team_ids,
        team_memberships_deleted=len(result.team_relations),
    )


@router.get("/{team_id}/members", response_model=List[TeamMemberResponse], summary="List team members")
async def list_team_members(
    organization_id: str = Path(..., description="Organization ID"),
    team_id: str = Path(..., description="Team ID"),
    sort_by: TeamMemberSortField = Query(TeamMemberSortField.CREATED_AT),
    sort_order: SortOrder = Query(SortOrder.DESC),
    user_id: str = Depends(get_current_user_id),
    service: TeamService = Depends(get_team_service)
) -> List[TeamMemberResponse]:
    await _ensure_team_in_organization(service, user_id, organization_id, team_id)
    members = await service.list_team_members(user_id, team_id, sort_by, sort_order)
    return [TeamMemberResponse.from_entity(m) for m in members]


@router.post(
    "/{team_id}/members",
    response_model=TeamMemberResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Add team member",
    dependencies=[Depends(require_operation_permission("add_team_member"))],
)
async def add_team_member(
    request: AddTeamMemberRequest,
    organization_id: str = Path(..., description="Organization ID"),
    team_id: str = Path(..., description="Team ID"),
    user_id: str = Depends(get_current_user_id),
    service: TeamService = Depends(get_team_service)
) -> TeamMemberResponse:
    await _ensure_team_in_organization(service, user_id, organization_id, team_id)
    team_member = await service.add_team_member(user_id, team_id, request.user_id, request.role)
    return TeamMemberResponse.from_entity(team_member)


@router.get(
    "/{team_id}/members/{member_user_id}",
    response_model=TeamMembershipResponse,
    summary="Check team membership",
)
async def is_team_member(
    organization_id: str = Path(..., description="Organization ID"),
    team_id: str = Path(..., description="Team ID"),
    member_user_id: str = Path(..., description="User ID"),
    user_id: str = Depends(get_current_user_id),
    service: TeamService = Depends(get_team_service)
) -> TeamMembershipResponse:
    await _ensure_team_in_organization(service, user_id, organization_id, team_id)
    is_member = await service.is_team_member(user_id, team_id, member_user_id)
    return TeamMembershipResponse(team_id=team_id, user_id=member_user_id, is_member=is_member)


@router.patch(
    "/{team_id}/members/{member_user_id}/role",
    response_model=TeamMemberResponse,
    summary="Change team role",
)
async def update_team_member_role(
    request: UpdateTeamMemberRoleRequest,
    organization_id: str = Path(..., description="Organization ID"),
    team_id: str = Path(..., description="Team ID"),
    member_user_id: str = Path(..., description="User ID"),
    user_id: str = Depends(get_current_user_id),
    service: TeamService = Depends(get_team_service)
) -> TeamMemberResponse:
    await _ensure_team_in_organization(service, user_id, organization_id, team_id)
    team_member = await service.update_team_member_role(user_id, team_id, member_user_id, request.role)
    return TeamMemberResponse.from_entity(team_member)


@router.delete(
    "/{team_id}/members/{member_user_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Remove team member",
    dependencies=[Depends(require_operation_permission("remove_team_member"))],
)
async def remove_team_member(
    organization_id: str = Path(..., description="Organization ID"),
    team_id: str = Path(..., description="Team ID"),
    member_user_id: str = Path(..., description="User ID"),
    user_id: str = Depends(get_current_user_id),
    service: TeamService = Depends(get_team_service)
) -> Response:
    await _ensure_team_in_organization(service, user_id, organization_id, team_id)
    await service.remove_team_member(user_id, team_id, member_user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
