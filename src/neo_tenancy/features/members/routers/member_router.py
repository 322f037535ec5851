"""Member router.

Membership management under ``/organizations/{organization_id}/members``.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Path, Query, Response, status

from ....api.dependencies import get_current_user_id, get_member_service, require_operation_permission
from ....config.constants import MemberSortField, MemberStatusFilter, OrgRole, SortOrder
from ....core.exceptions import NotFoundError
from ...directory.models.responses import BulkOperationResponse
from ..models.requests import (
    AddMemberRequest,
    BulkAddMembersRequest,
    BulkRemoveMembersRequest,
    JoinByDomainRequest,
    UpdateMemberRoleRequest,
)
from ..models.responses import MemberCountResponse, MemberResponse, PermissionCheckResponse
from ..services.member_service import MemberService


router = APIRouter(
    prefix="/organizations/{organization_id}/members",
    tags=["Members"],
    responses={
        403: {"description": "Insufficient role or organization not active"},
        404: {"description": "Organization or member not found"},
        409: {"description": "Conflict"},
    }
)


@router.get("", response_model=List[MemberResponse], summary="List members")
async def list_members(
    organization_id: str = Path(..., description="Organization ID"),
    status_filter: MemberStatusFilter = Query(MemberStatusFilter.ACTIVE, alias="status"),
    sort_by: MemberSortField = Query(MemberSortField.CREATED_AT),
    sort_order: SortOrder = Query(SortOrder.ASC),
    user_id: str = Depends(get_current_user_id),
    service: MemberService = Depends(get_member_service)
) -> List[MemberResponse]:
    members = await service.list_members(user_id, organization_id, status_filter, sort_by, sort_order)
    return [MemberResponse.from_entity(m) for m in members]


@router.get("/count", response_model=MemberCountResponse, summary="Count members")
async def count_members(
    organization_id: str = Path(..., description="Organization ID"),
    status_filter: MemberStatusFilter = Query(MemberStatusFilter.ACTIVE, alias="status"),
    user_id: str = Depends(get_current_user_id),
    service: MemberService = Depends(get_member_service)
) -> MemberCountResponse:
    return MemberCountResponse(count=await service.count_members(user_id, organization_id, status_filter))


@router.get(
    "/check-permission",
    response_model=PermissionCheckResponse,
    summary="Check a member's role",
    description="Non-raising check of whether a user holds at least min_role",
)
async def check_member_permission(
    organization_id: str = Path(..., description="Organization ID"),
    min_role: OrgRole = Query(OrgRole.MEMBER),
    target_user_id: Optional[str] = Query(None, alias="user_id", description="Defaults to the caller"),
    user_id: str = Depends(get_current_user_id),
    service: MemberService = Depends(get_member_service)
) -> PermissionCheckResponse:
    check = await service.check_member_permission(organization_id, target_user_id or user_id, min_role)
    return PermissionCheckResponse.from_entity(check)


@router.post(
    "",
    response_model=MemberResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Add member",
    dependencies=[Depends(require_operation_permission("add_member"))],
)
async def add_member(
    request: AddMemberRequest,
    organization_id: str = Path(..., description="Organization ID"),
    user_id: str = Depends(get_current_user_id),
    service: MemberService = Depends(get_member_service)
) -> MemberResponse:
    member = await service.add_member(user_id, organization_id, request.user_id, request.role.value)
    return MemberResponse.from_entity(member)


@router.post(
    "/bulk",
    response_model=BulkOperationResponse,
    summary="Add several members",
    dependencies=[Depends(require_operation_permission("add_member"))],
)
async def bulk_add_members(
    request: BulkAddMembersRequest,
    organization_id: str = Path(..., description="Organization ID"),
    user_id: str = Depends(get_current_user_id),
    service: MemberService = Depends(get_member_service)
) -> BulkOperationResponse:
    result = await service.bulk_add_members(
        user_id, organization_id, [(m.user_id, m.role.value) for m in request.members]
    )
    return BulkOperationResponse.from_result(result)


@router.post(
    "/bulk-remove",
    response_model=BulkOperationResponse,
    summary="Remove several members",
    dependencies=[Depends(require_operation_permission("remove_member"))],
)
async def bulk_remove_members(
    request: BulkRemoveMembersRequest,
    organization_id: str = Path(..., description="Organization ID"),
    user_id: str = Depends(get_current_user_id),
    service: MemberService = Depends(get_member_service)
) -> BulkOperationResponse:
    result = await service.bulk_remove_members(user_id, organization_id, request.user_ids)
    return BulkOperationResponse.from_result(result)


@router.post(
    "/join",
    response_model=MemberResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Join by email domain",
)
async def join_by_domain(
    request: JoinByDomainRequest,
    organization_id: str = Path(..., description="Organization ID"),
    user_id: str = Depends(get_current_user_id),
    service: MemberService = Depends(get_member_service)
) -> MemberResponse:
    member = await service.join_by_domain(user_id, organization_id, request.email, request.role.value)
    return MemberResponse.from_entity(member)


@router.post("/leave", status_code=status.HTTP_204_NO_CONTENT, summary="Leave organization")
async def leave_organization(
    organization_id: str = Path(..., description="Organization ID"),
    user_id: str = Depends(get_current_user_id),
    service: MemberService = Depends(get_member_service)
) -> Response:
    await service.leave_organization(user_id, organization_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{member_user_id}", response_model=MemberResponse, summary="Get member")
async def get_member(
    organization_id: str = Path(..., description="Organization ID"),
    member_user_id: str = Path(..., description="Member's user ID"),
    user_id: str = Depends(get_current_user_id),
    service: MemberService = Depends(get_member_service)
) -> MemberResponse:
    member = await service.get_member(user_id, organization_id, member_user_id)
    if member is None:
        raise NotFoundError("Member", member_user_id, message="Member not found")
    return MemberResponse.from_entity(member)


@router.patch(
    "/{member_user_id}/role",
    response_model=MemberResponse,
    summary="Change member role",
    dependencies=[Depends(require_operation_permission("update_member_role"))],
)
async def update_member_role(
    request: UpdateMemberRoleRequest,
    organization_id: str = Path(..., description="Organization ID"),
    member_user_id: str = Path(..., description="Member's user ID"),
    user_id: str = Depends(get_current_user_id),
    service: MemberService = Depends(get_member_service)
) -> MemberResponse:
    member = await service.update_member_role(user_id, organization_id, member_user_id, request.role.value)
    return MemberResponse.from_entity(member)


@router.post("/{member_user_id}/suspend", response_model=MemberResponse, summary="Suspend member")
async def suspend_member(
    organization_id: str = Path(..., description="Organization ID"),
    member_user_id: str = Path(..., description="Member's user ID"),
    user_id: str = Depends(get_current_user_id),
    service: MemberService = Depends(get_member_service)
) -> MemberResponse:
    return MemberResponse.from_entity(await service.suspend_member(user_id, organization_id, member_user_id))


@router.post("/{member_user_id}/unsuspend", response_model=MemberResponse, summary="Unsuspend member")
async def unsuspend_member(
    organization_id: str = Path(..., description="Organization ID"),
    member_user_id: str = Path(..., description="Member's user ID"),
    user_id: str = Depends(get_current_user_id),
    service: MemberService = Depends(get_member_service)
) -> MemberResponse:
    return MemberResponse.from_entity(await service.unsuspend_member(user_id, organization_id, member_user_id))


@router.delete(
    "/{member_user_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Remove member",
    dependencies=[Depends(require_operation_permission("remove_member"))],
)
async def remove_member(
    organization_id: str = Path(..., description="Organization ID"),
    member_user_id: str = Path(..., description="Member's user ID"),
    user_id: str = Depends(get_current_user_id),
    service: MemberService = Depends(get_member_service)
) -> Response:
    await service.remove_member(user_id, organization_id, member_user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
