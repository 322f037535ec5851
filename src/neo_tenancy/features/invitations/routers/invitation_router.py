"""Invitation routers.

``organization_invitations_router`` manages an organization's invitations;
``invitation_router`` serves the invitee side (lookup, accept) and the
per-invitation admin actions.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Path, Query, status

from ....api.dependencies import (
    get_current_user_id,
    get_invitation_service,
    require_invitation_permission,
    require_operation_permission,
)
from ....config.constants import InvitationSortField, InvitationStatus, SortOrder
from ....core.exceptions import NotFoundError
from ...directory.models.responses import BulkOperationResponse
from ...members.models.responses import MemberResponse
from ..models.requests import AcceptInvitationRequest, BulkInviteRequest, CreateInvitationRequest
from ..models.responses import InvitationDetailsResponse, InvitationResponse, ResendInvitationResponse
from ..services.invitation_service import InvitationService


organization_invitations_router = APIRouter(
    prefix="/organizations/{organization_id}/invitations",
    tags=["Invitations"],
    responses={
        403: {"description": "Insufficient role or organization not active"},
        404: {"description": "Organization or team not found"},
        409: {"description": "A pending invitation already exists"},
    }
)

invitation_router = APIRouter(
    prefix="/invitations",
    tags=["Invitations"],
    responses={
        404: {"description": "Invitation not found"},
        409: {"description": "Invitation is no longer pending"},
        410: {"description": "Invitation has expired"},
    }
)


@organization_invitations_router.get("", response_model=List[InvitationResponse], summary="List invitations")
async def list_invitations(
    organization_id: str = Path(..., description="Organization ID"),
    status_filter: Optional[InvitationStatus] = Query(None, alias="status"),
    sort_by: InvitationSortField = Query(InvitationSortField.CREATED_AT),
    sort_order: SortOrder = Query(SortOrder.DESC),
    user_id: str = Depends(get_current_user_id),
    service: InvitationService = Depends(get_invitation_service)
) -> List[InvitationResponse]:
    invitations = await service.list_invitations(user_id, organization_id, status_filter, sort_by, sort_order)
    return [InvitationResponse.from_entity(i) for i in invitations]


@organization_invitations_router.post(
    "",
    response_model=InvitationResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Invite member",
    dependencies=[Depends(require_operation_permission("invite_member"))],
)
async def invite_member(
    request: CreateInvitationRequest,
    organization_id: str = Path(..., description="Organization ID"),
    user_id: str = Depends(get_current_user_id),
    service: InvitationService = Depends(get_invitation_service)
) -> InvitationResponse:
    invitation = await service.invite_member(
        user_id,
        organization_id,
        request.identifier,
        role=request.role.value,
        identifier_type=request.identifier_type,
        team_id=request.team_id,
        message=request.message,
        inviter_name=request.inviter_name,
        expires_at=request.expires_at,
    )
    return InvitationResponse.from_entity(invitation)


@organization_invitations_router.post(
    "/bulk",
    response_model=BulkOperationResponse,
    summary="Invite several",
    dependencies=[Depends(require_operation_permission("invite_member"))],
)
async def bulk_invite_members(
    request: BulkInviteRequest,
    organization_id: str = Path(..., description="Organization ID"),
    user_id: str = Depends(get_current_user_id),
    service: InvitationService = Depends(get_invitation_service)
) -> BulkOperationResponse:
    result = await service.bulk_invite_members(
        user_id,
        organization_id,
        [item.to_item() for item in request.invitations],
        inviter_name=request.inviter_name,
        expires_at=request.expires_at,
    )
    return BulkOperationResponse.from_result(
        result, item_converter=lambda inv: InvitationResponse.from_entity(inv).model_dump(mode="json")
    )


@invitation_router.get(
    "/pending",
    response_model=List[InvitationDetailsResponse],
    summary="Pending invitations for an identifier",
)
async def get_pending_invitations_for_identifier(
    identifier: str = Query(..., description="Invitee identifier"),
    service: InvitationService = Depends(get_invitation_service)
) -> List[InvitationDetailsResponse]:
    details = await service.get_pending_invitations_for_identifier(identifier)
    return [InvitationDetailsResponse.from_details(d) for d in details]


@invitation_router.get("/{invitation_id}", response_model=InvitationDetailsResponse, summary="Get invitation")
async def get_invitation(
    invitation_id: str = Path(..., description="Invitation ID"),
    service: InvitationService = Depends(get_invitation_service)
) -> InvitationDetailsResponse:
    details = await service.get_invitation(invitation_id)
    if details is None:
        raise NotFoundError("Invitation", invitation_id, message="Invitation not found")
    return InvitationDetailsResponse.from_details(details)


@invitation_router.post("/{invitation_id}/accept", response_model=MemberResponse, summary="Accept invitation")
async def accept_invitation(
    invitation_id: str = Path(..., description="Invitation ID"),
    request: Optional[AcceptInvitationRequest] = None,
    user_id: str = Depends(get_current_user_id),
    service: InvitationService = Depends(get_invitation_service)
) -> MemberResponse:
    accepting_identifier = request.accepting_identifier if request else None
    member = await service.accept_invitation(user_id, invitation_id, accepting_identifier)
    return MemberResponse.from_entity(member)


@invitation_router.post(
    "/{invitation_id}/resend",
    response_model=ResendInvitationResponse,
    summary="Resend invitation",
    dependencies=[Depends(require_invitation_permission("resend_invitation"))],
)
async def resend_invitation(
    invitation_id: str = Path(..., description="Invitation ID"),
    user_id: str = Depends(get_current_user_id),
    service: InvitationService = Depends(get_invitation_service)
) -> ResendInvitationResponse:
    invitation = await service.resend_invitation(user_id, invitation_id)
    return ResendInvitationResponse(
        invitation_id=invitation.id,
        invitee_identifier=invitation.invitee_identifier,
        expires_at=invitation.expires_at,
    )


@invitation_router.post(
    "/{invitation_id}/cancel",
    response_model=InvitationResponse,
    summary="Cancel invitation",
    dependencies=[Depends(require_invitation_permission("cancel_invitation"))],
)
async def cancel_invitation(
    invitation_id: str = Path(..., description="Invitation ID"),
    user_id: str = Depends(get_current_user_id),
    service: InvitationService = Depends(get_invitation_service)
) -> InvitationResponse:
    return InvitationResponse.from_entity(await service.cancel_invitation(user_id, invitation_id))
