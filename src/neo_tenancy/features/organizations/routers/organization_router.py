"""Organization router.

Ready-to-use FastAPI router for organization management. Errors raised by
the service surface through the handlers installed by
``register_exception_handlers``.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Path, Query, status

from ....api.dependencies import get_current_user_id, get_organization_service, require_operation_permission
from ....config.constants import OrganizationSortField, OrganizationStatus, SortOrder
from ..models.requests import CreateOrganizationRequest, TransferOwnershipRequest, UpdateOrganizationRequest
from ..models.responses import OrganizationDeletionResponse, OrganizationResponse, UserOrganizationResponse
from ..services.organization_service import OrganizationService


router = APIRouter(
    prefix="/organizations",
    tags=["Organizations"],
    responses={
        403: {"description": "Insufficient role or organization not active"},
        404: {"description": "Organization not found"},
        409: {"description": "Conflict"},
        422: {"description": "Validation error"},
    }
)


@router.get(
    "",
    response_model=List[UserOrganizationResponse],
    summary="List my organizations",
    description="Organizations the caller belongs to, with the caller's role",
)
async def list_user_organizations(
    sort_by: OrganizationSortField = Query(OrganizationSortField.NAME),
    sort_order: SortOrder = Query(SortOrder.ASC),
    status_filter: Optional[OrganizationStatus] = Query(None, alias="status"),
    user_id: str = Depends(get_current_user_id),
    service: OrganizationService = Depends(get_organization_service)
) -> List[UserOrganizationResponse]:
    memberships = await service.list_user_organizations(user_id, sort_by, sort_order, status_filter)
    return [UserOrganizationResponse.from_entity(m) for m in memberships]


@router.post(
    "",
    response_model=OrganizationResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create organization",
    description="Create an organization owned by the caller",
    responses={201: {"description": "Organization created successfully"}}
)
async def create_organization(
    request: CreateOrganizationRequest,
    user_id: str = Depends(get_current_user_id),
    service: OrganizationService = Depends(get_organization_service)
) -> OrganizationResponse:
    """Create new organization."""
    organization = await service.create_organization(
        user_id,
        name=request.name,
        slug=request.slug,
        logo=request.logo,
        metadata=request.metadata,
        settings=request.settings.to_entity() if request.settings else None,
        allowed_domains=request.allowed_domains,
    )
    return OrganizationResponse.from_entity(organization)


@router.get(
    "/joinable",
    response_model=List[OrganizationResponse],
    summary="Organizations joinable by email domain",
)
async def list_organizations_joinable_by_domain(
    email: str = Query(..., description="Email address whose domain is matched"),
    service: OrganizationService = Depends(get_organization_service)
) -> List[OrganizationResponse]:
    organizations = await service.list_organizations_joinable_by_domain(email)
    return [OrganizationResponse.from_entity(org) for org in organizations]


@router.get(
    "/slug/{slug}",
    response_model=OrganizationResponse,
    summary="Get organization by slug",
)
async def get_organization_by_slug(
    slug: str = Path(..., description="Organization slug"),
    service: OrganizationService = Depends(get_organization_service)
) -> OrganizationResponse:
    return OrganizationResponse.from_entity(await service.get_organization_by_slug(slug))


@router.get(
    "/{organization_id}",
    response_model=OrganizationResponse,
    summary="Get organization by ID",
)
async def get_organization(
    organization_id: str = Path(..., description="Organization ID"),
    user_id: str = Depends(get_current_user_id),
    service: OrganizationService = Depends(get_organization_service)
) -> OrganizationResponse:
    return OrganizationResponse.from_entity(await service.get_organization(user_id, organization_id))


@router.patch(
    "/{organization_id}",
    response_model=OrganizationResponse,
    summary="Update organization",
    dependencies=[Depends(require_operation_permission("update_organization"))],
    description="Partial update; requires admin",
)
async def update_organization(
    request: UpdateOrganizationRequest,
    organization_id: str = Path(..., description="Organization ID"),
    user_id: str = Depends(get_current_user_id),
    service: OrganizationService = Depends(get_organization_service)
) -> OrganizationResponse:
    organization = await service.update_organization(
        user_id,
        organization_id,
        name=request.name,
        slug=request.slug,
        logo=request.logo,
        clear_logo=request.clear_logo,
        metadata=request.metadata,
        settings=request.settings.to_entity() if request.settings else None,
        allowed_domains=request.allowed_domains,
        status=request.status,
    )
    return OrganizationResponse.from_entity(organization)


@router.post(
    "/{organization_id}/transfer-ownership",
    response_model=OrganizationResponse,
    summary="Transfer ownership",
    description="Owner only; the new owner must already be a member",
)
async def transfer_ownership(
    request: TransferOwnershipRequest,
    organization_id: str = Path(..., description="Organization ID"),
    user_id: str = Depends(get_current_user_id),
    service: OrganizationService = Depends(get_organization_service)
) -> OrganizationResponse:
    organization = await service.transfer_ownership(
        user_id, organization_id, request.new_owner_id, request.previous_owner_role.value
    )
    return OrganizationResponse.from_entity(organization)


@router.delete(
    "/{organization_id}",
    response_model=OrganizationDeletionResponse,
    summary="Delete organization",
    dependencies=[Depends(require_operation_permission("delete_organization"))],
    description="Owner only; removes teams, invitations and members with it",
)
async def delete_organization(
    organization_id: str = Path(..., description="Organization ID"),
    user_id: str = Depends(get_current_user_id),
    service: OrganizationService = Depends(get_organization_service)
) -> OrganizationDeletionResponse:
    result = await service.delete_organization(user_id, organization_id)
    return OrganizationDeletionResponse.from_result(result)
