"""User administration router."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Request, status

from cms_api.constants.permissions import Permissions
from cms_api.dependencies import get_rbac_service
from cms_api.models.dto.common import ApiResponse
from cms_api.models.dto.rbac import UserCreateRequest, UserResponse, UserRoleUpdateRequest
from cms_api.security.auth import require_permission
from cms_api.security.rate_limit import ADMIN_MODIFY_LIMIT, limiter
from cms_api.services.rbac_service import RbacService

router = APIRouter()

RbacServiceDep = Annotated[RbacService, Depends(get_rbac_service)]


@router.get(
    "",
    response_model=ApiResponse[list[UserResponse]],
    dependencies=[Depends(require_permission(Permissions.USERS_LIST))],
)
async def list_users(rbac_service: RbacServiceDep) -> ApiResponse[list[UserResponse]]:
    """List all users."""
    return ApiResponse(data=await rbac_service.list_users())


@router.post(
    "",
    response_model=ApiResponse[UserResponse],
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_permission(Permissions.USERS_CREATE))],
)
@limiter.limit(ADMIN_MODIFY_LIMIT)
async def create_user(
    request: Request,
    body: UserCreateRequest,
    rbac_service: RbacServiceDep,
) -> ApiResponse[UserResponse]:
    """Create a user; without a role the default role is assigned."""
    user = await rbac_service.create_user(body)
    return ApiResponse(message="User created", data=user)


@router.get(
    "/{user_id}",
    response_model=ApiResponse[UserResponse],
    dependencies=[Depends(require_permission(Permissions.USERS_VIEW))],
)
async def get_user(user_id: UUID, rbac_service: RbacServiceDep) -> ApiResponse[UserResponse]:
    """Get a user by ID."""
    return ApiResponse(data=await rbac_service.get_user(user_id))


@router.put(
    "/{user_id}/role",
    response_model=ApiResponse[UserResponse],
    dependencies=[Depends(require_permission(Permissions.USERS_MANAGE_ROLES))],
)
@limiter.limit(ADMIN_MODIFY_LIMIT)
async def assign_user_role(
    request: Request,
    user_id: UUID,
    body: UserRoleUpdateRequest,
    rbac_service: RbacServiceDep,
) -> ApiResponse[UserResponse]:
    """Assign a role to a user, or clear it with ``role_id: null``."""
    user = await rbac_service.assign_role(user_id, body.role_id)
    return ApiResponse(message="User role updated", data=user)
