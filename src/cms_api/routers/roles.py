"""Role administration router."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Request, status

from cms_api.constants.permissions import Permissions
from cms_api.dependencies import get_rbac_service
from cms_api.models.dto.common import ApiResponse
from cms_api.models.dto.rbac import (
    RoleCreateRequest,
    RolePermissionsUpdateRequest,
    RoleResponse,
    RoleUpdateRequest,
    UserResponse,
)
from cms_api.security.auth import require_all, require_permission
from cms_api.security.rate_limit import ADMIN_MODIFY_LIMIT, limiter
from cms_api.services.rbac_service import RbacService

router = APIRouter()

RbacServiceDep = Annotated[RbacService, Depends(get_rbac_service)]


@router.get(
    "",
    response_model=ApiResponse[list[RoleResponse]],
    dependencies=[Depends(require_permission(Permissions.ROLES_LIST))],
)
async def list_roles(rbac_service: RbacServiceDep) -> ApiResponse[list[RoleResponse]]:
    """List all roles with their permissions."""
    return ApiResponse(data=await rbac_service.list_roles())


@router.post(
    "",
    response_model=ApiResponse[RoleResponse],
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_permission(Permissions.ROLES_CREATE))],
)
@limiter.limit(ADMIN_MODIFY_LIMIT)
async def create_role(
    request: Request,
    body: RoleCreateRequest,
    rbac_service: RbacServiceDep,
) -> ApiResponse[RoleResponse]:
    """Create a role, optionally with an initial permission set."""
    role = await rbac_service.create_role(body)
    return ApiResponse(message="Role created", data=role)


@router.get(
    "/{role_id}",
    response_model=ApiResponse[RoleResponse],
    dependencies=[Depends(require_permission(Permissions.ROLES_VIEW))],
)
async def get_role(role_id: UUID, rbac_service: RbacServiceDep) -> ApiResponse[RoleResponse]:
    """Get a role with its permissions."""
    return ApiResponse(data=await rbac_service.get_role(role_id))


@router.put(
    "/{role_id}",
    response_model=ApiResponse[RoleResponse],
    dependencies=[Depends(require_permission(Permissions.ROLES_UPDATE))],
)
@limiter.limit(ADMIN_MODIFY_LIMIT)
async def update_role(
    request: Request,
    role_id: UUID,
    body: RoleUpdateRequest,
    rbac_service: RbacServiceDep,
) -> ApiResponse[RoleResponse]:
    """Update role attributes."""
    role = await rbac_service.update_role(role_id, body)
    return ApiResponse(message="Role updated", data=role)


@router.delete(
    "/{role_id}",
    response_model=ApiResponse[dict],
    dependencies=[Depends(require_permission(Permissions.ROLES_DELETE))],
)
@limiter.limit(ADMIN_MODIFY_LIMIT)
async def delete_role(
    request: Request,
    role_id: UUID,
    rbac_service: RbacServiceDep,
) -> ApiResponse[dict]:
    """Delete a role that is neither the default nor assigned to users."""
    await rbac_service.delete_role(role_id)
    return ApiResponse(message="Role deleted", data={})


@router.post(
    "/{role_id}/permissions",
    response_model=ApiResponse[RoleResponse],
    dependencies=[
        Depends(
            require_all(
                require_permission(Permissions.ROLES_UPDATE),
                require_permission(Permissions.ROLE_MANAGE_PERMISSIONS),
            )
        )
    ],
)
@limiter.limit(ADMIN_MODIFY_LIMIT)
async def update_role_permissions(
    request: Request,
    role_id: UUID,
    body: RolePermissionsUpdateRequest,
    rbac_service: RbacServiceDep,
) -> ApiResponse[RoleResponse]:
    """Replace the role's permission set with exactly the given permissions."""
    role = await rbac_service.update_role_permissions(role_id, body.permission_ids)
    return ApiResponse(message="Role permissions updated", data=role)


@router.get(
    "/{role_id}/users",
    response_model=ApiResponse[list[UserResponse]],
    dependencies=[
        Depends(
            require_all(
                require_permission(Permissions.ROLES_VIEW),
                require_permission(Permissions.USERS_LIST),
            )
        )
    ],
)
async def get_role_users(
    role_id: UUID,
    rbac_service: RbacServiceDep,
) -> ApiResponse[list[UserResponse]]:
    """List the users assigned to a role."""
    return ApiResponse(data=await rbac_service.get_users_by_role(role_id))
