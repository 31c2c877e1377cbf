"""Permission administration router."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Request, status

from cms_api.constants.permissions import Permissions
from cms_api.dependencies import get_rbac_service
from cms_api.models.dto.common import ApiResponse
from cms_api.models.dto.rbac import (
    BulkPermissionCreateRequest,
    BulkPermissionCreateResponse,
    PermissionCreateRequest,
    PermissionResponse,
    PermissionUpdateRequest,
)
from cms_api.security.auth import require_permission
from cms_api.security.rate_limit import ADMIN_MODIFY_LIMIT, limiter
from cms_api.services.rbac_service import RbacService

router = APIRouter()

RbacServiceDep = Annotated[RbacService, Depends(get_rbac_service)]


@router.get(
    "",
    response_model=ApiResponse[list[PermissionResponse]],
    dependencies=[Depends(require_permission(Permissions.PERMISSIONS_LIST))],
)
async def list_permissions(
    rbac_service: RbacServiceDep,
    module: Annotated[str | None, Query(max_length=50)] = None,
) -> ApiResponse[list[PermissionResponse]]:
    """List permissions, optionally restricted to one module."""
    return ApiResponse(data=await rbac_service.list_permissions(module=module))


@router.get(
    "/modules",
    response_model=ApiResponse[dict[str, list[PermissionResponse]]],
    dependencies=[Depends(require_permission(Permissions.PERMISSIONS_LIST))],
)
async def list_permissions_by_module(
    rbac_service: RbacServiceDep,
) -> ApiResponse[dict[str, list[PermissionResponse]]]:
    """List permissions grouped by module."""
    return ApiResponse(data=await rbac_service.get_permissions_by_module())


@router.post(
    "",
    response_model=ApiResponse[PermissionResponse],
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_permission(Permissions.PERMISSIONS_CREATE))],
)
@limiter.limit(ADMIN_MODIFY_LIMIT)
async def create_permission(
    request: Request,
    body: PermissionCreateRequest,
    rbac_service: RbacServiceDep,
) -> ApiResponse[PermissionResponse]:
    """Create a permission."""
    permission = await rbac_service.create_permission(body)
    return ApiResponse(message="Permission created", data=permission)


@router.post(
    "/bulk",
    response_model=ApiResponse[BulkPermissionCreateResponse],
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_permission(Permissions.PERMISSIONS_CREATE))],
)
@limiter.limit(ADMIN_MODIFY_LIMIT)
async def bulk_create_permissions(
    request: Request,
    body: BulkPermissionCreateRequest,
    rbac_service: RbacServiceDep,
) -> ApiResponse[BulkPermissionCreateResponse]:
    """Create many permissions; existing ones are skipped, not rejected."""
    result = await rbac_service.bulk_create_permissions(body.permissions)
    return ApiResponse(
        message=f"{result.created} permissions created, {result.duplicates_skipped} skipped",
        data=result,
    )


@router.get(
    "/{permission_id}",
    response_model=ApiResponse[PermissionResponse],
    dependencies=[Depends(require_permission(Permissions.PERMISSIONS_VIEW))],
)
async def get_permission(
    permission_id: UUID,
    rbac_service: RbacServiceDep,
) -> ApiResponse[PermissionResponse]:
    """Get a permission by ID."""
    return ApiResponse(data=await rbac_service.get_permission(permission_id))


@router.put(
    "/{permission_id}",
    response_model=ApiResponse[PermissionResponse],
    dependencies=[Depends(require_permission(Permissions.PERMISSIONS_UPDATE))],
)
@limiter.limit(ADMIN_MODIFY_LIMIT)
async def update_permission(
    request: Request,
    permission_id: UUID,
    body: PermissionUpdateRequest,
    rbac_service: RbacServiceDep,
) -> ApiResponse[PermissionResponse]:
    """Update a permission."""
    permission = await rbac_service.update_permission(permission_id, body)
    return ApiResponse(message="Permission updated", data=permission)


@router.delete(
    "/{permission_id}",
    response_model=ApiResponse[dict],
    dependencies=[Depends(require_permission(Permissions.PERMISSIONS_DELETE))],
)
@limiter.limit(ADMIN_MODIFY_LIMIT)
async def delete_permission(
    request: Request,
    permission_id: UUID,
    rbac_service: RbacServiceDep,
) -> ApiResponse[dict]:
    """Delete a permission and remove it from every role."""
    await rbac_service.delete_permission(permission_id)
    return ApiResponse(message="Permission deleted", data={})
