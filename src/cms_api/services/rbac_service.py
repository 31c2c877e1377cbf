"""RBAC service for role, permission, and user administration."""

import logging
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from cms_api.exceptions import (
    DefaultRoleDeletionError,
    InvalidPermissionIdsError,
    PermissionAlreadyExistsError,
    PermissionNotFoundError,
    RoleAlreadyExistsError,
    RoleHasUsersError,
    RoleNotFoundError,
    UserAlreadyExistsError,
    UserNotFoundError,
)
from cms_api.models.dto.rbac import (
    BulkPermissionCreateResponse,
    PermissionCreateRequest,
    PermissionResponse,
    PermissionUpdateRequest,
    RoleCreateRequest,
    RoleResponse,
    RoleUpdateRequest,
    UserCreateRequest,
    UserResponse,
)
from cms_api.models.orm.permission import PermissionORM
from cms_api.repositories.permission_repository import PermissionRepository
from cms_api.repositories.role_repository import RoleRepository
from cms_api.repositories.user_repository import UserRepository
from cms_api.security.password import get_password_service

logger = logging.getLogger(__name__)

# Module used when grouping permissions that have none
DEFAULT_PERMISSION_MODULE = "general"


class RbacService:
    """Service for RBAC administration.

    Every check (uniqueness, reference validity, invariant guards) runs
    explicitly before the first write. Each public mutation ends with a
    single commit, so a multi-step change such as the default-role swap is
    applied in one database transaction.
    """

    def __init__(self, session: AsyncSession) -> None:
        """Initialize service with database session."""
        self.session = session
        self.user_repo = UserRepository(session)
        self.role_repo = RoleRepository(session)
        self.permission_repo = PermissionRepository(session)
        self.password_service = get_password_service()

    # =========================================================================
    # Permission Management
    # =========================================================================

    async def list_permissions(self, module: str | None = None) -> list[PermissionResponse]:
        """List permissions sorted by module, then name.

        Args:
            module: Only return permissions of this module

        Returns:
            List of permissions
        """
        permissions = await self.permission_repo.get_all(module=module)
        return [PermissionResponse.model_validate(p) for p in permissions]

    async def get_permissions_by_module(self) -> dict[str, list[PermissionResponse]]:
        """Group all permissions by module.

        Returns:
            Mapping of module name to its permissions
        """
        grouped: dict[str, list[PermissionResponse]] = {}
        for permission in await self.permission_repo.get_all():
            module = permission.module or DEFAULT_PERMISSION_MODULE
            grouped.setdefault(module, []).append(PermissionResponse.model_validate(permission))
        return grouped

    async def get_permission(self, permission_id: UUID) -> PermissionResponse:
        """Get permission by ID.

        Raises:
            PermissionNotFoundError: If permission not found
        """
        permission = await self.permission_repo.get_by_id(permission_id)
        if permission is None:
            raise PermissionNotFoundError(permission_id)
        return PermissionResponse.model_validate(permission)

    async def create_permission(self, request: PermissionCreateRequest) -> PermissionResponse:
        """Create a permission.

        Args:
            request: Permission creation request

        Returns:
            Created permission

        Raises:
            PermissionAlreadyExistsError: If code or name is taken
        """
        if await self.permission_repo.get_by_code(request.code) is not None:
            raise PermissionAlreadyExistsError("code", request.code)
        if await self.permission_repo.get_by_name(request.name) is not None:
            raise PermissionAlreadyExistsError("name", request.name)

        permission = await self.permission_repo.create(**request.model_dump())
        await self.session.commit()

        logger.info(f"Permission created: {permission.code}")
        return PermissionResponse.model_validate(permission)

    async def bulk_create_permissions(
        self,
        requests: list[PermissionCreateRequest],
    ) -> BulkPermissionCreateResponse:
        """Create many permissions, skipping those that already exist.

        A permission is skipped when its code (or name) is already stored or
        appears earlier in the same batch. Duplicates are never an error.

        Args:
            requests: Permissions to create

        Returns:
            Created records and the number of skipped duplicates
        """
        codes = [r.code for r in requests]
        existing_codes = await self.permission_repo.get_existing_codes(codes)
        existing_names = await self.permission_repo.get_existing_names([r.name for r in requests])

        new_items: list[dict] = []
        seen_codes = set(existing_codes)
        seen_names = set(existing_names)
        for request in requests:
            if request.code in seen_codes or request.name in seen_names:
                continue
            seen_codes.add(request.code)
            seen_names.add(request.name)
            new_items.append(request.model_dump())

        created: list[PermissionORM] = []
        if new_items:
            created = await self.permission_repo.create_many(new_items)
            await self.session.commit()

        skipped = len(requests) - len(created)
        logger.info(f"Bulk permission create: {len(created)} created, {skipped} duplicates skipped")
        return BulkPermissionCreateResponse(
            created=len(created),
            duplicates_skipped=skipped,
            items=[PermissionResponse.model_validate(p) for p in created],
        )

    async def update_permission(
        self,
        permission_id: UUID,
        request: PermissionUpdateRequest,
    ) -> PermissionResponse:
        """Update a permission.

        Uniqueness is re-checked only for fields whose value changes.

        Raises:
            PermissionNotFoundError: If permission not found
            PermissionAlreadyExistsError: If the new code or name is taken
        """
        permission = await self.permission_repo.get_by_id(permission_id)
        if permission is None:
            raise PermissionNotFoundError(permission_id)

        if request.code is not None and request.code != permission.code:
            if await self.permission_repo.get_by_code(request.code) is not None:
                raise PermissionAlreadyExistsError("code", request.code)
        if request.name is not None and request.name != permission.name:
            if await self.permission_repo.get_by_name(request.name) is not None:
                raise PermissionAlreadyExistsError("name", request.name)

        changes = request.model_dump(exclude_unset=True, exclude_none=True)
        permission = await self.permission_repo.update(permission_id, **changes)
        await self.session.commit()
        return PermissionResponse.model_validate(permission)

    async def delete_permission(self, permission_id: UUID) -> None:
        """Delete a permission.

        The permission is removed from every role that held it; roles are not
        a reason to refuse the deletion.

        Raises:
            PermissionNotFoundError: If permission not found
        """
        permission = await self.permission_repo.get_by_id(permission_id)
        if permission is None:
            raise PermissionNotFoundError(permission_id)

        code = permission.code
        role_count = await self.permission_repo.count_role_assignments(permission_id)
        await self.permission_repo.delete_permission(permission_id)
        await self.session.commit()

        logger.info(f"Permission deleted: {code} (removed from {role_count} roles)")

    # =========================================================================
    # Role Management
    # =========================================================================

    async def _get_permissions_by_ids(self, permission_ids: list[UUID]) -> list[PermissionORM]:
        """Resolve permission ids, all or nothing.

        Duplicate ids in the input are collapsed before comparing counts.

        Raises:
            InvalidPermissionIdsError: If any id does not exist
        """
        unique_ids = list(dict.fromkeys(permission_ids))
        permissions = await self.permission_repo.get_many(unique_ids)
        if len(permissions) != len(unique_ids):
            found = {p.id for p in permissions}
            missing = [str(pid) for pid in unique_ids if pid not in found]
            raise InvalidPermissionIdsError(missing)
        by_id = {p.id: p for p in permissions}
        return [by_id[pid] for pid in unique_ids]

    async def _role_response(self, role_id: UUID) -> RoleResponse:
        """Reload a role with permissions and convert it."""
        role = await self.role_repo.get_with_permissions(role_id)
        if role is None:
            raise RoleNotFoundError(role_id)
        return RoleResponse.model_validate(role)

    async def list_roles(self) -> list[RoleResponse]:
        """List all roles with their permissions."""
        roles = await self.role_repo.get_all_with_permissions()
        return [RoleResponse.model_validate(r) for r in roles]

    async def get_role(self, role_id: UUID) -> RoleResponse:
        """Get role by ID with populated permissions.

        Raises:
            RoleNotFoundError: If role not found
        """
        return await self._role_response(role_id)

    async def create_role(self, request: RoleCreateRequest) -> RoleResponse:
        """Create a role.

        If the new role is the default one, the flag is first cleared on
        whichever role currently holds it.

        Args:
            request: Role creation request

        Returns:
            Created role

        Raises:
            RoleAlreadyExistsError: If role name already exists
            InvalidPermissionIdsError: If an initial permission id is unknown
        """
        if await self.role_repo.get_by_name(request.name) is not None:
            raise RoleAlreadyExistsError(request.name)

        permissions: list[PermissionORM] = []
        if request.permission_ids:
            permissions = await self._get_permissions_by_ids(request.permission_ids)

        if request.is_default:
            cleared = await self.role_repo.clear_default()
            if cleared:
                logger.info(f"Default role flag cleared on {cleared} role(s)")

        role = await self.role_repo.create(
            name=request.name,
            description=request.description,
            is_active=request.is_active,
            is_default=request.is_default,
            grants_all=request.grants_all,
            permissions=permissions,
        )
        await self.session.commit()

        logger.info(f"Role created: {role.name}")
        return await self._role_response(role.id)

    async def update_role(self, role_id: UUID, request: RoleUpdateRequest) -> RoleResponse:
        """Update a role.

        Args:
            role_id: Role ID to update
            request: Update request

        Returns:
            Updated role

        Raises:
            RoleNotFoundError: If role not found
            RoleAlreadyExistsError: If the new name is taken
        """
        role = await self.role_repo.get_by_id(role_id)
        if role is None:
            raise RoleNotFoundError(role_id)

        if request.name is not None and request.name != role.name:
            if await self.role_repo.get_by_name(request.name) is not None:
                raise RoleAlreadyExistsError(request.name)

        if request.is_default and not role.is_default:
            await self.role_repo.clear_default(exclude_id=role.id)

        changes = request.model_dump(exclude_unset=True, exclude_none=True)
        await self.role_repo.update(role_id, **changes)
        await self.session.commit()

        return await self._role_response(role_id)

    async def delete_role(self, role_id: UUID) -> None:
        """Delete a role.

        Args:
            role_id: Role ID to delete

        Raises:
            RoleNotFoundError: If role not found
            DefaultRoleDeletionError: If role is the default role
            RoleHasUsersError: If role has users assigned
        """
        role = await self.role_repo.get_by_id(role_id)
        if role is None:
            raise RoleNotFoundError(role_id)

        if role.is_default:
            logger.warning(f"Refused to delete default role {role.name}")
            raise DefaultRoleDeletionError(role.name)

        user_count = await self.user_repo.count_by_role(role_id)
        if user_count > 0:
            logger.warning(f"Refused to delete role {role.name}: assigned to {user_count} users")
            raise RoleHasUsersError(role.name, user_count)

        name = role.name
        await self.role_repo.delete_role(role_id)
        await self.session.commit()
        logger.info(f"Role deleted: {name}")

    async def update_role_permissions(
        self,
        role_id: UUID,
        permission_ids: list[UUID],
    ) -> RoleResponse:
        """Replace the complete permission set of a role.

        Args:
            role_id: Role ID
            permission_ids: The new permission set (not merged with the old one)

        Returns:
            Role with populated permissions

        Raises:
            RoleNotFoundError: If role not found
            InvalidPermissionIdsError: If any id does not exist; nothing is changed
        """
        role = await self.role_repo.get_with_permissions(role_id)
        if role is None:
            raise RoleNotFoundError(role_id)

        permissions = await self._get_permissions_by_ids(permission_ids)
        await self.role_repo.set_permissions(role, permissions)
        await self.session.commit()

        logger.info(f"Role {role.name} permissions replaced ({len(permissions)} permissions)")
        return await self._role_response(role_id)

    async def get_users_by_role(self, role_id: UUID) -> list[UserResponse]:
        """List users assigned to a role.

        Raises:
            RoleNotFoundError: If role not found
        """
        if await self.role_repo.get_by_id(role_id) is None:
            raise RoleNotFoundError(role_id)
        users = await self.user_repo.get_by_role(role_id)
        return [UserResponse.model_validate(u) for u in users]

    async def ensure_single_default_role(self) -> int:
        """Repair the "at most one default role" invariant.

        Keeps the oldest default role and clears the flag on the others.

        Returns:
            Number of roles whose default flag was cleared
        """
        defaults = await self.role_repo.get_defaults()
        if len(defaults) <= 1:
            return 0

        keep = defaults[0]
        cleared = await self.role_repo.clear_default(exclude_id=keep.id)
        await self.session.commit()
        logger.warning(
            f"Found {len(defaults)} default roles; kept {keep.name}, cleared {cleared}"
        )
        return cleared

    # =========================================================================
    # User Management
    # =========================================================================

    async def list_users(self) -> list[UserResponse]:
        """List all users."""
        users = await self.user_repo.get_all()
        return [UserResponse.model_validate(u) for u in users]

    async def get_user(self, user_id: UUID) -> UserResponse:
        """Get user by ID.

        Raises:
            UserNotFoundError: If user not found
        """
        user = await self.user_repo.get_by_id(user_id)
        if user is None:
            raise UserNotFoundError(user_id)
        return UserResponse.model_validate(user)

    async def create_user(self, request: UserCreateRequest) -> UserResponse:
        """Create a user.

        Without an explicit role the user receives the default role (or no
        role if none is flagged default).

        Raises:
            UserAlreadyExistsError: If email exists
            RoleNotFoundError: If the given role does not exist
        """
        email = request.email.lower()
        if await self.user_repo.get_by_email(email) is not None:
            raise UserAlreadyExistsError(email)

        role_id = request.role_id
        if role_id is not None:
            if await self.role_repo.get_by_id(role_id) is None:
                raise RoleNotFoundError(role_id)
        else:
            default_role = await self.role_repo.get_default()
            role_id = default_role.id if default_role is not None else None

        user = await self.user_repo.create(
            email=email,
            name=request.name,
            password_hash=self.password_service.hash_password(request.password),
            is_active=request.is_active,
            role_id=role_id,
        )
        await self.session.commit()

        logger.info(f"User created: {user.email}")
        return UserResponse.model_validate(user)

    async def assign_role(self, user_id: UUID, role_id: UUID | None) -> UserResponse:
        """Reassign a user's role.

        Args:
            user_id: User ID
            role_id: New role, or None to remove the role

        Raises:
            UserNotFoundError: If user not found
            RoleNotFoundError: If role not found
        """
        user = await self.user_repo.get_by_id(user_id)
        if user is None:
            raise UserNotFoundError(user_id)
        if role_id is not None and await self.role_repo.get_by_id(role_id) is None:
            raise RoleNotFoundError(role_id)

        user = await self.user_repo.update(user_id, role_id=role_id)
        await self.session.commit()
        return UserResponse.model_validate(user)
