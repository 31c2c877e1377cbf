#!/usr/bin/env python
"""Seed the standard permission catalogue and the built-in roles.

Safe to run repeatedly: existing permissions and roles are left untouched.
Optionally creates a first user holding the Super Admin role.
"""

import asyncio
import sys
from pathlib import Path

# Add src directory to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from cms_api.constants.permissions import (
    ADMIN_ROLE,
    DEFAULT_ROLE,
    SUPER_ADMIN_ROLE,
    Permissions,
    standard_permissions,
)
from cms_api.database import async_session_maker
from cms_api.exceptions import UserAlreadyExistsError
from cms_api.models.dto.rbac import PermissionCreateRequest, RoleCreateRequest, UserCreateRequest
from cms_api.services.rbac_service import RbacService

# Read-only access to published content
DEFAULT_ROLE_PERMISSIONS = (
    "articles:list",
    "articles:view",
    "categories:list",
    "categories:view",
    "sections:list",
    "sections:view",
)

# Admins manage content and users but not the permission catalogue
ADMIN_EXCLUDED_MODULES = ("permissions",)


def admin_permission_codes(codes: list[str]) -> list[str]:
    """Select the codes granted to the Admin role."""
    return [
        code
        for code in codes
        if code.split(":", 1)[0] not in ADMIN_EXCLUDED_MODULES
        and code != Permissions.ROLES_DELETE
    ]


async def setup(admin_email: str | None, admin_password: str | None) -> None:
    """Create permissions, roles and optionally the first super admin."""
    async with async_session_maker() as session:
        service = RbacService(session)

        result = await service.bulk_create_permissions(
            [PermissionCreateRequest(**item) for item in standard_permissions()]
        )
        print(f"Permissions: {result.created} created, {result.duplicates_skipped} already present")

        by_code = {p.code: p.id for p in await service.list_permissions()}
        existing_roles = {r.name: r for r in await service.list_roles()}

        role_requests = [
            RoleCreateRequest(
                name=SUPER_ADMIN_ROLE,
                description="Unrestricted access to every operation",
                grants_all=True,
            ),
            RoleCreateRequest(
                name=ADMIN_ROLE,
                description="Manages content, users and roles",
                permission_ids=[by_code[c] for c in admin_permission_codes(list(by_code))],
            ),
            RoleCreateRequest(
                name=DEFAULT_ROLE,
                description="Default role for new users",
                is_default=True,
                permission_ids=[by_code[c] for c in DEFAULT_ROLE_PERMISSIONS if c in by_code],
            ),
        ]

        for role_request in role_requests:
            if role_request.name in existing_roles:
                print(f"Role {role_request.name} already exists, skipping")
                continue
            role = await service.create_role(role_request)
            existing_roles[role.name] = role
            print(f"Role {role.name} created with {len(role.permissions)} permissions")

        if admin_email and admin_password:
            try:
                user = await service.create_user(
                    UserCreateRequest(
                        email=admin_email,
                        name="Super Admin",
                        password=admin_password,
                        role_id=existing_roles[SUPER_ADMIN_ROLE].id,
                    )
                )
                print(f"Super admin user created: {user.email}")
            except UserAlreadyExistsError:
                print(f"User {admin_email} already exists, skipping")


if __name__ == "__main__":
    import argparse
    parser = argparse.ArgumentParser(description="Seed roles and permissions")
    parser.add_argument("--admin-email", help="Email of the first super admin user")
    parser.add_argument("--admin-password", help="Password of the first super admin user")
    args = parser.parse_args()

    asyncio.run(setup(args.admin_email, args.admin_password))
