"""Permission codes and the standard permission catalogue.

Codes follow the ``<module>:<action>`` format.
"""

from typing import Final

# Modules that receive the standard create/view/list/update/delete permissions
CRUD_MODULES: Final[tuple[str, ...]] = (
    "users",
    "articles",
    "categories",
    "sections",
    "roles",
    "permissions",
)

CRUD_ACTIONS: Final[tuple[tuple[str, str, str], ...]] = (
    ("create", "Create", "Ability to create new {module}"),
    ("view", "View", "Ability to view {module}"),
    ("list", "List", "Ability to list all {module}"),
    ("update", "Update", "Ability to update {module}"),
    ("delete", "Delete", "Ability to delete {module}"),
)

SUPER_ADMIN_ROLE: Final[str] = "Super Admin"
ADMIN_ROLE: Final[str] = "Admin"
DEFAULT_ROLE: Final[str] = "User"


class Permissions:
    """Permission codes checked by the API routes."""

    USERS_CREATE = "users:create"
    USERS_VIEW = "users:view"
    USERS_LIST = "users:list"
    USERS_UPDATE = "users:update"
    USERS_DELETE = "users:delete"
    USERS_MANAGE_ROLES = "users:manage-roles"

    ROLES_CREATE = "roles:create"
    ROLES_VIEW = "roles:view"
    ROLES_LIST = "roles:list"
    ROLES_UPDATE = "roles:update"
    ROLES_DELETE = "roles:delete"
    ROLE_MANAGE_PERMISSIONS = "role:manage-permissions"

    PERMISSIONS_CREATE = "permissions:create"
    PERMISSIONS_VIEW = "permissions:view"
    PERMISSIONS_LIST = "permissions:list"
    PERMISSIONS_UPDATE = "permissions:update"
    PERMISSIONS_DELETE = "permissions:delete"

    ADMIN_ACCESS = "admin:access"


def standard_permissions() -> list[dict[str, str]]:
    """Build the standard permission catalogue.

    Returns:
        Field dicts (name, description, code, module) ready for bulk creation
    """
    permissions = [
        {
            "name": f"{label} {module}",
            "description": description.format(module=module),
            "code": f"{module}:{action}",
            "module": module,
        }
        for module in CRUD_MODULES
        for action, label, description in CRUD_ACTIONS
    ]
    permissions.extend(
        [
            {
                "name": "Manage user roles",
                "description": "Ability to assign roles to users",
                "code": Permissions.USERS_MANAGE_ROLES,
                "module": "users",
            },
            {
                "name": "Manage role permissions",
                "description": "Ability to assign or remove permissions from roles",
                "code": Permissions.ROLE_MANAGE_PERMISSIONS,
                "module": "roles",
            },
            {
                "name": "Access admin panel",
                "description": "Ability to access the admin panel",
                "code": Permissions.ADMIN_ACCESS,
                "module": "admin",
            },
        ]
    )
    return permissions
