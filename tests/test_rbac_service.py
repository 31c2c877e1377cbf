"""Tests for role, permission and user administration."""

from uuid import uuid4

import pytest
from sqlalchemy import func, select

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
    PermissionCreateRequest,
    PermissionUpdateRequest,
    RoleCreateRequest,
    RoleUpdateRequest,
    UserCreateRequest,
)
from cms_api.models.orm import RolePermissionORM
from cms_api.services.permission_resolver import PermissionResolver
from cms_api.services.rbac_service import RbacService
from conftest import make_permission, make_role, make_user


def permission_request(code: str, name: str | None = None) -> PermissionCreateRequest:
    return PermissionCreateRequest(
        name=name or f"Permission {code}",
        description=f"Ability to {code}",
        code=code,
        module=code.split(":", 1)[0],
    )


async def default_role_names(service: RbacService) -> list[str]:
    return [r.name for r in await service.list_roles() if r.is_default]


class TestPermissionAdministration:
    """Permission catalogue management."""

    async def test_create_permission(self, session):
        service = RbacService(session)

        permission = await service.create_permission(permission_request("articles:create"))

        assert permission.code == "articles:create"
        assert permission.module == "articles"
        assert (await service.get_permission(permission.id)).code == "articles:create"

    async def test_duplicate_code_rejected(self, session):
        service = RbacService(session)
        await service.create_permission(permission_request("roles:delete", name="Delete roles"))

        with pytest.raises(PermissionAlreadyExistsError) as exc_info:
            await service.create_permission(
                permission_request("roles:delete", name="Remove roles")
            )

        assert exc_info.value.status_code == 400
        assert exc_info.value.code == "DUPLICATE"
        assert len(await service.list_permissions()) == 1

    async def test_duplicate_name_rejected(self, session):
        service = RbacService(session)
        await service.create_permission(permission_request("roles:delete", name="Delete roles"))

        with pytest.raises(PermissionAlreadyExistsError):
            await service.create_permission(
                permission_request("roles:remove", name="Delete roles")
            )

    async def test_list_sorted_and_filtered_by_module(self, session):
        service = RbacService(session)
        for code in ("users:view", "articles:view", "articles:create"):
            await service.create_permission(permission_request(code))

        codes = [p.code for p in await service.list_permissions()]
        article_codes = [p.code for p in await service.list_permissions(module="articles")]

        assert codes == ["articles:create", "articles:view", "users:view"]
        assert article_codes == ["articles:create", "articles:view"]

    async def test_grouped_by_module(self, session):
        service = RbacService(session)
        for code in ("users:view", "articles:view", "articles:create"):
            await service.create_permission(permission_request(code))

        grouped = await service.get_permissions_by_module()

        assert set(grouped) == {"articles", "users"}
        assert len(grouped["articles"]) == 2

    async def test_update_rechecks_uniqueness_only_on_change(self, session):
        service = RbacService(session)
        first = await service.create_permission(permission_request("articles:view"))
        await service.create_permission(permission_request("articles:list"))

        same = await service.update_permission(
            first.id, PermissionUpdateRequest(code="articles:view", description="Read articles")
        )
        assert same.description == "Read articles"

        with pytest.raises(PermissionAlreadyExistsError):
            await service.update_permission(first.id, PermissionUpdateRequest(code="articles:list"))

    async def test_update_missing_permission(self, session):
        with pytest.raises(PermissionNotFoundError):
            await RbacService(session).update_permission(
                uuid4(), PermissionUpdateRequest(name="Whatever")
            )

    async def test_delete_permission_removes_it_from_roles(self, session):
        view = await make_permission(session, "articles:view")
        create = await make_permission(session, "articles:create")
        role = await make_role(session, "Editor", [view, create])
        user = await make_user(session, "editor@example.com", role)
        service = RbacService(session)

        await service.delete_permission(create.id)

        role_after = await service.get_role(role.id)
        assert [p.code for p in role_after.permissions] == ["articles:view"]
        assert await PermissionResolver(session).resolve_permissions(user) == {"articles:view"}
        links = await session.execute(
            select(func.count()).select_from(RolePermissionORM)
        )
        assert links.scalar_one() == 1

    async def test_get_missing_permission(self, session):
        with pytest.raises(PermissionNotFoundError) as exc_info:
            await RbacService(session).get_permission(uuid4())
        assert exc_info.value.status_code == 404


class TestBulkCreatePermissions:
    """Idempotent catalogue seeding."""

    async def test_bulk_create_is_idempotent(self, session):
        service = RbacService(session)
        batch = [permission_request(c) for c in ("a:create", "a:view", "a:delete")]

        first = await service.bulk_create_permissions(batch)
        second = await service.bulk_create_permissions(batch)

        assert (first.created, first.duplicates_skipped) == (3, 0)
        assert (second.created, second.duplicates_skipped) == (0, 3)
        assert len(await service.list_permissions()) == 3

    async def test_bulk_create_skips_existing_and_repeated(self, session):
        service = RbacService(session)
        await service.create_permission(permission_request("a:view"))

        result = await service.bulk_create_permissions(
            [
                permission_request("a:view"),
                permission_request("a:create"),
                permission_request("a:create"),
                permission_request("a:list"),
            ]
        )

        assert result.created == 2
        assert result.duplicates_skipped == 2
        assert sorted(p.code for p in result.items) == ["a:create", "a:list"]


class TestRoleAdministration:
    """Role lifecycle and invariants."""

    async def test_create_role_with_permissions(self, session):
        view = await make_permission(session, "articles:view")
        service = RbacService(session)

        role = await service.create_role(
            RoleCreateRequest(name="Reader", permission_ids=[view.id, view.id])
        )

        assert role.name == "Reader"
        assert [p.code for p in role.permissions] == ["articles:view"]

    async def test_create_role_with_unknown_permission(self, session):
        service = RbacService(session)
        missing = uuid4()

        with pytest.raises(InvalidPermissionIdsError) as exc_info:
            await service.create_role(RoleCreateRequest(name="Reader", permission_ids=[missing]))

        assert exc_info.value.details["invalid_ids"] == [str(missing)]
        assert await service.list_roles() == []

    async def test_role_name_is_unique(self, session):
        service = RbacService(session)
        await service.create_role(RoleCreateRequest(name="Editor"))

        with pytest.raises(RoleAlreadyExistsError):
            await service.create_role(RoleCreateRequest(name="Editor"))

    async def test_rename_to_taken_name(self, session):
        service = RbacService(session)
        await service.create_role(RoleCreateRequest(name="Editor"))
        author = await service.create_role(RoleCreateRequest(name="Author"))

        renamed = await service.update_role(author.id, RoleUpdateRequest(name="Author"))
        assert renamed.name == "Author"

        with pytest.raises(RoleAlreadyExistsError):
            await service.update_role(author.id, RoleUpdateRequest(name="Editor"))

    async def test_creating_default_role_clears_previous_default(self, session):
        service = RbacService(session)
        await service.create_role(RoleCreateRequest(name="User", is_default=True))

        await service.create_role(RoleCreateRequest(name="Member", is_default=True))

        assert await default_role_names(service) == ["Member"]

    async def test_updating_to_default_clears_previous_default(self, session):
        service = RbacService(session)
        await service.create_role(RoleCreateRequest(name="User", is_default=True))
        member = await service.create_role(RoleCreateRequest(name="Member"))

        updated = await service.update_role(member.id, RoleUpdateRequest(is_default=True))

        assert updated.is_default is True
        assert await default_role_names(service) == ["Member"]

    async def test_update_missing_role(self, session):
        with pytest.raises(RoleNotFoundError):
            await RbacService(session).update_role(uuid4(), RoleUpdateRequest(name="Nobody"))

    async def test_default_role_cannot_be_deleted(self, session):
        service = RbacService(session)
        role = await service.create_role(RoleCreateRequest(name="User", is_default=True))

        with pytest.raises(DefaultRoleDeletionError) as exc_info:
            await service.delete_role(role.id)

        assert exc_info.value.code == "INVARIANT_VIOLATION"
        assert (await service.get_role(role.id)).name == "User"

    async def test_role_with_users_cannot_be_deleted(self, session):
        role = await make_role(session, "Editor")
        for i in range(3):
            await make_user(session, f"editor{i}@example.com", role)
        service = RbacService(session)

        with pytest.raises(RoleHasUsersError) as exc_info:
            await service.delete_role(role.id)

        assert exc_info.value.message == "Cannot delete role as it is assigned to 3 users"
        assert exc_info.value.details["user_count"] == 3

    async def test_delete_unused_role(self, session):
        view = await make_permission(session, "articles:view")
        role = await make_role(session, "Temp", [view])
        service = RbacService(session)

        await service.delete_role(role.id)

        with pytest.raises(RoleNotFoundError):
            await service.get_role(role.id)
        assert [p.code for p in await service.list_permissions()] == ["articles:view"]

    async def test_delete_missing_role(self, session):
        with pytest.raises(RoleNotFoundError):
            await RbacService(session).delete_role(uuid4())

    async def test_users_by_role(self, session):
        role = await make_role(session, "Editor")
        await make_user(session, "a@example.com", role)
        await make_user(session, "b@example.com")
        service = RbacService(session)

        users = await service.get_users_by_role(role.id)

        assert [u.email for u in users] == ["a@example.com"]
        with pytest.raises(RoleNotFoundError):
            await service.get_users_by_role(uuid4())


class TestRolePermissionReplacement:
    """The permission set is replaced, never merged."""

    async def test_replace_permission_set(self, session):
        a = await make_permission(session, "articles:view")
        b = await make_permission(session, "articles:create")
        c = await make_permission(session, "articles:delete")
        role = await make_role(session, "Editor", [a, b])
        service = RbacService(session)

        updated = await service.update_role_permissions(role.id, [c.id])

        assert [p.code for p in updated.permissions] == ["articles:delete"]

    async def test_empty_list_clears_permissions(self, session):
        a = await make_permission(session, "articles:view")
        role = await make_role(session, "Editor", [a])

        updated = await RbacService(session).update_role_permissions(role.id, [])

        assert updated.permissions == []

    async def test_invalid_id_leaves_set_unchanged(self, session):
        a = await make_permission(session, "articles:view")
        b = await make_permission(session, "articles:create")
        role = await make_role(session, "Editor", [a])
        service = RbacService(session)

        with pytest.raises(InvalidPermissionIdsError):
            await service.update_role_permissions(role.id, [b.id, uuid4()])

        assert [p.code for p in (await service.get_role(role.id)).permissions] == ["articles:view"]

    async def test_unknown_role(self, session):
        with pytest.raises(RoleNotFoundError):
            await RbacService(session).update_role_permissions(uuid4(), [])


class TestDefaultRoleReconciliation:
    """Startup repair of duplicate default roles."""

    async def test_keeps_oldest_default(self, session):
        await make_role(session, "First", is_default=True)
        await make_role(session, "Second", is_default=True)
        await make_role(session, "Third", is_default=True)
        service = RbacService(session)

        cleared = await service.ensure_single_default_role()

        assert cleared == 2
        assert await default_role_names(service) == ["First"]

    async def test_noop_when_consistent(self, session):
        await make_role(session, "User", is_default=True)

        assert await RbacService(session).ensure_single_default_role() == 0


class TestUserAdministration:
    """User creation and role assignment."""

    async def test_new_user_gets_default_role(self, session):
        default = await make_role(session, "User", is_default=True)

        user = await RbacService(session).create_user(
            UserCreateRequest(email="New@Example.com", name="New", password="secret1")
        )

        assert user.email == "new@example.com"
        assert user.role_id == default.id

    async def test_new_user_without_default_role(self, session):
        user = await RbacService(session).create_user(
            UserCreateRequest(email="new@example.com", name="New", password="secret1")
        )

        assert user.role_id is None

    async def test_explicit_role_must_exist(self, session):
        with pytest.raises(RoleNotFoundError):
            await RbacService(session).create_user(
                UserCreateRequest(
                    email="new@example.com", name="New", password="secret1", role_id=uuid4()
                )
            )

    async def test_email_is_unique(self, session):
        await make_user(session, "taken@example.com")

        with pytest.raises(UserAlreadyExistsError):
            await RbacService(session).create_user(
                UserCreateRequest(email="taken@example.com", name="Dup", password="secret1")
            )

    async def test_assign_and_clear_role(self, session):
        role = await make_role(session, "Editor")
        user = await make_user(session, "someone@example.com")
        service = RbacService(session)

        assigned = await service.assign_role(user.id, role.id)
        assert assigned.role_id == role.id

        cleared = await service.assign_role(user.id, None)
        assert cleared.role_id is None

    async def test_assign_unknown_role_or_user(self, session):
        role = await make_role(session, "Editor")
        user = await make_user(session, "someone@example.com")
        service = RbacService(session)

        with pytest.raises(RoleNotFoundError):
            await service.assign_role(user.id, uuid4())
        with pytest.raises(UserNotFoundError):
            await service.assign_role(uuid4(), role.id)
