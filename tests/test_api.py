"""Tests for the administration API and the response envelope."""

from uuid import uuid4

import pytest

from conftest import auth_headers, make_permission, make_role, make_user


@pytest.fixture
async def root_headers(session) -> dict[str, str]:
    """Headers of a Super Admin user."""
    role = await make_role(session, "Super Admin", grants_all=True)
    user = await make_user(session, "root@example.com", role)
    return auth_headers(user)


def permission_body(code: str, name: str | None = None) -> dict[str, str]:
    return {
        "name": name or f"Permission {code}",
        "description": f"Ability to {code}",
        "code": code,
        "module": code.split(":", 1)[0],
    }


class TestEnvelope:
    """Uniform response bodies and request tagging."""

    async def test_success_envelope(self, client, root_headers):
        response = await client.get("/api/v1/permissions", headers=root_headers)

        assert response.status_code == 200
        body = response.json()
        assert body["code"] == "SUCCESS"
        assert body["message"] == "Request processed successfully"
        assert body["data"] == []

    async def test_not_found_envelope(self, client, root_headers):
        missing = uuid4()

        response = await client.get(f"/api/v1/roles/{missing}", headers=root_headers)

        assert response.status_code == 404
        assert response.json() == {
            "code": "NOT_FOUND",
            "message": f"Role not found with id of {missing}",
            "data": {"id": str(missing)},
        }

    async def test_validation_error_is_400(self, client, root_headers):
        response = await client.post(
            "/api/v1/permissions",
            json={"name": "x", "code": "NOT A CODE"},
            headers=root_headers,
        )

        assert response.status_code == 400
        body = response.json()
        assert body["code"] == "VALIDATION_ERROR"
        assert body["data"]["errors"]

    async def test_malformed_id_is_400(self, client, root_headers):
        response = await client.get("/api/v1/roles/not-a-uuid", headers=root_headers)

        assert response.status_code == 400
        assert response.json()["code"] == "VALIDATION_ERROR"

    async def test_unknown_route_is_404(self, client):
        response = await client.get("/api/v1/nothing-here")

        assert response.status_code == 404
        assert response.json()["code"] == "NOT_FOUND"

    async def test_request_id_header(self, client):
        generated = await client.get("/health")
        echoed = await client.get("/health", headers={"X-Request-ID": "abc-123"})
        rejected = await client.get("/health", headers={"X-Request-ID": "bad id with spaces!"})

        assert generated.json() == {"status": "healthy"}
        assert generated.headers["X-Request-ID"]
        assert echoed.headers["X-Request-ID"] == "abc-123"
        assert rejected.headers["X-Request-ID"] != "bad id with spaces!"


class TestPermissionRoutes:
    """Permission administration over HTTP."""

    async def test_create_and_fetch(self, client, root_headers):
        created = await client.post(
            "/api/v1/permissions", json=permission_body("articles:create"), headers=root_headers
        )
        permission_id = created.json()["data"]["id"]

        fetched = await client.get(f"/api/v1/permissions/{permission_id}", headers=root_headers)

        assert created.status_code == 201
        assert fetched.json()["data"]["code"] == "articles:create"

    async def test_duplicate_code_is_400(self, client, root_headers):
        await client.post(
            "/api/v1/permissions",
            json=permission_body("roles:delete", name="Delete roles"),
            headers=root_headers,
        )

        response = await client.post(
            "/api/v1/permissions",
            json=permission_body("roles:delete", name="Remove roles"),
            headers=root_headers,
        )

        assert response.status_code == 400
        assert response.json()["code"] == "DUPLICATE"
        listed = await client.get("/api/v1/permissions", headers=root_headers)
        assert len(listed.json()["data"]) == 1

    async def test_bulk_create_twice(self, client, root_headers):
        body = {"permissions": [permission_body(c) for c in ("a:create", "a:view", "a:delete")]}

        first = await client.post("/api/v1/permissions/bulk", json=body, headers=root_headers)
        second = await client.post("/api/v1/permissions/bulk", json=body, headers=root_headers)

        assert first.json()["data"]["created"] == 3
        assert second.json()["data"]["created"] == 0
        assert second.json()["data"]["duplicates_skipped"] == 3

    async def test_modules_and_grouping(self, client, root_headers, session):
        await make_permission(session, "users:view")
        await make_permission(session, "articles:view")

        grouped = await client.get("/api/v1/permissions/modules", headers=root_headers)
        filtered = await client.get(
            "/api/v1/permissions", params={"module": "users"}, headers=root_headers
        )

        assert sorted(grouped.json()["data"]) == ["articles", "users"]
        assert [p["code"] for p in grouped.json()["data"]["users"]] == ["users:view"]
        assert [p["code"] for p in filtered.json()["data"]] == ["users:view"]

    async def test_update_and_delete(self, client, root_headers, session):
        permission = await make_permission(session, "articles:view")

        updated = await client.put(
            f"/api/v1/permissions/{permission.id}",
            json={"description": "Read articles"},
            headers=root_headers,
        )
        deleted = await client.delete(f"/api/v1/permissions/{permission.id}", headers=root_headers)
        gone = await client.get(f"/api/v1/permissions/{permission.id}", headers=root_headers)

        assert updated.json()["data"]["description"] == "Read articles"
        assert deleted.json() == {
            "code": "SUCCESS",
            "message": "Permission deleted",
            "data": {},
        }
        assert gone.status_code == 404


class TestRoleRoutes:
    """Role administration over HTTP."""

    async def test_create_default_role_swaps_flag(self, client, root_headers, session):
        await make_role(session, "User", is_default=True)

        created = await client.post(
            "/api/v1/roles",
            json={"name": "Member", "is_default": True},
            headers=root_headers,
        )
        roles = await client.get("/api/v1/roles", headers=root_headers)

        assert created.status_code == 201
        defaults = [r["name"] for r in roles.json()["data"] if r["is_default"]]
        assert defaults == ["Member"]

    async def test_delete_default_role_is_400(self, client, root_headers, session):
        role = await make_role(session, "User", is_default=True)

        response = await client.delete(f"/api/v1/roles/{role.id}", headers=root_headers)

        assert response.status_code == 400
        assert response.json()["code"] == "INVARIANT_VIOLATION"
        assert response.json()["message"] == "Cannot delete the default role"

    async def test_delete_role_in_use_is_400(self, client, root_headers, session):
        role = await make_role(session, "Editor")
        await make_user(session, "e1@example.com", role)
        await make_user(session, "e2@example.com", role)

        response = await client.delete(f"/api/v1/roles/{role.id}", headers=root_headers)

        assert response.status_code == 400
        assert response.json()["message"] == "Cannot delete role as it is assigned to 2 users"

    async def test_replace_permissions_with_invalid_id(self, client, root_headers, session):
        view = await make_permission(session, "articles:view")
        role = await make_role(session, "Editor", [view])
        missing = str(uuid4())

        response = await client.post(
            f"/api/v1/roles/{role.id}/permissions",
            json={"permission_ids": [missing]},
            headers=root_headers,
        )
        fetched = await client.get(f"/api/v1/roles/{role.id}", headers=root_headers)

        assert response.status_code == 400
        assert response.json()["code"] == "INVALID_REFERENCE"
        assert response.json()["data"] == {"invalid_ids": [missing]}
        assert [p["code"] for p in fetched.json()["data"]["permissions"]] == ["articles:view"]

    async def test_role_users(self, client, root_headers, session):
        role = await make_role(session, "Editor")
        await make_user(session, "editor@example.com", role)

        response = await client.get(f"/api/v1/roles/{role.id}/users", headers=root_headers)

        assert [u["email"] for u in response.json()["data"]] == ["editor@example.com"]
        assert "password_hash" not in response.json()["data"][0]


class TestUserRoutes:
    """User administration over HTTP."""

    async def test_create_user_gets_default_role(self, client, root_headers, session):
        default = await make_role(session, "User", is_default=True)

        response = await client.post(
            "/api/v1/users",
            json={"email": "new@example.com", "name": "New", "password": "secret1"},
            headers=root_headers,
        )

        assert response.status_code == 201
        assert response.json()["data"]["role_id"] == str(default.id)

    async def test_reassign_role_changes_access(self, client, root_headers, session):
        list_roles = await make_permission(session, "roles:list")
        auditor = await make_role(session, "Auditor", [list_roles])
        user = await make_user(session, "someone@example.com")

        before = await client.get("/api/v1/roles", headers=auth_headers(user))
        assigned = await client.put(
            f"/api/v1/users/{user.id}/role",
            json={"role_id": str(auditor.id)},
            headers=root_headers,
        )
        after = await client.get("/api/v1/roles", headers=auth_headers(user))

        assert before.status_code == 403
        assert assigned.json()["data"]["role_id"] == str(auditor.id)
        assert after.status_code == 200

    async def test_list_and_get_users(self, client, root_headers):
        listed = await client.get("/api/v1/users", headers=root_headers)
        user_id = listed.json()["data"][0]["id"]
        fetched = await client.get(f"/api/v1/users/{user_id}", headers=root_headers)

        assert [u["email"] for u in listed.json()["data"]] == ["root@example.com"]
        assert fetched.json()["data"]["email"] == "root@example.com"
