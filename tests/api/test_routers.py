"""Tests for the FastAPI routers over the in-memory directory."""

import pytest
from fastapi import FastAPI, Header
from fastapi.testclient import TestClient

from neo_tenancy.api import create_tenancy_router, get_current_user_id, get_tenancy_services, register_exception_handlers
from neo_tenancy.factory import create_tenancy_services
from neo_tenancy.features.authz.adapters.memory_client import InMemoryAuthorizationClient
from neo_tenancy.features.permissions.utils.permission_map import DEFAULT_ROLE_PERMISSIONS


def as_user(user_id):
    return {"X-User-Id": user_id}


@pytest.fixture
def app(services):
    """Application mounting every tenancy router with header-based identity."""
    app = FastAPI()
    register_exception_handlers(app, is_production=True)
    app.include_router(create_tenancy_router(prefix="/api/v1"))

    def current_user(x_user_id: str = Header(...)) -> str:
        return x_user_id

    app.dependency_overrides[get_current_user_id] = current_user
    app.dependency_overrides[get_tenancy_services] = lambda: services
    return app


@pytest.fixture
def client(app):
    with TestClient(app) as client:
        yield client


@pytest.fixture
def org_id(client):
    """Acme Corp owned by alice, with bob (admin) and carol (member)."""
    response = client.post("/api/v1/organizations", json={"name": "Acme Corp"}, headers=as_user("alice"))
    organization_id = response.json()["id"]
    for user, role in (("bob", "admin"), ("carol", "member")):
        client.post(
            f"/api/v1/organizations/{organization_id}/members",
            json={"user_id": user, "role": role},
            headers=as_user("alice"),
        )
    return organization_id


class TestOrganizationRoutes:
    """Test /organizations."""

    def test_create(self, client):
        response = client.post(
            "/api/v1/organizations",
            json={"name": "Acme Corp", "allowed_domains": ["Acme.com"], "settings": {"allow_public_signup": True}},
            headers=as_user("alice"),
        )
        assert response.status_code == 201
        body = response.json()
        assert body["slug"] == "acme-corp"
        assert body["owner_id"] == "alice"
        assert body["status"] == "active"
        assert body["allowed_domains"] == ["acme.com"]
        assert body["settings"]["allow_public_signup"] is True

    def test_blank_name_is_validation_error(self, client):
        response = client.post("/api/v1/organizations", json={"name": "  "}, headers=as_user("alice"))
        assert response.status_code == 422

    def test_list_mine(self, client, org_id):
        response = client.get("/api/v1/organizations", headers=as_user("carol"))
        assert response.status_code == 200
        assert [(o["organization"]["id"], o["role"]) for o in response.json()] == [(org_id, "member")]

    def test_get_as_non_member(self, client, org_id):
        response = client.get(f"/api/v1/organizations/{org_id}", headers=as_user("mallory"))
        assert response.status_code == 403
        assert response.json()["error"]["code"] == "FORBIDDEN"

    def test_get_unknown(self, client):
        response = client.get("/api/v1/organizations/missing", headers=as_user("alice"))
        assert response.status_code == 404
        assert response.json()["error"]["code"] == "NOT_FOUND"

    def test_get_by_slug_and_joinable(self, client, org_id):
        assert client.get("/api/v1/organizations/slug/acme-corp").json()["id"] == org_id

        client.patch(
            f"/api/v1/organizations/{org_id}", json={"allowed_domains": ["acme.com"]}, headers=as_user("alice")
        )
        joinable = client.get("/api/v1/organizations/joinable", params={"email": "dave@acme.com"})
        assert [o["id"] for o in joinable.json()] == [org_id]

        invalid = client.get("/api/v1/organizations/joinable", params={"email": "nope"})
        assert invalid.status_code == 400
        assert invalid.json()["error"]["code"] == "INVALID_ARGUMENT"

    def test_update_requires_admin(self, client, org_id):
        response = client.patch(f"/api/v1/organizations/{org_id}", json={"name": "X"}, headers=as_user("carol"))
        assert response.status_code == 403

        response = client.patch(f"/api/v1/organizations/{org_id}", json={"name": "Acme Inc"}, headers=as_user("bob"))
        assert response.status_code == 200
        assert response.json()["name"] == "Acme Inc"

    def test_transfer_ownership(self, client, org_id):
        response = client.post(
            f"/api/v1/organizations/{org_id}/transfer-ownership",
            json={"new_owner_id": "bob", "previous_owner_role": "member"},
            headers=as_user("alice"),
        )
        assert response.status_code == 200
        assert response.json()["owner_id"] == "bob"

        member = client.get(f"/api/v1/organizations/{org_id}/members/alice", headers=as_user("bob"))
        assert member.json()["role"] == "member"

    def test_delete(self, client, org_id):
        response = client.delete(f"/api/v1/organizations/{org_id}", headers=as_user("alice"))
        assert response.status_code == 200
        assert response.json()["members_deleted"] == 3
        assert client.get(f"/api/v1/organizations/{org_id}", headers=as_user("alice")).status_code == 404


class TestMemberRoutes:
    """Test /organizations/{id}/members."""

    def test_list_and_count(self, client, org_id):
        response = client.get(f"/api/v1/organizations/{org_id}/members", headers=as_user("carol"))
        assert {m["user_id"] for m in response.json()} == {"alice", "bob", "carol"}

        count = client.get(f"/api/v1/organizations/{org_id}/members/count", headers=as_user("carol"))
        assert count.json() == {"count": 3}

    def test_add_duplicate(self, client, org_id):
        response = client.post(
            f"/api/v1/organizations/{org_id}/members", json={"user_id": "carol"}, headers=as_user("alice")
        )
        assert response.status_code == 409
        assert response.json()["error"]["code"] == "ALREADY_EXISTS"

    def test_add_owner_role_rejected_by_model(self, client, org_id):
        response = client.post(
            f"/api/v1/organizations/{org_id}/members",
            json={"user_id": "dave", "role": "owner"},
            headers=as_user("alice"),
        )
        assert response.status_code == 422

    def test_check_permission(self, client, org_id):
        response = client.get(
            f"/api/v1/organizations/{org_id}/members/check-permission",
            params={"min_role": "admin", "user_id": "carol"},
            headers=as_user("alice"),
        )
        assert response.json() == {"has_permission": False, "current_role": "member"}

        mine = client.get(
            f"/api/v1/organizations/{org_id}/members/check-permission",
            params={"min_role": "admin"},
            headers=as_user("bob"),
        )
        assert mine.json()["has_permission"] is True

    def test_role_change_and_suspension(self, client, org_id):
        base = f"/api/v1/organizations/{org_id}/members"
        response = client.patch(f"{base}/carol/role", json={"role": "admin"}, headers=as_user("alice"))
        assert response.json()["role"] == "admin"

        suspended = client.post(f"{base}/carol/suspend", headers=as_user("alice"))
        assert suspended.json()["status"] == "suspended"
        again = client.post(f"{base}/carol/suspend", headers=as_user("alice"))
        assert again.status_code == 409
        assert again.json()["error"]["code"] == "INVALID_STATE"

        restored = client.post(f"{base}/carol/unsuspend", headers=as_user("alice"))
        assert restored.json()["status"] == "active"

    def test_get_unknown_member(self, client, org_id):
        response = client.get(f"/api/v1/organizations/{org_id}/members/nobody", headers=as_user("alice"))
        assert response.status_code == 404

    def test_remove_and_leave(self, client, org_id):
        base = f"/api/v1/organizations/{org_id}/members"
        assert client.delete(f"{base}/carol", headers=as_user("bob")).status_code == 204
        assert client.post(f"{base}/leave", headers=as_user("bob")).status_code == 204

        owner_leaves = client.post(f"{base}/leave", headers=as_user("alice"))
        assert owner_leaves.status_code == 403

    def test_join_by_domain(self, client, org_id):
        client.patch(
            f"/api/v1/organizations/{org_id}", json={"allowed_domains": ["acme.com"]}, headers=as_user("alice")
        )
        response = client.post(
            f"/api/v1/organizations/{org_id}/members/join", json={"email": "Dave@Acme.com"}, headers=as_user("dave")
        )
        assert response.status_code == 201
        assert response.json()["user_id"] == "dave"

    def test_bulk_add(self, client, org_id):
        response = client.post(
            f"/api/v1/organizations/{org_id}/members/bulk",
            json={"members": [{"user_id": "dave"}, {"user_id": "carol"}]},
            headers=as_user("alice"),
        )
        body = response.json()
        assert body["success"] == ["dave"]
        assert body["errors"][0]["identifier"] == "carol"
        assert body["errors"][0]["code"] == "ALREADY_EXISTS"


class TestTeamRoutes:
    """Test /organizations/{id}/teams."""

    def test_create_list_and_tree(self, client, org_id):
        base = f"/api/v1/organizations/{org_id}/teams"
        root = client.post(base, json={"name": "Engineering"}, headers=as_user("bob"))
        assert root.status_code == 201
        root_id = root.json()["id"]
        client.post(base, json={"name": "Backend", "parent_team_id": root_id}, headers=as_user("bob"))

        everything = client.get(base, headers=as_user("carol")).json()
        assert [t["name"] for t in everything] == ["Backend", "Engineering"]

        roots = client.get(base, params={"root_only": True}, headers=as_user("carol")).json()
        assert [t["name"] for t in roots] == ["Engineering"]

        children = client.get(base, params={"parent_team_id": root_id}, headers=as_user("carol")).json()
        assert [t["name"] for t in children] == ["Backend"]

        tree = client.get(f"{base}/tree", headers=as_user("carol")).json()
        assert tree[0]["team"]["name"] == "Engineering"
        assert tree[0]["children"][0]["team"]["name"] == "Backend"

        assert client.get(f"{base}/count", headers=as_user("carol")).json() == {"count": 2}

    def test_team_from_other_organization_is_not_found(self, client, org_id):
        other = client.post("/api/v1/organizations", json={"name": "Globex"}, headers=as_user("alice")).json()
        foreign = client.post(
            f"/api/v1/organizations/{other['id']}/teams", json={"name": "Foreign"}, headers=as_user("alice")
        ).json()

        response = client.get(f"/api/v1/organizations/{org_id}/teams/{foreign['id']}", headers=as_user("alice"))
        assert response.status_code == 404

    def test_cycle_rejected(self, client, org_id):
        base = f"/api/v1/organizations/{org_id}/teams"
        parent = client.post(base, json={"name": "Parent"}, headers=as_user("alice")).json()
        child = client.post(
            base, json={"name": "Child", "parent_team_id": parent["id"]}, headers=as_user("alice")
        ).json()

        response = client.patch(
            f"{base}/{parent['id']}", json={"parent_team_id": child["id"]}, headers=as_user("alice")
        )
        assert response.status_code == 400
        assert response.json()["error"]["code"] == "INVALID_ARGUMENT"

        moved = client.patch(f"{base}/{child['id']}", json={"parent_team_id": None}, headers=as_user("alice"))
        assert moved.json()["parent_team_id"] is None

    def test_team_members(self, client, org_id):
        base = f"/api/v1/organizations/{org_id}/teams"
        team_id = client.post(base, json={"name": "Engineering"}, headers=as_user("alice")).json()["id"]

        added = client.post(
            f"{base}/{team_id}/members", json={"user_id": "carol", "role": "lead"}, headers=as_user("bob")
        )
        assert added.status_code == 201
        assert added.json()["role"] == "lead"

        check = client.get(f"{base}/{team_id}/members/carol", headers=as_user("carol")).json()
        assert check["is_member"] is True

        stranger = client.post(f"{base}/{team_id}/members", json={"user_id": "zed"}, headers=as_user("bob"))
        assert stranger.status_code == 403

        role = client.patch(f"{base}/{team_id}/members/carol/role", json={"role": None}, headers=as_user("bob"))
        assert role.json()["role"] is None

        assert client.delete(f"{base}/{team_id}/members/carol", headers=as_user("bob")).status_code == 204
        deleted = client.delete(f"{base}/{team_id}", headers=as_user("bob"))
        assert deleted.status_code == 200
        assert deleted.json()["team_id"] == team_id


class TestInvitationRoutes:
    """Test invitation routes."""

    def test_invite_accept_flow(self, client, org_id):
        created = client.post(
            f"/api/v1/organizations/{org_id}/invitations",
            json={"identifier": "Dave@Example.com", "role": "admin"},
            headers=as_user("bob"),
        )
        assert created.status_code == 201
        invitation = created.json()
        assert invitation["invitee_identifier"] == "dave@example.com"
        assert invitation["status"] == "pending"

        duplicate = client.post(
            f"/api/v1/organizations/{org_id}/invitations", json={"identifier": "dave@example.com"}, headers=as_user("bob")
        )
        assert duplicate.status_code == 409

        pending = client.get("/api/v1/invitations/pending", params={"identifier": "DAVE@example.com"}).json()
        assert [p["organization_name"] for p in pending] == ["Acme Corp"]

        details = client.get(f"/api/v1/invitations/{invitation['id']}").json()
        assert details["is_expired"] is False

        accepted = client.post(f"/api/v1/invitations/{invitation['id']}/accept", headers=as_user("dave"))
        assert accepted.status_code == 200
        assert accepted.json()["role"] == "admin"

        again = client.post(f"/api/v1/invitations/{invitation['id']}/accept", headers=as_user("dave"))
        assert again.status_code == 409

    def test_accept_with_mismatched_identifier(self, client, org_id):
        invitation = client.post(
            f"/api/v1/organizations/{org_id}/invitations", json={"identifier": "dave@example.com"}, headers=as_user("alice")
        ).json()
        response = client.post(
            f"/api/v1/invitations/{invitation['id']}/accept",
            json={"accepting_identifier": "eve@example.com"},
            headers=as_user("eve"),
        )
        assert response.status_code == 403

    def test_expired_invitation_is_gone(self, client, org_id):
        invitation = client.post(
            f"/api/v1/organizations/{org_id}/invitations",
            json={"identifier": "dave@example.com", "expires_at": "2000-01-01T00:00:00Z"},
            headers=as_user("alice"),
        ).json()
        response = client.post(f"/api/v1/invitations/{invitation['id']}/accept", headers=as_user("dave"))
        assert response.status_code == 410
        assert response.json()["error"]["code"] == "EXPIRED"

    def test_resend_cancel_and_list(self, client, org_id):
        invitation = client.post(
            f"/api/v1/organizations/{org_id}/invitations", json={"identifier": "dave@example.com"}, headers=as_user("alice")
        ).json()

        resent = client.post(f"/api/v1/invitations/{invitation['id']}/resend", headers=as_user("alice"))
        assert resent.json()["invitation_id"] == invitation["id"]

        cancelled = client.post(f"/api/v1/invitations/{invitation['id']}/cancel", headers=as_user("alice"))
        assert cancelled.json()["status"] == "cancelled"

        listed = client.get(
            f"/api/v1/organizations/{org_id}/invitations", params={"status": "cancelled"}, headers=as_user("carol")
        ).json()
        assert [i["id"] for i in listed] == [invitation["id"]]

    def test_bulk_invite(self, client, org_id):
        response = client.post(
            f"/api/v1/organizations/{org_id}/invitations/bulk",
            json={"invitations": [{"identifier": "x@example.com"}, {"identifier": "y@example.com", "team_id": "nope"}]},
            headers=as_user("alice"),
        )
        body = response.json()
        assert [i["invitee_identifier"] for i in body["success"]] == ["x@example.com"]
        assert body["errors"][0]["code"] == "NOT_FOUND"

    def test_unknown_invitation(self, client):
        assert client.get("/api/v1/invitations/missing").status_code == 404


class TestPermissionGatedRoutes:
    """Test that mutating routes consult the fine-grained permission map."""

    @pytest.fixture
    def authz(self):
        """Admins may not create teams or cancel invitations."""
        role_permissions = dict(DEFAULT_ROLE_PERMISSIONS)
        role_permissions["admin"] = role_permissions["admin"] - {"teams:create", "invitations:cancel"}
        return InMemoryAuthorizationClient(role_permissions=role_permissions)

    def test_role_without_permission_is_forbidden(self, client, org_id):
        base = f"/api/v1/organizations/{org_id}/teams"
        response = client.post(base, json={"name": "Engineering"}, headers=as_user("bob"))
        assert response.status_code == 403
        assert response.json()["error"]["code"] == "FORBIDDEN"
        assert client.get(f"{base}/count", headers=as_user("bob")).json() == {"count": 0}

        owner = client.post(base, json={"name": "Engineering"}, headers=as_user("alice"))
        assert owner.status_code == 201

    def test_invitation_routes_resolve_organization(self, client, org_id):
        invitation = client.post(
            f"/api/v1/organizations/{org_id}/invitations", json={"identifier": "dave@example.com"}, headers=as_user("bob")
        ).json()

        denied = client.post(f"/api/v1/invitations/{invitation['id']}/cancel", headers=as_user("bob"))
        assert denied.status_code == 403
        assert client.post(f"/api/v1/invitations/{invitation['id']}/resend", headers=as_user("bob")).status_code == 200
        assert client.post("/api/v1/invitations/missing/cancel", headers=as_user("alice")).status_code == 404

    def test_disabled_operation_skips_check(self, store, authz, settings, org_id):
        services = create_tenancy_services(store, authz, settings, permission_map={"create_team": False})
        app = FastAPI()
        register_exception_handlers(app, is_production=True)
        app.include_router(create_tenancy_router(prefix="/api/v1"))
        app.dependency_overrides[get_current_user_id] = lambda: "bob"
        app.dependency_overrides[get_tenancy_services] = lambda: services

        with TestClient(app) as client:
            response = client.post(f"/api/v1/organizations/{org_id}/teams", json={"name": "Engineering"})
        assert response.status_code == 201
