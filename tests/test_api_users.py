# tests/test_api_users.py

from __future__ import annotations


def test_member_cannot_list_users(client, member_x) -> None:
    r = client.get("/api/users", headers=member_x.headers)
    assert r.status_code == 403
    assert r.get_json() == {"success": False, "message": "Access denied. Admin only."}


def test_admin_lists_users_without_hashes(client, admin, member_x) -> None:
    r = client.get("/api/users", headers=admin.headers)
    body = r.get_json()
    assert r.status_code == 200
    assert body["count"] == 2
    assert all("password" not in k.lower() for u in body["data"] for k in u)

    r = client.get(f"/api/users/{member_x.user.id}", headers=admin.headers)
    assert r.get_json()["data"]["email"] == "memberx@example.com"
    assert client.get("/api/users/999", headers=admin.headers).status_code == 404


def test_role_changes(client, admin, member_x) -> None:
    r = client.patch(f"/api/users/{admin.user.id}/role", json={"role": "member"}, headers=admin.headers)
    assert r.status_code == 400
    assert r.get_json()["message"] == "Cannot change your own role"

    r = client.patch(f"/api/users/{member_x.user.id}/role", json={"role": "boss"}, headers=admin.headers)
    assert r.status_code == 400

    r = client.patch(f"/api/users/{member_x.user.id}/role", json={"role": "admin"}, headers=admin.headers)
    assert r.status_code == 200
    assert r.get_json()["data"]["role"] == "admin"

    # The promoted member now sees the admin surface.
    assert client.get("/api/users", headers=member_x.headers).status_code == 200


def test_deactivation(client, admin, member_x) -> None:
    r = client.patch(f"/api/users/{admin.user.id}/deactivate", headers=admin.headers)
    assert r.status_code == 400
    assert r.get_json()["message"] == "Cannot deactivate your own account"

    r = client.patch(f"/api/users/{member_x.user.id}/deactivate", headers=admin.headers)
    assert r.get_json() == {"success": True, "message": "User deactivated successfully"}

    assert client.get("/api/tasks", headers=member_x.headers).status_code == 401
    r = client.post(
        "/api/auth/login", json={"email": "memberx@example.com", "password": "password123"}
    )
    assert r.status_code == 401

    client.patch(f"/api/users/{member_x.user.id}/activate", headers=admin.headers)
    assert client.get("/api/tasks", headers=member_x.headers).status_code == 200
