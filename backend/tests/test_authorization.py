"""
Authorization tests for the KM dashboard API.

Verifies:
- Unauthenticated requests return 401
- Staff is limited to inventaris + pengetahuan (403 elsewhere)
- Manager is denied user management and settings (403)
- Admin can reach every area
"""

import pytest


# =============================================================================
# UNAUTHENTICATED ACCESS - 401
# =============================================================================


class TestUnauthenticatedAccess:
    """All protected endpoints return 401 without a token."""

    @pytest.mark.parametrize(
        "method,path",
        [
            ("GET", "/api/dashboard/metrics"),
            ("GET", "/api/dashboard/alerts"),
            ("GET", "/api/inventaris"),
            ("POST", "/api/inventaris"),
            ("GET", "/api/materials"),
            ("GET", "/api/vendors"),
            ("POST", "/api/vendors"),
            ("GET", "/api/lessons"),
            ("GET", "/api/knowledge-base"),
            ("GET", "/api/production/logs"),
            ("GET", "/api/strategic/overview"),
            ("GET", "/api/users"),
            ("GET", "/api/settings/permissions"),
            ("GET", "/api/auth/me"),
            ("POST", "/api/auth/logout"),
        ],
    )
    def test_requires_auth(self, client, db_session, method, path):
        resp = getattr(client, method.lower())(path)
        assert resp.status_code == 401, f"{method} {path} returned {resp.status_code}"
        assert resp.json["error"] == "Authentication required"

    def test_garbage_token_rejected(self, client, db_session):
        resp = client.get("/api/inventaris", headers={"Authorization": "Bearer not-a-real-token"})
        assert resp.status_code == 401
        assert resp.json["error"] == "Invalid or expired token"

    def test_non_bearer_scheme_rejected(self, client, db_session):
        resp = client.get("/api/inventaris", headers={"Authorization": "Basic abc123"})
        assert resp.status_code == 401

    def test_health_is_public(self, client, db_session):
        resp = client.get("/api/health")
        assert resp.status_code == 200
        assert resp.json["status"] == "healthy"


# =============================================================================
# STAFF - 403 OUTSIDE INVENTARIS / PENGETAHUAN
# =============================================================================


class TestStaffDenied:

    @pytest.mark.parametrize(
        "path,permission",
        [
            ("/api/dashboard/metrics", "dashboard"),
            ("/api/dashboard/recent-knowledge", "dashboard"),
            ("/api/strategic/overview", "analitik"),
            ("/api/strategic/lean-efficiency", "analitik"),
            ("/api/vendors", "vendor"),
            ("/api/vendors/strategic-partners", "vendor"),
            ("/api/users", "users"),
            ("/api/settings/permissions", "settings"),
        ],
    )
    def test_forbidden(self, client, staff_headers, path, permission):
        resp = client.get(path, headers=staff_headers)
        assert resp.status_code == 403
        assert resp.json["error"] == "Permission denied"
        assert resp.json["required_permission"] == permission

    def test_cannot_create_vendor(self, client, staff_headers):
        resp = client.post("/api/vendors", json={"nama_vendor": "X"}, headers=staff_headers)
        assert resp.status_code == 403

    def test_denial_is_logged(self, client, staff_headers, caplog):
        with caplog.at_level("WARNING"):
            client.get("/api/users", headers=staff_headers)
        assert any("Permission denied" in r.getMessage() for r in caplog.records)


class TestStaffAllowed:

    @pytest.mark.parametrize(
        "path",
        [
            "/api/inventaris",
            "/api/materials",
            "/api/lessons",
            "/api/knowledge-base",
            "/api/production/logs",
            "/api/production/wastes",
        ],
    )
    def test_allowed(self, client, staff_headers, path):
        resp = client.get(path, headers=staff_headers)
        assert resp.status_code == 200


# =============================================================================
# MANAGER - EVERYTHING BUT USERS / SETTINGS
# =============================================================================


class TestManagerAccess:

    @pytest.mark.parametrize(
        "path",
        [
            "/api/dashboard/metrics",
            "/api/strategic/overview",
            "/api/strategic/vendor-reliability",
            "/api/vendors",
            "/api/inventaris",
            "/api/lessons",
        ],
    )
    def test_allowed(self, client, manager_headers, path):
        resp = client.get(path, headers=manager_headers)
        assert resp.status_code == 200

    def test_cannot_list_users(self, client, manager_headers):
        resp = client.get("/api/users", headers=manager_headers)
        assert resp.status_code == 403
        assert resp.json["required_permission"] == "users"

    def test_cannot_create_user(self, client, manager_headers):
        resp = client.post(
            "/api/users",
            json={"name": "X", "email": "x@konveksi.test", "password": "Password123"},
            headers=manager_headers,
        )
        assert resp.status_code == 403

    def test_cannot_read_settings(self, client, manager_headers):
        resp = client.get("/api/settings/permissions", headers=manager_headers)
        assert resp.status_code == 403


# =============================================================================
# ADMIN - FULL ACCESS
# =============================================================================


class TestAdminAccess:

    @pytest.mark.parametrize(
        "path",
        [
            "/api/dashboard/metrics",
            "/api/dashboard/alerts",
            "/api/strategic/overview",
            "/api/vendors",
            "/api/inventaris",
            "/api/lessons",
            "/api/knowledge-base",
            "/api/users",
            "/api/settings/permissions",
        ],
    )
    def test_allowed(self, client, admin_headers, path):
        resp = client.get(path, headers=admin_headers)
        assert resp.status_code == 200

    def test_settings_lists_role_table(self, client, admin_headers):
        resp = client.get("/api/settings/permissions", headers=admin_headers)
        roles = {row["role"]: row["permissions"] for row in resp.json["roles"]}
        assert set(roles) == {"admin", "manager", "staff"}
        assert roles["staff"]["inventaris"] is True
        assert roles["staff"]["vendor"] is False
        assert roles["manager"]["users"] is False
        assert [p["key"] for p in resp.json["permissions"]] == [
            "dashboard", "inventaris", "analitik", "vendor", "pengetahuan", "users", "settings",
        ]
