"""
Flask CLI command tests (system, users, perms, seed).
"""

import pytest

from kmdash.extensions import db
from kmdash.models import LessonLearned, Material, Supplier, User


@pytest.fixture
def runner(app):
    return app.test_cli_runner()


class TestPermsCommands:

    def test_check_granted(self, runner, db_session):
        result = runner.invoke(args=["perms", "check", "manager", "analitik"])
        assert result.exit_code == 0
        assert "PASS Role 'manager' HAS permission 'analitik'" in result.output

    def test_check_denied(self, runner, db_session):
        result = runner.invoke(args=["perms", "check", "manager", "settings"])
        assert "FAIL Role 'manager' DOES NOT HAVE permission 'settings'" in result.output

    def test_unknown_role_acts_as_staff(self, runner, db_session):
        result = runner.invoke(args=["perms", "check", "owner", "inventaris"])
        assert "PASS Role 'staff'" in result.output

    def test_list(self, runner, db_session):
        result = runner.invoke(args=["perms", "list", "--role", "staff"])
        assert result.exit_code == 0
        lines = {line.split()[0]: line.split()[1] for line in result.output.splitlines()[3:] if line.strip()}
        assert lines["inventaris"] == "yes"
        assert lines["users"] == "-"
        assert "staff: inventaris, pengetahuan" in result.output

    def test_check_names_the_permission(self, runner, db_session):
        result = runner.invoke(args=["perms", "check", "admin", "vendor"])
        assert "HAS permission 'vendor' (Vendor)" in result.output

    def test_check_unknown_permission(self, runner, db_session):
        result = runner.invoke(args=["perms", "check", "admin", "gudang"])
        assert result.exit_code == 0
        assert "FAIL Unknown permission 'gudang'" in result.output
        assert "PASS" not in result.output


class TestSystemAndUsers:

    def test_init_creates_default_users_once(self, runner, db_session):
        result = runner.invoke(args=["system", "init"])
        assert result.exit_code == 0
        assert db.session.query(User).count() == 3

        result = runner.invoke(args=["system", "init"])
        assert "already exists" in result.output
        assert db.session.query(User).count() == 3

    def test_create_user(self, runner, db_session):
        result = runner.invoke(args=[
            "users", "create",
            "--name", "Rina",
            "--email", "rina@konveksi.test",
            "--password", "Rahasia123",
            "--role", "manager",
        ])
        assert "PASS Created user rina@konveksi.test" in result.output
        user = db.session.query(User).filter_by(email="rina@konveksi.test").one()
        assert user.role == "manager"

    def test_create_user_weak_password(self, runner, db_session):
        result = runner.invoke(args=[
            "users", "create", "--name", "Rina", "--email", "rina@konveksi.test", "--password", "lemah",
        ])
        assert "FAIL" in result.output
        assert db.session.query(User).count() == 0

    def test_deactivate(self, runner, staff_user):
        result = runner.invoke(args=["users", "deactivate", "staff@konveksi.test"])
        assert "PASS Deactivated" in result.output
        assert db.session.get(User, staff_user.id).is_active is False

        result = runner.invoke(args=["users", "list"])
        assert "staff@konveksi.test" not in result.output
        result = runner.invoke(args=["users", "list", "--all"])
        assert "staff@konveksi.test" in result.output


class TestSeedDemo:

    def test_requires_users(self, runner, db_session):
        result = runner.invoke(args=["seed", "demo"])
        assert "No users found" in result.output
        assert db.session.query(Material).count() == 0

    def test_loads_once(self, runner, admin_user, staff_user):
        result = runner.invoke(args=["seed", "demo"])
        assert result.exit_code == 0, result.output
        assert db.session.query(Supplier).count() == 5
        assert db.session.query(Material).count() == 5
        assert db.session.query(LessonLearned).count() == 4

        result = runner.invoke(args=["seed", "demo"])
        assert "skipping demo seed" in result.output
        assert db.session.query(Material).count() == 5

    def test_overview_after_seed(self, runner, client, admin_user, admin_headers):
        runner.invoke(args=["seed", "demo"])
        resp = client.get("/api/strategic/overview", headers=admin_headers)
        assert resp.status_code == 200
        assert resp.json["total_stock_value"]["total_value"]["amount"] > 0
        assert resp.json["vendor_reliability_index"]["total_suppliers"] == 5
