"""
Tests for the admin dashboard endpoints and admin CLI
"""

import pytest
from click.testing import CliRunner

from lessonbook.core.database import Database
from lessonbook.models.user import User, UserRole
from lessonbook.services.user_service import UserService


class TestStats:

    def test_counts_and_revenue(self, client, student, other_student, admin, lesson, card_processor):
        monthly = card_processor.purchase_intent(49.99, student, "subscription", "monthly")
        weekly = card_processor.purchase_intent(19.99, other_student, "subscription", "weekly")
        client.post(
            "/api/payments/confirm-stripe",
            json={"paymentIntentId": monthly.id, "type": "subscription", "itemId": "monthly"},
            headers=student["headers"],
        )
        client.post(
            "/api/payments/confirm-stripe",
            json={"paymentIntentId": weekly.id, "type": "subscription", "itemId": "weekly"},
            headers=other_student["headers"],
        )

        response = client.get("/api/admin/stats", headers=admin["headers"])

        assert response.status_code == 200
        assert response.json() == {
            "totalUsers": 2,
            "totalLessons": 1,
            "totalBookings": 0,
            "activeSubscriptions": 2,
            "totalRevenue": 69.98,
        }

    def test_cancelled_subscriptions_not_active(self, client, student, admin, subscription):
        client.put(f"/api/subscriptions/{subscription['id']}/cancel", headers=student["headers"])

        stats = client.get("/api/admin/stats", headers=admin["headers"]).json()

        assert stats["activeSubscriptions"] == 0
        assert stats["totalRevenue"] == 0

    def test_student_forbidden(self, client, student):
        response = client.get("/api/admin/stats", headers=student["headers"])
        assert response.status_code == 403
        assert response.json()["message"] == "Admin access required"


class TestPayments:

    def test_all_payments_populated(self, client, student, admin, lesson, card_processor):
        intent = card_processor.purchase_intent(25.0, student, "lesson", lesson["id"])
        client.post(
            "/api/payments/confirm-stripe",
            json={"paymentIntentId": intent.id, "type": "lesson", "itemId": lesson["id"]},
            headers=student["headers"],
        )

        response = client.get("/api/admin/payments", headers=admin["headers"])

        assert response.status_code == 200
        [payment] = response.json()
        assert payment["user"]["email"] == "student@example.com"
        assert payment["lesson"]["id"] == lesson["id"]
        assert payment["subscription"] is None

    def test_student_forbidden(self, client, student):
        assert client.get("/api/admin/payments", headers=student["headers"]).status_code == 403


class TestAdminCli:

    @pytest.fixture
    def cli_database(self, tmp_path, monkeypatch):
        """File-backed store the CLI opens and disposes on its own"""
        from lessonbook.cli import admin as admin_cli

        url = f"sqlite:///{tmp_path / 'cli.db'}"
        monkeypatch.setattr(admin_cli.settings, "database_url", url)

        database = Database(url)
        database.connect()
        db = database.session()
        try:
            UserService().register(db, "Teacher", "teacher@example.com", "secret123")
        finally:
            db.close()
        yield database
        database.dispose()

    def role_of(self, database, email):
        db = database.session()
        try:
            return db.query(User).filter(User.email == email).one().role
        finally:
            db.close()

    def test_promote_list_demote(self, cli_database):
        from lessonbook.cli.admin import cli

        runner = CliRunner()

        result = runner.invoke(cli, ["promote", "--email", "Teacher@Example.com"])
        assert result.exit_code == 0, result.output
        assert self.role_of(cli_database, "teacher@example.com") == UserRole.ADMIN

        result = runner.invoke(cli, ["list-admins"])
        assert "teacher@example.com" in result.output

        result = runner.invoke(cli, ["demote", "--email", "teacher@example.com"])
        assert result.exit_code == 0, result.output
        assert self.role_of(cli_database, "teacher@example.com") == UserRole.STUDENT

    def test_list_admins_empty(self, cli_database):
        from lessonbook.cli.admin import cli

        result = CliRunner().invoke(cli, ["list-admins"])

        assert result.exit_code == 0
        assert "No admins found" in result.output

    def test_promote_unknown_user(self, cli_database):
        from lessonbook.cli.admin import cli

        result = CliRunner().invoke(cli, ["promote", "--email", "nobody@example.com"])

        assert result.exit_code == 1
