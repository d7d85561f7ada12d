"""
Tests for organization and dashboard endpoints.
"""

from datetime import date, datetime, timezone
from types import SimpleNamespace
from unittest.mock import AsyncMock, patch

import pytest

from core.middleware.error_handling import ConflictError
from database.models.organizations import StaffRole

NOW = datetime(2024, 5, 15, 12, 0, tzinfo=timezone.utc)


def member(user_id, role, status="active"):
    return {
        "id": user_id,
        "name": f"Member {user_id}",
        "email": f"member{user_id}@acme.com",
        "role": role,
        "assigned_by": 1,
        "assigned_at": NOW,
        "is_member_active": True,
        "is_role_active": status == "active",
        "status": status,
    }


MEMBERS = [
    member(1, StaffRole.ADMIN),
    member(2, StaffRole.HR),
    member(3, StaffRole.TA, status="inactive"),
]


class TestOrganization:

    def test_get_organization(self, client, login_as, auth_headers):
        login_as(StaffRole.TA)
        org = SimpleNamespace(id=10, name="Acme", slug="acme", created_at=NOW, updated_at=NOW)
        with patch("api.services.organizations.get_organization", AsyncMock(return_value=org)) as get:
            response = client.get("/api/v1/organization", headers=auth_headers)

        assert response.status_code == 200
        assert response.json()["slug"] == "acme"
        assert get.await_args.args[1] == 10

    def test_members_filtered(self, client, login_as, auth_headers):
        login_as(StaffRole.HR)
        with patch("api.services.organizations.fetch_org_members", AsyncMock(return_value=MEMBERS)):
            response = client.get(
                "/api/v1/organization/members?active_only=true&role=hr", headers=auth_headers
            )

        assert response.status_code == 200
        assert [m["id"] for m in response.json()] == [2]

    def test_ta_cannot_list_members(self, client, login_as, auth_headers):
        login_as(StaffRole.TA)
        response = client.get("/api/v1/organization/members", headers=auth_headers)
        assert response.status_code == 403

    def test_admin_assigns_role(self, client, login_as, auth_headers):
        ctx = login_as(StaffRole.ADMIN)
        assign = AsyncMock(return_value=member(4, StaffRole.TA))
        with patch("api.services.organizations.assign_user_role", assign):
            response = client.post(
                "/api/v1/organization/members",
                json={"email": "New.Hire@Acme.com", "role": "ta"},
                headers=auth_headers,
            )

        assert response.status_code == 201
        assert response.json()["role"] == "ta"
        kwargs = assign.await_args.kwargs
        assert kwargs["target_email"] == "new.hire@acme.com"
        assert kwargs["organization_id"] == ctx.organization_id
        assert kwargs["role_name"] == StaffRole.TA
        assert kwargs["assigner_id"] == ctx.user_id

    def test_hr_cannot_assign_roles(self, client, login_as, auth_headers):
        login_as(StaffRole.HR)
        response = client.post(
            "/api/v1/organization/members",
            json={"email": "new@acme.com", "role": "ta"},
            headers=auth_headers,
        )
        assert response.status_code == 403
        assert response.json()["error"]["message"] == "Only organization admins can manage members and roles."

    def test_assign_conflict(self, client, login_as, auth_headers):
        login_as(StaffRole.ADMIN)
        with patch(
            "api.services.organizations.assign_user_role",
            AsyncMock(side_effect=ConflictError("User already belongs to another organization")),
        ):
            response = client.post(
                "/api/v1/organization/members",
                json={"email": "new@acme.com", "role": "hr"},
                headers=auth_headers,
            )
        assert response.status_code == 409

    def test_roles(self, client, login_as, auth_headers):
        login_as(StaffRole.TA)
        roles = [
            SimpleNamespace(name=StaffRole.ADMIN, display_name="Admin", description=None, permissions=None),
            SimpleNamespace(name=StaffRole.HR, display_name="HR", description=None, permissions=None),
        ]
        with patch("api.services.organizations.list_roles", AsyncMock(return_value=roles)):
            response = client.get("/api/v1/organization/roles", headers=auth_headers)

        assert [r["name"] for r in response.json()] == ["admin", "hr"]


class TestDashboard:

    metric = {"value": 4, "change": 100.0, "trend": "up"}

    @pytest.fixture
    def stats(self):
        return {
            "user_role": "hr",
            "active_jobs": self.metric,
            "applications_received": self.metric,
            "client_companies": self.metric,
            "total_candidates": self.metric,
        }

    def test_complete_dashboard(self, client, login_as, auth_headers, stats):
        login_as(StaffRole.HR)
        data = {
            "stats": stats,
            "chart_data": [{
                "week": "2024-W20", "week_start": date(2024, 5, 13),
                "applications": 3, "companies": 2, "roles": 2,
            }],
            "top_jobs": [{"name": "Backend Engineer", "value": 3, "percentage": 100.0}],
            "top_companies": [],
            "generated_at": NOW,
        }
        with patch(
            "api.services.dashboard.get_complete_dashboard_data", AsyncMock(return_value=data)
        ):
            response = client.get("/api/v1/dashboard", headers=auth_headers)

        assert response.status_code == 200
        body = response.json()
        assert body["chart_data"][0]["week"] == "2024-W20"
        assert body["stats"]["active_jobs"]["trend"] == "up"

    def test_stats(self, client, login_as, auth_headers, stats):
        login_as(StaffRole.TA)
        with patch("api.services.dashboard.get_dashboard_stats", AsyncMock(return_value=stats)):
            response = client.get("/api/v1/dashboard/stats", headers=auth_headers)
        assert response.json()["user_role"] == "hr"

    def test_weeks_back_bounds(self, client, login_as, auth_headers):
        login_as(StaffRole.HR)
        response = client.get("/api/v1/dashboard/applications-over-time?weeks_back=0", headers=auth_headers)
        assert response.status_code == 422

    def test_invalid_metric_type(self, client, login_as, auth_headers):
        login_as(StaffRole.HR)
        with patch(
            "api.services.dashboard.get_top_performers",
            AsyncMock(side_effect=ValueError("Invalid metric type: salaries")),
        ):
            response = client.get(
                "/api/v1/dashboard/top-performers?metric_type=salaries", headers=auth_headers
            )
        assert response.status_code == 400

    def test_top_performers_args(self, client, login_as, auth_headers):
        login_as(StaffRole.ADMIN)
        top = AsyncMock(return_value=[])
        with patch("api.services.dashboard.get_top_performers", top):
            response = client.get(
                "/api/v1/dashboard/top-performers?metric_type=roles&limit=3", headers=auth_headers
            )
        assert response.status_code == 200
        assert top.await_args.args[2:] == ("roles", 3)
