"""Tests for hospital, user and audit log administration endpoints."""

import pytest
from httpx import AsyncClient
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.permissions import CallerContext, UserRole
from app.models.audit_logs import audit_logs
from tests.conftest import LAKESIDE, RIDGE, auth_headers


@pytest.mark.asyncio
class TestHospitalEndpoints:
    """Tests for hospital administration."""

    async def test_create_hospital_as_super_admin(
        self,
        client: AsyncClient,
        super_admin: CallerContext,
        db_session: AsyncSession,
    ):
        """Test adding a hospital records an audit entry."""
        response = await client.post(
            "/api/v1/hospitals/",
            json={"name": "  Korle Bu Teaching Hospital  "},
            headers=auth_headers(super_admin),
        )

        assert response.status_code == 201
        data = response.json()
        assert data["name"] == "Korle Bu Teaching Hospital"
        assert data["user_count"] == 0

        result = await db_session.execute(select(audit_logs))
        entries = result.mappings().all()
        assert len(entries) == 1
        assert entries[0]["action"] == "create"
        assert entries[0]["table_name"] == "hospitals"
        assert entries[0]["new_data"]["name"] == "Korle Bu Teaching Hospital"

    async def test_create_duplicate_hospital(
        self,
        client: AsyncClient,
        super_admin: CallerContext,
    ):
        """Test hospital names are unique."""
        headers = auth_headers(super_admin)
        await client.post("/api/v1/hospitals/", json={"name": RIDGE}, headers=headers)

        response = await client.post("/api/v1/hospitals/", json={"name": RIDGE}, headers=headers)

        assert response.status_code == 409

    async def test_create_hospital_blank_name(
        self,
        client: AsyncClient,
        super_admin: CallerContext,
    ):
        response = await client.post(
            "/api/v1/hospitals/",
            json={"name": "   "},
            headers=auth_headers(super_admin),
        )
        assert response.status_code == 422

    async def test_create_hospital_unauthorized(
        self,
        client: AsyncClient,
        hospital_admin: CallerContext,
    ):
        """Test only super admins add hospitals."""
        response = await client.post(
            "/api/v1/hospitals/",
            json={"name": LAKESIDE},
            headers=auth_headers(hospital_admin),
        )
        assert response.status_code == 403

    async def test_list_hospitals_with_user_counts(
        self,
        client: AsyncClient,
        super_admin: CallerContext,
        make_profile,
    ):
        """Test hospitals are listed by name with assigned user counts."""
        headers = auth_headers(super_admin)
        for name in (RIDGE, LAKESIDE):
            await client.post("/api/v1/hospitals/", json={"name": name}, headers=headers)
        await make_profile(UserRole.HOSPITAL_ADMIN, hospital=RIDGE)
        await make_profile(UserRole.APPOINTMENT_MANAGER, hospital=RIDGE, clinic="ENT")

        response = await client.get("/api/v1/hospitals/", headers=headers)

        assert response.status_code == 200
        data = response.json()
        assert data["total"] == 2
        assert [(h["name"], h["user_count"]) for h in data["items"]] == [
            (LAKESIDE, 0),
            (RIDGE, 2),
        ]


@pytest.mark.asyncio
class TestUserEndpoints:
    """Tests for user management endpoints."""

    async def test_get_my_profile(
        self,
        client: AsyncClient,
        appointment_manager: CallerContext,
    ):
        response = await client.get("/api/v1/users/me", headers=auth_headers(appointment_manager))

        assert response.status_code == 200
        data = response.json()
        assert data["id"] == str(appointment_manager.user_id)
        assert data["role"] == "appointment_manager"
        assert data["hospital"] == RIDGE
        assert data["clinic"] == "Cardiology"

    async def test_list_users_as_super_admin(
        self,
        client: AsyncClient,
        super_admin: CallerContext,
        make_profile,
    ):
        await make_profile(UserRole.HOSPITAL_ADMIN, hospital=RIDGE)
        await make_profile(UserRole.HOSPITAL_ADMIN, hospital=LAKESIDE)

        response = await client.get("/api/v1/users/", headers=auth_headers(super_admin))

        assert response.status_code == 200
        assert response.json()["total"] == 3

    async def test_list_users_scoped_to_own_hospital(
        self,
        client: AsyncClient,
        hospital_admin: CallerContext,
        make_profile,
    ):
        await make_profile(UserRole.ANALYTICS_VIEWER, hospital=RIDGE)
        await make_profile(UserRole.ANALYTICS_VIEWER, hospital=LAKESIDE)

        response = await client.get("/api/v1/users/", headers=auth_headers(hospital_admin))

        assert response.status_code == 200
        data = response.json()
        assert data["total"] == 2
        assert {user["hospital"] for user in data["items"]} == {RIDGE}

    async def test_list_users_unauthorized(
        self,
        client: AsyncClient,
        appointment_manager: CallerContext,
    ):
        response = await client.get("/api/v1/users/", headers=auth_headers(appointment_manager))
        assert response.status_code == 403

    async def test_change_role_is_audited(
        self,
        client: AsyncClient,
        hospital_admin: CallerContext,
        analytics_viewer: CallerContext,
        db_session: AsyncSession,
    ):
        response = await client.patch(
            f"/api/v1/users/{analytics_viewer.user_id}/role",
            json={"role": "appointment_manager"},
            headers=auth_headers(hospital_admin),
        )

        assert response.status_code == 200
        assert response.json()["role"] == "appointment_manager"

        result = await db_session.execute(select(audit_logs))
        entries = result.mappings().all()
        assert len(entries) == 1
        assert entries[0]["table_name"] == "profiles"
        assert entries[0]["old_data"] == {"role": "analytics_viewer"}
        assert entries[0]["new_data"] == {"role": "appointment_manager"}
        assert entries[0]["user_id"] == hospital_admin.user_id

    async def test_hospital_admin_cannot_grant_super_admin(
        self,
        client: AsyncClient,
        hospital_admin: CallerContext,
        analytics_viewer: CallerContext,
    ):
        response = await client.patch(
            f"/api/v1/users/{analytics_viewer.user_id}/role",
            json={"role": "super_admin"},
            headers=auth_headers(hospital_admin),
        )
        assert response.status_code == 403

    async def test_hospital_admin_cannot_manage_other_hospitals(
        self,
        client: AsyncClient,
        hospital_admin: CallerContext,
        make_profile,
    ):
        outsider = await make_profile(UserRole.ANALYTICS_VIEWER, hospital=LAKESIDE)

        response = await client.patch(
            f"/api/v1/users/{outsider.user_id}/role",
            json={"role": "appointment_manager"},
            headers=auth_headers(hospital_admin),
        )
        assert response.status_code == 403

    async def test_change_role_rejects_unknown_role(
        self,
        client: AsyncClient,
        super_admin: CallerContext,
        analytics_viewer: CallerContext,
    ):
        response = await client.patch(
            f"/api/v1/users/{analytics_viewer.user_id}/role",
            json={"role": "patient"},
            headers=auth_headers(super_admin),
        )
        assert response.status_code == 422


@pytest.mark.asyncio
class TestAuditLogEndpoints:
    """Tests for the audit log viewer."""

    async def test_list_audit_logs(
        self,
        client: AsyncClient,
        hospital_admin: CallerContext,
        make_appointment,
    ):
        row = await make_appointment()
        headers = auth_headers(hospital_admin)
        await client.patch(
            f"/api/v1/appointments/{row['id']}/status",
            json={"status": "cancelled"},
            headers=headers,
        )

        response = await client.get("/api/v1/audit-logs/", headers=headers)

        assert response.status_code == 200
        data = response.json()
        assert data["total"] == 1
        entry = data["items"][0]
        assert entry["record_id"] == str(row["id"])
        assert entry["user_email"] == hospital_admin.email
        assert entry["old_data"] == {"status": "scheduled"}
        assert entry["new_data"] == {"status": "cancelled"}

    async def test_list_audit_logs_limit_bounds(
        self,
        client: AsyncClient,
        super_admin: CallerContext,
    ):
        response = await client.get(
            "/api/v1/audit-logs/", params={"limit": 0}, headers=auth_headers(super_admin)
        )
        assert response.status_code == 422

    async def test_list_audit_logs_unauthorized(
        self,
        client: AsyncClient,
        appointment_manager: CallerContext,
    ):
        response = await client.get(
            "/api/v1/audit-logs/", headers=auth_headers(appointment_manager)
        )
        assert response.status_code == 403
