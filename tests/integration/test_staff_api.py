import pytest
from httpx import AsyncClient
from fastapi import status
from app.models.shared.enums import UserRole
from tests.integration.conftest import STAFF_UID, bearer

@pytest.mark.asyncio
class TestStaff:
    """Test staff profile endpoints"""

    async def test_create_staff_generates_code(self, client: AsyncClient, staff: dict):
        assert staff["staff_code"] == "CP0001"
        assert staff["user_uid"] == STAFF_UID
        assert staff["is_active"] is True

    async def test_duplicate_user_is_rejected(self, client: AsyncClient, admin_headers: dict, staff: dict):
        response = await client.post(
            "/api/v1/hr/staff/",
            json={"user_uid": STAFF_UID, "full_name": "Someone Else"},
            headers=admin_headers,
        )
        assert response.status_code == status.HTTP_409_CONFLICT

    async def test_staff_cannot_create_staff(self, client: AsyncClient, staff_headers: dict):
        response = await client.post(
            "/api/v1/hr/staff/",
            json={"user_uid": "other", "full_name": "Other Person"},
            headers=staff_headers,
        )
        assert response.status_code == status.HTTP_403_FORBIDDEN

    async def test_invalid_token(self, client: AsyncClient):
        response = await client.get("/api/v1/hr/staff/me", headers={"Authorization": "Bearer not-a-token"})
        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    async def test_get_own_profile(self, client: AsyncClient, staff_headers: dict, staff: dict):
        response = await client.get("/api/v1/hr/staff/me", headers=staff_headers)
        assert response.status_code == status.HTTP_200_OK
        assert response.json()["id"] == staff["id"]

    async def test_account_without_profile(self, client: AsyncClient):
        response = await client.get("/api/v1/hr/staff/me", headers=bearer("unknown", UserRole.STAFF))
        assert response.status_code == status.HTTP_403_FORBIDDEN

    async def test_list_and_search(self, client: AsyncClient, admin_headers: dict, staff: dict):
        response = await client.get("/api/v1/hr/staff/", params={"search": "nimal"}, headers=admin_headers)
        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["count"] == 1
        assert data["data"][0]["full_name"] == "Nimal Perera"

    async def test_deactivated_staff_loses_access(self, client: AsyncClient, admin_headers: dict, staff_headers: dict, staff: dict):
        response = await client.put(f"/api/v1/hr/staff/{staff['id']}", json={"is_active": False}, headers=admin_headers)
        assert response.status_code == status.HTTP_200_OK

        response = await client.get("/api/v1/hr/staff/me", headers=staff_headers)
        assert response.status_code == status.HTTP_403_FORBIDDEN

    async def test_generated_code_follows_manual_codes(self, client: AsyncClient, admin_headers: dict):
        response = await client.post(
            "/api/v1/hr/staff/",
            json={"user_uid": "manual", "full_name": "Manual Code", "staff_code": "cp0002"},
            headers=admin_headers,
        )
        assert response.json()["staff_code"] == "CP0002"

        response = await client.post(
            "/api/v1/hr/staff/",
            json={"user_uid": "auto", "full_name": "Auto Code"},
            headers=admin_headers,
        )
        assert response.status_code == status.HTTP_200_OK
        assert response.json()["staff_code"] == "CP0003"
