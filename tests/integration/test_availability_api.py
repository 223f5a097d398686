import pytest
from httpx import AsyncClient
from fastapi import status

MONDAY = {
    "available": True,
    "start_time": "08:00",
    "end_time": "16:00",
    "breaks": [{"start": "12:00", "end": "12:30"}],
}

@pytest.mark.asyncio
class TestAvailability:
    async def test_default_week_is_unavailable(self, client: AsyncClient, staff_headers: dict, staff: dict):
        response = await client.get("/api/v1/hr/availability/me", headers=staff_headers)
        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["available_days"] == 0
        assert len(data["availabilities"]) == 7
        assert data["updated_at"] is None

    async def test_save_and_merge(self, client: AsyncClient, staff_headers: dict, staff: dict):
        response = await client.put(
            "/api/v1/hr/availability/me", json={"availabilities": {"Monday": MONDAY}}, headers=staff_headers
        )
        assert response.status_code == status.HTTP_200_OK
        assert response.json()["available_days"] == 1

        response = await client.put(
            "/api/v1/hr/availability/me",
            json={"availabilities": {"Friday": {"available": True}}},
            headers=staff_headers,
        )
        data = response.json()
        assert data["available_days"] == 2
        assert data["availabilities"]["Monday"]["start_time"] == "08:00:00"
        assert data["availabilities"]["Monday"]["breaks"] == [{"start": "12:00:00", "end": "12:30:00"}]
        assert data["availabilities"]["Friday"]["end_time"] == "17:00:00"

    async def test_end_before_start(self, client: AsyncClient, staff_headers: dict, staff: dict):
        response = await client.put(
            "/api/v1/hr/availability/me",
            json={"availabilities": {"Tuesday": {"available": True, "start_time": "17:00", "end_time": "09:00"}}},
            headers=staff_headers,
        )
        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY

    async def test_unknown_day(self, client: AsyncClient, staff_headers: dict, staff: dict):
        response = await client.put(
            "/api/v1/hr/availability/me", json={"availabilities": {"Funday": MONDAY}}, headers=staff_headers
        )
        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY

    async def test_admin_sees_all_staff(self, client: AsyncClient, admin_headers: dict, staff_headers: dict, staff: dict):
        await client.put("/api/v1/hr/availability/me", json={"availabilities": {"Monday": MONDAY}}, headers=staff_headers)
        response = await client.get("/api/v1/hr/availability/", headers=admin_headers)
        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert len(data) == 1
        assert data[0]["staff"]["staff_code"] == staff["staff_code"]
        assert data[0]["available_days"] == 1
