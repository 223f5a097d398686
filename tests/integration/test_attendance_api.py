import pytest
from datetime import datetime
from decimal import Decimal
from httpx import AsyncClient
from fastapi import status
from tests.integration.conftest import AT_CAFE, AWAY_FROM_CAFE

@pytest.mark.asyncio
class TestLocation:
    async def test_check_location_at_cafe(self, client: AsyncClient, staff_headers: dict, staff: dict):
        response = await client.post("/api/v1/hr/attendance/check-location", json=AT_CAFE, headers=staff_headers)
        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["allowed"] is True
        assert data["distance"] == 0
        assert data["message"] == "Location Verified - You're at Cafe Piranha"

    async def test_check_location_away(self, client: AsyncClient, staff_headers: dict, staff: dict):
        response = await client.post("/api/v1/hr/attendance/check-location", json=AWAY_FROM_CAFE, headers=staff_headers)
        data = response.json()
        assert data["allowed"] is False
        assert data["message"].startswith("Location Restricted - ")

    async def test_clock_in_away_is_refused(self, client: AsyncClient, staff_headers: dict, staff: dict):
        response = await client.post("/api/v1/hr/attendance/clock-in", json=AWAY_FROM_CAFE, headers=staff_headers)
        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert response.json()["detail"].startswith("Cannot clock in: Location Restricted")

    async def test_invalid_coordinates(self, client: AsyncClient, staff_headers: dict, staff: dict):
        response = await client.post(
            "/api/v1/hr/attendance/clock-in",
            json={"latitude": 91, "longitude": 0},
            headers=staff_headers,
        )
        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY


@pytest.mark.asyncio
class TestClockInOut:
    """Test the clock-in / clock-out cycle"""

    async def test_regular_day(self, client: AsyncClient, clock, staff_headers: dict, staff: dict):
        response = await client.post("/api/v1/hr/attendance/clock-in", json=AT_CAFE, headers=staff_headers)
        assert response.status_code == status.HTTP_200_OK
        session = response.json()
        assert session["status"] == "active"
        assert session["shift_date"] == "2024-05-01"
        assert session["is_night_shift"] is False

        clock.current = datetime(2024, 5, 1, 17, 0)
        response = await client.post("/api/v1/hr/attendance/clock-out", json=AT_CAFE, headers=staff_headers)
        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["hours_worked"] == 8
        assert data["has_ot"] is False
        assert data["overtime_request_id"] is None
        assert data["session"]["status"] == "completed"
        assert Decimal(data["session"]["regular_hours"]) == 8
        assert Decimal(data["session"]["ot_hours"]) == 0

    async def test_long_day_raises_overtime_request(self, client: AsyncClient, clock, staff_headers: dict, staff: dict):
        await client.post("/api/v1/hr/attendance/clock-in", json=AT_CAFE, headers=staff_headers)
        clock.current = datetime(2024, 5, 1, 22, 0)
        response = await client.post("/api/v1/hr/attendance/clock-out", json=AT_CAFE, headers=staff_headers)
        data = response.json()
        assert data["has_ot"] is True
        assert data["overtime_request_id"] is not None
        assert Decimal(data["session"]["ot_amount"]) == 200

        response = await client.get("/api/v1/hr/overtime/me", headers=staff_headers)
        requests = response.json()["data"]
        assert len(requests) == 1
        assert requests[0]["id"] == data["overtime_request_id"]
        assert requests[0]["status"] == "pending"
        assert Decimal(requests[0]["ot_hours"]) == 1
        assert requests[0]["shift_month"] == "2024-05"

    async def test_night_shift_over_month_end(self, client: AsyncClient, clock, staff_headers: dict, staff: dict):
        clock.current = datetime(2024, 5, 31, 19, 0)
        response = await client.post("/api/v1/hr/attendance/clock-in", json=AT_CAFE, headers=staff_headers)
        session = response.json()
        assert session["shift_date"] == "2024-06-01"
        assert session["shift_month"] == "2024-06"
        assert session["is_night_shift"] is True

        clock.current = datetime(2024, 6, 1, 2, 0)
        response = await client.post("/api/v1/hr/attendance/clock-out", json=AT_CAFE, headers=staff_headers)
        data = response.json()
        assert data["hours_worked"] == 7
        assert data["session"]["cross_midnight"] is True
        assert data["session"]["shift_date"] == "2024-06-01"

    async def test_double_clock_in(self, client: AsyncClient, staff_headers: dict, staff: dict):
        await client.post("/api/v1/hr/attendance/clock-in", json=AT_CAFE, headers=staff_headers)
        response = await client.post("/api/v1/hr/attendance/clock-in", json=AT_CAFE, headers=staff_headers)
        assert response.status_code == status.HTTP_400_BAD_REQUEST

    async def test_clock_out_without_session(self, client: AsyncClient, staff_headers: dict, staff: dict):
        response = await client.post("/api/v1/hr/attendance/clock-out", json=AT_CAFE, headers=staff_headers)
        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["detail"] == "You are not clocked in."

    async def test_clock_out_before_clock_in_time(self, client: AsyncClient, clock, staff_headers: dict, staff: dict):
        await client.post("/api/v1/hr/attendance/clock-in", json=AT_CAFE, headers=staff_headers)
        clock.current = datetime(2024, 5, 1, 8, 0)
        response = await client.post("/api/v1/hr/attendance/clock-out", json=AT_CAFE, headers=staff_headers)
        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY

        # Session is left open
        response = await client.get("/api/v1/hr/attendance/current-shift", headers=staff_headers)
        assert response.json()["is_clocked_in"] is True


@pytest.mark.asyncio
class TestShiftViews:
    async def test_current_shift(self, client: AsyncClient, clock, staff_headers: dict, staff: dict):
        await client.post("/api/v1/hr/attendance/clock-in", json=AT_CAFE, headers=staff_headers)
        clock.current = datetime(2024, 5, 1, 13, 0)
        await client.post("/api/v1/hr/attendance/clock-out", json=AT_CAFE, headers=staff_headers)
        clock.current = datetime(2024, 5, 1, 14, 0)
        await client.post("/api/v1/hr/attendance/clock-in", json=AT_CAFE, headers=staff_headers)

        response = await client.get("/api/v1/hr/attendance/current-shift", headers=staff_headers)
        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["shift_date"] == "2024-05-01"
        assert data["is_clocked_in"] is True
        assert data["total_hours"] == 4
        assert len(data["sessions"]) == 2

    async def test_shift_day_summary(self, client: AsyncClient, clock, admin_headers: dict, staff_headers: dict, staff: dict):
        await client.post("/api/v1/hr/attendance/clock-in", json=AT_CAFE, headers=staff_headers)
        clock.current = datetime(2024, 5, 1, 23, 0)
        await client.post("/api/v1/hr/attendance/clock-out", json=AT_CAFE, headers=staff_headers)

        response = await client.get(
            "/api/v1/hr/attendance/summary", params={"shift_date": "2024-05-01"}, headers=admin_headers
        )
        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["total_sessions"] == 1
        assert data["ot_sessions"] == 1
        assert data["total_overtime_hours"] == 2
        assert data["staff"][0]["staff_code"] == staff["staff_code"]
        assert data["staff"][0]["total_hours"] == 14
        assert data["active_staff"] == []

    async def test_sessions_require_admin(self, client: AsyncClient, staff_headers: dict, staff: dict):
        response = await client.get("/api/v1/hr/attendance/sessions", headers=staff_headers)
        assert response.status_code == status.HTTP_403_FORBIDDEN

    async def test_sessions_filtered_by_month(self, client: AsyncClient, clock, admin_headers: dict, staff_headers: dict, staff: dict):
        await client.post("/api/v1/hr/attendance/clock-in", json=AT_CAFE, headers=staff_headers)
        clock.current = datetime(2024, 5, 1, 17, 0)
        await client.post("/api/v1/hr/attendance/clock-out", json=AT_CAFE, headers=staff_headers)

        response = await client.get("/api/v1/hr/attendance/sessions", params={"shift_month": "2024-05"}, headers=admin_headers)
        assert response.json()["count"] == 1
        response = await client.get("/api/v1/hr/attendance/sessions", params={"shift_month": "2024-06"}, headers=admin_headers)
        assert response.json()["count"] == 0


@pytest.mark.asyncio
class TestSessionDeletion:
    """Test admin removal of work sessions"""

    async def _day(self, client: AsyncClient, clock, headers: dict, day: int) -> dict:
        clock.current = datetime(2024, 5, day, 9, 0)
        await client.post("/api/v1/hr/attendance/clock-in", json=AT_CAFE, headers=headers)
        clock.current = datetime(2024, 5, day, 17, 0)
        response = await client.post("/api/v1/hr/attendance/clock-out", json=AT_CAFE, headers=headers)
        return response.json()["session"]

    async def test_delete_selected_sessions(self, client: AsyncClient, clock, admin_headers: dict, staff_headers: dict, staff: dict):
        first = await self._day(client, clock, staff_headers, 1)
        await self._day(client, clock, staff_headers, 2)

        response = await client.delete(
            "/api/v1/hr/attendance/sessions", params={"session_ids": [first["id"], 999]}, headers=admin_headers
        )
        assert response.status_code == status.HTTP_200_OK
        assert response.json()["deleted"] == 1

        response = await client.get("/api/v1/hr/attendance/sessions", headers=admin_headers)
        data = response.json()
        assert data["count"] == 1
        assert data["data"][0]["id"] != first["id"]

        response = await client.get(
            "/api/v1/hr/attendance/summary", params={"shift_date": "2024-05-01"}, headers=admin_headers
        )
        assert response.json()["total_sessions"] == 0

    async def test_clear_shift_date(self, client: AsyncClient, clock, admin_headers: dict, staff_headers: dict, staff: dict):
        await self._day(client, clock, staff_headers, 1)
        await self._day(client, clock, staff_headers, 2)

        response = await client.delete("/api/v1/hr/attendance/sessions/by-date/2024-05-02", headers=admin_headers)
        assert response.json()["deleted"] == 1

        response = await client.get(
            "/api/v1/hr/attendance/sessions", params={"shift_date": "2024-05-02"}, headers=admin_headers
        )
        assert response.json()["count"] == 0
        response = await client.get(
            "/api/v1/hr/attendance/summary", params={"shift_date": "2024-05-02"}, headers=admin_headers
        )
        assert response.json()["staff"] == []
        response = await client.get(
            "/api/v1/hr/attendance/summary", params={"shift_date": "2024-05-01"}, headers=admin_headers
        )
        assert response.json()["total_sessions"] == 1

    async def test_deletion_requires_admin(self, client: AsyncClient, staff_headers: dict, staff: dict):
        response = await client.delete("/api/v1/hr/attendance/sessions/by-date/2024-05-01", headers=staff_headers)
        assert response.status_code == status.HTTP_403_FORBIDDEN


@pytest.mark.asyncio
class TestLongRunningSessions:
    async def test_session_open_over_ten_hours_is_flagged(self, client: AsyncClient, clock, admin_headers: dict, staff_headers: dict, staff: dict):
        await client.post("/api/v1/hr/attendance/clock-in", json=AT_CAFE, headers=staff_headers)

        clock.current = datetime(2024, 5, 1, 19, 0)
        response = await client.get(
            "/api/v1/hr/attendance/summary", params={"shift_date": "2024-05-01"}, headers=admin_headers
        )
        assert response.json()["long_running"] == []

        clock.current = datetime(2024, 5, 1, 20, 30)
        response = await client.get(
            "/api/v1/hr/attendance/summary", params={"shift_date": "2024-05-01"}, headers=admin_headers
        )
        data = response.json()
        assert len(data["active_staff"]) == 1
        assert len(data["long_running"]) == 1
        assert data["long_running"][0]["staff_code"] == staff["staff_code"]
        assert data["long_running"][0]["hours_open"] == 11.5
