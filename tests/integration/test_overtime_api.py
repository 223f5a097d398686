import pytest
from datetime import datetime
from decimal import Decimal
from httpx import AsyncClient
from fastapi import status
from tests.integration.conftest import AT_CAFE

async def work_session(client: AsyncClient, clock, headers: dict, start: datetime, end: datetime) -> dict:
    clock.current = start
    await client.post("/api/v1/hr/attendance/clock-in", json=AT_CAFE, headers=headers)
    clock.current = end
    response = await client.post("/api/v1/hr/attendance/clock-out", json=AT_CAFE, headers=headers)
    assert response.status_code == status.HTTP_200_OK
    return response.json()

@pytest.mark.asyncio
class TestOvertimeApproval:
    """Test admin processing of OT requests"""

    async def test_approve(self, client: AsyncClient, clock, admin_headers: dict, staff_headers: dict, staff: dict):
        result = await work_session(client, clock, staff_headers, datetime(2024, 5, 1, 8, 0), datetime(2024, 5, 1, 23, 0))
        response = await client.put(
            f"/api/v1/hr/overtime/{result['overtime_request_id']}/approve", headers=admin_headers
        )
        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["status"] == "approved"
        assert Decimal(data["ot_hours"]) == 3
        assert Decimal(data["ot_amount"]) == 600
        assert data["session_id"] == result["session"]["id"]

    async def test_reject(self, client: AsyncClient, clock, admin_headers: dict, staff_headers: dict, staff: dict):
        result = await work_session(client, clock, staff_headers, datetime(2024, 5, 1, 8, 0), datetime(2024, 5, 1, 21, 0))
        url = f"/api/v1/hr/overtime/{result['overtime_request_id']}/reject"
        response = await client.put(url, json={"rejection_reason": "Not scheduled"}, headers=admin_headers)
        data = response.json()
        assert data["status"] == "rejected"
        assert data["rejection_reason"] == "Not scheduled"

        response = await client.put(url, json={"rejection_reason": "Again"}, headers=admin_headers)
        assert response.status_code == status.HTTP_400_BAD_REQUEST

    async def test_stats(self, client: AsyncClient, clock, admin_headers: dict, staff_headers: dict, staff: dict):
        first = await work_session(client, clock, staff_headers, datetime(2024, 5, 1, 6, 0), datetime(2024, 5, 1, 20, 0))
        second = await work_session(client, clock, staff_headers, datetime(2024, 5, 2, 6, 0), datetime(2024, 5, 2, 22, 0))
        await work_session(client, clock, staff_headers, datetime(2024, 5, 3, 6, 0), datetime(2024, 5, 3, 19, 0))
        await client.put(f"/api/v1/hr/overtime/{first['overtime_request_id']}/approve", headers=admin_headers)
        await client.put(f"/api/v1/hr/overtime/{second['overtime_request_id']}/approve", headers=admin_headers)

        response = await client.get("/api/v1/hr/overtime/stats", params={"shift_month": "2024-05"}, headers=admin_headers)
        stats = response.json()
        assert stats["total"] == 3
        assert stats["approved"] == 2
        assert stats["pending"] == 1
        assert Decimal(stats["total_ot_hours"]) == 6
        assert Decimal(stats["total_ot_amount"]) == 1200
        assert stats["approval_rate"] == 67
        assert Decimal(stats["average_ot_hours"]) == 3
        assert Decimal(stats["average_ot_amount"]) == 600

    async def test_list_filters_by_status(self, client: AsyncClient, clock, admin_headers: dict, staff_headers: dict, staff: dict):
        await work_session(client, clock, staff_headers, datetime(2024, 5, 1, 6, 0), datetime(2024, 5, 1, 20, 0))
        response = await client.get("/api/v1/hr/overtime/", params={"status": "pending"}, headers=admin_headers)
        assert response.json()["count"] == 1
        response = await client.get("/api/v1/hr/overtime/", params={"status": "approved"}, headers=admin_headers)
        assert response.json()["count"] == 0
