"""
API tests for tickets: listing, QR/PDF downloads and door verification
"""

import base64
import pytest
from datetime import datetime, timedelta, timezone
from httpx import AsyncClient
from sqlalchemy import update

from eventhub.models.event import Event

PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"


async def paid_booking(client: AsyncClient, headers: dict, event_id: str, quantity: int = 2) -> dict:
    booking = (await client.post(
        "/api/v1/bookings/",
        headers=headers,
        json={"event_id": event_id, "quantity": quantity}
    )).json()
    checkout = (await client.get(f"/api/v1/payments/checkout/{booking['id']}", headers=headers)).json()
    response = await client.post(
        "/api/v1/payments/process",
        headers=headers,
        json={"booking_id": booking["id"], "amount": checkout["amount_due"]}
    )
    assert response.status_code == 200
    return response.json()


@pytest.mark.integration
@pytest.mark.asyncio
class TestTicketDownloads:

    async def test_my_tickets(self, client: AsyncClient, event, customer_headers, other_customer_headers):
        result = await paid_booking(client, customer_headers, str(event.id), quantity=3)

        response = await client.get("/api/v1/tickets/my", headers=customer_headers)

        assert response.status_code == 200
        body = response.json()
        assert body["pagination"]["total"] == 3
        numbers = sorted(t["ticket_number"] for t in body["data"])
        reference = result["booking_reference"]
        assert numbers == [f"TKT-{reference}-00{i}" for i in (1, 2, 3)]
        assert all(t["event_title"] == "Test Concert" for t in body["data"])
        assert all(t["venue_name"] == "Test Arena" for t in body["data"])

        response = await client.get("/api/v1/tickets/my", headers=other_customer_headers)
        assert response.json()["pagination"]["total"] == 0

    async def test_pending_booking_has_no_tickets(self, client: AsyncClient, event, customer_headers):
        booking = (await client.post(
            "/api/v1/bookings/",
            headers=customer_headers,
            json={"event_id": str(event.id), "quantity": 2}
        )).json()
        response = await client.get(f"/api/v1/tickets/booking/{booking['id']}", headers=customer_headers)
        assert response.status_code == 200
        assert response.json() == []

    async def test_qr_and_pdf(self, client: AsyncClient, event, customer_headers, other_customer_headers):
        result = await paid_booking(client, customer_headers, str(event.id), quantity=1)
        ticket = result["tickets"][0]

        response = await client.get(f"/api/v1/tickets/{ticket['id']}/qr", headers=customer_headers)
        assert response.status_code == 200
        assert response.headers["content-type"] == "image/png"
        assert response.content.startswith(PNG_SIGNATURE)

        response = await client.get(f"/api/v1/tickets/{ticket['id']}/qr/base64", headers=customer_headers)
        assert response.status_code == 200
        data = response.json()
        assert data["ticket_number"] == ticket["ticket_number"]
        assert data["qr_payload"] == ticket["qr_payload"]
        assert data["media_type"] == "image/png"
        assert base64.b64decode(data["image_base64"]).startswith(PNG_SIGNATURE)

        response = await client.get(f"/api/v1/tickets/{ticket['id']}/qr/base64", headers=other_customer_headers)
        assert response.status_code == 404

        response = await client.get(f"/api/v1/tickets/{ticket['id']}/pdf", headers=customer_headers)
        assert response.status_code == 200
        assert response.headers["content-type"] == "application/pdf"
        assert response.content.startswith(b"%PDF")
        assert ticket["ticket_number"] in response.headers["content-disposition"]

        response = await client.get(f"/api/v1/tickets/{ticket['id']}/qr", headers=other_customer_headers)
        assert response.status_code == 404


@pytest.mark.integration
@pytest.mark.asyncio
class TestTicketVerification:

    async def test_check_in_once(self, client: AsyncClient, event, customer_headers, organizer_headers):
        result = await paid_booking(client, customer_headers, str(event.id), quantity=1)
        ticket = result["tickets"][0]

        response = await client.post(
            "/api/v1/tickets/verify",
            headers=organizer_headers,
            json={"payload": ticket["qr_payload"], "check_in": False}
        )
        assert response.status_code == 200
        assert response.json()["result"] == "valid"
        assert response.json()["ticket_status"] == "active"

        response = await client.post(
            "/api/v1/tickets/verify",
            headers=organizer_headers,
            json={"payload": ticket["qr_payload"]}
        )
        data = response.json()
        assert data["valid"] is True
        assert data["result"] == "checked_in"
        assert data["ticket_status"] == "used"
        assert data["used_at"] is not None

        response = await client.post(
            "/api/v1/tickets/verify",
            headers=organizer_headers,
            json={"payload": ticket["qr_payload"]}
        )
        assert response.json()["valid"] is False
        assert response.json()["result"] == "already_used"

    async def test_customer_cannot_verify(self, client: AsyncClient, event, customer_headers):
        result = await paid_booking(client, customer_headers, str(event.id), quantity=1)
        response = await client.post(
            "/api/v1/tickets/verify",
            headers=customer_headers,
            json={"payload": result["tickets"][0]["qr_payload"]}
        )
        assert response.status_code == 403

    async def test_other_organizer_cannot_verify(
        self, client: AsyncClient, event, customer_headers, other_organizer_headers, admin_headers
    ):
        result = await paid_booking(client, customer_headers, str(event.id), quantity=1)
        payload = result["tickets"][0]["qr_payload"]

        response = await client.post(
            "/api/v1/tickets/verify",
            headers=other_organizer_headers,
            json={"payload": payload}
        )
        assert response.status_code == 403

        response = await client.post(
            "/api/v1/tickets/verify",
            headers=admin_headers,
            json={"payload": payload}
        )
        assert response.json()["result"] == "checked_in"

    async def test_tampered_payload(self, client: AsyncClient, event, customer_headers, organizer_headers):
        result = await paid_booking(client, customer_headers, str(event.id), quantity=1)
        payload = result["tickets"][0]["qr_payload"]
        forged = payload[:-4] + ("0000" if not payload.endswith("0000") else "1111")

        response = await client.post(
            "/api/v1/tickets/verify",
            headers=organizer_headers,
            json={"payload": forged}
        )

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "INVALID_QR_CODE"

    async def test_event_date_passed(self, client: AsyncClient, db_session, event, customer_headers, organizer_headers):
        event_id = event.id
        result = await paid_booking(client, customer_headers, str(event_id), quantity=1)
        payload = result["tickets"][0]["qr_payload"]

        await db_session.execute(
            update(Event)
            .where(Event.id == event_id)
            .values(starts_at=datetime.now(timezone.utc) - timedelta(days=40))
        )
        await db_session.commit()

        response = await client.post(
            "/api/v1/tickets/verify",
            headers=organizer_headers,
            json={"payload": payload, "check_in": False}
        )
        assert response.json()["valid"] is False
        assert response.json()["result"] == "expired"
        assert response.json()["ticket_status"] == "active"

        response = await client.post(
            "/api/v1/tickets/verify",
            headers=organizer_headers,
            json={"payload": payload}
        )
        data = response.json()
        assert data["valid"] is False
        assert data["result"] == "expired"
        assert data["message"] == "Event date has passed"
        assert data["ticket_status"] == "expired"
        assert data["used_at"] is None
