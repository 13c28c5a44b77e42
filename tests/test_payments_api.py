"""
API tests for checkout, payment and receipts
"""

import pytest
from decimal import Decimal
from httpx import AsyncClient


async def create_booking(client: AsyncClient, headers: dict, event_id: str, quantity: int = 1) -> dict:
    response = await client.post(
        "/api/v1/bookings/",
        headers=headers,
        json={"event_id": event_id, "quantity": quantity}
    )
    assert response.status_code == 201
    return response.json()


@pytest.mark.integration
@pytest.mark.asyncio
class TestCheckout:

    async def test_checkout_quote(self, client: AsyncClient, event, customer_headers):
        booking = await create_booking(client, customer_headers, str(event.id), quantity=2)

        response = await client.get(f"/api/v1/payments/checkout/{booking['id']}", headers=customer_headers)

        assert response.status_code == 200
        data = response.json()
        assert Decimal(data["subtotal"]) == Decimal("80.00")
        assert Decimal(data["service_fee"]) == Decimal("4.00")
        assert Decimal(data["amount_due"]) == Decimal("84.00")
        assert data["points_to_earn"] == 84
        assert data["quantity"] == 2

    async def test_checkout_other_customer(self, client: AsyncClient, event, customer_headers, other_customer_headers):
        booking = await create_booking(client, customer_headers, str(event.id))
        response = await client.get(f"/api/v1/payments/checkout/{booking['id']}", headers=other_customer_headers)
        assert response.status_code == 404


@pytest.mark.integration
@pytest.mark.asyncio
class TestProcessPayment:

    async def test_pay_booking(self, client: AsyncClient, event, customer_headers):
        booking = await create_booking(client, customer_headers, str(event.id))

        response = await client.post(
            "/api/v1/payments/process",
            headers=customer_headers,
            json={"booking_id": booking["id"], "amount": "42.00", "payment_method": "paypal"}
        )

        assert response.status_code == 200
        data = response.json()
        assert data["booking_reference"] == booking["booking_reference"]
        assert data["ticket_count"] == 1
        assert data["loyalty_points_earned"] == 42
        assert data["payment"]["status"] == "completed"
        assert data["payment"]["payment_method"] == "paypal"
        assert data["payment"]["transaction_id"].startswith("TXN")
        assert Decimal(data["payment"]["amount"]) == Decimal("42.00")
        assert data["tickets"][0]["ticket_number"] == f"TKT-{booking['booking_reference']}-001"

        response = await client.get(f"/api/v1/bookings/{booking['id']}", headers=customer_headers)
        detail = response.json()
        assert detail["status"] == "confirmed"
        assert detail["confirmed_at"] is not None
        assert len(detail["tickets"]) == 1
        assert detail["payment"]["id"] == data["payment"]["id"]

        response = await client.get("/api/v1/users/profile", headers=customer_headers)
        assert response.json()["loyalty_points"] == 42

        response = await client.get(f"/api/v1/events/{booking['event']['id']}")
        assert response.json()["available_tickets"] == 99

    async def test_second_payment_rejected(self, client: AsyncClient, event, customer_headers):
        booking = await create_booking(client, customer_headers, str(event.id))
        payload = {"booking_id": booking["id"], "amount": "42.00"}

        first = await client.post("/api/v1/payments/process", headers=customer_headers, json=payload)
        second = await client.post("/api/v1/payments/process", headers=customer_headers, json=payload)

        assert first.status_code == 200
        assert second.status_code == 409
        assert second.json()["error"]["code"] == "INVALID_BOOKING_STATE"

        response = await client.get("/api/v1/users/profile", headers=customer_headers)
        assert response.json()["loyalty_points"] == 42

        response = await client.get(f"/api/v1/tickets/booking/{booking['id']}", headers=customer_headers)
        assert len(response.json()) == 1

    async def test_wrong_amount(self, client: AsyncClient, event, customer_headers):
        booking = await create_booking(client, customer_headers, str(event.id))

        response = await client.post(
            "/api/v1/payments/process",
            headers=customer_headers,
            json={"booking_id": booking["id"], "amount": "40.00"}
        )

        assert response.status_code == 402
        assert response.json()["error"]["code"] == "PAYMENT_FAILED"

        response = await client.get(f"/api/v1/bookings/{booking['id']}", headers=customer_headers)
        assert response.json()["status"] == "pending"
        assert response.json()["tickets"] == []

    async def test_pay_cancelled_booking(self, client: AsyncClient, event, customer_headers):
        booking = await create_booking(client, customer_headers, str(event.id))
        await client.post(f"/api/v1/bookings/{booking['id']}/cancel", headers=customer_headers)

        response = await client.post(
            "/api/v1/payments/process",
            headers=customer_headers,
            json={"booking_id": booking["id"], "amount": "42.00"}
        )
        assert response.status_code == 409

    async def test_pay_someone_elses_booking(self, client: AsyncClient, event, customer_headers, other_customer_headers):
        booking = await create_booking(client, customer_headers, str(event.id))
        response = await client.post(
            "/api/v1/payments/process",
            headers=other_customer_headers,
            json={"booking_id": booking["id"], "amount": "42.00"}
        )
        assert response.status_code == 404


@pytest.mark.integration
@pytest.mark.asyncio
class TestPaymentHistory:

    async def test_history_and_receipt(self, client: AsyncClient, make_event, customer_headers, other_customer_headers):
        first = await make_event(title="Jazz Night")
        second = await make_event(title="Rock Night", ticket_price=Decimal("20.00"))
        first_id, second_id = str(first.id), str(second.id)

        paid = []
        for event_id, quantity, amount in ((first_id, 1, "42.00"), (second_id, 2, "42.00")):
            booking = await create_booking(client, customer_headers, event_id, quantity)
            response = await client.post(
                "/api/v1/payments/process",
                headers=customer_headers,
                json={"booking_id": booking["id"], "amount": amount}
            )
            assert response.status_code == 200
            paid.append(response.json()["payment"])

        response = await client.get("/api/v1/payments/history", headers=customer_headers)

        assert response.status_code == 200
        data = response.json()
        assert data["total_payments"] == 2
        assert data["successful_payments"] == 2
        assert data["failed_payments"] == 0
        assert Decimal(data["total_amount_paid"]) == Decimal("84.00")
        assert {p["event_title"] for p in data["payments"]} == {"Jazz Night", "Rock Night"}

        response = await client.get(
            "/api/v1/payments/history",
            headers=customer_headers,
            params={"search": "rock"}
        )
        assert [p["event_title"] for p in response.json()["payments"]] == ["Rock Night"]

        response = await client.get("/api/v1/payments/history", headers=other_customer_headers)
        assert response.json()["total_payments"] == 0

        response = await client.get(f"/api/v1/payments/{paid[0]['id']}/receipt", headers=customer_headers)
        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/plain")
        assert paid[0]["transaction_id"] in response.text
        assert "Jazz Night" in response.text
        assert "Total paid:   42.00" in response.text

        response = await client.get(f"/api/v1/payments/{paid[0]['id']}/receipt", headers=other_customer_headers)
        assert response.status_code == 404


@pytest.mark.integration
@pytest.mark.asyncio
class TestCustomerDashboard:

    async def test_dashboard_totals(self, client: AsyncClient, make_event, customer_headers, organizer_headers):
        first = await make_event(title="Jazz Night")
        second = await make_event(title="Rock Night", days_ahead=45)

        for event_id, quantity, amount in ((str(first.id), 1, "42.00"), (str(second.id), 2, "84.00")):
            booking = await create_booking(client, customer_headers, event_id, quantity=quantity)
            response = await client.post(
                "/api/v1/payments/process",
                headers=customer_headers,
                json={"booking_id": booking["id"], "amount": amount}
            )
            assert response.status_code == 200
        await create_booking(client, customer_headers, str(first.id), quantity=3)

        response = await client.get("/api/v1/users/dashboard", headers=customer_headers)

        assert response.status_code == 200
        data = response.json()
        assert data["loyalty_points"] == 126
        assert data["upcoming_events"] == 2
        assert data["tickets_purchased"] == 3
        assert Decimal(data["total_spent"]) == Decimal("126.00")
        assert len(data["recent_bookings"]) == 3
        assert {b["status"] for b in data["recent_bookings"]} == {"confirmed", "pending"}

        response = await client.get("/api/v1/users/dashboard", headers=organizer_headers)
        assert response.status_code == 403

    async def test_empty_dashboard(self, client: AsyncClient, customer_headers):
        response = await client.get("/api/v1/users/dashboard", headers=customer_headers)
        data = response.json()
        assert data["loyalty_points"] == 0
        assert data["tickets_purchased"] == 0
        assert Decimal(data["total_spent"]) == Decimal("0.00")
        assert data["recent_bookings"] == []
