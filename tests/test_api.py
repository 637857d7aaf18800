"""
HTTP surface tests through FastAPI's TestClient against in-memory SQLite.
"""
import json
from unittest.mock import AsyncMock, Mock

import pytest
from langchain_core.messages import AIMessage

from adwise.ai.recommendations import RecommendationService
from adwise.deps import get_rate_limit_redis, get_recommendation_service
from adwise.main import app
from tests.conftest import TEST_KEY_ID, register_and_login, sign

BILLBOARD = {
    "title": "MG Road Junction",
    "location": "MG Road, Bengaluru",
    "latitude": 12.9756,
    "longitude": 77.6050,
    "width": 12,
    "height": 6,
    "price_per_month": 50000,
    "traffic_score": "high",
    "daily_impressions": 20000,
}


@pytest.fixture
def owner_headers(client):
    return register_and_login(client, "owner@example.com", "owner", full_name="Olivia Owner")


@pytest.fixture
def customer_headers(client):
    return register_and_login(
        client, "customer@example.com", "customer", full_name="Chris Customer", company_name="Acme Foods"
    )


@pytest.fixture
def billboard_id(client, owner_headers):
    response = client.post("/api/billboards", json=BILLBOARD, headers=owner_headers)
    assert response.status_code == 201, response.text
    return response.json()["id"]


def _create_booking(client, headers, billboard_id, **overrides):
    body = {
        "billboard_id": billboard_id,
        "start_date": "2024-09-01",
        "end_date": "2024-09-11",
        "campaign_name": "Diwali Sale",
        "noc_category": "Food & Beverage",
    }
    body.update(overrides)
    return client.post("/api/bookings", json=body, headers=headers)


class TestAuth:
    def test_register_login_me(self, client, customer_headers):
        me = client.get("/api/auth/me", headers=customer_headers)
        assert me.status_code == 200
        assert me.json()["email"] == "customer@example.com"
        assert me.json()["role"] == "customer"
        assert "password" not in me.json()

    def test_duplicate_email(self, client, customer_headers):
        response = client.post(
            "/api/auth/register", json={"email": "customer@example.com", "password": "secret123"}
        )
        assert response.status_code == 409

    def test_wrong_password(self, client, customer_headers):
        response = client.post("/api/auth/login", data={"username": "customer@example.com", "password": "nope"})
        assert response.status_code == 401

    def test_missing_token(self, client):
        assert client.get("/api/auth/me").status_code == 401

    def test_garbage_token(self, client):
        assert client.get("/api/auth/me", headers={"Authorization": "Bearer garbage"}).status_code == 401


class TestBillboards:
    def test_owner_creates_and_lists(self, client, owner_headers, billboard_id):
        listing = client.get("/api/billboards").json()
        assert [b["id"] for b in listing] == [billboard_id]
        mine = client.get("/api/billboards/mine", headers=owner_headers).json()
        assert mine[0]["traffic_score"] == "high"

    def test_customer_cannot_create(self, client, customer_headers):
        response = client.post("/api/billboards", json=BILLBOARD, headers=customer_headers)
        assert response.status_code == 403

    def test_owner_updates_price(self, client, owner_headers, billboard_id):
        response = client.put(
            f"/api/billboards/{billboard_id}", json={"price_per_month": 60000}, headers=owner_headers
        )
        assert response.status_code == 200
        assert response.json()["price_per_month"] == 60000
        assert response.json()["title"] == BILLBOARD["title"]

    def test_other_owner_cannot_update(self, client, billboard_id):
        rival = register_and_login(client, "rival@example.com", "owner")
        response = client.put(f"/api/billboards/{billboard_id}", json={"price_per_month": 1}, headers=rival)
        assert response.status_code == 403

    def test_unknown_billboard(self, client):
        assert client.get("/api/billboards/999").status_code == 404

    def test_non_positive_price_rejected(self, client, owner_headers):
        response = client.post("/api/billboards", json={**BILLBOARD, "price_per_month": 0}, headers=owner_headers)
        assert response.status_code == 422


class TestBookingFlow:
    def test_end_to_end_payment(self, client, owner_headers, customer_headers, billboard_id, razorpay_client):
        created = _create_booking(client, customer_headers, billboard_id)
        assert created.status_code == 201, created.text
        booking = created.json()
        assert booking["total_cost"] == 16667
        assert booking["noc_status"] == "pending"
        assert booking["billboard"]["title"] == BILLBOARD["title"]
        booking_id = booking["id"]

        blocked = client.post(f"/api/bookings/{booking_id}/pay", headers=customer_headers)
        assert blocked.status_code == 409

        decided = client.post(f"/api/bookings/{booking_id}/noc", json={"approved": True}, headers=owner_headers)
        assert decided.status_code == 200
        assert decided.json()["noc_status"] == "approved"

        pdf = client.get(f"/api/bookings/{booking_id}/noc.pdf", headers=customer_headers)
        assert pdf.status_code == 200
        assert pdf.headers["content-type"] == "application/pdf"
        assert pdf.content.startswith(b"%PDF")

        order = client.post(f"/api/bookings/{booking_id}/pay", headers=customer_headers).json()
        assert order["amount"] == 1666700
        assert order["key_id"] == TEST_KEY_ID
        assert razorpay_client.order.create.call_count == 1

        callback = {
            "razorpay_order_id": order["order_id"],
            "razorpay_payment_id": "pay_1",
            "razorpay_signature": "forged",
            "booking_id": booking_id,
        }
        forged = client.post("/api/payments/verify", json=callback, headers=customer_headers)
        assert forged.status_code == 400
        assert forged.json()["success"] is False
        assert forged.json()["code"] == "verification_failed"
        assert "contact support" in forged.json()["hint"]

        callback["razorpay_signature"] = sign(order["order_id"], "pay_1")
        verified = client.post("/api/payments/verify", json=callback, headers=customer_headers)
        assert verified.status_code == 200
        assert verified.json()["success"] is True
        campaign_id = verified.json()["campaign_id"]

        repeated = client.post("/api/payments/verify", json=callback, headers=customer_headers)
        assert repeated.status_code == 200
        assert repeated.json()["already_processed"] is True
        assert repeated.json()["campaign_id"] == campaign_id

        paid = client.get(f"/api/bookings/{booking_id}", headers=customer_headers).json()
        assert paid["payment_status"] == "completed"
        assert paid["status"] == "confirmed"
        assert paid["campaign_id"] == campaign_id

        campaigns = client.get("/api/campaigns", headers=customer_headers).json()
        assert len(campaigns) == 1
        assert campaigns[0]["budget"] == 16667
        assert campaigns[0]["status"] == "active"

        for status in ("active", "completed"):
            moved = client.post(f"/api/bookings/{booking_id}/status", json={"status": status}, headers=owner_headers)
            assert moved.status_code == 200
            assert moved.json()["status"] == status

        customer_stats = client.get("/api/dashboard/stats", headers=customer_headers).json()
        assert customer_stats["role"] == "customer"
        assert customer_stats["total_bookings"] == 1
        assert customer_stats["total_spent"] == 16667
        # the 2024 run window is over, so the campaign no longer counts as active
        assert customer_stats["active_campaigns"] == 0
        assert [b["id"] for b in customer_stats["recent_activity"]] == [booking_id]

        owner_stats = client.get("/api/dashboard/stats", headers=owner_headers).json()
        assert owner_stats["total_billboards"] == 1
        assert owner_stats["total_revenue"] == 16667
        assert owner_stats["recent_activity"][0]["billboard"]["title"] == BILLBOARD["title"]

    def test_invalid_range(self, client, customer_headers, billboard_id):
        response = _create_booking(client, customer_headers, billboard_id, end_date="2024-09-01")
        assert response.status_code == 422
        assert client.get("/api/bookings", headers=customer_headers).json() == []

    def test_skipping_status_is_conflict(self, client, owner_headers, customer_headers, billboard_id):
        booking_id = _create_booking(client, customer_headers, billboard_id, noc_category=None).json()["id"]
        response = client.post(f"/api/bookings/{booking_id}/status", json={"status": "active"}, headers=owner_headers)
        assert response.status_code == 409
        assert response.json()["detail"]["code"] == "invalid_transition"

    def test_unknown_status_value(self, client, owner_headers, customer_headers, billboard_id):
        booking_id = _create_booking(client, customer_headers, billboard_id).json()["id"]
        response = client.post(f"/api/bookings/{booking_id}/status", json={"status": "archived"}, headers=owner_headers)
        assert response.status_code == 422

    def test_rejected_noc(self, client, owner_headers, customer_headers, billboard_id):
        booking_id = _create_booking(client, customer_headers, billboard_id).json()["id"]
        rejected = client.post(f"/api/bookings/{booking_id}/noc", json={"approved": False}, headers=owner_headers)
        assert rejected.json()["status"] == "cancelled"

        again = client.post(f"/api/bookings/{booking_id}/noc", json={"approved": True}, headers=owner_headers)
        assert again.status_code == 409
        assert client.get(f"/api/bookings/{booking_id}/noc.pdf", headers=owner_headers).status_code == 409

    def test_cancelled_booking_noc_and_certificate_refused(
        self, client, owner_headers, customer_headers, billboard_id
    ):
        booking_id = _create_booking(client, customer_headers, billboard_id).json()["id"]
        client.post(f"/api/bookings/{booking_id}/status", json={"status": "cancelled"}, headers=owner_headers)

        decided = client.post(f"/api/bookings/{booking_id}/noc", json={"approved": True}, headers=owner_headers)
        assert decided.status_code == 409
        assert decided.json()["detail"]["code"] == "invalid_transition"
        assert client.get(f"/api/bookings/{booking_id}/noc.pdf", headers=customer_headers).status_code == 409

    def test_gateway_outage_on_pay(self, client, customer_headers, billboard_id, razorpay_client):
        booking_id = _create_booking(client, customer_headers, billboard_id, noc_category=None).json()["id"]
        razorpay_client.order.create.side_effect = RuntimeError("network down")

        response = client.post(f"/api/bookings/{booking_id}/pay", headers=customer_headers)
        assert response.status_code == 502
        detail = response.json()["detail"]
        assert detail["code"] == "gateway_unavailable"
        assert "not attempted" in detail["hint"]
        assert "network down" not in response.text
        assert client.get(f"/api/bookings/{booking_id}", headers=customer_headers).json()["razorpay_order_id"] is None

    def test_dashboard_lists_five_latest_bookings(self, client, owner_headers, customer_headers, billboard_id):
        ids = [
            _create_booking(client, customer_headers, billboard_id, campaign_name=f"Run {n}").json()["id"]
            for n in range(6)
        ]
        for headers in (customer_headers, owner_headers):
            stats = client.get("/api/dashboard/stats", headers=headers).json()
            assert stats["total_bookings"] == 6
            assert [b["id"] for b in stats["recent_activity"]] == ids[::-1][:5]

    def test_stranger_cannot_see_booking(self, client, customer_headers, billboard_id):
        booking_id = _create_booking(client, customer_headers, billboard_id).json()["id"]
        stranger = register_and_login(client, "someone@example.com", "customer")
        assert client.get(f"/api/bookings/{booking_id}", headers=stranger).status_code == 403
        assert client.post(f"/api/bookings/{booking_id}/pay", headers=stranger).status_code == 403


class TestPaymentsApi:
    def test_create_order(self, client, customer_headers):
        response = client.post(
            "/api/payments/create-order",
            json={"amount": 50000, "receipt": "rcpt_1", "notes": {"purpose": "test"}},
            headers=customer_headers,
        )
        assert response.status_code == 200
        assert response.json()["order"]["amount"] == 50000
        assert response.json()["key_id"] == TEST_KEY_ID

    def test_create_order_failure_is_500(self, client, customer_headers):
        response = client.post("/api/payments/create-order", json={"amount": 0}, headers=customer_headers)
        assert response.status_code == 500
        assert "error" in response.json()

    def test_verify_missing_fields(self, client, customer_headers):
        response = client.post("/api/payments/verify", json={"booking_id": 1}, headers=customer_headers)
        assert response.status_code == 422
        assert response.json()["success"] is False

    def test_health_and_status(self, client):
        health = client.get("/api/payments/health").json()
        assert health["status"] == "healthy"
        assert health["razorpay_configured"] is True
        assert client.get("/api/payments/gateway-status").json()["key_id"] == TEST_KEY_ID


class TestIntegrations:
    def test_traffic_without_key(self, client, owner_headers):
        response = client.post("/api/traffic", json={"latitude": 1.0, "longitude": 2.0}, headers=owner_headers)
        assert response.status_code == 502

    def test_recommendations(self, client, customer_headers, billboard_id):
        reply = {
            "recommendations": [{"billboard_id": billboard_id, "match_score": 88, "reason": "Busy junction"}],
            "summary": "Go big",
        }
        llm = Mock()
        llm.ainvoke = AsyncMock(return_value=AIMessage(content=json.dumps(reply)))
        app.dependency_overrides[get_recommendation_service] = lambda: RecommendationService(llm=llm)

        response = client.post("/api/ai/recommendations", json={"budget": 60000}, headers=customer_headers)
        assert response.status_code == 200, response.text
        body = response.json()
        assert body["summary"] == "Go big"
        assert body["recommendations"][0]["billboard"]["id"] == billboard_id

    def test_recommendations_disabled(self, client, customer_headers, billboard_id):
        response = client.post("/api/ai/recommendations", json={}, headers=customer_headers)
        assert response.status_code == 503

    def test_recommendations_rate_limited(self, client, customer_headers):
        redis = AsyncMock()
        redis.incr.return_value = 11
        app.dependency_overrides[get_rate_limit_redis] = lambda: redis
        response = client.post("/api/ai/recommendations", json={}, headers=customer_headers)
        assert response.status_code == 429

    def test_owner_cannot_request_recommendations(self, client, owner_headers):
        assert client.post("/api/ai/recommendations", json={}, headers=owner_headers).status_code == 403


def test_root_and_health(client):
    assert client.get("/").status_code == 200
    assert client.get("/api/health").json()["ok"] is True
