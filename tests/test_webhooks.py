"""Stripe webhook reconciliation of pending orders."""

import json

from storefront.api import webhooks
from storefront.db.models import Order
from tests.conftest import cart_line
from tests.fakes import VALID_SIGNATURE


def _event(event_type: str, obj: dict) -> bytes:
    return json.dumps({"id": "evt_test", "type": event_type, "data": {"object": obj}}).encode()


def _post(client, body: bytes, signature=VALID_SIGNATURE):
    headers = {"Content-Type": "application/json"}
    if signature is not None:
        headers["Stripe-Signature"] = signature
    return client.post("/api/webhooks/stripe", content=body, headers=headers)


def _place(client) -> dict:
    return client.post("/api/checkout", json={"items": [cart_line(1, 79.00)], "email": "a@b.com"}).json()


class TestSignature:

    def test_missing_header(self, client):
        resp = _post(client, _event("checkout.session.completed", {"id": "cs_x"}), signature=None)
        assert resp.status_code == 400
        assert resp.json() == {"error": "Missing stripe-signature header"}

    def test_bad_signature(self, client):
        resp = _post(client, _event("checkout.session.completed", {"id": "cs_x"}), signature="t=1,v1=forged")
        assert resp.status_code == 400
        assert resp.json() == {"error": "Webhook signature verification failed"}


class TestSessionCompleted:

    def test_marks_order_paid(self, client, db, catalog):
        placed = _place(client)
        session = {
            "id": placed["sessionId"],
            "payment_intent": "pi_123",
            "customer_email": "billing@b.com",
            "shipping_details": {
                "name": "A B",
                "address": {
                    "line1": "Hauptstr. 1", "line2": None, "city": "Berlin",
                    "state": None, "postal_code": "10115", "country": "DE",
                },
            },
        }
        resp = _post(client, _event("checkout.session.completed", session))
        assert resp.status_code == 200
        assert resp.json() == {"received": True}

        order = db.get(Order, placed["orderId"])
        assert order.status == "paid"
        assert order.stripe_payment_id == "pi_123"
        assert order.email == "billing@b.com"
        assert order.shipping_address["city"] == "Berlin"
        assert order.shipping_address["country"] == "DE"

    def test_reads_collected_information_shipping(self, client, db, catalog):
        placed = _place(client)
        session = {
            "id": placed["sessionId"],
            "payment_intent": {"id": "pi_456"},
            "customer_email": None,
            "collected_information": {
                "shipping_details": {"address": {"line1": "Rue 2", "city": "Paris", "country": "FR"}},
            },
        }
        _post(client, _event("checkout.session.completed", session))

        order = db.get(Order, placed["orderId"])
        assert order.stripe_payment_id == "pi_456"
        assert order.email == "a@b.com"
        assert order.shipping_address["city"] == "Paris"
        assert order.shipping_address["postal_code"] is None

    def test_unknown_session_is_acknowledged(self, client):
        resp = _post(client, _event("checkout.session.completed", {"id": "cs_unknown"}))
        assert resp.status_code == 200
        assert resp.json() == {"received": True}


class TestSessionExpired:

    def test_cancels_pending_order(self, client, db, catalog):
        placed = _place(client)
        _post(client, _event("checkout.session.expired", {"id": placed["sessionId"]}))
        assert db.get(Order, placed["orderId"]).status == "cancelled"

    def test_leaves_paid_order_alone(self, client, db, catalog):
        placed = _place(client)
        _post(client, _event("checkout.session.completed", {"id": placed["sessionId"], "payment_intent": "pi_1"}))
        _post(client, _event("checkout.session.expired", {"id": placed["sessionId"]}))
        assert db.get(Order, placed["orderId"]).status == "paid"


class TestOtherEvents:

    def test_payment_failed_is_acknowledged(self, client):
        resp = _post(client, _event("payment_intent.payment_failed", {"id": "pi_failed"}))
        assert resp.status_code == 200

    def test_unhandled_type_is_acknowledged(self, client):
        resp = _post(client, _event("customer.created", {"id": "cus_1"}))
        assert resp.json() == {"received": True}


class TestMalformedEvents:

    def test_event_without_type(self, client):
        resp = _post(client, json.dumps({"id": "evt_test"}).encode())
        assert resp.status_code == 500
        assert resp.json() == {"error": "Webhook handler failed"}

    def test_event_without_object(self, client):
        resp = _post(client, json.dumps({"id": "evt_test", "type": "checkout.session.completed", "data": {}}).encode())
        assert resp.status_code == 500
        assert resp.json() == {"error": "Webhook handler failed"}


class TestDispatch:

    def test_database_work_runs_in_threadpool(self, client, db, catalog, monkeypatch):
        calls = []

        async def recording_threadpool(func, *args):
            calls.append(func)
            return func(*args)

        monkeypatch.setattr(webhooks, "run_in_threadpool", recording_threadpool)
        placed = _place(client)
        _post(client, _event("checkout.session.expired", {"id": placed["sessionId"]}))

        assert calls == [webhooks.dispatch_event]
        assert db.get(Order, placed["orderId"]).status == "cancelled"
