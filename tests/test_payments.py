"""
Plan checkout: order creation, signature verification, plan activation and invoicing.
"""

import pytest

from jobzee.main import app
from jobzee.services.mongo_service import utcnow
from jobzee.services.payment_gateway import RazorpayClient, compute_signature, get_razorpay_client
from jobzee.services.pricing_service import seed_default_plans

KEY_ID = "rzp_test_key"
KEY_SECRET = "rzp_test_secret"


class FakeRazorpay(RazorpayClient):
    """Records orders instead of calling the Orders API."""

    def __init__(self):
        super().__init__(KEY_ID, KEY_SECRET)
        self.orders = []

    async def create_order(self, amount_paise, receipt, notes=None, currency="INR"):
        order = {"id": f"order_{len(self.orders) + 1}", "amount": amount_paise, "currency": currency,
                 "receipt": receipt, "notes": notes or {}, "status": "created"}
        self.orders.append(order)
        return order


@pytest.fixture
def gateway(db):
    seed_default_plans()
    fake = FakeRazorpay()
    app.dependency_overrides[get_razorpay_client] = lambda: fake
    return fake


@pytest.fixture
def pending_order(db, gateway, make_employer):
    employer, headers = make_employer(is_verified=True)
    now = utcnow()
    db.payments.insert_one({
        "employer_id": employer["_id"], "plan_id": "basic", "amount": 2499, "currency": "INR",
        "razorpay_order_id": "order_1", "status": "initiated", "initiated_at": now, "created_at": now,
    })
    db.subscriptions.insert_one({
        "employer_id": employer["_id"], "plan_id": "basic", "period": "monthly", "amount": 2499,
        "order_id": "order_1", "status": "created", "created_at": now,
    })
    return employer, headers


def _checkout(order_id, payment_id, **fields):
    return {
        "razorpay_order_id": order_id,
        "razorpay_payment_id": payment_id,
        "razorpay_signature": compute_signature(order_id, payment_id, KEY_SECRET),
        **fields,
    }


class TestCreateOrder:

    def test_creates_order_and_pending_records(self, client, db, gateway, make_employer):
        employer, headers = make_employer()

        response = client.post("/api/payments/create-order", headers=headers, json={"plan_id": "premium"})

        assert response.status_code == 200
        body = response.json()
        assert body["key"] == KEY_ID
        assert body["order"]["amount"] == 499900
        assert body["order"]["receipt"].startswith("plan_premium_")
        assert body["plan"]["job_posting_limit"] == 20

        payment = db.payments.find_one({"employer_id": employer["_id"]})
        assert payment["status"] == "initiated"
        assert payment["razorpay_order_id"] == "order_1"
        assert db.subscriptions.find_one({"order_id": "order_1"})["status"] == "created"

    def test_missing_plan_id(self, client, gateway, make_employer):
        _, headers = make_employer()
        response = client.post("/api/payments/create-order", headers=headers, json={})
        assert response.status_code == 400

    def test_unknown_plan(self, client, gateway, make_employer):
        _, headers = make_employer()
        response = client.post("/api/payments/create-order", headers=headers, json={"plan_id": "platinum"})
        assert response.status_code == 404

    def test_already_on_plan(self, client, gateway, make_employer):
        _, headers = make_employer(subscription_plan="basic")
        response = client.post("/api/payments/create-order", headers=headers, json={"plan_id": "basic"})
        assert response.status_code == 400

    def test_free_plan_cannot_be_bought(self, client, gateway, make_employer):
        _, headers = make_employer(subscription_plan="premium")
        response = client.post("/api/payments/create-order", headers=headers, json={"plan_id": "free"})

        assert response.status_code == 400
        assert gateway.orders == []


class TestVerify:

    def test_bad_signature_marks_payment_failed(self, client, db, pending_order):
        employer, headers = pending_order

        response = client.post("/api/payments/verify", headers=headers, json={
            "razorpay_order_id": "order_1",
            "razorpay_payment_id": "pay_1",
            "razorpay_signature": "deadbeef",
        })

        assert response.status_code == 400
        payment = db.payments.find_one({"razorpay_order_id": "order_1"})
        assert payment["status"] == "failed"
        assert payment["failure_reason"] == "Signature verification failed"
        assert db.subscriptions.find_one({"order_id": "order_1"})["status"] == "failed"
        assert db.employers.find_one({"_id": employer["_id"]})["subscription_plan"] == "free"

    def test_good_signature_activates_plan_and_issues_invoice(self, client, db, pending_order):
        employer, headers = pending_order

        response = client.post("/api/payments/verify", headers=headers, json={
            "razorpay_order_id": "order_1",
            "razorpay_payment_id": "pay_1",
            "razorpay_signature": compute_signature("order_1", "pay_1", KEY_SECRET),
        })

        assert response.status_code == 200
        body = response.json()
        assert body["employer"]["subscription_plan"] == "basic"
        assert body["employer"]["job_posting_limit"] == 5
        assert body["invoice_number"] == f"INV-{utcnow():%Y%m}-00001"

        stored = db.employers.find_one({"_id": employer["_id"]})
        assert stored["subscription_end"] > stored["subscription_start"]
        assert db.payments.find_one({"razorpay_order_id": "order_1"})["status"] == "success"
        assert db.subscriptions.find_one({"order_id": "order_1"})["status"] == "active"

        invoice = db.invoices.find_one({"invoice_number": body["invoice_number"]})
        assert invoice["subtotal"] == 2499
        assert invoice["tax_amount"] == 450
        assert invoice["total_amount"] == 2949
        assert invoice["bill_to"]["company_name"] == employer["company_name"]

        notification = db.employer_notifications.find_one({"employer_id": employer["_id"]})
        assert notification["type"] == "payment_received"

    def test_other_employers_order_is_not_found(self, client, pending_order, make_employer):
        _, other_headers = make_employer()

        response = client.post("/api/payments/verify", headers=other_headers, json=_checkout("order_1", "pay_1"))

        assert response.status_code == 404

    def test_unknown_order(self, client, pending_order):
        _, headers = pending_order

        response = client.post("/api/payments/verify", headers=headers, json=_checkout("order_404", "pay_1"))

        assert response.status_code == 404

    def test_plan_is_taken_from_the_order(self, client, db, pending_order):
        employer, headers = pending_order

        response = client.post("/api/payments/verify", headers=headers,
                               json=_checkout("order_1", "pay_1", plan_id="enterprise"))

        assert response.status_code == 400
        assert db.employers.find_one({"_id": employer["_id"]})["subscription_plan"] == "free"
        assert db.payments.find_one({"razorpay_order_id": "order_1"})["status"] == "initiated"

    def test_matching_plan_id_is_accepted(self, client, pending_order):
        _, headers = pending_order

        response = client.post("/api/payments/verify", headers=headers,
                               json=_checkout("order_1", "pay_1", plan_id="basic"))

        assert response.status_code == 200
        assert response.json()["plan"]["plan_id"] == "basic"

    def test_settled_order_cannot_be_verified_again(self, client, db, pending_order):
        employer, headers = pending_order
        first = client.post("/api/payments/verify", headers=headers, json=_checkout("order_1", "pay_1"))
        subscription_end = db.employers.find_one({"_id": employer["_id"]})["subscription_end"]

        second = client.post("/api/payments/verify", headers=headers, json=_checkout("order_1", "pay_1"))

        assert first.status_code == 200
        assert second.status_code == 409
        assert second.json()["error_type"] == "payment_already_processed"
        assert db.invoices.count_documents({}) == 1
        assert db.employers.find_one({"_id": employer["_id"]})["subscription_end"] == subscription_end

    def test_failed_order_stays_failed(self, client, db, pending_order):
        _, headers = pending_order
        client.post("/api/payments/verify", headers=headers, json={
            "razorpay_order_id": "order_1", "razorpay_payment_id": "pay_1", "razorpay_signature": "deadbeef",
        })

        response = client.post("/api/payments/verify", headers=headers, json=_checkout("order_1", "pay_1"))

        assert response.status_code == 409
        assert response.json()["payment_status"] == "failed"
        assert db.invoices.count_documents({}) == 0


def test_history_and_stats(client, pending_order):
    _, headers = pending_order
    client.post("/api/payments/verify", headers=headers, json={
        "razorpay_order_id": "order_1",
        "razorpay_payment_id": "pay_1",
        "razorpay_signature": compute_signature("order_1", "pay_1", KEY_SECRET),
    })

    history = client.get("/api/payments/history", headers=headers).json()
    stats = client.get("/api/payments/stats", headers=headers).json()["stats"]

    assert history["pagination"]["total"] == 1
    assert "razorpay_signature" not in history["payments"][0]
    assert stats["successful_payments"] == 1
    assert stats["successful_amount"] == 2499


def test_signature_helper_matches_client_check():
    client = RazorpayClient(KEY_ID, KEY_SECRET)
    signature = compute_signature("order_9", "pay_9", KEY_SECRET)

    assert client.verify_signature("order_9", "pay_9", signature)
    assert not client.verify_signature("order_9", "pay_10", signature)
    assert not RazorpayClient(KEY_ID, "").verify_signature("order_9", "pay_9", signature)
