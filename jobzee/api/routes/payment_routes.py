"""
Payment Routes (employer)

POST /payments/create-order - Create a Razorpay order for a plan
POST /payments/verify - Verify checkout signature and activate the plan
GET /payments/history - Paginated payment history
GET /payments/stats - Totals for the employer
GET /payments/{payment_id} - One payment
"""

from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from loguru import logger
from pymongo import ReturnDocument

from jobzee.core.auth import get_current_employer
from jobzee.core.errors import ConflictError
from jobzee.db.mongodb import get_collection
from jobzee.schemas.schemas import CreateOrderRequest, VerifyPaymentRequest
from jobzee.services.employer_service import plan_update
from jobzee.services.invoice_service import create_invoice
from jobzee.services.mongo_service import find_or_404, naive_utc, paginate, serialize_doc, serialize_docs, utcnow
from jobzee.services.notification_service import notify_employer
from jobzee.services.payment_gateway import RazorpayClient, get_razorpay_client
from jobzee.services.pricing_service import get_plan

router = APIRouter(prefix="/payments", tags=["Payments"])


def _plan_summary(plan: dict) -> dict:
    price = plan.get("price") or {}
    return {
        "plan_id": plan["plan_id"],
        "name": plan.get("name"),
        "amount": price.get("amount"),
        "currency": price.get("currency", "INR"),
        "period": price.get("period", "monthly"),
        "job_posting_limit": plan.get("job_posting_limit"),
        "featured_jobs_limit": plan.get("featured_jobs_limit", 0),
    }


@router.post("/create-order")
async def create_order(
    data: CreateOrderRequest,
    employer: dict = Depends(get_current_employer),
    razorpay: RazorpayClient = Depends(get_razorpay_client),
):
    """Start a plan purchase: Razorpay order plus `initiated` payment and `created` subscription records."""
    if not data.plan_id:
        raise HTTPException(status_code=400, detail="plan_id is required")

    plan = get_plan(data.plan_id)
    if not plan:
        raise HTTPException(status_code=404, detail="Invalid plan selected")
    if employer.get("subscription_plan") == plan["plan_id"]:
        raise HTTPException(status_code=400, detail="You are already on this plan")

    summary = _plan_summary(plan)
    amount_paise = round((summary["amount"] or 0) * 100)
    if amount_paise <= 0:
        raise HTTPException(status_code=400, detail="Selected plan has invalid amount")

    now = utcnow()
    receipt = f"plan_{plan['plan_id']}_{int(now.timestamp() * 1000)}"
    notes = {"plan_id": plan["plan_id"], "employer_id": employer["id"], "period": summary["period"]}
    order = await razorpay.create_order(amount_paise, receipt, notes=notes, currency=summary["currency"])

    get_collection("payments").insert_one({
        "employer_id": employer["_id"],
        "plan_id": plan["plan_id"],
        "amount": summary["amount"],
        "currency": summary["currency"],
        "razorpay_order_id": order["id"],
        "razorpay_payment_id": None,
        "razorpay_signature": None,
        "receipt": receipt,
        "status": "initiated",
        "notes": notes,
        "initiated_at": now,
        "created_at": now,
    })
    get_collection("subscriptions").insert_one({
        "employer_id": employer["_id"],
        "plan_id": plan["plan_id"],
        "period": summary["period"],
        "amount": summary["amount"],
        "currency": summary["currency"],
        "order_id": order["id"],
        "receipt": receipt,
        "status": "created",
        "start_date": None,
        "end_date": None,
        "created_at": now,
    })
    logger.info(f"Order {order['id']} created for employer {employer['_id']} ({plan['plan_id']})")
    return {"order": order, "key": razorpay.key_id, "plan": summary}


@router.post("/verify")
async def verify_payment(
    data: VerifyPaymentRequest,
    employer: dict = Depends(get_current_employer),
    razorpay: RazorpayClient = Depends(get_razorpay_client),
):
    """
    Verify the checkout signature for an order this employer created.

    The plan always comes from the stored payment. Only an `initiated`
    payment can be settled: a bad signature marks it and its subscription
    failed (400), a good one switches the employer to the plan, records
    success and issues an invoice. Settled orders answer 409.
    """
    payments = get_collection("payments")
    subscriptions = get_collection("subscriptions")
    owner = {"razorpay_order_id": data.razorpay_order_id, "employer_id": employer["_id"]}

    payment = payments.find_one(owner)
    if not payment:
        raise HTTPException(status_code=404, detail="Order not found")
    if data.plan_id and data.plan_id != payment["plan_id"]:
        logger.warning(f"Plan mismatch on order {data.razorpay_order_id}: "
                       f"paid for {payment['plan_id']}, asked for {data.plan_id}")
        raise HTTPException(status_code=400, detail="Plan does not match the order")
    if payment.get("status") != "initiated":
        raise ConflictError("This payment has already been processed", error_type="payment_already_processed",
                            extra={"payment_status": payment.get("status")})

    plan = get_plan(payment["plan_id"], active_only=False)
    if not plan:
        raise HTTPException(status_code=404, detail="Invalid plan selected")

    pending = dict(owner, status="initiated")
    now = utcnow()
    if not razorpay.verify_signature(data.razorpay_order_id, data.razorpay_payment_id, data.razorpay_signature):
        logger.warning(f"Signature mismatch for order {data.razorpay_order_id} (employer {employer['_id']})")
        payments.update_one(pending, {"$set": {
            "status": "failed",
            "razorpay_payment_id": data.razorpay_payment_id,
            "razorpay_signature": data.razorpay_signature,
            "failed_at": now,
            "failure_reason": "Signature verification failed",
        }})
        subscriptions.update_one(
            {"order_id": data.razorpay_order_id, "employer_id": employer["_id"]},
            {"$set": {"status": "failed", "payment_id": data.razorpay_payment_id}},
        )
        raise HTTPException(status_code=400, detail="Payment verification failed")

    # claim the order; a concurrent verify of the same order gets nothing back
    payment = payments.find_one_and_update(
        pending,
        {"$set": {
            "status": "success",
            "razorpay_payment_id": data.razorpay_payment_id,
            "razorpay_signature": data.razorpay_signature,
            "completed_at": now,
        }},
        return_document=ReturnDocument.AFTER,
    )
    if not payment:
        raise ConflictError("This payment has already been processed", error_type="payment_already_processed")

    updates = plan_update(plan, now)
    updated_employer = get_collection("employers").find_one_and_update(
        {"_id": employer["_id"]}, {"$set": updates}, return_document=ReturnDocument.AFTER
    )
    subscription = subscriptions.find_one_and_update(
        {"order_id": data.razorpay_order_id, "employer_id": employer["_id"]},
        {"$set": {
            "status": "active",
            "payment_id": data.razorpay_payment_id,
            "start_date": updates["subscription_start"],
            "end_date": updates["subscription_end"],
        }},
        return_document=ReturnDocument.AFTER,
    )

    invoice_number = None
    try:
        invoice_number = create_invoice(employer["_id"], payment, subscription, plan)["invoice_number"]
    except Exception as e:
        logger.exception(f"Invoice generation failed for order {data.razorpay_order_id}: {e}")

    notify_employer(
        employer["_id"], "payment_received", "Payment successful",
        f"Your {plan.get('name', plan['plan_id'])} plan is now active",
        data={"plan_id": plan["plan_id"], "order_id": data.razorpay_order_id, "invoice_number": invoice_number},
        priority="high",
    )
    logger.info(f"Payment verified for order {data.razorpay_order_id}; employer {employer['_id']} on {plan['plan_id']}")
    return {
        "message": "Payment verified and subscription updated",
        "employer": serialize_doc(updated_employer),
        "plan": {"plan_id": plan["plan_id"], "name": plan.get("name"),
                 "period": (plan.get("price") or {}).get("period", "monthly")},
        "invoice_number": invoice_number,
    }


@router.get("/history")
async def payment_history(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    status: Optional[str] = Query(None),
    start_date: Optional[datetime] = Query(None),
    end_date: Optional[datetime] = Query(None),
    employer: dict = Depends(get_current_employer),
):
    query = {"employer_id": employer["_id"]}
    if status:
        query["status"] = status
    if start_date or end_date:
        query["initiated_at"] = {}
        if start_date:
            query["initiated_at"]["$gte"] = naive_utc(start_date)
        if end_date:
            query["initiated_at"]["$lte"] = naive_utc(end_date)

    docs, pagination = paginate(get_collection("payments"), query, page, limit, sort=[("initiated_at", -1)])
    return {"payments": serialize_docs(docs, exclude=("razorpay_signature",)), "pagination": pagination}


@router.get("/stats")
async def payment_stats(employer: dict = Depends(get_current_employer)):
    stats = {"total_payments": 0, "successful_payments": 0, "failed_payments": 0,
             "total_amount": 0, "successful_amount": 0}
    for payment in get_collection("payments").find({"employer_id": employer["_id"]}, {"status": 1, "amount": 1}):
        amount = payment.get("amount") or 0
        stats["total_payments"] += 1
        stats["total_amount"] += amount
        if payment.get("status") == "success":
            stats["successful_payments"] += 1
            stats["successful_amount"] += amount
        elif payment.get("status") == "failed":
            stats["failed_payments"] += 1
    return {"stats": stats}


@router.get("/{payment_id}")
async def payment_details(payment_id: str, employer: dict = Depends(get_current_employer)):
    payment = find_or_404(get_collection("payments"), payment_id, "Payment", {"employer_id": employer["_id"]})
    return {"payment": serialize_doc(payment, exclude=("razorpay_signature",))}
