"""
Invoice Service - one invoice per successful plan payment.

Numbers look like INV-202601-00001; the sequence restarts every month and is
drawn from an atomic counter so concurrent payments never share a number.
"""

from datetime import datetime
from typing import Optional

from bson import ObjectId
from fastapi import HTTPException
from loguru import logger

from jobzee.core.config import get_settings
from jobzee.db.mongodb import get_collection, next_sequence
from jobzee.services.mongo_service import utcnow

settings = get_settings()


def generate_invoice_number(now: Optional[datetime] = None) -> str:
    period = (now or utcnow()).strftime("%Y%m")
    seq = next_sequence(f"invoice-{period}")
    return f"INV-{period}-{seq:05d}"


def compute_totals(subtotal: float, tax_rate: float) -> dict:
    tax_amount = round(subtotal * tax_rate / 100)
    return {
        "subtotal": subtotal,
        "tax_rate": tax_rate,
        "tax_amount": tax_amount,
        "total_amount": subtotal + tax_amount,
    }


def create_invoice(employer_id: ObjectId, payment: dict, subscription: Optional[dict], plan: Optional[dict]) -> dict:
    """
    Create and store the invoice for a verified payment.

    Args:
        employer_id: paying employer
        payment: the payments document (amount, currency, _id)
        subscription: the activated subscriptions document, if any
        plan: pricing plan bought

    Returns:
        The stored invoice document
    """
    employer = get_collection("employers").find_one({"_id": employer_id})
    if not employer:
        raise HTTPException(status_code=404, detail="Employer not found for invoice")

    now = utcnow()
    subtotal = payment.get("amount", 0) or 0
    plan = plan or {}
    plan_label = plan.get("name") or plan.get("plan_id") or "Subscription"

    invoice = {
        "employer_id": employer_id,
        "payment_id": payment.get("_id"),
        "subscription_id": (subscription or {}).get("_id"),
        "invoice_number": generate_invoice_number(now),
        "invoice_date": now,
        "bill_to": {
            "company_name": employer.get("company_name"),
            "company_email": employer.get("company_email"),
            "company_phone": employer.get("company_phone"),
            "address": employer.get("headquarters") or {},
        },
        "items": [{
            "description": f"{plan_label} Plan",
            "plan_id": plan.get("plan_id"),
            "quantity": 1,
            "unit_price": subtotal,
            "amount": subtotal,
        }],
        **compute_totals(subtotal, settings.gst_rate),
        "currency": payment.get("currency", "INR"),
        "status": "issued",
        "created_at": now,
    }
    result = get_collection("invoices").insert_one(invoice)
    invoice["_id"] = result.inserted_id
    logger.info(f"Invoice {invoice['invoice_number']} issued to employer {employer_id}")
    return invoice
