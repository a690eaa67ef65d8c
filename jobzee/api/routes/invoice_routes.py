"""
Invoice Routes (employer)

GET /invoices - Own invoices, newest first
GET /invoices/{invoice_number} - One invoice
"""

from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from jobzee.core.auth import get_current_employer
from jobzee.db.mongodb import get_collection
from jobzee.services.mongo_service import naive_utc, paginate, serialize_doc, serialize_docs

router = APIRouter(prefix="/invoices", tags=["Invoices"])


@router.get("")
async def list_invoices(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    start_date: Optional[datetime] = Query(None),
    end_date: Optional[datetime] = Query(None),
    employer: dict = Depends(get_current_employer),
):
    query = {"employer_id": employer["_id"]}
    if start_date or end_date:
        query["invoice_date"] = {}
        if start_date:
            query["invoice_date"]["$gte"] = naive_utc(start_date)
        if end_date:
            query["invoice_date"]["$lte"] = naive_utc(end_date)

    docs, pagination = paginate(get_collection("invoices"), query, page, limit, sort=[("created_at", -1)])
    return {"invoices": serialize_docs(docs), "pagination": pagination}


@router.get("/{invoice_number}")
async def get_invoice(invoice_number: str, employer: dict = Depends(get_current_employer)):
    invoice = get_collection("invoices").find_one({"invoice_number": invoice_number, "employer_id": employer["_id"]})
    if not invoice:
        raise HTTPException(status_code=404, detail="Invoice not found")
    return {"invoice": serialize_doc(invoice)}
