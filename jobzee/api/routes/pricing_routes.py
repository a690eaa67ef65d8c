"""
Pricing Routes

Public:
GET /pricing/public - Active plans ordered for display
GET /pricing/{plan_id} - One active plan

Admin (/admin/plans):
GET /admin/plans - All plans, including inactive
POST /admin/plans - Create plan
PUT /admin/plans/{plan_id} - Update plan
PATCH /admin/plans/{plan_id}/toggle - Activate/deactivate plan
DELETE /admin/plans/{plan_id} - Delete plan
"""

from fastapi import APIRouter, Depends, HTTPException
from pymongo.errors import DuplicateKeyError

from jobzee.core.auth import get_current_admin
from jobzee.core.errors import ConflictError
from jobzee.db.mongodb import get_collection
from jobzee.schemas.schemas import MessageResponse, PricingPlanCreate, PricingPlanUpdate
from jobzee.services.mongo_service import drop_none, serialize_doc, serialize_docs, utcnow
from jobzee.services.pricing_service import get_plan

router = APIRouter(prefix="/pricing", tags=["Pricing"])
admin_router = APIRouter(prefix="/admin/plans", tags=["Admin - Pricing"])


def _plan_or_404(plan_id: str) -> dict:
    plan = get_collection("pricing_plans").find_one({"plan_id": plan_id})
    if not plan:
        raise HTTPException(status_code=404, detail="Pricing plan not found")
    return plan


@router.get("/public")
async def public_plans():
    docs = list(get_collection("pricing_plans").find({"is_active": True}).sort("sort_order", 1))
    return {"plans": serialize_docs(docs), "count": len(docs)}


@router.get("/{plan_id}")
async def get_public_plan(plan_id: str):
    plan = get_plan(plan_id)
    if not plan:
        raise HTTPException(status_code=404, detail="Pricing plan not found")
    return {"plan": serialize_doc(plan)}


# ============================================================
# ADMIN
# ============================================================

@admin_router.get("")
async def list_plans(admin: dict = Depends(get_current_admin)):
    docs = list(get_collection("pricing_plans").find().sort("sort_order", 1))
    return {"plans": serialize_docs(docs), "count": len(docs)}


@admin_router.post("", status_code=201)
async def create_plan(data: PricingPlanCreate, admin: dict = Depends(get_current_admin)):
    plans = get_collection("pricing_plans")
    if plans.find_one({"plan_id": data.plan_id}):
        raise ConflictError(f"Plan '{data.plan_id}' already exists", error_type="duplicate_plan")

    now = utcnow()
    plan = data.model_dump(mode="json")
    plan.update({"created_at": now, "updated_at": now})
    try:
        result = plans.insert_one(plan)
    except DuplicateKeyError:
        raise ConflictError(f"Plan '{data.plan_id}' already exists", error_type="duplicate_plan")
    plan["_id"] = result.inserted_id
    return {"message": "Pricing plan created", "plan": serialize_doc(plan)}


@admin_router.put("/{plan_id}")
async def update_plan(plan_id: str, data: PricingPlanUpdate, admin: dict = Depends(get_current_admin)):
    plan = _plan_or_404(plan_id)
    updates = drop_none(data.model_dump(mode="json"))
    if "job_posting_limit" in data.model_fields_set and data.job_posting_limit is None:
        # explicit null switches the plan to unlimited postings
        updates["job_posting_limit"] = None
    if not updates:
        raise HTTPException(status_code=400, detail="No fields to update")

    updates["updated_at"] = utcnow()
    plans = get_collection("pricing_plans")
    plans.update_one({"_id": plan["_id"]}, {"$set": updates})
    return {"message": "Pricing plan updated", "plan": serialize_doc(plans.find_one({"_id": plan["_id"]}))}


@admin_router.patch("/{plan_id}/toggle")
async def toggle_plan(plan_id: str, admin: dict = Depends(get_current_admin)):
    plan = _plan_or_404(plan_id)
    is_active = not plan.get("is_active", True)
    get_collection("pricing_plans").update_one(
        {"_id": plan["_id"]}, {"$set": {"is_active": is_active, "updated_at": utcnow()}}
    )
    return {"message": f"Plan {'activated' if is_active else 'deactivated'}", "is_active": is_active}


@admin_router.delete("/{plan_id}", response_model=MessageResponse)
async def delete_plan(plan_id: str, admin: dict = Depends(get_current_admin)):
    plan = _plan_or_404(plan_id)
    get_collection("pricing_plans").delete_one({"_id": plan["_id"]})
    return MessageResponse(message="Pricing plan deleted")
