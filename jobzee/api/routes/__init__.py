"""
API Routes - Combines all route modules into single router.
"""

from fastapi import APIRouter

from jobzee.api.routes.admin_routes import router as admin_router
from jobzee.api.routes.application_routes import router as application_router
from jobzee.api.routes.auth_routes import router as auth_router
from jobzee.api.routes.employer_routes import router as employer_router
from jobzee.api.routes.internship_routes import router as internship_router
from jobzee.api.routes.interview_routes import router as interview_router
from jobzee.api.routes.invoice_routes import router as invoice_router
from jobzee.api.routes.job_routes import router as job_router
from jobzee.api.routes.location_routes import router as location_router
from jobzee.api.routes.mentor_routes import router as mentor_router
from jobzee.api.routes.notification_routes import employer_router as employer_notification_router
from jobzee.api.routes.notification_routes import router as notification_router
from jobzee.api.routes.payment_routes import router as payment_router
from jobzee.api.routes.prediction_routes import router as prediction_router
from jobzee.api.routes.pricing_routes import admin_router as admin_pricing_router
from jobzee.api.routes.pricing_routes import router as pricing_router
from jobzee.api.routes.recommendation_routes import router as recommendation_router
from jobzee.api.routes.screening_routes import router as screening_router
from jobzee.api.routes.upload_routes import router as upload_router

# Main API router
api_router = APIRouter()

# Include all sub-routers
api_router.include_router(auth_router)
api_router.include_router(employer_router)
api_router.include_router(job_router)
api_router.include_router(application_router)
api_router.include_router(internship_router)
api_router.include_router(interview_router)
api_router.include_router(notification_router)
api_router.include_router(employer_notification_router)
api_router.include_router(pricing_router)
api_router.include_router(admin_pricing_router)
api_router.include_router(payment_router)
api_router.include_router(invoice_router)
api_router.include_router(mentor_router)
api_router.include_router(admin_router)
api_router.include_router(upload_router)
api_router.include_router(location_router)
api_router.include_router(prediction_router)
api_router.include_router(recommendation_router)
api_router.include_router(screening_router)
