"""
Jobzee - Main Application

FastAPI backend with:
- MongoDB for every entity
- JWT authentication for job seekers, employers, mentors and admins
- Razorpay payments, Cloudinary uploads, Mapbox location search
- Salary prediction, job recommendations and candidate screening

Run: uvicorn jobzee.main:app --reload
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger
from pymongo.errors import PyMongoError

from jobzee import __version__
from jobzee.api.routes import api_router
from jobzee.core.config import get_settings
from jobzee.core.errors import register_exception_handlers
from jobzee.core.logging import configure_logging
from jobzee.db.mongodb import init_mongo_indexes, test_mongo_connection

settings = get_settings()
configure_logging(settings.log_level)

# Create FastAPI app
app = FastAPI(
    title="Jobzee",
    description="""
    Job board API.

    ## Features
    - **Job seekers**: onboarding, profile and resume, job search, Quick Apply, saved jobs, interviews
    - **Employers**: company profile, job and internship postings, applications, interviews, screening
    - **Plans & payments**: Razorpay checkout, subscriptions, invoices
    - **Mentors & admins**: approval workflows and platform moderation
    - **Insights**: salary prediction and personalised recommendations
    """,
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
    debug=settings.debug,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

# Include API routes
app.include_router(api_router, prefix="/api")


# Startup event
@app.on_event("startup")
async def startup_event():
    """Initialize MongoDB indexes on startup."""
    try:
        init_mongo_indexes()
        logger.info("MongoDB indexes initialized")
    except PyMongoError as e:
        logger.warning(f"MongoDB index initialization failed: {e}")


@app.get("/", tags=["Health"])
async def root():
    return {"status": "healthy", "app": "Jobzee", "version": __version__, "docs": "/docs"}


@app.get("/health", tags=["Health"])
async def health_check():
    """Detailed health check."""
    mongo_ok = test_mongo_connection()
    return {
        "status": "healthy" if mongo_ok else "degraded",
        "mongodb": "connected" if mongo_ok else "disconnected",
    }
