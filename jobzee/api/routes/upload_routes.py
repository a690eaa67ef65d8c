"""
Upload Routes

POST /upload/resume - Upload resume (job seeker), stored on the profile
POST /upload/profile-photo - Upload profile photo (job seeker)
POST /upload/employer/logo - Upload company logo (employer)
GET /upload/formats - Supported formats and size limit
"""

from fastapi import APIRouter, Depends, File, UploadFile
from loguru import logger

from jobzee.core.auth import get_current_employer, get_current_user
from jobzee.db.mongodb import get_collection
from jobzee.services.cloudinary_client import CloudinaryClient, get_cloudinary_client
from jobzee.services.mongo_service import utcnow
from jobzee.utils.file_upload import get_supported_formats, read_image, read_resume

router = APIRouter(prefix="/upload", tags=["Uploads"])


@router.post("/resume")
async def upload_resume(
    file: UploadFile = File(..., description="Resume file (PDF, DOC or DOCX)"),
    user: dict = Depends(get_current_user),
    storage: CloudinaryClient = Depends(get_cloudinary_client),
):
    """
    Upload a resume.

    The file is stored as a raw Cloudinary asset and its URL replaces
    `resume` on the profile, which Quick Apply uses.
    """
    content, filename = await read_resume(file)
    uploaded = await storage.upload(content, filename, resource_type="raw", subfolder="resumes",
                                    public_id=f"resume_{user['id']}_{int(utcnow().timestamp())}")

    get_collection("users").update_one(
        {"_id": user["_id"]}, {"$set": {"resume": uploaded["url"], "updated_at": utcnow()}}
    )
    logger.info(f"User {user['_id']} uploaded resume {filename} ({len(content)} bytes)")
    return {"message": "Resume uploaded", "url": uploaded["url"], "filename": filename, "size": len(content)}


@router.post("/profile-photo")
async def upload_profile_photo(
    file: UploadFile = File(...),
    user: dict = Depends(get_current_user),
    storage: CloudinaryClient = Depends(get_cloudinary_client),
):
    content, filename = await read_image(file)
    uploaded = await storage.upload(content, filename, resource_type="image", subfolder="profile-photos")
    get_collection("users").update_one(
        {"_id": user["_id"]}, {"$set": {"profile_photo": uploaded["url"], "updated_at": utcnow()}}
    )
    return {"message": "Profile photo uploaded", "url": uploaded["url"]}


@router.post("/employer/logo")
async def upload_company_logo(
    file: UploadFile = File(...),
    employer: dict = Depends(get_current_employer),
    storage: CloudinaryClient = Depends(get_cloudinary_client),
):
    content, filename = await read_image(file)
    uploaded = await storage.upload(content, filename, resource_type="image", subfolder="company-logos")
    get_collection("employers").update_one(
        {"_id": employer["_id"]}, {"$set": {"company_logo": uploaded["url"], "updated_at": utcnow()}}
    )
    return {"message": "Company logo uploaded", "url": uploaded["url"]}


@router.get("/formats")
async def supported_formats():
    return get_supported_formats()
