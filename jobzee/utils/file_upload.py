"""
File Upload Utility - validate uploaded resumes and images.

Supported formats:
- Resumes: PDF (.pdf), Word (.doc, .docx)
- Images: JPG/JPEG, PNG, WEBP

Max file size: 5MB
"""

from typing import Tuple

from fastapi import HTTPException, UploadFile

MAX_FILE_SIZE_MB = 5
MAX_FILE_SIZE_BYTES = MAX_FILE_SIZE_MB * 1024 * 1024

RESUME_EXTENSIONS = {'.pdf', '.doc', '.docx'}
IMAGE_EXTENSIONS = {'.jpg', '.jpeg', '.png', '.webp'}

RESUME_CONTENT_TYPES = {
    'application/pdf',
    'application/msword',
    'application/vnd.openxmlformats-officedocument.wordprocessingml.document',
    'application/octet-stream',
}
IMAGE_CONTENT_TYPES = {'image/jpeg', 'image/png', 'image/webp'}


def get_file_extension(filename: str) -> str:
    """Get lowercase file extension."""
    if '.' not in filename:
        return ''
    return '.' + filename.rsplit('.', 1)[1].lower()


async def _read_validated(file: UploadFile, extensions: set, content_types: set, label: str) -> Tuple[bytes, str]:
    if not file or not file.filename:
        raise HTTPException(status_code=400, detail="No file uploaded")

    ext = get_file_extension(file.filename)
    if ext not in extensions:
        allowed = ", ".join(sorted(e.lstrip('.').upper() for e in extensions))
        raise HTTPException(
            status_code=400,
            detail=f"Unsupported {label} type '{ext}'. Allowed: {allowed}"
        )

    if file.content_type and file.content_type not in content_types:
        raise HTTPException(status_code=400, detail=f"Unsupported content type '{file.content_type}'")

    content = await file.read()

    if not content:
        raise HTTPException(status_code=400, detail="Uploaded file is empty")

    if len(content) > MAX_FILE_SIZE_BYTES:
        raise HTTPException(
            status_code=413,
            detail=f"File too large. Maximum size: {MAX_FILE_SIZE_MB}MB"
        )

    return content, file.filename


async def read_resume(file: UploadFile) -> Tuple[bytes, str]:
    """
    Validate and read a resume upload.

    Returns:
        Tuple of (content, filename)

    Raises:
        HTTPException 400 on bad type/empty file, 413 when too large
    """
    return await _read_validated(file, RESUME_EXTENSIONS, RESUME_CONTENT_TYPES, "resume")


async def read_image(file: UploadFile) -> Tuple[bytes, str]:
    """Validate and read an image upload (profile photo, company logo)."""
    return await _read_validated(file, IMAGE_EXTENSIONS, IMAGE_CONTENT_TYPES, "image")


def get_supported_formats() -> dict:
    """Get info about supported file formats."""
    return {
        "resume_formats": sorted(RESUME_EXTENSIONS),
        "image_formats": sorted(IMAGE_EXTENSIONS),
        "max_size_mb": MAX_FILE_SIZE_MB
    }
