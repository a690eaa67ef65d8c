"""
Cloudinary Client

Signed uploads straight to the Cloudinary upload API:
POST https://api.cloudinary.com/v1_1/<cloud>/<resource_type>/upload

signature = sha1("k1=v1&k2=v2...<api_secret>") over the sorted upload params
(file, api_key and resource_type are not signed).
"""

import hashlib
import time
from typing import Optional

import httpx
from loguru import logger

from jobzee.core.config import get_settings
from jobzee.core.errors import ServiceUnavailableError, UpstreamError

settings = get_settings()

UPLOAD_URL = "https://api.cloudinary.com/v1_1/{cloud}/{resource_type}/upload"


def sign_params(params: dict, api_secret: str) -> str:
    to_sign = "&".join(f"{k}={params[k]}" for k in sorted(params) if params[k] not in (None, ""))
    return hashlib.sha1(f"{to_sign}{api_secret}".encode()).hexdigest()


class CloudinaryClient:

    def __init__(self, cloud_name: str, api_key: str, api_secret: str, folder: str = "jobzee",
                 timeout: float = 15.0, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.cloud_name = cloud_name
        self.api_key = api_key
        self.api_secret = api_secret
        self.folder = folder
        self.timeout = timeout
        self.transport = transport

    @property
    def configured(self) -> bool:
        return bool(self.cloud_name and self.api_key and self.api_secret)

    async def upload(self, content: bytes, filename: str, resource_type: str = "image",
                     subfolder: Optional[str] = None, public_id: Optional[str] = None) -> dict:
        """
        Upload bytes and return {url, public_id, bytes, format, resource_type}.

        resource_type: "image" for photos/logos, "raw" for documents.
        """
        if not self.configured:
            raise ServiceUnavailableError("File storage is not configured", error_type="storage_unavailable")

        params = {
            "folder": f"{self.folder}/{subfolder}" if subfolder else self.folder,
            "timestamp": int(time.time()),
        }
        if public_id:
            params["public_id"] = public_id
        data = dict(params, api_key=self.api_key, signature=sign_params(params, self.api_secret))

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.post(
                    UPLOAD_URL.format(cloud=self.cloud_name, resource_type=resource_type),
                    data=data,
                    files={"file": (filename, content)},
                )
        except httpx.HTTPError as e:
            logger.error(f"Cloudinary upload failed: {e}")
            raise UpstreamError("Could not reach file storage", error_type="storage_error")

        if response.status_code >= 400:
            logger.error(f"Cloudinary rejected upload ({response.status_code}): {response.text}")
            raise UpstreamError("File storage rejected the upload", error_type="storage_error")

        body = response.json()
        return {
            "url": body.get("secure_url") or body.get("url"),
            "public_id": body.get("public_id"),
            "bytes": body.get("bytes"),
            "format": body.get("format"),
            "resource_type": body.get("resource_type", resource_type),
        }


# Singleton instance
_cloudinary_client: Optional[CloudinaryClient] = None


def get_cloudinary_client() -> CloudinaryClient:
    """Get or create Cloudinary client (singleton pattern)"""
    global _cloudinary_client
    if _cloudinary_client is None:
        _cloudinary_client = CloudinaryClient(
            settings.cloudinary_cloud_name,
            settings.cloudinary_api_key,
            settings.cloudinary_api_secret,
            settings.cloudinary_folder,
            settings.http_timeout_seconds,
        )
    return _cloudinary_client
