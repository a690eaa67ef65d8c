"""
Mapbox Geocoding - location autocomplete for job/profile forms.
"""

from typing import List, Optional
from urllib.parse import quote

import httpx
from loguru import logger

from jobzee.core.config import get_settings
from jobzee.core.errors import ServiceUnavailableError, UpstreamError

settings = get_settings()


def _context_value(feature: dict, prefix: str) -> Optional[str]:
    for ctx in feature.get("context", []):
        if ctx.get("id", "").startswith(prefix):
            return ctx.get("text")
    return None


def feature_to_suggestion(feature: dict) -> dict:
    """Flatten a Mapbox feature into {place_name, city, state, country, latitude, longitude}."""
    lon, lat = (feature.get("center") or [None, None])[:2]
    place_type = feature.get("place_type") or []
    city = feature.get("text") if "place" in place_type else _context_value(feature, "place")
    state = feature.get("text") if "region" in place_type else _context_value(feature, "region")
    country = feature.get("text") if "country" in place_type else _context_value(feature, "country")
    return {
        "place_name": feature.get("place_name", ""),
        "city": city,
        "state": state,
        "country": country,
        "latitude": lat,
        "longitude": lon,
    }


class MapboxGeocoder:

    def __init__(self, token: str, base_url: str, timeout: float = 15.0,
                 transport: Optional[httpx.AsyncBaseTransport] = None):
        self.token = token
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.transport = transport

    async def autocomplete(self, query: str, limit: int = 5, country: Optional[str] = None) -> List[dict]:
        if not self.token:
            raise ServiceUnavailableError("Location service is not configured", error_type="geocoding_unavailable")

        params = {
            "access_token": self.token,
            "autocomplete": "true",
            "limit": limit,
            "types": "place,locality,region,country",
        }
        if country:
            params["country"] = country

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.get(f"{self.base_url}/{quote(query)}.json", params=params)
        except httpx.HTTPError as e:
            logger.error(f"Mapbox request failed: {e}")
            raise UpstreamError("Could not reach location service", error_type="geocoding_error")

        if response.status_code >= 400:
            logger.error(f"Mapbox returned {response.status_code}")
            raise UpstreamError("Location service returned an error", error_type="geocoding_error")

        return [feature_to_suggestion(f) for f in response.json().get("features", [])]


# Singleton instance
_geocoder: Optional[MapboxGeocoder] = None


def get_geocoder() -> MapboxGeocoder:
    """Get or create Mapbox geocoder (singleton pattern)"""
    global _geocoder
    if _geocoder is None:
        _geocoder = MapboxGeocoder(settings.mapbox_token, settings.mapbox_base_url, settings.http_timeout_seconds)
    return _geocoder
