"""
Location Routes

GET /location/autocomplete?q= - Place suggestions from Mapbox
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from jobzee.schemas.schemas import LocationSuggestion
from jobzee.services.geocoding import MapboxGeocoder, get_geocoder

router = APIRouter(prefix="/location", tags=["Location"])


@router.get("/autocomplete", response_model=List[LocationSuggestion])
async def autocomplete(
    q: str = Query(..., min_length=2, description="Partial place name"),
    limit: int = Query(5, ge=1, le=10),
    country: Optional[str] = Query(None, description="ISO country codes, comma separated"),
    geocoder: MapboxGeocoder = Depends(get_geocoder),
):
    return await geocoder.autocomplete(q.strip(), limit=limit, country=country)
