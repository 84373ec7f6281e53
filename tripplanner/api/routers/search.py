import logging

from fastapi import APIRouter, Depends, HTTPException

from tripplanner.api.deps import get_app_settings, get_gateway, get_places_service
from tripplanner.core.llm_provider import CompletionGateway
from tripplanner.core.places_service import PlacesService
from tripplanner.core.schemas import SearchRequest, SearchResponse
from tripplanner.core.search_service import search_places
from tripplanner.core.settings import Settings

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/ai", tags=["search"])


@router.post("/search", response_model=SearchResponse)
async def ai_search(
    payload: SearchRequest,
    gateway: CompletionGateway = Depends(get_gateway),
    places_service: PlacesService | None = Depends(get_places_service),
    settings: Settings = Depends(get_app_settings),
) -> SearchResponse:
    """Places for a query near a location, with English/Vietnamese summaries and wait estimates."""
    if not payload.query.strip() or not payload.location.strip():
        raise HTTPException(status_code=400, detail="query and location are required")

    try:
        return await search_places(
            payload.location.strip(),
            payload.query.strip(),
            payload.lang,
            places_service,
            gateway,
            settings,
        )
    except Exception as e:
        logger.exception("AI search failed")
        raise HTTPException(status_code=500, detail="AI search failed") from e
