from fastapi import APIRouter, Depends

from tripplanner.api.deps import get_app_settings, get_gateway
from tripplanner.core.hotel_service import suggest_hotels
from tripplanner.core.llm_provider import CompletionGateway
from tripplanner.core.schemas import HotelSuggestionRequest, HotelSuggestions
from tripplanner.core.settings import Settings

router = APIRouter(tags=["hotels"])


@router.post("/hotels", response_model=HotelSuggestions)
async def get_hotel_suggestions(
    payload: HotelSuggestionRequest,
    gateway: CompletionGateway = Depends(get_gateway),
    settings: Settings = Depends(get_app_settings),
) -> HotelSuggestions:
    """Return 4-10 hotel suggestions for the destination and travel type."""
    return await suggest_hotels(payload, gateway, settings)
