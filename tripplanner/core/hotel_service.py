"""
Hotel suggestions for the hotel picker shown before trip generation.
"""

import logging

from tripplanner.core.costs import PriceLevelPricing
from tripplanner.core.json_recovery import recover
from tripplanner.core.llm_provider import CompletionGateway, ModelParams
from tripplanner.core.mock_builders import build_mock_hotels
from tripplanner.core.prompts import build_hotel_prompt
from tripplanner.core.schemas import (
    Hotel,
    HotelSuggestionRequest,
    HotelSuggestions,
    Money,
    coerce_hotel,
)
from tripplanner.core.settings import Settings

logger = logging.getLogger(__name__)

MAX_HOTELS = 10


def _mock(request: HotelSuggestionRequest) -> HotelSuggestions:
    return HotelSuggestions(hotels=build_mock_hotels(request.to, request.travel_type), mock=True)


def _finalize(hotels: list[Hotel], request: HotelSuggestionRequest) -> list[Hotel]:
    """Unique names, stable ids and a nightly price on every hotel."""
    pricing = PriceLevelPricing()
    seen: set[str] = set()
    result = []
    for hotel in hotels:
        key = hotel.name.strip().lower()
        if key in seen:
            continue
        seen.add(key)
        hotel.id = hotel.id or f"hotel_{len(result) + 1}"
        if not hotel.nightly_price or hotel.nightly_price.amount <= 0:
            hotel.nightly_price = Money(
                amount=pricing.nightly_price(hotel, request.travel_type, 0.0), currency="USD"
            )
        result.append(hotel)
    return result[:MAX_HOTELS]


async def suggest_hotels(
    request: HotelSuggestionRequest, gateway: CompletionGateway, settings: Settings
) -> HotelSuggestions:
    """
    Ask the hotel model for real hotels matching the travel tier.

    Falls back to the offline hotel list when no provider is configured, the
    response cannot be parsed, or it contains no usable hotels.
    """
    if not gateway.available(settings.hotel_model):
        logger.warning("No credentials for %s, returning mock hotels", settings.hotel_model)
        return _mock(request)

    try:
        raw = await gateway.complete(
            build_hotel_prompt(request),
            ModelParams(model=settings.hotel_model, temperature=0.35, max_tokens=4000),
        )
        data = await recover(raw, gateway, settings)
        items = data.get("hotels") if isinstance(data, dict) else data
        hotels = [h for h in (coerce_hotel(item) for item in items or []) if h]
    except Exception:
        logger.exception("Hotel suggestion failed for %s", request.to)
        return _mock(request)

    if not hotels:
        logger.warning("No usable hotels for %s, returning mock hotels", request.to)
        return _mock(request)
    return HotelSuggestions(hotels=_finalize(hotels, request), mock=False)
