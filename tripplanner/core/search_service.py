"""
AI place search: Places results plus bilingual summaries and wait estimates.
"""

import asyncio
import logging
import math

from tripplanner.core.llm_provider import CompletionGateway, ModelParams
from tripplanner.core.places_service import PlacesService
from tripplanner.core.prompts import (
    build_summary_prompt,
    build_translation_prompt,
    build_vietnamese_summary_prompt,
)
from tripplanner.core.schemas import PlaceDetail, PlaceResult, SearchResponse
from tripplanner.core.settings import Settings

logger = logging.getLogger(__name__)

NO_SUMMARY = "No AI summary available."


def estimate_wait_minutes(rating: float | None, reviews: int | None) -> int:
    """Rough queue estimate: better rated and more reviewed places are busier."""
    score = 8 + max(0.0, (rating or 0) - 3.8) * 6 + min(20, math.floor((reviews or 0) / 300) * 4)
    return max(5, min(40, round(score)))


def fallback_summary(places: list[PlaceResult]) -> str:
    picks = []
    for place in places[:4]:
        detail = ""
        if place.rating:
            reviews = f" from {place.user_ratings_total} reviews" if place.user_ratings_total else ""
            detail = f" ({place.rating:.1f}/5{reviews})"
        picks.append(f"**{place.name}**{detail}")
    if not picks:
        return NO_SUMMARY
    return (
        f"Top picks include {', '.join(picks)}. "
        "These spots are well-rated for consistent quality and friendly service."
    )


async def _lookup(
    places_service: PlacesService | None, query: str, location: str
) -> list[PlaceResult]:
    if places_service is None:
        logger.warning("Places search requested but GOOGLE_MAPS_API_KEY is not configured")
        return []
    try:
        raw = await asyncio.to_thread(places_service.text_search, query, location, "en")
    except Exception as e:
        logger.error(f"Places lookup failed: {e}")
        return []
    return [PlaceResult.model_validate(p) for p in raw]


async def search_places(
    location: str,
    query: str,
    lang: str,
    places_service: PlacesService | None,
    gateway: CompletionGateway,
    settings: Settings,
) -> SearchResponse:
    places = await _lookup(places_service, query, location)
    details = [
        PlaceDetail(
            name_en=p.name,
            estimated_wait_minutes=estimate_wait_minutes(p.rating, p.user_ratings_total),
        )
        for p in places
    ]

    compact = [
        {"name": p.name, "rating": p.rating, "reviews": p.user_ratings_total} for p in places
    ]
    summary_en = await gateway.complete(
        build_summary_prompt(query, location, compact),
        ModelParams(model=settings.summary_model, temperature=0.4, max_tokens=400, json_mode=False),
    )

    summary_vi = ""
    if summary_en:
        summary_vi = await gateway.complete(
            build_translation_prompt(summary_en),
            ModelParams(model=settings.summary_model, temperature=0.2, max_tokens=600, json_mode=False),
        )
    if len(summary_vi) < 8 and lang == "vi":
        summary_vi = await gateway.complete(
            build_vietnamese_summary_prompt(query, location, compact),
            ModelParams(model=settings.summary_model, temperature=0.4, max_tokens=600, json_mode=False),
        )

    if not summary_en:
        summary_en = fallback_summary(places)
    if not summary_vi:
        summary_vi = summary_en

    return SearchResponse(
        places=places,
        ai_summary_en=summary_en,
        ai_summary_vi=summary_vi,
        ai_details=details,
    )
