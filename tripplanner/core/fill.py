"""
Real-fill stage: populate the skeleton's blocks with real places.
"""

import logging
from typing import Any

from tripplanner.core.json_recovery import recover
from tripplanner.core.llm_provider import CompletionGateway, ModelParams
from tripplanner.core.prompts import build_fill_prompt
from tripplanner.core.retry import retry
from tripplanner.core.schemas import (
    Block,
    Day,
    Flight,
    TravelStyle,
    TripPlan,
    TripRequest,
    coerce_days,
    coerce_hotel,
)
from tripplanner.core.sections import is_placeholder_name
from tripplanner.core.settings import Settings

logger = logging.getLogger(__name__)


def _matching_block(filled: Day, index: int, section: str) -> Block | None:
    """The filled block at the same position, or the one with the same section."""
    if index < len(filled.blocks) and filled.blocks[index].section in ("", section):
        return filled.blocks[index]
    for block in filled.blocks:
        if block.section == section:
            return block
    return None


def merge_fill(skeleton: TripPlan, data: dict[str, Any], filled_days: list[Day]) -> TripPlan:
    """
    Copy options from a filled response into a copy of the skeleton.

    Days are matched by position and blocks by position within the day, so
    the skeleton's structure always wins. Placeholder-looking options are
    dropped. Hotel, flight and travel style from the response are only used
    where the skeleton has none.
    """
    plan = skeleton.model_copy(deep=True)

    for index, day in enumerate(plan.days):
        if index >= len(filled_days):
            break
        filled = filled_days[index]
        for position, block in enumerate(day.blocks):
            source = _matching_block(filled, position, block.section)
            if source is None:
                continue
            block.options = [o for o in source.options if not is_placeholder_name(o.name)]
        if day.hotel is None and filled.hotel is not None:
            plan.assign_hotel(index, filled.hotel)

    if plan.flight is None and isinstance(data.get("flight"), dict):
        plan.flight = Flight.model_validate(data["flight"])
    if plan.travel_style is None and isinstance(data.get("travelStyle"), dict):
        plan.travel_style = TravelStyle.model_validate(data["travelStyle"])
    if not plan.hotels and isinstance(data.get("hotels"), list):
        plan.hotels = [h for h in (coerce_hotel(raw) for raw in data["hotels"]) if h]
    return plan


async def fill_real(
    skeleton: TripPlan,
    request: TripRequest,
    gateway: CompletionGateway,
    settings: Settings,
) -> tuple[TripPlan, bool]:
    """
    Ask the fill model for real places and merge them into the skeleton.

    Returns the merged plan and True, or the unchanged skeleton and False
    when every attempt failed to produce a usable ``days`` array.
    """
    prompt = build_fill_prompt(request, skeleton, skeleton.layout)
    params = ModelParams(model=settings.fill_model, temperature=0.4, max_tokens=18000)

    async def attempt(n: int) -> tuple[dict[str, Any], list[Day]] | None:
        raw = await gateway.complete(prompt, params)
        data = await recover(raw, gateway, settings)
        if not isinstance(data, dict):
            return None
        days = coerce_days(data.get("days"))
        if not days:
            logger.warning("Fill attempt %d returned no usable days", n)
            return None
        return data, days

    result = await retry(
        attempt,
        settings.fill_attempts,
        delay=settings.retry_delay_seconds,
        label="fill",
    )
    if result is None:
        logger.warning("Fill model failed for %s, continuing with the skeleton", request.to)
        return skeleton, False

    data, days = result
    if len(days) != len(skeleton.days):
        logger.info("Fill returned %d days for a %d-day skeleton", len(days), len(skeleton.days))
    return merge_fill(skeleton, data, days), True
