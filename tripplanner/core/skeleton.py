"""
Skeleton stage: the structure of the trip without any places in it.

The skeleton fixes the day count, the dates, each day's hotel and the empty
section blocks. The model is only trusted for the flight estimate and the
travel-style summary; everything structural is re-derived from the request.
"""

import logging
from typing import Any

from pydantic import BaseModel, ValidationError

from tripplanner.core.json_recovery import recover
from tripplanner.core.llm_provider import CompletionGateway, ModelParams
from tripplanner.core.normalizer import normalize
from tripplanner.core.prompts import build_skeleton_prompt
from tripplanner.core.retry import retry
from tripplanner.core.schemas import (
    Day,
    Flight,
    Money,
    TravelStyle,
    TripPlan,
    TripRequest,
    coerce_days,
)
from tripplanner.core.sections import BlockLayout, resolve_layout
from tripplanner.core.settings import Settings

logger = logging.getLogger(__name__)


def _coerce_model(model: type[BaseModel], raw: Any) -> Any | None:
    if not isinstance(raw, dict):
        return None
    try:
        return model.model_validate(raw)
    except ValidationError:
        return None


def plan_from_request(request: TripRequest, layout: BlockLayout) -> TripPlan:
    """A TripPlan carrying the request's header fields and no days."""
    return TripPlan(
        from_=request.from_,
        to=request.to,
        start_date=request.start_date.isoformat(),
        end_date=request.end_date.isoformat(),
        travel_type=request.travel_type,
        transport_preference=request.transport_preference,
        language=request.language,
        budget=Money(amount=request.budget, currency=request.currency) if request.budget else None,
        layout=layout.value,
    )


def build_local_skeleton(request: TripRequest, layout: BlockLayout) -> TripPlan:
    """Deterministic skeleton used when the skeleton model fails."""
    plan = plan_from_request(request, layout)
    plan.travel_style = TravelStyle(type=request.travel_type.value)
    plan.days = [Day(day=i + 1, date=d) for i, d in enumerate(request.dates())]
    return normalize(plan, request)


async def build_skeleton(
    request: TripRequest, gateway: CompletionGateway, settings: Settings
) -> tuple[TripPlan, bool]:
    """
    Ask the skeleton model for the trip structure.

    Args:
        request: The validated trip request.
        gateway: Completion gateway used for the skeleton and repair calls.
        settings: Model names, attempt counts and delays.

    Returns:
        The skeleton plan and whether it came from the model (False when the
        local fallback was used).
    """
    layout = resolve_layout(settings.block_layout)
    prompt = build_skeleton_prompt(request, layout.value)
    params = ModelParams(model=settings.skeleton_model, temperature=0.3, max_tokens=8000)

    async def attempt(n: int) -> tuple[dict[str, Any], list[Day]] | None:
        raw = await gateway.complete(prompt, params)
        data = await recover(raw, gateway, settings)
        if not isinstance(data, dict):
            return None
        days = coerce_days(data.get("days"))
        if days is None or len(days) != request.day_count:
            logger.warning(
                "Skeleton attempt %d returned %s days, expected %d",
                n,
                "no" if days is None else len(days),
                request.day_count,
            )
            return None
        return data, days

    result = await retry(
        attempt,
        settings.skeleton_attempts,
        delay=settings.retry_delay_seconds,
        label="skeleton",
    )
    if result is None:
        logger.warning("Skeleton model failed for %s, using local skeleton", request.to)
        return build_local_skeleton(request, layout), False

    data, days = result
    plan = plan_from_request(request, layout)
    plan.flight = _coerce_model(Flight, data.get("flight"))
    plan.travel_style = _coerce_model(TravelStyle, data.get("travelStyle")) or TravelStyle(
        type=request.travel_type.value
    )
    # Structure only: hotels come from the request, places from the fill stage
    for day in days:
        day.hotel = None
        for block in day.blocks:
            block.options = []
    plan.days = days
    return normalize(plan, request), True
