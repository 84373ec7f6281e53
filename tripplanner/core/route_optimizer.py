"""
Reorders a day's stops into a walkable route starting from the hotel.

Each stop is a block; its first option stands for the place. The model only
returns an order of names. Anything it cannot place falls back to the
original order, so the response always holds every stop exactly once.
"""

import logging
from typing import Any

from tripplanner.core.json_recovery import recover
from tripplanner.core.llm_provider import CompletionGateway, ModelParams
from tripplanner.core.prompts import build_route_prompt
from tripplanner.core.schemas import Block, Hotel, RouteOptimizeResponse, normalize_name
from tripplanner.core.settings import Settings

logger = logging.getLogger(__name__)


def stop_name(block: Block) -> str:
    return block.options[0].name if block.options else ""


def _stop_summary(block: Block) -> dict[str, Any]:
    first = block.options[0] if block.options else None
    return {
        "name": stop_name(block),
        "lat": first.lat if first else None,
        "lng": first.lng if first else None,
        "section": block.section,
        "time": block.time,
    }


def apply_order(stops: list[Block], order: Any) -> list[Block] | None:
    """
    Sort ``stops`` by the model's list of names (case-insensitive).

    Returns None when no name matches a stop. Stops the model left out keep
    their relative order after the matched ones.
    """
    if not isinstance(order, list):
        return None

    by_name: dict[str, int] = {}
    for index, block in enumerate(stops):
        key = normalize_name(stop_name(block))
        if key:
            by_name.setdefault(key, index)

    placed: list[int] = []
    for name in order:
        index = by_name.get(normalize_name(name))
        if index is not None and index not in placed:
            placed.append(index)
    if not placed:
        return None

    rest = [i for i in range(len(stops)) if i not in placed]
    return [stops[i] for i in placed + rest]


async def optimize_route(
    stops: list[Block], hotel: Hotel, gateway: CompletionGateway, settings: Settings
) -> RouteOptimizeResponse:
    """
    Ask the route model for a visiting order.

    Args:
        stops: The day's blocks, in their current order.
        hotel: Start and end point of the route.
        gateway: Completion gateway for the route and repair calls.
        settings: Route model name.

    Returns:
        The reordered stops; ``optimized`` is False when the original order
        was kept.
    """
    if len(stops) < 2:
        return RouteOptimizeResponse(optimized_stops=stops)

    prompt = build_route_prompt(
        {"name": hotel.name, "lat": hotel.lat, "lng": hotel.lng},
        [_stop_summary(b) for b in stops],
    )
    raw = await gateway.complete(
        prompt, ModelParams(model=settings.route_model, temperature=0.2, max_tokens=2000)
    )
    data = await recover(raw, gateway, settings)
    ordered = apply_order(stops, data.get("order") if isinstance(data, dict) else None)
    if ordered is None:
        logger.warning("Route model gave no usable order for %d stops, keeping original", len(stops))
        return RouteOptimizeResponse(optimized_stops=stops)
    return RouteOptimizeResponse(optimized_stops=ordered, optimized=True)
