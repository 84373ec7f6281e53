"""
Micro-fill repair loop.

Walks the plan day by day, block by block, and tops up every block that has
fewer than the minimum number of real options with small targeted model
calls. Blocks that still cannot be filled end up with a marked alternative or
a single placeholder, so the loop always terminates with a complete plan.
"""

import logging
from typing import Any

from tripplanner.core.json_recovery import parse_json_loose
from tripplanner.core.llm_provider import CompletionGateway, ModelParams
from tripplanner.core.prompts import build_micro_fill_prompt
from tripplanner.core.retry import retry
from tripplanner.core.schemas import (
    Block,
    Day,
    Option,
    TravelTier,
    TripPlan,
    coerce_options,
)
from tripplanner.core.sections import (
    ALTERNATIVE_SUFFIX,
    MAX_OPTIONS,
    MIN_OPTIONS,
    is_meal,
    is_placeholder_name,
    is_restaurant,
    placeholder_option,
)
from tripplanner.core.settings import Settings

logger = logging.getLogger(__name__)


def accept_candidate(option: Option, excluded: set[str]) -> bool:
    """A micro-fill candidate must be a real-looking, not yet used name."""
    return len(option.key) >= 2 and not is_placeholder_name(option.name) and option.key not in excluded


async def micro_fill(
    gateway: CompletionGateway,
    settings: Settings,
    *,
    destination: str,
    section: str,
    time: str,
    travel_type: TravelTier,
    excluded: set[str],
    needed: int,
    near: str = "",
) -> list[Option] | None:
    """
    One targeted request for ``needed`` more places for a block.

    Returns the acceptable candidates (possibly none), or None when the
    provider returned nothing at all.
    """
    prompt = build_micro_fill_prompt(
        destination, section, time, travel_type, sorted(excluded), needed, near
    )
    raw = await gateway.complete(
        prompt, ModelParams(model=settings.micro_fill_model, temperature=0.5, max_tokens=2000)
    )
    if not raw:
        return None

    data: Any = parse_json_loose(raw)
    if isinstance(data, dict):
        data = data.get("options")
    return [o for o in coerce_options(data) if accept_candidate(o, excluded)]


class _RepairState:
    """Names already used, plus a breaker for a provider that has gone silent."""

    def __init__(self, plan: TripPlan, max_silent: int) -> None:
        self.trip_restaurants = {
            o.key
            for day in plan.days
            for block in day.blocks
            for o in block.options
            if (is_meal(block.section) or is_restaurant(o)) and not is_placeholder_name(o.name)
        }
        self.silent_calls = 0
        self.max_silent = max(1, max_silent)

    @property
    def provider_down(self) -> bool:
        return self.silent_calls >= self.max_silent


async def _repair_block(
    plan: TripPlan,
    day: Day,
    block: Block,
    day_names: set[str],
    state: _RepairState,
    gateway: CompletionGateway,
    settings: Settings,
) -> None:
    excluded = day_names | {o.key for o in block.options}
    if is_meal(block.section):
        excluded |= state.trip_restaurants
    near = day.hotel.address if day.hotel and day.hotel.address else ""

    async def attempt(n: int) -> Block | None:
        if state.provider_down:
            return block
        candidates = await micro_fill(
            gateway,
            settings,
            destination=plan.to,
            section=block.section,
            time=block.time,
            travel_type=plan.travel_type,
            excluded=excluded,
            needed=max(MIN_OPTIONS, 3 - len(block.options)),
            near=near,
        )
        if candidates is None:
            state.silent_calls += 1
            return None
        state.silent_calls = 0
        for candidate in candidates:
            if len(block.options) >= MAX_OPTIONS:
                break
            if candidate.key in excluded:
                continue
            if len(candidate.address) < 3:
                candidate.address = near or plan.to
            block.options.append(candidate)
            excluded.add(candidate.key)
            day_names.add(candidate.key)
            if is_meal(block.section):
                state.trip_restaurants.add(candidate.key)
        return block if len(block.options) >= MIN_OPTIONS else None

    await retry(
        attempt,
        settings.micro_fill_attempts,
        delay=settings.micro_fill_delay_seconds,
        label=f"micro-fill {block.section} day {day.day}",
    )


def _finish_block(plan: TripPlan, day: Day, block: Block) -> None:
    """Last resort once retries are exhausted."""
    if len(block.options) >= MIN_OPTIONS:
        return
    if len(block.options) == 1:
        alternative = block.options[0].model_copy(deep=True)
        alternative.name = block.options[0].name + ALTERNATIVE_SUFFIX
        block.options.append(alternative)
        return
    currency = plan.budget.currency if plan.budget else "USD"
    block.options = [placeholder_option(block.section, plan.to, day.hotel, currency)]


async def ensure_minimum(
    plan: TripPlan, gateway: CompletionGateway, settings: Settings
) -> TripPlan:
    """
    Make every block hold between MIN_OPTIONS and MAX_OPTIONS options.

    Placeholders are stripped before counting, so a block holding only a
    placeholder is repaired like an empty one. Blocks are processed in order
    with a delay between calls; once the provider stops answering, remaining
    blocks go straight to the last-resort fallback.
    """
    state = _RepairState(plan, settings.micro_fill_attempts)

    for day in plan.days:
        for block in day.blocks:
            block.options = [o for o in block.options if not is_placeholder_name(o.name)]
        day_names = {o.key for block in day.blocks for o in block.options}

        for block in day.blocks:
            block.options = block.options[:MAX_OPTIONS]
            if len(block.options) < MIN_OPTIONS and not state.provider_down:
                logger.info(
                    "Day %d %s has %d options, requesting more",
                    day.day,
                    block.section,
                    len(block.options),
                )
                await _repair_block(plan, day, block, day_names, state, gateway, settings)
            _finish_block(plan, day, block)

    if state.provider_down:
        logger.warning("Micro-fill provider stopped responding; remaining blocks use fallbacks")
    return plan
