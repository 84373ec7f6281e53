"""
Uniqueness pass over a filled plan.

Removes repeated places at three levels: inside a block (every later copy
goes), across a day's blocks and restaurants across the whole trip (both
without letting a block drop below the minimum option count). Empty blocks
then get a placeholder.
"""

from collections.abc import Callable

from tripplanner.core.schemas import Option, TripPlan
from tripplanner.core.sections import (
    MIN_OPTIONS,
    is_meal,
    is_restaurant,
    placeholder_option,
)


def keep_with_floor(
    options: list[Option], is_duplicate: Callable[[Option], bool], floor: int = MIN_OPTIONS
) -> list[Option]:
    """
    Drop duplicates, but keep the earliest ones while fewer than ``floor``
    unique options would remain. Input order is preserved.
    """
    unique_count = sum(1 for o in options if not is_duplicate(o))
    spare = max(0, floor - unique_count)
    kept = []
    for option in options:
        if is_duplicate(option):
            if spare <= 0:
                continue
            spare -= 1
        kept.append(option)
    return kept


def _dedupe_within_blocks(plan: TripPlan) -> None:
    # No floor here: a block left short is topped up by the micro-fill loop
    for day in plan.days:
        for block in day.blocks:
            seen: set[str] = set()
            kept = []
            for option in block.options:
                if option.key not in seen:
                    seen.add(option.key)
                    kept.append(option)
            block.options = kept


def _dedupe_within_days(plan: TripPlan) -> None:
    for day in plan.days:
        seen: set[str] = set()
        for block in day.blocks:
            block.options = keep_with_floor(block.options, lambda o: o.key in seen)
            seen.update(o.key for o in block.options)


def _dedupe_restaurants(plan: TripPlan) -> None:
    first_day: dict[str, int] = {}
    for index, day in enumerate(plan.days):
        for block in day.blocks:
            if is_meal(block.section):
                block.options = keep_with_floor(
                    block.options, lambda o: first_day.get(o.key, index) < index
                )
            for option in block.options:
                if is_meal(block.section) or is_restaurant(option):
                    first_day.setdefault(option.key, index)


def _fill_empty_blocks(plan: TripPlan) -> None:
    currency = plan.budget.currency if plan.budget else "USD"
    for day in plan.days:
        for block in day.blocks:
            if not block.options:
                block.options = [placeholder_option(block.section, plan.to, day.hotel, currency)]


def enforce_unique_places(plan: TripPlan) -> TripPlan:
    """Deduplicate a plan in place and return it."""
    _dedupe_within_blocks(plan)
    _dedupe_within_days(plan)
    _dedupe_restaurants(plan)
    _fill_empty_blocks(plan)
    return plan
