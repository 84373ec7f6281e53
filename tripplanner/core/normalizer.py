"""
Schema normalization for trip plans.

Forces every day into the canonical section sequence regardless of what the
models returned. Pure and idempotent: no network calls, cannot fail.
"""

from tripplanner.core.schemas import Block, Day, TripPlan, TripRequest
from tripplanner.core.sections import (
    SECTION_TIMES,
    default_time,
    resolve_layout,
    sections_for,
)


def normalize_day_blocks(day: Day, sections: list[str]) -> list[Block]:
    """
    Rebuild a day's blocks in canonical order, exactly once each.

    Sections the model supplied keep their time and options (repeated
    sections are merged into the first occurrence); omitted sections get the
    default time window and no options; unknown sections are dropped.
    """
    by_section: dict[str, Block] = {}
    for block in day.blocks:
        if block.section not in SECTION_TIMES:
            continue
        existing = by_section.get(block.section)
        if existing is None:
            by_section[block.section] = block
        else:
            existing.options.extend(block.options)

    fixed = []
    for section in sections:
        existing = by_section.get(section)
        fixed.append(
            Block(
                section=section,
                time=(existing.time if existing and existing.time else default_time(section)),
                options=list(existing.options) if existing else [],
            )
        )
    return fixed


def normalize(plan: TripPlan, request: TripRequest | None = None) -> TripPlan:
    """
    Repair a plan's structure in place and return it.

    With a request, the day list is also padded or trimmed to the requested
    date range, dates are re-derived from position, and each day gets the
    caller-selected hotel (falling back to the day's own hotel).
    """
    layout = resolve_layout(plan.layout)
    plan.layout = layout.value
    sections = sections_for(layout)

    if request is not None:
        dates = request.dates()
        plan.days = plan.days[: len(dates)]
        while len(plan.days) < len(dates):
            plan.days.append(Day(day=len(plan.days) + 1))

    for index, day in enumerate(plan.days):
        day.day = index + 1
        day.blocks = normalize_day_blocks(day, sections)
        if request is None:
            continue
        day.date = dates[index]
        plan.assign_hotel(index, request.hotel_for_day(index) or day.hotel)

    return plan
