"""
Canonical time-of-day sections for a day's itinerary and the synthetic
placeholder used when a section cannot be filled.
"""

from enum import Enum

from tripplanner.core.schemas import Hotel, Money, Option, normalize_name


class BlockLayout(str, Enum):
    FULL = "full"
    COMPACT = "compact"


SECTION_TIMES: dict[str, str] = {
    "morning": "08:00 - 10:30",
    "midday": "10:45 - 12:00",
    "lunch": "12:00 - 13:30",
    "afternoon": "14:00 - 16:30",
    "evening": "16:30 - 18:30",
    "dinner": "18:30 - 20:00",
    "night": "20:00 - 23:30",
    "late_night": "23:30 - 03:00",
}

LAYOUT_SECTIONS: dict[BlockLayout, list[str]] = {
    BlockLayout.FULL: [
        "morning",
        "midday",
        "lunch",
        "afternoon",
        "evening",
        "dinner",
        "night",
        "late_night",
    ],
    BlockLayout.COMPACT: ["morning", "lunch", "afternoon", "dinner", "night"],
}

MEAL_SECTIONS = frozenset({"lunch", "dinner"})
NIGHT_SECTIONS = frozenset({"night", "late_night"})

# Names the models fall back to when they run out of ideas
PLACEHOLDER_PHRASES = (
    "suggested activity",
    "placeholder",
    "free time",
    "explore nearby",
    "relax at hotel",
    "tbd",
)

ALTERNATIVE_SUFFIX = " (Alternative)"

# Options per block after repair
MIN_OPTIONS = 2
MAX_OPTIONS = 4


def resolve_layout(value: str | BlockLayout | None) -> BlockLayout:
    try:
        return BlockLayout(value or BlockLayout.FULL)
    except ValueError:
        return BlockLayout.FULL


def sections_for(layout: str | BlockLayout | None) -> list[str]:
    return LAYOUT_SECTIONS[resolve_layout(layout)]


def default_time(section: str) -> str:
    return SECTION_TIMES.get(section, SECTION_TIMES["late_night"])


def is_meal(section: str) -> bool:
    return section in MEAL_SECTIONS


def is_restaurant(option: Option) -> bool:
    kind = option.type.lower()
    return any(word in kind for word in ("restaurant", "bistro", "dining", "diner", "steakhouse"))


def placeholder_name(section: str, destination: str) -> str:
    return f"{section.upper()} Activity in {destination or 'city'}"


def is_placeholder_name(name: str) -> bool:
    key = normalize_name(name)
    if not key or len(key) < 2:
        return True
    if any(phrase in key for phrase in PLACEHOLDER_PHRASES):
        return True
    # Synthetic "<SECTION> Activity in <city>" options and their alternatives
    return any(key.startswith(f"{section} activity in ") for section in SECTION_TIMES)


def placeholder_option(
    section: str, destination: str, hotel: Hotel | None = None, currency: str = "USD"
) -> Option:
    """The last-resort option for a section nothing real could be found for."""
    destination = destination or "city"
    return Option(
        name=placeholder_name(section, destination),
        type="restaurant" if is_meal(section) else "activity",
        description=f"Explore {section.replace('_', ' ')} options in {destination}.",
        address=(hotel.address if hotel and hotel.address else destination),
        lat=(hotel.lat if hotel and hotel.lat is not None else 0.0),
        lng=(hotel.lng if hotel and hotel.lng is not None else 0.0),
        distance_from_previous="0.5 km",
        transport="walk",
        cost_estimate=Money(amount=0, currency=currency),
        rating=4.0,
        label="Explore",
        tags=[section],
    )
