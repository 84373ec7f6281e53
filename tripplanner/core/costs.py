"""
Cost derivation and budget accounting.

Every option ends up with a per-person cost inside its category's range,
a transport mode and a duration. Hotels get a nightly price, costs are softly
scaled toward the traveler's budget, and the plan's cost summary is rebuilt
from scratch.
"""

import logging
import re
from typing import Protocol

from tripplanner.core.schemas import (
    BudgetStatus,
    CostSummary,
    Hotel,
    Money,
    Option,
    TravelTier,
    TripPlan,
)
from tripplanner.core.sections import is_meal, is_placeholder_name
from tripplanner.core.settings import Settings

logger = logging.getLogger(__name__)

# (base, min, max) per-person cost by category
COST_RANGES: dict[str, tuple[float, float, float]] = {
    "cafe": (12, 5, 25),
    "bar": (30, 15, 80),
    "museum": (25, 10, 40),
    "tour": (60, 30, 200),
    "outdoor": (0, 0, 30),
    "market": (20, 0, 80),
    "activity": (20, 10, 80),
}

RESTAURANT_RANGES: dict[TravelTier, tuple[float, float, float]] = {
    TravelTier.ECONOMY: (20, 10, 30),
    TravelTier.COMFORT: (45, 15, 100),
    TravelTier.PREMIUM: (90, 40, 200),
    TravelTier.LUXURY: (220, 150, 400),
}

# Checked in order; the first category whose keyword appears in the option type wins
_CATEGORY_KEYWORDS: list[tuple[str, tuple[str, ...]]] = [
    ("cafe", ("cafe", "café", "coffee", "bakery", "tea house", "teahouse")),
    ("restaurant", ("restaurant", "bistro", "dining", "diner", "steakhouse", "grill", "food")),
    ("bar", ("bar", "lounge", "pub", "club", "speakeasy", "nightlife", "live music")),
    ("museum", ("museum", "gallery", "exhibition")),
    ("tour", ("tour", "cruise", "show", "theater", "theatre")),
    ("outdoor", ("park", "garden", "street", "viewpoint", "beach", "walk", "square", "trail")),
    ("market", ("market", "shopping", "mall")),
]

FOOD_CATEGORIES = frozenset({"restaurant", "cafe"})

# Per-leg cost of getting to a block's first option
TRANSPORT_LEG_COSTS: dict[str, float] = {
    "walk": 0.0,
    "transit": 3.0,
    "taxi": 15.0,
}

_DISTANCE_RE = re.compile(r"(\d+(?:\.\d+)?)\s*(km|kilomet\w*|mi|mile\w*)?", re.IGNORECASE)


def cost_category(option_type: str, section: str) -> str:
    kind = (option_type or "").lower()
    for category, words in _CATEGORY_KEYWORDS:
        if any(word in kind for word in words):
            return category
    if is_meal(section):
        return "restaurant"
    return "activity"


def cost_range(category: str, tier: TravelTier) -> tuple[float, float, float]:
    if category == "restaurant":
        return RESTAURANT_RANGES[tier]
    return COST_RANGES.get(category, COST_RANGES["activity"])


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def round_to_five(value: float) -> float:
    return float(round(value / 5) * 5)


def default_duration(section: str) -> int:
    if section == "lunch":
        return 60
    if section in ("dinner", "morning", "afternoon"):
        return 90
    return 60


def parse_distance(text: str) -> tuple[float, str] | None:
    """"0.4 mi" -> (0.4, "mi"); a bare number is taken as miles."""
    match = _DISTANCE_RE.search(text or "")
    if not match:
        return None
    unit = (match.group(2) or "mi").lower()
    return float(match.group(1)), ("km" if unit.startswith("k") else "mi")


def transport_for_distance(distance: float, unit: str) -> str:
    walk, mixed, taxi_or_transit = (1, 3, 8) if unit == "km" else (0.6, 2, 5)
    if distance <= walk:
        return "walk"
    if distance <= mixed:
        return "walk/transit"
    if distance <= taxi_or_transit:
        return "taxi/transit"
    return "taxi"


def transport_leg_cost(transport: str) -> float:
    mode = (transport or "").lower()
    if not mode or mode == "walk":
        return TRANSPORT_LEG_COSTS["walk"]
    if any(word in mode for word in ("taxi", "uber", "car", "private")) and "transit" not in mode:
        return TRANSPORT_LEG_COSTS["taxi"]
    if any(word in mode for word in ("metro", "subway", "bus", "transit", "train", "tram")):
        return TRANSPORT_LEG_COSTS["transit"]
    return TRANSPORT_LEG_COSTS["walk"]


def derive_option_costs(option: Option, section: str, tier: TravelTier, currency: str) -> None:
    """Fill in cost, transport and duration for one option, clamping the cost to its range."""
    base, low, high = cost_range(cost_category(option.type, section), tier)
    amount = option.cost_estimate.amount if option.cost_estimate else None
    if amount is None or amount <= 0:
        amount = base
    option.cost_estimate = Money(amount=round_to_five(clamp(amount, low, high)), currency=currency)

    if not option.transport:
        distance = parse_distance(option.distance_from_previous)
        option.transport = transport_for_distance(*distance) if distance else "walk"
    if not option.duration_min or option.duration_min <= 0:
        option.duration_min = default_duration(section)


# =============================================================================
# Hotel Pricing
# =============================================================================


class HotelPricingStrategy(Protocol):
    def nightly_price(self, hotel: Hotel, tier: TravelTier, per_night_target: float) -> float:
        """Nightly price in the plan's currency."""
        ...


class PriceLevelPricing:
    """
    Prices hotels from their price level, nudged toward the nightly budget.

    Hotels that already carry a positive nightly price keep it. Otherwise the
    price level (Places 0-4 or low/moderate/high/luxury, else derived from
    the travel tier) selects a band and a multiplier applied to the budget's
    per-night share.
    """

    LEVEL_BANDS: dict[str, tuple[float, float, float]] = {
        "low": (50, 150, 0.7),
        "moderate": (80, 220, 1.0),
        "high": (180, 400, 1.4),
        "luxury": (250, 600, 1.8),
    }
    PLACES_LEVELS = {"0": "low", "1": "low", "2": "moderate", "3": "high", "4": "luxury"}
    TIER_LEVELS = {
        TravelTier.ECONOMY: "low",
        TravelTier.COMFORT: "moderate",
        TravelTier.PREMIUM: "high",
        TravelTier.LUXURY: "luxury",
    }

    def level_for(self, hotel: Hotel, tier: TravelTier) -> str:
        level = (hotel.price_level or "").strip().lower()
        level = self.PLACES_LEVELS.get(level, level)
        return level if level in self.LEVEL_BANDS else self.TIER_LEVELS[tier]

    def nightly_price(self, hotel: Hotel, tier: TravelTier, per_night_target: float) -> float:
        if hotel.nightly_price and hotel.nightly_price.amount > 0:
            return hotel.nightly_price.amount
        low, high, multiplier = self.LEVEL_BANDS[self.level_for(hotel, tier)]
        price = per_night_target * multiplier if per_night_target > 0 else (low + high) / 2
        return float(round(clamp(price, low, high) / 10) * 10)


# =============================================================================
# Budget
# =============================================================================


def soft_scale_factor(target: float, actual: float, low: float, high: float) -> float:
    """Ratio of target to actual spend, clamped so costs are nudged rather than forced."""
    if actual <= 0:
        return 1.0
    return clamp(max(target, 0.0) / actual, low, high)


def budget_status(percent: float, settings: Settings) -> BudgetStatus:
    if percent <= settings.budget_under_percent:
        return BudgetStatus.UNDER
    if percent <= settings.budget_on_track_percent:
        return BudgetStatus.ON_TRACK
    if percent <= settings.budget_over_percent:
        return BudgetStatus.OVER
    return BudgetStatus.WAY_OVER


def hotel_nights(plan: TripPlan) -> int:
    return max(1, len(plan.days) - 1)


def total_hotel_cost(plan: TripPlan) -> float:
    nights = hotel_nights(plan)
    day_hotels = [d.hotel for d in plan.days[:nights] if d.hotel and d.hotel.nightly_price]
    if day_hotels:
        total = sum(h.nightly_price.amount for h in day_hotels)
        # Nights without a hotel of their own are charged at the average rate
        return total + (nights - len(day_hotels)) * (total / len(day_hotels))
    priced = [h for h in plan.hotels if h.nightly_price]
    return priced[0].nightly_price.amount * nights if priced else 0.0


def _costable_options(plan: TripPlan):
    for day in plan.days:
        for block in day.blocks:
            real = [o for o in block.options if not is_placeholder_name(o.name)]
            for option in real:
                yield block, option


def daily_spend(plan: TripPlan) -> tuple[float, float, float]:
    """Trip totals for food, activities and transport.

    A block contributes the average of its options, since the traveler picks one.
    """
    food = activities = transport = 0.0
    for day in plan.days:
        for block in day.blocks:
            real = [o for o in block.options if not is_placeholder_name(o.name)]
            if not real:
                continue
            for option in real:
                share = option.estimated_cost / len(real)
                if cost_category(option.type, block.section) in FOOD_CATEGORIES:
                    food += share
                else:
                    activities += share
            transport += transport_leg_cost(real[0].transport)
    return food, activities, transport


def budget_scale_factor(plan: TripPlan, settings: Settings) -> float:
    """
    Per-day scaling factor that moves option costs toward the budget.

    The daily target is whatever the budget leaves after flight and hotels,
    spread across the days. Returns 1.0 without a budget.
    """
    if not plan.budget or plan.budget.amount <= 0 or not plan.days:
        return 1.0
    flight = plan.flight.average_cost if plan.flight else 0.0
    remaining = plan.budget.amount - flight - total_hotel_cost(plan)
    food, activities, _ = daily_spend(plan)
    days = len(plan.days)
    return soft_scale_factor(
        remaining / days,
        (food + activities) / days,
        settings.budget_scale_min,
        settings.budget_scale_max,
    )


def build_cost_summary(plan: TripPlan, settings: Settings) -> CostSummary:
    flight = plan.flight.average_cost if plan.flight else 0.0
    hotels = total_hotel_cost(plan)
    food, activities, transport = daily_spend(plan)
    total = flight + hotels + food + activities + transport
    budget = plan.budget.amount if plan.budget else 0.0
    percent = round(total / budget * 100, 1) if budget > 0 else 0.0
    return CostSummary(
        total_flight_cost=round(flight, 2),
        total_hotel_cost=round(hotels, 2),
        total_transport_cost=round(transport, 2),
        total_food_cost=round(food, 2),
        total_activities_cost=round(activities, 2),
        total_estimated_cost=round(total, 2),
        budget=budget,
        budget_used_percent=percent,
        budget_status=budget_status(percent, settings) if budget > 0 else BudgetStatus.ON_TRACK,
    )


def apply_costs(
    plan: TripPlan, settings: Settings, pricing: HotelPricingStrategy | None = None
) -> TripPlan:
    """
    Derive every cost in the plan in place and rebuild its cost summary.

    Args:
        plan: A normalized plan.
        settings: Budget thresholds, scale bounds and the hotel budget share.
        pricing: Hotel pricing strategy, PriceLevelPricing by default.

    Returns:
        The same plan, with option costs inside their category ranges.
    """
    pricing = pricing or PriceLevelPricing()
    tier = plan.travel_type
    currency = plan.budget.currency if plan.budget else "USD"

    for block, option in _costable_options(plan):
        derive_option_costs(option, block.section, tier, currency)

    per_night = 0.0
    if plan.budget and plan.budget.amount > 0:
        per_night = plan.budget.amount * settings.hotel_budget_share / hotel_nights(plan)
    for hotel in plan.hotels + [d.hotel for d in plan.days if d.hotel]:
        price = pricing.nightly_price(hotel, tier, per_night)
        hotel.nightly_price = Money(
            amount=price,
            currency=hotel.nightly_price.currency if hotel.nightly_price else currency,
        )

    factor = budget_scale_factor(plan, settings)
    if factor != 1.0:
        logger.info("Scaling option costs by %.2f toward budget", factor)
        for block, option in _costable_options(plan):
            _, low, high = cost_range(cost_category(option.type, block.section), tier)
            scaled = clamp(option.estimated_cost * factor, low, high)
            option.cost_estimate = Money(amount=round_to_five(scaled), currency=currency)

    plan.cost_summary = build_cost_summary(plan, settings)
    return plan
