"""
Deterministic offline plans and hotel lists.

Used when no provider is configured or live generation fails. Output has the
same shape as a live plan, with unique place names per day and per trip.
"""

import logging

from tripplanner.core.costs import apply_costs
from tripplanner.core.schemas import (
    Block,
    Day,
    Flight,
    Hotel,
    Money,
    Option,
    TravelStyle,
    TravelTier,
    TripPlan,
    TripRequest,
)
from tripplanner.core.sections import BlockLayout, default_time, sections_for
from tripplanner.core.settings import Settings, get_settings
from tripplanner.core.skeleton import plan_from_request

logger = logging.getLogger(__name__)

# (type, name seeds) for the two options of each section; seeds never repeat across sections
MOCK_SEEDS: dict[str, list[tuple[str, list[str]]]] = {
    "morning": [
        ("landmark", ["Old Town Gate", "Clock Tower", "Memorial Square", "Harbor Lighthouse"]),
        ("museum", ["History Museum", "Modern Art Gallery", "Science Center", "Heritage House"]),
    ],
    "midday": [
        ("viewpoint", ["Skydeck", "Hilltop Lookout", "Bridge Overlook", "Scenic Terrace"]),
        ("market", ["Central Market", "Craft Bazaar", "Flea Market", "Farmers Market"]),
    ],
    "lunch": [
        ("restaurant", ["Noodle House", "Corner Bistro", "Taqueria", "Dumpling Kitchen"]),
        ("restaurant", ["Deli", "Ramen Bar", "Fish Market Grill", "Garden Cafe Restaurant"]),
    ],
    "afternoon": [
        ("garden", ["Botanical Garden", "Riverside Park", "Sculpture Park", "Japanese Garden"]),
        ("activity", ["Architecture Walk", "Cooking Class", "Bike Route", "Harbor Tour"]),
    ],
    "evening": [
        ("viewpoint", ["Sunset Pier", "Observation Deck", "Waterfront Promenade", "Ferris Wheel"]),
        ("cafe", ["Coffee Roasters", "Tea House", "Patisserie", "Chocolate Cafe"]),
    ],
    "dinner": [
        ("restaurant", ["Steakhouse", "Seafood Grill", "Trattoria", "Brasserie"]),
        ("restaurant", ["Supper Club", "Tasting Room", "Chophouse", "Tavern"]),
    ],
    "night": [
        ("bar", ["Jazz Club", "Rooftop Lounge", "Cocktail Bar", "Wine Bar"]),
        ("bar", ["Comedy Club", "Live Music Hall", "Brewpub", "Whisky Lounge"]),
    ],
    "late_night": [
        ("bar", ["Speakeasy", "Karaoke Bar", "Night Owl Pub", "Piano Bar"]),
        ("cafe", ["24h Diner Cafe", "Night Bakery", "Dessert Cafe", "Late Coffee Bar"]),
    ],
}

# Hotel nightly price band (USD) per travel tier
HOTEL_BANDS: dict[TravelTier, tuple[float, float]] = {
    TravelTier.ECONOMY: (60, 160),
    TravelTier.COMFORT: (140, 260),
    TravelTier.PREMIUM: (280, 600),
    TravelTier.LUXURY: (800, 2000),
}

HOTEL_AREAS = ["Downtown", "Old Town", "Riverside", "Arts District", "Central Station"]
HOTEL_NAMES = ["Grand Hotel", "Central Inn", "Riverside Suites", "Boutique House", "Station Hotel"]


def _mock_option(destination: str, section: str, day_number: int, slot: int, hotel: Hotel, transport: str) -> Option:
    kind, seeds = MOCK_SEEDS[section][slot]
    seed = seeds[(day_number - 1) % len(seeds)]
    return Option(
        name=f"{destination} {seed} D{day_number}",
        type=kind,
        description=f"A well-loved {kind} in {destination}.",
        address=hotel.address or destination,
        lat=hotel.lat,
        lng=hotel.lng,
        distance_from_previous="0.8 km",
        transport=transport,
        rating=4.5 - slot * 0.2,
        label="Top Pick" if slot == 0 else "Relaxed Option",
        tags=[section, kind],
        tip="Offline suggestion; check opening hours before you go.",
    )


def _default_hotel(destination: str) -> Hotel:
    return Hotel(name=f"{destination} Central Hotel", address=destination, area="Downtown")


def build_mock_trip(
    request: TripRequest,
    layout: BlockLayout = BlockLayout.FULL,
    settings: Settings | None = None,
) -> TripPlan:
    """
    Build a complete offline plan for ``request``.

    Every section of every day gets two options, hotels come from the request
    when selected, and costs are derived the same way as for live plans.
    """
    plan = plan_from_request(request, layout)
    plan.mock = True
    plan.flight = Flight(
        average_cost=1200,
        currency=request.currency,
        duration="11h 45m",
        departure_airport=(request.from_ or "Home").split(",")[0].strip(),
        arrival_airport=request.to.split(",")[0].strip(),
        notes="Offline estimate; check live fares.",
    )
    plan.travel_style = TravelStyle(
        type=request.travel_type.value,
        summary=f"A {request.day_count}-day {request.travel_type.value} trip to {request.to}.",
    )

    for index, date in enumerate(request.dates()):
        hotel = request.hotel_for_day(index) or _default_hotel(request.to)
        plan.days.append(
            Day(
                day=index + 1,
                date=date,
                blocks=[
                    Block(
                        section=section,
                        time=default_time(section),
                        options=[
                            _mock_option(request.to, section, index + 1, slot, hotel, request.transport_preference)
                            for slot in range(2)
                        ],
                    )
                    for section in sections_for(layout)
                ],
            )
        )
        plan.assign_hotel(index, hotel)

    try:
        apply_costs(plan, settings or get_settings())
    except Exception:
        logger.exception("Cost derivation failed for mock plan; leaving costs unset")
    return plan


def build_mock_hotels(to: str, travel_type: TravelTier, count: int = 5) -> list[Hotel]:
    """``count`` offline hotels with prices spread across the tier's band."""
    low, high = HOTEL_BANDS[travel_type]
    step = (high - low) / max(1, count - 1)
    hotels = []
    for i in range(count):
        area = HOTEL_AREAS[i % len(HOTEL_AREAS)]
        hotels.append(
            Hotel(
                id=f"hotel_{i + 1}",
                name=f"{to} {HOTEL_NAMES[i % len(HOTEL_NAMES)]}",
                address=f"{area}, {to}",
                area=area,
                nightly_price=Money(amount=round(low + step * i), currency="USD"),
                rating=round(4.6 - 0.1 * i, 1),
                description=f"{travel_type.value.title()} stay in {area}.",
            )
        )
    return hotels
