"""
Prompt builders for every LLM call the planner makes.

These are pure string formatting. Each prompt spells out the JSON shape the
caller expects and repeats the constraints that later stages enforce anyway
(section order, 2-4 options per block, unique restaurants), so a model that
ignores them degrades the plan rather than breaking it.
"""

import json
from typing import Any

from tripplanner.core.schemas import (
    HotelSuggestionRequest,
    TravelTier,
    TripPlan,
    TripRequest,
)
from tripplanner.core.sections import (
    MEAL_SECTIONS,
    NIGHT_SECTIONS,
    default_time,
    sections_for,
)

OPTION_FIELDS = (
    "- name (real place, no emojis in the name)\n"
    '- type ("restaurant" | "cafe" | "museum" | "bar" | "market" | "activity" | '
    '"viewpoint" | "street" | "garden" | "landmark")\n'
    "- description (1-3 sentences, ONE LINE only, no line breaks)\n"
    "- famousFor (one line, what makes it special)\n"
    "- whatToDo (one line, what the visitor actually does there)\n"
    "- address (real-world formatted address)\n"
    "- lat (number)\n"
    "- lng (number)\n"
    '- distanceFromPrevious (string, like "0.4 mi" or "1.2 km")\n'
    '- transport (string, like "walk", "metro", "bus", "taxi/Uber")\n'
    "- estimatedCost (number, per person, matching real-world pricing)\n"
    '- cost_estimate (object: { "amount": number, "currency": "USD" }) with the same amount\n'
    '- mustTryDish (required for restaurants, else "")\n'
    '- recommendedDrink (required for cafes and bars, else "")\n'
    "- tip (one-line practical tip)\n"
    "- rating (number 1.0-5.0)\n"
    '- label ("Top Pick" | "Very Popular" | "Relaxed Option" | "Best for Photos" | "Budget Option")\n'
    '- tags (array of 1-4 short tags like ["ramen", "late night"])'
)

_RESTAURANT_PRICING = {
    TravelTier.ECONOMY: "Casual restaurants, street food and local spots: $10-30 per person.",
    TravelTier.COMFORT: "Mid-range restaurants with a la carte menus: $30-100 per person.",
    TravelTier.PREMIUM: "Upscale, well-reviewed restaurants: $60-200 per person.",
    TravelTier.LUXURY: (
        "ONLY fine dining, Michelin-starred or high-end acclaimed restaurants: "
        "$150-400+ per person. NO casual restaurants, NO diners, NO budget options."
    ),
}

_TIER_STYLE = {
    TravelTier.ECONOMY: "local food, free attractions, public transit",
    TravelTier.COMFORT: "mix of paid and free attractions, mid-range restaurants",
    TravelTier.PREMIUM: "nicer restaurants, paid museums, rooftop bars, taxis",
    TravelTier.LUXURY: "Michelin restaurants, high-end experiences, premium bars, private transfers",
}


def tier_pricing_guidance(tier: TravelTier) -> str:
    return (
        f"Travel type {tier.value}: {_TIER_STYLE[tier]}.\n"
        f"- Restaurants: {_RESTAURANT_PRICING[tier]}\n"
        "- Cafes and bars: realistic drink/snack prices for the destination.\n"
        "- Museums and attractions: realistic ticket prices for the destination.\n"
        "- Only parks, streets and walks may have estimatedCost = 0.\n"
        "- Match prices to the destination's actual cost of living."
    )


def section_guidance(section: str) -> str:
    """Which kinds of places belong in a section."""
    if section in MEAL_SECTIONS:
        return "restaurants only"
    if section in NIGHT_SECTIONS:
        return (
            "nightlife only: bars, speakeasies, lounges, clubs, live music venues, "
            "night markets or a real 24/7 cafe/diner (NOT dinner restaurants)"
        )
    return (
        "activities, attractions, landmarks, viewpoints, parks, museums, "
        "shopping areas (NOT restaurants)"
    )


def _budget_text(budget: float | None) -> str:
    return f"{budget:g}" if budget else "unknown"


def _block_lines(layout: str) -> str:
    return "\n".join(
        f'  {i}) {section:<11}("{default_time(section)}")'
        for i, section in enumerate(sections_for(layout), start=1)
    )


def _empty_blocks(layout: str) -> list[dict[str, Any]]:
    return [
        {"time": default_time(section), "section": section, "options": []}
        for section in sections_for(layout)
    ]


def _hotel_json(request: TripRequest) -> str:
    return json.dumps(
        [h.model_dump(by_alias=True, exclude_none=True) for h in request.hotel_per_day],
        ensure_ascii=False,
    )


def build_skeleton_prompt(request: TripRequest, layout: str) -> str:
    """Structure-only prompt: days, dates, hotels and empty blocks. No place names."""
    shape = {
        "flight": {
            "averageCost": 0,
            "currency": request.currency,
            "duration": "",
            "departureAirport": "",
            "arrivalAirport": "",
            "notes": "",
        },
        "travelStyle": {"type": request.travel_type.value, "summary": ""},
        "days": [
            {
                "day": 1,
                "date": "YYYY-MM-DD",
                "hotel": {"...": "hotelPerDay[0] copied exactly"},
                "blocks": _empty_blocks(layout),
            }
        ],
    }
    section_count = len(sections_for(layout))
    origin = request.from_ or "the traveler's home"
    budget_text = _budget_text(request.budget)

    return f"""
You are a JSON-only planner.

TASK:
- Build a TRIP SKELETON for {origin} -> {request.to}.
- Do NOT invent any real place names.
- Do NOT add any activity options.
- Your job is ONLY the structure: days, dates, hotels and {section_count} empty blocks per day.

RULES:
- Output ONLY valid JSON, no markdown, no comments.
- ALL text fields must be single-line strings.
- There must be EXACTLY {request.day_count} days, from {request.start_date.isoformat()} to {request.end_date.isoformat()} inclusive.
- Each day MUST have these {section_count} blocks in this exact order:
{_block_lines(layout)}
- For this skeleton, set "options": [] for every block.
- Use the USER-SELECTED HOTELS exactly as given (index 0 = day 1).
- Estimate the flight from "{request.from_}" to "{request.to}" (average round-trip cost, duration, airports).

TRIP INFO:
- From: "{request.from_}"
- To: "{request.to}"
- Start date: "{request.start_date.isoformat()}"
- End date: "{request.end_date.isoformat()}"
- Travel type: "{request.travel_type.value}"
- Transport preference: "{request.transport_preference}"
- Budget: "{budget_text} {request.currency}"
- Language: "{request.language}"

USER-SELECTED HOTELS:
{_hotel_json(request)}

REQUIRED JSON SHAPE:
{json.dumps(shape, indent=2)}

Return ONLY JSON.
""".strip()


def build_fill_prompt(request: TripRequest, skeleton: TripPlan, layout: str) -> str:
    """Ask the fill model to replace every block's empty options with real places."""
    skeleton_json = json.dumps(
        skeleton.model_dump(
            by_alias=True,
            include={"flight", "travel_style", "hotels", "days"},
            exclude_none=True,
        ),
        indent=2,
        ensure_ascii=False,
    )
    section_names = ", ".join(sections_for(layout))
    meal = ", ".join(s for s in sections_for(layout) if s in MEAL_SECTIONS).upper()
    night = ", ".join(s for s in sections_for(layout) if s in NIGHT_SECTIONS).upper()
    budget_text = _budget_text(request.budget)

    return f"""
You are a professional travel planner.

You are given a TRIP SKELETON in JSON. Your job is to FILL it with
REAL PLACES and realistic costs.

CRITICAL RULES - PRESERVE SKELETON STRUCTURE:
- KEEP THE EXACT SAME TOP-LEVEL STRUCTURE from the skeleton.
- Do NOT modify "hotels", "flight", "travelStyle" or any day's "hotel".
- Do NOT remove or reorder days. Do NOT remove or reorder blocks.
- ONLY MODIFY: block.options - fill each block with 2-4 REAL places.
- NO free time, NO placeholders, NO "suggested activity", NO hotel-based fakes.
- Every option must be a real, verifiable place inside {request.to}.
- NEVER leave "options": [].

DESTINATION INFO:
- From: "{request.from_}"
- To: "{request.to}"
- Dates: "{request.start_date.isoformat()}" to "{request.end_date.isoformat()}"
- Transport preference: "{request.transport_preference}"
- Budget: "{budget_text} {request.currency}"
- Language for descriptions: "{request.language}"

HOTEL RULES:
- Each day starts from that day's hotel (skeleton.days[n].hotel).
- lat/lng must be realistic for the real place.
- Prefer places a sensible distance from the hotel and from the previous stop.

BLOCK RULES (blocks are {section_names}):
- {meal}: {section_guidance("lunch")}.
- {night}: {section_guidance("night")}.
- All other blocks: {section_guidance("morning")}.
- Generate 3-4 options per block, never fewer than 2.

RESTAURANT DEDUPLICATION RULE (CRITICAL):
- Each restaurant may appear ONLY ONCE in the entire trip (all days, all meals).
- Do NOT repeat any place name within the same day.

OPTION FORMAT (for EVERY option):
{OPTION_FIELDS}

COST RULES:
{tier_pricing_guidance(request.travel_type)}

SKELETON TO FILL (keep structure, fill options):
{skeleton_json}

Return ONLY valid JSON. No markdown, no comments.
""".strip()


def build_micro_fill_prompt(
    destination: str,
    section: str,
    time: str,
    travel_type: TravelTier,
    excluded_names: list[str],
    needed: int,
    near: str = "",
) -> str:
    """Small targeted request for a few more places for one under-filled block."""
    pricing = ""
    if section in MEAL_SECTIONS:
        pricing = f"PRICING: {_RESTAURANT_PRICING[travel_type]}\n"
    elif section in NIGHT_SECTIONS and travel_type == TravelTier.LUXURY:
        pricing = "PRICING: high-end cocktail bars, rooftop lounges, exclusive nightlife venues.\n"

    shape = {
        "options": [
            {
                "name": "string",
                "type": "string",
                "description": "1 sentence max, no new lines",
                "address": "string",
                "lat": 0,
                "lng": 0,
                "distanceFromPrevious": "0.4 mi",
                "transport": "walk",
                "estimatedCost": 15,
                "famousFor": "string",
                "whatToDo": "string",
                "mustTryDish": "string",
                "recommendedDrink": "string",
                "tip": "string",
                "rating": 4.5,
                "label": "Top Pick",
                "tags": ["string"],
            }
        ]
    }
    near_line = f"- Prefer places near {near}.\n" if near else ""

    return (
        f'Give me {needed} REAL, VERIFIED places for the "{section}" block ({time}) in {destination}.\n'
        f"Travel type: {travel_type.value}\n"
        f"{pricing}"
        "Rules:\n"
        '- NO placeholders, NO "Suggested Activity", NO "free time", NO fake names.\n'
        f"- Do NOT repeat any of these names: {', '.join(excluded_names) or 'none'}.\n"
        f"- Only real {section_guidance(section)}.\n"
        f"{near_line}"
        "\nReturn STRICT JSON only, exactly in this shape:\n"
        f"{json.dumps(shape, indent=2)}\n\n"
        "Return ONLY JSON, no explanation."
    )


def build_repair_prompt(bad_text: str) -> str:
    return (
        "You are a JSON repair tool.\n\n"
        "TASK:\n"
        "- Input is broken or partial JSON.\n"
        "- Fix it into STRICT valid JSON and output ONE (1) JSON value.\n"
        "- Keep every field and value that is present; close truncated structures.\n"
        "- Do not add explanations or markdown. Return only JSON.\n\n"
        "BROKEN INPUT:\n"
        f"{bad_text or ''}"
    )


_HOTEL_BANDS = {
    TravelTier.ECONOMY: "2-3 stars, approx 60-180 USD/night",
    TravelTier.COMFORT: "3-4 stars, approx 140-280 USD/night",
    TravelTier.PREMIUM: "4-5 stars, approx 280-700 USD/night",
    TravelTier.LUXURY: "5 stars, high-end only, approx 800-2500 USD/night",
}


def build_hotel_prompt(request: HotelSuggestionRequest) -> str:
    bands = "\n".join(f"   - {tier.value} -> {band}" for tier, band in _HOTEL_BANDS.items())
    budget_text = _budget_text(request.budget)
    example = {
        "hotels": [
            {
                "id": "hotel_1",
                "name": "Example Hotel",
                "address": "123 Main St, Example City",
                "area": "Downtown",
                "lat": 35.123,
                "lng": 139.456,
                "nightlyPrice": 120,
                "currency": "USD",
                "rating": 4.3,
                "url": "https://example.com",
                "description": "Short single-line description.",
            }
        ]
    }
    return f"""
You are a JSON-only hotel recommendation engine.

STRICT RULES:
1. REAL hotels only: real names, real addresses, real areas in or near "{request.to}".
2. JSON-SAFE: single-line strings only, no line breaks, no bullets.
3. Match hotel class and prices to the travel type (for major cities):
{bands}
4. If the total trip budget is very high, luxury hotels may reach 1200-3000 USD/night in expensive cities.
5. Prices must be realistic for "{request.to}" and clearly different between travel types.
6. Output ONLY JSON matching the schema. No explanations.

TASK:
User is visiting "{request.to}" from {request.start_date.isoformat()} to {request.end_date.isoformat()}.
Travel type: "{request.travel_type.value}".
Budget: {budget_text} USD.
Language: "{request.language}".

Return 4-10 options. Each hotel must include: id (unique, like "hotel_1"), name, address,
area (main neighborhood), lat, lng, nightlyPrice (USD number), currency, rating, url, description.

OUTPUT FORMAT:
{json.dumps(example, indent=2)}

ONLY output valid JSON.
""".strip()


def build_summary_prompt(query: str, location: str, places: list[dict[str, Any]]) -> str:
    return (
        "You are a concise travel writer. Write ONE English paragraph (70-110 words) "
        f"describing the best {query} options in {location}.\n"
        "Strictly follow this style:\n"
        "- Mention 3-5 standout places with names in bold, e.g., **PhoLove**.\n"
        "- Show ratings in parentheses and review counts when available, "
        "e.g., (4.7/5 from 120 reviews).\n"
        "- No lists or bullets. No extra labels. No tips.\n"
        f"Use ONLY the data provided:\n{json.dumps(places, indent=2, ensure_ascii=False)}"
    )


def build_translation_prompt(text: str, language: str = "Vietnamese") -> str:
    return (
        f"Translate the following content into natural {language}. "
        "Return only the translated paragraph.\n\n"
        f"{text}"
    )


def build_vietnamese_summary_prompt(
    query: str, location: str, places: list[dict[str, Any]]
) -> str:
    return (
        "Bạn là biên tập viên du lịch. Viết MỘT đoạn văn tiếng Việt (70-110 từ) "
        f"giới thiệu các quán {query} nổi bật tại {location}.\n"
        "Yêu cầu định dạng:\n"
        "- Nêu 3-5 quán tiêu biểu, tên in đậm (Markdown) ví dụ **PhoLove**.\n"
        "- Ghi điểm đánh giá trong ngoặc và số lượt đánh giá nếu có, "
        "ví dụ (4.7/5 từ 120 lượt đánh giá).\n"
        "- Không dùng gạch đầu dòng, không tiêu đề, không mẹo vặt. Chỉ một đoạn văn.\n"
        f"Chỉ dùng dữ liệu sau:\n{json.dumps(places, indent=2, ensure_ascii=False)}"
    )


def build_route_prompt(hotel: dict[str, Any], stops: list[dict[str, Any]]) -> str:
    return (
        "You are a routing expert. Reorder these stops into the shortest realistic route. "
        "Start at the hotel, visit every stop exactly once, and end near the hotel.\n"
        'Return ONLY JSON in this exact shape: { "order": ["stopName1", "stopName2"] }\n'
        "Use the stop names exactly as given.\n\n"
        f"Hotel: {json.dumps(hotel, ensure_ascii=False)}\n\n"
        f"Stops: {json.dumps(stops, ensure_ascii=False)}"
    )
