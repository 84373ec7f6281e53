import json
from collections.abc import Callable

import pytest

from tripplanner.core.llm_provider import ModelParams
from tripplanner.core.schemas import TripRequest
from tripplanner.core.sections import SECTION_TIMES, sections_for
from tripplanner.core.settings import Settings


class FakeGateway:
    """
    Scripted completion gateway.

    ``routes`` maps a model name to either a list of canned responses
    (consumed in order, "" once exhausted) or a callable(prompt, params).
    """

    def __init__(self, routes: dict | None = None, available: bool = True):
        self.routes = {
            model: (list(route) if isinstance(route, list) else route)
            for model, route in (routes or {}).items()
        }
        self.calls: list[tuple[str, ModelParams]] = []
        self._available = available

    def available(self, model: str | None = None) -> bool:
        return self._available

    async def complete(self, prompt: str, params: ModelParams) -> str:
        self.calls.append((prompt, params))
        route = self.routes.get(params.model)
        if route is None:
            return ""
        if callable(route):
            return route(prompt, params)
        return route.pop(0) if route else ""

    def calls_for(self, model: str) -> list[str]:
        return [prompt for prompt, params in self.calls if params.model == model]


def _option(name: str, kind: str, cost: float = 20) -> dict:
    return {
        "name": name,
        "type": kind,
        "description": f"{name} description",
        "address": f"1 {name} Street",
        "lat": 41.88,
        "lng": -87.63,
        "distanceFromPrevious": "0.5 mi",
        "transport": "walk",
        "estimatedCost": cost,
        "rating": 4.5,
        "tags": ["test"],
    }


def _section_kind(section: str) -> str:
    if section in ("lunch", "dinner"):
        return "restaurant"
    if section in ("night", "late_night"):
        return "bar"
    return "museum"


def build_fill_payload(day_count: int, layout: str = "full", per_block: int = 3) -> dict:
    """A fill response with unique, real-looking options in every block."""
    days = []
    for d in range(1, day_count + 1):
        blocks = []
        for section in sections_for(layout):
            kind = _section_kind(section)
            blocks.append(
                {
                    "section": section,
                    "time": SECTION_TIMES[section],
                    "options": [
                        _option(f"{section.title()} Place {d}-{i}", kind) for i in range(per_block)
                    ],
                }
            )
        days.append({"day": d, "blocks": blocks})
    return {"days": days}


def build_skeleton_payload(day_count: int, layout: str = "full") -> dict:
    return {
        "flight": {"averageCost": 450, "currency": "USD", "duration": "2h"},
        "travelStyle": {"type": "comfort", "summary": "City break."},
        "days": [
            {
                "day": d,
                "blocks": [
                    {"section": s, "time": SECTION_TIMES[s], "options": []}
                    for s in sections_for(layout)
                ],
            }
            for d in range(1, day_count + 1)
        ],
    }


@pytest.fixture
def settings() -> Settings:
    return Settings(
        skeleton_model="test:skeleton",
        fill_model="test:fill",
        micro_fill_model="test:micro",
        repair_model="test:repair",
        summary_model="test:summary",
        hotel_model="test:hotel",
        route_model="test:route",
        retry_delay_seconds=0,
        micro_fill_delay_seconds=0,
        block_layout="full",
        google_maps_api_key="",
    )


@pytest.fixture
def make_gateway() -> Callable[..., FakeGateway]:
    return FakeGateway


@pytest.fixture
def trip_request() -> TripRequest:
    return TripRequest.model_validate(
        {
            "from": "New York",
            "to": "Chicago",
            "startDate": "2026-05-01",
            "endDate": "2026-05-03",
            "travelType": "comfort",
            "budget": 3000,
            "hotelPerDay": [
                {
                    "day": 1,
                    "name": "The Drake",
                    "address": "140 E Walton Pl, Chicago",
                    "lat": 41.9,
                    "lng": -87.62,
                    "nightlyPrice": 250,
                }
            ],
        }
    )


@pytest.fixture
def skeleton_payload() -> Callable[..., str]:
    return lambda day_count, layout="full": json.dumps(build_skeleton_payload(day_count, layout))


@pytest.fixture
def fill_payload() -> Callable[..., str]:
    return lambda day_count, layout="full", per_block=3: json.dumps(
        build_fill_payload(day_count, layout, per_block)
    )
