import pytest

from tripplanner.core.schemas import PlaceResult
from tripplanner.core.search_service import (
    NO_SUMMARY,
    estimate_wait_minutes,
    fallback_summary,
    search_places,
)

PLACES = [
    {
        "id": "p1",
        "name": "PhoLove",
        "address": "1 Main St",
        "rating": 4.7,
        "user_ratings_total": 1200,
        "coordinates": {"latitude": 29.7, "longitude": -95.4},
        "photo_ref": "ref1",
    },
    {
        "id": "p2",
        "name": "Pho Saigon",
        "address": "2 Main St",
        "rating": None,
        "user_ratings_total": 0,
        "coordinates": {"latitude": 29.8, "longitude": -95.5},
        "photo_ref": None,
    },
]


class FakePlaces:
    def __init__(self, results):
        self.results = results
        self.queries = []

    def text_search(self, query, location, language="en", limit=8):
        self.queries.append((query, location, language))
        return self.results


def test_estimate_wait_minutes_unit():
    assert estimate_wait_minutes(None, None) == 8
    assert estimate_wait_minutes(4.8, 1200) == 30
    assert estimate_wait_minutes(5.0, 100000) == 35
    assert estimate_wait_minutes(3.0, 0) == 8
    assert estimate_wait_minutes(5.0, 50000) <= 40


def test_fallback_summary_unit():
    places = [PlaceResult.model_validate(p) for p in PLACES]
    assert fallback_summary(places).startswith("Top picks include **PhoLove** (4.7/5 from 1200 reviews), **Pho Saigon**.")
    assert fallback_summary([]) == NO_SUMMARY


@pytest.mark.asyncio
async def test_search_places_bilingual_unit(make_gateway, settings):
    gateway = make_gateway({"test:summary": ["**PhoLove** is great.", "**PhoLove** rất ngon."]})
    places = FakePlaces(PLACES)

    result = await search_places("Houston", "pho", "en", places, gateway, settings)

    assert places.queries == [("pho", "Houston", "en")]
    assert [p.name for p in result.places] == ["PhoLove", "Pho Saigon"]
    assert result.ai_summary_en == "**PhoLove** is great."
    assert result.ai_summary_vi == "**PhoLove** rất ngon."
    assert [d.estimated_wait_minutes for d in result.ai_details] == [29, 8]
    assert result.model_dump(by_alias=True)["places"][0]["photoRef"] == "ref1"


@pytest.mark.asyncio
async def test_search_places_direct_vietnamese_summary_unit(make_gateway, settings):
    gateway = make_gateway({"test:summary": ["English summary.", "", "Tóm tắt tiếng Việt."]})

    result = await search_places("Houston", "pho", "vi", FakePlaces(PLACES), gateway, settings)

    assert result.ai_summary_vi == "Tóm tắt tiếng Việt."
    assert len(gateway.calls_for("test:summary")) == 3


@pytest.mark.asyncio
async def test_search_places_fallbacks_unit(make_gateway, settings):
    result = await search_places("Houston", "pho", "en", FakePlaces(PLACES), make_gateway(), settings)

    assert result.ai_summary_en.startswith("Top picks include **PhoLove**")
    assert result.ai_summary_vi == result.ai_summary_en


@pytest.mark.asyncio
async def test_search_places_without_places_service_unit(make_gateway, settings):
    result = await search_places("Houston", "pho", "en", None, make_gateway(), settings)

    assert result.places == []
    assert result.ai_summary_en == NO_SUMMARY
