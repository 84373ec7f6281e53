import json

import pytest

from tripplanner.core.hotel_service import suggest_hotels
from tripplanner.core.schemas import HotelSuggestionRequest


@pytest.fixture
def hotel_request() -> HotelSuggestionRequest:
    return HotelSuggestionRequest.model_validate(
        {"to": "Tokyo", "startDate": "2026-05-01", "endDate": "2026-05-04", "travelType": "premium"}
    )


@pytest.mark.asyncio
async def test_suggest_hotels_live_unit(make_gateway, settings, hotel_request):
    payload = {
        "hotels": [
            {"name": "Park Hyatt Tokyo", "area": "Shinjuku", "nightlyPrice": 650, "currency": "USD"},
            {"id": "h2", "name": "Hotel Okura", "nightlyPrice": {"amount": 480, "currency": "USD"}},
            {"name": "park hyatt tokyo", "nightlyPrice": 600},
            {"name": "Aman Tokyo", "priceLevel": 4},
            {"area": "No name"},
        ]
    }
    gateway = make_gateway({"test:hotel": [json.dumps(payload)]})

    result = await suggest_hotels(hotel_request, gateway, settings)

    assert result.mock is False
    assert [h.name for h in result.hotels] == ["Park Hyatt Tokyo", "Hotel Okura", "Aman Tokyo"]
    assert [h.id for h in result.hotels] == ["hotel_1", "h2", "hotel_3"]
    assert result.hotels[1].nightly_price.amount == 480
    assert result.hotels[2].nightly_price.amount > 0


@pytest.mark.asyncio
async def test_suggest_hotels_mock_on_bad_output_unit(make_gateway, settings, hotel_request):
    gateway = make_gateway({"test:hotel": ["I cannot help with that."]})

    result = await suggest_hotels(hotel_request, gateway, settings)

    assert result.mock is True
    assert len(result.hotels) == 5
    assert all(280 <= h.nightly_price.amount <= 600 for h in result.hotels)


@pytest.mark.asyncio
async def test_suggest_hotels_without_credentials_unit(make_gateway, settings, hotel_request):
    gateway = make_gateway(available=False)

    result = await suggest_hotels(hotel_request, gateway, settings)

    assert result.mock is True
    assert gateway.calls == []
