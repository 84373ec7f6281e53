import json

import pytest

from tripplanner.core.sections import BlockLayout, sections_for
from tripplanner.core.skeleton import build_local_skeleton, build_skeleton


def test_local_skeleton_unit(trip_request):
    plan = build_local_skeleton(trip_request, BlockLayout.FULL)

    assert len(plan.days) == 3
    assert plan.start_date == "2026-05-01"
    assert plan.budget.amount == 3000
    for day in plan.days:
        assert [b.section for b in day.blocks] == sections_for("full")
        assert all(b.options == [] for b in day.blocks)
        assert day.hotel.name == "The Drake"


@pytest.mark.asyncio
async def test_skeleton_from_model_unit(make_gateway, settings, trip_request, skeleton_payload):
    gateway = make_gateway({"test:skeleton": [skeleton_payload(3)]})

    plan, live = await build_skeleton(trip_request, gateway, settings)

    assert live is True
    assert plan.flight.average_cost == 450
    assert plan.travel_style.summary == "City break."
    assert [d.date for d in plan.days] == ["2026-05-01", "2026-05-02", "2026-05-03"]
    assert len(gateway.calls) == 1


@pytest.mark.asyncio
async def test_skeleton_ignores_model_hotels_and_options_unit(make_gateway, settings, trip_request):
    payload = {
        "days": [
            {
                "day": i,
                "hotel": {"name": "Invented Hotel"},
                "blocks": [{"section": "morning", "options": [{"name": "Invented Museum"}]}],
            }
            for i in range(1, 4)
        ]
    }
    gateway = make_gateway({"test:skeleton": [json.dumps(payload)]})

    plan, live = await build_skeleton(trip_request, gateway, settings)

    assert live is True
    assert all(d.hotel.name == "The Drake" for d in plan.days)
    assert all(b.options == [] for d in plan.days for b in d.blocks)
    assert [h.name for h in plan.hotels] == ["The Drake"]


@pytest.mark.asyncio
async def test_wrong_day_count_is_retried_unit(make_gateway, settings, trip_request, skeleton_payload):
    gateway = make_gateway({"test:skeleton": [skeleton_payload(2), skeleton_payload(3)]})

    plan, live = await build_skeleton(trip_request, gateway, settings)

    assert live is True
    assert len(plan.days) == 3
    assert len(gateway.calls_for("test:skeleton")) == 2


@pytest.mark.asyncio
async def test_failing_model_falls_back_to_local_unit(make_gateway, settings, trip_request):
    gateway = make_gateway()

    plan, live = await build_skeleton(trip_request, gateway, settings)

    assert live is False
    assert len(plan.days) == 3
    assert plan.flight is None
    assert len(gateway.calls_for("test:skeleton")) == settings.skeleton_attempts
