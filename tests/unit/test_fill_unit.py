import json

import pytest

from tripplanner.core.fill import fill_real, merge_fill
from tripplanner.core.schemas import Flight, coerce_days
from tripplanner.core.sections import BlockLayout
from tripplanner.core.skeleton import build_local_skeleton


def test_merge_keeps_skeleton_structure_unit(trip_request):
    skeleton = build_local_skeleton(trip_request, BlockLayout.FULL)
    skeleton.flight = Flight(average_cost=450)
    data = {
        "flight": {"averageCost": 9999},
        "days": [
            {
                "hotel": {"name": "Other Hotel"},
                "blocks": [
                    {"section": "morning", "options": [{"name": "Art Institute"}, {"name": "Suggested activity"}]},
                    {"section": "midday", "options": [{"name": "Skydeck"}]},
                ],
            }
        ],
    }

    plan = merge_fill(skeleton, data, coerce_days(data["days"]))

    morning, midday = plan.days[0].blocks[:2]
    assert [o.name for o in morning.options] == ["Art Institute"]
    assert [o.name for o in midday.options] == ["Skydeck"]
    assert plan.days[0].hotel.name == "The Drake"
    assert plan.flight.average_cost == 450
    assert len(plan.days) == 3
    # The skeleton itself is untouched
    assert skeleton.days[0].blocks[0].options == []


def test_merge_matches_by_section_when_positions_shift_unit(trip_request):
    skeleton = build_local_skeleton(trip_request, BlockLayout.FULL)
    data = {"days": [{"blocks": [{"section": "dinner", "options": [{"name": "Alinea"}]}]}]}

    plan = merge_fill(skeleton, data, coerce_days(data["days"]))

    dinner = next(b for b in plan.days[0].blocks if b.section == "dinner")
    morning = next(b for b in plan.days[0].blocks if b.section == "morning")
    assert [o.name for o in dinner.options] == ["Alinea"]
    assert morning.options == []


def test_merge_uses_fill_flight_when_skeleton_has_none_unit(trip_request):
    skeleton = build_local_skeleton(trip_request, BlockLayout.FULL)
    data = {"flight": {"averageCost": "$320"}, "days": []}
    plan = merge_fill(skeleton, data, [])
    assert plan.flight.average_cost == 320


@pytest.mark.asyncio
async def test_fill_real_live_unit(make_gateway, settings, trip_request, fill_payload):
    skeleton = build_local_skeleton(trip_request, BlockLayout.FULL)
    gateway = make_gateway({"test:fill": [fill_payload(3)]})

    plan, live = await fill_real(skeleton, trip_request, gateway, settings)

    assert live is True
    assert all(len(b.options) == 3 for d in plan.days for b in d.blocks)
    prompt = gateway.calls_for("test:fill")[0]
    assert "The Drake" in prompt


@pytest.mark.asyncio
async def test_fill_real_failure_returns_skeleton_unit(make_gateway, settings, trip_request):
    skeleton = build_local_skeleton(trip_request, BlockLayout.FULL)
    gateway = make_gateway({"test:fill": [json.dumps({"days": "nope"}), "garbage"]})

    plan, live = await fill_real(skeleton, trip_request, gateway, settings)

    assert live is False
    assert plan is skeleton
    assert len(gateway.calls_for("test:fill")) == settings.fill_attempts
