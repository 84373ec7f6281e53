import json

import pytest

from tripplanner.core.micro_fill import accept_candidate, ensure_minimum, micro_fill
from tripplanner.core.schemas import Block, Day, Hotel, Option, TravelTier, TripPlan


def _candidates(*names: str) -> str:
    return json.dumps(
        {"options": [{"name": n, "type": "restaurant", "address": "", "estimatedCost": 30} for n in names]}
    )


def _plan(*blocks: Block) -> TripPlan:
    hotel = Hotel(name="The Drake", address="140 E Walton Pl, Chicago")
    return TripPlan(to="Chicago", days=[Day(day=1, hotel=hotel, blocks=list(blocks))])


def test_accept_candidate_unit():
    assert accept_candidate(Option(name="Au Cheval"), set())
    assert not accept_candidate(Option(name="Au Cheval"), {"au cheval"})
    assert not accept_candidate(Option(name="Suggested Activity nearby"), set())
    assert not accept_candidate(Option(name="x"), set())
    assert not accept_candidate(Option(name="DINNER Activity in Chicago"), set())


@pytest.mark.asyncio
async def test_micro_fill_filters_excluded_and_placeholders_unit(make_gateway, settings):
    gateway = make_gateway({"test:micro": [_candidates("Avec", "Free time", "Alinea")]})
    options = await micro_fill(
        gateway,
        settings,
        destination="Chicago",
        section="dinner",
        time="18:30 - 20:00",
        travel_type=TravelTier.COMFORT,
        excluded={"alinea"},
        needed=2,
    )
    assert [o.name for o in options] == ["Avec"]
    assert "alinea" in gateway.calls[0][0]


@pytest.mark.asyncio
async def test_micro_fill_empty_response_is_none_unit(make_gateway, settings):
    options = await micro_fill(
        make_gateway(),
        settings,
        destination="Chicago",
        section="lunch",
        time="",
        travel_type=TravelTier.ECONOMY,
        excluded=set(),
        needed=2,
    )
    assert options is None


@pytest.mark.asyncio
async def test_ensure_minimum_tops_up_short_block_unit(make_gateway, settings):
    gateway = make_gateway({"test:micro": [_candidates("Avec", "Monteverde")]})
    plan = _plan(Block(section="dinner", time="18:30 - 20:00", options=[Option(name="Alinea", type="restaurant")]))

    await ensure_minimum(plan, gateway, settings)

    options = plan.days[0].blocks[0].options
    assert [o.name for o in options] == ["Alinea", "Avec", "Monteverde"]
    # Missing addresses fall back to the hotel's
    assert options[1].address == "140 E Walton Pl, Chicago"


@pytest.mark.asyncio
async def test_ensure_minimum_excludes_names_used_elsewhere_in_day_unit(make_gateway, settings):
    gateway = make_gateway({"test:micro": [_candidates("Navy Pier", "Lincoln Park Zoo", "Field Museum")]})
    plan = _plan(
        Block(section="morning", options=[Option(name="Navy Pier"), Option(name="Bean")]),
        Block(section="afternoon", options=[]),
    )

    await ensure_minimum(plan, gateway, settings)

    assert [o.name for o in plan.days[0].blocks[1].options] == ["Lincoln Park Zoo", "Field Museum"]


@pytest.mark.asyncio
async def test_ensure_minimum_duplicates_last_survivor_unit(make_gateway, settings):
    gateway = make_gateway({"test:micro": [_candidates("Alinea")] * 10})
    plan = _plan(Block(section="dinner", options=[Option(name="Alinea", type="restaurant")]))

    await ensure_minimum(plan, gateway, settings)

    assert [o.name for o in plan.days[0].blocks[0].options] == ["Alinea", "Alinea (Alternative)"]
    assert len(gateway.calls) == settings.micro_fill_attempts


@pytest.mark.asyncio
async def test_ensure_minimum_placeholder_when_nothing_found_unit(make_gateway, settings):
    gateway = make_gateway({"test:micro": ['{"options": []}'] * 10})
    plan = _plan(Block(section="lunch", options=[]))

    await ensure_minimum(plan, gateway, settings)

    options = plan.days[0].blocks[0].options
    assert len(options) == 1
    assert options[0].name == "LUNCH Activity in Chicago"


@pytest.mark.asyncio
async def test_ensure_minimum_strips_placeholders_before_counting_unit(make_gateway, settings):
    gateway = make_gateway({"test:micro": [_candidates("Green Mill", "Kingston Mines")]})
    plan = _plan(
        Block(
            section="night",
            options=[Option(name="NIGHT Activity in Chicago"), Option(name="Suggested Activity")],
        )
    )

    await ensure_minimum(plan, gateway, settings)

    assert [o.name for o in plan.days[0].blocks[0].options] == ["Green Mill", "Kingston Mines"]


@pytest.mark.asyncio
async def test_ensure_minimum_truncates_to_four_unit(make_gateway, settings):
    gateway = make_gateway()
    plan = _plan(Block(section="morning", options=[Option(name=f"Spot {i}") for i in range(6)]))

    await ensure_minimum(plan, gateway, settings)

    assert len(plan.days[0].blocks[0].options) == 4
    assert gateway.calls == []


@pytest.mark.asyncio
async def test_silent_provider_stops_further_calls_unit(make_gateway, settings):
    gateway = make_gateway()
    plan = _plan(*(Block(section=s, options=[]) for s in ("morning", "lunch", "dinner")))

    await ensure_minimum(plan, gateway, settings)

    assert len(gateway.calls) == settings.micro_fill_attempts
    assert all(len(b.options) == 1 for b in plan.days[0].blocks)
