import json

import pytest

from tripplanner.core.prompts import build_route_prompt
from tripplanner.core.route_optimizer import apply_order, optimize_route
from tripplanner.core.schemas import Block, Hotel, Option

HOTEL = Hotel(name="The Drake", lat=41.9, lng=-87.62)


def _stops(*names: str) -> list[Block]:
    return [
        Block(section=f"s{i}", time="", options=[Option(name=n, lat=41.8 + i / 100, lng=-87.6)])
        for i, n in enumerate(names)
    ]


def _names(blocks: list[Block]) -> list[str]:
    return [b.options[0].name for b in blocks]


def test_apply_order_matches_names_case_insensitively_unit():
    stops = _stops("Art Institute", "Navy Pier", "The Bean")
    ordered = apply_order(stops, ["the bean", "ART INSTITUTE ", "Navy Pier"])
    assert _names(ordered) == ["The Bean", "Art Institute", "Navy Pier"]


def test_apply_order_appends_missing_stops_unit():
    stops = _stops("Art Institute", "Navy Pier", "The Bean")
    ordered = apply_order(stops, ["Navy Pier", "Navy Pier", "Willis Tower"])
    assert _names(ordered) == ["Navy Pier", "Art Institute", "The Bean"]


def test_apply_order_without_matches_unit():
    stops = _stops("Art Institute", "Navy Pier")
    assert apply_order(stops, ["Willis Tower"]) is None
    assert apply_order(stops, "Navy Pier") is None
    assert apply_order(stops, None) is None


def test_route_prompt_unit():
    prompt = build_route_prompt({"name": "The Drake"}, [{"name": "Navy Pier", "section": "morning"}])
    assert '"order"' in prompt
    assert "The Drake" in prompt
    assert "Navy Pier" in prompt


@pytest.mark.asyncio
async def test_optimize_route_reorders_unit(make_gateway, settings):
    gateway = make_gateway({"test:route": [json.dumps({"order": ["Navy Pier", "Art Institute"]})]})

    result = await optimize_route(_stops("Art Institute", "Navy Pier"), HOTEL, gateway, settings)

    assert result.optimized is True
    assert _names(result.optimized_stops) == ["Navy Pier", "Art Institute"]
    prompt = gateway.calls_for("test:route")[0]
    assert "The Drake" in prompt and "Art Institute" in prompt


@pytest.mark.asyncio
async def test_optimize_route_keeps_order_on_empty_response_unit(make_gateway, settings):
    gateway = make_gateway()

    result = await optimize_route(_stops("Art Institute", "Navy Pier"), HOTEL, gateway, settings)

    assert result.optimized is False
    assert _names(result.optimized_stops) == ["Art Institute", "Navy Pier"]
    # Empty completions are not sent for repair
    assert gateway.calls_for("test:repair") == []


@pytest.mark.asyncio
async def test_optimize_route_keeps_order_on_unknown_names_unit(make_gateway, settings):
    gateway = make_gateway({"test:route": ['```json\n{"order": ["Willis Tower",]}\n```']})

    result = await optimize_route(_stops("Art Institute", "Navy Pier"), HOTEL, gateway, settings)

    assert result.optimized is False
    assert _names(result.optimized_stops) == ["Art Institute", "Navy Pier"]


@pytest.mark.asyncio
async def test_optimize_route_single_stop_skips_model_unit(make_gateway, settings):
    gateway = make_gateway()

    result = await optimize_route(_stops("Navy Pier"), HOTEL, gateway, settings)

    assert _names(result.optimized_stops) == ["Navy Pier"]
    assert gateway.calls == []
