from tripplanner.core.normalizer import normalize
from tripplanner.core.schemas import Block, Day, Option, TripPlan
from tripplanner.core.sections import SECTION_TIMES, sections_for


def _plan(days: list[Day], layout: str = "full") -> TripPlan:
    return TripPlan(to="Chicago", days=days, layout=layout)


def test_missing_dinner_is_added_with_default_time_unit(trip_request):
    days = [
        Day(blocks=[Block(section=s, options=[Option(name=f"{s} spot")]) for s in sections_for("full")]),
        Day(
            blocks=[
                Block(section=s, options=[Option(name=f"{s} spot 2")])
                for s in sections_for("full")
                if s != "dinner"
            ]
        ),
        Day(),
    ]
    plan = normalize(_plan(days), trip_request)

    day_two = plan.days[1]
    assert [b.section for b in day_two.blocks] == sections_for("full")
    dinner = next(b for b in day_two.blocks if b.section == "dinner")
    assert dinner.time == SECTION_TIMES["dinner"]
    assert dinner.options == []
    lunch = next(b for b in day_two.blocks if b.section == "lunch")
    assert lunch.options[0].name == "lunch spot 2"


def test_reorders_and_drops_unknown_sections_unit():
    day = Day(
        blocks=[
            Block(section="Dinner", time="19:00 - 21:00"),
            Block(section="brunch"),
            Block(section="Late Night"),
            Block(section="morning"),
        ]
    )
    plan = normalize(_plan([day]))

    sections = [b.section for b in plan.days[0].blocks]
    assert sections == sections_for("full")
    assert "brunch" not in sections
    assert plan.days[0].blocks[5].time == "19:00 - 21:00"
    assert plan.days[0].blocks[7].time == SECTION_TIMES["late_night"]


def test_repeated_sections_are_merged_unit():
    day = Day(
        blocks=[
            Block(section="lunch", options=[Option(name="A")]),
            Block(section="lunch", options=[Option(name="B")]),
        ]
    )
    plan = normalize(_plan([day]))
    lunch = next(b for b in plan.days[0].blocks if b.section == "lunch")
    assert [o.name for o in lunch.options] == ["A", "B"]


def test_normalize_is_idempotent_unit(trip_request):
    day = Day(
        day=7,
        blocks=[
            Block(section="night", options=[Option(name="Bar")]),
            Block(section="morning", options=[Option(name="Museum")]),
        ],
    )
    once = normalize(_plan([day]), trip_request)
    snapshot = once.model_dump()
    twice = normalize(once, trip_request)
    assert twice.model_dump() == snapshot


def test_dates_hotels_and_day_count_follow_request_unit(trip_request):
    plan = normalize(_plan([Day(day=5, date="1999-01-01")]), trip_request)

    assert [d.day for d in plan.days] == [1, 2, 3]
    assert [d.date for d in plan.days] == ["2026-05-01", "2026-05-02", "2026-05-03"]
    # A single selected hotel covers every day
    assert all(d.hotel and d.hotel.name == "The Drake" for d in plan.days)
    assert [h.name for h in plan.hotels] == ["The Drake"]


def test_trims_extra_days_unit(trip_request):
    plan = normalize(_plan([Day() for _ in range(5)]), trip_request)
    assert len(plan.days) == trip_request.day_count


def test_compact_layout_unit():
    plan = normalize(_plan([Day(blocks=[Block(section="midday")])], layout="compact"))
    assert [b.section for b in plan.days[0].blocks] == [
        "morning",
        "lunch",
        "afternoon",
        "dinner",
        "night",
    ]
