import math
import re
from datetime import date, timedelta
from enum import Enum
from typing import Any

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    computed_field,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel

MAX_TRIP_DAYS = 30

_NUMBER_RE = re.compile(r"-?\d+(?:\.\d+)?")


class TravelTier(str, Enum):
    ECONOMY = "economy"
    COMFORT = "comfort"
    PREMIUM = "premium"
    LUXURY = "luxury"


# Travel-type labels used by older clients
TIER_ALIASES = {
    "budget": TravelTier.ECONOMY,
    "low": TravelTier.ECONOMY,
    "moderate": TravelTier.COMFORT,
    "mid-range": TravelTier.COMFORT,
    "balanced": TravelTier.COMFORT,
    "high": TravelTier.PREMIUM,
}


def parse_tier(value: Any) -> TravelTier:
    text = str(value or "").strip().lower()
    if text in TIER_ALIASES:
        return TIER_ALIASES[text]
    try:
        return TravelTier(text)
    except ValueError:
        return TravelTier.COMFORT


class BudgetStatus(str, Enum):
    UNDER = "under"
    ON_TRACK = "on_track"
    OVER = "over"
    WAY_OVER = "way_over"


def normalize_name(name: Any) -> str:
    """Comparison key for place names: trimmed and lower-cased."""
    return str(name or "").strip().lower()


def coerce_float(value: Any) -> float | None:
    """Best-effort number extraction ("$25", "4.5", 12) -> float, else None."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value) if math.isfinite(value) else None
    if isinstance(value, str):
        match = _NUMBER_RE.search(value.replace(",", ""))
        if match:
            return float(match.group(0))
    return None


def clean_text(value: Any) -> str:
    """Collapse whitespace so every text field is a single line."""
    if value is None:
        return ""
    return re.sub(r"\s+", " ", str(value)).strip()


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


class Money(BaseModel):
    amount: float = 0.0
    currency: str = "USD"


def to_money(value: Any, currency: str = "USD") -> Money | None:
    """
    Reconcile the cost shapes found in LLM output into one Money value.

    Accepts a bare number, a numeric string ("$25"), a ``{amount, currency}``
    dict or an existing Money. Returns None when no amount can be read.
    """
    if value is None:
        return None
    if isinstance(value, Money):
        return value
    if isinstance(value, dict):
        amount = coerce_float(value.get("amount"))
        if amount is None:
            return None
        return Money(amount=amount, currency=str(value.get("currency") or currency))
    amount = coerce_float(value)
    if amount is None:
        return None
    return Money(amount=amount, currency=currency)


class Option(CamelModel):
    name: str
    type: str = "activity"
    description: str = ""
    address: str = ""
    lat: float | None = None
    lng: float | None = None
    distance_from_previous: str = ""
    transport: str = ""
    duration_min: int | None = None
    cost_estimate: Money | None = Field(None, alias="cost_estimate")
    rating: float | None = None
    label: str | None = None
    tags: list[str] = Field(default_factory=list)
    famous_for: str = ""
    what_to_do: str = ""
    must_try_dish: str = ""
    recommended_drink: str = ""
    tip: str = ""

    @model_validator(mode="before")
    @classmethod
    def reconcile_cost(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        data = dict(data)
        currency = str(data.get("currency") or "USD")
        structured = data.pop("cost_estimate", None) or data.pop("costEstimate", None)
        legacy = data.pop("estimatedCost", None)
        legacy = legacy if legacy is not None else data.pop("estimated_cost", None)
        data["cost_estimate"] = to_money(structured, currency) or to_money(legacy, currency)
        if isinstance(data.get("distanceFromPrevious"), (int, float)):
            data["distanceFromPrevious"] = f"{data['distanceFromPrevious']} mi"
        return data

    @field_validator("name", mode="before")
    @classmethod
    def _name(cls, value: Any) -> Any:
        text = clean_text(value)
        if not text:
            raise ValueError("option name is required")
        return text

    @field_validator(
        "type",
        "description",
        "address",
        "distance_from_previous",
        "transport",
        "famous_for",
        "what_to_do",
        "must_try_dish",
        "recommended_drink",
        "tip",
        mode="before",
    )
    @classmethod
    def _single_line(cls, value: Any) -> str:
        return clean_text(value)

    @field_validator("lat", "lng", "rating", mode="before")
    @classmethod
    def _lenient_float(cls, value: Any) -> float | None:
        return coerce_float(value)

    @field_validator("duration_min", mode="before")
    @classmethod
    def _lenient_int(cls, value: Any) -> int | None:
        number = coerce_float(value)
        return int(round(number)) if number is not None else None

    @field_validator("tags", mode="before")
    @classmethod
    def _tags(cls, value: Any) -> list[str]:
        if value is None:
            return []
        if isinstance(value, str):
            value = [value]
        if not isinstance(value, list):
            return []
        return [clean_text(v) for v in value if clean_text(v)][:4]

    @computed_field(alias="estimatedCost")  # type: ignore[misc]
    @property
    def estimated_cost(self) -> float:
        return self.cost_estimate.amount if self.cost_estimate else 0.0

    @property
    def key(self) -> str:
        return normalize_name(self.name)


def coerce_options(raw: Any) -> list[Option]:
    """Validate a raw option list, silently dropping entries that cannot be used."""
    if not isinstance(raw, list):
        return []
    options: list[Option] = []
    for item in raw:
        if isinstance(item, Option):
            options.append(item)
            continue
        if not isinstance(item, dict):
            continue
        try:
            options.append(Option.model_validate(item))
        except ValidationError:
            continue
    return options


class Hotel(CamelModel):
    id: str | None = None
    name: str
    address: str = ""
    area: str = ""
    lat: float | None = None
    lng: float | None = None
    nightly_price: Money | None = None
    rating: float | None = None
    url: str = ""
    description: str = ""
    price_level: str | None = Field(
        None, description="Places price_level (0-4) or a textual level (low/moderate/high/luxury)"
    )

    @model_validator(mode="before")
    @classmethod
    def reconcile_price(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        data = dict(data)
        currency = str(data.get("currency") or "USD")
        raw = data.pop("nightlyPrice", None)
        raw = raw if raw is not None else data.pop("nightly_price", None)
        data["nightly_price"] = to_money(raw, currency)
        if data.get("id") is not None:
            data["id"] = str(data["id"])
        level = data.get("priceLevel", data.get("price_level"))
        if level is not None:
            data.pop("priceLevel", None)
            data["price_level"] = str(level).strip().lower() or None
        return data

    @field_validator("name", mode="before")
    @classmethod
    def _name(cls, value: Any) -> Any:
        text = clean_text(value)
        if not text:
            raise ValueError("hotel name is required")
        return text

    @field_validator("address", "area", "url", "description", mode="before")
    @classmethod
    def _single_line(cls, value: Any) -> str:
        return clean_text(value)

    @field_validator("lat", "lng", "rating", mode="before")
    @classmethod
    def _lenient_float(cls, value: Any) -> float | None:
        return coerce_float(value)


class HotelSelection(Hotel):
    """A user-selected hotel for one day of the trip, as sent by the client."""

    day: int | None = None
    date: str | None = None


def coerce_hotel(raw: Any) -> Hotel | None:
    if isinstance(raw, Hotel):
        return raw
    if not isinstance(raw, dict):
        return None
    try:
        return Hotel.model_validate(raw)
    except ValidationError:
        return None


class Block(CamelModel):
    section: str
    time: str = ""
    options: list[Option] = Field(default_factory=list)

    @field_validator("section", mode="before")
    @classmethod
    def _section(cls, value: Any) -> str:
        return clean_text(value).lower().replace(" ", "_").replace("-", "_")

    @field_validator("time", mode="before")
    @classmethod
    def _time(cls, value: Any) -> str:
        return clean_text(value)

    @field_validator("options", mode="before")
    @classmethod
    def _options(cls, value: Any) -> list[Option]:
        return coerce_options(value)


class Day(CamelModel):
    day: int = 1
    date: str = ""
    hotel: Hotel | None = None
    blocks: list[Block] = Field(default_factory=list)

    @field_validator("day", mode="before")
    @classmethod
    def _day(cls, value: Any) -> int:
        number = coerce_float(value)
        return int(number) if number is not None else 1

    @field_validator("date", mode="before")
    @classmethod
    def _date(cls, value: Any) -> str:
        return clean_text(value)

    @field_validator("hotel", mode="before")
    @classmethod
    def _hotel(cls, value: Any) -> Hotel | None:
        return coerce_hotel(value)

    @field_validator("blocks", mode="before")
    @classmethod
    def _blocks(cls, value: Any) -> list[Block]:
        if not isinstance(value, list):
            return []
        blocks = []
        for item in value:
            if isinstance(item, Block):
                blocks.append(item)
            elif isinstance(item, dict):
                try:
                    blocks.append(Block.model_validate(item))
                except ValidationError:
                    continue
        return blocks


def coerce_days(raw: Any) -> list[Day] | None:
    """Validate a raw ``days`` array; None when it is not a list."""
    if not isinstance(raw, list):
        return None
    days = []
    for item in raw:
        if not isinstance(item, dict):
            continue
        try:
            days.append(Day.model_validate(item))
        except ValidationError:
            continue
    return days


class Flight(CamelModel):
    average_cost: float = 0.0
    currency: str = "USD"
    duration: str = ""
    departure_airport: str = ""
    arrival_airport: str = ""
    notes: str = ""

    @field_validator("average_cost", mode="before")
    @classmethod
    def _cost(cls, value: Any) -> float:
        money = to_money(value)
        return money.amount if money else 0.0

    @field_validator("currency", "duration", "departure_airport", "arrival_airport", "notes", mode="before")
    @classmethod
    def _single_line(cls, value: Any) -> str:
        return clean_text(value)


class TravelStyle(CamelModel):
    type: str = ""
    summary: str = ""

    @field_validator("type", "summary", mode="before")
    @classmethod
    def _single_line(cls, value: Any) -> str:
        return clean_text(value)


class CostSummary(CamelModel):
    total_flight_cost: float = 0.0
    total_hotel_cost: float = 0.0
    total_transport_cost: float = 0.0
    total_food_cost: float = 0.0
    total_activities_cost: float = 0.0
    total_estimated_cost: float = 0.0
    budget: float = 0.0
    budget_used_percent: float = 0.0
    budget_status: BudgetStatus = BudgetStatus.ON_TRACK


class TripPlan(CamelModel):
    from_: str = Field("", alias="from")
    to: str = ""
    start_date: str = ""
    end_date: str = ""
    travel_type: TravelTier = TravelTier.COMFORT
    transport_preference: str = ""
    language: str = "en"
    budget: Money | None = None
    flight: Flight | None = None
    travel_style: TravelStyle | None = None
    hotels: list[Hotel] = Field(default_factory=list)
    days: list[Day] = Field(default_factory=list)
    cost_summary: CostSummary = Field(default_factory=CostSummary)
    layout: str = "full"
    mock: bool = False

    def assign_hotel(self, day_index: int, hotel: Hotel | None) -> None:
        """Set a day's hotel and keep the trip-level ``hotels`` list in step."""
        if hotel is None or not 0 <= day_index < len(self.days):
            return
        self.days[day_index].hotel = hotel.model_copy(deep=True)
        known = {normalize_name(h.name) for h in self.hotels}
        if normalize_name(hotel.name) not in known:
            self.hotels.append(hotel.model_copy(deep=True))


# =============================================================================
# Request Schemas
# =============================================================================


def _parse_date(value: Any) -> date | None:
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value)[:10])
    except (TypeError, ValueError):
        return None


class TripRequest(CamelModel):
    from_: str = Field("", alias="from")
    to: str = Field(..., min_length=1, description="Destination city")
    start_date: date
    end_date: date
    travel_type: TravelTier = TravelTier.COMFORT
    transport_preference: str = "walk/transit"
    budget: float | None = Field(None, description="Total trip budget")
    currency: str = "USD"
    language: str = "en"
    hotel_per_day: list[HotelSelection] = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def derive_dates(cls, data: Any) -> Any:
        """Accept ``destination`` for ``to`` and a ``days`` count in place of ``endDate``."""
        if not isinstance(data, dict):
            return data
        data = dict(data)
        if not str(data.get("to") or "").strip() and data.get("destination"):
            data["to"] = data["destination"]
        if isinstance(data.get("to"), str):
            data["to"] = data["to"].strip()

        start = data.get("startDate") or data.get("start_date")
        end = data.get("endDate") or data.get("end_date")
        days = coerce_float(data.get("days"))
        if not start and days:
            start = date.today().isoformat()
            data["startDate"] = start
        if not end and days and _parse_date(start):
            data["endDate"] = (_parse_date(start) + timedelta(days=max(1, int(days)) - 1)).isoformat()

        tier = data.get("travelType", data.get("travel_type"))
        if tier is not None:
            data.pop("travel_type", None)
            data["travelType"] = parse_tier(tier)
        if "budget" in data:
            data["budget"] = coerce_float(data["budget"])
        return data

    @model_validator(mode="after")
    def check_range(self) -> "TripRequest":
        if self.end_date < self.start_date:
            raise ValueError("endDate must not be before startDate")
        if self.day_count > MAX_TRIP_DAYS:
            raise ValueError(f"trips are limited to {MAX_TRIP_DAYS} days")
        return self

    @property
    def day_count(self) -> int:
        return (self.end_date - self.start_date).days + 1

    def dates(self) -> list[str]:
        return [(self.start_date + timedelta(days=i)).isoformat() for i in range(self.day_count)]

    def hotel_for_day(self, index: int) -> Hotel | None:
        """The caller-selected hotel for a day, falling back to the first selection."""
        if not self.hotel_per_day:
            return None
        chosen = self.hotel_per_day[index] if index < len(self.hotel_per_day) else self.hotel_per_day[0]
        return Hotel.model_validate(chosen.model_dump(exclude={"day", "date"}))


class HotelSuggestionRequest(CamelModel):
    to: str = Field(..., min_length=1)
    start_date: date
    end_date: date
    travel_type: TravelTier = TravelTier.COMFORT
    budget: float | None = None
    language: str = "en"

    @field_validator("budget", mode="before")
    @classmethod
    def _budget(cls, value: Any) -> float | None:
        return coerce_float(value)

    @field_validator("travel_type", mode="before")
    @classmethod
    def _tier(cls, value: Any) -> TravelTier:
        return parse_tier(value)


class HotelSuggestions(CamelModel):
    hotels: list[Hotel] = Field(default_factory=list)
    mock: bool = False


class SearchRequest(BaseModel):
    location: str = ""
    query: str = ""
    lang: str = "en"


class PlaceResult(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str | None = None
    name: str = ""
    address: str = ""
    rating: float | None = None
    user_ratings_total: int = 0
    coordinates: dict[str, float | None] = Field(default_factory=dict)
    photo_ref: str | None = Field(None, alias="photoRef")


class PlaceDetail(BaseModel):
    name_en: str
    estimated_wait_minutes: int


class SearchResponse(BaseModel):
    places: list[PlaceResult] = Field(default_factory=list)
    ai_summary_en: str = ""
    ai_summary_vi: str = ""
    ai_details: list[PlaceDetail] = Field(default_factory=list)


class RouteOptimizeRequest(CamelModel):
    stops: list[Block] = Field(default_factory=list)
    hotel: Hotel | None = None


class RouteOptimizeResponse(CamelModel):
    optimized_stops: list[Block] = Field(default_factory=list)
    optimized: bool = False
