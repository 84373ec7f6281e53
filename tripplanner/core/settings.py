import os

from dotenv import load_dotenv
from pydantic import BaseModel

load_dotenv()


class Settings(BaseModel):
    # Models per pipeline stage (aisuite "provider:model" identifiers)
    skeleton_model: str = os.getenv("SKELETON_MODEL", "groq:openai/gpt-oss-20b")
    fill_model: str = os.getenv("FILL_MODEL", "groq:llama-3.3-70b-versatile")
    micro_fill_model: str = os.getenv("MICRO_FILL_MODEL", "groq:llama-3.3-70b-versatile")
    repair_model: str = os.getenv("REPAIR_MODEL", "groq:openai/gpt-oss-20b")
    summary_model: str = os.getenv("SUMMARY_MODEL", "openai:gpt-4o-mini")
    hotel_model: str = os.getenv("HOTEL_MODEL", "groq:openai/gpt-oss-20b")
    route_model: str = os.getenv("ROUTE_MODEL", "groq:llama-3.3-70b-versatile")

    llm_timeout_seconds: float = float(os.getenv("LLM_TIMEOUT_SECONDS", "9"))

    # Bounded retries per stage
    skeleton_attempts: int = int(os.getenv("SKELETON_ATTEMPTS", "2"))
    fill_attempts: int = int(os.getenv("FILL_ATTEMPTS", "2"))
    micro_fill_attempts: int = int(os.getenv("MICRO_FILL_ATTEMPTS", "6"))
    retry_delay_seconds: float = float(os.getenv("RETRY_DELAY_SECONDS", "0.3"))
    micro_fill_delay_seconds: float = float(os.getenv("MICRO_FILL_DELAY_SECONDS", "0.4"))

    # Soft budget scaling and budget status thresholds (percent of budget)
    budget_scale_min: float = float(os.getenv("BUDGET_SCALE_MIN", "0.7"))
    budget_scale_max: float = float(os.getenv("BUDGET_SCALE_MAX", "1.6"))
    budget_under_percent: float = float(os.getenv("BUDGET_UNDER_PERCENT", "50"))
    budget_on_track_percent: float = float(os.getenv("BUDGET_ON_TRACK_PERCENT", "85"))
    budget_over_percent: float = float(os.getenv("BUDGET_OVER_PERCENT", "100"))
    hotel_budget_share: float = float(os.getenv("HOTEL_BUDGET_SHARE", "0.4"))

    # "full" (8 sections) or "compact" (5 sections)
    block_layout: str = os.getenv("BLOCK_LAYOUT", "full")

    google_maps_api_key: str = os.getenv("GOOGLE_MAPS_API_KEY", "")
    places_timeout_seconds: float = float(os.getenv("PLACES_TIMEOUT_SECONDS", "4"))

    allowed_origins: str = os.getenv("ALLOWED_ORIGINS", "")
    log_level: str = os.getenv("LOG_LEVEL", "INFO")


def get_settings() -> Settings:
    return Settings()
