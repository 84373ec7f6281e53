import logging

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from tripplanner.api.routers.hotels import router as hotels_router
from tripplanner.api.routers.routes import router as routes_router
from tripplanner.api.routers.search import router as search_router
from tripplanner.api.routers.trips import router as trips_router
from tripplanner.core.llm_provider import LLMGateway
from tripplanner.core.places_service import PlacesService
from tripplanner.core.settings import Settings, get_settings

load_dotenv()

logger = logging.getLogger(__name__)


def _places_service(settings: Settings) -> PlacesService | None:
    try:
        return PlacesService(settings)
    except ValueError as e:
        logger.warning(f"Places search disabled: {e}")
        return None


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or get_settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    application = FastAPI(title="Trip Planner Backend")

    # CORS: local frontend dev servers
    allowed_origins = [
        "http://localhost:5173",
        "http://localhost:3000",
        "http://127.0.0.1:5173",
        "http://127.0.0.1:3000",
    ]

    # Add production origins from environment if set
    # e.g. ALLOWED_ORIGINS=https://app.example.com,https://www.example.com
    if settings.allowed_origins:
        allowed_origins.extend(
            [origin.strip() for origin in settings.allowed_origins.split(",") if origin.strip()]
        )

    application.add_middleware(
        CORSMiddleware,
        allow_origins=allowed_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["*"],
    )

    # Initialize shared dependencies
    application.state.settings = settings
    application.state.gateway = LLMGateway(settings)
    application.state.places_service = _places_service(settings)

    @application.get("/healthz")
    async def healthz() -> dict[str, object]:
        return {
            "status": "ok",
            "llm": application.state.gateway.available(),
            "places": application.state.places_service is not None,
        }

    application.include_router(trips_router)
    application.include_router(hotels_router)
    application.include_router(search_router)
    application.include_router(routes_router)
    return application


app = create_app()
