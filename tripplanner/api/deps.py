"""
FastAPI dependencies. Shared objects live on ``app.state`` and are created in
``create_app()``; tests replace them through ``app.dependency_overrides``.
"""

from fastapi import Depends, Request

from tripplanner.core.llm_provider import CompletionGateway
from tripplanner.core.places_service import PlacesService
from tripplanner.core.settings import Settings
from tripplanner.core.trip_planner import TripPlanner


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_gateway(request: Request) -> CompletionGateway:
    return request.app.state.gateway


def get_places_service(request: Request) -> PlacesService | None:
    """None when no Places API key is configured."""
    return request.app.state.places_service


def get_trip_planner(
    gateway: CompletionGateway = Depends(get_gateway),
    settings: Settings = Depends(get_app_settings),
) -> TripPlanner:
    return TripPlanner(gateway, settings)
