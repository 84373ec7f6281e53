from fastapi import APIRouter, Depends, HTTPException

from tripplanner.api.deps import get_app_settings, get_gateway
from tripplanner.core.llm_provider import CompletionGateway
from tripplanner.core.route_optimizer import optimize_route
from tripplanner.core.schemas import RouteOptimizeRequest, RouteOptimizeResponse
from tripplanner.core.settings import Settings

router = APIRouter(tags=["routes"])


@router.post("/optimize-route", response_model=RouteOptimizeResponse)
async def optimize_day_route(
    payload: RouteOptimizeRequest,
    gateway: CompletionGateway = Depends(get_gateway),
    settings: Settings = Depends(get_app_settings),
) -> RouteOptimizeResponse:
    """Reorder a day's stops into a route that starts and ends at the hotel."""
    if payload.hotel is None:
        raise HTTPException(status_code=400, detail="Missing hotel or stops")
    return await optimize_route(payload.stops, payload.hotel, gateway, settings)
