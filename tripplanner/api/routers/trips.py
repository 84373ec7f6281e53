import logging

from fastapi import APIRouter, Depends

from tripplanner.api.deps import get_trip_planner
from tripplanner.core.schemas import TripPlan, TripRequest
from tripplanner.core.trip_planner import TripPlanner

logger = logging.getLogger(__name__)

router = APIRouter(tags=["trips"])


@router.post("/trip-plan", response_model=TripPlan, response_model_by_alias=True)
async def create_trip_plan(
    payload: TripRequest,
    planner: TripPlanner = Depends(get_trip_planner),
) -> TripPlan:
    """
    Generate a full day-by-day itinerary.

    Always answers with a complete plan; ``mock`` is true when the offline
    generator had to be used.
    """
    logger.info(
        "Trip plan requested: %s, %s to %s (%s)",
        payload.to,
        payload.start_date,
        payload.end_date,
        payload.travel_type.value,
    )
    return await planner.plan(payload)
