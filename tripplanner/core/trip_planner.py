"""
Trip generation pipeline.

skeleton -> normalize -> real fill -> normalize -> dedupe -> micro-fill -> costs,
with the offline mock plan as the answer whenever live generation cannot
produce anything.
"""

import logging

from tripplanner.core.costs import HotelPricingStrategy, apply_costs
from tripplanner.core.dedupe import enforce_unique_places
from tripplanner.core.fill import fill_real
from tripplanner.core.llm_provider import CompletionGateway
from tripplanner.core.micro_fill import ensure_minimum
from tripplanner.core.mock_builders import build_mock_trip
from tripplanner.core.normalizer import normalize
from tripplanner.core.schemas import TripPlan, TripRequest
from tripplanner.core.sections import resolve_layout
from tripplanner.core.settings import Settings
from tripplanner.core.skeleton import build_skeleton

logger = logging.getLogger(__name__)


class TripPlanner:
    """
    Orchestrates the generation stages for one request at a time.

    The planner never raises for generation problems: every failure path
    ends in a complete plan, flagged with ``mock`` when it is the offline one.
    """

    def __init__(
        self,
        gateway: CompletionGateway,
        settings: Settings,
        pricing: HotelPricingStrategy | None = None,
    ) -> None:
        self.gateway = gateway
        self.settings = settings
        self.pricing = pricing

    def _mock(self, request: TripRequest) -> TripPlan:
        return build_mock_trip(request, resolve_layout(self.settings.block_layout), self.settings)

    async def plan(self, request: TripRequest) -> TripPlan:
        if not self.gateway.available():
            logger.warning("No LLM credentials configured, returning mock plan for %s", request.to)
            return self._mock(request)

        try:
            plan = await self._generate(request)
        except Exception:
            logger.exception("Trip generation failed for %s, returning mock plan", request.to)
            return self._mock(request)

        if plan is None:
            return self._mock(request)
        return plan

    async def _generate(self, request: TripRequest) -> TripPlan | None:
        logger.info("Planning %d-day trip to %s", request.day_count, request.to)

        skeleton, skeleton_live = await build_skeleton(request, self.gateway, self.settings)
        filled, fill_live = await fill_real(skeleton, request, self.gateway, self.settings)
        if not skeleton_live and not fill_live:
            logger.warning("No live output for %s from skeleton or fill, using mock plan", request.to)
            return None

        plan = normalize(filled, request)
        plan = enforce_unique_places(plan)
        plan = await ensure_minimum(plan, self.gateway, self.settings)
        plan = apply_costs(plan, self.settings, self.pricing)
        plan.mock = False

        logger.info(
            "Planned trip to %s: total %.2f %s (%s)",
            request.to,
            plan.cost_summary.total_estimated_cost,
            request.currency,
            plan.cost_summary.budget_status.value,
        )
        return plan
