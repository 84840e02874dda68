"""POST /v1/debts/* - debt payoff simulation and per-debt projections"""

import time
import logging
from dataclasses import asdict
from typing import List
from fastapi import APIRouter, HTTPException, Request

from smartspend_gateway.api.v1.schemas import (
    DebtSchema,
    ProjectionRequest,
    ProjectionResponse,
    ProjectionSchema,
    SimulationRequest,
    SimulationResponse,
)
from smartspend_gateway.api.dependencies import get_request_id
from smartspend_gateway.config import settings
from smartspend_gateway.domain.exceptions import InvalidSimulationRequestError
from smartspend_gateway.domain.models import Debt
from smartspend_gateway.domain.payoff import SimulationOptions, project_single_debt, simulate_debt_payoff
from smartspend_gateway.infrastructure.observability.logging import log_simulation
from smartspend_gateway.infrastructure.observability.metrics import record_simulation

router = APIRouter()


def _to_domain(debts: List[DebtSchema]) -> List[Debt]:
    return [Debt(**d.model_dump()) for d in debts]


@router.post("/debts/simulate", response_model=SimulationResponse)
def simulate(request_body: SimulationRequest, request: Request):
    """
    Simulate month-by-month payoff of the supplied debts.

    Budget problems come back as `warning` with a 200; only contract
    violations (negative budget, bad month cap) are rejected.
    """
    start_time = time.time()
    request_id = get_request_id(request)

    options = SimulationOptions(
        strategy=request_body.strategy,
        start_date=request_body.start_date,
        extra_principal_budget=request_body.extra_principal_budget,
        max_months=request_body.max_months or settings.simulation_max_months,
    )

    try:
        result = simulate_debt_payoff(_to_domain(request_body.debts), options)
    except InvalidSimulationRequestError as e:
        logging.warning(f"Invalid simulation request: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=422, detail=str(e))

    duration_ms = (time.time() - start_time) * 1000
    record_simulation(result.months, result.warning, result.monthly_principal_budget)
    log_simulation(
        request_id,
        request_body.strategy,
        len(request_body.debts),
        result.months,
        result.warning,
        duration_ms,
    )

    return SimulationResponse.model_validate(asdict(result))


@router.post("/debts/projections", response_model=ProjectionResponse)
def projections(request_body: ProjectionRequest):
    """Minimum-payment-only payoff hint for each debt"""
    projected = [
        project_single_debt(debt, request_body.start_date, settings.simulation_max_months)
        for debt in _to_domain(request_body.debts)
    ]
    return ProjectionResponse(projections=[ProjectionSchema.model_validate(asdict(p)) for p in projected])
