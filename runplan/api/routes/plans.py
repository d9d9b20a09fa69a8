"""
Program Generation API Routes

Endpoints for program generation, pace lookup and VMA estimation.
"""

import os
from datetime import date
from pathlib import Path
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from runplan.api.models.requests import PlanGenerationRequest, VMAEstimateRequest
from runplan.api.models.responses import (
    PaceResponse,
    PlanGenerationResponse,
    VMAEstimateResponse,
)
from runplan.database import ProgramStore, get_db_session
from runplan.pace import pace_at
from runplan.plan_schemas import ProgramSettings
from runplan.planner import TrainingPlanGenerator
from runplan.schemas import PlannerConfig
from runplan.vma import vma_from_half_cooper, vma_from_race_time, vma_from_vameval

router = APIRouter()


def get_planner_config() -> PlannerConfig:
    """
    Planner configuration for the API.

    Reads the JSON file named by RUNPLAN_CONFIG when set, defaults otherwise.
    """
    config_path = os.environ.get("RUNPLAN_CONFIG")
    if not config_path:
        return PlannerConfig()
    try:
        return PlannerConfig.from_file(Path(config_path))
    except (FileNotFoundError, ValueError) as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to load planner config: {str(e)}",
        )


def _generation_warnings(
    settings: ProgramSettings, config: PlannerConfig, today: date
) -> List[str]:
    warnings = []
    if settings.vma is None or settings.vma <= 0:
        warnings.append(f"No VMA provided, paces use {config.fallback_vma:g} km/h")
    clamped = config.clamp_sessions(settings.sessions_per_week)
    if clamped != settings.sessions_per_week:
        warnings.append(
            f"{settings.sessions_per_week} sessions per week is not supported, using {clamped}"
        )
    days = len(config.training_days(clamped))
    if days < clamped:
        warnings.append(f"Only {days} training days are scheduled for {clamped} sessions per week")
    min_weeks = config.periodization.min_weeks
    if (settings.race_date - today).days < min_weeks * 7:
        warnings.append(f"Race is less than {min_weeks} weeks away, plan uses {min_weeks} weeks")
    return warnings


@router.post("/plans", response_model=PlanGenerationResponse)
async def generate_plan(
    request: PlanGenerationRequest,
    config: PlannerConfig = Depends(get_planner_config),
    db: Session = Depends(get_db_session),
) -> PlanGenerationResponse:
    """
    Generate a program from settings.

    The new program fully replaces the active one when `save` is set.

    Args:
        request: PlanGenerationRequest with program settings

    Returns:
        PlanGenerationResponse with the program and its phase breakdown
    """
    today = date.today()
    program = TrainingPlanGenerator(config).generate(request.settings, today=today)

    if request.save:
        ProgramStore(db).save_active(program)

    return PlanGenerationResponse(
        program=program,
        saved=request.save,
        phase_breakdown=program.get_phase_breakdown(),
        warnings=_generation_warnings(request.settings, config, today),
    )


@router.get("/pace", response_model=PaceResponse)
async def get_pace(
    vma: float = Query(..., description="VMA in km/h"),
    percent: float = Query(100.0, description="Percentage of VMA"),
) -> PaceResponse:
    """Pace per km at a percentage of VMA."""
    return PaceResponse(vma=vma, percent=percent, pace=pace_at(vma, percent))


@router.post("/vma", response_model=VMAEstimateResponse)
async def estimate_vma(request: VMAEstimateRequest) -> VMAEstimateResponse:
    """Estimate VMA from a half-Cooper, VAMEVAL or race result."""
    try:
        if request.half_cooper_distance_m is not None:
            return VMAEstimateResponse(
                vma=vma_from_half_cooper(request.half_cooper_distance_m), method="half_cooper"
            )
        if request.vameval_stage is not None:
            return VMAEstimateResponse(
                vma=vma_from_vameval(request.vameval_stage), method="vameval"
            )
        return VMAEstimateResponse(
            vma=vma_from_race_time(request.race_distance, request.race_time_seconds),
            method=f"race_{request.race_distance.value}",
        )
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
