"""
API Response Models

Pydantic models for API responses.
"""

from typing import Dict, List, Optional, Any

from pydantic import BaseModel, Field

from runplan.adaptation import IntensityAdvice
from runplan.plan_schemas import Program


class PlanGenerationResponse(BaseModel):
    """Response for POST /api/plans."""

    program: Program = Field(..., description="Generated program")
    saved: bool = Field(..., description="Whether the program replaced the active one")
    phase_breakdown: Dict[str, int] = Field(..., description="Weeks per periodization phase")
    warnings: List[str] = Field(default_factory=list, description="Generation warnings")


class PaceResponse(BaseModel):
    """Response for GET /api/pace."""

    vma: float
    percent: float
    pace: str = Field(..., description="Pace per km, or N/A")


class VMAEstimateResponse(BaseModel):
    """Response for POST /api/vma."""

    vma: float = Field(..., description="Estimated VMA in km/h")
    method: str = Field(..., description="Test used for the estimate")


class WeekProgressResponse(BaseModel):
    """Progress of one week."""

    week_number: int
    completed: int
    sessions_count: int


class AdviceResponse(BaseModel):
    """Response for GET /api/programs/active/advice."""

    advice: IntensityAdvice
    suggested_vma: Optional[float] = None


class HistoryResponse(BaseModel):
    """Response for GET /api/programs/history."""

    programs: List[Program]
    count: int


class ErrorResponse(BaseModel):
    """Standard error response."""

    error: str = Field(..., description="Error type")
    message: str = Field(..., description="Error message")
    details: Optional[Dict[str, Any]] = Field(None, description="Additional details")
