"""
API Request Models

Pydantic models for API request validation.
"""

from typing import Optional

from pydantic import BaseModel, Field, model_validator

from runplan.plan_schemas import ProgramSettings, SessionFeedback
from runplan.vma import RaceTestDistance


class PlanGenerationRequest(BaseModel):
    """Request model for program generation."""

    settings: ProgramSettings = Field(..., description="Program settings")
    save: bool = Field(True, description="Store the program as the active one")


class FeedbackRequest(BaseModel):
    """Request model for session feedback."""

    feedback: Optional[SessionFeedback] = Field(
        None, description="Perceived difficulty, null to clear"
    )


class SwapRequest(BaseModel):
    """Request model for a drag-and-drop day swap."""

    dragged_session_id: str = Field(..., min_length=1)
    target_session_id: str = Field(..., min_length=1)


class AdaptIntensityRequest(BaseModel):
    """Request model for lowering the program VMA."""

    reduction_percent: float = Field(..., gt=0, lt=100)


class VMAEstimateRequest(BaseModel):
    """
    Request model for VMA estimation.

    Exactly one test must be provided.
    """

    half_cooper_distance_m: Optional[float] = Field(None, gt=0)
    vameval_stage: Optional[int] = Field(None, gt=0)
    race_distance: Optional[RaceTestDistance] = None
    race_time_seconds: Optional[float] = Field(None, gt=0)

    @model_validator(mode="after")
    def validate_single_test(self):
        provided = [
            self.half_cooper_distance_m is not None,
            self.vameval_stage is not None,
            self.race_time_seconds is not None,
        ]
        if sum(provided) != 1:
            raise ValueError("Provide exactly one test result")
        if self.race_time_seconds is not None and self.race_distance is None:
            raise ValueError("race_distance is required with race_time_seconds")
        return self
