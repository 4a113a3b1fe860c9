"""Applications and their append-only stage history."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field

from models.schemas.match_explanation import MatchExplanation


class PipelineStage(str, Enum):
    APPLIED = "applied"
    SCREENING = "screening"
    SHORTLISTED = "shortlisted"
    INTERVIEW_SCHEDULED = "interview_scheduled"
    INTERVIEW_COMPLETED = "interview_completed"
    OFFER_EXTENDED = "offer_extended"
    OFFER_ACCEPTED = "offer_accepted"
    HIRED = "hired"
    REJECTED = "rejected"


class StageHistoryEntry(BaseModel):
    """One accepted stage change. Never mutated or deleted."""

    model_config = {"frozen": True}

    id: str
    application_id: str
    from_stage: PipelineStage | None = None  # None for the creation entry
    to_stage: PipelineStage
    changed_by: str | None = None
    automated: bool = False
    changed_at: datetime
    notes: str | None = None


class Application(BaseModel):
    """A candidate's application to one company job variant.

    ``status`` changes only through the application pipeline; ``version``
    is bumped on every accepted transition.
    """
    id: str
    candidate_id: str
    company_job_variant_id: str
    status: PipelineStage = PipelineStage.APPLIED
    fit_score: float | None = Field(None, ge=0.0, le=100.0)
    match_explanation: MatchExplanation | None = None
    stage_history: list[StageHistoryEntry] = []
    version: int = 0
    created_at: datetime
    updated_at: datetime
