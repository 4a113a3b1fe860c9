"""Fit scoring output: per-requirement results plus the explained score."""

from enum import Enum

from pydantic import BaseModel, Field

from models.schemas.requirement import RequirementItem


class MatchType(str, Enum):
    EXACT = "exact"
    SUBSTRING = "substring"
    THRESHOLD = "threshold"  # numeric experience threshold satisfied
    NONE = "none"


class RequirementMatch(BaseModel):
    """How one requirement was matched against the candidate profile."""
    requirement: RequirementItem
    match_degree: float = Field(0.0, ge=0.0, le=1.0)
    matched: bool = False
    match_type: MatchType = MatchType.NONE
    evidence: list[str] = []
    explanation: str = ""


class MatchExplanation(BaseModel):
    """Explainable fit score of a candidate against a resolved job spec.

    ``detailed_analysis`` keeps one entry per requirement so every score
    can be traced back to the individual matches that produced it.
    """
    overall_score: float = Field(100.0, ge=0.0, le=100.0)
    must_have_score: float = Field(100.0, ge=0.0, le=100.0)
    should_have_score: float = Field(100.0, ge=0.0, le=100.0)
    nice_to_have_score: float = Field(100.0, ge=0.0, le=100.0)
    gated: bool = False  # True when a weak must-have capped the overall score
    strengths: list[str] = []
    gaps: list[str] = []
    recommendations: list[str] = []
    detailed_analysis: list[RequirementMatch] = []
