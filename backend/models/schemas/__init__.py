"""Pydantic contracts exchanged between the recruitment core services."""

from models.schemas.requirement import RequirementCategory, RequirementItem, RequirementType
from models.schemas.job import (
    CompanyJobVariant,
    CompanyProfile,
    JobFamily,
    JobTemplate,
    ResolvedJobSpec,
)
from models.schemas.candidate import NormalizedCandidate, NormalizedSkill, ParsedResumeData, Skill
from models.schemas.match_explanation import MatchExplanation, RequirementMatch
from models.schemas.application import Application, PipelineStage, StageHistoryEntry
from models.schemas.jd_version import JDVersion

__all__ = [
    "RequirementCategory",
    "RequirementItem",
    "RequirementType",
    "CompanyJobVariant",
    "CompanyProfile",
    "JobFamily",
    "JobTemplate",
    "ResolvedJobSpec",
    "NormalizedCandidate",
    "NormalizedSkill",
    "ParsedResumeData",
    "Skill",
    "MatchExplanation",
    "RequirementMatch",
    "Application",
    "PipelineStage",
    "StageHistoryEntry",
    "JDVersion",
]
