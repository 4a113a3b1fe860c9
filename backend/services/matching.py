"""Glue between resume parsing output, fit scoring and the application pipeline."""

import logging

from config import ScoringConfig
from models.schemas.application import Application
from models.schemas.candidate import ParsedResumeData
from models.schemas.job import ResolvedJobSpec
from models.schemas.match_explanation import MatchExplanation
from services import fit_scoring
from services.application_pipeline import ApplicationPipeline
from services.skill_normalizer import normalize_candidate
from services.validation import require

logger = logging.getLogger(__name__)


def score_resume(
    parsed_resume: ParsedResumeData | None,
    spec: ResolvedJobSpec | None,
    config: ScoringConfig | None = None,
) -> MatchExplanation:
    """Normalize a parsed resume and score it against ``spec``."""
    parsed_resume = require(parsed_resume, "ParsedResumeData")
    spec = require(spec, "ResolvedJobSpec")
    return fit_scoring.score(normalize_candidate(parsed_resume), spec, config)


def evaluate_application(
    pipeline: ApplicationPipeline,
    application_id: str,
    parsed_resume: ParsedResumeData | None,
    spec: ResolvedJobSpec | None,
    config: ScoringConfig | None = None,
) -> tuple[Application, MatchExplanation]:
    """Score the application's candidate and store the result on the application."""
    application = pipeline.get(application_id)
    explanation = score_resume(parsed_resume, spec, config)
    updated = pipeline.attach_match(application.id, explanation)
    logger.debug(
        "Evaluated application %s: %d strengths, %d gaps",
        application_id, len(explanation.strengths), len(explanation.gaps),
    )
    return updated, explanation
