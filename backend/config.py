import os

from pydantic import BaseModel, Field, model_validator
from pydantic_settings import BaseSettings


def _parse_cors_origins() -> list[str] | None:
    """Parse CORS_ORIGINS env var as comma-separated string or JSON list."""
    raw = os.environ.get("CORS_ORIGINS")
    if not raw:
        return None
    if raw.startswith("["):
        import json
        return json.loads(raw)
    return [o.strip() for o in raw.split(",") if o.strip()]


class ScoringConfig(BaseModel):
    """Tunable constants of the fit scoring engine.

    The category weights, the must-have gate and the proficiency curve are
    reconstructions, so they are kept here instead of inside the scorer.
    Override any of them through the environment, e.g.
    ``SCORING__MUST_GATE_CAP=55``.
    """

    model_config = {"frozen": True}

    # Overall = must * must_weight + should * should_weight + nice * nice_weight
    must_weight: float = Field(0.5, ge=0.0, le=1.0)
    should_weight: float = Field(0.3, ge=0.0, le=1.0)
    nice_weight: float = Field(0.2, ge=0.0, le=1.0)

    # A must-have matched below the threshold caps the overall score
    must_gate_threshold: float = Field(0.3, ge=0.0, le=1.0)
    must_gate_cap: float = Field(60.0, ge=0.0, le=100.0)

    # Skill degree curve
    strong_proficiency: float = Field(6.0, gt=0.0, le=10.0)
    weak_match_floor: float = Field(0.5, ge=0.0, le=1.0)
    weak_match_ceiling: float = Field(0.9, ge=0.0, le=1.0)
    unrated_skill_degree: float = Field(0.8, ge=0.0, le=1.0)
    substring_match_factor: float = Field(0.8, ge=0.0, le=1.0)
    partial_name_match_factor: float = Field(0.5, ge=0.0, le=1.0)  # "React" listed for "React Native"

    # Explanation thresholds
    matched_threshold: float = Field(0.7, ge=0.0, le=1.0)
    strength_threshold: float = Field(0.8, ge=0.0, le=1.0)
    gap_threshold: float = Field(0.5, ge=0.0, le=1.0)
    max_strengths: int = Field(5, ge=0)
    max_gaps: int = Field(5, ge=0)
    max_recommendations: int = Field(3, ge=0)
    max_evidence: int = Field(3, ge=0)

    @model_validator(mode="after")
    def _check_weights(self) -> "ScoringConfig":
        total = self.must_weight + self.should_weight + self.nice_weight
        if abs(total - 1.0) > 1e-6:
            raise ValueError(f"category weights must sum to 1.0, got {total:.3f}")
        if self.weak_match_floor > self.weak_match_ceiling:
            raise ValueError("weak_match_floor must not exceed weak_match_ceiling")
        return self


class Settings(BaseSettings):
    app_name: str = "Recruitment Core API"
    app_version: str = "1.0.0"
    debug: bool = False
    log_level: str = "INFO"
    cors_origins: list[str] = [
        "http://localhost:5173",
        "http://localhost:3000",
    ]

    score_rate_limit: str = "60/minute"  # slowapi limit string for scoring endpoints
    default_requirement_weight: int = Field(5, ge=1, le=10)

    scoring: ScoringConfig = ScoringConfig()

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "env_nested_delimiter": "__",
        "extra": "ignore",
    }


_cors_override = _parse_cors_origins()
settings = Settings(**{"cors_origins": _cors_override} if _cors_override else {})
