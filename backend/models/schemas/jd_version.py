"""Immutable published snapshots of a resolved job spec."""

from datetime import datetime

from pydantic import BaseModel, Field

from models.schemas.job import ResolvedJobSpec


class JDVersion(BaseModel):
    model_config = {"frozen": True}

    id: str
    company_job_variant_id: str
    version: int = Field(..., ge=1)  # monotonically increasing per variant
    resolved_spec: ResolvedJobSpec
    published_content: str
    created_by: str
    created_at: datetime
