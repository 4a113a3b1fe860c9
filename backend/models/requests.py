from pydantic import BaseModel, Field, model_validator

from models.schemas.application import PipelineStage
from models.schemas.candidate import ParsedResumeData
from models.schemas.job import CompanyJobVariant, CompanyProfile, JobFamily, JobTemplate, ResolvedJobSpec


class ResolveRequest(BaseModel):
    """The full job graph; the caller fetches every record up front."""
    family: JobFamily
    template: JobTemplate
    variant: CompanyJobVariant
    company: CompanyProfile


class ScoreRequest(BaseModel):
    resume: ParsedResumeData = Field(..., description="Structured output of the resume parser")
    spec: ResolvedJobSpec | None = Field(None, description="Already resolved job spec")
    job: ResolveRequest | None = Field(None, description="Job graph to resolve when no spec is given")

    @model_validator(mode="after")
    def _one_job_source(self) -> "ScoreRequest":
        if self.spec is None and self.job is None:
            raise ValueError("either spec or job must be provided")
        return self


class CreateApplicationRequest(BaseModel):
    candidate_id: str = Field(..., min_length=1)
    company_job_variant_id: str = Field(..., min_length=1)
    changed_by: str | None = None
    notes: str | None = Field(None, max_length=2000)


class TransitionRequest(BaseModel):
    to_stage: PipelineStage
    changed_by: str | None = None
    automated: bool = False
    notes: str | None = Field(None, max_length=2000)
    expected_status: PipelineStage | None = Field(
        None, description="Status the caller last saw; a mismatch is rejected as stale"
    )


class PublishRequest(BaseModel):
    job: ResolveRequest
    created_by: str = Field(..., min_length=1)
    published_content: str | None = Field(None, max_length=50000)
