from pydantic import BaseModel

from models.schemas.application import PipelineStage
from models.schemas.jd_version import JDVersion
from models.schemas.job import CompanyJobVariant


class HealthResponse(BaseModel):
    status: str = "ok"
    version: str = ""


class ErrorResponse(BaseModel):
    detail: str
    error_type: str
    retryable: bool = False


class AllowedTransitionsResponse(BaseModel):
    application_id: str
    current: PipelineStage
    allowed: list[PipelineStage] = []
    terminal: bool = False


class PublishResponse(BaseModel):
    jd_version: JDVersion
    variant: CompanyJobVariant


class StageStatsResponse(BaseModel):
    stage: PipelineStage
    total_transitions: int = 0
    automated_transitions: int = 0
    manual_transitions: int = 0
