from fastapi import APIRouter, Depends, HTTPException, Request
from slowapi import Limiter
from slowapi.util import get_remote_address

from api.dependencies import get_jd_versions, get_pipeline
from config import settings
from models.requests import (
    CreateApplicationRequest,
    PublishRequest,
    ResolveRequest,
    ScoreRequest,
    TransitionRequest,
)
from models.responses import AllowedTransitionsResponse, HealthResponse, PublishResponse, StageStatsResponse
from models.schemas.application import Application, PipelineStage, StageHistoryEntry
from models.schemas.jd_version import JDVersion
from models.schemas.job import ResolvedJobSpec
from models.schemas.match_explanation import MatchExplanation
from services import application_pipeline, matching, requirement_resolver
from services.application_pipeline import ApplicationPipeline
from services.jd_versioning import JDVersionService

router = APIRouter()
limiter = Limiter(key_func=get_remote_address)


def _resolve(job: ResolveRequest) -> ResolvedJobSpec:
    return requirement_resolver.resolve(job.family, job.template, job.variant, job.company)


def _spec_for(body: ScoreRequest) -> ResolvedJobSpec:
    return body.spec if body.spec is not None else _resolve(body.job)


@router.get("/health", response_model=HealthResponse)
async def health():
    return HealthResponse(status="ok", version=settings.app_version)


@router.post("/jobs/resolve", response_model=ResolvedJobSpec)
async def resolve_job(body: ResolveRequest):
    return _resolve(body)


@router.post("/match/score", response_model=MatchExplanation)
@limiter.limit(settings.score_rate_limit)
async def score_match(request: Request, body: ScoreRequest):
    return matching.score_resume(body.resume, _spec_for(body))


@router.post("/applications", response_model=Application, status_code=201)
async def create_application(
    body: CreateApplicationRequest,
    pipeline: ApplicationPipeline = Depends(get_pipeline),
):
    return pipeline.create_application(
        body.candidate_id, body.company_job_variant_id, changed_by=body.changed_by, notes=body.notes,
    )


@router.get("/applications/{application_id}", response_model=Application)
async def get_application(application_id: str, pipeline: ApplicationPipeline = Depends(get_pipeline)):
    return pipeline.get(application_id)


@router.get("/applications/{application_id}/transitions", response_model=AllowedTransitionsResponse)
async def get_allowed_transitions(application_id: str, pipeline: ApplicationPipeline = Depends(get_pipeline)):
    current = pipeline.get(application_id).status
    return AllowedTransitionsResponse(
        application_id=application_id,
        current=current,
        allowed=application_pipeline.allowed_transitions(current),
        terminal=application_pipeline.is_terminal(current),
    )


@router.post("/applications/{application_id}/transitions", response_model=Application)
async def transition_application(
    application_id: str,
    body: TransitionRequest,
    pipeline: ApplicationPipeline = Depends(get_pipeline),
):
    return pipeline.transition(
        application_id,
        body.to_stage,
        changed_by=body.changed_by,
        automated=body.automated,
        notes=body.notes,
        expected_status=body.expected_status,
    )


@router.get("/applications/{application_id}/history", response_model=list[StageHistoryEntry])
async def get_application_history(application_id: str, pipeline: ApplicationPipeline = Depends(get_pipeline)):
    return pipeline.history(application_id)


@router.post("/applications/{application_id}/match", response_model=MatchExplanation)
@limiter.limit(settings.score_rate_limit)
async def match_application(
    request: Request,
    application_id: str,
    body: ScoreRequest,
    pipeline: ApplicationPipeline = Depends(get_pipeline),
):
    _, explanation = matching.evaluate_application(pipeline, application_id, body.resume, _spec_for(body))
    return explanation


@router.get("/stages/{stage}/stats", response_model=StageStatsResponse)
async def get_stage_stats(stage: PipelineStage, pipeline: ApplicationPipeline = Depends(get_pipeline)):
    return StageStatsResponse(stage=stage, **pipeline.stage_transition_stats(stage))


@router.post("/variants/{variant_id}/publish", response_model=PublishResponse, status_code=201)
async def publish_variant(
    variant_id: str,
    body: PublishRequest,
    jd_versions: JDVersionService = Depends(get_jd_versions),
):
    if body.job.variant.id != variant_id:
        raise HTTPException(status_code=400, detail="Variant ID in path and body do not match")

    spec = _resolve(body.job)
    jd_version, variant = jd_versions.publish(body.job.variant, spec, body.published_content, body.created_by)
    return PublishResponse(jd_version=jd_version, variant=variant)


@router.get("/variants/{variant_id}/versions", response_model=list[JDVersion])
async def list_versions(variant_id: str, jd_versions: JDVersionService = Depends(get_jd_versions)):
    return jd_versions.list_versions(variant_id)


@router.get("/variants/{variant_id}/versions/latest", response_model=JDVersion)
async def latest_version(variant_id: str, jd_versions: JDVersionService = Depends(get_jd_versions)):
    return jd_versions.latest(variant_id)
