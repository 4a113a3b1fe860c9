import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from api.router import limiter, router
from config import settings
from models.responses import ErrorResponse
from services.errors import ConflictError, NotFoundError, RecruitmentError, ValidationError

logging.basicConfig(
    level=logging.DEBUG if settings.debug else settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(
    title=settings.app_name,
    description="Job requirement resolution, explainable fit scoring and hiring pipeline tracking",
    version=settings.app_version,
)

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

_STATUS_CODES: dict[type[RecruitmentError], int] = {
    ValidationError: 400,
    NotFoundError: 404,
    ConflictError: 409,
}


@app.exception_handler(RecruitmentError)
async def recruitment_error_handler(request: Request, exc: RecruitmentError) -> JSONResponse:
    status_code = next(
        (code for cls, code in _STATUS_CODES.items() if isinstance(exc, cls)),
        500,
    )
    body = ErrorResponse(detail=exc.message, error_type=type(exc).__name__, retryable=exc.retryable)
    return JSONResponse(status_code=status_code, content=body.model_dump())


app.include_router(router)
