"""Shared dependencies for API routes."""

from services.application_pipeline import ApplicationPipeline
from services.jd_versioning import JDVersionService

_pipeline: ApplicationPipeline | None = None
_jd_versions: JDVersionService | None = None


def get_pipeline() -> ApplicationPipeline:
    global _pipeline
    if _pipeline is None:
        _pipeline = ApplicationPipeline()
    return _pipeline


def get_jd_versions() -> JDVersionService:
    global _jd_versions
    if _jd_versions is None:
        _jd_versions = JDVersionService()
    return _jd_versions


def reset() -> None:
    """Drop the in-memory stores. Useful for testing."""
    global _pipeline, _jd_versions
    _pipeline = None
    _jd_versions = None
