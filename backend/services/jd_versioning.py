"""Publishing: immutable JD versions snapshotted from a resolved spec."""

import logging
import threading
import uuid
from collections.abc import Callable
from datetime import datetime, timezone

from models.schemas.jd_version import JDVersion
from models.schemas.job import CompanyJobVariant, ResolvedJobSpec
from models.schemas.requirement import RequirementCategory
from services.errors import NotFoundError, ValidationError
from services.validation import validate_resolved_spec

logger = logging.getLogger(__name__)

_SECTION_TITLES = {
    RequirementCategory.MUST: "Required Qualifications",
    RequirementCategory.SHOULD: "Preferred Qualifications",
    RequirementCategory.NICE: "Nice to Have",
}


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _new_id() -> str:
    return str(uuid.uuid4())


def render_job_description(spec: ResolvedJobSpec) -> str:
    """Markdown posting for external job boards."""
    lines = [f"# {spec.title}", f"**Company:** {spec.company.name}"]
    if spec.company.industry:
        lines.append(f"**Industry:** {spec.company.industry}")
    if spec.location:
        lines.append(f"**Location:** {spec.location}")
    lines.append(f"**Work Arrangement:** {spec.work_arrangement.value}")

    lines += ["", "## Job Description", spec.description]

    if spec.requirements:
        lines += ["", "## Requirements"]
        for category, heading in _SECTION_TITLES.items():
            items = spec.requirements_in(category)
            if not items:
                continue
            lines += ["", f"### {heading}"]
            lines += [f"- {req.description}" for req in items]

    if spec.salary_range:
        salary = spec.salary_range
        lines += [
            "",
            "## Compensation",
            f"**Salary Range:** {salary.min:,.0f} - {salary.max:,.0f} {salary.currency}",
        ]

    if spec.benefits:
        lines += ["", "## Benefits"]
        lines += [f"- {benefit}" for benefit in spec.benefits]

    if spec.company.culture:
        lines += ["", "## Company Culture"]
        lines += [f"- {value}" for value in spec.company.culture]

    return "\n".join(lines)


class JDVersionService:
    """Stores JD versions per variant. Version numbers are allocated under a
    lock so concurrent publishes never share a number."""

    def __init__(
        self,
        clock: Callable[[], datetime] = _utcnow,
        id_factory: Callable[[], str] = _new_id,
    ) -> None:
        self._clock = clock
        self._new_id = id_factory
        self._versions: dict[str, list[JDVersion]] = {}
        self._lock = threading.Lock()

    def _snapshot(self, jd_version: JDVersion) -> JDVersion:
        # JDVersion is frozen but the spec inside it is not
        return jd_version.model_copy(deep=True)

    def publish(
        self,
        variant: CompanyJobVariant,
        resolved_spec: ResolvedJobSpec,
        published_content: str | None,
        created_by: str,
    ) -> tuple[JDVersion, CompanyJobVariant]:
        """Snapshot ``resolved_spec`` as the variant's next version.

        Returns the new version and the variant marked active; ``published_at``
        is stamped on the first publish only. Without ``published_content`` the
        posting is rendered from the spec.
        """
        if not created_by or not created_by.strip():
            raise ValidationError("created_by is required to publish a job description")
        validate_resolved_spec(resolved_spec)
        content = published_content if published_content and published_content.strip() else None
        if content is None:
            content = render_job_description(resolved_spec)

        with self._lock:
            history = self._versions.setdefault(variant.id, [])
            number = 1 + max((v.version for v in history), default=0)
            now = self._clock()
            jd_version = JDVersion(
                id=self._new_id(),
                company_job_variant_id=variant.id,
                version=number,
                resolved_spec=resolved_spec.model_copy(deep=True),
                published_content=content,
                created_by=created_by,
                created_at=now,
            )
            history.append(jd_version)

        published = variant.model_copy(update={
            "is_active": True,
            "published_at": variant.published_at or now,
        })
        logger.info("Published variant %s as version %d by %s", variant.id, number, created_by)
        return self._snapshot(jd_version), published

    def list_versions(self, variant_id: str) -> list[JDVersion]:
        """Newest first."""
        with self._lock:
            history = list(self._versions.get(variant_id, []))
        return [self._snapshot(v) for v in sorted(history, key=lambda v: v.version, reverse=True)]

    def latest(self, variant_id: str) -> JDVersion:
        versions = self.list_versions(variant_id)
        if not versions:
            raise NotFoundError(f"No published versions for variant {variant_id}")
        return versions[0]

    def get(self, version_id: str) -> JDVersion:
        with self._lock:
            for history in self._versions.values():
                for jd_version in history:
                    if jd_version.id == version_id:
                        return self._snapshot(jd_version)
        raise NotFoundError(f"JD version with ID {version_id} not found")


def unpublish(variant: CompanyJobVariant) -> CompanyJobVariant:
    """Deactivate a variant. ``published_at`` keeps the first publish time."""
    return variant.model_copy(update={"is_active": False})
