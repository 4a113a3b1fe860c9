"""Tests for publishing immutable JD versions."""

import pydantic
import pytest

from models.schemas.requirement import RequirementItem
from services.errors import NotFoundError, ValidationError
from services.jd_versioning import JDVersionService, render_job_description, unpublish
from services.requirement_resolver import resolve


@pytest.fixture
def spec(family, template, variant, company):
    return resolve(family, template, variant, company)


@pytest.fixture
def service(clock, id_factory):
    return JDVersionService(clock=clock, id_factory=id_factory)


class TestRenderJobDescription:
    def test_sections(self, spec):
        content = render_job_description(spec)
        assert content.startswith("# Frontend Engineer\n**Company:** TechStart")
        assert "**Location:** Berlin" in content
        assert "**Work Arrangement:** remote" in content
        assert "### Required Qualifications\n- JavaScript\n- React" in content
        assert "### Nice to Have\n- TailwindCSS" in content
        assert "### Preferred Qualifications" not in content
        assert "**Salary Range:** 90,000 - 130,000 USD" in content
        assert "## Benefits\n- Equity\n- Learning budget" in content
        assert "## Company Culture" in content

    def test_deterministic(self, spec):
        assert render_job_description(spec) == render_job_description(spec)


class TestPublish:
    def test_versions_monotonic(self, service, variant, spec):
        numbers = [service.publish(variant, spec, None, "hr-1")[0].version for _ in range(3)]
        assert numbers == [1, 2, 3]

    def test_first_publish_activates_and_stamps(self, service, variant, spec):
        first, published = service.publish(variant, spec, "Posting v1", "hr-1")
        assert published.is_active is True
        assert published.published_at == first.created_at
        assert variant.is_active is False

        second, republished = service.publish(published, spec, "Posting v2", "hr-1")
        assert republished.published_at == first.created_at
        assert second.created_at > first.created_at

    def test_explicit_content_kept(self, service, variant, spec):
        jd_version, _ = service.publish(variant, spec, "Custom posting", "hr-1")
        assert jd_version.published_content == "Custom posting"

    def test_rendered_content_when_missing(self, service, variant, spec):
        jd_version, _ = service.publish(variant, spec, "  ", "hr-1")
        assert jd_version.published_content == render_job_description(spec)

    def test_snapshot_is_frozen_copy(self, service, variant, spec):
        jd_version, _ = service.publish(variant, spec, None, "hr-1")
        spec.requirements.append(RequirementItem(category="nice", description="Figma"))
        assert len(jd_version.resolved_spec.requirements) == 3
        with pytest.raises(pydantic.ValidationError):
            jd_version.version = 99

    def test_prior_versions_untouched(self, service, variant, spec):
        first, _ = service.publish(variant, spec, "v1", "hr-1")
        service.publish(variant, spec, "v2", "hr-2")
        assert service.get(first.id) == first
        assert service.get(first.id).published_content == "v1"

    def test_versions_per_variant(self, service, variant, spec):
        other = variant.model_copy(update={"id": "var-other"})
        service.publish(variant, spec, None, "hr-1")
        service.publish(variant, spec, None, "hr-1")
        jd_version, _ = service.publish(other, spec, None, "hr-1")
        assert jd_version.version == 1

    def test_requires_author(self, service, variant, spec):
        with pytest.raises(ValidationError):
            service.publish(variant, spec, None, " ")


class TestQueries:
    def test_reads_do_not_leak_stored_version(self, service, variant, spec):
        service.publish(variant, spec, None, "hr-1")
        got = service.latest(variant.id)
        got.resolved_spec.title = "Changed"
        got.resolved_spec.requirements.clear()
        service.list_versions(variant.id)[0].resolved_spec.benefits.clear()
        service.get(got.id).resolved_spec.company.culture.clear()

        stored = service.latest(variant.id)
        assert stored.resolved_spec.title == "Frontend Engineer"
        assert len(stored.resolved_spec.requirements) == 3
        assert stored.resolved_spec.benefits == ["Equity", "Learning budget"]
        assert stored.resolved_spec.company.culture == ["Ownership", "Fast feedback"]

    def test_publish_result_is_detached(self, service, variant, spec):
        jd_version, _ = service.publish(variant, spec, None, "hr-1")
        jd_version.resolved_spec.requirements.clear()
        assert len(service.get(jd_version.id).resolved_spec.requirements) == 3

    def test_list_newest_first(self, service, variant, spec):
        for _ in range(3):
            service.publish(variant, spec, None, "hr-1")
        assert [v.version for v in service.list_versions(variant.id)] == [3, 2, 1]
        assert service.latest(variant.id).version == 3

    def test_latest_without_versions(self, service):
        with pytest.raises(NotFoundError):
            service.latest("var-404")
        assert service.list_versions("var-404") == []

    def test_get_unknown(self, service):
        with pytest.raises(NotFoundError):
            service.get("missing")


def test_unpublish_keeps_publish_time(service, variant, spec):
    _, published = service.publish(variant, spec, None, "hr-1")
    inactive = unpublish(published)
    assert inactive.is_active is False
    assert inactive.published_at == published.published_at
