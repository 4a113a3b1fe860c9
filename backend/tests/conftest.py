"""Shared test configuration and fixtures."""

import itertools
from datetime import datetime, timedelta, timezone

import pytest

from models.schemas.candidate import ParsedResumeData, Skill
from models.schemas.job import (
    CompanyJobVariant,
    CompanyProfile,
    JobFamily,
    JobTemplate,
    SalaryRange,
)
from models.schemas.requirement import RequirementItem


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "scenario: end-to-end resolve, score and pipeline flows"
    )


class FakeClock:
    """Deterministic clock: every call advances by one minute."""

    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime(2024, 3, 1, 9, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        current = self.now
        self.now = self.now + timedelta(minutes=1)
        return current


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def id_factory():
    counter = itertools.count(1)
    return lambda: f"id-{next(counter)}"


@pytest.fixture
def family():
    return JobFamily(
        id="fam-swe",
        name="Software Engineer",
        skill_categories=["Languages", "Frameworks"],
        base_requirements=[
            RequirementItem(id="req-js", type="skill", category="must", description="JavaScript", weight=9),
        ],
    )


@pytest.fixture
def template():
    return JobTemplate(
        id="tpl-frontend",
        job_family_id="fam-swe",
        name="Frontend Engineer",
        level="mid",
        experience_range={"min": 2, "max": 5},
        salary_range=SalaryRange(min=90000, max=130000, currency="USD"),
        own_requirements=[
            RequirementItem(id="req-react", type="skill", category="must", description="React", weight=8),
        ],
    )


@pytest.fixture
def company():
    return CompanyProfile(
        id="co-techstart",
        name="TechStart",
        industry="Software",
        size="startup",
        culture=["Ownership", "Fast feedback"],
        benefits=["Equity", "Learning budget"],
        work_arrangement="remote",
        location="Berlin",
    )


@pytest.fixture
def variant():
    return CompanyJobVariant(
        id="var-techstart-frontend",
        job_template_id="tpl-frontend",
        company_profile_id="co-techstart",
        modified_requirements=[
            RequirementItem(id="req-react-ts", type="skill", category="must", description="React", weight=10),
        ],
        additional_requirements=[
            RequirementItem(id="req-tw", type="skill", category="nice", description="TailwindCSS", weight=5),
        ],
    )


@pytest.fixture
def resume():
    return ParsedResumeData(
        candidate_id="cand-1",
        skills=[Skill(name="JavaScript", proficiency=9), Skill(name="React", proficiency=6)],
        total_experience=4,
    )
