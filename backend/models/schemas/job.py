"""Job families, templates, company variants and the resolved job spec."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field, model_validator

from models.schemas.requirement import RequirementCategory, RequirementItem


class JobLevel(str, Enum):
    JUNIOR = "junior"
    MID = "mid"
    SENIOR = "senior"
    LEAD = "lead"
    PRINCIPAL = "principal"


class CompanySize(str, Enum):
    STARTUP = "startup"
    SMALL = "small"
    MEDIUM = "medium"
    LARGE = "large"
    ENTERPRISE = "enterprise"


class WorkArrangement(str, Enum):
    REMOTE = "remote"
    HYBRID = "hybrid"
    ONSITE = "onsite"


class ExperienceRange(BaseModel):
    min: float = Field(0, ge=0)  # years
    max: float = Field(0, ge=0)

    @model_validator(mode="after")
    def _ordered(self) -> "ExperienceRange":
        if self.min > self.max:
            raise ValueError("experience range min must not exceed max")
        return self


class SalaryRange(BaseModel):
    min: float = Field(..., ge=0)
    max: float = Field(..., ge=0)
    currency: str = "USD"

    @model_validator(mode="after")
    def _ordered(self) -> "SalaryRange":
        if self.min > self.max:
            raise ValueError("salary range min must not exceed max")
        return self


class JobFamily(BaseModel):
    """Broad occupational category owning the default requirements."""
    id: str
    name: str
    description: str = ""
    skill_categories: list[str] = []  # ordered
    base_requirements: list[RequirementItem] = []


class JobTemplate(BaseModel):
    """A leveled job definition scoped to exactly one family."""
    id: str
    job_family_id: str
    name: str
    level: JobLevel = JobLevel.MID
    experience_range: ExperienceRange = ExperienceRange()
    salary_range: SalaryRange | None = None
    own_requirements: list[RequirementItem] = []


class CompanyPreferences(BaseModel):
    priority_skills: list[str] = []
    deal_breakers: list[str] = []
    nice_to_have: list[str] = []


class CompanyProfile(BaseModel):
    id: str
    name: str
    industry: str = ""
    size: CompanySize = CompanySize.MEDIUM
    culture: list[str] = []
    benefits: list[str] = []
    work_arrangement: WorkArrangement = WorkArrangement.ONSITE
    location: str = ""
    preferences: CompanyPreferences = CompanyPreferences()


class CompanyJobVariant(BaseModel):
    """A company's concrete customization of a job template.

    ``modified_requirements`` override template/family requirements that
    share the same (case-insensitive) description; ``additional_requirements``
    only add descriptions that do not exist yet.
    """
    id: str
    job_template_id: str
    company_profile_id: str
    custom_title: str | None = None
    custom_description: str | None = None
    additional_requirements: list[RequirementItem] = []
    modified_requirements: list[RequirementItem] = []
    is_active: bool = False
    published_at: datetime | None = None


class ResolvedJobSpec(BaseModel):
    """Fully merged, publish-ready job description. Derived, never stored alone."""
    title: str
    description: str
    requirements: list[RequirementItem] = []
    company: CompanyProfile
    salary_range: SalaryRange | None = None
    benefits: list[str] = []
    work_arrangement: WorkArrangement = WorkArrangement.ONSITE
    location: str = ""

    def requirements_in(self, category: RequirementCategory) -> list[RequirementItem]:
        return [req for req in self.requirements if req.category == category]
