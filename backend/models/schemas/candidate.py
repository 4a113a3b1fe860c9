"""Parsed resume data handed over by the resume-parsing collaborator."""

from datetime import date

from pydantic import BaseModel, Field


class Skill(BaseModel):
    """A raw skill as produced by the parser. Blank names are tolerated here
    and dropped by the normalizer."""
    name: str | None = None
    category: str | None = None
    proficiency: float | None = Field(None, ge=0, le=10)
    years_of_experience: float | None = Field(None, ge=0)


class NormalizedSkill(BaseModel):
    """A deduplicated skill; ``key`` is the case-insensitive identity."""
    name: str
    key: str
    category: str | None = None
    proficiency: float | None = None
    years_of_experience: float | None = None


class WorkExperience(BaseModel):
    company: str = ""
    position: str = ""
    description: str = ""
    start_date: date | None = None
    end_date: date | None = None
    is_current: bool = False
    technologies: list[str] = []


class Education(BaseModel):
    institution: str = ""
    degree: str = ""  # e.g. "Bachelor of Science"
    field_of_study: str = ""
    start_date: date | None = None
    end_date: date | None = None
    gpa: str | None = None


class Certification(BaseModel):
    name: str = ""
    issuer: str = ""
    issue_date: date | None = None
    expiration_date: date | None = None
    credential_id: str | None = None


class ParsedResumeData(BaseModel):
    """Structured resume content. Every field is optional: absence means
    "no evidence", never invalid input."""
    candidate_id: str | None = None
    skills: list[Skill] = []
    experience: list[WorkExperience] = []
    education: list[Education] = []
    certifications: list[Certification] = []
    total_experience: float = Field(0.0, ge=0)  # years
    confidence: float | None = Field(None, ge=0, le=1)


class NormalizedCandidate(BaseModel):
    """Scoring input: parsed resume with skills run through the normalizer."""
    candidate_id: str | None = None
    skills: list[NormalizedSkill] = []
    experience: list[WorkExperience] = []
    education: list[Education] = []
    certifications: list[Certification] = []
    total_experience: float = 0.0
