"""Weighted job requirements shared by families, templates and variants."""

from enum import Enum

from pydantic import BaseModel, Field, field_validator

from config import settings


class RequirementType(str, Enum):
    SKILL = "skill"
    EXPERIENCE = "experience"
    EDUCATION = "education"
    CERTIFICATION = "certification"
    OTHER = "other"


class RequirementCategory(str, Enum):
    """Priority tier: must is a hard gate, should is weighted, nice is a bonus."""
    MUST = "must"
    SHOULD = "should"
    NICE = "nice"


class RequirementItem(BaseModel):
    """A single weighted requirement.

    Frozen so that a requirement resolved into a spec (or snapshotted into a
    JD version) cannot drift afterwards. ``weight`` falls back to the
    configured default when omitted at entry.
    """

    model_config = {"frozen": True}

    id: str = ""
    type: RequirementType = RequirementType.SKILL
    category: RequirementCategory
    description: str
    weight: int = Field(default_factory=lambda: settings.default_requirement_weight, ge=1, le=10)
    alternatives: list[str] = []  # set semantics, first casing wins

    @field_validator("description")
    @classmethod
    def _strip_description(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("description must not be empty")
        return value

    @field_validator("alternatives")
    @classmethod
    def _dedupe_alternatives(cls, value: list[str]) -> list[str]:
        seen: set[str] = set()
        unique: list[str] = []
        for alt in value:
            alt = alt.strip()
            key = alt.casefold()
            if not alt or key in seen:
                continue
            seen.add(key)
            unique.append(alt)
        return unique

    @property
    def names(self) -> list[str]:
        """Description followed by its alternatives, in match-preference order."""
        return [self.description, *self.alternatives]
