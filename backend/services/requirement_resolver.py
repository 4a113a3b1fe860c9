"""Merge family, template and company variant requirements into one spec.

Precedence, highest first:
    company-modified > company-additional (new keys only) > template > family

Requirements are keyed on their normalized description. Resolution is pure:
inputs are never mutated and identical inputs give identical specs.
"""

import logging

from models.schemas.job import (
    CompanyJobVariant,
    CompanyProfile,
    JobFamily,
    JobTemplate,
    ResolvedJobSpec,
)
from models.schemas.requirement import RequirementItem
from services.skill_normalizer import normalize_key
from services.validation import (
    require,
    validate_company_job_variant,
    validate_company_profile,
    validate_job_family,
    validate_job_template,
    validate_resolved_spec,
)

logger = logging.getLogger(__name__)


class _RequirementSet:
    """Ordered requirements keyed on normalized description."""

    def __init__(self) -> None:
        self._items: dict[str, RequirementItem] = {}

    def __contains__(self, requirement: RequirementItem) -> bool:
        return normalize_key(requirement.description) in self._items

    def add(self, requirement: RequirementItem) -> bool:
        """Append unless the key already exists. Returns whether it was added."""
        if requirement in self:
            return False
        self._items[normalize_key(requirement.description)] = requirement
        return True

    def put(self, requirement: RequirementItem) -> bool:
        """Replace in place, or append when new. Returns whether it replaced."""
        replaced = requirement in self
        self._items[normalize_key(requirement.description)] = requirement
        return replaced

    def to_list(self) -> list[RequirementItem]:
        return list(self._items.values())


def merge_requirements(
    family_requirements: list[RequirementItem],
    template_requirements: list[RequirementItem],
    modified_requirements: list[RequirementItem],
    additional_requirements: list[RequirementItem],
) -> list[RequirementItem]:
    """Apply the four requirement layers in precedence order."""
    working = _RequirementSet()

    for req in family_requirements:
        working.add(req)

    for req in template_requirements:
        working.put(req)

    for req in modified_requirements:
        if not working.put(req):
            logger.debug("Modified requirement '%s' had no base, appended", req.description)

    for req in additional_requirements:
        if not working.add(req):
            logger.debug("Dropped duplicate additional requirement '%s'", req.description)

    return working.to_list()


def default_description(title: str, family: JobFamily, template: JobTemplate, company: CompanyProfile) -> str:
    return f"{title} ({template.level.value} level, {family.name} family) position at {company.name}"


def resolve(
    family: JobFamily | None,
    template: JobTemplate | None,
    variant: CompanyJobVariant | None,
    company: CompanyProfile | None,
) -> ResolvedJobSpec:
    """Resolve a company job variant into a concrete ``ResolvedJobSpec``.

    The caller assembles the whole object graph; a missing piece raises
    ``NotFoundError`` and a graph whose references disagree raises
    ``ValidationError``.
    """
    family = require(family, "JobFamily")
    template = require(template, "JobTemplate")
    variant = require(variant, "CompanyJobVariant")
    company = require(company, "CompanyProfile")

    validate_job_family(family)
    validate_job_template(template, family)
    validate_company_profile(company)
    validate_company_job_variant(variant, template, company)

    requirements = merge_requirements(
        family.base_requirements,
        template.own_requirements,
        variant.modified_requirements,
        variant.additional_requirements,
    )

    title = variant.custom_title.strip() if variant.custom_title else template.name
    if variant.custom_description and variant.custom_description.strip():
        description = variant.custom_description
    else:
        description = default_description(title, family, template, company)

    spec = ResolvedJobSpec(
        title=title,
        description=description,
        requirements=requirements,
        company=company.model_copy(deep=True),
        salary_range=template.salary_range.model_copy() if template.salary_range else None,
        benefits=list(company.benefits),
        work_arrangement=company.work_arrangement,
        location=company.location,
    )
    validate_resolved_spec(spec)

    logger.debug(
        "Resolved variant %s into '%s' with %d requirements",
        variant.id, spec.title, len(spec.requirements),
    )
    return spec
