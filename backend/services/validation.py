"""Explicit entity validation run before resolution and scoring.

Field-level constraints live on the pydantic schemas; the checks here cover
what a single field cannot see: cross references between entities, duplicate
requirement keys and spec-level invariants. Every function returns its input
unchanged on success and raises ``ValidationError`` otherwise.
"""

import logging
from typing import Any, TypeVar

import pydantic

from models.schemas.job import CompanyJobVariant, CompanyProfile, JobFamily, JobTemplate, ResolvedJobSpec
from models.schemas.requirement import RequirementCategory, RequirementItem
from services.errors import NotFoundError, ValidationError
from services.skill_normalizer import normalize_key

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=pydantic.BaseModel)


def parse_entity(model_cls: type[ModelT], data: Any) -> ModelT:
    """Build ``model_cls`` from raw data, surfacing failures as ``ValidationError``."""
    if data is None:
        raise NotFoundError(f"{model_cls.__name__} not provided")
    try:
        return model_cls.model_validate(data)
    except pydantic.ValidationError as e:
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err['loc']) or model_cls.__name__}: {err['msg']}"
            for err in e.errors()
        )
        raise ValidationError(f"Invalid {model_cls.__name__}: {problems}") from e


def require(entity: ModelT | None, kind: str, entity_id: str | None = None) -> ModelT:
    """Treat a missing collaborator record as ``NotFoundError`` instead of crashing later."""
    if entity is None:
        suffix = f" with ID {entity_id}" if entity_id else ""
        raise NotFoundError(f"{kind}{suffix} not found")
    return entity


def validate_requirement(requirement: RequirementItem) -> RequirementItem:
    # Re-checked here because model_construct() bypasses field validators
    if not requirement.description or not requirement.description.strip():
        raise ValidationError("Requirement description must not be empty")
    if not 1 <= requirement.weight <= 10:
        raise ValidationError(
            f"Requirement '{requirement.description}' weight must be between 1 and 10, "
            f"got {requirement.weight}"
        )
    return requirement


def validate_requirements(requirements: list[RequirementItem], source: str) -> list[RequirementItem]:
    for requirement in requirements:
        validate_requirement(requirement)

    seen: set[str] = set()
    for requirement in requirements:
        key = normalize_key(requirement.description)
        if key in seen:
            logger.debug("Duplicate requirement '%s' in %s", requirement.description, source)
        seen.add(key)
    return requirements


def validate_job_family(family: JobFamily) -> JobFamily:
    if not family.name.strip():
        raise ValidationError(f"JobFamily {family.id} must have a name")
    validate_requirements(family.base_requirements, f"job family {family.id}")
    return family


def validate_job_template(template: JobTemplate, family: JobFamily | None = None) -> JobTemplate:
    if not template.name.strip():
        raise ValidationError(f"JobTemplate {template.id} must have a name")
    if family is not None and template.job_family_id != family.id:
        raise ValidationError(
            f"JobTemplate {template.id} belongs to family {template.job_family_id}, not {family.id}"
        )
    validate_requirements(template.own_requirements, f"job template {template.id}")
    return template


def validate_company_profile(company: CompanyProfile) -> CompanyProfile:
    if not company.name.strip():
        raise ValidationError(f"CompanyProfile {company.id} must have a name")
    return company


def validate_company_job_variant(
    variant: CompanyJobVariant,
    template: JobTemplate | None = None,
    company: CompanyProfile | None = None,
) -> CompanyJobVariant:
    if template is not None and variant.job_template_id != template.id:
        raise ValidationError(
            f"CompanyJobVariant {variant.id} is based on template {variant.job_template_id}, "
            f"not {template.id}"
        )
    if company is not None and variant.company_profile_id != company.id:
        raise ValidationError(
            f"CompanyJobVariant {variant.id} belongs to company {variant.company_profile_id}, "
            f"not {company.id}"
        )
    if variant.custom_title is not None and not variant.custom_title.strip():
        raise ValidationError(f"CompanyJobVariant {variant.id} custom title must not be blank")
    validate_requirements(variant.modified_requirements, f"variant {variant.id} modifications")
    validate_requirements(variant.additional_requirements, f"variant {variant.id} additions")
    return variant


def validate_resolved_spec(spec: ResolvedJobSpec) -> ResolvedJobSpec:
    keys = [normalize_key(req.description) for req in spec.requirements]
    if len(keys) != len(set(keys)):
        raise ValidationError(f"Resolved spec '{spec.title}' contains duplicate requirements")
    validate_requirements(spec.requirements, f"spec '{spec.title}'")

    must = spec.requirements_in(RequirementCategory.MUST)
    if must and sum(req.weight for req in must) <= 0:
        raise ValidationError(f"Resolved spec '{spec.title}' has must-haves with no weight")
    return spec


def validate_fit_score(fit_score: float) -> float:
    if not 0 <= fit_score <= 100:
        raise ValidationError("Fit score must be between 0 and 100")
    return fit_score
