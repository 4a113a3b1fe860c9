"""Canonicalize and deduplicate skill names.

Skills collide when their trimmed names are equal ignoring case. The entry
with the higher proficiency wins (ties keep the first seen) and donates its
casing; years of experience merge to the larger value.
"""

import logging
import re

from models.schemas.candidate import NormalizedCandidate, NormalizedSkill, ParsedResumeData, Skill

logger = logging.getLogger(__name__)

_WHITESPACE = re.compile(r"\s+")


def normalize_key(text: str | None) -> str:
    """Case-insensitive identity of a skill name or requirement description."""
    if not text:
        return ""
    return _WHITESPACE.sub(" ", text.strip()).casefold()


def _outranks(challenger: Skill, incumbent: NormalizedSkill) -> bool:
    """True when ``challenger`` should replace ``incumbent``. Unrated skills
    never beat rated ones."""
    if challenger.proficiency is None:
        return False
    if incumbent.proficiency is None:
        return True
    return challenger.proficiency > incumbent.proficiency


def _max_optional(a: float | None, b: float | None) -> float | None:
    if a is None:
        return b
    if b is None:
        return a
    return max(a, b)


def normalize(skills: list[Skill]) -> list[NormalizedSkill]:
    """Deduplicate ``skills`` case-insensitively, preserving first-seen order."""
    merged: dict[str, NormalizedSkill] = {}

    for skill in skills:
        if skill is None or not skill.name or not skill.name.strip():
            continue
        name = _WHITESPACE.sub(" ", skill.name.strip())
        key = normalize_key(name)

        current = merged.get(key)
        if current is None:
            merged[key] = NormalizedSkill(
                name=name,
                key=key,
                category=skill.category,
                proficiency=skill.proficiency,
                years_of_experience=skill.years_of_experience,
            )
            continue

        years = _max_optional(current.years_of_experience, skill.years_of_experience)
        if _outranks(skill, current):
            merged[key] = NormalizedSkill(
                name=name,
                key=key,
                category=skill.category or current.category,
                proficiency=skill.proficiency,
                years_of_experience=years,
            )
        else:
            merged[key] = current.model_copy(update={
                "years_of_experience": years,
                "category": current.category or skill.category,
            })

    if len(merged) < len(skills):
        logger.debug("Normalized %d raw skills into %d", len(skills), len(merged))
    return list(merged.values())


def normalize_candidate(parsed: ParsedResumeData) -> NormalizedCandidate:
    """Turn parser output into the scoring engine's input."""
    return NormalizedCandidate(
        candidate_id=parsed.candidate_id,
        skills=normalize(parsed.skills),
        experience=list(parsed.experience),
        education=list(parsed.education),
        certifications=list(parsed.certifications),
        total_experience=parsed.total_experience,
    )
