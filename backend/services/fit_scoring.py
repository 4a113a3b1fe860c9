"""Fit Scoring Engine: explainable candidate-to-job match scores.

Flow:
    NormalizedCandidate + ResolvedJobSpec
      ├─ match_requirement() per requirement   → RequirementMatch (degree 0-1)
      ├─ category scores (must/should/nice)    → 0-100, empty category = 100
      ├─ weighted overall + must-have gate     → 0-100
      └─ strengths / gaps / recommendations    → MatchExplanation

Skills are graded by proficiency; experience, education, certification and
other requirements match in a boolean fashion, except experience
requirements that embed a years threshold ("5+ years of Python"). Missing
candidate data is always "no match", never an error. All constants come
from ``ScoringConfig``.
"""

import logging
import re
from dataclasses import dataclass, field

from config import ScoringConfig, settings
from models.schemas.candidate import NormalizedCandidate, NormalizedSkill
from models.schemas.job import ResolvedJobSpec
from models.schemas.match_explanation import MatchExplanation, MatchType, RequirementMatch
from models.schemas.requirement import RequirementCategory, RequirementItem, RequirementType
from services.skill_normalizer import normalize_key

logger = logging.getLogger(__name__)

_YEARS_PATTERN = re.compile(r"(\d+(?:\.\d+)?)\s*\+?\s*(?:years?|yrs?)\b\+?", re.IGNORECASE)

# Words that carry no subject once the years phrase is stripped
_EXPERIENCE_FILLER = frozenset({
    "a", "an", "the", "of", "in", "with", "and", "or", "at", "least", "minimum",
    "min", "more", "plus", "over", "experience", "experienced", "professional",
    "working", "work", "hands-on", "industry", "relevant", "proven", "+",
})

_TIER_LABELS = {
    RequirementCategory.MUST: "Must-have",
    RequirementCategory.SHOULD: "Should-have",
    RequirementCategory.NICE: "Nice-to-have",
}

_RECOMMENDATION_TEMPLATES = {
    RequirementType.SKILL: "Consider highlighting experience with {description}",
    RequirementType.EXPERIENCE: "Quantify experience relevant to {description}",
    RequirementType.EDUCATION: "Clarify education credentials related to {description}",
    RequirementType.CERTIFICATION: "Consider obtaining or listing the {description} certification",
    RequirementType.OTHER: "Address {description} explicitly in the application",
}


# ---------------------------------------------------------------------------
# Phrase matching
# ---------------------------------------------------------------------------

def _contains_phrase(haystack: str, needle: str) -> bool:
    """Whole-word containment that keeps "java" out of "javascript" and "c" out of "c++"."""
    if not haystack or not needle:
        return False
    return re.search(rf"(?<![\w+#]){re.escape(needle)}(?![\w+#])", haystack) is not None


def _phrase_match(name: str, entry: str, reverse: bool = True) -> MatchType:
    """Compare two normalized phrases. ``reverse`` also lets ``entry`` sit inside ``name``."""
    if not name or not entry:
        return MatchType.NONE
    if name == entry:
        return MatchType.EXACT
    if _contains_phrase(entry, name):
        return MatchType.SUBSTRING
    if reverse and len(entry) > 1 and _contains_phrase(name, entry):
        return MatchType.SUBSTRING
    return MatchType.NONE


@dataclass
class _Entry:
    """One searchable piece of the candidate profile."""
    text: str  # normalized
    evidence: str
    reverse: bool = True  # False for free-text descriptions


@dataclass
class _Hit:
    degree: float = 0.0
    match_type: MatchType = MatchType.NONE
    evidence: list[str] = field(default_factory=list)

    def offer(self, degree: float, match_type: MatchType, evidence: str) -> None:
        if evidence not in self.evidence:
            self.evidence.append(evidence)
        if degree > self.degree:
            self.degree = degree
            self.match_type = match_type


class _CandidateIndex:
    """Normalized lookup tables over a candidate profile."""

    def __init__(self, candidate: NormalizedCandidate) -> None:
        self.total_experience = candidate.total_experience or 0.0
        self.skills: dict[str, NormalizedSkill] = {s.key: s for s in candidate.skills}

        self.technologies: list[_Entry] = []
        self.experience: list[_Entry] = []
        for exp in candidate.experience:
            where = f"{exp.position or 'Role'} at {exp.company}" if exp.company else (exp.position or "Role")
            for tech in exp.technologies:
                self.technologies.append(_Entry(normalize_key(tech), f"Experience: {tech} ({where})"))
            if exp.position:
                self.experience.append(_Entry(normalize_key(exp.position), f"Experience: {where}"))
            if exp.description:
                self.experience.append(_Entry(normalize_key(exp.description), f"Experience: {where}", reverse=False))

        self.education: list[_Entry] = []
        for edu in candidate.education:
            label = f"{edu.degree} in {edu.field_of_study}" if edu.field_of_study else edu.degree
            evidence = f"Education: {label}".strip()
            for text in (edu.degree, edu.field_of_study, label):
                if text:
                    self.education.append(_Entry(normalize_key(text), evidence))

        self.certifications = [
            _Entry(normalize_key(cert.name), f"Certification: {cert.name}")
            for cert in candidate.certifications
            if cert.name
        ]

    def skill_entries(self) -> list[tuple[_Entry, NormalizedSkill]]:
        return [(_Entry(key, _skill_evidence(skill)), skill) for key, skill in self.skills.items()]

    def text_entries(self) -> list[_Entry]:
        skills = [entry for entry, _ in self.skill_entries()]
        return skills + self.technologies + self.experience + self.education + self.certifications


def _skill_evidence(skill: NormalizedSkill) -> str:
    details = []
    if skill.proficiency is not None:
        details.append(f"proficiency {skill.proficiency:g}")
    if skill.years_of_experience is not None:
        details.append(f"{skill.years_of_experience:g} years")
    return f"Skill: {skill.name} ({', '.join(details)})" if details else f"Skill: {skill.name}"


# ---------------------------------------------------------------------------
# Per-requirement matching
# ---------------------------------------------------------------------------

def proficiency_degree(proficiency: float | None, config: ScoringConfig) -> float:
    """Degree of an exact skill match given the candidate's proficiency (0-10)."""
    if proficiency is None:
        return config.unrated_skill_degree
    if proficiency >= config.strong_proficiency:
        return 1.0
    span = config.weak_match_ceiling - config.weak_match_floor
    return config.weak_match_floor + span * max(proficiency, 0.0) / config.strong_proficiency


def _name_factor(name: str, text: str, config: ScoringConfig) -> float:
    """Discount for a non-exact skill name hit. A candidate entry that only
    covers part of the requirement ("React" for "React Native") earns less
    than one that contains it."""
    if not name or not text:
        return 0.0
    if name == text or _contains_phrase(text, name):
        return config.substring_match_factor
    if len(text) > 1 and _contains_phrase(name, text):
        return config.partial_name_match_factor
    return 0.0


def _match_skill(names: list[str], index: _CandidateIndex, config: ScoringConfig) -> _Hit:
    exact = _Hit()
    for name in names:
        skill = index.skills.get(name)
        if skill is not None:
            exact.offer(proficiency_degree(skill.proficiency, config), MatchType.EXACT, _skill_evidence(skill))
    if exact.match_type == MatchType.EXACT:
        return exact

    fallback = _Hit()
    for name in names:
        for entry, skill in index.skill_entries():
            factor = _name_factor(name, entry.text, config)
            if factor > 0:
                fallback.offer(proficiency_degree(skill.proficiency, config) * factor, MatchType.SUBSTRING, entry.evidence)
        for entry in index.technologies:
            factor = _name_factor(name, entry.text, config)
            if factor > 0:
                fallback.offer(config.unrated_skill_degree * factor, MatchType.SUBSTRING, entry.evidence)
    return fallback


def _match_entries(names: list[str], entries: list[_Entry]) -> _Hit:
    """Boolean match: any exact or substring hit scores 1.0."""
    hit = _Hit()
    for name in names:
        for entry in entries:
            match_type = _phrase_match(name, entry.text, reverse=entry.reverse)
            if match_type == MatchType.NONE:
                continue
            # exact outranks substring when both are found
            degree = 1.0 if match_type == MatchType.EXACT else 0.999
            hit.offer(degree, match_type, entry.evidence)
    if hit.degree > 0:
        hit.degree = 1.0
    return hit


def _split_years(text: str) -> tuple[float | None, str]:
    """Pull "N+ years" out of an experience description, returning (N, subject)."""
    found = _YEARS_PATTERN.search(text)
    if found is None:
        return None, text
    remainder = (text[:found.start()] + " " + text[found.end():]).replace("+", " ")
    words = [w for w in re.split(r"\s+", remainder) if w and w not in _EXPERIENCE_FILLER]
    return float(found.group(1)), " ".join(words)


def _match_experience(requirement: RequirementItem, index: _CandidateIndex, config: ScoringConfig) -> _Hit:
    required_years, subject = _split_years(normalize_key(requirement.description))
    alternatives = [normalize_key(alt) for alt in requirement.alternatives]

    if required_years is None:
        return _match_entries([normalize_key(requirement.description), *alternatives], index.text_entries())

    hit = _Hit()
    years = index.total_experience
    if subject:
        subject_hit = _match_entries([subject, *alternatives], index.text_entries())
        if subject_hit.degree == 0:
            return subject_hit
        hit.evidence.extend(subject_hit.evidence)
        # Skill-level years beat the overall total when the parser recorded them
        skill = index.skills.get(subject) or next(
            (index.skills[a] for a in alternatives if a in index.skills), None
        )
        if skill is not None and skill.years_of_experience is not None:
            years = skill.years_of_experience

    if years >= required_years:
        hit.offer(1.0, MatchType.THRESHOLD, f"Experience: {years:g} years (requires {required_years:g})")
    return hit


def match_requirement(
    requirement: RequirementItem,
    candidate: NormalizedCandidate | _CandidateIndex,
    config: ScoringConfig | None = None,
) -> RequirementMatch:
    """Score a single requirement against the candidate profile."""
    config = config or settings.scoring
    index = candidate if isinstance(candidate, _CandidateIndex) else _CandidateIndex(candidate)
    names = [normalize_key(name) for name in requirement.names]

    if requirement.type == RequirementType.SKILL:
        hit = _match_skill(names, index, config)
    elif requirement.type == RequirementType.EXPERIENCE:
        hit = _match_experience(requirement, index, config)
    elif requirement.type == RequirementType.EDUCATION:
        hit = _match_entries(names, index.education)
    elif requirement.type == RequirementType.CERTIFICATION:
        hit = _match_entries(names, index.certifications)
    else:
        hit = _match_entries(names, index.text_entries())

    degree = round(min(max(hit.degree, 0.0), 1.0), 4)
    matched = degree >= config.matched_threshold
    evidence = hit.evidence[:config.max_evidence] if degree > 0 else []
    return RequirementMatch(
        requirement=requirement,
        match_degree=degree,
        matched=matched,
        match_type=hit.match_type if degree > 0 else MatchType.NONE,
        evidence=evidence,
        explanation=_explain(requirement, matched, degree, evidence),
    )


def _explain(requirement: RequirementItem, matched: bool, degree: float, evidence: list[str]) -> str:
    confidence = round(degree * 100)
    if matched:
        text = f'Strong match ({confidence}% confidence) for "{requirement.description}".'
        return f"{text} Evidence: {', '.join(evidence)}." if evidence else text
    text = f'Partial match ({confidence}% confidence) for "{requirement.description}".'
    if evidence:
        return f"{text} Some relevant experience found: {', '.join(evidence)}."
    return f"{text} No direct evidence found in candidate profile."


# ---------------------------------------------------------------------------
# Aggregation
# ---------------------------------------------------------------------------

def category_score(matches: list[RequirementMatch], category: RequirementCategory) -> float:
    """Weighted 0-100 score of one tier. An empty tier is vacuously satisfied."""
    relevant = [m for m in matches if m.requirement.category == category]
    total_weight = sum(m.requirement.weight for m in relevant)
    if total_weight <= 0:
        return 100.0
    achieved = sum(m.requirement.weight * m.match_degree for m in relevant)
    return round(100.0 * achieved / total_weight, 2)


def _by_weight(matches: list[RequirementMatch]) -> list[RequirementMatch]:
    return sorted(matches, key=lambda m: -m.requirement.weight)


def _core(match: RequirementMatch) -> bool:
    return match.requirement.category in (RequirementCategory.MUST, RequirementCategory.SHOULD)


def _build_strengths(matches: list[RequirementMatch], config: ScoringConfig) -> list[str]:
    strong = [m for m in matches if _core(m) and m.match_degree >= config.strength_threshold]
    return [f"Strong in {m.requirement.description}" for m in _by_weight(strong)][:config.max_strengths]


def _gap_matches(matches: list[RequirementMatch], config: ScoringConfig) -> list[RequirementMatch]:
    """Must/should gaps first, then nice-to-have absences, each by weight."""
    weak = [m for m in matches if m.match_degree < config.gap_threshold]
    core = _by_weight([m for m in weak if _core(m)])
    bonus = _by_weight([m for m in weak if not _core(m)])
    return core + bonus


def _build_gaps(gaps: list[RequirementMatch], config: ScoringConfig) -> list[str]:
    return [
        f"{_TIER_LABELS[m.requirement.category]} gap: {m.requirement.description}"
        for m in gaps
    ][:config.max_gaps]


def _build_recommendations(
    matches: list[RequirementMatch],
    gaps: list[RequirementMatch],
    config: ScoringConfig,
) -> list[str]:
    recs = [
        _RECOMMENDATION_TEMPLATES[m.requirement.type].format(description=m.requirement.description)
        for m in gaps
        if _core(m)
    ][:config.max_recommendations]

    partial = [
        m for m in matches
        if _core(m) and config.gap_threshold <= m.match_degree < config.matched_threshold
    ]
    for m in _by_weight(partial):
        if len(recs) >= config.max_recommendations:
            break
        recs.append(f"Could strengthen {m.requirement.description} skills")
    return recs


def score(
    candidate: NormalizedCandidate,
    spec: ResolvedJobSpec,
    config: ScoringConfig | None = None,
) -> MatchExplanation:
    """Compare a normalized candidate against a resolved spec."""
    config = config or settings.scoring
    index = _CandidateIndex(candidate)
    analysis = [match_requirement(req, index, config) for req in spec.requirements]

    must = category_score(analysis, RequirementCategory.MUST)
    should = category_score(analysis, RequirementCategory.SHOULD)
    nice = category_score(analysis, RequirementCategory.NICE)
    overall = config.must_weight * must + config.should_weight * should + config.nice_weight * nice

    gated = any(
        m.requirement.category == RequirementCategory.MUST
        and m.match_degree < config.must_gate_threshold
        for m in analysis
    )
    if gated:
        overall = min(overall, config.must_gate_cap)

    gaps = _gap_matches(analysis, config)
    explanation = MatchExplanation(
        overall_score=round(min(max(overall, 0.0), 100.0), 2),
        must_have_score=must,
        should_have_score=should,
        nice_to_have_score=nice,
        gated=gated,
        strengths=_build_strengths(analysis, config),
        gaps=_build_gaps(gaps, config),
        recommendations=_build_recommendations(analysis, gaps, config),
        detailed_analysis=analysis,
    )
    logger.debug(
        "Scored candidate %s against '%s': overall=%.2f must=%.2f should=%.2f nice=%.2f gated=%s",
        candidate.candidate_id, spec.title, explanation.overall_score, must, should, nice, gated,
    )
    return explanation
