# 📦 engine/filters.py
# ─────────────────────────────
# Hard filters for the matching engine.
# Specialty is the only rule that can be switched off (fallback); language,
# insurance, format and distance are always enforced when the client set them.

from typing import Callable, Collection, Dict, List, NamedTuple, Optional

from engine.config import MatchingConfig
from engine.geo import distance_between
from engine.terms import matches_any, normalize_terms
from schemas.schemas import (
    Candidate,
    FilteredCandidate,
    FilterReason,
    HardFilter,
    InsuranceType,
    PreferenceInput,
    SessionFormat,
)

FILTER_REASONS: Dict[HardFilter, FilterReason] = {
    HardFilter.SPECIALTY: FilterReason.NO_SPECIALTY_MATCH,
    HardFilter.LANGUAGE: FilterReason.LANGUAGE_MISMATCH,
    HardFilter.INSURANCE: FilterReason.INSURANCE_MISMATCH,
    HardFilter.FORMAT: FilterReason.FORMAT_MISMATCH,
    HardFilter.DISTANCE: FilterReason.DISTANCE_EXCEEDED,
}


class FilterOutcome(NamedTuple):
    passed: List[Candidate]
    rejected: List[FilteredCandidate]


# ─────────────────────────────
# Single rules

def specialty_matches_area(specialties: List[str], problem_area: str, config: MatchingConfig) -> bool:
    """Candidate covers the problem area directly or via one of its mapped specialties."""
    if matches_any(problem_area, specialties):
        return True
    return any(matches_any(related, specialties) for related in config.related_specialties(problem_area))


def filter_by_specialty(cand: Candidate, prefs: PreferenceInput, config: MatchingConfig) -> bool:
    """At least 1 specialty covering one of the problem areas."""
    if not prefs.problem_areas:
        return True
    specialties = normalize_terms(cand.specialties)
    if not specialties:
        return False
    return any(specialty_matches_area(specialties, area, config) for area in prefs.problem_areas)


def matched_languages(cand: Candidate, prefs: PreferenceInput) -> List[str]:
    """Requested languages the candidate lists (exact token, case-insensitive)."""
    spoken = set(normalize_terms(cand.languages))
    return [lang for lang in prefs.languages if lang.strip().lower() in spoken]


def filter_by_language(cand: Candidate, prefs: PreferenceInput, config: MatchingConfig) -> bool:
    """At least 1 shared language."""
    if not prefs.languages:
        return True
    return bool(matched_languages(cand, prefs))


def accepts_insurance(cand: Candidate, insurance_type: InsuranceType, config: MatchingConfig) -> bool:
    if insurance_type == InsuranceType.ANY:
        return True
    if insurance_type == InsuranceType.SELF_PAY:
        return cand.private_practice
    if insurance_type == InsuranceType.PRIVATE:
        return cand.private_practice and bool(normalize_terms(cand.accepted_insurance))
    accepted = normalize_terms(cand.accepted_insurance)
    return any(kw in ins for kw in config.public_insurance_keywords for ins in accepted)


def filter_by_insurance(cand: Candidate, prefs: PreferenceInput, config: MatchingConfig) -> bool:
    """Payment model the client asked for."""
    return accepts_insurance(cand, prefs.insurance_type, config)


def filter_by_format(cand: Candidate, prefs: PreferenceInput, config: MatchingConfig) -> bool:
    """Online / in-person compatibility."""
    if prefs.format == SessionFormat.ONLINE:
        return cand.online
    if prefs.format == SessionFormat.IN_PERSON:
        # No location at all and online: online-only practice
        return cand.has_location or not cand.online
    return True


def distance_filter_active(prefs: PreferenceInput) -> bool:
    return (
        prefs.format != SessionFormat.ONLINE
        and prefs.max_distance_km is not None
        and prefs.has_coordinates
    )


def filter_by_distance(cand: Candidate, prefs: PreferenceInput, config: MatchingConfig) -> bool:
    """Max travel distance."""
    if not distance_filter_active(prefs):
        return True
    distance = distance_between(prefs, cand)
    if distance is None:
        return True
    return distance <= prefs.max_distance_km


# Evaluation order of the filter stage; the first failing rule is reported
HARD_FILTERS: Dict[HardFilter, Callable[[Candidate, PreferenceInput, MatchingConfig], bool]] = {
    HardFilter.SPECIALTY: filter_by_specialty,
    HardFilter.LANGUAGE: filter_by_language,
    HardFilter.INSURANCE: filter_by_insurance,
    HardFilter.FORMAT: filter_by_format,
    HardFilter.DISTANCE: filter_by_distance,
}


def is_filter_active(hard_filter: HardFilter, prefs: PreferenceInput) -> bool:
    """Whether the client constrained this criterion at all."""
    if hard_filter == HardFilter.SPECIALTY:
        return bool(prefs.problem_areas)
    if hard_filter == HardFilter.LANGUAGE:
        return bool(prefs.languages)
    if hard_filter == HardFilter.INSURANCE:
        return prefs.insurance_type != InsuranceType.ANY
    if hard_filter == HardFilter.FORMAT:
        return prefs.format != SessionFormat.BOTH
    return distance_filter_active(prefs)


# ─────────────────────────────
# Filter stage

def check_hard_filters(
    cand: Candidate,
    prefs: PreferenceInput,
    config: MatchingConfig,
    strict_specialty: bool = True,
    skip: Collection[HardFilter] = (),
) -> Optional[FilterReason]:
    """Return the reason of the first failing rule, or None when the candidate is admitted."""
    for hard_filter, rule in HARD_FILTERS.items():
        if hard_filter in skip:
            continue
        if hard_filter == HardFilter.SPECIALTY and not strict_specialty:
            continue
        if not rule(cand, prefs, config):
            return FILTER_REASONS[hard_filter]
    return None


def apply_hard_filters(
    candidates: List[Candidate],
    prefs: PreferenceInput,
    config: MatchingConfig,
    strict_specialty: bool = True,
    skip: Collection[HardFilter] = (),
) -> FilterOutcome:
    """Split candidates into admitted and rejected, keeping input order."""
    passed, rejected = [], []
    for cand in candidates:
        reason = check_hard_filters(cand, prefs, config, strict_specialty=strict_specialty, skip=skip)
        if reason is None:
            passed.append(cand)
        else:
            rejected.append(FilteredCandidate(therapist_id=cand.id, reason=reason))
    return FilterOutcome(passed, rejected)
