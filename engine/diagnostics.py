# 📦 engine/diagnostics.py
# ─────────────────────────────
# Zero-result diagnostics: which single hard filter empties the candidate pool?

from typing import List, Optional

import structlog

from engine.config import MatchingConfig, default_matching_config
from engine.filters import HARD_FILTERS, apply_hard_filters, is_filter_active
from schemas.schemas import (
    Candidate,
    HardFilter,
    MatchedCriterion,
    PreferenceInput,
    ZeroResultsAnalysis,
)

log = structlog.get_logger()

# Language and insurance are the constraints that block most often in practice
DIAGNOSTIC_ORDER = [
    HardFilter.LANGUAGE,
    HardFilter.INSURANCE,
    HardFilter.FORMAT,
    HardFilter.DISTANCE,
    HardFilter.SPECIALTY,
]

FILTER_LABELS = {
    HardFilter.LANGUAGE: "Sprache",
    HardFilter.INSURANCE: "Versicherung",
    HardFilter.FORMAT: "Therapieformat",
    HardFilter.DISTANCE: "Entfernung",
    HardFilter.SPECIALTY: "Themenbereich",
}

FORMAT_LABELS = {"ONLINE": "Online", "IN_PERSON": "Präsenz", "BOTH": "Online & Präsenz"}
INSURANCE_LABELS = {"PUBLIC": "Krankenkasse", "PRIVATE": "Privatversicherung", "SELF_PAY": "Selbstzahler", "ANY": "egal"}


def requested_value(hard_filter: HardFilter, prefs: PreferenceInput) -> str:
    """The client's value for a filter, as shown to the client."""
    if hard_filter == HardFilter.LANGUAGE:
        return ", ".join(prefs.languages)
    if hard_filter == HardFilter.INSURANCE:
        return INSURANCE_LABELS[prefs.insurance_type.value]
    if hard_filter == HardFilter.FORMAT:
        return FORMAT_LABELS[prefs.format.value]
    if hard_filter == HardFilter.DISTANCE:
        return f"{prefs.max_distance_km:g} km"
    return ", ".join(prefs.problem_areas)


def count_passing(
    hard_filter: HardFilter,
    candidates: List[Candidate],
    prefs: PreferenceInput,
    config: MatchingConfig,
) -> int:
    """Survivors of a single filter applied on its own."""
    rule = HARD_FILTERS[hard_filter]
    return sum(1 for cand in candidates if rule(cand, prefs, config))


def _therapists(count: int) -> str:
    return "1 Therapeut:in" if count == 1 else f"{count} Therapeut:innen"


def build_suggestion(
    failed_filter: Optional[HardFilter],
    failed_value: Optional[str],
    candidates_without_filter: int,
    total_candidates: int,
) -> str:
    if total_candidates == 0:
        return "Aktuell sind keine Therapeut:innen verfügbar."
    if failed_filter is None:
        return (
            "Keine Therapeut:in erfüllt alle Kriterien gleichzeitig. "
            "Lockern Sie eines Ihrer Kriterien, um mehr Ergebnisse zu erhalten."
        )
    label = FILTER_LABELS[failed_filter]
    if candidates_without_filter > 0:
        return (
            f"Für {label} \"{failed_value}\" gibt es keine Treffer, aber "
            f"{_therapists(candidates_without_filter)} passen zu Ihren übrigen Kriterien."
        )
    return f"Für {label} \"{failed_value}\" gibt es keine Treffer."


def analyze_zero_results(
    candidates: List[Candidate],
    prefs: PreferenceInput,
    config: Optional[MatchingConfig] = None,
) -> ZeroResultsAnalysis:
    """Test each active hard filter in isolation, in DIAGNOSTIC_ORDER.

    The first filter that alone leaves no survivor is reported together with the
    number of candidates left when every other active filter still applies.
    Filters tested before it that do find candidates are returned as matched
    criteria.
    """
    config = config or default_matching_config()
    total = len(candidates)
    matched: List[MatchedCriterion] = []

    if total == 0:
        return ZeroResultsAnalysis(total_candidates=0, suggestion=build_suggestion(None, None, 0, 0))

    for hard_filter in DIAGNOSTIC_ORDER:
        if not is_filter_active(hard_filter, prefs):
            continue
        value = requested_value(hard_filter, prefs)
        survivors = count_passing(hard_filter, candidates, prefs, config)
        if survivors > 0:
            matched.append(MatchedCriterion(filter=hard_filter, value=value, count=survivors))
            continue

        without = apply_hard_filters(candidates, prefs, config, skip={hard_filter})
        log.info(
            "Zero results diagnosed",
            failed_filter=hard_filter.value,
            failed_value=value,
            candidates_without_filter=len(without.passed),
        )
        return ZeroResultsAnalysis(
            failed_filter=hard_filter,
            failed_value=value,
            total_candidates=total,
            candidates_without_filter=len(without.passed),
            matched_criteria=matched,
            suggestion=build_suggestion(hard_filter, value, len(without.passed), total),
        )

    log.info("Zero results caused by filter combination", matched_criteria=[m.filter.value for m in matched])
    return ZeroResultsAnalysis(
        total_candidates=total,
        matched_criteria=matched,
        suggestion=build_suggestion(None, None, 0, total),
    )
