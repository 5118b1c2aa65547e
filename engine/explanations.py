# 📦 engine/explanations.py
# ─────────────────────────────
# Human-readable reasons for a match, derived from the score breakdown.

from typing import List, NamedTuple, Optional

from engine.config import MatchingConfig, default_matching_config
from engine.filters import accepts_insurance, matched_languages, specialty_matches_area
from engine.terms import normalize_terms
from schemas.schemas import (
    Candidate,
    ExplanationType,
    InsuranceType,
    MatchExplanation,
    PreferenceInput,
    ScoreBreakdown,
    SessionFormat,
)

MAX_PRIMARY = 3
MAX_SECONDARY = 4

PRIMARY = ExplanationType.PRIMARY
SECONDARY = ExplanationType.SECONDARY
WARNING = ExplanationType.WARNING


class ExplanationItem(NamedTuple):
    text: str
    priority: int  # higher = more important
    type: ExplanationType


def _fmt_number(value: float) -> str:
    return f"{value:g}".replace(".", ",")


def matched_specialties(cand: Candidate, prefs: PreferenceInput, config: MatchingConfig) -> List[str]:
    """Therapist specialties covering any requested problem area, deduplicated, in profile order."""
    matched = []
    for spec in cand.specialties:
        normalized = normalize_terms([spec])
        if not normalized or spec in matched:
            continue
        if any(specialty_matches_area(normalized, area, config) for area in prefs.problem_areas):
            matched.append(spec)
    return matched


def _specialty_items(cand, prefs, breakdown, config):
    score = breakdown.components.specialty.score
    if not prefs.problem_areas:
        return []
    if score >= 0.8:
        matched = matched_specialties(cand, prefs, config)
        if matched:
            return [ExplanationItem(f"Spezialisiert auf {' und '.join(matched[:2])}", 10, PRIMARY)]
        return []
    if score >= 0.5:
        return [ExplanationItem("Erfahrung in verwandten Bereichen", 5, SECONDARY)]
    if score < 0.3:
        return [ExplanationItem("Spezialisierung passt möglicherweise nicht optimal", 3, WARNING)]
    return []


def _distance_items(cand, prefs, breakdown):
    items = []
    km = breakdown.components.distance.distance_km
    if km is not None:
        label = _fmt_number(km)
        if km <= 5:
            items.append(ExplanationItem(f"Nur {label} km entfernt", 9, PRIMARY))
        elif km <= 15:
            items.append(ExplanationItem(f"{label} km entfernt", 6, SECONDARY))
        elif km <= 30:
            items.append(ExplanationItem(f"{label} km Entfernung", 4, SECONDARY))
        else:
            items.append(ExplanationItem(f"{label} km entfernt - größere Anfahrt", 2, WARNING))
    elif cand.online and prefs.format != SessionFormat.IN_PERSON:
        items.append(ExplanationItem("Bietet Online-Therapie an", 8, PRIMARY))

    if cand.online and prefs.format == SessionFormat.ONLINE:
        items.append(ExplanationItem("Online-Therapie verfügbar", 7, PRIMARY))
    elif cand.online and prefs.format == SessionFormat.BOTH:
        items.append(ExplanationItem("Online & Präsenz möglich", 5, SECONDARY))
    return items


def _availability_items(breakdown):
    weeks = breakdown.components.availability.wait_weeks
    if weeks is None:
        return []
    label = _fmt_number(weeks)
    if weeks == 0:
        return [ExplanationItem("Sofort Termine verfügbar", 9, PRIMARY)]
    if weeks <= 2:
        return [ExplanationItem(f"Termine innerhalb von {label} Wochen", 7, PRIMARY)]
    if weeks <= 4:
        return [ExplanationItem(f"Ca. {label} Wochen Wartezeit", 4, SECONDARY)]
    return [ExplanationItem(f"Wartezeit ca. {label} Wochen", 2, WARNING)]


def _profile_items(cand, prefs, breakdown, config):
    items = []

    methods = breakdown.components.methods.matched_methods
    if methods:
        items.append(ExplanationItem(f"Arbeitet mit {', '.join(methods[:2])}", 6, SECONDARY))

    if breakdown.components.language.score >= 0.8 and prefs.languages:
        languages = matched_languages(cand, prefs)
        if languages:
            items.append(ExplanationItem(f"Spricht {' und '.join(languages)}", 5, SECONDARY))

    rating = cand.rating or 0
    if rating >= 4.5 and cand.review_count >= 5:
        items.append(ExplanationItem(f"Sehr gut bewertet ({rating:.1f} ⭐)", 6, SECONDARY))
    elif rating >= 4.0:
        items.append(ExplanationItem(f"Gut bewertet ({rating:.1f} ⭐)", 4, SECONDARY))

    years = cand.years_experience or 0
    if years >= 10:
        items.append(ExplanationItem(f"{years} Jahre Erfahrung", 5, SECONDARY))
    elif years >= 5:
        items.append(ExplanationItem(f"{years} Jahre Berufserfahrung", 3, SECONDARY))

    if prefs.price_max and cand.price_min:
        if cand.price_min <= prefs.price_max:
            items.append(ExplanationItem("Preislich im Budget", 4, SECONDARY))
        else:
            items.append(ExplanationItem("Möglicherweise über Budget", 2, WARNING))

    if prefs.insurance_type != InsuranceType.ANY and accepts_insurance(cand, prefs.insurance_type, config):
        items.append(ExplanationItem("Akzeptiert Ihre Versicherung", 5, SECONDARY))
    return items


def collect_explanation_items(
    cand: Candidate,
    prefs: PreferenceInput,
    breakdown: ScoreBreakdown,
    config: MatchingConfig,
) -> List[ExplanationItem]:
    """All candidate reasons, unsorted."""
    return (
        _specialty_items(cand, prefs, breakdown, config)
        + _distance_items(cand, prefs, breakdown)
        + _availability_items(breakdown)
        + _profile_items(cand, prefs, breakdown, config)
    )


def generate_match_explanation(
    cand: Candidate,
    prefs: PreferenceInput,
    breakdown: ScoreBreakdown,
    config: Optional[MatchingConfig] = None,
) -> MatchExplanation:
    """Turn a score breakdown into at most 3 primary and 4 secondary reasons plus warnings.

    Items are ordered by priority (stable on ties) and deduplicated by text.
    When nothing qualifies as primary, the best secondary reason is promoted so
    a match is never shown without a justification.
    """
    config = config or default_matching_config()
    items = sorted(collect_explanation_items(cand, prefs, breakdown, config), key=lambda i: i.priority, reverse=True)

    seen = set()
    unique = []
    for item in items:
        if item.text not in seen:
            seen.add(item.text)
            unique.append(item)

    primary = [i.text for i in unique if i.type == PRIMARY][:MAX_PRIMARY]
    secondary = [i.text for i in unique if i.type == SECONDARY][:MAX_SECONDARY]
    warnings = [i.text for i in unique if i.type == WARNING]

    if not primary and secondary:
        primary.append(secondary.pop(0))

    return MatchExplanation(primary=primary, secondary=secondary, warnings=warnings)


def generate_short_explanation(explanation: MatchExplanation) -> str:
    """One-liner for list views."""
    if explanation.primary:
        return explanation.primary[0]
    if explanation.secondary:
        return explanation.secondary[0]
    return "Passende:r Therapeut:in"
