# 📦 engine/scoring.py
# ─────────────────────────────
# Weighted multi-criteria score for a client-therapist pair.
# Every component is in [0, 1]; the total is Σ score × weight.

from math import exp
from typing import List, Optional, Tuple

from engine.config import MatchingConfig, default_matching_config
from engine.filters import matched_languages
from engine.geo import distance_between
from engine.terms import matches_any, normalize_terms
from schemas.schemas import (
    AvailabilityComponent,
    Candidate,
    CommunicationStyle,
    DistanceComponent,
    GenderPreference,
    MethodsComponent,
    PreferenceInput,
    ScoreBreakdown,
    ScoreComponent,
    ScoreComponents,
    SessionFormat,
)

NEUTRAL = 0.5
DISTANCE_DECAY = 0.05  # ≈0.6 at 10 km, ≈0.08 at 50 km
SPECIALTY_BREADTH_BONUS = 1.2
NO_WAIT_TOLERANCE_HORIZON_WEEKS = 12
RATING_SCALE = 5.0
REVIEW_BONUS_MAX = 0.1
REVIEW_BONUS_CAP = 100
UNRATED_SCORE = 0.6


def _clamp(value: float) -> float:
    return max(0.0, min(1.0, value))


def specialty_score(prefs: PreferenceInput, cand: Candidate, config: MatchingConfig) -> float:
    """Share of mapped specialties the therapist covers, with a breadth bonus."""
    if not prefs.problem_areas:
        return NEUTRAL
    specialties = normalize_terms(cand.specialties)
    if not specialties:
        return 0.3

    total_matches = 0
    total_possible = 0
    for area in prefs.problem_areas:
        related = config.related_specialties(area) or [area]
        total_possible += len(related)
        total_matches += sum(1 for spec in related if matches_any(spec, specialties))

    if total_possible == 0:
        return NEUTRAL
    return min(1.0, total_matches / total_possible * SPECIALTY_BREADTH_BONUS)


def distance_score(prefs: PreferenceInput, cand: Candidate) -> Tuple[float, Optional[float]]:
    """Exponential decay on km; online sessions make distance irrelevant."""
    if prefs.format == SessionFormat.ONLINE and cand.online:
        return 1.0, None
    distance = distance_between(prefs, cand)
    if distance is None:
        return NEUTRAL, None
    return exp(-DISTANCE_DECAY * distance), distance


def wait_weeks(cand: Candidate, config: MatchingConfig) -> float:
    """Explicit estimate, else derived from the availability status."""
    if cand.estimated_wait_weeks is not None:
        return max(0.0, cand.estimated_wait_weeks)
    return config.wait_weeks_for(cand.availability_status)


def availability_score(prefs: PreferenceInput, cand: Candidate, config: MatchingConfig) -> Tuple[float, float]:
    weeks = wait_weeks(cand, config)

    # No (usable) tolerance: shorter is better, zero at 12 weeks
    if not prefs.max_wait_weeks:
        return _clamp(1 - weeks / NO_WAIT_TOLERANCE_HORIZON_WEEKS), weeks

    max_wait = prefs.max_wait_weeks
    if weeks <= max_wait:
        return 1 - (weeks / max_wait) * 0.5, weeks

    # Over tolerance is still only a soft signal
    over_ratio = (weeks - max_wait) / max_wait
    return max(0.0, 0.5 - over_ratio * 0.5), weeks


def methods_score(prefs: PreferenceInput, cand: Candidate) -> Tuple[float, List[str]]:
    if not prefs.preferred_methods:
        return NEUTRAL, []
    modalities = normalize_terms(cand.modalities)
    if not modalities:
        return 0.3, []
    matched = [m for m in prefs.preferred_methods if matches_any(m, modalities)]
    return len(matched) / len(prefs.preferred_methods), matched


def language_score(prefs: PreferenceInput, cand: Candidate) -> float:
    if not prefs.languages:
        return 1.0
    matched = matched_languages(cand, prefs)
    if not matched:
        return 0.0
    return min(1.0, 0.8 + len(matched) / len(prefs.languages) * 0.2)


def gender_score(prefs: PreferenceInput, cand: Candidate) -> float:
    # Therapist gender is not part of the profile data yet
    if prefs.therapist_gender in (None, GenderPreference.ANY):
        return 1.0
    return NEUTRAL


def rating_score(cand: Candidate) -> float:
    """Stars normalised to [0, 1] plus a small bonus for review volume."""
    if not cand.rating:
        return UNRATED_SCORE
    reviews = min(max(cand.review_count, 0), REVIEW_BONUS_CAP)
    return _clamp(cand.rating / RATING_SCALE + reviews / REVIEW_BONUS_CAP * REVIEW_BONUS_MAX)


def style_score(prefs: PreferenceInput, cand: Candidate) -> float:
    # Communication style is not part of the profile data yet
    if prefs.communication_style in (None, CommunicationStyle.ANY):
        return 1.0
    return NEUTRAL


# ─────────────────────────────
# Full breakdown

def calculate_match_score(
    prefs: PreferenceInput,
    cand: Candidate,
    config: Optional[MatchingConfig] = None,
) -> ScoreBreakdown:
    """Score one candidate. Pure function of its inputs."""
    config = config or default_matching_config()
    weights = config.weights

    dist, distance_km = distance_score(prefs, cand)
    avail, weeks = availability_score(prefs, cand, config)
    methods, matched_methods = methods_score(prefs, cand)

    def component(cls, score, weight, **extra):
        return cls(score=score, weight=weight, contribution=score * weight, **extra)

    components = ScoreComponents(
        specialty=component(ScoreComponent, specialty_score(prefs, cand, config), weights.specialty),
        distance=component(DistanceComponent, dist, weights.distance, distance_km=distance_km),
        availability=component(AvailabilityComponent, avail, weights.availability, wait_weeks=weeks),
        methods=component(MethodsComponent, methods, weights.methods, matched_methods=matched_methods),
        language=component(ScoreComponent, language_score(prefs, cand), weights.language),
        gender=component(ScoreComponent, gender_score(prefs, cand), weights.gender),
        rating=component(ScoreComponent, rating_score(cand), weights.rating),
        style=component(ScoreComponent, style_score(prefs, cand), weights.style),
    )
    total = sum(c.contribution for _, c in components.items())
    return ScoreBreakdown(total=round(total, 2), components=components)
