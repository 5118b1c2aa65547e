# 📦 engine/options.py
# ─────────────────────────────
# Filter options for the search form, each with the number of therapists it would leave

from typing import List, Optional

import structlog

from engine.config import MatchingConfig, default_matching_config
from engine.filters import HARD_FILTERS, apply_hard_filters
from schemas.schemas import (
    Candidate,
    FilterOption,
    FilterOptions,
    HardFilter,
    InsuranceType,
    PreferenceInput,
    SessionFormat,
)

log = structlog.get_logger()

INSURANCE_OPTION_LABELS = {
    InsuranceType.ANY: "Egal",
    InsuranceType.PUBLIC: "Krankenkasse",
    InsuranceType.PRIVATE: "Privat",
    InsuranceType.SELF_PAY: "Selbstzahler",
}

FORMAT_OPTION_LABELS = {
    SessionFormat.BOTH: "Beides",
    SessionFormat.IN_PERSON: "Präsenz",
    SessionFormat.ONLINE: "Online",
}


def _facet_pool(candidates, prefs, config, hard_filter):
    """Candidates passing every current filter except `hard_filter` and distance."""
    return apply_hard_filters(candidates, prefs, config, skip={hard_filter, HardFilter.DISTANCE}).passed


def _count_options(pool, prefs, config, hard_filter, field, choices) -> List[FilterOption]:
    rule = HARD_FILTERS[hard_filter]
    options = []
    for value, label, requested in choices:
        variant = prefs.model_copy(update={field: requested})
        count = sum(1 for cand in pool if rule(cand, variant, config))
        options.append(FilterOption(value=value, label=label, count=count, available=count > 0))
    return options


def available_filter_options(
    candidates: List[Candidate],
    prefs: PreferenceInput,
    config: Optional[MatchingConfig] = None,
) -> FilterOptions:
    """Count, per option, how many therapists remain given the other current choices.

    Each dimension is counted against the pool that passes all *other* active
    filters, so changing a single choice shows its real effect. Distance is
    left out because the form has no location yet.
    """
    config = config or default_matching_config()

    languages = _count_options(
        _facet_pool(candidates, prefs, config, HardFilter.LANGUAGE), prefs, config,
        HardFilter.LANGUAGE, "languages",
        [(lang, lang, [lang]) for lang in config.language_options],
    )
    insurance_types = _count_options(
        _facet_pool(candidates, prefs, config, HardFilter.INSURANCE), prefs, config,
        HardFilter.INSURANCE, "insurance_type",
        [(t.value, label, t) for t, label in INSURANCE_OPTION_LABELS.items()],
    )
    problem_areas = _count_options(
        _facet_pool(candidates, prefs, config, HardFilter.SPECIALTY), prefs, config,
        HardFilter.SPECIALTY, "problem_areas",
        [(area, label, [area]) for area, label in config.problem_area_labels.items()],
    )
    formats = _count_options(
        _facet_pool(candidates, prefs, config, HardFilter.FORMAT), prefs, config,
        HardFilter.FORMAT, "format",
        [(f.value, label, f) for f, label in FORMAT_OPTION_LABELS.items()],
    )

    log.info("Filter options computed", pool=len(candidates))
    return FilterOptions(
        languages=languages,
        insurance_types=insurance_types,
        problem_areas=problem_areas,
        formats=formats,
    )
