# 📦 engine/matcher.py
# ─────────────────────────────
# Full matching engine: hard filters with specialty fallback, scoring,
# explanations, ranking and zero-result diagnostics

from collections import Counter
from typing import List, Optional

import structlog

from engine import diagnostics, explanations, filters, scoring
from engine.config import MatchingConfig, default_matching_config
from engine.geo import distance_between
from schemas.schemas import Candidate, MatchOutcome, MatchResult, PreferenceInput

log = structlog.get_logger()


class Matcher:
    def __init__(self, preferences: PreferenceInput, candidates: List[Candidate], config: Optional[MatchingConfig] = None):
        self.preferences = preferences
        self.candidates = list(candidates)
        self.config = config or default_matching_config()
        self.used_fallback = False

    def run(self, limit: Optional[int] = 10) -> MatchOutcome:
        outcome = self._apply_filters()

        if not outcome.passed:
            analysis = diagnostics.analyze_zero_results(self.candidates, self.preferences, self.config)
            log.warning(
                "No therapists passed hard filters",
                pool=len(self.candidates),
                failed_filter=analysis.failed_filter.value if analysis.failed_filter else None,
            )
            return MatchOutcome(
                matches=[],
                total=0,
                used_fallback=self.used_fallback,
                filtered=outcome.rejected,
                zero_results_analysis=analysis,
            )

        results = [self._build_result(cand) for cand in outcome.passed]
        # sorted() is stable, so ties keep input order
        ranked = sorted(results, key=lambda r: r.score, reverse=True)
        page = ranked if limit is None else ranked[:limit]

        log.info(
            "Top matches generated",
            total=len(ranked),
            returned=len(page),
            used_fallback=self.used_fallback,
            top_score=page[0].score if page else None,
        )
        return MatchOutcome(
            matches=page,
            total=len(ranked),
            used_fallback=self.used_fallback,
            filtered=outcome.rejected,
        )

    def _apply_filters(self) -> filters.FilterOutcome:
        """Strict specialty first; relax only specialty when too few survive."""
        strict = filters.apply_hard_filters(self.candidates, self.preferences, self.config, strict_specialty=True)
        self._log_rejections(strict.rejected, strict_specialty=True)
        if len(strict.passed) >= self.config.min_results:
            return strict

        log.warning(
            "Too few therapists after strict specialty filter, relaxing specialty...",
            passed=len(strict.passed),
            minimum=self.config.min_results,
        )
        relaxed = filters.apply_hard_filters(self.candidates, self.preferences, self.config, strict_specialty=False)
        self.used_fallback = True
        self._log_rejections(relaxed.rejected, strict_specialty=False)
        return relaxed

    def _build_result(self, cand: Candidate) -> MatchResult:
        breakdown = scoring.calculate_match_score(self.preferences, cand, self.config)
        explanation = explanations.generate_match_explanation(cand, self.preferences, breakdown, self.config)
        return MatchResult(
            therapist=cand,
            score=breakdown.total,
            score_breakdown=breakdown,
            explanation=explanation,
            distance_km=distance_between(self.preferences, cand),
        )

    def _log_rejections(self, rejected, strict_specialty):
        """Log distribution of filter reasons."""
        counter = Counter(r.reason.value for r in rejected)
        log.info(
            "Hard filters applied",
            pool=len(self.candidates),
            rejected=len(rejected),
            strict_specialty=strict_specialty,
            reasons=dict(counter),
        )


def find_matches(preferences, candidates, limit=10, config=None) -> MatchOutcome:
    """Rank candidates for one request; see `Matcher`."""
    return Matcher(preferences, candidates, config=config).run(limit=limit)
