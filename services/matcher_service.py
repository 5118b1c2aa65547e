# 📦 /services/matcher_service.py

import asyncio
import uuid
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Optional

import structlog
from prometheus_client import Counter

from engine.config import MATCHING_PATH, WEIGHTS_PATH, load_matching_config
from engine.matcher import Matcher
from engine.options import available_filter_options
from schemas.schemas import FilterOptions, MatchingResponse, MatchOutcome, PreferenceInput, SavedPreferences
from settings import settings
from utils.fetch_therapists import fetch_candidates
from utils.supabase_utils import insert_with_retry

log = structlog.get_logger()

REQUEST_COUNTER = Counter("matching_requests_total", "Total /match requests made")
FALLBACK_COUNTER = Counter("matching_specialty_fallbacks_total", "Requests where the specialty filter was relaxed")
MATCHES_RETURNED_COUNTER = Counter("matching_matches_returned", "Number of matches returned per request")
FILTERED_OUT_COUNTER = Counter("matching_candidates_filtered_out", "Candidates rejected by hard filters", ["reason"])
ZERO_RESULTS_COUNTER = Counter("matching_zero_results_total", "Requests without any match", ["failed_filter"])

_matching_config = None


def get_matching_config():
    """Matching config from settings, loaded once per process."""
    global _matching_config
    if _matching_config is None:
        path = Path(settings.matching_config_path) if settings.matching_config_path else MATCHING_PATH
        _matching_config = load_matching_config(path, WEIGHTS_PATH, profile=settings.weights_profile)
    return _matching_config


def run_matcher(preferences: PreferenceInput, candidates, limit=10, config=None) -> MatchOutcome:
    matcher = Matcher(preferences, candidates, config=config or get_matching_config())
    outcome = matcher.run(limit=limit)

    if outcome.used_fallback:
        FALLBACK_COUNTER.inc()
    for rejected in outcome.filtered:
        FILTERED_OUT_COUNTER.labels(rejected.reason.value).inc()
    if outcome.matches:
        MATCHES_RETURNED_COUNTER.inc(len(outcome.matches))
    if outcome.zero_results_analysis:
        failed = outcome.zero_results_analysis.failed_filter
        ZERO_RESULTS_COUNTER.labels(failed.value if failed else "combination").inc()
    return outcome


def save_matching_preferences(supabase, preferences: PreferenceInput, user_id: Optional[str] = None) -> SavedPreferences:
    """Store the raw request for later audit; returns the id pair."""
    session_id = str(uuid.uuid4())
    expires_at = datetime.now(timezone.utc) + timedelta(days=settings.preferences_ttl_days)
    row = preferences.model_dump(mode="json")
    row.update({
        "communication_style": row.get("communication_style") or "ANY",
        "session_id": session_id,
        "user_id": user_id,
        "expires_at": expires_at.isoformat(),
    })
    response = insert_with_retry(supabase.table(settings.preferences_table), row)
    saved = response.data[0]
    log.info("Matching preferences saved", preferences_id=saved.get("id"), session_id=session_id)
    return SavedPreferences(id=str(saved.get("id")), session_id=saved.get("session_id", session_id))


def cleanup_expired_preferences(supabase) -> int:
    """Delete preferences past their expiry; returns how many were removed."""
    now = datetime.now(timezone.utc).isoformat()
    response = supabase.table(settings.preferences_table).delete().lt("expires_at", now).execute()
    deleted = len(response.data or [])
    log.info("Expired matching preferences removed", deleted=deleted)
    return deleted


async def create_matching_response(
    supabase,
    preferences: PreferenceInput,
    limit: int = settings.default_limit,
    user_id: Optional[str] = None,
) -> MatchingResponse:
    REQUEST_COUNTER.inc()
    candidates = await fetch_candidates(supabase)
    outcome = run_matcher(preferences, candidates, limit=limit)
    # blocking insert, sleeps between retries
    saved = await asyncio.to_thread(save_matching_preferences, supabase, preferences, user_id=user_id)

    return MatchingResponse(
        matches=outcome.matches,
        total=outcome.total,
        preferences=saved,
        zero_results_analysis=outcome.zero_results_analysis,
    )


async def create_filter_options(supabase, preferences: PreferenceInput) -> FilterOptions:
    candidates = await fetch_candidates(supabase)
    return available_filter_options(candidates, preferences, config=get_matching_config())
