# 📦 utils/fetch_therapists.py

import asyncio
from typing import List

import structlog

from schemas.schemas import Candidate
from settings import settings
from utils.availability import get_availability_meta
from utils.errors import MatchingConfigurationError

log = structlog.get_logger()

THERAPIST_COLUMNS = ",".join([
    "id",
    "display_name",
    "title",
    "headline",
    "profile_image_url",
    "specialties",
    "modalities",
    "languages",
    "online",
    "city",
    "latitude",
    "longitude",
    "availability_note",
    "accepting_clients",
    "price_min",
    "price_max",
    "accepted_insurance",
    "private_practice",
    "rating",
    "review_count",
    "years_experience",
])


def row_to_candidate(row: dict) -> Candidate:
    """Project a therapist row onto the fields the matching engine needs."""
    accepting = bool(row.get("accepting_clients", True))
    meta = get_availability_meta(row.get("availability_note"), accepting)
    return Candidate(
        id=str(row.get("id")),
        display_name=row.get("display_name"),
        title=row.get("title"),
        headline=row.get("headline"),
        profile_image_url=row.get("profile_image_url"),
        specialties=row.get("specialties") or [],
        modalities=row.get("modalities") or [],
        languages=row.get("languages") or [],
        online=bool(row.get("online")),
        city=row.get("city"),
        latitude=row.get("latitude"),
        longitude=row.get("longitude"),
        accepting_clients=accepting,
        availability_status=meta.status,
        estimated_wait_weeks=meta.wait_weeks,
        price_min=row.get("price_min"),
        price_max=row.get("price_max"),
        accepted_insurance=row.get("accepted_insurance") or [],
        private_practice=bool(row.get("private_practice")),
        rating=row.get("rating"),
        review_count=row.get("review_count") or 0,
        years_experience=row.get("years_experience"),
    )


async def fetch_candidates(
    supabase,
    retries: int = settings.fetch_retries,
    delay: float = settings.fetch_delay,
    limit: int = settings.candidate_pool_cap,
) -> List[Candidate]:
    """Fetch public, verified therapists from Supabase, with retry logic."""
    for attempt in range(retries):
        try:
            log.info("Fetching therapists", attempt=attempt + 1, table=settings.therapist_table)
            response = (
                supabase.table(settings.therapist_table)
                .select(THERAPIST_COLUMNS)
                .eq("is_public", True)
                .eq("status", "VERIFIED")
                .is_("deleted_at", "null")
                .limit(limit)
                .execute()
            )

            if not response.data:
                log.warning("No therapists found in Supabase.")
                return []

            candidates = [row_to_candidate(row) for row in response.data]
            log.info("Fetched therapists from Supabase", count=len(candidates))
            return candidates

        except Exception as e:
            log.error("Failed to fetch therapists", attempt=attempt + 1, error=str(e))
            if attempt < retries - 1:
                await asyncio.sleep(delay * (2 ** attempt))  # Exponential backoff
            else:
                raise MatchingConfigurationError(
                    f"Could not fetch therapists from table '{settings.therapist_table}': {e}"
                ) from e
    return []
