from typing import List, Optional

from fastapi import APIRouter, Depends, Header, Query
from fastapi.responses import JSONResponse
import structlog

from schemas.schemas import (
    CleanupResponse,
    ErrorResponse,
    FilterOptions,
    HealthCheckResponse,
    InsuranceType,
    MatchingResponse,
    MatchRequest,
    PreferenceInput,
    SessionFormat,
)
from services.matcher_service import (
    cleanup_expired_preferences,
    create_filter_options,
    create_matching_response,
)
from settings import settings
from supabase_client import get_supabase
from utils.errors import MatchingConfigurationError, PreferenceStoreError

log = structlog.get_logger()

router = APIRouter()

OPTIONAL_FIELDS = [
    "languages",
    "insuranceType",
    "format",
    "maxDistanceKm",
    "latitude",
    "longitude",
    "postalCode",
    "city",
    "maxWaitWeeks",
    "preferredMethods",
    "therapistGender",
    "communicationStyle",
    "priceMax",
    "limit",
]


def _error(status_code: int, message: str, info=None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(status="error", message=message, info=info).model_dump(),
    )


@router.get("/", response_model=HealthCheckResponse)
async def healthcheck():
    return HealthCheckResponse(
        status="ok",
        message="Matching engine live",
        version=settings.version,
    )


@router.get("/match", response_model=dict)
async def match_info():
    return {
        "service": settings.app_name,
        "version": settings.version,
        "endpoints": {
            "POST /match": "Therapist matching",
            "GET /match/filter-options": "Available filter options with counts",
        },
        "requiredFields": ["problemAreas"],
        "optionalFields": OPTIONAL_FIELDS,
    }


@router.post("/match", response_model=MatchingResponse, responses={500: {"model": ErrorResponse}})
async def match(
    request: MatchRequest,
    supabase=Depends(get_supabase),
    x_user_id: Optional[str] = Header(None),
):
    try:
        return await create_matching_response(
            supabase,
            request.to_preferences(),
            limit=request.limit,
            user_id=x_user_id,
        )
    except MatchingConfigurationError as e:
        log.error("Matching failed: candidate store unavailable", error=str(e))
        return _error(500, "Therapist data is unavailable.", info=str(e))
    except PreferenceStoreError as e:
        log.error("Matching failed: preferences not saved", error=str(e))
        return _error(500, "Failed to save matching preferences.", info=str(e))


@router.get("/match/filter-options", response_model=FilterOptions, responses={500: {"model": ErrorResponse}})
async def filter_options(
    languages: List[str] = Query([]),
    insurance_type: InsuranceType = Query(InsuranceType.ANY, alias="insuranceType"),
    format: SessionFormat = Query(SessionFormat.BOTH),
    problem_areas: List[str] = Query([], alias="problemAreas"),
    supabase=Depends(get_supabase),
):
    preferences = PreferenceInput(
        languages=languages,
        insurance_type=insurance_type,
        format=format,
        problem_areas=problem_areas,
    )
    try:
        return await create_filter_options(supabase, preferences)
    except MatchingConfigurationError as e:
        log.error("Filter options failed: candidate store unavailable", error=str(e))
        return _error(500, "Failed to fetch filter options.", info=str(e))


@router.post("/admin/cleanup-preferences", response_model=CleanupResponse, responses={500: {"model": ErrorResponse}})
async def admin_cleanup_preferences(supabase=Depends(get_supabase)):
    try:
        deleted = cleanup_expired_preferences(supabase)
    except Exception as e:
        log.error("Cleanup of expired preferences failed", error=str(e))
        return _error(500, "Failed to clean up expired preferences.", info=str(e))
    return CleanupResponse(status="success", deleted=deleted)
