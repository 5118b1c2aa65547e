# 📦 /schemas/schemas.py

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Snake_case in Python, camelCase on the wire."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class FrozenCamelModel(CamelModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


# ─────────────────────────────
# Closed tag sets

class InsuranceType(str, Enum):
    PUBLIC = "PUBLIC"
    PRIVATE = "PRIVATE"
    SELF_PAY = "SELF_PAY"
    ANY = "ANY"


class SessionFormat(str, Enum):
    ONLINE = "ONLINE"
    IN_PERSON = "IN_PERSON"
    BOTH = "BOTH"


class AvailabilityStatus(str, Enum):
    AVAILABLE = "AVAILABLE"
    LIMITED = "LIMITED"
    WAITLIST = "WAITLIST"
    UNAVAILABLE = "UNAVAILABLE"


class CommunicationStyle(str, Enum):
    DIRECT = "DIRECT"
    GENTLE = "GENTLE"
    ANY = "ANY"


class GenderPreference(str, Enum):
    MALE = "male"
    FEMALE = "female"
    ANY = "any"


class FilterReason(str, Enum):
    NO_SPECIALTY_MATCH = "no_specialty_match"
    LANGUAGE_MISMATCH = "language_mismatch"
    INSURANCE_MISMATCH = "insurance_mismatch"
    FORMAT_MISMATCH = "format_mismatch"
    DISTANCE_EXCEEDED = "distance_exceeded"


class HardFilter(str, Enum):
    SPECIALTY = "specialty"
    LANGUAGE = "language"
    INSURANCE = "insurance"
    FORMAT = "format"
    DISTANCE = "distance"


class ExplanationType(str, Enum):
    PRIMARY = "primary"
    SECONDARY = "secondary"
    WARNING = "warning"


# ─────────────────────────────
# Engine input

class PreferenceInput(FrozenCamelModel):
    # Hard criteria
    problem_areas: List[str] = []
    languages: List[str] = []
    insurance_type: InsuranceType = InsuranceType.ANY
    format: SessionFormat = SessionFormat.BOTH
    max_distance_km: Optional[float] = Field(None, gt=0)
    latitude: Optional[float] = Field(None, ge=-90, le=90)
    longitude: Optional[float] = Field(None, ge=-180, le=180)
    postal_code: Optional[str] = None
    city: Optional[str] = None
    max_wait_weeks: Optional[float] = Field(None, ge=0, le=52)

    # Soft criteria
    preferred_methods: List[str] = []
    therapist_gender: Optional[GenderPreference] = None
    communication_style: Optional[CommunicationStyle] = None
    price_max: Optional[int] = Field(None, gt=0)  # in cents

    @property
    def has_coordinates(self) -> bool:
        return self.latitude is not None and self.longitude is not None


class Candidate(FrozenCamelModel):
    """Therapist profile projected to the fields the matching engine reads."""
    id: str
    display_name: Optional[str] = None
    title: Optional[str] = None
    headline: Optional[str] = None
    profile_image_url: Optional[str] = None
    specialties: List[str] = []
    modalities: List[str] = []
    languages: List[str] = []
    online: bool = False
    city: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    accepting_clients: bool = True
    availability_status: Optional[AvailabilityStatus] = None
    estimated_wait_weeks: Optional[float] = None
    price_min: Optional[int] = None  # in cents
    price_max: Optional[int] = None  # in cents
    accepted_insurance: List[str] = []
    private_practice: bool = False
    rating: Optional[float] = None
    review_count: int = 0
    years_experience: Optional[int] = None

    @property
    def has_coordinates(self) -> bool:
        return self.latitude is not None and self.longitude is not None

    @property
    def has_location(self) -> bool:
        return bool(self.city) or self.latitude is not None


# ─────────────────────────────
# Engine output

class ScoreComponent(CamelModel):
    score: float
    weight: float
    contribution: float


class DistanceComponent(ScoreComponent):
    distance_km: Optional[float] = None


class AvailabilityComponent(ScoreComponent):
    wait_weeks: Optional[float] = None


class MethodsComponent(ScoreComponent):
    matched_methods: List[str] = []


class ScoreComponents(CamelModel):
    specialty: ScoreComponent
    distance: DistanceComponent
    availability: AvailabilityComponent
    methods: MethodsComponent
    language: ScoreComponent
    gender: ScoreComponent
    rating: ScoreComponent
    style: ScoreComponent

    def items(self):
        return [(name, getattr(self, name)) for name in type(self).model_fields]


class ScoreBreakdown(CamelModel):
    total: float
    components: ScoreComponents


class MatchExplanation(CamelModel):
    primary: List[str] = []
    secondary: List[str] = []
    warnings: List[str] = []


class MatchResult(CamelModel):
    therapist: Candidate
    score: float
    score_breakdown: ScoreBreakdown
    explanation: MatchExplanation
    distance_km: Optional[float] = None


class FilteredCandidate(CamelModel):
    therapist_id: str
    reason: FilterReason


class MatchedCriterion(CamelModel):
    filter: HardFilter
    value: str
    count: int


class ZeroResultsAnalysis(CamelModel):
    failed_filter: Optional[HardFilter] = None
    failed_value: Optional[str] = None
    total_candidates: int
    candidates_without_filter: int = 0
    matched_criteria: List[MatchedCriterion] = []
    suggestion: str


class FilterOption(CamelModel):
    value: str
    label: str
    count: int
    available: bool


class FilterOptions(CamelModel):
    """Per-option candidate counts for the search form."""
    languages: List[FilterOption]
    insurance_types: List[FilterOption]
    problem_areas: List[FilterOption]
    formats: List[FilterOption]


class MatchOutcome(CamelModel):
    matches: List[MatchResult]
    total: int
    used_fallback: bool = False
    filtered: List[FilteredCandidate] = []
    zero_results_analysis: Optional[ZeroResultsAnalysis] = None


# ─────────────────────────────
# API

class MatchRequest(PreferenceInput):
    problem_areas: List[str] = Field(..., min_length=1)
    languages: List[str] = ["Deutsch"]
    limit: int = Field(10, ge=1, le=50)

    def to_preferences(self) -> PreferenceInput:
        return PreferenceInput(**self.model_dump(exclude={"limit"}))


class SavedPreferences(CamelModel):
    id: str
    session_id: str


class MatchingResponse(CamelModel):
    matches: List[MatchResult]
    total: int
    preferences: SavedPreferences
    zero_results_analysis: Optional[ZeroResultsAnalysis] = None


class CleanupResponse(BaseModel):
    status: str
    deleted: int


class HealthCheckResponse(BaseModel):
    status: str
    message: str
    version: str


class ErrorResponse(BaseModel):
    status: str
    message: str
    info: Optional[str | dict] = None
