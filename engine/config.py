# 📦 engine/config.py
# ─────────────────────────────
# Weights and lookup tables for the matching engine, loaded from config/*.yml

from functools import lru_cache
from pathlib import Path
from typing import Dict, List, Optional

import structlog
import yaml
from pydantic import BaseModel, ConfigDict, field_validator, model_validator

from schemas.schemas import AvailabilityStatus

log = structlog.get_logger()

CONFIG_DIR = Path(__file__).resolve().parent.parent / "config"
WEIGHTS_PATH = CONFIG_DIR / "weights.yml"
MATCHING_PATH = CONFIG_DIR / "matching.yml"

WEIGHT_TOLERANCE = 1e-6


class MatchingWeights(BaseModel):
    model_config = ConfigDict(frozen=True)

    specialty: float = 0.30
    distance: float = 0.15
    availability: float = 0.15
    methods: float = 0.10
    language: float = 0.10
    gender: float = 0.05
    rating: float = 0.10
    style: float = 0.05

    @model_validator(mode="after")
    def _check_sum(self):
        total = sum(self.model_dump().values())
        if abs(total - 1.0) > WEIGHT_TOLERANCE:
            raise ValueError(f"Matching weights must sum to 1.0, got {total:.6f}")
        if any(w < 0 for w in self.model_dump().values()):
            raise ValueError("Matching weights must not be negative")
        return self


class MatchingConfig(BaseModel):
    """Everything the filter stage and score calculator look up.

    Passed explicitly into the engine so alternate mappings can be
    swapped in per call (tests, A/B profiles) without touching module state.
    """
    model_config = ConfigDict(frozen=True)

    weights: MatchingWeights = MatchingWeights()
    specialty_mapping: Dict[str, List[str]] = {}
    public_insurance_keywords: List[str] = []
    availability_status_weeks: Dict[AvailabilityStatus, float] = {}
    default_wait_weeks: float = 4
    min_results: int = 3
    problem_area_labels: Dict[str, str] = {}
    language_options: List[str] = []

    @field_validator("specialty_mapping")
    @classmethod
    def _lower_keys(cls, mapping):
        return {key.strip().lower(): list(values) for key, values in mapping.items()}

    @field_validator("public_insurance_keywords")
    @classmethod
    def _lower_keywords(cls, keywords):
        return [kw.lower() for kw in keywords]

    def related_specialties(self, problem_area: str) -> List[str]:
        """Mapped specialties for a problem area; empty when the tag is unknown."""
        return self.specialty_mapping.get(problem_area.strip().lower(), [])

    def wait_weeks_for(self, status: Optional[AvailabilityStatus]) -> float:
        status = status or AvailabilityStatus.LIMITED
        return self.availability_status_weeks.get(status, self.default_wait_weeks)


def load_weights(path: Path = WEIGHTS_PATH, profile: str = "default") -> MatchingWeights:
    """Read one weights profile; unknown profiles fall back to `default`."""
    with open(path, "r") as f:
        profiles = yaml.safe_load(f) or {}
    if profile not in profiles:
        log.warning("Weights profile not found, using default", profile=profile)
        profile = "default"
    return MatchingWeights(**profiles.get(profile, {}))


def load_matching_config(
    path: Path = MATCHING_PATH,
    weights_path: Path = WEIGHTS_PATH,
    profile: str = "default",
) -> MatchingConfig:
    with open(path, "r") as f:
        raw = yaml.safe_load(f) or {}
    config = MatchingConfig(weights=load_weights(weights_path, profile), **raw)
    log.info(
        "Matching config loaded",
        path=str(path),
        profile=profile,
        problem_areas=len(config.specialty_mapping),
    )
    return config


@lru_cache(maxsize=1)
def default_matching_config() -> MatchingConfig:
    return load_matching_config()
