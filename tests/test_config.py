# 📦 tests/test_config.py

import pytest
from pydantic import ValidationError

from engine.config import default_matching_config, load_matching_config, load_weights
from engine.filters import specialty_matches_area
from schemas.schemas import AvailabilityStatus

MAPPING_YML = """
specialty_mapping:
  Prüfung: [Prüfungsangst, Lernblockaden]
public_insurance_keywords: [ÖGK]
availability_status_weeks:
  AVAILABLE: 0
  WAITLIST: 10
min_results: 1
"""

WEIGHTS_YML = """
default:
  specialty: 0.5
  distance: 0.1
  availability: 0.1
  methods: 0.1
  language: 0.1
  gender: 0.0
  rating: 0.1
  style: 0.0
broken:
  specialty: 0.9
"""


@pytest.fixture
def config_files(tmp_path):
    mapping = tmp_path / "matching.yml"
    weights = tmp_path / "weights.yml"
    mapping.write_text(MAPPING_YML, encoding="utf-8")
    weights.write_text(WEIGHTS_YML, encoding="utf-8")
    return mapping, weights


def test_default_config_has_work_aliases():
    config = default_matching_config()
    assert config.related_specialties("Beruf") == config.related_specialties("arbeit")
    assert config.related_specialties("unbekannt") == []
    assert config.min_results == 3


def test_alternate_mapping_is_used(config_files):
    mapping, weights = config_files
    config = load_matching_config(mapping, weights)
    assert config.related_specialties("prüfung") == ["Prüfungsangst", "Lernblockaden"]
    assert config.public_insurance_keywords == ["ögk"]
    assert config.weights.specialty == 0.5
    assert specialty_matches_area(["Lernblockaden"], "Prüfung", config)


def test_wait_weeks_lookup(config_files):
    config = load_matching_config(*config_files)
    assert config.wait_weeks_for(AvailabilityStatus.WAITLIST) == 10
    assert config.wait_weeks_for(None) == config.default_wait_weeks
    assert config.wait_weeks_for(AvailabilityStatus.UNAVAILABLE) == 4


def test_unknown_profile_falls_back_to_default(config_files):
    _, weights = config_files
    assert load_weights(weights, profile="experiment-b").specialty == 0.5


def test_profile_not_summing_to_one_is_rejected(config_files):
    _, weights = config_files
    with pytest.raises(ValidationError):
        load_weights(weights, profile="broken")
