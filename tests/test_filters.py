# 📦 tests/test_filters.py

from engine.config import default_matching_config
from engine.filters import apply_hard_filters, check_hard_filters
from schemas.schemas import FilterReason, HardFilter
from tests.utils.dummies import GRAZ, WIEN, make_candidate, make_preferences

CONFIG = default_matching_config()

# ---------------------- Specialty ----------------------

def test_specialty_direct_substring_match():
    prefs = make_preferences(problem_areas=["Trauma"])
    assert check_hard_filters(make_candidate(specialties=["Traumatherapie"]), prefs, CONFIG) is None


def test_specialty_match_via_mapping():
    prefs = make_preferences(problem_areas=["Probleme im Beruf"])
    assert check_hard_filters(make_candidate(specialties=["Mobbing am Arbeitsplatz"]), prefs, CONFIG) is None


def test_specialty_mismatch_rejected_only_when_strict():
    prefs = make_preferences(problem_areas=["Angst"])
    cand = make_candidate(specialties=["Sucht"])
    assert check_hard_filters(cand, prefs, CONFIG) == FilterReason.NO_SPECIALTY_MATCH
    assert check_hard_filters(cand, prefs, CONFIG, strict_specialty=False) is None


def test_candidate_without_specialties_fails_strict_specialty():
    prefs = make_preferences(problem_areas=["Angst"])
    assert check_hard_filters(make_candidate(specialties=[]), prefs, CONFIG) == FilterReason.NO_SPECIALTY_MATCH


def test_blank_specialty_does_not_match_everything():
    prefs = make_preferences(problem_areas=["Angst"])
    assert check_hard_filters(make_candidate(specialties=["", "  "]), prefs, CONFIG) == FilterReason.NO_SPECIALTY_MATCH


def test_first_failure_wins():
    prefs = make_preferences(problem_areas=["Angst"], languages=["Arabisch"])
    cand = make_candidate(specialties=["Sucht"])
    assert check_hard_filters(cand, prefs, CONFIG) == FilterReason.NO_SPECIALTY_MATCH
    assert check_hard_filters(cand, prefs, CONFIG, strict_specialty=False) == FilterReason.LANGUAGE_MISMATCH

# ---------------------- Language ----------------------

def test_language_is_case_insensitive_exact_token():
    prefs = make_preferences(languages=["deutsch"])
    assert check_hard_filters(make_candidate(languages=["Deutsch"]), prefs, CONFIG) is None
    prefs = make_preferences(languages=["Deut"])
    assert check_hard_filters(make_candidate(languages=["Deutsch"]), prefs, CONFIG) == FilterReason.LANGUAGE_MISMATCH


def test_no_language_preference_admits_everyone():
    prefs = make_preferences(languages=[])
    assert check_hard_filters(make_candidate(languages=[]), prefs, CONFIG) is None

# ---------------------- Insurance ----------------------

def test_public_insurance_needs_public_payer():
    prefs = make_preferences(insurance_type="PUBLIC")
    assert check_hard_filters(make_candidate(accepted_insurance=["ÖGK"]), prefs, CONFIG) is None
    assert check_hard_filters(make_candidate(accepted_insurance=["Gesetzliche Krankenkasse"]), prefs, CONFIG) is None
    assert check_hard_filters(make_candidate(accepted_insurance=["Privat"]), prefs, CONFIG) == FilterReason.INSURANCE_MISMATCH
    assert check_hard_filters(make_candidate(accepted_insurance=[]), prefs, CONFIG) == FilterReason.INSURANCE_MISMATCH


def test_private_insurance_needs_private_practice_and_insurance_list():
    prefs = make_preferences(insurance_type="PRIVATE")
    assert check_hard_filters(make_candidate(private_practice=True, accepted_insurance=["Privat"]), prefs, CONFIG) is None
    assert check_hard_filters(make_candidate(private_practice=True, accepted_insurance=[]), prefs, CONFIG) == FilterReason.INSURANCE_MISMATCH
    assert check_hard_filters(make_candidate(private_practice=False), prefs, CONFIG) == FilterReason.INSURANCE_MISMATCH


def test_self_pay_needs_only_private_practice():
    prefs = make_preferences(insurance_type="SELF_PAY")
    assert check_hard_filters(make_candidate(private_practice=True, accepted_insurance=[]), prefs, CONFIG) is None
    assert check_hard_filters(make_candidate(private_practice=False), prefs, CONFIG) == FilterReason.INSURANCE_MISMATCH

# ---------------------- Format ----------------------

def test_online_requires_online_flag():
    prefs = make_preferences(format="ONLINE")
    assert check_hard_filters(make_candidate(online=False), prefs, CONFIG) == FilterReason.FORMAT_MISMATCH
    assert check_hard_filters(make_candidate(online=True), prefs, CONFIG) is None


def test_in_person_rejects_online_only_practice():
    prefs = make_preferences(format="IN_PERSON")
    online_only = make_candidate(online=True, city=None, latitude=None, longitude=None)
    offline_unknown = make_candidate(online=False, city=None, latitude=None, longitude=None)
    assert check_hard_filters(online_only, prefs, CONFIG) == FilterReason.FORMAT_MISMATCH
    assert check_hard_filters(offline_unknown, prefs, CONFIG) is None
    assert check_hard_filters(make_candidate(online=True, city="Wien"), prefs, CONFIG) is None

# ---------------------- Distance ----------------------

def test_distance_exceeded():
    prefs = make_preferences(format="IN_PERSON", latitude=WIEN[0], longitude=WIEN[1], max_distance_km=30)
    graz = make_candidate(city="Graz", latitude=GRAZ[0], longitude=GRAZ[1])
    assert check_hard_filters(graz, prefs, CONFIG) == FilterReason.DISTANCE_EXCEEDED
    assert check_hard_filters(make_candidate(), prefs, CONFIG) is None


def test_distance_ignored_for_online_sessions():
    prefs = make_preferences(format="ONLINE", latitude=WIEN[0], longitude=WIEN[1], max_distance_km=30)
    graz = make_candidate(latitude=GRAZ[0], longitude=GRAZ[1], online=True)
    assert check_hard_filters(graz, prefs, CONFIG) is None


def test_distance_skipped_without_coordinates():
    prefs = make_preferences(format="IN_PERSON", max_distance_km=5)
    graz = make_candidate(latitude=GRAZ[0], longitude=GRAZ[1])
    assert check_hard_filters(graz, prefs, CONFIG) is None

    prefs = make_preferences(format="IN_PERSON", latitude=WIEN[0], longitude=WIEN[1], max_distance_km=5)
    assert check_hard_filters(make_candidate(latitude=None, longitude=None), prefs, CONFIG) is None

# ---------------------- Filter stage ----------------------

def test_apply_hard_filters_keeps_order_and_reasons():
    prefs = make_preferences(languages=["Türkisch"])
    pool = [
        make_candidate("1", languages=["Türkisch"]),
        make_candidate("2", languages=["Deutsch"]),
        make_candidate("3", languages=["Türkisch", "Deutsch"]),
    ]
    outcome = apply_hard_filters(pool, prefs, CONFIG)
    assert [c.id for c in outcome.passed] == ["1", "3"]
    assert [(r.therapist_id, r.reason) for r in outcome.rejected] == [("2", FilterReason.LANGUAGE_MISMATCH)]


def test_relaxed_run_only_differs_in_specialty():
    prefs = make_preferences(
        problem_areas=["Angst"],
        languages=["Deutsch"],
        insurance_type="PUBLIC",
        format="IN_PERSON",
        latitude=WIEN[0],
        longitude=WIEN[1],
        max_distance_km=50,
    )
    pool = [
        make_candidate("1"),
        make_candidate("2", specialties=["Sucht"]),
        make_candidate("3", specialties=["Sucht"], languages=["Englisch"]),
        make_candidate("4", accepted_insurance=["Privat"]),
        make_candidate("5", latitude=GRAZ[0], longitude=GRAZ[1], specialties=["Sucht"]),
        make_candidate("6", online=True, city=None, latitude=None, longitude=None),
    ]
    for cand in pool:
        relaxed = check_hard_filters(cand, prefs, CONFIG, strict_specialty=False)
        without_specialty = check_hard_filters(cand, prefs, CONFIG, skip={HardFilter.SPECIALTY})
        assert relaxed == without_specialty
        strict = check_hard_filters(cand, prefs, CONFIG)
        if strict != FilterReason.NO_SPECIALTY_MATCH:
            assert relaxed == strict
