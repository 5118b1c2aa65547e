# 📦 tests/test_geo.py

from engine.geo import distance_between, haversine_km
from tests.utils.dummies import GRAZ, WIEN, make_candidate, make_preferences


def test_distance_same_point_is_zero():
    assert haversine_km(*WIEN, *WIEN) == 0


def test_distance_is_symmetric():
    assert haversine_km(*WIEN, *GRAZ) == haversine_km(*GRAZ, *WIEN)


def test_distance_wien_graz():
    assert 140 < haversine_km(*WIEN, *GRAZ) < 150


def test_distance_between_requires_both_sides():
    prefs = make_preferences(latitude=WIEN[0], longitude=WIEN[1])
    assert distance_between(prefs, make_candidate(latitude=None, longitude=None)) is None
    assert distance_between(make_preferences(), make_candidate()) is None
    assert distance_between(prefs, make_candidate(latitude=GRAZ[0], longitude=GRAZ[1])) > 140
