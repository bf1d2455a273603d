import pytest

from simulation_curator.core.geo import vincenty_distance


def test_one_degree_of_longitude_on_equator():
    # On the equator the ellipsoidal distance is a * dLon
    assert vincenty_distance((0.0, 0.0), (0.0, 1.0)) == pytest.approx(111319.49, abs=0.01)


def test_coincident_points_are_zero():
    assert vincenty_distance((52.52, 13.405), (52.52, 13.405)) == 0.0


def test_distance_is_symmetric():
    a, b = (52.5200, 13.4050), (52.5163, 13.3777)
    d1 = vincenty_distance(a, b)
    d2 = vincenty_distance(b, a)
    assert d1 == pytest.approx(d2, rel=1e-9)
    # Alexanderplatz area to Brandenburger Tor, roughly 1.9 km
    assert 1800 < d1 < 2000
