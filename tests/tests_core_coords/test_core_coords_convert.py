# pylint: skip-file
# type: ignore

# Standard library
import sys; sys.path.append("../../")

import pytest

from eviltransform.core_coords.core_coords_convert import (
    out_of_china,
    wgs_to_gcj,
    gcj_to_wgs,
    gcj_to_bd,
    bd_to_gcj,
    wgs_to_bd,
    bd_to_wgs,
)


CONVERTERS = [wgs_to_gcj, gcj_to_wgs, gcj_to_bd, bd_to_gcj, wgs_to_bd, bd_to_wgs]

OUTSIDE_POINTS = [
    (30.0, -120.0),       # California
    (51.5, -0.12),        # London
    (39.9, 72.0),         # just west of the box
    (39.9, 137.84),       # just east of the box
    (0.8, 110.0),         # just south of the box
    (55.83, 110.0),       # just north of the box
    (-33.86, 151.2),      # Sydney
]

INSIDE_POINTS = [
    (39.915, 116.404),    # Beijing
    (31.2304, 121.4737),  # Shanghai
    (23.1291, 113.2644),  # Guangzhou
    (30.5728, 104.0668),  # Chengdu
    (43.8256, 87.6168),   # Urumqi
    (45.8038, 126.5350),  # Harbin
    (29.6520, 91.1721),   # Lhasa
    (18.2528, 109.5119),  # Sanya
]


def _grid():
    points = []
    lat = 1.0
    while lat < 55.5:
        lng = 73.0
        while lng < 137.5:
            points.append((lat, lng))
            lng += 4.3
        lat += 3.7
    return points


class TestOutOfChina:
    def test_bounding_box_edges(self):
        assert out_of_china(39.9, 72.003)
        assert not out_of_china(39.9, 72.004)
        assert out_of_china(39.9, 137.8348)
        assert not out_of_china(39.9, 137.8347)
        assert out_of_china(0.8292, 110.0)
        assert not out_of_china(0.8293, 110.0)
        assert out_of_china(55.8272, 110.0)
        assert not out_of_china(55.8271, 110.0)

    @pytest.mark.parametrize("lat, lng", INSIDE_POINTS)
    def test_cities_are_inside(self, lat, lng):
        assert not out_of_china(lat, lng)

    @pytest.mark.parametrize("lat, lng", OUTSIDE_POINTS)
    def test_outside_points(self, lat, lng):
        assert out_of_china(lat, lng)


class TestIdentityOutsideChina:
    @pytest.mark.parametrize("converter", CONVERTERS)
    @pytest.mark.parametrize("lat, lng", OUTSIDE_POINTS)
    def test_unchanged_exactly(self, converter, lat, lng):
        assert converter(lat, lng) == (lat, lng)


class TestReferenceValues:
    def test_wgs_to_gcj_reference_point(self):
        lat, lng = wgs_to_gcj(39.915, 116.404)
        assert lat == pytest.approx(39.91640428150164, abs=1e-6)
        assert lng == pytest.approx(116.41024449916938, abs=1e-6)

    def test_gcj_to_bd_reference_point(self):
        lat, lng = gcj_to_bd(39.915, 116.404)
        assert lat == pytest.approx(39.92133699351021, abs=1e-6)
        assert lng == pytest.approx(116.41036949371029, abs=1e-6)

    def test_wgs_to_gcj_point_120_30(self):
        lat, lng = wgs_to_gcj(30.0, 120.0)
        assert lng == pytest.approx(120.004660445597, abs=1e-6)
        assert lat == pytest.approx(29.9975343316961, abs=1e-6)

    def test_beijing_offset_magnitude(self):
        lat, lng = wgs_to_gcj(39.9087, 116.3975)
        d_lat = abs(lat - 39.9087)
        d_lng = abs(lng - 116.3975)
        assert d_lat > 0.0 and d_lng > 0.0
        assert 0.001 < d_lat < 0.007
        assert 0.001 < d_lng < 0.007

    def test_deterministic(self):
        assert wgs_to_gcj(31.2304, 121.4737) == wgs_to_gcj(31.2304, 121.4737)


class TestRoundTrip:
    @pytest.mark.parametrize("lat, lng", INSIDE_POINTS + _grid())
    def test_gcj_round_trip(self, lat, lng):
        back_lat, back_lng = gcj_to_wgs(*wgs_to_gcj(lat, lng))
        assert abs(back_lat - lat) < 1e-4
        assert abs(back_lng - lng) < 1e-4

    @pytest.mark.parametrize("lat, lng", INSIDE_POINTS)
    def test_bd_round_trip(self, lat, lng):
        back_lat, back_lng = bd_to_gcj(*gcj_to_bd(lat, lng))
        assert abs(back_lat - lat) < 1e-4
        assert abs(back_lng - lng) < 1e-4


class TestComposites:
    @pytest.mark.parametrize("lat, lng", INSIDE_POINTS + _grid())
    def test_wgs_to_bd_chains_through_gcj(self, lat, lng):
        assert wgs_to_bd(lat, lng) == gcj_to_bd(*wgs_to_gcj(lat, lng))

    @pytest.mark.parametrize("lat, lng", INSIDE_POINTS)
    def test_bd_to_wgs_chains_through_gcj(self, lat, lng):
        assert bd_to_wgs(lat, lng) == gcj_to_wgs(*bd_to_gcj(lat, lng))
