# pylint: skip-file
# type: ignore

# Standard library
import sys; sys.path.append("../../")

import pytest

from eviltransform.core_coords.core_coords_modes import ConversionMode
from eviltransform.core_geometry.core_geometry_transform import (
    OwnedBuffer,
    read_spatial_reference_id,
    transform_geometry,
)
from eviltransform.geometry.eviltransform import eviltransform, reproject_geometry


BEIJING = "POINT (116.404 39.915)"


@pytest.fixture
def beijing_wgs84(make_ewkb):
    return make_ewkb(BEIJING, 4326)


@pytest.fixture
def beijing_gcj02(beijing_wgs84):
    return bytes(transform_geometry(beijing_wgs84, ConversionMode.WGS_TO_GCJ, 990001))


@pytest.fixture
def beijing_bd09(beijing_wgs84):
    return bytes(transform_geometry(beijing_wgs84, ConversionMode.WGS_TO_BD, 990002))


class TestRouting:
    @pytest.mark.parametrize("to_proj", [990001, "990001", "EPSG:990001", "GCJ02", "GCJ-02", " gcj02 "])
    def test_to_gcj(self, beijing_wgs84, beijing_gcj02, to_proj):
        out = eviltransform(beijing_wgs84, to_proj)

        assert isinstance(out, OwnedBuffer)
        assert bytes(out) == beijing_gcj02

    @pytest.mark.parametrize("to_proj", [990002, "990002", "EPSG:990002", "BD09", "BD-09"])
    def test_to_bd(self, beijing_wgs84, beijing_bd09, to_proj):
        assert bytes(eviltransform(beijing_wgs84, to_proj)) == beijing_bd09

    def test_gcj_to_wgs(self, beijing_gcj02):
        expected = transform_geometry(beijing_gcj02, ConversionMode.GCJ_TO_WGS, 4326)

        assert bytes(eviltransform(beijing_gcj02, 4326)) == bytes(expected)

    def test_bd_to_wgs(self, beijing_bd09):
        expected = transform_geometry(beijing_bd09, ConversionMode.BD_TO_WGS, 4326)

        assert bytes(eviltransform(beijing_bd09, "EPSG:4326")) == bytes(expected)

    def test_gcj_to_bd_uses_the_direct_mode(self, beijing_gcj02):
        expected = transform_geometry(beijing_gcj02, ConversionMode.GCJ_TO_BD, 990002)

        assert bytes(eviltransform(beijing_gcj02, "BD-09")) == bytes(expected)

    def test_bd_to_gcj_uses_the_direct_mode(self, beijing_bd09):
        expected = transform_geometry(beijing_bd09, ConversionMode.BD_TO_GCJ, 990001)

        assert bytes(eviltransform(beijing_bd09, 990001)) == bytes(expected)

    def test_standard_srids_are_reprojected(self, beijing_wgs84):
        out = eviltransform(beijing_wgs84, 3857)

        assert read_spatial_reference_id(out.data) == 3857
        assert bytes(out) == bytes(reproject_geometry(beijing_wgs84, 3857))

    def test_standard_text_projection(self, beijing_wgs84):
        out = eviltransform(beijing_wgs84, "EPSG:3857")

        assert bytes(out) == bytes(reproject_geometry(beijing_wgs84, 3857))

    def test_gcj_to_projected(self, beijing_gcj02):
        wgs = transform_geometry(beijing_gcj02, ConversionMode.GCJ_TO_WGS, 4326)
        expected = reproject_geometry(wgs.data, 3857)

        assert bytes(eviltransform(beijing_gcj02, 3857)) == bytes(expected)
        assert bytes(eviltransform(beijing_gcj02, "EPSG:3857")) == bytes(expected)

    def test_projected_to_gcj(self, beijing_wgs84):
        utm = reproject_geometry(beijing_wgs84, 32650)
        wgs = reproject_geometry(utm.data, 4326)
        expected = transform_geometry(wgs.data, ConversionMode.WGS_TO_GCJ, 990001)

        out = eviltransform(utm.data, "GCJ02")

        assert read_spatial_reference_id(out.data) == 990001
        assert bytes(out) == bytes(expected)

    def test_same_srid_copies(self, beijing_gcj02):
        out = eviltransform(beijing_gcj02, "GCJ02")

        assert bytes(out) == beijing_gcj02
        assert out.data is not beijing_gcj02

    def test_source_is_not_modified(self, beijing_wgs84):
        data = bytearray(beijing_wgs84)
        eviltransform(data, "BD09")
        eviltransform(data, 3857)

        assert bytes(data) == beijing_wgs84


class TestFromProj:
    def test_from_proj_overrides_srid(self, make_ewkb, beijing_gcj02):
        data = make_ewkb(BEIJING, 0)

        assert bytes(eviltransform(data, "GCJ02", from_proj=4326)) == beijing_gcj02
        assert bytes(eviltransform(data, "GCJ02", from_proj="EPSG:4326")) == beijing_gcj02

    def test_custom_from_proj(self, make_ewkb):
        unstamped = make_ewkb(BEIJING, 0)
        stamped = make_ewkb(BEIJING, 990001)
        expected = transform_geometry(stamped, ConversionMode.GCJ_TO_WGS, 4326)

        assert bytes(eviltransform(unstamped, 4326, from_proj="GCJ-02")) == bytes(expected)
        assert bytes(eviltransform(unstamped, 4326, from_proj=990001)) == bytes(expected)

    def test_custom_from_proj_to_projected(self, make_ewkb):
        unstamped = make_ewkb(BEIJING, 0)
        stamped = make_ewkb(BEIJING, 990002)
        expected = eviltransform(stamped, 3857)

        assert bytes(eviltransform(unstamped, "EPSG:3857", from_proj="BD09")) == bytes(expected)

    def test_proj_string_target(self, beijing_wgs84, read_ewkb):
        out = eviltransform(beijing_wgs84, "+proj=merc +datum=WGS84 +units=m +no_defs")
        geometry, srid = read_ewkb(out.data)

        assert srid == 0
        assert geometry.GetX() == pytest.approx(12958034.0, abs=1.0)


class TestErrors:
    def test_no_srid(self, make_ewkb):
        data = make_ewkb(BEIJING, 0)

        with pytest.raises(ValueError):
            eviltransform(data, "GCJ02")

        with pytest.raises(ValueError):
            reproject_geometry(data, 3857)

    def test_bad_projection(self, beijing_wgs84):
        with pytest.raises(ValueError):
            eviltransform(beijing_wgs84, "not a projection")

    def test_bad_types(self, beijing_wgs84):
        with pytest.raises(TypeError):
            eviltransform("POINT (1 2)", 4326)

        with pytest.raises(TypeError):
            eviltransform(beijing_wgs84, 4326.0)

    def test_reproject_rejects_custom(self, beijing_wgs84):
        with pytest.raises(ValueError):
            reproject_geometry(beijing_wgs84, "GCJ02")
