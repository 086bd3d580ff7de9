"""Common test fixtures for all test modules."""

import os
import sys
import pytest
from osgeo import ogr

# Add the parent directory to sys.path for imports
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from eviltransform.core_geometry import core_geometry_ewkb
from eviltransform.core_geometry.core_geometry_context import _reset_engine_context


def _make_ewkb(wkt, srid=4326, byte_order=ogr.wkbNDR):
    geometry = ogr.CreateGeometryFromWkt(wkt)
    wkb = core_geometry_ewkb._iso_to_ewkb(geometry.ExportToIsoWkb(byte_order))
    return bytes(core_geometry_ewkb._ewkb_set_srid(wkb, srid))


def _read_ewkb(data):
    wkb, srid, _endian = core_geometry_ewkb._ewkb_strip_srid(bytes(data))
    wkb = core_geometry_ewkb._ewkb_to_iso(wkb)
    return ogr.CreateGeometryFromWkb(wkb), srid


def _list_vertices(geometry, vertices=None):
    """Returns [(path, x, y)] for every vertex, where path is the index chain into sub-geometries."""
    if vertices is None:
        vertices = []

    def walk(geom, path):
        if geom.GetGeometryCount() > 0:
            for idx in range(geom.GetGeometryCount()):
                walk(geom.GetGeometryRef(idx), path + (idx,))
            return
        for idx in range(geom.GetPointCount()):
            vertices.append((path + (idx,), geom.GetX(idx), geom.GetY(idx)))

    walk(geometry, ())
    return vertices


@pytest.fixture
def make_ewkb():
    """Returns a function that builds EWKB from WKT: make_ewkb(wkt, srid=4326, byte_order=ogr.wkbNDR)."""
    return _make_ewkb


@pytest.fixture
def read_ewkb():
    """Returns a function that reads EWKB into (ogr.Geometry, srid)."""
    return _read_ewkb


@pytest.fixture
def list_vertices():
    """Returns a function that lists (path, x, y) for each vertex of an ogr.Geometry."""
    return _list_vertices


@pytest.fixture
def point_wgs84():
    """POINT (120 30) in WGS84 as EWKB."""
    return _make_ewkb("POINT (120 30)", 4326)


@pytest.fixture
def nested_collection_wgs84():
    """A geometry collection nesting a point, a line, a polygon with a hole and a multipolygon."""
    wkt = (
        "GEOMETRYCOLLECTION ("
        "POINT (116.404 39.915),"
        "LINESTRING (121.47 31.23, 121.48 31.24, 121.49 31.25),"
        "POLYGON ((113.2 23.1, 113.4 23.1, 113.4 23.3, 113.2 23.3, 113.2 23.1),"
        "(113.25 23.15, 113.35 23.15, 113.35 23.25, 113.25 23.15)),"
        "MULTIPOLYGON (((104.0 30.6, 104.1 30.6, 104.1 30.7, 104.0 30.6)),"
        "((-120.0 30.0, -119.0 30.0, -119.0 31.0, -120.0 30.0)))"
        ")"
    )
    return _make_ewkb(wkt, 4326)


@pytest.fixture(autouse=True)
def fresh_engine_context():
    """Every test starts without a shared engine context."""
    _reset_engine_context()
    yield
    _reset_engine_context()
