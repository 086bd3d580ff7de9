"""### Convert coordinates between WGS-84, GCJ-02 and BD-09. ###

All functions take and return `(lat, lng)` in degrees. Outside mainland China every
conversion is the identity.

The constants and the order of the floating-point operations follow the de facto
reference algorithm, so results are reproducible bit for bit. Do not reorder the sums.
"""

# Standard Library
import math
from typing import Tuple


EARTH_R = 6378137.0
EE = 0.00669342162296594323
X_PI = math.pi * 3000.0 / 180.0

CHINA_LNG_MIN = 72.004
CHINA_LNG_MAX = 137.8347
CHINA_LAT_MIN = 0.8293
CHINA_LAT_MAX = 55.8271


def out_of_china(lat: float, lng: float) -> bool:
    """Tests if a point lies outside the mainland China bounding box.

    Parameters
    ----------
    lat : float
        Latitude in degrees.
    lng : float
        Longitude in degrees.

    Returns
    -------
    bool
        True if the point is outside the box and must not be shifted.
    """
    return lng < CHINA_LNG_MIN or lng > CHINA_LNG_MAX or lat < CHINA_LAT_MIN or lat > CHINA_LAT_MAX


def _transform_offset(x: float, y: float) -> Tuple[float, float]:
    """Planar perturbation in metres for `x = lng - 105`, `y = lat - 35`.

    Returns
    -------
    Tuple[float, float]
        The (lat, lng) channel offsets, not yet converted to degrees.
    """
    xy = x * y
    abs_x = math.sqrt(abs(x))
    x_pi = x * math.pi
    y_pi = y * math.pi
    d = 20.0 * math.sin(6.0 * x_pi) + 20.0 * math.sin(2.0 * x_pi)

    lat = d
    lng = d

    lat += 20.0 * math.sin(y_pi) + 40.0 * math.sin(y_pi / 3.0)
    lng += 20.0 * math.sin(x_pi) + 40.0 * math.sin(x_pi / 3.0)

    lat += 160.0 * math.sin(y_pi / 12.0) + 320.0 * math.sin(y_pi / 30.0)
    lng += 150.0 * math.sin(x_pi / 12.0) + 300.0 * math.sin(x_pi / 30.0)

    lat *= 2.0 / 3.0
    lng *= 2.0 / 3.0

    lat += -100.0 + 2.0 * x + 3.0 * y + 0.2 * y * y + 0.1 * xy + 0.2 * abs_x
    lng += 300.0 + x + 2.0 * y + 0.1 * x * x + 0.1 * xy + 0.1 * abs_x

    return lat, lng


def _delta(lat: float, lng: float) -> Tuple[float, float]:
    """GCJ-02 offset in degrees, evaluated at the given point.

    The planar offset is scaled with the WGS-84 meridian radius of curvature (latitude)
    and the prime vertical radius times cos(latitude) (longitude).
    """
    d_lat, d_lng = _transform_offset(lng - 105.0, lat - 35.0)
    rad_lat = lat / 180.0 * math.pi
    magic = math.sin(rad_lat)
    magic = 1.0 - EE * magic * magic
    sqrt_magic = math.sqrt(magic)

    d_lat = (d_lat * 180.0) / ((EARTH_R * (1.0 - EE)) / (magic * sqrt_magic) * math.pi)
    d_lng = (d_lng * 180.0) / (EARTH_R / sqrt_magic * math.cos(rad_lat) * math.pi)

    return d_lat, d_lng


def wgs_to_gcj(lat: float, lng: float) -> Tuple[float, float]:
    """Converts a WGS-84 coordinate to GCJ-02.

    Parameters
    ----------
    lat : float
        WGS-84 latitude in degrees.
    lng : float
        WGS-84 longitude in degrees.

    Returns
    -------
    Tuple[float, float]
        The GCJ-02 (lat, lng). Unchanged outside China.
    """
    if out_of_china(lat, lng):
        return lat, lng

    d_lat, d_lng = _delta(lat, lng)

    return lat + d_lat, lng + d_lng


def gcj_to_wgs(lat: float, lng: float) -> Tuple[float, float]:
    """Converts a GCJ-02 coordinate to WGS-84.

    This is an approximate inverse: the offset is evaluated at the GCJ-02 point instead of
    being solved for. The round trip error is a few 1e-5 degrees at most inside China.

    Parameters
    ----------
    lat : float
        GCJ-02 latitude in degrees.
    lng : float
        GCJ-02 longitude in degrees.

    Returns
    -------
    Tuple[float, float]
        The WGS-84 (lat, lng). Unchanged outside China.
    """
    if out_of_china(lat, lng):
        return lat, lng

    d_lat, d_lng = _delta(lat, lng)

    return lat - d_lat, lng - d_lng


def gcj_to_bd(lat: float, lng: float) -> Tuple[float, float]:
    """Converts a GCJ-02 coordinate to BD-09 with the polar warp.

    Parameters
    ----------
    lat : float
        GCJ-02 latitude in degrees.
    lng : float
        GCJ-02 longitude in degrees.

    Returns
    -------
    Tuple[float, float]
        The BD-09 (lat, lng). Unchanged outside China.
    """
    if out_of_china(lat, lng):
        return lat, lng

    z = math.sqrt(lng * lng + lat * lat) + 0.00002 * math.sin(lat * X_PI)
    theta = math.atan2(lat, lng) + 0.000003 * math.cos(lng * X_PI)

    return z * math.sin(theta) + 0.006, z * math.cos(theta) + 0.0065


def bd_to_gcj(lat: float, lng: float) -> Tuple[float, float]:
    """Converts a BD-09 coordinate to GCJ-02 with the inverse polar warp.

    Parameters
    ----------
    lat : float
        BD-09 latitude in degrees.
    lng : float
        BD-09 longitude in degrees.

    Returns
    -------
    Tuple[float, float]
        The GCJ-02 (lat, lng). Unchanged outside China.
    """
    if out_of_china(lat, lng):
        return lat, lng

    x = lng - 0.0065
    y = lat - 0.006
    z = math.sqrt(x * x + y * y) - 0.00002 * math.sin(y * X_PI)
    theta = math.atan2(y, x) - 0.000003 * math.cos(x * X_PI)

    return z * math.sin(theta), z * math.cos(theta)


def wgs_to_bd(lat: float, lng: float) -> Tuple[float, float]:
    """Converts a WGS-84 coordinate to BD-09, through GCJ-02."""
    gcj_lat, gcj_lng = wgs_to_gcj(lat, lng)

    return gcj_to_bd(gcj_lat, gcj_lng)


def bd_to_wgs(lat: float, lng: float) -> Tuple[float, float]:
    """Converts a BD-09 coordinate to WGS-84, through GCJ-02."""
    gcj_lat, gcj_lng = bd_to_gcj(lat, lng)

    return gcj_to_wgs(gcj_lat, gcj_lng)
