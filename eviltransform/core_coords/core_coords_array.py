"""### Convert arrays of coordinates between WGS-84, GCJ-02 and BD-09. ###

Compiled counterparts of `core_coords_convert`, for bulk data such as point clouds or
GPS tracks held in numpy arrays. Arrays are laid out as (x=lng, y=lat) rows, the
same axis order geometry vertices use.
"""

# Standard Library
import math
from typing import Union, List
from warnings import warn

# External
import numpy as np
from numba import jit, prange

# Internal
from eviltransform.utils import utils_base
from eviltransform.core_coords.core_coords_convert import (
    EARTH_R,
    EE,
    X_PI,
    CHINA_LNG_MIN,
    CHINA_LNG_MAX,
    CHINA_LAT_MIN,
    CHINA_LAT_MAX,
)


@jit(nopython=True, nogil=True, inline="always")
def _out_of_china(lat: float, lng: float) -> bool:
    return lng < CHINA_LNG_MIN or lng > CHINA_LNG_MAX or lat < CHINA_LAT_MIN or lat > CHINA_LAT_MAX


@jit(nopython=True, nogil=True, inline="always")
def _delta(lat: float, lng: float):
    x = lng - 105.0
    y = lat - 35.0
    xy = x * y
    abs_x = math.sqrt(abs(x))
    x_pi = x * math.pi
    y_pi = y * math.pi
    d = 20.0 * math.sin(6.0 * x_pi) + 20.0 * math.sin(2.0 * x_pi)

    d_lat = d
    d_lng = d

    d_lat += 20.0 * math.sin(y_pi) + 40.0 * math.sin(y_pi / 3.0)
    d_lng += 20.0 * math.sin(x_pi) + 40.0 * math.sin(x_pi / 3.0)

    d_lat += 160.0 * math.sin(y_pi / 12.0) + 320.0 * math.sin(y_pi / 30.0)
    d_lng += 150.0 * math.sin(x_pi / 12.0) + 300.0 * math.sin(x_pi / 30.0)

    d_lat *= 2.0 / 3.0
    d_lng *= 2.0 / 3.0

    d_lat += -100.0 + 2.0 * x + 3.0 * y + 0.2 * y * y + 0.1 * xy + 0.2 * abs_x
    d_lng += 300.0 + x + 2.0 * y + 0.1 * x * x + 0.1 * xy + 0.1 * abs_x

    rad_lat = lat / 180.0 * math.pi
    magic = math.sin(rad_lat)
    magic = 1.0 - EE * magic * magic
    sqrt_magic = math.sqrt(magic)

    d_lat = (d_lat * 180.0) / ((EARTH_R * (1.0 - EE)) / (magic * sqrt_magic) * math.pi)
    d_lng = (d_lng * 180.0) / (EARTH_R / sqrt_magic * math.cos(rad_lat) * math.pi)

    return d_lat, d_lng


@jit(nopython=True, nogil=True, inline="always")
def _wgs_to_gcj(lat: float, lng: float):
    if _out_of_china(lat, lng):
        return lat, lng
    d_lat, d_lng = _delta(lat, lng)
    return lat + d_lat, lng + d_lng


@jit(nopython=True, nogil=True, inline="always")
def _gcj_to_wgs(lat: float, lng: float):
    if _out_of_china(lat, lng):
        return lat, lng
    d_lat, d_lng = _delta(lat, lng)
    return lat - d_lat, lng - d_lng


@jit(nopython=True, nogil=True, inline="always")
def _gcj_to_bd(lat: float, lng: float):
    if _out_of_china(lat, lng):
        return lat, lng
    z = math.sqrt(lng * lng + lat * lat) + 0.00002 * math.sin(lat * X_PI)
    theta = math.atan2(lat, lng) + 0.000003 * math.cos(lng * X_PI)
    return z * math.sin(theta) + 0.006, z * math.cos(theta) + 0.0065


@jit(nopython=True, nogil=True, inline="always")
def _bd_to_gcj(lat: float, lng: float):
    if _out_of_china(lat, lng):
        return lat, lng
    x = lng - 0.0065
    y = lat - 0.006
    z = math.sqrt(x * x + y * y) - 0.00002 * math.sin(y * X_PI)
    theta = math.atan2(y, x) - 0.000003 * math.cos(x * X_PI)
    return z * math.sin(theta), z * math.cos(theta)


@jit(nopython=True, nogil=True, inline="always")
def _apply_conversion(mode: int, lat: float, lng: float):
    if mode == 1:
        return _wgs_to_gcj(lat, lng)
    if mode == 2:
        return _gcj_to_wgs(lat, lng)
    if mode == 3:
        gcj_lat, gcj_lng = _wgs_to_gcj(lat, lng)
        return _gcj_to_bd(gcj_lat, gcj_lng)
    if mode == 4:
        gcj_lat, gcj_lng = _bd_to_gcj(lat, lng)
        return _gcj_to_wgs(gcj_lat, gcj_lng)
    if mode == 5:
        return _gcj_to_bd(lat, lng)
    if mode == 6:
        return _bd_to_gcj(lat, lng)
    return lat, lng


@jit(nopython=True, nogil=True)
def _convert_coordinates(coords: np.ndarray, mode: int) -> np.ndarray:
    converted = np.empty_like(coords)

    for i in prange(coords.shape[0]):
        lat, lng = _apply_conversion(mode, coords[i, 1], coords[i, 0])
        converted[i, 0] = lng
        converted[i, 1] = lat

    return converted


def convert_coordinates(
    coords: Union[np.ndarray, List[List[float]]],
    mode: int,
) -> np.ndarray:
    """Converts an array of (lng, lat) coordinates with one of the six conversion modes.

    Parameters
    ----------
    coords : Union[np.ndarray, List[List[float]]]
        An array of shape (n, 2) with longitude in the first and latitude in the second column.
    mode : int
        A `ConversionMode` value. Unknown values leave the coordinates unchanged.

    Returns
    -------
    np.ndarray
        A new float64 array of shape (n, 2). The input is not modified.

    Raises
    ------
    TypeError
        If mode is not an int.
    ValueError
        If coords is not of shape (n, 2).

    Examples
    --------
    >>> convert_coordinates(np.array([[116.404, 39.915]]), ConversionMode.WGS_TO_GCJ)
    array([[116.41024449, 39.91640428]])
    """
    utils_base._type_check(mode, [int], "mode")

    array = np.ascontiguousarray(coords, dtype=np.float64)

    if array.ndim != 2 or array.shape[1] != 2:
        raise ValueError(f"coords must be of shape (n, 2). Received: {array.shape}")

    if array.shape[0] == 0:
        return array.copy()

    converted = _convert_coordinates(array, int(mode))

    non_finite = ~np.isfinite(array).all(axis=1)
    if non_finite.any():
        warn(
            f"{int(non_finite.sum())} non-finite coordinates were passed through unchanged.",
            RuntimeWarning,
        )
        converted[non_finite] = array[non_finite]

    return converted
