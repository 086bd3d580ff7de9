"""### Dispatch a conversion mode to the coordinate converters. ###"""

# Standard Library
from enum import IntEnum
from typing import Any, Tuple

# Internal
from eviltransform.core_coords.core_coords_convert import (
    wgs_to_gcj,
    gcj_to_wgs,
    gcj_to_bd,
    bd_to_gcj,
)


class ConversionMode(IntEnum):
    """The six conversion directions. The integer values are part of the public interface."""
    WGS_TO_GCJ = 1
    GCJ_TO_WGS = 2
    WGS_TO_BD = 3
    BD_TO_WGS = 4
    GCJ_TO_BD = 5
    BD_TO_GCJ = 6


def check_conversion_mode(mode: Any) -> bool:
    """Check if a value names one of the six conversion modes.

    Parameters
    ----------
    mode : Any
        The value to check.

    Returns
    -------
    bool
        True if the value is an int between 1 and 6, False otherwise.
    """
    if isinstance(mode, bool) or not isinstance(mode, int):
        return False

    return ConversionMode.WGS_TO_GCJ <= mode <= ConversionMode.BD_TO_GCJ


def apply_conversion(mode: int, lat: float, lng: float) -> Tuple[float, float]:
    """Converts one coordinate with the given mode.

    WGS-84 to and from BD-09 go through GCJ-02. Unknown modes return the input unchanged;
    callers that need stricter behaviour must check the mode with `check_conversion_mode`.

    Parameters
    ----------
    mode : int
        A `ConversionMode` value.
    lat : float
        Latitude in degrees.
    lng : float
        Longitude in degrees.

    Returns
    -------
    Tuple[float, float]
        The converted (lat, lng).
    """
    if mode == ConversionMode.WGS_TO_GCJ:
        return wgs_to_gcj(lat, lng)

    if mode == ConversionMode.GCJ_TO_WGS:
        return gcj_to_wgs(lat, lng)

    if mode == ConversionMode.GCJ_TO_BD:
        return gcj_to_bd(lat, lng)

    if mode == ConversionMode.BD_TO_GCJ:
        return bd_to_gcj(lat, lng)

    if mode == ConversionMode.WGS_TO_BD:
        gcj_lat, gcj_lng = wgs_to_gcj(lat, lng)
        return gcj_to_bd(gcj_lat, gcj_lng)

    if mode == ConversionMode.BD_TO_WGS:
        gcj_lat, gcj_lng = bd_to_gcj(lat, lng)
        return gcj_to_wgs(gcj_lat, gcj_lng)

    return lat, lng
