"""### Coordinate conversion between WGS-84, GCJ-02 and BD-09. ###"""

from .core_coords_convert import (
    out_of_china,
    wgs_to_gcj,
    gcj_to_wgs,
    gcj_to_bd,
    bd_to_gcj,
    wgs_to_bd,
    bd_to_wgs,
)
from .core_coords_modes import ConversionMode, apply_conversion, check_conversion_mode
from .core_coords_array import convert_coordinates
