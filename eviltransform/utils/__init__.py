""" ### Various utility functions to work with the underlying systems. ### """

from .utils_projection import (
    SRID_UNKNOWN,
    SRID_WGS84,
    SRID_GCJ02,
    SRID_BD09,
    parse_custom_srid,
    parse_projection,
)
