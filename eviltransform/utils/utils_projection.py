"""### Utility functions to work with SRIDs and projections. ###

The GCJ-02 and BD-09 systems have no EPSG code. They are identified by the custom SRIDs
990001 and 990002, which osr does not know about, so they are resolved here before osr is asked.
"""

# Standard Library
from typing import Union, Optional

# External
from osgeo import gdal, osr

# Internal
from eviltransform.utils import utils_base


SRID_UNKNOWN = 0
SRID_WGS84 = 4326
SRID_GCJ02 = 990001
SRID_BD09 = 990002

CUSTOM_SRIDS = (SRID_GCJ02, SRID_BD09)

_CUSTOM_SRID_NAMES = {
    "990001": SRID_GCJ02,
    "EPSG:990001": SRID_GCJ02,
    "GCJ02": SRID_GCJ02,
    "GCJ-02": SRID_GCJ02,
    "990002": SRID_BD09,
    "EPSG:990002": SRID_BD09,
    "BD09": SRID_BD09,
    "BD-09": SRID_BD09,
}


def parse_custom_srid(alias: Union[str, int]) -> Optional[int]:
    """Resolves a textual name of GCJ-02 or BD-09 to its custom SRID.

    Parameters
    ----------
    alias : Union[str, int]
        The projection name. Case and surrounding whitespace are ignored.
        Accepted: `990001`, `EPSG:990001`, `GCJ02`, `GCJ-02`, `990002`, `EPSG:990002`, `BD09`, `BD-09`.

    Returns
    -------
    Optional[int]
        990001 for GCJ-02, 990002 for BD-09, None for anything else.
    """
    utils_base._type_check(alias, [str, int], "alias")

    if isinstance(alias, int):
        return alias if alias in CUSTOM_SRIDS else None

    return _CUSTOM_SRID_NAMES.get(alias.strip().upper())


def _check_srid_is_custom(srid: int) -> bool:
    """Check if an SRID is one of GCJ-02 (990001) or BD-09 (990002)."""
    return srid in CUSTOM_SRIDS


def parse_projection(
    projection: Union[str, int, osr.SpatialReference],
) -> osr.SpatialReference:
    """Parses an EPSG code, an `EPSG:n` string, WKT, a PROJ string or an osr.SpatialReference.

    The returned reference uses the traditional GIS axis order (x=lng, y=lat), which is the
    order geometry vertices are stored in.

    Parameters
    ----------
    projection : Union[str, int, osr.SpatialReference]
        The projection to parse.

    Returns
    -------
    osr.SpatialReference
        The projection as an osr.SpatialReference

    Raises
    ------
    ValueError
        If projection is None, a custom SRID, or cannot be parsed
    """
    if projection is None:
        raise ValueError("Projection cannot be None")

    utils_base._type_check(projection, [str, int, osr.SpatialReference], "projection")

    if not isinstance(projection, osr.SpatialReference) and parse_custom_srid(projection) is not None:
        raise ValueError(f"GCJ-02 and BD-09 are not osr projections: {projection}")

    target_proj = osr.SpatialReference()
    gdal.PushErrorHandler("CPLQuietErrorHandler")

    try:
        if isinstance(projection, osr.SpatialReference):
            if not projection.ExportToWkt():
                raise ValueError("Spatial reference is empty")
            target_proj = projection.Clone()

        elif isinstance(projection, int):
            if target_proj.ImportFromEPSG(projection) != 0:
                raise ValueError(f"Invalid EPSG code: {projection}")

        else:
            parsed = False
            if projection.strip().upper().startswith("EPSG:"):
                try:
                    epsg = int(projection.strip().split(":")[1])
                    parsed = target_proj.ImportFromEPSG(epsg) == 0
                except (ValueError, IndexError):
                    parsed = False

            if not parsed:
                for import_func in (target_proj.ImportFromWkt, target_proj.ImportFromProj4):
                    try:
                        if import_func(projection) == 0:
                            parsed = True
                            break
                    except RuntimeError:
                        continue

            if not parsed:
                raise ValueError(f"Could not parse projection string: {projection}")

    except Exception as e:
        raise ValueError(f"Failed to parse projection: {str(e)}") from e
    finally:
        gdal.PopErrorHandler()

    target_proj.SetAxisMappingStrategy(osr.OAMS_TRADITIONAL_GIS_ORDER)

    return target_proj


def _get_srid_from_projection(projection: osr.SpatialReference) -> int:
    """Get the EPSG code of a projection, to be stored as a geometry SRID.

    Parameters
    ----------
    projection : osr.SpatialReference
        The projection.

    Returns
    -------
    int
        The EPSG code, or 0 (unknown) if the projection has none.
    """
    utils_base._type_check(projection, [osr.SpatialReference], "projection")

    if projection.GetAuthorityName(None) != "EPSG":
        return SRID_UNKNOWN

    code = projection.GetAuthorityCode(None)

    try:
        return int(code)
    except (TypeError, ValueError):
        return SRID_UNKNOWN


def _check_srid_is_geographic(srid: int) -> bool:
    """Check if an SRID names a geographic (lat/lng) coordinate system.

    WGS84 and the two custom systems are geographic. Other SRIDs are looked up as EPSG codes.
    Unknown SRIDs are not geographic.

    Parameters
    ----------
    srid : int
        The SRID to check.

    Returns
    -------
    bool
        True if the SRID is geographic, False otherwise.
    """
    if srid == SRID_WGS84 or _check_srid_is_custom(srid):
        return True

    if srid <= SRID_UNKNOWN:
        return False

    spatial_ref = osr.SpatialReference()
    gdal.PushErrorHandler("CPLQuietErrorHandler")

    try:
        if spatial_ref.ImportFromEPSG(srid) != 0:
            return False
    except RuntimeError:
        return False
    finally:
        gdal.PopErrorHandler()

    return bool(spatial_ref.IsGeographic())
