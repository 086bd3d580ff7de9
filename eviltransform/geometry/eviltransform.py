"""### Transform geometries between any SRIDs, including GCJ-02 and BD-09. ###

GCJ-02 (SRID 990001) and BD-09 (SRID 990002) are reached through WGS-84 with the conversion modes.
Every other pair of projections is handed to osr.

    >>> import eviltransform as et
    >>> gcj = et.eviltransform(wgs84_ewkb, "GCJ02")
    >>> et.read_spatial_reference_id(gcj.data)
    990001
"""

# Standard Library
from typing import Union, Optional

# Internal
from eviltransform.utils import utils_base, utils_projection
from eviltransform.utils.utils_projection import SRID_UNKNOWN, SRID_WGS84, SRID_GCJ02, SRID_BD09
from eviltransform.core_coords.core_coords_modes import ConversionMode
from eviltransform.core_geometry.core_geometry_context import get_engine_context
from eviltransform.core_geometry.core_geometry_transform import (
    OwnedBuffer,
    read_spatial_reference_id,
    transform_geometry,
    release,
)


Buffer = Union[bytes, bytearray, memoryview]


def _copy_geometry(geometry: Buffer, srid: Optional[int] = None) -> OwnedBuffer:
    """Copies a geometry into a caller-owned buffer, optionally stamping a new SRID."""
    context = get_engine_context()

    output = context.allocate(len(geometry))
    output[:] = geometry

    if srid is not None:
        context.engine.set_srid(output, srid)

    return OwnedBuffer(output)


def reproject_geometry(
    geometry: Buffer,
    to_proj: Union[str, int],
    from_proj: Optional[Union[str, int]] = None,
) -> OwnedBuffer:
    """Reprojects a serialized geometry with osr.

    Parameters
    ----------
    geometry : Union[bytes, bytearray, memoryview]
        The serialized geometry (EWKB).
    to_proj : Union[str, int]
        The target projection. EPSG code, `EPSG:n`, WKT or PROJ string.
    from_proj : Optional[Union[str, int]], optional
        The source projection. Default: the SRID of the geometry.

    Returns
    -------
    OwnedBuffer
        The reprojected geometry. Its SRID is the EPSG code of the target, or 0.

    Raises
    ------
    ValueError
        If a projection cannot be parsed, is GCJ-02/BD-09, or the geometry has no SRID and no from_proj.
    """
    utils_base._type_check(geometry, [bytes, bytearray, memoryview], "geometry")
    utils_base._type_check(to_proj, [str, int], "to_proj")
    utils_base._type_check(from_proj, [str, int, None], "from_proj")

    context = get_engine_context()
    engine = context.engine

    if from_proj is None:
        from_proj = engine.get_srid(geometry)

        if from_proj == SRID_UNKNOWN:
            raise ValueError("Geometry has no SRID. Specify from_proj.")

    source_srs = utils_projection.parse_projection(from_proj)
    target_srs = utils_projection.parse_projection(to_proj)

    handle = engine.decode(geometry)
    encoded = None

    try:
        engine.reproject(handle, source_srs, target_srs)
        encoded = engine.encode(handle, utils_projection._check_srid_is_geographic(handle.srid))

        output = context.allocate(len(encoded))
        output[:] = encoded

        return OwnedBuffer(output)

    finally:
        if encoded is not None:
            engine.free(encoded)
        engine.destroy_handle(handle)


def _reproject_and_release(wgs: OwnedBuffer, to_proj: Union[str, int]) -> OwnedBuffer:
    try:
        return reproject_geometry(wgs.data, to_proj, from_proj=SRID_WGS84)
    finally:
        release(wgs)


def _route_srid(geometry: Buffer, src_srid: int, dst_srid: int) -> OwnedBuffer:
    """Transforms between two integer SRIDs, going through WGS-84 where GCJ-02 or BD-09 are involved."""
    if src_srid == dst_srid:
        return _copy_geometry(geometry)

    src_custom = utils_projection._check_srid_is_custom(src_srid)
    dst_custom = utils_projection._check_srid_is_custom(dst_srid)

    if not src_custom and not dst_custom:
        return reproject_geometry(geometry, dst_srid, from_proj=src_srid)

    if src_srid == SRID_GCJ02 and dst_srid == SRID_BD09:
        return transform_geometry(geometry, ConversionMode.GCJ_TO_BD, SRID_BD09)

    if src_srid == SRID_BD09 and dst_srid == SRID_GCJ02:
        return transform_geometry(geometry, ConversionMode.BD_TO_GCJ, SRID_GCJ02)

    if src_custom:
        mode = ConversionMode.GCJ_TO_WGS if src_srid == SRID_GCJ02 else ConversionMode.BD_TO_WGS
        wgs = transform_geometry(geometry, mode, SRID_WGS84)

        if dst_srid == SRID_WGS84:
            return wgs

        return _reproject_and_release(wgs, dst_srid)

    mode = ConversionMode.WGS_TO_GCJ if dst_srid == SRID_GCJ02 else ConversionMode.WGS_TO_BD

    if src_srid == SRID_WGS84:
        return transform_geometry(geometry, mode, dst_srid)

    wgs = reproject_geometry(geometry, SRID_WGS84, from_proj=src_srid)

    try:
        return transform_geometry(wgs.data, mode, dst_srid)
    finally:
        release(wgs)


def eviltransform(
    geometry: Buffer,
    to_proj: Union[str, int],
    from_proj: Optional[Union[str, int]] = None,
) -> OwnedBuffer:
    """Transforms a serialized geometry to another projection, GCJ-02 and BD-09 included.

    Parameters
    ----------
    geometry : Union[bytes, bytearray, memoryview]
        The serialized geometry (EWKB). Borrowed, not modified.
    to_proj : Union[str, int]
        The target. An SRID, `GCJ02`/`GCJ-02`/`BD09`/`BD-09`/`EPSG:990001`/..., or anything osr can parse.
    from_proj : Optional[Union[str, int]], optional
        The source, in the same forms as to_proj. Overrides the SRID of the geometry. Default: None

    Returns
    -------
    OwnedBuffer
        The transformed geometry, owned by the caller.

    Raises
    ------
    ValueError
        If the geometry has no SRID and no from_proj is given, or a projection cannot be parsed.
    GeometryTransformError
        If a GCJ-02/BD-09 conversion fails.
    """
    utils_base._type_check(geometry, [bytes, bytearray, memoryview], "geometry")
    utils_base._type_check(to_proj, [str, int], "to_proj")
    utils_base._type_check(from_proj, [str, int, None], "from_proj")

    dst_srid = to_proj if isinstance(to_proj, int) else utils_projection.parse_custom_srid(to_proj)

    if from_proj is None:
        src_srid = read_spatial_reference_id(geometry)

        if src_srid == SRID_UNKNOWN:
            raise ValueError("Geometry has no SRID. Specify from_proj.")

        if dst_srid is not None:
            return _route_srid(geometry, src_srid, dst_srid)

        if utils_projection._check_srid_is_custom(src_srid):
            return _reproject_and_release(_route_srid(geometry, src_srid, SRID_WGS84), to_proj)

        return reproject_geometry(geometry, to_proj, from_proj=src_srid)

    src_custom = utils_projection.parse_custom_srid(from_proj)

    if src_custom is not None:
        stamped = _copy_geometry(geometry, srid=src_custom)

        try:
            if dst_srid is not None:
                return _route_srid(stamped.data, src_custom, dst_srid)

            return _reproject_and_release(_route_srid(stamped.data, src_custom, SRID_WGS84), to_proj)
        finally:
            release(stamped)

    if dst_srid is not None and utils_projection._check_srid_is_custom(dst_srid):
        wgs = reproject_geometry(geometry, SRID_WGS84, from_proj=from_proj)

        try:
            return _route_srid(wgs.data, SRID_WGS84, dst_srid)
        finally:
            release(wgs)

    return reproject_geometry(geometry, to_proj, from_proj=from_proj)
