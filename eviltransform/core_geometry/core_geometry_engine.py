"""### The geometry engine: decode, walk, mutate and encode serialized geometries with OGR. ###

The engine is the only part of the package that knows the serialized format (EWKB).
The transformer talks to it through a small capability contract:

    decode, open_vertex_iterator, has_next, peek, modify_and_advance,
    encode, get_srid, set_srid, is_geodetic, destroy_handle, destroy_iterator, free

Handles, iterators and encoded buffers are independent objects owned by the request
that created them. The engine keeps no mutable state of its own, so one engine can serve
concurrent requests. Releasing anything twice raises a RuntimeError.
"""

# Standard Library
from contextlib import contextmanager
from typing import List, Tuple, NamedTuple, Optional, Union

# External
from osgeo import gdal, ogr, osr

# Internal
from eviltransform.utils import utils_base, utils_gdal, utils_projection
from eviltransform.core_geometry import core_geometry_ewkb


class Vertex(NamedTuple):
    """One coordinate tuple of a geometry. x is longitude and y is latitude for geographic data."""
    x: float
    y: float
    z: float = 0.0
    m: float = 0.0


class GeometryHandle:
    """A decoded, mutable geometry. Owned by a single request until destroyed."""

    def __init__(self, geometry: ogr.Geometry, srid: int, endian: str):
        self.geometry = geometry
        self.srid = srid
        self.endian = endian
        self.destroyed = False


class VertexIterator:
    """A cursor over the vertices of a handle in traversal order."""

    def __init__(self, handle: GeometryHandle, slots: List[Tuple[ogr.Geometry, int]]):
        self.handle = handle
        self.slots = slots
        self.position = 0
        self.destroyed = False

    def __len__(self) -> int:
        return len(self.slots)


class EngineBuffer(bytearray):
    """A serialized geometry produced by the engine. Must be handed back with `free`.

    EWKB has no geodetic bit, so the flag the geometry was encoded with travels here.
    """
    freed = False
    geodetic = False


def _collect_vertex_slots(
    geometry: ogr.Geometry,
    slots: List[Tuple[ogr.Geometry, int]],
) -> List[Tuple[ogr.Geometry, int]]:
    """Lists (leaf geometry, point index) for every vertex, depth first.

    Members of collections, rings of polygons and parts of compound curves are visited
    in order before the points of any leaf.
    """
    geometry_count = geometry.GetGeometryCount()

    if geometry_count > 0:
        for idx in range(geometry_count):
            _collect_vertex_slots(geometry.GetGeometryRef(idx), slots)
        return slots

    for idx in range(geometry.GetPointCount()):
        slots.append((geometry, idx))

    return slots


def _write_vertex(leaf: ogr.Geometry, index: int, vertex: Vertex) -> None:
    """Writes a vertex without changing the dimensionality of the leaf."""
    has_z = bool(leaf.Is3D())
    has_m = bool(leaf.IsMeasured())

    if has_z and has_m:
        leaf.SetPointZM(index, vertex.x, vertex.y, vertex.z, vertex.m)
    elif has_m:
        leaf.SetPointM(index, vertex.x, vertex.y, vertex.m)
    elif has_z:
        leaf.SetPoint(index, vertex.x, vertex.y, vertex.z)
    else:
        leaf.SetPoint_2D(index, vertex.x, vertex.y)


class OgrGeometryEngine:
    """Geometry engine over OGR, reading and writing PostGIS EWKB.

    Parameters
    ----------
    on_error : Optional[Callable[[int, str], None]], optional
        Receives GDAL failures raised while the engine works. Default: discard.
    on_notice : Optional[Callable[[int, str], None]], optional
        Receives GDAL warnings and debug messages. Default: discard.
    """

    def __init__(self, on_error=None, on_notice=None):
        self._on_error = on_error if on_error is not None else utils_gdal._noop_reporter
        self._error_handler = utils_gdal._gdal_error_handler(on_error, on_notice)

    @contextmanager
    def _diagnostics(self):
        failures = []

        def handler(error_class, error_number, message):
            if error_class in (gdal.CE_Failure, gdal.CE_Fatal):
                failures.append(error_number)
            self._error_handler(error_class, error_number, message)

        gdal.PushErrorHandler(handler)
        try:
            yield
        except Exception as e:
            # With exceptions enabled the bindings raise failures instead of reporting them.
            if not failures:
                self._on_error(gdal.GetLastErrorNo(), str(e))
            raise
        finally:
            gdal.PopErrorHandler()

    def decode(self, data: Union[bytes, bytearray, memoryview]) -> GeometryHandle:
        """Decodes an EWKB buffer into a handle. The buffer is not modified.

        Raises
        ------
        ValueError
            If the header is malformed, or bytes follow the geometry.
        RuntimeError
            If OGR cannot read the geometry.
        """
        wkb, srid, endian = core_geometry_ewkb._ewkb_strip_srid(data)
        wkb = core_geometry_ewkb._ewkb_to_iso(wkb)

        with self._diagnostics():
            geometry = ogr.CreateGeometryFromWkb(wkb)

        if geometry is None:
            raise ValueError("Could not decode geometry from WKB")

        return GeometryHandle(geometry, srid, endian)

    def open_vertex_iterator(self, handle: GeometryHandle) -> VertexIterator:
        """Opens a read-write cursor over every vertex of a handle."""
        if handle.destroyed:
            raise RuntimeError("Cannot iterate a destroyed geometry handle")

        with self._diagnostics():
            slots = _collect_vertex_slots(handle.geometry, [])

        return VertexIterator(handle, slots)

    def has_next(self, iterator: VertexIterator) -> bool:
        if iterator.destroyed:
            raise RuntimeError("Vertex iterator has been destroyed")

        return iterator.position < len(iterator.slots)

    def peek(self, iterator: VertexIterator) -> Vertex:
        """Reads the current vertex without advancing."""
        if not self.has_next(iterator):
            raise IndexError("Vertex iterator is exhausted")

        leaf, index = iterator.slots[iterator.position]

        with self._diagnostics():
            x, y, z, m = leaf.GetPointZM(index)

        return Vertex(x, y, z, m)

    def modify_and_advance(self, iterator: VertexIterator, vertex: Vertex) -> None:
        """Overwrites the current vertex and moves to the next one."""
        if not self.has_next(iterator):
            raise IndexError("Vertex iterator is exhausted")

        leaf, index = iterator.slots[iterator.position]

        with self._diagnostics():
            _write_vertex(leaf, index, vertex)

        iterator.position += 1

    def destroy_iterator(self, iterator: VertexIterator) -> None:
        if iterator.destroyed:
            raise RuntimeError("Vertex iterator destroyed twice")

        iterator.slots = []
        iterator.handle = None
        iterator.destroyed = True

    def destroy_handle(self, handle: GeometryHandle) -> None:
        if handle.destroyed:
            raise RuntimeError("Geometry handle destroyed twice")

        handle.geometry = None
        handle.destroyed = True

    def encode(self, handle: GeometryHandle, geodetic: bool) -> EngineBuffer:
        """Serializes a handle to EWKB in its original byte order, carrying its SRID.

        Parameters
        ----------
        handle : GeometryHandle
            The geometry to encode.
        geodetic : bool
            Carried on the returned buffer. Coordinates are not checked against it.

        Returns
        -------
        EngineBuffer
            The serialized geometry. Must be released with `free`.

        Raises
        ------
        RuntimeError
            If the handle has been destroyed.
        """
        if handle.destroyed:
            raise RuntimeError("Cannot encode a destroyed geometry handle")

        byte_order = ogr.wkbNDR if handle.endian == "<" else ogr.wkbXDR

        with self._diagnostics():
            wkb = handle.geometry.ExportToIsoWkb(byte_order)

        buffer = EngineBuffer(core_geometry_ewkb._iso_to_ewkb(wkb))
        buffer.geodetic = bool(geodetic)

        if len(buffer) > 0:
            core_geometry_ewkb._ewkb_set_srid(buffer, handle.srid)

        return buffer

    def free(self, buffer: EngineBuffer) -> None:
        if buffer.freed:
            raise RuntimeError("Engine buffer freed twice")

        del buffer[:]
        buffer.freed = True

    def get_srid(self, data: Union[bytes, bytearray, memoryview]) -> int:
        """Reads the SRID of an EWKB buffer. 0 if it has none."""
        return core_geometry_ewkb._ewkb_get_srid(data)

    def set_srid(self, buffer: bytearray, srid: int) -> None:
        """Stamps an SRID onto a buffer produced by `encode`, or any EWKB bytearray."""
        if getattr(buffer, "freed", False):
            raise RuntimeError("Cannot set the SRID of a freed engine buffer")

        if not utils_base._check_is_int32(srid):
            raise ValueError(f"SRID must be a 32-bit integer. Received: {srid}")

        core_geometry_ewkb._ewkb_set_srid(buffer, srid)

    def is_geodetic(self, data: Union[bytes, bytearray, memoryview]) -> bool:
        """Tests if a buffer's SRID names a geographic coordinate system."""
        return utils_projection._check_srid_is_geographic(self.get_srid(data))

    def reproject(
        self,
        handle: GeometryHandle,
        source_srs: osr.SpatialReference,
        target_srs: osr.SpatialReference,
        target_srid: Optional[int] = None,
    ) -> None:
        """Reprojects a handle in place with osr and updates its SRID.

        Parameters
        ----------
        handle : GeometryHandle
            The geometry to reproject.
        source_srs : osr.SpatialReference
            The projection the coordinates are in.
        target_srs : osr.SpatialReference
            The projection to reproject to.
        target_srid : Optional[int], optional
            The SRID to store. Default: the EPSG code of target_srs, or 0.
        """
        if handle.destroyed:
            raise RuntimeError("Cannot reproject a destroyed geometry handle")

        with self._diagnostics():
            transformer = osr.CoordinateTransformation(source_srs, target_srs)
            if handle.geometry.Transform(transformer) != 0:
                raise RuntimeError("Error while reprojecting geometry.")

        if target_srid is None:
            target_srid = utils_projection._get_srid_from_projection(target_srs)

        handle.srid = target_srid
