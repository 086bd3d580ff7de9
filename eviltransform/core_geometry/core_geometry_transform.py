"""### Convert every vertex of a serialized geometry between WGS-84, GCJ-02 and BD-09. ###

One call decodes the geometry, rewrites each vertex in place with the chosen conversion mode,
encodes the result and stamps it with the destination SRID.

Ownership:
    * The input buffer is borrowed. It is read, never modified.
    * The decoded handle, its vertex iterator and the engine's encoded buffer belong to the call.
      They are released before the call returns, on success and on every failure.
    * The returned `OwnedBuffer` belongs to the caller, who may read it, modify it and `release` it.

Every failure raises a `GeometryTransformError` whose `kind` names the step that failed.
"""

# Standard Library
from typing import Optional, Union
from warnings import warn

# Internal
from eviltransform.utils import utils_base
from eviltransform.core_coords.core_coords_modes import apply_conversion, check_conversion_mode
from eviltransform.core_geometry.core_geometry_context import EngineContext, get_engine_context
from eviltransform.core_geometry.core_geometry_errors import ErrorKind, GeometryTransformError


class OwnedBuffer:
    """A serialized geometry owned by the caller.

    The bytes stay available until `release` is called. Releasing twice is a no-op.
    Can be used as a context manager, which releases on exit.
    """

    __slots__ = ("_data",)

    def __init__(self, data: bytearray):
        self._data = data

    @property
    def data(self) -> bytearray:
        if self._data is None:
            raise ValueError("Buffer has been released")
        return self._data

    @property
    def released(self) -> bool:
        return self._data is None

    def release(self) -> None:
        self._data = None

    def __len__(self) -> int:
        return len(self.data)

    def __bytes__(self) -> bytes:
        return bytes(self.data)

    def __enter__(self) -> "OwnedBuffer":
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self.release()

    def __repr__(self) -> str:
        if self._data is None:
            return "OwnedBuffer(released)"
        return f"OwnedBuffer({len(self._data)} bytes)"


def release(buffer: Optional[OwnedBuffer]) -> None:
    """Releases a buffer returned by a transform. No-op for None or an already released buffer."""
    if buffer is None:
        return

    utils_base._type_check(buffer, [OwnedBuffer], "buffer")
    buffer.release()


class GeometryPointTransformer:
    """Applies a conversion mode to every vertex of serialized geometries.

    Parameters
    ----------
    context : EngineContext
        The engine context to work with.
    """

    def __init__(self, context: EngineContext):
        utils_base._type_check(context, [EngineContext], "context")

        self._context = context
        self._engine = context.engine

    def read_srid(self, buffer: Union[bytes, bytearray, memoryview]) -> int:
        """Reads the SRID of a serialized geometry without modifying it.

        Parameters
        ----------
        buffer : Union[bytes, bytearray, memoryview]
            The serialized geometry.

        Returns
        -------
        int
            The SRID. 0 if the geometry carries none.

        Raises
        ------
        GeometryTransformError
            INVALID_ARGUMENT if the buffer is missing, DECODE_FAILURE if its header is unreadable.
        """
        if buffer is None or not utils_base._check_is_buffer(buffer):
            raise GeometryTransformError(ErrorKind.INVALID_ARGUMENT, "buffer must be bytes-like")

        try:
            return self._engine.get_srid(buffer)
        except Exception as e:  # pylint: disable=broad-except
            raise GeometryTransformError(ErrorKind.DECODE_FAILURE, f"Could not read SRID: {e}") from e

    def transform(
        self,
        buffer: Union[bytes, bytearray, memoryview],
        mode: int,
        destination_srid: int,
    ) -> OwnedBuffer:
        """Converts every vertex of a serialized geometry and stamps the destination SRID.

        The vertex count and nesting of the geometry are unchanged. Only coordinate values change.
        The output SRID is `destination_srid` whatever the mode.

        Parameters
        ----------
        buffer : Union[bytes, bytearray, memoryview]
            The serialized geometry. Borrowed, not modified.
        mode : int
            A `ConversionMode` value. Unknown values leave the coordinates unchanged and warn.
        destination_srid : int
            The SRID to stamp on the output. Must fit in 32 bits.

        Returns
        -------
        OwnedBuffer
            The converted geometry, owned by the caller.

        Raises
        ------
        GeometryTransformError
            With the kind of the step that failed.
        """
        if buffer is None or not utils_base._check_is_buffer(buffer):
            raise GeometryTransformError(ErrorKind.INVALID_ARGUMENT, "buffer must be bytes-like")

        if isinstance(mode, bool) or not isinstance(mode, int):
            raise GeometryTransformError(ErrorKind.INVALID_ARGUMENT, f"mode must be an int. Received: {type(mode)}")

        if not utils_base._check_is_int32(destination_srid):
            raise GeometryTransformError(
                ErrorKind.INVALID_ARGUMENT,
                f"destination_srid must be a 32-bit integer. Received: {destination_srid}",
            )

        if not check_conversion_mode(mode):
            warn(f"Unknown conversion mode {mode}, coordinates are passed through unchanged.", UserWarning)

        engine = self._engine
        handle = None
        iterator = None
        encoded = None

        try:
            try:
                handle = engine.decode(buffer)
            except Exception as e:  # pylint: disable=broad-except
                raise GeometryTransformError(ErrorKind.DECODE_FAILURE, f"Could not decode geometry: {e}") from e

            try:
                iterator = engine.open_vertex_iterator(handle)
            except Exception as e:  # pylint: disable=broad-except
                raise GeometryTransformError(ErrorKind.ITERATOR_OPEN_FAILURE, f"Could not open vertex iterator: {e}") from e

            while True:
                try:
                    if not engine.has_next(iterator):
                        break
                    vertex = engine.peek(iterator)
                except Exception as e:  # pylint: disable=broad-except
                    raise GeometryTransformError(ErrorKind.VERTEX_READ_FAILURE, f"Could not read vertex: {e}") from e

                lat, lng = apply_conversion(mode, vertex.y, vertex.x)

                try:
                    engine.modify_and_advance(iterator, vertex._replace(x=lng, y=lat))
                except Exception as e:  # pylint: disable=broad-except
                    raise GeometryTransformError(ErrorKind.VERTEX_WRITE_FAILURE, f"Could not write vertex: {e}") from e

            exhausted, iterator = iterator, None
            engine.destroy_iterator(exhausted)

            try:
                encoded = engine.encode(handle, engine.is_geodetic(buffer))
            except Exception as e:  # pylint: disable=broad-except
                raise GeometryTransformError(ErrorKind.ENCODE_FAILURE, f"Could not encode geometry: {e}") from e

            if encoded is None or len(encoded) == 0:
                raise GeometryTransformError(ErrorKind.ENCODE_FAILURE, "Encoding produced an empty geometry")

            try:
                engine.set_srid(encoded, destination_srid)
            except Exception as e:  # pylint: disable=broad-except
                raise GeometryTransformError(ErrorKind.ENCODE_FAILURE, f"Could not set SRID: {e}") from e

            try:
                output = self._context.allocate(len(encoded))
            except Exception as e:  # pylint: disable=broad-except
                raise GeometryTransformError(ErrorKind.ALLOCATION_FAILURE, f"Could not allocate output: {e}") from e

            output[:] = encoded

            return OwnedBuffer(output)

        finally:
            if iterator is not None:
                engine.destroy_iterator(iterator)
            if encoded is not None:
                engine.free(encoded)
            if handle is not None:
                engine.destroy_handle(handle)


def _get_transformer() -> GeometryPointTransformer:
    try:
        context = get_engine_context()
    except Exception as e:  # pylint: disable=broad-except
        raise GeometryTransformError(ErrorKind.INVALID_ARGUMENT, f"Engine context is unavailable: {e}") from e

    return GeometryPointTransformer(context)


def read_spatial_reference_id(buffer: Union[bytes, bytearray, memoryview]) -> int:
    """Reads the SRID of a serialized geometry with the process-wide engine context.

    Parameters
    ----------
    buffer : Union[bytes, bytearray, memoryview]
        The serialized geometry (EWKB).

    Returns
    -------
    int
        The SRID. 0 if the geometry carries none.
    """
    return _get_transformer().read_srid(buffer)


def transform_geometry(
    buffer: Union[bytes, bytearray, memoryview],
    mode: int,
    destination_srid: int,
) -> OwnedBuffer:
    """Converts every vertex of a serialized geometry with the process-wide engine context.

    Parameters
    ----------
    buffer : Union[bytes, bytearray, memoryview]
        The serialized geometry (EWKB). Borrowed, not modified.
    mode : int
        A `ConversionMode` value: 1=WGS>GCJ, 2=GCJ>WGS, 3=WGS>BD, 4=BD>WGS, 5=GCJ>BD, 6=BD>GCJ.
    destination_srid : int
        The SRID to stamp on the output.

    Returns
    -------
    OwnedBuffer
        The converted geometry, owned by the caller.

    Examples
    --------
    >>> out = transform_geometry(ewkb_point, ConversionMode.WGS_TO_GCJ, SRID_GCJ02)
    >>> read_spatial_reference_id(out.data)
    990001
    >>> release(out)
    """
    return _get_transformer().transform(buffer, mode, destination_srid)
