"""### The process-wide engine context. ###

The context is built lazily on first use and lives for the rest of the process.
Construction is guarded by a lock, so concurrent first calls build it exactly once.
A failed construction is not cached and the next call tries again.
"""

# Standard Library
import threading
from typing import Callable, Optional

# Internal
from eviltransform.utils import utils_gdal
from eviltransform.core_geometry.core_geometry_engine import OgrGeometryEngine


# GetPointZM, SetPointM and IsMeasured arrived in GDAL 2.1.
GDAL_MIN_VERSION = 2010000


class EngineOptions:
    """Construction-time configuration of the engine context.

    Parameters
    ----------
    on_error : Optional[Callable[[int, str], None]], optional
        Sink for engine failures, called with `(error_number, message)`. Default: discard.
    on_notice : Optional[Callable[[int, str], None]], optional
        Sink for engine warnings and debug messages. Default: discard.
    allocator : Optional[Callable[[int], bytearray]], optional
        Allocates the caller-owned output buffers. Default: `bytearray`.
    """

    def __init__(
        self,
        on_error: Optional[Callable[[int, str], None]] = None,
        on_notice: Optional[Callable[[int, str], None]] = None,
        allocator: Optional[Callable[[int], bytearray]] = None,
    ):
        for name, value in (("on_error", on_error), ("on_notice", on_notice), ("allocator", allocator)):
            if value is not None and not callable(value):
                raise TypeError(f"{name} must be callable or None. Received: {type(value)}")

        self.on_error = on_error if on_error is not None else utils_gdal._noop_reporter
        self.on_notice = on_notice if on_notice is not None else utils_gdal._noop_reporter
        self.allocator = allocator if allocator is not None else bytearray


class EngineContext:
    """A geometry engine and the options it was built with. Holds no per-request state."""

    def __init__(self, engine: OgrGeometryEngine, options: EngineOptions):
        self.engine = engine
        self.options = options

    def allocate(self, size: int) -> bytearray:
        """Allocates a caller-owned buffer of `size` bytes.

        Raises
        ------
        MemoryError
            If the allocator returns something other than a bytearray of `size` bytes.
            Errors raised by the allocator itself propagate unchanged.
        """
        buffer = self.options.allocator(size)

        if not isinstance(buffer, bytearray) or len(buffer) != size:
            raise MemoryError(f"Allocator did not return a bytearray of {size} bytes")

        return buffer


_context: Optional[EngineContext] = None
_context_lock = threading.Lock()


def _create_engine_context(options: Optional[EngineOptions] = None) -> EngineContext:
    """Builds a new engine context.

    Raises
    ------
    RuntimeError
        If the installed GDAL is too old for the vertex API.
    MemoryError
        If the allocator rejects a zero-size test allocation.
    """
    if options is None:
        options = EngineOptions()

    if not utils_gdal._check_gdal_version(GDAL_MIN_VERSION):
        raise RuntimeError(f"GDAL {GDAL_MIN_VERSION} or newer is required, found {utils_gdal._get_gdal_version()}")

    engine = OgrGeometryEngine(on_error=options.on_error, on_notice=options.on_notice)
    context = EngineContext(engine, options)
    context.allocate(0)

    return context


def get_engine_context(options: Optional[EngineOptions] = None) -> EngineContext:
    """Gets the process-wide engine context, building it on first use.

    Parameters
    ----------
    options : Optional[EngineOptions], optional
        Used only when the context is built by this call. Default: no-op sinks and `bytearray`.

    Returns
    -------
    EngineContext
        The shared context.

    Raises
    ------
    RuntimeError, MemoryError
        If construction fails. Nothing is cached and the next call retries.
    """
    global _context

    context = _context
    if context is not None:
        return context

    with _context_lock:
        if _context is None:
            _context = _create_engine_context(options)

        return _context


def _reset_engine_context() -> None:
    """Drops the shared context so the next call builds a new one."""
    global _context

    with _context_lock:
        _context = None
