"""### Utility functions to work with GDAL. ###

Version checks and the error handler used to route GDAL/OGR diagnostics.
"""

# Standard Library
from typing import Callable, Optional

# External
from osgeo import gdal


def _noop_reporter(error_number: int, message: str) -> None:
    """Discards a GDAL diagnostic."""
    return None


def _get_gdal_version() -> int:
    """Get the installed GDAL version as an integer.

    Returns
    -------
    int
        The version as reported by `gdal.VersionInfo("VERSION_NUM")`, e.g. 3080400 for 3.8.4.
    """
    return int(gdal.VersionInfo("VERSION_NUM"))


def _check_gdal_version(minimum: int) -> bool:
    """Check that the installed GDAL is at least `minimum`.

    Parameters
    ----------
    minimum : int
        The minimum version in `VERSION_NUM` form. (2010000 for 2.1.0)

    Returns
    -------
    bool
        True if the installed version is new enough, False otherwise.
    """
    return _get_gdal_version() >= minimum


def _gdal_error_handler(
    on_error: Optional[Callable[[int, str], None]] = None,
    on_notice: Optional[Callable[[int, str], None]] = None,
) -> Callable[[int, int, str], None]:
    """Creates a GDAL error handler that dispatches to two sinks.

    `CE_Failure` and `CE_Fatal` go to `on_error`, `CE_Warning` and `CE_Debug` go to `on_notice`.
    The handler is meant for `gdal.PushErrorHandler`, which installs it for the calling thread only.

    Parameters
    ----------
    on_error : Optional[Callable[[int, str], None]], optional
        Receives `(error_number, message)` for failures. Default: discard.
    on_notice : Optional[Callable[[int, str], None]], optional
        Receives `(error_number, message)` for warnings and debug messages. Default: discard.

    Returns
    -------
    Callable[[int, int, str], None]
        A handler with the `(error_class, error_number, message)` signature GDAL expects.
    """
    error_sink = on_error if on_error is not None else _noop_reporter
    notice_sink = on_notice if on_notice is not None else _noop_reporter

    def handler(error_class: int, error_number: int, message: str) -> None:
        if error_class in (gdal.CE_Failure, gdal.CE_Fatal):
            error_sink(error_number, message)
        elif error_class in (gdal.CE_Warning, gdal.CE_Debug):
            notice_sink(error_number, message)

    return handler
