"""### Generic utility functions. ###

Argument checks shared by the converters and the geometry transformer.
"""

# Standard Library
from typing import Any, Union, List, Tuple


INT32_MIN = -(2 ** 31)
INT32_MAX = 2 ** 31 - 1


def _type_check(
    variable: Any,
    types: Union[List[Union[type, None]], Tuple[Union[type, None], ...]],
    name: str = "",
    *,
    throw_error: bool = True,
) -> bool:
    """Check that a variable is an instance of one of the given types.

    Parameters
    ----------
    variable : Any
        The variable to check.
    types : Union[List[Union[type, None]], Tuple[Union[type, None], ...]]
        The accepted types. None accepts None.
    name : str, optional
        The name of the variable, used in the error message.
    throw_error : bool, optional
        Whether to raise if the check fails. Default: True

    Returns
    -------
    bool
        True if the variable matches one of the types, False otherwise.

    Raises
    ------
    TypeError
        If the variable matches none of the types, or the types are not a list of types.

    Examples
    --------
    >>> _type_check(b"\\x01", [bytes, bytearray])  # True
    >>> _type_check(None, [int, None])  # True
    """
    if not isinstance(name, str):
        raise TypeError("name must be a string")
    if not isinstance(types, (list, tuple)):
        raise TypeError("types must be a list or tuple")

    valid_types = tuple(type(None) if t is None else t for t in types)

    if not all(isinstance(t, type) for t in valid_types):
        raise TypeError(f"Invalid type specification: {types}")

    if isinstance(variable, valid_types):
        return True

    if throw_error:
        expected = " or ".join(t.__name__ for t in valid_types)
        raise TypeError(
            f"Type mismatch for '{name}': Expected {expected}, got {type(variable).__name__}"
        )

    return False


def _check_is_int32(value: Any) -> bool:
    """Check if a value is an integer that fits in a signed 32-bit slot.

    Parameters
    ----------
    value : Any
        The value to check.

    Returns
    -------
    bool
        True if the value is an int (not a bool) within [-2**31, 2**31 - 1].
    """
    if isinstance(value, bool) or not isinstance(value, int):
        return False

    return INT32_MIN <= value <= INT32_MAX


def _check_is_buffer(value: Any) -> bool:
    """Check if a value is a bytes-like object that can be read as a geometry buffer."""
    return isinstance(value, (bytes, bytearray, memoryview))
