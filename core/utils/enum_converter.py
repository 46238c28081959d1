"""
Enum conversion utilities.

Parses user-facing strings into the enums in core.enums, case-insensitively,
raising a ParameterOutOfRangeError for values outside the enum.
"""

from typing import Any, Dict, Optional, Type, TypeVar

from core.exceptions import ParameterOutOfRangeError

T = TypeVar("T")


def parse_enum(
    value: Any, enum_class: Type[T], default: Optional[T] = None, name: str = "value"
) -> T:
    """
    Parse value to enum.

    Args:
        value: Value to parse (string, enum, or None)
        enum_class: Enum class to parse to
        default: Returned when value is None
        name: Parameter name used in the error message

    Returns:
        Parsed enum value

    Raises:
        ParameterOutOfRangeError: If value is not a member of enum_class, or
            is None without a default

    Example:
        >>> parse_enum("Bilinear", Interpolation)
        <Interpolation.BILINEAR: 'bilinear'>
    """
    if isinstance(value, enum_class):
        return value

    if value is None:
        if default is None:
            raise ParameterOutOfRangeError(name, value, "a value is required")
        return default

    try:
        str_value = value.lower() if isinstance(value, str) else value
        return enum_class(str_value)
    except (ValueError, AttributeError) as e:
        allowed = ", ".join(str(member.value) for member in enum_class)
        raise ParameterOutOfRangeError(name, value, f"expected one of: {allowed}") from e


def enum_to_string(value: Any) -> str:
    """Return enum.value for enums, the value itself otherwise."""
    return value.value if hasattr(value, "value") else value


def convert_enums_to_strings(data: Dict[str, Any]) -> Dict[str, Any]:
    """
    Convert all enum values in a dictionary to strings.

    Args:
        data: Dictionary potentially containing enum values

    Returns:
        New dictionary with all enums converted to strings
    """
    return {key: enum_to_string(value) for key, value in data.items()}
