# =============================================================================
# lib/utils.py - Shared Utilities
# =============================================================================
# Common utilities used across the application.
# =============================================================================

import re
from pathlib import Path


# =============================================================================
# Byte Sizes
# =============================================================================

_SIZE_UNITS = {
    "b": 1,
    "kb": 1024,
    "mb": 1024 ** 2,
    "gb": 1024 ** 3,
}

_SIZE_PATTERN = re.compile(r"^\s*(\d+(?:\.\d+)?)\s*(b|kb|mb|gb)?\s*$", re.IGNORECASE)


def parse_byte_size(value: int | str) -> int:
    """
    Convert a human-readable size to a number of bytes.

    Args:
        value: An int (already bytes) or a string such as "56kb" or "1.5mb"

    Returns:
        Size in bytes

    Raises:
        ValueError: If the string is not a recognised size

    Example:
        parse_byte_size("1mb")   # 1048576
        parse_byte_size(2048)    # 2048
    """
    if isinstance(value, int):
        return value

    match = _SIZE_PATTERN.match(value)
    if not match:
        raise ValueError(f"Invalid size: {value!r}")

    number, unit = match.groups()
    return int(float(number) * _SIZE_UNITS[(unit or "b").lower()])


# =============================================================================
# Module Files
# =============================================================================

def is_test_module(path: Path) -> bool:
    """Whether a .py file is a test module rather than application code."""
    name = path.name
    return (
        name == "conftest.py"
        or name.startswith("test_")
        or name.endswith("_test.py")
    )
