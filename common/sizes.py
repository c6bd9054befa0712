"""Human-readable byte size parsing and formatting."""

import math
import re

SIZE_UNITS = ["B", "KB", "MB", "GB", "TB"]

_UNIT_MULTIPLIERS = {unit: 1024 ** power for power, unit in enumerate(SIZE_UNITS)}

_SIZE_PATTERN = re.compile(r"^\s*(\d+(?:\.\d+)?)\s*([KMGT]?B)\s*$", re.IGNORECASE)


def parse_size(size_string: str) -> int:
    """
    Convert a human-readable size such as "5MB" or "1.5 gb" to bytes.

    Units are binary multiples of 1024. Anything that does not match
    ``<number><unit>`` yields 0, which callers must treat as "not configured"
    rather than as a real zero-byte limit.

    Args:
        size_string: Size text (e.g. "100MB", "10GB", "512 B")

    Returns:
        Size in bytes, or 0 if the text cannot be parsed
    """
    if not isinstance(size_string, str):
        return 0

    match = _SIZE_PATTERN.match(size_string)
    if not match:
        return 0

    value = float(match.group(1))
    unit = match.group(2).upper()
    return int(value * _UNIT_MULTIPLIERS[unit])


def format_size(size_bytes: int) -> str:
    """
    Format a byte count with the largest unit that keeps the mantissa below 1024.

    The mantissa is rounded to 2 decimals and trailing zeros are dropped,
    so 5242880 becomes "5 MB" and 1536 becomes "1.5 KB".

    Args:
        size_bytes: Size in bytes

    Returns:
        Formatted size string
    """
    if size_bytes <= 0:
        return "0 B"

    power = min(int(math.log(size_bytes, 1024)), len(SIZE_UNITS) - 1)
    mantissa = size_bytes / (1024 ** power)
    if mantissa >= 1024 and power < len(SIZE_UNITS) - 1:
        power += 1
        mantissa = size_bytes / (1024 ** power)

    rounded = round(mantissa, 2)
    text = f"{rounded:.2f}".rstrip("0").rstrip(".")
    return f"{text} {SIZE_UNITS[power]}"
