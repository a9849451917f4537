import re

from ..exceptions.telemetry_exceptions import InvalidDurationError

UNIT_MS = {
    "ms": 1,
    "s": 1000,
    "m": 60 * 1000,
    "h": 60 * 60 * 1000,
    "d": 24 * 60 * 60 * 1000,
    "w": 7 * 24 * 60 * 60 * 1000,
    "y": 365 * 24 * 60 * 60 * 1000,
}

# "ms" must be tried before "m"
_TOKEN = re.compile(r"(\d+)(ms|s|m|h|d|w|y)")


def parse_duration_ms(text: str) -> int:
    """
    Parse a duration string such as "1h", "30m", "7d" or "1h30m" into milliseconds.

    Raises:
        InvalidDurationError: if the string is empty, has unknown units or trailing text.
    """
    compact = text.strip().lower()
    if not compact:
        raise InvalidDurationError(f"Could not convert {text!r} into a duration (empty).")

    total = 0
    position = 0
    for match in _TOKEN.finditer(compact):
        if match.start() != position:
            break
        total += int(match.group(1)) * UNIT_MS[match.group(2)]
        position = match.end()

    if position != len(compact):
        raise InvalidDurationError(
            f"Could not convert {text!r} into a duration (expected e.g. 1h, 30m, 7d)."
        )
    return total
