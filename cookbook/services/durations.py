"""ISO-8601 duration text <-> timedelta.

Stored recipe times look like "PT1H30M". Days count as 24 hours and weeks as
7 days; years and months have no fixed length and are rejected. Formatting
uses hours as the largest unit so every value has one canonical spelling.
"""

import re
from datetime import timedelta
from decimal import Decimal

DURATION_REGEX = re.compile(
    r"^(?P<sign>[+-])?P"
    r"(?:(?P<weeks>\d+)W)?"
    r"(?:(?P<days>\d+)D)?"
    r"(?:T"
    r"(?:(?P<hours>\d+)H)?"
    r"(?:(?P<minutes>\d+)M)?"
    r"(?:(?P<seconds>\d+(?:[.,]\d+)?)S)?"
    r")?$",
    re.IGNORECASE,
)


def parse_duration(text: str) -> timedelta:
    """Parse an ISO-8601 duration such as "PT1H30M" or "P1DT2H"."""
    if not isinstance(text, str):
        raise ValueError(f"Expected a duration string, got {type(text).__name__}")

    raw = text.strip()
    match = DURATION_REGEX.match(raw)
    if not match:
        raise ValueError(f"Invalid ISO-8601 duration: {text!r}")

    parts = match.groupdict()
    # "P", "PT" and "P1DT" match the pattern but are not valid durations
    units = [parts[k] for k in ("weeks", "days", "hours", "minutes", "seconds")]
    if not any(units) or raw.upper().endswith("T"):
        raise ValueError(f"Invalid ISO-8601 duration: {text!r}")

    seconds = Decimal((parts["seconds"] or "0").replace(",", "."))
    try:
        td = timedelta(
            weeks=int(parts["weeks"] or 0),
            days=int(parts["days"] or 0),
            hours=int(parts["hours"] or 0),
            minutes=int(parts["minutes"] or 0),
            microseconds=int(seconds * 1_000_000),
        )
        if parts["sign"] == "-":
            td = -td
    except OverflowError as e:
        raise ValueError(f"Duration out of range: {text!r}") from e
    return td


def format_duration(td: timedelta) -> str:
    """Canonical ISO-8601 text for a timedelta, e.g. "PT1H30M"."""
    total_us = (td.days * 86400 + td.seconds) * 1_000_000 + td.microseconds
    sign = "-" if total_us < 0 else ""
    total_us = abs(total_us)

    hours, rem = divmod(total_us, 3600 * 1_000_000)
    minutes, rem = divmod(rem, 60 * 1_000_000)
    seconds, micros = divmod(rem, 1_000_000)

    out = ""
    if hours:
        out += f"{hours}H"
    if minutes:
        out += f"{minutes}M"
    if seconds or micros:
        if micros:
            frac = f"{micros:06d}".rstrip("0")
            out += f"{seconds}.{frac}S"
        else:
            out += f"{seconds}S"
    if not out:
        out = "0S"
    return f"{sign}PT{out}"
