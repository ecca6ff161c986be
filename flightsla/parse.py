import math
import re
from datetime import date, datetime, timedelta
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

# Leading numeric prefix, same leniency as a spreadsheet's "12 bags" style cells.
_NUMBER_PREFIX = re.compile(r"^[-+]?(\d+(\.\d*)?|\.\d+)")


def _is_blank(raw) -> bool:
    if raw is None:
        return True
    if isinstance(raw, float) and math.isnan(raw):
        return True
    return str(raw).strip() == ""


def clock_portion(raw) -> str:
    """
    Returns the clock part of a combined 'DD/MM/YYYY HH:MM' cell, or the cell
    text itself when there is no space in it.
    """
    if _is_blank(raw):
        return ""
    tokens = str(raw).split()
    return tokens[1] if len(tokens) > 1 else tokens[0]


def parse_date(raw) -> Optional[date]:
    """
    Parses a day/month/year cell such as '14/03/2025' or '14/03/2025 16:40'.

    Only the first whitespace-separated token is considered. Returns None when
    the token does not have exactly three numeric parts or is not a real
    calendar date.
    """
    if _is_blank(raw):
        return None
    token = str(raw).split()[0]
    parts = [p.strip() for p in token.split("/")]
    if len(parts) != 3 or not all(p.isdigit() for p in parts):
        return None
    day, month, year = (int(p) for p in parts)
    try:
        return date(year, month, day)
    except ValueError:
        return None


def parse_time_minutes(raw) -> Optional[int]:
    """
    Converts 'HH:MM' (or the clock portion of 'DD/MM/YYYY HH:MM') into minutes
    since midnight. Seconds, if present, are ignored.

    Returns None for empty or malformed cells, so a real '00:00' (0) is never
    confused with a missing value.
    """
    clock = clock_portion(raw)
    if not clock:
        return None
    parts = clock.split(":")
    if len(parts) < 2:
        return None
    hours, minutes = parts[0].strip(), parts[1].strip()
    if not (hours.isdigit() and minutes.isdigit()):
        return None
    hours, minutes = int(hours), int(minutes)
    if hours > 23 or minutes > 59:
        return None
    return hours * 60 + minutes


def parse_datetime(raw) -> Optional[datetime]:
    """Full date plus optional clock; a date without a time lands on midnight."""
    day = parse_date(raw)
    if day is None:
        return None
    moment = datetime(day.year, day.month, day.day)
    if len(str(raw).split()) > 1:
        minutes = parse_time_minutes(raw)
        if minutes is not None:
            moment += timedelta(minutes=minutes)
    return moment


def parse_locale_number(raw) -> float:
    """
    Parses a pt-BR formatted number: '.' groups thousands and ',' is the
    decimal point ('1.234,56' -> 1234.56). Values that are already numeric
    pass through. Anything unparseable is 0.
    """
    if isinstance(raw, bool):
        return float(raw)
    if isinstance(raw, (int, float)):
        return 0.0 if isinstance(raw, float) and math.isnan(raw) else raw
    if _is_blank(raw):
        return 0.0
    sanitized = str(raw).replace(".", "").replace(",", ".", 1).strip()
    match = _NUMBER_PREFIX.match(sanitized)
    return float(match.group(0)) if match else 0.0


def parse_percent(raw) -> float:
    """Parses punctuality cells like '97,5%'. Thousands separators are not expected here."""
    if isinstance(raw, (int, float)) and not isinstance(raw, bool):
        return 0.0 if isinstance(raw, float) and math.isnan(raw) else float(raw)
    if _is_blank(raw):
        return 0.0
    sanitized = str(raw).replace("%", "").replace(",", ".", 1).strip()
    match = _NUMBER_PREFIX.match(sanitized)
    return float(match.group(0)) if match else 0.0


def minutes_to_clock(minutes: Optional[float]) -> str:
    """Formats minutes since midnight as 'HH:MM', wrapping past 24h. Negative input is '00:00'."""
    if minutes is None or minutes < 0:
        return "00:00"
    minutes = int(minutes)
    hours = (minutes // 60) % 24
    return f"{hours:02d}:{minutes % 60:02d}"


def format_duration(minutes: Optional[float]) -> str:
    """Formats a duration as 'HH:MM' without wrapping hours. Zero or negative is '00:00'."""
    if minutes is None or minutes <= 0:
        return "00:00"
    total = int(math.floor(minutes + 0.5))
    hours, mins = divmod(total, 60)
    return f"{hours:02d}:{mins:02d}"


def round_half_up(value: float, digits: int = 0) -> float:
    """Rounds exact halves away from zero (95.25 -> 95.3), unlike round()'s half-to-even."""
    quantum = Decimal(1).scaleb(-digits)
    return float(Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP))
