from .errors import MalformedTimeString
from .models import Millis


def parse_duration(value: str) -> Millis:
    # GTFS times are HH:MM:SS and may run past 24:00:00 for after-midnight service
    parts = (value or "").strip().split(":")
    if len(parts) != 3:
        raise MalformedTimeString(value)
    try:
        hours, minutes, seconds = (int(p) for p in parts)
    except ValueError:
        raise MalformedTimeString(value) from None
    if hours < 0 or not (0 <= minutes < 60) or not (0 <= seconds < 60):
        raise MalformedTimeString(value)
    return (hours * 3600 + minutes * 60 + seconds) * 1000


def format_duration(ms: Millis) -> str:
    total_seconds = ms // 1000
    hours = total_seconds // 3600
    minutes = (total_seconds % 3600) // 60
    seconds = total_seconds % 60
    return f"{hours:02d}:{minutes:02d}:{seconds:02d}"
