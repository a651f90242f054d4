"""Current date and time for the getCurrentDateTime tool."""
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError


def safe_time_zone(name: Optional[str]) -> Optional[str]:
    """Return ``name`` if it is a valid IANA zone, else None."""
    if not name:
        return None
    try:
        ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError, OSError):
        return None
    return name


def resolve_time_zone(*candidates: Optional[str]) -> str:
    """First valid zone among ``candidates``, falling back to UTC."""
    for candidate in candidates:
        zone = safe_time_zone(candidate)
        if zone:
            return zone
    return "UTC"


def describe_now(time_zone: str, now: Optional[datetime] = None) -> Dict[str, Any]:
    """Current moment in ``time_zone`` plus today/yesterday/tomorrow dates."""
    now = now or datetime.now(timezone.utc)
    local = now.astimezone(ZoneInfo(time_zone))

    return {
        "timeZone": time_zone,
        "nowIso": now.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z"),
        "nowText": local.strftime("%A, %d %B %Y at %H:%M:%S %Z"),
        "today": local.date().isoformat(),
        "yesterday": (local.date() - timedelta(days=1)).isoformat(),
        "tomorrow": (local.date() + timedelta(days=1)).isoformat(),
    }
