import uuid
from datetime import datetime, timezone


# ---------------------------
# Helper: Short UUID generator
# ---------------------------
def short_uuid() -> str:
    """Generate a short 8-char UUID string"""
    return uuid.uuid4().hex[:8]


def utcnow() -> datetime:
    """Naive UTC timestamp; datetime columns are declared as plain DateTime to match."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def parse_due_date(val):
    """Accept 'YYYY-MM-DD', ISO string, date, or datetime; return naive UTC datetime or None."""
    if val is None or val == "":
        return None
    if isinstance(val, datetime):
        parsed = val
    elif hasattr(val, "year") and hasattr(val, "month") and hasattr(val, "day"):
        parsed = datetime(val.year, val.month, val.day)
    else:
        s = str(val).strip()
        if len(s) == 10 and s[4] == "-" and s[7] == "-":
            s = s + "T00:00:00"
        # raises ValueError, which pydantic reports as a validation error
        parsed = datetime.fromisoformat(s.replace("Z", "+00:00"))
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed
