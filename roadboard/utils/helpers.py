import uuid
from datetime import date, datetime, timezone
from typing import Any, Optional


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def new_id() -> str:
    return uuid.uuid4().hex


def iso(value: Any) -> Optional[str]:
    """ISO-8601 for datetimes/dates; None passes through."""
    if value is None:
        return None
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return str(value)


def parse_date_only(value: Optional[str]) -> Optional[date]:
    """'YYYY-MM-DD' -> date; blank or unparseable -> None."""
    if not value:
        return None
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except (TypeError, ValueError):
        return None
