"""Date helpers for receipt parsing."""

from datetime import date, datetime


def placeholder_receipt_date() -> date:
    """Return a valid placeholder date for unknown receipt dates."""
    today = date.today()
    return today.replace(day=1)


def placeholder_purchase_iso() -> str:
    """ISO timestamp used for ``date_purchased`` when the receipt shows no date."""
    return datetime.combine(placeholder_receipt_date(), datetime.min.time()).isoformat()


def purchase_datetime_iso(year: int, month: int, day: int, hour: int = 0, minute: int = 0) -> str | None:
    """Build an ISO purchase timestamp, or None if the OCR'd fields are not a real date."""
    if year < 100:
        year += 2000
    try:
        return datetime(year, month, day, hour, minute).isoformat()
    except ValueError:
        return None
