"""CSV rendering of the registration list."""
from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Iterable, Optional, Tuple

from .models import Registration

REGISTRATION_COLUMNS: Tuple[str, ...] = (
    "ID",
    "First Name",
    "Last Name",
    "Email",
    "Phone",
    "Expectations",
    "Newsletter Opt-in",
    "Registration Date",
)

CSV_CONTENT_TYPE = "text/csv"


def format_timestamp(value: datetime) -> str:
    """Render a timestamp as ISO 8601 in UTC with second precision."""

    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).replace(microsecond=0).isoformat()


def format_yes_no(value: bool) -> str:
    return "Yes" if value else "No"


def quote_field(value: Optional[str]) -> str:
    """Wrap a value in double quotes, doubling any embedded quotes."""

    text = "" if value is None else str(value)
    return '"' + text.replace('"', '""') + '"'


def format_row(registration: Registration) -> str:
    cells = [
        str(registration.id),
        quote_field(registration.first_name),
        quote_field(registration.last_name),
        quote_field(registration.email),
        quote_field(registration.phone),
        quote_field(registration.expectations),
        format_yes_no(registration.newsletter_opt_in),
        quote_field(format_timestamp(registration.registered_at)),
    ]
    return ",".join(cells)


def format_registrations_csv(registrations: Iterable[Registration]) -> str:
    """Render the header row followed by one row per registration."""

    lines = [",".join(REGISTRATION_COLUMNS)]
    lines.extend(format_row(registration) for registration in registrations)
    return "\n".join(lines)


def export_filename(day: Optional[date] = None) -> str:
    if day is None:
        day = datetime.now(timezone.utc).date()
    return f"seminar-registrations-{day.isoformat()}.csv"


__all__ = [
    "CSV_CONTENT_TYPE",
    "REGISTRATION_COLUMNS",
    "export_filename",
    "format_registrations_csv",
    "format_row",
    "format_timestamp",
    "quote_field",
]
