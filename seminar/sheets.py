"""Registration store backed by a Google Sheets worksheet."""

from __future__ import annotations

import logging
import threading
import time
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional, Sequence
from urllib.parse import quote

import httpx

from .errors import StoreUnavailable
from .export import REGISTRATION_COLUMNS, format_timestamp, format_yes_no
from .models import Registration, RegistrationInput, User

logger = logging.getLogger("seminar.sheets")

DEFAULT_SHEETS_API_URL = "https://sheets.googleapis.com/v4/spreadsheets"
DEFAULT_WORKSHEET = "Sheet1"

_LAST_COLUMN = chr(ord("A") + len(REGISTRATION_COLUMNS) - 1)


def _normalize_base_url(base_url: str) -> str:
    cleaned = (base_url or "").strip()
    if not cleaned:
        raise ValueError("Sheets API base URL must not be empty")
    return cleaned.rstrip("/")


def _a1_range(worksheet: str, cells: Optional[str] = None) -> str:
    name = worksheet
    if not name.replace("_", "").isalnum():
        name = "'" + name.replace("'", "''") + "'"
    return f"{name}!{cells}" if cells else name


def _values_path(a1: str, suffix: str = "") -> str:
    return f"/values/{quote(a1, safe='')}{suffix}"


def _extract_error_message(payload: object, default: str) -> str:
    if isinstance(payload, dict):
        error = payload.get("error")
        if isinstance(error, dict):
            payload = error
        for key in ("message", "status", "error"):
            value = payload.get(key)
            if isinstance(value, str) and value.strip():
                return value.strip()
    if isinstance(payload, str) and payload.strip():
        return payload.strip()
    return default


def _cell_text(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def _parse_id(value: Any, fallback: int) -> int:
    if isinstance(value, bool):
        return fallback
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    try:
        return int(_cell_text(value))
    except ValueError:
        return fallback


def _parse_timestamp(value: Any) -> Optional[datetime]:
    text = _cell_text(value)
    if not text:
        return None
    try:
        parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


class SheetsStorage:
    """Proxy every store operation to the Google Sheets ``values`` API.

    Nothing is cached: each call is one or more HTTP round trips. Rows are
    matched to fields by the column names found in the header row.
    """

    def __init__(
        self,
        api_key: str,
        spreadsheet_id: str,
        *,
        worksheet: str = DEFAULT_WORKSHEET,
        timeout: float = 10.0,
        base_url: str = DEFAULT_SHEETS_API_URL,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        api_key = (api_key or "").strip()
        spreadsheet_id = (spreadsheet_id or "").strip()
        if not api_key or not spreadsheet_id:
            raise ValueError("Google Sheets API key and sheet ID must be provided")

        self._api_key = api_key
        self._worksheet = worksheet or DEFAULT_WORKSHEET
        self._client = httpx.Client(
            base_url=f"{_normalize_base_url(base_url)}/{quote(spreadsheet_id, safe='')}",
            timeout=timeout,
            transport=transport,
            headers={"Accept": "application/json"},
        )
        self._id_lock = threading.Lock()
        self._last_id = 0

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "SheetsStorage":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    # ------------------------------------------------------------------
    # User management is not backed by the spreadsheet
    # ------------------------------------------------------------------
    def get_user(self, user_id: int) -> Optional[User]:
        return None

    def get_user_by_username(self, username: str) -> Optional[User]:
        return None

    def create_user(self, username: str, password: str) -> User:
        raise NotImplementedError("User creation is not supported by the Google Sheets store")

    # ------------------------------------------------------------------
    # Registrations
    # ------------------------------------------------------------------
    def create_registration(self, data: RegistrationInput) -> Registration:
        columns = self._ensure_header()

        registration = Registration.from_input(
            data,
            id=self._next_id(),
            registered_at=datetime.now(timezone.utc),
        )
        cells = self._registration_cells(registration)
        row = [cells[column] for column in columns]

        self._request(
            "POST",
            _values_path(_a1_range(self._worksheet, f"A:{_LAST_COLUMN}"), ":append"),
            params={"valueInputOption": "RAW", "insertDataOption": "INSERT_ROWS"},
            json={"values": [row]},
        )
        logger.info("Appended registration %s to worksheet %s", registration.id, self._worksheet)
        return registration

    def get_all_registrations(self) -> List[Registration]:
        try:
            return self._fetch_registrations()
        except StoreUnavailable:
            logger.exception("Error fetching registrations from Google Sheets")
            return []

    def get_registration_by_email(self, email: str) -> Optional[Registration]:
        for registration in self._fetch_registrations():
            if registration.email == email:
                return registration
        return None

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------
    def _next_id(self) -> int:
        with self._id_lock:
            candidate = int(time.time() * 1000)
            if candidate <= self._last_id:
                candidate = self._last_id + 1
            self._last_id = candidate
            return candidate

    def _ensure_header(self) -> Sequence[str]:
        """Return the column order of the sheet, writing the header row if needed."""

        header_range = _a1_range(self._worksheet, f"A1:{_LAST_COLUMN}1")
        payload = self._request("GET", _values_path(header_range))
        rows = payload.get("values") or []
        existing = [_cell_text(cell) for cell in rows[0]] if rows else []

        if len(existing) == len(REGISTRATION_COLUMNS) and set(existing) == set(
            REGISTRATION_COLUMNS
        ):
            return existing

        if any(existing):
            logger.warning(
                "Worksheet %s header %r does not match the expected columns; rewriting it",
                self._worksheet,
                existing,
            )

        self._request(
            "PUT",
            _values_path(header_range),
            params={"valueInputOption": "RAW"},
            json={"values": [list(REGISTRATION_COLUMNS)]},
        )
        return REGISTRATION_COLUMNS

    def _fetch_registrations(self) -> List[Registration]:
        payload = self._request(
            "GET",
            _values_path(_a1_range(self._worksheet)),
            params={"valueRenderOption": "UNFORMATTED_VALUE"},
        )
        rows = payload.get("values") or []
        if not rows:
            return []

        header = [_cell_text(cell) for cell in rows[0]]
        positions = {name: index for index, name in enumerate(header) if name}
        missing = [column for column in REGISTRATION_COLUMNS if column not in positions]
        if missing:
            logger.warning(
                "Worksheet %s is missing columns %s; using defaults",
                self._worksheet,
                ", ".join(missing),
            )

        return [
            self._row_to_registration(row, positions, position)
            for position, row in enumerate(rows[1:], start=1)
            if any(_cell_text(cell) for cell in row)
        ]

    @staticmethod
    def _registration_cells(registration: Registration) -> Dict[str, object]:
        return {
            "ID": registration.id,
            "First Name": registration.first_name,
            "Last Name": registration.last_name,
            "Email": registration.email,
            "Phone": registration.phone or "",
            "Expectations": registration.expectations or "",
            "Newsletter Opt-in": format_yes_no(registration.newsletter_opt_in),
            "Registration Date": format_timestamp(registration.registered_at),
        }

    @staticmethod
    def _row_to_registration(
        row: Sequence[Any], positions: Mapping[str, int], position: int
    ) -> Registration:
        def cell(column: str) -> Any:
            index = positions.get(column)
            if index is None or index >= len(row):
                return None
            return row[index]

        return Registration(
            id=_parse_id(cell("ID"), position),
            first_name=_cell_text(cell("First Name")),
            last_name=_cell_text(cell("Last Name")),
            email=_cell_text(cell("Email")),
            phone=_cell_text(cell("Phone")) or None,
            expectations=_cell_text(cell("Expectations")) or None,
            newsletter_opt_in=_cell_text(cell("Newsletter Opt-in")) == "Yes",
            registered_at=_parse_timestamp(cell("Registration Date"))
            or datetime.now(timezone.utc),
        )

    def _request(
        self,
        method: str,
        path: str,
        *,
        params: Optional[Dict[str, str]] = None,
        json: Optional[Dict[str, object]] = None,
    ) -> Dict[str, Any]:
        query = {"key": self._api_key}
        if params:
            query.update(params)

        try:
            response = self._client.request(method, path, params=query, json=json)
        except httpx.TimeoutException as exc:
            raise StoreUnavailable(f"Google Sheets request timed out: {exc}") from exc
        except httpx.RequestError as exc:
            raise StoreUnavailable(f"Failed to contact Google Sheets: {exc}") from exc

        if response.status_code >= 400:
            try:
                parsed = response.json()
            except ValueError:
                parsed = response.text
            detail = _extract_error_message(parsed, "no details")
            raise StoreUnavailable(
                f"Google Sheets API error: {response.status_code} - {detail}"
            )

        if not response.content:
            return {}
        try:
            data = response.json()
        except ValueError as exc:
            raise StoreUnavailable("Google Sheets API returned an invalid response") from exc
        if not isinstance(data, dict):
            raise StoreUnavailable("Google Sheets API returned an unexpected response payload")
        return data


__all__ = ["DEFAULT_SHEETS_API_URL", "DEFAULT_WORKSHEET", "SheetsStorage"]
