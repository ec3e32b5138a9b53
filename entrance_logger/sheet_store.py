"""
Reference implementation of the spreadsheet-backed remote log store.

Two sheets, each a header row followed by data rows:
  buildings: id | name | entrancesMax
  logs:      timestamp | userId | buildingId | buildingName | entrance | lat | lng | accuracy | underConstruction

handle() answers one GET request given its query parameters, exactly like the
deployed spreadsheet script. Deletion reads every row and rewrites the sheet,
so it is last-write-wins against concurrent appends.
"""
from __future__ import annotations

import logging
from typing import Callable, Mapping

from .const import (
    ANONYMOUS_USER_ID,
    BUILDINGS_HEADER,
    LOGS_HEADER,
    MODE_DATA,
    MODE_DELETE,
    MODE_LOG,
    SHEET_BUILDINGS,
    SHEET_LOGS,
)
from .errors import ValidationError
from .models import Building, VisitRecord, utc_timestamp
from .storage import KeyValueStore, MemoryStore
from .validation import validate_delete_params, validate_log_params

_LOGGER = logging.getLogger(__name__)

HEADERS = {SHEET_BUILDINGS: BUILDINGS_HEADER, SHEET_LOGS: LOGS_HEADER}


class SheetLogStore:
    """Buildings and logs sheets kept in a KeyValueStore (one key per sheet)."""

    def __init__(self, store: KeyValueStore | None = None) -> None:
        self.store = store or MemoryStore()

    # ------------------------------------------------------------------
    # Sheet primitives
    # ------------------------------------------------------------------

    def _values(self, name: str) -> list[list]:
        return self.store.get(name) or []

    def setup_sheets(self) -> None:
        """Create header rows on empty sheets."""
        for name, header in HEADERS.items():
            if not self._values(name):
                self.store.set(name, [list(header)])

    def read_sheet(self, name: str) -> list[dict]:
        """Data rows as dicts keyed by header, skipping blank rows."""
        values = self._values(name)
        if not values:
            return []
        header, *rows = values
        return [
            dict(zip(header, row))
            for row in rows
            if any(cell not in ("", None) for cell in row)
        ]

    def append_row(self, name: str, row: list) -> None:
        values = self._values(name) or [list(HEADERS[name])]
        values.append(row)
        self.store.set(name, values)

    def delete_logs(self, predicate: Callable[[dict], bool]) -> int:
        """Rewrite the logs sheet without the rows matching predicate."""
        values = self._values(SHEET_LOGS)
        if not values:
            return 0
        header, *rows = values
        keep = [header]
        deleted = 0
        for row in rows:
            if predicate(dict(zip(header, row))):
                deleted += 1
                continue
            keep.append(row)
        self.store.set(SHEET_LOGS, keep)
        return deleted

    def import_buildings(self, buildings: list[dict], replace: bool = True) -> int:
        """Load buildings into the buildings sheet, replacing existing rows unless replace is False."""
        values = self._values(SHEET_BUILDINGS) or [list(BUILDINGS_HEADER)]
        if replace:
            values = values[:1]
        for building in buildings:
            values.append([building["id"], building["name"], building.get("entrancesMax") or ""])
        self.store.set(SHEET_BUILDINGS, values)
        _LOGGER.info("Imported %s buildings", len(buildings))
        return len(buildings)

    # ------------------------------------------------------------------
    # Request handling
    # ------------------------------------------------------------------

    def handle(self, params: Mapping[str, str]) -> dict:
        """Answer one request; failures become an {error} body, never an exception."""
        try:
            mode = params.get("mode")
            if mode == MODE_DATA:
                return self._handle_data()
            if mode == MODE_LOG:
                return self._handle_log(params)
            if mode == MODE_DELETE:
                return self._handle_delete(params)
            return {"ok": True}
        except Exception as exc:  # noqa: BLE001
            _LOGGER.exception("Request failed: %s", exc)
            return {"error": str(exc)}

    def _handle_data(self) -> dict:
        buildings = [Building.from_json(b).to_json() for b in self.read_sheet(SHEET_BUILDINGS)]
        logs = [VisitRecord.from_json(r).to_json() for r in self.read_sheet(SHEET_LOGS)]
        return {"buildings": buildings, "logs": logs}

    def _handle_log(self, params: Mapping[str, str]) -> dict:
        try:
            data = validate_log_params(dict(params))
        except ValidationError as exc:
            return {"ok": False, "error": str(exc)}

        row = [
            utc_timestamp(),
            data["userId"] or ANONYMOUS_USER_ID,
            data["buildingId"],
            data["buildingName"],
            data["entrance"],
            data["lat"],
            data["lng"],
            data["accuracy"],
            data["underConstruction"],
        ]
        self.append_row(SHEET_LOGS, row)
        _LOGGER.debug("Appended log for %s entrance %s", data["buildingId"], data["entrance"])
        return {"ok": True}

    def _handle_delete(self, params: Mapping[str, str]) -> dict:
        try:
            data = validate_delete_params(dict(params))
        except ValidationError as exc:
            return {"ok": False, "error": str(exc)}

        building_id = data["buildingId"]
        entrance = data.get("entrance")

        def matches_filter(row: dict) -> bool:
            return str(row.get("buildingId")) == building_id and (
                entrance is None or _entrance(row) == entrance
            )

        if data["undoLast"]:
            target = _latest(self.read_sheet(SHEET_LOGS))
            deleted = 0
            if target is not None:
                deleted = self.delete_logs(
                    lambda r: str(r.get("timestamp")) == str(target.get("timestamp"))
                    and str(r.get("buildingId")) == str(target.get("buildingId"))
                    and _entrance(r) == _entrance(target)
                )
        elif data["latest"]:
            target = _latest([r for r in self.read_sheet(SHEET_LOGS) if matches_filter(r)])
            deleted = 0
            if target is not None:
                deleted = self.delete_logs(
                    lambda r: str(r.get("timestamp")) == str(target.get("timestamp")) and matches_filter(r)
                )
        else:
            deleted = self.delete_logs(matches_filter)

        return {"ok": True, "deletedCount": deleted}


def _entrance(row: dict) -> int | None:
    try:
        return int(float(row.get("entrance")))
    except (TypeError, ValueError):
        return None


def _latest(rows: list[dict]) -> dict | None:
    """Row with the greatest timestamp string; the earliest row wins ties."""
    if not rows:
        return None
    return max(rows, key=lambda r: str(r.get("timestamp")))
