"""
Domain models for the entrance logger.

Pure data classes with no HTTP, storage or UI dependencies. JSON field names
follow the remote store (camelCase); attribute names are snake_case.
"""
from __future__ import annotations

import dataclasses
from datetime import datetime, timezone

from .const import ANONYMOUS_USER_ID, DEFAULT_ENTRANCES_MAX


def utc_timestamp(moment: datetime | None = None) -> str:
    """ISO-8601 UTC timestamp with millisecond precision, e.g. 2024-05-01T12:00:00.000Z."""
    moment = moment or datetime.now(timezone.utc)
    return moment.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.") + f"{moment.microsecond // 1000:03d}Z"


def _to_float(value, default: float = 0.0) -> float:
    if value in (None, ""):
        return default
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


def _to_bool(value) -> bool:
    if isinstance(value, str):
        return value.strip().lower() == "true"
    return bool(value)


@dataclasses.dataclass(frozen=True)
class Building:
    """A physical structure with one or more entrances."""

    id: str
    name: str
    entrances_max: int | None = None

    @property
    def entrances(self) -> int:
        return self.entrances_max or DEFAULT_ENTRANCES_MAX

    @classmethod
    def from_json(cls, data: dict) -> "Building":
        entrances_max = data.get("entrancesMax")
        return cls(
            id=str(data.get("id") or ""),
            name=str(data.get("name") or ""),
            entrances_max=int(_to_float(entrances_max)) or None,
        )

    def to_json(self) -> dict:
        data = {"id": self.id, "name": self.name}
        if self.entrances_max is not None:
            data["entrancesMax"] = self.entrances_max
        return data


@dataclasses.dataclass(frozen=True)
class PositionReading:
    """One geolocation fix."""

    lat: float
    lng: float
    accuracy: float


@dataclasses.dataclass(frozen=True)
class VisitRecord:
    """One observed entrance visit. Never mutated after creation."""

    timestamp: str
    user_id: str
    building_id: str
    building_name: str
    entrance: int
    lat: float
    lng: float
    accuracy: float
    under_construction: bool = False

    @classmethod
    def create(
        cls,
        building: Building,
        entrance: int,
        position: PositionReading,
        user_id: str,
        under_construction: bool = False,
    ) -> "VisitRecord":
        """Build a record for building/entrance stamped with the current time."""
        return cls(
            timestamp=utc_timestamp(),
            user_id=user_id,
            building_id=building.id,
            building_name=building.name,
            entrance=entrance,
            lat=position.lat,
            lng=position.lng,
            accuracy=position.accuracy,
            under_construction=under_construction,
        )

    @classmethod
    def from_json(cls, data: dict) -> "VisitRecord":
        """Parse a log row, applying the same defaults as the remote store."""
        return cls(
            timestamp=str(data.get("timestamp") or ""),
            user_id=str(data.get("userId") or ANONYMOUS_USER_ID),
            building_id=str(data.get("buildingId") or ""),
            building_name=str(data.get("buildingName") or ""),
            entrance=int(_to_float(data.get("entrance"), 1)) or 1,
            lat=_to_float(data.get("lat")),
            lng=_to_float(data.get("lng")),
            accuracy=_to_float(data.get("accuracy")),
            under_construction=_to_bool(data.get("underConstruction")),
        )

    def to_json(self) -> dict:
        return {
            "timestamp": self.timestamp,
            "userId": self.user_id,
            "buildingId": self.building_id,
            "buildingName": self.building_name,
            "entrance": self.entrance,
            "lat": self.lat,
            "lng": self.lng,
            "accuracy": self.accuracy,
            "underConstruction": self.under_construction,
        }

    def to_query_params(self) -> dict[str, str]:
        """Query parameters for the remote append operation (timestamp is server-side)."""
        return {
            "buildingId": self.building_id,
            "buildingName": self.building_name,
            "entrance": str(self.entrance),
            "lat": repr(float(self.lat)),
            "lng": repr(float(self.lng)),
            "accuracy": repr(float(self.accuracy)),
            "userId": self.user_id or ANONYMOUS_USER_ID,
            "underConstruction": "true" if self.under_construction else "false",
        }
