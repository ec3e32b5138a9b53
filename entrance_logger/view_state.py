"""
ViewData — immutable snapshot of everything the building list shows, plus the
pure derivations (done/under construction status, progress, search) computed
from it. Nothing derived is ever stored.
"""
from __future__ import annotations

import dataclasses
from typing import Iterable

from .models import Building, VisitRecord


def done_set(confirmed: Iterable[VisitRecord], queued: Iterable[VisitRecord] = ()) -> set[str]:
    """Building ids with at least one confirmed or queued record."""
    return {r.building_id for r in [*confirmed, *queued]}


def construction_set(confirmed: Iterable[VisitRecord], queued: Iterable[VisitRecord] = ()) -> set[str]:
    """Building ids with at least one record flagged as under construction."""
    return {r.building_id for r in [*confirmed, *queued] if r.under_construction}


def progress_percent(buildings: list[Building], done: set[str]) -> int:
    """Rounded share of buildings that are done; 0 when there are no buildings."""
    if not buildings:
        return 0
    finished = sum(1 for b in buildings if b.id in done)
    return int(100 * finished / len(buildings) + 0.5)


def filter_buildings(buildings: list[Building], query: str) -> list[Building]:
    """Case-insensitive substring match on building name or id."""
    needle = (query or "").lower()
    return [b for b in buildings if needle in b.name.lower() or needle in b.id.lower()]


@dataclasses.dataclass(frozen=True)
class BuildingView:
    building: Building
    done: bool
    under_construction: bool

    @property
    def status(self) -> str:
        return "done" if self.done else "pending"


@dataclasses.dataclass(frozen=True)
class ViewData:
    """
    Typed, copy-on-write snapshot of the list view.

    Always replace via dataclasses.replace(); never mutate in place.
    """

    buildings: list[Building] = dataclasses.field(default_factory=list)

    # Records confirmed by the remote store (plus optimistic rows after a successful write)
    logs: list[VisitRecord] = dataclasses.field(default_factory=list)

    # Records waiting in the offline queue
    queued: list[VisitRecord] = dataclasses.field(default_factory=list)

    loading: bool = False

    # Set while showing cached or bundled data because the remote store failed
    degraded_reason: str | None = None

    query: str = ""

    @property
    def done(self) -> set[str]:
        return done_set(self.logs, self.queued)

    @property
    def under_construction(self) -> set[str]:
        return construction_set(self.logs, self.queued)

    @property
    def progress(self) -> int:
        return progress_percent(self.buildings, self.done)

    @property
    def visible(self) -> list[BuildingView]:
        """Buildings matching the search query with their derived status."""
        done = self.done
        construction = self.under_construction
        return [
            BuildingView(b, b.id in done, b.id in construction)
            for b in filter_buildings(self.buildings, self.query)
        ]
