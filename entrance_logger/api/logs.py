"""
Remote log store client.

Responsible for:
- Fetching the building list and every visit record
- Appending a visit record (validated locally before anything is sent)
- Deleting visit records by building/entrance, latest only, or undoing the last one
"""
import logging

from ..const import MODE_DATA, MODE_DELETE, MODE_LOG, REQUEST_TIMEOUT
from ..errors import RemoteError
from ..models import Building, VisitRecord
from ..requests import make_request
from ..validation import validate_delete_params, validate_record

_LOGGER = logging.getLogger(__name__)


async def fetch_all(endpoint: str, timeout: int = REQUEST_TIMEOUT) -> tuple[list[Building], list[VisitRecord]]:
    """
    Fetch all buildings and visit records.

    Returns a tuple of (buildings, logs).

    Example request:
    GET <endpoint>?mode=data
    """
    raw_json = await make_request(endpoint, params={"mode": MODE_DATA}, timeout=timeout)
    if not isinstance(raw_json, dict):
        _LOGGER.error("Unexpected response format in data response: %s", raw_json)
        raise RemoteError(200, f"Unexpected response format: {raw_json!r}"[:200])

    buildings = [Building.from_json(b) for b in raw_json.get("buildings") or []]
    logs = [VisitRecord.from_json(r) for r in raw_json.get("logs") or []]
    _LOGGER.debug("Loaded %s buildings and %s logs", len(buildings), len(logs))
    return buildings, logs


async def append_log(endpoint: str, record: VisitRecord, timeout: int = REQUEST_TIMEOUT) -> bool:
    """
    Append one visit record to the remote log.

    Raises ValidationError before any network call when the record is invalid.

    Example request:
    GET <endpoint>?mode=log&buildingId=LIB-01&buildingName=Main+Library&entrance=1
        &lat=40.0&lng=-75.0&accuracy=8.0&userId=<uid>&underConstruction=false
    """
    validate_record(record)
    params = {"mode": MODE_LOG, **record.to_query_params()}
    await make_request(endpoint, params=params, timeout=timeout)
    return True


async def delete_logs(
    endpoint: str,
    building_id: str | None = None,
    entrance: int | None = None,
    latest: bool = False,
    undo_last: bool = False,
    timeout: int = REQUEST_TIMEOUT,
) -> int:
    """
    Delete visit records and return how many rows the remote store removed.

    - undo_last: the single latest record across all buildings (building_id ignored)
    - latest: the latest record of building_id (and entrance, if given)
    - neither: every record of building_id (and entrance, if given)

    The remote store rewrites every row, so a record logged concurrently may be
    lost or kept.
    """
    candidate = {"undoLast": undo_last, "latest": latest, "buildingId": building_id or ""}
    if entrance is not None:
        candidate["entrance"] = entrance
    validate_delete_params(candidate)

    params = {"mode": MODE_DELETE}
    if undo_last:
        params["undoLast"] = "true"
    else:
        params["buildingId"] = building_id
        if entrance is not None:
            params["entrance"] = str(entrance)
        if latest:
            params["latest"] = "true"

    raw_json = await make_request(endpoint, params=params, timeout=timeout)
    deleted = int(raw_json.get("deletedCount", 0)) if isinstance(raw_json, dict) else 0
    _LOGGER.info("Remote store deleted %s log rows", deleted)
    return deleted


async def undo_last_log(endpoint: str, timeout: int = REQUEST_TIMEOUT) -> int:
    """Delete the chronologically latest record across all buildings."""
    return await delete_logs(endpoint, undo_last=True, timeout=timeout)
