"""
Validation schemas shared by the remote store client and the reference endpoint.

Both sides run the very same schema so a record rejected locally is also
rejected remotely, and vice versa.
"""
from __future__ import annotations

import voluptuous as vol

from .const import ANONYMOUS_USER_ID
from .errors import ValidationError
from .models import VisitRecord

MISSING_FIELDS_MESSAGE = "Missing or invalid fields"
OUT_OF_RANGE_MESSAGE = "Lat/Lng out of range"
BUILDING_REQUIRED_MESSAGE = "buildingId required (unless undoLast=true)"


def wire_boolean(value) -> bool:
    """Only the literal string 'true' is true on the wire; other types use truthiness."""
    if isinstance(value, str):
        return value.strip().lower() == "true"
    return bool(value)


non_empty_string = vol.All(vol.Coerce(str), vol.Length(min=1))
entrance_number = vol.All(vol.Coerce(int), vol.Range(min=1))

LOG_SCHEMA = vol.Schema(
    {
        vol.Required("buildingId"): non_empty_string,
        vol.Required("buildingName"): non_empty_string,
        vol.Required("entrance"): entrance_number,
        vol.Required("lat"): vol.All(vol.Coerce(float), vol.Range(min=-90, max=90, msg=OUT_OF_RANGE_MESSAGE)),
        vol.Required("lng"): vol.All(vol.Coerce(float), vol.Range(min=-180, max=180, msg=OUT_OF_RANGE_MESSAGE)),
        vol.Optional("accuracy", default=0.0): vol.All(vol.Coerce(float), vol.Range(min=0)),
        vol.Optional("userId", default=ANONYMOUS_USER_ID): vol.Coerce(str),
        vol.Optional("underConstruction", default=False): wire_boolean,
    },
    extra=vol.REMOVE_EXTRA,
)

DELETE_SCHEMA = vol.Schema(
    {
        vol.Optional("buildingId", default=""): vol.Coerce(str),
        vol.Optional("entrance"): entrance_number,
        vol.Optional("latest", default=False): wire_boolean,
        vol.Optional("undoLast", default=False): wire_boolean,
    },
    extra=vol.REMOVE_EXTRA,
)


def validate_log_params(data: dict) -> dict:
    """
    Validate and coerce the fields of an append request.

    Returns the normalized dict. Raises ValidationError with the same message
    the remote store would answer with.
    """
    try:
        return LOG_SCHEMA(data)
    except vol.MultipleInvalid as exc:
        if all(err.error_message == OUT_OF_RANGE_MESSAGE for err in exc.errors):
            raise ValidationError(OUT_OF_RANGE_MESSAGE) from exc
        raise ValidationError(MISSING_FIELDS_MESSAGE) from exc


def validate_record(record: VisitRecord) -> dict:
    """Validate a visit record before it is sent anywhere."""
    return validate_log_params(record.to_json())


def validate_delete_params(data: dict) -> dict:
    """Validate a delete request; buildingId is required unless undoLast is set."""
    try:
        params = DELETE_SCHEMA(data)
    except vol.MultipleInvalid as exc:
        raise ValidationError(MISSING_FIELDS_MESSAGE) from exc
    if not params["undoLast"] and not params["buildingId"]:
        raise ValidationError(BUILDING_REQUIRED_MESSAGE)
    return params
