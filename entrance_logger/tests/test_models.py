"""
Tests for domain models and the validation shared with the remote store.
"""

from __future__ import annotations

import unittest
from datetime import datetime, timezone

from entrance_logger.errors import ValidationError
from entrance_logger.models import Building, PositionReading, VisitRecord, utc_timestamp
from entrance_logger.validation import (
    BUILDING_REQUIRED_MESSAGE,
    MISSING_FIELDS_MESSAGE,
    OUT_OF_RANGE_MESSAGE,
    validate_delete_params,
    validate_log_params,
    validate_record,
)

from .test_common import make_building, make_record


class TestModels(unittest.TestCase):

    def test_building_defaults_to_five_entrances(self):
        building = Building.from_json({"id": "GYM-01", "name": "Recreation Center"})
        self.assertIsNone(building.entrances_max)
        self.assertEqual(building.entrances, 5)
        self.assertNotIn("entrancesMax", building.to_json())

    def test_building_keeps_entrances_max(self):
        building = Building.from_json({"id": "LIB-01", "name": "Main Library", "entrancesMax": "2"})
        self.assertEqual(building.entrances, 2)

    def test_building_tolerates_hand_edited_entrances_max(self):
        self.assertEqual(Building.from_json({"id": "A", "name": "A", "entrancesMax": "2.5"}).entrances_max, 2)
        building = Building.from_json({"id": "B", "name": "B", "entrancesMax": "three"})
        self.assertIsNone(building.entrances_max)
        self.assertEqual(building.entrances, 5)


    def test_record_from_json_applies_store_defaults(self):
        record = VisitRecord.from_json({"buildingId": "LIB-01", "buildingName": "Main Library"})
        self.assertEqual(record.user_id, "anon")
        self.assertEqual(record.entrance, 1)
        self.assertEqual(record.lat, 0.0)
        self.assertFalse(record.under_construction)

    def test_record_from_json_reads_string_flags(self):
        self.assertTrue(VisitRecord.from_json({"underConstruction": "true"}).under_construction)
        self.assertFalse(VisitRecord.from_json({"underConstruction": "false"}).under_construction)
        self.assertTrue(VisitRecord.from_json({"underConstruction": True}).under_construction)

    def test_record_json_round_trip(self):
        record = make_record(under_construction=True)
        self.assertEqual(VisitRecord.from_json(record.to_json()), record)

    def test_create_stamps_current_time(self):
        record = VisitRecord.create(make_building(), 2, PositionReading(40.0, -75.0, 8.0), "device-1")
        self.assertEqual(record.building_id, "LIB-01")
        self.assertEqual(record.building_name, "Main Library")
        self.assertEqual(record.entrance, 2)
        self.assertTrue(record.timestamp.endswith("Z"))

    def test_query_params_are_strings(self):
        params = make_record(under_construction=True).to_query_params()
        self.assertEqual(params["entrance"], "1")
        self.assertEqual(params["lat"], "40.0")
        self.assertEqual(params["underConstruction"], "true")
        self.assertNotIn("timestamp", params)

    def test_query_params_fall_back_to_anon_user(self):
        self.assertEqual(make_record(user_id="").to_query_params()["userId"], "anon")

    def test_utc_timestamp_has_millisecond_precision(self):
        moment = datetime(2024, 5, 1, 12, 0, 0, 123456, tzinfo=timezone.utc)
        self.assertEqual(utc_timestamp(moment), "2024-05-01T12:00:00.123Z")


class TestValidation(unittest.TestCase):

    def test_valid_record_passes(self):
        data = validate_record(make_record())
        self.assertEqual(data["buildingId"], "LIB-01")
        self.assertEqual(data["entrance"], 1)

    def test_rejects_latitude_out_of_range(self):
        with self.assertRaises(ValidationError) as ctx:
            validate_record(make_record(lat=91.0))
        self.assertEqual(str(ctx.exception), OUT_OF_RANGE_MESSAGE)

    def test_rejects_longitude_out_of_range(self):
        with self.assertRaises(ValidationError) as ctx:
            validate_record(make_record(lng=200.0))
        self.assertEqual(str(ctx.exception), OUT_OF_RANGE_MESSAGE)

    def test_rejects_nan_coordinates(self):
        with self.assertRaises(ValidationError):
            validate_record(make_record(lat=float("nan")))

    def test_rejects_empty_building(self):
        with self.assertRaises(ValidationError) as ctx:
            validate_record(make_record(building_id=""))
        self.assertEqual(str(ctx.exception), MISSING_FIELDS_MESSAGE)

    def test_rejects_entrance_zero(self):
        with self.assertRaises(ValidationError) as ctx:
            validate_record(make_record(entrance=0))
        self.assertEqual(str(ctx.exception), MISSING_FIELDS_MESSAGE)

    def test_query_string_values_are_coerced(self):
        data = validate_log_params({
            "buildingId": "LIB-01", "buildingName": "Main Library", "entrance": "2",
            "lat": "40.5", "lng": "-75.25", "underConstruction": "true", "mode": "log",
        })
        self.assertEqual(data["entrance"], 2)
        self.assertEqual(data["lat"], 40.5)
        self.assertTrue(data["underConstruction"])
        self.assertEqual(data["userId"], "anon")
        self.assertNotIn("mode", data)

    def test_missing_coordinates_rejected(self):
        with self.assertRaises(ValidationError) as ctx:
            validate_log_params({"buildingId": "LIB-01", "buildingName": "Main Library", "entrance": "1"})
        self.assertEqual(str(ctx.exception), MISSING_FIELDS_MESSAGE)

    def test_delete_requires_building_unless_undo(self):
        with self.assertRaises(ValidationError) as ctx:
            validate_delete_params({})
        self.assertEqual(str(ctx.exception), BUILDING_REQUIRED_MESSAGE)
        self.assertTrue(validate_delete_params({"undoLast": "true"})["undoLast"])

    def test_delete_coerces_entrance(self):
        params = validate_delete_params({"buildingId": "LIB-01", "entrance": "2", "latest": "true"})
        self.assertEqual(params["entrance"], 2)
        self.assertTrue(params["latest"])
