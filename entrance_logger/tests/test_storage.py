"""
Tests for the key/value stores and the LocalStorage key wrapper.
"""

from __future__ import annotations

import json
import os
import tempfile
import unittest

from entrance_logger.storage import JsonFileStore, LocalStorage, MemoryStore

from .test_common import make_building, make_record


class TestMemoryStore(unittest.TestCase):

    def test_values_are_copied(self):
        store = MemoryStore()
        value = [{"a": 1}]
        store.set("k", value)
        value[0]["a"] = 2
        self.assertEqual(store.get("k"), [{"a": 1}])

    def test_default_and_delete(self):
        store = MemoryStore({"k": 1})
        self.assertEqual(store.get("missing", "x"), "x")
        store.delete("k")
        self.assertIsNone(store.get("k"))


class TestJsonFileStore(unittest.TestCase):

    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.path = os.path.join(self._tmp.name, "nested", "store.json")

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def test_persists_across_instances(self):
        JsonFileStore(self.path).set("queue", [1, 2, 3])
        self.assertEqual(JsonFileStore(self.path).get("queue"), [1, 2, 3])

    def test_delete_is_persisted(self):
        store = JsonFileStore(self.path)
        store.set("a", 1)
        store.delete("a")
        self.assertIsNone(JsonFileStore(self.path).get("a"))

    def test_corrupt_file_starts_empty(self):
        os.makedirs(os.path.dirname(self.path))
        with open(self.path, "w", encoding="utf-8") as f:
            f.write("{not json")
        with self.assertLogs("entrance_logger.storage", level="ERROR"):
            store = JsonFileStore(self.path)
        self.assertIsNone(store.get("queue"))

    def test_file_is_plain_json(self):
        JsonFileStore(self.path).set("uid", "abc")
        with open(self.path, encoding="utf-8") as f:
            self.assertEqual(json.load(f), {"uid": "abc"})


class TestLocalStorage(unittest.TestCase):

    def setUp(self) -> None:
        self.storage = LocalStorage(MemoryStore())

    def test_user_id_is_stable(self):
        first = self.storage.user_id()
        self.assertTrue(first)
        self.assertEqual(self.storage.user_id(), first)

    def test_install_prompt_flag(self):
        self.assertFalse(self.storage.install_prompt_seen)
        self.storage.mark_install_prompt_seen()
        self.assertTrue(self.storage.install_prompt_seen)

    def test_snapshot_round_trip(self):
        self.assertIsNone(self.storage.load_snapshot())
        self.storage.save_snapshot([make_building()], [make_record()])
        buildings, logs = self.storage.load_snapshot()
        self.assertEqual(buildings, [make_building()])
        self.assertEqual(logs, [make_record()])

    def test_queue_defaults_to_empty(self):
        self.assertEqual(self.storage.load_queue(), [])
        self.storage.store.set("pendingSubmissions", "garbage")
        self.assertEqual(self.storage.load_queue(), [])
