"""
Tests for configuration loading.
"""

from __future__ import annotations

import os
import unittest
from unittest.mock import patch

from entrance_logger.config import DEFAULT_STORAGE_PATH, load_config
from entrance_logger.errors import ConfigError


class TestLoadConfig(unittest.TestCase):

    def setUp(self) -> None:
        # Never pick up a developer's real .env file
        patcher = patch("entrance_logger.config.load_dotenv")
        patcher.start()
        self.addCleanup(patcher.stop)

    def test_defaults(self):
        with patch.dict(os.environ, {}, clear=True):
            config = load_config()
        self.assertIsNone(config.endpoint)
        self.assertEqual(config.team_password, "")
        self.assertEqual(config.storage_path, DEFAULT_STORAGE_PATH)
        self.assertEqual(config.request_timeout, 10)

    def test_environment_values_are_coerced(self):
        env = {
            "ENTRANCE_LOGGER_ENDPOINT": "https://script.example.test/exec",
            "ENTRANCE_LOGGER_TEAM_PASSWORD": "secret",
            "ENTRANCE_LOGGER_REQUEST_TIMEOUT": "20",
        }
        with patch.dict(os.environ, env, clear=True):
            config = load_config()
        self.assertEqual(config.endpoint, "https://script.example.test/exec")
        self.assertEqual(config.team_password, "secret")
        self.assertEqual(config.request_timeout, 20)

    def test_overrides_win_and_none_is_ignored(self):
        env = {"ENTRANCE_LOGGER_ENDPOINT": "https://a.example.test/"}
        with patch.dict(os.environ, env, clear=True):
            config = load_config(endpoint="https://b.example.test/", storage_path=None)
        self.assertEqual(config.endpoint, "https://b.example.test/")
        self.assertEqual(config.storage_path, DEFAULT_STORAGE_PATH)

    def test_invalid_values_raise_config_error(self):
        with patch.dict(os.environ, {"ENTRANCE_LOGGER_REQUEST_TIMEOUT": "0"}, clear=True):
            with self.assertRaises(ConfigError):
                load_config()
        with patch.dict(os.environ, {"ENTRANCE_LOGGER_ENDPOINT": "ftp://nope"}, clear=True):
            with self.assertRaises(ConfigError):
                load_config()

    def test_require_endpoint(self):
        with patch.dict(os.environ, {}, clear=True):
            config = load_config()
        with self.assertRaises(ConfigError):
            config.require_endpoint()
