"""
Tests for the shared-password Session.
"""

from __future__ import annotations

import unittest

from entrance_logger.session import Session


class TestSession(unittest.TestCase):

    def test_login_with_correct_password(self):
        session = Session("letmein")
        self.assertTrue(session.login("letmein", display_name="  Sam "))
        self.assertTrue(session.authenticated)
        self.assertEqual(session.display_name, "Sam")

    def test_login_with_wrong_password(self):
        session = Session("letmein")
        self.assertFalse(session.login("nope"))
        self.assertFalse(session.authenticated)

    def test_empty_team_password_never_authenticates(self):
        session = Session("")
        self.assertFalse(session.login(""))
        self.assertFalse(Session(None).login("anything"))

    def test_logout_clears_state(self):
        session = Session("letmein")
        session.login("letmein", "Sam")
        session.logout()
        self.assertFalse(session.authenticated)
        self.assertIsNone(session.display_name)
