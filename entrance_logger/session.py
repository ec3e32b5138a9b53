"""
Session context for the shared team password.

The password is compared locally against the configured value; nothing is
stored beyond the lifetime of the Session object.
"""
from __future__ import annotations

import hmac
import logging

_LOGGER = logging.getLogger(__name__)


class Session:
    """Unauthenticated → Authenticated via login(), back via logout()."""

    def __init__(self, team_password: str | None) -> None:
        self._team_password = team_password or ""
        self.authenticated = False
        self.display_name: str | None = None

    def login(self, password: str, display_name: str | None = None) -> bool:
        """Return True and authenticate when password matches the team password."""
        if not self._team_password or not password:
            _LOGGER.info("Login rejected")
            return False
        if not hmac.compare_digest(password.encode(), self._team_password.encode()):
            _LOGGER.info("Login rejected")
            return False
        self.authenticated = True
        self.display_name = (display_name or "").strip() or None
        _LOGGER.info("Logged in%s", f" as {self.display_name}" if self.display_name else "")
        return True

    def logout(self) -> None:
        self.authenticated = False
        self.display_name = None
        _LOGGER.info("Logged out")
