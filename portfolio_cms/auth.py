"""Passcode gate for admin operations.

A single shared passcode; the admin flag lives only in memory. This is a
convenience gate, not a security boundary.
"""

import hmac

DEFAULT_PASSCODE = "0729"


class AdminSession:
    """Volatile admin mode toggled by the shared passcode."""

    def __init__(self, passcode: str = DEFAULT_PASSCODE):
        self._passcode = passcode
        self.is_admin = False

    def authenticate(self, attempt: str) -> bool:
        """Enter admin mode if attempt matches the passcode."""
        self.is_admin = hmac.compare_digest(attempt.encode("utf-8"), self._passcode.encode("utf-8"))
        return self.is_admin

    def logout(self) -> None:
        self.is_admin = False
