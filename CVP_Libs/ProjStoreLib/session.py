"""
Mocked session provider.

The studio runs in demo mode: any email and password sign in. The provider
only tracks who is currently signed in so that the record store and the CRUD
API can scope records to an owner.
"""

import logging
from dataclasses import dataclass
from typing import Optional

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SessionUser:
    email: str
    name: str
    avatar_url: Optional[str] = None


class MockSessionProvider:
    """Demo sign-in that accepts any credentials with a plausible email."""

    def __init__(self):
        self._user: Optional[SessionUser] = None

    def sign_in(self, email: str, name: Optional[str] = None,
                password: Optional[str] = None) -> SessionUser:
        """
        Sign a user in.

        Args:
            email: Account email, must contain '@'
            name: Display name (default: the local part of the email)
            password: Ignored in demo mode

        Raises:
            ValueError: If email is empty or has no '@'
        """
        email = str(email or "").strip()
        if "@" not in email:
            raise ValueError(f"Invalid email address: {email!r}")

        display_name = (name or "").strip() or email.split("@", 1)[0]
        self._user = SessionUser(email=email, name=display_name)
        logger.info(f"Signed in {email} (demo mode)")
        return self._user

    def get_current_user(self) -> Optional[SessionUser]:
        return self._user

    @property
    def is_authenticated(self) -> bool:
        return self._user is not None

    def sign_out(self) -> None:
        if self._user is not None:
            logger.info(f"Signed out {self._user.email}")
        self._user = None
