# Rev 0.1.0
from __future__ import annotations

from typing import Optional

from PySide6.QtCore import QObject, Signal

from fastodo.models.entities import Principal
from fastodo.services.errors import AuthenticationError, RemoteStoreError
from fastodo.services.notifier import Notifier
from fastodo.utils.logging_setup import get_logger


class SessionProvider(QObject):
    """
    Holds the authenticated principal.
    Emits:
      - principalChanged(principal: Principal | None)

    ``auth`` must expose ``create_user(email, password)`` and
    ``verify_user(email, password)`` coroutines returning a Principal and
    raising AuthenticationError on refusal.
    """

    principalChanged = Signal(object)

    def __init__(self, auth, notifier: Optional[Notifier] = None):
        super().__init__()
        self._auth = auth
        self._notifier = notifier
        self._principal: Optional[Principal] = None
        self._log = get_logger("Session")

    @property
    def principal(self) -> Optional[Principal]:
        return self._principal

    @property
    def is_authenticated(self) -> bool:
        return self._principal is not None

    def set_principal(self, principal: Optional[Principal]) -> None:
        if principal == self._principal:
            return
        self._principal = principal
        self._log.info("Principal changed: %s", principal.email if principal else "<signed out>")
        self.principalChanged.emit(principal)

    async def sign_up(self, email: str, password: str) -> Optional[Principal]:
        try:
            principal = await self._auth.create_user(email, password)
        except (AuthenticationError, RemoteStoreError) as e:
            self._log.warning("Sign-up failed for %s: %s", email, e)
            self._notify_error(str(e) or "Error signing up")
            return None
        if self._notifier is not None:
            self._notifier.success("Signed up successfully!")
        return principal

    async def sign_in(self, email: str, password: str) -> Optional[Principal]:
        try:
            principal = await self._auth.verify_user(email, password)
        except (AuthenticationError, RemoteStoreError) as e:
            self._log.warning("Sign-in failed for %s: %s", email, e)
            self._notify_error(str(e) or "Error signing in")
            return None
        self.set_principal(principal)
        if self._notifier is not None:
            self._notifier.success("Signed in successfully!")
        return principal

    def sign_out(self) -> None:
        self.set_principal(None)

    def _notify_error(self, message: str) -> None:
        if self._notifier is not None:
            self._notifier.error(message)
