# Rev 0.1.0
"""Shared session plumbing for the collection managers.

A manager's collections belong to one principal. Every principal change
bumps a generation counter; work started under an older generation (a slow
fetch, a mutation still in flight) is dropped when it completes instead of
being applied to the new session's state.
"""
from __future__ import annotations

import asyncio
from typing import Optional, Set, Tuple

from PySide6.QtCore import QObject, Signal

from fastodo.repositories.remote_store import RemoteStore
from fastodo.services.notifier import Notifier
from fastodo.services.session import SessionProvider
from fastodo.utils.logging_setup import get_logger

# (principal id, generation) captured when an operation starts
Scope = Tuple[str, int]


class SessionBoundManager(QObject):
    loadingChanged = Signal(bool)

    def __init__(self, store: RemoteStore, session: SessionProvider, notifier: Notifier, log_name: str):
        super().__init__()
        self._store = store
        self._session = session
        self._notifier = notifier
        self._log = get_logger(log_name)
        self._loading = True
        self._generation = 0
        self._pending: Set[asyncio.Future] = set()
        self._inflight: Optional[asyncio.Future] = None
        self._inflight_generation = -1
        session.principalChanged.connect(self._on_principal_changed)

    # ---- state ----
    @property
    def loading(self) -> bool:
        return self._loading

    def _set_loading(self, value: bool) -> None:
        if value != self._loading:
            self._loading = value
            self.loadingChanged.emit(value)

    def _reset(self) -> None:
        """Clear the collections and emit their change signals. Subclasses must override."""
        raise NotImplementedError

    async def _load(self) -> None:
        """Fetch the current principal's rows into local state. Subclasses must override."""
        raise NotImplementedError

    async def load(self) -> None:
        """Fetch the principal's collection; joins a fetch already running for this session."""
        task = self._inflight
        if task is None or task.done() or self._inflight_generation != self._generation:
            task = asyncio.ensure_future(self._load())
            self._track(task)
        await task

    def _track(self, task: asyncio.Future) -> None:
        self._inflight = task
        self._inflight_generation = self._generation
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    # ---- session ----
    def _on_principal_changed(self, principal) -> None:
        self._generation += 1
        self._reset()
        self._set_loading(True)
        self._schedule_load()

    def _schedule_load(self) -> None:
        # Without a running loop the owner is expected to await load() itself.
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            return
        self._track(loop.create_task(self._load()))

    def _scope(self) -> Optional[Scope]:
        principal = self._session.principal
        if principal is None:
            return None
        return principal.id, self._generation

    def _is_current(self, scope: Scope) -> bool:
        principal = self._session.principal
        return (
            principal is not None
            and principal.id == scope[0]
            and self._generation == scope[1]
        )

    # ---- failures ----
    def _fail(self, action: str, message: str) -> None:
        """Log the active exception and surface ``message`` to the user."""
        self._log.exception("Error %s", action)
        self._notifier.error(message)
