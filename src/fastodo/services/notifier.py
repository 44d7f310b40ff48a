# Rev 0.1.0
from __future__ import annotations

from PySide6.QtCore import QObject, Signal

from fastodo.utils.logging_setup import get_logger


class Notifier(QObject):
    """
    Non-blocking user notifications ("toasts").
    Emits:
      - notified(level: str, message: str)   level is "success" | "error" | "info"
    """

    notified = Signal(str, str)

    def __init__(self):
        super().__init__()
        self._log = get_logger("Notifier")

    def success(self, message: str) -> None:
        self._log.info(message)
        self.notified.emit("success", message)

    def info(self, message: str) -> None:
        self._log.info(message)
        self.notified.emit("info", message)

    def error(self, message: str) -> None:
        self._log.warning(message)
        self.notified.emit("error", message)
