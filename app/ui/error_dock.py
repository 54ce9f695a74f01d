import time
from datetime import datetime

from PyQt6.QtWidgets import QDockWidget, QTextEdit


class ErrorDock(QDockWidget):
    def __init__(self, repeat_window_s: float = 2.0) -> None:
        super().__init__('Errors')
        self.setObjectName('ErrorDock')
        self._repeat_window_s = float(repeat_window_s)
        self._last_message: str = ""
        self._last_message_at: float = 0.0
        self.error_count = 0

        self.text = QTextEdit()
        self.text.setReadOnly(True)
        self.text.setPlaceholderText('Chart callback errors will appear here.')
        self.setWidget(self.text)

    def append_error(self, message: str) -> None:
        # Label callbacks run on every paint; one failure would otherwise flood the dock.
        now = time.monotonic()
        if message == self._last_message and (now - self._last_message_at) < self._repeat_window_s:
            return
        self._last_message = message
        self._last_message_at = now
        self.error_count += 1
        self.text.append(f"[{datetime.now():%H:%M:%S}] {message}")

    def clear(self) -> None:
        self._last_message = ""
        self._last_message_at = 0.0
        self.error_count = 0
        self.text.clear()
