"""Progress state for downloads and long-running status reports."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

_MIB = 1024.0 * 1024.0


@dataclass
class DownloadProgress:
    """Percentage, range and status text of a running download.

    ``on_change`` is called with the instance after every change so a
    front end can redraw immediately.
    """

    value: int = 0
    minimum: int = 0
    maximum: int = 100
    status: str = "Initializing download..."
    on_change: Callable[[DownloadProgress], None] | None = None

    @property
    def indeterminate(self) -> bool:
        """True once the total size turned out to be unknown."""
        return self.minimum == 0 and self.maximum == 0

    def _set_value(self, value: int) -> None:
        # Values outside the current range are ignored, like a progress bar does.
        if self.minimum <= value <= self.maximum:
            self.value = value

    def _changed(self) -> None:
        if self.on_change is not None:
            self.on_change(self)

    def set_status(self, text: str) -> None:
        self.status = text
        self._changed()

    def update(self, bytes_received: int, bytes_total: int) -> None:
        """Record bytes received so far out of a total (<= 0 when unknown)."""
        received_mb = bytes_received / _MIB
        if bytes_total > 0:
            percentage = int(bytes_received / bytes_total * 100)
            self._set_value(percentage)
            self.status = (
                f"Downloading: {received_mb:.2f} MB / {bytes_total / _MIB:.2f} MB "
                f"({percentage}%)"
            )
        else:
            self.status = f"Downloading: {received_mb:.2f} MB"
            self.minimum = self.maximum = 0
        self._changed()

    def finish(self, success: bool, message: str = "") -> None:
        """Mark the download as finished, successfully or with an error message."""
        if success:
            self.status = "Download complete! Preparing for update..."
            self._set_value(100)
        else:
            self.status = "Download failed: " + message
            self._set_value(0)
        self._changed()