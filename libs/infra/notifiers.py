"""Local alert feedback."""

from __future__ import annotations

import logging
import sys
from typing import TextIO

logger = logging.getLogger(__name__)

ALERT_BEEPS = 3


class ConsoleNotifier:
    """Rings the terminal bell and logs the alert; never raises."""

    def __init__(self, stream: TextIO | None = None, beeps: int = ALERT_BEEPS) -> None:
        self._stream = stream or sys.stdout
        self._beeps = beeps

    def notify(self, confidence: float) -> None:
        logger.warning("FIRE DETECTED (confidence %.1f%%)", confidence)
        try:
            self._stream.write("\a" * self._beeps)
            self._stream.flush()
        except (OSError, ValueError) as error:
            logger.debug("Audio feedback unavailable: %s", error)
