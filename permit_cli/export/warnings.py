"""Collector for non-fatal export diagnostics."""

import logging
from typing import List

logger = logging.getLogger(__name__)


class WarningCollector:
    """Accumulates warnings from every export stage.

    One instance is created per export and handed to each generator.
    Warnings keep their insertion order and are never deduplicated.
    """

    def __init__(self):
        self._warnings: List[str] = []

    def add_warning(self, warning: str):
        """Record a warning about partially exported data."""
        logger.warning(warning)
        self._warnings.append(warning)

    def get_warnings(self) -> List[str]:
        """Return a copy of the warnings recorded so far."""
        return list(self._warnings)

    def __len__(self) -> int:
        return len(self._warnings)
