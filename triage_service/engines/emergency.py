"""
Emergency Detector
==================

Scans raw user text for critical phrases before any other stage runs.

Every phrase is checked (no early exit) so the full evidence list reaches
the user and the logs. A positive result is final: no later stage may
downgrade it.
"""

import logging
from typing import Dict, Optional, Sequence, Tuple

from ..models import EmergencyResult
from ..safety_config import CRITICAL_EMERGENCY_PHRASES
from .matching import DEFAULT_STRATEGY, MatchingStrategy

logger = logging.getLogger(__name__)


class EmergencyDetector:
    """Case-insensitive critical phrase scanner."""

    def __init__(
        self,
        phrases: Optional[Dict[str, Sequence[str]]] = None,
        strategy: MatchingStrategy = DEFAULT_STRATEGY,
    ):
        """
        Args:
            phrases: canonical phrase -> variants. Defaults to the reviewed
                list in safety_config. A canonical phrase always matches
                itself, even when its variant list omits it.
            strategy: text matching strategy
        """
        source = CRITICAL_EMERGENCY_PHRASES if phrases is None else phrases
        self.strategy = strategy
        self.phrases: Tuple[Tuple[str, Tuple[str, ...]], ...] = tuple(
            (canonical, tuple(dict.fromkeys((canonical,) + tuple(variants))))
            for canonical, variants in source.items()
        )

    def detect(self, text: str) -> EmergencyResult:
        if not text:
            return EmergencyResult(is_emergency=False, matched_keywords=())

        normalized = self.strategy.normalize(text)
        matched = [
            canonical
            for canonical, variants in self.phrases
            if self.strategy.contains_any(normalized, variants)
        ]

        if matched:
            logger.warning(f"Emergency phrases detected: {matched}")
        return EmergencyResult(is_emergency=bool(matched), matched_keywords=tuple(matched))
