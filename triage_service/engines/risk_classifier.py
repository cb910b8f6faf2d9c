"""
Risk Classifier
===============

Combines the emergency flag, the top disease candidate and the user context
into a risk level and an urgency level.

Guards are evaluated in order and the first match wins:

    1. emergency phrase detected          -> EMERGENCY / IMMEDIATE
    2. emergency-flagged symptom reported,
       or pain level >= 8                 -> HIGH / IMMEDIATE
    3. top candidate severe (or emergency)-> HIGH / URGENT (IMMEDIATE for emergency)
    4. top candidate moderate,
       or pain level 6-7                  -> MEDIUM / URGENT
    5. otherwise                          -> LOW / ROUTINE

Explicit emergency signals always dominate disease matching.
"""

import logging
from typing import Iterable, Optional, Sequence

from ..catalog import CatalogSnapshot
from ..models import (
    Candidate,
    RiskAssessment,
    RiskLevel,
    SeverityLevel,
    UrgencyLevel,
    UserContext,
)

logger = logging.getLogger(__name__)


class RiskClassifier:

    HIGH_PAIN_THRESHOLD = 8
    MEDIUM_PAIN_RANGE = (6, 7)

    def classify(
        self,
        emergency_detected: bool,
        candidates: Sequence[Candidate],
        context: Optional[UserContext],
        reported_symptom_ids: Iterable[str] = (),
        catalog: Optional[CatalogSnapshot] = None,
    ) -> RiskAssessment:
        pain = context.pain_level if context else None

        if emergency_detected:
            return RiskAssessment(RiskLevel.EMERGENCY, UrgencyLevel.IMMEDIATE, "emergency_phrase")

        if catalog is not None:
            flagged = catalog.emergency_symptom_ids() & frozenset(reported_symptom_ids)
            if flagged:
                logger.info(f"Emergency-flagged symptoms reported: {sorted(flagged)}")
                return RiskAssessment(RiskLevel.HIGH, UrgencyLevel.IMMEDIATE, "emergency_symptom")

        if pain is not None and pain >= self.HIGH_PAIN_THRESHOLD:
            return RiskAssessment(RiskLevel.HIGH, UrgencyLevel.IMMEDIATE, "high_pain")

        top = candidates[0] if candidates else None

        if top is not None and top.severity_level == SeverityLevel.EMERGENCY:
            return RiskAssessment(RiskLevel.HIGH, UrgencyLevel.IMMEDIATE, "emergency_disease")

        if top is not None and top.severity_level == SeverityLevel.SEVERE:
            return RiskAssessment(RiskLevel.HIGH, UrgencyLevel.URGENT, "severe_disease")

        if top is not None and top.severity_level == SeverityLevel.MODERATE:
            return RiskAssessment(RiskLevel.MEDIUM, UrgencyLevel.URGENT, "moderate_disease")

        low, high = self.MEDIUM_PAIN_RANGE
        if pain is not None and low <= pain <= high:
            return RiskAssessment(RiskLevel.MEDIUM, UrgencyLevel.URGENT, "medium_pain")

        return RiskAssessment(RiskLevel.LOW, UrgencyLevel.ROUTINE, "default")
