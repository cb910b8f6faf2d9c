"""
Triage Data Model
=================

Immutable value types shared by the catalog, the engines and the API layer.

Catalog entities (Symptom, Disease, DiseaseSymptomRelation) are built once at
catalog load. UserContext and TriageDecision live for a single request.

NOT a diagnostic model - candidates are ranked matches, never a diagnosis.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, FrozenSet, Optional, Tuple


class SymptomSeverity(Enum):
    """Typical intensity of a symptom."""
    MILD = "mild"
    MODERATE = "moderate"
    SEVERE = "severe"


class SeverityLevel(Enum):
    """Disease severity, ordered mild < moderate < severe < emergency."""
    MILD = "mild"
    MODERATE = "moderate"
    SEVERE = "severe"
    EMERGENCY = "emergency"

    @property
    def rank(self) -> int:
        return SEVERITY_RANK[self]


SEVERITY_RANK = {
    SeverityLevel.MILD: 1,
    SeverityLevel.MODERATE: 2,
    SeverityLevel.SEVERE: 3,
    SeverityLevel.EMERGENCY: 4,
}


class RiskLevel(Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    EMERGENCY = "emergency"


class UrgencyLevel(Enum):
    ROUTINE = "routine"
    URGENT = "urgent"
    IMMEDIATE = "immediate"


class DurationBucket(Enum):
    """How long the user has had the symptoms (fixed list)."""
    MINUTES = "minutos"
    HOURS = "horas"
    ONE_DAY = "1 día"
    TWO_THREE_DAYS = "2-3 días"
    ONE_WEEK = "1 semana"
    TWO_FOUR_WEEKS = "2-4 semanas"
    ONE_MONTH = "1 mes"
    OVER_ONE_MONTH = "más de 1 mes"
    CHRONIC = "crónico"

    @classmethod
    def parse(cls, value: str) -> Optional["DurationBucket"]:
        """Resolve a Spanish bucket or its English alias, case-insensitively."""
        key = value.strip().lower()
        for bucket in cls:
            if bucket.value == key:
                return bucket
        return DURATION_ALIASES.get(key)


DURATION_ALIASES = {
    "minutes": DurationBucket.MINUTES,
    "hours": DurationBucket.HOURS,
    "1 day": DurationBucket.ONE_DAY,
    "1 dia": DurationBucket.ONE_DAY,
    "2-3 days": DurationBucket.TWO_THREE_DAYS,
    "2-3 dias": DurationBucket.TWO_THREE_DAYS,
    "1 week": DurationBucket.ONE_WEEK,
    "2-4 weeks": DurationBucket.TWO_FOUR_WEEKS,
    "1 month": DurationBucket.ONE_MONTH,
    ">1 month": DurationBucket.OVER_ONE_MONTH,
    "more than 1 month": DurationBucket.OVER_ONE_MONTH,
    "mas de 1 mes": DurationBucket.OVER_ONE_MONTH,
    "chronic": DurationBucket.CHRONIC,
    "cronico": DurationBucket.CHRONIC,
}


# ===== CATALOG ENTITIES =====

@dataclass(frozen=True)
class Symptom:
    id: str
    name: str
    keywords: FrozenSet[str]
    is_emergency_symptom: bool = False
    severity: SymptomSeverity = SymptomSeverity.MILD
    category: str = "gastrointestinal"

    @property
    def terms(self) -> Tuple[str, ...]:
        """Canonical name plus keyword aliases, lowercased, in stable order."""
        return (self.name.lower(),) + tuple(sorted(k.lower() for k in self.keywords))


@dataclass(frozen=True)
class Disease:
    id: str
    name: str
    category: str
    severity_level: SeverityLevel


@dataclass(frozen=True)
class DiseaseSymptomRelation:
    disease_id: str
    symptom_id: str
    weight: float
    probability: float
    severity: SymptomSeverity


# ===== PER-REQUEST TYPES =====

@dataclass(frozen=True)
class UserContext:
    """Optional structured context supplied with a message."""
    age_years: Optional[int] = None
    pain_level: Optional[int] = None
    duration_bucket: Optional[DurationBucket] = None
    reported_symptoms: FrozenSet[str] = frozenset()
    language: str = "es"


@dataclass(frozen=True)
class Candidate:
    disease_id: str
    disease_name: str
    severity_level: SeverityLevel
    match_score: float
    matching_symptoms: Tuple[str, ...]
    total_symptoms: int
    urgency_indicators: Tuple[str, ...] = ()
    weighted_score: float = 0.0
    contributing_symptoms: Tuple[Tuple[str, float], ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "disease_id": self.disease_id,
            "disease": self.disease_name,
            "severity_level": self.severity_level.value,
            "match_score": round(self.match_score, 4),
            "matching_symptoms": list(self.matching_symptoms),
            "total_symptoms": self.total_symptoms,
            "urgency_indicators": list(self.urgency_indicators),
            "weighted_score": round(self.weighted_score, 4),
            "contributing_symptoms": [
                {"symptom": s, "weight": w} for s, w in self.contributing_symptoms
            ],
        }


@dataclass(frozen=True)
class TriageDecision:
    """Complete structured output of one engine evaluation."""
    extracted_symptoms: FrozenSet[str]
    emergency_detected: bool
    matched_emergency_keywords: Tuple[str, ...]
    candidates: Tuple[Candidate, ...]
    risk_level: RiskLevel
    urgency_level: UrgencyLevel
    recommendations: Tuple[str, ...]
    disclaimer: str = ""
    degraded: bool = False

    @property
    def top_candidate(self) -> Optional[Candidate]:
        return self.candidates[0] if self.candidates else None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "extracted_symptoms": sorted(self.extracted_symptoms),
            "emergency_detected": self.emergency_detected,
            "matched_emergency_keywords": list(self.matched_emergency_keywords),
            "candidates": [c.to_dict() for c in self.candidates],
            "risk_level": self.risk_level.value,
            "urgency_level": self.urgency_level.value,
            "recommendations": list(self.recommendations),
            "disclaimer": self.disclaimer,
            "degraded": self.degraded,
        }


@dataclass(frozen=True)
class EmergencyResult:
    is_emergency: bool
    matched_keywords: Tuple[str, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class RiskAssessment:
    risk_level: RiskLevel
    urgency_level: UrgencyLevel
    rule: str = ""
