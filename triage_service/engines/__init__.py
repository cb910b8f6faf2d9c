# Triage Engines Package
"""
Core engines for GI symptom triage.
"""

from .disease_matcher import DiseaseMatcher
from .emergency import EmergencyDetector
from .explainability import ExplainabilityEngine
from .matching import MatchingStrategy, SubstringStrategy
from .recommendations import RecommendationGenerator
from .risk_classifier import RiskClassifier
from .symptom_extractor import SymptomExtractor
from .triage_engine import TriageEngine

__all__ = [
    "DiseaseMatcher",
    "EmergencyDetector",
    "ExplainabilityEngine",
    "MatchingStrategy",
    "SubstringStrategy",
    "RecommendationGenerator",
    "RiskClassifier",
    "SymptomExtractor",
    "TriageEngine",
]
