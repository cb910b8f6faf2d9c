"""
Triage Engine
=============

Single entry point for GI symptom triage.

Pipeline (per call, no I/O, no shared mutable state):

    validate -> emergency detector -+-> emergency decision (short-circuit)
                                    |
                                    +-> symptom extractor -> disease matcher
                                        -> risk classifier -> recommendations

Two call shapes:
- evaluate(text, context)                free-text chat message
- match_by_symptom_list(symptoms, ctx)   discrete symptom list (search)

Only TriageValidationError leaves these methods. Any other failure inside
the pipeline is logged and converted into a degraded, cautious decision.

NOT a diagnostic system - candidates are ranked matches only.
"""

import logging
from typing import FrozenSet, Optional, Sequence, Union

from ..catalog import CatalogProvider, CatalogSnapshot
from ..config import settings
from ..models import (
    Candidate,
    EmergencyResult,
    RiskAssessment,
    RiskLevel,
    TriageDecision,
    UrgencyLevel,
    UserContext,
)
from ..safety_config import disclaimer_for
from ..validation import validate_context, validate_symptom_list, validate_text
from .disease_matcher import DiseaseMatcher
from .emergency import EmergencyDetector
from .matching import DEFAULT_STRATEGY, MatchingStrategy
from .recommendations import RecommendationGenerator
from .risk_classifier import RiskClassifier
from .symptom_extractor import SymptomExtractor

logger = logging.getLogger(__name__)


class TriageEngine:
    """
    Deterministic symptom analysis and triage.

    Stateless apart from the injected catalog provider; safe to share
    between request handlers without locking.
    """

    def __init__(
        self,
        catalog: Union[CatalogProvider, CatalogSnapshot],
        strategy: MatchingStrategy = DEFAULT_STRATEGY,
        top_k: int = None,
        default_language: str = None,
        detector: EmergencyDetector = None,
        extractor: SymptomExtractor = None,
        matcher: DiseaseMatcher = None,
        classifier: RiskClassifier = None,
        recommender: RecommendationGenerator = None,
    ):
        """
        Args:
            catalog: provider (supports reload) or a fixed snapshot
            strategy: text matching strategy shared by all stages
            top_k: maximum number of candidates returned
            default_language: language when the context does not set one
        """
        if isinstance(catalog, CatalogSnapshot):
            catalog = CatalogProvider(snapshot=catalog)
        self.catalog = catalog
        self.default_language = default_language or settings.DEFAULT_LANGUAGE

        self.detector = detector or EmergencyDetector(strategy=strategy)
        self.extractor = extractor or SymptomExtractor(strategy=strategy)
        self.matcher = matcher or DiseaseMatcher(top_k=top_k or settings.MAX_CANDIDATES, strategy=strategy)
        self.classifier = classifier or RiskClassifier()
        self.recommender = recommender or RecommendationGenerator(self.default_language)

        stats = self.catalog.snapshot.stats()
        logger.info(f"Triage engine initialized: {stats['diseases']} diseases, {stats['symptoms']} symptoms")

    # ===== ENTRY POINTS =====

    def evaluate(self, text: str, context: Optional[UserContext] = None) -> TriageDecision:
        """Triage a free-text message plus optional structured context."""
        text = validate_text(text)
        context = validate_context(context)
        language = self._language(context)

        # One snapshot per call, even if the catalog is reloaded meanwhile
        catalog = self.catalog.snapshot
        emergency = None
        try:
            reported_texts = sorted(context.reported_symptoms) if context else []
            emergency = self.detector.detect("\n".join([text] + reported_texts))
            if emergency.is_emergency:
                return self._emergency_decision(emergency, language)

            symptom_ids = self.extractor.extract(text, catalog)
            for reported in reported_texts:
                symptom_ids |= self.extractor.extract(reported, catalog)

            candidates = self.matcher.match(symptom_ids, catalog, language)
            return self._decide(symptom_ids, candidates, context, catalog, language)

        except Exception:
            logger.exception("Triage pipeline failed, returning fail-safe decision")
            return self._fail_safe(emergency, language)

    def match_by_symptom_list(
        self,
        symptoms: Sequence[str],
        context: Optional[UserContext] = None,
    ) -> TriageDecision:
        """
        Triage a discrete symptom list, skipping free-text extraction.

        Terms are matched to disease symptoms by two-way substring overlap.
        Emergency escalation on this path comes from emergency-flagged
        catalog symptoms and the pain level.
        """
        terms = validate_symptom_list(symptoms)
        context = validate_context(context)
        language = self._language(context)

        catalog = self.catalog.snapshot
        try:
            if context:
                terms = terms + sorted(t for t in context.reported_symptoms if t not in terms)

            symptom_ids = self.extractor.resolve_terms(terms, catalog)
            candidates = self.matcher.match_terms(terms, catalog, language)
            return self._decide(symptom_ids, candidates, context, catalog, language)

        except Exception:
            logger.exception("Symptom list triage failed, returning fail-safe decision")
            return self._fail_safe(None, language)

    # ===== DECISIONS =====

    def _decide(
        self,
        symptom_ids: FrozenSet[str],
        candidates: Sequence[Candidate],
        context: Optional[UserContext],
        catalog: CatalogSnapshot,
        language: str,
    ) -> TriageDecision:
        assessment = self.classifier.classify(
            emergency_detected=False,
            candidates=candidates,
            context=context,
            reported_symptom_ids=symptom_ids,
            catalog=catalog,
        )
        logger.info(
            f"Triage decision: risk={assessment.risk_level.value} urgency={assessment.urgency_level.value} "
            f"rule={assessment.rule} symptoms={len(symptom_ids)} candidates={len(candidates)}"
        )
        return self._build(symptom_ids, EmergencyResult(False, ()), candidates, assessment, language)

    def _emergency_decision(self, emergency: EmergencyResult, language: str) -> TriageDecision:
        assessment = self.classifier.classify(True, (), None)
        return self._build(frozenset(), emergency, (), assessment, language)

    def _fail_safe(self, emergency: Optional[EmergencyResult], language: str) -> TriageDecision:
        # Built without the classifier, which may be what failed
        if emergency is not None and emergency.is_emergency:
            assessment = RiskAssessment(RiskLevel.EMERGENCY, UrgencyLevel.IMMEDIATE, "fail_safe")
        else:
            emergency = EmergencyResult(False, ())
            assessment = RiskAssessment(RiskLevel.MEDIUM, UrgencyLevel.URGENT, "fail_safe")
        return self._build(frozenset(), emergency, (), assessment, language, degraded=True)

    def _build(
        self,
        symptom_ids: FrozenSet[str],
        emergency: EmergencyResult,
        candidates: Sequence[Candidate],
        assessment: RiskAssessment,
        language: str,
        degraded: bool = False,
    ) -> TriageDecision:
        recommendations = self.recommender.recommend(assessment.risk_level, assessment.urgency_level, language)
        return TriageDecision(
            extracted_symptoms=frozenset(symptom_ids),
            emergency_detected=emergency.is_emergency,
            matched_emergency_keywords=tuple(emergency.matched_keywords),
            candidates=tuple(candidates),
            risk_level=assessment.risk_level,
            urgency_level=assessment.urgency_level,
            recommendations=tuple(recommendations),
            disclaimer=disclaimer_for(language, emergency=emergency.is_emergency),
            degraded=degraded,
        )

    def _language(self, context: Optional[UserContext]) -> str:
        return context.language if context else self.default_language
