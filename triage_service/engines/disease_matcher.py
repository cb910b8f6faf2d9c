"""
Disease Matcher
===============

Scores catalog diseases against reported symptoms and ranks them.

Two scoring modes share one formula and one ranking:

- match():       reported catalog symptom ids (canonical mode)
- match_terms(): raw symptom strings, matched to a disease's symptoms by
                 two-way substring overlap (free-text search mode)

    match_score = |reported symptoms related to the disease|
                  / |symptoms related to the disease|

Ranking keys, in order:
    1. match_score, descending
    2. disease severity, descending (emergency > severe > moderate > mild)
    3. summed relation weight of the matched symptoms, descending
    4. disease id, ascending

Truncation to the top N happens after the full sort.
"""

import logging
from typing import Callable, FrozenSet, Iterable, List, Sequence

from ..catalog import CatalogSnapshot
from ..models import Candidate, Disease, DiseaseSymptomRelation, SeverityLevel
from ..safety_config import ALARM_TERMS, URGENCY_INDICATORS
from .explainability import ExplainabilityEngine
from .matching import DEFAULT_STRATEGY, MatchingStrategy

logger = logging.getLogger(__name__)


class DiseaseMatcher:

    DEFAULT_TOP_K = 10

    def __init__(
        self,
        top_k: int = DEFAULT_TOP_K,
        strategy: MatchingStrategy = DEFAULT_STRATEGY,
        explainability: ExplainabilityEngine = None,
    ):
        self.top_k = top_k
        self.strategy = strategy
        self.explainability = explainability or ExplainabilityEngine()

    def match(
        self,
        symptom_ids: Iterable[str],
        catalog: CatalogSnapshot,
        language: str = "es",
    ) -> List[Candidate]:
        """Rank diseases by the fraction of their symptoms that were reported."""
        reported = frozenset(symptom_ids)
        if not reported:
            return []
        return self._rank(catalog, lambda rel: rel.symptom_id in reported, language)

    def match_terms(
        self,
        terms: Sequence[str],
        catalog: CatalogSnapshot,
        language: str = "es",
    ) -> List[Candidate]:
        """Rank diseases by overlap between raw terms and their symptom names."""
        terms = [t.strip() for t in terms if t and t.strip()]
        if not terms:
            return []

        def overlaps(rel: DiseaseSymptomRelation) -> bool:
            symptom = catalog.symptoms[rel.symptom_id]
            return any(self.strategy.overlaps(term, st) for term in terms for st in symptom.terms)

        return self._rank(catalog, overlaps, language)

    # ===== SCORING =====

    def _rank(
        self,
        catalog: CatalogSnapshot,
        is_match: Callable[[DiseaseSymptomRelation], bool],
        language: str,
    ) -> List[Candidate]:
        scored = []
        for disease_id, relations in catalog.relations.items():
            # Diseases with no relations are absent from catalog.relations
            if not relations:
                continue
            matched = [rel for rel in relations if is_match(rel)]
            if not matched:
                continue

            disease = catalog.diseases[disease_id]
            matched_ids = frozenset(rel.symptom_id for rel in matched)
            weight_sum = round(sum(rel.weight for rel in matched), 6)
            candidate = self._build_candidate(disease, relations, matched_ids, catalog, language)
            scored.append((candidate, weight_sum))

        scored.sort(
            key=lambda item: (
                -item[0].match_score,
                -item[0].severity_level.rank,
                -item[1],
                item[0].disease_id,
            )
        )
        ranked = [candidate for candidate, _ in scored[: self.top_k]]

        if ranked:
            top = [(c.disease_id, round(c.match_score, 3)) for c in ranked[:3]]
            logger.info(f"Matched {len(scored)} diseases, top: {top}")
        return ranked

    def _build_candidate(
        self,
        disease: Disease,
        relations: Sequence[DiseaseSymptomRelation],
        matched_ids: FrozenSet[str],
        catalog: CatalogSnapshot,
        language: str,
    ) -> Candidate:
        matching_symptoms = tuple(
            catalog.symptoms[rel.symptom_id].name
            for rel in relations
            if rel.symptom_id in matched_ids
        )
        return Candidate(
            disease_id=disease.id,
            disease_name=disease.name,
            severity_level=disease.severity_level,
            match_score=len(matched_ids) / len(relations),
            matching_symptoms=matching_symptoms,
            total_symptoms=len(relations),
            urgency_indicators=tuple(self.urgency_indicators(disease, matched_ids, catalog, language)),
            weighted_score=self.explainability.weighted_coverage(relations, matched_ids),
            contributing_symptoms=tuple(self.explainability.symptom_contributions(relations, matched_ids)),
        )

    def urgency_indicators(
        self,
        disease: Disease,
        matched_ids: Iterable[str],
        catalog: CatalogSnapshot,
        language: str = "es",
    ) -> List[str]:
        """Severity-based warnings plus an alarm flag for alarming symptoms."""
        texts = URGENCY_INDICATORS.get(language, URGENCY_INDICATORS["es"])
        indicators = []

        if disease.severity_level == SeverityLevel.EMERGENCY:
            indicators.extend(texts["emergency"])
        elif disease.severity_level == SeverityLevel.SEVERE:
            indicators.extend(texts["severe"])

        symptoms = [catalog.symptoms[s] for s in matched_ids if s in catalog.symptoms]
        has_alarm = any(
            s.is_emergency_symptom or any(alarm in s.name.lower() for alarm in ALARM_TERMS)
            for s in symptoms
        )
        if has_alarm:
            indicators.append(texts["alarm"])

        return indicators
