"""
Symptom Extractor
=================

Maps free text to catalog symptom ids by keyword containment.

A symptom is reported when its canonical name or any keyword alias appears
in the lowercased text. No stemming, no negation handling, no fuzzy match.
"""

import logging
from typing import FrozenSet, Iterable

from ..catalog import CatalogSnapshot
from .matching import DEFAULT_STRATEGY, MatchingStrategy

logger = logging.getLogger(__name__)


class SymptomExtractor:

    def __init__(self, strategy: MatchingStrategy = DEFAULT_STRATEGY):
        self.strategy = strategy

    def extract(self, text: str, catalog: CatalogSnapshot) -> FrozenSet[str]:
        """Return the ids of every catalog symptom mentioned in `text`."""
        if not text or not text.strip():
            return frozenset()

        normalized = self.strategy.normalize(text)
        found = frozenset(
            symptom.id
            for symptom in catalog.symptoms.values()
            if self.strategy.contains_any(normalized, symptom.terms)
        )
        logger.debug(f"Extracted {len(found)} symptoms: {sorted(found)}")
        return found

    def resolve_terms(self, terms: Iterable[str], catalog: CatalogSnapshot) -> FrozenSet[str]:
        """
        Map discrete symptom strings to catalog ids by two-way overlap.

        "dolor abdominal severo" resolves to both "Dolor abdominal severo"
        and "Dolor abdominal", since the term contains the latter's name.
        """
        terms = [t for t in terms if t and t.strip()]
        return frozenset(
            symptom.id
            for symptom in catalog.symptoms.values()
            if any(self.strategy.overlaps(term, st) for term in terms for st in symptom.terms)
        )
