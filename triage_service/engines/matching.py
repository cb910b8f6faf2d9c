"""
Matching Strategies
===================

Text-matching primitives shared by the emergency detector, the symptom
extractor and the overlap mode of the disease matcher.

The default strategy is plain lowercase substring containment. It has no
stemming and no negation handling ("no tengo dolor abdominal" still matches
"dolor abdominal"). A more linguistic matcher can be dropped in by
implementing MatchingStrategy.
"""

from abc import ABC, abstractmethod
from typing import Iterable


class MatchingStrategy(ABC):
    """Abstract base for term matching."""

    @abstractmethod
    def normalize(self, text: str) -> str:
        """Prepare raw text for matching."""
        pass

    @abstractmethod
    def contains(self, normalized_text: str, term: str) -> bool:
        """True if `term` is found inside already-normalized text."""
        pass

    def contains_any(self, normalized_text: str, terms: Iterable[str]) -> bool:
        return any(self.contains(normalized_text, term) for term in terms)

    def overlaps(self, left: str, right: str) -> bool:
        """Symmetric match: either normalized string contains the other."""
        a = self.normalize(left)
        b = self.normalize(right)
        if not a or not b:
            return False
        return self.contains(a, b) or self.contains(b, a)


class SubstringStrategy(MatchingStrategy):
    """Case-insensitive substring containment on a lowercase transform."""

    def normalize(self, text: str) -> str:
        return text.lower()

    def contains(self, normalized_text: str, term: str) -> bool:
        term = term.lower()
        return bool(term) and term in normalized_text


DEFAULT_STRATEGY = SubstringStrategy()
