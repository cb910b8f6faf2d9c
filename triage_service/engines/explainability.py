"""
Explainability Engine

Explain candidate rankings via relation-weight evidence.

Methods:
- Symptom contribution scores (relation weight of each matched symptom)
- Weighted coverage of a disease's symptom repertoire
- Rule-based trace logs

Weights never change the ranking order beyond the final tie-break; they
only document why a candidate is listed.
"""

from typing import Dict, Iterable, List, Tuple

from ..catalog import CatalogSnapshot
from ..models import Candidate, DiseaseSymptomRelation


class ExplainabilityEngine:
    """
    Explainability engine for disease candidates.

    Works from the catalog's weighted relations only; no model internals.
    """

    HIGH_WEIGHT = 0.7
    MODERATE_WEIGHT = 0.4

    def symptom_contributions(
        self,
        relations: Iterable[DiseaseSymptomRelation],
        matched_symptom_ids: Iterable[str],
    ) -> List[Tuple[str, float]]:
        """
        Weight of every matched symptom for one disease, strongest first.

        Returns:
            List of (symptom_id, weight), ties ordered by symptom id
        """
        matched = set(matched_symptom_ids)
        contributions = [
            (rel.symptom_id, round(rel.weight, 4))
            for rel in relations
            if rel.symptom_id in matched
        ]
        contributions.sort(key=lambda x: (-x[1], x[0]))
        return contributions

    def weighted_coverage(
        self,
        relations: Iterable[DiseaseSymptomRelation],
        matched_symptom_ids: Iterable[str],
    ) -> float:
        """Share of the disease's total relation weight that was reported."""
        relations = list(relations)
        matched = set(matched_symptom_ids)
        total = sum(rel.weight for rel in relations)
        if total <= 0:
            return 0.0
        covered = sum(rel.weight for rel in relations if rel.symptom_id in matched)
        return round(covered / total, 6)

    def rule_trace(self, candidate: Candidate, catalog: CatalogSnapshot) -> List[str]:
        """
        Generate rule-based trace explaining a candidate's position.

        Returns:
            List of trace statements
        """
        trace = []
        disease = catalog.diseases.get(candidate.disease_id)
        name = disease.name if disease else candidate.disease_id
        weights: Dict[str, float] = dict(candidate.contributing_symptoms)

        trace.append(
            f"{name}: {len(candidate.matching_symptoms)}/{candidate.total_symptoms} "
            f"known symptoms reported (match score {candidate.match_score:.2f})"
        )

        # Positive evidence
        for symptom_id, weight in candidate.contributing_symptoms:
            label = catalog.symptoms[symptom_id].name if symptom_id in catalog.symptoms else symptom_id
            if weight > self.HIGH_WEIGHT:
                trace.append(f"✅ '{label}' is highly associated with {name} (weight: {weight:.2f})")
            elif weight > self.MODERATE_WEIGHT:
                trace.append(f"✅ '{label}' is moderately associated with {name} (weight: {weight:.2f})")
            else:
                trace.append(f"• '{label}' is weakly associated with {name} (weight: {weight:.2f})")

        # Key symptoms not reported
        for rel in catalog.related_symptoms(candidate.disease_id):
            if rel.weight > 0.8 and rel.symptom_id not in weights:
                label = catalog.symptoms[rel.symptom_id].name
                trace.append(f"❓ Key symptom '{label}' not reported for {name}")

        return trace

    def generate_full_report(
        self,
        candidates: Iterable[Candidate],
        catalog: CatalogSnapshot,
        top_diseases: int = 3,
    ) -> Dict[str, object]:
        """Explain the top candidates of a decision."""
        explanations = []
        for candidate in list(candidates)[:top_diseases]:
            explanations.append({
                "disease_id": candidate.disease_id,
                "match_score": candidate.match_score,
                "weighted_score": candidate.weighted_score,
                "contributing_symptoms": [s for s, _ in candidate.contributing_symptoms],
                "rule_trace": self.rule_trace(candidate, catalog),
            })

        return {
            "top_candidates": explanations,
            "disclaimer": "This analysis is for informational purposes only and does not constitute medical diagnosis.",
        }
