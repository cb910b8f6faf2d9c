"""
Symptom Catalog
===============

Static reference data for the triage engine: symptoms, diseases and the
weighted disease <-> symptom relations.

Knowledge files (in KNOWLEDGE_DIR):
- symptoms.json        - symptom records with keyword aliases
- diseases.json        - disease records with severity level
- disease_symptom.csv  - relations: disease,symptom,weight,probability,severity

Bad reference data never reaches evaluation: inconsistent records are
skipped with a warning at load time. Only a missing or unparsable file is
fatal (CatalogError), since that is a deployment problem.

A CatalogSnapshot is immutable once built. CatalogProvider.reload() swaps
the whole snapshot in a single assignment, so evaluations already running
keep reading the snapshot they started with.
"""

import csv
import json
import logging
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from .models import (
    Disease,
    DiseaseSymptomRelation,
    SeverityLevel,
    Symptom,
    SymptomSeverity,
)

logger = logging.getLogger(__name__)

SYMPTOMS_FILE = "symptoms.json"
DISEASES_FILE = "diseases.json"
RELATIONS_FILE = "disease_symptom.csv"


class CatalogError(Exception):
    """Knowledge files are missing or cannot be parsed."""
    pass


class CatalogSnapshot:
    """
    Read-only, indexed view of the catalog.

    Attributes:
        symptoms: symptom id -> Symptom
        diseases: disease id -> Disease
        relations: disease id -> relations of that disease (diseases with
            no valid relation are absent, so they are never scored)
    """

    def __init__(
        self,
        symptoms: Dict[str, Symptom],
        diseases: Dict[str, Disease],
        relations: Dict[str, Tuple[DiseaseSymptomRelation, ...]],
    ):
        self.symptoms: Mapping[str, Symptom] = MappingProxyType(dict(symptoms))
        self.diseases: Mapping[str, Disease] = MappingProxyType(dict(diseases))
        self.relations: Mapping[str, Tuple[DiseaseSymptomRelation, ...]] = MappingProxyType(dict(relations))

    @classmethod
    def from_records(
        cls,
        symptom_records: Iterable[Dict[str, Any]],
        disease_records: Iterable[Dict[str, Any]],
        relation_records: Iterable[Dict[str, Any]],
    ) -> "CatalogSnapshot":
        """Build a snapshot from raw records, skipping inconsistent entries."""
        symptoms: Dict[str, Symptom] = {}
        for record in symptom_records:
            symptom = _parse_symptom(record)
            if symptom is None:
                continue
            if symptom.id in symptoms:
                logger.warning(f"Duplicate symptom id skipped: {symptom.id}")
                continue
            symptoms[symptom.id] = symptom

        diseases: Dict[str, Disease] = {}
        for record in disease_records:
            disease = _parse_disease(record)
            if disease is None:
                continue
            if disease.id in diseases:
                logger.warning(f"Duplicate disease id skipped: {disease.id}")
                continue
            diseases[disease.id] = disease

        by_disease: Dict[str, List[DiseaseSymptomRelation]] = {}
        seen = set()
        for record in relation_records:
            relation = _parse_relation(record)
            if relation is None:
                continue
            if relation.disease_id not in diseases:
                logger.warning(f"Relation references unknown disease: {relation.disease_id}")
                continue
            if relation.symptom_id not in symptoms:
                logger.warning(f"Relation references unknown symptom: {relation.symptom_id}")
                continue
            pair = (relation.disease_id, relation.symptom_id)
            if pair in seen:
                logger.warning(f"Duplicate relation skipped: {pair[0]} - {pair[1]}")
                continue
            seen.add(pair)
            by_disease.setdefault(relation.disease_id, []).append(relation)

        without_symptoms = sorted(d for d in diseases if d not in by_disease)
        if without_symptoms:
            logger.warning(f"Diseases without related symptoms (excluded from matching): {', '.join(without_symptoms)}")

        return cls(
            symptoms,
            diseases,
            {d: tuple(rels) for d, rels in by_disease.items()},
        )

    # ===== LOOKUPS =====

    def related_symptoms(self, disease_id: str) -> Tuple[DiseaseSymptomRelation, ...]:
        return self.relations.get(disease_id, ())

    def emergency_symptom_ids(self) -> frozenset:
        return frozenset(s.id for s in self.symptoms.values() if s.is_emergency_symptom)

    def stats(self) -> Dict[str, int]:
        return {
            "symptoms": len(self.symptoms),
            "diseases": len(self.diseases),
            "relations": sum(len(r) for r in self.relations.values()),
            "scorable_diseases": len(self.relations),
        }


# ===== RECORD PARSING =====

def _parse_symptom(record: Dict[str, Any]) -> Optional[Symptom]:
    try:
        keywords = frozenset(k.strip().lower() for k in record.get("keywords", []) if k and k.strip())
        return Symptom(
            id=str(record["id"]),
            name=str(record["name"]),
            keywords=keywords,
            is_emergency_symptom=bool(record.get("is_emergency_symptom", False)),
            severity=SymptomSeverity(record.get("severity", "mild")),
            category=str(record.get("category", "gastrointestinal")),
        )
    except (KeyError, ValueError, TypeError, AttributeError) as e:
        logger.warning(f"Invalid symptom record skipped ({e}): {record}")
        return None


def _parse_disease(record: Dict[str, Any]) -> Optional[Disease]:
    try:
        return Disease(
            id=str(record["id"]),
            name=str(record["name"]),
            category=str(record.get("category", "gastrointestinal")),
            severity_level=SeverityLevel(record["severity_level"]),
        )
    except (KeyError, ValueError, TypeError) as e:
        logger.warning(f"Invalid disease record skipped ({e}): {record}")
        return None


def _parse_relation(record: Dict[str, Any]) -> Optional[DiseaseSymptomRelation]:
    try:
        weight = float(record["weight"])
        probability = float(record.get("probability", weight))
        if not 0.0 <= weight <= 1.0 or not 0.0 <= probability <= 1.0:
            raise ValueError("weight and probability must be within [0, 1]")
        return DiseaseSymptomRelation(
            disease_id=str(record["disease"]).strip(),
            symptom_id=str(record["symptom"]).strip(),
            weight=weight,
            probability=probability,
            severity=SymptomSeverity(str(record.get("severity", "mild")).strip()),
        )
    except (KeyError, ValueError, TypeError) as e:
        logger.warning(f"Invalid relation record skipped ({e}): {record}")
        return None


# ===== FILE LOADING =====

def load_catalog(knowledge_dir: Path) -> CatalogSnapshot:
    """Load the catalog from knowledge files."""
    knowledge_dir = Path(knowledge_dir)
    logger.info(f"Loading catalog from: {knowledge_dir}")

    symptom_records = _read_json(knowledge_dir / SYMPTOMS_FILE)
    disease_records = _read_json(knowledge_dir / DISEASES_FILE)
    relation_records = _read_csv(knowledge_dir / RELATIONS_FILE)

    snapshot = CatalogSnapshot.from_records(symptom_records, disease_records, relation_records)
    stats = snapshot.stats()
    logger.info(
        f"Catalog loaded: {stats['diseases']} diseases, {stats['symptoms']} symptoms, "
        f"{stats['relations']} relations"
    )
    return snapshot


def _read_json(path: Path) -> List[Dict[str, Any]]:
    if not path.exists():
        raise CatalogError(f"Knowledge file not found: {path}")
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise CatalogError(f"Invalid JSON in {path.name}: {e}") from e
    if not isinstance(data, list):
        raise CatalogError(f"{path.name} must contain a list of records")
    return data


def _read_csv(path: Path) -> List[Dict[str, Any]]:
    if not path.exists():
        raise CatalogError(f"Knowledge file not found: {path}")
    with open(path, "r", encoding="utf-8", newline="") as f:
        reader = csv.DictReader(f)
        missing = {"disease", "symptom", "weight"} - set(reader.fieldnames or [])
        if missing:
            raise CatalogError(f"{path.name} is missing columns: {', '.join(sorted(missing))}")
        return list(reader)


class CatalogProvider:
    """Holds the current catalog snapshot and supports atomic reloads."""

    def __init__(self, knowledge_dir: Optional[Path] = None, snapshot: Optional[CatalogSnapshot] = None):
        self.knowledge_dir = Path(knowledge_dir) if knowledge_dir else None
        if snapshot is None:
            if self.knowledge_dir is None:
                raise CatalogError("CatalogProvider needs a knowledge_dir or a snapshot")
            snapshot = load_catalog(self.knowledge_dir)
        self._snapshot = snapshot

    @property
    def snapshot(self) -> CatalogSnapshot:
        return self._snapshot

    def reload(self) -> CatalogSnapshot:
        """
        Re-read the knowledge files and swap in the new snapshot.

        On failure the current snapshot stays in place and CatalogError
        propagates to the caller.
        """
        if self.knowledge_dir is None:
            raise CatalogError("Catalog was built in memory and cannot be reloaded")
        new_snapshot = load_catalog(self.knowledge_dir)
        self._snapshot = new_snapshot
        logger.info("Catalog snapshot swapped")
        return new_snapshot
