"""Tests for matching strategy, symptom extraction, disease ranking and explainability."""

import pytest

from triage_service.catalog import CatalogSnapshot
from triage_service.engines.disease_matcher import DiseaseMatcher
from triage_service.engines.explainability import ExplainabilityEngine
from triage_service.engines.matching import SubstringStrategy
from triage_service.engines.symptom_extractor import SymptomExtractor
from triage_service.models import SeverityLevel

SYMPTOMS = [
    {"id": "dolor_abdominal", "name": "Dolor abdominal", "keywords": ["dolor de barriga"]},
    {"id": "nauseas", "name": "Náuseas", "keywords": ["nauseas", "ganas de vomitar"]},
    {"id": "fiebre", "name": "Fiebre", "keywords": ["calentura"]},
    {"id": "sangre_en_las_heces", "name": "Sangre en las heces", "keywords": ["rectorragia"],
     "is_emergency_symptom": True},
]

DISEASES = [
    {"id": "mild_x", "name": "Mild X", "severity_level": "mild"},
    {"id": "mild_a", "name": "Mild A", "severity_level": "mild"},
    {"id": "mild_z", "name": "Mild Z", "severity_level": "mild"},
    {"id": "severe_y", "name": "Severe Y", "severity_level": "severe"},
    {"id": "partial", "name": "Partial", "severity_level": "emergency"},
    {"id": "empty", "name": "Empty", "severity_level": "emergency"},
    {"id": "bleeding", "name": "Bleeding", "severity_level": "moderate"},
]


def rel(disease, symptom, weight):
    return {"disease": disease, "symptom": symptom, "weight": str(weight)}


RELATIONS = [
    rel("mild_x", "dolor_abdominal", 0.5), rel("mild_x", "nauseas", 0.5),
    rel("mild_a", "dolor_abdominal", 0.5), rel("mild_a", "nauseas", 0.5),
    rel("mild_z", "dolor_abdominal", 0.9), rel("mild_z", "nauseas", 0.9),
    rel("severe_y", "dolor_abdominal", 0.1), rel("severe_y", "nauseas", 0.1),
    rel("partial", "dolor_abdominal", 1.0), rel("partial", "nauseas", 1.0), rel("partial", "fiebre", 1.0),
    rel("bleeding", "sangre_en_las_heces", 0.9), rel("bleeding", "dolor_abdominal", 0.3),
]


@pytest.fixture
def catalog():
    return CatalogSnapshot.from_records(SYMPTOMS, DISEASES, RELATIONS)


# ===== MATCHING STRATEGY =====

def test_substring_strategy_is_case_insensitive():
    strategy = SubstringStrategy()
    text = strategy.normalize("Tengo DOLOR Abdominal")
    assert strategy.contains(text, "dolor abdominal")
    assert not strategy.contains(text, "")
    assert strategy.overlaps("dolor abdominal severo", "Dolor abdominal")
    assert strategy.overlaps("dolor", "dolor abdominal")
    assert not strategy.overlaps("fiebre", "dolor abdominal")
    assert not strategy.overlaps("", "dolor")


# ===== SYMPTOM EXTRACTOR =====

def test_extract_by_keyword_and_name(catalog):
    extractor = SymptomExtractor()
    assert extractor.extract("Me duele, DOLOR DE BARRIGA y calentura", catalog) == frozenset(
        {"dolor_abdominal", "fiebre"}
    )
    assert extractor.extract("tengo náuseas", catalog) == frozenset({"nauseas"})


def test_extract_is_order_and_duplicate_independent(catalog):
    extractor = SymptomExtractor()
    a = extractor.extract("fiebre y nauseas", catalog)
    b = extractor.extract("nauseas, nauseas, fiebre, fiebre", catalog)
    assert a == b == frozenset({"fiebre", "nauseas"})


def test_extract_empty_text(catalog):
    extractor = SymptomExtractor()
    assert extractor.extract("", catalog) == frozenset()
    assert extractor.extract("   ", catalog) == frozenset()
    assert extractor.extract("ok", catalog) == frozenset()


def test_extract_has_no_negation_handling(catalog):
    assert SymptomExtractor().extract("no tengo fiebre", catalog) == frozenset({"fiebre"})


def test_resolve_terms_two_way(catalog):
    extractor = SymptomExtractor()
    assert extractor.resolve_terms(["dolor abdominal severo"], catalog) == frozenset({"dolor_abdominal"})
    assert extractor.resolve_terms(["sangre"], catalog) == frozenset({"sangre_en_las_heces"})
    assert extractor.resolve_terms([], catalog) == frozenset()


# ===== DISEASE MATCHER =====

def test_ranking_tie_breaks(catalog):
    candidates = DiseaseMatcher().match({"dolor_abdominal", "nauseas"}, catalog)
    ids = [c.disease_id for c in candidates]

    # 1.0 scores: severity first, then matched weight, then id
    assert ids[:4] == ["severe_y", "mild_z", "mild_a", "mild_x"]
    # 2/3 score sorts below every full match despite emergency severity
    assert ids[4] == "partial"
    assert ids[5] == "bleeding"
    assert "empty" not in ids


def test_match_score_is_fraction(catalog):
    candidates = {c.disease_id: c for c in DiseaseMatcher().match({"dolor_abdominal", "nauseas"}, catalog)}
    partial = candidates["partial"]
    assert partial.match_score == pytest.approx(2 / 3)
    assert partial.total_symptoms == 3
    assert partial.matching_symptoms == ("Dolor abdominal", "Náuseas")
    assert candidates["bleeding"].match_score == pytest.approx(0.5)


def test_truncation_happens_after_sort(catalog):
    candidates = DiseaseMatcher(top_k=2).match({"dolor_abdominal", "nauseas"}, catalog)
    assert [c.disease_id for c in candidates] == ["severe_y", "mild_z"]


def test_empty_symptoms_match_nothing(catalog):
    matcher = DiseaseMatcher()
    assert matcher.match(set(), catalog) == []
    assert matcher.match_terms([], catalog) == []
    assert matcher.match_terms(["  "], catalog) == []


def test_match_terms_uses_overlap(catalog):
    candidates = DiseaseMatcher().match_terms(["dolor abdominal intenso", "Náuseas"], catalog)
    assert [c.disease_id for c in candidates[:4]] == ["severe_y", "mild_z", "mild_a", "mild_x"]
    assert all(0.0 <= c.match_score <= 1.0 for c in candidates)


def test_match_and_match_terms_share_scale(catalog):
    matcher = DiseaseMatcher()
    by_id = {c.disease_id: c.match_score for c in matcher.match({"fiebre"}, catalog)}
    by_terms = {c.disease_id: c.match_score for c in matcher.match_terms(["fiebre"], catalog)}
    assert by_id == by_terms == {"partial": pytest.approx(1 / 3)}


def test_urgency_indicators(catalog):
    candidates = {c.disease_id: c for c in DiseaseMatcher().match({"dolor_abdominal", "sangre_en_las_heces"}, catalog)}

    assert candidates["severe_y"].urgency_indicators == ("Consulte con un médico pronto", "Monitoree síntomas de cerca")
    assert candidates["partial"].urgency_indicators[0] == "Requiere atención médica inmediata"
    assert candidates["bleeding"].urgency_indicators == ("Síntomas de alarma detectados",)
    assert candidates["mild_x"].urgency_indicators == ()


def test_urgency_indicators_english(catalog):
    candidates = DiseaseMatcher().match({"sangre_en_las_heces"}, catalog, language="en")
    assert candidates[0].urgency_indicators == ("Alarm symptoms detected",)


def test_severity_rank_order():
    ranks = [level.rank for level in (SeverityLevel.MILD, SeverityLevel.MODERATE, SeverityLevel.SEVERE, SeverityLevel.EMERGENCY)]
    assert ranks == sorted(ranks)


# ===== EXPLAINABILITY =====

def test_candidate_explanation(catalog):
    candidates = DiseaseMatcher().match({"dolor_abdominal", "sangre_en_las_heces"}, catalog)
    bleeding = next(c for c in candidates if c.disease_id == "bleeding")

    assert bleeding.contributing_symptoms == (("sangre_en_las_heces", 0.9), ("dolor_abdominal", 0.3))
    assert bleeding.weighted_score == pytest.approx(1.0)

    explainer = ExplainabilityEngine()
    trace = explainer.rule_trace(bleeding, catalog)
    assert trace[0].startswith("Bleeding: 2/2")
    assert any("highly associated" in line for line in trace)

    report = explainer.generate_full_report(candidates, catalog, top_diseases=2)
    assert len(report["top_candidates"]) == 2
    assert report["top_candidates"][0]["disease_id"] == "bleeding"


def test_weighted_coverage_partial(catalog):
    explainer = ExplainabilityEngine()
    relations = catalog.related_symptoms("mild_z")
    assert explainer.weighted_coverage(relations, {"nauseas"}) == pytest.approx(0.5)
    assert explainer.weighted_coverage((), {"nauseas"}) == 0.0
