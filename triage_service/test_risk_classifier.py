"""Tests for the risk classifier guards and the recommendation lookup."""

import pytest

from triage_service.catalog import CatalogSnapshot
from triage_service.engines.recommendations import RECOMMENDATIONS, RecommendationGenerator
from triage_service.engines.risk_classifier import RiskClassifier
from triage_service.models import Candidate, RiskLevel, SeverityLevel, UrgencyLevel, UserContext


def candidate(severity, score=0.5, disease_id="d"):
    return Candidate(
        disease_id=disease_id,
        disease_name=disease_id.title(),
        severity_level=severity,
        match_score=score,
        matching_symptoms=("Dolor abdominal",),
        total_symptoms=2,
    )


@pytest.fixture
def catalog():
    return CatalogSnapshot.from_records(
        [
            {"id": "dolor_abdominal", "name": "Dolor abdominal", "keywords": []},
            {"id": "vomito_con_sangre", "name": "Vómito con sangre", "keywords": [], "is_emergency_symptom": True},
        ],
        [],
        [],
    )


def levels(assessment):
    return assessment.risk_level, assessment.urgency_level


def test_emergency_dominates_everything():
    classifier = RiskClassifier()
    assessment = classifier.classify(True, [candidate(SeverityLevel.MILD)], UserContext(pain_level=1))
    assert levels(assessment) == (RiskLevel.EMERGENCY, UrgencyLevel.IMMEDIATE)
    assert assessment.rule == "emergency_phrase"


def test_flagged_symptom_is_high_immediate(catalog):
    assessment = RiskClassifier().classify(
        False, [candidate(SeverityLevel.MILD)], None,
        reported_symptom_ids={"vomito_con_sangre"}, catalog=catalog,
    )
    assert levels(assessment) == (RiskLevel.HIGH, UrgencyLevel.IMMEDIATE)
    assert assessment.rule == "emergency_symptom"


def test_unflagged_symptom_does_not_escalate(catalog):
    assessment = RiskClassifier().classify(
        False, [], None, reported_symptom_ids={"dolor_abdominal"}, catalog=catalog,
    )
    assert levels(assessment) == (RiskLevel.LOW, UrgencyLevel.ROUTINE)


@pytest.mark.parametrize("pain", [8, 9, 10])
def test_high_pain(pain):
    assessment = RiskClassifier().classify(False, [], UserContext(pain_level=pain))
    assert levels(assessment) == (RiskLevel.HIGH, UrgencyLevel.IMMEDIATE)


def test_severe_top_candidate():
    assessment = RiskClassifier().classify(
        False, [candidate(SeverityLevel.SEVERE), candidate(SeverityLevel.MILD)], UserContext(pain_level=6)
    )
    assert levels(assessment) == (RiskLevel.HIGH, UrgencyLevel.URGENT)


def test_emergency_severity_top_candidate():
    assessment = RiskClassifier().classify(False, [candidate(SeverityLevel.EMERGENCY)], None)
    assert levels(assessment) == (RiskLevel.HIGH, UrgencyLevel.IMMEDIATE)


def test_only_top_candidate_counts():
    assessment = RiskClassifier().classify(
        False, [candidate(SeverityLevel.MILD), candidate(SeverityLevel.SEVERE)], None
    )
    assert levels(assessment) == (RiskLevel.LOW, UrgencyLevel.ROUTINE)


def test_moderate_top_candidate():
    assessment = RiskClassifier().classify(False, [candidate(SeverityLevel.MODERATE)], None)
    assert levels(assessment) == (RiskLevel.MEDIUM, UrgencyLevel.URGENT)


@pytest.mark.parametrize("pain,expected", [
    (5, (RiskLevel.LOW, UrgencyLevel.ROUTINE)),
    (6, (RiskLevel.MEDIUM, UrgencyLevel.URGENT)),
    (7, (RiskLevel.MEDIUM, UrgencyLevel.URGENT)),
    (None, (RiskLevel.LOW, UrgencyLevel.ROUTINE)),
])
def test_pain_with_mild_or_no_candidates(pain, expected):
    classifier = RiskClassifier()
    context = UserContext(pain_level=pain)
    assert levels(classifier.classify(False, [], context)) == expected
    assert levels(classifier.classify(False, [candidate(SeverityLevel.MILD)], context)) == expected


def test_no_context_no_candidates():
    assessment = RiskClassifier().classify(False, [], None)
    assert levels(assessment) == (RiskLevel.LOW, UrgencyLevel.ROUTINE)
    assert assessment.rule == "default"


# ===== RECOMMENDATIONS =====

def test_every_risk_level_has_recommendations():
    generator = RecommendationGenerator()
    for language in ("es", "en"):
        for risk in RiskLevel:
            recs = generator.recommend(risk, UrgencyLevel.ROUTINE, language)
            assert len(recs) == 4
            assert all(recs)


def test_emergency_recommendations_call_911():
    generator = RecommendationGenerator()
    assert generator.recommend(RiskLevel.EMERGENCY, UrgencyLevel.IMMEDIATE)[0] == "Llame al 911 inmediatamente"
    assert generator.recommend(RiskLevel.EMERGENCY, UrgencyLevel.IMMEDIATE, "en")[0] == "Call emergency services (911) now"


def test_recommendations_depend_on_risk_only():
    generator = RecommendationGenerator()
    assert generator.recommend(RiskLevel.HIGH, UrgencyLevel.URGENT) == generator.recommend(
        RiskLevel.HIGH, UrgencyLevel.IMMEDIATE
    )


def test_unknown_language_uses_default():
    generator = RecommendationGenerator(default_language="en")
    assert generator.recommend(RiskLevel.LOW, UrgencyLevel.ROUTINE, "fr") == RECOMMENDATIONS["en"][RiskLevel.LOW]


def test_recommendations_are_copies():
    generator = RecommendationGenerator()
    recs = generator.recommend(RiskLevel.LOW, UrgencyLevel.ROUTINE)
    recs.append("otra")
    assert "otra" not in RECOMMENDATIONS["es"][RiskLevel.LOW]
