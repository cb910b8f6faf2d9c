# Recommendation lookup: risk level -> ordered action list, per language.
from typing import List, Optional

from ..models import RiskLevel, UrgencyLevel

RECOMMENDATIONS = {
    "es": {
        RiskLevel.EMERGENCY: [
            "Llame al 911 inmediatamente",
            "Acuda al hospital más cercano",
            "No espere a que los síntomas mejoren",
            "Si está solo, pida ayuda a alguien cercano",
        ],
        RiskLevel.HIGH: [
            "Consulte con un médico en las próximas 24 horas",
            "Monitoree síntomas de cerca",
            "Evite automedicarse",
            "Busque atención si los síntomas empeoran",
        ],
        RiskLevel.MEDIUM: [
            "Considere consultar con un médico",
            "Mantenga un registro de síntomas",
            "Practique medidas de autocuidado apropiadas",
            "Busque atención si los síntomas persisten",
        ],
        RiskLevel.LOW: [
            "Mantenga hábitos saludables",
            "Monitoree síntomas ocasionalmente",
            "Consulte si los síntomas persisten o empeoran",
            "Practique medidas preventivas",
        ],
    },
    "en": {
        RiskLevel.EMERGENCY: [
            "Call emergency services (911) now",
            "Go to the nearest hospital",
            "Do not wait for symptoms to improve",
            "If you are alone, ask someone nearby for help",
        ],
        RiskLevel.HIGH: [
            "See a doctor within the next 24 hours",
            "Monitor your symptoms closely",
            "Avoid self-medicating",
            "Seek care if symptoms get worse",
        ],
        RiskLevel.MEDIUM: [
            "Consider consulting a doctor",
            "Keep a symptom diary",
            "Practice appropriate self-care",
            "Seek care if symptoms persist",
        ],
        RiskLevel.LOW: [
            "Maintain healthy habits",
            "Check on your symptoms occasionally",
            "Consult a doctor if symptoms persist or worsen",
            "Practice preventive measures",
        ],
    },
}


class RecommendationGenerator:

    def __init__(self, default_language: str = "es"):
        self.default_language = default_language

    def recommend(
        self,
        risk_level: RiskLevel,
        urgency_level: UrgencyLevel,
        language: Optional[str] = None,
    ) -> List[str]:
        """Ordered, never-empty action list for a risk level."""
        lang = language if language in RECOMMENDATIONS else self.default_language
        table = RECOMMENDATIONS.get(lang, RECOMMENDATIONS["es"])
        # Urgency travels with the decision; the action list depends on risk only
        return list(table[risk_level])
