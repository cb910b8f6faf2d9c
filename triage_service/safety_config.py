"""
Safety Configuration
====================

Safety-critical configuration for the GI triage service. Changes to the
phrase lists below are reviewed separately from engine code.

Core Principle:
    The service supports triage, it does not diagnose.
    It must NEVER diagnose, prescribe, or replace a doctor.

"""

import re
from typing import Dict, List, Optional, Sequence, Tuple

# === 1. CRITICAL EMERGENCY PHRASES ===
# Canonical phrase -> spelling variants matched by substring on lowercase text.
# Unaccented variants are listed explicitly; the detector does no other
# normalization.
CRITICAL_EMERGENCY_PHRASES: Dict[str, Tuple[str, ...]] = {
    "no puedo respirar": (
        "no puedo respirar",
        "no logro respirar",
        "me falta el aire",
        "me ahogo",
    ),
    "dolor de pecho intenso": (
        "dolor de pecho intenso",
        "dolor intenso en el pecho",
        "dolor fuerte en el pecho",
        "opresión en el pecho",
        "opresion en el pecho",
    ),
    "sangrado abundante": (
        "sangrado abundante",
        "sangro mucho",
        "hemorragia",
    ),
    "vómito con sangre": (
        "vómito con sangre",
        "vomito con sangre",
        "vómitos con sangre",
        "vomitos con sangre",
        "vomitando sangre",
        "vomitar sangre",
        "vomito sangre",
        "vomité sangre",
        "vomite sangre",
        "sangre en el vómito",
        "sangre en el vomito",
        "hematemesis",
    ),
    "heces con sangre": (
        "heces con sangre",
        "sangre en las heces",
        "sangre en heces",
        "heces negras",
        "melena",
    ),
    "dolor abdominal severo": (
        "dolor abdominal severo",
        "dolor abdominal muy fuerte",
        "dolor abdominal insoportable",
        "dolor de estómago insoportable",
        "dolor de estomago insoportable",
    ),
    "pérdida de conciencia": (
        "pérdida de conciencia",
        "perdida de conciencia",
        "perdí el conocimiento",
        "perdi el conocimiento",
        "inconsciente",
    ),
    "desmayo": (
        "desmayo",
        "me desmayé",
        "me desmaye",
        "desmayé",
    ),
    "convulsiones": (
        "convulsiones",
        "convulsión",
        "convulsion",
        "convulsionando",
    ),
    "dificultad respiratoria": (
        "dificultad respiratoria",
        "dificultad para respirar",
        "falta de aire",
    ),
    "sangrado rectal abundante": (
        "sangrado rectal abundante",
        "mucha sangre por el recto",
    ),
    "vómito negro": (
        "vómito negro",
        "vomito negro",
        "vómito en posos de café",
        "vomito en posos de cafe",
    ),
    "abdomen rígido": (
        "abdomen rígido",
        "abdomen rigido",
        "abdomen duro como una tabla",
        "vientre rígido",
        "vientre rigido",
    ),
    "dolor que no cede": (
        "dolor que no cede",
        "el dolor no cede",
        "dolor que no se quita",
    ),
    "fiebre muy alta": (
        "fiebre muy alta",
        "fiebre de 40",
        "fiebre de 41",
    ),
    "deshidratación severa": (
        "deshidratación severa",
        "deshidratacion severa",
        "no he orinado",
        "no puedo retener líquidos",
        "no puedo retener liquidos",
    ),
}

# === 2. ALARM TERMS (candidate urgency indicators) ===
ALARM_TERMS = [
    "sangre",
    "sangrado",
    "dolor intenso",
    "fiebre alta",
    "dificultad respirar",
]

URGENCY_INDICATORS = {
    "es": {
        "emergency": ["Requiere atención médica inmediata", "Contacte servicios de emergencia"],
        "severe": ["Consulte con un médico pronto", "Monitoree síntomas de cerca"],
        "alarm": "Síntomas de alarma detectados",
    },
    "en": {
        "emergency": ["Requires immediate medical attention", "Contact emergency services"],
        "severe": ["See a doctor soon", "Monitor symptoms closely"],
        "alarm": "Alarm symptoms detected",
    },
}

# === 3. DISCLAIMERS ===
DISCLAIMERS = {
    "es": (
        "IMPORTANTE: Esta información es solo educativa y no reemplaza la consulta médica "
        "profesional. Siempre consulte con un médico calificado para diagnóstico y tratamiento específico."
    ),
    "en": (
        "IMPORTANT: This information is for educational purposes only and does not replace "
        "professional medical consultation. Always consult with a qualified physician for "
        "specific diagnosis and treatment."
    ),
}

EMERGENCY_DISCLAIMERS = {
    "es": "ESTO ES UNA EMERGENCIA MÉDICA. BUSQUE ATENCIÓN INMEDIATA.",
    "en": "THIS IS A MEDICAL EMERGENCY. SEEK IMMEDIATE CARE.",
}

SUPPORTED_LANGUAGES = tuple(DISCLAIMERS)

EMERGENCY_CONTACTS = {
    "general": "911",
    "poison_control": "1-800-222-1222",
    "mental_health": "988",
}

# === 4. GENERATED REPLY FILTERS ===
# Blocked outright: prescriptive language in text from the generative composer.
UNSAFE_TERMS = [
    "receta",
    "recetar",
    "dosis",
    "tome [0-9]+ mg",
    "cura garantizada",
    "no hay nada de qué preocuparse",
    "prescribe",
    "prescription",
    "dosage",
    "take [0-9]+ mg",
    "guaranteed recovery",
]

# Tolerated but followed by a clarification.
DIAGNOSTIC_PHRASES = [
    "tienes",
    "padeces",
    "sufres de",
    "tu diagnóstico es",
    "definitivamente es",
    "sin duda es",
]

REPLY_DISCLAIMER = {
    "es": "⚠️ IMPORTANTE: Esta información es solo educativa. Consulte con un profesional médico para diagnóstico y tratamiento específico.",
    "en": "⚠️ IMPORTANT: This information is educational only. Consult a medical professional for specific diagnosis and treatment.",
}

REPLY_CLARIFICATION = {
    "es": "🔍 ACLARACIÓN: La información anterior es solo orientativa y no constituye un diagnóstico médico.",
    "en": "🔍 CLARIFICATION: The information above is guidance only and is not a medical diagnosis.",
}

BLOCKED_REPLY = {
    "es": "Este sistema no proporciona diagnósticos ni indicaciones de tratamiento. (Bloqueo de seguridad)",
    "en": "This system does not provide medical diagnosis or treatment advice. (Safety Block)",
}


def disclaimer_for(language: str, emergency: bool = False) -> str:
    table = EMERGENCY_DISCLAIMERS if emergency else DISCLAIMERS
    return table.get(language, table["es"])


def safety_filter(text: str) -> Tuple[bool, Optional[str]]:
    """
    Check text for unsafe terms.

    Returns:
        (is_safe, error_message)
    """
    text_lower = text.lower()

    for term in UNSAFE_TERMS:
        # Terms may carry a small regex ("[0-9]+"), so only spaces are escaped
        if re.search(r"\b" + term.replace(" ", r"\s+") + r"\b", text_lower):
            return False, f"Safety Violation: Response contained blocked term '{term}'"

    return True, None


def validate_reply(text: str, language: str = "es") -> str:
    """
    Make a generated reply safe to show.

    Blocked terms replace the reply entirely. Otherwise a disclaimer is
    appended when the reply never points to a professional, and a
    clarification when it uses diagnostic phrasing.
    """
    is_safe, _ = safety_filter(text)
    if not is_safe:
        return BLOCKED_REPLY.get(language, BLOCKED_REPLY["es"])

    lang = language if language in REPLY_DISCLAIMER else "es"
    lowered = text.lower()
    result = text

    if not any(word in lowered for word in ("médico", "medico", "profesional", "doctor", "professional")):
        result += "\n\n" + REPLY_DISCLAIMER[lang]

    if any(re.search(r"\b" + re.escape(p) + r"\b", lowered) for p in DIAGNOSTIC_PHRASES):
        result += "\n\n" + REPLY_CLARIFICATION[lang]

    return result


# === 5. MESSAGE FORMATTING ===

def format_symptoms_list(symptoms: Sequence[str], language: str = "es") -> str:
    joiner = " and " if language == "en" else " y "
    if not symptoms:
        return "No specific symptom" if language == "en" else "Ningún síntoma específico"
    if len(symptoms) == 1:
        return symptoms[0]
    return ", ".join(symptoms[:-1]) + joiner + symptoms[-1]


def format_emergency_message(matched_keywords: Sequence[str], language: str = "es") -> str:
    """Build the user-facing emergency notice."""
    symptoms = format_symptoms_list(list(matched_keywords), language)
    if language == "en":
        return "\n".join([
            "🚨 MEDICAL EMERGENCY DETECTED",
            "",
            f"The symptoms you described ({symptoms}) may indicate a medical emergency.",
            "",
            "IMMEDIATE ACTION REQUIRED:",
            f"• Call {EMERGENCY_CONTACTS['general']} immediately",
            "• Go to the nearest hospital",
            "• Do not wait for symptoms to improve",
            "",
            "EMERGENCY NUMBERS:",
            f"• General emergencies: {EMERGENCY_CONTACTS['general']}",
            f"• Poison control: {EMERGENCY_CONTACTS['poison_control']}",
            f"• Mental health crisis: {EMERGENCY_CONTACTS['mental_health']}",
            "",
            "This system can NOT replace immediate professional care.",
        ])
    return "\n".join([
        "🚨 EMERGENCIA MÉDICA DETECTADA",
        "",
        f"Los síntomas que ha descrito ({symptoms}) pueden indicar una emergencia médica.",
        "",
        "ACCIÓN INMEDIATA REQUERIDA:",
        f"• Llame al {EMERGENCY_CONTACTS['general']} inmediatamente",
        "• Acuda al hospital más cercano",
        "• No espere a que los síntomas mejoren",
        "",
        "NÚMEROS DE EMERGENCIA:",
        f"• Emergencias generales: {EMERGENCY_CONTACTS['general']}",
        f"• Control de envenenamiento: {EMERGENCY_CONTACTS['poison_control']}",
        f"• Crisis de salud mental: {EMERGENCY_CONTACTS['mental_health']}",
        "",
        "Este sistema NO puede reemplazar la atención médica profesional inmediata.",
    ])


def format_recommendations(recommendations: List[str], language: str = "es") -> str:
    """Numbered recommendation list followed by the standard disclaimer."""
    numbered = "\n".join(f"{i}. {rec}" for i, rec in enumerate(recommendations, 1))
    return f"{numbered}\n\n{disclaimer_for(language)}"
