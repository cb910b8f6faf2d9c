"""
Safety Tests
============

1. Critical phrase detection (variants, exhaustive, case-insensitive)
2. Generated reply filter (blocked terms, disclaimers, clarifications)
3. Emergency message formatting
"""

from triage_service.engines.emergency import EmergencyDetector
from triage_service.safety_config import (
    BLOCKED_REPLY,
    CRITICAL_EMERGENCY_PHRASES,
    REPLY_CLARIFICATION,
    REPLY_DISCLAIMER,
    disclaimer_for,
    format_emergency_message,
    format_recommendations,
    format_symptoms_list,
    safety_filter,
    validate_reply,
)


# ===== 1. EMERGENCY DETECTOR =====

def test_every_canonical_phrase_is_detected():
    print("\n🚨 TEST 1: Critical phrases")
    detector = EmergencyDetector()
    for canonical in CRITICAL_EMERGENCY_PHRASES:
        result = detector.detect(f"Doctor, creo que tengo {canonical.upper()} desde hoy")
        assert result.is_emergency, canonical
        assert canonical in result.matched_keywords


def test_variants_map_to_canonical_label():
    detector = EmergencyDetector()
    result = detector.detect("Estoy VOMITANDO SANGRE")
    assert result.matched_keywords == ("vómito con sangre",)

    result = detector.detect("tuve hematemesis y vomité sangre")
    assert result.matched_keywords == ("vómito con sangre",)


def test_detection_is_exhaustive_in_list_order():
    detector = EmergencyDetector()
    result = detector.detect("me desmayé, no puedo respirar y tengo heces negras")
    assert result.matched_keywords == ("no puedo respirar", "heces con sangre", "desmayo")


def test_no_emergency():
    detector = EmergencyDetector()
    assert detector.detect("tengo un poco de acidez").is_emergency is False
    assert detector.detect("").matched_keywords == ()


def test_custom_phrase_list():
    detector = EmergencyDetector(phrases={"ictericia": ("piel amarilla",)})
    assert detector.detect("tengo la piel amarilla").matched_keywords == ("ictericia",)
    assert detector.detect("ICTERICIA").is_emergency is True
    assert detector.detect("vomitando sangre").is_emergency is False


# ===== 2. REPLY FILTER =====

def test_safety_filter_blocks_prescriptions():
    print("\n🛡️ TEST 2: Reply filter")
    assert safety_filter("La dosis recomendada es alta")[0] is False
    assert safety_filter("Take 500 mg of ibuprofen")[0] is False
    assert safety_filter("Tome 2 mg cada noche")[0] is False

    is_safe, error = safety_filter("Beba líquidos y consulte a su médico")
    assert is_safe is True
    assert error is None


def test_blocked_reply_is_replaced():
    assert validate_reply("Le doy una receta", "es") == BLOCKED_REPLY["es"]
    assert validate_reply("Here is a prescription", "en") == BLOCKED_REPLY["en"]


def test_reply_gets_disclaimer_without_professional_reference():
    reply = validate_reply("Beba mucha agua y descanse.")
    assert reply.endswith(REPLY_DISCLAIMER["es"])

    reply = validate_reply("Consulte a su médico si empeora.")
    assert REPLY_DISCLAIMER["es"] not in reply


def test_diagnostic_phrasing_gets_clarification():
    reply = validate_reply("Parece que tienes gastritis, consulte a un médico.")
    assert reply.endswith(REPLY_CLARIFICATION["es"])


# ===== 3. MESSAGES =====

def test_emergency_message():
    print("\n📢 TEST 3: Emergency message")
    message = format_emergency_message(["vómito con sangre", "dolor abdominal severo"])
    assert message.startswith("🚨 EMERGENCIA MÉDICA DETECTADA")
    assert "(vómito con sangre y dolor abdominal severo)" in message
    assert "Llame al 911 inmediatamente" in message

    english = format_emergency_message(["desmayo"], "en")
    assert "Call 911 immediately" in english


def test_symptoms_list_formatting():
    assert format_symptoms_list([]) == "Ningún síntoma específico"
    assert format_symptoms_list(["a"]) == "a"
    assert format_symptoms_list(["a", "b", "c"], "en") == "a, b and c"


def test_recommendations_formatting():
    text = format_recommendations(["Uno", "Dos"])
    assert text.startswith("1. Uno\n2. Dos")
    assert text.endswith(disclaimer_for("es"))


def test_disclaimer_fallback():
    assert disclaimer_for("fr") == disclaimer_for("es")
    assert disclaimer_for("en", emergency=True).startswith("THIS IS A MEDICAL EMERGENCY")
