"""
Input Validation
================

Rejects malformed input before it enters the triage pipeline. The engine
never guesses and never truncates: the caller gets a precise list of
problems to show the user (HTTP 400 in the API layer).
"""

from dataclasses import replace
from typing import Any, Dict, Iterable, List, Optional

from .config import settings
from .models import DurationBucket, UserContext
from .safety_config import SUPPORTED_LANGUAGES

# Shorter tokens ("de", "el") overlap nearly every catalog keyword
MIN_SYMPTOM_LENGTH = 3
MAX_SYMPTOM_LENGTH = 200
MIN_AGE = 0
MAX_AGE = 120
MIN_PAIN = 1
MAX_PAIN = 10

VALID_DURATIONS = [bucket.value for bucket in DurationBucket]


class TriageValidationError(ValueError):
    """Input rejected before evaluation."""

    def __init__(self, errors: List[str]):
        self.errors = list(errors)
        super().__init__("; ".join(self.errors))


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def validate_text(text: Any, max_length: int = None) -> str:
    """Validate a free-text message and return it unchanged."""
    max_length = max_length or settings.MAX_MESSAGE_LENGTH
    if not isinstance(text, str):
        raise TriageValidationError(["Message must be text"])
    if len(text) > max_length:
        raise TriageValidationError([f"Message is too long (maximum {max_length} characters)"])
    return text


def validate_symptom_list(symptoms: Any, max_symptoms: int = None) -> List[str]:
    """
    Validate a discrete symptom list.

    Blank entries are dropped; an empty list is valid (it simply matches
    nothing). Returns stripped, lowercased terms.
    """
    max_symptoms = max_symptoms or settings.MAX_SYMPTOMS
    if not isinstance(symptoms, (list, tuple)):
        raise TriageValidationError(["Symptoms must be a list"])

    errors = []
    if len(symptoms) > max_symptoms:
        errors.append(f"Too many symptoms reported (maximum {max_symptoms})")

    cleaned = []
    for index, symptom in enumerate(symptoms, 1):
        if not isinstance(symptom, str):
            errors.append(f"Symptom {index} must be text")
            continue
        term = symptom.strip()
        if not term:
            continue
        if len(term) < MIN_SYMPTOM_LENGTH:
            errors.append(f"Symptom {index} is too short")
        elif len(term) > MAX_SYMPTOM_LENGTH:
            errors.append(f"Symptom {index} is too long")
        else:
            cleaned.append(term.lower())

    if errors:
        raise TriageValidationError(errors)
    return cleaned


def validate_context(context: Optional[UserContext]) -> Optional[UserContext]:
    """Check an already-built UserContext (callers may bypass build_context)."""
    if context is None:
        return None
    if not isinstance(context, UserContext):
        raise TriageValidationError(["Context must be a UserContext"])

    errors = []
    reported = context.reported_symptoms
    if reported is None:
        reported = frozenset()
    elif isinstance(reported, str) or not isinstance(reported, (set, frozenset, list, tuple)):
        errors.append("Reported symptoms must be a list")
        reported = frozenset()

    if context.age_years is not None and (
        not _is_int(context.age_years) or not MIN_AGE <= context.age_years <= MAX_AGE
    ):
        errors.append(f"Age must be an integer between {MIN_AGE} and {MAX_AGE}")

    if context.pain_level is not None and (
        not _is_int(context.pain_level) or not MIN_PAIN <= context.pain_level <= MAX_PAIN
    ):
        errors.append(f"Pain level must be between {MIN_PAIN} and {MAX_PAIN}")

    if context.duration_bucket is not None and not isinstance(context.duration_bucket, DurationBucket):
        errors.append("Invalid symptom duration format")

    if context.language not in SUPPORTED_LANGUAGES:
        errors.append(f"Unsupported language '{context.language}'")

    if any(not isinstance(symptom, str) for symptom in reported):
        errors.append("Reported symptoms must be text")

    if errors:
        raise TriageValidationError(errors)
    if not isinstance(context.reported_symptoms, frozenset):
        context = replace(context, reported_symptoms=frozenset(reported))
    return context


def build_context(data: Optional[Dict[str, Any]]) -> Optional[UserContext]:
    """
    Build a UserContext from loosely-typed request data.

    Accepts camelCase or snake_case keys (ageYears/age/age_years,
    painLevel/pain_level, durationBucket/duration, reportedSymptoms/symptoms).
    """
    if not data:
        return None

    def pick(*keys):
        for key in keys:
            if data.get(key) is not None:
                return data[key]
        return None

    errors = []

    duration = None
    raw_duration = pick("duration_bucket", "durationBucket", "duration")
    if raw_duration is not None:
        duration = DurationBucket.parse(raw_duration) if isinstance(raw_duration, str) else None
        if duration is None:
            errors.append(f"Invalid symptom duration format (expected one of: {', '.join(VALID_DURATIONS)})")

    reported = pick("reported_symptoms", "reportedSymptoms", "symptoms") or []
    if isinstance(reported, str) or not isinstance(reported, Iterable):
        errors.append("Reported symptoms must be a list")
        reported = []
    else:
        try:
            reported = validate_symptom_list(list(reported))
        except TriageValidationError as e:
            errors.extend(e.errors)
            reported = []

    if errors:
        raise TriageValidationError(errors)

    context = UserContext(
        age_years=pick("age_years", "ageYears", "age"),
        pain_level=pick("pain_level", "painLevel"),
        duration_bucket=duration,
        reported_symptoms=frozenset(reported),
        language=pick("language") or settings.DEFAULT_LANGUAGE,
    )
    return validate_context(context)
