# Triage Service Package
"""
GI Symptom Triage Service

This package provides:
- Symptom catalog loading (knowledge files, atomic reload)
- Emergency phrase detection
- Symptom extraction and disease matching
- Risk / urgency classification and recommendations
- FastAPI surface and decision audit log

This service is NOT a diagnostic system - it provides assistive triage only.
"""

__version__ = "1.0.0"
