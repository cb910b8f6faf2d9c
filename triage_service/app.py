"""
Triage Service API - FastAPI Application

GI symptom triage microservice.

Endpoints:
- GET  /health            - Service status and catalog size
- POST /triage/evaluate   - Triage a free-text message
- POST /triage/symptoms   - Triage a discrete symptom list
- POST /safety/check-reply - Screen a generated reply before display
- POST /catalog/reload    - Reload knowledge files (atomic swap)
- GET  /audit/recent      - Most recent audited decisions

This service is NOT a diagnostic system - it provides assistive triage only.
"""

import logging
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, HTTPException, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from .audit import DecisionLog
from .catalog import CatalogError, CatalogProvider
from .config import settings
from .engines.triage_engine import TriageEngine
from .models import TriageDecision
from .safety_config import (
    format_emergency_message,
    format_recommendations,
    safety_filter,
    validate_reply,
)
from .validation import TriageValidationError, build_context

logging.basicConfig(level=settings.LOG_LEVEL)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="GI Triage Service",
    description="Gastrointestinal symptom analysis and triage",
    version="1.0.0"
)

# CORS configuration
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)

# Initialize engine and audit sink
catalog_provider = CatalogProvider(settings.KNOWLEDGE_DIR)
triage_engine = TriageEngine(catalog_provider)
decision_log = DecisionLog(settings.REDIS_URL, max_entries=settings.AUDIT_MAX_ENTRIES)


# Request/Response models
class TriageContext(BaseModel):
    # Chat clients send camelCase (painLevel), Python callers snake_case
    model_config = ConfigDict(extra="forbid")

    age: Optional[int] = Field(None, validation_alias=AliasChoices("age", "ageYears", "age_years"))
    pain_level: Optional[int] = Field(None, validation_alias=AliasChoices("pain_level", "painLevel"))
    duration: Optional[str] = Field(
        None, validation_alias=AliasChoices("duration", "durationBucket", "duration_bucket")
    )
    reported_symptoms: Optional[List[str]] = Field(
        None, validation_alias=AliasChoices("reported_symptoms", "reportedSymptoms")
    )
    language: Optional[str] = None

class EvaluateRequest(BaseModel):
    message: str
    context: Optional[TriageContext] = None
    explain: bool = False

class SymptomSearchRequest(BaseModel):
    symptoms: List[str]
    context: Optional[TriageContext] = None
    explain: bool = False

class ReplyCheckRequest(BaseModel):
    text: str
    language: str = "es"

class TriageResponse(BaseModel):
    success: bool = True
    extracted_symptoms: List[str]
    matched_symptoms: List[str]
    emergency_detected: bool
    matched_emergency_keywords: List[str]
    candidates: List[Dict[str, Any]]
    risk_level: str
    urgency_level: str
    recommendations: List[str]
    message: str
    disclaimer: str
    degraded: bool = False
    explanation: Optional[Dict[str, Any]] = None


@app.exception_handler(TriageValidationError)
async def validation_error_handler(request: Request, exc: TriageValidationError):
    return JSONResponse(
        status_code=400,
        content={"success": False, "errors": exc.errors},
    )


@app.exception_handler(RequestValidationError)
async def request_error_handler(request: Request, exc: RequestValidationError):
    errors = [
        f"{'.'.join(str(p) for p in err['loc'] if p != 'body')}: {err['msg']}"
        for err in exc.errors()
    ]
    return JSONResponse(
        status_code=400,
        content={"success": False, "errors": errors},
    )


def _context_data(context: Optional[TriageContext]) -> Optional[Dict[str, Any]]:
    if context is None:
        return None
    return context.model_dump(exclude_none=True)


def _to_response(decision: TriageDecision, language: str, explain: bool = False) -> TriageResponse:
    catalog = catalog_provider.snapshot
    extracted = sorted(decision.extracted_symptoms)
    names = [catalog.symptoms[s].name for s in extracted if s in catalog.symptoms]

    if decision.emergency_detected:
        message = format_emergency_message(decision.matched_emergency_keywords, language)
    else:
        message = format_recommendations(list(decision.recommendations), language)

    explanation = None
    if explain and decision.candidates:
        explanation = triage_engine.matcher.explainability.generate_full_report(decision.candidates, catalog)

    data = decision.to_dict()
    return TriageResponse(
        extracted_symptoms=extracted,
        matched_symptoms=names,
        emergency_detected=decision.emergency_detected,
        matched_emergency_keywords=data["matched_emergency_keywords"],
        candidates=data["candidates"],
        risk_level=data["risk_level"],
        urgency_level=data["urgency_level"],
        recommendations=data["recommendations"],
        message=message,
        disclaimer=decision.disclaimer,
        degraded=decision.degraded,
        explanation=explanation,
    )


@app.get("/health")
async def health():
    return {
        "status": "ok",
        "catalog": catalog_provider.snapshot.stats(),
        "audit_backend": "redis" if decision_log.uses_redis else "memory",
    }


@app.post("/triage/evaluate", response_model=TriageResponse)
async def evaluate_message(request: EvaluateRequest):
    """
    Triage a free-text chat message.
    """
    context = build_context(_context_data(request.context))
    decision = triage_engine.evaluate(request.message, context)
    decision_log.record(decision, source="evaluate", message=request.message)

    language = context.language if context else settings.DEFAULT_LANGUAGE
    return _to_response(decision, language, request.explain)


@app.post("/triage/symptoms", response_model=TriageResponse)
async def search_by_symptoms(request: SymptomSearchRequest):
    """
    Triage a discrete list of symptoms (structured search).
    """
    context = build_context(_context_data(request.context))
    decision = triage_engine.match_by_symptom_list(request.symptoms, context)
    decision_log.record(decision, source="symptoms")

    language = context.language if context else settings.DEFAULT_LANGUAGE
    return _to_response(decision, language, request.explain)


@app.post("/safety/check-reply")
async def check_reply(request: ReplyCheckRequest):
    """
    Screen a reply written by the external generative composer before it
    is shown to the user.
    """
    is_safe, reason = safety_filter(request.text)
    if not is_safe:
        logger.warning(reason)
    return {
        "safe": is_safe,
        "text": validate_reply(request.text, request.language),
    }


@app.post("/catalog/reload")
async def reload_catalog():
    """Re-read knowledge files; the old snapshot stays active on failure."""
    try:
        snapshot = catalog_provider.reload()
    except CatalogError as e:
        logger.error(f"Catalog reload failed: {e}")
        raise HTTPException(status_code=500, detail=str(e))
    return {"status": "reloaded", "catalog": snapshot.stats()}


@app.get("/audit/recent")
async def recent_decisions(limit: int = Query(20, ge=1, le=settings.AUDIT_MAX_ENTRIES)):
    return {"entries": decision_log.recent(limit)}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=settings.HOST, port=settings.PORT)
