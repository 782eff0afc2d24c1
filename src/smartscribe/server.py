"""
SmartScribe Companion Server

Demo REST API backing the charting UI with static reference data and
deterministic SOAP templating.

Usage:
    smartscribe serve --port 3001
    uvicorn smartscribe.server:app --reload --port 3001

Endpoints:
    POST /api/notes               - Template a SOAP note from visit input
    GET  /api/icd10?q=            - Search ICD-10 codes
    GET  /api/meds?q=             - Search medications
    GET  /api/templates/{chief}   - Fields for a chief complaint
    GET  /api/suggest?context=    - Canned suggestions
    GET  /api/health              - Health check
"""

from typing import Any
import logging

from fastapi import Body, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ValidationError

from smartscribe import __version__
from smartscribe.clinical.icd10_lookup import search_icd10
from smartscribe.clinical.soap_template import NoteInput, TemplatedSOAP, generate_soap
from smartscribe.clinical.templates import get_suggestions, get_template, search_medications

logger = logging.getLogger(__name__)

# =============================================================================
# App Configuration
# =============================================================================

app = FastAPI(
    title="SmartScribe API",
    description="Demo reference data and SOAP templating for the SmartScribe UI",
    version=__version__,
)

# The UI is served from file:// and arbitrary local ports during development
app.add_middleware(
    CORSMiddleware,
    allow_origin_regex=".*",
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# =============================================================================
# Response Models
# =============================================================================

class NoteResponse(BaseModel):
    ok: bool
    soap: TemplatedSOAP


class ICD10Result(BaseModel):
    code: str
    name: str


class MedicationResult(BaseModel):
    name: str


class TemplateFieldResult(BaseModel):
    id: str
    label: str


class SuggestResponse(BaseModel):
    suggestions: list[str]


class HealthResponse(BaseModel):
    ok: bool
    version: str


# =============================================================================
# API Endpoints
# =============================================================================

@app.post("/api/notes", response_model=NoteResponse)
async def create_note(body: Any = Body(...)):
    """Generate a SOAP note from structured visit input."""
    try:
        note_input = NoteInput.model_validate(body)
    except ValidationError as e:
        logger.info("Rejected note input: %d validation errors", e.error_count())
        return JSONResponse(
            status_code=400,
            content={
                "error": "Invalid input",
                "details": e.errors(include_url=False, include_context=False),
            },
        )

    return NoteResponse(ok=True, soap=generate_soap(note_input))


@app.get("/api/icd10", response_model=list[ICD10Result])
async def icd10(q: str = ""):
    """Search ICD-10 codes by code or name."""
    return [ICD10Result(code=entry.code, name=entry.name) for entry in search_icd10(q)]


@app.get("/api/meds", response_model=list[MedicationResult])
async def meds(q: str = ""):
    """Search medications by name."""
    return [MedicationResult(name=name) for name in search_medications(q)]


@app.get("/api/templates/{chief}", response_model=list[TemplateFieldResult])
async def template(chief: str):
    """Dynamic template fields for a chief complaint."""
    return [TemplateFieldResult(id=f.id, label=f.label) for f in get_template(chief)]


@app.get("/api/suggest", response_model=SuggestResponse)
async def suggest(context: str = ""):
    """Canned suggestions for a visit context."""
    return SuggestResponse(suggestions=get_suggestions(context))


@app.get("/api/health", response_model=HealthResponse)
async def health_check():
    """Health check endpoint."""
    return HealthResponse(ok=True, version=__version__)
