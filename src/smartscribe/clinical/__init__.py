"""
Clinical Reference Module

Static reference data and deterministic templating for the companion server.
"""

from smartscribe.clinical.icd10_lookup import ICD10Code, get_icd10, search_icd10
from smartscribe.clinical.soap_template import NoteInput, generate_soap
from smartscribe.clinical.templates import get_suggestions, get_template, search_medications

__all__ = [
    "ICD10Code",
    "NoteInput",
    "generate_soap",
    "get_icd10",
    "get_suggestions",
    "get_template",
    "search_icd10",
    "search_medications",
]
