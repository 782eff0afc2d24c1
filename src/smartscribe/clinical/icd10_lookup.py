"""
ICD-10-CM Lookup

Small reference list of ICD-10-CM codes for the companion server's code
search and for describing codes suggested by the summarizer.
"""

from typing import NamedTuple


class ICD10Code(NamedTuple):
    """ICD-10 code with metadata."""
    code: str
    name: str
    category: str


# =============================================================================
# Common outpatient codes, grouped by category
# =============================================================================

ICD10_CODES: list[ICD10Code] = [
    # Cardiovascular
    ICD10Code("I10", "Essential (primary) hypertension", "cardiovascular"),
    ICD10Code("R07.9", "Chest pain, unspecified", "cardiovascular"),
    ICD10Code("I25.10", "Atherosclerotic heart disease of native coronary artery", "cardiovascular"),
    ICD10Code("I48.91", "Unspecified atrial fibrillation", "cardiovascular"),
    ICD10Code("I50.9", "Heart failure, unspecified", "cardiovascular"),
    ICD10Code("R00.2", "Palpitations", "cardiovascular"),
    # Endocrine
    ICD10Code("E11.9", "Type 2 diabetes mellitus without complications", "endocrine"),
    ICD10Code("E78.5", "Hyperlipidemia, unspecified", "endocrine"),
    ICD10Code("E03.9", "Hypothyroidism, unspecified", "endocrine"),
    ICD10Code("E66.9", "Obesity, unspecified", "endocrine"),
    # Respiratory
    ICD10Code("J10.1", "Influenza with pneumonia", "respiratory"),
    ICD10Code("J06.9", "Acute upper respiratory infection, unspecified", "respiratory"),
    ICD10Code("J45.909", "Unspecified asthma, uncomplicated", "respiratory"),
    ICD10Code("J44.9", "Chronic obstructive pulmonary disease, unspecified", "respiratory"),
    ICD10Code("R05.9", "Cough, unspecified", "respiratory"),
    # Neurological
    ICD10Code("R51.9", "Headache, unspecified", "neurological"),
    ICD10Code("G43.909", "Migraine, unspecified, not intractable, without status migrainosus", "neurological"),
    ICD10Code("R42", "Dizziness and giddiness", "neurological"),
    # General symptoms
    ICD10Code("R50.9", "Fever, unspecified", "general"),
    ICD10Code("R53.83", "Other fatigue", "general"),
    ICD10Code("R10.9", "Unspecified abdominal pain", "gastrointestinal"),
    ICD10Code("K21.9", "Gastro-esophageal reflux disease without esophagitis", "gastrointestinal"),
    # Musculoskeletal
    ICD10Code("M54.50", "Low back pain, unspecified", "musculoskeletal"),
    ICD10Code("M25.561", "Pain in right knee", "musculoskeletal"),
    # Mental health
    ICD10Code("F41.1", "Generalized anxiety disorder", "mental_health"),
    ICD10Code("F32.9", "Major depressive disorder, single episode, unspecified", "mental_health"),
    # Preventive
    ICD10Code("Z00.00", "Encounter for general adult medical examination without abnormal findings", "preventive"),
]

_BY_CODE = {entry.code.upper(): entry for entry in ICD10_CODES}


def search_icd10(query: str, limit: int = 10) -> list[ICD10Code]:
    """Case-insensitive substring search over codes and names.

    An empty query returns no results.
    """
    q = (query or "").strip().lower()
    if not q:
        return []

    matches = [
        entry for entry in ICD10_CODES
        if q in entry.code.lower() or q in entry.name.lower()
    ]
    return matches[:limit]


def get_icd10(code: str) -> ICD10Code | None:
    """Exact lookup by code."""
    return _BY_CODE.get((code or "").strip().upper())
