"""
Summary Response Parsing

Turns free-text model output into structured results. Sections start at a
line-leading "LABEL:" and run up to the next later label. Nothing here raises on
unexpected output; malformed responses degrade to fallback values.
"""

from typing import Any
import json
import logging
import re

from smartscribe.summary.summary_types import Recommendations, SOAPNote

logger = logging.getLogger(__name__)

SOAP_LABELS = [
    ("subjective", "SUBJECTIVE"),
    ("objective", "OBJECTIVE"),
    ("assessment", "ASSESSMENT"),
    ("plan", "PLAN"),
]

RECOMMENDATION_LABELS = [
    ("medications", "MEDICATIONS"),
    ("lifestyle", "LIFESTYLE MODIFICATIONS"),
    ("followup", "FOLLOW-UP"),
    ("education", "PATIENT EDUCATION"),
    ("tests", "DIAGNOSTIC TESTS"),
    ("referrals", "REFERRALS"),
]


def _label_pattern(label: str) -> str:
    # Line-leading label with a colon; tolerates "**PLAN:**", "## PLAN:", "- PLAN :".
    return rf"^[ \t#*-]*{re.escape(label)}[ \t*]*:\**"


def extract_section(text: str, label: str, *next_labels: str) -> str | None:
    """Text following `label` up to the first of `next_labels` (or the end).

    Labels only count at the start of a line and must be followed by a colon,
    so words like "transplant" inside a section body are not mistaken for PLAN.
    Returns None when the label is absent.
    """
    stops = "|".join(_label_pattern(next_label) for next_label in next_labels)
    end = rf"(?=(?:{stops})|\Z)" if stops else r"\Z"
    match = re.search(
        rf"{_label_pattern(label)}(.*?){end}",
        text,
        re.IGNORECASE | re.DOTALL | re.MULTILINE,
    )
    if not match:
        return None
    return match.group(1).strip()


def _parse_sections(text: str, labels: list[tuple[str, str]]) -> dict[str, str]:
    sections: dict[str, str] = {}
    for i, (key, label) in enumerate(labels):
        later = [next_label for _, next_label in labels[i + 1:]]
        sections[key] = extract_section(text, label, *later) or ""
    return sections


def parse_soap_note(text: str) -> SOAPNote:
    """Parse a SUBJECTIVE/OBJECTIVE/ASSESSMENT/PLAN response.

    When no section is recognized the entire response becomes the
    subjective section.
    """
    note = SOAPNote(**_parse_sections(text, SOAP_LABELS))
    if note.is_empty:
        logger.warning("No SOAP section labels found, keeping raw response as subjective")
        note.subjective = text
    return note


def parse_recommendations(text: str) -> Recommendations:
    """Parse the six labeled recommendation sections."""
    return Recommendations(**_parse_sections(text, RECOMMENDATION_LABELS))


def empty_sidebar_data(patient_info: dict[str, Any] | None = None) -> dict[str, Any]:
    """Sidebar structure with every field unset."""
    patient_info = patient_info or {}
    return {
        "demographics": {
            "name": patient_info.get("name") or None,
            "mrn": patient_info.get("mrn") or None,
            "dob": None,
            "age": None,
            "gender": "Unknown",
        },
        "chief_complaint": "",
        "vitals": {
            "bp_systolic": None,
            "bp_diastolic": None,
            "heart_rate": None,
            "temperature": None,
            "temperature_unit": "",
            "o2_saturation": None,
        },
        "allergies": [],
        "medications": [],
        "active_problems": [],
        "care_gaps": [],
        "suggested_icd10": [],
    }


def parse_sidebar_data(
    text: str, patient_info: dict[str, Any] | None = None
) -> dict[str, Any]:
    """Extract the JSON object from a sidebar extraction response."""
    json_start = text.find("{")
    json_end = text.rfind("}") + 1

    if json_start < 0 or json_end <= json_start:
        logger.warning("No JSON found in sidebar response")
        return empty_sidebar_data(patient_info)

    try:
        data = json.loads(text[json_start:json_end])
    except json.JSONDecodeError as e:
        logger.warning("Failed to parse sidebar JSON: %s", e)
        return empty_sidebar_data(patient_info)

    if not isinstance(data, dict):
        return empty_sidebar_data(patient_info)
    return data
