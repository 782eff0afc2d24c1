"""
Visit Templates

Static demo data for the companion server: chief-complaint field templates,
a medication list and canned suggestions.
"""

from typing import NamedTuple


class TemplateField(NamedTuple):
    id: str
    label: str


COMPLAINT_TEMPLATES: dict[str, list[TemplateField]] = {
    "chest-pain": [
        TemplateField("onset", "Onset"),
        TemplateField("quality", "Quality"),
        TemplateField("radiation", "Radiation"),
        TemplateField("triggers", "Triggers/Relief"),
        TemplateField("assoc", "Associated Sx"),
        TemplateField("duration", "Duration"),
    ],
    "headache": [
        TemplateField("location", "Location"),
        TemplateField("severity", "Severity (0-10)"),
        TemplateField("features", "Features"),
        TemplateField("redflags", "Red Flags"),
    ],
    "fever": [
        TemplateField("temp", "Max Temp"),
        TemplateField("duration", "Duration"),
        TemplateField("focus", "Focus"),
        TemplateField("exposure", "Exposure"),
    ],
    "physical": [
        TemplateField("screenings", "Screenings Due"),
        TemplateField("concerns", "Patient Concerns"),
    ],
    "diabetes": [
        TemplateField("meds", "Current Regimen"),
        TemplateField("glucose", "Home Glucose"),
        TemplateField("complications", "Complications"),
        TemplateField("labs", "Recent Labs"),
    ],
}

MEDICATIONS: list[str] = [
    "Lisinopril 10 mg daily",
    "Metformin 500 mg BID",
    "Atorvastatin 20 mg nightly",
    "Amoxicillin 500 mg TID x7d",
]

SUGGESTIONS: dict[str, list[str]] = {
    "diabetes": [
        "Order HbA1c and lipid panel.",
        "Assess hypoglycemia episodes.",
        "Foot exam and retinal screening status.",
    ],
}
DEFAULT_SUGGESTIONS = ["No specific suggestions."]


def get_template(chief_complaint: str) -> list[TemplateField]:
    """Fields for a chief complaint; unknown complaints have none."""
    return list(COMPLAINT_TEMPLATES.get(chief_complaint, []))


def search_medications(query: str, limit: int = 10) -> list[str]:
    """Case-insensitive substring search; an empty query returns nothing."""
    q = (query or "").strip().lower()
    if not q:
        return []
    return [name for name in MEDICATIONS if q in name.lower()][:limit]


def get_suggestions(context: str) -> list[str]:
    return list(SUGGESTIONS.get(context, DEFAULT_SUGGESTIONS))
