"""
SOAP Templating

Deterministic SOAP note assembly from structured visit input, used by the
companion server's demo notes endpoint. No model is involved.
"""

from pydantic import BaseModel, Field

EMPTY_SECTION = "—"


class NotePatient(BaseModel):
    name: str = Field(..., min_length=1)
    mrn: str = Field(..., min_length=1)
    dob: str | None = None


class DynamicField(BaseModel):
    label: str
    value: str | None = None


class Vitals(BaseModel):
    bp: str | None = None
    hr: str | None = None
    temp: str | None = None
    o2: str | None = None


class NoteInput(BaseModel):
    """Structured visit input."""

    patient: NotePatient
    chiefComplaint: str | None = None
    hpi: str | None = None
    dynamicFields: list[DynamicField] | None = None
    assessment: str | None = None
    plan: str | None = None
    vitals: Vitals | None = None


class TemplatedSOAP(BaseModel):
    subjective: str
    objective: str
    assessment: str
    plan: str
    note: str


def _vitals_line(vitals: Vitals | None) -> str:
    if vitals is None:
        return ""
    parts = [
        f"BP {vitals.bp}" if vitals.bp else None,
        f"HR {vitals.hr}" if vitals.hr else None,
        f"Temp {vitals.temp}" if vitals.temp else None,
        f"O₂ {vitals.o2}" if vitals.o2 else None,
    ]
    return ", ".join(p for p in parts if p)


def generate_soap(body: NoteInput) -> TemplatedSOAP:
    """Assemble a SOAP note from visit input.

    Empty sections are rendered as an em dash placeholder.
    """
    cc = f"Chief complaint: {body.chiefComplaint}." if body.chiefComplaint else ""
    hpi = f"HPI: {body.hpi}" if body.hpi else ""
    dynamic = "\n".join(
        f"{f.label}: {f.value}"
        for f in (body.dynamicFields or [])
        if (f.value or "").strip()
    )

    subjective = "\n".join(p for p in (cc, hpi, dynamic) if p).strip() or EMPTY_SECTION

    vitals = _vitals_line(body.vitals)
    objective = (
        f"Vitals reviewed{': ' + vitals if vitals else ''}. "
        "Physical exam documented as above."
    )
    assessment = (body.assessment or "").strip() or EMPTY_SECTION
    plan = (body.plan or "").strip() or EMPTY_SECTION

    note = "\n".join([
        f"Subjective\n{subjective}",
        f"\nObjective\n{objective}",
        f"\nAssessment\n{assessment}",
        f"\nPlan\n{plan}",
    ])

    return TemplatedSOAP(
        subjective=subjective,
        objective=objective,
        assessment=assessment,
        plan=plan,
        note=note,
    )
