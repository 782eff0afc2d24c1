"""
Record Types

Patient, consultation and transcript records kept in the record store.
Every record is keyed by the patient's medical record number (MRN).
"""

from dataclasses import dataclass, field
from typing import Any


@dataclass
class PatientInfo:
    """Patient identity shown on exports and passed to the summarizer."""

    name: str | None = None
    mrn: str | None = None
    dob: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {"name": self.name, "mrn": self.mrn, "dob": self.dob}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "PatientInfo":
        """Create from dictionary."""
        return cls(name=data.get("name"), mrn=data.get("mrn"), dob=data.get("dob"))


@dataclass
class ConsultationRecord:
    """One consultation: SOAP sections and recommendations for a patient."""

    patient_mrn: str
    subjective: str = ""
    objective: str = ""
    assessment: str = ""
    plan: str = ""
    recommendations: dict[str, str] = field(default_factory=dict)
    id: str | None = None
    created_at: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to a row for insertion (server-assigned fields omitted when unset)."""
        row: dict[str, Any] = {
            "patient_mrn": self.patient_mrn,
            "subjective": self.subjective,
            "objective": self.objective,
            "assessment": self.assessment,
            "plan": self.plan,
            "recommendations": self.recommendations,
        }
        if self.id is not None:
            row["id"] = self.id
        if self.created_at is not None:
            row["created_at"] = self.created_at
        return row

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ConsultationRecord":
        """Create from dictionary."""
        return cls(
            patient_mrn=data["patient_mrn"],
            subjective=data.get("subjective") or "",
            objective=data.get("objective") or "",
            assessment=data.get("assessment") or "",
            plan=data.get("plan") or "",
            recommendations=data.get("recommendations") or {},
            id=data.get("id"),
            created_at=data.get("created_at"),
        )


@dataclass
class TranscriptRecord:
    """A finished consultation transcript."""

    patient_mrn: str
    patient_name: str | None
    transcript: list[dict[str, Any]]
    duration_seconds: float
    recorded_at: str

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "patient_mrn": self.patient_mrn,
            "patient_name": self.patient_name,
            "transcript": self.transcript,
            "duration_seconds": self.duration_seconds,
            "recorded_at": self.recorded_at,
        }
