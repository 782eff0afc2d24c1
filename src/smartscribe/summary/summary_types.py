"""
Summary Data Types

Structured results returned by the summarization backend.
"""

from dataclasses import dataclass, asdict, fields
from typing import Any


@dataclass
class SOAPNote:
    """Four-section clinical note."""

    subjective: str = ""
    objective: str = ""
    assessment: str = ""
    plan: str = ""

    @property
    def is_empty(self) -> bool:
        return not (self.subjective or self.objective or self.assessment or self.plan)

    def to_text(self) -> str:
        """Render with the section headers used in prompts."""
        return (
            f"SUBJECTIVE: {self.subjective}\n"
            f"OBJECTIVE: {self.objective}\n"
            f"ASSESSMENT: {self.assessment}\n"
            f"PLAN: {self.plan}"
        )

    def to_dict(self) -> dict[str, str]:
        """Convert to dictionary."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SOAPNote":
        """Create from dictionary."""
        return cls(**{f.name: data.get(f.name) or "" for f in fields(cls)})


@dataclass
class Recommendations:
    """Short, glanceable clinical recommendations."""

    medications: str = ""
    lifestyle: str = ""
    followup: str = ""
    education: str = ""
    tests: str = ""
    referrals: str = ""

    def to_dict(self) -> dict[str, str]:
        """Convert to dictionary."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Recommendations":
        """Create from dictionary."""
        return cls(**{f.name: data.get(f.name) or "" for f in fields(cls)})
