"""
Record Store Client

REST client for the Supabase project that holds patients, consultations and
transcripts. Authentication uses the project's password grant; every data
call carries the signed-in user's access token so row level security
applies.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any
import logging
import os

import requests

from smartscribe.errors import NotAuthenticatedError, RecordStoreError
from smartscribe.records.record_types import ConsultationRecord, PatientInfo, TranscriptRecord
from smartscribe.transcription.transcript_types import TranscriptSegment

logger = logging.getLogger(__name__)


@dataclass
class RecordStoreConfig:
    """Configuration for the record store client."""

    url: str | None = None  # e.g. "https://<project>.supabase.co"
    anon_key: str | None = None
    timeout_seconds: float = 30.0
    patients_table: str = "patients"
    consultations_table: str = "consultations"
    transcripts_table: str = "transcripts"

    @classmethod
    def from_env(cls) -> "RecordStoreConfig":
        """Create configuration from environment variables."""
        return cls(
            url=os.environ.get("SUPABASE_URL"),
            anon_key=os.environ.get("SUPABASE_ANON_KEY"),
            timeout_seconds=float(os.environ.get("SUPABASE_TIMEOUT", "30.0")),
        )


class RecordStore:
    """Session-scoped access to patient, consultation and transcript records."""

    def __init__(self, config: RecordStoreConfig | None = None):
        """Initialize record store client."""
        self.config = config or RecordStoreConfig()

        self.url = self.config.url or os.environ.get("SUPABASE_URL")
        self.anon_key = self.config.anon_key or os.environ.get("SUPABASE_ANON_KEY")

        if not self.url or not self.anon_key:
            raise ValueError(
                "Supabase URL and anon key required. "
                "Set SUPABASE_URL and SUPABASE_ANON_KEY environment variables or pass them in config."
            )

        self.url = self.url.rstrip("/")
        self._access_token: str | None = None
        self.user: dict[str, Any] | None = None

    # ------------------------------------------------------------------
    # Session
    # ------------------------------------------------------------------

    def _auth_headers(self) -> dict[str, str]:
        return {"apikey": self.anon_key, "Content-Type": "application/json"}

    def _headers(self) -> dict[str, str]:
        if not self._access_token:
            raise NotAuthenticatedError("Sign in required")
        headers = self._auth_headers()
        headers["Authorization"] = f"Bearer {self._access_token}"
        headers["Prefer"] = "return=representation"
        return headers

    def is_authenticated(self) -> bool:
        return self._access_token is not None

    def sign_in(self, email: str, password: str) -> dict[str, Any]:
        """Sign in with email and password; returns the user object."""
        response = self._request(
            "POST",
            f"{self.url}/auth/v1/token",
            headers=self._auth_headers(),
            params={"grant_type": "password"},
            json={"email": email, "password": password},
        )
        data = response.json()
        self._access_token = data["access_token"]
        self.user = data.get("user")
        logger.info("Signed in as %s", email)
        return self.user or {}

    def sign_up(self, email: str, password: str, full_name: str | None = None) -> dict[str, Any]:
        """Create an account. Signs in directly when the project skips email confirmation."""
        payload: dict[str, Any] = {"email": email, "password": password}
        if full_name:
            payload["data"] = {"full_name": full_name}

        response = self._request(
            "POST",
            f"{self.url}/auth/v1/signup",
            headers=self._auth_headers(),
            json=payload,
        )
        data = response.json()
        if data.get("access_token"):
            self._access_token = data["access_token"]
            self.user = data.get("user")
        return data.get("user") or data

    def sign_out(self) -> None:
        """End the session. Local state is cleared even if the request fails."""
        if not self._access_token:
            return
        try:
            self._request("POST", f"{self.url}/auth/v1/logout", headers=self._headers())
        except RecordStoreError as e:
            logger.warning("Sign out request failed: %s", e)
        finally:
            self._access_token = None
            self.user = None

    # ------------------------------------------------------------------
    # Requests
    # ------------------------------------------------------------------

    def _request(self, method: str, url: str, **kwargs: Any) -> requests.Response:
        try:
            response = requests.request(
                method, url, timeout=self.config.timeout_seconds, **kwargs
            )
        except requests.RequestException as e:
            raise RecordStoreError(f"Record store unreachable: {e}") from e

        if response.status_code == 401:
            raise NotAuthenticatedError("Session expired or invalid", status_code=401)
        if response.status_code >= 400:
            raise RecordStoreError(
                f"Record store error: {response.status_code} - {response.text[:500]}",
                status_code=response.status_code,
            )
        return response

    def _table_url(self, table: str) -> str:
        return f"{self.url}/rest/v1/{table}"

    def _rows(self, response: requests.Response) -> list[dict[str, Any]]:
        if not response.content:
            return []
        data = response.json()
        return data if isinstance(data, list) else [data]

    # ------------------------------------------------------------------
    # Patients
    # ------------------------------------------------------------------

    def get_patient(self, mrn: str) -> dict[str, Any] | None:
        """Fetch a patient row by MRN."""
        response = self._request(
            "GET",
            self._table_url(self.config.patients_table),
            headers=self._headers(),
            params={"mrn": f"eq.{mrn}", "select": "*"},
        )
        rows = self._rows(response)
        return rows[0] if rows else None

    def upsert_patient(self, patient: PatientInfo, **fields: Any) -> dict[str, Any]:
        """Insert or update a patient keyed by MRN."""
        if not patient.mrn:
            raise ValueError("Patient MRN required")

        headers = self._headers()
        headers["Prefer"] = "return=representation,resolution=merge-duplicates"
        row = {k: v for k, v in patient.to_dict().items() if v is not None}
        row.update(fields)

        response = self._request(
            "POST",
            self._table_url(self.config.patients_table),
            headers=headers,
            params={"on_conflict": "mrn"},
            json=row,
        )
        rows = self._rows(response)
        return rows[0] if rows else row

    # ------------------------------------------------------------------
    # Consultations
    # ------------------------------------------------------------------

    def list_consultations(self, mrn: str) -> list[ConsultationRecord]:
        """Consultations for a patient, newest first."""
        response = self._request(
            "GET",
            self._table_url(self.config.consultations_table),
            headers=self._headers(),
            params={
                "patient_mrn": f"eq.{mrn}",
                "select": "*",
                "order": "created_at.desc",
            },
        )
        return [ConsultationRecord.from_dict(row) for row in self._rows(response)]

    def create_consultation(self, record: ConsultationRecord) -> ConsultationRecord:
        """Insert a consultation and return it with server-assigned fields."""
        response = self._request(
            "POST",
            self._table_url(self.config.consultations_table),
            headers=self._headers(),
            json=record.to_dict(),
        )
        rows = self._rows(response)
        return ConsultationRecord.from_dict(rows[0]) if rows else record

    def update_consultation(self, consultation_id: str, **fields: Any) -> ConsultationRecord | None:
        """Update selected columns of a consultation."""
        response = self._request(
            "PATCH",
            self._table_url(self.config.consultations_table),
            headers=self._headers(),
            params={"id": f"eq.{consultation_id}"},
            json=fields,
        )
        rows = self._rows(response)
        return ConsultationRecord.from_dict(rows[0]) if rows else None

    # ------------------------------------------------------------------
    # Transcripts
    # ------------------------------------------------------------------

    def save_transcript(
        self,
        patient: PatientInfo,
        segments: list[TranscriptSegment],
        duration_seconds: float,
        recorded_at: datetime | None = None,
    ) -> dict[str, Any] | None:
        """Store a finished transcript. Skipped (returns None) without an MRN."""
        if not patient.mrn:
            logger.warning("No patient MRN - skipping transcript save")
            return None

        recorded_at = recorded_at or datetime.now(timezone.utc)
        record = TranscriptRecord(
            patient_mrn=patient.mrn,
            patient_name=patient.name,
            transcript=[segment.to_dict() for segment in segments],
            duration_seconds=duration_seconds,
            recorded_at=recorded_at.isoformat(),
        )

        response = self._request(
            "POST",
            self._table_url(self.config.transcripts_table),
            headers=self._headers(),
            json=record.to_dict(),
        )
        rows = self._rows(response)
        logger.info("Transcript saved for MRN %s", patient.mrn)
        return rows[0] if rows else record.to_dict()
