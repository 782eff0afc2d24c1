"""
Tests for the record store client.

Copyright (c) 2024 Cleansheet LLC
License: CC BY 4.0
"""

from datetime import datetime, timezone
from unittest.mock import MagicMock, patch

import pytest
import requests

from smartscribe.errors import NotAuthenticatedError, RecordStoreError
from smartscribe.records.record_store import RecordStore, RecordStoreConfig
from smartscribe.records.record_types import ConsultationRecord, PatientInfo


BASE_URL = "https://demo.supabase.co"


@pytest.fixture
def store() -> RecordStore:
    return RecordStore(RecordStoreConfig(url=BASE_URL + "/", anon_key="anon"))


@pytest.fixture
def signed_in(store: RecordStore, mock_response) -> RecordStore:
    with patch("smartscribe.records.record_store.requests.request") as mock_request:
        mock_request.return_value = mock_response(
            payload={"access_token": "jwt-token", "user": {"id": "u1", "email": "dr@example.com"}}
        )
        store.sign_in("dr@example.com", "secret")
    return store


class TestRecordStoreConfig:
    """Tests for RecordStoreConfig class."""

    def test_from_env(self, monkeypatch):
        """Test configuration from environment variables."""
        monkeypatch.setenv("SUPABASE_URL", BASE_URL)
        monkeypatch.setenv("SUPABASE_ANON_KEY", "anon")

        config = RecordStoreConfig.from_env()

        assert config.url == BASE_URL
        assert config.anon_key == "anon"

    def test_requires_url_and_key(self, monkeypatch):
        """Test missing project settings are rejected."""
        monkeypatch.delenv("SUPABASE_URL", raising=False)
        monkeypatch.delenv("SUPABASE_ANON_KEY", raising=False)

        with pytest.raises(ValueError, match="Supabase URL"):
            RecordStore(RecordStoreConfig(url=BASE_URL))


class TestRecordStoreAuth:
    """Tests for sign in and session handling."""

    @patch("smartscribe.records.record_store.requests.request")
    def test_sign_in(self, mock_request: MagicMock, store: RecordStore, mock_response):
        """Test the password grant request and stored token."""
        mock_request.return_value = mock_response(
            payload={"access_token": "jwt-token", "user": {"id": "u1"}}
        )

        user = store.sign_in("dr@example.com", "secret")

        assert user == {"id": "u1"}
        assert store.is_authenticated() is True
        args, kwargs = mock_request.call_args
        assert args == ("POST", f"{BASE_URL}/auth/v1/token")
        assert kwargs["params"] == {"grant_type": "password"}
        assert kwargs["headers"]["apikey"] == "anon"

    @patch("smartscribe.records.record_store.requests.request")
    def test_bad_credentials(self, mock_request: MagicMock, store: RecordStore, mock_response):
        """Test a rejected sign in."""
        mock_request.return_value = mock_response(
            status_code=400, payload={"error": "invalid_grant"}
        )

        with pytest.raises(RecordStoreError) as exc_info:
            store.sign_in("dr@example.com", "wrong")

        assert exc_info.value.status_code == 400
        assert store.is_authenticated() is False

    @patch("smartscribe.records.record_store.requests.request")
    def test_sign_up_with_confirmation(self, mock_request: MagicMock, store: RecordStore, mock_response):
        """Test sign up that awaits email confirmation leaves the store signed out."""
        mock_request.return_value = mock_response(payload={"id": "u2", "email": "new@example.com"})

        result = store.sign_up("new@example.com", "secret", full_name="Dr. New")

        assert result["id"] == "u2"
        assert store.is_authenticated() is False
        assert mock_request.call_args.kwargs["json"]["data"] == {"full_name": "Dr. New"}

    @patch("smartscribe.records.record_store.requests.request")
    def test_sign_up_signs_in(self, mock_request: MagicMock, store: RecordStore, mock_response):
        """Test sign up without confirmation starts a session."""
        mock_request.return_value = mock_response(
            payload={"access_token": "jwt-token", "user": {"id": "u2"}}
        )

        assert store.sign_up("new@example.com", "secret") == {"id": "u2"}
        assert store.is_authenticated() is True

    def test_calls_require_sign_in(self, store: RecordStore):
        """Test data access without a session."""
        with pytest.raises(NotAuthenticatedError):
            store.get_patient("MRN-1")

    @patch("smartscribe.records.record_store.requests.request")
    def test_expired_session(self, mock_request: MagicMock, signed_in: RecordStore, mock_response):
        """Test 401 responses raise NotAuthenticatedError."""
        mock_request.return_value = mock_response(status_code=401, payload={"message": "JWT expired"})

        with pytest.raises(NotAuthenticatedError):
            signed_in.get_patient("MRN-1")

    @patch("smartscribe.records.record_store.requests.request")
    def test_sign_out_clears_session_on_failure(
        self, mock_request: MagicMock, signed_in: RecordStore
    ):
        """Test local state is cleared even if logout fails."""
        mock_request.side_effect = requests.ConnectionError("offline")

        signed_in.sign_out()

        assert signed_in.is_authenticated() is False
        assert signed_in.user is None


class TestRecordStoreData:
    """Tests for patient, consultation and transcript access."""

    @patch("smartscribe.records.record_store.requests.request")
    def test_get_patient(self, mock_request: MagicMock, signed_in: RecordStore, mock_response):
        """Test lookup by MRN."""
        mock_request.return_value = mock_response(payload=[{"mrn": "MRN-1", "name": "Jane Doe"}])

        patient = signed_in.get_patient("MRN-1")

        assert patient["name"] == "Jane Doe"
        args, kwargs = mock_request.call_args
        assert args == ("GET", f"{BASE_URL}/rest/v1/patients")
        assert kwargs["params"]["mrn"] == "eq.MRN-1"
        assert kwargs["headers"]["Authorization"] == "Bearer jwt-token"

    @patch("smartscribe.records.record_store.requests.request")
    def test_get_missing_patient(self, mock_request: MagicMock, signed_in: RecordStore, mock_response):
        """Test an unknown MRN."""
        mock_request.return_value = mock_response(payload=[])

        assert signed_in.get_patient("MRN-404") is None

    @patch("smartscribe.records.record_store.requests.request")
    def test_upsert_patient(self, mock_request: MagicMock, signed_in: RecordStore, mock_response):
        """Test upsert merges on MRN."""
        mock_request.return_value = mock_response(payload=[{"mrn": "MRN-1", "name": "Jane Doe"}])

        signed_in.upsert_patient(PatientInfo(name="Jane Doe", mrn="MRN-1"), gender="Female")

        _, kwargs = mock_request.call_args
        assert kwargs["params"] == {"on_conflict": "mrn"}
        assert "merge-duplicates" in kwargs["headers"]["Prefer"]
        assert kwargs["json"] == {"name": "Jane Doe", "mrn": "MRN-1", "gender": "Female"}

    def test_upsert_requires_mrn(self, signed_in: RecordStore):
        """Test a patient without MRN is rejected."""
        with pytest.raises(ValueError):
            signed_in.upsert_patient(PatientInfo(name="Jane Doe"))

    @patch("smartscribe.records.record_store.requests.request")
    def test_list_consultations(self, mock_request: MagicMock, signed_in: RecordStore, mock_response):
        """Test consultations are returned newest first."""
        mock_request.return_value = mock_response(
            payload=[
                {"id": "c2", "patient_mrn": "MRN-1", "plan": "ECG", "created_at": "2024-03-05"},
                {"id": "c1", "patient_mrn": "MRN-1", "plan": None, "created_at": "2024-01-10"},
            ]
        )

        records = signed_in.list_consultations("MRN-1")

        assert [r.id for r in records] == ["c2", "c1"]
        assert records[1].plan == ""
        assert mock_request.call_args.kwargs["params"]["order"] == "created_at.desc"

    @patch("smartscribe.records.record_store.requests.request")
    def test_create_consultation(self, mock_request: MagicMock, signed_in: RecordStore, mock_response):
        """Test server-assigned fields are returned."""
        mock_request.return_value = mock_response(
            payload=[{"id": "c3", "patient_mrn": "MRN-1", "assessment": "URI",
                      "created_at": "2024-03-05T10:00:00Z"}]
        )
        record = ConsultationRecord(patient_mrn="MRN-1", assessment="URI")

        created = signed_in.create_consultation(record)

        assert created.id == "c3"
        assert "id" not in mock_request.call_args.kwargs["json"]

    @patch("smartscribe.records.record_store.requests.request")
    def test_update_consultation(self, mock_request: MagicMock, signed_in: RecordStore, mock_response):
        """Test partial updates by id."""
        mock_request.return_value = mock_response(
            payload=[{"id": "c3", "patient_mrn": "MRN-1", "plan": "Rest"}]
        )

        updated = signed_in.update_consultation("c3", plan="Rest")

        args, kwargs = mock_request.call_args
        assert args[0] == "PATCH"
        assert kwargs["params"] == {"id": "eq.c3"}
        assert updated.plan == "Rest"

    @patch("smartscribe.records.record_store.requests.request")
    def test_save_transcript(
        self, mock_request: MagicMock, signed_in: RecordStore, mock_response, sample_segments
    ):
        """Test transcript rows carry segments, duration and time."""
        mock_request.return_value = mock_response(payload=[{"id": "t1"}])
        recorded_at = datetime(2024, 3, 5, 10, 0, tzinfo=timezone.utc)

        row = signed_in.save_transcript(
            PatientInfo(name="Jane Doe", mrn="MRN-1"), sample_segments, 65.0, recorded_at
        )

        assert row == {"id": "t1"}
        body = mock_request.call_args.kwargs["json"]
        assert body["patient_mrn"] == "MRN-1"
        assert body["duration_seconds"] == 65.0
        assert body["recorded_at"] == "2024-03-05T10:00:00+00:00"
        assert body["transcript"][1]["speaker"] == "Patient"

    @patch("smartscribe.records.record_store.requests.request")
    def test_save_transcript_without_mrn(
        self, mock_request: MagicMock, signed_in: RecordStore, sample_segments
    ):
        """Test transcripts without a patient are skipped."""
        assert signed_in.save_transcript(PatientInfo(), sample_segments, 10.0) is None
        mock_request.assert_not_called()

    @patch("smartscribe.records.record_store.requests.request")
    def test_server_error(self, mock_request: MagicMock, signed_in: RecordStore, mock_response):
        """Test 5xx responses raise RecordStoreError."""
        mock_request.return_value = mock_response(status_code=503, text="unavailable")

        with pytest.raises(RecordStoreError, match="503"):
            signed_in.list_consultations("MRN-1")
