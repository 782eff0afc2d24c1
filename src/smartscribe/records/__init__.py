"""
Records Module

Patient, consultation and transcript records in the backend-as-a-service.
"""

from smartscribe.records.record_types import ConsultationRecord, PatientInfo, TranscriptRecord
from smartscribe.records.record_store import RecordStore, RecordStoreConfig

__all__ = [
    "ConsultationRecord",
    "PatientInfo",
    "RecordStore",
    "RecordStoreConfig",
    "TranscriptRecord",
]
