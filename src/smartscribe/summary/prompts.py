"""
Summary Prompts

Prompt templates for SOAP notes, quick summaries, sidebar extraction and
recommendations. Response formats here must stay in sync with the labels
and keys expected by smartscribe.summary.parsing.
"""

from datetime import date
from typing import Any
import json

from smartscribe.summary.summary_types import SOAPNote
from smartscribe.transcription.transcript_types import TranscriptSegment, format_transcript


def conversation_text(transcript: list[TranscriptSegment]) -> str:
    """One "[MM:SS] speaker: text" line per segment."""
    return format_transcript(transcript, separator="\n")


def _patient_header(patient_info: dict[str, Any], today: date | None = None) -> str:
    today = today or date.today()
    return (
        "**Patient Information:**\n"
        f"- Name: {patient_info.get('name') or 'Not provided'}\n"
        f"- MRN: {patient_info.get('mrn') or 'Not provided'}\n"
        f"- Date: {today.isoformat()}"
    )


def soap_prompt(transcript: list[TranscriptSegment], patient_info: dict[str, Any]) -> str:
    return f"""You are a medical documentation assistant. Based on the following doctor-patient conversation, generate a SOAP note (Subjective, Objective, Assessment, Plan) in professional medical format.

{_patient_header(patient_info)}

**Conversation Transcript:**
{conversation_text(transcript)}

**Instructions:**
1. Include only information explicitly mentioned in the conversation.
2. Use professional medical terminology; be concise but complete.
3. If a section has no relevant information, write "Not documented in this visit".

**Format your response exactly as:**

SUBJECTIVE:
[Subjective findings]

OBJECTIVE:
[Objective findings]

ASSESSMENT:
[Assessment]

PLAN:
[Plan]"""


def quick_summary_prompt(transcript: list[TranscriptSegment]) -> str:
    return f"""Summarize this doctor-patient conversation in 2-3 sentences, focusing on the chief complaint and main points:

{conversation_text(transcript)}

Provide a brief, professional medical summary."""


def sidebar_prompt(transcript: list[TranscriptSegment], patient_info: dict[str, Any]) -> str:
    return f"""You are a clinical extraction assistant. From the following doctor-patient conversation, extract structured patient sidebar data. Return a single valid JSON object with these fields:
{{
  "demographics": {{"name": "", "mrn": "", "dob": "YYYY-MM-DD" or null, "age": number or null, "gender": "Male|Female|Other|Unknown"}},
  "chief_complaint": "",
  "vitals": {{"bp_systolic": number or null, "bp_diastolic": number or null, "heart_rate": number or null, "temperature": number or null, "temperature_unit": "F|C|", "o2_saturation": number or null}},
  "allergies": [],
  "medications": [],
  "active_problems": [{{"condition": "", "status": "urgent|monitor|stable|", "notes": ""}}],
  "care_gaps": [{{"issue": "", "severity": "urgent|warning|info", "due_date": "YYYY-MM-DD"}}],
  "suggested_icd10": []
}}

Patient info: {json.dumps(patient_info)}

Conversation:
{conversation_text(transcript)}

Only return JSON. Use null or an empty array for missing values."""


def recommendations_prompt(
    transcript: list[TranscriptSegment], soap_note: SOAPNote, patient_info: dict[str, Any]
) -> str:
    return f"""You are a clinical decision support assistant. Based on the following doctor-patient conversation and SOAP note, provide brief, actionable recommendations (1-2 sentences per category). If a category doesn't apply, write "None needed".

{_patient_header(patient_info)}

**Conversation Transcript:**
{conversation_text(transcript)}

**SOAP Note:**
{soap_note.to_text()}

**Format your response exactly as:**

MEDICATIONS:
[Medication recommendation]

LIFESTYLE MODIFICATIONS:
[Lifestyle change]

FOLLOW-UP:
[When to return]

PATIENT EDUCATION:
[Main teaching point]

DIAGNOSTIC TESTS:
[Essential tests]

REFERRALS:
[Specialist referral]"""
