"""
Gemini Summary Client

Google Gemini API client that turns a finished transcript into a SOAP note,
a quick summary, structured sidebar data and clinical recommendations.
"""

from dataclasses import dataclass
from typing import Any
import logging
import os

import requests

from smartscribe.errors import SummaryError
from smartscribe.summary import prompts
from smartscribe.summary.parsing import (
    parse_recommendations,
    parse_sidebar_data,
    parse_soap_note,
)
from smartscribe.summary.summary_types import Recommendations, SOAPNote
from smartscribe.transcription.transcript_types import TranscriptSegment

logger = logging.getLogger(__name__)

SAFETY_CATEGORIES = [
    "HARM_CATEGORY_HARASSMENT",
    "HARM_CATEGORY_HATE_SPEECH",
    "HARM_CATEGORY_SEXUALLY_EXPLICIT",
    "HARM_CATEGORY_DANGEROUS_CONTENT",
]


@dataclass
class GeminiClientConfig:
    """Configuration for the Gemini client."""

    api_key: str | None = None
    model: str = "gemini-2.0-flash"
    api_url: str = "https://generativelanguage.googleapis.com/v1beta/models"
    temperature: float = 0.2
    top_k: int = 40
    top_p: float = 0.95
    max_output_tokens: int = 2048
    safety_threshold: str = "BLOCK_ONLY_HIGH"
    timeout_seconds: float = 60.0

    @classmethod
    def from_env(cls) -> "GeminiClientConfig":
        """Create configuration from environment variables."""
        return cls(
            api_key=os.environ.get("GEMINI_API_KEY"),
            model=os.environ.get("GEMINI_MODEL", "gemini-2.0-flash"),
            timeout_seconds=float(os.environ.get("GEMINI_TIMEOUT", "60.0")),
        )


class GeminiClient:
    """Summarization backend client.

    Only one generation runs at a time per client; a second call while one
    is in flight raises SummaryError.
    """

    def __init__(self, config: GeminiClientConfig | None = None):
        """Initialize Gemini client."""
        self.config = config or GeminiClientConfig()

        self.api_key = self.config.api_key or os.environ.get("GEMINI_API_KEY")
        if not self.api_key:
            raise ValueError(
                "Gemini API key required. "
                "Set GEMINI_API_KEY environment variable or pass api_key in config."
            )

        self._is_generating = False

    @property
    def is_generating(self) -> bool:
        return self._is_generating

    @property
    def _headers(self) -> dict[str, str]:
        """Request headers."""
        return {"Content-Type": "application/json", "x-goog-api-key": self.api_key}

    @property
    def _endpoint(self) -> str:
        """generateContent URL for the configured model."""
        return f"{self.config.api_url.rstrip('/')}/{self.config.model}:generateContent"

    def _payload(self, prompt: str) -> dict[str, Any]:
        return {
            "contents": [{"parts": [{"text": prompt}]}],
            "generationConfig": {
                "temperature": self.config.temperature,
                "topK": self.config.top_k,
                "topP": self.config.top_p,
                "maxOutputTokens": self.config.max_output_tokens,
            },
            "safetySettings": [
                {"category": category, "threshold": self.config.safety_threshold}
                for category in SAFETY_CATEGORIES
            ],
        }

    def generate(self, prompt: str) -> str:
        """Send a prompt and return the first candidate's text."""
        try:
            response = requests.post(
                self._endpoint,
                headers=self._headers,
                json=self._payload(prompt),
                timeout=self.config.timeout_seconds,
            )
        except requests.RequestException as e:
            raise SummaryError(f"Gemini API unreachable: {e}") from e

        if response.status_code != 200:
            try:
                message = response.json().get("error", {}).get("message")
            except ValueError:
                message = None
            raise SummaryError(
                f"Gemini API error: {response.status_code} - {message or response.text[:500]}"
            )

        data = response.json()
        candidates = data.get("candidates") or []
        if not candidates:
            raise SummaryError("No response generated from Gemini API")

        parts = candidates[0].get("content", {}).get("parts") or []
        text = "".join(part.get("text", "") for part in parts)
        logger.debug("Gemini response length: %d", len(text))
        return text

    def _generate_guarded(self, prompt: str) -> str:
        if self._is_generating:
            raise SummaryError("Summary generation already in progress")

        self._is_generating = True
        try:
            return self.generate(prompt)
        finally:
            self._is_generating = False

    @staticmethod
    def _require_transcript(transcript: list[TranscriptSegment]) -> None:
        if not transcript:
            raise SummaryError("No transcript available to summarize")

    def generate_summary(
        self,
        transcript: list[TranscriptSegment],
        patient_info: dict[str, Any] | None = None,
    ) -> SOAPNote:
        """Generate a SOAP note from a transcript."""
        self._require_transcript(transcript)
        text = self._generate_guarded(prompts.soap_prompt(transcript, patient_info or {}))
        return parse_soap_note(text)

    def generate_quick_summary(self, transcript: list[TranscriptSegment]) -> str:
        """Two or three sentence summary of the conversation."""
        self._require_transcript(transcript)
        return self._generate_guarded(prompts.quick_summary_prompt(transcript)).strip()

    def generate_sidebar_data(
        self,
        transcript: list[TranscriptSegment],
        patient_info: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Structured demographics, vitals, allergies, medications, problems,
        care gaps and ICD-10 suggestions."""
        self._require_transcript(transcript)
        patient_info = patient_info or {}
        text = self._generate_guarded(prompts.sidebar_prompt(transcript, patient_info))
        return parse_sidebar_data(text, patient_info)

    def generate_recommendations(
        self,
        transcript: list[TranscriptSegment],
        soap_note: SOAPNote,
        patient_info: dict[str, Any] | None = None,
    ) -> Recommendations:
        """Brief recommendations based on the conversation and its SOAP note."""
        self._require_transcript(transcript)
        text = self._generate_guarded(
            prompts.recommendations_prompt(transcript, soap_note, patient_info or {})
        )
        return parse_recommendations(text)
