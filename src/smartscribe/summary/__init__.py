"""
Summary Module

SOAP notes, recommendations and structured sidebar data from transcripts.
"""

from smartscribe.summary.summary_types import Recommendations, SOAPNote
from smartscribe.summary.parsing import parse_recommendations, parse_sidebar_data, parse_soap_note
from smartscribe.summary.gemini_client import GeminiClient, GeminiClientConfig

__all__ = [
    "GeminiClient",
    "GeminiClientConfig",
    "Recommendations",
    "SOAPNote",
    "parse_recommendations",
    "parse_sidebar_data",
    "parse_soap_note",
]
