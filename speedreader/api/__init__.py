"""Evaluation API package — async HTTP interface to the summary grader.

WHY: A completed session can be followed by a comprehension check: the
reader's summary and the original text go to a language model, which
returns a qualitative assessment.

HOW: Uses httpx.AsyncClient for the single request/response call.
Request and response bodies are typed dataclasses in models.py.

RULES:
- All HTTP calls go through EvaluationClient (no direct httpx elsewhere)
- Authentication is via Bearer token from config.load_api_key()
"""

from speedreader.api.client import (
    EvaluationAPIError,
    EvaluationClient,
    build_evaluation_prompt,
)
from speedreader.api.models import EvaluationResponseError

__all__ = [
    "EvaluationAPIError",
    "EvaluationClient",
    "EvaluationResponseError",
    "build_evaluation_prompt",
]
