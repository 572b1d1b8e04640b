"""Async HTTP client for the summary evaluation request.

WHY: After a completed session the reader writes a summary of what they
read. A language model compares it with the original text and rates the
comprehension relative to the reading speed. This module hides the HTTP
details so the CLI only calls evaluate().

HOW: Uses httpx.AsyncClient against the OpenRouter chat-completions
endpoint. EvaluationClient is an async context manager. Enter it to get
an authenticated client, exit to close the connection pool. The prompt is
built by build_evaluation_prompt() and sent as a single user message.

RULES:
- Always use the async context manager (async with EvaluationClient() as c:)
- api_key defaults to load_api_key(); model to the configured default
- Non-2xx responses raise EvaluationAPIError with the body text
- 2xx responses without message content raise EvaluationResponseError
- on_status, when given, receives short human-readable progress strings
"""

from __future__ import annotations

from collections.abc import Callable

import httpx

from speedreader.api.models import (
    ChatRequest,
    ChatResponse,
    EvaluationResponseError,
    Message,
)
from speedreader.config import DEFAULT_MODEL, OPEN_ROUTER_URL, load_api_key

_TIMEOUT = httpx.Timeout(120.0, connect=30.0)


class EvaluationAPIError(Exception):
    """Raised when the evaluation API returns a non-2xx response.

    RULES:
    - Always include status_code and message
    - message is the response body text
    """

    def __init__(self, status_code: int, message: str) -> None:
        self.status_code = status_code
        self.message = message
        super().__init__(f"API request failed ({status_code}): {message}")


def build_evaluation_prompt(summary: str, text: str, wpm: int) -> str:
    """Build the prompt asking the model to grade a reader's summary.

    The reading speed is included so the model can comment on
    comprehension relative to pace.
    """
    return f'''
Original Text:
"""
{text}
"""

User Summary:
"""
{summary}
"""

WPM: {wpm}

Based on the Original Text, please evaluate the User Summary. Assess its comprehension based on:
1. Accuracy: Does the summary correctly represent the information in the original text?
2. Key Points Coverage: Does the summary include the main ideas and crucial supporting details?
3. Completeness: How much of the core information is captured?
4. Misinterpretations: Are there any points that are clearly misunderstood?

Provide:
- A qualitative rating (e.g., Excellent, Good, Fair, Poor).
- A list of key points correctly captured in the summary.
- A list of significant points from the original text that were missed or misrepresented in the summary.
- A brief overall comment on the user's comprehension based on their WPM.
'''


class EvaluationClient:
    """Async client for the OpenRouter summary evaluation call.

    HOW: Wraps httpx.AsyncClient with Bearer token auth. ``transport`` is
    passed straight to httpx so tests can use httpx.MockTransport.
    """

    def __init__(
        self,
        api_key: str | None = None,
        url: str | None = None,
        model: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._api_key = api_key or load_api_key()
        self._url = url or OPEN_ROUTER_URL
        self._model = model or DEFAULT_MODEL
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def __aenter__(self) -> EvaluationClient:
        self._client = httpx.AsyncClient(
            headers={
                "Authorization": f"Bearer {self._api_key}",
                "Content-Type": "application/json",
            },
            timeout=_TIMEOUT,
            transport=self._transport,
        )
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:  # noqa: ANN001
        if self._client:
            await self._client.aclose()
            self._client = None

    def _ensure_client(self) -> httpx.AsyncClient:
        """Return the active httpx client, raising if not in context manager."""
        if self._client is None:
            raise RuntimeError(
                "EvaluationClient must be used as an async context manager: "
                "async with EvaluationClient() as client: ..."
            )
        return self._client

    async def evaluate(
        self,
        summary: str,
        text: str,
        wpm: int,
        on_status: Callable[[str], None] | None = None,
    ) -> str:
        """Send the summary for evaluation and return the model's assessment.

        Args:
            summary: The reader's summary, as typed.
            text: The full original text that was read.
            wpm: Final reading speed of the completed session.
            on_status: Optional callback for status updates.

        Returns:
            The assessment text of the first choice.
        """
        client = self._ensure_client()
        request = ChatRequest(
            model=self._model,
            messages=[Message(role="user", content=build_evaluation_prompt(summary, text, wpm))],
        )

        if on_status:
            on_status("Sending request to AI for evaluation...")
        resp = await client.post(self._url, json=request.to_dict())

        if not resp.is_success:
            raise EvaluationAPIError(resp.status_code, resp.text)

        if on_status:
            on_status("Parsing AI response...")
        try:
            data = resp.json()
        except ValueError as e:
            raise EvaluationResponseError(f"API response is not valid JSON: {e}") from e
        if not isinstance(data, dict):
            raise EvaluationResponseError("API response is not a JSON object")

        return ChatResponse.from_dict(data).content()
