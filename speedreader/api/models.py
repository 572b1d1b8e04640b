"""OpenRouter chat-completions request and response dataclasses.

WHY: The evaluation call sends one user message and reads back one
assistant message. Typed dataclasses make the few fields we rely on
explicit and give a single place to reject malformed responses.

HOW: ChatRequest.to_dict() builds the JSON body. ChatResponse.from_dict()
parses the response and content() extracts the first choice's text,
raising EvaluationResponseError when any level is missing.

RULES:
- Only the first choice is used
- Missing choices, empty choices and a missing message are distinct errors
- Wrongly typed choices, choice entries or content raise
  EvaluationResponseError, never AttributeError or TypeError
"""

from __future__ import annotations

from dataclasses import dataclass, field


class EvaluationResponseError(Exception):
    """The API answered 2xx but the body has no usable message content."""


@dataclass
class Message:
    role: str
    content: str

    def to_dict(self) -> dict:
        return {"role": self.role, "content": self.content}

    @classmethod
    def from_dict(cls, data: dict) -> Message:
        return cls(role=data.get("role", "assistant"), content=data["content"])


@dataclass
class ChatRequest:
    model: str
    messages: list[Message] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "model": self.model,
            "messages": [m.to_dict() for m in self.messages],
        }


@dataclass
class Choice:
    message: Message | None = None

    @classmethod
    def from_dict(cls, data: dict) -> Choice:
        if not isinstance(data, dict):
            raise EvaluationResponseError("Malformed choice in API response")
        message = data.get("message")
        if not isinstance(message, dict) or not isinstance(message.get("content"), str):
            return cls(message=None)
        return cls(message=Message.from_dict(message))


@dataclass
class ChatResponse:
    """Parsed chat-completions response.

    RULES:
    - choices is None when the key is absent from the body
    """

    choices: list[Choice] | None = None

    @classmethod
    def from_dict(cls, data: dict) -> ChatResponse:
        raw = data.get("choices")
        if raw is None:
            return cls(choices=None)
        if not isinstance(raw, list):
            raise EvaluationResponseError("Malformed choices in API response")
        return cls(choices=[Choice.from_dict(c) for c in raw])

    def content(self) -> str:
        if self.choices is None:
            raise EvaluationResponseError("Missing choices in API response")
        if not self.choices:
            raise EvaluationResponseError("Empty choices array in API response")
        message = self.choices[0].message
        if message is None:
            raise EvaluationResponseError("Missing message content in API response")
        return message.content
