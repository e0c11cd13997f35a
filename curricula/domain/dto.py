from __future__ import annotations

from dataclasses import dataclass
from typing import Literal


@dataclass(frozen=True)
class ChatMessage:
    role: Literal["user", "assistant"]
    content: str


@dataclass(frozen=True)
class LLMClientRequest:
    system_prompt: str
    messages: tuple[ChatMessage, ...]
    # Trace label for logs, e.g. "standardize" or "analyze".
    purpose: str = "generic"


@dataclass(frozen=True)
class LLMClientResult:
    raw_text: str
    tokens_input: int = 0
    tokens_output: int = 0
    latency_ms: int = 0
