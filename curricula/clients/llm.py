from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Any

from curricula.domain.dto import LLMClientRequest, LLMClientResult
from curricula.domain.errors import GenerativeCallFailure

logger = logging.getLogger("curricula.llm")


@dataclass
class OpenAICompatibleLLMClient:
    """Chat-completions client for any OpenAI-compatible endpoint."""

    model: str
    api_key: str | None = None
    api_base: str | None = None
    max_tokens: int = 8192
    temperature: float = 0.2
    timeout_seconds: float = 120.0
    _client: Any = field(init=False, default=None, repr=False)

    def _ensure_client(self) -> Any:
        if self._client is None:
            try:
                import openai

                self._client = openai.OpenAI(
                    api_key=self.api_key,
                    base_url=self.api_base,
                    timeout=self.timeout_seconds,
                )
            except Exception as exc:
                raise GenerativeCallFailure(f"failed to initialize LLM client: {exc}") from exc
        return self._client

    def invoke(self, request: LLMClientRequest) -> LLMClientResult:
        client = self._ensure_client()
        messages = [{"role": "system", "content": request.system_prompt}]
        messages.extend({"role": item.role, "content": item.content} for item in request.messages)

        started = time.monotonic()
        try:
            response = client.chat.completions.create(
                model=self.model,
                messages=messages,
                max_tokens=self.max_tokens,
                temperature=self.temperature,
            )
        except Exception as exc:
            raise GenerativeCallFailure(f"{request.purpose} call failed: {exc}") from exc
        latency_ms = int((time.monotonic() - started) * 1000)

        if not response.choices:
            raise GenerativeCallFailure(f"{request.purpose} call returned no choices")
        text = response.choices[0].message.content or ""
        usage = response.usage
        result = LLMClientResult(
            raw_text=text,
            tokens_input=usage.prompt_tokens if usage else 0,
            tokens_output=usage.completion_tokens if usage else 0,
            latency_ms=latency_ms,
        )
        logger.info(
            "llm call completed",
            extra={
                "purpose": request.purpose,
                "model": self.model,
                "tokens_input": result.tokens_input,
                "tokens_output": result.tokens_output,
                "latency_ms": result.latency_ms,
            },
        )
        return result
