from __future__ import annotations

import logging
import os
import time

from quizgen.providers.base import LLMProvider

log = logging.getLogger("quizgen.llm")


class AnthropicProvider(LLMProvider):
    def __init__(self, model: str = "claude-sonnet-4-20250514"):
        import anthropic
        self.client = anthropic.AsyncAnthropic(
            api_key=os.environ.get("ANTHROPIC_API_KEY", ""),
            max_retries=0,  # execute_with_retry owns retries and backoff
        )
        self.model = model

    async def generate(self, prompt: str, temperature: float = 0.7, max_tokens: int = 1024) -> str:
        log.info("── PROMPT (%s, max %d tokens) ──\n%s", self.model, max_tokens, prompt)
        t0 = time.monotonic()
        message = await self.client.messages.create(
            model=self.model,
            max_tokens=max_tokens,
            temperature=temperature,
            messages=[{"role": "user", "content": prompt}],
        )
        text = "".join(
            block.text for block in message.content if getattr(block, "type", "") == "text"
        )
        if message.stop_reason == "max_tokens":
            log.warning("Anthropic output hit the %d token limit; the last question may be cut off",
                        max_tokens)
        log.info("── RESPONSE (%.1fs) ──\n%s", time.monotonic() - t0, text)
        return text

    def name(self) -> str:
        return f"anthropic/{self.model}"
