from __future__ import annotations

import logging
import os
import time

from quizgen.providers.base import LLMProvider

log = logging.getLogger("quizgen.llm")


class OpenAIProvider(LLMProvider):
    def __init__(self, model: str = "gpt-4o-mini"):
        import openai
        self.client = openai.AsyncOpenAI(
            api_key=os.environ.get("OPENAI_API_KEY", ""),
            max_retries=0,  # execute_with_retry owns retries and backoff
        )
        self.model = model

    async def generate(self, prompt: str, temperature: float = 0.7, max_tokens: int = 1024) -> str:
        log.info("── PROMPT (%s, max %d tokens) ──\n%s", self.model, max_tokens, prompt)
        t0 = time.monotonic()
        resp = await self.client.chat.completions.create(
            model=self.model,
            temperature=temperature,
            max_tokens=max_tokens,
            messages=[{"role": "user", "content": prompt}],
        )
        if not resp.choices:
            log.warning("OpenAI returned no choices")
            return ""
        choice = resp.choices[0]
        if choice.finish_reason == "length":
            log.warning("OpenAI output hit the %d token limit; the last question may be cut off",
                        max_tokens)
        text = choice.message.content or ""
        log.info("── RESPONSE (%.1fs) ──\n%s", time.monotonic() - t0, text)
        return text

    def name(self) -> str:
        return f"openai/{self.model}"
