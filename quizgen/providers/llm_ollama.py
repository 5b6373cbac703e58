from __future__ import annotations

import logging
import re
import time

import httpx

from quizgen.providers.base import LLMProvider

log = logging.getLogger("quizgen.llm")

# Qwen3 and similar models can emit reasoning even with think disabled
THINK_RE = re.compile(r"<think>.*?(?:</think>|$)", re.DOTALL)


class OllamaProvider(LLMProvider):
    """Local generation through Ollama's /api/generate endpoint."""

    def __init__(self, base_url: str = "http://localhost:11434", model: str = "qwen3:8b"):
        self.base_url = base_url.rstrip("/")
        self.model = model

    async def generate(self, prompt: str, temperature: float = 0.7, max_tokens: int = 1024) -> str:
        log.info("── PROMPT (%s, max %d tokens) ──\n%s", self.model, max_tokens, prompt)
        t0 = time.monotonic()
        async with httpx.AsyncClient(timeout=120.0) as client:
            resp = await client.post(
                f"{self.base_url}/api/generate",
                json={
                    "model": self.model,
                    "prompt": prompt,
                    "stream": False,
                    "think": False,
                    "options": {"temperature": temperature, "num_predict": max_tokens},
                },
            )
            resp.raise_for_status()
            data = resp.json()

        response = THINK_RE.sub("", data.get("response", "")).strip()
        if data.get("done_reason") == "length":
            log.warning("Ollama output hit the %d token limit; the last question may be cut off",
                        max_tokens)
        log.info("── RESPONSE (%.1fs, %s tokens) ──\n%s",
                 time.monotonic() - t0, data.get("eval_count", "?"), response)
        return response

    def name(self) -> str:
        return f"ollama/{self.model}"
