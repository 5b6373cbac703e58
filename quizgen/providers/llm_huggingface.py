from __future__ import annotations

import logging
import os
import time

import httpx

from quizgen.providers.base import LLMProvider

log = logging.getLogger("quizgen.llm")


class HuggingFaceProvider(LLMProvider):
    """Text generation through the Hugging Face inference API."""

    def __init__(
        self,
        base_url: str = "https://api-inference.huggingface.co/models",
        model: str = "mistralai/Mistral-7B-Instruct-v0.2",
    ):
        self.base_url = base_url.rstrip("/")
        self.model = model
        self.token = os.environ.get("HF_API_TOKEN", "")

    async def generate(self, prompt: str, temperature: float = 0.7, max_tokens: int = 1024) -> str:
        log.info("── PROMPT (%s) ──\n%s", self.model, prompt)
        t0 = time.monotonic()
        headers = {"Authorization": f"Bearer {self.token}"} if self.token else {}
        async with httpx.AsyncClient(timeout=120.0) as client:
            resp = await client.post(
                f"{self.base_url}/{self.model}",
                headers=headers,
                json={
                    "inputs": prompt,
                    "parameters": {
                        "max_new_tokens": max_tokens,
                        "temperature": temperature,
                        "return_full_text": False,
                    },
                },
            )
            resp.raise_for_status()
            data = resp.json()
        # The API answers with a one-element list for text-generation models
        if isinstance(data, list):
            data = data[0] if data else {}
        response = data.get("generated_text", "")
        log.info("── RESPONSE (%.1fs) ──\n%s", time.monotonic() - t0, response)
        return response

    def name(self) -> str:
        return f"huggingface/{self.model}"
