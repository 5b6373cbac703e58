from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from quizgen.config import Settings


class LLMProvider(ABC):
    @abstractmethod
    async def generate(self, prompt: str, temperature: float = 0.7, max_tokens: int = 1024) -> str:
        ...

    @abstractmethod
    def name(self) -> str:
        ...


def create_llm(settings: Settings) -> LLMProvider:
    if settings.llm_provider == "ollama":
        from quizgen.providers.llm_ollama import OllamaProvider
        return OllamaProvider(base_url=settings.ollama_url, model=settings.llm_model)
    elif settings.llm_provider == "huggingface":
        from quizgen.providers.llm_huggingface import HuggingFaceProvider
        return HuggingFaceProvider(base_url=settings.huggingface_url, model=settings.llm_model)
    elif settings.llm_provider == "anthropic":
        from quizgen.providers.llm_anthropic import AnthropicProvider
        return AnthropicProvider(model=settings.llm_model)
    elif settings.llm_provider == "openai":
        from quizgen.providers.llm_openai import OpenAIProvider
        return OpenAIProvider(model=settings.llm_model)
    raise ValueError(f"Unknown LLM provider: {settings.llm_provider}")
