from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path

CONFIG_PATH = Path(__file__).resolve().parent.parent / "config.json"

DEFAULTS = {
    "llm_provider": "ollama",
    "llm_model": "qwen3:8b",
    "ollama_url": "http://localhost:11434",
    "huggingface_url": "https://api-inference.huggingface.co/models",
    "db_path": "content.db",
    "content_dir": "data",
    "max_attempts": 3,
    "initial_delay_ms": 500,
    "quiz_timeout_ms": 5000,
    "exam_timeout_ms": 20000,
    "quiz_max_tokens": 1200,
    "exam_max_tokens": 4000,
    "temperature": 0.7,
    "max_questions": 50,
}


@dataclass
class Settings:
    llm_provider: str = DEFAULTS["llm_provider"]
    llm_model: str = DEFAULTS["llm_model"]
    ollama_url: str = DEFAULTS["ollama_url"]
    huggingface_url: str = DEFAULTS["huggingface_url"]
    db_path: str = DEFAULTS["db_path"]
    content_dir: str = DEFAULTS["content_dir"]
    max_attempts: int = DEFAULTS["max_attempts"]
    initial_delay_ms: int = DEFAULTS["initial_delay_ms"]
    quiz_timeout_ms: int = DEFAULTS["quiz_timeout_ms"]
    exam_timeout_ms: int = DEFAULTS["exam_timeout_ms"]
    quiz_max_tokens: int = DEFAULTS["quiz_max_tokens"]
    exam_max_tokens: int = DEFAULTS["exam_max_tokens"]
    temperature: float = DEFAULTS["temperature"]
    max_questions: int = DEFAULTS["max_questions"]

    @property
    def project_root(self) -> Path:
        return Path(__file__).resolve().parent.parent

    @property
    def db_full_path(self) -> Path:
        return self.project_root / self.db_path

    @property
    def content_full_path(self) -> Path:
        return self.project_root / self.content_dir

    def module_files(self) -> list[Path]:
        return sorted(self.content_full_path.glob("*.md"))

    def exam_file(self) -> Path:
        return self.content_full_path / "exams.json"

    def to_dict(self) -> dict:
        return {
            "llm_provider": self.llm_provider,
            "llm_model": self.llm_model,
            "ollama_url": self.ollama_url,
            "huggingface_url": self.huggingface_url,
            "db_path": self.db_path,
            "content_dir": self.content_dir,
            "max_attempts": self.max_attempts,
            "initial_delay_ms": self.initial_delay_ms,
            "quiz_timeout_ms": self.quiz_timeout_ms,
            "exam_timeout_ms": self.exam_timeout_ms,
            "quiz_max_tokens": self.quiz_max_tokens,
            "exam_max_tokens": self.exam_max_tokens,
            "temperature": self.temperature,
            "max_questions": self.max_questions,
        }


def load_settings() -> Settings:
    if CONFIG_PATH.exists():
        raw = json.loads(CONFIG_PATH.read_text())
        known = {f.name for f in Settings.__dataclass_fields__.values()}
        filtered = {k: v for k, v in raw.items() if k in known}
        return Settings(**filtered)
    return Settings()


def save_settings(settings: Settings) -> None:
    CONFIG_PATH.write_text(json.dumps(settings.to_dict(), indent=4) + "\n")


POSITIVE_INT_KEYS = (
    "max_attempts",
    "initial_delay_ms",
    "quiz_timeout_ms",
    "exam_timeout_ms",
    "quiz_max_tokens",
    "exam_max_tokens",
    "max_questions",
)


def check_settings(settings: Settings) -> None:
    """Raise ValueError naming the first setting with an unusable value."""
    for key in POSITIVE_INT_KEYS:
        value = getattr(settings, key)
        if isinstance(value, bool) or not isinstance(value, int) or value < 1:
            raise ValueError(f"{key} must be a positive integer (got {value!r})")

    t = settings.temperature
    if isinstance(t, bool) or not isinstance(t, (int, float)) or not 0 <= t <= 2:
        raise ValueError(f"temperature must be a number between 0 and 2 (got {t!r})")

    for key, default in DEFAULTS.items():
        if isinstance(default, str) and not isinstance(getattr(settings, key), str):
            raise ValueError(f"{key} must be a string (got {getattr(settings, key)!r})")
