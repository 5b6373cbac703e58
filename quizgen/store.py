from __future__ import annotations

from abc import ABC, abstractmethod

from quizgen.models import AssessmentDefinition, ContentModule


class ContentStore(ABC):
    """Read-only view of modules and exam definitions.

    Implementations return ``None`` for unknown ids and raise
    :class:`~quizgen.errors.ContentUnavailableError` when the backing store
    itself cannot be read.
    """

    @abstractmethod
    async def get_module(self, module_id: str) -> ContentModule | None:
        ...

    @abstractmethod
    async def get_assessment(self, exam_id: str) -> AssessmentDefinition | None:
        ...

    @abstractmethod
    async def list_modules(self) -> list[ContentModule]:
        ...
