from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


@dataclass
class Answer:
    letter: str  # a-d, or true/false for boolean questions
    text: str

    def to_dict(self) -> dict:
        return {"letter": self.letter, "answer": self.text}


@dataclass
class Question:
    id: int
    text: str
    answer_options: list[Answer] = field(default_factory=list)
    correct_answer: str = ""
    explanation: str = ""

    def is_complete(self) -> bool:
        return bool(self.text) and bool(self.answer_options) and bool(self.correct_answer)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "question": self.text,
            "answers": [a.to_dict() for a in self.answer_options],
            "correctAnswer": self.correct_answer,
            "explanation": self.explanation,
        }


class SourceTier(str, Enum):
    DIRECT = "direct"
    ASSOCIATED = "associated"
    FALLBACK_ALL = "fallback_all"
    PLACEHOLDER = "placeholder"


@dataclass
class GenerationContext:
    source_tier: SourceTier
    text: str
    title: str = ""


@dataclass
class Section:
    title: str
    text: str
    order: int = 0


@dataclass
class ContentModule:
    id: str
    title: str
    description: str = ""
    sections: list[Section] = field(default_factory=list)

    def ordered_sections(self) -> list[Section]:
        return sorted(self.sections, key=lambda s: s.order)


class AssessmentKind(str, Enum):
    MODULE = "module"  # quiz over a single module
    EXAM = "exam"


@dataclass
class AssessmentRef:
    kind: AssessmentKind
    id: str


@dataclass
class AssessmentDefinition:
    id: str
    title: str
    description: str = ""
    content: str = ""
    associated_module_ids: list[str] = field(default_factory=list)


@dataclass
class GenerationRequest:
    ref: AssessmentRef
    number_of_questions: int = 5
    question_types: list[str] = field(
        default_factory=lambda: ["multiple choice", "true or false"]
    )


@dataclass
class GenerationResult:
    questions: list[Question]
    source_tier: SourceTier

    def to_dict(self) -> dict:
        return {
            "questions": [q.to_dict() for q in self.questions],
            "sourceTier": self.source_tier.value,
        }
