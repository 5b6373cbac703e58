"""Parse free-form LLM output into Question objects.

Expected layout (but never guaranteed):

  Question: What does HTTP stand for?
  a) HyperText Transfer Protocol
  b) ...
  Correct answer: a
  Explanation: ...

Headers vary ("Q1:", "Question 2.", "3)"), explanations run over several
lines, and answer phrasing drifts ("The correct answer is B)").  Lines are
classified in priority order and gated on the current stage, so explanation
prose that mentions "answer" or "a)" stays in the explanation.  Incomplete
questions are dropped, never emitted.
"""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field, replace
from enum import Enum

from quizgen.models import Answer, Question

_log = logging.getLogger("quizgen.parser")

NEW_QUESTION_RE = re.compile(
    r"^(?:question|q)\s*(?:\d+\s*[:.)\-]?|[:.)])\s*(.*)$", re.IGNORECASE
)
NUMBERED_RE = re.compile(r"^\d+[:.)]\s+(.*)$")
EXPLANATION_RE = re.compile(r"^(?:explanation|rationale|reason)\b[:\s]*(.*)$", re.IGNORECASE)
CORRECT_RE = re.compile(r"^(?:correct\s+answer|answer)\b[:\s=-]*(.+)$", re.IGNORECASE)
OPTION_RE = re.compile(r"^([a-d])[:.)]\s+(.*)$", re.IGNORECASE)

BOOLEAN_RE = re.compile(r"^(true|false)\b", re.IGNORECASE)
MARKED_LETTER_RE = re.compile(
    r"(?:\b(?:option|choice|answer)\s*['\"(]?([a-d])\b"
    r"|\(([a-d])\)"
    r"|\b([a-d])[).])",
    re.IGNORECASE,
)
BARE_LETTER_RE = re.compile(r"\b([A-D])\b")

LEADING_EMPHASIS_RE = re.compile(r"^(\*\*|__)(.+?)\1(.*)$")
TRAILING_BOLD_RE = re.compile(r"^(.*?[:\-]\s*)\*\*(.+?)\*\*$")


class Stage(Enum):
    OPTIONS = "options"
    ANSWER = "answer"
    EXPLANATION = "explanation"


@dataclass
class ParseState:
    stage: Stage = Stage.OPTIONS
    current: Question | None = None
    questions: list[Question] = field(default_factory=list)


def parse_questions(text: str) -> list[Question]:
    if not isinstance(text, str) or not text.strip():
        _log.warning("AI response text is empty or invalid; no questions parsed")
        return []

    state = ParseState()
    for line in text.strip().splitlines():
        line = _clean_line(line)
        if line:
            state = _step(state, line)
    state = _flush(state)

    _log.info("Parsed %d questions from AI response", len(state.questions))
    return state.questions


def _clean_line(line: str) -> str:
    """Drop markdown emphasis the models wrap around labels and answers.

    Only a leading label ("**Question 1:**", "__Explanation__:"), a fully
    wrapped line, or a bold value after a label is unwrapped. Emphasis
    characters inside the text, as in ``__init__``, are left alone.
    """
    line = line.strip().lstrip("#").strip()

    m = LEADING_EMPHASIS_RE.match(line)
    if m:
        inner, rest = m.group(2), m.group(3)
        if inner.endswith((":", ".", ")")) or not rest.strip() or rest.lstrip()[0] in ":.)-":
            line = inner + rest

    m = TRAILING_BOLD_RE.match(line)
    if m:
        line = m.group(1) + m.group(2)
    return line.strip()


def _flush(state: ParseState) -> ParseState:
    """Emit the in-progress question if it passes the acceptance rule."""
    q = state.current
    if q is None or not q.is_complete():
        if q is not None:
            _log.debug("Dropping incomplete question: %.80r", q.text)
        return replace(state, current=None)
    explanation = q.explanation or f"The correct answer is {q.correct_answer.upper()}."
    accepted = replace(q, id=len(state.questions), explanation=explanation)
    return replace(state, current=None, questions=[*state.questions, accepted])


def _step(state: ParseState, line: str) -> ParseState:
    m = NEW_QUESTION_RE.match(line) or NUMBERED_RE.match(line)
    if m:
        state = _flush(state)
        return replace(
            state,
            stage=Stage.OPTIONS,
            current=Question(id=len(state.questions), text=m.group(1).strip()),
        )

    q = state.current
    if q is None:
        return state  # preamble before the first question

    m = EXPLANATION_RE.match(line)
    if state.stage is Stage.EXPLANATION or m:
        if m and not q.explanation:
            explanation = m.group(1).strip()
        elif q.explanation:
            explanation = f"{q.explanation} {line}"
        else:
            explanation = line
        return replace(state, stage=Stage.EXPLANATION, current=replace(q, explanation=explanation))

    m = CORRECT_RE.match(line)
    if m:
        return replace(state, stage=Stage.EXPLANATION, current=_apply_correct_answer(q, m.group(1).strip()))

    m = OPTION_RE.match(line)
    if m and state.stage not in (Stage.EXPLANATION, Stage.ANSWER):
        letter = m.group(1).lower()
        option_text = m.group(2).strip()
        if option_text and all(a.letter != letter for a in q.answer_options):
            q = replace(q, answer_options=[*q.answer_options, Answer(letter, option_text)])
        return replace(state, stage=Stage.OPTIONS, current=q)

    return state


def _apply_correct_answer(q: Question, raw: str) -> Question:
    if re.fullmatch(r"[a-d]", raw, re.IGNORECASE):
        return replace(q, correct_answer=raw.lower())
    if re.match(r"^[a-d][).]", raw, re.IGNORECASE):
        return replace(q, correct_answer=raw[0].lower())

    m = BOOLEAN_RE.match(raw)
    if m:
        value = m.group(1).lower()
        options = q.answer_options or [Answer("true", "True"), Answer("false", "False")]
        return replace(q, correct_answer=value, answer_options=options)

    letter = _embedded_letter(raw)
    if letter:
        return replace(q, correct_answer=letter)

    _log.warning("Could not parse correct answer format: %r for question %d", raw, q.id)
    return q


def _embedded_letter(raw: str) -> str | None:
    """Find an option letter inside prose like "The correct answer is B)"."""
    m = MARKED_LETTER_RE.search(raw)
    if m:
        return next(g for g in m.groups() if g).lower()
    # Lower-case "a" is far more often the article than an option
    m = BARE_LETTER_RE.search(raw)
    return m.group(1).lower() if m else None
