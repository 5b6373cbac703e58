"""Orchestrate context lookup, LLM generation and parsing for quizzes and exams."""
from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from quizgen.config import Settings, check_settings
from quizgen.context import build_context
from quizgen.errors import (
    AppError,
    GenerationTimeoutError,
    ParseEmptyError,
    PreconditionError,
    RateLimitedError,
    ServiceUnavailableError,
    UpstreamError,
)
from quizgen.models import AssessmentKind, GenerationRequest, GenerationResult
from quizgen.parsers.response_parser import parse_questions
from quizgen.prompts import build_exam_prompt, build_quiz_prompt
from quizgen.retry import execute_with_retry, is_rate_limited, is_retryable, is_timeout

if TYPE_CHECKING:
    from quizgen.providers.base import LLMProvider
    from quizgen.store import ContentStore

_log = logging.getLogger("quizgen.qgen")

QUESTION_TYPES = ("multiple choice", "true or false")


def validate_request(request: GenerationRequest, max_questions: int) -> None:
    n = request.number_of_questions
    if isinstance(n, bool) or not isinstance(n, int):
        raise PreconditionError(f"numberOfQuestions must be an integer (got {n!r})")
    if n < 1 or n > max_questions:
        raise PreconditionError(f"numberOfQuestions must be between 1 and {max_questions} (got {n})")

    if not isinstance(request.question_types, list) or not request.question_types:
        raise PreconditionError("questionTypes must list at least one question type")
    unknown = [t for t in request.question_types if str(t).strip().lower() not in QUESTION_TYPES]
    if unknown:
        allowed = ", ".join(QUESTION_TYPES)
        raise PreconditionError(f"Unsupported question types: {unknown} (allowed: {allowed})")


def upstream_failure(exc: Exception) -> AppError:
    """Map an error from the generation call to the outcome the caller sees."""
    if not is_retryable(exc):
        return UpstreamError(f"Generation service error: {exc}")
    if is_rate_limited(exc):
        return RateLimitedError(
            "Rate limit exceeded. Please try again later or reduce the number of requests"
        )
    if is_timeout(exc):
        return GenerationTimeoutError("Request timed out")
    return ServiceUnavailableError(f"Generation service unavailable: {exc}")


async def generate_assessment(
    llm: LLMProvider,
    store: ContentStore,
    request: GenerationRequest,
    settings: Settings | None = None,
) -> GenerationResult:
    """Generate questions for a module quiz or an exam.

    Raises a :class:`~quizgen.errors.AppError` subclass for every failure:
    bad input, unreadable content store, upstream errors (retried first when
    transient), and responses that contain no parseable question.
    """
    settings = settings or Settings()
    try:
        check_settings(settings)
    except ValueError as e:
        raise PreconditionError(f"Invalid generation settings: {e}") from e
    validate_request(request, settings.max_questions)
    question_types = [t.strip().lower() for t in request.question_types]

    context = await build_context(store, request.ref)

    if request.ref.kind is AssessmentKind.EXAM:
        prompt = build_exam_prompt(
            context.title, context.text, request.number_of_questions, question_types,
        )
        timeout_ms = settings.exam_timeout_ms
        max_tokens = settings.exam_max_tokens
    else:
        prompt = build_quiz_prompt(context.text, request.number_of_questions, question_types)
        timeout_ms = settings.quiz_timeout_ms
        max_tokens = settings.quiz_max_tokens

    _log.info("Generating %d questions for %s %s with %s (context: %s)",
              request.number_of_questions, request.ref.kind.value, request.ref.id,
              llm.name(), context.source_tier.value)

    try:
        raw = await execute_with_retry(
            lambda: llm.generate(prompt, temperature=settings.temperature, max_tokens=max_tokens),
            max_attempts=settings.max_attempts,
            timeout_ms=timeout_ms,
            initial_delay_ms=settings.initial_delay_ms,
        )
    except Exception as e:
        _log.warning("Generation failed for %s %s: %s", request.ref.kind.value, request.ref.id, e)
        raise upstream_failure(e) from e

    questions = parse_questions(raw)
    if not questions:
        _log.warning("No parseable questions in response (%d chars)", len(raw or ""))
        _log.debug("  Raw response: %.300s", raw)
        raise ParseEmptyError("The generated response contained no parseable questions")

    if len(questions) != request.number_of_questions:
        _log.info("  Asked for %d questions, parsed %d",
                  request.number_of_questions, len(questions))
    return GenerationResult(questions=questions, source_tier=context.source_tier)
