"""Assemble the source text a generation prompt is built from.

Content is looked up in tiers, most specific first, and the first tier that
yields any text wins:

  DIRECT        the assessment's own content/description
  ASSOCIATED    the modules the exam lists, with their sections
  FALLBACK_ALL  every module in the store
  PLACEHOLDER   a fixed generic sentence

A tier that fails to read is logged and skipped.  Only an unusable store
(:class:`ContentUnavailableError`) propagates.
"""
from __future__ import annotations

import logging
import re
from collections.abc import Awaitable, Callable

from quizgen.errors import ContentUnavailableError
from quizgen.models import (
    AssessmentDefinition,
    AssessmentKind,
    AssessmentRef,
    ContentModule,
    GenerationContext,
    SourceTier,
)
from quizgen.store import ContentStore

_log = logging.getLogger("quizgen.context")

PLACEHOLDER_TEXT = "General knowledge related to the expected exam topic."

Tier = Callable[[], Awaitable[str]]


def normalize_whitespace(text: str) -> str:
    return re.sub(r"\s+", " ", text).strip()


async def load_definition(store: ContentStore, ref: AssessmentRef) -> AssessmentDefinition | None:
    """Resolve *ref* to a definition; a module acts as its own definition."""
    if ref.kind is AssessmentKind.EXAM:
        return await store.get_assessment(ref.id)

    module = await store.get_module(ref.id)
    if module is None:
        return None
    body = " ".join(s.text for s in module.ordered_sections() if s.text)
    return AssessmentDefinition(
        id=module.id,
        title=module.title,
        description=module.description,
        content=body,
    )


async def build_context(store: ContentStore, ref: AssessmentRef) -> GenerationContext:
    try:
        definition = await load_definition(store, ref)
    except ContentUnavailableError:
        raise
    except Exception as e:
        _log.warning("Could not read %s %s: %s", ref.kind.value, ref.id, e)
        definition = None
    if definition is None:
        _log.warning("%s %s not found when fetching content", ref.kind.value.title(), ref.id)

    async def direct() -> str:
        if definition is None:
            return ""
        return f"{definition.description} {definition.content}"

    async def associated() -> str:
        if definition is None or not definition.associated_module_ids:
            return ""
        _log.info("Fetching content from associated modules: %s",
                  ", ".join(definition.associated_module_ids))
        modules = []
        for module_id in definition.associated_module_ids:
            module = await store.get_module(module_id)
            if module is None:
                _log.warning("Associated module %s not found", module_id)
                continue
            modules.append(module)
        return _join_modules(modules)

    async def fallback_all() -> str:
        _log.warning("No specific content for %s %s; falling back to ALL module content",
                     ref.kind.value, ref.id)
        return _join_modules(await store.list_modules())

    tiers: list[tuple[SourceTier, Tier]] = [
        (SourceTier.DIRECT, direct),
        (SourceTier.ASSOCIATED, associated),
        (SourceTier.FALLBACK_ALL, fallback_all),
    ]

    title = definition.title if definition else ""
    for tier, fetch in tiers:
        try:
            text = normalize_whitespace(await fetch())
        except ContentUnavailableError:
            raise
        except Exception as e:
            _log.warning("Content tier %s failed: %s", tier.value, e)
            continue
        if text:
            _log.info("Context for %s %s from tier %s: %d characters",
                      ref.kind.value, ref.id, tier.value, len(text))
            return GenerationContext(source_tier=tier, text=text, title=title)

    _log.warning("No content found for %s %s; using default placeholder", ref.kind.value, ref.id)
    return GenerationContext(source_tier=SourceTier.PLACEHOLDER, text=PLACEHOLDER_TEXT, title=title)


def _join_modules(modules: list[ContentModule]) -> str:
    """Every module's title and description first, then all section bodies."""
    headers = [f"{m.title} {m.description}" for m in modules]
    bodies = [s.text for m in modules for s in m.ordered_sections()]
    return " ".join(headers + bodies)
