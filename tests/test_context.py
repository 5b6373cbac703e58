"""Tests for tiered context aggregation."""
from __future__ import annotations

import pytest

from quizgen.context import PLACEHOLDER_TEXT, build_context, normalize_whitespace
from quizgen.errors import ContentUnavailableError
from quizgen.models import (
    AssessmentDefinition,
    AssessmentKind,
    AssessmentRef,
    ContentModule,
    Section,
    SourceTier,
)
from quizgen.store import ContentStore

ALL_MODULES_TEXT = (
    "Networking Basics How computers talk to each other. "
    "Security Fundamentals Protecting systems and data. "
    "Every host has an IP address. "
    "Routers forward packets between networks. "
    "Encryption keeps data confidential."
)


def exam(exam_id: str) -> AssessmentRef:
    return AssessmentRef(kind=AssessmentKind.EXAM, id=exam_id)


class FakeStore(ContentStore):
    """In-memory store whose reads can be made to fail per method."""

    def __init__(self, modules=None, exams=None, failing=(), error=RuntimeError("read failed")):
        self.modules = {m.id: m for m in modules or []}
        self.exams = {e.id: e for e in exams or []}
        self.failing = set(failing)
        self.error = error

    def _check(self, method: str) -> None:
        if method in self.failing:
            raise self.error

    async def get_module(self, module_id):
        self._check("get_module")
        return self.modules.get(module_id)

    async def get_assessment(self, exam_id):
        self._check("get_assessment")
        return self.exams.get(exam_id)

    async def list_modules(self):
        self._check("list_modules")
        return list(self.modules.values())


class TestTiers:
    @pytest.mark.asyncio
    async def test_direct(self, populated_db):
        ctx = await build_context(populated_db, exam("sec-cert"))
        assert ctx.source_tier is SourceTier.DIRECT
        assert ctx.text == "Covers threat models and encryption."
        assert ctx.title == "Security Associate"

    @pytest.mark.asyncio
    async def test_associated(self, populated_db):
        ctx = await build_context(populated_db, exam("net-cert"))
        assert ctx.source_tier is SourceTier.ASSOCIATED
        assert ctx.text == (
            "Networking Basics How computers talk to each other. "
            "Every host has an IP address. Routers forward packets between networks."
        )

    @pytest.mark.asyncio
    async def test_fallback_all(self, populated_db):
        ctx = await build_context(populated_db, exam("blank-cert"))
        assert ctx.source_tier is SourceTier.FALLBACK_ALL
        assert ctx.text == ALL_MODULES_TEXT
        assert ctx.title == "Blank Exam"

    @pytest.mark.asyncio
    async def test_unknown_exam_falls_back_to_all(self, populated_db):
        ctx = await build_context(populated_db, exam("does-not-exist"))
        assert ctx.source_tier is SourceTier.FALLBACK_ALL
        assert ctx.text == ALL_MODULES_TEXT
        assert ctx.title == ""

    @pytest.mark.asyncio
    async def test_placeholder_on_empty_store(self, tmp_db):
        ctx = await build_context(tmp_db, exam("anything"))
        assert ctx.source_tier is SourceTier.PLACEHOLDER
        assert ctx.text == PLACEHOLDER_TEXT

    @pytest.mark.asyncio
    async def test_module_ref_uses_module_content(self, populated_db):
        ref = AssessmentRef(kind=AssessmentKind.MODULE, id="networking")
        ctx = await build_context(populated_db, ref)
        assert ctx.source_tier is SourceTier.DIRECT
        assert ctx.text == (
            "How computers talk to each other. "
            "Every host has an IP address. Routers forward packets between networks."
        )
        assert ctx.title == "Networking Basics"

    @pytest.mark.asyncio
    async def test_missing_associated_modules_skipped(self):
        store = FakeStore(
            modules=[
                ContentModule("m1", "One", "First module", [Section("s", "Body one", 1)]),
            ],
            exams=[AssessmentDefinition("e1", "Exam", associated_module_ids=["ghost", "m1"])],
        )
        ctx = await build_context(store, exam("e1"))
        assert ctx.source_tier is SourceTier.ASSOCIATED
        assert ctx.text == "One First module Body one"

    @pytest.mark.asyncio
    async def test_only_missing_associated_modules_falls_through(self):
        store = FakeStore(
            modules=[ContentModule("m1", "One", "First module")],
            exams=[AssessmentDefinition("e1", "Exam", associated_module_ids=["ghost"])],
        )
        ctx = await build_context(store, exam("e1"))
        assert ctx.source_tier is SourceTier.FALLBACK_ALL
        assert ctx.text == "One First module"

    @pytest.mark.asyncio
    async def test_section_order_respected(self):
        module = ContentModule("m1", "T", "", [
            Section("third", "three", 3),
            Section("first", "one", 1),
            Section("second", "two", 2),
        ])
        store = FakeStore(modules=[module], exams=[
            AssessmentDefinition("e1", "Exam", associated_module_ids=["m1"]),
        ])
        ctx = await build_context(store, exam("e1"))
        assert ctx.text == "T one two three"


class TestReadFailures:
    @pytest.mark.asyncio
    async def test_failed_module_reads_fall_through(self):
        store = FakeStore(
            modules=[ContentModule("m1", "One", "First module")],
            exams=[AssessmentDefinition("e1", "Exam", associated_module_ids=["m1"])],
            failing={"get_module"},
        )
        ctx = await build_context(store, exam("e1"))
        assert ctx.source_tier is SourceTier.FALLBACK_ALL
        assert ctx.text == "One First module"

    @pytest.mark.asyncio
    async def test_failed_definition_read_falls_through(self):
        store = FakeStore(
            modules=[ContentModule("m1", "One", "First module")],
            failing={"get_assessment"},
        )
        ctx = await build_context(store, exam("e1"))
        assert ctx.source_tier is SourceTier.FALLBACK_ALL

    @pytest.mark.asyncio
    async def test_every_read_failing_gives_placeholder(self):
        store = FakeStore(failing={"get_module", "get_assessment", "list_modules"})
        ctx = await build_context(store, exam("e1"))
        assert ctx.source_tier is SourceTier.PLACEHOLDER
        assert ctx.text == PLACEHOLDER_TEXT

    @pytest.mark.asyncio
    async def test_unusable_store_propagates(self):
        store = FakeStore(
            failing={"list_modules"},
            error=ContentUnavailableError("connection refused"),
        )
        with pytest.raises(ContentUnavailableError):
            await build_context(store, exam("e1"))

    @pytest.mark.asyncio
    async def test_closed_database_propagates(self, tmp_path):
        from quizgen.db import Database

        db = Database(tmp_path / "closed.db")
        db.close()
        with pytest.raises(ContentUnavailableError):
            await build_context(db, exam("e1"))


class TestNormalizeWhitespace:
    def test_collapses_and_trims(self):
        assert normalize_whitespace("  a \n\t b   c  ") == "a b c"

    def test_empty(self):
        assert normalize_whitespace(" \n ") == ""
