"""Tests for importing the content directory."""
from __future__ import annotations

import json
import os

import pytest

from quizgen.config import Settings
from quizgen.importer import import_content


@pytest.fixture
def content_settings(tmp_path, module_md_content):
    content = tmp_path / "data"
    content.mkdir()
    (content / "networking.md").write_text(module_md_content)
    (content / "notes.md").write_text("No title here.\n")
    (content / "exams.json").write_text(json.dumps([
        {"id": "net-cert", "title": "Network Associate", "associatedModules": ["networking"]},
    ]))
    # content_dir is resolved relative to project_root; an absolute path overrides it
    return Settings(content_dir=str(content))


class TestImportContent:
    def test_imports_everything(self, tmp_db, content_settings):
        totals = import_content(tmp_db, content_settings)
        assert totals == {"modules": 1, "exams": 1}
        assert tmp_db.get_module_count() == 1
        assert tmp_db.get_exam_count() == 1

    def test_only_changed_skips_unchanged(self, tmp_db, content_settings):
        import_content(tmp_db, content_settings)
        totals = import_content(tmp_db, content_settings, only_changed=True)
        assert totals == {"modules": 0, "exams": 0}

    def test_only_changed_reimports_modified(self, tmp_db, content_settings):
        import_content(tmp_db, content_settings)
        md = content_settings.content_full_path / "networking.md"
        md.write_text("<!-- id: networking -->\n# Networking v2\n\n## Only\nBody\n")
        stat = md.stat()
        os.utime(md, ns=(stat.st_atime_ns, stat.st_mtime_ns + 1_000_000))

        totals = import_content(tmp_db, content_settings, only_changed=True)
        assert totals == {"modules": 1, "exams": 0}
        assert tmp_db.get_stats()["sections"] == 1

    def test_reimport_drops_removed_exams(self, tmp_db, content_settings):
        exam_file = content_settings.exam_file()
        exam_file.write_text(json.dumps([{"id": "a", "title": "A"}, {"id": "b", "title": "B"}]))
        import_content(tmp_db, content_settings)

        exam_file.write_text(json.dumps([{"id": "a", "title": "A"}]))
        import_content(tmp_db, content_settings)

        assert [e["id"] for e in tmp_db.get_exam_summaries()] == ["a"]

    @pytest.mark.asyncio
    async def test_removed_exam_no_longer_served(self, tmp_db, content_settings):
        import_content(tmp_db, content_settings)
        content_settings.exam_file().write_text(json.dumps([{"id": "other", "title": "Other"}]))
        import_content(tmp_db, content_settings)

        assert await tmp_db.get_assessment("net-cert") is None
        assert await tmp_db.get_assessment("other") is not None

    def test_deleted_exam_file_clears_exams(self, tmp_db, content_settings):
        import_content(tmp_db, content_settings, only_changed=True)
        content_settings.exam_file().unlink()
        import_content(tmp_db, content_settings, only_changed=True)
        assert tmp_db.get_exam_count() == 0

    def test_deleted_module_file_clears_module(self, tmp_db, content_settings):
        import_content(tmp_db, content_settings)
        (content_settings.content_full_path / "networking.md").unlink()
        import_content(tmp_db, content_settings, only_changed=True)
        assert tmp_db.get_module_count() == 0
