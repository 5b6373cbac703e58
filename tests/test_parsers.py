"""Tests for module markdown and exam JSON parsers."""
from __future__ import annotations

import json

from quizgen.parsers.exam_parser import parse_exam_data, parse_exam_file
from quizgen.parsers.module_parser import parse_module_file, parse_module_text


class TestModuleParser:
    def test_parse_basic(self, tmp_path, module_md_content):
        f = tmp_path / "networking-basics.md"
        f.write_text(module_md_content)
        module = parse_module_file(f)

        assert module is not None
        assert module.id == "networking"
        assert module.title == "Networking Basics"
        assert module.description == "How computers talk to each other."

    def test_sections_in_file_order(self, tmp_path, module_md_content):
        f = tmp_path / "networking-basics.md"
        f.write_text(module_md_content)
        module = parse_module_file(f)

        assert [s.title for s in module.sections] == ["Addressing", "Routing"]
        assert [s.order for s in module.sections] == [1, 2]

    def test_section_body(self, tmp_path, module_md_content):
        f = tmp_path / "networking-basics.md"
        f.write_text(module_md_content)
        module = parse_module_file(f)

        body = module.sections[0].text
        assert "Every host has an IP address." in body
        assert "static or dynamic" in body
        # Next section's content should not leak in
        assert "Routers" not in body

    def test_id_defaults_to_file_stem(self, tmp_path):
        f = tmp_path / "security.md"
        f.write_text("# Security\n\nBasics.\n")
        module = parse_module_file(f)
        assert module.id == "security"
        assert module.sections == []

    def test_no_title(self):
        assert parse_module_text("Just some notes.\n\n## Orphan\nText", "notes") is None

    def test_hash_heading_inside_section_is_body(self):
        module = parse_module_text("# T\n\n## S\n# not a title\nbody", "t")
        assert module.title == "T"
        assert "# not a title" in module.sections[0].text


class TestExamParser:
    def test_parse_file(self, tmp_path):
        f = tmp_path / "exams.json"
        f.write_text(json.dumps([
            {
                "id": "net-cert",
                "title": "Network Associate",
                "description": "Entry level networking",
                "associatedModules": ["networking", "security"],
            },
        ]))
        exams = parse_exam_file(f)
        assert len(exams) == 1
        assert exams[0].title == "Network Associate"
        assert exams[0].associated_module_ids == ["networking", "security"]
        assert exams[0].content == ""

    def test_skips_invalid_entries(self):
        exams = parse_exam_data([
            {"title": "No id"},
            {"id": "x"},
            "not an object",
            {"id": "ok", "title": "Valid"},
        ])
        assert [e.id for e in exams] == ["ok"]

    def test_non_list_modules_ignored(self):
        exams = parse_exam_data([{"id": "e", "title": "E", "associatedModules": "networking"}])
        assert exams[0].associated_module_ids == []

    def test_non_string_content_ignored(self):
        exams = parse_exam_data([{"id": "e", "title": "E", "content": ["a", "b"]}])
        assert exams[0].content == ""
