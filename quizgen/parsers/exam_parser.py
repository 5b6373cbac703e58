"""Parse exams.json into AssessmentDefinition objects.

  [{"id": "ccna", "title": "CCNA", "description": "...",
    "content": "...", "associatedModules": ["networking-basics"]}]
"""
from __future__ import annotations

import json
import logging
from pathlib import Path

from quizgen.models import AssessmentDefinition

_log = logging.getLogger("quizgen.import")


def parse_exam_file(path: Path) -> list[AssessmentDefinition]:
    return parse_exam_data(json.loads(path.read_text()))


def parse_exam_data(data: list) -> list[AssessmentDefinition]:
    exams: list[AssessmentDefinition] = []
    for i, raw in enumerate(data):
        if not isinstance(raw, dict) or not raw.get("id") or not raw.get("title"):
            _log.warning("Skipping exam entry %d: id and title are required", i)
            continue
        modules = raw.get("associatedModules") or []
        if not isinstance(modules, list):
            _log.warning("Exam %s: associatedModules is not a list, ignoring", raw["id"])
            modules = []
        exams.append(AssessmentDefinition(
            id=str(raw["id"]),
            title=str(raw["title"]),
            description=str(raw.get("description") or ""),
            content=raw["content"] if isinstance(raw.get("content"), str) else "",
            associated_module_ids=[str(m) for m in modules],
        ))
    return exams
