"""Load module markdown and exam JSON from the content directory into the DB."""
from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from quizgen.parsers.exam_parser import parse_exam_file
from quizgen.parsers.module_parser import parse_module_file

if TYPE_CHECKING:
    from quizgen.config import Settings
    from quizgen.db import Database

log = logging.getLogger("quizgen.import")


def import_content(db: Database, settings: Settings, only_changed: bool = False) -> dict:
    """Import every content file, or only those whose mtime changed.

    exams.json is the full list of exams, so each import replaces the stored
    set. Content whose file has been removed is deleted.

    Returns counts of imported modules and exams.
    """
    totals = {"modules": 0, "exams": 0}

    module_files = settings.module_files()
    _remove_deleted(db, settings, {p.name for p in module_files})

    files = list(module_files)
    exam_file = settings.exam_file()
    if exam_file.exists():
        files.append(exam_file)

    for path in files:
        current_mtime = path.stat().st_mtime_ns
        if only_changed and db.get_file_mtime(str(path)) == current_mtime:
            continue
        log.info("Importing %s", path.name)
        if path.suffix == ".json":
            exams = parse_exam_file(path)
            removed = db.delete_exams()
            totals["exams"] += db.import_exams(exams)
            log.info("  %d exams imported (%d replaced)", len(exams), removed)
        else:
            db.delete_modules_by_source(path.name)
            module = parse_module_file(path)
            if module is None:
                log.warning("  No '# Title' heading in %s, skipped", path.name)
            else:
                totals["modules"] += db.import_modules([module], source_file=path.name)
                log.info("  Module '%s' with %d sections", module.title, len(module.sections))
        db.set_file_mtime(str(path), current_mtime)

    return totals


def _remove_deleted(db: Database, settings: Settings, present: set[str]) -> None:
    for source in sorted(db.get_module_sources() - present):
        count = db.delete_modules_by_source(source)
        db.delete_file_mtime(str(settings.content_full_path / source))
        log.info("Removed %d module(s) from deleted file %s", count, source)

    exam_file = settings.exam_file()
    if not exam_file.exists() and db.get_file_mtime(str(exam_file)) is not None:
        count = db.delete_exams()
        db.delete_file_mtime(str(exam_file))
        log.info("Removed %d exam(s): %s no longer exists", count, exam_file.name)
