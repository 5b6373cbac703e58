from __future__ import annotations

import sqlite3
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from quizgen.errors import ContentUnavailableError
from quizgen.models import AssessmentDefinition, ContentModule, Section
from quizgen.store import ContentStore

SCHEMA = """
CREATE TABLE IF NOT EXISTS modules (
    id TEXT PRIMARY KEY,
    title TEXT NOT NULL,
    description TEXT,
    source_file TEXT
);

CREATE TABLE IF NOT EXISTS sections (
    module_id TEXT REFERENCES modules(id),
    position INTEGER NOT NULL,
    title TEXT,
    content TEXT,
    PRIMARY KEY (module_id, position)
);

CREATE TABLE IF NOT EXISTS exams (
    id TEXT PRIMARY KEY,
    title TEXT NOT NULL,
    description TEXT,
    content TEXT
);

CREATE TABLE IF NOT EXISTS exam_modules (
    exam_id TEXT REFERENCES exams(id),
    position INTEGER NOT NULL,
    module_id TEXT NOT NULL,
    PRIMARY KEY (exam_id, position)
);

CREATE TABLE IF NOT EXISTS file_mtimes (
    file_path TEXT PRIMARY KEY,
    mtime_ns INTEGER NOT NULL
);
"""


@contextmanager
def _reading() -> Iterator[None]:
    """Surface any SQLite failure as an unusable content store."""
    try:
        yield
    except sqlite3.Error as e:
        raise ContentUnavailableError(f"Content store unavailable: {e}") from e


class Database(ContentStore):
    def __init__(self, db_path: Path):
        self.db_path = db_path
        self.conn = sqlite3.connect(str(db_path), check_same_thread=False)
        self.conn.row_factory = sqlite3.Row
        self.conn.execute("PRAGMA journal_mode=WAL")
        self._init_schema()

    def _init_schema(self) -> None:
        self.conn.executescript(SCHEMA)
        self.conn.commit()

    def close(self) -> None:
        self.conn.close()

    # ── Import ────────────────────────────────────────────────────────────

    def delete_modules_by_source(self, source_file: str) -> int:
        """Remove modules (and their sections) imported from *source_file*."""
        ids = [
            row[0]
            for row in self.conn.execute(
                "SELECT id FROM modules WHERE source_file = ?", (source_file,)
            ).fetchall()
        ]
        for mid in ids:
            self.conn.execute("DELETE FROM sections WHERE module_id = ?", (mid,))
        self.conn.execute("DELETE FROM modules WHERE source_file = ?", (source_file,))
        self.conn.commit()
        return len(ids)

    def delete_exams(self) -> int:
        """Remove every exam and its module links."""
        count = self.get_exam_count()
        self.conn.execute("DELETE FROM exam_modules")
        self.conn.execute("DELETE FROM exams")
        self.conn.commit()
        return count

    def get_module_sources(self) -> set[str]:
        return {
            row[0]
            for row in self.conn.execute(
                "SELECT DISTINCT source_file FROM modules WHERE source_file != ''"
            ).fetchall()
        }

    def import_modules(self, modules: list[ContentModule], source_file: str = "") -> int:
        count = 0
        for m in modules:
            self.conn.execute(
                "INSERT OR REPLACE INTO modules (id, title, description, source_file) "
                "VALUES (?, ?, ?, ?)",
                (m.id, m.title, m.description, source_file),
            )
            self.conn.execute("DELETE FROM sections WHERE module_id = ?", (m.id,))
            for s in m.sections:
                self.conn.execute(
                    "INSERT OR REPLACE INTO sections (module_id, position, title, content) "
                    "VALUES (?, ?, ?, ?)",
                    (m.id, s.order, s.title, s.text),
                )
            count += 1
        self.conn.commit()
        return count

    def import_exams(self, exams: list[AssessmentDefinition]) -> int:
        count = 0
        for e in exams:
            self.conn.execute(
                "INSERT OR REPLACE INTO exams (id, title, description, content) "
                "VALUES (?, ?, ?, ?)",
                (e.id, e.title, e.description, e.content),
            )
            self.conn.execute("DELETE FROM exam_modules WHERE exam_id = ?", (e.id,))
            for pos, module_id in enumerate(e.associated_module_ids):
                self.conn.execute(
                    "INSERT INTO exam_modules (exam_id, position, module_id) VALUES (?, ?, ?)",
                    (e.id, pos, module_id),
                )
            count += 1
        self.conn.commit()
        return count

    # ── File mtimes ─────────────────────────────────────────────────────

    def get_file_mtime(self, file_path: str) -> int | None:
        row = self.conn.execute(
            "SELECT mtime_ns FROM file_mtimes WHERE file_path = ?", (file_path,)
        ).fetchone()
        return row[0] if row else None

    def set_file_mtime(self, file_path: str, mtime_ns: int) -> None:
        self.conn.execute(
            "INSERT OR REPLACE INTO file_mtimes (file_path, mtime_ns) VALUES (?, ?)",
            (file_path, mtime_ns),
        )
        self.conn.commit()

    def delete_file_mtime(self, file_path: str) -> None:
        self.conn.execute("DELETE FROM file_mtimes WHERE file_path = ?", (file_path,))
        self.conn.commit()

    # ── Content store ─────────────────────────────────────────────────────

    def _load_module(self, row: sqlite3.Row) -> ContentModule:
        sections = [
            Section(title=s["title"] or "", text=s["content"] or "", order=s["position"])
            for s in self.conn.execute(
                "SELECT position, title, content FROM sections "
                "WHERE module_id = ? ORDER BY position",
                (row["id"],),
            ).fetchall()
        ]
        return ContentModule(
            id=row["id"],
            title=row["title"],
            description=row["description"] or "",
            sections=sections,
        )

    async def get_module(self, module_id: str) -> ContentModule | None:
        with _reading():
            row = self.conn.execute(
                "SELECT * FROM modules WHERE id = ?", (module_id,)
            ).fetchone()
            return self._load_module(row) if row else None

    async def list_modules(self) -> list[ContentModule]:
        with _reading():
            rows = self.conn.execute("SELECT * FROM modules ORDER BY id").fetchall()
            return [self._load_module(r) for r in rows]

    async def get_assessment(self, exam_id: str) -> AssessmentDefinition | None:
        with _reading():
            row = self.conn.execute("SELECT * FROM exams WHERE id = ?", (exam_id,)).fetchone()
            if row is None:
                return None
            module_ids = [
                r[0]
                for r in self.conn.execute(
                    "SELECT module_id FROM exam_modules WHERE exam_id = ? ORDER BY position",
                    (exam_id,),
                ).fetchall()
            ]
            return AssessmentDefinition(
                id=row["id"],
                title=row["title"],
                description=row["description"] or "",
                content=row["content"] or "",
                associated_module_ids=module_ids,
            )

    # ── Listings ──────────────────────────────────────────────────────────

    def get_module_count(self) -> int:
        return self.conn.execute("SELECT COUNT(*) FROM modules").fetchone()[0]

    def get_exam_count(self) -> int:
        return self.conn.execute("SELECT COUNT(*) FROM exams").fetchone()[0]

    def get_module_summaries(self) -> list[dict]:
        rows = self.conn.execute(
            "SELECT m.id, m.title, m.description, COUNT(s.position) AS section_count "
            "FROM modules m LEFT JOIN sections s ON s.module_id = m.id "
            "GROUP BY m.id ORDER BY m.id"
        ).fetchall()
        return [dict(r) for r in rows]

    def get_exam_summaries(self) -> list[dict]:
        rows = self.conn.execute(
            "SELECT e.id, e.title, e.description, COUNT(em.module_id) AS module_count "
            "FROM exams e LEFT JOIN exam_modules em ON em.exam_id = e.id "
            "GROUP BY e.id ORDER BY e.id"
        ).fetchall()
        return [dict(r) for r in rows]

    def get_stats(self) -> dict:
        section_count = self.conn.execute("SELECT COUNT(*) FROM sections").fetchone()[0]
        return {
            "modules": self.get_module_count(),
            "sections": section_count,
            "exams": self.get_exam_count(),
        }
