"""Parse module markdown files into ContentModule objects.

Layout:
  <!-- id: networking-basics -->      (optional; defaults to the file stem)
  # Module Title
  Description paragraph(s).
  ## Section Title
  Section body...

Sections are numbered in file order starting at 1.
"""
from __future__ import annotations

import re
from pathlib import Path

from quizgen.models import ContentModule, Section


def parse_module_file(path: Path) -> ContentModule | None:
    return parse_module_text(path.read_text(), default_id=path.stem)


def parse_module_text(text: str, default_id: str) -> ContentModule | None:
    module_id = default_id
    title = ""
    description_lines: list[str] = []
    sections: list[Section] = []
    body_lines: list[str] = []

    def close_section() -> None:
        if sections:
            sections[-1].text = "\n".join(body_lines).strip()
        body_lines.clear()

    for line in text.splitlines():
        stripped = line.strip()

        m = re.match(r"^<!--\s*id:\s*(\S+)\s*-->$", stripped)
        if m:
            module_id = m.group(1)
            continue

        if stripped.startswith("## "):
            close_section()
            sections.append(Section(
                title=stripped[3:].strip(),
                text="",
                order=len(sections) + 1,
            ))
            continue

        if stripped.startswith("# ") and not title and not sections:
            title = stripped[2:].strip()
            continue

        if sections:
            body_lines.append(line)
        elif title:
            description_lines.append(stripped)

    close_section()

    if not title:
        return None

    description = " ".join(d for d in description_lines if d)
    return ContentModule(id=module_id, title=title, description=description, sections=sections)
