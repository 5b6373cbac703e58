"""CLI entry point for quizgen.

Usage:
  python -m quizgen serve [--port PORT] [--host HOST] [--no-auto-import]
  python -m quizgen stop
  python -m quizgen restart [--port PORT]
  python -m quizgen status
  python -m quizgen import
  python -m quizgen generate --module ID | --exam ID [--count N]
  python -m quizgen stats
"""
from __future__ import annotations

import asyncio
import os
import signal
import sys
from pathlib import Path

PID_FILE = Path(__file__).resolve().parent.parent / ".server.pid"


def main():
    args = sys.argv[1:]
    command = args[0] if args else "serve"

    if command == "serve":
        _serve(args[1:])
    elif command == "stop":
        _stop()
    elif command == "restart":
        _restart(args[1:])
    elif command == "status":
        _status()
    elif command == "import":
        _import_content()
    elif command == "generate":
        _generate(args[1:])
    elif command == "stats":
        _stats()
    else:
        print(f"Unknown command: {command}")
        print("Commands: serve, stop, restart, status, import, generate, stats")
        sys.exit(1)


def _parse_flag(args: list[str], name: str, default: str) -> str:
    for i, a in enumerate(args):
        if a == name and i + 1 < len(args):
            return args[i + 1]
    return default


def _read_pid() -> int | None:
    """Read PID from file, return None if stale or missing."""
    if not PID_FILE.exists():
        return None
    try:
        pid = int(PID_FILE.read_text().strip())
        # Check if process is actually running
        os.kill(pid, 0)
        return pid
    except (ValueError, ProcessLookupError, PermissionError):
        PID_FILE.unlink(missing_ok=True)
        return None


def _write_pid() -> None:
    PID_FILE.write_text(str(os.getpid()))


def _remove_pid() -> None:
    PID_FILE.unlink(missing_ok=True)


def _stop() -> bool:
    """Stop a running server. Returns True if a server was stopped."""
    pid = _read_pid()
    if pid is None:
        print("Server is not running.")
        return False
    try:
        os.kill(pid, signal.SIGTERM)
        print(f"Stopped server (PID {pid}).")
        PID_FILE.unlink(missing_ok=True)
        return True
    except ProcessLookupError:
        print("Server was not running (stale PID file removed).")
        PID_FILE.unlink(missing_ok=True)
        return False


def _status():
    pid = _read_pid()
    if pid is None:
        print("Server is not running.")
    else:
        print(f"Server is running (PID {pid}).")


def _restart(args: list[str]):
    import time
    _stop()
    time.sleep(1)
    _serve(args)


def _serve(args: list[str]):
    import uvicorn

    existing = _read_pid()
    if existing is not None:
        print(f"Server already running (PID {existing}). Use 'restart' or 'stop' first.")
        sys.exit(1)

    if "--no-auto-import" in args:
        os.environ["QUIZGEN_NO_AUTO_IMPORT"] = "1"

    port = int(_parse_flag(args, "--port", "8765"))
    host = _parse_flag(args, "--host", "127.0.0.1")
    _write_pid()

    if host == "0.0.0.0":
        import socket
        local_ip = socket.gethostbyname(socket.gethostname())
        print(f"Starting Quizgen on http://{local_ip}:{port}")
    else:
        print(f"Starting Quizgen on http://{host}:{port}")
    print("Press Ctrl+C to stop\n")
    try:
        uvicorn.run(
            "quizgen.app:app",
            host=host,
            port=port,
            reload=False,
            timeout_graceful_shutdown=5,
        )
    finally:
        _remove_pid()
        os.environ.pop("QUIZGEN_NO_AUTO_IMPORT", None)


def _import_content():
    from quizgen.config import load_settings
    from quizgen.db import Database
    from quizgen.importer import import_content

    settings = load_settings()
    db = Database(settings.db_full_path)

    print(f"Importing content from {settings.content_full_path}")
    totals = import_content(db, settings)
    print(f"  {totals['modules']} modules, {totals['exams']} exams imported")

    stats = db.get_stats()
    print(f"\nTotal in DB: {stats['modules']} modules, {stats['exams']} exams")
    db.close()


def _generate(args: list[str]):
    count = int(_parse_flag(args, "--count", "0")) or None
    module_id = _parse_flag(args, "--module", "")
    exam_id = _parse_flag(args, "--exam", "")
    if bool(module_id) == bool(exam_id):
        print("Usage: generate --module ID | --exam ID [--count N]")
        sys.exit(1)

    from quizgen.config import load_settings
    from quizgen.db import Database
    from quizgen.errors import AppError
    from quizgen.models import AssessmentKind, AssessmentRef, GenerationRequest
    from quizgen.providers.base import create_llm
    from quizgen.question_generator import generate_assessment

    settings = load_settings()
    db = Database(settings.db_full_path)

    if module_id:
        ref = AssessmentRef(kind=AssessmentKind.MODULE, id=module_id)
        request = GenerationRequest(ref=ref, number_of_questions=count or 5)
    else:
        ref = AssessmentRef(kind=AssessmentKind.EXAM, id=exam_id)
        request = GenerationRequest(ref=ref, number_of_questions=count or 25)

    try:
        llm = create_llm(settings)
    except ValueError as e:
        print(e)
        db.close()
        sys.exit(1)

    print(f"Generating {request.number_of_questions} questions for {ref.kind.value} "
          f"'{ref.id}' using {llm.name()}...")
    try:
        result = asyncio.run(generate_assessment(llm, db, request, settings))
    except AppError as e:
        print(f"Failed ({e.code}): {e.message}")
        db.close()
        sys.exit(1)

    print(f"Context source: {result.source_tier.value}\n")
    for q in result.questions:
        print(f"{q.id + 1}. {q.text}")
        for a in q.answer_options:
            print(f"   {a.letter}) {a.text}")
        print(f"   Correct answer: {q.correct_answer}")
        print(f"   Explanation: {q.explanation}\n")
    print(f"Generated {len(result.questions)} questions")
    db.close()


def _stats():
    from quizgen.config import load_settings
    from quizgen.db import Database

    settings = load_settings()
    db = Database(settings.db_full_path)
    stats = db.get_stats()

    print("Quizgen Stats")
    print("=" * 40)
    print(f"Modules:            {stats['modules']}")
    print(f"Sections:           {stats['sections']}")
    print(f"Exams:              {stats['exams']}")
    print(f"LLM provider:       {settings.llm_provider} ({settings.llm_model})")
    db.close()


if __name__ == "__main__":
    main()
