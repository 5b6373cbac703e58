"""FastAPI application with all routes."""
from __future__ import annotations

import logging
import os
from datetime import datetime, timezone

logging.basicConfig(level=logging.INFO, format="%(name)s | %(message)s")

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse

from quizgen.config import Settings, check_settings, load_settings, save_settings
from quizgen.db import Database
from quizgen.errors import AppError, NotFoundError
from quizgen.importer import import_content
from quizgen.models import AssessmentKind, AssessmentRef, GenerationRequest
from quizgen.providers.base import create_llm
from quizgen.question_generator import generate_assessment

log = logging.getLogger("quizgen.app")

app = FastAPI(title="Quizgen")

# Global state (initialized in startup)
_db: Database | None = None
_settings: Settings | None = None


def get_db() -> Database:
    assert _db is not None
    return _db


def get_settings() -> Settings:
    assert _settings is not None
    return _settings


def _get_llm():
    return create_llm(get_settings())


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    log.warning("%s %s -> %d %s: %s", request.method, request.url.path,
                exc.status_code, exc.code, exc.message)
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.on_event("startup")
async def startup():
    global _db, _settings
    if _db is not None:
        return  # Already initialized (e.g. by tests)
    _settings = load_settings()
    _db = Database(_settings.db_full_path)
    if not os.environ.get("QUIZGEN_NO_AUTO_IMPORT"):
        import_content(_db, _settings, only_changed=True)


@app.on_event("shutdown")
async def shutdown():
    if _db:
        _db.close()


async def _read_body(request: Request) -> dict:
    body = await request.json() if await request.body() else {}
    if not isinstance(body, dict):
        raise HTTPException(400, "Request body must be a JSON object")
    return body


def _generation_request(body: dict, kind: AssessmentKind, ref_id: str, default_count: int) -> GenerationRequest:
    request = GenerationRequest(
        ref=AssessmentRef(kind=kind, id=ref_id),
        number_of_questions=body.get("numberOfQuestions", default_count),
    )
    if "questionTypes" in body:
        request.question_types = body["questionTypes"]
    return request


# ── Generation ────────────────────────────────────────────────────────────

@app.post("/generate-quiz")
async def api_generate_quiz(request: Request):
    body = await _read_body(request)
    module_id = body.get("moduleId")
    if not module_id:
        raise HTTPException(400, "moduleId is required.")

    db = get_db()
    if await db.get_module(module_id) is None:
        raise NotFoundError("Module not found.", code="MODULE_NOT_FOUND")

    result = await generate_assessment(
        _get_llm(), db,
        _generation_request(body, AssessmentKind.MODULE, module_id, default_count=5),
        get_settings(),
    )
    return {
        "quiz": [q.to_dict() for q in result.questions],
        "sourceTier": result.source_tier.value,
    }


@app.post("/generate-exam")
async def api_generate_exam(request: Request):
    body = await _read_body(request)
    exam_id = body.get("examId")
    if not exam_id:
        raise HTTPException(400, "examId is required.")

    db = get_db()
    if await db.get_assessment(exam_id) is None:
        raise NotFoundError("Exam not found", code="EXAM_NOT_FOUND")

    result = await generate_assessment(
        _get_llm(), db,
        _generation_request(body, AssessmentKind.EXAM, exam_id, default_count=25),
        get_settings(),
    )
    return {
        "questions": [q.to_dict() for q in result.questions],
        "sourceTier": result.source_tier.value,
    }


@app.get("/health")
async def health():
    return {"status": "ok", "timestamp": datetime.now(timezone.utc).isoformat()}


# ── Content ───────────────────────────────────────────────────────────────

@app.get("/api/modules")
async def api_modules():
    return get_db().get_module_summaries()


@app.get("/api/exams")
async def api_exams():
    return get_db().get_exam_summaries()


@app.get("/api/stats")
async def api_stats():
    return get_db().get_stats()


@app.post("/api/import")
async def api_import():
    return import_content(get_db(), get_settings())


# ── Settings ──────────────────────────────────────────────────────────────

@app.get("/api/settings")
async def api_get_settings():
    return get_settings().to_dict()


@app.put("/api/settings")
async def api_put_settings(request: Request):
    global _settings
    body = await _read_body(request)
    current = get_settings().to_dict()
    unknown = set(body) - set(current)
    if unknown:
        raise HTTPException(400, f"Unknown settings: {', '.join(sorted(unknown))}")
    current.update(body)
    updated = Settings(**current)
    try:
        check_settings(updated)
    except ValueError as e:
        raise HTTPException(400, str(e)) from e
    _settings = updated
    save_settings(_settings)
    return _settings.to_dict()
