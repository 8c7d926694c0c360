"""
ACT Prep Scoring & Analytics - FastAPI application entry point.

- structured JSON logging, set up before anything else
- X-Request-ID middleware with request latency logging
- routes: passage ingestion, attempts, session scores, user analytics
- health check

Layout:
- routes/: API endpoint handlers
- models/: SQLAlchemy ORM models (storage shape)
- schemas/: immutable records exchanged with the services
- services/: scoring, analytics, submission and history loading
"""

import time
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from act_prep.logging_config import (
    setup_logging, get_logger, log_with_context,
    request_id_var, generate_request_id
)
from act_prep.routes import ingest, attempts, reports
from act_prep.database import DATABASE_URL, create_tables

# Registers the ORM tables on Base.metadata
from act_prep import models  # noqa: F401

setup_logging()
logger = get_logger("http")

if DATABASE_URL.startswith("sqlite"):
    logger.info("Using SQLite, creating tables directly")
    create_tables()

app = FastAPI(
    title="ACT Prep Scoring & Analytics",
    description=(
        "Scores ACT practice passages into scaled scores, percentiles and "
        "composites, and builds performance analytics from a student's "
        "attempt history."
    ),
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc"
)

# The student/admin web front-end runs on a separate origin
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["X-Request-ID"]
)


def _completion_level(status_code: int) -> str:
    if status_code >= 500:
        return "ERROR"
    if status_code >= 400:
        return "WARNING"
    return "INFO"


@app.middleware("http")
async def request_id_middleware(request: Request, call_next):
    """
    Tag every request with an ID, reusing the caller's X-Request-ID when the
    front-end sends one. The ID is stored in request_id_var for the log
    formatter and echoed back in the response header. Completions are logged
    at WARNING for 4xx and ERROR for 5xx responses.
    """
    req_id = request.headers.get("X-Request-ID") or generate_request_id()
    request_id_var.set(req_id)
    start_time = time.time()

    log_with_context(logger, "DEBUG",
        f"{request.method} {request.url.path} received",
        extra_data={
            "client": request.client.host if request.client else "unknown",
            "query": dict(request.query_params)
        })

    response = await call_next(request)
    response.headers["X-Request-ID"] = req_id

    elapsed = round((time.time() - start_time) * 1000, 2)
    log_with_context(logger, _completion_level(response.status_code),
        f"{request.method} {request.url.path} answered {response.status_code}",
        extra_data={"duration_ms": elapsed, "status_code": response.status_code})

    return response


app.include_router(ingest.router, tags=["Ingestion"])
app.include_router(attempts.router, tags=["Attempts"])
app.include_router(reports.router, tags=["Reports"])


@app.get("/health", tags=["Health"])
def health_check():
    return {"status": "healthy", "service": "act-prep-backend", "version": "1.0.0"}


@app.get("/", tags=["Root"])
def root():
    """Service information and endpoint index."""
    return {
        "service": "ACT Prep Scoring & Analytics",
        "version": "1.0.0",
        "docs": "/docs",
        "health": "/health",
        "endpoints": {
            "ingest_passages": "POST /api/ingest/passages",
            "submit_attempt": "POST /api/attempts",
            "attempts_list": "GET /api/attempts",
            "attempt_detail": "GET /api/attempts/{id}",
            "session_scores": "GET /api/sessions/{session_id}/scores",
            "user_analytics": "GET /api/users/{user_id}/analytics"
        }
    }
