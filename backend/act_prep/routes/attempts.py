"""
Attempts API routes - submitting and reading passage attempts.

- POST /api/attempts grades a submission and stores it with its ACT fields
- GET /api/attempts lists attempts for a user and/or session
- GET /api/attempts/{id} returns one attempt
"""

import time
from typing import Dict, Literal, Optional
from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from act_prep.database import get_db
from act_prep.models.attempt import Attempt
from act_prep.models.passage import Passage
from act_prep.schemas.attempts import TestAttempt
from act_prep.services.history import attempt_record
from act_prep.services.submission import submit_attempt
from act_prep.logging_config import get_logger, log_with_context

router = APIRouter()
logger = get_logger("http")


# ── Pydantic schemas ─────────────────────────────────────────

class AttemptSubmission(BaseModel):
    """Answers for one passage, sent when the student submits it."""
    user_id: str
    session_id: str
    passage_id: str
    answers: Dict[str, Literal["A", "B", "C", "D"]] = Field(
        default_factory=dict, description="question id -> choice; unanswered questions omitted")
    time_spent: int = Field(..., ge=0, description="Seconds spent on the passage")
    question_times: Dict[str, float] = Field(default_factory=dict)
    reading_time: Optional[float] = Field(None, ge=0)
    answering_time: Optional[float] = Field(None, ge=0)


@router.post("/api/attempts", response_model=TestAttempt, status_code=201)
def create_attempt(submission: AttemptSubmission, db: Session = Depends(get_db)):
    """Grade a passage submission and store it with raw, scaled and percentile scores."""
    passage = db.get(Passage, submission.passage_id)
    if not passage:
        raise HTTPException(status_code=404, detail="Passage not found")
    if not passage.is_active:
        raise HTTPException(status_code=409, detail="Passage is not active")

    attempt = submit_attempt(
        db, passage,
        user_id=submission.user_id,
        session_id=submission.session_id,
        answers=submission.answers,
        time_spent=submission.time_spent,
        question_times=submission.question_times,
        reading_time=submission.reading_time,
        answering_time=submission.answering_time,
    )
    return attempt_record(attempt)


@router.get("/api/attempts")
def list_attempts(
    user_id: Optional[str] = Query(None, description="Filter by user ID"),
    session_id: Optional[str] = Query(None, description="Filter by session ID"),
    page: int = Query(1, ge=1, description="Page number"),
    per_page: int = Query(20, ge=1, le=100, description="Results per page"),
    db: Session = Depends(get_db)
):
    """List attempts, most recent first, with pagination."""
    start_time = time.time()

    query = db.query(Attempt)
    if user_id:
        query = query.filter(Attempt.user_id == user_id)
    if session_id:
        query = query.filter(Attempt.session_id == session_id)

    total_count = query.count()
    offset = (page - 1) * per_page
    rows = query.order_by(Attempt.completed_at.desc()).offset(offset).limit(per_page).all()

    duration_ms = (time.time() - start_time) * 1000
    log_with_context(logger, "INFO",
        "Listed {} attempts (page {}, total {})".format(len(rows), page, total_count),
        extra_data={"duration_ms": round(duration_ms, 2)})

    return {
        "data": [attempt_record(row).model_dump(mode="json", by_alias=True) for row in rows],
        "pagination": {
            "page": page,
            "per_page": per_page,
            "total": total_count,
            "total_pages": (total_count + per_page - 1) // per_page
        }
    }


@router.get("/api/attempts/{attempt_id}", response_model=TestAttempt)
def get_attempt(attempt_id: str, db: Session = Depends(get_db)):
    attempt = db.get(Attempt, attempt_id)
    if not attempt:
        raise HTTPException(status_code=404, detail="Attempt not found")
    return attempt_record(attempt)
