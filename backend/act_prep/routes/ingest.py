"""
Ingestion API route - batch upsert of passages into the catalog.

Attempts are graded against the correct answers stored here, so a passage
must be ingested before attempts on it can be submitted.
"""

import json
import time
import uuid
from datetime import datetime, timezone
from typing import Dict, List, Literal, Optional, Tuple
from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from act_prep.database import get_db
from act_prep.models.passage import Passage
from act_prep.logging_config import get_logger, log_with_context

router = APIRouter()
logger = get_logger("http")
db_logger = get_logger("db")


# ── Pydantic schemas ─────────────────────────────────────────

class QuestionPayload(BaseModel):
    """A question as supplied by the content admin."""
    id: str
    question_number: int = Field(..., ge=1)
    text: str = ""
    options: Dict[str, str] = Field(default_factory=dict,
                                    description="Choice letter -> option text")
    correct_answer: Literal["A", "B", "C", "D"]
    explanation: str = ""
    question_type: Optional[str] = Field(None, description="detail, inference, main-idea, ...")


class PassagePayload(BaseModel):
    id: Optional[str] = Field(None, description="Passage id; generated when omitted")
    title: str
    content: str = ""
    subject: Literal["English", "Math", "Reading", "Science"]
    difficulty: Literal["Easy", "Medium", "Hard"] = "Medium"
    passage_type: Optional[str] = None
    questions: List[QuestionPayload] = Field(default_factory=list)
    is_active: bool = True


class PassageIngestionRequest(BaseModel):
    passages: List[PassagePayload]


class PassageIngestionSummary(BaseModel):
    total_received: int
    created: int
    updated: int
    errors: int
    details: list


def upsert_passage(db: Session, payload: PassagePayload) -> Tuple[Passage, bool]:
    """Insert a new passage or overwrite the stored one with the same id."""
    passage = db.get(Passage, payload.id) if payload.id else None
    created = passage is None
    if created:
        passage = Passage(id=payload.id or str(uuid.uuid4()),
                          created_at=datetime.now(timezone.utc))
        db.add(passage)

    passage.title = payload.title
    passage.content = payload.content
    passage.subject = payload.subject
    passage.difficulty = payload.difficulty
    passage.passage_type = payload.passage_type
    passage.questions = json.dumps([q.model_dump() for q in payload.questions])
    passage.is_active = payload.is_active
    db.flush()

    log_with_context(db_logger, "INFO",
        "{} passage: {}".format("Created" if created else "Updated", payload.title),
        context={"passage_id": str(passage.id)},
        extra_data={"questions": len(payload.questions), "subject": payload.subject})
    return passage, created


@router.post("/api/ingest/passages", response_model=PassageIngestionSummary)
def ingest_passages(request: PassageIngestionRequest, db: Session = Depends(get_db)):
    """
    Batch upsert passages.

    Passages with repeated question ids are rejected individually; the rest
    of the batch is committed together.
    """
    start_time = time.time()

    total = len(request.passages)
    created = 0
    updated = 0
    errors = 0
    details = []

    try:
        for payload in request.passages:
            question_ids = [q.id for q in payload.questions]
            if len(set(question_ids)) != len(question_ids):
                errors += 1
                details.append({
                    "passage_id": payload.id,
                    "status": "ERROR",
                    "reason": "Duplicate question ids"
                })
                continue

            passage, is_new = upsert_passage(db, payload)
            if is_new:
                created += 1
            else:
                updated += 1
            details.append({
                "passage_id": str(passage.id),
                "status": "CREATED" if is_new else "UPDATED",
                "questions": len(payload.questions)
            })
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        log_with_context(logger, "ERROR", "Failed to store passage batch: {}".format(str(e)),
                         extra_data={"total_passages": total})
        raise HTTPException(status_code=500, detail="Database commit failed")

    duration_ms = (time.time() - start_time) * 1000
    log_with_context(logger, "INFO",
        "Passage ingestion complete: {} created, {} updated, {} errors".format(
            created, updated, errors),
        extra_data={"duration_ms": round(duration_ms, 2), "total_passages": total})

    return PassageIngestionSummary(
        total_received=total,
        created=created,
        updated=updated,
        errors=errors,
        details=details
    )
