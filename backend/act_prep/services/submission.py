"""
Submission Service - grades and stores a passage attempt.

1. correct = answers matching the passage's stored correct answers
2. raw/scaled/percentile from the passage subject's section tables
3. the attempt row is written once with its scoring fields; stored
   attempts are never re-scored
"""

import json
import time
import uuid
from datetime import datetime, timezone
from typing import Dict, Optional

from sqlalchemy.orm import Session

from act_prep.models.attempt import Attempt
from act_prep.models.passage import Passage
from act_prep.schemas.attempts import CatalogPassage
from act_prep.services.history import passage_record
from act_prep.services.scoring import score_attempt_fields
from act_prep.logging_config import get_logger, log_with_context

logger = get_logger("scoring")


def grade_answers(passage: CatalogPassage, answers: Dict[str, str]) -> int:
    """Number of answers matching the passage's stored correct answers."""
    return sum(1 for q in passage.questions if answers.get(q.id) == q.correct_answer)


def submit_attempt(db: Session, passage: Passage, user_id: str, session_id: str,
                   answers: Dict[str, str], time_spent: int,
                   question_times: Optional[Dict[str, float]] = None,
                   reading_time: Optional[float] = None,
                   answering_time: Optional[float] = None,
                   completed_at: Optional[datetime] = None) -> Attempt:
    """
    Grade a passage attempt, attach its ACT scoring fields and persist it.

    Args:
        db: Database session
        passage: The Passage ORM row the answers belong to
        answers: question id -> chosen letter; unanswered questions absent
        time_spent: Seconds spent on the passage

    Returns:
        The committed Attempt row
    """
    start_time = time.time()

    record = passage_record(passage)
    correct = grade_answers(record, answers)
    raw_score, scaled_score, percentile = score_attempt_fields(correct, record.subject)

    attempt = Attempt(
        id=str(uuid.uuid4()),
        user_id=user_id,
        session_id=session_id,
        passage_id=record.id,
        answers=json.dumps(answers),
        score=correct,
        total_questions=len(record.questions),
        time_spent=time_spent,
        completed_at=completed_at or datetime.now(timezone.utc),
        raw_score=raw_score,
        scaled_score=scaled_score,
        percentile=percentile,
        question_times=json.dumps(question_times or {}),
        question_types=json.dumps({q.id: q.question_type for q in record.questions}),
        passage_type=record.passage_type,
        reading_time=reading_time,
        answering_time=answering_time,
    )
    db.add(attempt)
    db.commit()
    db.refresh(attempt)

    duration_ms = (time.time() - start_time) * 1000
    log_with_context(logger, "INFO",
        "Attempt scored: {}/{} correct, scaled {} ({} percentile)".format(
            correct, len(record.questions), scaled_score, percentile),
        context={
            "attempt_id": attempt.id,
            "user_id": user_id,
            "session_id": session_id,
            "passage_id": record.id
        },
        extra_data={
            "duration_ms": round(duration_ms, 2),
            "subject": record.subject,
            "raw_score": raw_score
        })

    return attempt
