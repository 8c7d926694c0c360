"""
Attempt history retrieval.

Loads stored rows and converts them from the storage shape into the
records the scoring and analytics services consume.
"""

from typing import Iterable, List, Tuple

from sqlalchemy.orm import Session

from act_prep.models.attempt import Attempt
from act_prep.models.passage import Passage
from act_prep.schemas.attempts import CatalogPassage, CatalogQuestion, TestAttempt
from act_prep.logging_config import get_logger, log_with_context

logger = get_logger("db")


def attempt_record(row: Attempt) -> TestAttempt:
    return TestAttempt(
        id=str(row.id),
        user_id=str(row.user_id),
        session_id=str(row.session_id),
        passage_id=str(row.passage_id),
        answers=row.answers_dict,
        score=row.score,
        total_questions=row.total_questions,
        time_spent=row.time_spent or 0,
        completed_at=row.completed_at,
        raw_score=row.raw_score,
        scaled_score=row.scaled_score,
        percentile=row.percentile,
        question_times=row.question_times_dict,
        question_types=row.question_types_dict,
        passage_type=row.passage_type,
        reading_time=row.reading_time,
        answering_time=row.answering_time,
    )


def passage_record(row: Passage) -> CatalogPassage:
    return CatalogPassage(
        id=str(row.id),
        title=row.title,
        subject=row.subject,
        difficulty=row.difficulty,
        passage_type=row.passage_type,
        questions=[
            CatalogQuestion(
                id=str(q["id"]),
                question_number=q.get("question_number") or 0,
                correct_answer=q["correct_answer"],
                question_type=q.get("question_type"),
            )
            for q in row.questions_list
        ],
    )


def load_passages(db: Session, passage_ids: Iterable[str]) -> List[CatalogPassage]:
    ids = set(passage_ids)
    if not ids:
        return []
    rows = db.query(Passage).filter(Passage.id.in_(ids)).all()
    return [passage_record(row) for row in rows]


def _load(db: Session, query, context: dict) -> Tuple[List[TestAttempt], List[CatalogPassage]]:
    rows = query.order_by(Attempt.completed_at.asc()).all()
    attempts = [attempt_record(row) for row in rows]
    passages = load_passages(db, (a.passage_id for a in attempts))
    log_with_context(logger, "DEBUG",
        "Loaded {} attempts across {} passages".format(len(attempts), len(passages)),
        context=context)
    return attempts, passages


def load_user_history(db: Session, user_id: str) -> Tuple[List[TestAttempt], List[CatalogPassage]]:
    """Every attempt by a user, oldest first, with the passages they reference."""
    query = db.query(Attempt).filter(Attempt.user_id == user_id)
    return _load(db, query, {"user_id": user_id})


def load_session_history(db: Session, session_id: str) -> Tuple[List[TestAttempt], List[CatalogPassage]]:
    """Every attempt in one test session, oldest first, with their passages."""
    query = db.query(Attempt).filter(Attempt.session_id == session_id)
    return _load(db, query, {"session_id": session_id})
