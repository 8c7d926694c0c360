"""
Report API routes - ACT scores per session and performance analytics per user.

Both reports are recomputed from the stored attempts on every request.
"""

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from act_prep.database import get_db
from act_prep.schemas.analytics import PerformanceAnalytics
from act_prep.schemas.scores import SessionScoreReport
from act_prep.services.analytics import build_question_attempts, calculate_performance_analytics
from act_prep.services.history import load_session_history, load_user_history
from act_prep.services.scoring import calculate_act_scores_from_attempts, get_score_interpretation
from act_prep.logging_config import get_logger, log_with_context

router = APIRouter()
logger = get_logger("http")


@router.get("/api/sessions/{session_id}/scores", response_model=SessionScoreReport)
def get_session_scores(session_id: str, db: Session = Depends(get_db)):
    """ACT section, composite and percentile scores for one test session."""
    attempts, passages = load_session_history(db, session_id)
    if not attempts:
        raise HTTPException(status_code=404, detail="No attempts found for session")

    scores = calculate_act_scores_from_attempts(attempts, passages)
    return SessionScoreReport(
        session_id=session_id,
        attempt_count=len(attempts),
        scores=scores,
        interpretation=get_score_interpretation(scores.composite_score),
    )


@router.get("/api/users/{user_id}/analytics", response_model=PerformanceAnalytics)
def get_user_analytics(user_id: str, db: Session = Depends(get_db)):
    """
    Performance analytics over a user's full attempt history.

    A user with no attempts gets an empty report rather than a 404.
    """
    attempts, passages = load_user_history(db, user_id)
    question_attempts = build_question_attempts(attempts, passages)
    report = calculate_performance_analytics(attempts, question_attempts)

    log_with_context(logger, "INFO",
        "Analytics served for user {}".format(user_id),
        context={"user_id": user_id},
        extra_data={"attempts": len(attempts)})
    return report
