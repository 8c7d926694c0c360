"""
Attempt model - one submitted pass through a passage's questions.

Rows use the storage-side snake_case names; act_prep.services.history maps
them to TestAttempt records for the scoring and analytics code.
"""

import uuid
import json
from datetime import datetime, timezone
from sqlalchemy import Column, Text, Integer, Float, DateTime, ForeignKey, Index, String
from sqlalchemy.orm import relationship
from act_prep.database import Base


def _json_dict(value):
    if isinstance(value, dict):
        return value
    try:
        return json.loads(value) if value else {}
    except (json.JSONDecodeError, TypeError):
        return {}


class Attempt(Base):
    """
    SQLAlchemy model for the test_attempts table.

    raw_score, scaled_score and percentile are written once, when the
    attempt is submitted.
    """
    __tablename__ = "test_attempts"

    id = Column(String(64), primary_key=True, default=lambda: str(uuid.uuid4()),
                doc="Attempt identifier")
    user_id = Column(String(64), nullable=False,
                     doc="Owning user (managed by the auth provider)")
    session_id = Column(String(64), nullable=False,
                        doc="Test session the attempt belongs to")
    passage_id = Column(String(64), ForeignKey("passages.id"), nullable=False)
    answers = Column(Text, nullable=False, default="{}",
                     doc="Answers as JSON: {question_id: 'A'|'B'|'C'|'D'}")
    score = Column(Integer, nullable=False, default=0,
                   doc="Answers matching the stored correct answer")
    total_questions = Column(Integer, nullable=False, default=0)
    time_spent = Column(Integer, nullable=False, default=0,
                        doc="Seconds spent on the passage")
    completed_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))

    raw_score = Column(Integer, nullable=True)
    scaled_score = Column(Integer, nullable=True)
    percentile = Column(Integer, nullable=True)

    question_times = Column(Text, nullable=True,
                            doc="Seconds per question as JSON: {question_id: seconds}")
    question_types = Column(Text, nullable=True,
                            doc="Question type tags as JSON: {question_id: type}")
    passage_type = Column(String(32), nullable=True)
    reading_time = Column(Float, nullable=True)
    answering_time = Column(Float, nullable=True)

    passage = relationship("Passage", back_populates="attempts")

    __table_args__ = (
        Index("ix_test_attempts_user_id", "user_id"),
        Index("ix_test_attempts_session_id", "session_id"),
        Index("ix_test_attempts_completed_at", "completed_at"),
    )

    @property
    def answers_dict(self):
        return _json_dict(self.answers)

    @property
    def question_times_dict(self):
        return _json_dict(self.question_times)

    @property
    def question_types_dict(self):
        return _json_dict(self.question_types)

    def __repr__(self):
        return (f"<Attempt(id={self.id}, user={self.user_id}, passage={self.passage_id}, "
                f"score={self.score}/{self.total_questions})>")
