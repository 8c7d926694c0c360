"""
Passage model - a block of text plus its question set.

Questions are stored inline as a JSON list; each entry carries id,
question_number, text, options, correct_answer, explanation and
question_type.
"""

import uuid
import json
from datetime import datetime, timezone
from sqlalchemy import Column, Text, DateTime, Boolean, String, Index
from sqlalchemy.orm import relationship
from act_prep.database import Base


class Passage(Base):
    """SQLAlchemy model for the passages table."""
    __tablename__ = "passages"

    id = Column(String(64), primary_key=True, default=lambda: str(uuid.uuid4()),
                doc="Passage identifier")
    title = Column(Text, nullable=False,
                   doc="Passage title")
    content = Column(Text, nullable=False, default="",
                     doc="Passage body shown to the student")
    subject = Column(String(16), nullable=False,
                     doc="English | Math | Reading | Science")
    difficulty = Column(String(16), nullable=False, default="Medium",
                        doc="Easy | Medium | Hard")
    passage_type = Column(String(32), nullable=True,
                          doc="Genre tag (prose-fiction, social-science, ...)")
    questions = Column(Text, nullable=False, default="[]",
                       doc="Question set as a JSON list")
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))

    attempts = relationship("Attempt", back_populates="passage")

    __table_args__ = (
        Index("ix_passages_subject", "subject"),
    )

    @property
    def questions_list(self):
        """Parse the questions JSON string to a list."""
        if isinstance(self.questions, list):
            return self.questions
        try:
            return json.loads(self.questions) if self.questions else []
        except (json.JSONDecodeError, TypeError):
            return []

    def __repr__(self):
        return f"<Passage(id={self.id}, subject='{self.subject}', title='{self.title[:40]}')>"
