"""
Attempt and passage records consumed by the scoring and analytics services.

Optional analytics fields are given their defaults here, once, so that the
aggregation code never has to re-apply fallbacks.
"""

from datetime import datetime, timezone
from typing import Dict, List, Literal, Optional

from pydantic import Field, field_validator, model_validator

from act_prep.schemas.base import CoreModel

AnswerChoice = Literal["A", "B", "C", "D"]
Subject = Literal["English", "Math", "Reading", "Science"]
Difficulty = Literal["Easy", "Medium", "Hard"]

DEFAULT_QUESTION_TYPE = "detail"
DEFAULT_PASSAGE_TYPE = "informational"
DEFAULT_DIFFICULTY = "Medium"


def _as_utc(value: Optional[datetime]) -> Optional[datetime]:
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class CatalogQuestion(CoreModel):
    """The parts of a stored question needed to grade and classify an answer."""
    id: str
    question_number: int = 0
    correct_answer: AnswerChoice
    question_type: str = DEFAULT_QUESTION_TYPE

    @field_validator("question_type", mode="before")
    @classmethod
    def _default_question_type(cls, v):
        return v or DEFAULT_QUESTION_TYPE


class CatalogPassage(CoreModel):
    """A passage as seen by the scoring code: its subject, tags and answer key."""
    id: str
    title: str = ""
    subject: Subject
    difficulty: Difficulty = DEFAULT_DIFFICULTY
    passage_type: str = DEFAULT_PASSAGE_TYPE
    questions: List[CatalogQuestion] = Field(default_factory=list)

    @field_validator("difficulty", mode="before")
    @classmethod
    def _default_difficulty(cls, v):
        return v or DEFAULT_DIFFICULTY

    @field_validator("passage_type", mode="before")
    @classmethod
    def _default_passage_type(cls, v):
        return v or DEFAULT_PASSAGE_TYPE


class TestAttempt(CoreModel):
    """
    One completed pass through a single passage's question set.

    raw_score, scaled_score and percentile are filled in once when the attempt
    is submitted and are carried unchanged afterwards.
    """
    __test__ = False

    id: str
    user_id: str
    session_id: str
    passage_id: str
    answers: Dict[str, AnswerChoice] = Field(default_factory=dict)
    score: int = Field(0, ge=0)
    total_questions: int = Field(0, ge=0)
    time_spent: float = Field(0, ge=0)
    completed_at: datetime

    raw_score: Optional[int] = None
    scaled_score: Optional[int] = Field(None, ge=1, le=36)
    percentile: Optional[int] = Field(None, ge=1, le=100)

    question_times: Dict[str, float] = Field(default_factory=dict)
    question_types: Dict[str, str] = Field(default_factory=dict)
    passage_type: str = DEFAULT_PASSAGE_TYPE
    reading_time: float = 0
    answering_time: float = 0

    @field_validator("answers", "question_times", "question_types", mode="before")
    @classmethod
    def _empty_mapping(cls, v):
        return v or {}

    @field_validator("passage_type", mode="before")
    @classmethod
    def _default_passage_type(cls, v):
        return v or DEFAULT_PASSAGE_TYPE

    @field_validator("reading_time", "answering_time", mode="before")
    @classmethod
    def _default_zero(cls, v):
        return 0 if v is None else v

    @field_validator("completed_at")
    @classmethod
    def _utc(cls, v):
        return _as_utc(v)

    @model_validator(mode="after")
    def _score_within_total(self):
        if self.score > self.total_questions:
            raise ValueError(
                f"score {self.score} exceeds total_questions {self.total_questions}")
        return self

    @property
    def percentage(self) -> float:
        """Score as a percentage of the passage's questions (0 for an empty set)."""
        if not self.total_questions:
            return 0.0
        return self.score * 100 / self.total_questions


class QuestionAttempt(CoreModel):
    """Per-question projection of a TestAttempt, rebuilt on every analytics run."""
    question_id: str
    question_number: int = 0
    question_type: str = DEFAULT_QUESTION_TYPE
    user_answer: Optional[AnswerChoice] = None
    correct_answer: Optional[AnswerChoice] = None
    is_correct: bool = False
    time_spent: float = Field(0, ge=0)
    difficulty: Difficulty = DEFAULT_DIFFICULTY
    passage_type: str = DEFAULT_PASSAGE_TYPE
    completed_at: Optional[datetime] = None

    @field_validator("question_type", mode="before")
    @classmethod
    def _default_question_type(cls, v):
        return v or DEFAULT_QUESTION_TYPE

    @field_validator("difficulty", mode="before")
    @classmethod
    def _default_difficulty(cls, v):
        return v or DEFAULT_DIFFICULTY

    @field_validator("passage_type", mode="before")
    @classmethod
    def _default_passage_type(cls, v):
        return v or DEFAULT_PASSAGE_TYPE

    @field_validator("completed_at")
    @classmethod
    def _utc(cls, v):
        return _as_utc(v)
