"""
Performance analytics report.

Built fresh from the attempt history on every request; no identity, no storage.
"""

from typing import Dict, List, Literal

from pydantic import Field

from act_prep.schemas.base import CoreModel

Trend = Literal["improving", "declining", "stable"]
Severity = Literal["high", "medium", "low"]
WeaknessCategory = Literal["questionType", "passageType", "timeManagement"]


class OverallPerformance(CoreModel):
    total_attempts: int = 0
    average_score: int = 0
    average_time: int = 0
    improvement: int = 0
    current_streak: int = 0
    best_streak: int = 0


class QuestionTypePerformance(CoreModel):
    question_type: str
    total_questions: int
    correct_answers: int
    accuracy: int
    average_time: int
    trend: Trend
    improvement: int = 0


class PassageTypePerformance(CoreModel):
    passage_type: str
    total_passages: int
    average_score: int
    average_time: int
    accuracy: int
    trend: Trend
    improvement: int = 0


class DifficultyPerformance(CoreModel):
    difficulty: str
    total_questions: int
    correct_answers: int
    accuracy: int
    average_time: int
    trend: Trend
    improvement: int = 0


class TimeDistribution(CoreModel):
    fast: int = 0
    medium: int = 0
    slow: int = 0


class TimeAnalysis(CoreModel):
    average_time_per_question: int = 0
    average_reading_time: int = 0
    average_answering_time: int = 0
    time_distribution: TimeDistribution = Field(default_factory=TimeDistribution)
    time_by_question_type: Dict[str, float] = Field(default_factory=dict)
    time_by_passage_type: Dict[str, float] = Field(default_factory=dict)


class ProgressPoint(CoreModel):
    """Attempts rolled up over one calendar day, ISO week or month."""
    period: str
    attempts: int
    average_score: int
    average_time: int


class ProgressTracking(CoreModel):
    daily_progress: List[ProgressPoint] = Field(default_factory=list)
    weekly_progress: List[ProgressPoint] = Field(default_factory=list)
    monthly_progress: List[ProgressPoint] = Field(default_factory=list)
    score_trend: List[int] = Field(default_factory=list)
    time_trend: List[float] = Field(default_factory=list)


class Weakness(CoreModel):
    category: WeaknessCategory
    name: str
    severity: Severity
    accuracy: int
    average_time: int
    improvement: int = 0
    description: str


class WeaknessAnalysis(CoreModel):
    top_weaknesses: List[Weakness] = Field(default_factory=list)
    recommendations: List[str] = Field(default_factory=list)
    focus_areas: List[str] = Field(default_factory=list)


class PerformanceAnalytics(CoreModel):
    overall: OverallPerformance
    question_types: List[QuestionTypePerformance]
    passage_types: List[PassageTypePerformance]
    difficulty_levels: List[DifficultyPerformance]
    time_analysis: TimeAnalysis
    progress: ProgressTracking
    weaknesses: WeaknessAnalysis
