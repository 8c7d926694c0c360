from act_prep.schemas.attempts import (
    CatalogPassage, CatalogQuestion, QuestionAttempt, TestAttempt
)
from act_prep.schemas.scores import (
    ScoreInterpretation, ScoreResult, SectionScores, SessionScoreReport
)
from act_prep.schemas.analytics import (
    DifficultyPerformance, OverallPerformance, PassageTypePerformance,
    PerformanceAnalytics, ProgressPoint, ProgressTracking,
    QuestionTypePerformance, TimeAnalysis, TimeDistribution, Weakness,
    WeaknessAnalysis
)

__all__ = [
    "CatalogPassage", "CatalogQuestion", "QuestionAttempt", "TestAttempt",
    "ScoreInterpretation", "ScoreResult", "SectionScores", "SessionScoreReport",
    "DifficultyPerformance", "OverallPerformance", "PassageTypePerformance",
    "PerformanceAnalytics", "ProgressPoint", "ProgressTracking",
    "QuestionTypePerformance", "TimeAnalysis", "TimeDistribution", "Weakness",
    "WeaknessAnalysis",
]
