from act_prep.schemas.base import CoreModel


class SectionScores(CoreModel):
    """One integer per ACT section."""
    english: int
    math: int
    reading: int
    science: int


class ScoreResult(CoreModel):
    raw_scores: SectionScores
    scaled_scores: SectionScores
    composite_score: int
    section_percentiles: SectionScores
    composite_percentile: int


class ScoreInterpretation(CoreModel):
    message: str
    level: str


class SessionScoreReport(CoreModel):
    """ACT scores for every attempt in one test session."""
    session_id: str
    attempt_count: int
    scores: ScoreResult
    interpretation: ScoreInterpretation
