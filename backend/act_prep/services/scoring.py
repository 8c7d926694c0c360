"""
Scoring Service - converts raw ACT section results into scaled scores.

1. raw score = correct answers, clamped to the section's question count
2. scaled score (1-36) = step-table lookup per section (score_tables)
3. composite = mean of the four scaled scores, rounded half up
4. percentile = lookup of a scaled score (or the composite) in PERCENTILE_TABLE

Every function here is pure apart from warning logs on the two fallback
paths: a scaled score missing from the percentile table, and an attempt whose
passage is not in the supplied catalog.
"""

import math
import time
from bisect import bisect_right
from typing import Dict, Iterable, Tuple

from act_prep.schemas.attempts import CatalogPassage, TestAttempt
from act_prep.schemas.scores import ScoreInterpretation, ScoreResult, SectionScores
from act_prep.services.score_tables import (
    CONVERSION_TABLES, MIN_PERCENTILE, MIN_SCALED_SCORE, PERCENTILE_TABLE,
    SECTION_TOTALS
)
from act_prep.logging_config import get_logger, log_with_context

logger = get_logger("scoring")

SECTIONS = ("english", "math", "reading", "science")

SECTION_DISPLAY_NAMES = {
    "english": "English",
    "math": "Mathematics",
    "reading": "Reading",
    "science": "Science",
}

_THRESHOLDS = {
    section: [raw for raw, _ in table]
    for section, table in CONVERSION_TABLES.items()
}
_PERCENTILES = dict(PERCENTILE_TABLE)

# (minimum composite, level, message), highest band first
INTERPRETATION_BANDS = (
    (34, "Excellent", "Outstanding! You're in the top 1% of test takers. Excellent work!"),
    (30, "Very Good", "Excellent! You're in the top 10% of test takers. Great job!"),
    (26, "Good", "Good work! You're above average. Keep practicing to improve further."),
    (22, "Average", "Average performance. Focus on your weak areas to improve."),
    (18, "Below Average", "Below average. Consider additional study and practice."),
)
LOWEST_BAND = ("Needs Improvement",
               "Needs improvement. Focus on fundamental concepts and practice regularly.")


def round_half_up(value: float) -> int:
    """Round to the nearest integer with .5 going up (not banker's rounding)."""
    return int(math.floor(value + 0.5))


def _section_key(section: str) -> str:
    key = section.lower()
    if key not in CONVERSION_TABLES:
        raise ValueError(f"Unknown ACT section: {section!r}")
    return key


def section_for_subject(subject: str) -> str:
    """Map a passage subject (English, Math, ...) to its section key."""
    return _section_key(subject)


def get_section_display_name(section: str) -> str:
    return SECTION_DISPLAY_NAMES[_section_key(section)]


def convert_raw_to_scaled(raw_score: int, section: str) -> int:
    """
    Convert a raw section score to a scaled score (1-36).

    Callers clamp raw_score to the section total beforehand. A raw score
    below every threshold maps to the minimum scaled score.
    """
    key = _section_key(section)
    index = bisect_right(_THRESHOLDS[key], raw_score) - 1
    if index < 0:
        return MIN_SCALED_SCORE
    return CONVERSION_TABLES[key][index][1]


def get_percentile(scaled_score: int) -> int:
    """National percentile for a scaled score; 1 when the score is not in the table."""
    percentile = _PERCENTILES.get(scaled_score)
    if percentile is None:
        log_with_context(logger, "WARNING",
            "No percentile for scaled score {}; using {}".format(scaled_score, MIN_PERCENTILE),
            extra_data={"scaled_score": scaled_score})
        return MIN_PERCENTILE
    return percentile


def calculate_act_scores(english_correct: int, math_correct: int,
                         reading_correct: int, science_correct: int,
                         english_total: int = SECTION_TOTALS["english"],
                         math_total: int = SECTION_TOTALS["math"],
                         reading_total: int = SECTION_TOTALS["reading"],
                         science_total: int = SECTION_TOTALS["science"]) -> ScoreResult:
    """
    Score a full ACT from per-section correct counts.

    Counts are clamped into [0, section total] instead of being rejected.
    The composite percentile reuses the scaled-score percentile table on the
    composite value.
    """
    correct = {
        "english": (english_correct, english_total),
        "math": (math_correct, math_total),
        "reading": (reading_correct, reading_total),
        "science": (science_correct, science_total),
    }
    raw = {
        section: max(0, min(count, total))
        for section, (count, total) in correct.items()
    }
    scaled = {section: convert_raw_to_scaled(raw[section], section) for section in SECTIONS}
    composite = round_half_up(sum(scaled.values()) / len(SECTIONS))

    return ScoreResult(
        raw_scores=SectionScores(**raw),
        scaled_scores=SectionScores(**scaled),
        composite_score=composite,
        section_percentiles=SectionScores(
            **{section: get_percentile(scaled[section]) for section in SECTIONS}),
        composite_percentile=get_percentile(composite),
    )


def calculate_act_scores_from_attempts(attempts: Iterable[TestAttempt],
                                       passages: Iterable[CatalogPassage]) -> ScoreResult:
    """
    Score a set of passage attempts as one ACT.

    Attempts are grouped by their passage's subject; correct counts and
    question totals are summed per section. A section with no attempts is
    scored against its standard total. Attempts whose passage is missing from
    the catalog are left out (and logged).
    """
    start_time = time.time()
    subjects = {passage.id: passage.subject for passage in passages}
    totals: Dict[str, Tuple[int, int]] = {section: (0, 0) for section in SECTIONS}
    counted = 0
    dropped = 0

    for attempt in attempts:
        subject = subjects.get(attempt.passage_id)
        if subject is None:
            dropped += 1
            log_with_context(logger, "WARNING",
                "Attempt {} skipped: passage {} not in catalog".format(
                    attempt.id, attempt.passage_id),
                context={
                    "attempt_id": attempt.id,
                    "passage_id": attempt.passage_id,
                    "session_id": attempt.session_id
                })
            continue
        section = section_for_subject(subject)
        correct, total = totals[section]
        totals[section] = (correct + attempt.score, total + attempt.total_questions)
        counted += 1

    result = calculate_act_scores(
        totals["english"][0], totals["math"][0],
        totals["reading"][0], totals["science"][0],
        totals["english"][1] or SECTION_TOTALS["english"],
        totals["math"][1] or SECTION_TOTALS["math"],
        totals["reading"][1] or SECTION_TOTALS["reading"],
        totals["science"][1] or SECTION_TOTALS["science"],
    )

    duration_ms = (time.time() - start_time) * 1000
    log_with_context(logger, "INFO",
        "ACT scores computed: composite {} from {} attempts".format(
            result.composite_score, counted),
        extra_data={
            "duration_ms": round(duration_ms, 2),
            "attempts_counted": counted,
            "attempts_dropped": dropped
        })
    return result


def score_attempt_fields(correct_count: int, subject: str) -> Tuple[int, int, int]:
    """
    Scoring fields stored on a single passage attempt at submission time.

    Returns (raw_score, scaled_score, percentile); the raw score is converted
    through the passage subject's full-section table.
    """
    raw_score = max(0, correct_count)
    scaled_score = convert_raw_to_scaled(raw_score, section_for_subject(subject))
    return raw_score, scaled_score, get_percentile(scaled_score)


def get_score_interpretation(composite_score: int) -> ScoreInterpretation:
    for minimum, level, message in INTERPRETATION_BANDS:
        if composite_score >= minimum:
            return ScoreInterpretation(message=message, level=level)
    level, message = LOWEST_BAND
    return ScoreInterpretation(message=message, level=level)
