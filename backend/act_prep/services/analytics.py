"""
Performance analytics over a student's attempt history.

calculate_performance_analytics() builds the whole report from scratch on
each call: overall performance, breakdowns by question type, passage type
and difficulty, time usage, progress over time, and ranked weaknesses with
recommendations. Inputs are never mutated; every breakdown sorts its own copy.

Trends compare the chronologically first half of a group with the second
half (the extra item of an odd-sized group goes to the second half).
"""

import time
from collections import OrderedDict
from statistics import mean
from typing import Callable, Dict, Iterable, List, Sequence, Tuple, TypeVar

from act_prep.schemas.attempts import CatalogPassage, QuestionAttempt, TestAttempt
from act_prep.schemas.analytics import (
    DifficultyPerformance, OverallPerformance, PassageTypePerformance,
    PerformanceAnalytics, ProgressPoint, ProgressTracking,
    QuestionTypePerformance, TimeAnalysis, TimeDistribution, Weakness,
    WeaknessAnalysis
)
from act_prep.services.scoring import round_half_up
from act_prep.logging_config import get_logger, log_with_context

logger = get_logger("analytics")

T = TypeVar("T")

# ──────────────────────────────────────────────────────────────
# Thresholds
# ──────────────────────────────────────────────────────────────
STREAK_ACCURACY = 70          # attempt percentage that extends a streak
WEAKNESS_ACCURACY = 70        # below this a category is a weakness
HIGH_SEVERITY_ACCURACY = 50
MEDIUM_SEVERITY_ACCURACY = 60
TREND_MARGIN = 5              # percentage points between halves
FAST_QUESTION_SECONDS = 30
SLOW_QUESTION_SECONDS = 60
DEFAULT_QUESTION_SECONDS = 30
TOP_WEAKNESS_LIMIT = 5

DIFFICULTY_ORDER = ("Easy", "Medium", "Hard")
SEVERITY_RANK = {"high": 3, "medium": 2, "low": 1}


def _average(values: Iterable[float]) -> float:
    values = list(values)
    return mean(values) if values else 0.0


def _accuracy(question_attempts: Sequence[QuestionAttempt]) -> float:
    if not question_attempts:
        return 0.0
    correct = sum(1 for q in question_attempts if q.is_correct)
    return correct / len(question_attempts) * 100


def _chronological(attempts: Iterable[TestAttempt]) -> List[TestAttempt]:
    return sorted(attempts, key=lambda a: a.completed_at)


def _chronological_questions(question_attempts: Iterable[QuestionAttempt]) -> List[QuestionAttempt]:
    # Questions without a timestamp keep their relative order ahead of dated ones
    return sorted(
        question_attempts,
        key=lambda q: (q.completed_at is not None, q.completed_at.timestamp() if q.completed_at else 0)
    )


def _halves(items: Sequence[T]) -> Tuple[Sequence[T], Sequence[T]]:
    half = len(items) // 2
    return items[:half], items[half:]


def _half_delta(items: Sequence[T], measure: Callable[[Sequence[T]], float]) -> float:
    """Second-half measure minus first-half measure; 0 for fewer than 2 items."""
    if len(items) < 2:
        return 0.0
    first, second = _halves(items)
    return measure(second) - measure(first)


def _classify_trend(delta: float) -> str:
    if delta > TREND_MARGIN:
        return "improving"
    if delta < -TREND_MARGIN:
        return "declining"
    return "stable"


def _group_by(items: Iterable[T], key: Callable[[T], str]) -> "OrderedDict[str, List[T]]":
    groups: "OrderedDict[str, List[T]]" = OrderedDict()
    for item in items:
        groups.setdefault(key(item), []).append(item)
    return groups


def _mean_percentage(attempts: Sequence[TestAttempt]) -> float:
    return _average(a.percentage for a in attempts)


# ──────────────────────────────────────────────────────────────
# Overall performance
# ──────────────────────────────────────────────────────────────

def calculate_streaks(attempts: Sequence[TestAttempt]) -> Tuple[int, int]:
    """
    (current_streak, best_streak) over chronologically ordered attempts.

    A streak is a run of consecutive attempts scoring at least
    STREAK_ACCURACY percent; the current streak is the run ending with the
    most recent attempt.
    """
    current_streak = 0
    best_streak = 0
    run = 0
    trailing = True
    for attempt in reversed(attempts):
        if attempt.percentage >= STREAK_ACCURACY:
            run += 1
            if trailing:
                current_streak = run
        else:
            trailing = False
            best_streak = max(best_streak, run)
            run = 0
    best_streak = max(best_streak, run)
    return current_streak, best_streak


def calculate_overall_performance(attempts: Sequence[TestAttempt]) -> OverallPerformance:
    if not attempts:
        return OverallPerformance()

    ordered = _chronological(attempts)
    current_streak, best_streak = calculate_streaks(ordered)

    return OverallPerformance(
        total_attempts=len(ordered),
        average_score=round_half_up(_mean_percentage(ordered)),
        average_time=round_half_up(_average(a.time_spent for a in ordered)),
        improvement=round_half_up(_half_delta(ordered, _mean_percentage)),
        current_streak=current_streak,
        best_streak=best_streak,
    )


# ──────────────────────────────────────────────────────────────
# Breakdowns
# ──────────────────────────────────────────────────────────────

def calculate_question_type_performance(
        question_attempts: Sequence[QuestionAttempt]) -> List[QuestionTypePerformance]:
    groups = _group_by(question_attempts, lambda q: q.question_type)
    results = []
    for question_type, members in groups.items():
        ordered = _chronological_questions(members)
        delta = _half_delta(ordered, _accuracy)
        results.append(QuestionTypePerformance(
            question_type=question_type,
            total_questions=len(members),
            correct_answers=sum(1 for q in members if q.is_correct),
            accuracy=round_half_up(_accuracy(members)),
            average_time=round_half_up(_average(q.time_spent for q in members)),
            trend=_classify_trend(delta),
            improvement=round_half_up(delta),
        ))
    return results


def calculate_passage_type_performance(
        attempts: Sequence[TestAttempt]) -> List[PassageTypePerformance]:
    """Per passage type; accuracy is the mean score percentage of its attempts."""
    groups = _group_by(attempts, lambda a: a.passage_type)
    results = []
    for passage_type, members in groups.items():
        ordered = _chronological(members)
        average_score = round_half_up(_mean_percentage(members))
        delta = _half_delta(ordered, _mean_percentage)
        results.append(PassageTypePerformance(
            passage_type=passage_type,
            total_passages=len(members),
            average_score=average_score,
            average_time=round_half_up(_average(a.time_spent for a in members)),
            accuracy=average_score,
            trend=_classify_trend(delta),
            improvement=round_half_up(delta),
        ))
    return results


def calculate_difficulty_performance(
        question_attempts: Sequence[QuestionAttempt]) -> List[DifficultyPerformance]:
    groups = _group_by(question_attempts, lambda q: q.difficulty)
    results = []
    for difficulty in DIFFICULTY_ORDER:
        members = groups.get(difficulty)
        if not members:
            continue
        delta = _half_delta(_chronological_questions(members), _accuracy)
        results.append(DifficultyPerformance(
            difficulty=difficulty,
            total_questions=len(members),
            correct_answers=sum(1 for q in members if q.is_correct),
            accuracy=round_half_up(_accuracy(members)),
            average_time=round_half_up(_average(q.time_spent for q in members)),
            trend=_classify_trend(delta),
            improvement=round_half_up(delta),
        ))
    return results


# ──────────────────────────────────────────────────────────────
# Time analysis
# ──────────────────────────────────────────────────────────────

def calculate_time_analysis(attempts: Sequence[TestAttempt],
                            question_attempts: Sequence[QuestionAttempt]) -> TimeAnalysis:
    distribution = TimeDistribution(
        fast=sum(1 for q in question_attempts if q.time_spent < FAST_QUESTION_SECONDS),
        medium=sum(1 for q in question_attempts
                   if FAST_QUESTION_SECONDS <= q.time_spent <= SLOW_QUESTION_SECONDS),
        slow=sum(1 for q in question_attempts if q.time_spent > SLOW_QUESTION_SECONDS),
    )
    by_question_type = _group_by(question_attempts, lambda q: q.question_type)
    by_passage_type = _group_by(attempts, lambda a: a.passage_type)

    return TimeAnalysis(
        average_time_per_question=round_half_up(_average(q.time_spent for q in question_attempts)),
        average_reading_time=round_half_up(_average(a.reading_time for a in attempts)),
        average_answering_time=round_half_up(_average(a.answering_time for a in attempts)),
        time_distribution=distribution,
        time_by_question_type={
            name: _average(q.time_spent for q in members)
            for name, members in by_question_type.items()
        },
        time_by_passage_type={
            name: _average(a.time_spent for a in members)
            for name, members in by_passage_type.items()
        },
    )


# ──────────────────────────────────────────────────────────────
# Progress tracking
# ──────────────────────────────────────────────────────────────

def _day_key(attempt: TestAttempt) -> str:
    return attempt.completed_at.strftime("%Y-%m-%d")


def _week_key(attempt: TestAttempt) -> str:
    year, week, _ = attempt.completed_at.isocalendar()
    return f"{year}-W{week:02d}"


def _month_key(attempt: TestAttempt) -> str:
    return attempt.completed_at.strftime("%Y-%m")


def _rollup(ordered: Sequence[TestAttempt], key: Callable[[TestAttempt], str]) -> List[ProgressPoint]:
    return [
        ProgressPoint(
            period=period,
            attempts=len(members),
            average_score=round_half_up(_mean_percentage(members)),
            average_time=round_half_up(_average(a.time_spent for a in members)),
        )
        for period, members in _group_by(ordered, key).items()
    ]


def calculate_progress_tracking(attempts: Sequence[TestAttempt]) -> ProgressTracking:
    ordered = _chronological(attempts)
    return ProgressTracking(
        daily_progress=_rollup(ordered, _day_key),
        weekly_progress=_rollup(ordered, _week_key),
        monthly_progress=_rollup(ordered, _month_key),
        score_trend=[round_half_up(a.percentage) for a in ordered],
        time_trend=[a.time_spent for a in ordered],
    )


# ──────────────────────────────────────────────────────────────
# Weakness analysis
# ──────────────────────────────────────────────────────────────

def _severity(accuracy: int) -> str:
    if accuracy < HIGH_SEVERITY_ACCURACY:
        return "high"
    if accuracy < MEDIUM_SEVERITY_ACCURACY:
        return "medium"
    return "low"


def generate_recommendations(weaknesses: Sequence[Weakness]) -> List[str]:
    recommendations = []
    for weakness in weaknesses:
        if weakness.category == "questionType":
            recommendations.append(
                f"Focus on practicing {weakness.name} questions to improve accuracy")
        elif weakness.category == "passageType":
            recommendations.append(
                f"Spend more time reading {weakness.name} passages to build familiarity")
        elif weakness.category == "timeManagement":
            recommendations.append("Practice with timed exercises to improve response speed")
    return recommendations


def identify_weaknesses(question_types: Sequence[QuestionTypePerformance],
                        passage_types: Sequence[PassageTypePerformance],
                        time_analysis: TimeAnalysis) -> WeaknessAnalysis:
    weaknesses = []

    for perf in question_types:
        if perf.accuracy < WEAKNESS_ACCURACY:
            weaknesses.append(Weakness(
                category="questionType",
                name=perf.question_type,
                severity=_severity(perf.accuracy),
                accuracy=perf.accuracy,
                average_time=perf.average_time,
                improvement=perf.improvement,
                description=f"Low accuracy ({perf.accuracy}%) in {perf.question_type} questions",
            ))

    for perf in passage_types:
        if perf.accuracy < WEAKNESS_ACCURACY:
            weaknesses.append(Weakness(
                category="passageType",
                name=perf.passage_type,
                severity=_severity(perf.accuracy),
                accuracy=perf.accuracy,
                average_time=perf.average_time,
                improvement=perf.improvement,
                description=f"Low accuracy ({perf.accuracy}%) in {perf.passage_type} passages",
            ))

    if time_analysis.average_time_per_question > SLOW_QUESTION_SECONDS:
        seconds = time_analysis.average_time_per_question
        weaknesses.append(Weakness(
            category="timeManagement",
            name="Slow Response Time",
            severity="high",
            accuracy=0,
            average_time=seconds,
            description=f"Average time per question is {seconds}s, which is too slow",
        ))

    weaknesses.sort(key=lambda w: (-SEVERITY_RANK[w.severity], w.accuracy))
    top = weaknesses[:TOP_WEAKNESS_LIMIT]

    return WeaknessAnalysis(
        top_weaknesses=top,
        recommendations=generate_recommendations(top),
        focus_areas=[w.name for w in top],
    )


# ──────────────────────────────────────────────────────────────
# Question attempt projection
# ──────────────────────────────────────────────────────────────

def build_question_attempts(attempts: Iterable[TestAttempt],
                            passages: Iterable[CatalogPassage]) -> List[QuestionAttempt]:
    """
    Expand attempts into one QuestionAttempt per answered question.

    Correct answers come from the passage catalog. The question type is the
    one recorded on the attempt, else the question's own tag. Questions
    answered without a recorded time count as DEFAULT_QUESTION_SECONDS.
    Attempts whose passage is not in the catalog contribute nothing.
    """
    catalog: Dict[str, CatalogPassage] = {p.id: p for p in passages}
    projected = []

    for attempt in attempts:
        passage = catalog.get(attempt.passage_id)
        if passage is None:
            log_with_context(logger, "WARNING",
                "Attempt {} has no catalog passage {}; questions not analysed".format(
                    attempt.id, attempt.passage_id),
                context={"attempt_id": attempt.id, "passage_id": attempt.passage_id})
            continue

        questions = {q.id: q for q in passage.questions}
        for question_id, user_answer in attempt.answers.items():
            question = questions.get(question_id)
            correct_answer = question.correct_answer if question else None
            projected.append(QuestionAttempt(
                question_id=question_id,
                question_number=question.question_number if question else 0,
                question_type=attempt.question_types.get(question_id)
                or (question.question_type if question else None),
                user_answer=user_answer,
                correct_answer=correct_answer,
                is_correct=correct_answer is not None and user_answer == correct_answer,
                time_spent=attempt.question_times.get(question_id, DEFAULT_QUESTION_SECONDS),
                difficulty=passage.difficulty,
                passage_type=attempt.passage_type,
                completed_at=attempt.completed_at,
            ))
    return projected


# ──────────────────────────────────────────────────────────────
# Report
# ──────────────────────────────────────────────────────────────

def calculate_performance_analytics(attempts: Sequence[TestAttempt],
                                    question_attempts: Sequence[QuestionAttempt]) -> PerformanceAnalytics:
    """
    Build the full performance report.

    An empty history yields a report with zeroed figures and empty lists.
    """
    start_time = time.time()
    attempts = list(attempts)
    question_attempts = list(question_attempts)

    question_types = calculate_question_type_performance(question_attempts)
    passage_types = calculate_passage_type_performance(attempts)
    time_analysis = calculate_time_analysis(attempts, question_attempts)

    report = PerformanceAnalytics(
        overall=calculate_overall_performance(attempts),
        question_types=question_types,
        passage_types=passage_types,
        difficulty_levels=calculate_difficulty_performance(question_attempts),
        time_analysis=time_analysis,
        progress=calculate_progress_tracking(attempts),
        weaknesses=identify_weaknesses(question_types, passage_types, time_analysis),
    )

    duration_ms = (time.time() - start_time) * 1000
    log_with_context(logger, "INFO",
        "Analytics built from {} attempts ({} questions), {} weaknesses".format(
            len(attempts), len(question_attempts), len(report.weaknesses.top_weaknesses)),
        extra_data={
            "duration_ms": round(duration_ms, 2),
            "attempts": len(attempts),
            "question_attempts": len(question_attempts)
        })
    return report
