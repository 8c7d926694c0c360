"""
Tests for performance analytics.
"""
import logging
from datetime import datetime, timedelta, timezone

import pytest

from act_prep.schemas.attempts import CatalogPassage, CatalogQuestion, QuestionAttempt
from act_prep.services.analytics import (
    build_question_attempts,
    calculate_difficulty_performance,
    calculate_overall_performance,
    calculate_passage_type_performance,
    calculate_performance_analytics,
    calculate_progress_tracking,
    calculate_question_type_performance,
    calculate_streaks,
    calculate_time_analysis,
)

START = datetime(2025, 3, 3, 9, 0, tzinfo=timezone.utc)


def make_questions(question_type, correct, total, time_spent=40, difficulty="Medium"):
    """`total` questions of one type; the first `correct` of them answered correctly."""
    return [
        QuestionAttempt(
            question_id=f"{question_type}-{i}",
            question_type=question_type,
            is_correct=i < correct,
            time_spent=time_spent,
            difficulty=difficulty,
            completed_at=START + timedelta(minutes=i),
        )
        for i in range(total)
    ]


def alternating_history(make_attempt, count=10, start_high=True):
    attempts = []
    for i in range(count):
        high = (i % 2 == 0) == start_high
        attempts.append(make_attempt(10 if high else 4, 10))
    return attempts


class TestEmptyHistory:

    def test_report_is_empty_not_an_error(self):
        report = calculate_performance_analytics([], [])

        assert report.overall.total_attempts == 0
        assert report.overall.average_score == 0
        assert report.overall.improvement == 0
        assert report.overall.current_streak == 0
        assert report.question_types == []
        assert report.passage_types == []
        assert report.difficulty_levels == []
        assert report.time_analysis.average_time_per_question == 0
        assert report.time_analysis.average_reading_time == 0
        assert report.time_analysis.time_distribution.model_dump() == {
            "fast": 0, "medium": 0, "slow": 0}
        assert report.time_analysis.time_by_question_type == {}
        assert report.progress.score_trend == []
        assert report.progress.daily_progress == []
        assert report.weaknesses.top_weaknesses == []
        assert report.weaknesses.recommendations == []
        assert report.weaknesses.focus_areas == []

    def test_serialized_shape(self):
        data = calculate_performance_analytics([], []).model_dump(by_alias=True)
        assert set(data) == {
            "overall", "questionTypes", "passageTypes", "difficultyLevels",
            "timeAnalysis", "progress", "weaknesses"}
        assert "totalAttempts" in data["overall"]
        assert "topWeaknesses" in data["weaknesses"]


class TestOverallPerformance:

    def test_alternating_scores_ending_low(self, make_attempt):
        overall = calculate_overall_performance(alternating_history(make_attempt))

        assert overall.total_attempts == 10
        assert overall.average_score == 70
        assert overall.average_time == 300
        assert overall.current_streak == 0
        assert overall.best_streak == 1
        # first five average 76, last five average 64
        assert overall.improvement == -12

    def test_alternating_scores_ending_high(self, make_attempt):
        overall = calculate_overall_performance(
            alternating_history(make_attempt, start_high=False))

        assert overall.current_streak == 1
        assert overall.improvement == 12

    def test_uses_chronological_order_not_input_order(self, make_attempt):
        attempts = alternating_history(make_attempt)
        shuffled = list(reversed(attempts))

        overall = calculate_overall_performance(shuffled)

        assert overall.improvement == -12
        assert overall.current_streak == 0
        assert [a.id for a in shuffled] == [a.id for a in reversed(attempts)]

    def test_single_attempt_has_no_improvement(self, make_attempt):
        overall = calculate_overall_performance([make_attempt(9, 10)])

        assert overall.improvement == 0
        assert overall.current_streak == 1
        assert overall.best_streak == 1

    def test_streaks(self, make_attempt):
        scores = [10, 10, 4, 10, 10, 10]
        assert calculate_streaks([make_attempt(s, 10) for s in scores]) == (3, 3)

        scores = [10, 10, 10, 4, 8]
        assert calculate_streaks([make_attempt(s, 10) for s in scores]) == (1, 3)

    def test_seventy_percent_extends_streak(self, make_attempt):
        assert calculate_streaks([make_attempt(7, 10), make_attempt(7, 10)]) == (2, 2)

    def test_zero_question_attempt_scores_zero(self, make_attempt):
        overall = calculate_overall_performance([make_attempt(0, 0)])
        assert overall.average_score == 0


class TestQuestionTypePerformance:

    def test_accuracy_and_time(self):
        questions = make_questions("inference", 7, 10, time_spent=45)

        [perf] = calculate_question_type_performance(questions)

        assert perf.question_type == "inference"
        assert perf.total_questions == 10
        assert perf.correct_answers == 7
        assert perf.accuracy == 70
        assert perf.average_time == 45

    def test_trend_follows_completion_order(self):
        # Early answers wrong and slow, later answers right and fast
        questions = [
            QuestionAttempt(
                question_id=f"q{i}",
                question_type="inference",
                is_correct=i >= 5,
                time_spent=80 if i < 5 else 20,
                completed_at=START + timedelta(minutes=i),
            )
            for i in range(10)
        ]

        [perf] = calculate_question_type_performance(list(reversed(questions)))

        assert perf.trend == "improving"
        assert perf.improvement == 100

    def test_declining_and_stable(self):
        declining = make_questions("detail", 5, 10)
        stable = make_questions("tone", 1, 1)

        perfs = {p.question_type: p for p in calculate_question_type_performance(declining + stable)}

        assert perfs["detail"].trend == "declining"
        assert perfs["tone"].trend == "stable"


class TestPassageTypePerformance:

    def test_groups_and_trend(self, make_attempt):
        attempts = [
            make_attempt(4, 10, passage_type="prose-fiction"),
            make_attempt(5, 10, passage_type="prose-fiction"),
            make_attempt(10, 10),
            make_attempt(8, 10, passage_type="prose-fiction"),
            make_attempt(9, 10, passage_type="prose-fiction"),
        ]

        perfs = {p.passage_type: p for p in calculate_passage_type_performance(attempts)}

        fiction = perfs["prose-fiction"]
        assert fiction.total_passages == 4
        assert fiction.average_score == 65
        assert fiction.accuracy == 65
        assert fiction.trend == "improving"
        assert fiction.improvement == 40
        assert perfs["informational"].accuracy == 100
        assert perfs["informational"].trend == "stable"


class TestDifficultyPerformance:

    def test_fixed_order_and_empty_groups_omitted(self):
        questions = (make_questions("detail", 2, 4, difficulty="Hard")
                     + make_questions("tone", 3, 3, difficulty="Easy"))

        perfs = calculate_difficulty_performance(questions)

        assert [p.difficulty for p in perfs] == ["Easy", "Hard"]
        assert perfs[0].accuracy == 100
        assert perfs[1].accuracy == 50
        assert perfs[1].correct_answers == 2


class TestTimeAnalysis:

    def test_distribution_boundaries(self, make_attempt):
        questions = [
            QuestionAttempt(question_id="a", question_type="detail", time_spent=29.9),
            QuestionAttempt(question_id="b", question_type="detail", time_spent=30),
            QuestionAttempt(question_id="c", question_type="tone", time_spent=60),
            QuestionAttempt(question_id="d", question_type="tone", time_spent=60.1),
        ]
        attempts = [
            make_attempt(5, 10, reading_time=120, answering_time=200, time_spent=320),
            make_attempt(5, 10, passage_type="humanities", time_spent=100),
        ]

        analysis = calculate_time_analysis(attempts, questions)

        assert analysis.time_distribution.model_dump() == {"fast": 1, "medium": 2, "slow": 1}
        assert analysis.average_time_per_question == 45
        assert analysis.average_reading_time == 60
        assert analysis.average_answering_time == 100
        assert analysis.time_by_question_type["detail"] == pytest.approx(29.95)
        assert analysis.time_by_passage_type == {"informational": 320, "humanities": 100}


class TestProgressTracking:

    def test_series_and_rollups(self, make_attempt):
        attempts = [
            make_attempt(5, 10, completed_at=datetime(2025, 3, 12, 10, tzinfo=timezone.utc), time_spent=200),
            make_attempt(10, 10, completed_at=datetime(2025, 3, 3, 9, tzinfo=timezone.utc)),
            make_attempt(5, 10, completed_at=datetime(2025, 3, 3, 15, tzinfo=timezone.utc)),
            make_attempt(6, 10, completed_at="2025-04-02T08:30:00Z"),
        ]

        progress = calculate_progress_tracking(attempts)

        assert progress.score_trend == [100, 50, 50, 60]
        assert progress.time_trend == [300, 300, 200, 300]
        assert [(p.period, p.attempts, p.average_score) for p in progress.daily_progress] == [
            ("2025-03-03", 2, 75), ("2025-03-12", 1, 50), ("2025-04-02", 1, 60)]
        assert [p.period for p in progress.weekly_progress] == ["2025-W10", "2025-W11", "2025-W14"]
        assert [(p.period, p.attempts) for p in progress.monthly_progress] == [
            ("2025-03", 3), ("2025-04", 1)]
        assert progress.monthly_progress[0].average_time == 267


class TestWeaknessAnalysis:

    def test_seventy_percent_is_not_a_weakness(self):
        questions = make_questions("inference", 70, 100) + make_questions("detail", 69, 100)

        weaknesses = calculate_performance_analytics([], questions).weaknesses

        assert weaknesses.focus_areas == ["detail"]
        [weakness] = weaknesses.top_weaknesses
        assert weakness.severity == "low"
        assert weakness.accuracy == 69
        assert weakness.category == "questionType"
        assert weaknesses.recommendations == [
            "Focus on practicing detail questions to improve accuracy"]

    def test_ranked_by_severity_then_accuracy(self):
        questions = (make_questions("a", 45, 100) + make_questions("b", 55, 100)
                     + make_questions("c", 65, 100) + make_questions("d", 30, 100)
                     + make_questions("e", 68, 100) + make_questions("f", 58, 100))

        weaknesses = calculate_performance_analytics([], questions).weaknesses

        assert weaknesses.focus_areas == ["d", "a", "b", "f", "c"]
        assert [w.severity for w in weaknesses.top_weaknesses] == [
            "high", "high", "medium", "medium", "low"]
        assert len(weaknesses.recommendations) == 5

    def test_slow_answers_add_time_management_weakness(self):
        questions = make_questions("detail", 10, 10, time_spent=90)

        weaknesses = calculate_performance_analytics([], questions).weaknesses

        [weakness] = weaknesses.top_weaknesses
        assert weakness.category == "timeManagement"
        assert weakness.severity == "high"
        assert weakness.average_time == 90
        assert weakness.description == "Average time per question is 90s, which is too slow"
        assert weaknesses.recommendations == [
            "Practice with timed exercises to improve response speed"]

    def test_passage_type_weakness(self, make_attempt):
        attempts = [make_attempt(4, 10, passage_type="natural-science")]

        weaknesses = calculate_performance_analytics(attempts, []).weaknesses

        [weakness] = weaknesses.top_weaknesses
        assert weakness.category == "passageType"
        assert weakness.severity == "high"
        assert weaknesses.recommendations == [
            "Spend more time reading natural-science passages to build familiarity"]


class TestBuildQuestionAttempts:

    def setup_method(self):
        self.passage = CatalogPassage(
            id="p1",
            subject="Reading",
            difficulty="Hard",
            questions=[
                CatalogQuestion(id="q1", question_number=1, correct_answer="A", question_type="detail"),
                CatalogQuestion(id="q2", question_number=2, correct_answer="B", question_type="inference"),
                CatalogQuestion(id="q3", question_number=3, correct_answer="C"),
            ],
        )

    def test_projection(self, make_attempt):
        attempt = make_attempt(
            2, 3,
            passage_id="p1",
            answers={"q1": "A", "q2": "C", "q3": "C", "q9": "A"},
            question_types={"q2": "vocabulary"},
            question_times={"q1": 12},
            passage_type="humanities",
        )

        projected = {q.question_id: q for q in build_question_attempts([attempt], [self.passage])}

        assert set(projected) == {"q1", "q2", "q3", "q9"}
        assert projected["q1"].is_correct
        assert projected["q1"].time_spent == 12
        assert projected["q1"].difficulty == "Hard"
        assert projected["q1"].passage_type == "humanities"
        assert projected["q1"].completed_at == attempt.completed_at
        assert not projected["q2"].is_correct
        assert projected["q2"].question_type == "vocabulary"
        assert projected["q2"].time_spent == 30
        assert projected["q3"].question_type == "detail"
        assert projected["q3"].is_correct
        assert projected["q9"].correct_answer is None
        assert not projected["q9"].is_correct

    def test_unknown_passage_is_skipped(self, make_attempt, caplog):
        attempt = make_attempt(1, 1, passage_id="gone", answers={"q1": "A"})

        with caplog.at_level(logging.WARNING, logger="act_prep.analytics"):
            projected = build_question_attempts([attempt], [self.passage])

        assert projected == []
        assert any("gone" in r.getMessage() for r in caplog.records)
