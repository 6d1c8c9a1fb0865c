"""Scoring and performance analysis for submitted sessions."""

from exam_engine.models.exam import Difficulty, ExamConfig, Question
from exam_engine.models.result import (
    DifficultyAnalysis,
    DifficultyBucket,
    Efficiency,
    ExamResult,
    PerformanceAnalysis,
    SectionalResult,
    TimeAnalysis,
    TopicAnalysis,
)
from exam_engine.models.session import AnswerRecord, ExamSession

# Analysis thresholds (accuracy in percent, time as a ratio of the expected pace)
STRONG_ACCURACY = 80
WEAK_ACCURACY = 50
SLOW_PACE_RATIO = 1.2
FAST_PACE_RATIO = 0.8


def _accuracy(correct: int, attempted: int) -> float:
    return correct / attempted * 100 if attempted > 0 else 0.0


def score(config: ExamConfig, session: ExamSession) -> ExamResult:
    """Compute the scored result of a session against its exam configuration.

    Records are matched to sections by question id rather than position, so a
    reordered answer sequence scores the same.
    """
    marking = config.marking
    sectional_results = []

    for section in config.sections:
        by_id = {q.id: q for q in section.questions}
        records = [a for a in session.answers if a.question_id in by_id]

        section_score = 0.0
        correct = incorrect = attempted = time_taken = 0
        for record in records:
            time_taken += record.time_spent
            if record.selected_answer is None:
                # Unattempted questions score nothing; marking.unattempted is informational.
                continue
            attempted += 1
            if record.selected_answer == by_id[record.question_id].correct_answer:
                correct += 1
                section_score += marking.correct
            else:
                incorrect += 1
                section_score += marking.incorrect

        question_count = len(section.questions)
        sectional_results.append(SectionalResult(
            section_id=section.id,
            section_name=section.name,
            score=section_score,
            max_score=question_count * marking.correct,
            attempted=attempted,
            correct=correct,
            incorrect=incorrect,
            unattempted=question_count - attempted,
            accuracy=_accuracy(correct, attempted),
            time_taken=time_taken,
            cutoff_met=section.cutoff_marks is None or section_score >= section.cutoff_marks,
        ))

    total_score = sum(r.score for r in sectional_results)
    max_score = sum(r.max_score for r in sectional_results)
    total_attempted = sum(r.attempted for r in sectional_results)
    total_correct = sum(r.correct for r in sectional_results)

    return ExamResult(
        session_id=session.id,
        exam_id=session.exam_id,
        total_score=total_score,
        max_score=max_score,
        percentage=total_score / max_score * 100 if max_score else 0.0,
        accuracy=_accuracy(total_correct, total_attempted),
        total_attempted=total_attempted,
        total_correct=total_correct,
        total_incorrect=sum(r.incorrect for r in sectional_results),
        total_unattempted=sum(r.unattempted for r in sectional_results),
        time_taken=config.total_duration - session.time_remaining,
        sectional_results=sectional_results,
        analysis=analyze(config, session, sectional_results),
    )


def analyze(
    config: ExamConfig,
    session: ExamSession,
    sectional_results: list[SectionalResult],
) -> PerformanceAnalysis:
    """Heuristic strengths, weaknesses and recommendations.

    Thresholds are fixed; callers that need different ones should post-process
    the result instead.
    """
    strengths: list[str] = []
    weaknesses: list[str] = []
    recommendations: list[str] = []

    for result in sectional_results:
        if result.accuracy >= STRONG_ACCURACY:
            strengths.append(f"Strong performance in {result.section_name}")
        elif result.accuracy < WEAK_ACCURACY:
            weaknesses.append(f"Needs improvement in {result.section_name}")
            recommendations.append(f"Focus more practice on {result.section_name} topics")

    time_management = _time_analysis(config, session)
    visited = [a for a in session.answers if a.visit_count > 0]
    if visited and config.total_questions:
        expected = config.total_duration / config.total_questions
        average = time_management.average_time_per_question
        if average > expected * SLOW_PACE_RATIO:
            weaknesses.append("Time management needs improvement")
            recommendations.append("Practice solving questions within time limits")
        elif average < expected * FAST_PACE_RATIO:
            strengths.append("Good time management")

    questions = {q.id: q for q in config.questions}
    return PerformanceAnalysis(
        strengths=strengths,
        weaknesses=weaknesses,
        recommendations=recommendations,
        topic_wise_analysis=_topic_analysis(questions, session.answers),
        difficulty_analysis=_difficulty_analysis(questions, session.answers),
        time_management=time_management,
    )


def _time_analysis(config: ExamConfig, session: ExamSession) -> TimeAnalysis:
    times = [a.time_spent for a in session.answers if a.visit_count > 0]
    average = sum(times) / len(times) if times else 0.0
    expected = config.total_duration / config.total_questions if config.total_questions else 0.0

    return TimeAnalysis(
        total_time=config.total_duration - session.time_remaining,
        average_time_per_question=average,
        fastest_question=min(times, default=0),
        slowest_question=max(times, default=0),
        time_distribution=[a.time_spent for a in session.answers],
        efficiency=Efficiency.GOOD if average <= expected else Efficiency.NEEDS_IMPROVEMENT,
    )


def _topic_analysis(
    questions: dict[str, Question],
    answers: tuple[AnswerRecord, ...],
) -> list[TopicAnalysis]:
    stats: dict[str, dict[str, int]] = {}
    for record in answers:
        question = questions.get(record.question_id)
        if question is None:
            continue
        topic = stats.setdefault(
            question.topic, {"attempted": 0, "correct": 0, "time": 0, "visited": 0}
        )
        if record.visit_count > 0:
            topic["visited"] += 1
            topic["time"] += record.time_spent
        if record.selected_answer is not None:
            topic["attempted"] += 1
            if record.selected_answer == question.correct_answer:
                topic["correct"] += 1

    analysis = []
    for name, topic in stats.items():
        accuracy = _accuracy(topic["correct"], topic["attempted"])
        if topic["attempted"] == 0:
            recommendation = f"Attempt {name} questions to gauge your level"
        elif accuracy >= STRONG_ACCURACY:
            recommendation = f"Keep revising {name} to stay sharp"
        elif accuracy < WEAK_ACCURACY:
            recommendation = f"Revisit the fundamentals of {name}"
        else:
            recommendation = f"Practice more {name} questions to build consistency"

        analysis.append(TopicAnalysis(
            topic=name,
            attempted=topic["attempted"],
            correct=topic["correct"],
            accuracy=accuracy,
            average_time=topic["time"] / topic["visited"] if topic["visited"] else 0.0,
            recommendation=recommendation,
        ))
    return analysis


def _difficulty_analysis(
    questions: dict[str, Question],
    answers: tuple[AnswerRecord, ...],
) -> DifficultyAnalysis:
    counts = {d: [0, 0] for d in Difficulty}  # difficulty -> [attempted, correct]
    for record in answers:
        question = questions.get(record.question_id)
        if question is None or record.selected_answer is None:
            continue
        counts[question.difficulty][0] += 1
        if record.selected_answer == question.correct_answer:
            counts[question.difficulty][1] += 1

    buckets = {
        d.value: DifficultyBucket(attempted=a, correct=c, accuracy=_accuracy(c, a))
        for d, (a, c) in counts.items()
    }
    return DifficultyAnalysis(**buckets)
