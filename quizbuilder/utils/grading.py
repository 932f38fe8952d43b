from pydantic import BaseModel, Field
from typing import Any, List, Optional
import math
from quizbuilder.config import settings
from quizbuilder.models.quiz import QuizDraft
from quizbuilder.models.question import (
    QuestionBase,
    MultipleChoiceQuestion,
    MatrixQuestion,
    RankingQuestion,
)


class GradeResult(BaseModel):
    earned_points: int
    total_points: int
    score: int  # percentage, rounded half up
    passed: bool
    correct: List[bool] = Field(default_factory=list)


def _selected_columns(answer: Any, row: int, column_count: int) -> List[int]:
    """Columns picked for one row, ignoring indices past the last column"""
    if not isinstance(answer, dict):
        return []
    selected = answer.get(row, answer.get(str(row), []))
    if not isinstance(selected, list):
        return []
    return [column for column in selected if isinstance(column, int) and 0 <= column < column_count]


def is_answer_correct(question: QuestionBase, answer: Any) -> bool:
    """Whether a learner's answer earns the question's points (all or nothing)"""
    if isinstance(question, MultipleChoiceQuestion):
        chosen = answer if isinstance(answer, list) else []
        return set(chosen) == set(question.correct_answer) and len(chosen) == len(set(chosen))

    if isinstance(question, MatrixQuestion):
        for row in range(len(question.matrix_rows)):
            expected = set(question.matrix_correct_answers.get(row, []))
            if set(_selected_columns(answer, row, len(question.matrix_columns))) != expected:
                return False
        return True

    if isinstance(question, RankingQuestion):
        expected_order = question.ranking_correct_order
        if expected_order is None:
            expected_order = list(range(len(question.options)))
        return isinstance(answer, list) and list(answer) == list(expected_order)

    return False


def percentage(earned: int, total: int) -> int:
    if total <= 0:
        return 0
    return int(math.floor(earned * 100 / total + 0.5))


def passing_score_for(quiz: QuizDraft) -> int:
    return quiz.passing_score or settings.default_passing_score


def grade_attempt(quiz: QuizDraft, answers: List[Optional[Any]]) -> GradeResult:
    """Score answers given in question order; missing answers count as wrong"""
    earned = 0
    total = 0
    correct = []
    for index, question in enumerate(quiz.questions):
        points = question.points or 1
        total += points
        answer = answers[index] if index < len(answers) else None
        is_correct = answer is not None and is_answer_correct(question, answer)
        if is_correct:
            earned += points
        correct.append(is_correct)

    score = percentage(earned, total)
    return GradeResult(
        earned_points=earned,
        total_points=total,
        score=score,
        passed=score >= passing_score_for(quiz),
        correct=correct,
    )


def remarks_for_score(score: int, passing_score: Optional[int] = None) -> str:
    if passing_score is None:
        passing_score = settings.default_passing_score
    if score >= 95:
        return "Outstanding!"
    if score >= 85:
        return "Excellent Work!"
    if score >= 75:
        return "Great Job!"
    if score >= passing_score:
        return "Well Done!"
    if score >= 50:
        return "Keep Practicing"
    return "Need More Study"
