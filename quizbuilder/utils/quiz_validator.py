"""
Save-time checks and normalisation for quiz drafts.

validate_quiz() stops at the first problem and reports it as a single
sentence for the author; the order of the checks decides which message is
shown. normalize_quiz() then produces the document that is persisted.
"""

from typing import Collection, Iterable, Optional
import re
from quizbuilder.models.quiz import QuizDraft
from quizbuilder.models.question import (
    QuestionBase,
    MultipleChoiceQuestion,
    MatrixQuestion,
    RankingQuestion,
)
from quizbuilder.utils.time_utils import parse_timestamp

TAG_PATTERN = re.compile(r"<[^>]*>")


class QuizValidationError(ValueError):
    """A quiz draft cannot be saved; str(error) is the message for the author"""


def _blank(value: Optional[str]) -> bool:
    return not value or not value.strip()


def has_question_text(question: QuestionBase) -> bool:
    # rich text editors leave markup such as '<p><br></p>' behind when cleared
    return not _blank(TAG_PATTERN.sub("", question.question or ""))


def _validate_multiple_choice(question: MultipleChoiceQuestion, number: int):
    options = question.options
    if len(options) < 2 or any(_blank(option) for option in options):
        raise QuizValidationError(f"Question {number} needs at least 2 non-empty answer options.")

    if not question.correct_answer:
        raise QuizValidationError(f"Question {number} needs at least one correct answer selected.")

    required = question.required_answers_count or 0
    if required > 0 and len(set(question.correct_answer)) != required:
        raise QuizValidationError(
            f"Question {number}: Please select exactly {required} correct answer(s) "
            f"as specified in 'Required Answers'."
        )

    if any(not 0 <= index < len(options) for index in question.correct_answer):
        raise QuizValidationError(f"Question {number}: a correct answer refers to an option that does not exist.")


def _validate_matrix(question: MatrixQuestion, number: int):
    rows = question.matrix_rows
    columns = question.matrix_columns
    if not rows or any(_blank(row) for row in rows):
        raise QuizValidationError(f"Question {number} needs at least one non-empty row label.")

    if len(columns) < 2 or any(_blank(column) for column in columns):
        raise QuizValidationError(f"Question {number} needs at least 2 non-empty column labels.")

    for row_index, label in enumerate(rows):
        if not question.matrix_correct_answers.get(row_index):
            raise QuizValidationError(
                f'Question {number}: Please select at least one correct answer for row "{label}".'
            )

    for row_index, selected in question.matrix_correct_answers.items():
        if not 0 <= row_index < len(rows):
            raise QuizValidationError(f"Question {number}: correct answers refer to a row that does not exist.")
        if any(not 0 <= column < len(columns) for column in selected):
            raise QuizValidationError(
                f'Question {number}: row "{rows[row_index]}" marks a column that does not exist.'
            )


def _validate_ranking(question: RankingQuestion, number: int):
    if len(question.options) < 2 or any(_blank(option) for option in question.options):
        raise QuizValidationError(f"Question {number} needs at least 2 non-empty items to rank.")


VARIANT_CHECKS = {
    "multiple_choice": _validate_multiple_choice,
    "matrix": _validate_matrix,
    "ranking": _validate_ranking,
}


def validate_question(question: QuestionBase, number: int):
    """Raise QuizValidationError for the first problem in one question (number is 1-based)"""
    if not has_question_text(question) and _blank(question.image_url):
        raise QuizValidationError(f"Question {number} is missing both question text and an image.")

    if not question.points or question.points < 1:
        raise QuizValidationError(f"Question {number} must have at least 1 point.")

    VARIANT_CHECKS[question.question_type](question, number)


def validate_quiz(
    quiz: QuizDraft,
    course_module_ids: Collection[str] = (),
    course_video_ids: Optional[Iterable[str]] = None,
):
    """Raise QuizValidationError describing the first reason the quiz cannot be saved.

    course_module_ids are the modules defined for quiz.course_id; a course
    that has any requires the quiz to sit in one of them. When
    course_video_ids is given, prerequisite videos must come from that set.
    """
    if _blank(quiz.title):
        raise QuizValidationError("Quiz title is required.")

    if not quiz.course_id:
        raise QuizValidationError("Please select a course for the quiz.")

    if course_module_ids and not quiz.module_id:
        raise QuizValidationError(
            "Please assign the quiz to a module within the selected course, "
            "or select a course without modules."
        )

    if not quiz.questions:
        raise QuizValidationError("Please add at least one question to the quiz.")

    for number, question in enumerate(quiz.questions, start=1):
        validate_question(question, number)

    if not _blank(quiz.start_date):
        try:
            parse_timestamp(quiz.start_date)
        except ValueError:
            raise QuizValidationError("Quiz start date must be a valid date and time.") from None

    if quiz.requires_video_completion and course_video_ids is not None:
        allowed = set(course_video_ids)
        if any(video_id not in allowed for video_id in quiz.prerequisite_video_ids or []):
            raise QuizValidationError("Prerequisite videos must belong to the quiz's course.")


def check_quiz(quiz: QuizDraft, course_module_ids: Collection[str] = (), course_video_ids=None) -> Optional[str]:
    """Return the validation message, or None when the quiz can be saved"""
    try:
        validate_quiz(quiz, course_module_ids, course_video_ids)
    except QuizValidationError as e:
        return str(e)
    return None


def _none_if_blank(value: Optional[str]) -> Optional[str]:
    return None if _blank(value) else value


def normalize_question(question: QuestionBase) -> QuestionBase:
    question = question.model_copy(deep=True)

    if isinstance(question, (MultipleChoiceQuestion, RankingQuestion)):
        question.options = [option for option in question.options if not _blank(option)]
    if isinstance(question, RankingQuestion):
        # TODO: confirm with content owners whether authors need to enter a
        # correct order separate from the display order of the items
        question.ranking_correct_order = list(range(len(question.options)))
    if isinstance(question, MatrixQuestion):
        question.matrix_rows = [row for row in question.matrix_rows if not _blank(row)]
        question.matrix_columns = [column for column in question.matrix_columns if not _blank(column)]

    question.rationale_video_url = _none_if_blank(question.rationale_video_url)
    question.image_url = _none_if_blank(question.image_url)
    return question


def normalize_quiz(quiz: QuizDraft) -> QuizDraft:
    """Copy of a validated quiz in the shape that gets persisted"""
    normalized = quiz.model_copy(deep=True)
    normalized.questions = [normalize_question(question) for question in quiz.questions]

    normalized.time_limit_minutes = normalized.time_limit_minutes or None
    normalized.passing_score = normalized.passing_score or None
    normalized.max_attempts = normalized.max_attempts or None

    if not normalized.prerequisite_video_ids or not normalized.requires_video_completion:
        normalized.prerequisite_video_ids = None

    normalized.rationale_video_url = _none_if_blank(normalized.rationale_video_url)
    normalized.start_date = _none_if_blank(normalized.start_date)
    return normalized


def prepare_quiz_for_save(quiz: QuizDraft, course_module_ids: Collection[str] = (), course_video_ids=None) -> QuizDraft:
    validate_quiz(quiz, course_module_ids, course_video_ids)
    return normalize_quiz(quiz)
