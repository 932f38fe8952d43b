"""
In-memory editing of a quiz draft's question list.

Every mutator is synchronous and touches nothing outside the draft. Requests
that would shrink a question below its structural minimum (2 options,
1 matrix row, 2 matrix columns) or that name an index that does not exist are
refused silently.
"""

from typing import List, Optional
from quizbuilder.models.question import (
    QuestionBase,
    QuestionType,
    MultipleChoiceQuestion,
    MatrixQuestion,
    new_question,
)

MIN_OPTIONS = 2
MIN_MATRIX_ROWS = 1
MIN_MATRIX_COLUMNS = 2

COMMON_FIELDS = ("question", "image_url", "points", "explanation", "rationale_video_url")


def shift_indices(indices: List[int], removed: int) -> List[int]:
    """Drop `removed` and close the gap it leaves"""
    return [i - 1 if i > removed else i for i in indices if i != removed]


class QuestionEditor:
    """Ordered questions of one draft plus the index currently focused (-1: none)"""

    def __init__(self, questions: Optional[List[QuestionBase]] = None):
        self.questions: List[QuestionBase] = list(questions or [])
        self.focused = 0 if self.questions else -1

    def _get(self, index: int) -> Optional[QuestionBase]:
        if 0 <= index < len(self.questions):
            return self.questions[index]
        return None

    # Question list

    def add_question(self, question_type: str = QuestionType.MULTIPLE_CHOICE.value) -> int:
        self.questions.append(new_question(question_type))
        self.focused = len(self.questions) - 1
        return self.focused

    def duplicate_question(self, index: int) -> int:
        question = self._get(index)
        if question is None:
            return self.focused
        self.questions.insert(index + 1, question.model_copy(deep=True))
        self.focused = index + 1
        return self.focused

    def remove_question(self, index: int) -> int:
        if self._get(index) is None:
            return self.focused
        del self.questions[index]
        if not self.questions:
            self.focused = -1
        elif self.focused == index:
            self.focused = max(0, index - 1)
        elif self.focused > index:
            self.focused -= 1
        return self.focused

    def move_question(self, from_index: int, to_index: int) -> int:
        if self._get(from_index) is None or self._get(to_index) is None:
            return self.focused
        moved = self.questions.pop(from_index)
        self.questions.insert(to_index, moved)
        self.focused = to_index
        return self.focused

    def move_up(self, index: int) -> int:
        return self.move_question(index, index - 1)

    def move_down(self, index: int) -> int:
        return self.move_question(index, index + 1)

    def change_question_type(self, index: int, new_type: str):
        question = self._get(index)
        if question is None or question.question_type == QuestionType(new_type).value:
            return
        replacement = new_question(new_type)
        for field in COMMON_FIELDS:
            setattr(replacement, field, getattr(question, field))
        # multiple choice and ranking both keep a plain option list
        if hasattr(question, "options") and hasattr(replacement, "options"):
            replacement.options = list(question.options)
        self.questions[index] = replacement

    def update_question(self, index: int, **fields):
        question = self._get(index)
        if question is None:
            return
        for field, value in fields.items():
            if field == "question_type":
                raise ValueError("Use change_question_type to switch variants")
            if field not in type(question).model_fields:
                raise ValueError(f"{question.question_type} questions have no field '{field}'")
            setattr(question, field, value)

    # Options (multiple choice and ranking)

    def set_option(self, index: int, option_index: int, value: str):
        question = self._get(index)
        if question is None or not hasattr(question, "options"):
            return
        if 0 <= option_index < len(question.options):
            question.options[option_index] = value

    def add_option(self, index: int):
        question = self._get(index)
        if question is None or not hasattr(question, "options"):
            return
        question.options.append("")

    def remove_option(self, index: int, option_index: int):
        question = self._get(index)
        if question is None or not hasattr(question, "options"):
            return
        if len(question.options) <= MIN_OPTIONS or not 0 <= option_index < len(question.options):
            return
        del question.options[option_index]
        if isinstance(question, MultipleChoiceQuestion):
            question.correct_answer = shift_indices(question.correct_answer, option_index)

    def toggle_correct_answer(self, index: int, option_index: int):
        question = self._get(index)
        if not isinstance(question, MultipleChoiceQuestion):
            return
        if not 0 <= option_index < len(question.options):
            return
        if option_index in question.correct_answer:
            question.correct_answer.remove(option_index)
        else:
            # required_answers_count is checked at save time, not here
            question.correct_answer.append(option_index)

    # Matrix

    def set_matrix_row(self, index: int, row: int, label: str):
        question = self._get(index)
        if isinstance(question, MatrixQuestion) and 0 <= row < len(question.matrix_rows):
            question.matrix_rows[row] = label

    def set_matrix_column(self, index: int, column: int, label: str):
        question = self._get(index)
        if isinstance(question, MatrixQuestion) and 0 <= column < len(question.matrix_columns):
            question.matrix_columns[column] = label

    def add_matrix_row(self, index: int):
        question = self._get(index)
        if isinstance(question, MatrixQuestion):
            question.matrix_rows.append("")

    def add_matrix_column(self, index: int):
        question = self._get(index)
        if isinstance(question, MatrixQuestion):
            question.matrix_columns.append("")

    def remove_matrix_row(self, index: int, row: int):
        question = self._get(index)
        if not isinstance(question, MatrixQuestion):
            return
        if len(question.matrix_rows) <= MIN_MATRIX_ROWS or not 0 <= row < len(question.matrix_rows):
            return
        del question.matrix_rows[row]
        answers = {}
        for key, columns in question.matrix_correct_answers.items():
            if key < row:
                answers[key] = columns
            elif key > row:
                answers[key - 1] = columns
        question.matrix_correct_answers = answers

    def remove_matrix_column(self, index: int, column: int):
        question = self._get(index)
        if not isinstance(question, MatrixQuestion):
            return
        if len(question.matrix_columns) <= MIN_MATRIX_COLUMNS or not 0 <= column < len(question.matrix_columns):
            return
        del question.matrix_columns[column]
        answers = {}
        for key, columns in question.matrix_correct_answers.items():
            remaining = shift_indices(columns, column)
            if remaining:
                answers[key] = remaining
        question.matrix_correct_answers = answers

    def toggle_matrix_cell(self, index: int, row: int, column: int, checked: bool):
        question = self._get(index)
        if not isinstance(question, MatrixQuestion):
            return
        if not (0 <= row < len(question.matrix_rows) and 0 <= column < len(question.matrix_columns)):
            return
        columns = list(question.matrix_correct_answers.get(row, []))
        if checked and column not in columns:
            columns.append(column)
        elif not checked and column in columns:
            columns.remove(column)
        question.matrix_correct_answers[row] = columns
