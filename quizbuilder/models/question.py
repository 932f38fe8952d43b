from pydantic import BaseModel, Field
from typing import Annotated, Dict, List, Literal, Optional, Union
from enum import Enum


class QuestionType(str, Enum):
    MULTIPLE_CHOICE = "multiple_choice"
    MATRIX = "matrix"
    RANKING = "ranking"


class QuestionBase(BaseModel):
    """Fields shared by every question variant.

    Drafts are held while still incomplete, so nothing here is constrained
    beyond its type; the save validator enforces the structural rules.
    """
    question: str = ""
    image_url: Optional[str] = None
    points: int = 1
    explanation: Optional[str] = None
    rationale_video_url: Optional[str] = None


class MultipleChoiceQuestion(QuestionBase):
    question_type: Literal["multiple_choice"] = "multiple_choice"
    options: List[str] = Field(default_factory=lambda: ["", ""])
    correct_answer: List[int] = Field(default_factory=list)
    # 0 means any number of correct answers is accepted
    required_answers_count: Optional[int] = 1


class MatrixQuestion(QuestionBase):
    question_type: Literal["matrix"] = "matrix"
    matrix_rows: List[str] = Field(default_factory=lambda: [""])
    matrix_columns: List[str] = Field(default_factory=lambda: ["", ""])
    # row index -> column indices marked correct for that row
    matrix_correct_answers: Dict[int, List[int]] = Field(default_factory=dict)


class RankingQuestion(QuestionBase):
    question_type: Literal["ranking"] = "ranking"
    # authored in the correct order
    options: List[str] = Field(default_factory=lambda: ["", ""])
    ranking_correct_order: Optional[List[int]] = None


Question = Annotated[
    Union[MultipleChoiceQuestion, MatrixQuestion, RankingQuestion],
    Field(discriminator="question_type"),
]

QUESTION_CLASSES = {
    QuestionType.MULTIPLE_CHOICE.value: MultipleChoiceQuestion,
    QuestionType.MATRIX.value: MatrixQuestion,
    QuestionType.RANKING.value: RankingQuestion,
}


def new_question(question_type: str) -> QuestionBase:
    """Blank question of the given variant"""
    try:
        question_class = QUESTION_CLASSES[QuestionType(question_type).value]
    except ValueError:
        raise ValueError(f"Unknown question type: {question_type}") from None
    return question_class()
