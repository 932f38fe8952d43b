from .question import (
    Question,
    QuestionType,
    MultipleChoiceQuestion,
    MatrixQuestion,
    RankingQuestion,
    new_question,
)
from .quiz import QuizDraft
from .attempt import QuizAttempt, SubmitAnswersRequest

__all__ = [
    "Question",
    "QuestionType",
    "MultipleChoiceQuestion",
    "MatrixQuestion",
    "RankingQuestion",
    "new_question",
    "QuizDraft",
    "QuizAttempt",
    "SubmitAnswersRequest",
]
