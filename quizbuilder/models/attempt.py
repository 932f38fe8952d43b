from pydantic import BaseModel, Field
from typing import Dict, List, Optional, Union

# multiple choice / ranking: option indices; matrix: row index -> column indices
Answer = Optional[Union[List[int], Dict[int, List[int]]]]


class SubmitAnswersRequest(BaseModel):
    answers: List[Answer] = Field(default_factory=list)  # one entry per question, in quiz order
    time_taken_minutes: Optional[int] = None


class QuizAttempt(BaseModel):
    student_id: str
    quiz_id: str
    answers: List[Answer]
    score: int  # percentage
    earned_points: int
    total_points: int
    passed: bool
    time_taken_minutes: Optional[int] = None
    attempt_number: int
    status: str = "completed"
    started_at: Optional[str] = None
    completed_at: str

    def __repr__(self):
        return f"<QuizAttempt(quiz_id={self.quiz_id}, student_id={self.student_id}, attempt={self.attempt_number})>"
