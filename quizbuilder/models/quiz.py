from pydantic import BaseModel, Field
from typing import List, Optional
from quizbuilder.config import settings
from quizbuilder.models.question import Question


class QuizDraft(BaseModel):
    """A quiz as authored; also the document stored in the Quiz entity"""
    id: Optional[str] = None
    title: str = ""
    description: Optional[str] = ""
    course_id: Optional[str] = None
    module_id: Optional[str] = None
    section_id: Optional[str] = None
    questions: List[Question] = Field(default_factory=list)  # display and answer order
    time_limit_minutes: Optional[int] = Field(None, ge=0)
    passing_score: Optional[int] = Field(None, ge=0, le=100)  # percentage
    max_attempts: Optional[int] = Field(None, ge=0)  # None or 0 means unlimited
    requires_video_completion: bool = False
    prerequisite_video_ids: Optional[List[str]] = None
    start_date: Optional[str] = None  # ISO timestamp
    rationale_video_url: Optional[str] = None  # shown once attempts are exhausted

    @classmethod
    def new(cls, course_id: Optional[str] = None, section_id: Optional[str] = None) -> "QuizDraft":
        """Blank draft with the authoring defaults"""
        return cls(
            course_id=course_id,
            section_id=section_id,
            time_limit_minutes=settings.default_time_limit_minutes,
            passing_score=settings.default_passing_score,
            max_attempts=3,
            requires_video_completion=False,
            prerequisite_video_ids=[],
        )

    def to_record(self) -> dict:
        """Document handed to the entity store"""
        record = self.model_dump(mode="json", exclude={"id"})
        for question in record["questions"]:
            if "matrix_correct_answers" in question:
                question["matrix_correct_answers"] = {
                    str(row): cols for row, cols in question["matrix_correct_answers"].items()
                }
        return record

    def __repr__(self):
        return f"<QuizDraft(id={self.id}, title={self.title}, questions={len(self.questions)})>"
