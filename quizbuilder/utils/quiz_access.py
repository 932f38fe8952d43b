from pydantic import BaseModel, Field
from datetime import datetime
from typing import Iterable, List, Optional
from quizbuilder.models.quiz import QuizDraft
from quizbuilder.utils.time_utils import now, parse_timestamp, format_time_for_display


class QuizAccessError(Exception):
    """A learner may not start or submit the quiz right now"""


class QuizAccess(BaseModel):
    can_access: bool
    reason: Optional[str] = None
    missing_video_ids: List[str] = Field(default_factory=list)
    attempts_taken: int = 0
    attempts_remaining: Optional[int] = None  # None: unlimited
    rationale_video_url: Optional[str] = None


def available_prerequisite_videos(videos: Iterable[dict], course_id: Optional[str]) -> List[dict]:
    """Videos an author may pick as prerequisites: only those of the quiz's course"""
    if not course_id:
        return []
    return [video for video in videos if video.get("course_id") == course_id]


def missing_prerequisites(quiz: QuizDraft, completed_video_ids: Iterable[str]) -> List[str]:
    if not quiz.requires_video_completion:
        return []
    completed = set(completed_video_ids)
    return [video_id for video_id in quiz.prerequisite_video_ids or [] if video_id not in completed]


def check_quiz_access(
    quiz: QuizDraft,
    completed_video_ids: Iterable[str] = (),
    attempts_taken: int = 0,
    current_time: Optional[datetime] = None,
) -> QuizAccess:
    """Decide whether a learner can take the quiz now.

    Checks run in order: start date, prerequisite videos, attempt limit.
    The quiz-level rationale video is only revealed once every attempt has
    been used.
    """
    current_time = current_time or now()
    max_attempts = quiz.max_attempts or 0
    remaining = max(0, max_attempts - attempts_taken) if max_attempts > 0 else None
    access = QuizAccess(can_access=True, attempts_taken=attempts_taken, attempts_remaining=remaining)

    if remaining == 0:
        access.rationale_video_url = quiz.rationale_video_url

    start = parse_timestamp(quiz.start_date)
    if start and current_time < start:
        access.can_access = False
        access.reason = f"This quiz opens on {format_time_for_display(start)}."
        return access

    missing = missing_prerequisites(quiz, completed_video_ids)
    if missing:
        access.can_access = False
        access.missing_video_ids = missing
        access.reason = "Complete the required videos before taking this quiz."
        return access

    if remaining == 0:
        access.can_access = False
        access.reason = f"You have used all {max_attempts} attempts for this quiz."

    return access


def ensure_quiz_access(quiz: QuizDraft, completed_video_ids: Iterable[str] = (), attempts_taken: int = 0,
                       current_time: Optional[datetime] = None) -> QuizAccess:
    access = check_quiz_access(quiz, completed_video_ids, attempts_taken, current_time)
    if not access.can_access:
        raise QuizAccessError(access.reason)
    return access
