from fastapi import APIRouter, Depends, HTTPException, Query
from quizbuilder.database import get_db
from quizbuilder.models.quiz import QuizDraft
from quizbuilder.utils.auth_utils import CurrentUser, get_current_user, require_author
from quizbuilder.utils.quiz_access import available_prerequisite_videos
from quizbuilder.utils.quiz_validator import QuizValidationError, check_quiz, prepare_quiz_for_save
from quizbuilder.utils.time_utils import now
from typing import List, Optional
import logging
import random

router = APIRouter()

ANSWER_KEY_FIELDS = ("correct_answer", "matrix_correct_answers", "ranking_correct_order",
                     "explanation", "rationale_video_url")

def load_quiz(db, quiz_id: str) -> dict:
    record = db.entity("Quiz").get(quiz_id)
    if not record:
        raise HTTPException(status_code=404, detail="Quiz not found")
    return record

def course_module_ids(db, course_id: Optional[str]) -> List[str]:
    if not course_id:
        return []
    return [module["id"] for module in db.entity("Module").filter({"course_id": course_id})]

def course_video_ids(db, course_id: Optional[str]) -> List[str]:
    if not course_id:
        return []
    return [video["id"] for video in db.entity("Video").filter({"course_id": course_id})]

def prepare_for_save(db, quiz_data: QuizDraft) -> dict:
    """Validate against the course's modules and videos; return the document to store"""
    video_ids = course_video_ids(db, quiz_data.course_id) if quiz_data.requires_video_completion else None
    prepared = prepare_quiz_for_save(quiz_data, course_module_ids(db, quiz_data.course_id), video_ids)
    return prepared.to_record()

def student_view(record: dict) -> dict:
    """Quiz as shown to learners: no answer keys, explanations or remediation videos"""
    quiz = {key: value for key, value in record.items() if key != "rationale_video_url"}
    questions = []
    for question in record.get("questions") or []:
        visible = {key: value for key, value in question.items() if key not in ANSWER_KEY_FIELDS}
        if question.get("question_type") == "ranking":
            # options are stored in the correct order
            items = [{"index": i, "text": text} for i, text in enumerate(visible.pop("options", []))]
            random.shuffle(items)
            visible["ranking_items"] = items
        questions.append(visible)
    quiz["questions"] = questions
    return quiz

@router.post("/validate")
async def validate_quiz_draft(quiz_data: QuizDraft, current_user: CurrentUser = Depends(require_author), db=Depends(get_db)):
    """Check a draft without saving it"""
    try:
        video_ids = course_video_ids(db, quiz_data.course_id) if quiz_data.requires_video_completion else None
        error = check_quiz(quiz_data, course_module_ids(db, quiz_data.course_id), video_ids)
        return {"valid": error is None, "error": error}
    except Exception as e:
        raise HTTPException(status_code=400, detail=f"Failed to validate quiz: {str(e)}")

@router.post("/")
async def create_quiz(quiz_data: QuizDraft, current_user: CurrentUser = Depends(require_author), db=Depends(get_db)):
    """Create a new quiz"""
    try:
        record = prepare_for_save(db, quiz_data)
        record["created_by"] = current_user.id
        record["created_date"] = now().isoformat()
        created = db.entity("Quiz").create(record)
        logging.info(f"Quiz {created['id']} created by {current_user.id}")
        return created
    except QuizValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(status_code=400, detail=f"Failed to save quiz: {str(e)}")

@router.put("/{quiz_id}")
async def update_quiz(quiz_id: str, quiz_data: QuizDraft, current_user: CurrentUser = Depends(require_author), db=Depends(get_db)):
    """Replace a quiz document (last write wins)"""
    try:
        load_quiz(db, quiz_id)
        record = prepare_for_save(db, quiz_data)
        record["updated_date"] = now().isoformat()
        return db.entity("Quiz").update(quiz_id, record)
    except QuizValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(status_code=400, detail=f"Failed to save quiz: {str(e)}")

@router.get("/")
async def list_quizzes(
    course_id: Optional[str] = Query(None, description="Filter by course"),
    module_id: Optional[str] = Query(None, description="Filter by module"),
    current_user: CurrentUser = Depends(require_author),
    db=Depends(get_db)
):
    """List quizzes with the number of distinct students who attempted each"""
    try:
        filters = {}
        if course_id:
            filters["course_id"] = course_id
        if module_id:
            filters["module_id"] = module_id

        quizzes = db.entity("Quiz").filter(filters, sort="-created_date")

        students_by_quiz = {}
        for attempt in db.entity("QuizAttempt").list():
            students_by_quiz.setdefault(attempt.get("quiz_id"), set()).add(attempt.get("student_id"))

        for quiz in quizzes:
            quiz["student_count"] = len(students_by_quiz.get(quiz["id"], ()))
            quiz["question_count"] = len(quiz.get("questions") or [])

        return quizzes
    except Exception as e:
        raise HTTPException(status_code=400, detail=f"Failed to fetch quizzes: {str(e)}")

@router.get("/courses/{course_id}/prerequisite-videos")
async def get_prerequisite_videos(course_id: str, current_user: CurrentUser = Depends(require_author), db=Depends(get_db)):
    """Videos that may gate a quiz in this course"""
    try:
        videos = db.entity("Video").filter({"course_id": course_id})
        return available_prerequisite_videos(videos, course_id)
    except Exception as e:
        raise HTTPException(status_code=400, detail=f"Failed to fetch videos: {str(e)}")

@router.get("/{quiz_id}")
async def get_quiz(quiz_id: str, current_user: CurrentUser = Depends(get_current_user), db=Depends(get_db)):
    """Get a quiz; learners do not receive answer keys"""
    try:
        record = load_quiz(db, quiz_id)
        if current_user.is_author:
            return record
        return student_view(record)
    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(status_code=400, detail=f"Failed to get quiz: {str(e)}")

@router.delete("/{quiz_id}")
async def delete_quiz(quiz_id: str, current_user: CurrentUser = Depends(require_author), db=Depends(get_db)):
    """Delete a quiz"""
    try:
        load_quiz(db, quiz_id)
        db.entity("Quiz").delete(quiz_id)
        logging.info(f"Quiz {quiz_id} deleted by {current_user.id}")
        return {"message": "Quiz deleted", "quiz_id": quiz_id}
    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(status_code=400, detail=f"Failed to delete quiz: {str(e)}")
