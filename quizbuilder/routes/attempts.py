from fastapi import APIRouter, Depends, HTTPException
from quizbuilder.database import get_db
from quizbuilder.models.attempt import QuizAttempt, SubmitAnswersRequest
from quizbuilder.models.quiz import QuizDraft
from quizbuilder.routes.quizzes import load_quiz
from quizbuilder.utils.auth_utils import CurrentUser, get_current_user
from quizbuilder.utils.grading import grade_attempt, passing_score_for, remarks_for_score
from quizbuilder.utils.quiz_access import QuizAccessError, check_quiz_access, ensure_quiz_access
from quizbuilder.utils.time_utils import now
from datetime import timedelta

router = APIRouter()

def completed_video_ids(db, student_id: str):
    progress = db.entity("StudentProgress").filter({"student_id": student_id, "progress_type": "video_completed"})
    return {entry["video_id"] for entry in progress if entry.get("video_id")}

def student_attempts(db, quiz_id: str, student_id: str):
    attempts = db.entity("QuizAttempt").filter({"quiz_id": quiz_id, "student_id": student_id})
    return sorted(attempts, key=lambda attempt: attempt.get("attempt_number", 0), reverse=True)

@router.get("/{quiz_id}/access")
async def get_quiz_access(quiz_id: str, current_user: CurrentUser = Depends(get_current_user), db=Depends(get_db)):
    """Whether the current learner can take the quiz now"""
    try:
        quiz = QuizDraft.model_validate(load_quiz(db, quiz_id))
        attempts = student_attempts(db, quiz_id, current_user.id)
        return check_quiz_access(quiz, completed_video_ids(db, current_user.id), len(attempts))
    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(status_code=400, detail=f"Failed to check quiz access: {str(e)}")

@router.post("/{quiz_id}/submit")
async def submit_quiz(quiz_id: str, answers_data: SubmitAnswersRequest, current_user: CurrentUser = Depends(get_current_user), db=Depends(get_db)):
    """Grade and record one attempt"""
    try:
        quiz = QuizDraft.model_validate(load_quiz(db, quiz_id))
        attempts = student_attempts(db, quiz_id, current_user.id)

        completed = completed_video_ids(db, current_user.id)
        try:
            ensure_quiz_access(quiz, completed, len(attempts))
        except QuizAccessError as e:
            raise HTTPException(status_code=400, detail=str(e))

        if len(answers_data.answers) > len(quiz.questions):
            raise HTTPException(
                status_code=400,
                detail=f"Expected at most {len(quiz.questions)} answers, got {len(answers_data.answers)}"
            )

        result = grade_attempt(quiz, answers_data.answers)
        current_time = now()
        started_at = None
        if answers_data.time_taken_minutes is not None:
            started_at = (current_time - timedelta(minutes=answers_data.time_taken_minutes)).isoformat()

        attempt = QuizAttempt(
            student_id=current_user.id,
            quiz_id=quiz_id,
            answers=answers_data.answers,
            score=result.score,
            earned_points=result.earned_points,
            total_points=result.total_points,
            passed=result.passed,
            time_taken_minutes=answers_data.time_taken_minutes,
            attempt_number=len(attempts) + 1,
            started_at=started_at,
            completed_at=current_time.isoformat()
        )
        db.entity("QuizAttempt").create(attempt.model_dump(mode="json"))

        db.entity("StudentProgress").create({
            "student_id": current_user.id,
            "course_id": quiz.course_id,
            "quiz_id": quiz_id,
            "progress_type": "quiz_completed",
            "completion_percentage": 100,
            "completed_at": current_time.isoformat()
        })

        access = check_quiz_access(quiz, completed, attempt.attempt_number, current_time)

        return {
            "score": result.score,
            "passed": result.passed,
            "passing_score": passing_score_for(quiz),
            "earned_points": result.earned_points,
            "total_points": result.total_points,
            "correct": result.correct,
            "remarks": remarks_for_score(result.score, passing_score_for(quiz)),
            "attempt_number": attempt.attempt_number,
            "attempts_remaining": access.attempts_remaining,
            "rationale_video_url": access.rationale_video_url,
            "submitted_at": attempt.completed_at
        }

    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(status_code=400, detail=f"Failed to submit quiz: {str(e)}")

@router.get("/{quiz_id}/attempts")
async def get_my_attempts(quiz_id: str, current_user: CurrentUser = Depends(get_current_user), db=Depends(get_db)):
    """Current learner's attempts, newest first"""
    try:
        load_quiz(db, quiz_id)
        attempts = student_attempts(db, quiz_id, current_user.id)
        best_score = max((attempt.get("score", 0) for attempt in attempts), default=0)
        return {
            "attempts": attempts,
            "total_attempts": len(attempts),
            "best_score": best_score
        }
    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(status_code=400, detail=f"Failed to fetch attempts: {str(e)}")
