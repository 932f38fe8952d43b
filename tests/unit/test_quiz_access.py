import pytest
from datetime import datetime, timedelta
import pytz
from quizbuilder.utils.quiz_access import (
    QuizAccessError,
    available_prerequisite_videos,
    check_quiz_access,
    ensure_quiz_access,
)

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=pytz.UTC)


class TestQuizAccess:
    """Start date, prerequisite videos and attempt limits"""

    def test_open_quiz(self, quiz_draft):
        access = check_quiz_access(quiz_draft, [], 0, NOW)

        assert access.can_access is True
        assert access.attempts_remaining == 3
        assert access.rationale_video_url is None

    def test_not_open_before_start_date(self, quiz_draft):
        quiz_draft.start_date = (NOW + timedelta(days=1)).isoformat()

        access = check_quiz_access(quiz_draft, [], 0, NOW)

        assert access.can_access is False
        assert access.reason.startswith("This quiz opens on")

    def test_start_date_with_z_suffix(self, quiz_draft):
        quiz_draft.start_date = "2026-02-28T09:00:00Z"

        assert check_quiz_access(quiz_draft, [], 0, NOW).can_access is True

    def test_missing_prerequisite_videos(self, quiz_draft):
        quiz_draft.requires_video_completion = True
        quiz_draft.prerequisite_video_ids = ["video-1", "video-2"]

        access = check_quiz_access(quiz_draft, ["video-1"], 0, NOW)

        assert access.can_access is False
        assert access.missing_video_ids == ["video-2"]

    def test_prerequisites_ignored_when_gate_off(self, quiz_draft):
        quiz_draft.requires_video_completion = False
        quiz_draft.prerequisite_video_ids = ["video-1"]

        assert check_quiz_access(quiz_draft, [], 0, NOW).can_access is True

    def test_attempts_exhausted_reveals_rationale_video(self, quiz_draft):
        quiz_draft.rationale_video_url = "https://videos.test/rationale"

        access = check_quiz_access(quiz_draft, [], 3, NOW)

        assert access.can_access is False
        assert access.attempts_remaining == 0
        assert access.rationale_video_url == "https://videos.test/rationale"

    def test_unlimited_attempts(self, quiz_draft):
        quiz_draft.max_attempts = 0

        access = check_quiz_access(quiz_draft, [], 25, NOW)

        assert access.can_access is True
        assert access.attempts_remaining is None

    def test_ensure_raises_with_reason(self, quiz_draft):
        with pytest.raises(QuizAccessError) as exc_info:
            ensure_quiz_access(quiz_draft, [], 3, NOW)

        assert "3 attempts" in str(exc_info.value)


class TestPrerequisiteVideos:
    """Authors may only pick videos from the quiz's course"""

    def test_filters_by_course(self):
        videos = [
            {"id": "video-1", "course_id": "course-1"},
            {"id": "video-9", "course_id": "course-2"},
        ]

        assert available_prerequisite_videos(videos, "course-1") == [videos[0]]

    def test_no_course_selected(self):
        assert available_prerequisite_videos([{"id": "video-1", "course_id": "course-1"}], None) == []
