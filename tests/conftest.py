import pytest
from httpx import AsyncClient, ASGITransport
from quizbuilder.main import app
from quizbuilder.database import MemoryDatabase, get_db
from quizbuilder.models.quiz import QuizDraft
from quizbuilder.models.question import MultipleChoiceQuestion, MatrixQuestion, RankingQuestion


@pytest.fixture
def memory_db():
    """Entity store seeded with one course that has a module and two videos"""
    db = MemoryDatabase()
    db.register_token(TestConfig.AUTHOR_TOKEN, {
        "id": "author-1",
        "email": TestConfig.AUTHOR_EMAIL,
        "metadata": {"role": "admin"}
    })
    db.register_token(TestConfig.STUDENT_TOKEN, {
        "id": "student-1",
        "email": TestConfig.STUDENT_EMAIL,
        "metadata": {"role": "student"}
    })
    db.insert("Module", {"id": "module-1", "course_id": "course-1", "title": "Pharmacology"})
    db.insert("Video", {"id": "video-1", "course_id": "course-1", "title": "Dosage calculations"})
    db.insert("Video", {"id": "video-2", "course_id": "course-1", "title": "Drug classes"})
    db.insert("Video", {"id": "video-9", "course_id": "course-2", "title": "Unrelated course"})
    return db


@pytest.fixture
async def client(memory_db):
    """Test client wired to the in-memory store"""
    app.dependency_overrides[get_db] = lambda: memory_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers():
    """Helper to create auth headers"""
    def _auth_headers(token: str):
        return {"Authorization": f"Bearer {token}"}
    return _auth_headers


@pytest.fixture
def author_headers(auth_headers):
    return auth_headers(TestConfig.AUTHOR_TOKEN)


@pytest.fixture
def student_headers(auth_headers):
    return auth_headers(TestConfig.STUDENT_TOKEN)


@pytest.fixture
def multiple_choice_question():
    return MultipleChoiceQuestion(
        question="<p>Which findings indicate digoxin toxicity?</p>",
        options=["Nausea", "Bradycardia", "Hypertension", "Visual halos"],
        correct_answer=[0, 1, 3],
        required_answers_count=3,
        points=2,
        explanation="GI upset, bradycardia and visual disturbances are classic signs."
    )


@pytest.fixture
def matrix_question():
    return MatrixQuestion(
        question="Classify each finding.",
        matrix_rows=["Fever", "Tachycardia"],
        matrix_columns=["Expected", "Requires follow-up"],
        matrix_correct_answers={0: [1], 1: [0, 1]}
    )


@pytest.fixture
def ranking_question():
    return RankingQuestion(
        question="Order the steps of hand hygiene.",
        options=["Wet hands", "Apply soap", "Scrub 20 seconds", "Rinse"]
    )


@pytest.fixture
def quiz_draft(multiple_choice_question, matrix_question, ranking_question):
    """A draft that passes every save check"""
    return QuizDraft(
        title="Pharmacology Check-in",
        description="Short review quiz",
        course_id="course-1",
        module_id="module-1",
        questions=[multiple_choice_question, matrix_question, ranking_question],
        time_limit_minutes=30,
        passing_score=60,
        max_attempts=3,
    )


@pytest.fixture
def quiz_data(quiz_draft):
    """The same draft as a request body"""
    return quiz_draft.model_dump(mode="json")


class TestConfig:
    """Test configuration constants"""
    AUTHOR_TOKEN = "author-token"
    STUDENT_TOKEN = "student-token"
    AUTHOR_EMAIL = "admin@nclexreview.test"
    STUDENT_EMAIL = "student@nclexreview.test"
    BASE_URL = "http://test"
