import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from app.database import Base, enable_sqlite_foreign_keys, get_db
from app.main import app
from app.models.user import Profile, UserRole
from app.services.auth_service import hash_password

TEST_DB_URL = "sqlite:///./test_encuestas.db"
TEST_PASSWORD = "secret123"

engine = create_engine(TEST_DB_URL, connect_args={"check_same_thread": False})
enable_sqlite_foreign_keys(engine)
TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def override_get_db():
    db = TestingSession()
    try:
        yield db
    finally:
        db.close()


app.dependency_overrides[get_db] = override_get_db


@pytest.fixture(autouse=True)
def setup_db():
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db():
    db = TestingSession()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def seed_users(db):
    users = {
        "administrator": _make_user("admin@test.dev", "Admin", "administrator"),
        "surveyor": _make_user("surveyor@test.dev", "Surveyor", "surveyor"),
        "surveyor2": _make_user("surveyor2@test.dev", "Other Surveyor", "surveyor"),
        "respondent": _make_user("user1@test.dev", "Respondent", "respondent"),
        "respondent2": _make_user("user2@test.dev", "Respondent Two", "respondent"),
    }
    for u in users.values():
        db.add(u)
    db.commit()
    for u in users.values():
        db.refresh(u)
    return users


def _make_user(email: str, name: str, role: str) -> Profile:
    user = Profile(email=email, full_name=name, password_hash=hash_password(TEST_PASSWORD))
    user.role_row = UserRole(role=role)
    return user


def get_token(client, email: str) -> str:
    resp = client.post("/api/auth/login", json={"email": email, "password": TEST_PASSWORD})
    assert resp.status_code == 200, resp.text
    return resp.json()["access_token"]


def auth_headers(client, email: str) -> dict:
    return {"Authorization": f"Bearer {get_token(client, email)}"}


def create_survey(client, headers, *, title="테스트 설문", is_published=True, questions=None) -> dict:
    payload = {
        "title": title,
        "description": "desc",
        "is_published": is_published,
        "questions": questions
        if questions is not None
        else [
            {"question_text": "자유 의견", "question_type": "text"},
            {"question_text": "만족도", "question_type": "scale"},
        ],
    }
    resp = client.post("/api/surveys", json=payload, headers=headers)
    assert resp.status_code == 200, resp.text
    survey = resp.json()
    detail = client.get(f"/api/surveys/{survey['survey_id']}/edit", headers=headers)
    assert detail.status_code == 200, detail.text
    return detail.json()
