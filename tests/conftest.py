import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key")

import datetime

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from campusconnect import auth, database, models
from campusconnect.main import app

engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

PASSWORD = "password123"
PASSWORD_HASH = auth.get_password_hash(PASSWORD)

FUTURE_DATE = datetime.date.today() + datetime.timedelta(days=7)


@pytest.fixture
def db():
    database.Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        database.Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db):
    def override_get_db():
        session = TestingSessionLocal()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[database.get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def make_user(db):
    def _make_user(email, role="student", name=None, department="Computer Science", is_active=True):
        user = models.User(
            name=name or email.split("@")[0].title(),
            email=email,
            password=PASSWORD_HASH,
            student_id=email.split("@")[0].upper(),
            department=department,
            role=role,
            is_active=is_active,
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user
    return _make_user


@pytest.fixture
def student(make_user):
    return make_user("riya@campus.edu", name="Riya Sharma")


@pytest.fixture
def other_student(make_user):
    return make_user("kabir@campus.edu", name="Kabir Mehta")


@pytest.fixture
def admin(make_user):
    return make_user("mehak@campus.edu", role="admin", name="Mehak M", department="Administration")


@pytest.fixture
def faculty(make_user):
    return make_user("prof.rao@campus.edu", role="faculty", name="Prof. Rao")


@pytest.fixture
def room(db):
    room = models.Room(
        building="A Block",
        room_number="401",
        capacity=120,
        location="Academic Building A",
        amenities=["Projector", "WiFi"],
    )
    db.add(room)
    db.commit()
    db.refresh(room)
    return room


def auth_headers(user):
    token = auth.create_access_token({"sub": user.email, "role": user.role})
    return {"Authorization": f"Bearer {token}"}
