import os
import tempfile

# Configure the app before anything under theralink is imported
_db_dir = tempfile.mkdtemp(prefix="theralink-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_db_dir, 'test.db')}"
os.environ["FIREBASE_PROJECT_ID"] = "theralink-test"
os.environ["INTASEND_PUBLISHABLE_KEY"] = "ISPubKey_test_theralink"
os.environ["INTASEND_WEBHOOK_CHALLENGE"] = "test-challenge"
os.environ["STORAGE_PUBLIC_URL"] = "https://cdn.example.com"
os.environ["DB_LOG_SLOW_QUERIES"] = "false"

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from theralink.auth import (  # noqa: E402
    SessionContext,
    get_optional_session_context,
    get_session_context,
)
from theralink.database import Base, SessionLocal, engine  # noqa: E402
from theralink.main import app  # noqa: E402
from theralink.models import Profile, Therapist  # noqa: E402


@pytest.fixture
def db():
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db):
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def make_profile(db):
    counter = {"n": 0}

    def _make(role="client", **fields):
        counter["n"] += 1
        n = counter["n"]
        profile = Profile(
            firebase_uid=fields.pop("firebase_uid", f"uid-{role}-{n}"),
            email=fields.pop("email", f"{role}{n}@example.com"),
            full_name=fields.pop("full_name", f"{role.title()} {n}"),
            role=role,
            **fields,
        )
        db.add(profile)
        db.commit()
        db.refresh(profile)
        return profile

    return _make


@pytest.fixture
def make_therapist(db, make_profile):
    def _make(profile=None, **fields):
        profile = profile or make_profile("therapist", full_name=fields.pop("full_name", "Dr. Amani Otieno"))
        therapist = Therapist(id=profile.id, **fields)
        db.add(therapist)
        db.commit()
        db.refresh(therapist)
        return therapist

    return _make


@pytest.fixture
def login():
    """Sign a profile in by overriding the session-context dependencies"""

    def _login(profile):
        context = SessionContext.from_profile(profile)
        app.dependency_overrides[get_session_context] = lambda: context
        app.dependency_overrides[get_optional_session_context] = lambda: context
        return context

    yield _login
    app.dependency_overrides.pop(get_session_context, None)
    app.dependency_overrides.pop(get_optional_session_context, None)
