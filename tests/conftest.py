# tests/conftest.py

import os
import tempfile

# Settings are read at import time, so point them at throwaway locations first.
_TMP_DIR = tempfile.mkdtemp(prefix="cems-tests-")
os.environ["ENV"] = "local"
os.environ["DATABASE_URL_LOCAL"] = f"sqlite:///{os.path.join(_TMP_DIR, 'app.db')}"
os.environ["UPLOADS_DIR"] = os.path.join(_TMP_DIR, "uploads")
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["RESEND_API_KEY"] = ""

import pytest  # noqa: E402
from starlette.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402
from unittest.mock import MagicMock  # noqa: E402

from cems.main import app  # noqa: E402
from cems.api import deps  # noqa: E402
from cems.constants.status import UserRole  # noqa: E402
from cems.db.session import get_db  # noqa: E402
from cems.db.base_class import Base  # noqa: E402
from cems.schemas.token import TokenPayload  # noqa: E402
import cems.models  # noqa: E402,F401


# --- E2E Test Database Setup ---
# One in-memory database shared by every connection, rebuilt for each test.
engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(scope="function")
def db_session_e2e():
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    yield session
    session.close()
    Base.metadata.drop_all(bind=engine)


# --- Mock Dependencies Setup ---
def make_token(sub="usr_student1", role=UserRole.student) -> TokenPayload:
    return TokenPayload(sub=sub, role=role, exp=9999999999)


@pytest.fixture(scope="function")
def login_as():
    """
    Switches the authenticated caller for the test client:

        login_as(user.id, UserRole.organizer)
    """

    def _login(sub: str, role: UserRole = UserRole.student) -> TokenPayload:
        token = make_token(sub, role)
        app.dependency_overrides[deps.get_current_user] = lambda: token
        app.dependency_overrides[deps.get_current_user_optional] = lambda: token
        return token

    return _login


# --- Test Client Fixtures ---
@pytest.fixture(scope="function")
def test_client():
    """
    Provides a TestClient where the database and authentication are mocked.
    The default caller is a student; use `login_as` to switch.
    """
    token = make_token()
    app.dependency_overrides[get_db] = lambda: MagicMock()
    app.dependency_overrides[deps.get_current_user] = lambda: token
    app.dependency_overrides[deps.get_current_user_optional] = lambda: token

    with TestClient(app) as client:
        yield client

    app.dependency_overrides.clear()


@pytest.fixture(scope="function")
def test_client_e2e(db_session_e2e):
    """
    Provides a TestClient backed by the in-memory test database.
    Authentication is overridden per test with `login_as`.
    """

    def override_get_db_e2e():
        yield db_session_e2e

    app.dependency_overrides[get_db] = override_get_db_e2e

    with TestClient(app) as client:
        yield client

    app.dependency_overrides.clear()


@pytest.fixture(scope="function")
def anonymous_client():
    """A TestClient with no authentication override, for 401 checks."""
    app.dependency_overrides[get_db] = lambda: MagicMock()
    with TestClient(app) as client:
        yield client
    app.dependency_overrides.clear()
