import io
import itertools

import pytest
from fastapi.testclient import TestClient
from reportlab.pdfgen import canvas
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from intern_portal.auth.services.auth_service import AuthService
from intern_portal.auth.services.token_service import TokenService
from intern_portal.config import Settings, get_settings
from intern_portal.create_tables import create_tables
from intern_portal.database import Base, get_db
from intern_portal.documents.services.lifecycle_service import DocumentLifecycleManager
from intern_portal.rate_limit.dependencies import get_rate_limiters
from intern_portal.rate_limit.limiter import RateLimiters
from intern_portal.storage import LocalBlobStorage, get_storage
from intern_portal.users.models import UserRole

TEST_SECRET = "test-secret-for-portal"
DEFAULT_PASSWORD = "secret123"

_emails = itertools.count(1)


def create_pdf_bytes(text="Documento de prueba"):
    buf = io.BytesIO()
    c = canvas.Canvas(buf)
    c.drawString(100, 750, text)
    c.save()
    buf.seek(0)
    return buf.read()


def auth_headers(token):
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    create_tables(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def settings(tmp_path):
    return Settings(
        _env_file=None,
        DATABASE_URL="sqlite://",
        JWT_SECRET=TEST_SECRET,
        UPLOAD_DIR=str(tmp_path / "uploads"),
        AUTH_RATE_MAX_ATTEMPTS=3,
        UPLOAD_RATE_MAX_UPLOADS=5,
    )


@pytest.fixture
def storage(settings):
    return LocalBlobStorage(settings.upload_path)


@pytest.fixture
def token_service():
    return TokenService(TEST_SECRET)


@pytest.fixture
def make_user(db):
    def _make(role=UserRole.INTERN, email=None, password=DEFAULT_PASSWORD, full_name=None):
        n = next(_emails)
        email = email or f"{role.value}{n}@example.com"
        full_name = full_name or f"{role.value.title()} User {n}"
        return AuthService.create_user(db, full_name, email, password, role)
    return _make


@pytest.fixture
def intern(make_user):
    return make_user(UserRole.INTERN, full_name="Ana Intern")


@pytest.fixture
def other_intern(make_user):
    return make_user(UserRole.INTERN, full_name="Otro Intern")


@pytest.fixture
def hr(make_user):
    return make_user(UserRole.HR)


@pytest.fixture
def admin(make_user):
    return make_user(UserRole.SUPER_ADMIN)


@pytest.fixture
def pdf_bytes():
    return create_pdf_bytes()


@pytest.fixture
def manager(db, storage):
    return DocumentLifecycleManager(db, storage)


@pytest.fixture
def rate_limiters(settings):
    return RateLimiters.from_settings(settings)


@pytest.fixture
def client(session_factory, settings, storage, rate_limiters):
    from intern_portal.main import app

    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_settings] = lambda: settings
    app.dependency_overrides[get_storage] = lambda: storage
    app.dependency_overrides[get_rate_limiters] = lambda: rate_limiters
    # No lifespan here; it targets the configured database.
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def token_for(token_service):
    def _token(user):
        return token_service.issue(user.id, user.email, user.role)
    return _token
