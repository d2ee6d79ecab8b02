"""Pytest fixtures for API testing."""
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from catalog.main import app
from catalog.core.database import get_db
from catalog.core.security import get_password_hash, create_access_token
from catalog.models.base import Base
from catalog.models.user import User
from catalog.schemas.application import ApplicationCreate
from catalog.services.application_gateway import ApplicationGateway

# In-memory SQLite for testing
SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@event.listens_for(engine, "connect")
def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    # ON DELETE CASCADE is ignored by SQLite unless enabled per connection
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def override_get_db():
    """Override database dependency for testing."""
    try:
        db = TestingSessionLocal()
        yield db
    finally:
        db.close()


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture(scope="function")
def db_session():
    """Create a fresh database for each test."""
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    yield db
    db.close()
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def client(db_session):
    """Test client with database override."""
    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


@pytest.fixture
def test_user(db_session):
    """Create a test user."""
    user = User(
        email="test@example.com",
        name="Test User",
        password_hash=get_password_hash("testpass123"),
        role="user",
    )
    db_session.add(user)
    db_session.commit()
    db_session.refresh(user)
    return user


@pytest.fixture
def admin_user(db_session):
    """Create an admin user."""
    user = User(
        email="admin@example.com",
        name="Admin User",
        password_hash=get_password_hash("admin123"),
        role="admin",
    )
    db_session.add(user)
    db_session.commit()
    db_session.refresh(user)
    return user


@pytest.fixture
def auth_headers(test_user):
    """Get authorization headers for test user."""
    token = create_access_token(data={"sub": test_user.email})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def admin_headers(admin_user):
    """Get authorization headers for admin user."""
    token = create_access_token(data={"sub": admin_user.email})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def gateway(db_session):
    return ApplicationGateway(db_session)


@pytest.fixture
def sample_applications(gateway):
    """Two stored applications: HR1 (Human Resources) and FN1 (Finance)."""
    hr = gateway.create_application(ApplicationCreate.model_validate({
        "appCode": "HR1",
        "name": "Employee Management System",
        "description": "Onboarding, payroll and performance reviews",
        "functionalDomains": ["Human Resources"],
        "technicalStack": ["React", "PostgreSQL"],
        "status": "Active",
        "relatedApps": {"functional": ["FN1"], "technical": ["ZZ9"]},
        "stakeholders": {"productOwner": "Sarah Johnson", "leadDeveloper": "Michael Brown"},
    }))
    fn = gateway.create_application(ApplicationCreate.model_validate({
        "appCode": "FN1",
        "name": "Financial Planning Tool",
        "description": "Budget planning and forecasting",
        "functionalDomains": ["Finance", "Analytics"],
        "technicalStack": ["Java", "Spring Boot"],
        "status": "Under Development",
        "stakeholders": {"productOwner": "Jennifer Martinez"},
    }))
    return {"HR1": hr, "FN1": fn}


@pytest.fixture
def session_factory(db_session):
    """Session factory bound to the per-test database, for code that opens its own sessions."""
    return TestingSessionLocal
