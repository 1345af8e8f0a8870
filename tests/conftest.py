"""
Pytest configuration and shared fixtures.

Provides a test application, database session, test client and helpers
that create principals, organizations, opportunities and bearer tokens.
Uses the ``testing`` configuration: an in-memory SQLite database whose
tables are created and dropped around every test, and an upload folder
under pytest's ``tmp_path``.
"""

import io

import pytest
from werkzeug.datastructures import FileStorage

from wematch import create_app
from wematch.access import AccessContext, RouteClass
from wematch.extensions import db as _db
from wematch.models.enums import Category, ExperienceLevel, OpportunityType, PaymentType, UserRole
from wematch.models.opportunity import Opportunity
from wematch.models.organization import Organization
from wematch.services import user_service
from wematch.services.auth_service import create_access_token

DEFAULT_PASSWORD = "correct-horse-battery"


@pytest.fixture(scope="function")
def app(tmp_path):
    """
    Create a Flask application configured for testing.

    Each test gets its own application and therefore its own in-memory
    database and upload folder.
    """
    app = create_app("testing")
    app.config["UPLOAD_FOLDER"] = str(tmp_path / "uploads")

    with app.app_context():
        _db.create_all()
        yield app
        _db.session.remove()
        _db.drop_all()


@pytest.fixture(scope="function")
def db_session(app):  # pylint: disable=redefined-outer-name,unused-argument
    """Provide the SQLAlchemy session bound to the test database."""
    yield _db.session


@pytest.fixture(scope="function")
def client(app):  # pylint: disable=redefined-outer-name
    """
    Provide a Flask test client for making HTTP requests.

    Usage in tests::

        def test_health(client):
            response = client.get("/health")
            assert response.status_code == 200
    """
    with app.test_client() as test_client:
        yield test_client


# -- Factories -------------------------------------------------------------


@pytest.fixture
def make_organization(db_session):  # pylint: disable=redefined-outer-name
    """Factory: ``make_organization(name="Acme")``."""

    def _make(name="Acme Foundation", **fields):
        organization = Organization(name=name, **fields)
        db_session.add(organization)
        db_session.commit()
        return organization

    return _make


@pytest.fixture
def make_user(db_session):  # pylint: disable=redefined-outer-name,unused-argument
    """Factory: ``make_user("a@b.org", role=UserRole.ORGANIZATION)``."""

    def _make(email, role=UserRole.USER, organization=None, password=DEFAULT_PASSWORD):
        return user_service.create_user(
            email=email,
            password=password,
            first_name=email.split("@")[0].title(),
            last_name="Tester",
            role=role,
            organization_id=organization.id if organization else None,
        )

    return _make


@pytest.fixture
def make_opportunity(db_session):  # pylint: disable=redefined-outer-name
    """
    Factory that inserts an opportunity directly, bypassing the service.

    Pass ``organization`` or ``user`` as the owner.
    """

    def _make(title="Backend Intern", organization=None, user=None, **fields):
        values = {
            "description": "Work on the matching API.",
            "category": Category.TECH,
            "opportunity_type": OpportunityType.INTERNSHIP,
            "experience_level": ExperienceLevel.ENTRY,
            "payment_type": PaymentType.PAID,
            "location": "Berlin",
        }
        values.update(fields)
        opportunity = Opportunity(
            title=title,
            organization_id=organization.id if organization else None,
            user_id=user.id if user else None,
            **values,
        )
        db_session.add(opportunity)
        db_session.commit()
        return opportunity

    return _make


# -- Principals ------------------------------------------------------------


@pytest.fixture
def organization(make_organization):  # pylint: disable=redefined-outer-name
    return make_organization("Acme Foundation")


@pytest.fixture
def admin(make_user, organization):  # pylint: disable=redefined-outer-name
    return make_user("admin@wematch.dev", UserRole.SUPER_ADMIN, organization)


@pytest.fixture
def org_user(make_user, organization):  # pylint: disable=redefined-outer-name
    return make_user("recruiter@acme.org", UserRole.ORGANIZATION, organization)


@pytest.fixture
def other_org_user(make_user):  # pylint: disable=redefined-outer-name
    return make_user("recruiter@globex.org", UserRole.ORGANIZATION)


@pytest.fixture
def regular_user(make_user):  # pylint: disable=redefined-outer-name
    return make_user("student@wematch.dev", UserRole.USER)


# -- Helpers ---------------------------------------------------------------


@pytest.fixture
def ctx_for():
    """Factory: the ``AccessContext`` a route of a given class would pass."""

    def _ctx(user, route=RouteClass.OWNER):
        return AccessContext.for_user(user, route)

    return _ctx


@pytest.fixture
def bearer(app):  # pylint: disable=redefined-outer-name,unused-argument
    """Factory: Authorization header with a fresh access token for a user."""

    def _headers(user) -> dict:
        return {"Authorization": f"Bearer {create_access_token(user)}"}

    return _headers


@pytest.fixture
def image_upload():
    """Factory: an in-memory upload as Werkzeug hands it to the views."""

    def _upload(filename="logo.png", content=b"\x89PNG\r\n\x1a\nfake"):
        return FileStorage(
            stream=io.BytesIO(content), filename=filename, content_type="image/png"
        )

    return _upload
