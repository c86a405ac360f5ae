"""
Pytest configuration and fixtures for Timeport tests.

Every test gets a fresh in-memory SQLite database with all tables created
from the ORM models, an organization to import into, and an ImportService
wired with its own lock manager so tests never share lock state.
"""

import pytest
from sqlalchemy import create_engine, func, select
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from timeport.db.models import Member, Organization, User
from timeport.db.session import init_db
from timeport.domain.imports.registry import ImporterRegistry
from timeport.domain.imports.service import ImportService, TransactionExecutor
from timeport.domain.imports.store import EntityStore
from timeport.utils.locks import ImportLockManager


@pytest.fixture
def engine():
    """
    In-memory SQLite engine shared across threads.

    StaticPool keeps a single connection so every session sees the same
    database; check_same_thread=False lets the concurrency tests run an
    import from a worker thread.
    """
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


@pytest.fixture
def organization(session_factory):
    with session_factory() as session, session.begin():
        organization = Organization(name="Acme Time")
        session.add(organization)
    return organization


@pytest.fixture
def other_organization(session_factory):
    with session_factory() as session, session.begin():
        organization = Organization(name="Other Org")
        session.add(organization)
    return organization


@pytest.fixture
def store(session_factory):
    session = session_factory()
    yield EntityStore(session)
    session.close()


@pytest.fixture
def lock_manager():
    return ImportLockManager(wait_seconds=0)


@pytest.fixture
def registry():
    return ImporterRegistry()


@pytest.fixture
def import_service(registry, session_factory, lock_manager):
    return ImportService(registry, TransactionExecutor(session_factory), lock_manager)


@pytest.fixture
def count_rows(session_factory):
    """Count committed rows of a model, optionally filtered by column values."""

    def _count(model, **filters):
        with session_factory() as session:
            statement = select(func.count()).select_from(model)
            for column, value in filters.items():
                statement = statement.where(getattr(model, column) == value)
            return session.execute(statement).scalar_one()

    return _count


@pytest.fixture
def add_member_user(session_factory):
    """Create a user that already belongs to an organization."""

    def _add(organization, email, name="Existing User"):
        with session_factory() as session, session.begin():
            user = User(name=name, email=email, timezone="UTC", is_placeholder=False)
            session.add(user)
            session.flush()
            session.add(Member(organization_id=organization.id, user_id=user.id, role="employee"))
        return user

    return _add
