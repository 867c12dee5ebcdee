"""
Shared fixtures: in-memory SQLite database, seeded tenancy rows, a recording
notification gateway and an HTTP client wired to all of them.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from types import SimpleNamespace

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import event, func
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, select

import app.models  # noqa: F401
from app.core.audit import DatabaseAuditRecorder
from app.core.config import Settings, get_settings
from app.core.database import get_session
from app.core.notifications import MembershipInvitationEmail, get_notification_gateway
from app.main import app as fastapi_app
from app.models.organization import Organization
from app.models.project import Project
from app.models.user import User
from app.repositories.memberships import SqlMembershipStore

ADMIN_API_KEY = "test-admin-key"


class RecordingNotificationGateway:
    """Collects invitation emails instead of sending them."""

    def __init__(self) -> None:
        self.sent: list[MembershipInvitationEmail] = []

    async def send_membership_invitation(self, email: MembershipInvitationEmail) -> None:
        self.sent.append(email)


async def count_rows(session: AsyncSession, model, *where) -> int:
    stmt = select(func.count()).select_from(model)
    if where:
        stmt = stmt.where(*where)
    result = await session.execute(stmt)
    return result.scalar_one()


# ---------------------------------------------------------------------------
# Database
# ---------------------------------------------------------------------------

@pytest.fixture
async def engine():
    eng = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    # Let SQLite honour SAVEPOINT: the driver must not manage transactions itself
    @event.listens_for(eng.sync_engine, "connect")
    def _disable_driver_transactions(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(eng.sync_engine, "begin")
    def _emit_begin(conn):
        conn.exec_driver_sql("BEGIN")

    async with eng.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    yield eng
    await eng.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def seeded(session_factory):
    """Two orgs, two users, and projects: live, soft-deleted, and foreign.

    Returns plain ids so tests never touch ORM instances from another session.
    """
    ids = SimpleNamespace(
        org_id=uuid.uuid4(),
        other_org_id=uuid.uuid4(),
        user_id=uuid.uuid4(),
        second_user_id=uuid.uuid4(),
        project_id=uuid.uuid4(),
        deleted_project_id=uuid.uuid4(),
        foreign_project_id=uuid.uuid4(),
        user_email="existing@x.com",
        user_name="Existing User",
        second_user_email="second@x.com",
        org_name="Org One",
    )
    async with session_factory() as session:
        session.add_all([
            Organization(id=ids.org_id, name=ids.org_name, slug="org-one"),
            Organization(id=ids.other_org_id, name="Org Two", slug="org-two"),
            User(id=ids.user_id, email=ids.user_email, name=ids.user_name),
            User(id=ids.second_user_id, email=ids.second_user_email, name="Second User"),
        ])
        await session.flush()
        session.add_all([
            Project(id=ids.project_id, org_id=ids.org_id, name="Live Project"),
            Project(
                id=ids.deleted_project_id,
                org_id=ids.org_id,
                name="Deleted Project",
                deleted_at=datetime.now(timezone.utc),
            ),
            Project(id=ids.foreign_project_id, org_id=ids.other_org_id, name="Other Org Project"),
        ])
        await session.commit()
    return ids


@pytest.fixture
async def session(session_factory, seeded):
    async with session_factory() as s:
        yield s


# ---------------------------------------------------------------------------
# Collaborators
# ---------------------------------------------------------------------------

@pytest.fixture
def test_settings():
    return Settings(
        admin_api_key=ADMIN_API_KEY,
        email_from_address="admin@orgadmin.test",
        environment="test",
        notification_webhook_url=None,
    )


@pytest.fixture
def notifier():
    return RecordingNotificationGateway()


@pytest.fixture
def store(session):
    return SqlMembershipStore(session)


@pytest.fixture
def audit(session):
    return DatabaseAuditRecorder(session)


# ---------------------------------------------------------------------------
# HTTP client
# ---------------------------------------------------------------------------

@pytest.fixture
def auth_headers():
    return {"Authorization": f"Bearer {ADMIN_API_KEY}"}


@pytest.fixture
async def client(session_factory, seeded, notifier, test_settings):
    async def _get_session():
        async with session_factory() as s:
            try:
                yield s
                await s.commit()
            except Exception:
                await s.rollback()
                raise

    fastapi_app.dependency_overrides[get_session] = _get_session
    fastapi_app.dependency_overrides[get_notification_gateway] = lambda: notifier
    fastapi_app.dependency_overrides[get_settings] = lambda: test_settings

    async with AsyncClient(
        transport=ASGITransport(app=fastapi_app), base_url="http://test"
    ) as ac:
        yield ac

    fastapi_app.dependency_overrides.clear()
