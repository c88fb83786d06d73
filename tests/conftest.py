"""Pytest fixtures for shopdesk tests."""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.pool import StaticPool

from shopdesk.api.app import create_app
from shopdesk.config import Settings
from shopdesk.database import Database
from shopdesk.models import Client, EditingProject, User, UserRole
from shopdesk.services.order_service import AssignmentDraft, OrderDraft

# In-memory SQLite shared by every session of a test through one pooled connection
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

SHOP = "Studio One"
OTHER_SHOP = "Studio Two"


@pytest.fixture
def settings() -> Settings:
    """Settings for an app that never touches a real server database."""
    return Settings(
        database_url=TEST_DATABASE_URL,
        app_version="test",
        host="127.0.0.1",
        port=5000,
        debug=False,
        log_level="WARNING",
        cors_origins=("*",),
        auto_create_schema=False,
    )


@pytest_asyncio.fixture
async def database() -> AsyncGenerator[Database, None]:
    """Fresh schema per test."""
    db = Database(
        TEST_DATABASE_URL,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    await db.create_all()
    yield db
    await db.dispose()


@pytest_asyncio.fixture
async def session(database: Database) -> AsyncGenerator[AsyncSession, None]:
    """Create a database session for each test."""
    async with database.session() as session:
        yield session


@pytest_asyncio.fixture
async def client(settings: Settings, database: Database) -> AsyncGenerator[AsyncClient, None]:
    """Create async HTTP client for API testing."""
    app = create_app(settings=settings, database=database)
    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


async def make_user(
    session: AsyncSession,
    first_name: str,
    role: str = UserRole.WORKER.value,
    shop_name: str = SHOP,
    external_uid: str | None = None,
) -> User:
    user = User(
        first_name=first_name,
        last_name="Test",
        email=f"{first_name.lower()}@example.com",
        shop_name=shop_name,
        role=role,
        external_uid=external_uid,
    )
    session.add(user)
    await session.commit()
    return user


async def make_client(session: AsyncSession, name: str = "Acme Events", shop_name: str = SHOP) -> Client:
    shop_client = Client(name=name, shop_name=shop_name, email="", payment_history=[])
    session.add(shop_client)
    await session.commit()
    return shop_client


async def make_project(
    session: AsyncSession,
    shop_client: Client,
    editor: User,
    total: str = "1000",
    received: str = "0",
    pct: str = "15",
    end_date: date | None = None,
    status: str = "pending",
) -> EditingProject:
    project = EditingProject(
        shop_name=shop_client.shop_name,
        client_id=shop_client.client_id,
        client=shop_client,
        client_name=shop_client.name,
        editor_id=editor.user_id,
        editor=editor,
        project_name="Wedding highlights",
        description="Ten minute highlight reel",
        total_amount=Decimal(total),
        received_payment=Decimal(received),
        commission_percentage=Decimal(pct),
        start_date=date(2024, 1, 1),
        end_date=end_date or date(2024, 2, 1),
        status=status,
    )
    session.add(project)
    await session.commit()
    return project


def order_draft(
    shop_client: Client,
    total: str = "500",
    received: str = "200",
    workers: list[tuple[User, str]] | None = None,
    transporters: list[tuple[User, str]] | None = None,
    order_date: date | None = None,
) -> OrderDraft:
    return OrderDraft(
        client_id=shop_client.client_id,
        order_name="Stage setup",
        venue_place="City Hall",
        description="Stage and lighting",
        total_amount=Decimal(total),
        received_payment=Decimal(received),
        shop_name=shop_client.shop_name,
        order_date=order_date or date(2024, 3, 1),
        workers=[AssignmentDraft(user_id=u.user_id, payment=Decimal(p)) for u, p in workers or []],
        transporters=[
            AssignmentDraft(user_id=u.user_id, payment=Decimal(p)) for u, p in transporters or []
        ],
    )


@pytest_asyncio.fixture
async def owner(session: AsyncSession) -> User:
    return await make_user(session, "Olivia", role=UserRole.OWNER.value)


@pytest_asyncio.fixture
async def worker(session: AsyncSession) -> User:
    return await make_user(session, "Wendy", external_uid="firebase-wendy")


@pytest_asyncio.fixture
async def second_worker(session: AsyncSession) -> User:
    return await make_user(session, "Walter")


@pytest_asyncio.fixture
async def transporter(session: AsyncSession) -> User:
    return await make_user(session, "Tariq", role=UserRole.TRANSPORTER.value)


@pytest_asyncio.fixture
async def editor(session: AsyncSession) -> User:
    return await make_user(session, "Eddie", role=UserRole.EDITOR.value)


@pytest_asyncio.fixture
async def shop_client(session: AsyncSession) -> Client:
    return await make_client(session)
