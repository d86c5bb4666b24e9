# tests/conftest.py
import os
from datetime import datetime, timedelta
from typing import Optional

# Settings are read at import time; point them at a local database before anything imports config
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///./analytics-test.db")
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("JWT_SECRET_KEY", "analytics-test-secret-key-0123456789abcdef")

import pytest
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine

from core.cache import TTLCache
from core.database import init_db
from models.tracker import (
    Comment, Project, ProjectMember, Ticket, TicketPriority, TicketStatus, TicketType, User, UserRole,
)
from services.analytics_engine import AIAnalyticsEngine

# Thursday, mid-month, mid-quarter
NOW = datetime(2024, 6, 20, 12, 0)


class FakeClock:
    """Monotonic clock the tests advance by hand"""

    def __init__(self, start: float = 1000.0):
        self.current = start

    def __call__(self) -> float:
        return self.current

    def advance(self, seconds: float):
        self.current += seconds


class TrackerFactory:
    """Creates committed tracker rows with sensible defaults"""

    def __init__(self, session):
        self.session = session
        self._users = 0

    async def _save(self, obj):
        self.session.add(obj)
        await self.session.commit()
        return obj

    async def user(self, name: Optional[str] = None, role: UserRole = UserRole.MEMBER,
                   email: Optional[str] = None) -> User:
        self._users += 1
        name = name or f"User {self._users}"
        email = email or f"{name.lower().replace(' ', '.')}@example.com"
        return await self._save(User(name=name, email=email, role=role, created_at=NOW - timedelta(days=90)))

    async def project(self, owner: User, name: str = "Project", status: str = "Active",
                      priority: str = "Medium", created_at: Optional[datetime] = None) -> Project:
        return await self._save(Project(
            name=name,
            description=f"{name} description",
            owner_id=owner.id,
            status=status,
            priority=priority,
            created_at=created_at or NOW - timedelta(days=60),
        ))

    async def member(self, project: Project, user: Optional[User] = None,
                     name: Optional[str] = None, email: Optional[str] = None) -> ProjectMember:
        return await self._save(ProjectMember(project_id=project.id, user_id=user.id if user else None,
                                              name=name, email=email))

    async def ticket(self, project: Project, reporter: User, assignee: Optional[User] = None,
                     status: TicketStatus = TicketStatus.OPEN,
                     priority: TicketPriority = TicketPriority.MEDIUM,
                     ticket_type: TicketType = TicketType.BUG,
                     created_at: Optional[datetime] = None,
                     resolved_at: Optional[datetime] = None) -> Ticket:
        created_at = created_at or NOW - timedelta(hours=1)
        if resolved_at is None and status == TicketStatus.RESOLVED:
            resolved_at = created_at + timedelta(days=1)
        return await self._save(Ticket(
            title="Ticket",
            description="Something is broken",
            type=ticket_type,
            status=status,
            priority=priority,
            project_id=project.id,
            assigned_to_id=assignee.id if assignee else None,
            reported_by_id=reporter.id,
            created_at=created_at,
            resolved_at=resolved_at,
            updated_at=resolved_at or created_at,
        ))

    async def comment(self, ticket: Ticket, author: User, content: str = "Looking into it") -> Comment:
        return await self._save(Comment(ticket_id=ticket.id, author_id=author.id, content=content))


@pytest.fixture
async def db_engine(tmp_path):
    # File-backed so that concurrent analyzer sessions see the same data
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'analytics.db'}")
    await init_db(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return async_sessionmaker(db_engine, expire_on_commit=False)


@pytest.fixture
async def session(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def factory(session):
    return TrackerFactory(session)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def analytics_engine(session_factory, clock):
    return AIAnalyticsEngine(session_factory, cache=TTLCache(ttl_seconds=300, clock=clock), now=lambda: NOW)


@pytest.fixture
async def demo_data(session):
    """The demo dataset, seeded an hour before NOW so no ticket sits on a window boundary"""
    from scripts.init_db import seed_demo_data

    await seed_demo_data(session, now=NOW - timedelta(hours=1))
