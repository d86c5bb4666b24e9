"""
Create the database tables and optionally load the demo dataset.

Usage:
    python -m scripts.init_db [--seed]
"""
import argparse
import asyncio
from datetime import datetime, timedelta
from typing import Optional
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from core.database import dispose_engine, get_session_factory, init_db
from models.tracker import Comment, Project, Ticket, TicketPriority, TicketStatus, TicketType, User, UserRole
from utils.logging import get_logger

logger = get_logger(__name__)

DEMO_TICKETS = 20
DEMO_RESOLVED = 15


def _demo_type(i: int) -> TicketType:
    if i % 4 == 0:
        return TicketType.FEATURE
    if i % 3 == 0:
        return TicketType.BUG
    return TicketType.IMPROVEMENT


def _demo_priority(i: int) -> TicketPriority:
    if i % 5 == 0:
        return TicketPriority.CRITICAL
    if i % 3 == 0:
        return TicketPriority.HIGH
    return TicketPriority.MEDIUM


async def seed_demo_data(session: AsyncSession, now: Optional[datetime] = None) -> int:
    """One ticket per day for the last 20 days, the newest 15 resolved two days after creation.

    Existing tickets are removed first. Returns the number of tickets created.
    """
    now = now or datetime.utcnow()

    user = (await session.execute(
        select(User).where(User.email == "admin@example.com")
    )).scalar_one_or_none()
    if user is None:
        user = User(name="Admin User", email="admin@example.com", role=UserRole.ADMIN)
        session.add(user)
        await session.flush()
        logger.info("Created sample user", email=user.email)

    project = (await session.execute(
        select(Project).where(Project.name == "Demo Project")
    )).scalar_one_or_none()
    if project is None:
        project = Project(
            name="Demo Project",
            description="Sample project for AI demo",
            owner_id=user.id,
            status="Active",
            priority="High",
        )
        session.add(project)
        await session.flush()
        logger.info("Created sample project", project_id=str(project.id))

    await session.execute(delete(Comment))
    await session.execute(delete(Ticket))

    for i in range(DEMO_TICKETS):
        created_at = now - timedelta(days=i)
        ticket = Ticket(
            title=f"Sample Ticket {i + 1}",
            description=f"This is sample ticket {i + 1} for AI demonstration",
            type=_demo_type(i),
            priority=_demo_priority(i),
            project_id=project.id,
            assigned_to_id=user.id,
            reported_by_id=user.id,
            created_at=created_at,
            updated_at=created_at,
        )
        if i < DEMO_RESOLVED:
            ticket.set_status(TicketStatus.RESOLVED, when=created_at + timedelta(days=2))
        session.add(ticket)

    await session.commit()
    logger.info("Created sample tickets", count=DEMO_TICKETS, resolved=DEMO_RESOLVED)
    return DEMO_TICKETS


async def main(seed: bool):
    try:
        await init_db()
        if seed:
            async with get_session_factory()() as session:
                await seed_demo_data(session)
    finally:
        await dispose_engine()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Initialize the analytics database")
    parser.add_argument("--seed", action="store_true", help="load the demo project and tickets")
    args = parser.parse_args()
    asyncio.run(main(args.seed))
