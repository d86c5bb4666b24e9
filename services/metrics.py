"""
Aggregation queries feeding the analytics engine
"""
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional
from sqlalchemy import select, func, case
from sqlalchemy.ext.asyncio import AsyncSession

from models.tracker import (
    Project, Ticket, User, TicketStatus, TicketPriority, OPEN_STATUSES, TEAM_ROLES,
)


@dataclass(frozen=True)
class TimeWindows:
    """Start instants of the fixed reporting windows"""
    now: datetime
    today: datetime
    week: datetime
    month: datetime
    last_month: datetime
    quarter: datetime

    @classmethod
    def from_now(cls, now: datetime) -> "TimeWindows":
        today = now.replace(hour=0, minute=0, second=0, microsecond=0)
        month = today.replace(day=1)
        if month.month == 1:
            last_month = month.replace(year=month.year - 1, month=12)
        else:
            last_month = month.replace(month=month.month - 1)
        quarter = month.replace(month=((month.month - 1) // 3) * 3 + 1)
        return cls(
            now=now,
            today=today,
            week=now - timedelta(days=7),
            month=month,
            last_month=last_month,
            quarter=quarter,
        )

    def as_periods(self) -> Dict[str, datetime]:
        return {
            "today": self.today,
            "week": self.week,
            "month": self.month,
            "lastMonth": self.last_month,
            "quarter": self.quarter,
        }


def _count_if(condition):
    return func.coalesce(func.sum(case((condition, 1), else_=0)), 0)


async def count_all_tickets(session: AsyncSession) -> int:
    """Total number of tickets in the system"""
    result = await session.execute(select(func.count(Ticket.id)))
    return result.scalar_one()


async def ticket_window_counts(session: AsyncSession, windows: TimeWindows) -> Dict[str, Dict[str, int]]:
    """Created, resolved and high-priority counts for every window in one pass"""
    created = Ticket.created_at
    resolved = (Ticket.status == TicketStatus.RESOLVED) & Ticket.resolved_at.is_not(None)
    high = Ticket.priority == TicketPriority.HIGH

    stmt = select(
        _count_if(created >= windows.today).label("tickets_today"),
        _count_if(created >= windows.week).label("tickets_week"),
        _count_if(created >= windows.month).label("tickets_month"),
        _count_if((created >= windows.last_month) & (created < windows.month)).label("tickets_last_month"),
        _count_if(created >= windows.quarter).label("tickets_quarter"),
        _count_if(resolved & (Ticket.resolved_at >= windows.today)).label("resolved_today"),
        _count_if(resolved & (Ticket.resolved_at >= windows.week)).label("resolved_week"),
        _count_if(resolved & (Ticket.resolved_at >= windows.month)).label("resolved_month"),
        _count_if(
            resolved & (Ticket.resolved_at >= windows.last_month) & (Ticket.resolved_at < windows.month)
        ).label("resolved_last_month"),
        _count_if(high & (created >= windows.today)).label("high_today"),
        _count_if(high & (created >= windows.week)).label("high_week"),
        _count_if(high & (created >= windows.month)).label("high_month"),
    )
    row = (await session.execute(stmt)).one()

    return {
        "tickets": {
            "today": int(row.tickets_today),
            "week": int(row.tickets_week),
            "month": int(row.tickets_month),
            "lastMonth": int(row.tickets_last_month),
            "quarter": int(row.tickets_quarter),
        },
        "resolved": {
            "today": int(row.resolved_today),
            "week": int(row.resolved_week),
            "month": int(row.resolved_month),
            "lastMonth": int(row.resolved_last_month),
        },
        "highPriority": {
            "today": int(row.high_today),
            "week": int(row.high_week),
            "month": int(row.high_month),
        },
    }


async def month_assignments(session: AsyncSession, since: datetime) -> List[Dict[str, Any]]:
    """Tickets created since a date joined to their assignee.

    Unassigned tickets and tickets whose assignee no longer exists are dropped
    by the inner join.
    """
    stmt = (
        select(
            User.id, User.name, User.email, User.role,
            Ticket.status, Ticket.created_at, Ticket.resolved_at,
        )
        .select_from(Ticket)
        .join(User, User.id == Ticket.assigned_to_id)
        .where(Ticket.created_at >= since)
    )
    rows = (await session.execute(stmt)).all()
    return [
        {
            "user_id": row.id,
            "name": row.name,
            "email": row.email,
            "role": row.role,
            "status": row.status,
            "created_at": row.created_at,
            "resolved_at": row.resolved_at,
        }
        for row in rows
    ]


async def project_ticket_rollup(session: AsyncSession) -> List[Dict[str, Any]]:
    """Every project with its ticket counts; projects without tickets report zeros"""
    stmt = (
        select(
            Project.id, Project.name, Project.status, Project.priority, Project.created_at,
            func.count(Ticket.id).label("ticket_count"),
            _count_if(Ticket.status.in_(OPEN_STATUSES)).label("open_tickets"),
            _count_if(Ticket.priority == TicketPriority.HIGH).label("high_priority_tickets"),
            _count_if(Ticket.status == TicketStatus.RESOLVED).label("resolved_tickets"),
        )
        .select_from(Project)
        .outerjoin(Ticket, Ticket.project_id == Project.id)
        .group_by(Project.id, Project.name, Project.status, Project.priority, Project.created_at)
        .order_by(Project.created_at, Project.name)
    )
    rows = (await session.execute(stmt)).all()
    return [
        {
            "id": str(row.id),
            "name": row.name,
            "status": row.status,
            "priority": row.priority,
            "createdAt": row.created_at.isoformat() if row.created_at else None,
            "ticketCount": int(row.ticket_count),
            "openTickets": int(row.open_tickets),
            "highPriorityTickets": int(row.high_priority_tickets),
            "resolvedTickets": int(row.resolved_tickets),
        }
        for row in rows
    ]


async def daily_ticket_series(session: AsyncSession, since: datetime) -> List[Dict[str, Any]]:
    """Tickets created and resolved per calendar day, oldest first.

    Days without any created ticket do not appear in the series.
    """
    day = func.date(Ticket.created_at)
    stmt = (
        select(
            day.label("day"),
            func.count(Ticket.id).label("tickets"),
            _count_if(Ticket.status == TicketStatus.RESOLVED).label("resolved"),
        )
        .where(Ticket.created_at >= since)
        .group_by(day)
        .order_by(day)
    )
    rows = (await session.execute(stmt)).all()
    # PostgreSQL returns a date, SQLite an ISO string; str() gives YYYY-MM-DD for both
    return [
        {"date": str(row.day), "count": int(row.tickets), "resolved": int(row.resolved)}
        for row in rows
    ]


async def count_open_tickets(session: AsyncSession) -> int:
    """Tickets still waiting on work (Open or In Progress)"""
    result = await session.execute(
        select(func.count(Ticket.id)).where(Ticket.status.in_(OPEN_STATUSES))
    )
    return result.scalar_one()


async def count_team_users(session: AsyncSession, roles: Optional[tuple] = None) -> int:
    """Users holding one of the team roles"""
    result = await session.execute(
        select(func.count(User.id)).where(User.role.in_(roles or TEAM_ROLES))
    )
    return result.scalar_one()
