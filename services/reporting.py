"""
Per-user reporting queries behind the /analytics endpoints
"""
import uuid
from datetime import datetime, timedelta
from typing import Any, Callable, Dict, List
from sqlalchemy import select, func, or_, distinct
from sqlalchemy.ext.asyncio import AsyncSession

from models.tracker import Comment, Project, ProjectMember, Ticket, TicketStatus, User
from utils.logging import get_logger

logger = get_logger(__name__)

UNRESOLVED_STATUSES = (TicketStatus.OPEN, TicketStatus.IN_PROGRESS, TicketStatus.IN_REVIEW)
DONE_STATUSES = (TicketStatus.RESOLVED, TicketStatus.CLOSED)


def _label(value: Any) -> str:
    return value.value if hasattr(value, "value") else str(value)


def _percent(part: int, whole: int) -> int:
    return round(part / whole * 100) if whole > 0 else 0


class ReportingService:
    """Dashboard statistics scoped to the projects a user can see"""

    def __init__(self, session: AsyncSession, now: Callable[[], datetime] = datetime.utcnow):
        self.session = session
        self._now = now

    async def _visible_project_ids(self, user_id: uuid.UUID) -> List[uuid.UUID]:
        """Projects the user owns or belongs to as a registered member"""
        memberships = select(ProjectMember.project_id).where(ProjectMember.user_id == user_id)
        result = await self.session.execute(
            select(Project.id).where(or_(Project.owner_id == user_id, Project.id.in_(memberships)))
        )
        return list(result.scalars().all())

    async def _count(self, stmt) -> int:
        return (await self.session.execute(stmt)).scalar_one()

    async def _breakdown(self, column, project_ids: List[uuid.UUID]) -> Dict[str, int]:
        result = await self.session.execute(
            select(column, func.count(Ticket.id))
            .where(Ticket.project_id.in_(project_ids))
            .group_by(column)
        )
        return {_label(key): count for key, count in result.all()}

    async def overview(self, user_id: uuid.UUID) -> Dict[str, Any]:
        project_ids = await self._visible_project_ids(user_id)
        in_projects = Ticket.project_id.in_(project_ids)
        week_ago = self._now() - timedelta(days=7)

        ticket_ids = select(Ticket.id).where(in_projects)
        return {
            "totalProjects": len(project_ids),
            "totalTickets": await self._count(select(func.count(Ticket.id)).where(in_projects)),
            "totalComments": await self._count(
                select(func.count(Comment.id)).where(Comment.ticket_id.in_(ticket_ids))
            ),
            "recentTickets": await self._count(
                select(func.count(Ticket.id)).where(in_projects, Ticket.created_at >= week_ago)
            ),
            "ticketsByStatus": await self._breakdown(Ticket.status, project_ids),
            "ticketsByPriority": await self._breakdown(Ticket.priority, project_ids),
            "ticketsByType": await self._breakdown(Ticket.type, project_ids),
        }

    async def project_stats(self, user_id: uuid.UUID) -> List[Dict[str, Any]]:
        project_ids = await self._visible_project_ids(user_id)
        if not project_ids:
            return []

        projects = (await self.session.execute(
            select(Project.id, Project.name, Project.status, Project.priority)
            .where(Project.id.in_(project_ids))
            .order_by(Project.name)
        )).all()

        counts: Dict[uuid.UUID, Dict[str, int]] = {
            p.id: {"total": 0, "open": 0, "closed": 0} for p in projects
        }
        rows = await self.session.execute(
            select(Ticket.project_id, Ticket.status, func.count(Ticket.id))
            .where(Ticket.project_id.in_(project_ids))
            .group_by(Ticket.project_id, Ticket.status)
        )
        for project_id, status, count in rows.all():
            bucket = counts[project_id]
            bucket["total"] += count
            if status in UNRESOLVED_STATUSES:
                bucket["open"] += count
            elif status in DONE_STATUSES:
                bucket["closed"] += count

        return [
            {
                "id": str(p.id),
                "name": p.name,
                "status": p.status,
                "priority": p.priority,
                "totalTickets": counts[p.id]["total"],
                "openTickets": counts[p.id]["open"],
                "closedTickets": counts[p.id]["closed"],
                "completionRate": _percent(counts[p.id]["closed"], counts[p.id]["total"]),
            }
            for p in projects
        ]

    async def ticket_trends(self, user_id: uuid.UUID, days: int = 30) -> List[Dict[str, Any]]:
        """Tickets created and resolved per day over the trailing window"""
        project_ids = await self._visible_project_ids(user_id)
        since = self._now() - timedelta(days=days)

        created = await self.session.execute(
            select(Ticket.created_at).where(Ticket.project_id.in_(project_ids), Ticket.created_at >= since)
        )
        # Resolution day is approximated by the last update of a done ticket
        resolved = await self.session.execute(
            select(Ticket.updated_at).where(
                Ticket.project_id.in_(project_ids),
                Ticket.status.in_(DONE_STATUSES),
                Ticket.updated_at >= since,
            )
        )

        trends: Dict[str, Dict[str, Any]] = {}
        for (created_at,) in created.all():
            day = created_at.date().isoformat()
            trends.setdefault(day, {"date": day, "created": 0, "resolved": 0})["created"] += 1
        for (updated_at,) in resolved.all():
            day = updated_at.date().isoformat()
            trends.setdefault(day, {"date": day, "created": 0, "resolved": 0})["resolved"] += 1

        return [trends[day] for day in sorted(trends)]

    async def user_activity(self, user_id: uuid.UUID) -> Dict[str, int]:
        project_ids = await self._visible_project_ids(user_id)
        in_projects = Ticket.project_id.in_(project_ids)
        week_ago = self._now() - timedelta(days=7)

        return {
            "ticketsCreated": await self._count(
                select(func.count(Ticket.id)).where(Ticket.reported_by_id == user_id, in_projects)
            ),
            "ticketsAssigned": await self._count(
                select(func.count(Ticket.id)).where(Ticket.assigned_to_id == user_id, in_projects)
            ),
            "commentsPosted": await self._count(
                select(func.count(Comment.id)).where(Comment.author_id == user_id)
            ),
            "projectsOwned": await self._count(
                select(func.count(Project.id)).where(Project.owner_id == user_id)
            ),
            "recentTicketsCreated": await self._count(
                select(func.count(Ticket.id)).where(
                    Ticket.reported_by_id == user_id, in_projects, Ticket.created_at >= week_ago
                )
            ),
        }

    async def team_performance(self, user_id: uuid.UUID) -> List[Dict[str, Any]]:
        """Registered members of the projects the user owns; outsiders have no tickets to rank"""
        owned = (await self.session.execute(
            select(Project.id).where(Project.owner_id == user_id)
        )).scalars().all()
        if not owned:
            return []

        members = (await self.session.execute(
            select(distinct(ProjectMember.user_id)).where(
                ProjectMember.project_id.in_(owned), ProjectMember.user_id.is_not(None)
            )
        )).scalars().all()
        if not members:
            return []

        users = {
            u.id: u for u in (await self.session.execute(
                select(User).where(User.id.in_(members))
            )).scalars().all()
        }

        assigned: Dict[uuid.UUID, int] = {}
        resolved: Dict[uuid.UUID, int] = {}
        rows = await self.session.execute(
            select(Ticket.assigned_to_id, Ticket.status, func.count(Ticket.id))
            .where(Ticket.assigned_to_id.in_(members), Ticket.project_id.in_(owned))
            .group_by(Ticket.assigned_to_id, Ticket.status)
        )
        for assignee, status, count in rows.all():
            assigned[assignee] = assigned.get(assignee, 0) + count
            if status in DONE_STATUSES:
                resolved[assignee] = resolved.get(assignee, 0) + count

        comment_rows = await self.session.execute(
            select(Comment.author_id, func.count(Comment.id))
            .where(Comment.author_id.in_(members))
            .group_by(Comment.author_id)
        )
        comments = dict(comment_rows.all())

        team = []
        for member_id in members:
            user = users.get(member_id)
            if user is None:
                # Membership points at a deleted user
                logger.warning("Skipping unknown project member", user_id=str(member_id))
                continue
            member_assigned = assigned.get(member_id, 0)
            member_resolved = resolved.get(member_id, 0)
            team.append({
                "id": str(member_id),
                "name": user.name,
                "email": user.email,
                "assignedTickets": member_assigned,
                "resolvedTickets": member_resolved,
                "commentsCount": comments.get(member_id, 0),
                "resolutionRate": _percent(member_resolved, member_assigned),
            })

        team.sort(key=lambda m: m["name"])
        return team
