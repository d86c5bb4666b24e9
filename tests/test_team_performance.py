# tests/test_team_performance.py
from datetime import datetime

import pytest

from models.tracker import TicketStatus, UserRole


class TestTeamPerformance:
    """Per-assignee statistics for tickets created this month"""

    @pytest.fixture
    async def team(self, factory):
        alice = await factory.user("Alice", role=UserRole.CORE)
        bob = await factory.user("Bob")
        carol = await factory.user("Carol")
        project = await factory.project(alice)

        await factory.ticket(project, alice, assignee=alice, status=TicketStatus.RESOLVED,
                             created_at=datetime(2024, 6, 10), resolved_at=datetime(2024, 6, 11))
        await factory.ticket(project, alice, assignee=alice, status=TicketStatus.RESOLVED,
                             created_at=datetime(2024, 6, 12), resolved_at=datetime(2024, 6, 15))
        await factory.ticket(project, alice, assignee=alice, created_at=datetime(2024, 6, 14))
        await factory.ticket(project, alice, assignee=bob, created_at=datetime(2024, 6, 16))
        await factory.ticket(project, alice, assignee=bob, status=TicketStatus.IN_PROGRESS,
                             created_at=datetime(2024, 6, 17))
        # Last month's work and unassigned tickets are not part of the month
        await factory.ticket(project, alice, assignee=carol, status=TicketStatus.RESOLVED,
                             created_at=datetime(2024, 5, 20), resolved_at=datetime(2024, 5, 22))
        await factory.ticket(project, alice, created_at=datetime(2024, 6, 18))
        return alice, bob, carol

    async def test_empty_month(self, analytics_engine):
        result = await analytics_engine.analyze_team_performance()

        assert result["userStats"] == []
        assert result["teamMetrics"] == {
            "totalMembers": 0,
            "totalAssigned": 0,
            "totalResolved": 0,
            "teamResolutionRate": 0.0,
            "avgResolutionTime": 0.0,
            "topPerformer": None,
        }

    async def test_member_statistics(self, analytics_engine, team):
        result = await analytics_engine.analyze_team_performance()
        alice, bob = result["userStats"]

        assert alice["name"] == "Alice"
        assert alice["role"] == "core"
        assert alice["email"] == "alice@example.com"
        assert alice["assignedCount"] == 3
        assert alice["resolvedCount"] == 2
        assert alice["resolutionRate"] == 66.7
        assert alice["avgResolutionTime"] == 2.0

        assert bob["name"] == "Bob"
        assert bob["assignedCount"] == 2
        assert bob["resolvedCount"] == 0
        assert bob["resolutionRate"] == 0.0
        assert bob["avgResolutionTime"] is None

    async def test_team_metrics(self, analytics_engine, team):
        metrics = (await analytics_engine.analyze_team_performance())["teamMetrics"]

        assert metrics["totalMembers"] == 2
        assert metrics["totalAssigned"] == 5
        assert metrics["totalResolved"] == 2
        assert metrics["teamResolutionRate"] == 40.0
        # Bob has no resolution times, so only Alice's average counts
        assert metrics["avgResolutionTime"] == 2.0
        assert metrics["topPerformer"]["name"] == "Alice"

    async def test_ties_are_broken_by_name(self, analytics_engine, factory):
        zed = await factory.user("Zed")
        amy = await factory.user("Amy")
        project = await factory.project(zed)
        for assignee in (zed, amy):
            await factory.ticket(project, zed, assignee=assignee, status=TicketStatus.RESOLVED,
                                 created_at=datetime(2024, 6, 3))

        result = await analytics_engine.analyze_team_performance()

        assert [m["name"] for m in result["userStats"]] == ["Amy", "Zed"]
        assert result["teamMetrics"]["topPerformer"]["name"] == "Amy"

    async def test_team_average_resolution_time(self, analytics_engine, factory):
        dana = await factory.user("Dana")
        eli = await factory.user("Eli")
        project = await factory.project(dana)
        # Dana: 1.25 days, Eli: 1.15 days; mean 1.2
        await factory.ticket(project, dana, assignee=dana, status=TicketStatus.RESOLVED,
                             created_at=datetime(2024, 6, 3), resolved_at=datetime(2024, 6, 4, 6, 0))
        await factory.ticket(project, dana, assignee=eli, status=TicketStatus.RESOLVED,
                             created_at=datetime(2024, 6, 3), resolved_at=datetime(2024, 6, 4, 3, 36))

        result = await analytics_engine.analyze_team_performance()

        assert result["teamMetrics"]["avgResolutionTime"] == 1.2
