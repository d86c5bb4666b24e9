# tests/test_project_health.py
from datetime import datetime

import pytest

from models.tracker import TicketPriority, TicketStatus
from services.analytics_engine import health_bucket, health_score, is_critical


class TestHealthScore:

    def test_weighted_score(self):
        score = health_score(ticket_count=10, resolved=8, high_priority=1, is_active=True)

        assert score == pytest.approx(87)
        assert health_bucket(score) == "excellent"

    def test_project_without_tickets(self):
        score = health_score(ticket_count=0, resolved=0, high_priority=0, is_active=False)

        assert score == pytest.approx(30)
        assert health_bucket(score) == "poor"
        assert not is_critical(score)

    def test_score_bounds(self):
        assert health_score(5, 0, 5, False) == pytest.approx(0)
        assert health_score(5, 5, 0, True) == pytest.approx(100)

    @pytest.mark.parametrize("score,bucket", [
        (100, "excellent"),
        (80, "excellent"),
        (79.9, "good"),
        (60, "good"),
        (59.9, "fair"),
        (40, "fair"),
        (39.9, "poor"),
        (0, "poor"),
    ])
    def test_buckets(self, score, bucket):
        assert health_bucket(score) == bucket

    def test_critical_cutoff(self):
        assert is_critical(29.9)
        assert not is_critical(30)


class TestProjectHealth:
    """Health of every project in the system"""

    @pytest.fixture
    async def projects(self, factory):
        owner = await factory.user("Owner")
        active = await factory.project(owner, "Apollo", status="Active", created_at=datetime(2024, 1, 1))
        planning = await factory.project(owner, "Borealis", status="Planning", created_at=datetime(2024, 2, 1))
        on_hold = await factory.project(owner, "Cassini", status="On Hold", created_at=datetime(2024, 3, 1))

        for _ in range(8):
            await factory.ticket(active, owner, status=TicketStatus.RESOLVED, created_at=datetime(2024, 5, 1))
        await factory.ticket(active, owner, priority=TicketPriority.HIGH)
        await factory.ticket(active, owner, status=TicketStatus.IN_PROGRESS)

        for _ in range(2):
            await factory.ticket(on_hold, owner, priority=TicketPriority.HIGH)
        return active, planning, on_hold

    async def test_no_projects(self, analytics_engine):
        result = await analytics_engine.analyze_project_health()

        assert result["projectStats"] == []
        assert result["overallHealth"]["totalProjects"] == 0
        assert result["overallHealth"]["avgHealthScore"] == 0.0
        assert result["overallHealth"]["criticalProjects"] == 0

    async def test_project_stats(self, analytics_engine, projects):
        stats = (await analytics_engine.analyze_project_health())["projectStats"]
        apollo, borealis, cassini = stats

        assert [p["name"] for p in stats] == ["Apollo", "Borealis", "Cassini"]
        assert apollo["ticketCount"] == 10
        assert apollo["resolvedTickets"] == 8
        assert apollo["openTickets"] == 2
        assert apollo["highPriorityTickets"] == 1
        assert apollo["healthScore"] == pytest.approx(87)
        assert apollo["healthStatus"] == "excellent"

        assert borealis["ticketCount"] == 0
        assert borealis["healthScore"] == pytest.approx(30)

        assert cassini["healthScore"] == pytest.approx(0)
        assert cassini["healthStatus"] == "poor"

    async def test_overall_health(self, analytics_engine, projects):
        overall = (await analytics_engine.analyze_project_health())["overallHealth"]

        assert overall["totalProjects"] == 3
        assert overall["activeProjects"] == 1
        assert overall["avgHealthScore"] == 39.0
        assert overall["criticalProjects"] == 1
        assert overall["healthDistribution"] == {"excellent": 1, "good": 0, "fair": 0, "poor": 2}
