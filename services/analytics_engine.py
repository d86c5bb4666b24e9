"""
AI Analytics Engine: rule-based insights over the tracker data.

Each analyzer reads the current database state through its own session and
caches its result under a fixed key. The comprehensive analysis runs the four
analyzers concurrently and feeds their outputs to the recommendation rules.
"""
import asyncio
import copy
import time
from datetime import datetime, timedelta
from typing import Any, Awaitable, Callable, Dict, List, Optional, Sequence, Union
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from core.cache import TTLCache
from models.tracker import PROJECT_STATUS_ACTIVE, TicketStatus
from services import metrics
from services.analytics_types import ComputedTrends, EmptyTrends, TrendMetrics, TrendRates, TrendReport
from services.recommendations import generate_recommendations
from utils.logging import get_logger, log_analysis_run

logger = get_logger(__name__)

# Project health weights
RESOLVED_WEIGHT = 50
SEVERITY_WEIGHT = 30
ACTIVE_BONUS = 20

# Health buckets (lower bounds) and the separate "critical" cut-off
EXCELLENT_THRESHOLD = 80
GOOD_THRESHOLD = 60
FAIR_THRESHOLD = 40
CRITICAL_THRESHOLD = 30

# Forecast heuristics
TREND_MULTIPLIERS = {"increasing": 1.1, "decreasing": 0.9, "stable": 1.0}
TREND_CONFIDENCE = {"stable": 85, "increasing": 75, "decreasing": 70}
HISTORY_DAYS = 30
RECENT_DAYS = 7
HALF_WINDOW = 15

# Open tickets per user
HIGH_WORKLOAD_THRESHOLD = 10
MEDIUM_WORKLOAD_THRESHOLD = 5


def _rate(numerator: float, denominator: float) -> float:
    """Percentage, or 0 when the denominator is empty"""
    if not denominator:
        return 0.0
    return numerator / denominator * 100


def _mean(values: Sequence[float]) -> float:
    return sum(values) / len(values) if values else 0.0


def health_score(ticket_count: int, resolved: int, high_priority: int, is_active: bool) -> float:
    """Weighted 0-100 composite of resolution ratio, severity mix and project activity"""
    denominator = max(ticket_count, 1)
    return (
        RESOLVED_WEIGHT * (resolved / denominator)
        + SEVERITY_WEIGHT * (1 - high_priority / denominator)
        + (ACTIVE_BONUS if is_active else 0)
    )


def health_bucket(score: float) -> str:
    if score >= EXCELLENT_THRESHOLD:
        return "excellent"
    if score >= GOOD_THRESHOLD:
        return "good"
    if score >= FAIR_THRESHOLD:
        return "fair"
    return "poor"


def is_critical(score: float) -> bool:
    return score < CRITICAL_THRESHOLD


def classify_trend(counts: Sequence[int]) -> str:
    """Compare the means of the first and second half of a daily series"""
    first_half = counts[:HALF_WINDOW]
    second_half = counts[HALF_WINDOW:]
    if not first_half or not second_half:
        return "stable"
    first_avg = _mean(first_half)
    second_avg = _mean(second_half)
    if second_avg > first_avg:
        return "increasing"
    if second_avg < first_avg:
        return "decreasing"
    return "stable"


def workload_level(workload_per_user: float) -> str:
    if workload_per_user > HIGH_WORKLOAD_THRESHOLD:
        return "High"
    if workload_per_user > MEDIUM_WORKLOAD_THRESHOLD:
        return "Medium"
    return "Low"


class AIAnalyticsEngine:
    """Computes trends, team performance, project health and forecasts"""

    def __init__(
        self,
        session_factory: async_sessionmaker,
        cache: Optional[TTLCache] = None,
        now: Callable[[], datetime] = datetime.utcnow,
    ):
        self.session_factory = session_factory
        # An empty TTLCache is falsy, so test against None
        self.cache = cache if cache is not None else TTLCache()
        self._now = now

    def clear_cache(self):
        """Force the next analysis to recompute from the database"""
        self.cache.clear()

    async def _cached(self, key: str, compute: Callable[[AsyncSession], Awaitable[Any]]) -> Any:
        async def run():
            started = time.perf_counter()
            try:
                async with self.session_factory() as session:
                    result = await compute(session)
            except Exception as e:
                logger.error("Analytics computation failed", component=key, error=str(e))
                raise
            log_analysis_run(key, (time.perf_counter() - started) * 1000)
            return result

        return await self.cache.get_or_compute(key, run)

    # Trend analysis

    async def analyze_trends(self) -> TrendReport:
        return await self._cached("trends", self._compute_trends)

    async def _compute_trends(self, session: AsyncSession) -> TrendReport:
        windows = metrics.TimeWindows.from_now(self._now())

        total_tickets = await metrics.count_all_tickets(session)
        if total_tickets == 0:
            return EmptyTrends(periods=windows.as_periods())

        counts = await metrics.ticket_window_counts(session, windows)
        tickets = counts["tickets"]

        # todayCount * 7 against the trailing 7 days is an extrapolation, not a
        # week-over-week comparison; kept as the product defines it
        weekly_growth = _rate(tickets["today"] * 7 - tickets["week"], tickets["week"])
        monthly_growth = _rate(tickets["month"] - tickets["lastMonth"], tickets["lastMonth"])
        resolution_rate = _rate(counts["resolved"]["month"], tickets["month"])
        high_priority_rate = _rate(counts["highPriority"]["month"], tickets["month"])

        return ComputedTrends(
            periods=windows.as_periods(),
            metrics=TrendMetrics(
                tickets=tickets,
                resolved=counts["resolved"],
                high_priority=counts["highPriority"],
            ),
            rates=TrendRates(
                weekly_growth=round(weekly_growth, 1),
                monthly_growth=round(monthly_growth, 1),
                resolution_rate=round(resolution_rate, 1),
                high_priority_rate=round(high_priority_rate, 1),
            ),
        )

    # Team performance

    async def analyze_team_performance(self) -> Dict[str, Any]:
        return await self._cached("teamPerformance", self._compute_team_performance)

    async def _compute_team_performance(self, session: AsyncSession) -> Dict[str, Any]:
        windows = metrics.TimeWindows.from_now(self._now())
        assignments = await metrics.month_assignments(session, windows.month)

        members: Dict[Any, Dict[str, Any]] = {}
        for row in assignments:
            member = members.setdefault(row["user_id"], {
                "id": str(row["user_id"]),
                "name": row["name"],
                "email": row["email"],
                "role": row["role"].value if hasattr(row["role"], "value") else row["role"],
                "assignedCount": 0,
                "resolvedCount": 0,
                "_durations": [],
            })
            member["assignedCount"] += 1
            if row["status"] == TicketStatus.RESOLVED:
                member["resolvedCount"] += 1
            if row["resolved_at"] is not None and row["created_at"] is not None:
                elapsed = row["resolved_at"] - row["created_at"]
                member["_durations"].append(elapsed.total_seconds() / 86400)

        raw_averages = []
        user_stats = []
        for member in members.values():
            durations = member.pop("_durations")
            avg_days = _mean(durations) if durations else None
            if avg_days is not None:
                raw_averages.append(avg_days)
            member["resolutionRate"] = round(_rate(member["resolvedCount"], member["assignedCount"]), 1)
            member["avgResolutionTime"] = round(avg_days, 1) if avg_days is not None else None
            user_stats.append(member)

        user_stats.sort(key=lambda m: (-m["resolvedCount"], m["name"]))

        total_assigned = sum(m["assignedCount"] for m in user_stats)
        total_resolved = sum(m["resolvedCount"] for m in user_stats)

        return {
            "userStats": user_stats,
            "teamMetrics": {
                "totalMembers": len(user_stats),
                "totalAssigned": total_assigned,
                "totalResolved": total_resolved,
                "teamResolutionRate": round(_rate(total_resolved, total_assigned), 1),
                "avgResolutionTime": round(_mean(raw_averages), 1),
                "topPerformer": dict(user_stats[0]) if user_stats else None,
            },
        }

    # Project health

    async def analyze_project_health(self) -> Dict[str, Any]:
        return await self._cached("projectHealth", self._compute_project_health)

    async def _compute_project_health(self, session: AsyncSession) -> Dict[str, Any]:
        project_stats = await metrics.project_ticket_rollup(session)

        distribution = {"excellent": 0, "good": 0, "fair": 0, "poor": 0}
        critical_projects = 0
        for project in project_stats:
            score = health_score(
                project["ticketCount"],
                project["resolvedTickets"],
                project["highPriorityTickets"],
                project["status"] == PROJECT_STATUS_ACTIVE,
            )
            bucket = health_bucket(score)
            project["healthScore"] = score
            project["healthStatus"] = bucket
            distribution[bucket] += 1
            if is_critical(score):
                critical_projects += 1

        total_projects = len(project_stats)
        avg_health = _mean([p["healthScore"] for p in project_stats])

        return {
            "projectStats": project_stats,
            "overallHealth": {
                "totalProjects": total_projects,
                "activeProjects": len([p for p in project_stats if p["status"] == PROJECT_STATUS_ACTIVE]),
                "avgHealthScore": round(avg_health, 1),
                "criticalProjects": critical_projects,
                "healthDistribution": distribution,
            },
        }

    # Predictions

    async def generate_predictions(self) -> Dict[str, Any]:
        return await self._cached("predictions", self._compute_predictions)

    async def _compute_predictions(self, session: AsyncSession) -> Dict[str, Any]:
        now = self._now()
        series = await metrics.daily_ticket_series(session, now - timedelta(days=HISTORY_DAYS))

        recent = series[-RECENT_DAYS:]
        avg_daily_tickets = _mean([day["count"] for day in recent])
        avg_daily_resolved = _mean([day["resolved"] for day in recent])

        trend = classify_trend([day["count"] for day in series])
        multiplier = TREND_MULTIPLIERS[trend]

        open_tickets = await metrics.count_open_tickets(session)
        total_users = await metrics.count_team_users(session)
        # No team members means nobody carries the load; report 0 rather than divide
        workload_per_user = open_tickets / total_users if total_users else 0.0

        if avg_daily_resolved > 0:
            avg_resolution_time: Union[float, str] = round(RECENT_DAYS / avg_daily_resolved, 1)
        else:
            avg_resolution_time = "N/A"

        return {
            "nextWeek": {
                "expectedTickets": round(avg_daily_tickets * 7 * multiplier),
                "expectedResolutions": round(avg_daily_resolved * 7 * multiplier),
                "trend": trend,
                "confidence": TREND_CONFIDENCE[trend],
            },
            "currentWorkload": {
                "openTickets": open_tickets,
                "totalUsers": total_users,
                "workloadPerUser": round(workload_per_user, 1),
                "workloadLevel": workload_level(workload_per_user),
            },
            "performance": {
                "avgResolutionTime": avg_resolution_time,
                "successRate": round(_rate(avg_daily_resolved, avg_daily_tickets), 1),
            },
            "dailySeries": series,
        }

    # Recommendations and the combined view

    async def _run_analyzers(self):
        return await asyncio.gather(
            self.analyze_trends(),
            self.analyze_team_performance(),
            self.analyze_project_health(),
            self.generate_predictions(),
        )

    async def generate_recommendations(self) -> List[Dict[str, Any]]:
        trends, team, health, predictions = await self._run_analyzers()
        return generate_recommendations(trends, team, health, predictions)

    async def get_comprehensive_analysis(self) -> Dict[str, Any]:
        """Run every analyzer and assemble one response"""
        logger.info("Running comprehensive analysis")
        trends, team, health, predictions = await self._run_analyzers()
        recommendations = generate_recommendations(trends, team, health, predictions)

        overall = health["overallHealth"]
        workload = predictions["currentWorkload"]["workloadLevel"]

        return {
            "timestamp": self._now().isoformat(),
            "trends": trends.to_dict(),
            # Cached values are shared between calls; hand out copies
            "teamPerformance": copy.deepcopy(team),
            "projectHealth": copy.deepcopy(health),
            "predictions": copy.deepcopy(predictions),
            "recommendations": recommendations,
            "summary": {
                "overallHealth": overall["avgHealthScore"],
                "teamEfficiency": team["teamMetrics"]["teamResolutionRate"],
                "projectStability": round(
                    _rate(overall["healthDistribution"]["excellent"], overall["totalProjects"]), 1
                ),
                "riskLevel": workload,
            },
        }

    async def refresh(self) -> Dict[str, Any]:
        """Drop cached results and recompute"""
        self.clear_cache()
        return await self.get_comprehensive_analysis()
