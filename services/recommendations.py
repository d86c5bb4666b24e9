"""
Rule-based recommendations derived from the analyzer outputs
"""
from typing import Any, Dict, List

from services.analytics_types import TrendReport

# Rule thresholds
HIGH_PRIORITY_RATE_LIMIT = 30
RESOLUTION_RATE_FLOOR = 60
AVG_RESOLUTION_DAYS_LIMIT = 5
MONTHLY_DECLINE_LIMIT = -10


def _recommendation(priority: str, title: str, description: str, impact: str,
                    effort: str, category: str, data: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "priority": priority,
        "title": title,
        "description": description,
        "impact": impact,
        "effort": effort,
        "category": category,
        "data": data,
    }


def format_number(value: float) -> str:
    # 75.0 -> "75", 33.3 -> "33.3"
    return str(int(value)) if float(value).is_integer() else str(value)


def generate_recommendations(
    trends: TrendReport,
    team_performance: Dict[str, Any],
    project_health: Dict[str, Any],
    predictions: Dict[str, Any],
) -> List[Dict[str, Any]]:
    """Evaluate the threshold rules in order; never returns an empty list"""
    rates = trends.rates
    workload = predictions["currentWorkload"]
    critical_projects = project_health["overallHealth"]["criticalProjects"]
    team_avg_resolution = team_performance["teamMetrics"]["avgResolutionTime"]

    recommendations = []

    # High priority
    if rates.high_priority_rate > HIGH_PRIORITY_RATE_LIMIT:
        recommendations.append(_recommendation(
            "high",
            "Critical: Reduce High Priority Bug Volume",
            f"{format_number(rates.high_priority_rate)}% of tickets are high priority. This indicates systemic issues.",
            "Reduce critical issues by 40%",
            "High",
            "quality",
            {"highPriorityRate": rates.high_priority_rate},
        ))

    if workload["workloadLevel"] == "High":
        recommendations.append(_recommendation(
            "high",
            "Team Overload Alert",
            f"Each team member handles {format_number(workload['workloadPerUser'])} tickets on average.",
            "Improve team productivity by 25%",
            "Medium",
            "workload",
            {"workloadPerUser": workload["workloadPerUser"]},
        ))

    if rates.resolution_rate < RESOLUTION_RATE_FLOOR:
        recommendations.append(_recommendation(
            "high",
            "Improve Resolution Process",
            f"Current resolution rate is only {format_number(rates.resolution_rate)}%. Target should be >80%.",
            "Increase resolution rate by 30%",
            "High",
            "process",
            {"resolutionRate": rates.resolution_rate},
        ))

    # Medium priority
    if critical_projects > 0:
        recommendations.append(_recommendation(
            "medium",
            "Address Critical Project Health",
            f"{critical_projects} projects need immediate attention.",
            "Improve project success rate",
            "Medium",
            "projects",
            {"criticalProjects": critical_projects},
        ))

    if team_avg_resolution > AVG_RESOLUTION_DAYS_LIMIT:
        recommendations.append(_recommendation(
            "medium",
            "Optimize Resolution Time",
            f"Average resolution time is {format_number(team_avg_resolution)} days. Consider process improvements.",
            "Reduce resolution time by 35%",
            "Medium",
            "efficiency",
            {"avgResolutionTime": team_avg_resolution},
        ))

    # Low priority
    if rates.monthly_growth < MONTHLY_DECLINE_LIMIT:
        recommendations.append(_recommendation(
            "low",
            "Investigate Declining Ticket Volume",
            f"Ticket volume decreased by {format_number(abs(rates.monthly_growth))}% this month.",
            "Ensure comprehensive issue tracking",
            "Low",
            "monitoring",
            {"monthlyGrowth": rates.monthly_growth},
        ))

    if not recommendations:
        recommendations.append(_recommendation(
            "low",
            "Maintain Current Performance",
            "All metrics are within acceptable ranges. Continue current practices.",
            "Sustain current efficiency",
            "Low",
            "maintenance",
            {},
        ))

    return recommendations
