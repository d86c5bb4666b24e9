"""
Presentation of the comprehensive analysis for the dashboard cards and the chat assistant
"""
from typing import Any, Dict, List, Optional, Sequence, Tuple

from services.analytics_types import EmptyTrends
from services.recommendations import format_number

NO_DATA = "No Data"

DEFAULT_CHAT_CONTENT = (
    "🤖 I can help you with real project analysis, predictions, and team insights "
    "based on your actual data."
)

RISK_PROBABILITY = {"High": "75%", "Medium": "45%", "Low": "20%"}


def has_data(analysis: Dict[str, Any]) -> bool:
    return analysis["trends"]["trends"]["dataStatus"] != EmptyTrends.data_status


def _change(value: float, positive_above: float, neutral_above: Optional[float] = None) -> str:
    if value > positive_above:
        return "positive"
    if neutral_above is not None:
        return "neutral" if value > neutral_above else "negative"
    return "negative" if value < 0 else "neutral"


# Dashboard payload

def _insight_cards(analysis: Dict[str, Any]) -> List[Dict[str, Any]]:
    trends = analysis["trends"]
    rates = trends["trends"]
    counts = trends["metrics"]
    team = analysis["teamPerformance"]["teamMetrics"]
    overall = analysis["projectHealth"]["overallHealth"]

    if not has_data(analysis):
        return [
            {"title": "Monthly Growth", "value": NO_DATA, "change": "neutral",
             "description": "No ticket data available yet", "detail": "Create tickets to see trends"},
            {"title": "Resolution Rate", "value": NO_DATA, "change": "neutral",
             "description": "No resolution data available", "detail": "Resolve tickets to see rates"},
            {"title": "Team Velocity", "value": NO_DATA, "change": "positive",
             "description": "No team activity yet", "detail": "Assign and resolve tickets to see velocity"},
            {"title": "Project Health", "value": NO_DATA, "change": "neutral",
             "description": "No project data available", "detail": "Create projects to see health metrics"},
        ]

    growth = rates["monthlyGrowth"]
    if growth > 0:
        growth_description = "Increase in ticket volume"
    elif growth < 0:
        growth_description = "Decrease in ticket volume"
    else:
        growth_description = "Stable ticket volume"

    return [
        {
            "title": "Monthly Growth",
            "value": f"{'+' if growth > 0 else ''}{format_number(growth)}%",
            "change": _change(growth, 0),
            "description": growth_description,
            "detail": f"{counts['tickets']['month']} tickets this month vs {counts['tickets']['lastMonth']} last month",
        },
        {
            "title": "Resolution Rate",
            "value": f"{format_number(rates['resolutionRate'])}%",
            "change": _change(rates["resolutionRate"], 80, 60),
            "description": "Ticket resolution efficiency",
            "detail": f"{counts['resolved']['month']} resolved out of {counts['tickets']['month']} total",
        },
        {
            "title": "Team Velocity",
            "value": team["totalResolved"],
            "change": "positive",
            "description": "Tickets resolved this month",
            "detail": f"Average {format_number(team['avgResolutionTime'])} days per ticket",
        },
        {
            "title": "Project Health",
            "value": f"{format_number(overall['avgHealthScore'])}/100",
            "change": _change(overall["avgHealthScore"], 70, 50),
            "description": "Overall project status",
            "detail": f"{overall['activeProjects']} active projects",
        },
    ]


def _forecast_cards(analysis: Dict[str, Any]) -> List[Dict[str, Any]]:
    predictions = analysis["predictions"]
    workload = predictions["currentWorkload"]
    performance = predictions["performance"]
    level = workload["workloadLevel"]

    return [
        {
            "title": "Next Week Forecast",
            "items": [
                {"label": "Expected Tickets", "value": str(predictions["nextWeek"]["expectedTickets"]), "icon": "ticket"},
                {"label": "Resolution Time", "value": f"{performance['avgResolutionTime']} days", "icon": "clock"},
                {"label": "Team Workload", "value": level, "icon": "users"},
                {"label": "Success Rate", "value": f"{format_number(performance['successRate'])}%", "icon": "target"},
            ],
        },
        {
            "title": "Risk Assessment",
            "risks": [
                {
                    "level": level.lower(),
                    "issue": f"Team workload: {format_number(workload['workloadPerUser'])} tickets per member",
                    "probability": RISK_PROBABILITY.get(level, "20%"),
                }
            ],
        },
    ]


def build_dashboard_payload(analysis: Dict[str, Any], model_version: str) -> Dict[str, Any]:
    """Shape the comprehensive analysis into dashboard cards"""
    counts = analysis["trends"]["metrics"]
    return {
        "insights": _insight_cards(analysis),
        "predictions": _forecast_cards(analysis),
        "recommendations": analysis["recommendations"],
        "summary": analysis["summary"],
        "modelInfo": {
            "version": model_version,
            "generatedAt": analysis["timestamp"],
            "dataPoints": (
                counts["tickets"]["month"]
                + analysis["projectHealth"]["overallHealth"]["totalProjects"]
                + analysis["teamPerformance"]["teamMetrics"]["totalMembers"]
            ),
            "analysisType": "Real-time data analysis",
        },
    }


# Chat assistant

def _insight(kind: str, text: str, color: str) -> Dict[str, str]:
    return {"type": kind, "text": text, "color": color}


def _trend_reply(analysis: Dict[str, Any]) -> Dict[str, Any]:
    if not has_data(analysis):
        return {
            "content": "📊 No Data Available for Analysis:",
            "insights": [
                _insight("trend", "No tickets found in database", "text-gray-500"),
                _insight("trend", "Create tickets to start seeing trends", "text-blue-500"),
                _insight("trend", "Assign team members to track performance", "text-purple-500"),
                _insight("trend", "Resolve tickets to see completion rates", "text-green-500"),
            ],
        }

    rates = analysis["trends"]["trends"]
    resolution = rates["resolutionRate"]
    growth = rates["monthlyGrowth"]
    health = analysis["projectHealth"]["overallHealth"]["avgHealthScore"]

    if resolution > 80:
        resolution_label, resolution_color = "Excellent", "text-green-500"
    elif resolution > 60:
        resolution_label, resolution_color = "Good", "text-blue-500"
    else:
        resolution_label, resolution_color = "Needs Improvement", "text-red-500"

    if growth > 0:
        growth_label, growth_color = "Growing", "text-green-500"
    elif growth < 0:
        growth_label, growth_color = "Declining", "text-orange-500"
    else:
        growth_label, growth_color = "Stable", "text-gray-500"

    return {
        "content": "📊 Real Analysis of Your Project Data:",
        "insights": [
            _insight("trend", f"Resolution rate: {format_number(resolution)}% ({resolution_label})", resolution_color),
            _insight("trend", f"Monthly growth: {format_number(growth)}% ({growth_label})", growth_color),
            _insight("trend", f"Team resolved {analysis['teamPerformance']['teamMetrics']['totalResolved']} tickets this month",
                     "text-purple-500"),
            _insight("trend", f"Project health score: {format_number(health)}/100",
                     "text-emerald-500" if health > 70 else "text-yellow-500"),
        ],
    }


def _prediction_reply(analysis: Dict[str, Any]) -> Dict[str, Any]:
    if not has_data(analysis):
        return {
            "content": "🔮 No Data for Predictions:",
            "insights": [
                _insight("prediction", "Need historical data for predictions", "text-gray-500"),
                _insight("prediction", "Create tickets for at least 1 week", "text-orange-500"),
                _insight("prediction", "Resolve some tickets to establish patterns", "text-cyan-500"),
                _insight("prediction", "Track team activity for workload analysis", "text-indigo-500"),
            ],
        }

    predictions = analysis["predictions"]
    next_week = predictions["nextWeek"]
    workload = predictions["currentWorkload"]
    return {
        "content": "🔮 Real Predictions Based on Your Data:",
        "insights": [
            _insight("prediction", f"Next week: {next_week['expectedTickets']} tickets expected", "text-orange-500"),
            _insight("prediction", f"Current trend: {next_week['trend']} ({next_week['confidence']}% confidence)",
                     "text-cyan-500"),
            _insight("prediction",
                     f"Team workload: {workload['workloadLevel']} ({format_number(workload['workloadPerUser'])} tickets/member)",
                     "text-indigo-500"),
            _insight("prediction", f"Avg resolution time: {predictions['performance']['avgResolutionTime']} days",
                     "text-pink-500"),
        ],
    }


def _suggestion_reply(analysis: Dict[str, Any]) -> Dict[str, Any]:
    if not has_data(analysis):
        return {
            "content": "💡 Getting Started Recommendations:",
            "insights": [
                _insight("suggestion", "Create your first project to track issues", "text-blue-400"),
                _insight("suggestion", "Add team members for collaboration", "text-green-400"),
                _insight("suggestion", "Create tickets to start tracking", "text-yellow-400"),
                _insight("suggestion", "Set up regular ticket reviews", "text-purple-400"),
            ],
        }

    colors = {"high": "text-red-400", "medium": "text-yellow-400"}
    return {
        "content": "💡 Real Recommendations Based on Your Data:",
        "insights": [
            _insight("suggestion", f"{rec['title']}: {rec['description']}", colors.get(rec["priority"], "text-green-400"))
            for rec in analysis["recommendations"][:3]
        ],
    }


def _team_reply(analysis: Dict[str, Any]) -> Dict[str, Any]:
    if not has_data(analysis):
        return {
            "content": "👥 No Team Performance Data:",
            "insights": [
                _insight("team", "No team activity recorded yet", "text-gray-500"),
                _insight("team", "Assign tickets to team members", "text-pink-500"),
                _insight("team", "Resolve tickets to generate metrics", "text-emerald-500"),
                _insight("team", "Track resolution times for insights", "text-violet-500"),
            ],
        }

    team = analysis["teamPerformance"]["teamMetrics"]
    top = team["topPerformer"]
    if top:
        top_text = f"Top performer: {top['name']} ({top['resolvedCount']} tickets)"
    else:
        top_text = "No performance data available"

    return {
        "content": "👥 Real Team Performance Data:",
        "insights": [
            _insight("team", f"{team['totalMembers']} active team members", "text-pink-500"),
            _insight("team", f"Team resolution rate: {format_number(team['teamResolutionRate'])}%", "text-emerald-500"),
            _insight("team", f"Average resolution time: {format_number(team['avgResolutionTime'])} days", "text-violet-500"),
            _insight("team", top_text, "text-blue-500"),
        ],
    }


def _project_reply(analysis: Dict[str, Any]) -> Dict[str, Any]:
    if not has_data(analysis):
        return {
            "content": "🏗️ No Project Data Available:",
            "insights": [
                _insight("project", "No projects found in database", "text-gray-500"),
                _insight("project", "Create your first project to start tracking", "text-blue-500"),
                _insight("project", "Add tickets to projects for health metrics", "text-green-500"),
                _insight("project", "Track project progress over time", "text-purple-500"),
            ],
        }

    overall = analysis["projectHealth"]["overallHealth"]
    distribution = overall["healthDistribution"]
    critical = overall["criticalProjects"]
    if critical > 0:
        critical_text, critical_color = f"⚠️ {critical} projects need attention", "text-red-500"
    else:
        critical_text, critical_color = "✅ All projects are healthy", "text-green-500"

    return {
        "content": "🏗️ Real Project Health Analysis:",
        "insights": [
            _insight("project", f"{overall['totalProjects']} total projects", "text-blue-500"),
            _insight("project", f"{overall['activeProjects']} active projects", "text-green-500"),
            _insight("project",
                     f"Health distribution: {distribution['excellent']} excellent, {distribution['good']} good",
                     "text-purple-500"),
            _insight("project", critical_text, critical_color),
        ],
    }


# First matching keyword group wins
CHAT_HANDLERS: Sequence[Tuple[Tuple[str, ...], Any]] = (
    (("analyze", "trend"), _trend_reply),
    (("predict", "forecast"), _prediction_reply),
    (("improve", "suggest"), _suggestion_reply),
    (("team", "performance"), _team_reply),
    (("project", "health"), _project_reply),
)


def build_chat_response(message: str, analysis: Dict[str, Any]) -> Dict[str, Any]:
    """Answer a chat message with a canned reply filled from live metrics"""
    lowered = message.lower()
    for keywords, handler in CHAT_HANDLERS:
        if any(keyword in lowered for keyword in keywords):
            return handler(analysis)
    return {"content": DEFAULT_CHAT_CONTENT, "insights": []}
