"""
Result types for the trend analyzer
"""
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Union


@dataclass(frozen=True)
class TrendRates:
    """Period-over-period percentages, rounded to one decimal"""
    weekly_growth: float = 0.0
    monthly_growth: float = 0.0
    resolution_rate: float = 0.0
    high_priority_rate: float = 0.0

    def to_dict(self) -> Dict[str, float]:
        return {
            "weeklyGrowth": self.weekly_growth,
            "monthlyGrowth": self.monthly_growth,
            "resolutionRate": self.resolution_rate,
            "highPriorityRate": self.high_priority_rate,
        }


@dataclass(frozen=True)
class TrendMetrics:
    """Raw counts per time window"""
    tickets: Dict[str, int]
    resolved: Dict[str, int]
    high_priority: Dict[str, int]

    @classmethod
    def zero(cls) -> "TrendMetrics":
        return cls(
            tickets={"today": 0, "week": 0, "month": 0, "lastMonth": 0, "quarter": 0},
            resolved={"today": 0, "week": 0, "month": 0, "lastMonth": 0},
            high_priority={"today": 0, "week": 0, "month": 0},
        )

    def to_dict(self) -> Dict[str, Dict[str, int]]:
        return {
            "tickets": dict(self.tickets),
            "resolved": dict(self.resolved),
            "highPriority": dict(self.high_priority),
        }


class _SerializableTrends:
    periods: Dict[str, datetime]
    metrics: TrendMetrics
    rates: TrendRates
    data_status: str

    def to_dict(self) -> Dict[str, Any]:
        trends = self.rates.to_dict()
        trends["dataStatus"] = self.data_status
        return {
            "periods": {name: start.isoformat() for name, start in self.periods.items()},
            "metrics": self.metrics.to_dict(),
            "trends": trends,
        }


@dataclass(frozen=True)
class EmptyTrends(_SerializableTrends):
    """No tickets exist anywhere in the system"""
    periods: Dict[str, datetime]
    metrics: TrendMetrics = field(default_factory=TrendMetrics.zero)
    rates: TrendRates = field(default_factory=TrendRates)

    data_status = "no_data"
    has_data = False


@dataclass(frozen=True)
class ComputedTrends(_SerializableTrends):
    """Trend metrics derived from at least one ticket"""
    periods: Dict[str, datetime]
    metrics: TrendMetrics
    rates: TrendRates

    data_status = "has_data"
    has_data = True


TrendReport = Union[EmptyTrends, ComputedTrends]
