"""
Regression tree data models.

One RegressionNode per IssueKey, holding its month-by-month history.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Set


def mean(values: List[float]) -> float:
    if not values:
        return 0.0
    return sum(values) / len(values)


@dataclass
class PeriodBucket:
    """Mentions of one issue within one YYYY-MM period."""
    period: str
    count: int = 0
    ratings: List[int] = field(default_factory=list)
    versions: Set[str] = field(default_factory=set)

    @property
    def avg_rating(self) -> float:
        return mean(self.ratings)

    def to_dict(self) -> dict:
        return {
            "period": self.period,
            "count": self.count,
            "avg_rating": round(self.avg_rating, 2),
            "versions": sorted(self.versions),
        }


@dataclass
class VersionStats:
    mentions: int = 0
    ratings: List[int] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "mentions": self.mentions,
            "avg_rating": round(mean(self.ratings), 2),
        }


@dataclass
class Spike:
    period: str
    increase: int
    likely_trigger_versions: List[str]

    def to_dict(self) -> dict:
        return {
            "period": self.period,
            "increase": self.increase,
            "likely_trigger_versions": list(self.likely_trigger_versions),
        }


@dataclass
class RegressionNode:
    """
    History of a single issue across periods and versions.

    severity is normalized against the other issues of the same computation,
    so it is only comparable within one tree.
    """
    issue: str
    title: str
    total_mentions: int = 0
    periods: Dict[str, PeriodBucket] = field(default_factory=dict)
    versions: Dict[str, VersionStats] = field(default_factory=dict)
    status: str = "stable"
    spikes: List[Spike] = field(default_factory=list)
    rating_impact: float = 0.0
    severity_raw: float = 0.0
    severity: float = 0.0

    @property
    def timeline(self) -> List[PeriodBucket]:
        # YYYY-MM labels are zero-padded, so string order is chronological
        return [self.periods[p] for p in sorted(self.periods)]

    @property
    def first_seen(self) -> Optional[str]:
        return min(self.periods) if self.periods else None

    @property
    def last_seen(self) -> Optional[str]:
        return max(self.periods) if self.periods else None

    def to_dict(self) -> dict:
        return {
            "title": self.title,
            "first_seen": self.first_seen,
            "last_seen": self.last_seen,
            "status": self.status,
            "total_mentions": self.total_mentions,
            "rating_impact": self.rating_impact,
            "severity": self.severity,
            "timeline": [bucket.to_dict() for bucket in self.timeline],
            "spikes": [spike.to_dict() for spike in self.spikes],
            "version_causality": {
                version: stats.to_dict() for version, stats in self.versions.items()
            },
        }


# Design Notes:
#
# 1. Output keys are snake_case; timeline is always sorted by period.
