"""
Insight data models.

Aggregated issue / request / strength records produced by the
Insights Aggregator.
"""

from dataclasses import dataclass, field
from datetime import date
from typing import Dict, List, Optional


@dataclass
class Evidence:
    """One underlying review kept as a sample for a record."""
    text: str
    rating: int
    date: Optional[str]
    version: str
    title: str

    def to_dict(self) -> dict:
        return {
            "text": self.text,
            "rating": self.rating,
            "date": self.date,
            "version": self.version,
            "title": self.title,
        }


@dataclass
class AggregatedRecord:
    """
    Issue, request or strength grouped by IssueKey.

    count is the number of contributing reviews and may exceed len(evidence),
    which is bounded by the evidence limit.
    """
    id: str
    title: str
    count: int = 0
    rating_sum: int = 0
    evidence: List[Evidence] = field(default_factory=list)
    first_seen: Optional[str] = None
    last_seen: Optional[str] = None
    versions: List[str] = field(default_factory=list)
    months: set = field(default_factory=set)
    dates: List[Optional[date]] = field(default_factory=list)  # one per contributing review
    score: Optional[float] = None  # severity (issues) or demand (requests)
    level: Optional[str] = None  # severity / demand bucket
    trend: Optional[str] = None
    breakdown: Dict[str, float] = field(default_factory=dict)

    @property
    def avg_rating(self) -> float:
        if not self.count:
            return 0.0
        return round(self.rating_sum / self.count, 2)

    def issue_dict(self) -> dict:
        """Complaint record."""
        return {
            "id": self.id,
            "title": self.title,
            "severity": self.level,
            "score": self.score,
            "scoreBreakdown": dict(self.breakdown),
            "trend": self.trend,
            "count": self.count,
            "avgRating": self.avg_rating,
            "firstSeen": self.first_seen,
            "lastSeen": self.last_seen,
            "versions": list(self.versions),
            "evidence": [e.to_dict() for e in self.evidence],
        }

    def request_dict(self) -> dict:
        """Feature request record."""
        return {
            "id": self.id,
            "title": self.title,
            "demand": self.level,
            "score": self.score,
            "scoreBreakdown": dict(self.breakdown),
            "count": self.count,
            "avgRating": self.avg_rating,
            "firstRequested": self.first_seen,
            "monthsActive": len(self.months),
            "evidence": [e.to_dict() for e in self.evidence],
        }

    def strength_dict(self) -> dict:
        """Praise record; strengths carry only their count."""
        return {
            "id": self.id,
            "title": self.title,
            "count": self.count,
            "evidence": [e.to_dict() for e in self.evidence],
        }


# Design Notes:
#
# 1. Output keys are camelCase to match the insights snapshot format.
