"""
Release timeline data model.
"""

from collections import Counter
from dataclasses import dataclass, field
from typing import List


@dataclass
class TimelineEntry:
    """
    One (version, period) bucket of the release timeline.

    issues is ordered by local frequency (most mentioned first); the diff
    fields are filled in against the preceding entry in period order.
    """
    version: str
    period: str
    ratings: List[int] = field(default_factory=list)
    issue_counts: Counter = field(default_factory=Counter)
    new_issues: List[str] = field(default_factory=list)
    resolved_issues: List[str] = field(default_factory=list)
    regressions: List[str] = field(default_factory=list)
    notes: str = ""

    @property
    def avg_rating(self) -> float:
        if not self.ratings:
            return 0.0
        return sum(self.ratings) / len(self.ratings)

    @property
    def review_count(self) -> int:
        return len(self.ratings)

    @property
    def issues(self) -> List[str]:
        # Counter.most_common keeps first-seen order for equal counts
        return [issue for issue, _ in self.issue_counts.most_common()]

    def dominant_issues(self, limit: int = 3) -> List[str]:
        return self.issues[:limit]

    def to_dict(self, dominant_limit: int = 3) -> dict:
        return {
            "version": self.version,
            "period": self.period,
            "avg_rating": round(self.avg_rating, 2),
            "review_count": self.review_count,
            "issues": self.issues,
            "dominant_issues": self.dominant_issues(dominant_limit),
            "new_issues": list(self.new_issues),
            "resolved_issues": list(self.resolved_issues),
            "regressions": list(self.regressions),
            "notes": self.notes,
        }


# Design Notes:
#
# 1. issues is ordered by local count, ties in first-seen order.
