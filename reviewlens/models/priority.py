"""
Priority data model.

Output row of the Impact Model.
"""

from dataclasses import dataclass, field
from typing import List


@dataclass
class PriorityItem:
    issue: str
    severity: float
    rating_impact: float
    trend: str
    affected_versions: List[str] = field(default_factory=list)
    total_mentions: int = 0
    raw_score: float = 0.0
    priority_score: float = 0.0
    estimated_lift_if_fixed: float = 0.0
    confidence: float = 0.0
    recommendation: str = ""

    def to_dict(self) -> dict:
        return {
            "issue": self.issue,
            "severity": self.severity,
            "rating_impact": self.rating_impact,
            "trend": self.trend,
            "affected_versions": list(self.affected_versions),
            "priority_score": self.priority_score,
            "estimated_lift_if_fixed": self.estimated_lift_if_fixed,
            "confidence": self.confidence,
            "recommendation": self.recommendation,
        }


# Design Notes:
#
# 1. raw_score is internal to normalization and is left out of to_dict().
