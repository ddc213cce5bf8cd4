"""
Impact Model.

Fuses the regression tree and the release timeline into a ranked priority
list with an estimated rating lift and a recommendation per issue.
"""

import logging
from typing import Dict, List, Optional

from reviewlens.models.priority import PriorityItem

logger = logging.getLogger(__name__)


class ImpactModel:
    """
    Ranks issues for fixing.

    raw priority = severity x |rating impact| x growth (regressing) x version spread,
    normalized by the batch maximum. Only the regression tree drives scoring;
    the release timeline adds context to the summary.
    """

    def __init__(
        self,
        growth_factor: float = 1.5,
        lift_factor: float = 0.6,
        confidence_floor: float = 0.70,
        confidence_span: float = 0.25,
        confidence_full_mentions: int = 20,
        critical_threshold: float = 0.8,
        high_threshold: float = 0.6,
        high_risk_threshold: float = 0.7,
        quick_win_threshold: float = 0.4
    ):
        """
        Initialize impact model.

        Args:
            growth_factor: Multiplier for regressing issues
            lift_factor: Share of the rating impact recovered by a fix
            confidence_floor: Lowest confidence reported
            confidence_span: Range above the floor (floor + span is the ceiling)
            confidence_full_mentions: Mentions at which volume stops adding confidence
            critical_threshold: Score above which an issue is "Critical"
            high_threshold: Score above which an issue is "High priority";
                also the cut-off for the expected rating lift
            high_risk_threshold: Score above which an issue is listed as high risk
            quick_win_threshold: Score below which an issue is listed as a quick win
        """
        self.growth_factor = growth_factor
        self.lift_factor = lift_factor
        self.confidence_floor = confidence_floor
        self.confidence_span = confidence_span
        self.confidence_full_mentions = confidence_full_mentions
        self.critical_threshold = critical_threshold
        self.high_threshold = high_threshold
        self.high_risk_threshold = high_risk_threshold
        self.quick_win_threshold = quick_win_threshold

    def build(self, regression_tree: Dict, release_timeline: Optional[Dict] = None) -> Dict:
        """
        Build the priority list.

        Args:
            regression_tree: Output of RegressionTreeBuilder.build()
            release_timeline: Output of ReleaseTimelineBuilder.build() (context only)

        Returns:
            {"priorities": [item, ...], "summary": {...}}
        """
        items: List[PriorityItem] = []

        for issue, data in (regression_tree.get("issues") or {}).items():
            versions = list((data.get("version_causality") or {}).keys())
            item = PriorityItem(
                issue=issue,
                severity=data.get("severity", 0.0),
                rating_impact=data.get("rating_impact", 0.0),
                trend=data.get("status", "stable"),
                affected_versions=versions,
                total_mentions=data.get("total_mentions", 0)
            )
            item.raw_score = (
                item.severity
                * abs(item.rating_impact)
                * self._growth(item)
                * len(versions)
            )
            items.append(item)

        self._normalize(items)

        for item in items:
            item.estimated_lift_if_fixed = round(-item.rating_impact * self.lift_factor, 2)
            item.confidence = self._confidence(item)
            item.recommendation = self._recommend(item.priority_score)

        items.sort(key=lambda p: p.priority_score, reverse=True)

        expected_lift = sum(
            p.estimated_lift_if_fixed for p in items if p.priority_score > self.high_threshold
        )
        timeline_summary = (release_timeline or {}).get("summary") or {}

        logger.info(f"Built impact model for {len(items)} issues")

        return {
            "priorities": [item.to_dict() for item in items],
            "summary": {
                "top_priority": items[0].issue if items else None,
                "high_risk_issues": [
                    p.issue for p in items if p.priority_score > self.high_risk_threshold
                ],
                "quick_wins": [
                    p.issue for p in items if p.priority_score < self.quick_win_threshold
                ],
                "expected_rating_lift": round(expected_lift, 2),
                "worst_release": timeline_summary.get("worst_release"),
                "most_common_regression_trigger": timeline_summary.get(
                    "most_common_regression_trigger"
                )
            }
        }

    def _growth(self, item: PriorityItem) -> float:
        return self.growth_factor if item.trend == "regressing" else 1.0

    def _normalize(self, items: List[PriorityItem]) -> None:
        """
        Scale raw scores into [0, 1] against the batch maximum.

        When no issue has a rating impact, every raw score is zero; rank by
        severity, growth and version spread instead.
        """
        if not items:
            return

        raw = [item.raw_score for item in items]
        if max(raw) == 0:
            raw = [
                item.severity * self._growth(item) * len(item.affected_versions)
                for item in items
            ]

        max_raw = max(raw)
        for item, value in zip(items, raw):
            item.priority_score = round(value / max_raw, 2) if max_raw else 0.0

    def _confidence(self, item: PriorityItem) -> float:
        """
        Deterministic confidence in [floor, floor + span].

        Half driven by severity, half by mention volume.
        """
        severity = max(0.0, min(1.0, item.severity))
        volume = min(1.0, item.total_mentions / self.confidence_full_mentions)
        return round(self.confidence_floor + self.confidence_span * (0.5 * severity + 0.5 * volume), 2)

    def _recommend(self, score: float) -> str:
        if score > self.critical_threshold:
            return "Critical. Fix immediately."
        if score > self.high_threshold:
            return "High priority. Address in next release."
        return "Moderate priority."


# Design Notes:
#
# 1. Only the regression tree affects scores; the release timeline contributes
#    summary context.
#
# 2. priority_score is relative to the highest raw score of the same build()
#    call.
