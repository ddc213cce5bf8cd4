"""
Regression Tree Builder.

Buckets analyzed reviews by month and issue, builds a per-issue time series,
detects trend direction and mention spikes, and attributes issues to versions.
"""

import logging
from typing import Dict, Iterable, List

from reviewlens.models.regression import (
    PeriodBucket,
    RegressionNode,
    Spike,
    VersionStats,
    mean,
)
from reviewlens.models.review import as_analyzed_reviews
from reviewlens.utils.normalizer import display_title, normalize_key, period_of

logger = logging.getLogger(__name__)

UNKNOWN_VERSION = "unknown"


class RegressionTreeBuilder:
    """
    Builds one RegressionNode per IssueKey.

    Per node:
    - timeline: period buckets sorted ascending
    - status: "regressing" / "improving" / "stable" over the last three periods
    - spikes: period-over-period increases of at least spike_threshold
    - rating_impact: latest period average minus the baseline
    - severity: raw impact normalized by the worst issue in the same batch
    """

    BASELINES = ("first_period", "global")

    def __init__(
        self,
        spike_threshold: int = 5,
        growth_factor: float = 1.5,
        baseline: str = "first_period",
        top_regressions: int = 3
    ):
        """
        Initialize regression tree builder.

        Args:
            spike_threshold: Minimum period-over-period increase recorded as a spike
            growth_factor: Severity multiplier for regressing issues
            baseline: "first_period" (issue's first period average) or
                "global" (average rating of the whole batch)
            top_regressions: Number of regressing issues listed in the summary
        """
        if baseline not in self.BASELINES:
            raise ValueError(
                f"Invalid baseline: {baseline}. Must be one of {', '.join(self.BASELINES)}"
            )
        self.spike_threshold = spike_threshold
        self.growth_factor = growth_factor
        self.baseline = baseline
        self.top_regressions = top_regressions

    def build(self, reviews: Iterable) -> Dict:
        """
        Build the regression tree for a batch of analyzed reviews.

        Args:
            reviews: AnalyzedReview objects or equivalent dicts

        Returns:
            {"period": {"from", "to"}, "issues": {key: node}, "summary": {...}}
        """
        analyzed = as_analyzed_reviews(reviews)
        nodes: Dict[str, RegressionNode] = {}
        periods: List[str] = []
        ratings: List[int] = []
        skipped = 0

        for review in analyzed:
            period = period_of(review.date)
            if period is None:
                skipped += 1
                continue

            periods.append(period)
            ratings.append(review.rating)
            version = review.version or UNKNOWN_VERSION

            for tag in review.issues:
                key = normalize_key(tag)
                if not key:
                    continue

                node = nodes.get(key)
                if node is None:
                    node = RegressionNode(issue=key, title=display_title(tag))
                    nodes[key] = node

                node.total_mentions += 1

                bucket = node.periods.setdefault(period, PeriodBucket(period=period))
                bucket.count += 1
                bucket.ratings.append(review.rating)
                bucket.versions.add(version)

                stats = node.versions.setdefault(version, VersionStats())
                stats.mentions += 1
                stats.ratings.append(review.rating)

        if skipped:
            logger.debug(f"Skipped {skipped} reviews with unparseable dates")

        global_avg = mean(ratings)
        for node in nodes.values():
            timeline = node.timeline
            node.status = self.detect_trend([bucket.count for bucket in timeline])
            node.spikes = self._find_spikes(timeline)
            node.rating_impact = self._rating_impact(timeline, global_avg)
            growth = self.growth_factor if node.status == "regressing" else 1.0
            node.severity_raw = node.total_mentions * abs(node.rating_impact) * growth

        self._normalize(nodes)

        top = sorted(
            (node for node in nodes.values() if node.status == "regressing"),
            key=lambda n: n.severity,
            reverse=True
        )[:self.top_regressions]

        logger.info(
            f"Built regression tree: {len(nodes)} issues across "
            f"{len(set(periods))} periods ({len(top)} regressing)"
        )

        return {
            "period": {
                "from": min(periods) if periods else None,
                "to": max(periods) if periods else None
            },
            "issues": {key: node.to_dict() for key, node in nodes.items()},
            "summary": {
                "total_unique_issues": len(nodes),
                "top_regressions": [node.issue for node in top],
                "skipped_reviews": skipped
            }
        }

    @staticmethod
    def detect_trend(counts: List[int]) -> str:
        """
        Classify the last three period counts.

        [2, 5, 9] -> "regressing", [9, 5, 2] -> "improving", anything else
        (including fewer than three periods) -> "stable".
        """
        if len(counts) < 3:
            return "stable"
        a, b, c = counts[-3:]
        if a < b < c:
            return "regressing"
        if a > b > c:
            return "improving"
        return "stable"

    def _find_spikes(self, timeline: List[PeriodBucket]) -> List[Spike]:
        spikes = []
        for previous, current in zip(timeline, timeline[1:]):
            increase = current.count - previous.count
            if increase >= self.spike_threshold:
                spikes.append(Spike(
                    period=current.period,
                    increase=increase,
                    likely_trigger_versions=sorted(current.versions)
                ))
        return spikes

    def _rating_impact(self, timeline: List[PeriodBucket], global_avg: float) -> float:
        latest = timeline[-1].avg_rating
        if self.baseline == "global":
            baseline = global_avg
        else:
            baseline = timeline[0].avg_rating
        return round(latest - baseline, 2)

    @staticmethod
    def _normalize(nodes: Dict[str, RegressionNode]) -> None:
        """
        Scale raw severities into [0, 1] against the batch maximum.

        If every raw score is zero (e.g. all issues confined to one period),
        mention counts are ranked instead so the worst issue still reads 1.0.
        """
        if not nodes:
            return

        raw = {key: node.severity_raw for key, node in nodes.items()}
        if max(raw.values()) == 0:
            raw = {key: float(node.total_mentions) for key, node in nodes.items()}

        max_raw = max(raw.values())
        for key, node in nodes.items():
            node.severity = round(raw[key] / max_raw, 2) if max_raw else 0.0


# Design Notes:
#
# 1. severity is relative to the worst issue of the same build() call and is
#    not comparable across batches.
#
# 2. Reviews without a parseable date are excluded from every node and counted
#    in summary.skipped_reviews.
