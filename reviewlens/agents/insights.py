"""
Insights Aggregator.

Partitions analyzed reviews by intent and produces ranked issues (severity),
feature requests (demand) and strengths, with evidence samples.
"""

import logging
from collections import Counter
from datetime import date
from typing import Dict, Iterable, List, Optional, Tuple

from reviewlens.models.insight import AggregatedRecord, Evidence
from reviewlens.models.review import AnalyzedReview, as_analyzed_reviews
from reviewlens.utils.normalizer import display_title, normalize_key, period_of

logger = logging.getLogger(__name__)


def _clamp(value: float, low: float = 0.0, high: float = 100.0) -> float:
    return max(low, min(high, value))


def _percent(part: int, whole: int) -> float:
    if not whole:
        return 0.0
    return part / whole * 100


class InsightsAggregator:
    """
    Builds the issue / request / strength rankings for a batch of reviews.

    Scoring:
    - Issues (complaints): frequency + rating depth + recency + trend, 0-100
    - Requests: frequency + recency + month-to-month consistency, 0-100
    - Strengths (praise): count only

    Recency is measured against as_of (defaults to today), so results are
    reproducible when as_of is pinned.
    """

    def __init__(
        self,
        evidence_limit: int = 10,
        recent_window_days: int = 30,
        trend_window_days: int = 60,
        recency_window_days: int = 90,
        severity_thresholds: Tuple[float, float, float] = (70, 50, 30),
        demand_thresholds: Tuple[float, float] = (60, 35)
    ):
        """
        Initialize insights aggregator.

        Args:
            evidence_limit: Max reviews kept as evidence per record
            recent_window_days: "Last N days" window for recency and trend
            trend_window_days: End of the comparison window for trend (days 31-60)
            recency_window_days: End of the secondary recency window (days 31-90)
            severity_thresholds: critical / high / medium cut-offs
            demand_thresholds: high / medium cut-offs
        """
        self.evidence_limit = evidence_limit
        self.recent_window_days = recent_window_days
        self.trend_window_days = trend_window_days
        self.recency_window_days = recency_window_days
        self.severity_thresholds = severity_thresholds
        self.demand_thresholds = demand_thresholds

    def generate(self, reviews: Iterable, as_of: Optional[date] = None) -> Dict:
        """
        Generate insights from analyzed reviews.

        Args:
            reviews: AnalyzedReview objects or equivalent dicts
            as_of: Reference date for recency/trend (default: today)

        Returns:
            {"issues", "requests", "strengths", "summary"} dict
        """
        analyzed = as_analyzed_reviews(reviews)
        as_of = as_of or date.today()

        if not analyzed:
            return {
                "issues": [],
                "requests": [],
                "strengths": [],
                "summary": {
                    "totalReviews": 0,
                    "avgRating": 0,
                    "sentiment": {"positive": 0, "neutral": 0, "negative": 0}
                }
            }

        complaints = [r for r in analyzed if r.intent == "complaint"]
        requests = [r for r in analyzed if r.intent == "feature_request"]
        praises = [r for r in analyzed if r.intent == "praise"]

        issues = self._score_issues(self._group(complaints), len(complaints), as_of)
        feature_requests = self._score_requests(self._group(requests), len(requests), as_of)
        strengths = sorted(self._group(praises).values(), key=lambda r: r.count, reverse=True)

        total = len(analyzed)
        avg_rating = sum(r.rating for r in analyzed) / total

        logger.info(
            f"Generated insights for {total} reviews: {len(issues)} issues, "
            f"{len(feature_requests)} requests, {len(strengths)} strengths"
        )

        return {
            "issues": [r.issue_dict() for r in issues],
            "requests": [r.request_dict() for r in feature_requests],
            "strengths": [r.strength_dict() for r in strengths],
            "summary": {
                "totalReviews": total,
                "avgRating": round(avg_rating, 2),
                # Anything that is not praise or a complaint counts as neutral
                "sentiment": {
                    "positive": len(praises),
                    "neutral": total - len(praises) - len(complaints),
                    "negative": len(complaints)
                }
            }
        }

    def _group(self, reviews: List[AnalyzedReview]) -> Dict[str, AggregatedRecord]:
        """Group reviews by IssueKey of each of their tags."""
        groups: Dict[str, AggregatedRecord] = {}
        for review in reviews:
            for tag in review.issues:
                key = normalize_key(tag)
                if not key:
                    continue

                record = groups.get(key)
                if record is None:
                    record = AggregatedRecord(id=key, title=display_title(tag))
                    groups[key] = record

                record.count += 1
                record.rating_sum += review.rating

                if len(record.evidence) < self.evidence_limit:
                    record.evidence.append(Evidence(
                        text=review.text,
                        rating=review.rating,
                        date=review.date.isoformat() if review.date else None,
                        version=review.version,
                        title=review.title
                    ))

                if review.date:
                    iso = review.date.isoformat()
                    if record.first_seen is None or iso < record.first_seen:
                        record.first_seen = iso
                    if record.last_seen is None or iso > record.last_seen:
                        record.last_seen = iso
                    record.months.add(period_of(review.date))

                if review.version and review.version not in record.versions:
                    record.versions.append(review.version)

                record.dates.append(review.date)

        return groups

    def _age_counts(self, record: AggregatedRecord, as_of: date) -> Counter:
        """Count a record's reviews per age window."""
        windows = Counter()
        for review_date in record.dates:
            if review_date is None:
                continue
            age = (as_of - review_date).days
            if age <= self.recent_window_days:
                windows["last30"] += 1
            elif age <= self.trend_window_days:
                windows["prev60"] += 1
                windows["mid90"] += 1
            elif age <= self.recency_window_days:
                windows["mid90"] += 1
        return windows

    def _score_issues(
        self,
        groups: Dict[str, AggregatedRecord],
        total_complaints: int,
        as_of: date
    ) -> List[AggregatedRecord]:
        """Apply the four-factor severity score and sort descending."""
        critical, high, medium = self.severity_thresholds

        for record in groups.values():
            windows = self._age_counts(record, as_of)

            frequency = min(30.0, 3 * _percent(record.count, total_complaints))
            rating = min(30.0, max(0.0, (5 - record.rating_sum / record.count) * 7.5))
            recency = min(
                25.0,
                0.2 * _percent(windows["last30"], record.count)
                + 0.05 * _percent(windows["mid90"], record.count)
            )
            trend_points, trend = self._trend(windows["last30"], windows["prev60"])

            score = round(_clamp(frequency + rating + recency + trend_points), 1)

            record.score = score
            record.trend = trend
            record.breakdown = {
                "frequency": round(frequency, 2),
                "rating": round(rating, 2),
                "recency": round(recency, 2),
                "trend": trend_points
            }
            if score >= critical:
                record.level = "critical"
            elif score >= high:
                record.level = "high"
            elif score >= medium:
                record.level = "medium"
            else:
                record.level = "low"

        return sorted(groups.values(), key=lambda r: r.score, reverse=True)

    @staticmethod
    def _trend(last30: int, prev60: int) -> Tuple[float, str]:
        """
        Compare the last 30 days against the average 30-day volume of days 31-60.
        """
        if prev60 == 0:
            if last30 > 0:
                return 10.0, "new"
            return 0.0, "stable"

        ratio = last30 / (prev60 / 2)
        if ratio > 2:
            return 15.0, "increasing"
        if ratio > 1.5:
            return 10.0, "increasing"
        if ratio > 1:
            return 5.0, "slightly_increasing"
        if ratio < 0.5:
            return 0.0, "decreasing"
        return 0.0, "stable"

    def _score_requests(
        self,
        groups: Dict[str, AggregatedRecord],
        total_requests: int,
        as_of: date
    ) -> List[AggregatedRecord]:
        """Apply the three-factor demand score and sort descending."""
        high, medium = self.demand_thresholds

        for record in groups.values():
            windows = self._age_counts(record, as_of)

            frequency = min(50.0, 5 * _percent(record.count, total_requests))
            recency = min(30.0, 0.3 * _percent(windows["last30"], record.count))
            consistency = min(20.0, 4 * len(record.months))

            score = round(_clamp(frequency + recency + consistency), 1)

            record.score = score
            record.breakdown = {
                "frequency": round(frequency, 2),
                "recency": round(recency, 2),
                "consistency": round(consistency, 2)
            }
            if score >= high:
                record.level = "high"
            elif score >= medium:
                record.level = "medium"
            else:
                record.level = "low"

        return sorted(groups.values(), key=lambda r: r.score, reverse=True)

    def rating_history(self, reviews: Iterable) -> List[Dict]:
        """
        Monthly average rating across all reviews.

        Returns:
            [{"month", "avgRating", "reviewCount"}] sorted by month
        """
        monthly: Dict[str, List[int]] = {}
        for review in as_analyzed_reviews(reviews):
            month = period_of(review.date)
            if month is None or not review.rating:
                continue
            monthly.setdefault(month, []).append(review.rating)

        return [
            {
                "month": month,
                "avgRating": round(sum(ratings) / len(ratings), 2),
                "reviewCount": len(ratings)
            }
            for month, ratings in sorted(monthly.items())
        ]

    def issue_deep_dive(self, issue: Dict, reviews: Iterable) -> Dict:
        """
        Detailed view of one issue against the rest of the batch.

        Args:
            issue: Issue record as produced by generate()
            reviews: The full analyzed batch the record came from

        Returns:
            Dict with rating impact, per-month timeline, trend and recommendations
        """
        analyzed = as_analyzed_reviews(reviews)
        issue_id = issue["id"]

        related, others = [], []
        for review in analyzed:
            if any(normalize_key(tag) == issue_id for tag in review.issues):
                related.append(review)
            else:
                others.append(review)

        def avg(items: List[AnalyzedReview]) -> float:
            return sum(r.rating for r in items) / len(items) if items else 0.0

        timeline = self._issue_timeline(related)
        trend = self._deep_dive_trend(timeline)

        return {
            "issue": {
                "id": issue_id,
                "title": issue.get("title"),
                "severity": issue.get("severity"),
                "count": issue.get("count"),
                "avgRating": issue.get("avgRating")
            },
            "impact": {
                "ratingDrop": round(avg(related) - avg(others), 2),
                "affectedReviews": len(related),
                "affectedPercentage": round(_percent(len(related), len(analyzed)), 1),
                "trend": trend
            },
            "timeline": timeline,
            "recommendations": self._recommendations(issue, trend),
            "evidence": issue.get("evidence", [])
        }

    @staticmethod
    def _issue_timeline(reviews: List[AnalyzedReview]) -> List[Dict]:
        monthly: Dict[str, Dict] = {}
        for review in reviews:
            month = period_of(review.date)
            if month is None:
                continue
            bucket = monthly.setdefault(month, {"count": 0, "versions": []})
            bucket["count"] += 1
            version = review.version or "unknown"
            if version not in bucket["versions"]:
                bucket["versions"].append(version)

        return [
            {"month": month, "reportCount": data["count"], "versions": data["versions"]}
            for month, data in sorted(monthly.items())
        ]

    @staticmethod
    def _deep_dive_trend(timeline: List[Dict]) -> str:
        """Last three months against everything before them."""
        if len(timeline) < 2:
            return "stable"

        recent = timeline[-3:]
        earlier = timeline[:-3]
        if not earlier:
            return "new"

        recent_avg = sum(t["reportCount"] for t in recent) / len(recent)
        earlier_avg = sum(t["reportCount"] for t in earlier) / len(earlier)

        if recent_avg > earlier_avg * 1.5:
            return "increasing"
        if recent_avg < earlier_avg * 0.5:
            return "decreasing"
        return "stable"

    @staticmethod
    def _recommendations(issue: Dict, trend: str) -> List[str]:
        recommendations = []

        if issue.get("severity") == "critical":
            recommendations.append("Immediate fix required - critical impact on user experience")

        if issue.get("count", 0) > 20:
            recommendations.append("High volume of reports - prioritize in next sprint")

        if trend == "increasing":
            recommendations.append("Issue reports are increasing - investigate recent changes")
        elif trend == "decreasing":
            recommendations.append("Issue appears to be improving - verify fix is working")

        versions = issue.get("versions") or []
        if len(versions) == 1:
            recommendations.append(f"Issue specific to version {versions[0]} - check release notes")

        if not recommendations:
            recommendations.append("Monitor for changes in future releases")

        return recommendations


# Design Notes:
#
# 1. Scores are clamped to 0-100 and rounded to one decimal; breakdown factors
#    keep two decimals.
#
# 2. Every age window is measured against as_of; reviews dated after as_of
#    fall into the last-30-days window.
#
# 3. count may exceed len(evidence); evidence keeps the first reviews in input
#    order.
