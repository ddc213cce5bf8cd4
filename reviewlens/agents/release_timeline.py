"""
Release Timeline Builder.

Buckets analyzed reviews by (version, month), then diffs consecutive buckets
to surface issues that appeared or went away between releases.
"""

import logging
from collections import Counter
from typing import Dict, Iterable, List, Optional, Tuple

from reviewlens.models.release import TimelineEntry
from reviewlens.models.review import as_analyzed_reviews
from reviewlens.utils.normalizer import normalize_key, period_of

logger = logging.getLogger(__name__)

UNKNOWN_VERSION = "unknown"


class ReleaseTimelineBuilder:
    """
    Builds a chronological list of release buckets with issue diffs.

    Each entry is compared with the entry immediately before it in period
    order, regardless of version. The first entry has no predecessor, so its
    issues are never reported as new.
    """

    def __init__(self, dominant_issues: int = 3):
        self.dominant_issues = dominant_issues

    def build(self, reviews: Iterable) -> Dict:
        """
        Build the release timeline for a batch of analyzed reviews.

        Args:
            reviews: AnalyzedReview objects or equivalent dicts

        Returns:
            {"timeline": [entry, ...], "summary": {...}}
        """
        groups: Dict[Tuple[str, str], TimelineEntry] = {}
        skipped = 0

        for review in as_analyzed_reviews(reviews):
            period = period_of(review.date)
            if period is None:
                skipped += 1
                continue

            version = review.version or UNKNOWN_VERSION
            entry = groups.get((version, period))
            if entry is None:
                entry = TimelineEntry(version=version, period=period)
                groups[(version, period)] = entry

            entry.ratings.append(review.rating)
            for tag in review.issues:
                key = normalize_key(tag)
                if key:
                    entry.issue_counts[key] += 1

        if skipped:
            logger.debug(f"Skipped {skipped} reviews with unparseable dates")

        # Stable sort: entries sharing a period keep first-seen order
        entries = sorted(groups.values(), key=lambda e: e.period)
        self._diff(entries)

        logger.info(f"Built release timeline with {len(entries)} entries")

        return {
            "timeline": [entry.to_dict(self.dominant_issues) for entry in entries],
            "summary": self._summarize(entries, skipped)
        }

    @staticmethod
    def _diff(entries: List[TimelineEntry]) -> None:
        """Fill new/resolved issues and regressions against the previous entry."""
        for previous, current in zip(entries, entries[1:]):
            current_issues = current.issues
            previous_issues = previous.issues

            current.new_issues = [i for i in current_issues if i not in previous.issue_counts]
            current.resolved_issues = [i for i in previous_issues if i not in current.issue_counts]

            if current.avg_rating < previous.avg_rating and current.new_issues:
                current.regressions = list(current.new_issues)
                current.notes = (
                    f"Rating dropped from {previous.avg_rating:.1f} to "
                    f"{current.avg_rating:.1f} with new issues: "
                    f"{', '.join(current.regressions)}"
                )

    @staticmethod
    def _summarize(entries: List[TimelineEntry], skipped: int) -> Dict:
        worst: Optional[TimelineEntry] = None
        best: Optional[TimelineEntry] = None
        for entry in entries:
            # Strict comparisons keep the earliest entry on ties
            if worst is None or entry.avg_rating < worst.avg_rating:
                worst = entry
            if best is None or entry.avg_rating > best.avg_rating:
                best = entry

        regression_counts = Counter()
        for entry in entries:
            regression_counts.update(entry.regressions)
        most_common = regression_counts.most_common(1)

        return {
            "worst_release": worst.version if worst else None,
            "worst_release_period": worst.period if worst else None,
            "best_release": best.version if best else None,
            "best_release_period": best.period if best else None,
            "most_common_regression_trigger": most_common[0][0] if most_common else None,
            "skipped_reviews": skipped
        }


# Design Notes:
#
# 1. Entries are diffed against their predecessor in period order, regardless
#    of version numbering.
#
# 2. new_issues and resolved_issues are disjoint; regressions is a subset of
#    new_issues.
