"""
Competitor Comparison Agent.

Compares the tracked app with competitor scopes: per-competitor rating,
sentiment and top signals, plus the gaps between what competitor users
praise or request and what the tracked app's users say.
"""

import logging
from collections import Counter
from typing import Dict, Iterable, List

from reviewlens.models.review import AnalyzedReview, as_analyzed_reviews
from reviewlens.utils.normalizer import normalize_key

logger = logging.getLogger(__name__)

SHIPPED_MARKERS = (
    "after update",
    "after the update",
    "finally added",
    "now works",
    "new version",
    "latest update",
)

GAP_REASONS = {
    "feature_gap": "Users praise this in competitor but not in main app",
    "demand_gap": "Users request this in competitor reviews",
    "catchup_gap": "Competitor shipped this; main app users still request it",
}


def _top(reviews: List[AnalyzedReview], intent: str, limit: int) -> List[Dict]:
    counts = Counter()
    for review in reviews:
        if review.intent == intent:
            counts.update(key for key in map(normalize_key, review.issues) if key)
    return [{"text": key, "count": count} for key, count in counts.most_common(limit)]


def extract_signals(reviews: Iterable, limit: int = 5) -> Dict:
    """
    Top praised, complained-about and requested issue keys of one scope.

    likelyShipped holds review texts that mention a recent update
    ("finally added", "new version", ...), in input order.
    """
    analyzed = as_analyzed_reviews(reviews)

    shipped = [
        review.text for review in analyzed
        if any(marker in review.text.lower() for marker in SHIPPED_MARKERS)
    ]

    return {
        "liked": _top(analyzed, "praise", limit),
        "disliked": _top(analyzed, "complaint", limit),
        "askedFor": _top(analyzed, "feature_request", limit),
        "likelyShipped": shipped[:limit],
    }


class CompetitorComparator:
    """
    Side-by-side view of competitor scopes and gap analysis against the main app.

    Gap types:
    - feature_gap: praised by competitor users, not praised for the main app
    - demand_gap: requested by competitor users, not requested for the main app
    - catchup_gap: a competitor update mentions something main app users request
    """

    def __init__(self, signal_limit: int = 5):
        self.signal_limit = signal_limit

    def compare(self, competitor_reviews: Dict[str, Iterable]) -> Dict[str, Dict]:
        """
        Summarize every competitor scope.

        Args:
            competitor_reviews: Mapping of scope -> analyzed reviews

        Returns:
            Mapping of scope -> {reviewCount, rating, sentiment, liked, disliked, requested}
        """
        result = {}
        for scope, reviews in competitor_reviews.items():
            analyzed = as_analyzed_reviews(reviews)
            signals = extract_signals(analyzed, self.signal_limit)
            result[scope] = {
                "reviewCount": len(analyzed),
                "rating": self._avg_rating(analyzed),
                "sentiment": self._sentiment(analyzed),
                "liked": signals["liked"],
                "disliked": signals["disliked"],
                "requested": signals["askedFor"],
            }
        return result

    def gap_analysis(self, main_signals: Dict, competitor_signals: Dict[str, Dict]) -> List[Dict]:
        """
        List gaps between the main app and each competitor.

        Args:
            main_signals: extract_signals() output for the main app
            competitor_signals: Mapping of scope -> extract_signals() output

        Returns:
            Gap dicts {type, competitor, signal, confidence, reason}, grouped by competitor
        """
        main_liked = {item["text"] for item in main_signals.get("liked", [])}
        main_asked = {item["text"] for item in main_signals.get("askedFor", [])}

        gaps = []
        for competitor, signals in competitor_signals.items():
            for item in signals.get("liked", []):
                if item["text"] not in main_liked:
                    gaps.append(self._gap("feature_gap", competitor, item["text"], "high"))

            for item in signals.get("askedFor", []):
                if item["text"] not in main_asked:
                    gaps.append(self._gap("demand_gap", competitor, item["text"], "medium"))

            for shipped in signals.get("likelyShipped", []):
                text = shipped.lower()
                if any(key in text or key.replace("_", " ") in text for key in main_asked):
                    gaps.append(self._gap("catchup_gap", competitor, shipped, "high"))

        return gaps

    def build(self, main_reviews: Iterable, competitor_reviews: Dict[str, Iterable]) -> Dict:
        """
        Comparison plus gap analysis for one main app and its competitors.

        Returns:
            {"comparison": {...}, "gaps": [...], "summary": {...}}
        """
        main_signals = extract_signals(main_reviews, self.signal_limit)
        competitor_signals = {
            scope: extract_signals(reviews, self.signal_limit)
            for scope, reviews in competitor_reviews.items()
        }

        comparison = self.compare(competitor_reviews)
        gaps = self.gap_analysis(main_signals, competitor_signals)
        gap_counts = Counter(gap["type"] for gap in gaps)

        logger.info(f"Compared {len(comparison)} competitors: {len(gaps)} gaps found")

        return {
            "comparison": comparison,
            "gaps": gaps,
            "summary": {
                "competitors": sorted(comparison),
                "feature_gaps": gap_counts["feature_gap"],
                "demand_gaps": gap_counts["demand_gap"],
                "catchup_gaps": gap_counts["catchup_gap"],
            }
        }

    @staticmethod
    def _gap(gap_type: str, competitor: str, signal: str, confidence: str) -> Dict:
        return {
            "type": gap_type,
            "competitor": competitor,
            "signal": signal,
            "confidence": confidence,
            "reason": GAP_REASONS[gap_type],
        }

    @staticmethod
    def _avg_rating(reviews: List[AnalyzedReview]) -> float:
        if not reviews:
            return 0
        return round(sum(r.rating for r in reviews) / len(reviews), 2)

    @staticmethod
    def _sentiment(reviews: List[AnalyzedReview]) -> Dict[str, int]:
        positive = sum(1 for r in reviews if r.intent == "praise")
        negative = sum(1 for r in reviews if r.intent == "complaint")
        return {
            "positive": positive,
            "neutral": len(reviews) - positive - negative,
            "negative": negative,
        }


# Design Notes:
#
# 1. Signals are compared on normalized issue keys; likelyShipped entries are
#    raw review texts matched against requested keys with underscores read as
#    spaces.
#
# 2. Gaps are listed per competitor in insertion order: feature, demand, then
#    catch-up.
