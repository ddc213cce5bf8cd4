"""
Memo Agent.

Plain-text product feedback memo summarizing the strongest signals of an
analyzed batch.
"""

import logging
from collections import Counter
from typing import Callable, Iterable, List, Tuple

from reviewlens.models.review import AnalyzedReview, as_analyzed_reviews
from reviewlens.utils.cache import ResultCache, make_batch_key
from reviewlens.utils.normalizer import normalize_key

logger = logging.getLogger(__name__)

EMPTY_MEMO = "No reviews to generate memo from."


def _top_issues(
    reviews: List[AnalyzedReview],
    keep: Callable[[AnalyzedReview], bool],
    limit: int = 3
) -> List[Tuple[str, int]]:
    counts = Counter()
    for review in reviews:
        if keep(review):
            counts.update(key for key in map(normalize_key, review.issues) if key)
    return counts.most_common(limit)


def _fmt(items: List[Tuple[str, int]]) -> str:
    if not items:
        return "• No strong signal"
    return "\n".join(f"• {key} ({count})" for key, count in items)


def generate_memo(reviews: Iterable) -> str:
    """Render the memo for a non-empty batch."""
    analyzed = as_analyzed_reviews(reviews)
    if not analyzed:
        return EMPTY_MEMO

    total = len(analyzed)
    avg = sum(r.rating for r in analyzed) / total

    sections = [
        ("BIGGEST COMPLAINTS", lambda r: r.intent == "complaint"),
        ("BIGGEST FEATURE REQUESTS", lambda r: r.intent == "feature_request"),
        ("BIGGEST PRAISES", lambda r: r.intent == "praise"),
        ("LOW RATING DRIVERS (1-2★)", lambda r: r.rating <= 2),
        ("MID RATING DRIVERS (3-4★)", lambda r: 3 <= r.rating <= 4),
        ("HIGH RATING DRIVERS (5★)", lambda r: r.rating == 5),
    ]

    lines = [
        "PRODUCT FEEDBACK MEMO",
        "",
        "KEY METRICS",
        f"• Total Reviews: {total}",
        f"• Average Rating: {avg:.2f}",
    ]
    for heading, keep in sections:
        lines += ["", heading, _fmt(_top_issues(analyzed, keep))]

    lines += [
        "",
        "RECOMMENDATIONS",
        "1. Prioritize top complaint issues to stabilize ratings.",
        "2. Evaluate most requested features for roadmap inclusion.",
        "3. Reinforce strengths driving high ratings.",
    ]
    return "\n".join(lines)


class MemoAgent:
    """Memoizes generate_memo() per batch fingerprint."""

    def __init__(self, cache: ResultCache, render: Callable[[Iterable], str] = generate_memo):
        self.cache = cache
        self.render = render

    def run(self, reviews: Iterable) -> str:
        analyzed = as_analyzed_reviews(reviews)
        if not analyzed:
            return EMPTY_MEMO

        key = make_batch_key(analyzed)
        cached = self.cache.get(key)
        if cached:
            logger.debug(f"Memo served from cache ({key[:12]})")
            return cached

        memo = self.render(analyzed)
        self.cache.set(key, memo)
        logger.info(f"Generated memo for {len(analyzed)} reviews")
        return memo


# Design Notes:
#
# 1. The memo is keyed by make_batch_key, so any change to text, title, rating
#    or issues renders a new memo.
#
# 2. Empty batches return EMPTY_MEMO and leave the cache untouched.
