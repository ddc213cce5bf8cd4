"""
Review Analysis Agent.

Turns raw reviews into AnalyzedReviews, classifying only the reviews that
are not already in the result cache.
"""

import logging
from typing import Dict, List, Optional

from reviewlens.models.review import AnalyzedReview, Classification, Review
from reviewlens.utils.cache import ResultCache, make_review_key

logger = logging.getLogger(__name__)


class ReviewAnalysisAgent:
    """
    Cache-aware classification loop.

    classifier: any object with classify(Review) -> Classification
    cache: ResultCache keyed by make_review_key(review)
    """

    def __init__(self, classifier, cache: ResultCache):
        self.classifier = classifier
        self.cache = cache

    def run(self, raw_reviews: List) -> List[AnalyzedReview]:
        """
        Classify and merge a batch of raw reviews.

        Args:
            raw_reviews: Review objects or store dicts

        Returns:
            AnalyzedReviews in input order (invalid store records are skipped)
        """
        analyzed = []
        hits = 0
        failed = 0

        for item in raw_reviews:
            review = self._as_review(item)
            if review is None:
                continue

            key = make_review_key(review)
            cached = self.cache.get(key)

            classification = None
            if cached is not None:
                classification = self._from_cache(cached, key)

            if classification is not None:
                hits += 1
            else:
                classification = self.classifier.classify(review)
                if classification.intent is None:
                    # Failed classifications are retried on the next run
                    failed += 1
                else:
                    self.cache.set(key, classification.to_dict())

            analyzed.append(AnalyzedReview.from_review(review, classification))

        logger.info(
            f"Analyzed {len(analyzed)} reviews "
            f"({hits} from cache, {len(analyzed) - hits - failed} classified, {failed} unclassified)"
        )
        return analyzed

    @staticmethod
    def _as_review(item) -> Optional[Review]:
        if isinstance(item, Review):
            return item
        try:
            return Review.from_dict(item)
        except (TypeError, ValueError) as e:
            logger.warning(f"Skipping invalid review record: {e}")
            return None

    @staticmethod
    def _from_cache(cached: Dict, key: str) -> Optional[Classification]:
        try:
            classification = Classification.from_dict(cached)
        except (AttributeError, ValueError) as e:
            logger.warning(f"Discarding malformed cache entry {key[:12]}: {e}")
            return None
        if classification.intent is None:
            return None
        return classification


# Design Notes:
#
# 1. Only classifications with an intent are written to the cache; fallbacks
#    are retried on the next run.
#
# 2. Cached entries without a valid intent are treated as misses.
