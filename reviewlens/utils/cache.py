"""
Result cache.

Narrow get/set capability injected into agents that memoize classification
and memo results. Keys are content fingerprints, so entries never go stale.
"""

import hashlib
import json
import logging
import os
from typing import Dict, Iterable, Optional

logger = logging.getLogger(__name__)


def make_review_key(review) -> str:
    """
    Fingerprint of one raw review: sha256 of "text|rating|version".

    Accepts a Review object or a dict.
    """
    if isinstance(review, dict):
        text, rating, version = review.get("text"), review.get("rating"), review.get("version")
    else:
        text, rating, version = review.text, review.rating, review.version
    payload = f"{text}|{rating}|{version}"
    return hashlib.sha256(payload.encode("utf-8")).hexdigest()


def make_batch_key(analyzed_reviews: Iterable) -> str:
    """
    Fingerprint of a full analyzed batch (text, title, rating and issues).
    """
    parts = []
    for review in analyzed_reviews:
        if isinstance(review, dict):
            text, title, rating = review.get("text"), review.get("title"), review.get("rating")
            issues = review.get("issues") or []
        else:
            text, title, rating, issues = review.text, review.title, review.rating, review.issues
        parts.append(f"{text}|{title}|{rating}|{','.join(str(i) for i in issues)}")
    return hashlib.sha256("||".join(parts).encode("utf-8")).hexdigest()


class ResultCache:
    """Key/value interface used by the agents."""

    def get(self, key: str) -> Optional[object]:
        raise NotImplementedError

    def set(self, key: str, value: object) -> None:
        raise NotImplementedError


class InMemoryResultCache(ResultCache):
    """Process-local cache for tests and one-off runs."""

    def __init__(self):
        self.entries: Dict[str, object] = {}

    def get(self, key: str) -> Optional[object]:
        return self.entries.get(key)

    def set(self, key: str, value: object) -> None:
        self.entries[key] = value


class FileResultCache(ResultCache):
    """
    JSON-file backed cache.

    Entries are loaded once at construction; every set() rewrites the file
    with an atomic temp-file + rename.
    """

    def __init__(self, cache_path: str):
        """
        Initialize cache from disk or start empty.

        Args:
            cache_path: Path to the cache JSON file
        """
        self.cache_path = str(cache_path)
        self.entries: Dict[str, object] = {}

        if os.path.exists(self.cache_path):
            self._load()
        else:
            logger.info(f"No existing cache found at {self.cache_path}, starting empty")

    def _load(self) -> None:
        try:
            with open(self.cache_path, 'r') as f:
                data = json.load(f)
            if not isinstance(data, dict):
                raise ValueError("cache file must contain a JSON object")
            self.entries = data
            logger.info(f"Loaded {len(self.entries)} cache entries")
        except (json.JSONDecodeError, ValueError) as e:
            logger.error(f"Failed to parse cache file {self.cache_path}: {e}. Starting empty.")
            self.entries = {}

    def get(self, key: str) -> Optional[object]:
        return self.entries.get(key)

    def set(self, key: str, value: object) -> None:
        self.entries[key] = value
        self.save()

    def save(self) -> None:
        """Persist cache to disk with atomic write pattern."""
        directory = os.path.dirname(self.cache_path)
        if directory:
            os.makedirs(directory, exist_ok=True)

        temp_path = f"{self.cache_path}.tmp"
        try:
            with open(temp_path, 'w') as f:
                json.dump(self.entries, f, indent=2)
            os.replace(temp_path, self.cache_path)
            logger.debug(f"Cache saved: {len(self.entries)} entries")
        except Exception as e:
            logger.error(f"Failed to save cache: {e}")
            if os.path.exists(temp_path):
                os.remove(temp_path)
            raise


# Design Notes:
#
# 1. Keys are content fingerprints; an entry is never invalidated, only
#    replaced.
#
# 2. FileResultCache rewrites the whole file on every set().
