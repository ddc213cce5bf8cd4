"""
Storage utility.

File I/O helpers for raw reviews, analyzed reviews and computed snapshots.
"""

import json
import os
import logging
import re
from typing import Dict, List, Optional

logger = logging.getLogger(__name__)

SNAPSHOT_NAMES = (
    "insights", "regression_tree", "release_timeline", "impact_model", "memo",
    "competitor_comparison"
)
SCOPE_PATTERN = re.compile(r"^[A-Za-z0-9][A-Za-z0-9_.-]*$")


def validate_scope(scope: str) -> str:
    """
    Check that a scope can be used as a single file or directory name.

    Raises:
        ValueError: If the scope is empty or contains path separators or a leading dot
    """
    if not isinstance(scope, str) or not SCOPE_PATTERN.match(scope):
        raise ValueError(
            f"Invalid scope: {scope!r}. Use letters, digits, '_', '-' or '.' "
            "and start with a letter or digit"
        )
    return scope


class StorageManager:
    """
    Manages file I/O for all data persistence except the result cache.

    Handles:
    - Raw reviews (data/reviews/<scope>.json)
    - Analyzed reviews (data/analyzed/<scope>.json)
    - Snapshots (data/snapshots/<scope>/<name>.json)

    scope is "main" for the tracked app or a competitor identifier.
    """

    def __init__(self, data_root: str):
        """
        Initialize storage manager.

        Args:
            data_root: Root data directory (e.g., /path/to/data)
        """
        self.data_root = str(data_root)
        self.reviews_dir = os.path.join(self.data_root, "reviews")
        self.analyzed_dir = os.path.join(self.data_root, "analyzed")
        self.snapshots_dir = os.path.join(self.data_root, "snapshots")

        # Create directories if they don't exist
        os.makedirs(self.reviews_dir, exist_ok=True)
        os.makedirs(self.analyzed_dir, exist_ok=True)
        os.makedirs(self.snapshots_dir, exist_ok=True)

        logger.info(f"Initialized StorageManager with data_root={self.data_root}")

    def save_raw_reviews(self, reviews: List[Dict], scope: str = "main") -> None:
        """
        Save raw reviews for a scope.

        Args:
            reviews: List of review dicts
            scope: "main" or a competitor identifier
        """
        filepath = os.path.join(self.reviews_dir, f"{validate_scope(scope)}.json")
        self._write(filepath, reviews)
        logger.info(f"Saved {len(reviews)} raw reviews to {filepath}")

    def load_raw_reviews(self, scope: str = "main") -> Optional[List[Dict]]:
        """
        Load raw reviews for a scope.

        Returns:
            List of review dicts, or None if file doesn't exist
        """
        filepath = os.path.join(self.reviews_dir, f"{validate_scope(scope)}.json")
        reviews = self._read(filepath)
        if reviews is not None:
            logger.debug(f"Loaded {len(reviews)} raw reviews from {filepath}")
        return reviews

    def save_analyzed_reviews(self, reviews: List[Dict], scope: str = "main") -> None:
        filepath = os.path.join(self.analyzed_dir, f"{validate_scope(scope)}.json")
        self._write(filepath, reviews)
        logger.info(f"Saved {len(reviews)} analyzed reviews to {filepath}")

    def load_analyzed_reviews(self, scope: str = "main") -> Optional[List[Dict]]:
        filepath = os.path.join(self.analyzed_dir, f"{validate_scope(scope)}.json")
        return self._read(filepath)

    def save_snapshot(self, name: str, data, scope: str = "main") -> str:
        """
        Save a computed artifact (insights, regression tree, ...).

        Returns:
            Path of the written snapshot
        """
        if name not in SNAPSHOT_NAMES:
            raise ValueError(f"Unknown snapshot: {name}. Must be one of {', '.join(SNAPSHOT_NAMES)}")

        scope_dir = os.path.join(self.snapshots_dir, validate_scope(scope))
        os.makedirs(scope_dir, exist_ok=True)
        filepath = os.path.join(scope_dir, f"{name}.json")
        self._write(filepath, data)
        logger.info(f"Saved {name} snapshot to {filepath}")
        return filepath

    def load_snapshot(self, name: str, scope: str = "main"):
        """Load a computed artifact, or None if it was never saved."""
        filepath = os.path.join(self.snapshots_dir, validate_scope(scope), f"{name}.json")
        return self._read(filepath)

    def list_scopes(self) -> List[str]:
        """
        Get all scopes that have raw or analyzed reviews.

        Returns:
            Sorted list of scope names
        """
        scopes = set()
        for directory in (self.reviews_dir, self.analyzed_dir):
            for filename in os.listdir(directory):
                name = filename[:-len('.json')]
                if filename.endswith('.json') and SCOPE_PATTERN.match(name):
                    scopes.add(name)
        return sorted(scopes)

    @staticmethod
    def _write(filepath: str, data) -> None:
        try:
            with open(filepath, 'w') as f:
                json.dump(data, f, indent=2)
        except Exception as e:
            logger.error(f"Failed to write {filepath}: {e}")
            raise

    @staticmethod
    def _read(filepath: str):
        if not os.path.exists(filepath):
            logger.debug(f"No file found at {filepath}")
            return None

        try:
            with open(filepath, 'r') as f:
                return json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.error(f"Failed to load {filepath}: {e}")
            return None


# Design Notes:
#
# 1. Scopes must be plain file names; anything with a separator or leading dot
#    raises ValueError before touching disk.
#
# 2. Reads return None for missing or corrupt files; writes log and re-raise.
