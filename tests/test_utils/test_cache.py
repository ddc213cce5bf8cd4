"""
Unit tests for result cache and fingerprints.
"""

import pytest
import os
import tempfile
from reviewlens.models.review import AnalyzedReview, Review
from reviewlens.utils.cache import (
    FileResultCache,
    InMemoryResultCache,
    make_batch_key,
    make_review_key,
)


@pytest.fixture
def temp_cache_path():
    """Create temporary cache file location."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield os.path.join(tmpdir, "nested", "cache.json")


def test_review_key_object_and_dict_agree():
    """Test the same review fingerprints identically in both shapes."""
    review = Review(text="Crashes", rating=2, date="2024-01-01", version="1.0")
    record = {"text": "Crashes", "rating": 2, "version": "1.0", "date": "2030-01-01"}

    assert make_review_key(review) == make_review_key(record)


def test_review_key_depends_on_rating_and_version():
    base = {"text": "Crashes", "rating": 2, "version": "1.0"}

    assert make_review_key(base) != make_review_key(dict(base, rating=3))
    assert make_review_key(base) != make_review_key(dict(base, version="1.1"))


def test_batch_key_is_order_sensitive():
    """Test batch fingerprints change with content and order."""
    a = AnalyzedReview(text="a", title="", date=None, rating=1, version="", intent="complaint", issues=("x",))
    b = AnalyzedReview(text="b", title="", date=None, rating=5, version="", intent="praise", issues=())

    assert make_batch_key([a, b]) == make_batch_key([a, b])
    assert make_batch_key([a, b]) != make_batch_key([b, a])
    assert make_batch_key([a.to_dict(), b.to_dict()]) == make_batch_key([a, b])


def test_in_memory_cache():
    cache = InMemoryResultCache()
    assert cache.get("missing") is None

    cache.set("k", {"intent": "praise"})
    assert cache.get("k") == {"intent": "praise"}


def test_file_cache_persists(temp_cache_path):
    """Test entries survive a new cache instance."""
    cache = FileResultCache(temp_cache_path)
    cache.set("k", {"intent": "complaint", "issues": ["login_bug"]})

    assert os.path.exists(temp_cache_path)
    assert not os.path.exists(temp_cache_path + ".tmp")

    reloaded = FileResultCache(temp_cache_path)
    assert reloaded.get("k") == {"intent": "complaint", "issues": ["login_bug"]}


def test_file_cache_corrupt_file_starts_empty(temp_cache_path):
    """Test a corrupt cache file is ignored rather than fatal."""
    os.makedirs(os.path.dirname(temp_cache_path), exist_ok=True)
    with open(temp_cache_path, 'w') as f:
        f.write("{not json")

    cache = FileResultCache(temp_cache_path)

    assert cache.entries == {}
    cache.set("k", "memo")
    assert FileResultCache(temp_cache_path).get("k") == "memo"


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
