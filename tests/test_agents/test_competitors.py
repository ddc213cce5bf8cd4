"""
Unit tests for Competitor Comparison Agent.
"""

import pytest
from reviewlens.agents.competitors import CompetitorComparator, extract_signals


def _review(intent, issues, rating=4, text="review"):
    return {"text": text, "rating": rating, "date": "2024-05-01", "intent": intent, "issues": issues}


@pytest.fixture
def main_reviews():
    return [
        _review("praise", ["fast_sync"], 5),
        _review("feature_request", ["dark_mode"], 3),
        _review("feature_request", ["Dark Mode"], 3),
        _review("complaint", ["login_bug"], 1),
    ]


@pytest.fixture
def rival_reviews():
    return [
        _review("praise", ["offline_mode"], 5, "Works offline, great"),
        _review("praise", ["fast_sync"], 5, "Sync is quick"),
        _review("feature_request", ["widgets"], 3, "Need widgets"),
        _review("feature_request", ["dark_mode"], 4, "Dark mode please"),
        _review("praise", ["dark_mode"], 5, "They finally added dark mode!"),
        _review("complaint", ["ads"], 1, "Too many ads"),
    ]


def test_extract_signals(main_reviews):
    """Test signals are counted on normalized keys and ranked by count."""
    signals = extract_signals(main_reviews)

    assert signals["liked"] == [{"text": "fast_sync", "count": 1}]
    assert signals["disliked"] == [{"text": "login_bug", "count": 1}]
    assert signals["askedFor"] == [{"text": "dark_mode", "count": 2}]
    assert signals["likelyShipped"] == []


def test_extract_signals_empty():
    assert extract_signals([]) == {
        "liked": [], "disliked": [], "askedFor": [], "likelyShipped": []
    }


def test_extract_signals_limit():
    reviews = [_review("complaint", [f"bug_{n}"]) for n in range(8)]

    assert len(extract_signals(reviews, limit=5)["disliked"]) == 5


def test_likely_shipped(rival_reviews):
    assert extract_signals(rival_reviews)["likelyShipped"] == ["They finally added dark mode!"]


def test_compare(rival_reviews):
    """Test per-competitor rating, sentiment and top signals."""
    comparison = CompetitorComparator().compare({"rival": rival_reviews})

    rival = comparison["rival"]
    assert rival["reviewCount"] == 6
    assert rival["rating"] == 3.83
    assert rival["sentiment"] == {"positive": 3, "neutral": 2, "negative": 1}
    assert [item["text"] for item in rival["liked"]] == ["offline_mode", "fast_sync", "dark_mode"]
    assert rival["disliked"] == [{"text": "ads", "count": 1}]
    assert [item["text"] for item in rival["requested"]] == ["widgets", "dark_mode"]


def test_gap_analysis(main_reviews, rival_reviews):
    """Test feature, demand and catch-up gaps against the main app."""
    comparator = CompetitorComparator()
    gaps = comparator.gap_analysis(
        extract_signals(main_reviews), {"rival": extract_signals(rival_reviews)}
    )

    assert [(g["type"], g["signal"]) for g in gaps] == [
        ("feature_gap", "offline_mode"),
        ("feature_gap", "dark_mode"),
        ("demand_gap", "widgets"),
        ("catchup_gap", "They finally added dark mode!"),
    ]
    assert all(g["competitor"] == "rival" for g in gaps)
    assert gaps[0]["confidence"] == "high"
    assert gaps[2]["confidence"] == "medium"


def test_build(main_reviews, rival_reviews):
    result = CompetitorComparator().build(
        main_reviews, {"rival": rival_reviews, "other": []}
    )

    assert result["summary"] == {
        "competitors": ["other", "rival"],
        "feature_gaps": 2,
        "demand_gaps": 1,
        "catchup_gaps": 1,
    }
    assert result["comparison"]["other"]["reviewCount"] == 0
    assert result["comparison"]["other"]["rating"] == 0


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
