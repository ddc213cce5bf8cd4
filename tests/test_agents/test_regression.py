"""
Unit tests for Regression Tree Builder.
"""

import pytest
from reviewlens.agents.regression import RegressionTreeBuilder


def _monthly(issue, month, count, rating, version):
    return [
        {
            "text": f"{issue} {month} #{n}",
            "rating": rating,
            "date": f"{month}-{n % 28 + 1:02d}",
            "version": version,
            "intent": "complaint",
            "issues": [issue],
        }
        for n in range(count)
    ]


@pytest.fixture
def builder():
    return RegressionTreeBuilder()


@pytest.fixture
def reviews():
    return [
        {"text": "a", "date": "2024-01-15", "rating": 2, "version": "1.0.0",
         "intent": "complaint", "issues": ["login_bug", "crashes"]},
        {"text": "b", "date": "2024-01-20", "rating": 1, "version": "1.0.0",
         "intent": "complaint", "issues": ["login_bug"]},
        {"text": "c", "date": "2024-02-10", "rating": 3, "version": "1.1.0",
         "intent": "complaint", "issues": ["slow_loading"]},
        {"text": "d", "date": "2024-02-15", "rating": 2, "version": "1.1.0",
         "intent": "complaint", "issues": ["login_bug", "slow_loading"]},
        {"text": "e", "date": "2024-03-01", "rating": 4, "version": "1.2.0",
         "intent": "complaint", "issues": ["minor_ui_issue"]},
        {"text": "f", "date": "2024-03-10", "rating": 5, "version": "1.2.0",
         "intent": "praise", "issues": []},
    ]


@pytest.fixture
def regressing_reviews():
    return (
        _monthly("checkout_error", "2024-01", 1, 4, "1.0.0")
        + _monthly("checkout_error", "2024-02", 7, 3, "2.0.0")
        + _monthly("checkout_error", "2024-03", 9, 2, "2.1.0")
    )


def test_single_period_issue(builder):
    """Two mentions in one month: stable, and the worst issue of its batch."""
    reviews = [
        {"date": "2024-01-05", "rating": 1, "version": "1.0", "issues": ["login_bug"]},
        {"date": "2024-01-20", "rating": 2, "version": "1.0", "issues": ["login_bug"]},
        {"date": "2024-01-25", "rating": 5, "version": "1.0", "issues": []},
    ]

    tree = builder.build(reviews)
    node = tree["issues"]["login_bug"]

    assert node["total_mentions"] == 2
    assert node["timeline"] == [
        {"period": "2024-01", "count": 2, "avg_rating": 1.5, "versions": ["1.0"]}
    ]
    assert node["status"] == "stable"
    assert node["rating_impact"] == 0.0
    assert node["severity"] == 1.0
    assert node["spikes"] == []


def test_tree_structure(builder, reviews):
    """Test period range, version causality and normalized severity."""
    tree = builder.build(reviews)

    assert tree["period"] == {"from": "2024-01", "to": "2024-03"}
    assert set(tree["issues"]) == {"login_bug", "crashes", "slow_loading", "minor_ui_issue"}
    assert tree["summary"]["total_unique_issues"] == 4
    assert tree["summary"]["top_regressions"] == []

    login = tree["issues"]["login_bug"]
    assert login["total_mentions"] == 3
    assert login["first_seen"] == "2024-01"
    assert login["last_seen"] == "2024-02"
    assert login["rating_impact"] == 0.5
    assert login["severity"] == 1.0
    assert login["version_causality"] == {
        "1.0.0": {"mentions": 2, "avg_rating": 1.5},
        "1.1.0": {"mentions": 1, "avg_rating": 2.0},
    }

    severities = [node["severity"] for node in tree["issues"].values()]
    assert all(0.0 <= s <= 1.0 for s in severities)
    assert max(severities) == 1.0
    assert tree["issues"]["slow_loading"]["severity"] == 0.0


def test_mentions_match_timeline(builder, reviews):
    """Test total mentions equal the sum of period counts and version mentions."""
    for node in builder.build(reviews)["issues"].values():
        assert node["total_mentions"] == sum(b["count"] for b in node["timeline"])
        assert node["total_mentions"] == sum(
            v["mentions"] for v in node["version_causality"].values()
        )
        periods = [b["period"] for b in node["timeline"]]
        assert periods == sorted(periods)


def test_regressing_issue_with_spike(builder, regressing_reviews):
    """Test growth over three periods, spike detection and rating impact."""
    tree = builder.build(regressing_reviews)
    node = tree["issues"]["checkout_error"]

    assert node["status"] == "regressing"
    assert node["rating_impact"] == -2.0
    assert node["spikes"] == [
        {"period": "2024-02", "increase": 6, "likely_trigger_versions": ["2.0.0"]}
    ]
    assert tree["summary"]["top_regressions"] == ["checkout_error"]


def test_global_baseline(regressing_reviews):
    """Test rating impact against the batch-wide average."""
    tree = RegressionTreeBuilder(baseline="global").build(regressing_reviews)

    assert tree["issues"]["checkout_error"]["rating_impact"] == pytest.approx(2 - 43 / 17, abs=0.01)


def test_invalid_baseline():
    with pytest.raises(ValueError):
        RegressionTreeBuilder(baseline="median")


@pytest.mark.parametrize("counts, expected", [
    ([2, 5, 9], "regressing"),
    ([9, 5, 2], "improving"),
    ([1, 2, 5, 9], "regressing"),
    ([2, 5, 5], "stable"),
    ([2, 5], "stable"),
    ([5], "stable"),
    ([], "stable"),
])
def test_detect_trend(counts, expected):
    assert RegressionTreeBuilder.detect_trend(counts) == expected


def test_empty_input(builder):
    assert builder.build([]) == {
        "period": {"from": None, "to": None},
        "issues": {},
        "summary": {"total_unique_issues": 0, "top_regressions": [], "skipped_reviews": 0}
    }


def test_unparseable_dates_are_skipped(builder):
    reviews = [
        {"date": "someday", "rating": 1, "issues": ["crash"]},
        {"date": "2024-04-02", "rating": 2, "issues": ["crash"]},
    ]

    tree = builder.build(reviews)

    assert tree["summary"]["skipped_reviews"] == 1
    assert tree["issues"]["crash"]["total_mentions"] == 1


def test_tag_variants_merge(builder):
    """Test differently spelled tags land on one node with an unknown version."""
    reviews = [
        {"date": "2024-04-02", "rating": 2, "issues": ["Login Bug"]},
        {"date": "2024-04-03", "rating": 2, "issues": ["login_bug"]},
    ]

    tree = builder.build(reviews)

    assert list(tree["issues"]) == ["login_bug"]
    assert tree["issues"]["login_bug"]["title"] == "Login Bug"
    assert tree["issues"]["login_bug"]["version_causality"]["unknown"]["mentions"] == 2


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
