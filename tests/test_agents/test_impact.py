"""
Unit tests for Impact Model.
"""

import pytest
from reviewlens.agents.impact import ImpactModel
from reviewlens.agents.regression import RegressionTreeBuilder
from reviewlens.agents.release_timeline import ReleaseTimelineBuilder


@pytest.fixture
def model():
    return ImpactModel()


@pytest.fixture
def regression_tree():
    return {
        "issues": {
            "login_bug": {
                "severity": 0.9,
                "rating_impact": -1.5,
                "status": "regressing",
                "version_causality": {"1.0.0": {}, "1.1.0": {}}
            },
            "slow_loading": {
                "severity": 0.5,
                "rating_impact": -0.8,
                "status": "stable",
                "version_causality": {"1.1.0": {}}
            },
            "minor_ui": {
                "severity": 0.2,
                "rating_impact": -0.2,
                "status": "improving",
                "version_causality": {"1.2.0": {}}
            }
        }
    }


def test_priorities_ranked_and_normalized(model, regression_tree):
    """Test scores are relative to the worst issue and sorted."""
    priorities = model.build(regression_tree)["priorities"]

    assert [p["issue"] for p in priorities] == ["login_bug", "slow_loading", "minor_ui"]
    assert priorities[0]["priority_score"] == 1.0
    assert priorities[1]["priority_score"] == 0.1
    assert priorities[2]["priority_score"] == 0.01
    assert all(0.0 <= p["priority_score"] <= 1.0 for p in priorities)


def test_item_fields(model, regression_tree):
    login = model.build(regression_tree)["priorities"][0]

    assert login["severity"] == 0.9
    assert login["rating_impact"] == -1.5
    assert login["trend"] == "regressing"
    assert login["affected_versions"] == ["1.0.0", "1.1.0"]
    assert login["estimated_lift_if_fixed"] == 0.9
    assert login["recommendation"] == "Critical. Fix immediately."


def test_recommendations(model, regression_tree):
    priorities = model.build(regression_tree)["priorities"]

    assert [p["recommendation"] for p in priorities[1:]] == [
        "Moderate priority.", "Moderate priority."
    ]
    assert model._recommend(0.7) == "High priority. Address in next release."
    assert model._recommend(0.6) == "Moderate priority."


def test_confidence_is_deterministic_and_bounded(model, regression_tree):
    """Test confidence stays in [0.70, 0.95] and does not vary between runs."""
    first = model.build(regression_tree)["priorities"]
    second = model.build(regression_tree)["priorities"]

    assert [p["confidence"] for p in first] == [p["confidence"] for p in second]
    assert all(0.70 <= p["confidence"] <= 0.95 for p in first)
    assert first[0]["confidence"] > first[2]["confidence"]


def test_summary(model, regression_tree):
    summary = model.build(regression_tree)["summary"]

    assert summary["top_priority"] == "login_bug"
    assert summary["high_risk_issues"] == ["login_bug"]
    assert summary["quick_wins"] == ["slow_loading", "minor_ui"]
    assert summary["expected_rating_lift"] == 0.9
    assert summary["worst_release"] is None


def test_empty_tree(model):
    result = model.build({"issues": {}})

    assert result["priorities"] == []
    assert result["summary"]["top_priority"] is None
    assert result["summary"]["expected_rating_lift"] == 0


def test_zero_rating_impact_falls_back_to_severity(model):
    """Test issues confined to one period are still ranked."""
    tree = RegressionTreeBuilder().build([
        {"date": "2024-01-05", "rating": 1, "version": "1.0", "issues": ["login_bug"]},
        {"date": "2024-01-20", "rating": 2, "version": "1.0", "issues": ["login_bug"]},
        {"date": "2024-01-22", "rating": 2, "version": "1.0", "issues": ["typo"]},
    ])

    priorities = model.build(tree)["priorities"]

    assert priorities[0]["issue"] == "login_bug"
    assert priorities[0]["priority_score"] == 1.0
    assert priorities[1]["priority_score"] == 0.5


def test_with_release_timeline_context(model):
    """Test end-to-end from reviews through both builders."""
    reviews = [
        {"date": "2024-01-15", "rating": 4, "version": "1.0.0", "issues": ["login_bug"]},
        {"date": "2024-02-15", "rating": 2, "version": "1.1.0", "issues": ["login_bug", "data_loss"]},
        {"date": "2024-02-16", "rating": 1, "version": "1.1.0", "issues": ["data_loss"]},
    ]
    tree = RegressionTreeBuilder().build(reviews)
    timeline = ReleaseTimelineBuilder().build(reviews)

    result = model.build(tree, timeline)

    assert result["summary"]["top_priority"] == "login_bug"
    assert result["summary"]["worst_release"] == "1.1.0"
    assert result["summary"]["most_common_regression_trigger"] == "data_loss"


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
