"""
Unit tests for Review Classification Agent.

Note: These tests use mocked LLM responses to avoid API costs.
"""

import pytest
import json
from unittest.mock import Mock, patch
from reviewlens.models.review import Classification, Review
from reviewlens.agents.classification import ReviewClassificationAgent


@pytest.fixture
def mock_agent():
    """Create agent with mocked Gemini API."""
    with patch('reviewlens.agents.classification.genai'):
        agent = ReviewClassificationAgent(
            api_key="test-key",
            model_name="gemini-1.5-flash",
            temperature=0.0,
            max_retries=2
        )
        return agent


@pytest.fixture
def review():
    return Review(
        review_id="r-1",
        text="App crashes every time I log in",
        rating=1,
        date="2024-06-01",
        version="2.3.0"
    )


def test_empty_review_handling(mock_agent):
    """Test that empty reviews return the fallback without calling the LLM."""
    review = Review(review_id="r-0", text="   ", rating=3, date="2024-06-01")

    result = mock_agent.classify(review)

    assert result == Classification.fallback()
    mock_agent.model.generate_content.assert_not_called()


def test_parse_llm_response(mock_agent):
    """Test parsing valid LLM JSON response."""
    llm_response = json.dumps({
        "intent": "complaint",
        "issues": ["login_crash", "slow_startup"],
        "summary": "Crashes on login"
    })

    result = mock_agent._parse_llm_response(llm_response, "r-1")

    assert result.intent == "complaint"
    assert result.issues == ["login_crash", "slow_startup"]
    assert result.summary == "Crashes on login"


def test_parse_invalid_intent_returns_fallback(mock_agent):
    """Unknown intents are not propagated."""
    llm_response = json.dumps({"intent": "rant", "issues": ["x"], "summary": ""})

    result = mock_agent._parse_llm_response(llm_response, "r-1")

    assert result.intent is None
    assert result.issues == []


def test_parse_non_object_returns_fallback(mock_agent):
    """A JSON array is not a classification."""
    result = mock_agent._parse_llm_response(json.dumps(["complaint"]), "r-1")
    assert result == Classification.fallback()


def test_parse_non_list_issues(mock_agent):
    """Non-list issues become an empty list."""
    llm_response = json.dumps({"intent": "praise", "issues": "fast", "summary": "Nice"})

    result = mock_agent._parse_llm_response(llm_response, "r-1")

    assert result.intent == "praise"
    assert result.issues == []


def test_parse_invalid_json(mock_agent):
    """Test handling of invalid JSON."""
    with pytest.raises(json.JSONDecodeError):
        mock_agent._parse_llm_response("not valid json", "r-1")


def test_classify_success(mock_agent, review):
    """Test end-to-end classification with a mocked model response."""
    mock_agent.model.generate_content.return_value = Mock(
        text=json.dumps({"intent": "complaint", "issues": ["login_crash"], "summary": "Crash"})
    )

    result = mock_agent.classify(review)

    assert result.intent == "complaint"
    assert result.issues == ["login_crash"]
    assert mock_agent.model.generate_content.call_count == 1


def test_classify_retries_then_succeeds(mock_agent, review):
    """Test a malformed first response is retried."""
    mock_agent.model.generate_content.side_effect = [
        Mock(text="{broken"),
        Mock(text=json.dumps({"intent": "feature_request", "issues": ["dark_mode"], "summary": ""})),
    ]

    result = mock_agent.classify(review)

    assert result.intent == "feature_request"
    assert mock_agent.model.generate_content.call_count == 2


def test_classify_max_retries_returns_fallback(mock_agent, review):
    """Test that API errors never escape classify()."""
    mock_agent.model.generate_content.side_effect = RuntimeError("quota exceeded")

    result = mock_agent.classify(review)

    assert result == Classification.fallback()
    assert mock_agent.model.generate_content.call_count == 2


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
