"""
Review Classification Agent.

Assigns an intent, snake_case issue tags and a short summary to a raw review
using an LLM. Output feeds the aggregation engine via AnalyzedReview.
"""

import json
import logging
import google.generativeai as genai

from reviewlens.models.review import Classification, Review

logger = logging.getLogger(__name__)


SYSTEM_PROMPT = """You are a senior product manager analyzing app reviews.

Your task:
1. Read the user's review text
2. Determine the dominant intent: "complaint", "feature_request", or "praise"
3. Extract concrete issues, requests or liked features as snake_case identifiers
4. Write a concise executive summary (1-2 lines)

Rules:
- Derive everything strictly from the review text
- "complaint" = something is broken, wrong, or frustrating
- "feature_request" = the user wants a new capability
- "praise" = the user likes the app or a specific feature
- Identifiers are short and reusable (e.g., "login_crash", "dark_mode")
- If the review contains any problem or request, issues must not be empty
- Do not repeat the review verbatim

Output valid JSON only."""


def _construct_user_prompt(review: Review) -> str:
    """Construct user prompt from review."""
    return f"""Review Title: "{review.title}"
Review Text: "{review.text}"
Rating: {review.rating}/5

Classify the review as JSON:
{{
  "intent": "complaint|feature_request|praise",
  "issues": ["snake_case_identifier", "..."],
  "summary": "..."
}}"""


class ReviewClassificationAgent:
    """
    Classifies raw reviews with Gemini.

    Failures never propagate: after max_retries the agent returns
    Classification.fallback() so one bad review cannot stop a batch.
    """

    def __init__(
        self,
        api_key: str,
        model_name: str = "gemini-1.5-flash",
        temperature: float = 0.0,
        max_retries: int = 3
    ):
        """
        Initialize classification agent.

        Args:
            api_key: Gemini API key
            model_name: Gemini model to use
            temperature: LLM temperature (0.0 for deterministic)
            max_retries: Number of attempts per review
        """
        self.model_name = model_name
        self.temperature = temperature
        self.max_retries = max_retries

        # Configure Gemini
        genai.configure(api_key=api_key)
        self.model = genai.GenerativeModel(
            model_name=model_name,
            generation_config={
                "temperature": temperature,
                "response_mime_type": "application/json"
            },
            system_instruction=SYSTEM_PROMPT
        )

        logger.info(f"Initialized ReviewClassificationAgent with model={model_name}, temp={temperature}")

    def classify(self, review: Review) -> Classification:
        """
        Classify a single review.

        Args:
            review: Raw review object

        Returns:
            Classification (fallback on empty text or repeated failure)
        """
        if not review.text or len(review.text.strip()) == 0:
            logger.debug(f"Empty review text for {review.review_id}")
            return Classification.fallback()

        user_prompt = _construct_user_prompt(review)

        for attempt in range(self.max_retries):
            try:
                response = self.model.generate_content(user_prompt)
                classification = self._parse_llm_response(response.text, review.review_id)
                logger.debug(
                    f"Classified {review.review_id}: intent={classification.intent}, "
                    f"{len(classification.issues)} issues"
                )
                return classification

            except json.JSONDecodeError as e:
                logger.error(f"Failed to parse LLM JSON response (attempt {attempt + 1}): {e}")

            except Exception as e:
                logger.error(f"LLM API error (attempt {attempt + 1}): {e}")

        logger.warning(f"Max retries reached for {review.review_id}, returning fallback classification")
        return Classification.fallback()

    def _parse_llm_response(self, response_text: str, review_id: str) -> Classification:
        """
        Parse LLM JSON response into a Classification.

        Raises:
            json.JSONDecodeError: If response is not valid JSON
        """
        data = json.loads(response_text)

        if not isinstance(data, dict):
            logger.warning(f"LLM response is not a JSON object for {review_id}")
            return Classification.fallback()

        try:
            return Classification.from_dict(data)
        except ValueError as e:
            logger.warning(f"Invalid classification in LLM response for {review_id}: {e}")
            return Classification.fallback()


# Design Notes:
#
# 1. classify() never raises; after max_retries it returns
#    Classification.fallback() with intent None.
#
# 2. Callers must not cache a result whose intent is None.
