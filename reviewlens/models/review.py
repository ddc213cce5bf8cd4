"""
Review data models.

Represents raw app-store reviews, their classification, and the merged
analyzed review consumed by the aggregation engine.
"""

from dataclasses import dataclass, field
from datetime import date
from typing import Iterable, List, Optional, Tuple

from reviewlens.utils.normalizer import parse_date

INTENTS = ("complaint", "feature_request", "praise")


@dataclass
class Review:
    """
    Raw review from the review store.
    Minimal fields needed for classification and caching.
    """
    text: str  # Raw review text
    rating: int  # 1-5 star rating
    date: str  # YYYY-MM-DD or ISO timestamp, as delivered by the store
    version: str = ""  # App release the review was written against
    title: str = ""
    review_id: Optional[str] = None

    def __post_init__(self):
        # Validate rating
        if not (1 <= self.rating <= 5):
            raise ValueError(f"Invalid rating: {self.rating}. Must be 1-5")

    @classmethod
    def from_dict(cls, data: dict) -> "Review":
        """Create Review from a store record."""
        return cls(
            text=data.get("text") or "",
            rating=int(data.get("rating", 0)),
            date=str(data.get("date") or ""),
            version=str(data.get("version") or ""),
            title=data.get("title") or "",
            review_id=data.get("review_id") or data.get("id"),
        )

    def to_dict(self) -> dict:
        return {
            "review_id": self.review_id,
            "text": self.text,
            "title": self.title,
            "rating": self.rating,
            "date": self.date,
            "version": self.version,
        }


@dataclass
class Classification:
    """
    Output of the review classification collaborator.
    intent is None when the classifier could not produce a usable answer.
    """
    intent: Optional[str]
    issues: List[str] = field(default_factory=list)
    summary: str = ""

    def __post_init__(self):
        if self.intent is not None and self.intent not in INTENTS:
            raise ValueError(
                f"Invalid intent: {self.intent}. Must be one of {', '.join(INTENTS)}"
            )

    @classmethod
    def fallback(cls) -> "Classification":
        """Empty structure used when classification fails."""
        return cls(intent=None, issues=[], summary="")

    @classmethod
    def from_dict(cls, data: dict) -> "Classification":
        issues = data.get("issues")
        return cls(
            intent=data.get("intent"),
            issues=[str(i) for i in issues] if isinstance(issues, (list, tuple)) else [],
            summary=data.get("summary") or "",
        )

    def to_dict(self) -> dict:
        return {
            "intent": self.intent,
            "issues": list(self.issues),
            "summary": self.summary,
        }


@dataclass(frozen=True)
class AnalyzedReview:
    """
    A review merged with its classification.
    Input to every aggregation component; never mutated by the engine.
    """
    text: str
    title: str
    date: Optional[date]  # None when the source date could not be parsed
    rating: int
    version: str
    intent: Optional[str]
    issues: Tuple[str, ...] = ()
    summary: str = ""

    @classmethod
    def from_dict(cls, data: dict) -> "AnalyzedReview":
        """
        Build from a caller record without failing.

        A missing or non-sequence "issues" field becomes an empty tuple, a
        missing rating becomes 0, and an unparseable date becomes None.
        """
        issues = data.get("issues")
        if isinstance(issues, (list, tuple)):
            issues = tuple(str(i) for i in issues if i is not None)
        else:
            issues = ()

        try:
            rating = int(data.get("rating") or 0)
        except (TypeError, ValueError):
            rating = 0

        return cls(
            text=data.get("text") or "",
            title=data.get("title") or "",
            date=parse_date(data.get("date")),
            rating=rating,
            version=str(data.get("version") or ""),
            intent=data.get("intent"),
            issues=issues,
            summary=data.get("summary") or "",
        )

    @classmethod
    def from_review(cls, review: Review, classification: Classification) -> "AnalyzedReview":
        return cls(
            text=review.text,
            title=review.title,
            date=parse_date(review.date),
            rating=review.rating,
            version=review.version,
            intent=classification.intent,
            issues=tuple(classification.issues),
            summary=classification.summary,
        )

    def to_dict(self) -> dict:
        return {
            "text": self.text,
            "title": self.title,
            "date": self.date.isoformat() if self.date else None,
            "rating": self.rating,
            "version": self.version,
            "intent": self.intent,
            "issues": list(self.issues),
            "summary": self.summary,
        }


def as_analyzed_reviews(items: Optional[Iterable]) -> List[AnalyzedReview]:
    """Accept AnalyzedReview objects or plain dicts and return AnalyzedReviews."""
    if not items:
        return []
    return [
        item if isinstance(item, AnalyzedReview) else AnalyzedReview.from_dict(item)
        for item in items
    ]


# Design Notes:
#
# 1. AnalyzedReview.from_dict never raises; Review and Classification validate
#    in __post_init__.
