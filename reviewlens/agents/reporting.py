"""
Report Exporter.

Writes the computed artifacts as CSV tables plus a metadata JSON file.
"""

import json
import logging
import os
from datetime import datetime, timezone
from typing import Dict

import pandas as pd

logger = logging.getLogger(__name__)

PRIORITY_COLUMNS = [
    "issue", "priority_score", "severity", "rating_impact", "trend",
    "affected_versions", "estimated_lift_if_fixed", "confidence", "recommendation"
]
TIMELINE_COLUMNS = [
    "version", "period", "avg_rating", "review_count", "dominant_issues",
    "new_issues", "resolved_issues", "regressions", "notes"
]
ISSUE_COLUMNS = [
    "id", "title", "severity", "score", "trend", "count", "avgRating",
    "firstSeen", "lastSeen", "versions"
]


def _join_lists(df: pd.DataFrame) -> pd.DataFrame:
    """Flatten list cells into "a; b; c" so the CSV stays one value per cell."""
    for column in df.columns:
        if df[column].map(lambda v: isinstance(v, list)).any():
            df[column] = df[column].map(
                lambda v: "; ".join(str(x) for x in v) if isinstance(v, list) else v
            )
    return df


class ReportExporter:
    """
    Exports priorities, release timeline and issue ranking to CSV.
    """

    def __init__(self, output_dir: str = "output"):
        self.output_dir = str(output_dir)

    def export(
        self,
        insights: Dict,
        regression_tree: Dict,
        release_timeline: Dict,
        impact_model: Dict,
        label: str = "main"
    ) -> Dict[str, str]:
        """
        Write all report files for one run.

        Args:
            insights: InsightsAggregator output
            regression_tree: RegressionTreeBuilder output
            release_timeline: ReleaseTimelineBuilder output
            impact_model: ImpactModel output
            label: Prefix for file names (scope)

        Returns:
            Mapping of report name -> written path
        """
        os.makedirs(self.output_dir, exist_ok=True)
        paths = {}

        priorities = self._frame(impact_model.get("priorities", []), PRIORITY_COLUMNS)
        paths["priorities"] = self._write_csv(priorities, f"{label}_priorities.csv")

        timeline = self._frame(release_timeline.get("timeline", []), TIMELINE_COLUMNS)
        paths["release_timeline"] = self._write_csv(timeline, f"{label}_release_timeline.csv")

        issues = self._frame(insights.get("issues", []), ISSUE_COLUMNS)
        paths["issues"] = self._write_csv(issues, f"{label}_issues.csv")

        metadata_path = os.path.join(self.output_dir, f"{label}_metadata.json")
        metadata = {
            "label": label,
            "period": regression_tree.get("period"),
            "total_reviews": insights.get("summary", {}).get("totalReviews", 0),
            "avg_rating": insights.get("summary", {}).get("avgRating", 0),
            "total_issues": len(priorities),
            "timeline_entries": len(timeline),
            "top_priority": impact_model.get("summary", {}).get("top_priority"),
            "expected_rating_lift": impact_model.get("summary", {}).get("expected_rating_lift", 0),
            "generated_at": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")
        }
        with open(metadata_path, 'w') as f:
            json.dump(metadata, f, indent=2)
        paths["metadata"] = metadata_path

        logger.info(f"Reports saved to {self.output_dir} ({len(paths)} files)")
        return paths

    @staticmethod
    def _frame(rows, columns) -> pd.DataFrame:
        df = pd.DataFrame(rows)
        if df.empty:
            return pd.DataFrame(columns=columns)
        return _join_lists(df[[c for c in columns if c in df.columns]].copy())

    def _write_csv(self, df: pd.DataFrame, filename: str) -> str:
        path = os.path.join(self.output_dir, filename)
        df.to_csv(path, index=False)
        logger.debug(f"Wrote {len(df)} rows to {path}")
        return path


# Design Notes:
#
# 1. List cells are joined with '; ' so each CSV cell holds one scalar.
#
# 2. Empty artifacts still produce a CSV with the expected header row.
