"""
Pipeline Orchestrator.

Loads reviews for a scope, classifies what is missing, runs the aggregation
engine and persists the resulting snapshots and reports.
"""

import json
import logging
from datetime import date, datetime, timezone
from typing import Dict, List, Optional

from reviewlens.agents.analysis import ReviewAnalysisAgent
from reviewlens.agents.classification import ReviewClassificationAgent
from reviewlens.agents.competitors import CompetitorComparator
from reviewlens.agents.impact import ImpactModel
from reviewlens.agents.insights import InsightsAggregator
from reviewlens.agents.memo import MemoAgent
from reviewlens.agents.regression import RegressionTreeBuilder
from reviewlens.agents.release_timeline import ReleaseTimelineBuilder
from reviewlens.agents.reporting import ReportExporter
from reviewlens.models.review import AnalyzedReview, as_analyzed_reviews
from reviewlens.utils.cache import FileResultCache, ResultCache
from reviewlens.utils.storage import StorageManager, validate_scope
import config.settings as settings

logger = logging.getLogger(__name__)


class PipelineOrchestrator:
    """
    Orchestrates one analysis run.

    Flow:
    1. Load reviews (raw store → cached classification, or analyzed store)
    2. Insights (+ issue deep dives), Regression Tree, Release Timeline
    3. Impact Model (from tree + timeline)
    4. Competitor comparison (main scope, when competitor scopes exist)
    5. Memo, snapshots, CSV reports
    """

    def __init__(
        self,
        data_root: str,
        output_dir: str,
        api_key: str = "",
        cache: Optional[ResultCache] = None,
        classifier=None
    ):
        """
        Initialize pipeline orchestrator.

        Args:
            data_root: Root directory for data storage
            output_dir: Directory for CSV reports
            api_key: Google API key, only needed when raw reviews must be classified
            cache: Result cache (defaults to the file cache under settings.CACHE_PATH)
            classifier: Object with classify(Review); built from api_key on demand
        """
        self.api_key = api_key
        self.classifier = classifier

        logger.info("Initializing pipeline components...")

        self.storage = StorageManager(data_root)
        self.cache = cache if cache is not None else FileResultCache(settings.CACHE_PATH)

        self.insights_aggregator = InsightsAggregator(
            evidence_limit=settings.EVIDENCE_LIMIT,
            recent_window_days=settings.RECENT_WINDOW_DAYS,
            trend_window_days=settings.TREND_WINDOW_DAYS,
            recency_window_days=settings.RECENCY_WINDOW_DAYS,
            severity_thresholds=(
                settings.SEVERITY_CRITICAL, settings.SEVERITY_HIGH, settings.SEVERITY_MEDIUM
            ),
            demand_thresholds=(settings.DEMAND_HIGH, settings.DEMAND_MEDIUM)
        )

        self.regression_builder = RegressionTreeBuilder(
            spike_threshold=settings.SPIKE_THRESHOLD,
            growth_factor=settings.REGRESSION_GROWTH_FACTOR,
            baseline=settings.RATING_IMPACT_BASELINE,
            top_regressions=settings.TOP_REGRESSIONS
        )

        self.timeline_builder = ReleaseTimelineBuilder(
            dominant_issues=settings.DOMINANT_ISSUES
        )

        self.impact_model = ImpactModel(
            growth_factor=settings.REGRESSION_GROWTH_FACTOR,
            lift_factor=settings.LIFT_FACTOR,
            confidence_floor=settings.CONFIDENCE_FLOOR,
            confidence_span=settings.CONFIDENCE_SPAN,
            confidence_full_mentions=settings.CONFIDENCE_FULL_MENTIONS,
            critical_threshold=settings.CRITICAL_PRIORITY,
            high_threshold=settings.HIGH_PRIORITY,
            high_risk_threshold=settings.HIGH_RISK_PRIORITY,
            quick_win_threshold=settings.QUICK_WIN_PRIORITY
        )

        self.competitor_comparator = CompetitorComparator(
            signal_limit=settings.COMPETITOR_SIGNAL_LIMIT
        )

        self.memo_agent = MemoAgent(cache=self.cache)
        self.exporter = ReportExporter(output_dir=output_dir)

        logger.info("Pipeline initialized successfully")

    def run(
        self,
        scope: str = "main",
        input_path: Optional[str] = None,
        as_of: Optional[date] = None,
        export: bool = True
    ) -> Dict:
        """
        Run the full analysis for a scope.

        Args:
            scope: "main" or a competitor identifier
            input_path: Optional JSON file with analyzed (or raw) reviews;
                overrides the review store
            as_of: Reference date for recency scoring (default: today)
            export: Write CSV reports when True

        Returns:
            Dict with every computed artifact plus report paths

        Raises:
            ValueError: If the scope is invalid or no reviews are available for it
        """
        validate_scope(scope)
        reviews = self.load_reviews(scope, input_path)
        if not reviews:
            raise ValueError(
                f"No reviews available for scope '{scope}'. "
                "Import reviews into the store or pass --input."
            )

        logger.info(f"Running analysis for '{scope}' on {len(reviews)} reviews")

        artifacts = self.analyze(reviews, as_of=as_of)

        generated_at = datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")
        for name in ("insights", "regression_tree", "release_timeline", "impact_model"):
            snapshot = dict(artifacts[name], generatedAt=generated_at)
            self.storage.save_snapshot(name, snapshot, scope=scope)
        self.storage.save_snapshot(
            "memo", {"memo": artifacts["memo"], "generatedAt": generated_at}, scope=scope
        )

        if scope == settings.MAIN_SCOPE and not input_path:
            competitors = self.compare_competitors(reviews, main_scope=scope)
            if competitors is not None:
                artifacts["competitors"] = competitors
                self.storage.save_snapshot(
                    "competitor_comparison",
                    dict(competitors, generatedAt=generated_at),
                    scope=scope
                )

        if export:
            artifacts["reports"] = self.exporter.export(
                insights=artifacts["insights"],
                regression_tree=artifacts["regression_tree"],
                release_timeline=artifacts["release_timeline"],
                impact_model=artifacts["impact_model"],
                label=scope
            )

        logger.info(f"Analysis for '{scope}' complete")
        return artifacts

    def analyze(self, reviews: List, as_of: Optional[date] = None) -> Dict:
        """Run the aggregation engine on already analyzed reviews. No I/O except the memo cache."""
        analyzed = as_analyzed_reviews(reviews)

        insights = self.insights_aggregator.generate(analyzed, as_of=as_of)
        insights["ratingHistory"] = self.insights_aggregator.rating_history(analyzed)
        insights["issueDeepDives"] = {
            issue["id"]: self.insights_aggregator.issue_deep_dive(issue, analyzed)
            for issue in insights["issues"]
        }

        regression_tree = self.regression_builder.build(analyzed)
        release_timeline = self.timeline_builder.build(analyzed)
        impact_model = self.impact_model.build(regression_tree, release_timeline)

        return {
            "insights": insights,
            "regression_tree": regression_tree,
            "release_timeline": release_timeline,
            "impact_model": impact_model,
            "memo": self.memo_agent.run(analyzed)
        }

    def compare_competitors(self, main_reviews: List, main_scope: str = "main") -> Optional[Dict]:
        """
        Compare the main app with every other scope in the review store.

        Returns:
            CompetitorComparator output, or None when no competitor has reviews
        """
        competitors = {}
        for scope in self.storage.list_scopes():
            if scope == main_scope:
                continue
            reviews = self.load_reviews(scope)
            if reviews:
                competitors[scope] = reviews

        if not competitors:
            logger.debug("No competitor scopes with reviews, skipping comparison")
            return None

        return self.competitor_comparator.build(main_reviews, competitors)

    def load_reviews(self, scope: str, input_path: Optional[str] = None) -> List[AnalyzedReview]:
        """
        Resolve the analyzed reviews for a scope.

        Order: input file → raw store → analyzed store.

        The raw store is reclassified through the result cache on every run,
        so reviews added since the last run are picked up and unchanged ones
        cost no LLM call. The analyzed store is read only for scopes without
        raw reviews. Records without an "intent" field are treated as raw reviews.
        """
        if input_path:
            with open(input_path, 'r') as f:
                records = json.load(f)
            logger.info(f"Loaded {len(records)} records from {input_path}")
            if not records:
                return []
            if all("intent" in r for r in records):
                return as_analyzed_reviews(records)
            return self._classify(records, scope)

        raw = self.storage.load_raw_reviews(scope)
        if raw:
            return self._classify(raw, scope)

        stored = self.storage.load_analyzed_reviews(scope)
        if not stored:
            return []
        return as_analyzed_reviews(stored)

    def _classify(self, raw_reviews: List[Dict], scope: str) -> List[AnalyzedReview]:
        analysis_agent = ReviewAnalysisAgent(
            classifier=self._get_classifier(),
            cache=self.cache
        )
        analyzed = analysis_agent.run(raw_reviews)
        self.storage.save_analyzed_reviews([r.to_dict() for r in analyzed], scope=scope)
        return analyzed

    def _get_classifier(self):
        if self.classifier is None:
            if not self.api_key:
                raise ValueError(
                    "GOOGLE_API_KEY is required to classify raw reviews"
                )
            self.classifier = ReviewClassificationAgent(
                api_key=self.api_key,
                model_name=settings.CLASSIFICATION_MODEL,
                temperature=settings.LLM_TEMPERATURE,
                max_retries=settings.CLASSIFICATION_MAX_RETRIES
            )
        return self.classifier


# Design Notes:
#
# 1. The raw store is the source of truth for a scope; analyzed/<scope>.json
#    is rewritten from it on every run and read only when no raw store exists.
#
# 2. Competitor comparison runs only for the main scope loaded from the store,
#    never for --input runs.
#
# 3. Snapshots carry generatedAt; engine outputs themselves are
#    timestamp-free, so two runs on the same reviews and as_of produce
#    identical artifacts.
