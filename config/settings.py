"""
Configuration settings for ReviewLens.

Centralized configuration for all agents and pipeline parameters.
"""

import os
from pathlib import Path

# Project paths
PROJECT_ROOT = Path(__file__).parent.parent
DATA_ROOT = PROJECT_ROOT / "data"
OUTPUT_ROOT = PROJECT_ROOT / "output"
CACHE_PATH = DATA_ROOT / "result_cache.json"

# API Configuration
GOOGLE_API_KEY = os.getenv("GOOGLE_API_KEY", "")

# Review classification (Gemini)
CLASSIFICATION_MODEL = "gemini-1.5-flash"
LLM_TEMPERATURE = 0.0
CLASSIFICATION_MAX_RETRIES = 3

# Insights Aggregator
EVIDENCE_LIMIT = 10  # Max reviews kept as evidence per record
RECENT_WINDOW_DAYS = 30
TREND_WINDOW_DAYS = 60  # last30 is compared against days 31-60
RECENCY_WINDOW_DAYS = 90

# Severity buckets (issue score, 0-100)
SEVERITY_CRITICAL = 70
SEVERITY_HIGH = 50
SEVERITY_MEDIUM = 30

# Demand buckets (request score, 0-100)
DEMAND_HIGH = 60
DEMAND_MEDIUM = 35

# Regression Tree
SPIKE_THRESHOLD = 5  # Period-over-period increase that counts as a spike
REGRESSION_GROWTH_FACTOR = 1.5
RATING_IMPACT_BASELINE = "first_period"  # "first_period" or "global"
TOP_REGRESSIONS = 3

# Release Timeline
DOMINANT_ISSUES = 3

# Competitor comparison
MAIN_SCOPE = "main"
COMPETITOR_SIGNAL_LIMIT = 5  # Top liked / disliked / requested keys per scope

# Impact Model
LIFT_FACTOR = 0.6
CONFIDENCE_FLOOR = 0.70
CONFIDENCE_SPAN = 0.25
CONFIDENCE_FULL_MENTIONS = 20  # Mentions at which volume stops adding confidence
CRITICAL_PRIORITY = 0.8
HIGH_PRIORITY = 0.6
HIGH_RISK_PRIORITY = 0.7
QUICK_WIN_PRIORITY = 0.4

# Logging
LOG_LEVEL = "INFO"  # DEBUG, INFO, WARNING, ERROR
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_FILE = "reviewlens.log"


# Design Notes:
#
# 1. Agents never import this module; the orchestrator passes these values
#    into constructors, and every constructor default matches the value here.
#
# 2. Severity and demand thresholds are inclusive lower bounds; impact
#    thresholds are strict.
