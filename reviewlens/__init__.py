"""
ReviewLens.

Aggregation and scoring engine for classified app-store reviews.
"""
