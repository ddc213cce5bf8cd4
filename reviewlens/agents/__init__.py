"""
Agent implementations for ReviewLens.

Contains the components that turn reviews into decision-support artifacts:
- Review Classification Agent and Review Analysis Agent
- Insights Aggregator
- Regression Tree Builder
- Release Timeline Builder
- Impact Model
- Competitor Comparator (comparison and gap analysis)
- Memo Agent and Report Exporter
"""
