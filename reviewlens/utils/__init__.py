"""
Utility modules for ReviewLens.

Cross-cutting concerns:
- Normalizer: Issue keys, display titles and period buckets
- Cache: Result cache capability and content fingerprints
- Storage: File I/O helpers for data persistence
"""
