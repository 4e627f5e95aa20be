"""Classical information-retrieval relevance scoring.

Subpackages:
- ``irscore.common``: configuration, logging, metrics, and tracing.
- ``irscore.collection_stats``: collection-level statistics stores and the
  fallback-aware lookup client.
- ``irscore.scoring``: query likelihood, BM25, and Kullback-Leibler scorers
  plus the per-query scoring session.

Usage:
- Build scorers through ``irscore.scoring.open_scoring_session`` so the
  statistics store is always released at the end of a query.
"""

__version__ = "0.1.0"
