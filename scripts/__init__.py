"""Utility scripts for operating the scorers.

Scripts include:
- ``score_documents.py``: score a JSON-lines file of documents for a query.
- ``load_collection_stats.py``: load precomputed tf/idf values into Redis.
"""
