"""Tests for the scoring components.

Unit tests run against the in-memory statistics store. Tests under
``integration`` need a reachable Redis and are skipped otherwise.
"""
