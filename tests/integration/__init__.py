"""Tests that need a running Redis server."""
