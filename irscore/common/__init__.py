"""Common utilities shared by the scoring components.

Includes:
- ``config``: pydantic-settings configuration from environment variables.
- ``logging``: structured logging setup with structlog.
- ``metrics``: Prometheus metrics for scoring and statistics lookups.
- ``tracing``: OpenTelemetry tracer setup and span helpers.

Import pattern:
- from irscore.common.config import ScoringConfig
- from irscore.common.logging import configure_logging
"""
