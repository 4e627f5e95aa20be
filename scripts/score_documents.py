#!/usr/bin/env python3
"""Score a JSON-lines file of documents against one query.

Each input line is a document such as::

    {"id": "d1", "title": "raw text", "title_words": 12,
     "term_frequencies": {"cat": 2, "dog": 1}}

where ``title`` is the scored field and ``title_words`` its length field as
named in the query parameters. Ranked results are printed as JSON lines.
"""

import argparse
import json
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import structlog

from irscore.common.config import ScoringConfig, get_config
from irscore.common.logging import configure_logging
from irscore.common.tracing import configure_tracing
from irscore.errors import ScoringError
from irscore.scoring import ScorerKind, StaticDocumentAccessor, open_scoring_session
from irscore.scoring.request import ScoringRequest

logger = structlog.get_logger("score_documents")


def load_documents(path: Path) -> List[Dict[str, Any]]:
    """Read one JSON object per non-blank line."""
    documents = []
    with open(path, "r", encoding="utf-8") as f:
        for line_number, line in enumerate(f, start=1):
            line = line.strip()
            if not line:
                continue
            try:
                documents.append(json.loads(line))
            except json.JSONDecodeError as e:
                raise ValueError(f"{path}:{line_number}: invalid JSON: {e}") from e
    return documents


def score_documents(
    scorer: str,
    params: Dict[str, Any],
    documents: List[Dict[str, Any]],
    workers: Optional[int] = None,
    top_k: Optional[int] = None,
    config: Optional[ScoringConfig] = None,
) -> List[Tuple[str, float]]:
    """Rank ``documents`` for the query described by ``params``."""
    config = config or ScoringConfig()

    with open_scoring_session(scorer, params, config=config) as session:
        request: ScoringRequest = session.request
        pairs = []
        for position, source in enumerate(documents):
            accessor = StaticDocumentAccessor.from_source(
                source, request.field, request.doc_length_field
            )
            pairs.append((accessor.doc_id or str(position), accessor))

        return session.rank(pairs, top_k=top_k, max_workers=workers)


def main():
    """Main function for CLI."""
    parser = argparse.ArgumentParser(description="Score documents with a classical IR model")
    parser.add_argument(
        "--scorer",
        required=True,
        choices=[kind.value for kind in ScorerKind],
        help="Registered scorer name"
    )
    parser.add_argument("--params", required=True, type=Path, help="JSON file with query parameters")
    parser.add_argument("--documents", required=True, type=Path, help="JSON-lines file of documents")
    parser.add_argument("--workers", type=int, default=None, help="Scoring threads")
    parser.add_argument("--top", type=int, default=None, help="Only print the best N documents")

    args = parser.parse_args()

    config = get_config("scripts")
    configure_logging("score_documents", config.irscore_log_level, config.irscore_log_format)
    if config.irscore_tracing_enabled:
        configure_tracing(config.irscore_otel_service_name)

    try:
        with open(args.params, "r", encoding="utf-8") as f:
            params = json.load(f)
        documents = load_documents(args.documents)
        ranked = score_documents(
            args.scorer,
            params,
            documents,
            workers=args.workers,
            top_k=args.top,
            config=config
        )
    except (OSError, ValueError, ScoringError) as e:
        logger.error("Scoring failed", scorer=args.scorer, error=str(e))
        print(f"Failed to score documents: {e}", file=sys.stderr)
        sys.exit(1)

    for rank, (doc_id, score) in enumerate(ranked, start=1):
        print(json.dumps({"rank": rank, "id": doc_id, "score": score}))


if __name__ == "__main__":
    main()
