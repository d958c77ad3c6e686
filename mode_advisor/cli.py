"""
CLI entry point for the mode advisor.

Usage:
    # Serve the API
    python -m mode_advisor.cli serve --port 8000

    # Create the engagement tables
    python -m mode_advisor.cli init-db

    # Replay a JSONL transcript through the engine (in-memory database)
    python -m mode_advisor.cli replay transcript.jsonl

Each transcript line is a JSON object with ``conversation_id``, ``role``,
``text`` and an ISO-8601 ``created_at``.
"""

import argparse
import json
import logging
import sys
from datetime import datetime

from mode_advisor.core.config import settings
from mode_advisor.shared.logging import configure_logging

logger = logging.getLogger(__name__)


def cmd_serve(args: argparse.Namespace) -> None:
    """Start the FastAPI application."""
    import uvicorn

    logger.info("Starting API at http://%s:%d", args.host, args.port)
    uvicorn.run("mode_advisor.main:app", host=args.host, port=args.port, reload=False)


def cmd_init_db(args: argparse.Namespace) -> None:
    """Create the engagement tables in the configured database."""
    from mode_advisor.infrastructure.engagement.schema import build_engine, create_schema

    create_schema(build_engine(args.database_url or settings.database_url))


def cmd_replay(args: argparse.Namespace) -> None:
    """Feed a recorded transcript through the full pipeline and print decisions."""
    from mode_advisor.application.engagement.conversation_locks import (
        ConversationLockRegistry,
    )
    from mode_advisor.application.engagement.dtos import (
        GetConversationContextQuery,
        IngestMessageCommand,
    )
    from mode_advisor.application.engagement.get_conversation_context import (
        GetConversationContextUseCase,
    )
    from mode_advisor.application.engagement.ingest_message import IngestMessageUseCase
    from mode_advisor.domain.engagement.errors import ConversationNotFoundError
    from mode_advisor.domain.engagement.feature_extractor import MessageFeatureExtractor
    from mode_advisor.domain.engagement.mode_recommender import ModeRecommender
    from mode_advisor.domain.engagement.score_aggregator import ScoreAggregator
    from mode_advisor.domain.engagement.suggestion_gate import SuggestionGate
    from mode_advisor.infrastructure.engagement.dismissal_repository import (
        DismissalRepositoryAdapter,
    )
    from mode_advisor.infrastructure.engagement.message_metrics_repository import (
        MessageMetricsRepositoryAdapter,
    )
    from mode_advisor.infrastructure.engagement.schema import build_engine, create_schema
    from mode_advisor.infrastructure.engagement.score_state_repository import (
        ScoreStateRepositoryAdapter,
    )

    engine = build_engine("sqlite://")
    create_schema(engine)
    tuning = settings.engine_tuning()
    metrics_store = MessageMetricsRepositoryAdapter(engine=engine)
    score_repo = ScoreStateRepositoryAdapter(engine=engine)
    ingest = IngestMessageUseCase(
        metrics_store=metrics_store,
        score_repo=score_repo,
        dismissal_repo=DismissalRepositoryAdapter(engine=engine),
        extractor=MessageFeatureExtractor(),
        aggregator=ScoreAggregator(tuning),
        recommender=ModeRecommender(tuning),
        gate=SuggestionGate(tuning),
        locks=ConversationLockRegistry(),
    )
    context = GetConversationContextUseCase(score_repo=score_repo, metrics_store=metrics_store)

    with open(args.transcript, encoding="utf-8") as fh:
        for line_no, line in enumerate(fh, start=1):
            if not line.strip():
                continue
            try:
                entry = json.loads(line)
                if not isinstance(entry, dict):
                    raise TypeError(f"expected a JSON object, got {type(entry).__name__}")
                command = IngestMessageCommand(
                    conversation_id=str(entry["conversation_id"]),
                    role=entry.get("role", "user"),
                    text=entry.get("text", ""),
                    created_at=datetime.fromisoformat(entry["created_at"]),
                )
            except (KeyError, TypeError, ValueError) as exc:
                logger.error("Skipping line %d: %s", line_no, exc)
                continue

            result = ingest.execute(command)
            try:
                ctx = context.execute(
                    GetConversationContextQuery(conversation_id=command.conversation_id)
                )
            except ConversationNotFoundError:
                continue

            suggestion = result.suggestion.recommended_mode if result.suggestion else "-"
            print(
                f"{line_no:>4d} {command.conversation_id:<16s} {command.role:<9s} "
                f"H={ctx.hurried_score:6.2f} A={ctx.analytical_score:6.2f} "
                f"C={ctx.conversational_score:6.2f} n={ctx.message_count:<3d} "
                f"suggest={suggestion}"
            )


def main() -> None:
    parser = argparse.ArgumentParser(description="Mode Advisor CLI")
    subparsers = parser.add_subparsers(dest="command", required=True)

    serve_parser = subparsers.add_parser("serve", help="Run the HTTP API")
    serve_parser.add_argument("--host", default="0.0.0.0")
    serve_parser.add_argument("--port", type=int, default=8000)
    serve_parser.set_defaults(func=cmd_serve)

    init_parser = subparsers.add_parser("init-db", help="Create engagement tables")
    init_parser.add_argument(
        "--database-url", default=None, help="Overrides DATABASE_URL"
    )
    init_parser.set_defaults(func=cmd_init_db)

    replay_parser = subparsers.add_parser(
        "replay", help="Replay a JSONL transcript through the engine"
    )
    replay_parser.add_argument("transcript", help="Path to a JSONL transcript")
    replay_parser.set_defaults(func=cmd_replay)

    args = parser.parse_args()
    configure_logging(level=settings.log_level)
    try:
        args.func(args)
    except KeyboardInterrupt:
        sys.exit(130)


if __name__ == "__main__":
    main()
