"""CLI entry point for the query routing engine."""

from __future__ import annotations

import argparse
import asyncio
import json
import sys


def build_parser() -> argparse.ArgumentParser:
    """Build the CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="query-router",
        description="Classify chat queries and route them to a model",
    )
    parser.add_argument(
        "--query",
        type=str,
        help="Route a single query",
    )
    parser.add_argument(
        "--session-id",
        type=str,
        default=None,
        help="Session id for conversational context",
    )
    parser.add_argument(
        "--plan",
        type=str,
        default="free",
        choices=["free", "plus", "pro"],
        help="Subscription plan used for the tier filter",
    )
    parser.add_argument(
        "--classify-only",
        action="store_true",
        help="Only show content type and difficulty (no model selection)",
    )
    parser.add_argument(
        "--stats",
        action="store_true",
        help="Show routing statistics",
    )
    parser.add_argument(
        "--health",
        action="store_true",
        help="Run the liveness probe",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print results as JSON",
    )
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="Path to config YAML file",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
    )
    parser.add_argument(
        "--console-log",
        action="store_true",
        help="Use console (human-readable) logging instead of JSON",
    )
    return parser


def _emit(payload: dict, as_json: bool) -> None:
    if as_json:
        print(json.dumps(payload, indent=2, default=str))
        return
    width = max(len(key) for key in payload) + 2
    for key, value in payload.items():
        print(f"{key + ':':<{width}}{value}")


def main(argv: list[str] | None = None) -> None:
    """Run the CLI."""
    parser = build_parser()
    args = parser.parse_args(argv)

    from pathlib import Path

    from src.routing.pipeline import QueryRouter
    from src.utils._logging import configure_logging

    configure_logging(
        log_level=args.log_level,
        json_output=not args.console_log,
    )

    config_path = Path(args.config) if args.config else None
    router = QueryRouter.from_config(config_path)

    if args.health:
        _emit(router.health_check().model_dump(mode="json"), args.json)
        return

    if args.stats:
        payload = router.get_routing_stats().model_dump(mode="json")
        payload["hybrid"] = router.get_hybrid_performance_stats()
        _emit(payload, args.json)
        return

    if args.classify_only and args.query:
        preprocessed = router.preprocess_query(args.query)
        analysis = router.analyze_content_type(preprocessed)
        difficulty = router.assess_difficulty(preprocessed)
        _emit(
            {
                "query": args.query,
                "type": analysis.type.value,
                "confidence": analysis.confidence,
                "difficulty": difficulty.level.value,
                "signals": [*analysis.signals, *difficulty.signals],
            },
            args.json,
        )
        return

    if args.query:
        context = {"sessionId": args.session_id, "subscriptionPlan": args.plan}
        decision = asyncio.run(router.route_query(args.query, context))
        if args.json:
            _emit(decision.model_dump(mode="json"), as_json=True)
            return
        _emit(
            {
                "query": args.query,
                "type": decision.type.value,
                "confidence": decision.confidence,
                "difficulty": decision.difficulty.value,
                "model": decision.primary_model,
                "fallback": decision.fallback_model,
                "source": decision.classification_source,
                "reasoning": decision.reasoning,
            },
            as_json=False,
        )
        return

    parser.print_help()
    sys.exit(1)
