"""
Command-line interface for smart-memory.

Sub-commands
------------
learn    – Store a piece of knowledge.
recall   – Retrieve the most relevant entries for a query.
stats    – Print knowledge-base statistics.
patterns – Print tag and category patterns.
suggest  – Print suggestions for a task description.
evaluate – Mark an entry as useful or not useful.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any

from .config import MemoryConfig
from .memory import DEFAULT_MIN_SCORE, DEFAULT_RECALL_LIMIT, MemoryManager


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="smart-memory",
        description="Local knowledge base with TF-IDF relevance search.",
    )
    parser.add_argument(
        "--dir",
        default=None,
        metavar="PATH",
        help="Root directory for databases (default: $SMART_MEMORY_DIR or ~/.smart-memory).",
    )
    parser.add_argument(
        "--db",
        default=None,
        metavar="NAME",
        help="Database name (default: $SMART_MEMORY_DB or 'default').",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Log debug output to stderr.",
    )

    sub = parser.add_subparsers(dest="command", required=True)

    # learn
    p_learn = sub.add_parser("learn", help="Store knowledge.")
    p_learn.add_argument("text", nargs="?", help="Text to store (reads stdin if omitted).")
    p_learn.add_argument("--category", default=None, help="Category (default: general).")
    p_learn.add_argument(
        "--tag",
        action="append",
        dest="tags",
        default=None,
        metavar="TAG",
        help="Tag to attach; repeat for several tags.",
    )
    p_learn.add_argument("--source", default=None, help="Provenance label (default: manual).")

    # recall
    p_recall = sub.add_parser("recall", help="Retrieve relevant knowledge.")
    p_recall.add_argument("query", help="Natural-language query.")
    p_recall.add_argument(
        "-n",
        type=int,
        default=DEFAULT_RECALL_LIMIT,
        metavar="N",
        help=f"Number of results to return (default: {DEFAULT_RECALL_LIMIT}).",
    )
    p_recall.add_argument("--category", default=None, help="Only search this category.")
    p_recall.add_argument(
        "--min-score",
        type=float,
        default=DEFAULT_MIN_SCORE,
        metavar="SCORE",
        help=f"Minimum relevance score (default: {DEFAULT_MIN_SCORE}).",
    )
    p_recall.add_argument(
        "--json",
        action="store_true",
        dest="as_json",
        help="Output results as JSON.",
    )

    sub.add_parser("stats", help="Print knowledge-base statistics.")
    sub.add_parser("patterns", help="Print tag and category patterns.")

    # suggest
    p_suggest = sub.add_parser("suggest", help="Suggestions for the current task.")
    p_suggest.add_argument("context", help="Description of the current task.")

    # evaluate
    p_eval = sub.add_parser("evaluate", help="Rate an entry.")
    p_eval.add_argument("id", type=int, help="Entry ID to rate.")
    verdict = p_eval.add_mutually_exclusive_group(required=True)
    verdict.add_argument("--useful", action="store_true", dest="useful")
    verdict.add_argument("--not-useful", action="store_false", dest="useful")
    p_eval.add_argument("--feedback", default=None, help="Optional feedback note.")

    return parser


def _resolve_config(args: argparse.Namespace) -> MemoryConfig:
    config = MemoryConfig.from_env()
    if args.dir:
        config = MemoryConfig(data_dir=Path(args.dir).expanduser(), database=config.database)
    if args.db:
        config = MemoryConfig(data_dir=config.data_dir, database=args.db)
    return config


def _print_json(data: Any) -> None:
    print(json.dumps(data, indent=2, ensure_ascii=False))


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        stream=sys.stderr,
        format="%(levelname)s %(name)s: %(message)s",
    )

    manager = MemoryManager(_resolve_config(args))

    if args.command == "learn":
        text = args.text
        if text is None:
            text = sys.stdin.read()
        if not text.strip():
            print("Error: no text provided.", file=sys.stderr)
            return 1
        result = manager.learn(
            text.strip(),
            category=args.category,
            tags=args.tags,
            source=args.source,
        )
        print(f"{result['message']} (id={result['id']}, total={result['total']})")

    elif args.command == "recall":
        result = manager.recall(
            args.query,
            limit=args.n,
            category=args.category,
            min_score=args.min_score,
        )
        if args.as_json:
            _print_json(result)
            return 0
        if not result["results"]:
            print(result.get("message", "No matching knowledge found."))
            return 0
        for i, r in enumerate(result["results"], 1):
            tags = ", ".join(r["tags"])
            print(f"[{i}] (score={r['score']:.3f}, category={r['category']}"
                  + (f", tags={tags})" if tags else ")"))
            print(f"    {r['content'][:200]}")
            print(f"    id={r['id']}")
            print()

    elif args.command == "stats":
        _print_json(manager.stats())

    elif args.command == "patterns":
        _print_json(manager.patterns())

    elif args.command == "suggest":
        _print_json(manager.suggest(args.context))

    elif args.command == "evaluate":
        result = manager.evaluate(args.id, args.useful, feedback=args.feedback)
        _print_json(result)
        if not result["success"]:
            return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
