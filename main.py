#!/usr/bin/env python3
"""TypeCoach - adaptive typing practice engine.

Usage:
    python3 main.py text [--weak-keys q,z] [--offline]
    python3 main.py score session.json [--offline]
    python3 main.py --offline text
"""

import argparse
import json
import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

from pydantic import ValidationError

from core.insights import InsightProvider
from core.models import KeyErrorCount, Keystroke, PerformanceProfile
from core.ollama_client import OllamaClient
from core.scorer import score_session
from core.text_provider import PracticeTextProvider
from utils.config import AppSettings, Config, default_config_path

log = logging.getLogger("typecoach")


def setup_logging(verbose: bool = False) -> None:
    """Log to a rotating file in the XDG state directory and to stderr."""
    xdg_state_home = os.environ.get("XDG_STATE_HOME", str(Path.home() / ".local" / "state"))
    log_dir = Path(xdg_state_home) / "typecoach"
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / "typecoach.log"

    # Configure rotating file handler (5MB max, keep 5 backups)
    file_handler = RotatingFileHandler(
        log_file,
        maxBytes=5 * 1024 * 1024,
        backupCount=5,
    )

    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[file_handler, logging.StreamHandler()],
    )


def create_client(settings: AppSettings) -> OllamaClient:
    return OllamaClient(
        host=settings.ollama_host,
        port=settings.ollama_port,
        model=settings.ollama_model,
        timeout_sec=settings.ollama_timeout_sec,
        word_count=settings.target_word_count,
    )


def profile_from_weak_keys(weak_keys: list[str], accuracy: int) -> PerformanceProfile | None:
    """Build a one-off profile from keys given on the command line."""
    keys = [k.strip().lower() for k in weak_keys if k.strip()]
    if not keys:
        return None
    return PerformanceProfile(
        struggling_keys=[KeyErrorCount(key=k, error_count=1) for k in keys],
        accuracy_percent=accuracy,
        words_per_minute=0,
        session_count=1,
    )


def cmd_text(args: argparse.Namespace, settings: AppSettings) -> int:
    source = None if args.offline else create_client(settings)
    provider = PracticeTextProvider(
        source,
        word_count=settings.target_word_count,
        max_word_length=settings.max_word_length,
    )
    weak_keys = args.weak_keys.split(",") if args.weak_keys else []
    profile = profile_from_weak_keys(weak_keys, args.accuracy)

    practice_text = provider.fetch(profile)
    print(practice_text.text)
    return 0


def cmd_score(args: argparse.Namespace, settings: AppSettings) -> int:
    try:
        data = json.loads(Path(args.file).read_text())
    except (OSError, json.JSONDecodeError) as e:
        print(f"Error: cannot read session file {args.file}: {e}", file=sys.stderr)
        return 1

    try:
        keystrokes = [Keystroke(**k) for k in data.get("keystrokes", [])]
        elapsed_seconds = float(data.get("elapsed_seconds", 0))
        completed_words = int(data.get("completed_words", 0))
        total_words = int(data.get("total_words", settings.target_word_count))
    except (ValidationError, TypeError, ValueError, AttributeError) as e:
        print(f"Error: invalid keystroke log {args.file}: {e}", file=sys.stderr)
        return 1

    result = score_session(
        keystrokes,
        elapsed_seconds,
        completed_words,
        total_words,
        max_struggling_keys=settings.max_struggling_keys,
    )

    insights = InsightProvider(
        None if args.offline else create_client(settings),
        high_accuracy_threshold=settings.high_accuracy_threshold,
    )
    result = insights.enrich(result)
    print(result.model_dump_json(indent=2))
    return 0


def build_parser() -> argparse.ArgumentParser:
    # Accepted after the subcommand too; SUPPRESS keeps the top-level value
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "--offline",
        action="store_true",
        default=argparse.SUPPRESS,
        help="Do not contact the Ollama server",
    )

    parser = argparse.ArgumentParser(description="Adaptive typing practice engine")
    parser.add_argument(
        "--config", type=Path, default=None, help="Settings file (JSON)"
    )
    parser.add_argument(
        "--offline", action="store_true", help="Do not contact the Ollama server"
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")

    subparsers = parser.add_subparsers(dest="command", required=True)

    text_parser = subparsers.add_parser(
        "text", parents=[common], help="Print normalized practice text"
    )
    text_parser.add_argument(
        "--weak-keys", default="", help="Comma-separated keys to practice"
    )
    text_parser.add_argument(
        "--accuracy", type=int, default=90, help="Current accuracy for the prompt"
    )
    text_parser.set_defaults(func=cmd_text)

    score_parser = subparsers.add_parser(
        "score", parents=[common], help="Score a keystroke log"
    )
    score_parser.add_argument("file", help="JSON file with the keystroke log")
    score_parser.set_defaults(func=cmd_score)

    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(args.verbose)

    config = Config(args.config or default_config_path())
    settings = config.settings()
    log.debug(f"Settings: {settings.model_dump()}")

    return args.func(args, settings)


if __name__ == "__main__":
    sys.exit(main())
