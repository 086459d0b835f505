from __future__ import annotations

import argparse
import json
import logging
import os
import sys
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from toolbox.check import run_check
from toolbox.config import DEFAULT_DIRECTORY_OUTPUT, RegistryConfig, load_registry_config_from_env
from toolbox.directory import generate_telephony_directory
from toolbox.errors import RegistryError

logger = logging.getLogger("toolbox")

LOG_FORMAT = "%(asctime)s %(levelname)s\t%(name)s: %(message)s"
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")


def configure_logging(level: str) -> None:
    logging.basicConfig(stream=sys.stderr, level=level, format=LOG_FORMAT)


def emit(payload: dict[str, Any], *, pretty: bool) -> None:
    if pretty:
        print(json.dumps(payload, indent=2, sort_keys=True))
    else:
        print(json.dumps(payload, sort_keys=True))


def load_config(*, pretty: bool) -> RegistryConfig | None:
    try:
        return load_registry_config_from_env()
    except (ValueError, ValidationError) as exc:
        logger.error("Invalid configuration: %s", exc)
        emit(
            {
                "ok": False,
                "error_type": exc.__class__.__name__,
                "message": str(exc),
                "org_id": None,
                "path": None,
            },
            pretty=pretty,
        )
        return None


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="hackfed-toolbox",
        description="CLI toolbox for HackFed participants",
    )
    parser.add_argument(
        "--log-level",
        type=str.upper,
        choices=LOG_LEVELS,
        default=os.environ.get("TOOLBOX_LOG_LEVEL", "INFO").strip().upper(),
        help="Log level for stderr diagnostics (default: INFO or $TOOLBOX_LOG_LEVEL).",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    check_parser = subparsers.add_parser("check-registry", help="Sanity check the HackFed registry")
    check_parser.add_argument("path", type=Path, help="Path to the registry folder.")
    check_parser.add_argument("--pretty", action="store_true", help="Pretty-print JSON output.")

    generate_parser = subparsers.add_parser(
        "generate-telephony",
        help="Generate the telephony directory",
    )
    generate_parser.add_argument("path", type=Path, help="Path to the registry folder.")
    generate_parser.add_argument(
        "-o",
        "--output",
        type=Path,
        default=Path(DEFAULT_DIRECTORY_OUTPUT),
        help=f"Output file for the generated directory (default: {DEFAULT_DIRECTORY_OUTPUT}).",
    )
    generate_parser.add_argument("--pretty", action="store_true", help="Pretty-print JSON output.")

    return parser


def run_check_registry(args: argparse.Namespace) -> int:
    registry_path = args.path.resolve()
    config = load_config(pretty=args.pretty)
    if config is None:
        return 1

    try:
        result = run_check(registry_path, config=config)
    except RegistryError as exc:
        logger.error("%s", exc)
        emit({"ok": False, **exc.as_dict()}, pretty=args.pretty)
        return 1

    emit(result, pretty=args.pretty)
    return 0


def run_generate_telephony(args: argparse.Namespace) -> int:
    registry_path = args.path.resolve()
    output_path = args.output.resolve()
    config = load_config(pretty=args.pretty)
    if config is None:
        return 1

    try:
        result = generate_telephony_directory(registry_path, output_path, config=config)
    except RegistryError as exc:
        logger.error("%s", exc)
        emit({"ok": False, **exc.as_dict()}, pretty=args.pretty)
        return 1

    emit(result, pretty=args.pretty)
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.log_level not in LOG_LEVELS:
        parser.error(f"invalid TOOLBOX_LOG_LEVEL {args.log_level!r} (choose from {', '.join(LOG_LEVELS)})")
    configure_logging(args.log_level)

    if args.command == "check-registry":
        return run_check_registry(args)
    if args.command == "generate-telephony":
        return run_generate_telephony(args)
    parser.error(f"Unknown command: {args.command}")
    return 2


if __name__ == "__main__":
    raise SystemExit(main())
