from __future__ import annotations

import argparse
import logging
import re
import sys
from pathlib import Path
from typing import List, Optional, Sequence

from colorama import just_fix_windows_console
from pydantic import ValidationError

from WebPageCheck.config import load_checker_config
from WebPageCheck.exceptions import ConfigurationError
from WebPageCheck.http_client import create_client_from_config
from WebPageCheck.logging_setup import log_event, setup_logging
from WebPageCheck.page_list import resolve_pages
from WebPageCheck.report import ReportWriter, should_use_color, terminal_width
from WebPageCheck.resolver import Status, check_pages

logger = logging.getLogger("webpagecheck.cli")

EXIT_OK = 0
EXIT_DOWN = 1
EXIT_CONFIG = 2

# Switches accepted in any letter case ("-V", "--VERBOSE", "--Show-Response", "-VR").
_CASE_INSENSITIVE_FLAGS = {"--verbose", "--show-response", "--no-color", "--no-clear"}
_RE_SHORT_FLAGS = re.compile(r"^-[vr]+$", re.IGNORECASE)


def _positive_int(value: str) -> int:
    n = int(value)
    if n < 1:
        raise argparse.ArgumentTypeError("must be a positive integer")
    return n


def _positive_float(value: str) -> float:
    n = float(value)
    if n <= 0:
        raise argparse.ArgumentTypeError("must be a positive number")
    return n


def normalize_switches(argv: Sequence[str]) -> List[str]:
    out: List[str] = []
    for arg in argv:
        lowered = arg.lower()
        if lowered in _CASE_INSENSITIVE_FLAGS or _RE_SHORT_FLAGS.match(arg):
            out.append(lowered)
        else:
            out.append(arg)
    return out


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="webpagecheck",
        description="Check the status of key web pages (UP / MAINT / DOWN).",
    )
    p.add_argument("-v", "--verbose", action="store_true", help="Output page configuration and troubleshooting info.")
    p.add_argument("-r", "--show-response", action="store_true", help="Output every response body.")
    p.add_argument("--pages", type=Path, help="JSON page list; defaults to WEBPAGECHECK_PAGES_FILE or the built-in list.")
    p.add_argument("--timeout", type=_positive_float, help="Per-request timeout in seconds.")
    p.add_argument("--max-hops", type=_positive_int, help="Meta refresh/form hops allowed per page before it counts as DOWN.")
    p.add_argument("--width", type=_positive_int, help="Report width (default: terminal width).")
    p.add_argument("--no-color", action="store_true", help="Disable colored status labels.")
    p.add_argument("--no-clear", action="store_true", help="Do not clear the screen before the report.")
    p.add_argument("--env-file", type=Path, help="Read settings from this .env file.")
    return p


def main(argv: Optional[Sequence[str]] = None) -> int:
    raw_argv = list(sys.argv[1:] if argv is None else argv)
    # Unrecognised arguments are ignored, not fatal.
    args, unknown = build_parser().parse_known_args(normalize_switches(raw_argv))

    try:
        cfg = load_checker_config(env_file=args.env_file)
    except ValidationError as e:
        print(f"Invalid configuration: {e}", file=sys.stderr)
        return EXIT_CONFIG
    except ConfigurationError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_CONFIG

    setup_logging(level=cfg.log_level)
    if unknown:
        log_event(logger, logging.WARNING, "ignored_arguments", arguments=unknown)

    overrides = {}
    if args.timeout is not None:
        overrides["timeout_seconds"] = args.timeout
    if args.max_hops is not None:
        overrides["max_hops"] = args.max_hops
    if args.width is not None:
        overrides["width"] = args.width
    if overrides:
        cfg = cfg.model_copy(update=overrides)

    try:
        pages = resolve_pages(cfg, args.pages)
    except ConfigurationError as e:
        logger.error("Failed to load page list: %s", e)
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_CONFIG

    just_fix_windows_console()
    stdout = sys.stdout
    writer = ReportWriter(
        stdout,
        width=terminal_width(cfg.width),
        color=should_use_color(cfg, stdout, disabled=args.no_color),
        verbose=args.verbose,
        show_response=args.show_response,
        clear=not args.no_clear and bool(getattr(stdout, "isatty", lambda: False)()),
    )

    client = create_client_from_config(cfg)
    writer.header()
    try:
        results = check_pages(pages, client, max_hops=cfg.max_hops, listener=writer)
    finally:
        client.close()
    writer.footer(results)

    down = [r.page.name for r in results if r.status == Status.DOWN]
    log_event(logger, logging.INFO, "check_complete", pages=len(results), down=down or None)
    return EXIT_DOWN if down else EXIT_OK


if __name__ == "__main__":
    raise SystemExit(main())
