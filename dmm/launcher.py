from __future__ import annotations

import argparse
import logging
import subprocess
import sys
from typing import TextIO

from dotenv import find_dotenv, load_dotenv

from dmm.cli.io import PopenFunc, run_selector
from dmm.cli.menu import render_menu, resolve_selection
from dmm.cli.registry import BareRun, Run
from dmm.config import env_bool, env_str, load_config
from dmm.dispatch import dispatch
from dmm.errors import LauncherError, SelectorError
from dmm.reporting import configure_logging, report_fatal
from dmm.resolver import build_entries
from dmm.tags import build_codec

LOG = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="dmm",
        description="Pick programs and commands from dmenu and launch them.",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="config file (default: $DMM_CONFIG or the user config dir)",
    )
    parser.add_argument(
        "--selector",
        default=env_str("DMM_SELECTOR"),
        help="selector program to run instead of config.dmenu.program",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="print the chosen commands instead of running them",
    )
    parser.add_argument(
        "--print-menu",
        action="store_true",
        help="print the menu that would be sent to the selector and exit",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        default=env_bool("DMM_VERBOSE", False),
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    try:
        _autoload_dotenv()
        parser = build_parser()
    except LauncherError as exc:
        configure_logging()
        report_fatal(exc)
        return 1

    args = parser.parse_args(argv)
    configure_logging(args.verbose)

    try:
        return run(args)
    except LauncherError as exc:
        report_fatal(exc)
        return 1


def run(
    args: argparse.Namespace,
    *,
    popen: PopenFunc | None = None,
    out: TextIO | None = None,
) -> int:
    spawn = subprocess.Popen if popen is None else popen
    stream = sys.stdout if out is None else out

    config = load_config(args.config)
    entries = build_entries(config)
    codec = build_codec(
        len(entries),
        numbered=config.tags.numbered,
        separator=config.tags.separator,
        scheme=config.tags.scheme,
    )
    menu_text = render_menu(entries, codec)

    if args.print_menu:
        stream.write(menu_text)
        return 0

    program = args.selector or config.selector.program
    try:
        raw_output = run_selector(
            menu_text, program=program, args=config.selector.args, popen=spawn
        )
    except SelectorError as exc:
        raise LauncherError(
            f"problem running `{program}`",
            code="selector_failed",
            context={"program": program},
        ) from exc

    selection = resolve_selection(
        raw_output, entries, codec, adhoc=config.policy.adhoc
    )

    if args.dry_run:
        for item in selection.runs:
            stream.write(f"{_describe_run(item)}\n")
        return 0

    report = dispatch(selection.runs, config.policy, popen=spawn)
    LOG.debug(
        "launched %d, failed %d, blocked %d",
        len(report.launched),
        len(report.failed),
        len(report.blocked),
    )
    return 0


def _describe_run(item: Run) -> str:
    if isinstance(item, BareRun):
        return f"bare: {item}"
    return f"shell: {item}"


def _autoload_dotenv() -> None:
    dotenv_path = find_dotenv(filename=".env", usecwd=True)
    if dotenv_path:
        load_dotenv(dotenv_path=dotenv_path, encoding="utf-8")
