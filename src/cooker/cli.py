"""Command line interface for cooking a new theme."""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import Callable, Sequence

from rich.console import Console
from rich.logging import RichHandler

from .collaborators import Collaborators
from .config import CookerSettings, DEFAULT_REPOSITORY, IdentitySpec
from .errors import CookerError, PipelineAborted, UserAbort
from .output import ConsoleReporter
from .pipeline import StepContext, StepPipeline
from .prompt import ConfirmationGate, IdentityCollector, PromptSession
from .steps import build_steps

LOGGER = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_STEP_FAILED = 1
EXIT_USAGE = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="cooker",
        description="Cook and serve a WordPress theme development habitat",
    )
    parser.add_argument("--branch", help="Clone this branch instead of the default one")
    parser.add_argument(
        "--skip-checklist",
        action="store_true",
        help="Skip the preflight checklist",
    )
    parser.add_argument(
        "--no-confirm",
        action="store_true",
        help="Accept the collected details without asking for confirmation",
    )
    parser.add_argument(
        "--full",
        action="store_true",
        help="Prompt for every field instead of deriving them from the theme name",
    )
    parser.add_argument("--theme-name", help="Use this theme name instead of prompting")
    parser.add_argument("--dev-url", help="Use this development url instead of prompting")
    parser.add_argument(
        "--repository",
        default=DEFAULT_REPOSITORY,
        help="Template repository to clone",
    )
    parser.add_argument(
        "-d",
        "--directory",
        type=Path,
        default=Path.cwd(),
        help="Directory in which the theme folder is created",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Log debug information",
    )
    return parser


def configure_logging(verbose: bool, console: Console) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


def settings_from_args(args: argparse.Namespace) -> CookerSettings:
    return CookerSettings(repository_url=args.repository, directory=args.directory)


def _collect_identity(args: argparse.Namespace, collector: IdentityCollector) -> IdentitySpec:
    if args.full:
        return collector.collect_detailed(auto_confirm=args.no_confirm)
    return collector.collect_quick(
        theme_name=args.theme_name,
        dev_url=args.dev_url,
        auto_confirm=args.no_confirm,
    )


def main(
    argv: Sequence[str] | None = None,
    *,
    reader: Callable[[str], str] | None = None,
    collaborators: Collaborators | None = None,
    console: Console | None = None,
) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.full and (args.theme_name is not None or args.dev_url is not None):
        parser.error("--theme-name and --dev-url cannot be combined with --full")

    console = console or Console()
    configure_logging(args.verbose, console)
    reporter = ConsoleReporter(console)
    session = PromptSession(reader or console.input, reporter)
    collector = IdentityCollector(session, ConfirmationGate(session, reporter), reporter)

    reporter.banner()
    try:
        identity = _collect_identity(args, collector)
    except UserAbort:
        return EXIT_OK
    except CookerError as exc:
        reporter.error(str(exc))
        return EXIT_USAGE

    settings = settings_from_args(args)
    context = StepContext(
        project_path=settings.project_path(identity),
        identity=identity,
        settings=settings,
        collaborators=collaborators or Collaborators.default(),
    )
    steps = build_steps(
        ecosystems=settings.ecosystems,
        branch=args.branch,
        skip_checklist_step=args.skip_checklist,
    )

    reporter.message("Let's get started, it might take a while...")
    reporter.message("")
    try:
        StepPipeline(reporter).run(steps, context)
    except PipelineAborted as exc:
        LOGGER.debug("pipeline aborted at step=%s", exc.step)
        return EXIT_STEP_FAILED

    reporter.farewell(identity.package_slug)
    return EXIT_OK


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
