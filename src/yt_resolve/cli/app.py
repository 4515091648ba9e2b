"""CLI application entry point and command routing for yt-resolve.

This module is the **sole error boundary** for the entire application.
It catches :class:`~yt_resolve.exceptions.YtResolveError`, ``KeyboardInterrupt``,
and any unexpected ``Exception``, rendering user-friendly messages via Rich
and returning well-defined exit codes.

Architecture notes
------------------
* No business logic lives here — the command handlers only wire the
  ``infra`` adapters into the ``core`` services.
* Human-facing output goes to stderr through the console proxy; stdout
  carries only the URL printed by ``--print-url``.
* This module is the only place that translates between the domain world
  and the OS process exit code.
"""

from __future__ import annotations

import argparse
import logging
import sys

from yt_resolve.cli import exit_codes
from yt_resolve.cli.console import console
from yt_resolve.config import DEFAULT_TIMEOUT, DEFAULT_USER_AGENT, ResolverConfig
from yt_resolve.exceptions import FetchError, YtResolveError
from yt_resolve.version import __version__


# ---------------------------------------------------------------------------
# Argument parser
# ---------------------------------------------------------------------------

def _build_parser() -> argparse.ArgumentParser:
    """Construct the top-level argument parser.

    Sub-commands are not used; the CLI supports:
    * ``yt-resolve <id-or-url>``   — resolve, pick a format, download it
    * ``yt-resolve <id> --list``   — resolve and list formats only
    * ``yt-resolve doctor``        — environment diagnostics
    * ``yt-resolve --version``
    """
    parser = argparse.ArgumentParser(
        prog="yt-resolve",
        description="Resolve YouTube videos into directly downloadable stream URLs.",
    )
    parser.add_argument(
        "-V",
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "target",
        nargs="?",
        default=None,
        help="Video id or URL to resolve, or 'doctor' to run diagnostics.",
    )

    selection = parser.add_argument_group("format selection")
    selection.add_argument(
        "--itag",
        type=int,
        default=None,
        help="Pick the format with this itag instead of prompting.",
    )
    selection.add_argument(
        "--list",
        action="store_true",
        dest="list_only",
        help="List the resolved formats and exit.",
    )
    selection.add_argument(
        "--print-url",
        action="store_true",
        help="Print the selected format's URL to stdout instead of downloading.",
    )

    download = parser.add_argument_group("download")
    download.add_argument(
        "-o",
        "--output",
        default=None,
        help="Destination file (default: <video id>.<extension>).",
    )
    download.add_argument(
        "--resume",
        action="store_true",
        help="Continue a partially downloaded file.",
    )
    download.add_argument(
        "--use-ytdlp",
        action=argparse.BooleanOptionalAction,
        default=True,
        help="Download through yt-dlp first, falling back to a direct download.",
    )

    network = parser.add_argument_group("network")
    network.add_argument(
        "--timeout",
        type=float,
        default=DEFAULT_TIMEOUT,
        help=f"Per-request timeout in seconds (default: {DEFAULT_TIMEOUT:g}).",
    )
    network.add_argument(
        "--user-agent",
        default=DEFAULT_USER_AGENT,
        help="User-Agent header sent with every request.",
    )

    diagnostics = parser.add_argument_group("diagnostics")
    diagnostics.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Increase log verbosity (-v info, -vv debug).",
    )
    diagnostics.add_argument(
        "--log-json",
        action="store_true",
        help="Emit log lines as JSON.",
    )
    return parser


def _build_config(args: argparse.Namespace) -> ResolverConfig:
    """Translate network flags into a :class:`ResolverConfig`."""
    return ResolverConfig(user_agent=args.user_agent, timeout=args.timeout)


def _log_level(verbosity: int) -> int:
    if verbosity >= 2:
        return logging.DEBUG
    if verbosity == 1:
        return logging.INFO
    return logging.WARNING


# ---------------------------------------------------------------------------
# Command dispatch
# ---------------------------------------------------------------------------

def _handle_resolve(target: str, args: argparse.Namespace) -> int:
    """Resolve *target* and list, print or download one of its formats.

    Flow:
    1. Fetch and resolve with the httpx fetcher and the yt-dlp sandbox.
    2. Show the format table (stop here for ``--list``).
    3. Select a format by ``--itag`` or interactively.
    4. Print its URL, or download it with Rich progress.
    """
    from yt_resolve.cli.format_prompt import display_formats, prompt_format_selection
    from yt_resolve.cli.progress import RichProgressHook
    from yt_resolve.core.download_service import DownloadService
    from yt_resolve.core.resolution_service import ResolutionService, lookup_by_tag
    from yt_resolve.infra.direct_download_provider import DirectDownloadProvider
    from yt_resolve.infra.http_fetcher import HttpxPageFetcher
    from yt_resolve.infra.jsinterp_sandbox import JsInterpreterSandbox
    from yt_resolve.infra.ytdlp_download_provider import YtDlpDownloadProvider

    config = _build_config(args)

    console.print(f"\n[bold]Resolving…[/bold]  {target}\n")
    with HttpxPageFetcher(config) as fetcher:
        metadata = ResolutionService(fetcher, JsInterpreterSandbox, config).resolve(target)

    display_formats(metadata)
    if args.list_only:
        return exit_codes.SUCCESS

    itag = args.itag if args.itag is not None else prompt_format_selection(metadata)
    selected = lookup_by_tag(metadata, itag)

    if args.print_url:
        if not selected.is_usable:
            console.print(
                "[yellow]Warning:[/yellow] the signature of this format could "
                "not be recovered; the URL will likely be refused."
            )
        print(selected.url)
        return exit_codes.SUCCESS

    console.print(
        f"\n[bold green]Starting download…[/bold green]  "
        f"itag={selected.itag} ({selected.quality}, {selected.extension})\n"
    )

    direct = DirectDownloadProvider(config)
    try:
        service = DownloadService(direct, YtDlpDownloadProvider(), config)
        with RichProgressHook(f"itag {selected.itag}") as hook:
            filename = service.download(
                metadata,
                selected,
                args.output,
                resume=args.resume,
                use_ytdlp=args.use_ytdlp,
                progress_callback=hook,
            )
    finally:
        direct.close()

    console.print(f"\n[bold green]Downloaded:[/bold green] {filename}")
    return exit_codes.SUCCESS


def _handle_doctor() -> int:
    """Dispatch the ``doctor`` diagnostics command."""
    from yt_resolve.cli.doctor import run_doctor

    return run_doctor()


# ---------------------------------------------------------------------------
# Main entry point
# ---------------------------------------------------------------------------

def main(argv: list[str] | None = None) -> int:
    """Run the yt-resolve CLI.

    Parameters
    ----------
    argv:
        Explicit argument list.  When ``None`` (default), ``sys.argv[1:]``
        is used.  Accepting *argv* enables deterministic testing without
        monkeypatching.

    Returns
    -------
    int
        OS process exit code.
    """
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.target is None:
        parser.print_help()
        return exit_codes.SUCCESS

    target: str = args.target

    if target.lower() == "doctor":
        return _handle_doctor()

    from yt_resolve.logging_setup import configure_logging

    configure_logging(_log_level(args.verbose), json=args.log_json)
    return _handle_resolve(target, args)


# ---------------------------------------------------------------------------
# Script-level error boundary
# ---------------------------------------------------------------------------

def cli() -> None:
    """Top-level error boundary invoked by the console-script entry point.

    This function wraps :func:`main` and guarantees the process never
    exits with a raw stack trace during normal usage.
    """
    try:
        code = main()
        sys.exit(code)
    except FetchError as exc:
        console.print_error(exc)
        sys.exit(exit_codes.FETCH_FAILED)
    except YtResolveError as exc:
        console.print_error(exc)
        sys.exit(exit_codes.GENERAL_ERROR)
    except KeyboardInterrupt:
        console.print("\n[yellow]Aborted by user.[/yellow]")
        sys.exit(exit_codes.KEYBOARD_INTERRUPT)
    except Exception as exc:  # noqa: BLE001
        console.print(
            "[bold red]Unexpected error.[/bold red] "
            "Please report this issue.\n"
            f"  {type(exc).__name__}: {exc}"
        )
        sys.exit(exit_codes.UNEXPECTED_ERROR)
