"""Command line access to a profile's portfolio.

Usage:
    talent-portfolio show PROFILE_ID
    talent-portfolio add PROFILE_ID FILE [FILE ...] [--feature-new]
    talent-portfolio serve

``show`` and ``add`` talk to the API at ``PORTFOLIO_API_URL``.
"""

from __future__ import annotations

import argparse
import logging
from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from pathlib import Path

from talent_portfolio.models import PendingUpload, PortfolioError, PortfolioItem
from talent_portfolio.services.editor import PortfolioEditor
from talent_portfolio.services.sync_engine import SyncEngine
from talent_portfolio.services.transport import create_http_transport


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="talent-portfolio")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    show = subparsers.add_parser("show", help="List the portfolio of a profile")
    show.add_argument("profile_id", type=int)

    add = subparsers.add_parser("add", help="Upload files to the end of a portfolio")
    add.add_argument("profile_id", type=int)
    add.add_argument("files", nargs="+", type=Path)
    add.add_argument(
        "--feature-new",
        action="store_true",
        help="Make the first uploaded file the profile picture",
    )

    subparsers.add_parser("serve", help="Run the portfolio API server")
    return parser


def _format_item(position: int, item: PortfolioItem) -> str:
    star = "*" if item.featured_image else " "
    return (
        f"{star} #{position:<3} {item.key!s:<40} {item.media_type.value:<6} "
        f"{item.approval_status.value:<9} {item.preview_url or '-'}"
    )


def _print_items(items: Sequence[PortfolioItem]) -> None:
    if not items:
        print("(empty portfolio)")
        return
    for position, item in enumerate(items, start=1):
        print(_format_item(position, item))


@contextmanager
def _open_editor(profile_id: int) -> Iterator[PortfolioEditor]:
    transport = create_http_transport()
    editor = PortfolioEditor(profile_id, SyncEngine(transport))
    try:
        yield editor
    finally:
        editor.close()
        transport.close()


def _show(profile_id: int) -> int:
    with _open_editor(profile_id) as editor:
        if not editor.load():
            print("\n".join(editor.errors))
            return 1
        _print_items(editor.items)
        return 0


def _add(profile_id: int, paths: Sequence[Path], feature_new: bool) -> int:
    with _open_editor(profile_id) as editor:
        if not editor.load():
            print("\n".join(editor.errors))
            return 1
        added = editor.add_files(PendingUpload.from_path(path) for path in paths)
        if feature_new and added:
            editor.set_featured(added[0].identity)

        result = editor.save()
        if not result.success:
            print(f"Sync failed: {result.message}")
            for message in editor.errors:
                print(f"  - {message}")
            return 1

        print(result.message)
        if result.items is not None:
            _print_items(result.items)
        return 0


def run_cli(argv: Sequence[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)

    if args.command == "serve":
        from talent_portfolio.api.main import main as serve

        serve()
        return 0
    if args.command == "show":
        return _show(args.profile_id)
    return _add(args.profile_id, args.files, args.feature_new)


def main(argv: Sequence[str] | None = None) -> int:
    """Entry point for the CLI application."""
    try:
        return run_cli(argv)
    except KeyboardInterrupt:
        print("\nInterrupted by user. Exiting.")
        return 130
    except (PortfolioError, OSError) as exc:
        print(f"Error: {exc}")
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
