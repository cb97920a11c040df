"""CLI entrypoint for multichat."""

from __future__ import annotations

import argparse
from collections.abc import Sequence
from importlib import metadata
from pathlib import Path

from .app import MultichatApp
from .config import ensure_config_dir


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="multichat",
        description="multichat - Terminal chat client for OpenAI, Anthropic and Google models",
    )
    parser.add_argument(
        "--version",
        action="store_true",
        help="Print version and exit",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to an alternate config.toml",
    )
    return parser


def main(argv: Sequence[str] | None = None) -> None:
    """Ensure configuration exists, handle CLI flags, and run the TUI."""

    parser = _build_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)

    if args.version:
        try:
            version = metadata.version("multichat")
        except metadata.PackageNotFoundError:
            version = "0.0.0"
        print(f"multichat {version}")
        return

    ensure_config_dir()
    app = MultichatApp(config_path=args.config)
    app.run()


if __name__ == "__main__":
    main()
