#!/usr/bin/env python3
"""CLI entrypoint for the PhotoPrism label helper."""

from __future__ import annotations

from cli import LabelOptions, parse_cli
from config import load_config
from core.run import run
from logger import configure_logger


def main() -> int:
    """Run the CLI entrypoint.

    Returns:
        Process exit code.
    """
    print("\nPhotoPrism Label Helper\n")
    command, options = parse_cli()
    if isinstance(options, LabelOptions) and options.uids_file:
        if not options.uids_file.exists() or not options.uids_file.is_file():
            print(f"Not a file: {options.uids_file}")
            return 2

    if options.config_path:
        if not options.config_path.exists():
            print(f"Config path not found: {options.config_path}")
            return 2
        if options.config_path.is_dir():
            print(f"Config path must be a file: {options.config_path}")
            return 2

    cfg = load_config(options.config_path)
    configure_logger(cfg.logging.level, cfg.logging.debug_enabled or options.verbose)
    return run(command, options, cfg)


if __name__ == "__main__":
    raise SystemExit(main())
