from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

import yaml

from . import __version__
from .exceptions import ConfigError
from .settings import CombatSettings, default_config_path

logger = logging.getLogger(__name__)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="combat-logger",
        description="Manage the combat logger configuration file.",
    )
    parser.add_argument(
        "--config",
        dest="config_path",
        type=Path,
        default=None,
        help="Path to the YAML config (default: per-user config directory).",
    )
    parser.add_argument("--debug", action="store_true", help="Enable verbose debug logging.")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    sub = parser.add_subparsers(dest="command", required=True)

    init = sub.add_parser("init", help="Write the default configuration file.")
    init.add_argument("--force", action="store_true", help="Overwrite an existing file.")

    check = sub.add_parser("check", help="Load the configuration and print the effective settings.")
    check.add_argument("--strict", action="store_true", help="Fail if any value fell back to its default.")
    return parser.parse_args(argv)


def _init(path: Path, force: bool) -> int:
    if path.exists() and not force:
        logger.error("%s already exists; use --force to overwrite", path)
        return 1
    CombatSettings().save(path)
    print(path)
    return 0


def _check(path: Path, strict: bool) -> int:
    if not path.exists():
        raise ConfigError(f"Config file not found: {path}")
    settings, problems = CombatSettings.load_with_problems(path, create=False)
    print(yaml.safe_dump(settings.to_yaml(), sort_keys=False, allow_unicode=True), end="")
    if strict and problems:
        raise ConfigError("; ".join(problems))
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.INFO,
        format="[%(levelname)s] %(name)s: %(message)s",
    )
    path = args.config_path or default_config_path()
    try:
        if args.command == "init":
            return _init(path, args.force)
        return _check(path, args.strict)
    except ConfigError as exc:
        logger.error("Invalid configuration: %s", exc)
        return 2


if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))
