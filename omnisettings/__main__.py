"""
Command Line Entry Point

Resolves settings once and prints them as sorted ``key=value`` lines.

Usage:
    python -m omnisettings --resource-root config --prefix db.
"""

import argparse
import logging
import os
import sys
from typing import Optional, Sequence

from omnisettings.accessor import TypedAccessor
from omnisettings.config.settings import get_options
from omnisettings.core.exceptions import FatalConfigError
from omnisettings.observability import get_logger, setup_logging
from omnisettings.resolver import SettingsResolver

log = get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="omnisettings",
        description="Resolve and print application settings",
    )
    parser.add_argument("--resource-root", "-r", help="Directory holding the bootstrap and bundles")
    parser.add_argument("--prefix", "-p", default="", help="Only print keys starting with this prefix")
    parser.add_argument("--stage", "-s", help="Force the stage switch to this value")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    options = get_options()

    setup_logging(
        level=logging.DEBUG if args.verbose else options.log_level,
        format_string=options.log_format,
    )

    environ = dict(os.environ)
    resolver = SettingsResolver(resource_root=args.resource_root, environ=environ, options=options)
    try:
        if args.stage:
            bootstrap = resolver.load_bootstrap()
            environ[bootstrap.stage_property_name] = args.stage
        settings = resolver.resolve()
    except FatalConfigError as e:
        log.error("Settings resolution failed", error=type(e).__name__, reason=e)
        print(f"error: {e}", file=sys.stderr)
        return 1

    for key, value in sorted(TypedAccessor(settings).get_settings(prefix=args.prefix).items()):
        print(f"{key}={value}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
