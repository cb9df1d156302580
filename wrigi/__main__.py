"""Run the wrigi HTTP service."""

import argparse
import sys
from pathlib import Path

import uvicorn

from wrigi.config import load_settings
from wrigi.errors import ConfigError
from wrigi.logger import configure_logging, get_logger
from wrigi.repo_catalog import load_catalog, write_catalog
from wrigi.server import create_app

logger = get_logger(__name__)


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        prog="wrigi",
        description="Serve GitHub releases as IDE plugin repository feeds.",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="YAML settings file (default: $WRIGI_CONFIG or wrigi.yaml)",
    )
    parser.add_argument("--host", type=str, default=None, help="Bind address")
    parser.add_argument("--port", type=int, default=None, help="Bind port")
    parser.add_argument(
        "--dump-catalog",
        type=Path,
        default=None,
        metavar="PATH",
        help="Write the tracked repositories as a catalog YAML file and exit",
    )

    args = parser.parse_args(argv)

    try:
        settings = load_settings(args.config)
        configure_logging(settings.log_level)

        if args.dump_catalog is not None:
            write_catalog(args.dump_catalog, load_catalog(settings.catalog))
            print(f"Wrote catalog: {args.dump_catalog}")
            return 0

        app = create_app(settings)
    except ConfigError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    host = args.host or settings.host
    port = args.port or settings.port
    logger.info("starting", host=host, port=port)
    uvicorn.run(app, host=host, port=port, log_level=settings.log_level.lower())
    return 0


if __name__ == "__main__":
    sys.exit(main())
