#!/usr/bin/env python3
"""Fetch releases once and write a plugin repository descriptor."""

import argparse
import sys
from pathlib import Path

from wrigi import CatalogStore, GitHubClient, NotFound, refresh, render
from wrigi.config import load_settings
from wrigi.errors import ConfigError
from wrigi.logger import configure_logging
from wrigi.repo_catalog import load_catalog
from wrigi.upstream import make_fetcher


def main() -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Fetch releases once and write a plugin repository descriptor.",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument("owner", help="GitHub organization name")
    parser.add_argument("repository", help="GitHub repository name")
    parser.add_argument("channel", choices=["alpha", "beta", "release"])
    parser.add_argument(
        "--format",
        dest="fmt",
        choices=["xml", "json"],
        default="xml",
        help="Output format",
    )
    parser.add_argument(
        "--shape",
        choices=["rich", "minimal"],
        default="rich",
        help="Full plugin-repository document or minimal updatePlugins list",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="YAML settings file",
    )
    parser.add_argument(
        "--output",
        type=Path,
        default=None,
        help="Output file (default: stdout)",
    )

    args = parser.parse_args()

    try:
        settings = load_settings(args.config)
        catalog = load_catalog(settings.catalog)
    except ConfigError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    configure_logging(settings.log_level)

    store = CatalogStore(catalog, cooldown=settings.cooldown)
    with GitHubClient(
        token=settings.oauth,
        base_url=settings.github.base_url,
        timeout_s=settings.github.timeout_s,
        max_retries=settings.github.max_retries,
    ) as client:
        outcome = refresh(store, make_fetcher(client, settings.github.release_pages))

    if outcome.failed:
        print(
            f"Warning: {outcome.failed} repositories could not be fetched",
            file=sys.stderr,
        )

    try:
        payload = render(
            store.snapshot(),
            args.owner,
            args.repository,
            args.channel,
            args.fmt,
            shape=args.shape,
        )
    except NotFound as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if args.output is None:
        sys.stdout.write(payload.decode("utf-8"))
        sys.stdout.write("\n")
        return 0

    args.output.write_bytes(payload)
    print(f"Generated descriptor: {args.output}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
