"""Command line interface for ob2static."""

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import List, Optional

from ob2static.config import DEPLOY_REQUIRED, ExporterConfig, load_config
from ob2static.core.models import ExportError, PublishResult
from ob2static.core.publisher import create_publisher_from_config
from ob2static.deploy import trigger_dispatch

logger = logging.getLogger("ob2static")


def setup_logging(verbose: bool = False) -> None:
    """Configure logging."""
    logging.basicConfig(
        format="%(message)s",
        level=logging.DEBUG if verbose else logging.INFO,
    )
    # Reduce noise from libraries
    logging.getLogger("botocore").setLevel(logging.WARNING)
    logging.getLogger("aiobotocore").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ob2static",
        description="Export published Obsidian notes to a static site bucket",
    )
    parser.add_argument(
        "-c", "--config",
        type=Path,
        help="YAML settings file (OB2STATIC_* environment variables override it)",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")

    subparsers = parser.add_subparsers(dest="command", required=True)

    export = subparsers.add_parser("export", help="Upload publishable notes and their images")
    export.add_argument("--vault", type=Path, help="Vault directory (overrides vault_path)")
    export.add_argument(
        "--deploy",
        action="store_true",
        help="Trigger the site rebuild when every note was published",
    )

    subparsers.add_parser("deploy", help="Trigger the site rebuild dispatch")
    return parser


def report(result: PublishResult) -> None:
    # Each warning and failure was already logged where it happened.
    logger.info(
        f"Published {len(result.published_titles)} notes, "
        f"{len(result.failures)} failed, {len(result.warnings)} warnings"
    )


async def run_export(config: ExporterConfig, deploy: bool) -> int:
    publisher = create_publisher_from_config(config)
    result = await publisher.run()
    report(result)
    if not result.ok:
        return 1

    if deploy:
        try:
            await trigger_dispatch(config)
        except ExportError as e:
            logger.error(f"Deploy trigger failed: {e}")
            return 1
    return 0


async def run_deploy(config: ExporterConfig) -> int:
    config.validate(DEPLOY_REQUIRED)
    await trigger_dispatch(config)
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(args.verbose)

    try:
        config = load_config(args.config)
        if args.command == "export":
            if args.vault is not None:
                config.vault_path = args.vault
            return asyncio.run(run_export(config, args.deploy))
        return asyncio.run(run_deploy(config))
    except (ExportError, FileNotFoundError) as e:
        logger.error(f"Error: {e}")
        return 1
    except KeyboardInterrupt:
        logger.info("Interrupted")
        return 130


if __name__ == "__main__":
    sys.exit(main())
