"""CLI entry point for the solrfeed server."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path


def main(argv: list[str] | None = None) -> None:
    """Main CLI entry point for the solrfeed server."""
    parser = argparse.ArgumentParser(
        prog="solrfeed",
        description="solrfeed — OpenSearch/Atom bridge from Apache Solr to Salesforce Federated Search",
    )
    parser.add_argument(
        "--config",
        "-c",
        type=str,
        default=None,
        help="Path to YAML configuration file",
    )
    parser.add_argument(
        "--host",
        type=str,
        default=None,
        help="Server bind address (overrides config)",
    )
    parser.add_argument(
        "--port",
        "-p",
        type=int,
        default=None,
        help="Server port (overrides config)",
    )
    parser.add_argument(
        "--workers",
        "-w",
        type=int,
        default=None,
        help="Number of worker processes",
    )
    parser.add_argument(
        "--reload",
        action="store_true",
        help="Enable auto-reload for development",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        choices=["debug", "info", "warning", "error"],
        default=None,
        help="Log level (overrides config)",
    )
    parser.add_argument(
        "--print-description",
        action="store_true",
        help="Print the OpenSearch description document and exit",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"solrfeed {_get_version()}",
    )

    args = parser.parse_args(argv)

    log_level = (args.log_level or "info").upper()
    logging.basicConfig(
        level=getattr(logging, log_level),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    from solrfeed.config.settings import Settings

    if args.config:
        config_path = Path(args.config)
        if not config_path.exists():
            print(f"Error: Config file not found: {config_path}", file=sys.stderr)
            sys.exit(1)
        settings = Settings.from_yaml(config_path)
    else:
        settings = Settings()

    if args.print_description:
        from solrfeed.core.description import DescriptionGenerator

        generator = DescriptionGenerator(settings.description, settings.mapping)
        sys.stdout.write(generator.render().decode("utf-8"))
        return

    # Apply CLI overrides
    if args.host:
        settings.server.host = args.host
    if args.port:
        settings.server.port = args.port
    if args.workers:
        settings.server.workers = args.workers
    if args.log_level:
        settings.observability.log_level = args.log_level

    import uvicorn

    from solrfeed.api.app import create_app

    if args.reload or settings.server.workers > 1:
        # Reload and multi-worker modes re-import the app in child processes,
        # which rebuild settings from the environment and solrfeed-config.yaml
        if args.config:
            logger = logging.getLogger(__name__)
            logger.warning("--config is ignored by worker processes; use solrfeed-config.yaml or env vars")
        uvicorn.run(
            "solrfeed.api.app:create_app",
            factory=True,
            host=settings.server.host,
            port=settings.server.port,
            workers=settings.server.workers if not args.reload else 1,
            reload=args.reload,
            log_level=log_level.lower(),
        )
    else:
        uvicorn.run(
            create_app(settings),
            host=settings.server.host,
            port=settings.server.port,
            log_level=log_level.lower(),
        )


def _get_version() -> str:
    """Get the package version."""
    try:
        from solrfeed import __version__

        return __version__
    except ImportError:
        return "unknown"


if __name__ == "__main__":
    main()
