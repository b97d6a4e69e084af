"""
Command-line driver for Rancher Scriba.

Runs one collection pass: clusters and projects are read
from the Rancher API and written into the configured ConfigMap. Intended to be
run on a schedule (see deploy/cronjob.yaml); the exit status reports whether
the pass succeeded.
"""

import logging
import sys
import argparse
from typing import List, Optional

from .config import ConfigManager
from .errors import ConfigurationError, ScribaError
from .fetchers import BaseFetcher, RancherFetcher, StaticFetcher
from .pipeline import CollectionPass, PassResult
from .retry import BackoffRetrier
from .store import ConfigMapBackend, DocumentStore

EXIT_OK = 0
EXIT_PASS_FAILED = 1
EXIT_CONFIGURATION = 2


def setup_logging(config: ConfigManager, verbose: bool = False):
    """Configure logging for the application."""
    level_name = "DEBUG" if verbose else config.get("logging.level", "INFO")
    level = getattr(logging, str(level_name).upper(), logging.INFO)
    format_str = config.get("logging.format", "%(asctime)s - %(name)s - %(levelname)s - %(message)s")

    handlers: List[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if config.log_filename:
        handlers.append(logging.FileHandler(config.log_filename))

    logging.basicConfig(level=level, format=format_str, handlers=handlers, force=True)


def parse_arguments(argv: Optional[List[str]] = None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Rancher Scriba - publish Rancher cluster and project metadata to a ConfigMap",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  rancher-scriba                              # Collect and write the ConfigMap
  rancher-scriba --dry-run                    # Collect and print the sections
  rancher-scriba --fixture data.yaml --dry-run  # Render offline fixture data
        """
    )

    parser.add_argument(
        "--config",
        help="Path to the configuration file (default: $SCRIBA_CONFIG or config.yaml)"
    )

    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Print the rendered sections instead of writing the ConfigMap"
    )

    parser.add_argument(
        "--fixture",
        help="Read clusters and projects from a YAML/JSON fixture instead of the Rancher API"
    )

    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable debug logging"
    )

    return parser.parse_args(argv)


def build_fetcher(config: ConfigManager, fixture: Optional[str] = None) -> BaseFetcher:
    """
    Create the entity fetcher for this pass.

    Raises:
        ConfigurationError: If the Rancher settings are incomplete
    """
    if fixture:
        logging.info(f"Using fixture data from {fixture}")
        return StaticFetcher.from_file(fixture)

    config.validate()
    return RancherFetcher(
        base_url=config.api_base_url,
        token=config.token,
        retrier=BackoffRetrier(max_retries=config.max_retries),
        verify_tls=config.verify_tls,
        timeout=config.request_timeout
    )


def build_pass(config: ConfigManager, fetcher: BaseFetcher, dry_run: bool = False) -> CollectionPass:
    """Wire the collection pass from configuration."""
    store = None
    if not dry_run:
        backend = ConfigMapBackend.from_environment(
            in_cluster=config.in_cluster,
            kubeconfig=config.kubeconfig
        )
        store = DocumentStore(backend)

    upsert_retrier = BackoffRetrier(max_retries=config.max_retries) if config.retry_upsert else None

    return CollectionPass(
        fetcher,
        store,
        document_name=config.document_name,
        namespace=config.document_namespace,
        cluster_type=config.cluster_type,
        upsert_retrier=upsert_retrier
    )


def print_sections(result: PassResult):
    """Print the rendered sections of a dry run."""
    for section, body in result.sections.items():
        print(f"--- {section} ---")
        print(body, end="")


def run(argv: Optional[List[str]] = None) -> int:
    """
    Run one pass and return the process exit status.
    """
    args = parse_arguments(argv)
    config = ConfigManager(args.config)
    setup_logging(config, args.verbose)

    logging.info("Rancher Scriba - Rancher metadata collector")

    try:
        with build_fetcher(config, args.fixture) as fetcher:
            collection_pass = build_pass(config, fetcher, dry_run=args.dry_run)
            result = collection_pass.run()

    except ConfigurationError as e:
        logging.error(f"Configuration error: {e}")
        return EXIT_CONFIGURATION

    except ScribaError as e:
        logging.error(f"Pass failed: {e}")
        return EXIT_PASS_FAILED

    if args.dry_run:
        print_sections(result)

    return EXIT_OK


def main():
    """Main entry point."""
    try:
        sys.exit(run())
    except KeyboardInterrupt:
        logging.info("Pass interrupted by user")
        sys.exit(EXIT_PASS_FAILED)


if __name__ == "__main__":
    main()
