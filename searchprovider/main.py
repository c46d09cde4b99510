import argparse
import logging
import os
import sys

from searchprovider.config_manager import DEFAULT_CONFIG_FILE, ConfigManager
from searchprovider.core.logging_control import LOG_ENV, setup_logging
from searchprovider.core.providers import provider_labels

PROG_NAME = "jetbrains-search-provider"
__version__ = "1.13.0"

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog=PROG_NAME,
        description="GNOME search provider for recent projects of JetBrains IDEs",
        epilog=f"Set ${LOG_ENV} to control the log level",
    )
    parser.add_argument("--list-providers", "--providers", dest="list_providers",
                        action="store_true", help="List all providers and exit")
    parser.add_argument("--config", default=DEFAULT_CONFIG_FILE, help="Path to the configuration file")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    if args.list_providers:
        for label in provider_labels():
            print(label)
        return 0

    log_control = setup_logging(PROG_NAME)
    config = ConfigManager(args.config)
    if LOG_ENV not in os.environ:
        try:
            log_control.set_level(str(config.get("logging.level", "info")))
        except ValueError as e:
            logger.warning("Ignoring configured log level: %s", e)

    logger.info("Started %s version: %s", PROG_NAME, __version__)
    # D-Bus and GLib are only needed to actually serve
    from searchprovider.service import run_service
    return run_service(config, log_control)


if __name__ == "__main__":
    sys.exit(main())
