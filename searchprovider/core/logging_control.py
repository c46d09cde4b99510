import logging
import os
import sys
from typing import Mapping, Optional

LOG_ENV = "JETBRAINS_SEARCH_PROVIDER_LOG"
ROOT_LOGGER = "searchprovider"

# syslog level names as used by org.freedesktop.LogControl1
SYSLOG_LEVELS = {
    "emerg": logging.CRITICAL,
    "alert": logging.CRITICAL,
    "crit": logging.CRITICAL,
    "err": logging.ERROR,
    "warning": logging.WARNING,
    "notice": logging.INFO,
    "info": logging.INFO,
    "debug": logging.DEBUG,
}

_ALIASES = {"error": "err", "warn": "warning", "critical": "crit"}


def parse_level(name: str) -> int:
    """Map a syslog or Python level name to a logging level."""
    key = name.strip().lower()
    key = _ALIASES.get(key, key)
    try:
        return SYSLOG_LEVELS[key]
    except KeyError:
        raise ValueError(f"Unknown log level {name!r}") from None


def syslog_name(level: int) -> str:
    if level <= logging.DEBUG:
        return "debug"
    if level <= logging.INFO:
        return "info"
    if level <= logging.WARNING:
        return "warning"
    if level <= logging.ERROR:
        return "err"
    return "crit"


class LogControl:
    """Runtime control over the verbosity of the service's loggers."""

    targets = ("console",)

    def __init__(self, logger: logging.Logger, identifier: str):
        self.logger = logger
        self.identifier = identifier

    @property
    def level(self) -> str:
        return syslog_name(self.logger.getEffectiveLevel())

    def set_level(self, name: str) -> None:
        level = parse_level(name)
        self.logger.setLevel(level)
        self.logger.info("Log level set to %s", syslog_name(level))

    @property
    def target(self) -> str:
        return self.targets[0]

    def set_target(self, target: str) -> None:
        if target not in self.targets:
            raise ValueError(f"Unsupported log target {target!r}")


def setup_logging(identifier: str, env: Optional[Mapping[str, str]] = None,
                  stream=None) -> LogControl:
    """Configure the service logger from the environment.

    Under systemd (``JOURNAL_STREAM`` set) timestamps are left to the journal.
    """
    env = os.environ if env is None else env
    logger = logging.getLogger(ROOT_LOGGER)
    handler = logging.StreamHandler(stream or sys.stderr)
    if "JOURNAL_STREAM" in env:
        handler.setFormatter(logging.Formatter("%(levelname)s %(name)s: %(message)s"))
    else:
        handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))
    logger.handlers[:] = [handler]
    logger.propagate = False

    requested = env.get(LOG_ENV)
    try:
        logger.setLevel(parse_level(requested) if requested else logging.INFO)
    except ValueError:
        logger.setLevel(logging.INFO)
        logger.warning("Ignoring invalid log level %r from $%s", requested, LOG_ENV)
    return LogControl(logger, identifier)
