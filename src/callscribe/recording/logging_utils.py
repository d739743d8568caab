"""Logging helpers for the call recorder and test double factory."""

from __future__ import annotations

import logging


class LoggingManager:
    """Manage callscribe logging configuration and messages."""

    def __init__(self, logger_name: str = "callscribe") -> None:
        self.logger = logging.getLogger(logger_name)

    def setup(self, verbose: bool, log_file: str | None = None) -> None:
        """Configure logging to the console and, optionally, a log file."""
        level = logging.DEBUG if verbose else logging.INFO

        formatter = logging.Formatter("%(asctime)s [%(levelname)s] %(message)s")

        handlers: list[logging.Handler] = []
        console = logging.StreamHandler()
        console.setFormatter(formatter)
        handlers.append(console)

        if log_file:
            try:
                file_handler = logging.FileHandler(
                    log_file,
                    mode="a",
                    encoding="utf-8",
                )
                file_handler.setFormatter(formatter)
                handlers.append(file_handler)
            except OSError:
                # If we cannot open the log file, continue with console-only logging.
                pass

        self.logger.handlers.clear()
        for handler in handlers:
            self.logger.addHandler(handler)
        self.logger.setLevel(level)
        self.logger.propagate = False

    def log(self, msg: str, *args: object) -> None:
        """Log an informational message."""
        self.logger.info(msg, *args)

    def debug(self, msg: str, *args: object) -> None:
        """Log a debug message."""
        self.logger.debug(msg, *args)


DEFAULT_LOGGER = LoggingManager()


# Compatibility wrappers for procedural callers.
def setup_logging(verbose: bool, log_file: str | None = None) -> None:
    DEFAULT_LOGGER.setup(verbose, log_file)


def log(msg: str, *args: object) -> None:
    DEFAULT_LOGGER.log(msg, *args)


def debug(msg: str, *args: object) -> None:
    DEFAULT_LOGGER.debug(msg, *args)
