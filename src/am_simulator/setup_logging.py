"""Logging configuration for the am_simulator package."""

import coloredlogs


def setup_logging(level: str = "INFO") -> None:
  """Configure the root logger with a short, colored format.

  Library modules only create loggers; call this once from an entry point
  such as the example CLI.

  Args:
    level: Logging level (e.g., "INFO", "DEBUG", "WARNING").
  """
  coloredlogs.install(
    level=level,
    fmt="%(asctime)s | %(levelname)-8s | %(module)s | %(message)s",
    datefmt="%H:%M:%S",
  )
