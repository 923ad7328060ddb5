"""Parse `-L NAME=LEVEL` logger-level options.

Values come either from repeated options or from one environment variable
holding a comma/space separated list; both are flattened into one mapping of
logger name to numeric level, applied on top of `DEFAULT_LOGGER_LEVELS`.
"""

import logging
import re

import click

# aiohttp logs every request at INFO; keep that off the console unless asked.
DEFAULT_LOGGER_LEVELS = {"aiohttp.access": logging.WARNING, "grpc": logging.WARNING}

_SEPARATORS = re.compile(r"[,\s]+")


def _split(value: str | list[str] | tuple[str, ...]) -> list[str]:
    chunks = [value] if isinstance(value, str) else list(value)
    return [item for chunk in chunks for item in _SEPARATORS.split(chunk) if item]


def parse_log_level(
    ctx: click.Context,  # pylint: disable=unused-argument
    param: click.Parameter | None,  # pylint: disable=unused-argument
    value: str | list[str] | tuple[str, ...],
) -> dict[str, int]:
    """Click callback turning NAME=LEVEL items into a name->level dict.

    Later items override earlier ones. Level names are case-insensitive.

    Raises:
        click.BadParameter: If an item is not NAME=LEVEL or LEVEL is unknown.
    """
    levels = dict(DEFAULT_LOGGER_LEVELS)
    for item in _split(value):
        name, sep, level_name = item.partition("=")
        if not sep or not name.strip():
            raise click.BadParameter(f"Expected NAME=LEVEL, got {item!r}")
        level = logging.getLevelNamesMapping().get(level_name.strip().upper())
        if level is None:
            raise click.BadParameter(f"Invalid log level: {level_name}")
        levels[name.strip()] = level
    return levels
