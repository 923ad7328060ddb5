"""Unit tests for the `-L NAME=LEVEL` option callback."""

import logging

import click
import pytest

from dapr_appserver.entrypoints.cli.helpers import parse_log_level
from dapr_appserver.entrypoints.cli.helpers.log_level_parser import (
    DEFAULT_LOGGER_LEVELS,
)


def parse(value):
    return parse_log_level(None, None, value)


class TestParseLogLevel:
    """Tests for `parse_log_level`."""

    @staticmethod
    def test_empty_gives_defaults() -> None:
        assert parse(()) == DEFAULT_LOGGER_LEVELS

    @staticmethod
    def test_defaults_quiet_access_log() -> None:
        assert DEFAULT_LOGGER_LEVELS["aiohttp.access"] == logging.WARNING

    @staticmethod
    def test_repeated_options() -> None:
        levels = parse(("dapr_appserver=DEBUG", "grpc=error"))
        assert levels["dapr_appserver"] == logging.DEBUG
        assert levels["grpc"] == logging.ERROR

    @staticmethod
    @pytest.mark.parametrize(
        "value",
        [
            "dapr_appserver=DEBUG,aiohttp.access=INFO",
            "dapr_appserver=DEBUG aiohttp.access=INFO",
            "  dapr_appserver=DEBUG ,\taiohttp.access=INFO ",
        ],
    )
    def test_separated_list(value: str) -> None:
        """One string holding a comma or space separated list is split."""
        levels = parse(value)
        assert levels["dapr_appserver"] == logging.DEBUG
        assert levels["aiohttp.access"] == logging.INFO

    @staticmethod
    def test_later_items_win() -> None:
        assert parse(("x=INFO", "x=ERROR"))["x"] == logging.ERROR

    @staticmethod
    @pytest.mark.parametrize("item", ["DEBUG", "=DEBUG", "x=LOUD", "x="])
    def test_bad_items(item: str) -> None:
        with pytest.raises(click.BadParameter):
            parse((item,))
