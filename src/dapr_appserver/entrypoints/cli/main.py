"""dapr-appserver CLI entry point.

Defines the top-level ``dapr-appserver`` command (via Click-Extra), which
configures logging, and registers its subcommands.

Currently available commands
- ``dapr-appserver serve``: build a server and run it until interrupted.

Examples
    $ dapr-appserver --version
    $ dapr-appserver -v serve --protocol grpc --server-port 50050
"""

import logging
from pathlib import Path
from typing import TYPE_CHECKING

import click
import click_extra as clickx
from platformdirs import user_log_dir

from dapr_appserver import __version__
from dapr_appserver.logging import configure_logging, console_handler, log_startup
from dapr_appserver.logging import flight_recorder as make_flight_recorder

from .helpers import parse_log_level
from .serve import serve

if TYPE_CHECKING:
    from logging import Handler

logger = logging.getLogger(__name__)


HELP = """Application-side server for the Dapr sidecar.

    Builds an HTTP or gRPC server that the sidecar delivers pubsub events,
    input binding events, service invocations and actor calls to.
    """


@clickx.extra_group(
    version=__version__,
    help=HELP,
    params=[
        clickx.ColorOption(show_envvar=True),
        clickx.ExtraVersionOption(),
    ],
)
@click.option(
    "--verbose",
    "-v",
    "verbose_count",
    count=True,
    help="Raise console verbosity one level (from WARNING) per repetition.",
)
@click.option(
    "--quiet",
    "-q",
    "quiet_count",
    count=True,
    help="Lower console verbosity one level (from WARNING) per repetition.",
)
@click.option(
    "--debug/--no-debug",
    default=False,
    help="Log everything at DEBUG with logger names and source locations.",
)
@click.option(
    "--log-path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=Path(user_log_dir("dapr-appserver", appauthor=False, ensure_exists=True))
    / "latest.log",
    envvar="DAPR_APPSERVER_LOG_PATH",
    show_default=True,
    show_envvar=True,
    help="File the flight recorder writes to.",
)
@click.option(
    "--flight-recorder/--no-flight-recorder",
    default=True,
    show_envvar=True,
    help=(
        "Keep the last 2000 records at DEBUG in memory and write them to "
        "--log-path when a WARNING or ERROR is logged."
    ),
)
@click.option(
    "--force-flush/--no-force-flush",
    default=False,
    show_default=True,
    show_envvar=True,
    help="Also write the flight recorder buffer to --log-path on exit.",
)
@click.option(
    "-L",
    "--logger-level",
    "logger_levels",
    multiple=True,
    callback=parse_log_level,
    default=("aiohttp.access=WARNING", "grpc=WARNING"),
    show_default=True,
    show_envvar=True,
    help=(
        "Set the level of a specific logger (NAME=LEVEL). Repeatable, or a "
        "comma/space separated list in the environment variable."
    ),
)
@clickx.pass_context
def dapr_appserver(  # pylint: disable=too-many-arguments, too-many-positional-arguments
    ctx: click.Context,
    verbose_count: int,
    quiet_count: int,
    debug: bool,
    log_path: Path,
    flight_recorder: bool,
    force_flush: bool,
    logger_levels: dict[str, int],
) -> None:
    """Application-side server for the Dapr sidecar."""
    level = logging.WARNING - 10 * verbose_count + 10 * quiet_count
    level = max(logging.DEBUG, min(logging.CRITICAL, level))

    handlers: list[Handler] = [
        console_handler(level=level, debug_mode=debug, color=ctx.color is not False)
    ]
    if flight_recorder:
        handlers.append(make_flight_recorder(log_path, flush_on_close=force_flush))

    configure_logging(handlers, logger_levels)
    log_startup(
        logger,
        app_version=__version__,
        level=level,
        handlers=handlers,
        log_path=log_path,
        logger_levels=logger_levels,
    )
    ctx.call_on_close(logging.shutdown)


dapr_appserver.add_command(serve)
