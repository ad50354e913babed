"""repocache CLI"""

from pathlib import Path

import click

from repocache import __version__
from repocache.cli.cache import cleanup, describe, fetch, resolve
from repocache.cli.utils.logging import configure_logging


@click.group()
@click.version_option(__version__, prog_name="repocache")
@click.option("--debug/--no-debug", default=False, help="Enable debug mode")
@click.option(
    "--cache-dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    envvar="REPOCACHE_DIR",
    help="Base cache directory (default: from the configuration file).",
)
@click.pass_context
def cli(ctx, debug: bool, cache_dir):
    """
    Local cache of remote git repositories.
    """
    ctx.ensure_object(dict)
    ctx.obj["DEBUG"] = debug
    ctx.obj["CACHE_DIR"] = cache_dir
    configure_logging(debug)


cli.add_command(fetch)
cli.add_command(resolve)
cli.add_command(describe)
cli.add_command(cleanup)

if __name__ == "__main__":
    cli(obj={})
