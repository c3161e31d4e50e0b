"""
The entry point for the CLI tool
"""

import uvloop
from aiohttp import web

from deisbikes import logger
from deisbikes.app import build_app
from deisbikes.config import server_mode
from deisbikes.version import __version__, name


def run():
    """Builds the app and runs it on a uvloop event loop."""
    logger.info(f'Starting {name} %s!', __version__)
    loop = uvloop.new_event_loop()
    loop.set_debug(server_mode in ("development", "testing"))
    web.run_app(build_app(), loop=loop)


if __name__ == '__main__':
    run()
