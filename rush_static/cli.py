import sys
import logging
import argparse
from typing import List, Optional

from .config import Settings
from .exceptions import ConfigError
from .server import StaticServer


def parse_args(argv: List[str]) -> argparse.Namespace:
    arguments_parser = argparse.ArgumentParser(description='Serve static files with rush-static')
    arguments_parser.add_argument('root', nargs='?', default='.',
                                  help='directory to serve (default: current)')
    arguments_parser.add_argument('--host', default='127.0.0.1')
    arguments_parser.add_argument('--port', default=9090, type=int)
    arguments_parser.add_argument('--filter', default=None,
                                  help='regular expression, urls must match it from the beginning')
    arguments_parser.add_argument('--chunk-size', default=None, type=int)
    arguments_parser.add_argument('--debug', action='store_true')

    return arguments_parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    parsed = parse_args(sys.argv[1:] if argv is None else argv)

    logging.basicConfig(
        format='[%(asctime)s] [%(levelname)s] %(name)s: %(message)s',
        level=logging.DEBUG if parsed.debug else logging.INFO
    )

    settings = Settings(
        host=parsed.host,
        port=parsed.port,
        static_root=parsed.root,
        filter=parsed.filter,
        asyncio_logging=parsed.debug
    )

    if parsed.chunk_size:
        settings.chunk_size = parsed.chunk_size

    try:
        server = StaticServer(settings)
    except ConfigError as exc:
        print(f'[RUSH-STATIC] {exc}', file=sys.stderr)
        return 1

    server.run()

    return 0
