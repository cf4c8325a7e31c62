"""
Static files for rush-like asyncio web servers: safe url to path resolving,
files streaming and conditional GET by etags
"""

from .config import Settings, StaticConfig, compile_url_filter
from .entities import (FileMeta, Request, RequestContext, ServeOutcome, ServeResult,
                       TransportResponse)
from .exceptions import (ConfigError, ERROR_TABLE, MalformedURLError, Reason,
                         ServeError, StaticError)
from .middleware import StaticMiddleware
from .resolver import PathResolver, url_to_path
from .responder import FileResponder, write_error
from .server import StaticServer

__all__ = [
    'Settings', 'StaticConfig', 'compile_url_filter',
    'FileMeta', 'Request', 'RequestContext', 'ServeOutcome', 'ServeResult',
    'TransportResponse',
    'ConfigError', 'ERROR_TABLE', 'MalformedURLError', 'Reason', 'ServeError',
    'StaticError',
    'StaticMiddleware',
    'PathResolver', 'url_to_path',
    'FileResponder', 'write_error',
    'StaticServer',
]
