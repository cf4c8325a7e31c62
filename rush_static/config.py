import re
import logging
from dataclasses import dataclass, field
from typing import Optional, Union

from .exceptions import ConfigError
from .entities import CaseInsensitiveDict
from .responder import DEFAULT_CHUNK_SIZE
from .typehints import Path, RawURLFilter, URLFilter


def compile_url_filter(raw_filter: Optional[RawURLFilter]) -> URLFilter:
    """
    Makes a predicate from any supported filter:
        - None - every url is served,
        - string - regular expression source, anchored to the beginning of url,
        - compiled pattern - matched from the beginning of url,
        - callable - used as-is
    """

    if raw_filter is None:
        return lambda url: True

    if callable(raw_filter):
        return raw_filter

    if isinstance(raw_filter, str):
        try:
            raw_filter = re.compile('^' + raw_filter)
        except re.error as exc:
            raise ConfigError(f'invalid url filter {raw_filter!r}: {exc}') from exc

    if isinstance(raw_filter, re.Pattern):
        return lambda url: raw_filter.match(url) is not None

    raise ConfigError(f'url filter must be a string, a pattern or a callable, '
                      f'not {type(raw_filter).__name__}')


@dataclass
class StaticConfig:
    root_path: Path
    url_filter: Union[RawURLFilter, None] = field(default=None)

    def __post_init__(self):
        if not self.root_path:
            raise ConfigError('path of static root can not be empty')

        self.url_filter = compile_url_filter(self.url_filter)


@dataclass
class Settings:
    host: str = field(default='127.0.0.1')
    port: int = field(default=9090)
    max_connections: int = field(default=1024)

    static_root: Optional[Path] = field(default=None)
    filter: Optional[RawURLFilter] = field(default=None)
    chunk_size: int = field(default=DEFAULT_CHUNK_SIZE)

    default_headers: CaseInsensitiveDict = field(
        default_factory=lambda: CaseInsensitiveDict(
            server='rush-static',
            connection='keep-alive'
        )
    )

    logger: logging.Logger = field(default_factory=lambda: logging.getLogger('rush_static'))

    asyncio_logging: bool = field(default=True)
    asyncio_logging_level: int = field(default=logging.WARNING)

    def static_config(self) -> StaticConfig:
        return StaticConfig(root_path=self.static_root, url_filter=self.filter)
