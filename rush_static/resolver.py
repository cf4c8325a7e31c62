import os
import logging
import posixpath
from typing import Optional

from .exceptions import ConfigError
from .typehints import Path, URL
from .utils.httputils import decode_url, split_url

logger = logging.getLogger(__name__)


def normalize_url_path(url_path: str) -> str:
    """
    Normalizes decoded url path as an absolute path on a virtual root: `.`
    and `..` are resolved and the result always starts with a single slash.
    `..` can't go above the virtual root, so the result can't go above the
    static root later
    """

    normalized = posixpath.normpath('/' + url_path)

    # posix allows exactly two leading slashes to stay as is
    return '/' + normalized.lstrip('/')


def url_to_path(root_path: Path, url: URL) -> Path:
    """
    Converts request url to local file path inside root_path

    May raise exceptions: ConfigError (empty root), MalformedURLError
    """

    if not root_path:
        raise ConfigError('path of static root can not be empty')

    url_path, _, _ = split_url(url)
    url_path = decode_url(url_path).replace('\0', '')
    relative = normalize_url_path(url_path).lstrip('/')

    if not relative:
        return os.path.normpath(root_path)

    return os.path.normpath(os.path.join(root_path, relative))


class PathResolver:
    def __init__(self, root_path: Optional[Path]):
        # fail on start, not on every request
        if not root_path:
            raise ConfigError('path of static root can not be empty')

        self.root_path = os.path.abspath(root_path)

    def resolve(self, url: URL) -> Path:
        file_path = url_to_path(self.root_path, url)
        logger.debug('resolved %r to %s', url, file_path)

        return file_path

    def __repr__(self):
        return f'PathResolver(root_path={self.root_path!r})'
