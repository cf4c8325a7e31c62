"""
Entity tags. Every etag we produce is a fingerprint wrapped into exactly
one pair of double quotes, and compared with the If-None-Match value as-is
"""

import hashlib
from typing import Optional, Union

from .entities import FileMeta
from .typehints import Digest, ETag


def md5(data: Union[str, bytes]) -> str:
    if isinstance(data, str):
        data = data.encode('utf-8')

    return hashlib.md5(data).hexdigest()


def quote_etag(fingerprint: str) -> ETag:
    # already quoted (strong or weak) etags are kept as they are
    opaque = fingerprint[2:] if fingerprint.startswith('W/') else fingerprint

    if len(opaque) >= 2 and opaque.startswith('"') and opaque.endswith('"'):
        return fingerprint

    return '"%s"' % fingerprint


def file_etag(meta: FileMeta, digest: Digest = md5) -> ETag:
    """
    Etag of a file, built only from its stat: size, inode and
    modification time in milliseconds. The content is never read for this
    """

    return quote_etag(digest(f'{meta.size}-{meta.inode}-{meta.modified_time_millis}'))


def content_etag(content: bytes,
                 explicit: Optional[str] = None,
                 digest: Digest = md5) -> ETag:
    """
    Etag of in-memory content. If the caller has its own etag, it's used
    as-is and digest is not called at all
    """

    if explicit:
        return quote_etag(explicit)

    return quote_etag(digest(content))


def etags_match(expected: ETag, client_etag: Optional[str]) -> bool:
    return expected == (client_etag or '')
