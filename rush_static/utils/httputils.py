import mimetypes
from http import HTTPStatus
from string import hexdigits
from email.utils import formatdate
from typing import Optional, Tuple

from ..exceptions import MalformedURLError
from ..typehints import Headers

DEFAULT_CONTENT_TYPE = 'application/octet-stream'
HEX_TO_BYTE = {(a + b).encode(): bytes.fromhex(a + b)
               for a in hexdigits for b in hexdigits}


def split_url(url: str) -> Tuple[str, Optional[str], Optional[str]]:
    """
    Splits raw request url into path, parameters and fragment. Encoded
    %3F and %23 are not separators, so this must be done before decoding
    """

    parameters = fragment = None

    if '?' in url:
        url, parameters = url.split('?', 1)

        if '#' in parameters:
            parameters, fragment = parameters.split('#', 1)
    elif '#' in url:
        url, fragment = url.split('#', 1)

    return url, parameters, fragment


def decode_url(url: str) -> str:
    """
    Strict percent-decoding of an url path. Unlike the usual decoders, does
    not pass broken escapes through: `%zz`, a trailing `%` or decoded bytes
    that are not valid utf-8 raise MalformedURLError
    """

    try:
        raw = url.encode('utf-8')
    except UnicodeEncodeError as exc:
        raise MalformedURLError('url is not encodable', url=url) from exc

    bits = raw.split(b'%')
    decoded = bytearray(bits[0])

    for item in bits[1:]:
        try:
            decoded += HEX_TO_BYTE[item[:2]]
        except KeyError:
            raise MalformedURLError(f'bad percent-escape: %{item[:2]!r}',
                                    url=url) from None

        decoded += item[2:]

    try:
        return decoded.decode('utf-8')
    except UnicodeDecodeError as exc:
        raise MalformedURLError('decoded url is not valid utf-8', url=url) from exc


def guess_content_type(path_or_ext: str) -> str:
    """
    Accepts as a full path, as a bare extension like `.js`. Unknown types
    (and empty input) are served as application/octet-stream
    """

    if path_or_ext.startswith('.') and '/' not in path_or_ext:
        path_or_ext = 'file' + path_or_ext

    mime, _ = mimetypes.guess_type(path_or_ext)

    return mime or DEFAULT_CONTENT_TYPE


def render_response_head(protocol: str,
                         code: int,
                         headers: Headers,
                         status: Optional[str] = None) -> bytes:
    """
    Renders status line and headers of a http response, including the empty
    line that separates them from body. Body is sent by the caller itself

    Arguments:
             protocol - protocol version, string in format `major.minor`,
             code - response status code,
             headers - a dict (or CaseInsensitiveDict) with headers,
             status - may be None, than it'll be taken from the list of known.
                      If no known status codes relate to the code, UNKNOWN
                      will be used
    """

    if status is None:
        try:
            status = HTTPStatus(code).phrase
        except ValueError:
            status = 'UNKNOWN'

    rendered_headers = ''.join(
        f'{key}: {value}\r\n' for key, value in headers.items()
    )

    return f'HTTP/{protocol} {code} {status}\r\n{rendered_headers}\r\n'.encode('latin-1')


def http_date() -> str:
    return formatdate(usegmt=True)
