import pytest

from rush_static.exceptions import MalformedURLError
from rush_static.utils.httputils import (decode_url, guess_content_type,
                                         render_response_head, split_url)


@pytest.mark.parametrize('url, expected', [
    ('/a', ('/a', None, None)),
    ('/a?b=1', ('/a', 'b=1', None)),
    ('/a?b=1#c', ('/a', 'b=1', 'c')),
    ('/a#c?d', ('/a', None, 'c?d')),
])
def test_split_url(url, expected):
    assert split_url(url) == expected


def test_decode_url_mixed_case_escapes():
    assert decode_url('/%41%4a%4A%6b') == '/AJJk'


def test_decode_url_keeps_plus():
    assert decode_url('/a+b') == '/a+b'


def test_decode_url_error_keeps_url():
    with pytest.raises(MalformedURLError) as exc_info:
        decode_url('/bad%g0')

    assert exc_info.value.url == '/bad%g0'
    assert exc_info.value.code == 400


@pytest.mark.parametrize('path_or_ext, expected', [
    ('.txt', 'text/plain'),
    ('.html', 'text/html'),
    ('/srv/www/a.txt', 'text/plain'),
    ('/srv/www/image.png', 'image/png'),
    ('', 'application/octet-stream'),
    ('/srv/www/no-extension', 'application/octet-stream'),
])
def test_guess_content_type(path_or_ext, expected):
    assert guess_content_type(path_or_ext) == expected


def test_render_response_head():
    head = render_response_head('1.1', 200, {'content-length': 5, 'etag': '"x"'})

    assert head == b'HTTP/1.1 200 OK\r\ncontent-length: 5\r\netag: "x"\r\n\r\n'


def test_render_response_head_unknown_code():
    assert render_response_head('1.1', 599, {}).startswith(b'HTTP/1.1 599 UNKNOWN\r\n')


def test_render_response_head_custom_status():
    assert render_response_head('1.0', 404, {}, status='Nope') == b'HTTP/1.0 404 Nope\r\n\r\n'
