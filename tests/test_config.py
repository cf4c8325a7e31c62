import re

import pytest

from rush_static.config import Settings, StaticConfig, compile_url_filter
from rush_static.exceptions import ConfigError


def test_string_filter_is_anchored():
    url_filter = compile_url_filter('/static/')

    assert url_filter('/static/a.css')
    assert not url_filter('/api/static/a.css')


def test_string_filter_is_regex():
    url_filter = compile_url_filter(r'/(css|js)/.+\.(css|js)$')

    assert url_filter('/css/site.css')
    assert url_filter('/js/app.js')
    assert not url_filter('/img/logo.png')


def test_compiled_pattern_matches_from_start():
    url_filter = compile_url_filter(re.compile('/public'))

    assert url_filter('/public/index.html')
    assert not url_filter('/x/public/index.html')


def test_callable_filter_is_used_as_is():
    def only_txt(url):
        return url.endswith('.txt')

    assert compile_url_filter(only_txt) is only_txt


def test_no_filter_matches_everything():
    url_filter = compile_url_filter(None)

    assert url_filter('/')
    assert url_filter('/anything')


@pytest.mark.parametrize('raw_filter', ['(unclosed', 42])
def test_bad_filter(raw_filter):
    with pytest.raises(ConfigError):
        compile_url_filter(raw_filter)


@pytest.mark.parametrize('root', ['', None])
def test_static_config_requires_root(root):
    with pytest.raises(ConfigError):
        StaticConfig(root_path=root)


def test_static_config_compiles_filter():
    config = StaticConfig(root_path='/srv/www', url_filter='/static/')

    assert config.url_filter('/static/x')
    assert not config.url_filter('/x')


def test_settings_defaults():
    settings = Settings()

    assert settings.port == 9090
    assert settings.default_headers['Server'] == 'rush-static'
    assert Settings().default_headers is not settings.default_headers

    with pytest.raises(ConfigError):
        settings.static_config()
