"""Unit tests for services.catalog and the session's catalog index."""
import pytest
import requests

from conftest import BASE, DummyResponse
from services.catalog import fetch_catalog_list
from services.core import Settings
from services.errors import NetworkError
from services.models import CatalogEntry

LIST_URL = f'{BASE}/pokemon?limit=1025'


def test_fetch_catalog_list(http):
    http.routes[LIST_URL] = {'results': [
        {'name': 'bulbasaur', 'url': f'{BASE}/pokemon/1/'},
        {'name': 'ivysaur', 'url': f'{BASE}/pokemon/2/'},
    ]}
    entries = fetch_catalog_list(http, BASE)
    assert entries == [
        CatalogEntry('bulbasaur', f'{BASE}/pokemon/1/'),
        CatalogEntry('ivysaur', f'{BASE}/pokemon/2/'),
    ]


def test_limit_in_url(http):
    http.routes[f'{BASE}/pokemon?limit=3'] = {'results': []}
    assert fetch_catalog_list(http, BASE, limit=3) == []


def test_single_attempt_on_failure(http):
    http.routes[LIST_URL] = requests.ConnectionError('offline')
    with pytest.raises(NetworkError):
        fetch_catalog_list(http, BASE)
    assert http.count(LIST_URL) == 1


@pytest.mark.parametrize('payload', [
    {'count': 0},
    {'results': 'nope'},
    {'results': [{'url': 'x'}]},
    ['bulbasaur'],
])
def test_malformed_payload(http, payload):
    http.routes[LIST_URL] = payload
    with pytest.raises(NetworkError):
        fetch_catalog_list(http, BASE)


class TestSessionCatalog:
    def test_fetched_once(self, session, http, add_catalog):
        add_catalog('bulbasaur', 'ivysaur')
        assert session.catalog() is session.catalog()
        assert http.count(LIST_URL) == 1

    def test_failure_not_remembered(self, session, http, add_catalog):
        http.routes[LIST_URL] = DummyResponse(status_code=500)
        with pytest.raises(NetworkError):
            session.catalog()
        add_catalog('bulbasaur')
        assert [e.name for e in session.catalog()] == ['bulbasaur']


class TestSettings:
    def test_from_env_overrides(self):
        s = Settings.from_env({'RETRY_ATTEMPTS': '5', 'BACKOFF_BASE_SECONDS': '0.25',
                               'MAX_CONCURRENCY': '4', 'POKEAPI_BASE': 'http://local/api/'})
        assert s.retry_attempts == 5
        assert s.backoff_base == 0.25
        assert s.max_concurrency == 4
        assert s.base_url == 'http://local/api'

    def test_defaults(self):
        s = Settings.from_env({})
        assert (s.initial_slice, s.scroll_slice, s.search_slice) == (6, 20, 50)
        assert s.retry_attempts == 3
        assert s.backoff_base == 1.0

    def test_rejects_zero_attempts(self):
        with pytest.raises(ValueError):
            Settings(retry_attempts=0)
