"""
Shared fixtures for the test suite: a fake HTTP session serving canned
PokeAPI payloads, a sleep recorder, and a ready-made catalog session.
"""
import sys
import threading
from pathlib import Path

import pytest
import requests

# Ensure project root is importable
ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

BASE = 'https://pokeapi.test/api/v2'


class DummyResponse:
    def __init__(self, status_code=200, json_data=None, bad_json=False):
        self.status_code = status_code
        self._json = json_data
        self._bad_json = bad_json

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f'{self.status_code} error')

    def json(self):
        if self._bad_json:
            raise ValueError('Expecting value: line 1 column 1 (char 0)')
        return self._json


class FakeHttp:
    """Stands in for requests.Session. `routes` maps URL -> payload dict,
    DummyResponse, exception instance, a callable taking the URL and returning
    one of those, or a list consumed one item per call.
    Unknown URLs answer 404.
    """

    def __init__(self):
        self.routes = {}
        self.calls = []
        self._lock = threading.Lock()

    def get(self, url, timeout=None):
        with self._lock:
            self.calls.append(url)
            route = self.routes.get(url)
            if isinstance(route, list):
                route = route.pop(0) if len(route) > 1 else route[0]
        if route is None:
            return DummyResponse(status_code=404)
        if callable(route):
            route = route(url)
        if isinstance(route, Exception):
            raise route
        if isinstance(route, DummyResponse):
            return route
        return DummyResponse(json_data=route)

    def count(self, url):
        return self.calls.count(url)


def pokemon_payload(name, pid=1, types=('normal',), sprite=None, moves=(), stats=None):
    return {
        'name': name,
        'id': pid,
        'height': 7,
        'weight': 69,
        'types': [{'slot': i + 1, 'type': {'name': t}} for i, t in enumerate(types)],
        'stats': [{'base_stat': v, 'stat': {'name': n}} for n, v in (stats or [('hp', 45)])],
        'moves': [{'move': {'name': m}} for m in moves],
        'species': {'url': f'{BASE}/pokemon-species/{pid}/'},
        'sprites': {'front_default': sprite or f'https://img.test/{name}.png'},
    }


def chain_node(name, *evolves_to):
    return {'species': {'name': name, 'url': ''}, 'evolves_to': list(evolves_to)}


@pytest.fixture
def http():
    return FakeHttp()


@pytest.fixture
def sleeps():
    """Records requested backoff delays instead of sleeping."""
    return []


@pytest.fixture
def settings():
    from services.core import Settings
    return Settings(base_url=BASE, search_slice=2)


@pytest.fixture
def session(settings, http, sleeps):
    from services.session import CatalogSession
    return CatalogSession(settings, http=http, sleep=sleeps.append)


@pytest.fixture
def add_pokemon(http):
    """Register /pokemon/{name} payloads on the fake HTTP session."""
    def _add(*names, **kwargs):
        for i, name in enumerate(names, start=1):
            http.routes[f'{BASE}/pokemon/{name}'] = pokemon_payload(name, pid=i, **kwargs)
    return _add


@pytest.fixture
def add_catalog(http, settings):
    """Register the catalog index listing `names`."""
    def _add(*names):
        http.routes[f'{BASE}/pokemon?limit={settings.catalog_limit}'] = {
            'count': len(names),
            'results': [{'name': n, 'url': f'{BASE}/pokemon/{i}/'} for i, n in enumerate(names, 1)],
        }
    return _add
