import logging
import time

import requests
from requests.adapters import HTTPAdapter

from .core import MAX_CONCURRENCY, RETRY_ATTEMPTS, BACKOFF_BASE_SECONDS, REQUEST_TIMEOUT
from .errors import NetworkError, FetchExhaustedError

logger = logging.getLogger(__name__)

USER_AGENT = 'pokedex-viewer/1.0 (+https://example.local)'


def make_session(pool_size=MAX_CONCURRENCY):
    """Shared HTTP session with a connection pool large enough for one batch fan-out.
    Retries are handled by `retrying_fetch`, not by the adapter.
    """
    s = requests.Session()
    adapter = HTTPAdapter(max_retries=0, pool_connections=10, pool_maxsize=max(pool_size, 10))
    s.mount('http://', adapter)
    s.mount('https://', adapter)
    s.headers.update({'User-Agent': USER_AGENT, 'Accept': 'application/json'})
    return s


def get_json(http, url, timeout=REQUEST_TIMEOUT):
    """Single GET returning decoded JSON. Any failure surfaces as NetworkError."""
    try:
        r = http.get(url, timeout=timeout)
        r.raise_for_status()
        return r.json()
    except requests.RequestException as e:
        raise NetworkError(f'Request to {url} failed: {e}', url=url) from e
    except ValueError as e:
        # JSONDecodeError subclasses ValueError
        raise NetworkError(f'Invalid JSON from {url}: {e}', url=url) from e


def retrying_fetch(http, url, max_attempts=RETRY_ATTEMPTS, backoff_base=BACKOFF_BASE_SECONDS,
                   parse=None, sleep=time.sleep, timeout=REQUEST_TIMEOUT):
    """GET `url` up to `max_attempts` times, sequentially.

    After failed attempt n (other than the last) waits n * backoff_base seconds.
    When `parse` is given it runs inside each attempt, so a payload it rejects
    is retried like a transport failure.
    Raises FetchExhaustedError once the budget is spent.
    """
    last_error = None
    for attempt in range(1, max_attempts + 1):
        try:
            data = get_json(http, url, timeout=timeout)
            return parse(data) if parse is not None else data
        except (NetworkError, KeyError, TypeError, ValueError) as e:
            last_error = e
            logger.warning('Failed to fetch %s, attempt %d/%d: %s', url, attempt, max_attempts, e)
            if attempt < max_attempts:
                sleep(backoff_base * attempt)
    logger.error('Failed to fetch %s after %d attempts', url, max_attempts)
    raise FetchExhaustedError(url, max_attempts, last_error)
