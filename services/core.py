import os

# Constants
POKEAPI_BASE = 'https://pokeapi.co/api/v2'
CATALOG_LIMIT = 1025  # national dex size; update if new gens are added

# Slice sizes for incremental loading
INITIAL_SLICE = 6
SCROLL_SLICE = 20
SEARCH_SLICE = 50

# Retry policy (linear backoff: attempt n failure waits n * base)
RETRY_ATTEMPTS = 3
BACKOFF_BASE_SECONDS = 1.0

# Upper bound on concurrent per-name fetches within one batch (bounded to be polite to PokeAPI)
MAX_CONCURRENCY = 8

# (connect, read) seconds
REQUEST_TIMEOUT = (5, 12)


class Settings:
    """Tunables for one catalog session. Defaults come from the module constants,
    `from_env` lets deployments override them without code changes.
    """

    def __init__(self, base_url=POKEAPI_BASE, catalog_limit=CATALOG_LIMIT,
                 initial_slice=INITIAL_SLICE, scroll_slice=SCROLL_SLICE,
                 search_slice=SEARCH_SLICE, retry_attempts=RETRY_ATTEMPTS,
                 backoff_base=BACKOFF_BASE_SECONDS, max_concurrency=MAX_CONCURRENCY,
                 timeout=REQUEST_TIMEOUT):
        if retry_attempts < 1:
            raise ValueError('retry_attempts must be at least 1')
        if max_concurrency < 1:
            raise ValueError('max_concurrency must be at least 1')
        self.base_url = base_url.rstrip('/')
        self.catalog_limit = catalog_limit
        self.initial_slice = initial_slice
        self.scroll_slice = scroll_slice
        self.search_slice = search_slice
        self.retry_attempts = retry_attempts
        self.backoff_base = backoff_base
        self.max_concurrency = max_concurrency
        self.timeout = timeout

    @classmethod
    def from_env(cls, environ=None):
        env = os.environ if environ is None else environ
        return cls(
            base_url=env.get('POKEAPI_BASE') or POKEAPI_BASE,
            catalog_limit=int(env.get('CATALOG_LIMIT', CATALOG_LIMIT)),
            retry_attempts=int(env.get('RETRY_ATTEMPTS', RETRY_ATTEMPTS)),
            backoff_base=float(env.get('BACKOFF_BASE_SECONDS', BACKOFF_BASE_SECONDS)),
            max_concurrency=int(env.get('MAX_CONCURRENCY', MAX_CONCURRENCY)),
        )

    def __repr__(self):
        return (f"Settings(base_url={self.base_url!r}, retry_attempts={self.retry_attempts}, "
                f"backoff_base={self.backoff_base}, max_concurrency={self.max_concurrency})")
