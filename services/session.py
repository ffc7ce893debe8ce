import logging
import threading
import time

from .cache import CatalogCache
from .catalog import fetch_catalog_list
from .core import Settings
from .details import BatchDetailFetcher, DetailResolver
from .http import make_session
from .loader import BatchLoader, IncrementalScrollController
from .search import SearchFilter

logger = logging.getLogger(__name__)


class GenerationCounter:
    """Monotonic token handed to each load/search run. Results carrying an
    older token than the latest one are stale and must not be applied.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._current = 0

    def begin(self):
        with self._lock:
            self._current += 1
            return self._current

    @property
    def current(self):
        return self._current

    def is_current(self, token):
        return token == self._current


class CatalogSession:
    """Everything one viewer session shares: HTTP pool, caches, resolvers and the
    catalog index (fetched once, on first use).
    """

    def __init__(self, settings=None, http=None, cache=None, sleep=time.sleep):
        self.settings = settings or Settings()
        self.http = http if http is not None else make_session(self.settings.max_concurrency)
        self.cache = cache if cache is not None else CatalogCache()
        self.generations = GenerationCounter()
        fetch_opts = dict(
            base_url=self.settings.base_url,
            max_attempts=self.settings.retry_attempts,
            backoff_base=self.settings.backoff_base,
            timeout=self.settings.timeout,
            sleep=sleep,
        )
        self.batch_fetcher = BatchDetailFetcher(self.http, self.cache,
                                                max_concurrency=self.settings.max_concurrency,
                                                **fetch_opts)
        self.details = DetailResolver(self.http, self.cache,
                                      max_concurrency=self.settings.max_concurrency,
                                      **fetch_opts)
        self.loader = BatchLoader(self.batch_fetcher)
        self._catalog = None
        self._catalog_lock = threading.Lock()

    def catalog(self):
        """Return the catalog index, fetching it on first call.
        A failed fetch raises NetworkError and is not remembered, so the next call retries.
        """
        if self._catalog is not None:
            return self._catalog
        with self._catalog_lock:
            if self._catalog is None:
                self._catalog = fetch_catalog_list(self.http, self.settings.base_url,
                                                   self.settings.catalog_limit,
                                                   timeout=self.settings.timeout)
        return self._catalog

    def search(self, generations=None, yield_between=time.sleep):
        return SearchFilter(self.catalog, self.loader, generations or self.generations,
                            slice_size=self.settings.search_slice,
                            yield_between=yield_between)

    def scroll_controller(self, render, hooks=None, generations=None):
        return IncrementalScrollController(
            self.catalog(), self.loader, render, hooks=hooks,
            generations=generations or self.generations,
            initial_slice=self.settings.initial_slice,
            slice_size=self.settings.scroll_slice,
        )
