import logging
import time
from concurrent.futures import ThreadPoolExecutor

from .core import POKEAPI_BASE, RETRY_ATTEMPTS, BACKOFF_BASE_SECONDS, MAX_CONCURRENCY, REQUEST_TIMEOUT
from .errors import CatalogError, FetchExhaustedError
from .evolution import walk_evolution_chain
from .http import retrying_fetch
from .models import FullRecord, MinimalRecord, EvolutionStage

logger = logging.getLogger(__name__)


class _DetailSource:
    """Fetch path shared by the batch and single-item resolvers: one retrying GET of
    /pokemon/{name}, parsed to a FullRecord, written to both caches.
    """

    def __init__(self, http, cache, base_url=POKEAPI_BASE, max_attempts=RETRY_ATTEMPTS,
                 backoff_base=BACKOFF_BASE_SECONDS, timeout=REQUEST_TIMEOUT, sleep=time.sleep):
        self.http = http
        self.cache = cache
        self.base_url = base_url
        self.max_attempts = max_attempts
        self.backoff_base = backoff_base
        self.timeout = timeout
        self.sleep = sleep

    def _fetch(self, url, parse=None):
        return retrying_fetch(self.http, url, max_attempts=self.max_attempts,
                              backoff_base=self.backoff_base, parse=parse,
                              sleep=self.sleep, timeout=self.timeout)

    def _fetch_full(self, name):
        record = self._fetch(f"{self.base_url}/pokemon/{name}", parse=FullRecord.from_api)
        # Another thread may have won the race; keep whatever got cached first.
        record = self.cache.put_full(name, record)
        self.cache.put_minimal(name, MinimalRecord.from_full(record))
        return record


class BatchDetailFetcher(_DetailSource):

    def __init__(self, http, cache, max_concurrency=MAX_CONCURRENCY, **kwargs):
        super().__init__(http, cache, **kwargs)
        self.max_concurrency = max_concurrency

    def _resolve_one(self, name):
        try:
            self._fetch_full(name)
        except FetchExhaustedError as e:
            logger.error('Dropping %s from batch: %s', name, e)
            return None
        return self.cache.get_minimal(name)

    def resolve_minimal_batch(self, names):
        """Resolve names to MinimalRecords.

        Returns a dict keyed by name, ordered like `names` (duplicates collapsed).
        Names whose retries are exhausted are left out rather than failing the batch.
        Cache misses are fetched concurrently, at most `max_concurrency` at a time.
        """
        ordered = list(dict.fromkeys(names))
        found = {}
        missing = []
        for name in ordered:
            cached = self.cache.get_minimal(name)
            if cached is not None:
                found[name] = cached
            else:
                missing.append(name)

        if missing:
            logger.debug('Batch: %d cached, %d to fetch', len(found), len(missing))
            workers = min(self.max_concurrency, len(missing))
            with ThreadPoolExecutor(max_workers=workers) as pool:
                for name, record in zip(missing, pool.map(self._resolve_one, missing)):
                    if record is not None:
                        found[name] = record

        return {name: found[name] for name in ordered if name in found}


class DetailResolver(_DetailSource):

    def __init__(self, http, cache, max_concurrency=MAX_CONCURRENCY, **kwargs):
        super().__init__(http, cache, **kwargs)
        self.max_concurrency = max_concurrency

    def resolve_full_detail(self, name):
        """Return the FullRecord for `name`, from cache when possible.
        Raises FetchExhaustedError when every attempt fails.
        """
        cached = self.cache.get_full(name)
        if cached is not None:
            return cached
        return self._fetch_full(name)

    def resolve_evolution_chain(self, name):
        """Species names of `name`'s evolution line, base form first.
        Best effort: any failure yields an empty list.
        """
        try:
            species = self._fetch(f"{self.base_url}/pokemon-species/{name}")
            chain_url = species['evolution_chain']['url']
            chain = self._fetch(chain_url)
            return walk_evolution_chain(chain['chain'])
        except (CatalogError, KeyError, TypeError) as e:
            logger.error('Failed to load species/evolution data for %s: %s', name, e)
            return []

    def _stage(self, name):
        try:
            return EvolutionStage(name, self.resolve_full_detail(name).thumbnail_url)
        except FetchExhaustedError:
            logger.error('Failed to load evolution details for %s', name)
            return EvolutionStage(name, None)

    def resolve_evolution_stages(self, name):
        """Evolution chain with a thumbnail per member (None where the lookup failed)."""
        names = self.resolve_evolution_chain(name)
        if not names:
            return []
        workers = min(self.max_concurrency, len(names))
        with ThreadPoolExecutor(max_workers=workers) as pool:
            return list(pool.map(self._stage, names))
