import logging
import threading
from enum import Enum

from .core import INITIAL_SLICE, SCROLL_SLICE

logger = logging.getLogger(__name__)


class BatchLoader:
    """Drives the batch fetcher one slice of the catalog at a time."""

    def __init__(self, batch_fetcher):
        self.batch_fetcher = batch_fetcher

    def load_next_slice(self, full_list, cursor, slice_size, render, is_current=None):
        """Resolve full_list[cursor:cursor + slice_size] and call render(entry, record)
        for each entry that resolved, in list order.

        Returns the cursor past the requested slice, whether or not every item
        resolved, so progress always advances. When `is_current` reports the run
        as stale the results are discarded instead of rendered.
        """
        batch = full_list[cursor:cursor + slice_size]
        if not batch:
            return cursor
        logger.info('Loading batch: %d to %d', cursor, cursor + len(batch) - 1)
        records = self.batch_fetcher.resolve_minimal_batch([e.name for e in batch])
        if is_current is not None and not is_current():
            logger.debug('Discarding stale batch at %d (%d records)', cursor, len(records))
            return cursor + len(batch)
        for entry in batch:
            record = records.get(entry.name)
            if record is not None:
                render(entry, record)
        if len(records) < len(batch):
            logger.warning('Batch at %d rendered %d of %d entries', cursor, len(records), len(batch))
        return cursor + len(batch)


class ScrollState(str, Enum):
    IDLE = 'idle'
    LOADING = 'loading'
    COMPLETE = 'complete'


class ScrollHooks:
    """Presentation callbacks for the scroll controller. The defaults do nothing;
    a UI layer overrides the ones it cares about.
    """

    def show_indicator(self):
        pass

    def hide_indicator(self):
        pass

    def arm_trigger(self):
        pass

    def teardown_trigger(self):
        pass

    def show_retry(self):
        pass

    def hide_retry(self):
        pass


class IncrementalScrollController:
    """Loads the catalog in slices as the viewer scrolls or asks for more.

    IDLE -> LOADING on a sentinel-visible signal or a load-more action (ignored
    while LOADING), then back to IDLE with a fresh trigger, or to COMPLETE once
    the cursor reaches the end of the list.
    """

    def __init__(self, full_list, loader, render, hooks=None, generations=None,
                 initial_slice=INITIAL_SLICE, slice_size=SCROLL_SLICE):
        self.full_list = full_list
        self.loader = loader
        self.render = render
        self.hooks = hooks or ScrollHooks()
        self.generations = generations
        self.initial_slice = initial_slice
        self.slice_size = slice_size
        self.cursor = 0
        self.state = ScrollState.IDLE
        self.retry_visible = False
        self.generation = None
        self._busy = threading.Lock()

    @property
    def total(self):
        return len(self.full_list)

    @property
    def is_loading(self):
        return self.state is ScrollState.LOADING

    def _is_current(self):
        if self.generations is None:
            return True
        return self.generations.is_current(self.generation)

    def start(self):
        """Render the initial slice and arm the trigger (or complete for short lists)."""
        if self.generations is not None:
            self.generation = self.generations.begin()
        logger.info('Total entries to load: %d', self.total)
        return self._load(self.initial_slice)

    def on_sentinel_visible(self):
        return self._load(self.slice_size, trigger='sentinel')

    def on_load_more(self):
        return self._load(self.slice_size, trigger='button')

    def _load(self, size, trigger='initial'):
        """Run one slice. Returns False when the request was suppressed."""
        if self.state is ScrollState.COMPLETE or not self._busy.acquire(blocking=False):
            return False
        try:
            self.state = ScrollState.LOADING
            logger.debug('Load triggered by %s, loaded %d/%d', trigger, self.cursor, self.total)
            self.hooks.show_indicator()
            try:
                self.cursor = self.loader.load_next_slice(
                    self.full_list, self.cursor, size, self.render, is_current=self._is_current)
            except Exception:
                logger.exception('Error loading batch at %d', self.cursor)
                self.retry_visible = True
                self.hooks.show_retry()
            else:
                if self.retry_visible:
                    self.retry_visible = False
                    self.hooks.hide_retry()
            finally:
                self.hooks.hide_indicator()

            if self.cursor >= self.total:
                self.state = ScrollState.COMPLETE
                self.hooks.teardown_trigger()
                logger.info('All entries loaded (%d)', self.total)
            else:
                self.state = ScrollState.IDLE
                self.hooks.arm_trigger()
            return True
        finally:
            self._busy.release()
