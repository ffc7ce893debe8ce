import logging
import time
from dataclasses import dataclass

from .core import SEARCH_SLICE

logger = logging.getLogger(__name__)


def filter_catalog(entries, term):
    """Entries whose name contains `term` (case-insensitive), in catalog order."""
    q = (term or '').lower()
    return [e for e in entries if q in e.name]


@dataclass
class SearchOutcome:
    generation: int
    matched: int
    rendered: int
    stale: bool = False


class SearchFilter:
    """One-shot substring search: filter the catalog, then render the matches in
    fixed-size slices, one after another, yielding between slices.

    Each run takes a new generation token; a run overtaken by a newer one stops
    issuing slices and its pending results are discarded.
    """

    def __init__(self, catalog, loader, generations, slice_size=SEARCH_SLICE,
                 yield_between=time.sleep):
        self.catalog = catalog  # callable returning the catalog list
        self.loader = loader
        self.generations = generations
        self.slice_size = slice_size
        self.yield_between = yield_between

    def run(self, term, render):
        generation = self.generations.begin()
        matches = filter_catalog(self.catalog(), term)
        logger.debug('Search %r (generation %d): %d matches', term, generation, len(matches))
        rendered = 0

        def is_current():
            return self.generations.is_current(generation)

        def counting_render(entry, record):
            nonlocal rendered
            rendered += 1
            render(entry, record)

        cursor = 0
        while cursor < len(matches):
            if not is_current():
                break
            cursor = self.loader.load_next_slice(matches, cursor, self.slice_size,
                                                 counting_render, is_current=is_current)
            self.yield_between(0)

        stale = not is_current()
        if stale:
            logger.info('Search %r superseded after %d/%d entries', term, cursor, len(matches))
        return SearchOutcome(generation=generation, matched=len(matches),
                             rendered=rendered, stale=stale)
