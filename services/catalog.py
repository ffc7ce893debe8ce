import logging

from .core import POKEAPI_BASE, CATALOG_LIMIT, REQUEST_TIMEOUT
from .errors import NetworkError
from .http import get_json
from .models import CatalogEntry

logger = logging.getLogger(__name__)


def fetch_catalog_list(http, base_url=POKEAPI_BASE, limit=CATALOG_LIMIT, timeout=REQUEST_TIMEOUT):
    """Return the whole catalog index as CatalogEntry items, in API order.
    Single attempt; raises NetworkError on transport failure or a malformed payload.
    """
    url = f"{base_url}/pokemon?limit={limit}"
    data = get_json(http, url, timeout=timeout)
    results = data.get('results') if isinstance(data, dict) else None
    if not isinstance(results, list):
        raise NetworkError('Catalog payload has no results list', url=url)
    entries = []
    for item in results:
        name = item.get('name') if isinstance(item, dict) else None
        if not name:
            raise NetworkError(f'Catalog item without a name: {item!r}', url=url)
        entries.append(CatalogEntry(name=name, reference=item.get('url') or ''))
    logger.info('Fetched catalog list: %d entries', len(entries))
    return entries
