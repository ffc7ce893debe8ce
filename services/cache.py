import threading


class CatalogCache:
    """Session-scoped store of minimal and full records, keyed by name.

    Entries are never replaced or evicted: the first successful fetch for a
    name stays authoritative for the lifetime of the session.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._minimal = {}  # name -> MinimalRecord
        self._full = {}     # name -> FullRecord

    def get_minimal(self, name):
        return self._minimal.get(name)

    def get_full(self, name):
        return self._full.get(name)

    def put_minimal(self, name, record):
        """Store record unless one is already cached; return the cached one."""
        with self._lock:
            return self._minimal.setdefault(name, record)

    def put_full(self, name, record):
        with self._lock:
            return self._full.setdefault(name, record)

    def has_minimal(self, name):
        return name in self._minimal

    def has_full(self, name):
        return name in self._full

    def stats(self):
        return {'minimal': len(self._minimal), 'full': len(self._full)}
