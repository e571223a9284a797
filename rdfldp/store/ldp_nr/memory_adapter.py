import logging

from io import BytesIO
from threading import Lock

from rdfldp.store.ldp_nr.base_storage_adapter import BaseStorageAdapter


logger = logging.getLogger(__name__)


class MemoryAdapter(BaseStorageAdapter):
    """
    In-memory storage adapter.

    Contents are kept in a process-wide registry keyed by resource URI. This
    is mostly useful for tests and for ephemeral repositories.
    """
    _contents = {}
    _lock = Lock()

    ## INTERFACE METHODS ##

    def io(self, writer=None):
        """
        See :meth:`BaseStorageAdapter.io`.

        The returned stream is a copy of the stored bytes; its content is
        written back to the registry when it is closed.
        """
        key = str(self.uri)
        with self._lock:
            data = self._contents.setdefault(key, b'')
        fh = _SyncedBytesIO(self, data)
        if writer is not None:
            with fh:
                writer(fh)
                fh.truncate()

        return fh


    def delete(self):
        """See :meth:`BaseStorageAdapter.delete`."""
        with self._lock:
            return self._contents.pop(str(self.uri), None) is not None


    def exists(self):
        with self._lock:
            return str(self.uri) in self._contents


    @classmethod
    def clear(cls):
        """Remove all stored contents."""
        with cls._lock:
            cls._contents.clear()


    def _sync(self, data):
        with self._lock:
            self._contents[str(self.uri)] = data



class _SyncedBytesIO(BytesIO):
    """
    Byte stream writing its content back to a memory adapter on close, if it
    was changed.
    """
    def __init__(self, adapter, data):
        super().__init__(data)
        self._adapter = adapter
        self._orig = data


    def close(self):
        if not self.closed and self.getvalue() != self._orig:
            self._adapter._sync(self.getvalue())
        super().close()
