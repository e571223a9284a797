import logging
import os

from threading import Lock
from urllib.parse import unquote, urlparse
from weakref import WeakValueDictionary

from rdfldp.store.ldp_nr.base_storage_adapter import BaseStorageAdapter


logger = logging.getLogger(__name__)

DEFAULT_ROOT = '.storage'
"""Storage root used if none is configured."""


class FileAdapter(BaseStorageAdapter):
    """
    Default file layout.

    This is a simple filesystem layout that stores each binary in a file
    whose path, relative to the storage root, is the path of the resource
    URI. E.g. ``http://localhost/ldp/a/b.jpg`` is stored in
    ``<root>/ldp/a/b.jpg``.

    Writes to the same file are serialized by a process-wide lock keyed by
    file path. A lock is only kept while some thread holds a reference to
    it.
    """
    _locks = WeakValueDictionary()
    _locks_guard = Lock()

    def __init__(self, resource, root=None):
        """
        Set up the storage root.

        :param str root: Storage root directory. If not given, the
            ``store.ldp_nr.location`` configuration value is used if the
            environment is set up; otherwise, :data:`DEFAULT_ROOT`.
        """
        super().__init__(resource)
        if root is None:
            from rdfldp import env
            try:
                root = env.app_globals.config['application']['store'][
                        'ldp_nr']['location']
            except AttributeError:
                root = DEFAULT_ROOT
        self.root = root


    @property
    def local_path(self):
        """
        Path on disk of the binary content.

        :rtype: str
        :raise ValueError: if the path does not resolve to a file under the
            storage root.
        """
        uri_path = unquote(urlparse(str(self.uri)).path).strip('/')
        if not uri_path:
            raise ValueError(
                'Cannot store binary content for {}.'.format(self.uri))

        root = os.path.abspath(self.root)
        path = os.path.normpath(os.path.join(root, *uri_path.split('/')))
        if os.path.commonpath((root, path)) != root or path == root:
            raise ValueError(
                'Path of {} is outside of the storage root.'.format(self.uri))

        return path


    ## INTERFACE METHODS ##

    def io(self, writer=None):
        """
        See :meth:`BaseStorageAdapter.io`.

        The file is opened in ``r+b`` mode, after creating it if it does not
        exist.
        """
        path = self.local_path
        if writer is None:
            self._touch(path)
            return open(path, 'r+b')

        with self._path_lock(path):
            self._touch(path)
            fh = open(path, 'r+b')
            with fh:
                writer(fh)
                # Shorter content than the previous one must not leave a tail.
                fh.truncate()
            logger.debug('Wrote binary content to {}'.format(path))

        return fh


    def delete(self):
        """See :meth:`BaseStorageAdapter.delete`."""
        path = self.local_path
        with self._path_lock(path):
            if not os.path.isfile(path):
                return False
            os.unlink(path)
        logger.debug('Deleted binary content at {}'.format(path))

        return True


    def exists(self):
        return os.path.isfile(self.local_path)


    @staticmethod
    def _touch(path):
        if not os.path.isfile(path):
            os.makedirs(os.path.dirname(path), exist_ok=True)
            open(path, 'ab').close()


    @classmethod
    def _path_lock(cls, path):
        with cls._locks_guard:
            return cls._locks.setdefault(path, Lock())
