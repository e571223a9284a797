import logging

from abc import ABCMeta, abstractmethod

logger = logging.getLogger(__name__)


class BaseStorageAdapter(metaclass=ABCMeta):
    """
    Abstract class for storing the byte content of a LDP-NR.

    A storage adapter maps one
    :class:`~rdfldp.model.ldp_nr.NonRDFSource` to a binary stream,
    independently from the graph store. Different adapters can be created by
    implementing all the abstract methods of this class. An adapter is not
    necessarily restricted to a traditional filesystem.

    Implementations must conform to a minimal interface:

    - ``__init__`` accepts the resource as its first argument.
    - :meth:`io` returns a binary stream opened for reading and writing that
      represents the current state of the resource. Empty backing storage is
      created if none exists. If a ``writer`` callback is given, it is called
      with the stream; anything written to it is synced with the backing
      storage in a thread-safe manner by the time :meth:`io` returns.
    - :meth:`delete` removes the backing storage. It may be a no-op if
      deleting is undesirable or impossible (e.g. on retention-locked
      media), and it returns ``False`` if nothing was deleted.

    Beyond this interface, implementations are permitted to behave as
    desired. They should raise the appropriate
    :class:`~rdfldp.exceptions.RequestError` when rejecting content.
    """

    def __init__(self, resource):
        """
        Bind the adapter to a resource.

        :param rdfldp.model.ldp_nr.NonRDFSource resource: The LDP-NR.
        """
        self.resource = resource


    @property
    def uri(self):
        return self.resource.subject_uri


    ## INTERFACE METHODS ##

    @abstractmethod
    def io(self, writer=None):
        """
        Binary stream of the resource content.

        :param callable writer: Optional callback receiving the writable
            stream. The stream is closed, and its content synced, after the
            callback returns.

        :return: The stream. If ``writer`` is not given, the stream is open
            and positioned at the start; the caller should close it after
            reading.
        """
        pass


    @abstractmethod
    def delete(self):
        """
        Delete the backing storage.

        :rtype: bool
        :return: Whether anything was deleted.
        """
        pass


    def exists(self):
        """
        Whether any backing storage exists for the resource.

        :rtype: bool
        """
        return False
