import logging

from hashlib import sha1
from threading import Lock

from rdflib import Literal

from rdfldp.dictionaries.namespaces import ns_collection as nsc
from rdfldp.dispatcher import UNSUPPORTED, Verb
from rdfldp.exceptions import Conflict
from rdfldp.globals import DESC_PATH
from rdfldp.model.ldpr import Resource, read_stream
from rdfldp.model.ldp_rs import RDFSource
from rdfldp.store.ldp_nr.file_adapter import FileAdapter
from rdfldp.util.toolbox import uri_join


logger = logging.getLogger(__name__)

DEFAULT_MIMETYPE = 'application/octet-stream'


class NonRDFSource(Resource):
    """
    LDP-NR (Non-RDF Source).

    The content is a byte stream kept by a storage adapter. The resource is
    described by a companion :class:`~rdfldp.model.ldp_rs.RDFSource` at
    ``<subject URI>/.well-known/desc``, which is created and destroyed
    together with it.

    https://www.w3.org/TR/ldp/#ldpnr
    """
    to_uri = nsc['ldp'].NonRDFSource

    is_non_rdf_source = True

    default_storage_adapter_cls = FileAdapter

    def __init__(self, *args, **kwargs):
        """
        Extends :meth:`Resource.__init__` by setting up the storage adapter
        binding.
        """
        super().__init__(*args, **kwargs)
        self._storage = None
        self._storage_lock = Lock()


    @property
    def storage(self):
        """
        Storage adapter of the binary content.

        If no adapter has been set, one of the class passed on
        instantiation, or of :attr:`default_storage_adapter_cls`, is bound
        on first access.

        :rtype: rdfldp.store.ldp_nr.base_storage_adapter.BaseStorageAdapter
        """
        if self._storage is None:
            self.set_storage(
                    self.storage_adapter_cls or
                    self.default_storage_adapter_cls)

        return self._storage


    def set_storage(self, adapter_cls):
        """
        Bind a storage adapter to the resource.

        An adapter can only be bound once.

        :param type adapter_cls: A
            :class:`~rdfldp.store.ldp_nr.base_storage_adapter.BaseStorageAdapter`
            subclass.

        :rtype: bool
        :return: ``False`` if an adapter was already bound.
        """
        with self._storage_lock:
            if self._storage is not None:
                return False
            self._storage = adapter_cls(self)
            logger.debug('Bound {} to {}'.format(
                adapter_cls.__name__, self.subject_uri))

        return True


    @property
    def content_type(self):
        """
        Media type of the content.

        :rtype: str or None
        """
        mimetype = self.store.value(
                self.subject_uri, nsc['dc'].format, self.meta_uri)

        return str(mimetype) if mimetype is not None else None


    @property
    def description_uri(self):
        """
        URI of the RDF source describing the resource.

        :rtype: rdflib.URIRef
        """
        return uri_join(self.subject_uri, DESC_PATH)


    @property
    def description(self):
        """
        RDF source describing the resource.

        :rtype: rdfldp.model.ldp_rs.RDFSource
        """
        return RDFSource(self.description_uri, self.store)


    def handlers(self):
        handlers = super().handlers()
        handlers.update({
            Verb.PUT: self._put,
            Verb.PATCH: UNSUPPORTED,
        })

        return handlers


    def update_headers(self, headers):
        super().update_headers(headers)
        self._add_links(headers, [
            '<{}>;rel="describedby"'.format(self.description_uri)])
        if self.content_type:
            headers['Content-Type'] = self.content_type

        return headers


    def to_response(self):
        """
        Response body for ``GET`` requests.

        :return: Readable binary stream, which the caller should close. An
            empty list if the resource does not exist or has been destroyed.
        """
        if not self.exists or self.destroyed:
            return []

        return self.storage.io()


    ## LIFECYCLE ##

    def create(self, stream=None, mimetype=None):
        """
        Create the resource and its description.

        The bytes are written before the graph. If any of the following
        steps fails, the stored bytes are deleted along with the rollback of
        the graph changes.

        :param stream: Binary content.
        :param str mimetype: Content media type. Defaults to
            ``application/octet-stream``.
        """
        with self.store.txn_ctx(True):
            if self.exists:
                raise Conflict(uri=self.subject_uri)
            super().create(stream, mimetype)
            self._set_content_type(mimetype or DEFAULT_MIMETYPE)
            desc = self.description
            desc.create()
            self.store.add((
                self.subject_uri, nsc['iana'].describedBy,
                desc.subject_uri), self.meta_uri)

        return self


    def update(self, stream=None, mimetype=None):
        """
        Replace the content.

        :param str mimetype: New content media type. If omitted, the current
            one is kept.
        """
        with self.store.txn_ctx(True):
            super().update(stream, mimetype)
            if mimetype:
                self._set_content_type(mimetype)

        return self


    def destroy(self):
        """
        Destroy the resource, its description and its stored bytes.

        An adapter that deletes nothing (e.g. a retention-locked backend)
        does not cause an error.
        """
        with self.store.txn_ctx(True):
            super().destroy()
            desc = self.description
            if desc.exists and not desc.destroyed:
                desc.destroy()
            if not self.storage.delete():
                logger.info('No stored content deleted for {}'.format(
                    self.subject_uri))

        return self


    ## PROTECTED METHODS ##

    def _write_content(self, stream, mimetype):
        data = read_stream(stream)
        if self.exists:
            with self.storage.io() as fh:
                prev_data = fh.read()
            self.store.on_rollback(
                    lambda: self.storage.io(writer=lambda fh: fh.write(
                        prev_data)))
        else:
            self.store.on_rollback(self.storage.delete)

        logger.debug('Writing {} bytes for {}'.format(
            len(data), self.subject_uri))
        self.storage.io(writer=lambda fh: fh.write(data))


    def _set_content_type(self, mimetype):
        self.store.remove(
                (self.subject_uri, nsc['dc'].format, None), self.meta_uri)
        self.store.add(
                (self.subject_uri, nsc['dc'].format, Literal(mimetype)),
                self.meta_uri)


    def _content_digest(self):
        with self.storage.io() as fh:
            return sha1(fh.read()).hexdigest()
