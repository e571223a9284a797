import logging

from hashlib import sha1

import arrow

from rdflib import Literal, URIRef
from rdflib.namespace import RDF, XSD
from werkzeug.http import http_date

from rdfldp.dictionaries.namespaces import ns_collection as nsc
from rdfldp.dispatcher import UNSUPPORTED, Verb, allowed_methods, dispatch
from rdfldp.exceptions import Conflict, Gone, NotFound, PreconditionFailed
from rdfldp.globals import META_GR_SUFFIX
from rdfldp.util import toolbox


logger = logging.getLogger(__name__)


def read_stream(stream):
    '''
    Read a request body.

    :param stream: File-like object, bytes, string or ``None``.

    :rtype: bytes
    '''
    if stream is None:
        return b''
    if isinstance(stream, str):
        return stream.encode('utf-8')
    if isinstance(stream, (bytes, bytearray)):
        return bytes(stream)
    data = stream.read()

    return data.encode('utf-8') if isinstance(data, str) else data



class Resource:
    """
    LDPR (LDP Resource).

    This class and related subclasses contain the implementation pieces of
    the `LDP Resource <https://www.w3.org/TR/ldp/#ldpr-resource>`__
    specifications, according to their `inheritance graph
    <https://www.w3.org/TR/ldp/#fig-ldpc-types>`__.

    A resource is identified by its subject URI and persisted in a
    :class:`~rdfldp.store.ldp_rs.graph_store.GraphStore` passed on
    instantiation. The instance itself holds no state beyond these two: all
    the lifecycle state is read from the store, so any number of instances
    can be created for the same URI.

    A resource is in exactly one of three states:

    - nonexistent: never created. Only :meth:`create` is legal.
    - existing: created and not destroyed. :meth:`update` and
      :meth:`destroy` are legal.
    - destroyed: the resource is still addressable, and its type and
      metadata are retained, but it can no longer be modified or
      re-created.

    Subclasses customize the lifecycle by implementing
    :meth:`_write_content`, and declare the HTTP verbs they respond to in
    :meth:`handlers`.
    """

    to_uri = nsc['ldp'].Resource
    """Interaction model of the resource type."""

    is_container = False
    is_rdf_source = False
    is_non_rdf_source = False

    def __init__(self, subject_uri, store, storage_adapter_cls=None):
        """
        Instantiate an in-memory LDP resource.

        :param subject_uri: URI of the resource.
        :type subject_uri: rdflib.URIRef or str
        :param rdfldp.store.ldp_rs.graph_store.GraphStore store: Graph store
            holding the resource.
        :param storage_adapter_cls: Storage adapter class for the binary
            content of this resource if it is a LDP-NR, or of LDP-NRs
            created in it if it is a container.
        """
        self._subject_uri = URIRef(subject_uri)
        self.store = store
        self.storage_adapter_cls = storage_adapter_cls


    def __repr__(self):
        return '<{}: {}>'.format(self.__class__.__name__, self.subject_uri)


    @property
    def subject_uri(self):
        """
        Resource URI.

        :rtype: rdflib.URIRef
        """
        return self._subject_uri


    @property
    def meta_uri(self):
        """
        Name of the metadata graph.

        :rtype: rdflib.URIRef
        """
        return URIRef(self.subject_uri + META_GR_SUFFIX)


    @property
    def graph(self):
        """
        Copy of the resource content graph.

        :rtype: rdflib.Graph
        """
        return self.store.get_graph(self.subject_uri)


    @property
    def metagraph(self):
        """
        Copy of the server-managed metadata graph.

        This graph holds the interaction model, modification timestamp,
        digest and, for containers, the containment triples. It is never
        written from client data.

        :rtype: rdflib.Graph
        """
        return self.store.get_graph(self.meta_uri)


    @property
    def exists(self):
        """
        Whether the resource has been created.

        This remains ``True`` after the resource is destroyed.

        :rtype: bool
        """
        return self.store.contains(
                (self.subject_uri, RDF.type, None), self.meta_uri)


    @property
    def destroyed(self):
        """
        Whether the resource has been destroyed.

        :rtype: bool
        """
        return self.store.contains(
                (self.subject_uri, nsc['prov'].invalidatedAtTime, None),
                self.meta_uri)


    @property
    def interaction_model(self):
        """
        Stored interaction model, or ``None`` if the resource does not exist.

        :rtype: rdflib.URIRef
        """
        return self.store.value(self.subject_uri, RDF.type, self.meta_uri)


    @property
    def last_modified(self):
        """
        Last modification time.

        :rtype: arrow.Arrow or None
        """
        ts = self.store.value(
                self.subject_uri, nsc['dcterms'].modified, self.meta_uri)

        return arrow.get(str(ts)) if ts is not None else None


    @property
    def digest(self):
        """
        Stored content digest, without the ``urn:sha1:`` prefix.

        :rtype: str or None
        """
        cksum = self.store.value(
                self.subject_uri, nsc['premis'].hasMessageDigest,
                self.meta_uri)
        if cksum is None:
            return None

        return str(cksum).replace('urn:sha1:', '')


    @property
    def etag(self):
        """
        Weak entity tag derived from the content digest.

        :rtype: str or None
        """
        cksum = self.digest

        return 'W/"{}"'.format(cksum) if cksum is not None else None


    def match(self, if_match):
        """
        Evaluate an ``If-Match`` header against the current entity tag.

        :param str if_match: A list of entity tags or ``*``.

        :rtype: bool
        """
        return toolbox.etag_match(if_match, self.digest)


    @classmethod
    def link_types(cls):
        """
        Interaction models of the resource type, most specific first.

        :rtype: list(rdflib.URIRef)
        """
        types = []
        for kls in cls.__mro__:
            uri = kls.__dict__.get('to_uri')
            if uri is not None and uri not in types:
                types.append(uri)

        return types


    def containers(self):
        """
        Live containers holding this resource.

        :rtype: list(rdfldp.model.ldpc.Container)
        """
        from rdfldp.model.ldp_factory import LdpFactory

        cont_pattern = (None, nsc['ldp'].contains, self.subject_uri)
        containers = []
        for ctx in self.store.contexts(cont_pattern):
            if not str(ctx).endswith(META_GR_SUFFIX):
                continue
            for cont_uri, _, _ in self.store.triples(cont_pattern, ctx):
                try:
                    cont = LdpFactory.from_stored(
                            cont_uri, self.store,
                            storage_adapter_cls=self.storage_adapter_cls)
                except NotFound:
                    continue
                if cont.is_container and not cont.destroyed:
                    containers.append(cont)

        return containers


    def to_response(self):
        """
        Response body for ``GET`` requests.
        """
        return self.graph


    ## LIFECYCLE ##

    def create(self, stream=None, mimetype=None):
        """
        Create the resource.

        The content is written by the type-specific :meth:`_write_content`,
        then the interaction model, modification time and digest are
        recorded. All this happens in a single write transaction.

        :param stream: Request body.
        :param str mimetype: Media type of the request body.

        :rtype: Resource
        :raise rdfldp.exceptions.Conflict: if the resource exists or has been
            destroyed.
        """
        with self.store.txn_ctx(True):
            if self.exists:
                raise Conflict(uri=self.subject_uri)

            logger.info('Creating resource {} as {}'.format(
                    self.subject_uri, self.to_uri))
            self._write_content(stream, mimetype)
            self.store.add(
                    (self.subject_uri, RDF.type, self.to_uri), self.meta_uri)
            self._touch()

        return self


    def update(self, stream=None, mimetype=None):
        """
        Replace the resource content.

        The subject URI and the interaction model never change.

        :rtype: Resource
        :raise rdfldp.exceptions.NotFound: if the resource does not exist.
        :raise rdfldp.exceptions.Gone: if the resource has been destroyed.
        """
        with self.store.txn_ctx(True):
            self._check_live()
            logger.info('Updating resource {}'.format(self.subject_uri))
            self._write_content(stream, mimetype)
            self._touch()

        return self


    def destroy(self):
        """
        Destroy the resource.

        The resource is removed from all the containers holding it and its
        content is cleared. The metadata graph records the time of the
        deletion.

        :rtype: Resource
        :raise rdfldp.exceptions.NotFound: if the resource does not exist or
            has already been destroyed.
        """
        with self.store.txn_ctx(True):
            if not self.exists or self.destroyed:
                raise NotFound(uri=self.subject_uri)

            logger.info('Destroying resource {}'.format(self.subject_uri))
            for cont in self.containers():
                cont.remove(self)
            self.store.remove((None, None, None), self.subject_uri)
            self.store.add((
                self.subject_uri, nsc['prov'].invalidatedAtTime,
                self._timestamp()), self.meta_uri)

        return self


    ## REQUEST HANDLING ##

    def request(self, method, status=200, headers=None, environ=None):
        """
        Handle a HTTP-shaped request.

        :param str method: HTTP method.
        :param int status: Base status code.
        :param dict headers: Base response headers.
        :param dict environ: WSGI-style request environment.

        :rtype: tuple
        :return: Status code, headers and body.

        :see_also: :func:`rdfldp.dispatcher.dispatch`
        """
        return dispatch(self, method, status, headers, environ)


    def handlers(self):
        """
        Request handlers by HTTP verb.

        Subclasses extend this mapping, and may set an entry to
        :data:`~rdfldp.dispatcher.UNSUPPORTED` to withdraw a verb.

        :rtype: dict
        """
        return {
            Verb.GET: self._get,
            Verb.HEAD: self._head,
            Verb.OPTIONS: self._options,
            Verb.PUT: UNSUPPORTED,
            Verb.POST: UNSUPPORTED,
            Verb.PATCH: UNSUPPORTED,
            Verb.DELETE: self._delete,
        }


    def allowed_methods(self):
        """
        Verbs handled by the resource.

        :rtype: set(rdfldp.dispatcher.Verb)
        """
        return allowed_methods(self)


    def update_headers(self, headers):
        """
        Add the resource headers to a response header dict.

        :param dict headers: Headers to update in place.

        :rtype: dict
        :return: The updated headers.
        """
        self._add_links(headers, [
            '<{}>;rel="type"'.format(uri) for uri in self.link_types()])
        allowed = self.allowed_methods()
        headers['Allow'] = ', '.join(
                verb.value for verb in Verb if verb in allowed)
        if self.etag:
            headers['ETag'] = self.etag
        last_modified = self.last_modified
        if last_modified is not None:
            headers['Last-Modified'] = http_date(last_modified.datetime)
        headers['Vary'] = 'Accept'

        return headers


    def _get(self, status, headers, environ):
        return status, self.update_headers(headers), self.to_response()


    def _head(self, status, headers, environ):
        return status, self.update_headers(headers), []


    def _options(self, status, headers, environ):
        return status, self.update_headers(headers), []


    def _put(self, status, headers, environ):
        """
        Create or replace the resource.

        ``If-Match`` is evaluated before anything is changed.
        """
        from rdfldp.model.ldp_factory import LdpFactory

        stream = environ.get('wsgi.input')
        mimetype = toolbox.parse_mimetype(environ.get('CONTENT_TYPE'))
        with self.store.txn_ctx(True):
            self._check_if_match(environ)
            if self.exists:
                if environ.get('HTTP_LINK'):
                    model = LdpFactory.interaction_model(environ['HTTP_LINK'])
                    if not isinstance(self, model):
                        raise Conflict(
                            'Cannot change the interaction model of {} to '
                            '{}.'.format(self.subject_uri, model.to_uri),
                            self.subject_uri)
                self.update(stream, mimetype)
            else:
                self.create(stream, mimetype)
                status = 201

        return status, self.update_headers(headers), self.to_response()


    def _delete(self, status, headers, environ):
        with self.store.txn_ctx(True):
            self._check_if_match(environ)
            self.destroy()

        return 204, headers, []


    ## PROTECTED METHODS ##

    def _write_content(self, stream, mimetype):
        """
        Write the resource content.

        Called within the write transaction of :meth:`create` and
        :meth:`update`.
        """
        raise NotImplementedError()


    def _content_digest(self):
        """
        SHA1 digest of the resource content.

        :rtype: str
        """
        return sha1(b'').hexdigest()


    def _touch(self):
        """
        Refresh the modification time and digest.
        """
        self.store.remove(
                (self.subject_uri, nsc['dcterms'].modified, None),
                self.meta_uri)
        self.store.add((
            self.subject_uri, nsc['dcterms'].modified, self._timestamp()),
            self.meta_uri)
        self.store.remove(
                (self.subject_uri, nsc['premis'].hasMessageDigest, None),
                self.meta_uri)
        self.store.add((
            self.subject_uri, nsc['premis'].hasMessageDigest,
            URIRef('urn:sha1:{}'.format(self._content_digest()))),
            self.meta_uri)


    def _check_live(self):
        if self.destroyed:
            raise Gone(uri=self.subject_uri)
        if not self.exists:
            raise NotFound(uri=self.subject_uri)


    def _check_if_match(self, environ):
        if_match = environ.get('HTTP_IF_MATCH')
        if if_match is not None and not self.match(if_match):
            raise PreconditionFailed(
                'Entity tag {} does not match {}.'.format(
                    self.etag, if_match), self.subject_uri)


    @staticmethod
    def _add_links(headers, links):
        if not links:
            return
        if headers.get('Link'):
            links = [headers['Link']] + list(links)
        headers['Link'] = ', '.join(links)


    @staticmethod
    def _timestamp():
        return Literal(arrow.utcnow().isoformat(), datatype=XSD.dateTime)
