import logging

from uuid import uuid4

from rdflib import URIRef
from rdflib.namespace import RDF

from rdfldp.dictionaries.namespaces import ns_collection as nsc
from rdfldp.exceptions import BadRequest, NotAcceptable, NotFound
from rdfldp.globals import META_GR_SUFFIX
from rdfldp.model.ldp_nr import NonRDFSource
from rdfldp.model.ldp_rs import RDFSource
from rdfldp.model.ldpc import Container, DirectContainer, IndirectContainer
from rdfldp.util import toolbox


logger = logging.getLogger(__name__)

INTERACTION_MODELS = (
    (nsc['ldp'].Resource, RDFSource),
    (nsc['ldp'].RDFSource, RDFSource),
    (nsc['ldp'].Container, Container),
    (nsc['ldp'].BasicContainer, Container),
    (nsc['ldp'].DirectContainer, DirectContainer),
    (nsc['ldp'].IndirectContainer, IndirectContainer),
    (nsc['ldp'].NonRDFSource, NonRDFSource),
)
"""
Interaction models and the classes implementing them, from the least to the
most specific.
"""


class LdpFactory:
    """
    Generate LDP instances.

    The instance classes are based on client-provided interaction models or
    on stored data.
    """
    @staticmethod
    def interaction_model(link_header=None):
        """
        Resolve the interaction model requested in a ``Link`` header.

        Of all the ``rel="type"`` links, the one naming the most specific
        model wins. Types that are not interaction models are ignored.

        >>> LdpFactory.interaction_model(
        ...     '<http://www.w3.org/ns/ldp#BasicContainer>;rel="type", '
        ...     '<http://www.w3.org/ns/ldp#Resource>;rel="type"')
        <class 'rdfldp.model.ldpc.Container'>

        :param str link_header: ``Link`` header value.

        :rtype: type
        :return: A :class:`~rdfldp.model.ldpr.Resource` subclass.
            :class:`~rdfldp.model.ldp_rs.RDFSource` if no model is requested.
        """
        types = set(toolbox.link_types(link_header))
        cls = RDFSource
        for uri, model_cls in INTERACTION_MODELS:
            if uri in types:
                cls = model_cls

        return cls


    @staticmethod
    def model_for_type(rdf_type):
        """
        Class implementing a stored interaction model.

        :param rdflib.URIRef rdf_type: The interaction model URI.

        :rtype: type or None
        """
        for uri, model_cls in INTERACTION_MODELS:
            if uri == rdf_type:
                return model_cls

        return None


    @staticmethod
    def from_stored(uri, store, **kwargs):
        r"""
        Create an instance of a stored resource.

        This creates and returns an instance of the
        :class:`~rdfldp.model.ldpr.Resource` subclass matching the
        interaction model found in the store. The resource may be destroyed.

        :param uri: Resource URI.
        :param rdfldp.store.ldp_rs.graph_store.GraphStore store: The graph
            store.
        :param \*\*kwargs: Arguments passed to the class constructor.

        :raise rdfldp.exceptions.NotFound: if the resource was never
            created.
        """
        uri = URIRef(uri)
        rdf_type = store.value(uri, RDF.type, URIRef(uri + META_GR_SUFFIX))
        cls = LdpFactory.model_for_type(rdf_type)
        if cls is None:
            raise NotFound(uri=uri)
        logger.debug('Resource {} is a {}.'.format(uri, cls.__name__))

        return cls(uri, store, **kwargs)


    @staticmethod
    def from_provided(uri, store, link_header=None, **kwargs):
        """
        Create an instance for a request.

        A stored resource is loaded with its stored interaction model;
        otherwise, the model is resolved from the ``Link`` header.

        :rtype: rdfldp.model.ldpr.Resource
        """
        try:
            return LdpFactory.from_stored(uri, store, **kwargs)
        except NotFound:
            cls = LdpFactory.interaction_model(link_header)
            return cls(uri, store, **kwargs)


    @staticmethod
    def mint_uri(parent_uri, slug=None):
        """
        Mint a new resource URI in a container.

        The new URI is always a direct child of the container.

        :param str parent_uri: Container URI.
        :param str slug: Path segment suggested by the client. A UUID is
            used if this is empty.

        :rtype: rdflib.URIRef
        :raise rdfldp.exceptions.NotAcceptable: if the slug contains a hash
            sign.
        :raise rdfldp.exceptions.BadRequest: if the slug is not a single
            path segment, or is a relative path segment (``.`` or ``..``).
        """
        if slug and '#' in slug:
            raise NotAcceptable(
                'Slug {} cannot contain a hash fragment.'.format(slug),
                parent_uri)
        slug = (slug or '').strip('/')
        if not slug:
            slug = str(uuid4())
        elif '/' in slug or slug in ('.', '..'):
            raise BadRequest(
                'Slug {} is not a valid path segment.'.format(slug),
                parent_uri)

        return toolbox.uri_join(parent_uri, slug)
