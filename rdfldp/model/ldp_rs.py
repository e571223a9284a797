import logging

from rdflib import Graph, plugin
from rdflib.parser import Parser

from rdfldp.dictionaries.namespaces import ns_collection as nsc
from rdfldp.dictionaries.srv_mgd_terms import srv_mgd_predicates
from rdfldp.dispatcher import Verb
from rdfldp.exceptions import (
        BadRequest, Conflict, UnsupportedMediaType)
from rdfldp.globals import DEFAULT_RDF_MIMETYPE
from rdfldp.model.ldpr import Resource, read_stream
from rdfldp.util import toolbox


logger = logging.getLogger(__name__)

SPARQL_UPDATE_MIMETYPE = 'application/sparql-update'

_graph_mimetypes = (
    'text/turtle',
    'application/rdf+xml',
    'application/n-triples',
    'text/n3',
    'application/ld+json',
)

rdf_parsable_mimetypes = tuple(
    mt for mt in _graph_mimetypes
    if mt in {p.name for p in plugin.plugins(kind=Parser)})
"""
Media types of the RDF serializations accepted in request bodies.

These are the graph serializations for which a RDFLib parser plugin is
registered.
"""


class RDFSource(Resource):
    """
    LDP-RS (LDP RDF source).

    The content of the resource is a RDF graph, parsed from the request body
    with RDFLib. Relative IRIs in the body are resolved against the resource
    URI.

    https://www.w3.org/TR/ldp/#ldprs
    """
    to_uri = nsc['ldp'].RDFSource

    is_rdf_source = True

    def handlers(self):
        handlers = super().handlers()
        handlers.update({
            Verb.PUT: self._put,
            Verb.PATCH: self._patch,
        })

        return handlers


    def update_headers(self, headers):
        super().update_headers(headers)
        if Verb.PATCH in self.allowed_methods():
            headers['Accept-Patch'] = SPARQL_UPDATE_MIMETYPE

        return headers


    def to_response(self):
        """
        Response body for ``GET`` requests.

        :rtype: rdflib.Graph
        """
        gr = self.graph
        for trp in self._extra_response_triples():
            gr.add(trp)

        return gr


    def parse_graph(self, stream, mimetype=None):
        """
        Parse a request body into a graph.

        :param stream: Request body.
        :param str mimetype: Media type of the body. Parameters such as
            ``charset`` are ignored.

        :rtype: rdflib.Graph
        :raise rdfldp.exceptions.UnsupportedMediaType: if no RDF parser is
            available for the media type.
        :raise rdfldp.exceptions.BadRequest: if the body cannot be parsed.
        """
        mimetype = toolbox.parse_mimetype(mimetype) or DEFAULT_RDF_MIMETYPE
        if mimetype not in rdf_parsable_mimetypes:
            raise UnsupportedMediaType(mimetype, self.subject_uri)

        gr = Graph(identifier=self.subject_uri)
        data = read_stream(stream)
        if not data.strip():
            return gr

        try:
            gr.parse(
                    data=data.decode('utf-8'), format=mimetype,
                    publicID=self.subject_uri)
        except Exception as e:
            # Each RDFLib parser raises its own exception types.
            raise BadRequest(
                'Could not parse {} body for {}: {}'.format(
                    mimetype, self.subject_uri, e),
                self.subject_uri) from e

        return gr


    def check_mgd_terms(self, gr):
        """
        Reject a client graph containing server-managed predicates.

        :param rdflib.Graph gr: The graph to check.

        :raise rdfldp.exceptions.Conflict: if any offending triple is found.
        """
        offending = {p for p in gr.predicates() if p in srv_mgd_predicates}
        if offending:
            raise Conflict(
                'Server-managed predicates cannot be set by the client: '
                '{}'.format(', '.join(sorted(str(p) for p in offending))),
                self.subject_uri)


    ## PROTECTED METHODS ##

    def _write_content(self, stream, mimetype):
        gr = self.parse_graph(stream, mimetype)
        self.check_mgd_terms(gr)
        self._replace_graph(gr)


    def _replace_graph(self, gr):
        logger.debug('Replacing graph of {} with {} triples.'.format(
            self.subject_uri, len(gr)))
        self.store.replace_graph(self.subject_uri, gr)


    def _extra_response_triples(self):
        """
        Triples added to the content graph in a response.
        """
        return []


    def _content_digest(self):
        triples = self.store.triples((None, None, None), self.subject_uri)

        return toolbox.rdf_cksum(triples + list(
            self._extra_response_triples()))


    def _patch(self, status, headers, environ):
        """
        Apply a SPARQL Update to the resource graph.

        The update runs on a copy of the graph, which replaces the stored
        graph only if the update succeeds and the result is valid.
        """
        mimetype = toolbox.parse_mimetype(environ.get('CONTENT_TYPE'))
        if mimetype != SPARQL_UPDATE_MIMETYPE:
            raise UnsupportedMediaType(mimetype, self.subject_uri)

        with self.store.txn_ctx(True):
            self._check_if_match(environ)
            self._check_live()
            qry = read_stream(environ.get('wsgi.input')).decode('utf-8')
            gr = self.graph
            try:
                gr.update(qry, initNs=nsc)
            except Exception as e:
                raise BadRequest(
                    'Invalid SPARQL update for {}: {}'.format(
                        self.subject_uri, e), self.subject_uri) from e
            self.check_mgd_terms(gr)
            logger.info('Patching resource {}'.format(self.subject_uri))
            self._replace_graph(gr)
            self._touch()

        return status, self.update_headers(headers), self.to_response()
