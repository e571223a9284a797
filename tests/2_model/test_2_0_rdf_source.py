import pytest

from threading import Barrier, Thread

import arrow

from rdflib import Literal, URIRef
from rdflib.namespace import RDF

from rdfldp.dictionaries.namespaces import ns_collection as nsc
from rdfldp.exceptions import (
        BadRequest, Conflict, Gone, NotFound, UnsupportedMediaType)
from rdfldp.model.ldp_rs import RDFSource


uri = URIRef('http://ex.org/ldp/r1')

title_rdf = b'<> <http://purl.org/dc/terms/title> "Title A" .'


@pytest.fixture
def rsrc(store):
    return RDFSource(uri, store)


class TestLifecycle:
    '''
    Create, update and destroy a RDF source.
    '''
    def test_new(self, rsrc):
        assert not rsrc.exists
        assert not rsrc.destroyed
        assert rsrc.etag is None
        assert rsrc.last_modified is None
        assert len(rsrc.graph) == 0


    def test_create(self, rsrc):
        assert rsrc.create(title_rdf, 'text/turtle') is rsrc

        assert rsrc.exists
        assert not rsrc.destroyed
        assert rsrc.interaction_model == nsc['ldp'].RDFSource
        assert (uri, nsc['dcterms'].title, Literal('Title A')) in rsrc.graph
        assert (uri, RDF.type, nsc['ldp'].RDFSource) in rsrc.metagraph
        assert isinstance(rsrc.last_modified, arrow.Arrow)
        assert rsrc.etag.startswith('W/"')


    def test_state_is_shared(self, rsrc, store):
        rsrc.create(title_rdf, 'text/turtle')

        assert RDFSource(uri, store).exists


    def test_create_twice(self, rsrc):
        rsrc.create()
        with pytest.raises(Conflict):
            rsrc.create()


    def test_update_before_create(self, rsrc):
        with pytest.raises(NotFound):
            rsrc.update(title_rdf, 'text/turtle')


    def test_destroy_before_create(self, rsrc):
        with pytest.raises(NotFound):
            rsrc.destroy()


    def test_update(self, rsrc):
        rsrc.create(title_rdf, 'text/turtle')
        etag = rsrc.etag
        rsrc.update(
                b'<> <http://purl.org/dc/terms/title> "Title B" .',
                'text/turtle')

        assert set(rsrc.graph) == {
            (uri, nsc['dcterms'].title, Literal('Title B'))}
        assert rsrc.etag != etag
        assert rsrc.interaction_model == nsc['ldp'].RDFSource


    def test_destroy(self, rsrc):
        rsrc.create(title_rdf, 'text/turtle')
        rsrc.destroy()

        assert rsrc.exists
        assert rsrc.destroyed
        assert len(rsrc.graph) == 0
        assert rsrc.metagraph.value(
                uri, nsc['prov'].invalidatedAtTime) is not None


    def test_after_destroy(self, rsrc):
        rsrc.create()
        rsrc.destroy()

        with pytest.raises(Gone):
            rsrc.update(title_rdf, 'text/turtle')
        with pytest.raises(NotFound):
            rsrc.destroy()
        with pytest.raises(Conflict):
            rsrc.create()


    def test_concurrent_create(self, store):
        '''
        Of several concurrent creates of the same resource, exactly one
        succeeds.
        '''
        n = 8
        barrier = Barrier(n)
        results = []

        def create():
            barrier.wait()
            try:
                RDFSource(uri, store).create(title_rdf, 'text/turtle')
            except Conflict:
                results.append('conflict')
            else:
                results.append('created')

        threads = [Thread(target=create) for _ in range(n)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert results.count('created') == 1
        assert results.count('conflict') == n - 1



class TestContent:
    '''
    Parsing and validation of RDF payloads.
    '''
    def test_empty_body(self, rsrc):
        rsrc.create(b'', 'text/turtle')

        assert rsrc.exists
        assert len(rsrc.graph) == 0


    def test_default_format(self, rsrc):
        rsrc.create(title_rdf)

        assert len(rsrc.graph) == 1


    def test_mimetype_params(self, rsrc):
        rsrc.create(title_rdf, 'text/turtle; charset=utf-8')

        assert len(rsrc.graph) == 1


    def test_ntriples(self, rsrc):
        rsrc.create(
                '<{}> <http://purl.org/dc/terms/title> "N" .\n'.format(uri),
                'application/n-triples')

        assert (uri, nsc['dcterms'].title, Literal('N')) in rsrc.graph


    def test_stream_body(self, rsrc):
        from io import BytesIO
        rsrc.create(BytesIO(title_rdf), 'text/turtle')

        assert len(rsrc.graph) == 1


    def test_unsupported_media_type(self, rsrc):
        with pytest.raises(UnsupportedMediaType):
            rsrc.create(b'\x89PNG', 'image/png')
        assert not rsrc.exists


    def test_bad_syntax(self, rsrc):
        with pytest.raises(BadRequest):
            rsrc.create(b'<> <http://ex.org/p> "unterminated', 'text/turtle')
        assert not rsrc.exists


    def test_server_managed_predicate(self, rsrc):
        with pytest.raises(Conflict):
            rsrc.create(
                    b'<> <http://www.w3.org/ns/ldp#contains> '
                    b'<http://ex.org/other> .', 'text/turtle')
        assert not rsrc.exists


    def test_failed_update_keeps_content(self, rsrc):
        rsrc.create(title_rdf, 'text/turtle')
        etag = rsrc.etag
        with pytest.raises(BadRequest):
            rsrc.update(b'<> <http://ex.org/p> "unterminated', 'text/turtle')

        assert (uri, nsc['dcterms'].title, Literal('Title A')) in rsrc.graph
        assert rsrc.etag == etag


    def test_to_response(self, rsrc):
        rsrc.create(title_rdf, 'text/turtle')
        gr = rsrc.to_response()

        assert set(gr) == set(rsrc.graph)



class TestEtag:
    '''
    Entity tags and ``If-Match`` evaluation.
    '''
    def test_match(self, rsrc):
        rsrc.create(title_rdf, 'text/turtle')

        assert rsrc.match(rsrc.etag)
        assert rsrc.match('"{}"'.format(rsrc.digest))
        assert rsrc.match('*')
        assert rsrc.match('"bogus", {}'.format(rsrc.etag))
        assert not rsrc.match('"bogus"')


    def test_match_nonexistent(self, rsrc):
        assert not rsrc.match('*')
        assert not rsrc.match('"bogus"')


    def test_same_content_same_etag(self, store):
        r1 = RDFSource(uri, store).create(
                '<{}> <http://ex.org/p> "v" .'.format(uri), 'text/turtle')
        etag = r1.etag
        r1.update('<{}> <http://ex.org/p> "v" .'.format(uri), 'text/turtle')

        assert r1.etag == etag
