import pytest

from hashlib import sha1
from io import BytesIO

from rdflib import Literal, URIRef

from rdfldp.dictionaries.namespaces import ns_collection as nsc
from rdfldp.exceptions import BadRequest, Conflict, NotAcceptable, NotFound
from rdfldp.globals import LDP_MEMBER
from rdfldp.model.ldp_nr import NonRDFSource
from rdfldp.model.ldp_rs import RDFSource
from rdfldp.model.ldpc import Container, DirectContainer
from rdfldp.model.membership import MembershipRelation


cont_uri = URIRef('http://ex.org/ldp/c')
member_uri = URIRef('http://ex.org/ldp/c/m1')
mbr_rsrc_uri = URIRef('http://ex.org/ldp/target')

contains = nsc['ldp'].contains


@pytest.fixture
def cont(store):
    return Container(cont_uri, store).create()


@pytest.fixture
def member(store):
    return RDFSource(member_uri, store).create(
            b'<> <http://purl.org/dc/terms/title> "Member" .', 'text/turtle')


def _member_triples(store, ctx):
    return set(store.triples((None, LDP_MEMBER, None), ctx))


class TestBasicContainer:
    '''
    Containment and membership of basic containers.
    '''
    def test_types(self, cont):
        assert cont.is_container
        assert Container.container_class() == nsc['ldp'].BasicContainer
        assert Container.link_types() == [
            nsc['ldp'].BasicContainer,
            nsc['ldp'].Container,
            nsc['ldp'].RDFSource,
            nsc['ldp'].Resource,
        ]
        assert cont.interaction_model == nsc['ldp'].Container


    def test_membership_defaults(self, cont):
        assert cont.membership_resource() == cont_uri
        assert cont.membership_relation() == \
                MembershipRelation.has_member(LDP_MEMBER)


    def test_add(self, cont, member, store):
        cont.add(member)

        assert (cont_uri, contains, member_uri) in cont.metagraph
        assert cont.members() == {member_uri}
        assert _member_triples(store, cont_uri) == {
            (cont_uri, LDP_MEMBER, member_uri)}
        assert [c.subject_uri for c in member.containers()] == [cont_uri]


    def test_add_twice(self, cont, member):
        cont.add(member)
        with pytest.raises(Conflict):
            cont.add(member)


    def test_add_to_nonexistent(self, store, member):
        with pytest.raises(NotFound):
            Container(cont_uri, store).add(member)


    def test_add_changes_etag(self, cont, member):
        etag = cont.etag
        cont.add(member)

        assert cont.etag != etag


    def test_response_has_containment(self, cont, member):
        cont.add(member)
        gr = cont.to_response()

        assert (cont_uri, contains, member_uri) in gr
        assert (cont_uri, LDP_MEMBER, member_uri) in gr


    def test_remove(self, cont, member, store):
        cont.add(member)
        cont.remove(member)

        assert cont.members() == set()
        assert _member_triples(store, cont_uri) == set()
        assert member.containers() == []
        assert member.exists


    def test_remove_not_contained(self, cont, member):
        assert cont.remove(member) is cont


    def test_destroy_member(self, cont, member, store):
        cont.add(member)
        member.destroy()

        assert cont.members() == set()
        assert _member_triples(store, cont_uri) == set()


    def test_destroy_container(self, cont, member):
        cont.add(member)
        cont.destroy()

        assert cont.destroyed
        assert member.exists
        assert not member.destroyed
        assert member.containers() == []


    def test_update_keeps_membership(self, cont, member, store):
        cont.add(member)
        cont.update(
                b'<> <http://purl.org/dc/terms/title> "C" .', 'text/turtle')

        assert (cont_uri, nsc['dcterms'].title, Literal('C')) in cont.graph
        assert _member_triples(store, cont_uri) == {
            (cont_uri, LDP_MEMBER, member_uri)}
        assert cont.members() == {member_uri}



class TestPost:
    '''
    Creation of resources in a container through ``POST``.
    '''
    def test_post_slug(self, cont):
        status, headers, body = cont.request('POST', environ={
            'wsgi.input': BytesIO(
                b'<> <http://purl.org/dc/terms/title> "New" .'),
            'CONTENT_TYPE': 'text/turtle',
            'HTTP_SLUG': 'new',
        })
        new_uri = URIRef(cont_uri + '/new')

        assert status == 201
        assert headers['Location'] == str(new_uri)
        assert (new_uri, nsc['dcterms'].title, Literal('New')) in body
        assert cont.members() == {new_uri}
        assert RDFSource(new_uri, cont.store).exists


    def test_post_minted(self, cont):
        status, headers, _ = cont.request('POST')

        assert status == 201
        assert headers['Location'].startswith(str(cont_uri) + '/')
        assert len(cont.members()) == 1


    def test_post_container(self, cont):
        cont.request('POST', environ={
            'HTTP_SLUG': 'sub',
            'HTTP_LINK':
                '<http://www.w3.org/ns/ldp#BasicContainer>;rel="type"',
        })
        sub = Container(URIRef(cont_uri + '/sub'), cont.store)

        assert sub.exists
        assert sub.interaction_model == nsc['ldp'].Container


    def test_post_hash_slug(self, cont):
        with pytest.raises(NotAcceptable):
            cont.request('POST', environ={'HTTP_SLUG': 'a#b'})
        assert cont.members() == set()


    @pytest.mark.parametrize('slug', ('../../../../escaped.txt', '..'))
    def test_post_slug_outside_container(self, store, storage, slug):
        cont = Container(
                cont_uri, store, storage_adapter_cls=storage).create()
        with pytest.raises(BadRequest):
            cont.request('POST', environ={
                'wsgi.input': BytesIO(b'data'),
                'CONTENT_TYPE': 'text/plain',
                'HTTP_LINK':
                    '<http://www.w3.org/ns/ldp#NonRDFSource>;rel="type"',
                'HTTP_SLUG': slug,
            })

        assert cont.members() == set()
        assert storage._contents == {}


    def test_post_existing(self, cont, store):
        RDFSource(URIRef(cont_uri + '/dup'), store).create()
        with pytest.raises(Conflict):
            cont.request('POST', environ={'HTTP_SLUG': 'dup'})
        assert cont.members() == set()


    def test_post_failure_rolls_back(self, cont):
        with pytest.raises(BadRequest):
            cont.request('POST', environ={
                'wsgi.input': BytesIO(b'<> <http://ex.org/p> "broken'),
                'CONTENT_TYPE': 'text/turtle',
                'HTTP_SLUG': 'broken',
            })

        assert not RDFSource(URIRef(cont_uri + '/broken'), cont.store).exists
        assert cont.members() == set()



class TestDirectContainer:
    '''
    Membership of direct containers.
    '''
    def test_defaults(self, store):
        dc = DirectContainer(cont_uri, store).create()
        m = RDFSource(URIRef('http://ex/m'), store)
        dc.add(m)

        assert _member_triples(store, cont_uri) == {
            (cont_uri, LDP_MEMBER, URIRef('http://ex/m'))}
        assert (
            cont_uri, nsc['ldp'].membershipResource, cont_uri) in dc.graph
        assert (
            cont_uri, nsc['ldp'].hasMemberRelation, LDP_MEMBER) in dc.graph

        dc.remove(m)
        assert _member_triples(store, cont_uri) == set()


    def test_link_types(self):
        assert DirectContainer.link_types()[:2] == [
            nsc['ldp'].DirectContainer, nsc['ldp'].Container]


    def test_membership_resource(self, store, member):
        target = RDFSource(mbr_rsrc_uri, store).create()
        target_etag = target.etag
        dc = DirectContainer(cont_uri, store).create(
            '''
            <> <http://www.w3.org/ns/ldp#membershipResource> <{}> ;
                <http://www.w3.org/ns/ldp#hasMemberRelation>
                    <http://purl.org/dc/terms/hasPart> .
            '''.format(mbr_rsrc_uri), 'text/turtle')
        dc.add(member)

        assert (mbr_rsrc_uri, nsc['dcterms'].hasPart, member_uri) in \
                target.graph
        assert target.etag != target_etag

        dc.remove(member)
        assert (mbr_rsrc_uri, nsc['dcterms'].hasPart, member_uri) not in \
                target.graph


    def test_non_rdf_membership_resource(self, store, storage, member):
        '''
        Adding a member refreshes a binary membership resource without
        altering its content digest.
        '''
        target = NonRDFSource(
                mbr_rsrc_uri, store, storage_adapter_cls=storage).create(
                        b'hello', 'text/plain')
        target_etag = target.etag
        dc = DirectContainer(
                cont_uri, store, storage_adapter_cls=storage).create(
            '<> <http://www.w3.org/ns/ldp#membershipResource> <{}> .'
            .format(mbr_rsrc_uri), 'text/turtle')
        dc.add(member)

        stored = NonRDFSource(
                mbr_rsrc_uri, store, storage_adapter_cls=storage)
        assert (mbr_rsrc_uri, LDP_MEMBER, member_uri) in stored.graph
        assert stored.digest == sha1(b'hello').hexdigest()
        assert stored.etag == target_etag
        with stored.storage.io() as fh:
            assert fh.read() == b'hello'


    def test_is_member_of(self, store, member):
        dc = DirectContainer(cont_uri, store).create(
            b'''
            <> <http://www.w3.org/ns/ldp#isMemberOfRelation>
                <http://purl.org/dc/terms/isPartOf> .
            ''', 'text/turtle')
        dc.add(member)

        assert (member_uri, nsc['dcterms'].isPartOf, cont_uri) in dc.graph

        dc.remove(member)
        assert (member_uri, nsc['dcterms'].isPartOf, cont_uri) not in \
                dc.graph


    def test_both_relations(self, store, member):
        dc = DirectContainer(cont_uri, store).create(
            b'''
            <> <http://www.w3.org/ns/ldp#isMemberOfRelation>
                <http://purl.org/dc/terms/isPartOf> ;
            <http://www.w3.org/ns/ldp#hasMemberRelation>
                <http://purl.org/dc/terms/hasPart> .
            ''', 'text/turtle')

        with pytest.raises(NotAcceptable):
            dc.add(member)
        assert dc.members() == set()


    def test_two_membership_resources(self, store, member):
        dc = DirectContainer(cont_uri, store).create(
            b'''
            <> <http://www.w3.org/ns/ldp#membershipResource>
                <http://ex.org/a>, <http://ex.org/b> .
            ''', 'text/turtle')

        with pytest.raises(NotAcceptable):
            dc.add(member)


    def test_destroy_removes_foreign_membership(self, store, member):
        target = RDFSource(mbr_rsrc_uri, store).create()
        dc = DirectContainer(cont_uri, store).create(
            '''
            <> <http://www.w3.org/ns/ldp#membershipResource> <{}> .
            '''.format(mbr_rsrc_uri), 'text/turtle')
        dc.add(member)
        dc.destroy()

        assert (mbr_rsrc_uri, LDP_MEMBER, member_uri) not in target.graph
        assert member.exists and not member.destroyed
