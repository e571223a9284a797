import pytest

from rdflib import URIRef

from rdfldp.dictionaries.namespaces import ns_collection as nsc
from rdfldp.exceptions import NotAcceptable
from rdfldp.globals import LDP_MEMBER, LDP_MEMBER_SUBJECT
from rdfldp.model.ldp_nr import NonRDFSource
from rdfldp.model.ldp_rs import RDFSource
from rdfldp.model.ldpc import IndirectContainer


cont_uri = URIRef('http://ex.org/ldp/ic')
member_uri = URIRef('http://ex.org/ldp/ic/m1')
part1 = URIRef('http://ex/part1')
part2 = URIRef('http://ex/part2')

has_part_ic_rdf = b'''
<> <http://www.w3.org/ns/ldp#indirectContentRelation>
    <http://purl.org/dc/terms/hasPart> .
'''


@pytest.fixture
def ic(store):
    return IndirectContainer(cont_uri, store).create(
            has_part_ic_rdf, 'text/turtle')


def _member_triples(store):
    return set(store.triples((None, LDP_MEMBER, None), cont_uri))


class TestInsertedContentRelation:
    '''
    Resolution of the inserted content relation.
    '''
    def test_default(self, store):
        ic = IndirectContainer(cont_uri, store).create()

        assert ic.inserted_content_relation() == LDP_MEMBER_SUBJECT

        reread = IndirectContainer(cont_uri, store)
        assert (
            cont_uri, nsc['ldp'].indirectContentRelation,
            LDP_MEMBER_SUBJECT) in reread.graph
        assert (
            cont_uri, nsc['ldp'].insertedContentRelation,
            None) not in reread.graph
        # Persisted, not added again.
        assert reread.inserted_content_relation() == LDP_MEMBER_SUBJECT


    def test_explicit(self, ic):
        assert ic.inserted_content_relation() == nsc['dcterms'].hasPart


    def test_alias(self, store):
        ic = IndirectContainer(cont_uri, store).create(
            b'''
            <> <http://www.w3.org/ns/ldp#insertedContentRelation>
                <http://purl.org/dc/terms/relation> .
            ''', 'text/turtle')

        assert ic.inserted_content_relation() == nsc['dcterms'].relation


    def test_two_relations(self, store):
        ic = IndirectContainer(cont_uri, store).create(
            b'''
            <> <http://www.w3.org/ns/ldp#insertedContentRelation>
                <http://purl.org/dc/terms/hasPart>,
                <http://purl.org/dc/terms/relation> .
            ''', 'text/turtle')

        with pytest.raises(NotAcceptable):
            ic.inserted_content_relation()


    def test_link_types(self):
        assert IndirectContainer.link_types()[:3] == [
            nsc['ldp'].IndirectContainer,
            nsc['ldp'].DirectContainer,
            nsc['ldp'].Container,
        ]



class TestIndirectMembership:
    '''
    Membership triples built from member content.
    '''
    def test_add(self, ic, store):
        member = RDFSource(member_uri, store).create(
                b'<> <http://purl.org/dc/terms/hasPart> <http://ex/part1> .',
                'text/turtle')
        ic.add(member)

        assert _member_triples(store) == {(cont_uri, LDP_MEMBER, part1)}
        assert ic.members() == {member_uri}


    def test_member_derived_uri(self, ic, store):
        member = RDFSource(member_uri, store).create(
                b'<> <http://purl.org/dc/terms/hasPart> <http://ex/part1> .',
                'text/turtle')

        assert ic.member_derived_uri(member) == part1
        assert ic.members() == set()


    def test_remove_uses_retained_value(self, ic, store):
        member = RDFSource(member_uri, store).create(
                b'<> <http://purl.org/dc/terms/hasPart> <http://ex/part1> .',
                'text/turtle')
        ic.add(member)
        member.update(
                b'<> <http://purl.org/dc/terms/hasPart> <http://ex/part2> .',
                'text/turtle')
        ic.remove(member)

        assert _member_triples(store) == set()


    def test_destroy_member(self, ic, store):
        member = RDFSource(member_uri, store).create(
                b'<> <http://purl.org/dc/terms/hasPart> <http://ex/part1> .',
                'text/turtle')
        ic.add(member)
        member.destroy()

        assert _member_triples(store) == set()
        assert ic.members() == set()


    def test_missing_content(self, ic, store):
        member = RDFSource(member_uri, store).create()

        with pytest.raises(NotAcceptable):
            ic.add(member)
        assert ic.members() == set()


    def test_multiple_content(self, ic, store):
        member = RDFSource(member_uri, store).create(
            b'''
            <> <http://purl.org/dc/terms/hasPart>
                <http://ex/part1>, <http://ex/part2> .
            ''', 'text/turtle')

        with pytest.raises(NotAcceptable):
            ic.add(member)


    def test_member_subject(self, store):
        ic = IndirectContainer(cont_uri, store).create()
        member = RDFSource(member_uri, store).create()
        ic.add(member)

        assert _member_triples(store) == {(cont_uri, LDP_MEMBER, member_uri)}


    def test_non_rdf_source(self, ic, store, storage):
        member = NonRDFSource(
                member_uri, store, storage_adapter_cls=storage).create(
                    b'bytes', 'application/octet-stream')

        with pytest.raises(NotAcceptable):
            ic.add(member)
        assert ic.members() == set()


    def test_non_rdf_source_member_subject(self, store, storage):
        ic = IndirectContainer(cont_uri, store).create()
        member = NonRDFSource(
                member_uri, store, storage_adapter_cls=storage).create(
                    b'bytes', 'application/octet-stream')
        ic.add(member)

        assert _member_triples(store) == {(cont_uri, LDP_MEMBER, member_uri)}


    def test_post_with_relation(self, ic, store):
        status, headers, _ = ic.request('POST', environ={
            'wsgi.input':
                b'<> <http://purl.org/dc/terms/hasPart> <http://ex/part1> .',
            'CONTENT_TYPE': 'text/turtle',
            'HTTP_SLUG': 'm1',
        })

        assert status == 201
        assert _member_triples(store) == {(cont_uri, LDP_MEMBER, part1)}


    def test_post_without_relation(self, ic, store):
        with pytest.raises(NotAcceptable):
            ic.request('POST', environ={'HTTP_SLUG': 'm1'})

        assert not RDFSource(member_uri, store).exists
