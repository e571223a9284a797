import logging

from collections import namedtuple

from rdfldp.dictionaries.namespaces import ns_collection as nsc
from rdfldp.exceptions import NotAcceptable
from rdfldp.globals import LDP_MEMBER_SUBJECT


logger = logging.getLogger(__name__)

__doc__ = '''
Membership triple building blocks shared by all container types.

A container relates its members to a membership resource through exactly one
membership relation, which is either a ``ldp:hasMemberRelation`` (the
membership resource is the subject) or a ``ldp:isMemberOfRelation`` (the
membership resource is the object). The value standing for the member in the
membership triple is computed by a member value strategy: the member URI for
basic and direct containers, a value derived from the member content for
indirect containers.
'''

HAS_MEMBER = nsc['ldp'].hasMemberRelation
IS_MEMBER_OF = nsc['ldp'].isMemberOfRelation


class MembershipRelation(namedtuple('MembershipRelation', ('kind', 'predicate'))):
    '''
    Membership relation of a container.

    ``kind`` is either :data:`HAS_MEMBER` or :data:`IS_MEMBER_OF`, and
    ``predicate`` is the predicate of the membership triples.
    '''
    __slots__ = ()

    @classmethod
    def has_member(cls, predicate):
        return cls(HAS_MEMBER, predicate)


    @classmethod
    def is_member_of(cls, predicate):
        return cls(IS_MEMBER_OF, predicate)


    @property
    def is_inverse(self):
        '''Whether the membership resource is the object of the triple.'''
        return self.kind == IS_MEMBER_OF


    def triple(self, mbr_rsrc, value):
        '''
        Build a membership triple.

        :param rdflib.URIRef mbr_rsrc: The membership resource.
        :param rdflib.term.Identifier value: The member value.

        :rtype: tuple
        '''
        if self.is_inverse:
            return (value, self.predicate, mbr_rsrc)

        return (mbr_rsrc, self.predicate, value)



class MemberSubjectValue:
    '''
    Member value strategy using the member URI itself.
    '''
    def member_value(self, container, member):
        return member.subject_uri



class InsertedContentValue:
    '''
    Member value strategy of indirect containers.

    The value is the object of the single statement in the member's graph
    whose subject is the member and whose predicate is the container's
    inserted content relation. The ``ldp:MemberSubject`` relation selects the
    member URI instead.
    '''
    def member_value(self, container, member):
        '''
        Derive the member value.

        :param rdfldp.model.ldpc.IndirectContainer container: The container.
        :param rdfldp.model.ldpr.Resource member: The member being added.

        :raise rdfldp.exceptions.NotAcceptable: if the member is a
            NonRDFSource and the relation is not ``ldp:MemberSubject``, or if
            the member graph does not have exactly one statement with the
            relation.
        '''
        predicate = container.inserted_content_relation()
        if predicate == LDP_MEMBER_SUBJECT:
            return member.subject_uri

        if member.is_non_rdf_source:
            raise NotAcceptable(
                '{} is a LDP-NR; cannot add it to an IndirectContainer with '
                'a content relation.'.format(member.subject_uri),
                container.subject_uri)

        values = [
            trp[2] for trp in member.store.triples(
                (member.subject_uri, predicate, None), member.subject_uri)]
        if len(values) != 1:
            raise NotAcceptable(
                '{} inserted content {} found on {}'.format(
                    len(values), predicate, member.subject_uri),
                container.subject_uri)

        return values[0]
