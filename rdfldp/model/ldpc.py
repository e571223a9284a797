import logging

from rdfldp.dictionaries.namespaces import ns_collection as nsc
from rdfldp.dispatcher import Verb
from rdfldp.exceptions import Conflict, NotAcceptable, NotFound
from rdfldp.globals import LDP_MEMBER, LDP_MEMBER_SUBJECT
from rdfldp.model.ldp_rs import RDFSource, rdf_parsable_mimetypes
from rdfldp.model.membership import (
        InsertedContentValue, MemberSubjectValue, MembershipRelation)
from rdfldp.util import toolbox


logger = logging.getLogger(__name__)


class Container(RDFSource):
    """
    LDPC (LDP Container). Instances of this class are Basic Containers.

    A container lists its members with ``ldp:contains`` triples in its
    metadata graph and maintains one membership triple per member in the
    graph of its membership resource. Containers do not own their members:
    destroying a container leaves them untouched.

    The value standing for a member in the membership triple is computed
    by :attr:`value_strategy` and retained in the container metadata, so
    that the exact triple can be removed later even if the member has
    changed in the meantime.

    https://www.w3.org/TR/ldp/#ldpc
    """
    to_uri = nsc['ldp'].Container

    is_container = True

    value_strategy = MemberSubjectValue()
    """Computes the member value of membership triples."""

    @classmethod
    def container_class(cls):
        """
        Container type, e.g. ``ldp:BasicContainer``.

        :rtype: rdflib.URIRef
        """
        return nsc['ldp'].BasicContainer


    @classmethod
    def link_types(cls):
        types = super().link_types()
        cont_cls = cls.container_class()
        if cont_cls in types:
            types.remove(cont_cls)

        return [cont_cls] + types


    def handlers(self):
        handlers = super().handlers()
        handlers[Verb.POST] = self._post

        return handlers


    def update_headers(self, headers):
        super().update_headers(headers)
        headers['Accept-Post'] = ', '.join(rdf_parsable_mimetypes + ('*/*',))

        return headers


    def membership_resource(self):
        """
        Resource holding the membership triples.

        :rtype: rdflib.URIRef
        """
        return self.subject_uri


    def membership_relation(self):
        """
        Relation used in membership triples.

        :rtype: rdfldp.model.membership.MembershipRelation
        """
        return MembershipRelation.has_member(LDP_MEMBER)


    def members(self):
        """
        URIs of the resources contained in this container.

        :rtype: set(rdflib.URIRef)
        """
        return {
            trp[2] for trp in self.store.triples(
                (self.subject_uri, nsc['ldp'].contains, None),
                self.meta_uri)}


    def member_value(self, member):
        """
        Value standing for a member in its membership triple.

        :param rdfldp.model.ldpr.Resource member: The member.

        :rtype: rdflib.term.Identifier
        """
        return self.value_strategy.member_value(self, member)


    def add(self, member):
        """
        Add a member to the container.

        :param rdfldp.model.ldpr.Resource member: The new member.

        :rtype: Container
        :raise rdfldp.exceptions.Conflict: if the resource is already a
            member.
        :raise rdfldp.exceptions.NotAcceptable: if no membership triple can
            be built for the member.
        """
        with self.store.txn_ctx(True):
            self._check_live()
            cont_trp = (
                    self.subject_uri, nsc['ldp'].contains,
                    member.subject_uri)
            if self.store.contains(cont_trp, self.meta_uri):
                raise Conflict(
                    '{} is already contained in {}.'.format(
                        member.subject_uri, self.subject_uri),
                    self.subject_uri)

            value = self.member_value(member)
            mbr_rsrc = self.membership_resource()
            mbr_trp = self.membership_relation().triple(mbr_rsrc, value)

            logger.info('Adding {} to {}'.format(
                member.subject_uri, self.subject_uri))
            self.store.add(cont_trp, self.meta_uri)
            self.store.add((
                member.subject_uri, nsc['srv'].membershipValue, value),
                self.meta_uri)
            logger.debug('Adding membership triple: {}'.format(mbr_trp))
            self.store.add(mbr_trp, mbr_rsrc)
            self._touch_membership(mbr_rsrc)

        return self


    def remove(self, member):
        """
        Remove a member from the container.

        The membership triple removed is built from the member value
        retained when the member was added.

        :param member: The member, or its URI.
        :type member: rdfldp.model.ldpr.Resource or rdflib.URIRef

        :rtype: Container
        """
        member_uri = getattr(member, 'subject_uri', member)
        with self.store.txn_ctx(True):
            cont_trp = (self.subject_uri, nsc['ldp'].contains, member_uri)
            if not self.store.contains(cont_trp, self.meta_uri):
                logger.debug('{} is not contained in {}.'.format(
                    member_uri, self.subject_uri))
                return self

            value = self.store.value(
                    member_uri, nsc['srv'].membershipValue, self.meta_uri)
            if value is None:
                value = (
                    self.member_value(member)
                    if hasattr(member, 'subject_uri') else member_uri)
            mbr_rsrc = self.membership_resource()
            mbr_trp = self.membership_relation().triple(mbr_rsrc, value)

            logger.info('Removing {} from {}'.format(
                member_uri, self.subject_uri))
            self.store.remove(mbr_trp, mbr_rsrc)
            self.store.remove(cont_trp, self.meta_uri)
            self.store.remove(
                    (member_uri, nsc['srv'].membershipValue, None),
                    self.meta_uri)
            self._touch_membership(mbr_rsrc)

        return self


    def destroy(self):
        """
        Destroy the container.

        The membership triples of all members are removed; the members
        themselves are not affected.
        """
        with self.store.txn_ctx(True):
            if not self.exists or self.destroyed:
                raise NotFound(uri=self.subject_uri)
            for member_uri in self.members():
                self.remove(member_uri)
            super().destroy()

        return self


    ## PROTECTED METHODS ##

    def _write_content(self, stream, mimetype):
        """
        Replace the container graph, preserving the membership triples that
        this container placed in it.
        """
        own_mbr_triples = []
        if self.exists:
            for trp in self._membership_triples():
                if self.store.contains(trp, self.subject_uri):
                    own_mbr_triples.append(trp)

        super()._write_content(stream, mimetype)
        for trp in own_mbr_triples:
            self.store.add(trp, self.subject_uri)


    def _membership_triples(self):
        """
        Membership triples of all members, built from the retained values.
        """
        mbr_rsrc = self.membership_resource()
        relation = self.membership_relation()

        return [
            relation.triple(mbr_rsrc, value)
            for _, _, value in self.store.triples(
                (None, nsc['srv'].membershipValue, None), self.meta_uri)]


    def _extra_response_triples(self):
        return self.store.triples(
                (self.subject_uri, nsc['ldp'].contains, None), self.meta_uri)


    def _touch_membership(self, mbr_rsrc):
        """
        Refresh the container and the membership resource after a change.
        """
        from rdfldp.model.ldp_factory import LdpFactory

        self._touch()
        if mbr_rsrc == self.subject_uri:
            return
        try:
            rsrc = LdpFactory.from_stored(
                    mbr_rsrc, self.store,
                    storage_adapter_cls=self.storage_adapter_cls)
        except NotFound:
            return
        if not rsrc.destroyed:
            rsrc._touch()


    def _post(self, status, headers, environ):
        """
        Create a new resource in the container.

        The interaction model of the new resource is read from the ``Link``
        header and its URI is built from the ``Slug`` header, or minted if
        none is given. The new resource and its membership are written in one
        transaction.
        """
        from rdfldp.model.ldp_factory import LdpFactory

        cls = LdpFactory.interaction_model(environ.get('HTTP_LINK'))
        uri = LdpFactory.mint_uri(self.subject_uri, environ.get('HTTP_SLUG'))
        created = cls(
                uri, self.store, storage_adapter_cls=self.storage_adapter_cls)
        with self.store.txn_ctx(True):
            if created.exists:
                raise Conflict(uri=uri)
            created.create(
                    environ.get('wsgi.input'),
                    toolbox.parse_mimetype(environ.get('CONTENT_TYPE')))
            self.add(created)

        headers['Location'] = str(uri)

        return 201, created.update_headers(headers), created.to_response()



class DirectContainer(Container):
    """
    LDP-DC (LDP Direct Container).

    The membership resource and relation are read from the container graph.
    If they are missing, the defaults (the container itself and
    ``ldp:member``) are written to the graph when first needed.

    https://www.w3.org/TR/ldp/#ldpdc
    """
    to_uri = nsc['ldp'].DirectContainer

    @classmethod
    def container_class(cls):
        return nsc['ldp'].DirectContainer


    def membership_resource(self):
        """
        Membership resource from the ``ldp:membershipResource`` statement.

        :raise rdfldp.exceptions.NotAcceptable: if more than one is found.
        """
        pred = nsc['ldp'].membershipResource
        values = self._config_values(pred)
        if not values:
            self.store.add(
                    (self.subject_uri, pred, self.subject_uri),
                    self.subject_uri)
            return self.subject_uri
        if len(values) > 1:
            raise NotAcceptable(
                'A {} must have exactly one membership resource; found '
                '{}.'.format(self.container_class(), len(values)),
                self.subject_uri)

        return values[0]


    def membership_relation(self):
        """
        Relation from the ``ldp:hasMemberRelation`` or
        ``ldp:isMemberOfRelation`` statement.

        :raise rdfldp.exceptions.NotAcceptable: if more than one statement
            is found, or statements of both kinds.
        """
        has_mbr = self._config_values(nsc['ldp'].hasMemberRelation)
        is_mbr_of = self._config_values(nsc['ldp'].isMemberOfRelation)
        count = len(has_mbr) + len(is_mbr_of)
        if count == 0:
            self.store.add(
                    (self.subject_uri, nsc['ldp'].hasMemberRelation,
                    LDP_MEMBER), self.subject_uri)
            return MembershipRelation.has_member(LDP_MEMBER)
        if count > 1:
            raise NotAcceptable(
                'A {} must have exactly one membership relation; found '
                '{}.'.format(self.container_class(), count),
                self.subject_uri)

        if has_mbr:
            return MembershipRelation.has_member(has_mbr[0])
        return MembershipRelation.is_member_of(is_mbr_of[0])


    def _config_values(self, pred):
        return [
            trp[2] for trp in self.store.triples(
                (self.subject_uri, pred, None), self.subject_uri)]



class IndirectContainer(DirectContainer):
    """
    LDP-IC (LDP Indirect Container).

    Adds the inserted content relation to the features of the direct
    container: the member value is the object of the member's statement
    with that predicate. If no relation is given, ``ldp:MemberSubject`` is
    written to the graph as the ``ldp:indirectContentRelation``, which makes
    the container behave as a direct container. LDP-NRs can only be added
    with ``ldp:MemberSubject``.

    https://www.w3.org/TR/ldp/#ldpic
    """
    to_uri = nsc['ldp'].IndirectContainer

    value_strategy = InsertedContentValue()

    content_relation_preds = (
        nsc['ldp'].indirectContentRelation,
        nsc['ldp'].insertedContentRelation,
    )
    """
    Predicates of the inserted content relation statement. The first one is
    written when the default relation is set; the second one is accepted as
    an alternative spelling.
    """

    @classmethod
    def container_class(cls):
        return nsc['ldp'].IndirectContainer


    def inserted_content_relation(self):
        """
        Inserted content relation of the container.

        :rtype: rdflib.URIRef
        :return: A predicate, or ``ldp:MemberSubject``.

        :raise rdfldp.exceptions.NotAcceptable: if more than one relation
            statement is found.
        """
        values = []
        for pred in self.content_relation_preds:
            values.extend(self._config_values(pred))

        if not values:
            self.store.add((
                self.subject_uri, self.content_relation_preds[0],
                LDP_MEMBER_SUBJECT), self.subject_uri)
            return LDP_MEMBER_SUBJECT
        if len(values) > 1:
            raise NotAcceptable(
                'An LDP-IC MUST have exactly one inserted content relation '
                'triple; found {}.'.format(len(values)), self.subject_uri)

        return values[0]


    def member_derived_uri(self, member):
        """
        Member value derived through the inserted content relation.

        :param rdfldp.model.ldpr.Resource member: The member.

        :raise rdfldp.exceptions.NotAcceptable: if the value cannot be
            derived.

        :see_also: :class:`rdfldp.model.membership.InsertedContentValue`
        """
        return self.member_value(member)
