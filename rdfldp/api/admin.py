import logging

from collections import Counter

from rdflib import URIRef
from rdflib.namespace import RDF

from rdfldp import env
from rdfldp.dictionaries.namespaces import ns_collection as nsc
from rdfldp.exceptions import ChecksumValidationError
from rdfldp.globals import META_GR_SUFFIX

__doc__ = """
Admin API.

This module contains maintenance utilities and stats.
"""

logger = logging.getLogger(__name__)


def bootstrap():
    """
    Create the root container.

    The root is a basic container at the configured root URI. Nothing is
    done if it exists already.

    :rtype: bool
    :return: Whether the root container was created.
    """
    from rdfldp.api import resource as rsrc_api

    if rsrc_api.exists('/'):
        logger.info('Root container exists already.')
        return False

    rsrc_api.create_or_replace(
            '/', link_header='<{}>;rel="type"'.format(
                nsc['ldp'].BasicContainer))
    logger.info('Root container created at {}'.format(
        env.app_globals.root_uri))

    return True


def stats():
    """
    Get repository statistics.

    :rtype: dict
    :return: Number of resources by interaction model, number of destroyed
        resources and total number of resources.
    """
    store = env.app_globals.rdf_store
    by_type = Counter()
    destroyed = 0
    with store.txn_ctx():
        for ctx in store.contexts((None, RDF.type, None)):
            if not str(ctx).endswith(META_GR_SUFFIX):
                continue
            uri = URIRef(str(ctx)[:-len(META_GR_SUFFIX)])
            rdf_type = store.value(uri, RDF.type, ctx)
            if rdf_type is None:
                continue
            by_type[rdf_type.n3(store.ds.namespace_manager)] += 1
            if store.contains(
                    (uri, nsc['prov'].invalidatedAtTime, None), ctx):
                destroyed += 1

    return {
        'rsrc_stats': dict(by_type),
        'destroyed': destroyed,
        'total': sum(by_type.values()),
    }


def fixity_check(uid):
    """
    Check fixity of a resource.

    This calculates the checksum of a resource and validates it against the
    checksum stored in its metadata (``premis:hasMessageDigest``).

    :param str uid: Path or URI of the resource to be checked.

    :rtype: None

    :raises: rdfldp.exceptions.ChecksumValidationError: the checksums do
        not match. This indicates corruption.
    """
    from rdfldp.api import resource as rsrc_api

    rsrc = rsrc_api.get(uid)
    with env.app_globals.rdf_store.txn_ctx():
        ref_cksum = rsrc.digest
        calc_cksum = rsrc._content_digest()

    if calc_cksum != ref_cksum:
        raise ChecksumValidationError(rsrc.subject_uri, ref_cksum, calc_cksum)

    logger.info('Fixity check passed for {}.'.format(rsrc.subject_uri))
