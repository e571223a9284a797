import logging

from hashlib import sha1
from urllib.parse import quote

from requests.utils import parse_header_links
from rdflib.term import URIRef
from werkzeug.http import parse_etags, parse_options_header


logger = logging.getLogger(__name__)

__doc__ = ''' Utility to translate and generate strings and other objects. '''


def parse_link_header(h_str):
    '''
    Parse a ``Link`` header as per https://tools.ietf.org/html/rfc8288

    :param str h_str: The header value, or several header values joined by
        commas, excluding the ``Link:`` token.

    :rtype: list(dict)
    :return: One dict per link, with a ``url`` key and one key per link
        parameter (e.g. ``rel``).
    '''
    if not h_str or not h_str.strip():
        return []

    return parse_header_links(h_str)


def link_types(h_str):
    '''
    Extract the targets of ``rel="type"`` links from a ``Link`` header.

    :param str h_str: The ``Link`` header value.

    :rtype: list(rdflib.URIRef)
    '''
    return [
        URIRef(link['url']) for link in parse_link_header(h_str)
        if link.get('rel', '').lower() == 'type']


def parse_mimetype(ct_str):
    '''
    Strip parameters from a ``Content-Type`` value.

    >>> parse_mimetype('text/turtle; charset=utf-8')
    'text/turtle'

    :rtype: str or None
    '''
    if not ct_str:
        return None
    mimetype, _ = parse_options_header(ct_str)

    return mimetype.lower() or None


def etag_match(if_match, etag_value):
    '''
    Evaluate an ``If-Match`` header against a resource entity tag.

    The comparison is weak, since all the entity tags issued for resources
    are weak validators.

    :param str if_match: The header value. It can be a list of entity tags
        or ``*``.
    :param str etag_value: The opaque tag value of the resource, without
        quotes and weakness indicator. ``None`` if the resource has no tag.

    :rtype: bool
    '''
    etags = parse_etags(if_match)
    if etags.star_tag:
        return etag_value is not None
    if etag_value is None:
        return False

    return etags.contains_weak(etag_value)


def rdf_cksum(triples):
    '''
    Generate a checksum for a set of triples.

    This is not straightforward because a graph is derived from an
    unordered data structure (RDF). The triples are serialized in N-Triples
    term syntax and sorted before hashing.

    N.B. Blank node labels are part of the hashed strings, so isomorphic
    graphs with differently labeled blank nodes have different checksums.

    :param triples: Iterable of 3-tuples of RDF terms.

    :rtype: str
    :return: SHA1 checksum.
    '''
    hsh = sha1()
    for line in sorted(' '.join(term.n3() for term in t) for t in triples):
        hsh.update(line.encode('utf-8'))
        hsh.update(b'\n')

    return hsh.hexdigest()


def uri_join(base, *segments):
    '''
    Append path segments to a URI.

    >>> uri_join('http://ex.org/c/', 'a b')
    rdflib.term.URIRef('http://ex.org/c/a%20b')

    :param str base: Base URI. A trailing slash is ignored.
    :param str segments: Path segments. These are percent-encoded, except
        for slashes.

    :rtype: rdflib.URIRef
    '''
    uri = str(base).rstrip('/')
    for seg in segments:
        uri += '/' + quote(seg.strip('/'), safe='/')

    return URIRef(uri)
