import logging

from functools import wraps
from io import BytesIO
from urllib.parse import unquote, urlparse

from rdfldp import env
from rdfldp.exceptions import BadRequest, Gone, MethodNotAllowed, NotFound
from rdfldp.globals import RES_CREATED, RES_DELETED, RES_UPDATED
from rdfldp.model.ldp_factory import LdpFactory
from rdfldp.util.toolbox import uri_join


logger = logging.getLogger(__name__)

__doc__ = """
Primary API for resource manipulation.

This binds the resource model to the graph store and the storage adapter
configured in the environment. Resources can be addressed by full URI or by
a path relative to the root URI.

Quickstart:

>>> from rdfldp import env
>>> env.setup()
>>> from rdfldp.api import resource as rsrc_api
>>> rsrc_api.create_or_replace(
...     'a', b'<> <http://purl.org/dc/terms/title> "A" .', 'text/turtle')
'_create_'
>>> rsrc = rsrc_api.get('a')
>>> rsrc.subject_uri
rdflib.term.URIRef('http://localhost:8000/ldp/a')
>>> status, headers, body = rsrc_api.request('a', 'GET')
>>> status
200
"""

def transaction(write=False):
    """
    Handle atomic operations in a store.

    This wrapper ensures that a write operation is performed atomically: if
    the wrapped function raises an exception, all its changes to the graph
    store are undone.

    ALL write operations through the API go through this wrapper.
    """
    def _transaction_deco(fn):
        @wraps(fn)
        def _wrapper(*args, **kwargs):
            with env.app_globals.rdf_store.txn_ctx(write):
                return fn(*args, **kwargs)
        return _wrapper
    return _transaction_deco


def to_uri(uid):
    """
    Convert a resource path to a full URI.

    Full URIs are returned unchanged.

    :param str uid: Path relative to the root URI, or full URI.

    :rtype: rdflib.URIRef
    :raise rdfldp.exceptions.BadRequest: if the path has relative segments
        (``.`` or ``..``).
    """
    parsed = urlparse(str(uid))
    if any(seg in ('.', '..') for seg in unquote(parsed.path).split('/')):
        raise BadRequest(
            'Resource path {} cannot contain relative segments.'.format(uid),
            uid)
    if parsed.scheme:
        return uri_join(uid)
    root_uri = env.app_globals.root_uri
    if not uid or uid == '/':
        return uri_join(root_uri)

    return uri_join(root_uri, str(uid).strip('/'))


def _factory_args():
    return {'storage_adapter_cls': env.app_globals.storage_adapter_cls}


### API METHODS ###

@transaction()
def exists(uid):
    """
    Return whether a live resource exists in the repository.

    :param string uid: Resource path or URI.
    """
    try:
        rsrc = LdpFactory.from_stored(
                to_uri(uid), env.app_globals.rdf_store, **_factory_args())
    except NotFound:
        return False

    return not rsrc.destroyed


@transaction()
def get(uid):
    """
    Get a LDP resource.

    :param string uid: Resource path or URI.

    :rtype: rdfldp.model.ldpr.Resource
    :raise rdfldp.exceptions.NotFound: if the resource does not exist.
    :raise rdfldp.exceptions.Gone: if the resource has been destroyed.
    """
    rsrc = LdpFactory.from_stored(
            to_uri(uid), env.app_globals.rdf_store, **_factory_args())
    if rsrc.destroyed:
        raise Gone(uri=rsrc.subject_uri)

    return rsrc


@transaction()
def get_metadata(uid):
    """
    Get the server-managed metadata of a resource.

    :param string uid: Resource path or URI.

    :rtype: rdflib.Graph
    """
    return get(uid).metagraph


@transaction(True)
def create_or_replace(uid, stream=None, mimetype=None, link_header=None):
    """
    Create or replace a resource with a specified URI.

    :param string uid: Resource path or URI.
    :param stream: Request body.
    :param str mimetype: Media type of the body.
    :param str link_header: ``Link`` header with the interaction model of
        a new resource.

    :rtype: str
    :return: Event type: whether the resource was created or updated.
    """
    rsrc = LdpFactory.from_provided(
            to_uri(uid), env.app_globals.rdf_store, link_header,
            **_factory_args())
    if rsrc.exists:
        rsrc.update(stream, mimetype)
        return RES_UPDATED

    rsrc.create(stream, mimetype)

    return RES_CREATED


@transaction(True)
def create(parent, slug=None, stream=None, mimetype=None, link_header=None):
    """
    Create a resource in a container, with a minted URI.

    :param str parent: Path or URI of the container.
    :param str slug: Tentative path segment relative to the container.

    :rtype: rdflib.URIRef
    :return: URI of the new resource.

    :raise rdfldp.exceptions.MethodNotAllowed: if the parent is not a
        container.
    :raise rdfldp.exceptions.Conflict: if a resource with the slug exists.
    """
    cont = get(parent)
    if not cont.is_container:
        raise MethodNotAllowed('POST', cont.subject_uri)

    uri = LdpFactory.mint_uri(cont.subject_uri, slug)
    logger.debug('Minted URI for new resource: {}'.format(uri))
    cls = LdpFactory.interaction_model(link_header)
    rsrc = cls(uri, env.app_globals.rdf_store, **_factory_args())
    rsrc.create(stream, mimetype)
    cont.add(rsrc)

    return uri


@transaction(True)
def delete(uid):
    """
    Delete a resource.

    :param string uid: Resource path or URI.

    :rtype: str
    :return: Event type.
    """
    LdpFactory.from_stored(
            to_uri(uid), env.app_globals.rdf_store,
            **_factory_args()).destroy()

    return RES_DELETED


@transaction(True)
def request(uid, method, headers=None, body=None):
    """
    Handle a HTTP-shaped request.

    This is the entry point for a transport layer.

    :param string uid: Resource path or URI.
    :param str method: HTTP method.
    :param dict headers: Request headers. Names are case insensitive.
    :param bytes body: Request body.

    :rtype: tuple
    :return: Status code, headers dict and body.
    """
    environ = {
        'REQUEST_METHOD': str(method).upper(),
        'wsgi.input': BytesIO(body or b''),
    }
    for name, value in (headers or {}).items():
        key = name.upper().replace('-', '_')
        if key not in ('CONTENT_TYPE', 'CONTENT_LENGTH'):
            key = 'HTTP_' + key
        environ[key] = value

    rsrc = LdpFactory.from_provided(
            to_uri(uid), env.app_globals.rdf_store, environ.get('HTTP_LINK'),
            **_factory_args())
    logger.info('{} {}'.format(environ['REQUEST_METHOD'], rsrc.subject_uri))

    return rsrc.request(method, 200, {}, environ)
