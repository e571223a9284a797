import logging

from enum import Enum

from rdfldp.exceptions import Gone, MethodNotAllowed, NotFound


logger = logging.getLogger(__name__)

__doc__ = '''
Request dispatcher.

Maps an HTTP verb, together with the request headers and environment, to the
handler that a resource type declares for it. This is the single place where
a verb that a resource does not implement becomes a ``405 Method Not
Allowed``.
'''


class Verb(str, Enum):
    '''HTTP methods handled by LDP resources.'''
    GET = 'GET'
    HEAD = 'HEAD'
    OPTIONS = 'OPTIONS'
    PUT = 'PUT'
    POST = 'POST'
    PATCH = 'PATCH'
    DELETE = 'DELETE'


class _Unsupported:
    '''
    Handler table entry for a verb that a resource type explicitly does not
    support.
    '''
    def __repr__(self):
        return 'UNSUPPORTED'

    def __bool__(self):
        return False


UNSUPPORTED = _Unsupported()
'''
Marker for a verb not supported by a resource type. Subclasses use it to
withdraw a verb declared by a parent class.
'''

REQUIRED_VERBS = frozenset((Verb.GET, Verb.HEAD, Verb.OPTIONS))
'''Verbs that every resource must support.'''

_missing_ok = frozenset((Verb.OPTIONS, Verb.PUT))
'''Verbs that can be dispatched to a resource that does not exist.'''

_gone_ok = frozenset((Verb.OPTIONS,))
'''Verbs that can be dispatched to a destroyed resource.'''


def to_verb(method):
    '''
    Normalize a method name.

    :param method: Method name, case insensitive, or :class:`Verb`.

    :rtype: Verb
    :raise rdfldp.exceptions.MethodNotAllowed: if the method is not an LDP
        method.
    '''
    if isinstance(method, Verb):
        return method
    try:
        return Verb(str(method).upper())
    except ValueError:
        raise MethodNotAllowed(method)


def allowed_methods(rsrc):
    '''
    Verbs that a resource can be dispatched with.

    :param rdfldp.model.ldpr.Resource rsrc: The resource.

    :rtype: set(Verb)
    :raise TypeError: if the resource type withdraws any of
        :data:`REQUIRED_VERBS`.
    '''
    allowed = {
        verb for verb, handler in rsrc.handlers().items()
        if handler is not UNSUPPORTED}
    missing = REQUIRED_VERBS - allowed
    if missing:
        raise TypeError('{} does not support the required methods: {}'.format(
            type(rsrc).__name__, ', '.join(sorted(v.value for v in missing))))

    return allowed


def dispatch(rsrc, method, status=200, headers=None, environ=None):
    '''
    Dispatch a request to a resource.

    :param rdfldp.model.ldpr.Resource rsrc: Target resource. It may not
        exist yet, e.g. for a ``PUT`` creating it.
    :param method: HTTP method.
    :type method: str or Verb
    :param int status: Base status code, which handlers may override.
    :param dict headers: Base response headers. Handlers add to these.
    :param dict environ: WSGI-style request environment. The keys used are
        ``wsgi.input``, ``CONTENT_TYPE``, ``HTTP_IF_MATCH``, ``HTTP_LINK`` and
        ``HTTP_SLUG``.

    :rtype: tuple
    :return: 3-tuple of status code, headers dict and response body.

    :raise rdfldp.exceptions.RequestError: if the request cannot be
        fulfilled. A verb not handled by the resource raises
        :class:`~rdfldp.exceptions.MethodNotAllowed`.
    '''
    verb = to_verb(method)
    headers = dict(headers or {})
    environ = environ or {}

    if verb not in allowed_methods(rsrc):
        raise MethodNotAllowed(verb.value, rsrc.subject_uri)
    handler = rsrc.handlers()[verb]

    if rsrc.destroyed and verb not in _gone_ok:
        if verb == Verb.DELETE:
            raise NotFound(
                'Resource {} has already been deleted.'.format(
                    rsrc.subject_uri), rsrc.subject_uri)
        raise Gone(uri=rsrc.subject_uri)
    if not rsrc.exists and verb not in _missing_ok:
        raise NotFound(uri=rsrc.subject_uri)

    logger.debug('Dispatching {} to {}'.format(verb.value, rsrc.subject_uri))
    try:
        return handler(status, headers, environ)
    except NotImplementedError:
        raise MethodNotAllowed(verb.value, rsrc.subject_uri)
