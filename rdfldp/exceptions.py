''' Put all exceptions here. '''

DEFAULT_CONSTRAINED_BY = 'https://www.w3.org/TR/ldp/#ldpr-gen-pubclireqs'
"""
Fallback constraints document, used if the environment is not set up.
"""

CONSTRAINED_BY_REL = 'http://www.w3.org/ns/ldp#constrainedBy'


class RequestError(RuntimeError):
    '''
    Base class for all the errors of an HTTP-shaped request.

    Every subclass maps to one HTTP status. A transport layer catching one of
    these uses :py:attr:`status` as the response code and merges
    :py:attr:`headers` into the response headers.
    '''
    status = 500
    default_msg = 'Request error on {}.'

    def __init__(self, msg=None, uri=None):
        self.uri = uri
        self.msg = msg
        super().__init__(str(self))


    def __str__(self):
        if self.msg:
            return self.msg
        return self.default_msg.format(self.uri or 'resource')


    @property
    def headers(self):
        '''
        Headers to add to an error response.

        These point to the document describing the server constraints.

        :rtype: dict
        '''
        from rdfldp import env
        try:
            constrained_by = env.app_globals.config['application'][
                    'constrained_by']
        except (AttributeError, KeyError):
            constrained_by = DEFAULT_CONSTRAINED_BY

        return {
            'Link': '<{}>;rel="{}"'.format(constrained_by, CONSTRAINED_BY_REL)
        }



class BadRequest(RequestError):
    '''
    Raised when a request payload cannot be processed, e.g. malformed RDF.

    This surfaces at the HTTP level as a 400.
    '''
    status = 400
    default_msg = 'Bad request for {}.'



class NotFound(RequestError):
    '''
    Raised when operating on a resource that does not exist, or that cannot
    be operated on any more.

    This surfaces at the HTTP level as a 404.
    '''
    status = 404
    default_msg = 'Resource {} not found.'



class MethodNotAllowed(RequestError):
    '''
    Raised when the requested method is not implemented by the resource.

    This surfaces at the HTTP level as a 405.
    '''
    status = 405
    default_msg = 'Method not allowed on {}.'

    def __init__(self, method=None, uri=None, msg=None):
        self.method = method
        if not msg and method:
            msg = 'Method {} is not allowed on {}.'.format(
                    method, uri or 'this resource')
        super().__init__(msg, uri)



class NotAcceptable(RequestError):
    '''
    Raised when a container configuration or a member's content does not
    allow computing a membership triple.

    This surfaces at the HTTP level as a 406.
    '''
    status = 406
    default_msg = 'Request on {} is not acceptable.'



class Conflict(RequestError):
    '''
    Raised in an attempt to create a resource at a URI that already exists,
    or to change server-managed state.

    This surfaces at the HTTP level as a 409.
    '''
    status = 409
    default_msg = 'Resource {} already exists.'



class Gone(RequestError):
    '''
    Raised when a destroyed resource is requested.

    This surfaces at the HTTP level as a 410.
    '''
    status = 410
    default_msg = 'Resource {} has been deleted.'



class PreconditionFailed(RequestError):
    '''
    Raised when a conditional request (e.g. ``If-Match``) is not satisfied.

    This surfaces at the HTTP level as a 412.
    '''
    status = 412
    default_msg = 'Precondition failed for {}.'



class UnsupportedMediaType(RequestError):
    '''
    Raised when a payload is provided in a format that the resource cannot
    parse.

    This surfaces at the HTTP level as a 415.
    '''
    status = 415
    default_msg = 'Unsupported media type for {}.'

    def __init__(self, mimetype=None, uri=None, msg=None):
        self.mimetype = mimetype
        if not msg and mimetype:
            msg = 'Invalid content type \'{}\' for resource {}'.format(
                    mimetype, uri or '')
        super().__init__(msg, uri)



class ChecksumValidationError(RuntimeError):
    '''
    Raised when the stored digest of a resource does not match its content.

    This is not a request error: it indicates data corruption.
    '''
    def __init__(self, uri, prov_cksum, calc_cksum, msg=None):
        self.uri = uri
        self.prov_cksum = prov_cksum
        self.calc_cksum = calc_cksum
        self.msg = msg
        super().__init__(str(self))


    def __str__(self):
        return self.msg or (
            'Validation of stored checksum for {} failed. Stored checksum: '
            '{}; calculated checksum: {}'.format(
                self.uri, self.prov_cksum, self.calc_cksum))
