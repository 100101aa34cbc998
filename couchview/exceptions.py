# -*- coding: utf-8 -*-
#
# Copyright (C) 2007-2009 Christopher Lenz
# All rights reserved.
#
# This software is licensed as described in the file COPYING, which
# you should have received as part of this distribution.


class CouchDBException(Exception):
    """There was an ambiguous error querying CouchDB."""
    kind = None


class QueryCompilationError(CouchDBException):
    """A view query could not be turned into a query string."""
    kind = 'compilation'


class UsageError(CouchDBException):
    """The library was called in a way that can never succeed.

    Raised for non-positive page sizes, reading ``total_rows`` from a reduced
    result, asking an exhausted page iterator for more pages and similar
    programmer errors.
    """
    kind = 'usage'


class ExecutionError(CouchDBException):
    """A view query failed while being executed."""
    kind = 'execution'

    def __init__(self, message=None, error=None, reason=None):
        self.error = error
        self.reason = reason
        super(ExecutionError, self).__init__(message or reason or error or "View query failed")


class MalformedResponse(ExecutionError):
    """The server answered with something that is not a view result."""
    pass


class RequestsException(ExecutionError):
    """There was an ambiguous exception that occurred while handling your request."""
    pass


class Timeout(RequestsException):
    """The request timed out."""
    pass


class HTTPError(RequestsException):
    """An HTTP error occurred."""
    def __init__(self, status_code, error=None, reason=None):
        self.status_code = status_code
        message = "HTTP error {status_code}".format(status_code=status_code)
        if error or reason:
            message = "{message}: {error} ({reason})".format(message=message, error=error, reason=reason)
        super(HTTPError, self).__init__(message, error=error, reason=reason)


class HTTPBadRequest(HTTPError):
    """400 Bad Request"""
    status_code = 400

    def __init__(self, error="bad_request", reason=None):
        super(HTTPBadRequest, self).__init__(self.__class__.status_code, error, reason)


class HTTPUnauthorized(HTTPError):
    """401 Unauthorized"""
    status_code = 401

    def __init__(self, error="unauthorized", reason=None):
        super(HTTPUnauthorized, self).__init__(self.__class__.status_code, error, reason)


class HTTPForbidden(HTTPError):
    """403 Forbidden"""
    status_code = 403

    def __init__(self, error="forbidden", reason=None):
        super(HTTPForbidden, self).__init__(self.__class__.status_code, error, reason)


class HTTPNotFound(HTTPError):
    """404 Not Found"""
    status_code = 404

    def __init__(self, error="not_found", reason=None):
        super(HTTPNotFound, self).__init__(self.__class__.status_code, error, reason)


class HTTPInternalServerError(HTTPError):
    """500 Internal Server Error"""
    status_code = 500

    def __init__(self, error="internal_server_error", reason=None):
        super(HTTPInternalServerError, self).__init__(self.__class__.status_code, error, reason)


class MissingDatabase(HTTPNotFound):
    """A requested database does not exist."""
    pass


class MissingView(HTTPNotFound):
    """A requested view, or its design document, does not exist."""
    pass


_http_error_lookup = {
    exc.status_code: exc for exc in [
        HTTPBadRequest, HTTPUnauthorized, HTTPForbidden, HTTPNotFound, HTTPInternalServerError,
    ]
}


def http_error_lookup(status_code, error=None, reason=None):
    if status_code in _http_error_lookup:
        cls = _http_error_lookup[status_code]
        if error is None:
            return cls(reason=reason)
        return cls(error, reason)
    else:
        return HTTPError(status_code, error=error, reason=reason)
