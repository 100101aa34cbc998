# -*- coding: utf-8 -*-
#
# Copyright (C) 2007-2009 Christopher Lenz
# All rights reserved.
#
# This software is licensed as described in the file COPYING, which
# you should have received as part of this distribution.

"""Python client API for querying CouchDB views.

>>> server = Server()
>>> db = server['python-tests']
>>> result = db.view('people/by_name', startkey='M', limit=10)
>>> [row.key for row in result]
['Mary', 'Mike']

>>> for page in db.paginate('people/by_name', page_size=100):
...     print(len(page), page.is_last_page)
100 False
42 True
"""
import logging
import os
from urllib.parse import quote

import furl
import requests.exceptions
from requests_toolbelt import sessions

from couchview import exceptions, paging
from couchview.query import ViewQuery
from couchview.views import ViewResult

__all__ = ['Server', 'Database', 'Session']
__docformat__ = 'restructuredtext en'

logger = logging.getLogger(__name__)


DEFAULT_BASE_URL = os.environ.get('COUCHDB_URL', 'http://localhost:5984/')


def _error_body(response):
    """Return the ``error`` and ``reason`` of a CouchDB error response."""
    try:
        body = response.json()
    except ValueError:
        return None, response.reason
    if not isinstance(body, dict):
        return None, response.reason
    return body.get('error'), body.get('reason') or response.reason


class Session(object):
    """Wrapper around BaseUrlSession that automatically wraps certain exceptions when making requests"""

    def __init__(self, base_url=None):
        self._base_session = sessions.BaseUrlSession(base_url=base_url)

    @property
    def base_url(self):
        return self._base_session.base_url

    @base_url.setter
    def base_url(self, url):
        self._base_session.base_url = url

    def request(self, method, url, *args, **kwargs):
        try:
            resp = self._base_session.request(method, str(url), *args, **kwargs)
            resp.raise_for_status()
        except requests.exceptions.HTTPError as exc:
            error, reason = _error_body(exc.response)
            raise exceptions.http_error_lookup(exc.response.status_code, error, reason) from exc
        except requests.exceptions.Timeout as exc:
            raise exceptions.Timeout(reason=str(exc)) from exc
        except requests.exceptions.RequestException as exc:
            raise exceptions.RequestsException(reason=str(exc)) from exc
        return resp

    def head(self, url, **kwargs):
        return self.request("HEAD", url=url, **kwargs)

    def get(self, url, **kwargs):
        return self.request("GET", url=url, **kwargs)


class Server(object):
    """Representation of a CouchDB server.

    >>> server = Server() # connects to the local_server
    >>> remote_server = Server('http://example.com:5984/')

    Databases are looked up with item access:

    >>> db = server['python-tests']
    >>> db.name
    'python-tests'
    """

    def __init__(self, url=DEFAULT_BASE_URL, session=None):
        """Initialize the server object.

        :param url: the URI of the server (for example ``http://localhost:5984/``)
        """
        self._url = url
        if session:
            self._session = session
            self._session.base_url = url
        else:
            self._session = Session(base_url=self._url)

    @property
    def url(self):
        return self._url

    @property
    def session(self):
        return self._session

    def __contains__(self, name):
        """Return whether the server contains a database with the specified
        name.
        """
        try:
            self._session.head(quote(name, safe=''))
            return True
        except exceptions.HTTPNotFound:
            return False

    def __repr__(self):
        return '<%s %r>' % (type(self).__name__, self.url)

    def __getitem__(self, name):
        """Return a `Database` object representing the database with the
        specified name.

        :raise MissingDatabase: if no database with that name exists
        """
        return Database(self, name, check=True)

    def version(self):
        """The version string of the CouchDB server.

        :rtype: `str`"""
        return self._session.get("/").json()['version']


class Database(object):
    """Representation of a database on a CouchDB server, for querying views.

    >>> db = Database.from_url('http://localhost:5984/python-tests')
    >>> result = db.query(ViewQuery.all_docs(limit=2))
    >>> result.total_rows
    3

    A database executes view queries, so it can be handed to a `Paginator`
    directly; `paginate` does that for you.
    """

    def __init__(self, server, name, check=True):
        self._name = name
        self._server = server
        if check:
            self.check()

    @classmethod
    def from_url(cls, url, **options):
        """
        Initialize a database object from a URL instead of a `Server` object.

        Also works with just a name, in which case the server url defaults to the default URL.
        """
        parsed_url = furl.furl(url)
        if len(parsed_url.path.segments) > 1:
            raise ValueError("URL contains more than one path.")
        db_name = parsed_url.path.segments[0]
        parsed_url.remove(path=True)
        server = Server(url=parsed_url.url or DEFAULT_BASE_URL)
        return cls(server=server, name=db_name, **options)

    @property
    def name(self):
        return self._name

    @property
    def server(self):
        return self._server

    @property
    def path(self):
        return furl.Path(quote(self.name, safe=''))

    def exists(self):
        try:
            self.server.session.head(self.path)
        except exceptions.HTTPNotFound:
            return False
        return True

    def check(self):
        if not self.exists():
            raise exceptions.MissingDatabase(reason="Database does not exist")

    def __repr__(self):
        return '<%s %r>' % (type(self).__name__, self.name)

    def query(self, view_query):
        """Execute a view query and return its result.

        :param view_query: a `ViewQuery`
        :return: the view results
        :rtype: `ViewResult`
        :raise QueryCompilationError: if the query cannot be compiled
        :raise ExecutionError: if the request fails or the response is not a
                               view result
        """
        url = str(self.path.add(view_query.path_segments))
        query_string = view_query.compile()
        if query_string:
            url = '%s?%s' % (url, query_string)
        logger.debug("GET %s", url)
        try:
            resp = self.server.session.get(url)
        except exceptions.HTTPNotFound as exc:
            if exc.reason == 'Database does not exist.':
                raise exceptions.MissingDatabase(exc.error, exc.reason) from exc
            raise exceptions.MissingView(exc.error, exc.reason) from exc
        try:
            data = resp.json()
        except ValueError as exc:
            raise exceptions.MalformedResponse("View response is not JSON") from exc
        return ViewResult(data, view_query)

    def view(self, name, **options):
        """Execute a predefined view.

        :param name: the name of the view; for custom views, use the format
                     ``design_docid/viewname``, that is, the document ID of the
                     design document and the name of the view, separated by a
                     slash
        :param options: optional query parameters, see `ViewQuery`
        :return: the view results
        :rtype: `ViewResult`
        """
        return self.query(ViewQuery.from_name(name, **options))

    def paginate(self, query, page_size=paging.DEFAULT_PAGE_SIZE, row_parser=None, **options):
        """Page through the results of a view.

        :param query: a `ViewQuery`, or a view name as accepted by `view`
        :param page_size: number of rows per page
        :param row_parser: optional callable used by `Page.parse_rows`
        :param options: query parameters; with a `ViewQuery` they override
                        its options
        :rtype: `Paginator`
        """
        if isinstance(query, str):
            query = ViewQuery.from_name(query, **options)
        elif options:
            query = query.clone(**options)
        return paging.Paginator(self, query, page_size=page_size, row_parser=row_parser)

    def iterview(self, name, batch, wrapper=None, **options):
        """Iterate the rows in a view, fetching rows in batches and yielding
        one row at a time.

        Since the view's rows are fetched in batches any rows emitted for
        documents added, changed or deleted between requests may be missed or
        repeated.

        :param name: the name of the view; for custom views, use the format
                     ``design_docid/viewname``, that is, the document ID of the
                     design document and the name of the view, separated by a
                     slash.
        :param batch: number of rows to fetch per HTTP request.
        :param wrapper: an optional callable that should be used to wrap the
                        result rows
        :param options: optional query parameters
        :return: row generator
        """
        pages = self.paginate(name, page_size=batch, **options)
        for row in pages.iterrows():
            yield wrapper(row) if wrapper is not None else row
