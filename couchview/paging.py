# -*- coding: utf-8 -*-
#
# Copyright (C) 2007-2009 Christopher Lenz
# All rights reserved.
#
# This software is licensed as described in the file COPYING, which
# you should have received as part of this distribution.

"""Paging through view results that are too large for a single request.

>>> db = Server()['people']
>>> pages = Paginator(db, ViewQuery('people', 'by_name'), page_size=100)
>>> for page in pages:
...     for row in page:
...         print(row.key)

Each page is fetched with ``limit=page_size + 1``. The extra (lookahead) row
is not handed out with the page; it proves that more rows exist and
supplies the ``(key, id)`` cursor the next request starts from, so it
becomes the first row of the following page. Rows that share a key are
told apart by the ``startkey_docid`` part of the cursor, which is left out
for reduced views since their rows have no document ID.
"""
import logging
import time

from couchview import exceptions, outcome
from couchview.query import NULL

__all__ = ['Paginator', 'PageIterator', 'Page', 'DEFAULT_PAGE_SIZE']

logger = logging.getLogger(__name__)


DEFAULT_PAGE_SIZE = 500


class Page(object):
    """One page of view rows.

    Instances are created by `PageIterator`; client code only reads them.
    """

    def __init__(self, target_page_size, result, rows, row_parser=None):
        #: the requested maximum number of rows
        self.target_page_size = target_page_size
        #: the raw `ViewResult`, including the lookahead row
        self.result = result
        #: rows of this page, at most `target_page_size` of them
        self.rows = rows
        #: the last row the server returned, used to derive the cursor
        self.next_start_row = None
        self.next_start_key = None
        self.next_start_key_docid = None
        self.is_last_page = False
        self.query_duration_ms = None
        self._row_parser = row_parser

    def __len__(self):
        return len(self.rows)

    def __iter__(self):
        return iter(self.rows)

    def __repr__(self):
        return '<%s %d/%d rows%s>' % (type(self).__name__, len(self.rows), self.target_page_size,
                                      ' last' if self.is_last_page else '')

    def parse_rows(self):
        """Convert the rows of this page with the paginator's row parser.

        :raise UsageError: if the paginator was created without a parser
        """
        if self._row_parser is None:
            raise exceptions.UsageError("No row parser was given to the paginator")
        return [self._row_parser(row) for row in self.rows]


class Paginator(object):
    """Iterable over the pages of a view query.

    :param executor: object with a ``query(view_query)`` method returning a
                     `ViewResult`, usually a `Database`
    :param query: the `ViewQuery` to page through; it is never modified
    :param page_size: number of rows per page
    :param row_parser: optional callable applied to rows by `Page.parse_rows`
    :raise UsageError: if `page_size` is not a positive integer
    """

    def __init__(self, executor, query, page_size=DEFAULT_PAGE_SIZE, row_parser=None):
        if isinstance(page_size, bool) or not isinstance(page_size, int) or page_size <= 0:
            raise exceptions.UsageError("page_size must be a positive integer, got %r" % (page_size,))
        self._executor = executor
        self._query = query
        self._page_size = page_size
        self._row_parser = row_parser

    @property
    def query(self):
        return self._query

    @property
    def page_size(self):
        return self._page_size

    def __iter__(self):
        """Start a new pass over the view, from its first row."""
        return PageIterator(self._executor, self._query, self._page_size, self._row_parser)

    def iterrows(self):
        """Iterate over the rows of all pages."""
        for page in self:
            for row in page:
                yield row

    def __repr__(self):
        return '<%s %r page_size=%d>' % (type(self).__name__, self._query, self._page_size)


class PageIterator(object):
    """Forward-only iterator over pages; see `Paginator`.

    A page is fetched only when `has_next` or `next_page` needs it. Not safe
    to advance from several threads at once.
    """

    def __init__(self, executor, query, page_size, row_parser=None):
        self._executor = executor
        self._query = query
        self._page_size = page_size
        self._row_parser = row_parser
        self._previous = None
        self._pending = None

    def _build_query(self, previous):
        query = self._query.clone(limit=self._page_size + 1)
        if previous is not None and previous.next_start_row is not None:
            key = previous.next_start_key
            # skip only applies to the first page
            query = query.clone(startkey=NULL if key is None else key, skip=None)
            if previous.next_start_key_docid is not None and not query.reduce:
                query = query.clone(startkey_docid=previous.next_start_key_docid)
        return query

    def _fetch(self, previous):
        started = time.monotonic()
        query = self._build_query(previous)
        result = self._executor.query(query)
        rows = result.rows()

        page = Page(self._page_size, result, rows, self._row_parser)
        page.is_last_page = result.row_count < self._page_size + 1
        if rows:
            page.next_start_row = rows[-1]
            page.next_start_key = page.next_start_row.key
            page.next_start_key_docid = None if query.reduce else page.next_start_row.id
        if not page.is_last_page:
            del page.rows[-1]
        page.query_duration_ms = (time.monotonic() - started) * 1000.0
        logger.debug("Fetched %d rows of %r in %.1f ms (last page: %s)",
                     result.row_count, query, page.query_duration_ms, page.is_last_page)
        return page

    def has_next(self):
        """Return whether another page is available, fetching it if needed.

        Errors raised while fetching propagate and leave the iterator where
        it was, so calling again retries the same fetch.
        """
        if self._pending is not None:
            return True
        if self._previous is not None and self._previous.is_last_page:
            return False
        page = self._fetch(self._previous)
        if not page.rows and self._previous is not None:
            # The rows behind the cursor disappeared between requests.
            self._previous = page
            return False
        self._pending = page
        return True

    def next_page(self):
        """Return the next page.

        :raise UsageError: if all pages have been returned already
        """
        if not self.has_next():
            raise exceptions.UsageError("No more pages available")
        page = self._pending
        self._previous = page
        self._pending = None
        return page

    def try_next_page(self):
        """Like `next_page`, but return a `Success` or `Failure`."""
        return outcome.attempt(self.next_page)

    def __iter__(self):
        return self

    def __next__(self):
        if not self.has_next():
            raise StopIteration
        return self.next_page()
