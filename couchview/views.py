# -*- coding: utf-8 -*-
#
# Copyright (C) 2007-2009 Christopher Lenz
# All rights reserved.
#
# This software is licensed as described in the file COPYING, which
# you should have received as part of this distribution.

import collections
from collections.abc import Mapping

from couchview import exceptions

__all__ = ['ViewResult', 'Row']


class Row(collections.namedtuple("Row", ["id", "key", "value", "doc"])):
    """One row of a view result.

    ``id`` is the ID of the document that emitted the row and is `None` for
    rows of reduced views. ``doc`` is only set when the query asked for
    ``include_docs``.
    """
    __slots__ = ()

    @classmethod
    def from_json(cls, raw):
        if not isinstance(raw, Mapping) or "key" not in raw:
            raise exceptions.MalformedResponse("View row has no key: %r" % (raw,))
        return cls(raw.get("id"), raw["key"], raw.get("value"), raw.get("doc"))


class ViewResult(object):
    """Result of view query; contains rows, offset, total_rows.
    Instances of this class are not supposed to be created by client software.

    :param data: the decoded JSON body of the view response
    :param query: the `ViewQuery` that produced it, if known
    :raise MalformedResponse: if `data` has no ``rows`` list
    """

    def __init__(self, data, query=None):
        if not isinstance(data, Mapping) or not isinstance(data.get("rows"), list):
            raise exceptions.MalformedResponse("Response is not a view result")
        self._data = data
        self._query = query
        self._rows = None

    @property
    def query(self):
        return self._query

    @property
    def row_count(self):
        """Number of rows in this response, not across all pages."""
        return len(self._data["rows"])

    def _field(self, name, hint="it is only returned for non-reduced views"):
        if name not in self._data:
            raise exceptions.UsageError("View result has no %r; %s" % (name, hint))
        return self._data[name]

    @property
    def has_totals(self):
        return "total_rows" in self._data and "offset" in self._data

    @property
    def total_rows(self):
        """Total number of rows in the view (non-reduced views only)."""
        return self._field("total_rows")

    @property
    def offset(self):
        """Position of the first returned row in the view (non-reduced views only)."""
        return self._field("offset")

    @property
    def update_seq(self):
        return self._field("update_seq", "the query did not ask for it")

    def rows(self):
        """Return the rows of this response as `Row` instances."""
        if self._rows is None:
            self._rows = [Row.from_json(raw) for raw in self._data["rows"]]
        return list(self._rows)

    def __len__(self):
        return self.row_count

    def __getitem__(self, i):
        return self.rows()[i]

    def __iter__(self):
        return iter(self.rows())

    def __repr__(self):
        return '<%s %d rows>' % (type(self).__name__, self.row_count)

    def json(self):
        "Return data in a JSON-like representation."
        result = dict()
        if self.has_totals:
            result["total_rows"] = self.total_rows
            result["offset"] = self.offset
        result["row_count"] = self.row_count
        return result
