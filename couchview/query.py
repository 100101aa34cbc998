# -*- coding: utf-8 -*-
#
# Copyright (C) 2007-2009 Christopher Lenz
# All rights reserved.
#
# This software is licensed as described in the file COPYING, which
# you should have received as part of this distribution.

"""View queries for CouchDB.

A `ViewQuery` names a view and carries the filter and paging options for one
invocation of it. It compiles to the query string CouchDB expects:

>>> query = ViewQuery('people', 'by_name', startkey='M', limit=10)
>>> query.compile()
'startkey=%22M%22&limit=10&reduce=false'

Queries are treated as values: the paginator advances by cloning rather than
by modifying the query it was given.
"""
import copy
import enum
import json
import logging
from urllib.parse import quote

from couchview import exceptions, outcome

__all__ = ['ViewQuery', 'Stale', 'NULL']

logger = logging.getLogger(__name__)


class _Null(object):
    """A JSON ``null`` key. Plain `None` means the option is not set."""

    def __repr__(self):
        return 'NULL'

    def __copy__(self):
        return self

    def __deepcopy__(self, memo):
        return self


NULL = _Null()


class Stale(enum.Enum):
    #: Return the index as it is, even when it is out of date.
    OK = 'ok'
    #: Return the index as it is, then update it.
    UPDATE_AFTER = 'update_after'


def _jsons(data):
    """Convert data into compact JSON text."""
    return json.dumps(data, ensure_ascii=False, separators=(',', ':'), allow_nan=False)


def _bool_text(value):
    return 'true' if value else 'false'


# Order of this table is the order of the compiled query string.
_FIELDS = [
    ('key', 'json'),
    ('startkey', 'json'),
    ('startkey_docid', 'docid'),
    ('endkey', 'json'),
    ('endkey_docid', 'docid'),
    ('limit', 'int'),
    ('stale', 'stale'),
    ('descending', 'bool'),
    ('skip', 'int'),
    ('group', 'bool'),
    ('group_level', 'int'),
    ('reduce', 'bool'),
    ('include_docs', 'bool'),
    ('inclusive_end', 'bool'),
    ('update_seq', 'bool'),
]
_FIELD_KINDS = dict(_FIELDS)
_DOCID_FIELDS = ('startkey_docid', 'endkey_docid')


def _check_option(name, value):
    """Validate and normalize a single option value."""
    if name not in _FIELD_KINDS:
        raise exceptions.UsageError("Unknown view query option %r" % name)
    if value is None:
        return None
    kind = _FIELD_KINDS[name]
    if kind == 'int':
        if isinstance(value, bool) or not isinstance(value, int):
            raise exceptions.UsageError("%s must be an integer, got %r" % (name, value))
        if value < 0:
            raise exceptions.UsageError("%s must not be negative, got %r" % (name, value))
    elif kind == 'bool':
        if not isinstance(value, bool):
            raise exceptions.UsageError("%s must be a boolean, got %r" % (name, value))
    elif kind == 'docid':
        if not isinstance(value, str):
            raise exceptions.UsageError("%s must be a document ID string, got %r" % (name, value))
    elif kind == 'stale':
        try:
            return Stale(value)
        except ValueError:
            raise exceptions.UsageError("stale must be one of %s, got %r"
                                        % (', '.join(s.value for s in Stale), value))
    return value


class ViewQuery(object):
    """Filter and paging options for one view invocation.

    :param design_doc: the design document name, without the ``_design/``
                       prefix; `None` for the built-in views
    :param view_name: the view name, or a built-in view such as ``_all_docs``
    :param encoder: callable turning a key into JSON text; defaults to a
                    compact `json.dumps`
    :param options: any of ``key``, ``startkey``, ``startkey_docid``,
                    ``endkey``, ``endkey_docid``, ``limit``, ``stale``,
                    ``descending``, ``skip``, ``group``, ``group_level``,
                    ``reduce``, ``include_docs``, ``inclusive_end`` and
                    ``update_seq``. ``reduce`` defaults to `False`.
    :raise UsageError: for unknown options or ill-typed values
    """

    def __init__(self, design_doc=None, view_name=None, encoder=None, **options):
        if view_name is None:
            raise exceptions.UsageError("A view name is required")
        if design_doc is None and not view_name.startswith('_'):
            raise exceptions.UsageError("View %r needs a design document" % view_name)
        self._design_doc = design_doc
        self._view_name = view_name
        self._encoder = encoder or _jsons
        options.setdefault('reduce', False)
        self._options = {}
        for name, _ in _FIELDS:
            self._options[name] = _check_option(name, options.pop(name, None))
        if options:
            raise exceptions.UsageError("Unknown view query options: %s" % ', '.join(sorted(options)))

    @classmethod
    def from_name(cls, name, **options):
        """Build a query from a ``design_docid/viewname`` string or the name
        of a built-in view such as ``_all_docs``.
        """
        if name.startswith('_'):
            return cls(None, name, **options)
        if '/' not in name:
            raise exceptions.UsageError("View name %r is not of the form 'design/view'" % name)
        design_doc, view_name = name.split('/', 1)
        return cls(design_doc, view_name, **options)

    @classmethod
    def all_docs(cls, **options):
        return cls(None, '_all_docs', **options)

    @property
    def design_doc(self):
        return self._design_doc

    @property
    def view_name(self):
        return self._view_name

    @property
    def encoder(self):
        return self._encoder

    @property
    def path_segments(self):
        """Path of the view relative to its database."""
        if self._design_doc is None:
            return [self._view_name]
        return ['_design', self._design_doc, '_view', self._view_name]

    def __getattr__(self, name):
        # Options read as attributes: query.limit, query.startkey, ...
        if name in _FIELD_KINDS:
            return self.__dict__['_options'][name]
        raise AttributeError("%r object has no attribute %r" % (type(self).__name__, name))

    def options(self):
        """Return the options that are set, as a new dictionary."""
        return dict((name, value) for name, value in self._options.items() if value is not None)

    def clone(self, **changes):
        """Return an independent copy, optionally with some options changed.

        Passing an option as `None` unsets it.
        """
        other = copy.copy(self)
        other._options = copy.deepcopy(self._options)
        for name, value in changes.items():
            other._options[name] = _check_option(name, value)
        return other

    def _encode(self, name, value):
        if value is NULL:
            value = None
        try:
            text = self._encoder(value)
        except (TypeError, ValueError) as exc:
            raise exceptions.QueryCompilationError(
                "Failed to convert %s %r to JSON text: %s" % (name, value, exc)) from exc
        return quote(text, safe='')

    def compile(self):
        """Return the query string for this query.

        :raise QueryCompilationError: if a key cannot be encoded as JSON
        """
        if self._options['reduce'] and any(self._options[name] is not None for name in _DOCID_FIELDS):
            logger.warning("Document ID bounds are ignored by reduced views: %r", self)
        parts = []
        for name, kind in _FIELDS:
            value = self._options[name]
            if value is None:
                continue
            if kind == 'json':
                text = self._encode(name, value)
            elif kind == 'docid':
                text = quote(value, safe='')
            elif kind == 'stale':
                text = value.value
            elif kind == 'bool':
                text = _bool_text(value)
            else:
                text = str(value)
            parts.append('%s=%s' % (name, text))
        return '&'.join(parts)

    def try_compile(self):
        """Like `compile`, but return a `Success` or `Failure`."""
        return outcome.attempt(self.compile)

    def __eq__(self, other):
        if not isinstance(other, ViewQuery):
            return NotImplemented
        return (self.path_segments == other.path_segments
                and self._options == other._options
                and self._encoder is other._encoder)

    def __ne__(self, other):
        result = self.__eq__(other)
        if result is NotImplemented:
            return result
        return not result

    __hash__ = None

    def __repr__(self):
        options = ', '.join('%s=%r' % item for item in sorted(self.options().items()))
        return '<%s %r %s>' % (type(self).__name__, '/'.join(self.path_segments), options)
