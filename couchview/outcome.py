# -*- coding: utf-8 -*-
#
# Copyright (C) 2007-2009 Christopher Lenz
# All rights reserved.
#
# This software is licensed as described in the file COPYING, which
# you should have received as part of this distribution.

"""Explicit success and failure values.

Callers that would rather branch on a value than catch exceptions can wrap a
call with `attempt`:

>>> outcome = attempt(query.compile)
>>> if outcome.ok:
...     print(outcome.value)
... elif outcome.kind == 'compilation':
...     print('bad key: %s' % outcome.error)

Only library errors (`CouchDBException` and its subclasses) are turned into
`Failure` values; anything else still propagates.
"""
import collections

from couchview import exceptions

__all__ = ['Success', 'Failure', 'attempt']


class Success(collections.namedtuple('Success', ['value'])):
    __slots__ = ()

    ok = True
    kind = None

    @property
    def error(self):
        return None


class Failure(collections.namedtuple('Failure', ['error'])):
    __slots__ = ()

    ok = False

    @property
    def value(self):
        return None

    @property
    def kind(self):
        """One of ``'compilation'``, ``'execution'`` or ``'usage'``."""
        return self.error.kind


def attempt(func, *args, **kwargs):
    """Call `func` and wrap its return value or library error."""
    try:
        return Success(func(*args, **kwargs))
    except exceptions.CouchDBException as exc:
        return Failure(exc)
