# -*- coding: utf-8 -*-
#
# Copyright (C) 2007-2009 Christopher Lenz
# All rights reserved.
#
# This software is licensed as described in the file COPYING, which
# you should have received as part of this distribution.

from couchview import exceptions
from couchview.client import Server, Database, Session
from couchview.outcome import Success, Failure, attempt
from couchview.paging import Paginator, PageIterator, Page, DEFAULT_PAGE_SIZE
from couchview.query import ViewQuery, Stale, NULL
from couchview.views import ViewResult, Row

__version__ = '0.1.0'
