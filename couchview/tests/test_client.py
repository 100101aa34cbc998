# -*- coding: utf-8 -*-

import json
import unittest
from unittest import mock

import requests
import requests.exceptions

from couchview import client, exceptions
from couchview.query import ViewQuery


def _response(status_code=200, body=None, content=None, reason='OK'):
    resp = requests.models.Response()
    resp.status_code = status_code
    resp.reason = reason
    resp.url = 'http://localhost:5984/'
    if content is None:
        content = json.dumps(body).encode('utf-8')
    resp._content = content
    return resp


def _view_body(rows, total_rows=None, offset=0):
    body = {'rows': rows}
    if total_rows is not None:
        body.update(total_rows=total_rows, offset=offset)
    return body


class SessionTestCase(unittest.TestCase):

    def setUp(self):
        self.session = client.Session(base_url='http://localhost:5984/')
        patcher = mock.patch.object(self.session._base_session, 'request')
        self.request = patcher.start()
        self.addCleanup(patcher.stop)

    def test_success(self):
        self.request.return_value = _response(body={'version': '3.3.2'})
        resp = self.session.get('/')
        self.assertEqual(resp.json(), {'version': '3.3.2'})
        self.request.assert_called_once_with('GET', '/')

    def test_http_error_carries_server_reason(self):
        self.request.return_value = _response(
            404, body={'error': 'not_found', 'reason': 'missing_named_view'}, reason='Object Not Found')
        with self.assertRaises(exceptions.HTTPNotFound) as ctx:
            self.session.get('db/_design/d/_view/v')
        self.assertEqual(ctx.exception.error, 'not_found')
        self.assertEqual(ctx.exception.reason, 'missing_named_view')
        self.assertEqual(ctx.exception.status_code, 404)
        self.assertIsInstance(ctx.exception.__cause__, requests.exceptions.HTTPError)

    def test_http_error_without_json_body(self):
        self.request.return_value = _response(502, content=b'<html>Bad Gateway</html>', reason='Bad Gateway')
        with self.assertRaises(exceptions.HTTPError) as ctx:
            self.session.get('db')
        self.assertEqual(ctx.exception.status_code, 502)
        self.assertIsNone(ctx.exception.error)
        self.assertEqual(ctx.exception.reason, 'Bad Gateway')

    def test_timeout(self):
        self.request.side_effect = requests.exceptions.ReadTimeout('too slow')
        with self.assertRaises(exceptions.Timeout):
            self.session.get('db')

    def test_connection_error(self):
        self.request.side_effect = requests.exceptions.ConnectionError('refused')
        with self.assertRaises(exceptions.RequestsException) as ctx:
            self.session.get('db')
        self.assertEqual(ctx.exception.kind, 'execution')

    def test_base_url(self):
        self.session.base_url = 'http://example.com:5984/'
        self.assertEqual(self.session.base_url, 'http://example.com:5984/')


class DatabaseTestCase(unittest.TestCase):

    def setUp(self):
        self.session = mock.Mock()
        self.server = client.Server('http://localhost:5984/', session=self.session)
        self.db = client.Database(self.server, 'people', check=False)

    def _urls(self):
        return [call[0][0] for call in self.session.get.call_args_list]

    def test_query_url(self):
        self.session.get.return_value = _response(body=_view_body([], total_rows=0))
        self.db.query(ViewQuery('people', 'by_name', startkey='M', limit=3))
        self.assertEqual(self._urls(), ['people/_design/people/_view/by_name?startkey=%22M%22&limit=3&reduce=false'])

    def test_query_builtin_view(self):
        self.session.get.return_value = _response(body=_view_body(
            [{'id': 'a', 'key': 'a', 'value': {'rev': '1-x'}}], total_rows=1))
        result = self.db.query(ViewQuery.all_docs(reduce=None))
        self.assertEqual(self._urls(), ['people/_all_docs'])
        self.assertEqual(result.total_rows, 1)
        self.assertEqual(result.rows()[0].value, {'rev': '1-x'})

    def test_view(self):
        self.session.get.return_value = _response(body=_view_body([{'key': 'M', 'value': 4}]))
        result = self.db.view('people/by_name', group=True, reduce=True)
        self.assertEqual(self._urls(), ['people/_design/people/_view/by_name?group=true&reduce=true'])
        self.assertEqual(result.rows()[0].id, None)

    def test_missing_view(self):
        self.session.get.side_effect = exceptions.HTTPNotFound('not_found', 'missing_named_view')
        with self.assertRaises(exceptions.MissingView) as ctx:
            self.db.view('people/nope')
        self.assertEqual(ctx.exception.reason, 'missing_named_view')

    def test_missing_database(self):
        self.session.get.side_effect = exceptions.HTTPNotFound('not_found', 'Database does not exist.')
        with self.assertRaises(exceptions.MissingDatabase):
            self.db.view('_all_docs')

    def test_malformed_response(self):
        self.session.get.return_value = _response(content=b'not json')
        with self.assertRaises(exceptions.MalformedResponse):
            self.db.view('_all_docs')
        self.session.get.return_value = _response(body={'ok': True})
        with self.assertRaises(exceptions.MalformedResponse):
            self.db.view('_all_docs')

    def test_compilation_error_before_request(self):
        with self.assertRaises(exceptions.QueryCompilationError):
            self.db.query(ViewQuery('people', 'by_name', startkey=object()))
        self.session.get.assert_not_called()

    def test_paginate(self):
        self.session.get.side_effect = [
            _response(body=_view_body([
                {'id': 'a', 'key': 1, 'value': None},
                {'id': 'b', 'key': 1, 'value': None},
                {'id': 'c', 'key': 2, 'value': None},
            ], total_rows=3)),
            _response(body=_view_body([{'id': 'c', 'key': 2, 'value': None}], total_rows=3, offset=2)),
        ]
        pages = list(self.db.paginate('people/by_age', page_size=2, endkey=5))
        self.assertEqual([[row.id for row in page] for page in pages], [['a', 'b'], ['c']])
        self.assertEqual(self._urls(), [
            'people/_design/people/_view/by_age?endkey=5&limit=3&reduce=false',
            'people/_design/people/_view/by_age?startkey=2&startkey_docid=c&endkey=5&limit=3&reduce=false',
        ])

    def test_paginate_with_query(self):
        query = ViewQuery('people', 'by_age', descending=True)
        paginator = self.db.paginate(query, page_size=10, include_docs=True)
        self.assertTrue(paginator.query.descending)
        self.assertTrue(paginator.query.include_docs)
        self.assertIsNone(query.include_docs)
        self.assertIs(self.db.paginate(query).query, query)

    def test_paginate_rejects_bad_page_size(self):
        with self.assertRaises(exceptions.UsageError):
            self.db.paginate('people/by_age', page_size=0)
        self.session.get.assert_not_called()

    def test_iterview(self):
        self.session.get.side_effect = [
            _response(body=_view_body([{'id': str(i), 'key': i, 'value': i * 10} for i in range(3)])),
            _response(body=_view_body([{'id': str(i), 'key': i, 'value': i * 10} for i in range(2, 4)])),
        ]
        values = list(self.db.iterview('people/by_age', 2, wrapper=lambda row: row.value))
        self.assertEqual(values, [0, 10, 20, 30])

    def test_check(self):
        self.session.head.side_effect = exceptions.HTTPNotFound()
        self.assertFalse(self.db.exists())
        with self.assertRaises(exceptions.MissingDatabase):
            client.Database(self.server, 'people')
        with self.assertRaises(exceptions.MissingDatabase):
            self.server['people']

    def test_repr(self):
        self.assertEqual(repr(self.db), "<Database 'people'>")


class ServerTestCase(unittest.TestCase):

    def setUp(self):
        self.session = mock.Mock()
        self.server = client.Server('http://localhost:5984/', session=self.session)

    def test_session_base_url(self):
        self.assertEqual(self.session.base_url, 'http://localhost:5984/')
        self.assertIs(self.server.session, self.session)

    def test_contains(self):
        self.assertIn('people', self.server)
        self.session.head.assert_called_once_with('people')
        self.session.head.side_effect = exceptions.HTTPNotFound()
        self.assertNotIn('nope', self.server)

    def test_version(self):
        self.session.get.return_value = _response(body={'couchdb': 'Welcome', 'version': '3.3.2'})
        self.assertEqual(self.server.version(), '3.3.2')

    def test_getitem(self):
        db = self.server['people']
        self.assertEqual(db.name, 'people')
        self.assertIs(db.server, self.server)


class FromUrlTestCase(unittest.TestCase):

    @mock.patch.object(client.Database, 'check')
    def test_from_url(self, check):
        db = client.Database.from_url('http://example.com:5984/people')
        self.assertEqual(db.name, 'people')
        self.assertTrue(db.server.url.startswith('http://example.com:5984'))
        check.assert_called_once_with()

    def test_from_url_with_nested_path(self):
        with self.assertRaises(ValueError):
            client.Database.from_url('http://example.com:5984/a/b')
