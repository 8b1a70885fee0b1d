import unittest
from unittest import mock

import requests
from requests.auth import HTTPBasicAuth

from aduana.client import RegistryClient
from aduana.config import RegistryEndpoint
from aduana.errors import HttpError, NetworkError

from test.data import BASE_URL, CATALOG, RegistryStub


class ClientTest(unittest.TestCase):
    def setUp(self):
        self.stub = RegistryStub()
        self.client = RegistryClient(RegistryEndpoint.create(BASE_URL, user='user', password='secret', timeout=5))
        patcher = mock.patch.object(self.client.session, 'request', side_effect=self.stub)
        self.request = patcher.start()
        self.addCleanup(patcher.stop)

    def test_session_settings(self):
        session = self.client.session
        self.assertEqual(session.auth, HTTPBasicAuth('user', 'secret'))
        self.assertIs(session.verify, True)
        self.assertIn('application/vnd.docker.distribution.manifest.v2+json', session.headers['Accept'])
        self.assertIn('application/vnd.oci.image.manifest.v1+json', session.headers['Accept'])

    def test_request_urls(self):
        self.client.ping()
        self.client.get_catalog()
        self.client.get_tags('alpine')
        self.client.get_manifest('alpine', 'latest')
        self.assertListEqual(self.stub.paths, ['/v2/', '/v2/_catalog', '/v2/alpine/tags/list',
                                               '/v2/alpine/manifests/latest'])
        self.assertTrue(all(call[0] == 'GET' for call in self.stub.calls))

    def test_nested_repository_name(self):
        self.stub.routes['/v2/library/alpine/tags/list'] = {'name': 'library/alpine', 'tags': []}
        self.client.get_tags('library/alpine')
        self.assertListEqual(self.stub.paths, ['/v2/library/alpine/tags/list'])

    def test_timeout_passed(self):
        self.client.get_catalog()
        self.assertEqual(self.request.call_args[1]['timeout'], 5)

    def test_raw_response(self):
        res = self.client.get_catalog()
        self.assertEqual(res.json(), CATALOG)

    def test_not_found(self):
        with self.assertRaises(HttpError) as he:
            self.client.get_tags('missing')
        self.assertEqual(he.exception.status, 404)
        self.assertEqual(he.exception.url, BASE_URL + '/v2/missing/tags/list')

    def test_unauthorized(self):
        self.stub.routes['/v2/_catalog'] = (401, {'errors': [{'code': 'UNAUTHORIZED'}]})
        with self.assertRaises(HttpError) as he:
            self.client.get_catalog()
        self.assertEqual(he.exception.status, 401)

    def test_server_error(self):
        self.stub.routes['/v2/_catalog'] = (503, 'Service Unavailable')
        with self.assertRaises(HttpError) as he:
            self.client.get_catalog()
        self.assertEqual(he.exception.status, 503)

    def test_connection_refused(self):
        self.stub.routes['/v2/_catalog'] = requests.exceptions.ConnectionError('Connection refused')
        with self.assertRaises(NetworkError) as ne:
            self.client.get_catalog()
        self.assertEqual(ne.exception.url, BASE_URL + '/v2/_catalog')

    def test_tls_failure(self):
        self.stub.routes['/v2/_catalog'] = requests.exceptions.SSLError('certificate verify failed')
        with self.assertRaises(NetworkError):
            self.client.get_catalog()

    def test_timeout(self):
        self.stub.routes['/v2/_catalog'] = requests.exceptions.ReadTimeout('Read timed out.')
        with self.assertRaises(NetworkError):
            self.client.get_catalog()
        self.assertEqual(self.request.call_count, 1)

    def test_not_modified(self):
        self.stub.routes['/v2/alpine/manifests/latest'] = (304, None)
        with self.assertRaises(HttpError) as he:
            self.client.get_manifest('alpine', 'latest')
        self.assertEqual(he.exception.status, 304)

    def test_informational_status(self):
        self.stub.routes['/v2/_catalog'] = (102, None)
        with self.assertRaises(HttpError) as he:
            self.client.get_catalog()
        self.assertEqual(he.exception.status, 102)

    def test_close(self):
        with mock.patch.object(self.client.session, 'close') as close:
            self.client.close()
        close.assert_called_once_with()
