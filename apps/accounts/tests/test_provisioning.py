"""
Provisioning Client Tests
=========================

The remote client is exercised against a mocked requests.post.

Run tests:
    python manage.py test apps.accounts.tests.test_provisioning
"""

from unittest import mock

import requests
from django.contrib.auth import get_user_model
from django.test import SimpleTestCase, TestCase, override_settings

from apps.accounts.provisioning import (
    LocalProvisioningClient,
    ProvisioningError,
    RemoteProvisioningClient,
    get_provisioning_client,
)


PAYLOAD = {'email': 'rep@tvs.test', 'password': 'secret1', 'full_name': 'Rep', 'role': 'salesman'}


def fake_response(status_code, data=None, text=''):
    response = mock.Mock()
    response.status_code = status_code
    response.text = text
    if data is None:
        response.json.side_effect = ValueError('No JSON')
    else:
        response.json.return_value = data
    return response


class RemoteProvisioningClientTest(SimpleTestCase):

    def setUp(self):
        self.client_ = RemoteProvisioningClient(url='https://functions.example.test/create-user', timeout=5)

    @mock.patch('apps.accounts.provisioning.requests.post')
    def test_success_returns_payload(self, post):
        post.return_value = fake_response(200, {'user': {'id': 'u-1', 'email': 'rep@tvs.test'}})

        data = self.client_.create_user(PAYLOAD, 'session-token')

        self.assertEqual(data['user']['id'], 'u-1')
        _, kwargs = post.call_args
        self.assertEqual(kwargs['json'], PAYLOAD)
        self.assertEqual(kwargs['headers']['Authorization'], 'Bearer session-token')
        self.assertEqual(kwargs['timeout'], 5)

    @mock.patch('apps.accounts.provisioning.requests.post')
    def test_error_status_raises_with_server_message(self, post):
        post.return_value = fake_response(400, {'error': 'Only admins can create users'})

        with self.assertRaisesMessage(ProvisioningError, 'Only admins can create users'):
            self.client_.create_user(PAYLOAD, 'session-token')

    @mock.patch('apps.accounts.provisioning.requests.post')
    def test_error_in_success_body_raises(self, post):
        post.return_value = fake_response(200, {'error': 'A user with this email address has already been registered'})

        with self.assertRaisesMessage(ProvisioningError, 'already been registered'):
            self.client_.create_user(PAYLOAD, 'session-token')

    @mock.patch('apps.accounts.provisioning.requests.post')
    def test_non_json_error_uses_text(self, post):
        post.return_value = fake_response(502, text='Bad Gateway')

        with self.assertRaisesMessage(ProvisioningError, 'Bad Gateway'):
            self.client_.create_user(PAYLOAD, 'session-token')

    @mock.patch('apps.accounts.provisioning.requests.post')
    def test_timeout(self, post):
        post.side_effect = requests.exceptions.Timeout()

        with self.assertRaisesMessage(ProvisioningError, 'Request timeout'):
            self.client_.create_user(PAYLOAD, 'session-token')

    @mock.patch('apps.accounts.provisioning.requests.post')
    def test_connection_error(self, post):
        post.side_effect = requests.exceptions.ConnectionError()

        with self.assertRaisesMessage(ProvisioningError, 'Connection error'):
            self.client_.create_user(PAYLOAD, 'session-token')

    @mock.patch('apps.accounts.provisioning.requests.post')
    def test_missing_url_makes_no_request(self, post):
        with override_settings(USER_PROVISIONING_URL=''):
            client = RemoteProvisioningClient()
            with self.assertRaises(ProvisioningError):
                client.create_user(PAYLOAD, 'session-token')
        post.assert_not_called()


class ProvisioningClientSelectionTest(SimpleTestCase):

    @override_settings(USER_PROVISIONING_CLIENT='apps.accounts.provisioning.LocalProvisioningClient')
    def test_local_client(self):
        self.assertIsInstance(get_provisioning_client(), LocalProvisioningClient)

    @override_settings(
        USER_PROVISIONING_CLIENT='apps.accounts.provisioning.RemoteProvisioningClient',
        USER_PROVISIONING_URL='https://functions.example.test/create-user',
    )
    def test_remote_client(self):
        client = get_provisioning_client()
        self.assertIsInstance(client, RemoteProvisioningClient)
        self.assertEqual(client.url, 'https://functions.example.test/create-user')


class LocalProvisioningClientTest(TestCase):

    def setUp(self):
        self.client_ = LocalProvisioningClient()

    def test_creates_account(self):
        data = self.client_.create_user(PAYLOAD, None)

        self.assertEqual(data['user']['email'], 'rep@tvs.test')
        self.assertEqual(data['user']['role'], 'salesman')

    def test_unknown_role_refused(self):
        with self.assertRaisesMessage(ProvisioningError, 'Invalid role: overlord'):
            self.client_.create_user(dict(PAYLOAD, role='overlord'), None)

        self.assertFalse(get_user_model().objects.filter(email='rep@tvs.test').exists())

    def test_empty_email_refused(self):
        with self.assertRaisesMessage(ProvisioningError, 'Users must have an email address'):
            self.client_.create_user(dict(PAYLOAD, email=''), None)
