import json
import re

import pytest
from django.contrib.auth import get_user_model
from django.core import mail
from django.urls import reverse

from apps.accounts.models import Profile, Role

pytestmark = pytest.mark.django_db

User = get_user_model()


def _post_json(client, name, payload):
    return client.post(reverse(name), data=json.dumps(payload), content_type='application/json')


def _registration(**overrides):
    payload = {
        'username': 'thuytran',
        'email': 'Thuy.Tran@Example.com',
        'password': 'mat-khau-rat-manh-42',
        'full_name': 'Trần Thị Thủy',
        'role': Role.TENANT,
        'phone': '0901234567',
    }
    payload.update(overrides)
    return payload


class TestRegister:
    def test_creates_user_with_profile(self, client):
        response = _post_json(client, 'accounts:register', _registration())

        assert response.status_code == 201
        body = response.json()
        assert body['username'] == 'thuytran'
        assert body['email'] == 'thuy.tran@example.com'
        assert body['role'] == Role.TENANT

        user = User.objects.get(username='thuytran')
        assert user.check_password('mat-khau-rat-manh-42')
        assert user.profile.phone == '0901234567'

    def test_sends_welcome_email(self, client):
        _post_json(client, 'accounts:register', _registration(role=Role.OWNER))

        assert len(mail.outbox) == 1
        message = mail.outbox[0]
        assert message.to == ['thuy.tran@example.com']
        assert 'chủ trọ' in message.body
        assert message.alternatives[0][1] == 'text/html'

    def test_mail_outage_does_not_block_registration(self, client, monkeypatch):
        def _boom(*args, **kwargs):
            raise ConnectionRefusedError('smtp down')
        monkeypatch.setattr('apps.accounts.views.send_welcome_email', _boom)

        response = _post_json(client, 'accounts:register', _registration())

        assert response.status_code == 201
        assert User.objects.filter(username='thuytran').exists()

    def test_duplicate_email(self, client, tenant):
        response = _post_json(client, 'accounts:register', _registration(email=tenant.email.upper()))

        assert response.status_code == 400
        assert 'email' in response.json()['errors']
        assert not User.objects.filter(username='thuytran').exists()

    def test_weak_password(self, client):
        response = _post_json(client, 'accounts:register', _registration(password='123'))

        assert response.status_code == 400
        assert 'password' in response.json()['errors']
        assert not Profile.objects.exists()

    def test_unknown_role(self, client):
        response = _post_json(client, 'accounts:register', _registration(role='Admin'))
        assert response.status_code == 400
        assert 'role' in response.json()['errors']


class TestLogin:
    def test_login_and_logout(self, client, tenant):
        response = _post_json(client, 'accounts:login',
                              {'username': 'tenant', 'password': 's3cret-pass-123'})
        assert response.status_code == 200
        assert response.json()['role'] == Role.TENANT
        assert '_auth_user_id' in client.session

        response = client.post(reverse('accounts:logout'))
        assert response.status_code == 200
        assert '_auth_user_id' not in client.session

    def test_wrong_password(self, client, tenant):
        response = _post_json(client, 'accounts:login', {'username': 'tenant', 'password': 'nope'})
        assert response.status_code == 400
        assert '_auth_user_id' not in client.session


class TestPasswordReset:
    def _reset_link(self, message):
        match = re.search(r'http://frontend\.test/reset-password/([^/\s]+)/([^/\s]+)', message.body)
        assert match, message.body
        return match.group(1), match.group(2)

    def test_full_reset_flow(self, client, tenant):
        response = _post_json(client, 'accounts:password_reset', {'email': tenant.email})
        assert response.status_code == 200
        assert len(mail.outbox) == 1

        uid, token = self._reset_link(mail.outbox[0])
        response = _post_json(client, 'accounts:password_reset_confirm', {
            'uid': uid, 'token': token, 'new_password': 'mot-mat-khau-moi-77',
        })

        assert response.status_code == 200
        tenant.refresh_from_db()
        assert tenant.check_password('mot-mat-khau-moi-77')

    def test_token_is_single_use(self, client, tenant):
        _post_json(client, 'accounts:password_reset', {'email': tenant.email})
        uid, token = self._reset_link(mail.outbox[0])
        payload = {'uid': uid, 'token': token, 'new_password': 'mot-mat-khau-moi-77'}

        assert _post_json(client, 'accounts:password_reset_confirm', payload).status_code == 200
        payload['new_password'] = 'mat-khau-thu-hai-88'
        assert _post_json(client, 'accounts:password_reset_confirm', payload).status_code == 400

    def test_unknown_email_looks_the_same(self, client, tenant):
        known = _post_json(client, 'accounts:password_reset', {'email': tenant.email})
        unknown = _post_json(client, 'accounts:password_reset', {'email': 'ghost@example.com'})

        assert known.status_code == unknown.status_code == 200
        assert known.json() == unknown.json()
        assert len(mail.outbox) == 1

    def test_bad_token(self, client, tenant):
        _post_json(client, 'accounts:password_reset', {'email': tenant.email})
        uid, _ = self._reset_link(mail.outbox[0])

        response = _post_json(client, 'accounts:password_reset_confirm', {
            'uid': uid, 'token': 'abc-123', 'new_password': 'mot-mat-khau-moi-77',
        })
        assert response.status_code == 400
