from datetime import timedelta

import jwt
import pytest

from chalicelib.constants.status_codes import http200, http400, http401
from chalicelib.utils import auth as utils_auth, exceptions
from chalicelib.utils.data import utc_now
from tests.utils.fixtures import fake_table, db, ses_client, app_context, admin_env, chalice_client, admin_token, \
    TEST_ADMIN_USERNAME, TEST_ADMIN_PASSWORD, TEST_JWT_SECRET
from tests.utils.request_utils import make_request


def sign(claims, secret=TEST_JWT_SECRET):
    return jwt.encode(claims, secret, algorithm='HS256')


def test_login(chalice_client):
    response = make_request(chalice_client, endpoint='/api/auth/login', method='POST',
                            json_body={'username': TEST_ADMIN_USERNAME, 'password': TEST_ADMIN_PASSWORD})
    assert response.status_code == http200
    body = response.json_body
    assert body['message'] == 'Login successful'
    assert body['data']['expiresIn'] == 720 * 60
    claims = jwt.decode(body['data']['token'], TEST_JWT_SECRET, algorithms=['HS256'])
    assert claims['sub'] == TEST_ADMIN_USERNAME
    assert claims['role'] == 'admin'


@pytest.mark.parametrize('credentials', [
    {'username': TEST_ADMIN_USERNAME, 'password': 'wrong-password'},
    {'username': 'root', 'password': TEST_ADMIN_PASSWORD},
])
def test_login_wrong_credentials(chalice_client, credentials):
    response = make_request(chalice_client, endpoint='/api/auth/login', method='POST', json_body=credentials)
    assert response.status_code == http401
    assert response.json_body['message'] == 'Invalid credentials'
    assert 'data' not in response.json_body


@pytest.mark.parametrize('credentials', [
    {},
    {'username': TEST_ADMIN_USERNAME},
    {'username': '', 'password': TEST_ADMIN_PASSWORD},
    {'username': TEST_ADMIN_USERNAME, 'password': 12345},
])
def test_login_missing_fields(chalice_client, credentials):
    response = make_request(chalice_client, endpoint='/api/auth/login', method='POST', json_body=credentials)
    assert response.status_code == http400
    assert response.json_body['message'] == 'Username and password are required'


def test_login_disabled_without_configured_password(chalice_client, monkeypatch):
    monkeypatch.delenv('ADMIN_PASSWORD')
    assert not utils_auth.check_admin_credentials(TEST_ADMIN_USERNAME, TEST_ADMIN_PASSWORD)


def test_unset_secret_rejects_tokens(chalice_client, monkeypatch):
    monkeypatch.delenv('JWT_SECRET_KEY')
    forged = sign({'sub': 'intruder', 'role': 'admin', 'exp': utc_now() + timedelta(minutes=5)},
                  secret='CHANGE_ME_IN_PRODUCTION')
    response = make_request(chalice_client, endpoint='/api/orders', token=forged)
    assert response.status_code == http401
    assert response.json_body['message'] == 'Admin authentication is not configured'

    with pytest.raises(exceptions.NotAuthorizedException):
        utils_auth.create_access_token(TEST_ADMIN_USERNAME)


def test_unset_secret_disables_login(chalice_client, monkeypatch):
    monkeypatch.delenv('JWT_SECRET_KEY')
    response = make_request(chalice_client, endpoint='/api/auth/login', method='POST',
                            json_body={'username': TEST_ADMIN_USERNAME, 'password': TEST_ADMIN_PASSWORD})
    assert response.status_code == http401
    assert 'data' not in response.json_body


def test_verify(chalice_client, admin_token):
    response = make_request(chalice_client, endpoint='/api/auth/verify', token=admin_token)
    assert response.status_code == http200
    data = response.json_body['data']
    assert data['username'] == TEST_ADMIN_USERNAME
    assert data['role'] == 'admin'
    assert data['expiresAt'] > utc_now().timestamp()


def test_verify_without_token(chalice_client):
    response = make_request(chalice_client, endpoint='/api/auth/verify')
    assert response.status_code == http401
    assert response.json_body['exception'] == 'NotAuthorizedException'
    assert response.json_body['message'] == 'Authorization token is missing'


@pytest.mark.parametrize('token, message', [
    (sign({'sub': 'admin', 'role': 'admin', 'exp': utc_now() - timedelta(minutes=1)}), 'Token has expired'),
    (sign({'sub': 'admin', 'role': 'admin', 'exp': utc_now() + timedelta(minutes=5)}, secret='other-secret'),
     'Invalid token'),
    (sign({'sub': 'guest', 'role': 'customer', 'exp': utc_now() + timedelta(minutes=5)}), 'Admin access required'),
    ('garbage', 'Invalid token'),
])
def test_verify_rejected_tokens(chalice_client, token, message):
    response = make_request(chalice_client, endpoint='/api/auth/verify', token=token)
    assert response.status_code == http401
    assert response.json_body['message'] == message


def test_decode_access_token_round_trip(admin_env):
    token = utils_auth.create_access_token(TEST_ADMIN_USERNAME)['token']
    assert utils_auth.decode_access_token(token)['sub'] == TEST_ADMIN_USERNAME
    with pytest.raises(exceptions.NotAuthorizedException):
        utils_auth.decode_access_token(token + 'x')
