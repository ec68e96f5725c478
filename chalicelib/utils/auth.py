import functools
import hmac
from datetime import timedelta
from typing import Dict

import jwt
from chalice.app import Request

from chalicelib.constants.constants import ADMIN_ROLE, JWT_ALGORITHM
from chalicelib.utils import config, exceptions as utils_exceptions
from chalicelib.utils.data import utc_now
from chalicelib.utils.logger import log_request, logger

BEARER_PREFIX = 'bearer '


def get_signing_key() -> str:
    secret_key = config.jwt_secret_key()
    if not secret_key:
        logger.error('get_signing_key ::: JWT_SECRET_KEY is not configured, admin auth is disabled')
        raise utils_exceptions.NotAuthorizedException('Admin authentication is not configured')
    return secret_key


def create_access_token(username: str) -> Dict:
    expires_in = timedelta(minutes=config.jwt_expiration_minutes())
    claims = {
        'sub': username,
        'role': ADMIN_ROLE,
        'iat': utc_now(),
        'exp': utc_now() + expires_in
    }
    token = jwt.encode(claims, get_signing_key(), algorithm=JWT_ALGORITHM)
    return {'token': token, 'expiresIn': int(expires_in.total_seconds())}


def decode_access_token(token: str) -> Dict:
    secret_key = get_signing_key()
    try:
        claims = jwt.decode(token, secret_key, algorithms=[JWT_ALGORITHM])
    except jwt.ExpiredSignatureError:
        raise utils_exceptions.NotAuthorizedException('Token has expired')
    except jwt.InvalidTokenError as error:
        logger.warning(f'decode_access_token ::: invalid token, {error=}')
        raise utils_exceptions.NotAuthorizedException('Invalid token')
    if claims.get('role') != ADMIN_ROLE:
        raise utils_exceptions.NotAuthorizedException('Admin access required')
    return claims


def get_bearer_token(request: Request) -> str:
    header = (request.headers or {}).get('authorization') or ''
    if not header.lower().startswith(BEARER_PREFIX):
        raise utils_exceptions.NotAuthorizedException('Authorization token is missing')
    token = header[len(BEARER_PREFIX):].strip()
    if not token:
        raise utils_exceptions.NotAuthorizedException('Authorization token is missing')
    return token


def check_admin_credentials(username: str, password: str) -> bool:
    expected_password = config.admin_password()
    if not expected_password:
        logger.error('check_admin_credentials ::: ADMIN_PASSWORD is not configured, admin login is disabled')
        return False
    username_ok = hmac.compare_digest(username.encode(), config.admin_username().encode())
    password_ok = hmac.compare_digest(password.encode(), expected_password.encode())
    return username_ok and password_ok


def authenticate(func):
    """
    Wrapper for functions which require admin authentication,
    the request must be the first positional argument
    """

    @functools.wraps(func)
    def result_auth(*args, **kwargs):
        request = args[0]
        log_request(request)
        claims = decode_access_token(get_bearer_token(request))
        setattr(request, 'auth_result', {'username': claims['sub'], 'role': claims['role'], 'claims': claims})
        result = func(*args, **kwargs)
        logger.info(f'authenticate ::: SUCCESS, func.__name__ {func.__name__}')
        return result

    return result_auth
