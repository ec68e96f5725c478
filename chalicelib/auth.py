from chalice import Response

from chalicelib.utils import auth as utils_auth, data as utils_data, app as utils_app, exceptions
from chalicelib.utils.logger import logger


@utils_app.request_exception_handler
@utils_app.log_start_finish
def endpoint_login(request) -> Response:
    request_body = utils_data.parse_raw_body(request)
    username, password = request_body.get('username'), request_body.get('password')
    if not isinstance(username, str) or not isinstance(password, str) or not username or not password:
        raise exceptions.MissingFields('Username and password are required')
    if not utils_auth.check_admin_credentials(username, password):
        logger.warning(f'endpoint_login ::: failed login attempt for {username=}')
        raise exceptions.NotAuthorizedException('Invalid credentials')
    logger.info(f'endpoint_login ::: {username=} logged in')
    return utils_app.success_response(data=utils_auth.create_access_token(username), message='Login successful')


@utils_app.request_exception_handler
@utils_auth.authenticate
@utils_app.log_start_finish
def endpoint_verify(request) -> Response:
    claims = request.auth_result['claims']
    return utils_app.success_response(data={
        'username': claims['sub'],
        'role': claims['role'],
        'expiresAt': claims['exp']
    })
