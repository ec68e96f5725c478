import functools
from typing import Callable, Dict, Optional

from chalice import Response

from chalicelib.constants.status_codes import http200, http500
from chalicelib.utils import config
from chalicelib.utils.exceptions import ApiException
from chalicelib.utils.logger import logger, log_exception

SERVER_ERROR_MESSAGE = 'Server error. Please try again later.'


def error_response(error: Exception, msg: str = "", status_code: int = 400, *args, **kwargs):
    log_exception(error=error, msg=msg, status_code=status_code, *args, **kwargs)
    body = {
        'success': False,
        'message': str(error) if status_code < http500 else SERVER_ERROR_MESSAGE,
        'exception': error.__class__.__name__,
        'error_id': getattr(logger, 'current_request_id'),
        'level': getattr(error, 'LEVEL', 'exception')
    }
    if getattr(error, 'errors', None):
        body['errors'] = error.errors
    # internals of unexpected errors stay hidden in production
    if status_code < http500 or not config.is_production():
        body['error'] = str(error)
    return Response(
        body=body,
        status_code=status_code,
        headers={'Content-Type': 'application/json'}
    )


def success_response(data=None, message: Optional[str] = None, status_code: int = http200,
                     pagination: Optional[Dict] = None) -> Response:
    body = {'success': True}
    if message:
        body['message'] = message
    if data is not None:
        body['data'] = data
    if pagination is not None:
        body['pagination'] = pagination
    return Response(body=body, status_code=status_code, headers={'Content-Type': 'application/json'})


def request_exception_handler(func: Callable):
    @functools.wraps(func)
    def result(*args, **kwargs):
        try:
            logger.info(f'Calling function {func.__name__}')
            return func(*args, **kwargs)
        except ApiException as api_error:
            return error_response(
                error=api_error,
                msg=f'function = {func.__name__} , error = {api_error}',
                status_code=api_error.STATUS_CODE)
        except Exception as exception:
            return error_response(
                error=exception,
                msg=f'function = {func.__name__}, error = {exception}',
                status_code=http500)
    return result


def log_start_finish(func: Callable):
    @functools.wraps(func)
    def result(*args, **kwargs):
        logger.info(f'{func.__name__} ::: started')
        response = func(*args, **kwargs)
        logger.info(f'{func.__name__} ::: finished')
        return response
    return result
