"""
Business logic utilities shared by the Lambda entry points
"""

import functools
import logging

import response_utils as resp
from exceptions import AppointmentError, InternalError

logger = logging.getLogger(__name__)


def handle_business_logic_error(config):
    """
    Decorator that turns raised AppointmentErrors into API responses

    Anything else is reported as an InternalError. Whether diagnostics
    reach the caller is decided by config.expose_error_details; they are
    always logged.
    """
    def decorator(func):
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            try:
                return func(*args, **kwargs)
            except AppointmentError as e:
                logger.info(f"{type(e).__name__} in {func.__name__}: {e.message} (status: {e.status_code})")
                return resp.error_response(e, config.expose_error_details, config.cors_allow_origin)
            except Exception as e:
                logger.exception(f"Unhandled error in {func.__name__}: {str(e)}")
                error = InternalError.from_exception(e)
                return resp.error_response(error, config.expose_error_details, config.cors_allow_origin)
        return wrapper
    return decorator
