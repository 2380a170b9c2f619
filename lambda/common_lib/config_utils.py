"""
Configuration for the appointment intake function

Built once when the Lambda process starts and passed explicitly to the
store, the appointment manager and the error handler.
"""

import logging
import os

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

DEFAULT_TABLE_NAME = 'service-appointment-api-dev'
DEFAULT_REGION = 'us-east-1'
DEFAULT_LOCAL_ENDPOINT = 'http://localhost:8000'
DEFAULT_LOCATION_TIME_INDEX = 'locationTimeIndex'
LOCAL_ENV_FILE = '.env.local'

TRUE_VALUES = {'1', 'true', 'yes', 'on'}
LOG_LEVELS = {'CRITICAL', 'FATAL', 'ERROR', 'WARNING', 'WARN', 'INFO', 'DEBUG', 'NOTSET'}


def parse_bool(value, default=False):
    if value is None or value == '':
        return default
    return str(value).strip().lower() in TRUE_VALUES


def parse_log_level(value):
    level = (value or 'INFO').strip().upper()
    if level not in LOG_LEVELS:
        logger.warning(f"Unknown LOG_LEVEL {value!r}, using INFO")
        return 'INFO'
    return level


class AppointmentConfig:
    """Settings for one deployment of the appointment intake function"""

    def __init__(self, table_name=DEFAULT_TABLE_NAME, region=DEFAULT_REGION, endpoint_url=None,
                 location_time_index=DEFAULT_LOCATION_TIME_INDEX, environment='production',
                 is_offline=False, expose_error_details=True, atomic_slot_booking=False,
                 cors_allow_origin=None, log_level='INFO'):
        self.table_name = table_name
        self.region = region
        self.endpoint_url = endpoint_url
        self.location_time_index = location_time_index
        self.environment = environment
        self.is_offline = is_offline
        self.expose_error_details = expose_error_details
        self.atomic_slot_booking = atomic_slot_booking
        self.cors_allow_origin = cors_allow_origin
        self.log_level = log_level

    @classmethod
    def from_env(cls, environ=None):
        """
        Build a config from environment variables

        Args:
            environ (dict): Mapping to read from, defaults to os.environ

        Returns:
            AppointmentConfig
        """
        env = os.environ if environ is None else environ

        is_offline = parse_bool(env.get('IS_OFFLINE'))
        endpoint_url = env.get('DYNAMODB_ENDPOINT') or (DEFAULT_LOCAL_ENDPOINT if is_offline else None)

        return cls(
            table_name=env.get('DYNAMODB_TABLE') or DEFAULT_TABLE_NAME,
            region=env.get('AWS_REGION') or DEFAULT_REGION,
            endpoint_url=endpoint_url,
            location_time_index=env.get('LOCATION_TIME_INDEX') or DEFAULT_LOCATION_TIME_INDEX,
            environment=env.get('ENVIRONMENT') or 'production',
            is_offline=is_offline,
            expose_error_details=parse_bool(env.get('EXPOSE_ERROR_DETAILS'), default=True),
            atomic_slot_booking=parse_bool(env.get('ATOMIC_SLOT_BOOKING')),
            cors_allow_origin=env.get('CORS_ALLOW_ORIGIN') or None,
            log_level=parse_log_level(env.get('LOG_LEVEL'))
        )

    def describe(self):
        """Non-secret summary for startup logging"""
        return {
            'tableName': self.table_name,
            'region': self.region,
            'endpointUrl': self.endpoint_url,
            'environment': self.environment,
            'isOffline': self.is_offline,
            'atomicSlotBooking': self.atomic_slot_booking,
            'lambdaFunctionName': os.environ.get('AWS_LAMBDA_FUNCTION_NAME', 'local')
        }


def load_config(environ=None):
    """Load .env.local outside production, then build the config"""
    env = os.environ if environ is None else environ
    if (env.get('ENVIRONMENT') or 'production') != 'production':
        if load_dotenv(LOCAL_ENV_FILE):
            logger.info(f"Loaded environment overrides from {LOCAL_ENV_FILE}")
    return AppointmentConfig.from_env(env)
