"""
Validation utilities for appointment requests
Turns a decoded payload into a validated AppointmentRequest
"""

from clock_utils import parse_timestamp
from exceptions import (
    ValidationError, MalformedPayloadError, MissingFieldError, InvalidServicesShapeError, InvalidTimestampError
)

LOCATION_TIME_SEPARATOR = '#'


def build_location_time_key(location, appointment_time):
    """Raw concatenation, callers must format appointmentTime consistently"""
    return f"{location}{LOCATION_TIME_SEPARATOR}{appointment_time}"


class AppointmentRequest:
    """A request that passed every validation step"""

    def __init__(self, full_name, location, appointment_time, car, services):
        self.full_name = full_name
        self.location = location
        self.appointment_time = appointment_time
        self.car = car
        self.services = list(services)

    @property
    def location_time_key(self):
        return build_location_time_key(self.location, self.appointment_time)

    def __repr__(self):
        return f"AppointmentRequest(location={self.location!r}, appointment_time={self.appointment_time!r})"


class DataValidator:
    """Common data validation patterns"""

    @staticmethod
    def is_missing(value):
        """
        Absent, null, empty string, false and zero count as missing.
        Empty lists and objects count as present so the shape checks can
        report them precisely.
        """
        if value is None:
            return True
        if isinstance(value, (list, tuple, dict)):
            return False
        return not value

    @staticmethod
    def validate_required_fields(data, required_fields):
        """
        Validate that all required fields are present and not empty

        Args:
            data (dict): Data to validate
            required_fields (list): Field names, checked in order

        Raises:
            MissingFieldError: For the first missing field
        """
        for field in required_fields:
            if DataValidator.is_missing(data.get(field)):
                raise MissingFieldError(field)

    @staticmethod
    def validate_list_not_empty(value):
        if not isinstance(value, (list, tuple)) or len(value) == 0:
            raise InvalidServicesShapeError()
        return True

    @staticmethod
    def validate_text_fields(data, fields):
        for field in fields:
            if not isinstance(data[field], str):
                raise ValidationError(f"{field} must be a string", field)

    @staticmethod
    def validate_services_are_text(services):
        if not all(isinstance(service, str) and service for service in services):
            raise ValidationError("Each service must be a non-empty string", "services")

    @staticmethod
    def validate_timestamp(value):
        parsed = parse_timestamp(value)
        if parsed is None:
            raise InvalidTimestampError()
        return parsed


class AppointmentDataValidator:
    """Appointment request validation"""

    REQUIRED_FIELDS = ['fullName', 'location', 'appointmentTime', 'car', 'services']
    TEXT_FIELDS = ['fullName', 'location', 'car']

    @staticmethod
    def validate_appointment_data(appointment_data):
        """
        Validate a decoded appointment payload

        Checks run in a fixed order: required fields, services shape,
        text field types, then appointmentTime parsing.

        Args:
            appointment_data (dict): Decoded request payload

        Returns:
            AppointmentRequest: The validated request

        Raises:
            ValidationError: On the first failed check
        """
        if not isinstance(appointment_data, dict):
            raise MalformedPayloadError()

        DataValidator.validate_required_fields(appointment_data, AppointmentDataValidator.REQUIRED_FIELDS)
        DataValidator.validate_list_not_empty(appointment_data['services'])
        DataValidator.validate_text_fields(appointment_data, AppointmentDataValidator.TEXT_FIELDS)
        DataValidator.validate_services_are_text(appointment_data['services'])
        DataValidator.validate_timestamp(appointment_data['appointmentTime'])

        return AppointmentRequest(
            full_name=appointment_data['fullName'],
            location=appointment_data['location'],
            appointment_time=appointment_data['appointmentTime'],
            car=appointment_data['car'],
            services=appointment_data['services']
        )
