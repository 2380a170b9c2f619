"""
Common exceptions used across the appointment intake flow

Every exception knows its HTTP status and how to render its response body.
"""

import json
import traceback

from clock_utils import utc_timestamp


class AppointmentError(Exception):
    """Base class for errors that map to an HTTP response"""
    status_code = 500

    def __init__(self, message, status_code=None):
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        super().__init__(self.message)

    def response_body(self, include_details=True):
        return {"message": self.message}


class ValidationError(AppointmentError):
    """Custom exception for validation errors"""
    status_code = 400

    def __init__(self, message, field=None):
        self.field = field
        super().__init__(message)


class MalformedPayloadError(ValidationError):
    def __init__(self):
        super().__init__("Invalid request body format")


class MissingFieldError(ValidationError):
    def __init__(self, field):
        super().__init__(f"Missing required field: {field}", field)


class InvalidServicesShapeError(ValidationError):
    def __init__(self):
        super().__init__("Services must be a non-empty array", "services")


class InvalidTimestampError(ValidationError):
    def __init__(self):
        super().__init__("Invalid date format for appointmentTime", "appointmentTime")


class BusinessLogicError(AppointmentError):
    """Custom exception for business logic errors"""
    status_code = 400


class SchedulingConflictError(BusinessLogicError):
    status_code = 409

    def __init__(self, location_time_key=None):
        self.location_time_key = location_time_key
        super().__init__("This appointment time is already booked at this location")


class StoreError(AppointmentError):
    """
    A failed round trip to the appointment store

    Carries the store-provided diagnostics so they can be echoed back
    to the caller when error details are exposed.
    """
    status_code = 500
    default_message = "Appointment store error"

    def __init__(self, error, code=None, table_name=None, params=None, message=None):
        self.error = error
        self.code = code
        self.table_name = table_name
        self.params = params
        self.time = utc_timestamp()
        super().__init__(message or self.default_message)

    def response_body(self, include_details=True):
        body = {"message": self.message}
        if include_details:
            body.update({
                "error": self.error,
                "code": self.code,
                "time": self.time,
                "tableName": self.table_name,
                "params": json.dumps(self.params, default=str) if self.params is not None else None
            })
        return body


class StoreQueryError(StoreError):
    default_message = "Could not process appointment request"


class StoreWriteError(StoreError):
    default_message = "Could not create appointment"


class InternalError(AppointmentError):
    """Wraps any exception nobody else classified"""
    status_code = 500

    def __init__(self, error, stack=None):
        self.error = error
        self.stack = stack
        self.time = utc_timestamp()
        super().__init__("Internal server error")

    @classmethod
    def from_exception(cls, exc):
        stack = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
        return cls(str(exc), stack)

    def response_body(self, include_details=True):
        body = {"message": self.message}
        if include_details:
            body.update({
                "error": self.error,
                "stack": self.stack,
                "time": self.time
            })
        return body
