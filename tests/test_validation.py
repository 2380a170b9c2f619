"""
Tests for request decoding and appointment payload validation
"""

import base64
import json
import unittest

import request_utils as req
from exceptions import (
    ValidationError, MalformedPayloadError, MissingFieldError, InvalidServicesShapeError, InvalidTimestampError
)
from validation_utils import AppointmentDataValidator, build_location_time_key

from appointment_fakes import sample_payload


class TestRequestDecoding(unittest.TestCase):

    def test_api_gateway_body_is_decoded(self):
        event = {'body': json.dumps(sample_payload())}
        self.assertEqual(req.get_request_payload(event), sample_payload())

    def test_direct_invocation_uses_event(self):
        self.assertEqual(req.get_request_payload(sample_payload()), sample_payload())

    def test_prepared_body_mapping_is_used_as_is(self):
        self.assertEqual(req.get_request_payload({'body': sample_payload()}), sample_payload())

    def test_raw_string_event_is_decoded(self):
        self.assertIsInstance(req.resolve_payload(json.dumps(sample_payload())), req.RawTextPayload)
        self.assertEqual(req.get_request_payload(json.dumps(sample_payload())), sample_payload())

    def test_base64_body(self):
        encoded = base64.b64encode(json.dumps(sample_payload()).encode('utf-8')).decode('ascii')
        event = {'body': encoded, 'isBase64Encoded': True}
        self.assertEqual(req.get_request_payload(event), sample_payload())

    def test_invalid_json_is_malformed(self):
        with self.assertRaises(MalformedPayloadError) as ctx:
            req.get_request_payload({'body': '{"fullName": "Jane'})
        self.assertEqual(ctx.exception.message, 'Invalid request body format')
        self.assertEqual(ctx.exception.status_code, 400)

    def test_non_object_json_is_malformed(self):
        with self.assertRaises(MalformedPayloadError):
            req.get_request_payload({'body': '["Oil Change"]'})

    def test_bad_base64_is_malformed(self):
        with self.assertRaises(MalformedPayloadError):
            req.get_request_payload({'body': '***', 'isBase64Encoded': True})

    def test_empty_body_falls_back_to_event(self):
        self.assertIsInstance(req.resolve_payload({'body': ''}), req.StructuredPayload)


class TestAppointmentDataValidator(unittest.TestCase):

    def test_valid_payload(self):
        appointment_request = AppointmentDataValidator.validate_appointment_data(sample_payload())
        self.assertEqual(appointment_request.full_name, 'Jane Doe')
        self.assertEqual(appointment_request.services, ['Oil Change', 'Tire Rotation'])
        self.assertEqual(appointment_request.location_time_key, 'Farrish Subaru#2025-04-20T15:30:00Z')
        self.assertEqual(appointment_request.car, 'Subaru Outback')
        self.assertFalse(hasattr(appointment_request, 'scheduled_at'))

    def test_each_missing_field_is_named(self):
        for field in AppointmentDataValidator.REQUIRED_FIELDS:
            payload = sample_payload()
            del payload[field]
            with self.assertRaises(MissingFieldError) as ctx:
                AppointmentDataValidator.validate_appointment_data(payload)
            self.assertEqual(ctx.exception.message, f"Missing required field: {field}")
            self.assertEqual(ctx.exception.field, field)

    def test_first_missing_field_wins(self):
        with self.assertRaises(MissingFieldError) as ctx:
            AppointmentDataValidator.validate_appointment_data({'fullName': 'Jane Doe'})
        self.assertEqual(ctx.exception.field, 'location')

    def test_empty_and_null_values_are_missing(self):
        for value in ['', None]:
            with self.assertRaises(MissingFieldError):
                AppointmentDataValidator.validate_appointment_data(sample_payload(car=value))

    def test_services_must_be_a_list(self):
        with self.assertRaises(InvalidServicesShapeError) as ctx:
            AppointmentDataValidator.validate_appointment_data(sample_payload(services='Oil Change'))
        self.assertEqual(ctx.exception.message, 'Services must be a non-empty array')

    def test_services_must_not_be_empty(self):
        with self.assertRaises(InvalidServicesShapeError):
            AppointmentDataValidator.validate_appointment_data(sample_payload(services=[]))

    def test_services_object_is_rejected(self):
        with self.assertRaises(InvalidServicesShapeError):
            AppointmentDataValidator.validate_appointment_data(sample_payload(services={'name': 'Oil Change'}))

    def test_unparseable_time(self):
        for value in ['not-a-date', '2025-13-45T99:00:00Z', 1745163000]:
            with self.assertRaises(InvalidTimestampError) as ctx:
                AppointmentDataValidator.validate_appointment_data(sample_payload(appointmentTime=value))
            self.assertEqual(ctx.exception.message, 'Invalid date format for appointmentTime')

    def test_text_fields_must_be_strings(self):
        for field, value in [('fullName', 42), ('location', ['Bay 1']), ('car', 2.5), ('car', True)]:
            with self.assertRaises(ValidationError) as ctx:
                AppointmentDataValidator.validate_appointment_data(sample_payload(**{field: value}))
            self.assertEqual(ctx.exception.status_code, 400)
            self.assertEqual(ctx.exception.message, f"{field} must be a string")

    def test_services_must_be_strings(self):
        for services in [['Oil Change', 1.5], ['Oil Change', ''], [{'name': 'Oil Change'}]]:
            with self.assertRaises(ValidationError) as ctx:
                AppointmentDataValidator.validate_appointment_data(sample_payload(services=services))
            self.assertEqual(ctx.exception.message, 'Each service must be a non-empty string')

    def test_services_checked_before_time(self):
        with self.assertRaises(InvalidServicesShapeError):
            AppointmentDataValidator.validate_appointment_data(
                sample_payload(services=[], appointmentTime='not-a-date'))

    def test_alternate_time_layouts(self):
        for value in ['2025-04-20 15:30', '2025-04-20T15:30:00+02:00', '2025-04-20',
                      'Sun, 20 Apr 2025 15:30:00 GMT']:
            appointment_request = AppointmentDataValidator.validate_appointment_data(
                sample_payload(appointmentTime=value))
            self.assertEqual(appointment_request.appointment_time, value)

    def test_key_uses_raw_time_string(self):
        self.assertEqual(build_location_time_key('Bay 1', '2025-04-20 15:30'), 'Bay 1#2025-04-20 15:30')
        self.assertNotEqual(build_location_time_key('Bay 1', '2025-04-20T15:30:00Z'),
                            build_location_time_key('Bay 1', '2025-04-20T15:30:00.000Z'))


if __name__ == '__main__':
    unittest.main()
