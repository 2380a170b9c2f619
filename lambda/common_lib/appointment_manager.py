"""
Appointment Management Module
Handles the conflict check and conditional insert for new appointments
"""

import logging
import uuid

from clock_utils import utc_now, format_timestamp
from exceptions import SchedulingConflictError

logger = logging.getLogger(__name__)


def generate_appointment_id():
    return str(uuid.uuid4())


class AppointmentManager:
    """
    Manages appointment creation business logic

    The conflict check and the insert are two separate store round trips.
    Unless the config enables atomic slot booking, two concurrent requests
    for the same slot can both pass the check and both be written.
    """

    def __init__(self, store, config, clock=None, id_generator=None):
        self.store = store
        self.config = config
        self.clock = clock or utc_now
        self.id_generator = id_generator or generate_appointment_id

    def create_appointment(self, appointment_request):
        """
        Complete appointment creation workflow

        Args:
            appointment_request (AppointmentRequest): Validated request

        Returns:
            dict: Success payload with the appointment ID and full record

        Raises:
            SchedulingConflictError: If the slot is already booked
            StoreQueryError: If the conflict check fails
            StoreWriteError: If the insert fails
        """
        location_time_key = appointment_request.location_time_key
        self._ensure_slot_available(location_time_key)

        appointment = self.build_appointment_record(appointment_request)

        if self.config.atomic_slot_booking:
            self.store.put_with_slot_lock(appointment)
        else:
            self.store.put_if_id_absent(appointment)

        return {
            "message": "Appointment created successfully",
            "appointmentId": appointment['id'],
            "appointment": appointment
        }

    def _ensure_slot_available(self, location_time_key):
        existing_appointments = self.store.query_by_location_time_key(location_time_key)
        if existing_appointments:
            logger.info(f"Appointment time conflict: {location_time_key}")
            raise SchedulingConflictError(location_time_key)

    def build_appointment_record(self, appointment_request):
        """Assemble the stored record; createdAt and updatedAt share one clock reading"""
        timestamp = format_timestamp(self.clock())
        return {
            'id': self.id_generator(),
            'fullName': appointment_request.full_name,
            'location': appointment_request.location,
            'appointmentTime': appointment_request.appointment_time,
            'locationTimeKey': appointment_request.location_time_key,
            'car': appointment_request.car,
            'services': list(appointment_request.services),
            'createdAt': timestamp,
            'updatedAt': timestamp
        }
