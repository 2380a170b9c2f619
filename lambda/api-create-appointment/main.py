import os
import sys
import json
import logging

# Add common_lib to path for imports
sys.path.append(os.path.join(os.path.dirname(__file__), '..', 'common_lib'))

import config_utils as cfg
import response_utils as resp
import request_utils as req
import validation_utils as valid
import business_logic_utils as biz
from db_utils import AppointmentStore, prepare_local_table
from appointment_manager import AppointmentManager

config = cfg.load_config()

# Configure logging
logger = logging.getLogger()
logger.setLevel(config.log_level)

appointment_store = AppointmentStore(config)
prepare_local_table(config, appointment_store)
appointment_manager = AppointmentManager(appointment_store, config)


@biz.handle_business_logic_error(config)
def lambda_handler(event, context):
    """Create a service appointment unless its location/time slot is already booked"""
    logger.info(f"Received request {req.get_request_id(context)}: {json.dumps(event, default=str)}")
    logger.info(f"Environment: {config.describe()}")

    appointment_data = req.get_request_payload(event)
    appointment_request = valid.AppointmentDataValidator.validate_appointment_data(appointment_data)

    result = appointment_manager.create_appointment(appointment_request)

    return resp.success_response(result, cors_allow_origin=config.cors_allow_origin)
