import json
import logging
from decimal import Decimal

logger = logging.getLogger(__name__)

response_headers = {
    "Content-Type": "application/json"
}

cors_headers = {
    "Access-Control-Allow-Headers": "Content-Type,X-Amz-Date,Authorization,X-Api-Key,X-Amz-Security-Token",
    "Access-Control-Allow-Methods": "OPTIONS,POST"
}


def build_headers(cors_allow_origin=None):
    headers = dict(response_headers)
    if cors_allow_origin:
        headers["Access-Control-Allow-Origin"] = cors_allow_origin
        headers.update(cors_headers)
    return headers


def convert_decimal(obj):
    """Convert Decimal objects to int or float for JSON serialization"""
    if isinstance(obj, list):
        return [convert_decimal(i) for i in obj]
    elif isinstance(obj, dict):
        return {k: convert_decimal(v) for k, v in obj.items()}
    elif isinstance(obj, Decimal):
        return int(obj) if obj % 1 == 0 else float(obj)
    return obj


def safe_json_dumps(data):
    """Serialize data to JSON, falling back to a string form on failure"""
    try:
        return json.dumps(convert_decimal(data), default=str)
    except (TypeError, ValueError) as e:
        logger.error(f"JSON serialization error: {str(e)} (data type: {type(data).__name__})")
        return json.dumps({"message": "Serialization failed", "raw_data": str(data)})


def json_response(body, status_code, cors_allow_origin=None):
    return {
        "statusCode": status_code,
        "headers": build_headers(cors_allow_origin),
        "body": safe_json_dumps(body)
    }


def error_response(error, include_details=True, cors_allow_origin=None):
    """Render an AppointmentError as an API Gateway response"""
    logger.warning(f"Error response: {error.message} (status: {error.status_code})")
    return json_response(error.response_body(include_details), error.status_code, cors_allow_origin)


def success_response(data, status_code=200, cors_allow_origin=None):
    logger.info(f"Success response with status {status_code}")
    return json_response(data, status_code, cors_allow_origin)
