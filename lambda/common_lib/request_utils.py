import base64
import binascii
import json

from exceptions import MalformedPayloadError


class RawTextPayload:
    """Payload that arrived as a JSON string and still needs decoding"""

    def __init__(self, text, base64_encoded=False):
        self.text = text
        self.base64_encoded = base64_encoded

    def decode(self):
        text = self.text
        try:
            if self.base64_encoded:
                text = base64.b64decode(text, validate=True).decode('utf-8')
            data = json.loads(text)
        except (binascii.Error, UnicodeDecodeError, json.JSONDecodeError, TypeError):
            raise MalformedPayloadError()
        if not isinstance(data, dict):
            raise MalformedPayloadError()
        return data


class StructuredPayload:
    """Payload that is already a mapping (direct invocation or pre-parsed body)"""

    def __init__(self, data):
        self.data = data

    def decode(self):
        return dict(self.data)


def resolve_payload(event):
    """
    Work out which kind of payload an invocation carries

    API Gateway events put the request in 'body'. Direct invocations
    (console tests, SDK invoke) pass the appointment fields as the event itself.
    """
    if isinstance(event, (str, bytes)):
        return RawTextPayload(event)

    if not isinstance(event, dict):
        raise MalformedPayloadError()

    body = event.get('body')
    if body:
        if isinstance(body, dict):
            return StructuredPayload(body)
        return RawTextPayload(body, base64_encoded=bool(event.get('isBase64Encoded')))

    return StructuredPayload(event)


def get_request_payload(event):
    return resolve_payload(event).decode()


def get_request_id(context):
    return getattr(context, 'aws_request_id', None)
