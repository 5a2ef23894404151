import base64
import binascii
import json
from typing import NamedTuple, Optional

from lambda_image_processing.errors import BadEncodingError, BadFormatError


class ProcessingRequest(NamedTuple):
    url: str
    event_id: Optional[str] = None


def decode_request(envelope):
    """
    Decode a message envelope into a ProcessingRequest

    envelope like
    {
        "data": "eyJVcmwiOiAiaHR0cHM6Ly9leGFtcGxlLmNvbS9pbWFnZS5qcGciLCAiRXZlbnRJRCI6ICI0MiJ9"
    }
    where data is the base64 of {"Url": "https://example.com/image.jpg", "EventID": "42"}
    """
    data = envelope.get("data") if isinstance(envelope, dict) else None
    if not isinstance(data, str):
        raise BadEncodingError("Message envelope has no base64 'data' field")

    try:
        payload = base64.b64decode(data, validate=True)
    except (binascii.Error, ValueError) as e:
        raise BadEncodingError(f"Message data is not valid base64: {e}") from e

    try:
        message = json.loads(payload)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise BadFormatError(f"Message payload is not valid JSON: {e}") from e

    if not isinstance(message, dict):
        raise BadFormatError("Message payload must be a JSON object")

    url = _field(message, "Url")
    if not isinstance(url, str) or not url.strip():
        raise BadFormatError("Message payload must contain a non-empty 'Url' string")

    event_id = _field(message, "EventID")
    if event_id is not None and not isinstance(event_id, str):
        raise BadFormatError("'EventID' must be a string")

    return ProcessingRequest(url=url.strip(), event_id=event_id or None)


def _field(message, name):
    """Exact key first, then any key equal to name ignoring case ("url", "eventId", ...)."""
    if name in message:
        return message[name]
    for key, value in message.items():
        if key.lower() == name.lower():
            return value
    return None


def envelopes_from_event(event):
    """Yield the message envelopes carried by a bare, SQS or SNS invocation event."""
    if "Records" not in event:
        yield event
        return

    for record in event["Records"]:
        # SQS wrapper
        if record.get("eventSource") == "aws:sqs":
            yield _load_envelope(record.get("body", "{}"))
        # SNS wrapper
        elif "Sns" in record:
            yield _load_envelope(record["Sns"].get("Message", "{}"))
        else:
            yield record


def _load_envelope(raw):
    if isinstance(raw, dict):
        return raw
    try:
        return json.loads(raw)
    except (json.JSONDecodeError, TypeError) as e:
        raise BadEncodingError(f"Record does not carry a JSON envelope: {e}") from e
