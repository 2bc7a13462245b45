"""Classification of non-success REST responses.

The exchange reports errors in two envelope shapes depending on endpoint
generation. Classification tries them in a fixed order:

1. v2 ``{"status", "reason", "code"}`` -> ProtocolErrorV2
2. v1 ``{"error"}``                     -> ProtocolErrorV1
3. anything else                        -> ProtocolStatusError
"""
import json

from pydantic import ValidationError

from .exceptions import (
    ProtocolError,
    ProtocolErrorV1,
    ProtocolErrorV2,
    ProtocolStatusError,
)
from .logging_setup import logger
from .models import V1ErrorEnvelope, V2ErrorEnvelope


def is_success(status: int) -> bool:
    return 200 <= status < 300


def classify_error_response(status: int, body: str) -> ProtocolError:
    """Map a non-success status and its body to a ProtocolError.

    Args:
        status: HTTP status code
        body: Full response body text

    Returns:
        The exception to raise (not raised here)
    """
    try:
        payload = json.loads(body) if body else None
    except ValueError:
        payload = None

    if isinstance(payload, dict):
        try:
            v2 = V2ErrorEnvelope.model_validate(payload)
            logger.debug(f"Request failed with v2 error: {v2}")
            return ProtocolErrorV2(status, v2.reason, v2.code)
        except ValidationError:
            pass
        try:
            v1 = V1ErrorEnvelope.model_validate(payload)
            logger.debug(f"Request failed with v1 error: {v1}")
            return ProtocolErrorV1(status, v1.error)
        except ValidationError:
            pass

    return ProtocolStatusError(status)
