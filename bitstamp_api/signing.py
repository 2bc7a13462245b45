"""Request signing for private (authenticated) Bitstamp REST calls.

A private call is authenticated by an HMAC-SHA256 over a canonical message:

    "BITSTAMP <key>" + METHOD + url + content_type + nonce + timestamp + "v2" + body

where ``url`` is host and path without the scheme. The field order is the
wire contract; a single byte of difference yields a signature the exchange
rejects.

Examples:
    >>> msg = build_canonical_message(
    ...     "k", "POST", "www.bitstamp.net/api/v2/balance/",
    ...     CONTENT_TYPE, "n", "t", '{"offset":"1"}',
    ... )
    >>> msg
    'BITSTAMP kPOSTwww.bitstamp.net/api/v2/balance/application/x-www-form-urlencodedntv2{"offset":"1"}'
"""
import hashlib
import hmac
import time
import uuid
from dataclasses import dataclass, field
from typing import Dict, Optional

AUTH_SCHEME = "BITSTAMP"
API_VERSION = "v2"
CONTENT_TYPE = "application/x-www-form-urlencoded"


def auth_header_value(api_key: str) -> str:
    """Value of the ``X-Auth`` header for ``api_key``."""
    return f"{AUTH_SCHEME} {api_key}"


def _new_nonce() -> str:
    return str(uuid.uuid4())


def _now_millis() -> str:
    return str(int(time.time() * 1000))


@dataclass(frozen=True)
class SignedRequestContext:
    """Per-call signing inputs. Build a fresh one for every private request.

    Attributes:
        nonce: Single-use random value (UUID4)
        timestamp: Epoch milliseconds captured at signing time
        version: API version tag, part of the signed message
        content_type: Signed and also sent as the Content-Type header
    """
    nonce: str = field(default_factory=_new_nonce)
    timestamp: str = field(default_factory=_now_millis)
    version: str = API_VERSION
    content_type: str = CONTENT_TYPE


def build_canonical_message(
    api_key: str,
    method: str,
    url: str,
    content_type: str,
    nonce: str,
    timestamp: str,
    body: str = "",
    version: str = API_VERSION,
) -> str:
    """Build the exact string that is HMAC-signed for a private call.

    Args:
        api_key: Public API key (sent in clear inside the X-Auth value)
        method: HTTP method; uppercased here
        url: Request URL without scheme, e.g. ``www.bitstamp.net/api/v2/balance/``
        content_type: Content type that will also be sent as a header
        nonce: Request nonce
        timestamp: Epoch milliseconds as a string
        body: Serialized request body, empty for bodiless calls
        version: API version tag

    Returns:
        The canonical message
    """
    return (
        auth_header_value(api_key)
        + method.upper()
        + url
        + content_type
        + nonce
        + timestamp
        + version
        + body
    )


def sign(secret: str, message: str) -> str:
    """HMAC-SHA256 of ``message`` keyed by the raw ``secret`` bytes, lowercase hex."""
    mac = hmac.new(secret.encode("utf-8"), message.encode("utf-8"), hashlib.sha256)
    return mac.hexdigest()


def sign_request(
    api_key: str,
    secret: str,
    method: str,
    url: str,
    body: str = "",
    context: Optional[SignedRequestContext] = None,
) -> Dict[str, str]:
    """Sign a private request and return the headers to attach to it.

    The content type is taken once from ``context`` and used both in the
    signed message and in the returned ``Content-Type`` header.

    Args:
        api_key: Public API key
        secret: API secret; never transmitted
        method: HTTP method
        url: Request URL without scheme
        body: Serialized body exactly as it will be sent
        context: Nonce/timestamp to use; a fresh one is generated if omitted

    Returns:
        Dict of X-Auth-* and Content-Type headers
    """
    if not api_key or not secret:
        raise ValueError("API key and secret are required for private endpoints")
    ctx = context or SignedRequestContext()
    auth = auth_header_value(api_key)
    message = build_canonical_message(
        api_key, method, url, ctx.content_type, ctx.nonce, ctx.timestamp, body, ctx.version
    )
    return {
        "X-Auth": auth,
        "X-Auth-Signature": sign(secret, message),
        "X-Auth-Nonce": ctx.nonce,
        "X-Auth-Timestamp": ctx.timestamp,
        "X-Auth-Version": ctx.version,
        "Content-Type": ctx.content_type,
    }
