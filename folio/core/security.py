"""
Credential Utilities

Bearer credentials are ``base64("<user_id>:<issued_at_millis>")``. They carry
an identity claim only; there is no signature and no expiry. Issuing them is
handled outside this service, the encoder exists for tooling and tests.
"""

import base64
import binascii
import time


def encode_credential(user_id: str, issued_at: int | None = None) -> str:
    """
    Build a bearer credential for a user.

    Args:
        user_id: User identifier to embed
        issued_at: Issue time in epoch milliseconds (defaults to now)

    Returns:
        Base64 encoded credential string
    """
    if issued_at is None:
        issued_at = int(time.time() * 1000)
    raw = f"{user_id}:{issued_at}".encode()
    return base64.b64encode(raw).decode("ascii")


def decode_credential(token: str | None) -> str | None:
    """
    Extract the user id from a bearer credential.

    Never raises: malformed base64, undecodable bytes or an empty id all
    yield None so the caller can treat the requester as anonymous.

    Args:
        token: Raw credential (without the "Bearer " prefix)

    Returns:
        User id string, or None if the credential is unusable
    """
    if not token:
        return None

    try:
        decoded = base64.b64decode(token, validate=True).decode("utf-8")
    except (binascii.Error, ValueError):
        return None

    user_id = decoded.split(":", 1)[0].strip()
    return user_id or None
