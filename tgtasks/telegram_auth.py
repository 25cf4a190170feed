"""
Signature check for data sent by the Telegram Login Widget.

https://core.telegram.org/widgets/login#checking-authorization
"""

from __future__ import annotations

import hashlib
import hmac
import logging
from typing import Any, Mapping

from tgtasks.errors import Unauthorized

logger = logging.getLogger(__name__)


def _render_value(value: Any, nested: bool = False) -> str:
    # Same text a JavaScript template literal gives: objects become
    # "[object Object]", arrays are comma-joined, null is "null".
    if value is True:
        return "true"
    if value is False:
        return "false"
    if value is None:
        return "" if nested else "null"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, dict):
        return "[object Object]"
    if isinstance(value, list):
        return ",".join(_render_value(item, nested=True) for item in value)
    return str(value)


def build_check_string(data: Mapping[str, Any]) -> str:
    """
    Build the data-check-string: every field except ``hash``, sorted by key,
    formatted as ``key=value`` and joined with newlines. Values are rendered
    as a JavaScript client renders them, so the check string is the one the
    signer computed.
    """
    pairs = [
        f"{key}={_render_value(value)}"
        for key, value in sorted(data.items())
        if key != "hash"
    ]
    return "\n".join(pairs)


def compute_hash(data: Mapping[str, Any], bot_token: str) -> str:
    """Return hex HMAC-SHA256 of the check string keyed with SHA256(bot_token)."""
    secret_key = hashlib.sha256(bot_token.encode("utf-8")).digest()
    return hmac.new(
        secret_key,
        build_check_string(data).encode("utf-8"),
        hashlib.sha256,
    ).hexdigest()


def verify_auth_data(
    data: Mapping[str, Any], received_hash: Any, bot_token: str
) -> None:
    """
    Raise ``Unauthorized`` unless ``received_hash`` is the signature of ``data``.
    """
    if not received_hash or not isinstance(received_hash, str):
        logger.warning("Rejected login payload without hash")
        raise Unauthorized()

    expected_hash = compute_hash(data, bot_token)
    # Bytes, since compare_digest rejects non-ASCII str input.
    if not hmac.compare_digest(expected_hash.encode("ascii"), received_hash.encode("utf-8")):
        logger.warning("Rejected login payload for id=%s: hash mismatch", data.get("id"))
        raise Unauthorized()
