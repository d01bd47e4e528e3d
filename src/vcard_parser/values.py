from __future__ import annotations

import base64
import binascii
import codecs
import logging
import quopri
import re
from typing import NamedTuple

from .errors import MalformedInputError

logger = logging.getLogger(__name__)

# Text reaches the parser decoded as UTF-8 with surrogateescape, so the
# original bytes of a value can always be recovered for charset conversion.
_SOURCE_ENCODING = "utf-8"
_SOURCE_ERRORS = "surrogateescape"
_NOT_BASE64 = re.compile(rb"[^A-Za-z0-9+/]")


class DecodedValue(NamedTuple):
    value: str | bytes
    params: list[str]
    binary: bool


def _to_bytes(value: str) -> bytes:
    return value.encode(_SOURCE_ENCODING, _SOURCE_ERRORS)


def _decode_base64(value: str) -> bytes:
    # characters outside the alphabet (and padding) are skipped
    data = _NOT_BASE64.sub(b"", _to_bytes(value))
    try:
        # unpadded payloads are common in the wild
        return base64.b64decode(data + b"=" * (-len(data) % 4))
    except binascii.Error as exc:
        raise MalformedInputError(f"invalid base64 payload: {exc}") from exc


def _decode_quoted_printable(value: str) -> bytes:
    return quopri.decodestring(_to_bytes(value))


def binary_decoder(param: str):
    """Return the decoder a parameter asks for, or None."""
    lowered = param.lower()
    if "base64" in lowered or lowered == "encoding=b":
        return _decode_base64
    if "quoted-printable" in lowered:
        return _decode_quoted_printable
    return None


def convert_charset(value: str | bytes, charset: str) -> str | bytes:
    """Re-read *value* as text in *charset*; on failure hand it back unchanged."""
    raw = value if isinstance(value, bytes) else _to_bytes(value)
    try:
        codecs.lookup(charset)
        return raw.decode(charset)
    except (LookupError, UnicodeDecodeError) as exc:
        logger.debug("Charset conversion from %r failed, value kept: %s", charset, exc)
        return value


def unescape_text(value: str) -> str:
    """RFC 6350 section 3.4 escapes; backslash pairs are resolved last."""
    return value.replace("\\,", ",").replace("\\;", ";").replace("\\\\", "\\")


def transform_value(value: str, params: list[str]) -> DecodedValue:
    """Apply the decoding a property's parameters ask for.

    At most one binary decoding (base64, ``encoding=b`` or quoted-printable)
    and at most one ``charset=`` conversion are applied; the parameters that
    triggered them are removed from the returned list. Text that was not
    binary-decoded is unescaped afterwards.
    """
    residual = list(params)
    decoded: str | bytes = value
    binary = False

    for i, param in enumerate(residual):
        decoder = binary_decoder(param)
        if decoder is not None:
            decoded = decoder(value)
            binary = True
            del residual[i]
            break

    for i, param in enumerate(residual):
        if param.lower().startswith("charset="):
            decoded = convert_charset(decoded, param[len("charset="):])
            del residual[i]
            break

    if not binary:
        decoded = unescape_text(decoded)

    return DecodedValue(decoded, residual, binary)
