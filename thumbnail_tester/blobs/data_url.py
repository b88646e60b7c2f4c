"""
Decoding of inline ``data:`` URLs submitted with new tests.
"""

import base64
import binascii
from dataclasses import dataclass

DATA_URL_PREFIX = "data:"


@dataclass
class DecodedImage:
    """Binary payload extracted from a data URL."""

    mime_type: str
    payload: bytes

    @property
    def extension(self) -> str:
        """File extension derived from the MIME subtype (``image/png`` -> ``png``)."""
        subtype = self.mime_type.split("/", 1)[-1]
        return subtype.split("+", 1)[0] or "bin"


def decode_data_url(data_url: str) -> DecodedImage:
    """
    Decode a base64 ``data:<mime>;base64,<payload>`` URL.

    Raises:
        ValueError: If the value is not a base64 data URL or the payload is
            not valid base64
    """
    if not isinstance(data_url, str) or not data_url.startswith(DATA_URL_PREFIX):
        raise ValueError("thumbnail is not a data URL")

    header, sep, encoded = data_url.partition(",")
    if not sep:
        raise ValueError("data URL has no payload")

    media = header[len(DATA_URL_PREFIX):]
    parts = media.split(";")
    if "base64" not in parts[1:]:
        raise ValueError("data URL is not base64 encoded")
    mime_type = parts[0] or "application/octet-stream"

    try:
        payload = base64.b64decode(encoded, validate=True)
    except binascii.Error as e:
        raise ValueError(f"invalid base64 payload: {e}") from e
    if not payload:
        raise ValueError("data URL payload is empty")

    return DecodedImage(mime_type=mime_type, payload=payload)


def encode_data_url(mime_type: str, payload: bytes) -> str:
    """Build a base64 data URL (used by the CLI to submit local files)."""
    return f"{DATA_URL_PREFIX}{mime_type};base64,{base64.b64encode(payload).decode('ascii')}"
