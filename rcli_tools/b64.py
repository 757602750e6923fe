import base64
import binascii
import enum
from typing import BinaryIO

from .errors import DecodeError


class Base64Format(enum.Enum):
    STANDARD = "standard"
    URLSAFE = "urlsafe"

    @classmethod
    def parse(cls, value: str) -> "Base64Format":
        try:
            return cls(value.strip().lower())
        except ValueError:
            raise ValueError(f"Invalid base64 format: {value!r}") from None

    def __str__(self) -> str:
        return self.value


def urlsafe_encode(data: bytes) -> str:
    """URL-safe base64 without '=' padding."""
    return base64.urlsafe_b64encode(data).decode("ascii").rstrip("=")


def urlsafe_decode(text) -> bytes:
    if isinstance(text, (bytes, bytearray)):
        try:
            text = bytes(text).decode("ascii")
        except UnicodeDecodeError as e:
            raise DecodeError("base64 input is not ASCII") from e
    text = text.strip()
    padded = text + "=" * (-len(text) % 4)
    try:
        return base64.b64decode(padded, altchars=b"-_", validate=True)
    except (binascii.Error, ValueError) as e:
        raise DecodeError(f"Invalid base64 input: {e}") from e


def encode_bytes(data: bytes, fmt: Base64Format) -> str:
    if fmt is Base64Format.URLSAFE:
        return urlsafe_encode(data)
    return base64.b64encode(data).decode("ascii")


def decode_bytes(text: str, fmt: Base64Format) -> bytes:
    if fmt is Base64Format.URLSAFE:
        return urlsafe_decode(text)
    try:
        return base64.b64decode(text.strip(), validate=True)
    except (binascii.Error, ValueError) as e:
        raise DecodeError(f"Invalid base64 input: {e}") from e


def process_encode(reader: BinaryIO, fmt: Base64Format) -> str:
    return encode_bytes(reader.read(), fmt)


def process_decode(reader: BinaryIO, fmt: Base64Format) -> str:
    raw = reader.read()
    try:
        text = raw.decode("ascii")
    except UnicodeDecodeError as e:
        raise DecodeError("base64 input is not ASCII") from e
    decoded = decode_bytes(text, fmt)
    try:
        return decoded.decode("utf-8")
    except UnicodeDecodeError as e:
        raise DecodeError("Decoded data is not valid UTF-8") from e
