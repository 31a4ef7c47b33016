"""Base64 transport encoding for repository file bodies.

The contents API carries file bodies as base64 text inside JSON. Text is
always encoded from its UTF-8 bytes and decoded back to UTF-8, so multi-byte
characters (Arabic script, emoji) survive the round trip unchanged.
"""

import base64
import binascii
import hashlib


def encode_text(text: str) -> str:
    """Encode text as base64 of its UTF-8 bytes.

    Args:
        text: Text to encode

    Returns:
        Base64 transport string
    """
    return encode_bytes(text.encode("utf-8"))


def encode_bytes(data: bytes) -> str:
    """Encode raw bytes as a base64 transport string."""
    return base64.b64encode(data).decode("ascii")


def decode_bytes(transport: str) -> bytes:
    """Decode a base64 transport string into raw bytes.

    GitHub wraps base64 content at 60 columns, so whitespace is removed
    before decoding.

    Args:
        transport: Base64 text, possibly containing newlines

    Returns:
        Decoded bytes

    Raises:
        ValueError: If the input is not valid base64
    """
    compact = "".join(transport.split())
    try:
        return base64.b64decode(compact, validate=True)
    except binascii.Error as e:
        raise ValueError(f"Invalid base64 content: {e}") from e


def decode_text(transport: str) -> str:
    """Decode a base64 transport string into text.

    Bytes are interpreted as UTF-8. Content that is not valid UTF-8 falls
    back to Latin-1 so that every byte maps to one character.

    Args:
        transport: Base64 text, possibly containing newlines

    Returns:
        Decoded text
    """
    return bytes_to_text(decode_bytes(transport))


def bytes_to_text(data: bytes) -> str:
    """Interpret bytes as UTF-8, falling back to Latin-1."""
    try:
        return data.decode("utf-8")
    except UnicodeDecodeError:
        return data.decode("latin-1")


def ensure_transport(body: str | bytes) -> str:
    """Normalize a binary body to base64 transport text.

    Strings are taken to be base64 already and are validated; bytes are
    encoded.

    Args:
        body: Base64 string or raw bytes

    Returns:
        Base64 transport string without whitespace

    Raises:
        ValueError: If a string body is not valid base64
    """
    if isinstance(body, bytes):
        return encode_bytes(body)
    # Accept data URLs as produced by browser file readers
    if body.startswith("data:") and "," in body:
        body = body.split(",", 1)[1]
    decode_bytes(body)
    return "".join(body.split())


def git_blob_sha(data: bytes) -> str:
    """Compute the git blob SHA-1 for a file body.

    Args:
        data: File contents

    Returns:
        40-character hex digest, as the contents API reports it
    """
    header = f"blob {len(data)}\0".encode()
    return hashlib.sha1(header + data, usedforsecurity=False).hexdigest()
