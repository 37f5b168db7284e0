"""Hex text helpers used to write RFC test vectors compactly."""

from onetime_auth.errors import InvalidArgument


def from_hex(text: str) -> bytes:
    """
    Convert a string of hexadecimal digits to bytes.

    Args:
        text: Hex digits, optionally prefixed with ``0x``. An odd number of
            digits is read as if a leading ``0`` were present.

    Returns:
        Decoded bytes.

    Raises:
        InvalidArgument: If the text contains non-hex characters.
    """
    text = text.strip()
    if text[:2].lower() == "0x":
        text = text[2:]
    if len(text) % 2:
        text = "0" + text

    try:
        return bytes.fromhex(text)
    except ValueError as e:
        raise InvalidArgument(f"Invalid hex string: {e}") from e


def to_hex(data: bytes) -> str:
    """Render bytes as lowercase hex."""
    return bytes(data).hex()
