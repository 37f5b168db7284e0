"""RFC 4226 HOTP (HMAC-based One-Time Password) primitives."""

from typing import Union

from onetime_auth import base32
from onetime_auth.digests import get_hash_function
from onetime_auth.errors import InvalidArgument
from onetime_auth.mac import compute_hmac


COUNTER_LIMIT = 1 << 64

# 10**n for every supported code length
DIGITS_POWER = (1, 10, 100, 1000, 10000, 100000, 1000000, 10000000, 100000000)


def counter_bytes(counter: int) -> bytes:
    """
    Serialize the moving factor as 8 bytes, big-endian.

    Raises:
        InvalidArgument: If the counter is not an integer or does not fit in an
            unsigned 64-bit value.
    """
    if isinstance(counter, bool) or not isinstance(counter, int):
        raise InvalidArgument(f"Counter must be an integer, got {counter!r}")
    if not 0 <= counter < COUNTER_LIMIT:
        raise InvalidArgument(f"Counter must be in [0, 2**64), got {counter}")
    return counter.to_bytes(8, byteorder="big")


def dynamic_truncate(hmac_digest: bytes) -> int:
    """
    Extract a 31-bit integer from an HMAC digest (RFC 4226, Section 5.3).

    The offset comes from the low nibble of the digest's last byte, whatever
    the digest length.
    """
    offset = hmac_digest[-1] & 0x0F
    return (
        ((hmac_digest[offset] & 0x7F) << 24)
        | ((hmac_digest[offset + 1] & 0xFF) << 16)
        | ((hmac_digest[offset + 2] & 0xFF) << 8)
        | (hmac_digest[offset + 3] & 0xFF)
    )


def hotp_value(hmac_digest: bytes, digits: int) -> int:
    """Reduce a truncated digest to a ``digits``-long decimal value."""
    return dynamic_truncate(hmac_digest) % DIGITS_POWER[digits]


def format_code(value: int, digits: int) -> str:
    """Render ``value`` as a zero-padded string of ``digits`` characters."""
    return f"{value:0{digits}d}"


def generate_hotp(
    secret: Union[str, bytes],
    counter: int,
    digits: int = 6,
    algorithm: str = "SHA-1",
) -> str:
    """
    Generate an HOTP code using RFC 4226.

    Args:
        secret: The HOTP secret as Base32 text or raw bytes.
        counter: The moving counter value.
        digits: Number of digits in the output code (default: 6).
        algorithm: Hash algorithm name, "SHA-1" (default) or "MD5".

    Returns:
        A zero-padded HOTP code string.

    Raises:
        DecodeError: If a text secret is not valid Base32.
        UnsupportedAlgorithm: If the algorithm is not SHA-1 or MD5.
        InvalidArgument: If the counter or digit count is out of range.
    """
    if isinstance(secret, str):
        raw_secret = decode_secret(secret)
    else:
        raw_secret = secret

    if isinstance(digits, bool) or not isinstance(digits, int):
        raise InvalidArgument(f"Digits must be an integer, got {digits!r}")
    if not 0 < digits < len(DIGITS_POWER):
        raise InvalidArgument(f"Unsupported code length: {digits}")

    hash_fn = get_hash_function(algorithm)
    hmac_digest = compute_hmac(raw_secret, counter_bytes(counter), hash_fn)
    return format_code(hotp_value(hmac_digest, digits), digits)


def decode_secret(secret: str) -> bytes:
    """
    Decode a Base32 secret as typed by a person or shown by a provider.

    Whitespace is ignored, case does not matter and padding is optional.

    Raises:
        DecodeError: If the text is not valid Base32.
    """
    return base32.b32decode("".join(secret.split()))
