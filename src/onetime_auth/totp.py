"""RFC 6238 TOTP engine built on the HOTP primitives."""

import hmac
import logging
import math
from datetime import datetime, timezone
from numbers import Real
from typing import Union

from onetime_auth.digests import get_hash_function
from onetime_auth.errors import InvalidArgument
from onetime_auth.hotp import counter_bytes, decode_secret, format_code, hotp_value
from onetime_auth.mac import compute_hmac, normalize_key


logger = logging.getLogger(__name__)

DEFAULT_ALGORITHM = "SHA-1"
DEFAULT_INTERVAL = 30
DEFAULT_DIGITS = 6
MIN_DIGITS = 6
MAX_DIGITS = 8

Timestamp = Union[int, float, datetime]


def epoch_seconds(timestamp: Timestamp) -> int:
    """
    Convert a timestamp to whole seconds since the Unix epoch.

    Naive datetimes are read as UTC. Fractional seconds are floored.

    Raises:
        InvalidArgument: If the timestamp is negative or not a number.
    """
    if isinstance(timestamp, datetime):
        if timestamp.tzinfo is None:
            timestamp = timestamp.replace(tzinfo=timezone.utc)
        timestamp = timestamp.timestamp()

    if isinstance(timestamp, bool) or not isinstance(timestamp, Real):
        raise InvalidArgument(f"Timestamp must be a number or datetime, got {timestamp!r}")
    if not math.isfinite(timestamp) or timestamp < 0:
        raise InvalidArgument(f"Timestamp must be a non-negative epoch value, got {timestamp}")
    return math.floor(timestamp)


class OtpEngine:
    """
    Generates and checks one-time codes for a single shared secret.

    The secret is normalized to the hash block size once, here, and only the
    normalized key is kept; an engine holds no other state and can be shared
    between threads.
    """

    def __init__(
        self,
        secret: bytes,
        algorithm: str = DEFAULT_ALGORITHM,
        interval: int = DEFAULT_INTERVAL,
        digits: int = DEFAULT_DIGITS,
    ):
        """
        Initialize an OtpEngine.

        Args:
            secret: Shared secret bytes.
            algorithm: Hash algorithm, "SHA-1" (default) or "MD5".
            interval: TOTP time step in seconds (default: 30).
            digits: Code length, 6 to 8 inclusive (default: 6).

        Raises:
            UnsupportedAlgorithm: If the algorithm is not SHA-1 or MD5.
            InvalidArgument: If interval or digits are out of range.
        """
        hash_fn = get_hash_function(algorithm)

        if isinstance(interval, bool) or not isinstance(interval, int) or interval <= 0:
            raise InvalidArgument(f"Interval must be a positive integer, got {interval!r}")
        if isinstance(digits, bool) or not isinstance(digits, int):
            raise InvalidArgument(f"Digits must be an integer, got {digits!r}")
        if digits < MIN_DIGITS:
            raise InvalidArgument(f"The code must have at least {MIN_DIGITS} digits.")
        if digits > MAX_DIGITS:
            raise InvalidArgument(f"The code may not be longer than {MAX_DIGITS} digits.")

        self._hash_fn = hash_fn
        self._key = normalize_key(secret, hash_fn)
        self.interval = interval
        self.digits = digits

        logger.debug(
            "Created OTP engine (algorithm=%s, interval=%ds, digits=%d)",
            hash_fn.name,
            interval,
            digits,
        )

    @classmethod
    def from_base32(
        cls,
        secret: str,
        algorithm: str = DEFAULT_ALGORITHM,
        interval: int = DEFAULT_INTERVAL,
        digits: int = DEFAULT_DIGITS,
    ) -> "OtpEngine":
        """
        Create an engine from a Base32 secret such as "GEZD GNBV GY3T QOJQ".

        Raises:
            DecodeError: If the secret is not valid Base32.
        """
        return cls(decode_secret(secret), algorithm, interval, digits)

    @property
    def algorithm(self) -> str:
        return self._hash_fn.name

    def __repr__(self) -> str:
        return (
            f"OtpEngine(algorithm={self.algorithm!r}, "
            f"interval={self.interval}, digits={self.digits})"
        )

    def counter_for(self, timestamp: Timestamp) -> int:
        """Return the time-step counter covering ``timestamp``."""
        return epoch_seconds(timestamp) // self.interval

    def hotp(self, counter: int) -> int:
        """Compute the HOTP value for ``counter`` as an integer."""
        hmac_digest = compute_hmac(self._key, counter_bytes(counter), self._hash_fn)
        return hotp_value(hmac_digest, self.digits)

    def totp(self, timestamp: Timestamp) -> int:
        """Compute the TOTP value for ``timestamp`` as an integer."""
        return self.hotp(self.counter_for(timestamp))

    def get_code(self, timestamp: Timestamp) -> str:
        """
        Return the TOTP code valid at ``timestamp``.

        Args:
            timestamp: Seconds since the Unix epoch, or a datetime.

        Returns:
            The code as a zero-padded string of ``digits`` characters.
        """
        return format_code(self.totp(timestamp), self.digits)

    def get_counter_code(self, counter: int) -> str:
        """Return the HOTP code for ``counter`` as a zero-padded string."""
        return format_code(self.hotp(counter), self.digits)

    def verify(self, code: str, timestamp: Timestamp) -> bool:
        """Check ``code`` against the TOTP code for exactly ``timestamp``."""
        return _matches(code, self.get_code(timestamp))

    def verify_counter(self, code: str, counter: int) -> bool:
        """Check ``code`` against the HOTP code for exactly ``counter``."""
        return _matches(code, self.get_counter_code(counter))


def _matches(candidate: str, expected: str) -> bool:
    candidate = str(candidate).strip()
    if not candidate.isascii():
        return False
    return hmac.compare_digest(candidate, expected)
