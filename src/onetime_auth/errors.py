"""Exceptions raised by onetime-auth."""


class OtpError(Exception):
    """Base class for every error raised by this package."""


class UnsupportedAlgorithm(OtpError):
    """Raised when a hash algorithm name is not one of the supported set."""


class InvalidArgument(OtpError, ValueError):
    """Raised for out-of-range digits, intervals, counters or timestamps."""


class DecodeError(OtpError, ValueError):
    """Raised when Base32 text is malformed."""


class HashUnavailableError(OtpError, RuntimeError):
    """Raised when the hash backend refuses an algorithm at digest time."""
