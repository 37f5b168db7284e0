"""Tests for the TOTP engine."""

import hashlib
import hmac
import logging
from datetime import datetime, timedelta, timezone

import pytest
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.twofactor.hotp import HOTP
from cryptography.hazmat.primitives.twofactor.totp import TOTP

from onetime_auth import digests
from onetime_auth.errors import (
    DecodeError,
    HashUnavailableError,
    InvalidArgument,
    UnsupportedAlgorithm,
)
from onetime_auth.hotp import format_code, hotp_value
from onetime_auth.totp import OtpEngine, epoch_seconds


RFC_SECRET = b"12345678901234567890"

# RFC 6238 test vectors (Appendix B), SHA-1
RFC6238_TEST_VECTORS = [
    # (timestamp, expected_code)
    (59, "94287082"),
    (1111111109, "07081804"),
    (1111111111, "14050471"),
    (1234567890, "89005924"),
    (2000000000, "69279037"),
    (20000000000, "65353130"),
]

RFC4226_CODES = [
    "755224", "287082", "359152", "969429", "338314",
    "254676", "287922", "162583", "399871", "520489",
]


@pytest.fixture
def rfc_engine():
    return OtpEngine(RFC_SECRET, "SHA-1", 30, 8)


@pytest.mark.parametrize("timestamp,expected", RFC6238_TEST_VECTORS)
def test_rfc6238_test_vectors(rfc_engine, timestamp, expected):
    assert rfc_engine.get_code(timestamp) == expected


def test_rfc4226_counter_codes():
    """Test HOTP codes through the engine's counter form."""
    engine = OtpEngine(RFC_SECRET)
    for counter, expected in enumerate(RFC4226_CODES):
        assert engine.get_counter_code(counter) == expected
        assert engine.hotp(counter) == int(expected)


def test_defaults():
    engine = OtpEngine(RFC_SECRET)
    assert engine.algorithm == "SHA-1"
    assert engine.interval == 30
    assert engine.digits == 6
    assert engine.get_code(59) == "287082"


def test_leading_zero_preserved(rfc_engine):
    """Test that integer and string forms differ only by zero padding."""
    assert rfc_engine.totp(1111111109) == 7081804
    assert rfc_engine.get_code(1111111109) == "07081804"


def test_get_code_is_idempotent(rfc_engine):
    first = rfc_engine.get_code(1234567890)
    second = rfc_engine.get_code(1234567890)
    assert first == second == "89005924"


def test_codes_within_one_step_match(rfc_engine):
    assert rfc_engine.get_code(1111111110) == rfc_engine.get_code(1111111119)
    assert rfc_engine.counter_for(1111111109) == 37037036
    assert rfc_engine.counter_for(1111111111) == 37037037


def test_float_timestamp_is_floored(rfc_engine):
    assert rfc_engine.get_code(59.999) == "94287082"


def test_datetime_timestamp(rfc_engine):
    aware = datetime(2005, 3, 18, 1, 58, 29, tzinfo=timezone.utc)
    naive = datetime(2005, 3, 18, 1, 58, 29)
    shifted = aware.astimezone(timezone(timedelta(hours=2)))

    assert rfc_engine.get_code(aware) == "07081804"
    assert rfc_engine.get_code(naive) == "07081804"
    assert rfc_engine.get_code(shifted) == "07081804"


@pytest.mark.parametrize("timestamp", [-1, -0.5, float("nan"), float("inf"), "59", None, True])
def test_invalid_timestamp(rfc_engine, timestamp):
    with pytest.raises(InvalidArgument):
        rfc_engine.get_code(timestamp)


def test_epoch_seconds():
    assert epoch_seconds(0) == 0
    assert epoch_seconds(20000000000) == 20000000000
    assert epoch_seconds(1.9) == 1
    assert epoch_seconds(datetime(1970, 1, 1, 0, 1, tzinfo=timezone.utc)) == 60


@pytest.mark.parametrize("counter", [-1, 2**64, 1.5, "1"])
def test_invalid_counter(counter):
    engine = OtpEngine(RFC_SECRET)
    with pytest.raises(InvalidArgument):
        engine.get_counter_code(counter)


def test_largest_counter():
    engine = OtpEngine(RFC_SECRET, digits=8)
    expected = HOTP(RFC_SECRET, 8, hashes.SHA1()).generate(2**64 - 1).decode("ascii")
    assert engine.get_counter_code(2**64 - 1) == expected


@pytest.mark.parametrize("digits", [5, 9, 0, -6])
def test_digits_out_of_range(digits):
    with pytest.raises(InvalidArgument, match="digits"):
        OtpEngine(RFC_SECRET, "SHA-1", 30, digits)


@pytest.mark.parametrize("digits", [6, 7, 8])
def test_digits_in_range(digits):
    engine = OtpEngine(RFC_SECRET, digits=digits)
    assert len(engine.get_code(59)) == digits


def test_digits_error_is_value_error():
    with pytest.raises(ValueError):
        OtpEngine(RFC_SECRET, digits=9)


@pytest.mark.parametrize("interval", [0, -30, 1.5, True])
def test_invalid_interval(interval):
    with pytest.raises(InvalidArgument, match="Interval"):
        OtpEngine(RFC_SECRET, "SHA-1", interval)


@pytest.mark.parametrize("algorithm", ["SHA-256", "SHA512", "whirlpool"])
def test_unsupported_algorithm(algorithm):
    with pytest.raises(UnsupportedAlgorithm):
        OtpEngine(RFC_SECRET, algorithm)


def test_custom_interval_matches_cryptography():
    """Test a 60 second step against the cryptography package's TOTP."""
    engine = OtpEngine(RFC_SECRET, "SHA-1", 60, 7)
    reference = TOTP(RFC_SECRET, 7, hashes.SHA1(), 60)
    for timestamp in (0, 59, 60, 1111111111, 2000000000):
        assert engine.get_code(timestamp) == reference.generate(timestamp).decode("ascii")


def test_md5_engine_matches_stdlib_hmac():
    """Test MD5 codes, whose 16-byte digests take the offset from byte 15."""
    engine = OtpEngine(RFC_SECRET, "MD5", 30, 8)
    for timestamp, _ in RFC6238_TEST_VECTORS:
        counter = timestamp // 30
        digest = hmac.new(RFC_SECRET, counter.to_bytes(8, "big"), hashlib.md5).digest()
        assert engine.get_code(timestamp) == format_code(hotp_value(digest, 8), 8)


def test_long_secret_matches_cryptography():
    """Test a secret longer than the hash block size."""
    secret = bytes(range(100))
    engine = OtpEngine(secret, digits=6)
    reference = HOTP(secret, 6, hashes.SHA1())
    for counter in range(5):
        assert engine.get_counter_code(counter) == reference.generate(counter).decode("ascii")


def test_empty_secret():
    engine = OtpEngine(b"")
    expected = hmac.new(b"", (0).to_bytes(8, "big"), hashlib.sha1).digest()
    assert engine.get_counter_code(0) == format_code(hotp_value(expected, 6), 6)


def test_secret_is_not_modified():
    secret = bytearray(RFC_SECRET)
    engine = OtpEngine(secret)
    engine.get_code(59)
    assert secret == bytearray(RFC_SECRET)


def test_secret_changes_after_construction_are_ignored():
    secret = bytearray(RFC_SECRET)
    engine = OtpEngine(secret)
    secret[0] ^= 0xFF
    assert engine.get_counter_code(0) == "755224"


def test_from_base32():
    engine = OtpEngine.from_base32("GEZDGNBVGY3TQOJQGEZDGNBVGY3TQOJQ", digits=8)
    assert engine.get_code(59) == "94287082"


def test_from_base32_is_forgiving_about_format():
    engine = OtpEngine.from_base32("gezd gnbv gy3t qojq\ngezd gnbv gy3t qojq")
    assert engine.get_counter_code(0) == "755224"


def test_from_base32_invalid_secret():
    with pytest.raises(DecodeError):
        OtpEngine.from_base32("GEZDGNBVGY3TQOJ1")


def test_verify(rfc_engine):
    assert rfc_engine.verify("07081804", 1111111109)
    assert rfc_engine.verify(" 07081804\n", 1111111109)
    assert not rfc_engine.verify("7081804", 1111111109)
    assert not rfc_engine.verify("07081805", 1111111109)
    assert not rfc_engine.verify("07081804", 1111111111)
    assert not rfc_engine.verify("０7081804", 1111111109)


def test_verify_counter():
    engine = OtpEngine(RFC_SECRET)
    assert engine.verify_counter("359152", 2)
    assert not engine.verify_counter("359152", 3)


def test_repr_hides_secret():
    engine = OtpEngine(RFC_SECRET, "MD5", 60, 7)
    assert repr(engine) == "OtpEngine(algorithm='MD5', interval=60, digits=7)"
    assert "1234" not in repr(engine)


def test_construction_is_logged_without_secret(caplog):
    with caplog.at_level(logging.DEBUG, logger="onetime_auth.totp"):
        OtpEngine.from_base32("GEZDGNBVGY3TQOJQGEZDGNBVGY3TQOJQ")

    assert "algorithm=SHA-1" in caplog.text
    assert "GEZD" not in caplog.text
    assert "1234567890" not in caplog.text


def test_hash_unavailable_at_runtime(monkeypatch):
    """Test that a hash refused after construction raises instead of returning a code."""
    engine = OtpEngine(RFC_SECRET, "MD5")

    def refuse(algorithm):
        raise digests.crypto_exceptions.UnsupportedAlgorithm("disabled")

    monkeypatch.setattr(digests.hashes, "Hash", refuse)
    with pytest.raises(HashUnavailableError):
        engine.get_code(59)
