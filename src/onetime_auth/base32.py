"""RFC 4648 Base32 encoding and decoding."""

import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping, Union

from onetime_auth.errors import DecodeError


logger = logging.getLogger(__name__)

# Padding characters emitted for the final group, keyed by len(data) % 5
ENCODE_PADDING = MappingProxyType({0: 0, 1: 6, 2: 4, 3: 3, 4: 1})

# Bytes dropped from the final group, keyed by trailing padding count
DECODE_TRIM = MappingProxyType({0: 0, 1: 1, 3: 2, 4: 3, 6: 4})


@dataclass(frozen=True)
class Base32Alphabet:
    """An ordered set of 32 symbols plus the padding character."""

    name: str
    symbols: str
    padding: str = "="
    lookup: Mapping[str, int] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        if len(self.symbols) != 32 or len(set(self.symbols)) != 32:
            raise ValueError("A Base32 alphabet needs 32 distinct symbols")
        if len(self.padding) != 1 or self.padding in self.symbols:
            raise ValueError("Padding must be a single character outside the alphabet")

        # Exact symbols first; lowercase forms never shadow an existing symbol
        table = {char: value for value, char in enumerate(self.symbols)}
        for value, char in enumerate(self.symbols):
            table.setdefault(char.lower(), value)
        object.__setattr__(self, "lookup", MappingProxyType(table))

    def index(self, char: str) -> int:
        """Return the 5-bit value of ``char``, or -1 if it is not a symbol."""
        return self.lookup.get(char, -1)


STANDARD = Base32Alphabet("standard", "ABCDEFGHIJKLMNOPQRSTUVWXYZ234567")
EXTENDED_HEX = Base32Alphabet("extended-hex", "0123456789ABCDEFGHIJKLMNOPQRSTUV")


class Encoder:
    """
    Encodes bytes to Base32 text.

    Instances are immutable; use :meth:`without_padding` to get an encoder
    that omits trailing padding characters.
    """

    def __init__(self, alphabet: Base32Alphabet = STANDARD, padded: bool = True):
        self.alphabet = alphabet
        self.padded = padded

    def __repr__(self) -> str:
        return f"Encoder({self.alphabet.name!r}, padded={self.padded})"

    def without_padding(self) -> "Encoder":
        """Return an equivalent encoder that does not emit padding."""
        if not self.padded:
            return self
        return Encoder(self.alphabet, padded=False)

    def encode(self, data: bytes) -> str:
        """
        Encode ``data`` as Base32 text.

        Args:
            data: Bytes to encode. Not modified.

        Returns:
            Encoded text; empty input yields an empty string.
        """
        if not data:
            return ""

        symbols = self.alphabet.symbols
        remainder = len(data) % 5
        padding = ENCODE_PADDING[remainder]
        block = bytes(data) + b"\x00" * ((5 - remainder) % 5)

        chars = []
        for i in range(0, len(block), 5):
            value = int.from_bytes(block[i : i + 5], "big")
            for k in range(8):
                chars.append(symbols[(value >> (35 - 5 * k)) & 0x1F])

        if padding:
            del chars[-padding:]
            if self.padded:
                chars.extend(self.alphabet.padding * padding)
        return "".join(chars)


class Decoder:
    """
    Decodes Base32 text to bytes.

    Padding is optional: a final group of 7, 5, 4 or 2 characters is decoded
    as if the matching padding followed it. When padding is present it must be
    a trailing run of a valid length.
    """

    def __init__(self, alphabet: Base32Alphabet = STANDARD):
        self.alphabet = alphabet

    def __repr__(self) -> str:
        return f"Decoder({self.alphabet.name!r})"

    def decode(self, text: Union[str, bytes]) -> bytes:
        """
        Decode Base32 ``text``.

        Args:
            text: Encoded text, as ``str`` or ASCII ``bytes``. Case-insensitive.

        Returns:
            Decoded bytes; empty input yields ``b""``.

        Raises:
            DecodeError: On characters outside the alphabet, misplaced padding
                or a padding count that no encoder can produce.
        """
        if isinstance(text, (bytes, bytearray)):
            try:
                text = bytes(text).decode("ascii")
            except UnicodeDecodeError as e:
                raise _fail("input is not ASCII") from e

        if not text:
            return b""

        pad_char = self.alphabet.padding
        stripped = text.rstrip(pad_char)
        padding = len(text) - len(stripped) + (-len(text) % 8)

        values = []
        for char in stripped:
            value = self.alphabet.index(char)
            if value < 0:
                if char == pad_char:
                    raise _fail("padding inside encoded data")
                raise _fail("character outside the alphabet")
            values.append(value)

        trim = DECODE_TRIM.get(padding)
        if trim is None:
            raise _fail(f"invalid padding length {padding}")

        values.extend([0] * padding)
        out = bytearray()
        for i in range(0, len(values), 8):
            group = 0
            for value in values[i : i + 8]:
                group = (group << 5) | value
            out += group.to_bytes(5, "big")

        if trim:
            del out[-trim:]
        return bytes(out)


def _fail(reason: str) -> DecodeError:
    logger.debug("Rejected Base32 input: %s", reason)
    return DecodeError(f"Invalid Base32 data: {reason}")


_ENCODER = Encoder(STANDARD)
_HEX_ENCODER = Encoder(EXTENDED_HEX)
_DECODER = Decoder(STANDARD)
_HEX_DECODER = Decoder(EXTENDED_HEX)


def get_encoder(alphabet: Base32Alphabet = STANDARD, padded: bool = True) -> Encoder:
    """Return the shared encoder for ``alphabet``."""
    if alphabet is STANDARD:
        encoder = _ENCODER
    elif alphabet is EXTENDED_HEX:
        encoder = _HEX_ENCODER
    else:
        encoder = Encoder(alphabet)
    return encoder if padded else encoder.without_padding()


def get_decoder(alphabet: Base32Alphabet = STANDARD) -> Decoder:
    """Return the shared decoder for ``alphabet``."""
    if alphabet is STANDARD:
        return _DECODER
    if alphabet is EXTENDED_HEX:
        return _HEX_DECODER
    return Decoder(alphabet)


def encode(data: bytes, padded: bool = True, alphabet: Base32Alphabet = STANDARD) -> str:
    """Encode ``data`` as Base32 text, with or without trailing padding."""
    return get_encoder(alphabet, padded).encode(data)


def decode(text: Union[str, bytes], alphabet: Base32Alphabet = STANDARD) -> bytes:
    """Decode Base32 ``text``, raising :class:`DecodeError` if malformed."""
    return get_decoder(alphabet).decode(text)


def b32encode(data: bytes, padded: bool = True) -> str:
    """Encode with the standard alphabet."""
    return encode(data, padded=padded)


def b32decode(text: Union[str, bytes]) -> bytes:
    """Decode with the standard alphabet."""
    return _DECODER.decode(text)


def b32hexencode(data: bytes, padded: bool = True) -> str:
    return encode(data, padded=padded, alphabet=EXTENDED_HEX)


def b32hexdecode(text: Union[str, bytes]) -> bytes:
    return _HEX_DECODER.decode(text)
