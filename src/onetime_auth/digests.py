"""Hash functions available to the HMAC and OTP code."""

from dataclasses import dataclass
from typing import Dict, Type

from cryptography import exceptions as crypto_exceptions
from cryptography.hazmat.primitives import hashes

from onetime_auth.errors import HashUnavailableError, UnsupportedAlgorithm


@dataclass(frozen=True)
class HashFunction:
    """
    A named message digest usable as ``digest(data) -> bytes``.

    Attributes:
        name: Canonical algorithm name ("SHA-1" or "MD5").
        algorithm: The ``cryptography`` hash algorithm class.
    """

    name: str
    algorithm: Type[hashes.HashAlgorithm]

    @property
    def digest_size(self) -> int:
        return self.algorithm.digest_size

    @property
    def block_size(self) -> int:
        return self.algorithm.block_size

    def __call__(self, data: bytes) -> bytes:
        try:
            ctx = hashes.Hash(self.algorithm())
        except crypto_exceptions.UnsupportedAlgorithm as e:
            raise HashUnavailableError(
                f"Hash backend does not provide {self.name}: {e}"
            ) from e
        ctx.update(bytes(data))
        return ctx.finalize()


SHA1 = HashFunction("SHA-1", hashes.SHA1)
MD5 = HashFunction("MD5", hashes.MD5)

_REGISTRY: Dict[str, HashFunction] = {
    "SHA1": SHA1,
    "MD5": MD5,
}

SUPPORTED_ALGORITHMS = frozenset(fn.name for fn in _REGISTRY.values())


def get_hash_function(name: str) -> HashFunction:
    """
    Look up a supported hash function by name.

    Args:
        name: Algorithm name, e.g. "SHA-1", "sha1" or "MD5".

    Returns:
        The matching :class:`HashFunction`.

    Raises:
        UnsupportedAlgorithm: If the name is not SHA-1 or MD5.
    """
    key = str(name).strip().upper().replace("-", "")
    try:
        return _REGISTRY[key]
    except KeyError:
        raise UnsupportedAlgorithm(
            f"Unsupported algorithm {name!r}; expected one of "
            f"{', '.join(sorted(SUPPORTED_ALGORITHMS))}"
        ) from None
