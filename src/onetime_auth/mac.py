"""RFC 2104 HMAC over a pluggable hash function."""

from typing import Callable, Optional, Union

from onetime_auth.digests import HashFunction


DEFAULT_BLOCK_SIZE = 64
INNER_PAD = 0x36
OUTER_PAD = 0x5C

Digest = Union[HashFunction, Callable[[bytes], bytes]]


def _block_size(hash_fn: Digest, block_size: Optional[int]) -> int:
    if block_size is not None:
        return block_size
    return getattr(hash_fn, "block_size", DEFAULT_BLOCK_SIZE)


def normalize_key(key: bytes, hash_fn: Digest, block_size: Optional[int] = None) -> bytes:
    """
    Bring ``key`` to exactly ``block_size`` bytes (RFC 2104, section 2).

    Keys longer than the block are hashed first; the result is right-padded
    with zero bytes. The caller's key is never modified.
    """
    size = _block_size(hash_fn, block_size)
    key = bytes(key)
    if len(key) > size:
        key = hash_fn(key)
    return key.ljust(size, b"\x00")


def compute_hmac(
    key: bytes,
    message: bytes,
    hash_fn: Digest,
    block_size: Optional[int] = None,
) -> bytes:
    """
    Compute HMAC(key, message) with the given hash function.

    Args:
        key: Secret key of any length.
        message: Data to authenticate.
        hash_fn: A :class:`HashFunction` or any ``digest(bytes) -> bytes``
            callable.
        block_size: Hash block size in bytes. Defaults to the block size of
            ``hash_fn`` when it has one, otherwise 64.

    Returns:
        The HMAC digest.
    """
    size = _block_size(hash_fn, block_size)
    key = normalize_key(key, hash_fn, size)

    inner = bytes(b ^ INNER_PAD for b in key)
    outer = bytes(b ^ OUTER_PAD for b in key)
    return hash_fn(outer + hash_fn(inner + bytes(message)))
