"""
Block and stream cipher contexts for the conformance oracle.

A context wraps exactly one configured primitive instance and exposes the
two-step ``update``/``finalize`` interface. Padding is never applied: the
primitive sees the caller's bytes unchanged.

Backends:
    - cryptography: AES (ECB, CBC, CTR, OFB, GCM), TripleDES (DES-EDE, DES-EDE3)
    - pycryptodome: single DES (ECB, CBC), ARC4

Key handling:
    Fixed-key families accept only their nominal key length; any other
    length is rejected at setup. RC4 takes the key at its actual length
    (1..256 bytes in pycryptodome).

Example:
    >>> descriptor = resolve_cipher("aes-128-cbc")
    >>> with cipher_context(descriptor, Direction.ENCRYPT, key, iv) as ctx:
    ...     out = ctx.update(block) + ctx.finalize()
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Any, Iterator, Optional, Protocol

from Crypto.Cipher import ARC4, DES
from cryptography.hazmat.decrepit.ciphers.algorithms import TripleDES
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

# OFB moved to the decrepit namespace in cryptography 47
try:
    from cryptography.hazmat.decrepit.ciphers.modes import OFB
except ImportError:
    from cryptography.hazmat.primitives.ciphers.modes import OFB

from src.cavp_oracle.core.descriptors import (
    CipherDescriptor,
    CipherFamily,
    CipherMode,
    Direction,
)
from src.cavp_oracle.core.exceptions import OracleError, SetupFailureError

logger = logging.getLogger(__name__)

__all__ = [
    "CipherContext",
    "cipher_context",
    "open_cipher_context",
]


class _Transform(Protocol):
    """Minimal update/finalize surface shared by both backends."""

    def update(self, data: bytes) -> bytes: ...

    def finalize(self) -> bytes: ...


class _PyCryptodomeTransform:
    """Adapts a pycryptodome cipher object to update/finalize."""

    def __init__(self, cipher: Any, encrypt: bool) -> None:
        self._apply = cipher.encrypt if encrypt else cipher.decrypt

    def update(self, data: bytes) -> bytes:
        return self._apply(data)

    def finalize(self) -> bytes:
        # pycryptodome ECB/CBC/ARC4 keep no buffered state
        return b""


# ==============================================================================
# CONTEXT
# ==============================================================================


class CipherContext:
    """
    One configured cipher primitive, owned by a single call.

    The context is unusable after ``release()``; ``cipher_context`` calls
    it on every exit path.
    """

    def __init__(
        self,
        descriptor: CipherDescriptor,
        direction: Direction,
        transform: _Transform,
    ) -> None:
        self.descriptor = descriptor
        self.direction = direction
        self._transform: Optional[_Transform] = transform

    @property
    def released(self) -> bool:
        return self._transform is None

    def _active(self) -> _Transform:
        if self._transform is None:
            raise RuntimeError(f"{self.descriptor.identifier} context already released")
        return self._transform

    def update(self, data: bytes) -> bytes:
        """Feed the whole input through the primitive."""
        return self._active().update(data)

    def finalize(self) -> bytes:
        """Flush the primitive. Raises if buffered input is not block-aligned."""
        return self._active().finalize()

    def release(self) -> None:
        """Drop the primitive instance."""
        if self._transform is not None:
            self._transform = None
            logger.debug(f"{self.descriptor.identifier}: context released")


# ==============================================================================
# SETUP
# ==============================================================================


def _check_key_length(descriptor: CipherDescriptor, key: bytes) -> None:
    if descriptor.has_variable_key_length:
        return
    if len(key) != descriptor.key_length_bytes:
        raise SetupFailureError(
            "Key length rejected by primitive",
            algorithm=descriptor.identifier,
            context={
                "expected_size": descriptor.key_length_bytes,
                "actual_size": len(key),
            },
        )


def _effective_iv(descriptor: CipherDescriptor, iv: bytes) -> bytes:
    """An empty IV for an IV-taking mode stands for the all-zero IV."""
    if iv or not descriptor.mode.takes_iv:
        return iv
    return bytes(descriptor.iv_length_bytes)


def _cryptography_mode(descriptor: CipherDescriptor, iv: bytes) -> modes.Mode:
    mode = descriptor.mode
    if mode is CipherMode.ECB:
        return modes.ECB()
    if mode is CipherMode.CBC:
        return modes.CBC(iv)
    if mode is CipherMode.CTR:
        return modes.CTR(iv)
    if mode is CipherMode.OFB:
        return OFB(iv)
    if mode is CipherMode.GCM:
        # No tag: encryption yields the raw GCM keystream output,
        # decryption cannot finalize.
        return modes.GCM(iv)
    raise SetupFailureError(
        f"Mode {mode.value} is not supported for {descriptor.family.value}",
        algorithm=descriptor.identifier,
    )


def _build_transform(
    descriptor: CipherDescriptor, encrypt: bool, key: bytes, iv: bytes
) -> _Transform:
    family = descriptor.family

    if family is CipherFamily.AES:
        cipher = Cipher(algorithms.AES(key), _cryptography_mode(descriptor, iv))
        return cipher.encryptor() if encrypt else cipher.decryptor()

    if family in (CipherFamily.DES_EDE, CipherFamily.DES_EDE3):
        if family is CipherFamily.DES_EDE:
            # EDE2 as a three-key K1 || K2 || K1
            key = key + key[:8]
        cipher = Cipher(TripleDES(key), _cryptography_mode(descriptor, iv))
        return cipher.encryptor() if encrypt else cipher.decryptor()

    if family is CipherFamily.DES:
        if descriptor.mode is CipherMode.ECB:
            des = DES.new(key, DES.MODE_ECB)
        elif descriptor.mode is CipherMode.CBC:
            des = DES.new(key, DES.MODE_CBC, iv=iv)
        else:
            raise SetupFailureError(
                f"Mode {descriptor.mode.value} is not supported for DES",
                algorithm=descriptor.identifier,
            )
        return _PyCryptodomeTransform(des, encrypt)

    if family is CipherFamily.RC4:
        return _PyCryptodomeTransform(ARC4.new(key), encrypt)

    raise SetupFailureError(
        f"Unsupported cipher family {family.value}",
        algorithm=descriptor.identifier,
    )


def open_cipher_context(
    descriptor: CipherDescriptor,
    direction: Direction,
    key: bytes,
    iv: bytes,
    *,
    warn_on_legacy: bool = True,
) -> CipherContext:
    """
    Configure a fresh primitive for one operation.

    Prefer ``cipher_context``, which guarantees release.

    Raises:
        SetupFailureError: if the primitive rejects the key, IV or mode.
    """
    if warn_on_legacy and descriptor.family.is_legacy():
        logger.warning(
            f"{descriptor.identifier}: legacy cipher exercised (vector validation only)"
        )

    try:
        _check_key_length(descriptor, key)
        transform = _build_transform(
            descriptor,
            direction is Direction.ENCRYPT,
            key,
            _effective_iv(descriptor, iv),
        )
    except OracleError:
        raise
    except Exception as e:
        raise SetupFailureError(
            f"Primitive setup failed: {e.__class__.__name__}",
            algorithm=descriptor.identifier,
            context={"key_length": len(key), "iv_length": len(iv)},
        ) from e

    logger.debug(
        f"{descriptor.identifier}: {direction.value} context acquired "
        f"(key={len(key)} bytes)"
    )
    return CipherContext(descriptor, direction, transform)


@contextmanager
def cipher_context(
    descriptor: CipherDescriptor,
    direction: Direction,
    key: bytes,
    iv: bytes,
    *,
    warn_on_legacy: bool = True,
) -> Iterator[CipherContext]:
    """
    Scoped cipher context: acquired on entry, released on every exit path.

    Raises:
        SetupFailureError: if the primitive rejects the configuration.
    """
    context = open_cipher_context(
        descriptor, direction, key, iv, warn_on_legacy=warn_on_legacy
    )
    try:
        yield context
    finally:
        context.release()
