"""
AEAD primitive contexts with internally generated nonces.

The sealing primitive draws its own nonce and returns one combined buffer
laid out as ``nonce || ciphertext || tag``; the opening primitive takes the
same layout back. The oracle only slices and concatenates.

Backends:
    - AES-GCM: cryptography ``Cipher(AES, GCM)`` (supports truncated tags
      via ``min_tag_length``)
    - ChaCha20-Poly1305: cryptography AEAD API (16-byte tag only)
    - XChaCha20-Poly1305: pycryptodome ``ChaCha20_Poly1305`` with a
      24-byte nonce (16-byte tag only)

Example:
    >>> d = resolve_aead("aes-128-gcm")
    >>> with aead_context(d, key, 16, AeadDirection.SEAL) as ctx:
    ...     sealed = ctx.seal(b"data", b"aad")
    >>> len(sealed) == 12 + 4 + 16
    True
"""

from __future__ import annotations

import logging
import os
from contextlib import contextmanager
from enum import Enum
from typing import FrozenSet, Iterator, Optional, Protocol, Tuple

from Crypto.Cipher import ChaCha20_Poly1305
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes
from cryptography.hazmat.primitives.ciphers.aead import ChaCha20Poly1305

from src.cavp_oracle.config import DEFAULT_CONFIG, OracleConfig
from src.cavp_oracle.core.descriptors import AEADDescriptor, AeadFamily
from src.cavp_oracle.core.exceptions import OracleError, SetupFailureError

logger = logging.getLogger(__name__)

__all__ = [
    "AeadDirection",
    "AeadContext",
    "aead_context",
    "open_aead_context",
    "allowed_tag_lengths",
]

_POLY1305_TAG_SIZE = 16


class AeadDirection(str, Enum):
    """Direction an AEAD context is initialised for."""

    SEAL = "seal"
    OPEN = "open"


class _AeadBackend(Protocol):
    def seal(self, nonce: bytes, plaintext: bytes, aad: bytes) -> Tuple[bytes, bytes]: ...

    def open(self, nonce: bytes, ciphertext: bytes, tag: bytes, aad: bytes) -> bytes: ...


# ==============================================================================
# BACKENDS
# ==============================================================================


class _AesGcmBackend:
    """AES-GCM through the cryptography low-level Cipher API."""

    def __init__(self, key: bytes, tag_length: int) -> None:
        self._algorithm = algorithms.AES(key)
        self._tag_length = tag_length

    def seal(self, nonce: bytes, plaintext: bytes, aad: bytes) -> Tuple[bytes, bytes]:
        encryptor = Cipher(self._algorithm, modes.GCM(nonce)).encryptor()
        encryptor.authenticate_additional_data(aad)
        ciphertext = encryptor.update(plaintext) + encryptor.finalize()
        return ciphertext, encryptor.tag[: self._tag_length]

    def open(self, nonce: bytes, ciphertext: bytes, tag: bytes, aad: bytes) -> bytes:
        decryptor = Cipher(
            self._algorithm, modes.GCM(nonce, tag, min_tag_length=len(tag))
        ).decryptor()
        decryptor.authenticate_additional_data(aad)
        return decryptor.update(ciphertext) + decryptor.finalize()


class _ChaCha20Poly1305Backend:
    """ChaCha20-Poly1305 (RFC 8439) through cryptography."""

    def __init__(self, key: bytes) -> None:
        self._aead = ChaCha20Poly1305(key)

    def seal(self, nonce: bytes, plaintext: bytes, aad: bytes) -> Tuple[bytes, bytes]:
        combined = self._aead.encrypt(nonce, plaintext, aad or None)
        split = len(combined) - _POLY1305_TAG_SIZE
        return combined[:split], combined[split:]

    def open(self, nonce: bytes, ciphertext: bytes, tag: bytes, aad: bytes) -> bytes:
        return self._aead.decrypt(nonce, ciphertext + tag, aad or None)


class _XChaCha20Poly1305Backend:
    """XChaCha20-Poly1305 through pycryptodome (24-byte nonce)."""

    def __init__(self, key: bytes) -> None:
        self._key = key

    def seal(self, nonce: bytes, plaintext: bytes, aad: bytes) -> Tuple[bytes, bytes]:
        cipher = ChaCha20_Poly1305.new(key=self._key, nonce=nonce)
        cipher.update(aad)
        return cipher.encrypt_and_digest(plaintext)

    def open(self, nonce: bytes, ciphertext: bytes, tag: bytes, aad: bytes) -> bytes:
        cipher = ChaCha20_Poly1305.new(key=self._key, nonce=nonce)
        cipher.update(aad)
        return cipher.decrypt_and_verify(ciphertext, tag)


def allowed_tag_lengths(
    descriptor: AEADDescriptor, config: OracleConfig = DEFAULT_CONFIG
) -> FrozenSet[int]:
    """
    Tag lengths the primitive accepts for ``descriptor``.

    AES-GCM follows the configured policy; the Poly1305 constructions
    only produce full 16-byte tags.
    """
    if descriptor.family is AeadFamily.AES_GCM:
        return config.gcm_tag_lengths
    return frozenset({descriptor.max_tag_length_bytes})


def _build_backend(descriptor: AEADDescriptor, key: bytes, tag_length: int) -> _AeadBackend:
    family = descriptor.family
    if family is AeadFamily.AES_GCM:
        return _AesGcmBackend(key, tag_length)
    if family is AeadFamily.CHACHA20_POLY1305:
        return _ChaCha20Poly1305Backend(key)
    if family is AeadFamily.XCHACHA20_POLY1305:
        return _XChaCha20Poly1305Backend(key)
    raise SetupFailureError(
        f"Unsupported AEAD family {family.value}", algorithm=descriptor.identifier
    )


# ==============================================================================
# CONTEXT
# ==============================================================================


class AeadContext:
    """One AEAD primitive initialised for a single direction and tag length."""

    def __init__(
        self,
        descriptor: AEADDescriptor,
        direction: AeadDirection,
        tag_length: int,
        backend: _AeadBackend,
    ) -> None:
        self.descriptor = descriptor
        self.direction = direction
        self.tag_length = tag_length
        self._backend: Optional[_AeadBackend] = backend

    @property
    def released(self) -> bool:
        return self._backend is None

    def _active(self, direction: AeadDirection) -> _AeadBackend:
        if self._backend is None:
            raise RuntimeError(f"{self.descriptor.identifier} context already released")
        if direction is not self.direction:
            raise RuntimeError(
                f"{self.descriptor.identifier} context initialised for "
                f"{self.direction.value}, not {direction.value}"
            )
        return self._backend

    def seal(self, plaintext: bytes, aad: bytes) -> bytes:
        """
        Encrypt under a freshly drawn nonce.

        Returns:
            ``nonce || ciphertext || tag``
        """
        backend = self._active(AeadDirection.SEAL)
        nonce = os.urandom(self.descriptor.nonce_length_bytes)
        ciphertext, tag = backend.seal(nonce, plaintext, aad)
        return nonce + ciphertext + tag

    def open(self, sealed: bytes, aad: bytes) -> bytes:
        """
        Verify and decrypt ``nonce || ciphertext || tag``.

        Raises:
            ValueError: if the input is shorter than nonce plus tag.
            cryptography.exceptions.InvalidTag / ValueError: on tag mismatch.
        """
        backend = self._active(AeadDirection.OPEN)
        nonce_end = self.descriptor.nonce_length_bytes
        tag_start = len(sealed) - self.tag_length
        if tag_start < nonce_end:
            raise ValueError("sealed input shorter than nonce and tag")
        return backend.open(
            sealed[:nonce_end], sealed[nonce_end:tag_start], sealed[tag_start:], aad
        )

    def release(self) -> None:
        """Drop the primitive instance."""
        if self._backend is not None:
            self._backend = None
            logger.debug(f"{self.descriptor.identifier}: AEAD context released")


def open_aead_context(
    descriptor: AEADDescriptor,
    key: bytes,
    tag_length: int,
    direction: AeadDirection,
    config: OracleConfig = DEFAULT_CONFIG,
) -> AeadContext:
    """
    Initialise a fresh AEAD primitive. Prefer ``aead_context``.

    Raises:
        SetupFailureError: on a rejected key or tag length.
    """
    if len(key) != descriptor.key_length_bytes:
        raise SetupFailureError(
            "Key length rejected by primitive",
            algorithm=descriptor.identifier,
            context={
                "expected_size": descriptor.key_length_bytes,
                "actual_size": len(key),
            },
        )

    if tag_length not in allowed_tag_lengths(descriptor, config):
        raise SetupFailureError(
            "Tag length rejected by primitive",
            algorithm=descriptor.identifier,
            context={"tag_length": tag_length},
        )

    try:
        backend = _build_backend(descriptor, key, tag_length)
    except OracleError:
        raise
    except Exception as e:
        raise SetupFailureError(
            f"Primitive setup failed: {e.__class__.__name__}",
            algorithm=descriptor.identifier,
        ) from e

    logger.debug(
        f"{descriptor.identifier}: {direction.value} context acquired "
        f"(tag={tag_length} bytes)"
    )
    return AeadContext(descriptor, direction, tag_length, backend)


@contextmanager
def aead_context(
    descriptor: AEADDescriptor,
    key: bytes,
    tag_length: int,
    direction: AeadDirection,
    config: OracleConfig = DEFAULT_CONFIG,
) -> Iterator[AeadContext]:
    """Scoped AEAD context, released on every exit path."""
    context = open_aead_context(descriptor, key, tag_length, direction, config)
    try:
        yield context
    finally:
        context.release()
