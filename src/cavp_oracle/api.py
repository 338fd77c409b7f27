"""
Plain-function interface to the oracle for test harnesses.

Each function accepts either a registry descriptor or its identifier,
builds the request object and delegates to CipherOracle / AEADOracle.
Failures propagate as ``OracleError`` subclasses.

Example:
    >>> from src.cavp_oracle.api import apply_cipher, encode_hex
    >>> encode_hex(apply_cipher("aes-128-ecb", "encrypt", bytes(16), b"", bytes(16)))
    '66e94bd4ef8a2c3b884cfa59ca342b2e'
"""

from __future__ import annotations

from typing import Optional, Union

from src.cavp_oracle.codec import encode_hex
from src.cavp_oracle.config import OracleConfig
from src.cavp_oracle.core.descriptors import AEADDescriptor, CipherDescriptor, Direction
from src.cavp_oracle.core.models import (
    BytesLike,
    CipherRequest,
    OpenRequest,
    SealRequest,
    SealResult,
)
from src.cavp_oracle.core.registry import resolve_aead, resolve_cipher
from src.cavp_oracle.service.aead_oracle import AEADOracle
from src.cavp_oracle.service.cipher_oracle import CipherOracle

__all__ = [
    "encode_hex",
    "resolve_cipher",
    "resolve_aead",
    "apply_cipher",
    "seal_aead",
    "open_aead",
]


def _cipher_descriptor(descriptor: Union[CipherDescriptor, str]) -> CipherDescriptor:
    if isinstance(descriptor, str):
        return resolve_cipher(descriptor)
    return descriptor


def _aead_descriptor(descriptor: Union[AEADDescriptor, str]) -> AEADDescriptor:
    if isinstance(descriptor, str):
        return resolve_aead(descriptor)
    return descriptor


def apply_cipher(
    descriptor: Union[CipherDescriptor, str],
    direction: Union[Direction, str],
    key: BytesLike,
    iv: BytesLike,
    input_data: BytesLike,
    *,
    config: Optional[OracleConfig] = None,
) -> bytes:
    """
    Run one unpadded encrypt or decrypt pass.

    Raises:
        AlgorithmNotFoundError: unknown identifier.
        IvLengthMismatchError, SetupFailureError, UpdateFailureError,
        FinalizeFailureError: see CipherOracle.apply.
    """
    if not isinstance(direction, Direction):
        direction = Direction.from_str(direction)
    request = CipherRequest(
        descriptor=_cipher_descriptor(descriptor),
        direction=direction,
        key=key,
        iv=iv,
        input=input_data,
    )
    return CipherOracle(config).apply(request).output


def seal_aead(
    descriptor: Union[AEADDescriptor, str],
    key: BytesLike,
    plaintext: BytesLike,
    aad: BytesLike = b"",
    tag_length: Optional[int] = None,
    *,
    config: Optional[OracleConfig] = None,
) -> SealResult:
    """Seal under a primitive-generated nonce and split the output."""
    request = SealRequest(
        descriptor=_aead_descriptor(descriptor),
        key=key,
        plaintext=plaintext,
        associated_data=aad,
        tag_length_bytes=tag_length,
    )
    return AEADOracle(config).seal(request)


def open_aead(
    descriptor: Union[AEADDescriptor, str],
    key: BytesLike,
    nonce: BytesLike,
    ciphertext: BytesLike,
    tag: BytesLike,
    aad: BytesLike,
    expected_pt_len: int,
    expected_aad_len: int,
    *,
    config: Optional[OracleConfig] = None,
) -> bytes:
    """
    Verify and decrypt one AEAD vector.

    Raises:
        AuthenticationFailureError: tag mismatch or unexpected plaintext length.
    """
    request = OpenRequest(
        descriptor=_aead_descriptor(descriptor),
        key=key,
        nonce=nonce,
        ciphertext=ciphertext,
        tag=tag,
        associated_data=aad,
        expected_plaintext_length=expected_pt_len,
        expected_aad_length=expected_aad_len,
    )
    return AEADOracle(config).open(request).plaintext
