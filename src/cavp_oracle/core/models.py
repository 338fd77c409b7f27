"""
Запросы и результаты операций оракула.

Все типы - frozen dataclasses, создаются на входе в вызов и живут
только в его стеке. Байтовые поля нормализуются в неизменяемые bytes
(bytearray и memoryview копируются), прочие типы отклоняются TypeError.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional, Union

from src.cavp_oracle.codec import encode_hex
from src.cavp_oracle.core.descriptors import AEADDescriptor, CipherDescriptor, Direction

BytesLike = Union[bytes, bytearray, memoryview]


def _as_bytes(value: Any, name: str) -> bytes:
    """Скопировать байтоподобное значение в bytes, иначе TypeError."""
    if isinstance(value, bytes):
        return value
    if isinstance(value, (bytearray, memoryview)):
        return bytes(value)
    raise TypeError(f"{name} must be bytes-like, got {type(value).__name__}")


def _freeze(instance: Any, *names: str) -> None:
    for name in names:
        object.__setattr__(instance, name, _as_bytes(getattr(instance, name), name))


def _require_length(value: Any, name: str) -> None:
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"{name} must be int, got {type(value).__name__}")
    if value < 0:
        raise ValueError(f"{name} cannot be negative, got {value}")


# ==============================================================================
# CIPHER
# ==============================================================================


@dataclass(frozen=True)
class CipherRequest:
    """
    Одна операция CipherOracle.

    Attributes:
        descriptor: Дескриптор шифра из реестра
        direction: Encrypt или Decrypt
        key: Ключ фактической длины (не сверяется с номиналом заранее)
        iv: IV; пустой означает нулевой IV для режимов с IV
        input: Вход без дополнения
    """

    descriptor: CipherDescriptor
    direction: Direction
    key: bytes
    iv: bytes
    input: bytes

    def __post_init__(self) -> None:
        if not isinstance(self.descriptor, CipherDescriptor):
            raise TypeError(
                f"descriptor must be CipherDescriptor, "
                f"got {type(self.descriptor).__name__}"
            )
        if not isinstance(self.direction, Direction):
            raise TypeError(
                f"direction must be Direction, got {type(self.direction).__name__}"
            )
        _freeze(self, "key", "iv", "input")


@dataclass(frozen=True)
class CipherResult:
    """Результат CipherOracle: выход той же длины, что и вход."""

    output: bytes

    def to_dict(self) -> Dict[str, Any]:
        return {"output": encode_hex(self.output)}


# ==============================================================================
# AEAD SEAL
# ==============================================================================


@dataclass(frozen=True)
class SealRequest:
    """
    Запрос seal: nonce не передаётся - его генерирует примитив.

    Attributes:
        tag_length_bytes: Длина тега; None - длина по умолчанию из конфигурации
    """

    descriptor: AEADDescriptor
    key: bytes
    plaintext: bytes
    associated_data: bytes = b""
    tag_length_bytes: Optional[int] = None

    def __post_init__(self) -> None:
        if not isinstance(self.descriptor, AEADDescriptor):
            raise TypeError(
                f"descriptor must be AEADDescriptor, "
                f"got {type(self.descriptor).__name__}"
            )
        _freeze(self, "key", "plaintext", "associated_data")
        if self.tag_length_bytes is not None:
            _require_length(self.tag_length_bytes, "tag_length_bytes")


@dataclass(frozen=True)
class SealResult:
    """Разложение выхода seal: nonce | ciphertext | tag."""

    nonce: bytes
    ciphertext: bytes
    tag: bytes

    def to_dict(self) -> Dict[str, Any]:
        return {
            "nonce": encode_hex(self.nonce),
            "ciphertext": encode_hex(self.ciphertext),
            "tag": encode_hex(self.tag),
        }


# ==============================================================================
# AEAD OPEN
# ==============================================================================


@dataclass(frozen=True)
class OpenRequest:
    """
    Запрос open.

    expected_aad_length переносится для учёта на стороне стенда и не
    проверяется: корректность AAD обеспечивает проверка тега.
    """

    descriptor: AEADDescriptor
    key: bytes
    nonce: bytes
    ciphertext: bytes
    tag: bytes
    associated_data: bytes
    expected_plaintext_length: int
    expected_aad_length: int

    def __post_init__(self) -> None:
        if not isinstance(self.descriptor, AEADDescriptor):
            raise TypeError(
                f"descriptor must be AEADDescriptor, "
                f"got {type(self.descriptor).__name__}"
            )
        _freeze(self, "key", "nonce", "ciphertext", "tag", "associated_data")
        _require_length(self.expected_plaintext_length, "expected_plaintext_length")
        _require_length(self.expected_aad_length, "expected_aad_length")


@dataclass(frozen=True)
class OpenResult:
    """Открытый текст ровно в том виде, как его вернул примитив, и эхо AAD."""

    plaintext: bytes
    associated_data: bytes = b""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "plaintext": encode_hex(self.plaintext),
            "associated_data": encode_hex(self.associated_data),
        }


__all__: list[str] = [
    "BytesLike",
    "CipherRequest",
    "CipherResult",
    "SealRequest",
    "SealResult",
    "OpenRequest",
    "OpenResult",
]
