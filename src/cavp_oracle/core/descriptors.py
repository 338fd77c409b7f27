"""
Дескрипторы шифров и AEAD конструкций.

Определяет:
- CipherFamily, CipherMode, Direction, AeadFamily - перечисления
- CipherDescriptor - immutable описание шифра (семейство, режим, ключ, IV)
- AEADDescriptor - immutable описание AEAD (ключ, nonce, накладные расходы)

Дескрипторы создаются один раз при построении таблиц реестра и
разделяются всеми вызывающими только для чтения.

Example:
    >>> descriptor = CipherDescriptor(
    ...     identifier="aes-128-cbc",
    ...     family=CipherFamily.AES,
    ...     key_length_bits=128,
    ...     iv_length_bytes=16,
    ...     mode=CipherMode.CBC,
    ... )
    >>> descriptor.key_length_bytes
    16
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict


# ==============================================================================
# ENUM: CIPHER FAMILY
# ==============================================================================


class CipherFamily(str, Enum):
    """
    Семейство алгоритма шифрования.

    Наследует str для корректной JSON сериализации.

    Example:
        >>> CipherFamily.DES_EDE3.value
        'DES-EDE3'
        >>> CipherFamily.AES.block_size
        16
    """

    DES = "DES"
    DES_EDE = "DES-EDE"
    DES_EDE3 = "DES-EDE3"
    RC4 = "RC4"
    AES = "AES"

    @property
    def block_size(self) -> int:
        """Размер блока в байтах (1 для потокового RC4)."""
        if self is CipherFamily.AES:
            return 16
        if self is CipherFamily.RC4:
            return 1
        return 8

    def is_legacy(self) -> bool:
        """
        Устаревшее семейство (DES, 2-key 3DES, RC4).

        Такие шифры допустимы в оракуле только для проверки векторов.
        """
        return self in (CipherFamily.DES, CipherFamily.DES_EDE, CipherFamily.RC4)


# ==============================================================================
# ENUM: CIPHER MODE
# ==============================================================================


class CipherMode(str, Enum):
    """
    Режим работы шифра.

    NONE зарезервирован для "режим не задан" и не встречается в таблицах
    реестра.
    """

    ECB = "ECB"
    CBC = "CBC"
    CTR = "CTR"
    OFB = "OFB"
    GCM = "GCM"
    STREAM = "Stream"
    NONE = "None"

    @property
    def takes_iv(self) -> bool:
        """Использует ли режим IV/nonce (всё, кроме ECB и Stream)."""
        return self not in (CipherMode.ECB, CipherMode.STREAM)


# ==============================================================================
# ENUM: DIRECTION
# ==============================================================================


class Direction(str, Enum):
    """Направление однопроходной операции."""

    ENCRYPT = "encrypt"
    DECRYPT = "decrypt"

    @classmethod
    def from_str(cls, value: str) -> Direction:
        """
        Парсинг из строки (case-insensitive).

        Args:
            value: "encrypt"/"decrypt" (также "ENCRYPT", "Decrypt")

        Returns:
            Соответствующий Direction

        Raises:
            ValueError: Некорректное значение
            TypeError: value не строка

        Example:
            >>> Direction.from_str("Encrypt")
            <Direction.ENCRYPT: 'encrypt'>
        """
        if not isinstance(value, str):
            raise TypeError(
                f"direction must be str or Direction, got {type(value).__name__}"
            )
        try:
            return cls(value.lower())
        except ValueError:
            raise ValueError(
                f"Неизвестное направление: {value}. "
                f"Допустимые значения: {[d.value for d in cls]}"
            ) from None


# ==============================================================================
# ENUM: AEAD FAMILY
# ==============================================================================


class AeadFamily(str, Enum):
    """AEAD конструкция, определяющая выбор примитива."""

    AES_GCM = "AES-GCM"
    CHACHA20_POLY1305 = "ChaCha20-Poly1305"
    XCHACHA20_POLY1305 = "XChaCha20-Poly1305"


# ==============================================================================
# DATACLASS: CIPHER DESCRIPTOR
# ==============================================================================


@dataclass(frozen=True)
class CipherDescriptor:
    """
    Immutable описание шифра из закрытого набора реестра.

    Attributes:
        identifier: Текстовый идентификатор ("aes-128-gcm", "rc4", ...)
        family: Семейство алгоритма
        key_length_bits: Номинальная длина ключа в битах
        iv_length_bytes: Длина IV в байтах (0 для ECB и Stream)
        mode: Режим работы

    Invariants:
        iv_length_bytes == 0 тогда и только тогда, когда mode ∈ {ECB, Stream}

    Raises:
        ValueError: Нарушение инварианта или некорректные значения
    """

    identifier: str
    family: CipherFamily
    key_length_bits: int
    iv_length_bytes: int
    mode: CipherMode

    def __post_init__(self) -> None:
        """Валидация инвариантов дескриптора."""
        if not self.identifier or not self.identifier.strip():
            raise ValueError("identifier не может быть пустым")

        if self.key_length_bits <= 0 or self.key_length_bits % 8 != 0:
            raise ValueError(
                f"key_length_bits должен быть положительным и кратным 8, "
                f"получено {self.key_length_bits}"
            )

        if self.iv_length_bytes < 0:
            raise ValueError(
                f"iv_length_bytes не может быть отрицательным, "
                f"получено {self.iv_length_bytes}"
            )

        if (self.iv_length_bytes == 0) != (not self.mode.takes_iv):
            raise ValueError(
                f"{self.identifier}: iv_length_bytes={self.iv_length_bytes} "
                f"несовместим с режимом {self.mode.value}"
            )

        if (self.mode is CipherMode.STREAM) != (self.family is CipherFamily.RC4):
            raise ValueError(
                f"{self.identifier}: режим Stream допустим только для RC4"
            )

    @property
    def key_length_bytes(self) -> int:
        """Номинальная длина ключа в байтах."""
        return self.key_length_bits // 8

    @property
    def block_size(self) -> int:
        """Размер блока семейства в байтах."""
        return self.family.block_size

    @property
    def is_stream(self) -> bool:
        """Потоковый шифр (не блочный)."""
        return self.mode is CipherMode.STREAM

    @property
    def has_variable_key_length(self) -> bool:
        """
        Принимает ли примитив ключ произвольной длины.

        Только RC4: для остальных семейств длина ключа фиксирована
        дескриптором, и иная длина отклоняется на этапе setup.
        """
        return self.family is CipherFamily.RC4

    def to_dict(self) -> Dict[str, Any]:
        """
        Сериализация в словарь.

        Example:
            >>> resolve_cipher("rc4").to_dict()
            {'identifier': 'rc4', 'family': 'RC4', 'key_length_bits': 128, 'iv_length_bytes': 0, 'mode': 'Stream'}
        """
        return {
            "identifier": self.identifier,
            "family": self.family.value,
            "key_length_bits": self.key_length_bits,
            "iv_length_bytes": self.iv_length_bytes,
            "mode": self.mode.value,
        }


# ==============================================================================
# DATACLASS: AEAD DESCRIPTOR
# ==============================================================================


@dataclass(frozen=True)
class AEADDescriptor:
    """
    Immutable описание AEAD конструкции.

    Attributes:
        identifier: Текстовый идентификатор ("aes-128-gcm", ...)
        key_length_bits: Длина ключа в битах
        nonce_length_bytes: Длина nonce, который генерирует примитив
        max_overhead_bytes: Максимальный прирост seal-выхода над plaintext
            (nonce + полный тег)
        family: Конструкция, определяющая примитив

    Example:
        >>> d = resolve_aead("aes-128-gcm")
        >>> d.max_tag_length_bytes
        16
    """

    identifier: str
    key_length_bits: int
    nonce_length_bytes: int
    max_overhead_bytes: int
    family: AeadFamily

    def __post_init__(self) -> None:
        """Валидация параметров AEAD дескриптора."""
        if not self.identifier or not self.identifier.strip():
            raise ValueError("identifier не может быть пустым")

        if self.key_length_bits <= 0 or self.key_length_bits % 8 != 0:
            raise ValueError(
                f"key_length_bits должен быть положительным и кратным 8, "
                f"получено {self.key_length_bits}"
            )

        if self.nonce_length_bytes <= 0:
            raise ValueError(
                f"nonce_length_bytes должен быть > 0, "
                f"получено {self.nonce_length_bytes}"
            )

        if self.max_overhead_bytes <= self.nonce_length_bytes:
            raise ValueError(
                f"max_overhead_bytes ({self.max_overhead_bytes}) должен "
                f"превышать nonce_length_bytes ({self.nonce_length_bytes})"
            )

    @property
    def key_length_bytes(self) -> int:
        """Длина ключа в байтах."""
        return self.key_length_bits // 8

    @property
    def max_tag_length_bytes(self) -> int:
        """Полная длина тега: накладные расходы за вычетом nonce."""
        return self.max_overhead_bytes - self.nonce_length_bytes

    def to_dict(self) -> Dict[str, Any]:
        """Сериализация в словарь."""
        return {
            "identifier": self.identifier,
            "key_length_bits": self.key_length_bits,
            "nonce_length_bytes": self.nonce_length_bytes,
            "max_overhead_bytes": self.max_overhead_bytes,
            "family": self.family.value,
        }


__all__: list[str] = [
    "CipherFamily",
    "CipherMode",
    "Direction",
    "AeadFamily",
    "CipherDescriptor",
    "AEADDescriptor",
]
