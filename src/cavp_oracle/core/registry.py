"""
Реестр шифров и AEAD конструкций оракула.

Закрытая статическая таблица: идентификатор → дескриптор. Таблицы
строятся один раз при импорте модуля и оборачиваются в
MappingProxyType, поэтому API вставки/удаления не существует, а
конкурентное чтение всегда безопасно.

Обеспечивает:
- Точный, регистрозависимый поиск (resolve/resolve_aead)
- Явный отказ AlgorithmNotFoundError для неизвестных идентификаторов
- Query API (list_by_family, list_by_mode) и статистику

Example:
    >>> from src.cavp_oracle.core.registry import CipherRegistry
    >>> registry = CipherRegistry.get_instance()
    >>> registry.resolve("des-ede3-cbc").iv_length_bytes
    8

Поиск регистрозависимый: registry.resolve("AES-128-GCM") поднимает
AlgorithmNotFoundError со списком поддерживаемых идентификаторов.
"""

from __future__ import annotations

import logging
import threading
from collections import Counter
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional

from src.cavp_oracle.core.descriptors import (
    AEADDescriptor,
    AeadFamily,
    CipherDescriptor,
    CipherFamily,
    CipherMode,
)
from src.cavp_oracle.core.exceptions import AlgorithmNotFoundError

logger = logging.getLogger(__name__)


# ==============================================================================
# STATIC TABLES
# ==============================================================================


def _cipher(
    identifier: str,
    family: CipherFamily,
    key_length_bits: int,
    iv_length_bytes: int,
    mode: CipherMode,
) -> CipherDescriptor:
    return CipherDescriptor(
        identifier=identifier,
        family=family,
        key_length_bits=key_length_bits,
        iv_length_bytes=iv_length_bytes,
        mode=mode,
    )


_CIPHER_DESCRIPTORS = (
    # DES family
    _cipher("des-ecb", CipherFamily.DES, 64, 0, CipherMode.ECB),
    _cipher("des-cbc", CipherFamily.DES, 64, 8, CipherMode.CBC),
    _cipher("des-ede", CipherFamily.DES_EDE, 128, 0, CipherMode.ECB),
    _cipher("des-ede-cbc", CipherFamily.DES_EDE, 128, 8, CipherMode.CBC),
    _cipher("des-ede3", CipherFamily.DES_EDE3, 192, 0, CipherMode.ECB),
    _cipher("des-ede3-cbc", CipherFamily.DES_EDE3, 192, 8, CipherMode.CBC),
    # RC4 (nominal 128-bit key, variable length accepted)
    _cipher("rc4", CipherFamily.RC4, 128, 0, CipherMode.STREAM),
    # AES
    _cipher("aes-128-ecb", CipherFamily.AES, 128, 0, CipherMode.ECB),
    _cipher("aes-192-ecb", CipherFamily.AES, 192, 0, CipherMode.ECB),
    _cipher("aes-256-ecb", CipherFamily.AES, 256, 0, CipherMode.ECB),
    _cipher("aes-128-cbc", CipherFamily.AES, 128, 16, CipherMode.CBC),
    _cipher("aes-192-cbc", CipherFamily.AES, 192, 16, CipherMode.CBC),
    _cipher("aes-256-cbc", CipherFamily.AES, 256, 16, CipherMode.CBC),
    _cipher("aes-128-ctr", CipherFamily.AES, 128, 16, CipherMode.CTR),
    _cipher("aes-192-ctr", CipherFamily.AES, 192, 16, CipherMode.CTR),
    _cipher("aes-256-ctr", CipherFamily.AES, 256, 16, CipherMode.CTR),
    _cipher("aes-128-ofb", CipherFamily.AES, 128, 16, CipherMode.OFB),
    _cipher("aes-256-ofb", CipherFamily.AES, 256, 16, CipherMode.OFB),
    _cipher("aes-128-gcm", CipherFamily.AES, 128, 12, CipherMode.GCM),
    _cipher("aes-256-gcm", CipherFamily.AES, 256, 12, CipherMode.GCM),
)

_AEAD_DESCRIPTORS = (
    AEADDescriptor("aes-128-gcm", 128, 12, 12 + 16, AeadFamily.AES_GCM),
    AEADDescriptor("aes-256-gcm", 256, 12, 12 + 16, AeadFamily.AES_GCM),
    AEADDescriptor("chacha20-poly1305", 256, 12, 12 + 16, AeadFamily.CHACHA20_POLY1305),
    AEADDescriptor("xchacha20-poly1305", 256, 24, 24 + 16, AeadFamily.XCHACHA20_POLY1305),
)

CIPHER_TABLE: Mapping[str, CipherDescriptor] = MappingProxyType(
    {d.identifier: d for d in _CIPHER_DESCRIPTORS}
)
AEAD_TABLE: Mapping[str, AEADDescriptor] = MappingProxyType(
    {d.identifier: d for d in _AEAD_DESCRIPTORS}
)


# ==============================================================================
# DATACLASSES
# ==============================================================================


@dataclass(frozen=True)
class RegistryStatistics:
    """
    Статистика закрытого набора алгоритмов.

    Attributes:
        cipher_count: Количество шифров
        aead_count: Количество AEAD конструкций
        by_family: Количество шифров по семействам
        by_mode: Количество шифров по режимам
        legacy_count: Количество шифров устаревших семейств
    """

    cipher_count: int
    aead_count: int
    by_family: Dict[CipherFamily, int]
    by_mode: Dict[CipherMode, int]
    legacy_count: int

    def to_dict(self) -> Dict[str, Any]:
        """Сериализация в словарь."""
        return {
            "cipher_count": self.cipher_count,
            "aead_count": self.aead_count,
            "by_family": {fam.value: count for fam, count in self.by_family.items()},
            "by_mode": {mode.value: count for mode, count in self.by_mode.items()},
            "legacy_count": self.legacy_count,
        }


# ==============================================================================
# MAIN CLASS: CIPHER REGISTRY
# ==============================================================================


class CipherRegistry:
    """
    Read-only реестр шифров и AEAD конструкций.

    Singleton-доступ через get_instance() для единообразия с остальным
    кодом; сами таблицы неизменяемы и общие для всех экземпляров.

    Thread Safety:
        Таблицы неизменяемы после импорта, блокировка нужна только
        для ленивого создания singleton.
    """

    _instance: Optional[CipherRegistry] = None
    _lock: threading.Lock = threading.Lock()

    def __init__(
        self,
        ciphers: Mapping[str, CipherDescriptor] = CIPHER_TABLE,
        aeads: Mapping[str, AEADDescriptor] = AEAD_TABLE,
    ) -> None:
        self._ciphers = ciphers
        self._aeads = aeads
        logger.debug(
            f"CipherRegistry ready: {len(ciphers)} ciphers, {len(aeads)} AEADs"
        )

    @classmethod
    def get_instance(cls) -> CipherRegistry:
        """
        Получить общий экземпляр реестра.

        Example:
            >>> CipherRegistry.get_instance() is CipherRegistry.get_instance()
            True
        """
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = cls()
        return cls._instance

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def resolve(self, identifier: str) -> CipherDescriptor:
        """
        Найти дескриптор шифра по точному идентификатору.

        Args:
            identifier: Идентификатор (регистрозависимый), например "rc4"

        Returns:
            CipherDescriptor из закрытого набора

        Raises:
            AlgorithmNotFoundError: Идентификатор не поддерживается
        """
        descriptor = self._ciphers.get(identifier)
        if descriptor is None:
            logger.debug(f"Unknown cipher identifier: {identifier!r}")
            raise AlgorithmNotFoundError(identifier, self.list_ciphers())
        return descriptor

    def resolve_aead(self, identifier: str) -> AEADDescriptor:
        """
        Найти дескриптор AEAD по точному идентификатору.

        Raises:
            AlgorithmNotFoundError: Идентификатор не поддерживается
        """
        descriptor = self._aeads.get(identifier)
        if descriptor is None:
            logger.debug(f"Unknown AEAD identifier: {identifier!r}")
            raise AlgorithmNotFoundError(identifier, self.list_aeads())
        return descriptor

    def find(self, identifier: str) -> Optional[CipherDescriptor]:
        """Как resolve(), но возвращает None вместо исключения."""
        return self._ciphers.get(identifier)

    def find_aead(self, identifier: str) -> Optional[AEADDescriptor]:
        """Как resolve_aead(), но возвращает None вместо исключения."""
        return self._aeads.get(identifier)

    def is_supported(self, identifier: str) -> bool:
        """
        Поддерживается ли идентификатор как шифр или AEAD.

        Example:
            >>> registry.is_supported("xchacha20-poly1305")
            True
            >>> registry.is_supported("not-an-algorithm")
            False
        """
        return identifier in self._ciphers or identifier in self._aeads

    # ------------------------------------------------------------------
    # Query API
    # ------------------------------------------------------------------

    def list_ciphers(self) -> List[str]:
        """Все идентификаторы шифров (sorted)."""
        return sorted(self._ciphers.keys())

    def list_aeads(self) -> List[str]:
        """Все идентификаторы AEAD (sorted)."""
        return sorted(self._aeads.keys())

    def list_by_family(self, family: CipherFamily) -> List[str]:
        """
        Шифры заданного семейства.

        Example:
            >>> registry.list_by_family(CipherFamily.DES_EDE3)
            ['des-ede3', 'des-ede3-cbc']
        """
        return sorted(
            name for name, d in self._ciphers.items() if d.family is family
        )

    def list_by_mode(self, mode: CipherMode) -> List[str]:
        """Шифры в заданном режиме (sorted)."""
        return sorted(name for name, d in self._ciphers.items() if d.mode is mode)

    def get_statistics(self) -> RegistryStatistics:
        """Подсчёты по закрытому набору."""
        descriptors = list(self._ciphers.values())
        return RegistryStatistics(
            cipher_count=len(descriptors),
            aead_count=len(self._aeads),
            by_family=dict(Counter(d.family for d in descriptors)),
            by_mode=dict(Counter(d.mode for d in descriptors)),
            legacy_count=sum(1 for d in descriptors if d.family.is_legacy()),
        )


# ==============================================================================
# MODULE-LEVEL SHORTCUTS
# ==============================================================================


def resolve_cipher(identifier: str) -> CipherDescriptor:
    """Найти дескриптор шифра через общий реестр."""
    return CipherRegistry.get_instance().resolve(identifier)


def resolve_aead(identifier: str) -> AEADDescriptor:
    """Найти AEAD дескриптор через общий реестр."""
    return CipherRegistry.get_instance().resolve_aead(identifier)


__all__: list[str] = [
    "CipherRegistry",
    "RegistryStatistics",
    "CIPHER_TABLE",
    "AEAD_TABLE",
    "resolve_cipher",
    "resolve_aead",
]
